"""The model: accounts, parameters and rules under one namespace."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Literal, Mapping, Tuple, Union

import networkx as nx

from finmodel.core.dependencies import (
    build_dependency_graph,
    check_declared_order,
    dependency_order,
)
from finmodel.core.errors import (
    DuplicateNameError,
    FinModelError,
    RuleEvaluationError,
    UnknownNameError,
)
from finmodel.core.formula import RefKind, Reference, Rule, Value, compile_rule
from finmodel.domain.account import Account, Parameter, as_series, check_number

logger = logging.getLogger(__name__)

Pairs = Union[Mapping[str, object], Iterable[Tuple[str, object]]]


def _pairs(items: Pairs) -> List[Tuple[str, object]]:
    if isinstance(items, Mapping):
        return list(items.items())
    return [tuple(item) for item in items]  # type: ignore[misc]


def normalise_name(name: str) -> str:
    """Accept ``"cash"`` or ``":cash"``."""
    if not isinstance(name, str):
        raise FinModelError(f"names must be strings, got {name!r}")
    bare = name[1:] if name.startswith(":") else name
    if not bare.isidentifier():
        raise FinModelError(f"'{name}' is not a valid name")
    return bare


class Model:
    """A discrete-time financial model.

    Period 1 holds initial values; periods 2..n_periods+1 are computed by the
    rules, in the order they were registered, one period at a time.

        model = Model(40)
        model.add_variables(["a", "b"])
        model.set_initials({"a": 10})
        model.set_rules([("a", ":a[-1] + 1"), ("b", ":a[+0] * 3")])
        model.calculate()
        model["a", 41]  # 50
    """

    def __init__(self, n_periods: int) -> None:
        if isinstance(n_periods, bool) or not isinstance(n_periods, int) or n_periods < 1:
            raise FinModelError(f"n_periods must be a positive integer, got {n_periods!r}")
        self.n_periods = n_periods
        self.variables: Dict[str, Account] = {}
        self.parameters: Dict[str, Parameter] = {}
        self.rules: List[Rule] = []

    @property
    def last_period(self) -> int:
        return self.n_periods + 1

    @property
    def periods(self) -> range:
        return range(1, self.last_period + 1)

    def __repr__(self) -> str:
        return (
            f"Model(n_periods={self.n_periods}, variables={len(self.variables)}, "
            f"parameters={len(self.parameters)}, rules={len(self.rules)})"
        )

    # Registration -----------------------------------------------------------

    def add_variables(self, names: Iterable[str], unit: str = "unit") -> None:
        """Create an empty account per name, replacing any existing one."""
        for raw in names:
            name = normalise_name(raw)
            if name in self.parameters:
                raise DuplicateNameError(name, "parameter")
            self.variables[name] = Account(name=name, length=self.last_period, unit=unit)
        logger.debug("Variables registered: %s", list(self.variables))

    def set_initials(self, pairs: Pairs) -> None:
        """Write period-1 values."""
        for raw, value in _pairs(pairs):
            self.account(raw)[1] = check_number(raw, value)  # type: ignore[index]

    def set_parameters(self, pairs: Pairs) -> None:
        """Replace the whole parameter set."""
        parameters: Dict[str, Parameter] = {}
        for raw, value in _pairs(pairs):
            name = normalise_name(raw)
            if name in self.variables:
                raise DuplicateNameError(name, "variable")
            parameters[name] = Parameter.build(name, value, self.last_period)
        self.parameters = parameters
        logger.debug("Parameters registered: %s", list(parameters))

    def set_rules(
        self,
        pairs: Pairs,
        order: Literal["declared", "dependency"] = "declared",
    ) -> None:
        """Replace the whole rule list.

        Formulas are parsed and their references bound here, so a misspelt
        name or a malformed formula fails before anything is computed. With
        ``order="dependency"`` the rules are sorted so that same-period inputs
        are computed first; otherwise the given order is kept as is.
        """
        if order not in ("declared", "dependency"):
            raise ValueError(f"Invalid `order` argument: {order}")

        rules: List[Rule] = []
        for raw, formula in _pairs(pairs):
            target = normalise_name(raw)
            if target not in self.variables:
                raise UnknownNameError(target, "variable")
            if not isinstance(formula, str):
                raise FinModelError(f"formula for '{target}' must be a string")
            rules.append(compile_rule(target, formula, self._classify))

        if order == "dependency":
            rules = dependency_order(rules)
        self.rules = rules
        logger.debug("Rules registered: %s", [rule.target for rule in rules])

    def _classify(self, name: str) -> RefKind:
        if name in self.variables:
            return RefKind.VARIABLE
        if name in self.parameters:
            return RefKind.PARAMETER
        raise UnknownNameError(name)

    # Lookup -----------------------------------------------------------------

    def account(self, name: str) -> Account:
        bare = normalise_name(name)
        try:
            return self.variables[bare]
        except KeyError:
            raise UnknownNameError(bare, "variable") from None

    def parameter(self, name: str) -> Parameter:
        bare = normalise_name(name)
        try:
            return self.parameters[bare]
        except KeyError:
            raise UnknownNameError(bare, "parameter") from None

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        bare = name[1:] if name.startswith(":") else name
        return bare in self.variables or bare in self.parameters

    def __getitem__(self, key: Union[str, Tuple[str, int]]):
        """``model[name]`` returns an Account or a raw parameter value;
        ``model[name, period]`` returns a single value."""
        if isinstance(key, tuple):
            name, period = key
            return self.value(name, period)

        name = normalise_name(key)
        if name in self.variables:
            return self.variables[name]
        if name in self.parameters:
            return self.parameters[name].raw
        raise UnknownNameError(name)

    def value(self, name: str, period: int) -> Value:
        bare = normalise_name(name)
        if bare in self.variables:
            return self.variables[bare][period]
        if bare in self.parameters:
            return self.parameters[bare].at(period)
        raise UnknownNameError(bare)

    def _lookup(self, ref: Reference, period: int) -> Value:
        if ref.kind is RefKind.VARIABLE:
            return self.account(ref.name)[period]
        return self.parameter(ref.name).at(period)

    def to_table(self) -> Dict[str, List[Value]]:
        return {name: account.values for name, account in self.variables.items()}

    def parameter_table(self) -> Dict[str, List[Union[int, float]]]:
        """Parameters expanded to one value per period."""
        return {name: list(as_series(parameter)) for name, parameter in self.parameters.items()}

    # Dependencies -----------------------------------------------------------

    def dependency_graph(self) -> nx.DiGraph:
        return build_dependency_graph(self.rules)

    def check_order(self) -> List[str]:
        return check_declared_order(self.rules)

    # Evaluation -------------------------------------------------------------

    def calculate(
        self, errors: Literal["raise", "skip"] = "raise"
    ) -> List[RuleEvaluationError]:
        """Compute periods 2..n_periods+1.

        Every rule target is reset to unset from period 2 before the pass, so
        repeated runs with unchanged inputs give identical results and a cell
        whose rule failed never holds a stale value.

        errors : 'raise' (default) stops at the first failing rule and raises
                 a RuleEvaluationError naming the target, period and formula;
                 'skip' leaves the failing cell unset, carries on, and returns
                 the errors collected.
        """
        if errors not in ("raise", "skip"):
            raise ValueError(f"Invalid `errors` argument: {errors}")

        for target in {rule.target for rule in self.rules}:
            self.account(target).clear(first_period=2)

        failures: List[RuleEvaluationError] = []
        for t in range(2, self.last_period + 1):
            for rule in self.rules:
                try:
                    result = rule.evaluate(self._lookup, t)
                    # non-finite results are rejected by the account
                    self.variables[rule.target][t] = result
                except (FinModelError, ArithmeticError, RecursionError) as exc:
                    failure = RuleEvaluationError(rule.target, t, rule.formula, exc)
                    if errors == "raise":
                        logger.error("Calculation aborted: %s", failure)
                        raise failure from exc
                    logger.warning("Skipped cell: %s", failure)
                    failures.append(failure)

        logger.info(
            "Calculated %d periods x %d rules (%d failures)",
            self.n_periods,
            len(self.rules),
            len(failures),
        )
        return failures
