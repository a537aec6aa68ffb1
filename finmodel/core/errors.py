"""Exceptions raised by the model engine."""

from __future__ import annotations

from typing import Optional


class FinModelError(Exception):
    """Base class for every error raised by the engine."""


class UnknownNameError(FinModelError, KeyError):
    """Raised when a name is neither a variable nor a parameter."""

    def __init__(self, name: str, namespace: str = "variable or parameter") -> None:
        self.name = name
        self.namespace = namespace
        super().__init__(f"'{name}' is not a known {namespace}")

    def __str__(self) -> str:
        # KeyError quotes its message otherwise
        return self.args[0]


class DuplicateNameError(FinModelError, ValueError):
    """Raised when a name would live in both the variable and parameter namespaces."""

    def __init__(self, name: str, existing: str) -> None:
        self.name = name
        self.existing = existing
        super().__init__(f"'{name}' is already registered as a {existing}")


class DimensionError(FinModelError, ValueError):
    """Raised when a parameter series does not span the model."""

    def __init__(self, name: str, length: int, expected: int) -> None:
        self.name = name
        self.length = length
        self.expected = expected
        super().__init__(
            f"parameter '{name}' has {length} values; expected 1 or {expected}"
        )


class PeriodOutOfRangeError(FinModelError, IndexError):
    """Raised when a resolved period falls outside 1..n_periods+1."""

    def __init__(self, name: str, period: int, last_period: int) -> None:
        self.name = name
        self.period = period
        self.last_period = last_period
        super().__init__(
            f"period {period} of '{name}' is outside the model span 1..{last_period}"
        )


class FormulaSyntaxError(FinModelError, ValueError):
    """Raised when a formula does not follow the reference/arithmetic grammar."""

    def __init__(self, formula: str, message: str, position: Optional[int] = None) -> None:
        self.formula = formula
        self.message = message
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"{message}{where} in formula '{formula}'")


class CircularDependencyError(FinModelError):
    """Raised when rules read each other within the same period."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__("circular same-period dependency: " + " -> ".join(cycle))


class RuleEvaluationError(FinModelError):
    """Raised when a rule cannot be evaluated for a period.

    Carries the rule target, the period being computed and the formula text so
    the failing cell can be located without reading a parser traceback.
    """

    def __init__(self, target: str, period: int, formula: str, cause: Exception) -> None:
        self.target = target
        self.period = period
        self.formula = formula
        self.cause = cause
        super().__init__(
            f"rule for '{target}' failed at period {period} "
            f"(formula '{formula}'): {cause}"
        )


class NonFiniteValueError(FinModelError, ArithmeticError):
    """Raised when a value is infinite or NaN."""

    def __init__(self, name: str, value: float) -> None:
        self.name = name
        self.value = value
        super().__init__(f"value for '{name}' is not finite: {value!r}")
