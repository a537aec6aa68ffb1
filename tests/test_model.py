from __future__ import annotations

import pytest

from finmodel import (
    Account,
    DimensionError,
    DuplicateNameError,
    FinModelError,
    FormulaSyntaxError,
    Model,
    NonFiniteValueError,
    UnknownNameError,
)


@pytest.mark.parametrize("n_periods", [0, -3, 2.5, True])
def test_model_needs_positive_period_count(n_periods):
    with pytest.raises(FinModelError):
        Model(n_periods)


@pytest.mark.parametrize("n_periods", [1, 12, 40])
def test_added_variables_span_every_period(n_periods):
    model = Model(n_periods)
    model.add_variables(["a", ":b"])

    assert isinstance(model["a"], Account)
    assert len(model["a"]) == n_periods + 1
    assert len(model[":b"]) == n_periods + 1
    assert list(model.periods) == list(range(1, n_periods + 2))


def test_re_adding_a_variable_wipes_it():
    model = Model(3)
    model.add_variables(["a"])
    model.set_initials({"a": 5})

    model.add_variables(["a"], unit="EUR")

    assert model["a", 1] is None
    assert model["a"].unit == "EUR"


def test_initials_land_in_period_one_only():
    model = Model(40)
    model.add_variables(["a", "b"])
    model.set_initials([("a", 10), (":b", 30)])

    assert model["a"][1] == 10
    assert model["b", 1] == 30
    assert model["a", 2] is None


def test_initials_require_known_variable():
    model = Model(3)
    model.add_variables(["a"])
    model.set_parameters({"c": 5})

    with pytest.raises(UnknownNameError):
        model.set_initials({"missing": 1})
    with pytest.raises(KeyError):
        model.set_initials({"c": 1})


def test_parameters_are_readable_through_unified_lookup():
    model = Model(40)
    model.set_parameters({"c": 5, "e": [6] * 41})

    assert model["c"] == 5
    assert model["e"] == [6] * 41
    assert model["e", 41] == 6
    assert model["c", 17] == 5
    assert "c" in model and ":e" in model and "zzz" not in model


def test_vector_parameter_length_is_checked():
    model = Model(40)

    with pytest.raises(DimensionError):
        model.set_parameters({"e": [6] * 40})


def test_set_parameters_replaces_previous_set():
    model = Model(3)
    model.set_parameters({"c": 5, "d": 1})
    model.set_parameters({"d": 2})

    assert "c" not in model
    assert model["d"] == 2

    model.set_parameters({})
    assert model.parameters == {}


def test_names_cannot_be_both_variable_and_parameter():
    model = Model(3)
    model.add_variables(["a"])
    model.set_parameters({"p": 1})

    with pytest.raises(DuplicateNameError):
        model.set_parameters({"a": 1})
    with pytest.raises(DuplicateNameError):
        model.add_variables(["p"])


def test_unknown_name_lookup_fails():
    model = Model(3)

    with pytest.raises(UnknownNameError, match="'nope' is not a known variable or parameter"):
        model["nope"]
    with pytest.raises(KeyError):
        model["nope", 1]


@pytest.mark.parametrize("name", ["", "1a", "a-b", "::a"])
def test_invalid_names_are_rejected(name):
    model = Model(3)

    with pytest.raises(FinModelError):
        model.add_variables([name])


def test_set_rules_keeps_declared_order(counter_model):
    assert [rule.target for rule in counter_model.rules] == ["a", "b"]
    assert counter_model.rules[1].formula == ":a[+0] * 3"


def test_set_rules_replaces_previous_rules(counter_model):
    counter_model.set_rules([("b", ":a[-1]")])
    assert [rule.target for rule in counter_model.rules] == ["b"]

    counter_model.set_rules([])
    assert counter_model.rules == []


def test_set_rules_validates_targets_and_references():
    model = Model(3)
    model.add_variables(["a"])
    model.set_parameters({"p": 2})

    with pytest.raises(UnknownNameError):
        model.set_rules([("missing", ":a[-1]")])
    with pytest.raises(UnknownNameError):
        model.set_rules([("p", ":a[-1]")])
    with pytest.raises(UnknownNameError):
        model.set_rules([("a", ":a[-1] + :q")])
    with pytest.raises(FormulaSyntaxError):
        model.set_rules([("a", ":a[-1] +* 2")])
    with pytest.raises(ValueError):
        model.set_rules([("a", ":a[-1]")], order="alphabetical")


def test_failed_rule_registration_keeps_previous_rules(counter_model):
    with pytest.raises(FormulaSyntaxError):
        counter_model.set_rules([("a", ":a[-1] + 2"), ("b", "oops")])

    assert [rule.target for rule in counter_model.rules] == ["a", "b"]


def test_repr_summarises_model(counter_model):
    assert repr(counter_model) == "Model(n_periods=40, variables=2, parameters=0, rules=2)"
    assert repr(counter_model["a"]) == "Account('a', unit='unit', 1/41 set)"


def test_indexed_lookup_needs_integer_period():
    model = Model(3)
    model.add_variables(["a"])
    model.set_initials({"a": 1})
    model.set_parameters({"c": 5})

    assert model["a", 1] == 1
    for key in (("a", 1.0), ("c", 2.0), ("a", "1")):
        with pytest.raises(FinModelError, match="must be an integer"):
            model[key]


def test_initials_and_parameters_must_be_finite():
    model = Model(3)
    model.add_variables(["a"])

    with pytest.raises(NonFiniteValueError):
        model.set_initials({"a": float("inf")})
    with pytest.raises(NonFiniteValueError):
        model.set_parameters({"c": [1, 2, float("nan"), 4]})

    assert model["a", 1] is None
    assert model.parameters == {}


def test_parameter_table_expands_scalars():
    model = Model(3)
    model.set_parameters({"price": 8, "volume": [1, 2, 3, 4]})

    assert model.parameter_table() == {"price": [8, 8, 8, 8], "volume": [1, 2, 3, 4]}
