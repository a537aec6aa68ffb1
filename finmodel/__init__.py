"""Discrete-time financial model engine."""

from finmodel.core.errors import (
    CircularDependencyError,
    DimensionError,
    DuplicateNameError,
    FinModelError,
    FormulaSyntaxError,
    NonFiniteValueError,
    PeriodOutOfRangeError,
    RuleEvaluationError,
    UnknownNameError,
)
from finmodel.core.model import Model
from finmodel.domain.account import Account, Parameter

__version__ = "0.1.0"

__all__ = [
    "Account",
    "CircularDependencyError",
    "DimensionError",
    "DuplicateNameError",
    "FinModelError",
    "FormulaSyntaxError",
    "Model",
    "NonFiniteValueError",
    "Parameter",
    "PeriodOutOfRangeError",
    "RuleEvaluationError",
    "UnknownNameError",
]
