from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from finmodel.core.errors import (
    DimensionError,
    FinModelError,
    NonFiniteValueError,
    PeriodOutOfRangeError,
)

Value = Optional[Union[int, float]]


def check_number(name: str, value: object) -> Union[int, float]:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise FinModelError(f"value for '{name}' must be a real number, got {value!r}")
    if not math.isfinite(value):
        raise NonFiniteValueError(name, float(value))
    return value  # type: ignore[return-value]


def check_period(name: str, period: object, last_period: int) -> int:
    if isinstance(period, bool) or not isinstance(period, numbers.Integral):
        raise FinModelError(f"period for '{name}' must be an integer, got {period!r}")
    if not 1 <= period <= last_period:
        raise PeriodOutOfRangeError(name, int(period), last_period)
    return int(period)


@dataclass(eq=False)
class Account:
    """One line item across all periods.

    Slots are addressed by period: period 1 holds the initial value, periods
    2..n_periods+1 are filled in by the rules. ``None`` marks an unset slot.
    """

    name: str
    length: int
    unit: str = "unit"
    slots: List[Value] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.slots = [None] * self.length

    def __len__(self) -> int:
        return self.length

    def __iter__(self) -> Iterator[Value]:
        return iter(self.slots)

    def __getitem__(self, period: int) -> Value:
        return self.slots[self._index(period)]

    def __setitem__(self, period: int, value: Value) -> None:
        if value is not None:
            check_number(self.name, value)
        self.slots[self._index(period)] = value

    def __repr__(self) -> str:
        filled = sum(slot is not None for slot in self.slots)
        return f"Account({self.name!r}, unit={self.unit!r}, {filled}/{self.length} set)"

    @property
    def values(self) -> List[Value]:
        return list(self.slots)

    def clear(self, first_period: int = 1) -> None:
        for period in range(first_period, self.length + 1):
            self.slots[period - 1] = None

    def _index(self, period: int) -> int:
        return check_period(self.name, period, self.length) - 1


@dataclass(frozen=True)
class Parameter:
    """An exogenous input: a constant, or one value per period."""

    name: str
    value: Union[int, float, Tuple[Union[int, float], ...]]
    last_period: int

    @classmethod
    def build(cls, name: str, raw: object, last_period: int) -> "Parameter":
        if isinstance(raw, (str, bytes)):
            raise FinModelError(f"parameter '{name}' must be a number or a sequence of numbers")
        if isinstance(raw, numbers.Real):
            return cls(name=name, value=check_number(name, raw), last_period=last_period)

        try:
            series = tuple(check_number(name, item) for item in raw)  # type: ignore[union-attr]
        except TypeError as exc:
            raise FinModelError(
                f"parameter '{name}' must be a number or a sequence of numbers"
            ) from exc

        if len(series) == 1:
            return cls(name=name, value=series[0], last_period=last_period)
        if len(series) != last_period:
            raise DimensionError(name, len(series), last_period)
        return cls(name=name, value=series, last_period=last_period)

    @property
    def is_series(self) -> bool:
        return isinstance(self.value, tuple)

    @property
    def raw(self) -> Union[int, float, List[Union[int, float]]]:
        return list(self.value) if isinstance(self.value, tuple) else self.value

    def at(self, period: int) -> Union[int, float]:
        index = check_period(self.name, period, self.last_period) - 1
        if isinstance(self.value, tuple):
            return self.value[index]
        return self.value


def as_series(parameter: Parameter) -> Sequence[Union[int, float]]:
    """Expand a parameter to one value per period."""
    if isinstance(parameter.value, tuple):
        return parameter.value
    return (parameter.value,) * parameter.last_period
