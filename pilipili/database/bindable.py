"""Conversion of Python values into parameters accepted by SQLite."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable

_I64_MAX = (1 << 63) - 1
_I64_MIN = -(1 << 63)

SqlValue = str | int | float


def to_sql_value(value: Any) -> SqlValue:
    """Convert ``value`` into a SQLite parameter.

    Booleans become 0 or 1, integers above the signed 64-bit range are
    clamped to its maximum, and dates are written as ``YYYY-MM-DD``.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        if value > _I64_MAX:
            return _I64_MAX
        if value < _I64_MIN:
            raise OverflowError(f"integer below the 64-bit range: {value}")
        return value
    if isinstance(value, (float, str)):
        return value
    if isinstance(value, datetime):
        raise TypeError("datetime values cannot be bound; pass a date")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    raise TypeError(f"unsupported value type: {type(value).__name__}")


def bind_values(values: Iterable[tuple[str, Any]]) -> tuple[SqlValue, ...]:
    """Convert ``(column, value)`` pairs into positional parameters, in order."""
    return tuple(to_sql_value(value) for _, value in values)