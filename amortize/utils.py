"""Utility functions for the amortization calculator.

This module provides helpers for parsing user input into Python data types,
rounding monetary values and handling dates, including adding months and
normalizing year-month strings to ``datetime.date`` instances.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
import calendar
from typing import Union

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

TWO_PLACES = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def round_money(value: Decimal) -> Decimal:
    """Round a monetary value to cents, halves away from zero."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def to_decimal(value: Number) -> Decimal:
    """Convert ``value`` into a ``Decimal``.

    Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value!r}")
    if isinstance(value, float):
        value = repr(value)
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid numeric value: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value!r}")
    return result


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails.
    """
    return to_decimal(value.replace(",", ""))


def parse_year_month(ym: str) -> date:
    """Parse a YYYY-MM string into a ``date`` object (first day of month).

    Parameters
    ----------
    ym: str
        A string in the form ``"YYYY-MM"``. A day component, if present,
        is kept.

    Raises
    ------
    ValueError
        If the string is not a valid year-month.
    """
    parts = ym.strip().split("-")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid year-month string: {ym}")
    try:
        year, month = int(parts[0]), int(parts[1])
        day = int(parts[2]) if len(parts) == 3 else 1
        return date(year, month, day)
    except ValueError as exc:
        raise ValueError(f"Invalid year-month string: {ym}") from exc


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_index(start: date, dt: date) -> int:
    """Return the 1-based payment number of ``dt`` in a schedule starting at ``start``."""
    return (dt.year - start.year) * 12 + (dt.month - start.month) + 1
