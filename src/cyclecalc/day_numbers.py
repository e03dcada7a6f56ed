"""Conversion between calendar dates and integer day-numbers.

The engine never does calendar math: every date is a Julian Day Number so
that "add 28 days" is plain integer addition.  This module is the single
place where ``datetime.date`` values cross into day-number space.
"""

from __future__ import annotations

from datetime import date

# date(1, 1, 1).toordinal() == 1 and its Julian Day Number is 1721426
JDN_OFFSET = 1721425


def to_day_number(value: date) -> int:
    """Return the Julian Day Number for *value*."""
    return value.toordinal() + JDN_OFFSET


def from_day_number(day: int) -> date:
    """Return the calendar date for the Julian Day Number *day*."""
    return date.fromordinal(day - JDN_OFFSET)


def today_day_number() -> int:
    return to_day_number(date.today())


def parse_day_number(value: str) -> int:
    """Parse an ISO ``YYYY-MM-DD`` string into a day-number."""
    return to_day_number(date.fromisoformat(value))


def format_day_number(day: int) -> str:
    return from_day_number(day).isoformat()
