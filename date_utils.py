"""Day-granularity date helpers shared by the grid and selection code."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import NamedTuple


class DecomposedDate(NamedTuple):
    year: int
    month: int
    day: int


def as_day(value: date | datetime) -> date:
    """Truncate a date or datetime to its calendar day.

    No timezone conversion happens: an aware datetime keeps its own wall-clock
    date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"expected date or datetime, got {type(value).__name__}")


def decompose(value: date | datetime) -> DecomposedDate:
    d = as_day(value)
    return DecomposedDate(d.year, d.month, d.day)


def start_of_day(value: date | datetime) -> datetime:
    return datetime.combine(as_day(value), time.min)


def end_of_day(value: date | datetime) -> datetime:
    """Return 23:59:59 of the given day, so the whole final day is included."""
    return datetime.combine(as_day(value), time(23, 59, 59))


def first_of_month(value: date | datetime) -> date:
    return as_day(value).replace(day=1)


def day_of_year(value: date | datetime) -> int:
    """Return the 1-based day-of-year for the given date."""
    return as_day(value).timetuple().tm_yday


def add_months(year: int, month: int, delta: int) -> tuple[int, int]:
    """Return (year, month) shifted by ``delta`` months."""
    total = (year * 12 + month - 1) + delta
    return total // 12, total % 12 + 1


def prev_month(year: int, month: int) -> tuple[int, int]:
    """Return (year, month) for one month earlier."""
    return add_months(year, month, -1)


def next_month(year: int, month: int) -> tuple[int, int]:
    """Return (year, month) for one month later."""
    return add_months(year, month, 1)
