"""Pure calendar calculations: no UI dependencies."""

from __future__ import annotations

import calendar
import itertools
from dataclasses import dataclass, field
from datetime import MAXYEAR, MINYEAR, date
from typing import Union

from date_utils import as_day, decompose, first_of_month, next_month

MONDAY = calendar.MONDAY
SUNDAY = calendar.SUNDAY

DAY_ABBR = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

_filler_tokens = itertools.count()


class InvalidCalendarComponent(ValueError):
    """Raised for a month, year or weekday the calendar cannot resolve."""


def _check_year_month(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise InvalidCalendarComponent(f"month must be in 1..12, got {month}")
    if not MINYEAR <= year <= MAXYEAR:
        raise InvalidCalendarComponent(
            f"year must be in {MINYEAR}..{MAXYEAR}, got {year}")


@dataclass(frozen=True)
class CalendarParams:
    """Gregorian calendar with a configurable first day of the week.

    Weekdays use Python's numbering throughout: 0 is Monday, 6 is Sunday.
    """

    first_weekday: int = MONDAY

    def __post_init__(self) -> None:
        if not 0 <= self.first_weekday <= 6:
            raise InvalidCalendarComponent(
                f"first_weekday must be in 0..6, got {self.first_weekday}")

    def days_in_month(self, year: int, month: int) -> int:
        _check_year_month(year, month)
        return calendar.monthrange(year, month)[1]

    def weekday_of_first_day_of_month(self, year: int, month: int) -> int:
        _check_year_month(year, month)
        return calendar.weekday(year, month, 1)

    def leading_fillers(self, year: int, month: int) -> int:
        """Blank cells before day 1; always in 0..6."""
        return (self.weekday_of_first_day_of_month(year, month) - self.first_weekday) % 7

    def weekday_abbrs(self) -> list[str]:
        """Weekday header labels starting at ``first_weekday``."""
        return DAY_ABBR[self.first_weekday:] + DAY_ABBR[:self.first_weekday]

    def is_weekend_column(self, column: int) -> bool:
        return (self.first_weekday + column) % 7 >= 5


@dataclass(frozen=True)
class Filler:
    """Blank grid position. All fillers are equal but each has its own key."""

    token: int = field(default_factory=lambda: next(_filler_tokens),
                       compare=False, repr=False)

    @property
    def key(self) -> tuple:
        return ("filler", self.token)


@dataclass(frozen=True)
class DatedCell:
    date: date

    @property
    def key(self) -> tuple:
        return tuple(decompose(self.date))


DayCell = Union[Filler, DatedCell]


@dataclass(frozen=True)
class MonthGrid:
    year: int
    month: int
    cells: list[DayCell]

    @property
    def key(self) -> str:
        return f"{self.year}-{self.month}"


def build_month_grid(year: int, month: int,
                     params: CalendarParams | None = None) -> list[DayCell]:
    """Return the day cells of a month, left-to-right, top-to-bottom.

    The length is always a multiple of 7; weeks start on
    ``params.first_weekday`` (Monday by default).
    """
    params = params or CalendarParams()
    last_day = params.days_in_month(year, month)

    cells: list[DayCell] = [Filler() for _ in range(params.leading_fillers(year, month))]
    cells.extend(DatedCell(date(year, month, day)) for day in range(1, last_day + 1))

    remainder = len(cells) % 7
    if remainder:
        cells.extend(Filler() for _ in range(7 - remainder))
    return cells


def grid_rows(cells: list[DayCell]) -> list[list[DayCell]]:
    """Split a month grid into 7-cell weeks."""
    return [cells[i:i + 7] for i in range(0, len(cells), 7)]


def iso_week_numbers(cells: list[DayCell]) -> list[str]:
    """Return the ISO week number of each grid row.

    Rows without a dated cell get an empty string.
    """
    weeks: list[str] = []
    for row in grid_rows(cells):
        dated = next((c for c in row if isinstance(c, DatedCell)), None)
        if dated is None:
            weeks.append("")
        else:
            weeks.append(str(dated.date.isocalendar()[1]))
    return weeks


def months_between(first, last) -> list[tuple[int, int]]:
    """Return every (year, month) from the month of ``first`` through ``last``.

    Empty when ``last`` is before the first day of the month of ``first``.
    """
    first_day = first_of_month(first)
    last_day = as_day(last)
    months: list[tuple[int, int]] = []
    y, m = first_day.year, first_day.month
    while date(y, m, 1) <= last_day:
        months.append((y, m))
        if (y, m) == (MAXYEAR, 12):
            break
        y, m = next_month(y, m)
    return months


def build_range_grids(first, last,
                      params: CalendarParams | None = None) -> list[MonthGrid]:
    """Build one grid per month touched by the inclusive span first..last."""
    return [
        MonthGrid(y, m, build_month_grid(y, m, params))
        for y, m in months_between(first, last)
    ]
