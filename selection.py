"""Date selection state machine and the queries the renderer asks of it.

A selection is an immutable value. :func:`apply_tap` takes the current value
and a tapped day and returns the next one; it never mutates its input and never
fails for a well-formed tap. The shape of the value depends on the mode:

* ``SINGLE``: :data:`EMPTY` or :class:`One`.
* ``RANGE``: :data:`EMPTY`, :class:`One` (the anchor) or :class:`Span`.
* ``MULTI``: :data:`EMPTY` or :class:`Many`.

A value whose shape does not belong to the mode is read as empty, so switching
modes resets the selection.
"""

from __future__ import annotations

import enum
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Union

from date_utils import as_day, end_of_day, start_of_day


class SelectionMode(enum.Enum):
    SINGLE = "single"
    RANGE = "range"
    MULTI = "multi"


@dataclass(frozen=True)
class AllowedRange:
    """Inclusive span of selectable days.

    ``first > last`` is not rejected; such a range contains no day.
    """

    first: date
    last: date

    @classmethod
    def from_bounds(cls, lower: date | datetime, upper: date | datetime) -> "AllowedRange":
        return cls(as_day(lower), as_day(upper))

    @property
    def lower(self) -> datetime:
        return start_of_day(self.first)

    @property
    def upper(self) -> datetime:
        return end_of_day(self.last)

    def __contains__(self, value: object) -> bool:
        if not isinstance(value, date):
            return False
        return self.first <= as_day(value) <= self.last


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class One:
    date: date


@dataclass(frozen=True)
class Span:
    """Completed range; ``lower == upper`` is a single-day range."""

    lower: date
    upper: date

    def __post_init__(self) -> None:
        if self.lower > self.upper:
            raise ValueError(f"span bounds out of order: {self.lower} > {self.upper}")

    @classmethod
    def between(cls, a: date, b: date) -> "Span":
        return cls(min(a, b), max(a, b))


@dataclass(frozen=True)
class Many:
    """Picked dates in tap order; repeats only appear when repetition is allowed."""

    dates: tuple[date, ...]
    _index: Counter = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_index", Counter(self.dates))

    def __contains__(self, value: object) -> bool:
        return self._index[value] > 0

    def count(self, value: date) -> int:
        return self._index[value]

    def distinct(self) -> list[date]:
        return sorted(self._index)

    def appended(self, value: date) -> "Many":
        return Many(self.dates + (value,))

    def without_last(self, value: date) -> Selection:
        """Drop the most recent occurrence of ``value``."""
        pos = len(self.dates) - 1 - self.dates[::-1].index(value)
        rest = self.dates[:pos] + self.dates[pos + 1:]
        return Many(rest) if rest else EMPTY


Selection = Union[Empty, One, Span, Many]

EMPTY = Empty()

_SHAPES = {
    SelectionMode.SINGLE: (Empty, One),
    SelectionMode.RANGE: (Empty, One, Span),
    SelectionMode.MULTI: (Empty, Many),
}


def reset() -> Selection:
    return EMPTY


def for_mode(selection: Selection, mode: SelectionMode) -> Selection:
    """Return ``selection`` if its shape fits ``mode``, otherwise ``EMPTY``."""
    if isinstance(selection, _SHAPES[mode]):
        return selection
    return EMPTY


# ------------------------------------------------------------------
# Transition
# ------------------------------------------------------------------
def apply_tap(current: Selection, mode: SelectionMode, allowed: AllowedRange,
              tapped: date | datetime, allows_repetition: bool = False) -> Selection:
    """Return the selection that results from tapping ``tapped``.

    Taps outside ``allowed`` return ``current`` unchanged.
    """
    day = as_day(tapped)
    if day not in allowed:
        return current

    state = for_mode(current, mode)

    if mode is SelectionMode.SINGLE:
        return One(day)

    if mode is SelectionMode.RANGE:
        if isinstance(state, One):
            # Re-tapping the anchor closes a single-day range.
            return Span.between(state.date, day)
        # Empty starts a gesture; a completed span always re-anchors.
        return One(day)

    if allows_repetition:
        if isinstance(state, Many):
            return state.appended(day)
        return Many((day,))
    if isinstance(state, Many):
        if day in state:
            return state.without_last(day)
        return state.appended(day)
    return Many((day,))


# ------------------------------------------------------------------
# Queries
# ------------------------------------------------------------------
def is_selected(selection: Selection, mode: SelectionMode, value: date | datetime) -> bool:
    return occurrences(selection, mode, value) > 0


def occurrences(selection: Selection, mode: SelectionMode, value: date | datetime) -> int:
    """How many times ``value`` was picked (0 or 1 outside repeating MULTI)."""
    day = as_day(value)
    state = for_mode(selection, mode)
    if isinstance(state, One):
        return int(state.date == day)
    if isinstance(state, Span):
        return int(day in (state.lower, state.upper))
    if isinstance(state, Many):
        return state.count(day)
    return 0


def _span(selection: Selection, mode: SelectionMode) -> Span | None:
    if mode is not SelectionMode.RANGE:
        return None
    state = for_mode(selection, mode)
    return state if isinstance(state, Span) else None


def is_range_endpoint(selection: Selection, mode: SelectionMode, value: date | datetime) -> bool:
    span = _span(selection, mode)
    if span is None:
        return False
    return as_day(value) in (span.lower, span.upper)


def is_interior_to_range(selection: Selection, mode: SelectionMode,
                         value: date | datetime) -> bool:
    span = _span(selection, mode)
    if span is None:
        return False
    return span.lower < as_day(value) < span.upper


def is_in_range(selection: Selection, mode: SelectionMode, value: date | datetime) -> bool:
    """Inclusive membership in a completed range, single-day ranges included."""
    span = _span(selection, mode)
    if span is None:
        return False
    return span.lower <= as_day(value) <= span.upper


def effective_range(selection: Selection, mode: SelectionMode) -> tuple[date, date] | None:
    """Return (lower, upper) for a range of two distinct days, else None."""
    span = _span(selection, mode)
    if span is None or span.lower == span.upper:
        return None
    return span.lower, span.upper


def selected_dates(selection: Selection) -> list[date]:
    """Dates held by the selection; MULTI keeps tap order and repeats."""
    if isinstance(selection, One):
        return [selection.date]
    if isinstance(selection, Span):
        if selection.lower == selection.upper:
            return [selection.lower]
        return [selection.lower, selection.upper]
    if isinstance(selection, Many):
        return list(selection.dates)
    return []
