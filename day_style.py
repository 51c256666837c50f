"""Cell appearance: which state a day is in and which colours that maps to."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from selection import (
    AllowedRange,
    Many,
    One,
    Selection,
    SelectionMode,
    Span,
    effective_range,
    for_mode,
    is_interior_to_range,
    is_range_endpoint,
    is_selected,
)

# Colours
ACCENT = "#0078D4"
SEL_BG = "#B3D7F2"
HEADER_BG = "#F3F3F3"
GRID_BG = "white"
WN_FG = "#888888"
WEEKEND_FG = "#CC0000"
UNAVAILABLE_FG = "#BBBBBB"


class DayState(enum.Enum):
    UNAVAILABLE = "unavailable"
    NORMAL = "normal"
    TODAY = "today"
    SELECTED = "selected"
    ANCHOR = "anchor"
    RANGE_ENDPOINT = "range_endpoint"
    RANGE_INTERIOR = "range_interior"


def classify_day(day: date, selection: Selection, mode: SelectionMode,
                 allowed: AllowedRange, today: date | None = None) -> DayState:
    """Decide how a dated cell should look.

    Selection wins over availability so a picked day stays visible even if the
    allowed range later shrinks around it.
    """
    if mode is SelectionMode.RANGE:
        if is_range_endpoint(selection, mode, day):
            return DayState.RANGE_ENDPOINT
        if is_interior_to_range(selection, mode, day):
            return DayState.RANGE_INTERIOR
        if is_selected(selection, mode, day):
            return DayState.ANCHOR
    elif is_selected(selection, mode, day):
        return DayState.SELECTED
    if day not in allowed:
        return DayState.UNAVAILABLE
    if today is not None and day == today:
        return DayState.TODAY
    return DayState.NORMAL


@dataclass(frozen=True)
class CellColors:
    bg: str
    fg: str
    bold: bool = False


@dataclass(frozen=True)
class CalendarStyle:
    """Palette for the picker.

    ``today_hook`` lets the host draw today differently (e.g. a holiday
    colour); returning None falls back to ``today``.
    """

    normal: CellColors = CellColors(GRID_BG, "black")
    weekend: CellColors = CellColors(GRID_BG, WEEKEND_FG)
    unavailable: CellColors = CellColors(GRID_BG, UNAVAILABLE_FG)
    today: CellColors = CellColors(GRID_BG, ACCENT, bold=True)
    selected: CellColors = CellColors(ACCENT, "white", bold=True)
    range_interior: CellColors = CellColors(SEL_BG, "black")
    today_hook: Optional[Callable[[date], Optional[CellColors]]] = None

    def colors_for(self, state: DayState, day: date, is_weekend: bool = False) -> CellColors:
        if state in (DayState.SELECTED, DayState.ANCHOR, DayState.RANGE_ENDPOINT):
            return self.selected
        if state is DayState.RANGE_INTERIOR:
            return self.range_interior
        if state is DayState.UNAVAILABLE:
            return self.unavailable
        if state is DayState.TODAY:
            if self.today_hook is not None:
                custom = self.today_hook(day)
                if custom is not None:
                    return custom
            return self.today
        return self.weekend if is_weekend else self.normal


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'s' if n != 1 else ''}"


def selection_summary(selection: Selection, mode: SelectionMode) -> str:
    """Short human description of the selection for the footer."""
    state = for_mode(selection, mode)
    if isinstance(state, One):
        if mode is SelectionMode.RANGE:
            return f"From {state.date.strftime('%d.%m.%Y')} …"
        return state.date.strftime("%d.%m.%Y")
    if isinstance(state, Span):
        lo, hi = effective_range(state, mode) or (state.lower, state.upper)
        total_days = (hi - lo).days + 1
        full_weeks, rem_days = divmod(total_days, 7)
        parts: list[str] = []
        if full_weeks:
            parts.append(_plural(full_weeks, "week"))
        if rem_days:
            parts.append(_plural(rem_days, "day"))
        range_str = f"{lo.strftime('%d.%m')} → {hi.strftime('%d.%m')}"
        return f"{range_str}:  {_plural(total_days, 'day')}  ({', '.join(parts)})"
    if isinstance(state, Many):
        distinct = len(state.distinct())
        picks = len(state.dates)
        if picks == distinct:
            return f"{_plural(picks, 'date')} selected"
        return f"{_plural(distinct, 'date')} selected ({picks} picks)"
    return "No selection"
