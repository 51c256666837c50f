"""
Window lifecycle tests for the date picker.

Drives the real tkinter window (skipped when no display is available):
show -> tap cells -> resize -> close -> reopen -> verify.
"""

import tkinter as tk
from datetime import date

import pytest

from calendar_window import CalendarWindow
from selection import EMPTY, AllowedRange, Many, One, SelectionMode, Span
from settings import load_settings, save_settings

TODAY = date(2024, 3, 15)
ALLOWED = AllowedRange(date(2024, 3, 1), date(2024, 6, 30))


def _has_display() -> bool:
    try:
        root = tk.Tk()
    except tk.TclError:
        return False
    root.destroy()
    return True


pytestmark = pytest.mark.skipif(not _has_display(), reason="no display for tkinter")


@pytest.fixture
def settings_file(tmp_path):
    return str(tmp_path / "picker.json")


@pytest.fixture
def make_window(settings_file):
    windows = []

    def _make(**kwargs):
        kwargs.setdefault("today", TODAY)
        kwargs.setdefault("settings_path", settings_file)
        win = CalendarWindow(kwargs.pop("allowed", ALLOWED), **kwargs)
        windows.append(win)
        return win

    yield _make
    for win in windows:
        try:
            win.root.destroy()
        except tk.TclError:
            pass


def _click(win, d):
    """Simulate a press on the canvas showing ``d``."""
    cell = win._date_widgets[d]
    fake_event = type("Event", (), {"widget": cell})()
    win._on_press(fake_event)


def test_default_grid_starts_at_today(make_window):
    win = make_window(mode=SelectionMode.SINGLE)
    win.show()
    assert (win._grid_cols, win._grid_rows) == (3, 1)
    assert win.visible_months() == [(2024, 3), (2024, 4), (2024, 5)]
    assert date(2024, 5, 31) in win._date_widgets
    assert date(2024, 6, 1) not in win._date_widgets


def test_single_tap_and_on_change(make_window):
    seen = []
    win = make_window(mode=SelectionMode.SINGLE, on_change=seen.append)
    win.show()
    _click(win, date(2024, 3, 20))
    _click(win, date(2024, 4, 2))
    assert win.selection == One(date(2024, 4, 2))
    assert seen == [One(date(2024, 3, 20)), One(date(2024, 4, 2))]


def test_range_gesture_and_footer(make_window):
    win = make_window(mode=SelectionMode.RANGE)
    win.show()
    _click(win, date(2024, 4, 10))
    _click(win, date(2024, 4, 1))
    assert win.selection == Span(date(2024, 4, 1), date(2024, 4, 10))
    assert "01.04 → 10.04" in win._footer_label.cget("text")
    interior = win._date_widgets[date(2024, 4, 5)]
    assert interior.cget("bg") == win.style.range_interior.bg


def test_out_of_range_cells_are_inert(make_window):
    win = make_window(mode=SelectionMode.MULTI,
                      allowed=AllowedRange(date(2024, 3, 10), date(2024, 6, 30)))
    win.show()
    _click(win, date(2024, 3, 9))
    assert win.selection is EMPTY
    assert win._date_widgets[date(2024, 3, 9)].cget("cursor") == ""


def test_repeated_picks_and_mode_switch(make_window):
    win = make_window(mode=SelectionMode.MULTI, allows_repetition=True)
    win.show()
    for _ in range(3):
        _click(win, date(2024, 3, 18))
    assert win.selection == Many((date(2024, 3, 18),) * 3)

    win.set_mode(SelectionMode.RANGE)
    assert win.selection is EMPTY


def test_escape_clears_selection_before_closing(make_window):
    win = make_window(mode=SelectionMode.SINGLE)
    win.show()
    _click(win, date(2024, 3, 20))
    win._on_escape(None)
    assert win.selection is EMPTY
    assert win.root.winfo_exists()


def test_navigation_is_clamped_to_allowed_months(make_window):
    win = make_window(mode=SelectionMode.SINGLE)
    win.show()
    win._navigate(-12)
    assert win.visible_months()[0] == (2024, 3)
    win._navigate(12)
    assert win.visible_months() == [(2024, 4), (2024, 5), (2024, 6)]


def test_first_weekday_from_settings(make_window, settings_file):
    settings = load_settings(settings_file)
    settings["first_weekday"] = 6
    save_settings(settings, settings_file)
    win = make_window(mode=SelectionMode.SINGLE)
    assert win.params.first_weekday == 6
    assert win._panels[0].day_headers[0].cget("text") == "Sun"


def test_grid_size_survives_restart(make_window, settings_file):
    win = make_window(mode=SelectionMode.SINGLE)
    win.show()
    win._grid_cols = win._saved_grid_cols = 2
    win._grid_rows = win._saved_grid_rows = 2
    win._saved_width = 1000
    win._saved_height = 800
    win.close()

    saved = load_settings(settings_file)
    assert (saved["grid_cols"], saved["grid_rows"]) == (2, 2)
    assert saved["window_width"] == 1000

    win2 = make_window(mode=SelectionMode.SINGLE)
    win2.show()
    assert (win2._grid_cols, win2._grid_rows) == (2, 2)
    assert win2._current_total_months == 4


def test_set_allowed_resets_selection_and_reclamps(make_window):
    win = make_window(mode=SelectionMode.SINGLE)
    win.show()
    _click(win, date(2024, 3, 20))
    win.set_allowed(AllowedRange(date(2024, 4, 1), date(2024, 8, 31)))
    assert win.selection is EMPTY
    assert win.visible_months()[0] == (2024, 4)
    assert date(2024, 3, 20) not in win._date_widgets


def test_settings_mode_change_resets_and_rebuilds(make_window, settings_file):
    win = make_window(mode=SelectionMode.RANGE)
    win.show()
    _click(win, date(2024, 3, 20))
    settings = load_settings(settings_file)
    settings.update(selection_mode="multi", first_weekday=6)
    win.apply_settings(settings)
    assert win.selection is EMPTY
    assert win.mode is SelectionMode.MULTI
    assert win._panels[0].day_headers[0].cget("text") == "Sun"
    _click(win, date(2024, 3, 21))
    assert win.selection == Many((date(2024, 3, 21),))


def test_settings_same_mode_keeps_selection(make_window, settings_file):
    win = make_window(mode=SelectionMode.MULTI, allows_repetition=False)
    win.show()
    _click(win, date(2024, 3, 18))
    settings = load_settings(settings_file)
    settings.update(selection_mode="multi", allows_repetition=True)
    win.apply_settings(settings)
    assert win.selection == Many((date(2024, 3, 18),))
    _click(win, date(2024, 3, 18))
    assert win.selection == Many((date(2024, 3, 18),) * 2)


def test_last_representable_month_shows_alone(make_window):
    win = make_window(mode=SelectionMode.SINGLE, today=date(9999, 12, 15),
                      allowed=AllowedRange(date(9999, 12, 1), date(9999, 12, 31)))
    win.show()
    assert win.visible_months() == [(9999, 12)]
    assert date(9999, 12, 31) in win._date_widgets
    win._navigate(12)
    assert win.visible_months() == [(9999, 12)]


def test_navigation_with_empty_allowed_range_stays_in_calendar(make_window):
    win = make_window(mode=SelectionMode.SINGLE,
                      allowed=AllowedRange(date(2024, 6, 1), date(2024, 5, 31)))
    win.show()
    win._navigate(-12 * 3000)
    assert win.visible_months()[0] == (1, 1)
    win._navigate(12 * 20000)
    assert win.visible_months() == [(9999, 10), (9999, 11), (9999, 12)]
    _click(win, date(9999, 12, 1))
    assert win.selection is EMPTY
