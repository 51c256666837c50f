"""Multi-month date-picker window (tkinter) driven by the pure calendar core."""

from __future__ import annotations

import calendar as _cal
import logging
import tkinter as tk
from datetime import MAXYEAR, MINYEAR, date
from tkinter import font as tkfont
from typing import Callable

from PIL import ImageTk

from calendar_logic import (
    CalendarParams,
    DatedCell,
    build_month_grid,
    grid_rows,
    iso_week_numbers,
    months_between,
)
from date_utils import add_months, day_of_year
from day_style import (
    ACCENT,
    GRID_BG,
    HEADER_BG,
    WEEKEND_FG,
    WN_FG,
    CalendarStyle,
    CellColors,
    classify_day,
    selection_summary,
)
from icon_gen import create_icon_image
from selection import (
    AllowedRange,
    Selection,
    SelectionMode,
    apply_tap,
    occurrences,
    reset,
)
from settings import load_settings, save_settings, selection_mode

logger = logging.getLogger(__name__)

MAX_WEEKS = 6
DEFAULT_GRID = (3, 1)
FIRST_MONTH = (MINYEAR, 1)
LAST_MONTH = (MAXYEAR, 12)


class _MonthPanel:
    """Pre-allocated widget pool for a single month (header + 6 weeks max)."""

    __slots__ = ("frame", "header", "wk_header", "day_headers",
                 "week_nums", "day_cells")

    def __init__(self, parent: tk.Frame, fonts: dict, on_press) -> None:
        self.frame = tk.Frame(parent, bg=GRID_BG)

        self.header = tk.Label(
            self.frame, font=fonts["header"], bg=HEADER_BG, fg="#333333",
        )
        self.header.grid(row=0, column=0, columnspan=8, sticky="we", pady=(0, 2))

        self.wk_header = tk.Label(
            self.frame, text="Wk", font=fonts["bold"], bg=GRID_BG, fg=WN_FG, width=3,
        )
        self.wk_header.grid(row=1, column=0)

        # Texts are set per fill since the first weekday is configurable
        self.day_headers: list[tk.Label] = []
        for col in range(7):
            lbl = tk.Label(self.frame, font=fonts["bold"], bg=GRID_BG, width=3)
            lbl.grid(row=1, column=col + 1)
            self.day_headers.append(lbl)

        self.week_nums: list[tk.Label] = []
        self.day_cells: list[list[tk.Canvas]] = []
        for r in range(MAX_WEEKS):
            grid_row = r + 2
            wn = tk.Label(
                self.frame, font=fonts["wn"], bg=GRID_BG, fg=WN_FG, width=3,
            )
            wn.grid(row=grid_row, column=0)
            self.week_nums.append(wn)

            row_cells: list[tk.Canvas] = []
            for c in range(7):
                cell = tk.Canvas(
                    self.frame, width=fonts["cell_w"], height=fonts["cell_h"],
                    bg=GRID_BG, highlightthickness=0, borderwidth=0,
                )
                cell.grid(row=grid_row, column=c + 1)
                # Bound once; the handler looks the date up in _widget_dates
                cell.bind("<ButtonPress-1>", on_press)
                row_cells.append(cell)
            self.day_cells.append(row_cells)


class CalendarWindow:
    """Multi-month date picker.

    ``mode``, ``allows_repetition`` and ``first_weekday`` default to the
    stored settings. ``today`` pins the date used for "today" styling;
    when omitted the system date is read on every repaint.
    """

    def __init__(
        self,
        allowed: AllowedRange,
        *,
        mode: SelectionMode | None = None,
        allows_repetition: bool | None = None,
        first_weekday: int | None = None,
        style: CalendarStyle | None = None,
        today: date | None = None,
        settings_path: str | None = None,
        on_change: Callable[[Selection], None] | None = None,
    ) -> None:
        self._settings_path = settings_path
        settings = load_settings(settings_path)

        self.allowed = allowed
        self.mode = mode or selection_mode(settings)
        self.allows_repetition = (settings["allows_repetition"]
                                  if allows_repetition is None else allows_repetition)
        self.params = CalendarParams(
            settings["first_weekday"] if first_weekday is None else first_weekday)
        self.style = style or CalendarStyle()
        self._fixed_today = today
        self._on_change = on_change

        self.selection: Selection = reset()

        self.root = tk.Tk()
        self.root.title(self._title())
        self.root.resizable(True, True)
        self.root.configure(bg=GRID_BG)
        self._setup_fonts()
        self._icon = ImageTk.PhotoImage(create_icon_image(self._today()), master=self.root)
        self.root.iconphoto(True, self._icon)

        self._saved_width: int | None = settings["window_width"]
        self._saved_height: int | None = settings["window_height"]
        self._saved_grid_cols: int | None = settings["grid_cols"]
        self._saved_grid_rows: int | None = settings["grid_rows"]

        # Widget-to-date mapping (filled during _rebuild_months)
        self._widget_dates: dict[int, date] = {}
        # Date-to-widget mapping for highlight updates
        self._date_widgets: dict[date, tk.Canvas] = {}
        self._footer_label: tk.Label | None = None

        # Auto-fit state (grid: cols x rows)
        self._month_width: int = 0
        self._month_height: int = 0
        self._grid_cols, self._grid_rows = DEFAULT_GRID
        self._current_total_months: int = self._grid_cols * self._grid_rows
        self._resize_after_id: str | None = None
        self._showing = False

        today = self._today()
        self.first_year, self.first_month = self._clamp_first(today.year, today.month)

        # Font dict for _MonthPanel, including cell pixel dims
        _tmp = tk.Label(self.root, text="00", font=self.font_normal, width=3)
        _tmp.update_idletasks()
        _cw = _tmp.winfo_reqwidth()
        _ch = _tmp.winfo_reqheight()
        _tmp.destroy()
        self._panel_fonts = {
            "header": self.font_header, "bold": self.font_bold,
            "normal": self.font_normal, "wn": self.font_wn,
            "cell_w": _cw, "cell_h": _ch,
        }

        self._panels: list[_MonthPanel] = []
        self._months_frame: tk.Frame | None = None
        self._build_shell()
        self._rebuild_months()

        self.root.bind("<Escape>", self._on_escape)
        self.root.bind("<Configure>", self._on_configure)
        self.root.protocol("WM_DELETE_WINDOW", self.close)
        self.root.withdraw()

    # ------------------------------------------------------------------
    # Fonts
    # ------------------------------------------------------------------
    def _setup_fonts(self) -> None:
        families = tkfont.families(self.root)
        base = "Segoe UI" if "Segoe UI" in families else "TkDefaultFont"
        self.font_normal = tkfont.Font(family=base, size=9)
        self.font_bold = tkfont.Font(family=base, size=9, weight="bold")
        self.font_header = tkfont.Font(family=base, size=10, weight="bold")
        self.font_nav = tkfont.Font(family=base, size=12, weight="bold")
        self.font_wn = tkfont.Font(family=base, size=8)
        self.font_count = tkfont.Font(family=base, size=6)
        self.font_footer = tkfont.Font(family=base, size=9)

    def _today(self) -> date:
        return self._fixed_today or date.today()

    def _title(self) -> str:
        return f"Pick {self.mode.value}  Day: {day_of_year(self._today())}"

    # ------------------------------------------------------------------
    # Build shell (once): nav bar + months placeholder + footer
    # ------------------------------------------------------------------
    def _build_shell(self) -> None:
        self._outer = tk.Frame(self.root, bg=GRID_BG)
        self._outer.pack(padx=6, pady=4)

        # Navigation row: ◀◀  ◀  Today  ⚙  ▶  ▶▶
        nav = tk.Frame(self._outer, bg=GRID_BG)
        nav.pack(fill="x", pady=(0, 2))

        def _nav_button(text: str, side: str, command: Callable[[], None],
                        font=None, fg: str = "black") -> None:
            btn = tk.Label(nav, text=text, font=font or self.font_nav, bg=GRID_BG,
                           fg=fg, cursor="hand2")
            btn.pack(side=side, padx=6)
            btn.bind("<Button-1>", lambda _e: command())

        _nav_button("◀◀", "left", lambda: self._navigate(-12))
        _nav_button("◀", "left", lambda: self._navigate(-1))
        _nav_button("Today", "left", self._go_today, font=self.font_bold, fg=ACCENT)
        _nav_button("▶▶", "right", lambda: self._navigate(12))
        _nav_button("▶", "right", lambda: self._navigate(1))
        _nav_button("⚙", "right", self.open_settings, font=self.font_bold)

        # Months frame (content filled by _rebuild_months)
        self._months_frame = tk.Frame(self._outer, bg=GRID_BG)
        self._months_frame.pack()

        # Footer: selection summary + Done
        footer = tk.Frame(self._outer, bg=GRID_BG)
        footer.pack(fill="x", pady=(4, 0))
        self._footer_label = tk.Label(
            footer, text=self._footer_text(), font=self.font_footer,
            bg=GRID_BG, fg="#555555",
        )
        self._footer_label.pack(side="left")
        done = tk.Label(footer, text="Done", font=self.font_bold, bg=GRID_BG,
                        fg=ACCENT, cursor="hand2")
        done.pack(side="right", padx=6)
        done.bind("<Button-1>", lambda _e: self.close())

    # ------------------------------------------------------------------
    # Visible months, clamped to the allowed range
    # ------------------------------------------------------------------
    def _clamp_first(self, year: int, month: int) -> tuple[int, int]:
        total = self._grid_cols * self._grid_rows
        lo, hi = FIRST_MONTH, add_months(*LAST_MONTH, 1 - total)
        allowed_months = months_between(self.allowed.first, self.allowed.last)
        if allowed_months:
            lo = max(lo, allowed_months[0])
            hi = min(hi, allowed_months[max(0, len(allowed_months) - total)])
        return max(lo, min((year, month), hi))

    def visible_months(self) -> list[tuple[int, int]]:
        """Months shown from the first panel on, never past December 9999."""
        total = self._grid_cols * self._grid_rows
        months = [add_months(self.first_year, self.first_month, i) for i in range(total)]
        return [ym for ym in months if ym <= LAST_MONTH]

    # ------------------------------------------------------------------
    # Rebuild month grid using pooled panels (fast reconfigure)
    # ------------------------------------------------------------------
    def _rebuild_months(self) -> None:
        self._widget_dates.clear()
        self._date_widgets.clear()

        total = self._grid_cols * self._grid_rows
        self._current_total_months = total
        self.first_year, self.first_month = self._clamp_first(
            self.first_year, self.first_month)

        # Grow panel pool if needed
        while len(self._panels) < total:
            self._panels.append(_MonthPanel(
                self._months_frame, self._panel_fonts, self._on_press,
            ))

        months = self.visible_months()
        for i, (y, m) in enumerate(months):
            panel = self._panels[i]
            grid_r = i // self._grid_cols
            grid_c = i % self._grid_cols
            panel.frame.grid(row=grid_r, column=grid_c, padx=6, pady=2, sticky="n")
            self._fill_panel(panel, y, m)

        # Hide excess panels, including any past December 9999
        for i in range(len(months), len(self._panels)):
            self._panels[i].frame.grid_forget()

        self._refresh_footer()

        # Measure month dimensions once (they never change)
        if self._month_width == 0 and total:
            self.root.update_idletasks()
            f = self._panels[0].frame
            self._month_width = f.winfo_reqwidth() + 12   # +padx*2
            self._month_height = f.winfo_reqheight() + 4  # +pady*2

    def _fill_panel(self, panel: _MonthPanel, year: int, month: int) -> None:
        """Reconfigure an existing panel's widgets: no widget creation."""
        panel.header.configure(text=f"{_cal.month_name[month]} {year}")
        for col, abbr in enumerate(self.params.weekday_abbrs()):
            fg = WEEKEND_FG if self.params.is_weekend_column(col) else "#333333"
            panel.day_headers[col].configure(text=abbr, fg=fg)

        cells = build_month_grid(year, month, self.params)
        weeks = iso_week_numbers(cells)
        rows = grid_rows(cells)

        for r in range(MAX_WEEKS):
            row = rows[r] if r < len(rows) else None
            panel.week_nums[r].configure(text=weeks[r] if row else "")
            for c in range(7):
                canvas = panel.day_cells[r][c]
                item = row[c] if row else None
                if isinstance(item, DatedCell):
                    self._widget_dates[id(canvas)] = item.date
                    self._date_widgets[item.date] = canvas
                    self._paint(canvas, item.date)
                else:
                    canvas.delete("all")
                    canvas.configure(bg=GRID_BG, cursor="")

    # ------------------------------------------------------------------
    # Cell painting
    # ------------------------------------------------------------------
    def _paint(self, canvas: tk.Canvas, d: date) -> None:
        state = classify_day(d, self.selection, self.mode, self.allowed, self._today())
        colors = self.style.colors_for(state, d, is_weekend=d.weekday() >= 5)
        count = occurrences(self.selection, self.mode, d)
        self._draw_cell(canvas, str(d.day), colors,
                        cursor="hand2" if d in self.allowed else "",
                        badge=f"×{count}" if count > 1 else "")

    def _draw_cell(self, cell: tk.Canvas, text: str, colors: CellColors,
                   cursor: str = "", badge: str = "") -> None:
        cell.delete("all")
        w = cell.winfo_width()
        h = cell.winfo_height()
        if w <= 1:
            w = int(cell["width"]) + 2
        if h <= 1:
            h = int(cell["height"]) + 2

        cell.configure(bg=colors.bg, cursor=cursor)
        font = self.font_bold if colors.bold else self.font_normal
        cell.create_text(w // 2, h // 2, text=text, fill=colors.fg, font=font)
        if badge:
            cell.create_text(w - 1, 1, text=badge, fill=colors.fg,
                             font=self.font_count, anchor="ne")

    def _update_highlight(self) -> None:
        """Repaint dated cells after a selection change, without a rebuild."""
        for d, canvas in self._date_widgets.items():
            self._paint(canvas, d)
        self._refresh_footer()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def tap(self, d: date) -> None:
        new = apply_tap(self.selection, self.mode, self.allowed, d,
                        self.allows_repetition)
        if new is self.selection:
            return
        self.selection = new
        self._update_highlight()
        if self._on_change is not None:
            self._on_change(new)

    def clear_selection(self) -> None:
        self.selection = reset()
        self._update_highlight()

    def set_mode(self, mode: SelectionMode) -> None:
        """Switch selection mode; the selection starts over."""
        if mode is self.mode:
            return
        logger.debug("Selection mode %s -> %s", self.mode.value, mode.value)
        self.mode = mode
        self.root.title(self._title())
        self.clear_selection()

    def set_allowed(self, allowed: AllowedRange) -> None:
        """Replace the allowed range; the selection starts over."""
        self.allowed = allowed
        self.selection = reset()
        self._rebuild_months()

    def _on_press(self, event: tk.Event) -> None:
        d = self._widget_dates.get(id(event.widget))
        if d:
            self.tap(d)

    # ------------------------------------------------------------------
    # Footer text
    # ------------------------------------------------------------------
    def _footer_text(self) -> str:
        today_str = f"Today: {self._today().strftime('%d.%m.%Y')}"
        return f"{selection_summary(self.selection, self.mode)}     {today_str}"

    def _refresh_footer(self) -> None:
        if self._footer_label:
            self._footer_label.configure(text=self._footer_text())

    # ------------------------------------------------------------------
    # ESC clears selection first, then closes
    # ------------------------------------------------------------------
    def _on_escape(self, _event: tk.Event) -> None:
        if self.selection != reset():
            self.clear_selection()
        else:
            self.close()

    # ------------------------------------------------------------------
    # Settings dialog
    # ------------------------------------------------------------------
    def open_settings(self) -> None:
        dlg = tk.Toplevel(self.root)
        dlg.title("Settings")
        dlg.resizable(False, False)
        dlg.transient(self.root)

        frame = tk.Frame(dlg, padx=12, pady=8)
        frame.pack()

        tk.Label(frame, text="Selection:", font=self.font_bold).grid(
            row=0, column=0, sticky="w", pady=4,
        )
        mode_var = tk.StringVar(value=self.mode.value)
        for i, m in enumerate(SelectionMode):
            tk.Radiobutton(
                frame, text=m.value.capitalize(), variable=mode_var, value=m.value,
                font=self.font_normal,
            ).grid(row=0, column=i + 1, sticky="w")

        repeat_var = tk.BooleanVar(value=self.allows_repetition)
        tk.Checkbutton(
            frame, text="Count repeated picks of the same day", variable=repeat_var,
            font=self.font_normal,
        ).grid(row=1, column=0, columnspan=4, sticky="w", pady=4)

        tk.Label(frame, text="Week starts on:", font=self.font_normal).grid(
            row=2, column=0, sticky="w", pady=4,
        )
        day_names = list(_cal.day_name)
        weekday_var = tk.StringVar(value=day_names[self.params.first_weekday])
        tk.OptionMenu(frame, weekday_var, *day_names).grid(
            row=2, column=1, columnspan=3, sticky="w", padx=(8, 0), pady=4,
        )

        btn_frame = tk.Frame(frame)
        btn_frame.grid(row=3, column=0, columnspan=4, pady=(8, 0))

        def on_ok() -> None:
            settings = load_settings(self._settings_path)
            settings["selection_mode"] = mode_var.get()
            settings["allows_repetition"] = repeat_var.get()
            settings["first_weekday"] = day_names.index(weekday_var.get())
            save_settings(settings, self._settings_path)

            dlg.destroy()
            self.apply_settings(settings)

        tk.Button(btn_frame, text="OK", width=8, command=on_ok).pack(
            side="left", padx=4,
        )
        tk.Button(btn_frame, text="Cancel", width=8, command=dlg.destroy).pack(
            side="left", padx=4,
        )

    def apply_settings(self, settings: dict) -> None:
        self.allows_repetition = settings["allows_repetition"]
        self.params = CalendarParams(settings["first_weekday"])
        new_mode = selection_mode(settings)
        if new_mode is not self.mode:
            self.mode = new_mode
            self.selection = reset()
            self.root.title(self._title())
        self._rebuild_months()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def _navigate(self, delta: int) -> None:
        self.first_year, self.first_month = add_months(
            self.first_year, self.first_month, delta)
        self._rebuild_months()

    def _go_today(self) -> None:
        today = self._today()
        self.first_year, self.first_month = today.year, today.month
        self._rebuild_months()

    # ------------------------------------------------------------------
    # Resize handling: auto-fit month count to window size
    # ------------------------------------------------------------------
    def _on_configure(self, event: tk.Event) -> None:
        if event.widget is not self.root or self._showing:
            return
        if self._month_width <= 0 or self._month_height <= 0:
            return
        # Track size (persisted on close)
        self._saved_width = self.root.winfo_width()
        self._saved_height = self.root.winfo_height()
        # Debounce rebuild (30ms) to batch rapid configure events
        if self._resize_after_id is not None:
            self.root.after_cancel(self._resize_after_id)
        self._resize_after_id = self.root.after(30, self._handle_resize)

    def _handle_resize(self) -> None:
        self._resize_after_id = None
        cols = max(1, (self._saved_width - 24) // self._month_width)
        rows = max(1, (self._saved_height - 60) // self._month_height)
        if cols != self._grid_cols or rows != self._grid_rows:
            self._grid_cols = self._saved_grid_cols = cols
            self._grid_rows = self._saved_grid_rows = rows
            self._rebuild_months()

    def _persist_size(self) -> None:
        settings = load_settings(self._settings_path)
        settings["window_width"] = self._saved_width
        settings["window_height"] = self._saved_height
        settings["grid_cols"] = self._saved_grid_cols
        settings["grid_rows"] = self._saved_grid_rows
        save_settings(settings, self._settings_path)

    # ------------------------------------------------------------------
    # Show / Close
    # ------------------------------------------------------------------
    def show(self) -> None:
        self._showing = True
        try:
            if self._saved_grid_cols and self._saved_grid_rows:
                self._grid_cols = self._saved_grid_cols
                self._grid_rows = self._saved_grid_rows
            else:
                self._grid_cols, self._grid_rows = DEFAULT_GRID
            self._rebuild_months()
            self.root.deiconify()
            self.root.update_idletasks()
            if self._saved_width and self._saved_height:
                self._position_window(override_size=(self._saved_width, self._saved_height))
            else:
                self._position_window()
            self.root.lift()
            self.root.focus_force()
        finally:
            self._showing = False

    def close(self) -> None:
        try:
            self._persist_size()
        except OSError as exc:
            logger.warning("Could not save window size: %s", exc)
        self.root.destroy()

    def _position_window(self, override_size: tuple[int, int] | None = None) -> None:
        """Centre the window on the screen."""
        self.root.update_idletasks()
        if override_size:
            win_w, win_h = override_size
        else:
            win_w = self.root.winfo_reqwidth()
            win_h = self.root.winfo_reqheight()
        x = max(0, (self.root.winfo_screenwidth() - win_w) // 2)
        y = max(0, (self.root.winfo_screenheight() - win_h) // 2)
        self.root.geometry(f"{win_w}x{win_h}+{x}+{y}")
