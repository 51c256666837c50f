"""Entry point: opens the picker and prints the chosen dates as ISO strings."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, timedelta

from calendar_window import CalendarWindow
from selection import AllowedRange, SelectionMode, selected_dates

logger = logging.getLogger(__name__)


def _iso_date(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO date (YYYY-MM-DD): {text!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mini-date-picker",
        description="Pick a date, a date range or several dates from a calendar.",
    )
    parser.add_argument("--mode", choices=[m.value for m in SelectionMode],
                        help="selection mode (default: from settings)")
    parser.add_argument("--from", dest="first", type=_iso_date,
                        help="first selectable day (default: today)")
    parser.add_argument("--to", dest="last", type=_iso_date,
                        help="last selectable day (default: one year after --from)")
    parser.add_argument("--repeat", action="store_true", default=None,
                        help="count repeated picks of the same day in multi mode")
    parser.add_argument("--first-weekday", type=int, choices=range(7),
                        help="0=Monday ... 6=Sunday (default: from settings)")
    parser.add_argument("--settings", help="settings file path")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def allowed_range(args: argparse.Namespace, today: date | None = None) -> AllowedRange:
    """Selectable days from --from/--to; --to defaults to a year after --from."""
    first = args.first or today or date.today()
    last = args.last or first + timedelta(days=min(365, (date.max - first).days))
    if first > last:
        logger.warning("--from %s is after --to %s; no day will be selectable", first, last)
    return AllowedRange(first, last)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cal_win = CalendarWindow(
        allowed_range(args),
        mode=SelectionMode(args.mode) if args.mode else None,
        allows_repetition=args.repeat,
        first_weekday=args.first_weekday,
        settings_path=args.settings,
    )
    cal_win.show()
    cal_win.root.mainloop()

    for d in selected_dates(cal_win.selection):
        print(d.isoformat())
    return 0


if __name__ == "__main__":
    sys.exit(main())
