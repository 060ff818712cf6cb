"""
CLI (Command Line Interface).

One-shot commands that show one page of the class site and exit, e.g.:

    classboard home
    classboard calendar --month 2024-03 [--week]
    classboard day 2024-03-01
    classboard upcoming --limit 10
    classboard refresh
    classboard interactive

Every command first shows cached data, then tries a fresh fetch
(skipped with --offline). A failed fetch never aborts a command; the
offline banner is shown instead.

Note:
- The interactive UI lives in classboard/interactive.py
- Rendering lives in classboard/views.py
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import date, datetime
from typing import Optional

from rich.logging import RichHandler

from classboard.app import ClassSite
from classboard.backend import SanityClient
from classboard.config import Settings, load_settings
from classboard.connectivity import ConnectivityMonitor, probe
from classboard.model import CATEGORIES
from classboard.state import ChangeMonth, Navigate, SelectDay, SwitchView
from classboard.storage import CacheManager, JsonFileStore
from classboard.views import ConsoleView

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
    )


def _parse_month(text: str) -> Optional[date]:
    """
    Parse 'YYYY-MM' into the first day of that month, or None.
    """
    try:
        return datetime.strptime(text.strip(), "%Y-%m").date()
    except ValueError:
        return None


def _parse_day(text: str) -> Optional[date]:
    try:
        return date.fromisoformat(text.strip())
    except ValueError:
        return None


def _build_site(settings: Settings, offline: bool, view: ConsoleView) -> tuple[ClassSite, SanityClient]:
    cache = CacheManager(JsonFileStore(settings.cache_path), ttl=settings.cache_ttl)
    client = SanityClient(settings)
    monitor = ConnectivityMonitor(online=not offline)
    site = ClassSite(cache, client.fetch_category, view=view, monitor=monitor)
    return site, client


def _load(site: ClassSite, offline: bool) -> None:
    site.start()
    if not offline:
        asyncio.run(site.refresh())


def _goto_month(site: ClassSite, target: date) -> None:
    current = site.state.current_date
    delta = (target.year * 12 + target.month) - (current.year * 12 + current.month)
    if delta:
        site.dispatch(ChangeMonth(delta))


def _cmd_page(site: ClassSite, page: str) -> int:
    site.on_user_action(Navigate(page))
    return 0


def _cmd_calendar(args: argparse.Namespace, site: ClassSite, month: Optional[date]) -> int:
    if month is not None:
        _goto_month(site, month)
    if args.week:
        site.dispatch(SwitchView("week"))
    site.on_user_action(Navigate("calendar"))
    return 0


def _cmd_day(site: ClassSite, day: date) -> int:
    _goto_month(site, day)
    site.dispatch(Navigate("calendar"))
    site.on_user_action(SelectDay(day))
    return 0


def _cmd_upcoming(args: argparse.Namespace, site: ClassSite, view: ConsoleView) -> int:
    view.render_upcoming(site.state, args.limit)
    return 0


def _cmd_refresh(site: ClassSite) -> int:
    # _load() already fetched; report what we have
    state = site.state
    counts = ", ".join(f"{name}={len(state.snapshot[name])}" for name in CATEGORIES)
    if state.used_fallback:
        print(f"Fetch failed, showing cached data ({counts})")
        return 1
    print(f"Data refreshed ({counts})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="classboard", description="Première C class site (terminal client)")
    parser.add_argument("--cache", type=str, default=None, help="Cache file path (default: package data dir)")
    parser.add_argument("--offline", action="store_true", help="Do not contact the backend, use cached data only")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("home", help="Recent news and upcoming events")

    p_cal = sub.add_parser("calendar", help="Month (or week) calendar")
    p_cal.add_argument("--month", type=str, default=None, help="Month to show (YYYY-MM, default: current)")
    p_cal.add_argument("--week", action="store_true", help="Show the week view instead of the month")

    p_day = sub.add_parser("day", help="Everything due on one day")
    p_day.add_argument("date", type=str, help="Date (YYYY-MM-DD)")

    sub.add_parser("news", help="All news")
    sub.add_parser("teachers", help="Teacher directory")
    sub.add_parser("delegates", help="Class delegates")

    p_up = sub.add_parser("upcoming", help="Next homework, exams and events")
    p_up.add_argument("--limit", type=int, default=5, help="Number of entries (default: 5)")

    sub.add_parser("refresh", help="Fetch fresh data and update the cache")
    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses and validates args, loads data, dispatches to
    command handlers, and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    # validate before touching cache or network
    month: Optional[date] = None
    day: Optional[date] = None
    if args.command == "calendar" and args.month is not None:
        month = _parse_month(args.month)
        if month is None:
            print(f"Invalid month: {args.month!r} (expected YYYY-MM)")
            raise SystemExit(1)
    if args.command == "day":
        day = _parse_day(args.date)
        if day is None:
            print(f"Invalid date: {args.date!r} (expected YYYY-MM-DD)")
            raise SystemExit(1)
    if args.command == "refresh" and args.offline:
        print("Cannot refresh with --offline.")
        raise SystemExit(1)
    if args.command == "upcoming" and args.limit <= 0:
        print("Please provide a positive --limit.")
        raise SystemExit(1)

    try:
        settings = load_settings(cache_path=args.cache)
    except ValueError as exc:
        print(f"Configuration error: {exc}")
        raise SystemExit(1)

    logger.debug("Using cache file %s", settings.cache_path)
    view = ConsoleView()
    site, client = _build_site(settings, args.offline, view)

    if args.command == "interactive":
        from classboard.interactive import run_interactive

        _load(site, args.offline)
        run_interactive(site, check_online=lambda: probe(client.query_url(), timeout=settings.timeout))
        raise SystemExit(0)

    _load(site, args.offline)

    if args.command in ("home", "news", "teachers", "delegates"):
        raise SystemExit(_cmd_page(site, args.command))
    if args.command == "calendar":
        raise SystemExit(_cmd_calendar(args, site, month))
    if args.command == "day" and day is not None:
        raise SystemExit(_cmd_day(site, day))
    if args.command == "upcoming":
        raise SystemExit(_cmd_upcoming(args, site, view))
    if args.command == "refresh":
        raise SystemExit(_cmd_refresh(site))

    raise SystemExit(2)
