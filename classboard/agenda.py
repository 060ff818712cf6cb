"""
Calendar aggregation.

Homework, exams and generic events are merged into one tagged stream and
then bucketed by day for the month and week views.

Rules:
- merge order is always homework, exams, events
- dates are compared as calendar dates (no time of day)
- records whose date cannot be parsed never reach a calendar cell
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Any, Iterable, Iterator, Optional

from classboard.model import EVENT_SOURCES, CalendarEvent, Snapshot

# Colour suffix per event kind, shared by all views
COLOURS = {"homework": "homework", "exam": "exam", "event": "event"}

# View -> css class prefix
VIEW_PREFIXES = {
    "month": "indicator-",
    "week": "event-",
    "modal": "modal-event-",
}


def _css_class(kind: str, view: str) -> str:
    if view == "home":
        # the home list uses the kind itself
        return f"event-{kind}"
    try:
        prefix = VIEW_PREFIXES[view]
    except KeyError:
        raise ValueError(f"Unknown calendar view: {view!r}") from None
    return prefix + COLOURS[kind]


def merge_and_tag(snapshot: Snapshot, view: str = "month") -> Iterator[CalendarEvent]:
    """
    Yield every homework, exam and event of the snapshot as a CalendarEvent.

    The generator holds no state beyond the snapshot, so calling it again
    yields the same sequence.
    """
    for category, kind in EVENT_SOURCES:
        css_class = _css_class(kind, view)
        for record in snapshot.get(category, []):
            yield CalendarEvent.from_record(kind, record, css_class)


def upcoming(events: Iterable[CalendarEvent], from_date: date, limit: int) -> list[CalendarEvent]:
    """
    Events dated on or after from_date, earliest first, at most limit.

    sorted() is stable, so same-day events keep merge order.
    """
    if limit <= 0:
        return []
    kept = [ev for ev in events if ev.date is not None and ev.date >= from_date]
    kept.sort(key=lambda ev: ev.date)
    return kept[:limit]


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def bucket_by_day(events: Iterable[CalendarEvent], year: int, month: int) -> dict[int, list[CalendarEvent]]:
    """
    Group events by day of month.

    Every day 1..days_in_month gets a bucket (possibly empty). Events outside
    the month and events without a usable date are left out.
    """
    buckets: dict[int, list[CalendarEvent]] = {day: [] for day in range(1, days_in_month(year, month) + 1)}
    for ev in events:
        if ev.date is None:
            continue
        if ev.date.year == year and ev.date.month == month:
            buckets[ev.date.day].append(ev)
    return buckets


def events_on(events: Iterable[CalendarEvent], day: date) -> list[CalendarEvent]:
    return [ev for ev in events if ev.date == day]


def week_of(anchor: date) -> list[date]:
    """
    The Monday-to-Sunday window containing anchor.

    isoweekday() is 7 on Sundays, so a Sunday anchor starts 6 days earlier.
    """
    monday = anchor - timedelta(days=anchor.isoweekday() - 1)
    return [monday + timedelta(days=i) for i in range(7)]


def bucket_by_week(events: Iterable[CalendarEvent], anchor: date) -> list[tuple[date, list[CalendarEvent]]]:
    days = week_of(anchor)
    by_day: dict[date, list[CalendarEvent]] = {d: [] for d in days}
    for ev in events:
        if ev.date in by_day:
            by_day[ev.date].append(ev)
    return [(d, by_day[d]) for d in days]


def is_today(day: date, today: Optional[date] = None) -> bool:
    today = today or date.today()
    return (day.year, day.month, day.day) == (today.year, today.month, today.day)


def month_grid(year: int, month: int) -> list[list[Optional[int]]]:
    """
    Weeks of the month as rows of 7 cells, Monday first.

    Cells before the 1st and after the last day are None.
    """
    weeks = calendar.Calendar(firstweekday=calendar.MONDAY).monthdayscalendar(year, month)
    return [[day or None for day in week] for week in weeks]


def shift_month(day: date, direction: int) -> date:
    """
    Move day by direction months, clamping the day to the target month's length.
    """
    index = day.year * 12 + (day.month - 1) + direction
    year, month0 = divmod(index, 12)
    month = month0 + 1
    return date(year, month, min(day.day, days_in_month(year, month)))


def _subject_names(teacher: dict[str, Any]) -> set[str]:
    names: set[str] = set()
    subjects = teacher.get("subjects")
    if not isinstance(subjects, list):
        return names
    for s in subjects:
        if isinstance(s, dict) and isinstance(s.get("name"), str):
            names.add(s["name"].strip())
    return names


def teacher_upcoming(
    snapshot: Snapshot,
    teacher: dict[str, Any],
    today: date,
    limit: int = 5,
) -> tuple[list[CalendarEvent], list[CalendarEvent]]:
    """
    Upcoming homework and exams for the subjects a teacher teaches.
    """
    names = _subject_names(teacher)
    events = [ev for ev in merge_and_tag(snapshot, view="modal") if ev.subject in names]
    homework = upcoming((ev for ev in events if ev.kind == "homework"), today, limit)
    exams = upcoming((ev for ev in events if ev.kind == "exam"), today, limit)
    return homework, exams
