"""
Central data model definitions used across the project.

This module defines the canonical structure of snapshots and calendar events so that:
- all modules share the same category names and field names
- data fetched from the backend and data read from the cache look the same
- the calendar code never has to guess what a record contains
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional


Snapshot = Dict[str, List[Dict[str, Any]]]

CATEGORIES = ("homework", "exams", "events", "news", "teachers", "delegates", "subjects")

# Calendar-bearing categories, in merge order.
EVENT_SOURCES = (
    ("homework", "homework"),
    ("exams", "exam"),
    ("events", "event"),
)

KIND_HOMEWORK = "homework"
KIND_EXAM = "exam"
KIND_EVENT = "event"


def empty_snapshot() -> Snapshot:
    return {name: [] for name in CATEGORIES}


def normalize_snapshot(raw: Any) -> Snapshot:
    """
    Bring any decoded JSON value into snapshot shape.

    All 7 categories are always present. Values that are not lists become
    empty lists and records that are not dicts are dropped.
    """
    snapshot = empty_snapshot()
    if not isinstance(raw, dict):
        return snapshot

    for name in CATEGORIES:
        records = raw.get(name)
        if isinstance(records, list):
            snapshot[name] = [r for r in records if isinstance(r, dict)]
    return snapshot


def parse_record_date(value: Any) -> Optional[date]:
    """
    Parse the date of a backend record.

    Accepts 'YYYY-MM-DD', full ISO-8601 datetimes (with 'Z' or an offset),
    and date/datetime objects. Aware datetimes are converted to local time
    before truncation. Returns None for anything unparseable.
    """
    if isinstance(value, datetime):
        return _local_date(value)
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    if len(text) == 10:
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None

    # fromisoformat only learned about 'Z' in 3.11
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return _local_date(datetime.fromisoformat(text))
    except ValueError:
        return None


def _local_date(dt: datetime) -> date:
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.date()


def _name_of(ref: Any) -> Optional[str]:
    if isinstance(ref, dict):
        name = ref.get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()
    return None


@dataclass(frozen=True)
class CalendarEvent:
    """
    One homework, exam or generic event placed on the calendar.

    Built from a raw record at aggregation time, never persisted.
    """

    kind: str
    title: str
    date: Optional[date]
    subject: Optional[str]
    description: Optional[str]
    css_class: str
    source: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_record(cls, kind: str, record: Dict[str, Any], css_class: str) -> "CalendarEvent":
        description = record.get("description")
        return cls(
            kind=kind,
            title=str(record.get("title") or "").strip(),
            date=parse_record_date(record.get("date")),
            subject=_name_of(record.get("subject")),
            description=description.strip() if isinstance(description, str) and description.strip() else None,
            css_class=css_class,
            source=record,
        )


@dataclass(frozen=True)
class CacheEntry:
    snapshot: Snapshot
    saved_at: datetime


@dataclass(frozen=True)
class FetchOutcome:
    """
    Result of one refresh attempt.

    used_fallback is True when the snapshot did not come from the backend
    (cached or built-in data); callers show the offline banner for it.
    """

    snapshot: Snapshot
    used_fallback: bool
