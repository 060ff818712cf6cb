"""
Application state and the reducer that updates it.

The state is an immutable value. Every user action or data event goes
through reduce(), which returns a new state; nothing is mutated in place,
so a renderer always sees either the old or the new snapshot as a whole.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Optional, Union

from classboard.agenda import shift_month
from classboard.model import Snapshot, empty_snapshot

PAGES = ("home", "calendar", "news", "teachers", "delegates")
VIEWS = ("month", "week")


@dataclass(frozen=True)
class AppState:
    page: str = "home"
    current_date: date = field(default_factory=date.today)
    view: str = "month"
    snapshot: Snapshot = field(default_factory=empty_snapshot)
    used_fallback: bool = False
    banner_visible: bool = False
    online: bool = True
    selected_day: Optional[date] = None
    selected_teacher: Optional[str] = None
    last_updated: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Navigate:
    page: str


@dataclass(frozen=True)
class ChangeMonth:
    direction: int


@dataclass(frozen=True)
class SwitchView:
    view: str


@dataclass(frozen=True)
class SelectDay:
    day: date


@dataclass(frozen=True)
class SelectTeacher:
    teacher_id: str


@dataclass(frozen=True)
class CloseModal:
    pass


@dataclass(frozen=True)
class DismissBanner:
    pass


@dataclass(frozen=True)
class DataLoaded:
    snapshot: Snapshot
    used_fallback: bool
    last_updated: Optional[datetime] = None


@dataclass(frozen=True)
class ConnectivityChanged:
    online: bool


Action = Union[
    Navigate,
    ChangeMonth,
    SwitchView,
    SelectDay,
    SelectTeacher,
    CloseModal,
    DismissBanner,
    DataLoaded,
    ConnectivityChanged,
]


def find_teacher(snapshot: Snapshot, teacher_id: str) -> Optional[dict[str, Any]]:
    """
    Look a teacher up by _id, falling back to the name (records without an id).
    """
    for teacher in snapshot.get("teachers", []):
        if (teacher.get("_id") or teacher.get("name")) == teacher_id:
            return teacher
    return None


def reduce(state: AppState, action: Action) -> AppState:
    if isinstance(action, Navigate):
        if action.page not in PAGES:
            raise ValueError(f"Unknown page: {action.page!r}")
        return replace(state, page=action.page, selected_day=None, selected_teacher=None)

    if isinstance(action, ChangeMonth):
        return replace(state, current_date=shift_month(state.current_date, action.direction))

    if isinstance(action, SwitchView):
        if action.view not in VIEWS:
            raise ValueError(f"Unknown calendar view: {action.view!r}")
        return replace(state, view=action.view)

    if isinstance(action, SelectDay):
        return replace(state, selected_day=action.day, selected_teacher=None)

    if isinstance(action, SelectTeacher):
        return replace(state, selected_teacher=action.teacher_id, selected_day=None)

    if isinstance(action, CloseModal):
        return replace(state, selected_day=None, selected_teacher=None)

    if isinstance(action, DismissBanner):
        return replace(state, banner_visible=False)

    if isinstance(action, DataLoaded):
        return replace(
            state,
            snapshot=action.snapshot,
            used_fallback=action.used_fallback,
            banner_visible=action.used_fallback,
            last_updated=action.last_updated,
        )

    if isinstance(action, ConnectivityChanged):
        if action.online:
            # the banner goes away once a fresh fetch succeeds
            return replace(state, online=True)
        return replace(state, online=False, used_fallback=True, banner_visible=True)

    raise TypeError(f"Unsupported action: {action!r}")
