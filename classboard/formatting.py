"""
Deterministic French date formatting.

The web site relied on the browser's 'fr-FR' locale. Here the names are
spelled out so the output is identical on every machine:

    format_date        DD/MM/YYYY                01/03/2024
    format_full_date   <weekday> <D> <month> <YYYY>   vendredi 1 mars 2024
    format_month_year  <month> <YYYY>            mars 2024
    format_day_name    Lun .. Dim
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol

from classboard.model import parse_record_date

WEEKDAYS = ["lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche"]
WEEKDAYS_SHORT = ["Lun", "Mar", "Mer", "Jeu", "Ven", "Sam", "Dim"]
MONTHS = [
    "janvier",
    "février",
    "mars",
    "avril",
    "mai",
    "juin",
    "juillet",
    "août",
    "septembre",
    "octobre",
    "novembre",
    "décembre",
]

KIND_LABELS = {"homework": "Devoir", "exam": "Examen", "event": "Événement"}


class DateFormatter(Protocol):
    def format_date(self, value: Any) -> str: ...

    def format_full_date(self, day: date) -> str: ...

    def format_month_year(self, day: date) -> str: ...

    def format_day_name(self, day: date) -> str: ...

    def kind_label(self, kind: str) -> str: ...


class FrenchDateFormatter:
    def format_date(self, value: Any) -> str:
        # accepts raw record dates too; unparseable -> ""
        d: Optional[date] = parse_record_date(value)
        if d is None:
            return ""
        return f"{d.day:02d}/{d.month:02d}/{d.year:04d}"

    def format_full_date(self, day: date) -> str:
        return f"{WEEKDAYS[day.weekday()]} {day.day} {MONTHS[day.month - 1]} {day.year}"

    def format_month_year(self, day: date) -> str:
        return f"{MONTHS[day.month - 1]} {day.year}"

    def format_day_name(self, day: date) -> str:
        return WEEKDAYS_SHORT[day.weekday()]

    def kind_label(self, kind: str) -> str:
        return KIND_LABELS.get(kind, KIND_LABELS["event"])


def teacher_subjects(teacher: dict[str, Any]) -> str:
    subjects = teacher.get("subjects")
    names = []
    if isinstance(subjects, list):
        names = [str(s.get("name")) for s in subjects if isinstance(s, dict) and s.get("name")]
    if not names:
        return "Matière non spécifiée"
    return ", ".join(names)


def teacher_contact_link(teacher: dict[str, Any]) -> str:
    phone = teacher.get("phone")
    if isinstance(phone, str) and phone.strip():
        return "https://wa.me/" + "".join(phone.split())
    email = teacher.get("email")
    if isinstance(email, str) and email.strip():
        return f"mailto:{email.strip()}"
    return "#"
