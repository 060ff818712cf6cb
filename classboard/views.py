"""
Terminal rendering of the application state.

Everything here is a pure function of AppState: views never fetch, never
persist and never change the state. The ConsoleView prints with rich.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Optional, Protocol

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from classboard.agenda import (
    bucket_by_day,
    bucket_by_week,
    events_on,
    is_today,
    merge_and_tag,
    month_grid,
    teacher_upcoming,
    upcoming,
)
from classboard.formatting import DateFormatter, FrenchDateFormatter, teacher_contact_link, teacher_subjects
from classboard.model import CalendarEvent
from classboard.state import AppState, find_teacher

PAGE_TITLES = {
    "home": "Accueil",
    "calendar": "Calendrier",
    "news": "Actualités",
    "teachers": "Professeurs",
    "delegates": "Délégués",
}

# rich styles for the colour classes
STYLES = {"homework": "blue", "exam": "red", "event": "green"}

RECENT_NEWS = 3
UPCOMING_EVENTS = 5
PREVIEW_LENGTH = 100


class View(Protocol):
    def render(self, state: AppState) -> None: ...


def _safe_str(x: Any) -> str:
    return "" if x is None else str(x)


def _text(x: Any) -> str:
    # record text is data, not rich markup
    return escape(_safe_str(x))


def _marker(ev: CalendarEvent) -> str:
    return f"[{STYLES[ev.kind]}]●[/]"


class ConsoleView:
    def __init__(
        self,
        console: Optional[Console] = None,
        formatter: Optional[DateFormatter] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.console = console or Console()
        self.fmt = formatter or FrenchDateFormatter()
        self.today = today

    # -- entry point ---------------------------------------------------------

    def render(self, state: AppState) -> None:
        self._print_header(state)

        page = state.page
        if page == "home":
            self.render_home(state)
        elif page == "calendar":
            self.render_calendar(state)
        elif page == "news":
            self.render_news(state)
        elif page == "teachers":
            self.render_teachers(state)
        elif page == "delegates":
            self.render_delegates(state)

        if state.selected_day is not None:
            self.render_day_details(state, state.selected_day)
        if state.selected_teacher is not None:
            self.render_teacher_details(state, state.selected_teacher)

    def _print_header(self, state: AppState) -> None:
        if state.banner_visible:
            self.console.print(
                Panel(
                    "Impossible de charger les dernières données. Affichage des données en cache.",
                    style="bold yellow",
                    box=box.SIMPLE,
                )
            )
        self.console.print(f"\n=== Première C · {PAGE_TITLES.get(state.page, state.page)} ===")
        if state.last_updated is not None:
            local = state.last_updated.astimezone()
            self.console.print(
                f"Données du {self.fmt.format_date(local.date())} à {local:%H:%M}", style="dim"
            )

    # -- home ----------------------------------------------------------------

    def render_home(self, state: AppState) -> None:
        self.console.print("\n[bold]Actualités récentes[/]")
        news = state.snapshot["news"][:RECENT_NEWS]
        if not news:
            self.console.print("Aucune actualité récente.")
        for item in news:
            content = _safe_str(item.get("content"))
            preview = content[:PREVIEW_LENGTH] + "..." if content else ""
            self._print_news_item(item, preview)

        self.console.print("\n[bold]Événements à venir[/]")
        self.render_upcoming(state, UPCOMING_EVENTS)

    def render_upcoming(self, state: AppState, limit: int) -> None:
        events = upcoming(merge_and_tag(state.snapshot, view="home"), self.today(), limit)
        if not events:
            self.console.print("Aucun événement à venir.")
            return

        table = Table(box=box.SIMPLE, show_header=False)
        table.add_column("Date")
        table.add_column("Titre")
        table.add_column("Type")
        for ev in events:
            table.add_row(
                self.fmt.format_date(ev.date),
                escape(ev.title),
                f"[{STYLES[ev.kind]}]{self.fmt.kind_label(ev.kind)}[/]",
            )
        self.console.print(table)

    def _print_news_item(self, item: dict[str, Any], text: str) -> None:
        title = escape(_safe_str(item.get("title")).strip())
        when = self.fmt.format_date(item.get("date"))
        self.console.print(f"[dim]{when}[/]  [bold]{title}[/]")
        if text:
            self.console.print(f"  {escape(text)}")
        if item.get("image"):
            self.console.print(Text.assemble("  ", ("image", Style(dim=True, link=_safe_str(item["image"])))))

    # -- calendar ------------------------------------------------------------

    def render_calendar(self, state: AppState) -> None:
        if state.view == "week":
            self.render_week(state)
        else:
            self.render_month(state)

    def render_month(self, state: AppState) -> None:
        current = state.current_date
        year, month = current.year, current.month
        buckets = bucket_by_day(merge_and_tag(state.snapshot, view="month"), year, month)
        today = self.today()

        table = Table(title=self.fmt.format_month_year(current), box=box.SIMPLE)
        for name in ("Lun", "Mar", "Mer", "Jeu", "Ven", "Sam", "Dim"):
            table.add_column(name, justify="center")

        for week in month_grid(year, month):
            row = []
            for day in week:
                if day is None:
                    row.append("")
                    continue
                number = str(day)
                if is_today(date(year, month, day), today):
                    number = f"[reverse]{number}[/]"
                markers = "".join(_marker(ev) for ev in buckets[day])
                row.append(f"{number}\n{markers}" if markers else number)
            table.add_row(*row)

        self.console.print(table)
        self._print_legend()

    def render_week(self, state: AppState) -> None:
        days = bucket_by_week(merge_and_tag(state.snapshot, view="week"), state.current_date)
        today = self.today()

        table = Table(box=box.SIMPLE)
        for day, _ in days:
            header = f"{self.fmt.format_day_name(day)}\n{day.day}"
            table.add_column(f"[reverse]{header}[/]" if is_today(day, today) else header)

        table.add_row(
            *("\n".join(f"[{STYLES[ev.kind]}]{escape(ev.title)}[/]" for ev in events) for _, events in days)
        )
        self.console.print(table)
        self._print_legend()

    def _print_legend(self) -> None:
        self.console.print(
            " ".join(f"[{STYLES[kind]}]●[/] {self.fmt.kind_label(kind)}" for kind in ("homework", "exam", "event")),
            style="dim",
        )

    def render_day_details(self, state: AppState, day: date) -> None:
        events = events_on(merge_and_tag(state.snapshot, view="modal"), day)
        if not events:
            body = "Aucun événement prévu pour cette date."
        else:
            lines = []
            for ev in events:
                detail = self.fmt.kind_label(ev.kind)
                if ev.subject:
                    detail += f" - {escape(ev.subject)}"
                lines.append(f"[bold {STYLES[ev.kind]}]{escape(ev.title)}[/]")
                lines.append(f"  {detail}")
                if ev.description:
                    lines.append(f"  {escape(ev.description)}")
            body = "\n".join(lines)
        self.console.print(Panel(body, title=self.fmt.format_full_date(day)))

    # -- news ----------------------------------------------------------------

    def render_news(self, state: AppState) -> None:
        news = state.snapshot["news"]
        if not news:
            self.console.print("Aucune actualité pour le moment.")
            return
        for item in news:
            self._print_news_item(item, _safe_str(item.get("content")))
            self.console.print()

    # -- directories ---------------------------------------------------------

    def render_teachers(self, state: AppState) -> None:
        table = Table(box=box.SIMPLE)
        table.add_column("#", justify="right")
        table.add_column("Nom", style="bold cyan", no_wrap=True)
        table.add_column("Matières")
        table.add_column("Contact", no_wrap=True)
        for i, teacher in enumerate(state.snapshot["teachers"], start=1):
            table.add_row(
                str(i),
                _text(teacher.get("name")),
                escape(teacher_subjects(teacher)),
                escape(teacher_contact_link(teacher)),
            )
        self.console.print(table)

    def render_teacher_details(self, state: AppState, teacher_id: str) -> None:
        teacher = find_teacher(state.snapshot, teacher_id)
        if teacher is None:
            self.console.print(f"Professeur introuvable: {escape(teacher_id)}")
            return

        homework, exams = teacher_upcoming(state.snapshot, teacher, self.today())
        lines = [escape(teacher_subjects(teacher)), f"Contact WhatsApp: {escape(teacher_contact_link(teacher))}", ""]

        lines.append("[bold]Devoirs à venir[/]")
        if homework:
            lines.extend(f"  {escape(ev.title)}  [dim]{self.fmt.format_date(ev.date)}[/]" for ev in homework)
        else:
            lines.append("  Aucun devoir à venir")

        lines.append("[bold]Examens à venir[/]")
        if exams:
            lines.extend(f"  {escape(ev.title)}  [dim]{self.fmt.format_date(ev.date)}[/]" for ev in exams)
        else:
            lines.append("  Aucun examen à venir")

        self.console.print(Panel("\n".join(lines), title=_text(teacher.get("name"))))

    def render_delegates(self, state: AppState) -> None:
        table = Table(box=box.SIMPLE)
        table.add_column("Nom", style="bold cyan", no_wrap=True)
        table.add_column("Rôle", style="magenta", no_wrap=True)
        table.add_column("Description")
        table.add_column("Contact")
        for delegate in state.snapshot["delegates"]:
            table.add_row(
                _text(delegate.get("name")),
                _text(delegate.get("role")),
                _text(delegate.get("description")),
                _text(delegate.get("contact")),
            )
        self.console.print(table)
