from __future__ import annotations

import asyncio
from datetime import date
from typing import Callable, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from classboard.app import ClassSite
from classboard.state import (
    Action,
    ChangeMonth,
    CloseModal,
    DismissBanner,
    Navigate,
    SelectDay,
    SelectTeacher,
    SwitchView,
)

console = Console()

MENU = (
    "\n[1] Accueil  [2] Calendrier  [3] Actualités  [4] Professeurs  [5] Délégués\n"
    "[p] Mois précédent  [n] Mois suivant  [v] Vue mois/semaine  [d] Détails d'un jour\n"
    "[t] Détails d'un professeur  [x] Fermer les détails  [b] Masquer le bandeau  [r] Actualiser  [0] Quitter\n"
    "Choix: "
)

PAGE_KEYS = {"1": "home", "2": "calendar", "3": "news", "4": "teachers", "5": "delegates"}


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    return console.input(msg)


def run_interactive(
    site: ClassSite,
    prompt: Callable[[str], str] = _prompt,
    check_online: Optional[Callable[[], bool]] = None,
) -> None:
    """
    Interactive menu loop. Each choice becomes one action for the site,
    which re-renders the page.
    """
    if site.view is not None:
        site.view.render(site.state)

    while True:
        choice = prompt(MENU).strip().lower()

        if choice == "0":
            _println("Au revoir.")
            return

        if choice == "r":
            _flow_refresh(site, check_online)
            if site.view is not None:
                site.view.render(site.state)
            continue

        action = _action_for(choice, site, prompt)
        if action is None:
            # d/t already explained why nothing happened
            if choice not in ("d", "t"):
                _println("Choix invalide.")
            continue

        site.on_user_action(action)


def _action_for(choice: str, site: ClassSite, prompt: Callable[[str], str]) -> Optional[Action]:
    if choice in PAGE_KEYS:
        return Navigate(PAGE_KEYS[choice])
    if choice == "p":
        return ChangeMonth(-1)
    if choice == "n":
        return ChangeMonth(1)
    if choice == "v":
        return SwitchView("week" if site.state.view == "month" else "month")
    if choice == "x":
        return CloseModal()
    if choice == "b":
        return DismissBanner()
    if choice == "d":
        return _flow_pick_day(prompt)
    if choice == "t":
        return _flow_pick_teacher(site, prompt)
    return None


def _flow_pick_day(prompt: Callable[[str], str]) -> Optional[Action]:
    raw = prompt("Date (AAAA-MM-JJ) [vide = retour]: ").strip()
    if not raw:
        return None
    try:
        return SelectDay(date.fromisoformat(raw))
    except ValueError:
        _println("Date invalide.")
        return None


def _flow_pick_teacher(site: ClassSite, prompt: Callable[[str], str]) -> Optional[Action]:
    teachers = site.state.snapshot["teachers"]
    if not teachers:
        _println("Aucun professeur.")
        return None

    table = Table(title="Professeurs", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Nom")
    for i, teacher in enumerate(teachers, start=1):
        table.add_row(str(i), str(teacher.get("name") or ""))
    console.print(table)

    pick = prompt("Numéro [vide = retour]: ").strip()
    if not pick:
        return None
    if not pick.isdigit():
        _println("Ce n'est pas un nombre.")
        return None
    i = int(pick)
    if not (1 <= i <= len(teachers)):
        _println("Hors limites.")
        return None

    teacher = teachers[i - 1]
    return SelectTeacher(str(teacher.get("_id") or teacher.get("name") or ""))


def _flow_refresh(site: ClassSite, check_online: Optional[Callable[[], bool]]) -> None:
    was_online = site.monitor.online
    online = check_online() if check_online is not None else True
    # coming back online triggers a refresh through the monitor
    site.monitor.set_online(online)
    if online and was_online:
        asyncio.run(site.refresh())

    if site.state.used_fallback:
        _println("Connexion impossible, données en cache affichées.")
    else:
        _println("Données actualisées.")
