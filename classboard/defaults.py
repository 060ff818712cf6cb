"""
Built-in directory data.

Used when the backend returns no teachers or delegates, and as the last
resort when neither the backend nor a fresh cache is available.
"""

from __future__ import annotations

from typing import Any

from classboard.model import Snapshot, empty_snapshot


def default_teachers() -> list[dict[str, Any]]:
    return [
        {
            "_id": "math",
            "name": "M. Islambuli",
            "subjects": [{"name": "Mathématiques"}],
            "phone": "+961123456789",
            "email": "islambuli@example.com",
            "photo": "placeholder-teacher.jpg",
        },
    ]


def default_delegates() -> list[dict[str, Any]]:
    return [
        {
            "_id": "delegate1",
            "name": "Keagan Estephan",
            "role": "Délégué(e)",
            "description": (
                "Représentant principal de la classe, responsable de la communication "
                "avec les professeurs et de la coordination des activités."
            ),
            "contact": "https://wa.me/123456789",
            "photo": "placeholder-delegate.jpg",
        },
        {
            "_id": "delegate2",
            "name": "Julien Bassil",
            "role": "Sous-Délégué(e)",
            "description": (
                "Assiste le délégué principal et le remplace en cas d'absence. "
                "Responsable de la gestion des documents de classe."
            ),
            "contact": "https://wa.me/123456790",
            "photo": "placeholder-delegate.jpg",
        },
        {
            "_id": "delegate3",
            "name": "Andrew Zein",
            "role": "Éco-Délégué(e)",
            "description": (
                "Responsable des initiatives écologiques de la classe et de la "
                "sensibilisation aux enjeux environnementaux."
            ),
            "contact": "https://wa.me/123456791",
            "photo": "placeholder-delegate.jpg",
        },
    ]


def default_snapshot() -> Snapshot:
    """
    Snapshot shown when nothing better is available:
    directory defaults for teachers/delegates, everything else empty.
    """
    snapshot = empty_snapshot()
    snapshot["teachers"] = default_teachers()
    snapshot["delegates"] = default_delegates()
    return snapshot
