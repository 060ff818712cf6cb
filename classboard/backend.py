"""
Content backend (Sanity) client.

Each category is one GROQ query against the public query API. The seven
queries of a refresh run concurrently and are awaited as one group: if any
of them fails the whole refresh fails, and the caller falls back to cache.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import requests

from classboard.config import Settings
from classboard.defaults import default_delegates, default_teachers
from classboard.model import CATEGORIES, Snapshot

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

# Backend document types are French; projections use the project's field names.
CATEGORY_QUERIES: dict[str, str] = {
    "homework": """*[_type == "devoir"]{
        _id,
        title,
        description,
        date,
        "subject": matiere->{name},
        "teacher": teacher->{name}
    }""",
    "exams": """*[_type == "examen"]{
        _id,
        title,
        description,
        date,
        "subject": matiere->{name},
        "teacher": teacher->{name}
    }""",
    "events": """*[_type == "evenement"]{
        _id,
        title,
        description,
        date,
        location
    }""",
    "news": """*[_type == "actualite"] | order(date desc){
        _id,
        title,
        content,
        date,
        "image": image.asset->url
    }""",
    "teachers": """*[_type == "professeur"]{
        _id,
        name,
        subjects[]->{name},
        phone,
        email,
        "photo": photo.asset->url
    }""",
    "delegates": """*[_type == "delegue"]{
        _id,
        name,
        role,
        description,
        contact,
        "photo": photo.asset->url
    }""",
    "subjects": """*[_type == "matiere"]{
        _id,
        name
    }""",
}


class FetchFailure(Exception):
    """A category could not be fetched from the backend."""

    def __init__(self, category: str, reason: str) -> None:
        super().__init__(f"{category}: {reason}")
        self.category = category
        self.reason = reason


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class SanityClient:
    def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
        self.settings = settings
        self.session = session or requests.Session()

    def query_url(self) -> str:
        s = self.settings
        host = "apicdn.sanity.io" if s.use_cdn else "api.sanity.io"
        return f"https://{s.project_id}.{host}/v{s.api_version}/data/query/{s.dataset}"

    def query(self, groq: str, category: str = "query") -> list[dict[str, Any]]:
        """
        Run one GROQ query and return its result list.

        Raises FetchFailure for transport errors, HTTP errors and
        responses that do not carry a list result.
        """
        try:
            resp = self.session.get(self.query_url(), params={"query": groq}, timeout=self.settings.timeout)
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as exc:
            raise FetchFailure(category, str(exc)) from exc
        except ValueError as exc:
            # invalid JSON body
            raise FetchFailure(category, "response is not JSON") from exc

        result = body.get("result") if isinstance(body, dict) else None
        if not isinstance(result, list):
            raise FetchFailure(category, "response has no result list")
        return result

    async def fetch_category(self, name: str) -> list[dict[str, Any]]:
        groq = CATEGORY_QUERIES[name]
        records = await asyncio.to_thread(self.query, groq, name)
        logger.debug("Fetched %d %s", len(records), name)
        return records


# ---------------------------------------------------------------------------
# Fetch group
# ---------------------------------------------------------------------------


async def fetch_snapshot(fetch_category: Callable[[str], Awaitable[list[dict[str, Any]]]]) -> Snapshot:
    """
    Fetch all categories concurrently and merge them into one snapshot.

    Any failing category fails the whole group; no partial snapshot is built.
    """
    results = await asyncio.gather(*(fetch_category(name) for name in CATEGORIES))
    snapshot: Snapshot = dict(zip(CATEGORIES, (list(r or []) for r in results)))

    if not snapshot["teachers"]:
        snapshot["teachers"] = default_teachers()
    if not snapshot["delegates"]:
        snapshot["delegates"] = default_delegates()

    logger.info(
        "Data fetched: %s",
        ", ".join(f"{name}={len(snapshot[name])}" for name in CATEGORIES),
    )
    return snapshot
