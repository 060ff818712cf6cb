"""
Local cache of the last successful backend snapshot.

The cache lives in a small key-value store (by default one JSON file):

    data/cache.json
        premiereC_cache            -> serialized snapshot
        premiereC_cache_timestamp  -> ISO-8601 time of the save

Design rationale:
- the snapshot and its timestamp are stored under separate keys, exactly
  like the web site kept them in localStorage
- a cache older than the TTL (24 hours) is ignored on load but never purged;
  the next successful fetch simply overwrites it
- reading never crashes the application, whatever is on disk
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Protocol

from classboard.model import CacheEntry, FetchOutcome, Snapshot, normalize_snapshot

logger = logging.getLogger(__name__)

CACHE_KEY = "premiereC_cache"
TIMESTAMP_KEY = "premiereC_cache_timestamp"

DEFAULT_TTL = timedelta(hours=24)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _default_store_path() -> Path:
    """
    Return the default path of the cache file inside the package.

    Using a function instead of a constant makes testing easier,
    because tests can override the path.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "cache.json"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """In-memory store, used by tests and by runs that must not touch disk."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """
    Key-value store backed by a single JSON object file.

    A missing or corrupted file reads as an empty store.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else _default_store_path()

    def _read_all(self) -> dict[str, Any]:
        # First run: file does not exist yet
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Ignoring unreadable cache file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def _parse_timestamp(text: str) -> Optional[datetime]:
    text = text.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        ts = datetime.fromisoformat(text)
    except ValueError:
        return None
    # naive timestamps are read as UTC
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


class CacheManager:
    """
    Owns persistence of the snapshot.

    The clock is injectable so tests can simulate the passage of time.
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] = utc_now,
        ttl: timedelta = DEFAULT_TTL,
    ) -> None:
        self.store = store
        self.clock = clock
        self.ttl = ttl

    def load_entry(self) -> Optional[CacheEntry]:
        """
        Read the cached snapshot together with its timestamp.

        Returns None if nothing is cached, if the stored data is malformed,
        or if the entry is older than the TTL.
        """
        raw = self.store.get(CACHE_KEY)
        stamp = self.store.get(TIMESTAMP_KEY)
        if raw is None or stamp is None:
            return None

        saved_at = _parse_timestamp(stamp)
        if saved_at is None:
            logger.warning("Ignoring cache with malformed timestamp %r", stamp)
            return None

        age = self.clock() - saved_at
        if age > self.ttl:
            logger.info("Cache is stale (saved %s), ignoring it", saved_at.isoformat())
            return None

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring cache with malformed payload")
            return None
        if not isinstance(payload, dict):
            return None

        return CacheEntry(snapshot=normalize_snapshot(payload), saved_at=saved_at)

    def load(self) -> Optional[Snapshot]:
        entry = self.load_entry()
        return entry.snapshot if entry is not None else None

    def save(self, snapshot: Snapshot) -> None:
        """
        Overwrite the cached snapshot and stamp the current time.
        """
        payload = normalize_snapshot(snapshot)
        self.store.set(CACHE_KEY, json.dumps(payload, ensure_ascii=False))
        self.store.set(TIMESTAMP_KEY, self.clock().isoformat())
        logger.debug("Saved snapshot to cache")

    async def fetch_or_fallback(
        self,
        fetch_fn: Callable[[], Awaitable[Snapshot]],
        defaults: Snapshot,
    ) -> FetchOutcome:
        """
        Fetch a fresh snapshot, falling back to the cache (or defaults) on failure.

        A failed fetch is not retried here; callers re-invoke on reconnect.
        Nothing is saved when the fetch fails. A cache that cannot be written
        does not turn a successful fetch into a failure.
        """
        try:
            snapshot = await fetch_fn()
        except Exception as exc:
            logger.warning("Fetching data failed, using cached data: %s", exc)
            cached = self.load()
            return FetchOutcome(snapshot=cached if cached is not None else defaults, used_fallback=True)

        snapshot = normalize_snapshot(snapshot)
        try:
            self.save(snapshot)
        except OSError as exc:
            logger.warning("Could not write the cache, keeping fresh data in memory only: %s", exc)
        return FetchOutcome(snapshot=snapshot, used_fallback=False)
