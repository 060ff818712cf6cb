"""
Application wiring.

ClassSite ties the pieces together:

    backend fetch -> CacheManager.fetch_or_fallback -> DataLoaded -> reduce -> view.render

It owns the current AppState and is the only place where it is replaced.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Awaitable, Callable, Optional

from classboard.backend import fetch_snapshot
from classboard.connectivity import ConnectivityMonitor
from classboard.defaults import default_snapshot
from classboard.model import FetchOutcome
from classboard.state import Action, AppState, ConnectivityChanged, DataLoaded, reduce
from classboard.storage import CacheManager
from classboard.views import View

logger = logging.getLogger(__name__)

FetchCategory = Callable[[str], Awaitable[list[dict[str, Any]]]]


class ClassSite:
    def __init__(
        self,
        cache: CacheManager,
        fetch_category: FetchCategory,
        view: Optional[View] = None,
        monitor: Optional[ConnectivityMonitor] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.cache = cache
        self.fetch_category = fetch_category
        self.view = view
        self.monitor = monitor or ConnectivityMonitor()
        self._state = AppState(current_date=today())
        self._pending: set[asyncio.Task] = set()
        self._unsubscribe = self.monitor.subscribe(self._on_connectivity)

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action: Action) -> AppState:
        self._state = reduce(self._state, action)
        return self._state

    def start(self) -> AppState:
        """
        Show whatever is cached (or the defaults) before the first fetch.
        """
        entry = self.cache.load_entry()
        if entry is not None:
            logger.info("Loaded cached data from %s", entry.saved_at.isoformat())
            self.dispatch(DataLoaded(entry.snapshot, used_fallback=False, last_updated=entry.saved_at))
        else:
            self.dispatch(DataLoaded(default_snapshot(), used_fallback=False))

        if not self.monitor.online:
            self.dispatch(ConnectivityChanged(False))
        return self._state

    async def refresh(self) -> FetchOutcome:
        """
        Fetch everything; on failure keep the app usable with cached data.
        """
        outcome = await self.cache.fetch_or_fallback(
            lambda: fetch_snapshot(self.fetch_category),
            default_snapshot(),
        )
        if not outcome.used_fallback:
            last_updated = self.cache.clock()
        else:
            # no stamp when the fallback is the built-in defaults
            entry = self.cache.load_entry()
            last_updated = entry.saved_at if entry is not None else None
        self.dispatch(DataLoaded(outcome.snapshot, outcome.used_fallback, last_updated))
        return outcome

    def on_user_action(self, action: Action) -> AppState:
        state = self.dispatch(action)
        if self.view is not None:
            self.view.render(state)
        return state

    def _on_connectivity(self, online: bool) -> None:
        self.dispatch(ConnectivityChanged(online))
        if not online:
            return

        logger.info("Connection restored, fetching data...")
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.refresh())
            return
        task = loop.create_task(self.refresh())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def close(self) -> None:
        self._unsubscribe()
