"""
Online/offline signal.

The monitor only stores the flag and tells subscribers when it flips;
deciding what "online" means is up to whoever calls set_online()
(for the CLI: a quick probe of the backend host).
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import requests

logger = logging.getLogger(__name__)

Listener = Callable[[bool], None]


class ConnectivityMonitor:
    def __init__(self, online: bool = True) -> None:
        self._online = online
        self._listeners: list[Listener] = []

    @property
    def online(self) -> bool:
        return self._online

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_online(self, online: bool) -> None:
        if online == self._online:
            return
        self._online = online
        logger.info("Connection %s", "restored" if online else "lost")
        for listener in list(self._listeners):
            listener(online)


def probe(url: str, session: Optional[requests.Session] = None, timeout: float = 5.0) -> bool:
    """
    True if url answers at all (any HTTP status), False on network errors.
    """
    http = session or requests
    try:
        http.head(url, timeout=timeout)
    except requests.RequestException:
        return False
    return True
