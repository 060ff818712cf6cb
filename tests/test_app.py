"""
Tests for the application wiring: startup from cache, refresh, fallback,
reconnect, and user actions flowing through the reducer to the view.
"""

import asyncio
import unittest
from datetime import date, datetime, timedelta, timezone

from classboard.app import ClassSite
from classboard.backend import FetchFailure
from classboard.connectivity import ConnectivityMonitor
from classboard.defaults import default_snapshot
from classboard.model import CATEGORIES, empty_snapshot
from classboard.state import Navigate
from classboard.storage import CacheManager, MemoryStore

NOW = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


class RecordingView:
    def __init__(self) -> None:
        self.rendered = []

    def render(self, state) -> None:
        self.rendered.append(state)


def _fetcher(records=None, fail_on=None):
    records = records or {}

    async def fetch(name):
        if name == fail_on:
            raise FetchFailure(name, "rejected")
        return list(records.get(name, []))

    return fetch


class TestClassSite(unittest.TestCase):
    def setUp(self) -> None:
        self.cache = CacheManager(MemoryStore(), clock=lambda: NOW)

    def _site(self, fetch, monitor=None, view=None) -> ClassSite:
        return ClassSite(self.cache, fetch, view=view, monitor=monitor, today=lambda: date(2024, 3, 1))

    def test_start_without_cache_shows_defaults(self) -> None:
        site = self._site(_fetcher())
        state = site.start()
        self.assertEqual(state.snapshot, default_snapshot())
        self.assertFalse(state.banner_visible)
        self.assertEqual(state.current_date, date(2024, 3, 1))

    def test_start_with_cache(self) -> None:
        cached = empty_snapshot()
        cached["news"] = [{"_id": "n1", "title": "Sortie"}]
        self.cache.save(cached)

        state = self._site(_fetcher()).start()
        self.assertEqual(state.snapshot, cached)
        self.assertEqual(state.last_updated, NOW)

    def test_start_offline_shows_banner(self) -> None:
        state = self._site(_fetcher(), monitor=ConnectivityMonitor(online=False)).start()
        self.assertTrue(state.banner_visible)

    def test_refresh_success_updates_state_and_cache(self) -> None:
        site = self._site(_fetcher({"homework": [{"_id": "h1", "title": "H", "date": "2024-03-04"}]}))
        site.start()
        outcome = asyncio.run(site.refresh())

        self.assertFalse(outcome.used_fallback)
        self.assertEqual(site.state.snapshot["homework"][0]["_id"], "h1")
        self.assertEqual(self.cache.load(), site.state.snapshot)
        self.assertEqual(set(site.state.snapshot), set(CATEGORIES))

    def test_refresh_failure_keeps_previous_cache(self) -> None:
        cached = empty_snapshot()
        cached["exams"] = [{"_id": "e1", "title": "Bac blanc", "date": "2024-03-10"}]
        self.cache.save(cached)

        site = self._site(_fetcher({"exams": [{"_id": "new"}]}, fail_on="news"))
        site.start()
        outcome = asyncio.run(site.refresh())

        self.assertTrue(outcome.used_fallback)
        self.assertEqual(site.state.snapshot, cached)
        self.assertTrue(site.state.banner_visible)
        self.assertEqual(self.cache.load(), cached)
        self.assertEqual(site.state.last_updated, NOW)

    def test_refresh_failure_with_stale_cache_uses_defaults(self) -> None:
        clock = {"now": NOW}
        self.cache = CacheManager(MemoryStore(), clock=lambda: clock["now"])
        self.cache.save(empty_snapshot())
        site = self._site(_fetcher(fail_on="teachers"))
        site.start()
        self.assertEqual(site.state.last_updated, NOW)

        clock["now"] = NOW + timedelta(days=2)
        asyncio.run(site.refresh())
        self.assertEqual(site.state.snapshot, default_snapshot())
        self.assertIsNone(site.state.last_updated)

    def test_reconnect_triggers_refresh(self) -> None:
        monitor = ConnectivityMonitor(online=False)
        site = self._site(_fetcher({"subjects": [{"_id": "s1", "name": "Maths"}]}), monitor=monitor)
        site.start()
        self.assertTrue(site.state.banner_visible)

        monitor.set_online(True)

        self.assertTrue(site.state.online)
        self.assertFalse(site.state.banner_visible)
        self.assertEqual(site.state.snapshot["subjects"], [{"_id": "s1", "name": "Maths"}])

    def test_reconnect_inside_running_loop_schedules_refresh(self) -> None:
        monitor = ConnectivityMonitor(online=False)
        site = self._site(_fetcher({"subjects": [{"_id": "s1", "name": "Maths"}]}), monitor=monitor)
        site.start()

        async def scenario():
            monitor.set_online(True)
            # let the scheduled refresh run
            for _ in range(10):
                await asyncio.sleep(0)
                if site.state.snapshot["subjects"]:
                    break
            await asyncio.sleep(0.05)

        asyncio.run(scenario())
        self.assertEqual(site.state.snapshot["subjects"], [{"_id": "s1", "name": "Maths"}])

    def test_going_offline_shows_banner(self) -> None:
        monitor = ConnectivityMonitor(online=True)
        site = self._site(_fetcher(), monitor=monitor)
        site.start()
        monitor.set_online(False)
        self.assertTrue(site.state.banner_visible)
        self.assertFalse(site.state.online)

    def test_user_action_renders_new_state(self) -> None:
        view = RecordingView()
        site = self._site(_fetcher(), view=view)
        site.start()
        state = site.on_user_action(Navigate("calendar"))
        self.assertEqual(state.page, "calendar")
        self.assertEqual(view.rendered, [state])

    def test_close_unsubscribes(self) -> None:
        monitor = ConnectivityMonitor(online=True)
        site = self._site(_fetcher(), monitor=monitor)
        site.start()
        site.close()
        monitor.set_online(False)
        self.assertFalse(site.state.banner_visible)


if __name__ == "__main__":
    unittest.main()
