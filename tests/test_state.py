"""
Unit tests for the state reducer.

The reducer must return new states and never touch the old one.
"""

import unittest
from datetime import date, datetime, timezone

from classboard.defaults import default_snapshot
from classboard.model import empty_snapshot
from classboard.state import (
    AppState,
    ChangeMonth,
    CloseModal,
    ConnectivityChanged,
    DataLoaded,
    DismissBanner,
    Navigate,
    SelectDay,
    SelectTeacher,
    SwitchView,
    find_teacher,
    reduce,
)


class TestReduce(unittest.TestCase):
    def setUp(self) -> None:
        self.state = AppState(current_date=date(2024, 1, 31))

    def test_navigate_closes_details(self) -> None:
        opened = reduce(self.state, SelectDay(date(2024, 1, 5)))
        moved = reduce(opened, Navigate("news"))
        self.assertEqual(moved.page, "news")
        self.assertIsNone(moved.selected_day)
        # previous state untouched
        self.assertEqual(opened.selected_day, date(2024, 1, 5))

    def test_navigate_unknown_page(self) -> None:
        with self.assertRaises(ValueError):
            reduce(self.state, Navigate("admin"))

    def test_change_month(self) -> None:
        nxt = reduce(self.state, ChangeMonth(1))
        self.assertEqual(nxt.current_date, date(2024, 2, 29))
        back = reduce(nxt, ChangeMonth(-2))
        self.assertEqual(back.current_date, date(2023, 12, 29))

    def test_switch_view(self) -> None:
        self.assertEqual(reduce(self.state, SwitchView("week")).view, "week")
        with self.assertRaises(ValueError):
            reduce(self.state, SwitchView("year"))

    def test_day_and_teacher_details_exclude_each_other(self) -> None:
        s = reduce(self.state, SelectDay(date(2024, 1, 5)))
        s = reduce(s, SelectTeacher("math"))
        self.assertEqual(s.selected_teacher, "math")
        self.assertIsNone(s.selected_day)
        s = reduce(s, CloseModal())
        self.assertIsNone(s.selected_teacher)

    def test_data_loaded_swaps_snapshot_and_banner(self) -> None:
        stamp = datetime(2024, 1, 31, 7, 0, tzinfo=timezone.utc)
        snapshot = default_snapshot()
        s = reduce(self.state, DataLoaded(snapshot, used_fallback=True, last_updated=stamp))
        self.assertIs(s.snapshot, snapshot)
        self.assertTrue(s.banner_visible)
        self.assertEqual(s.last_updated, stamp)

        fresh = reduce(s, DataLoaded(empty_snapshot(), used_fallback=False))
        self.assertFalse(fresh.used_fallback)
        self.assertFalse(fresh.banner_visible)
        # no stamp means no cache entry behind the data
        self.assertIsNone(fresh.last_updated)

    def test_going_offline_shows_banner(self) -> None:
        s = reduce(self.state, ConnectivityChanged(False))
        self.assertFalse(s.online)
        self.assertTrue(s.used_fallback)
        self.assertTrue(s.banner_visible)

        s = reduce(s, ConnectivityChanged(True))
        self.assertTrue(s.online)
        self.assertTrue(s.banner_visible)

        self.assertFalse(reduce(s, DismissBanner()).banner_visible)

    def test_unknown_action(self) -> None:
        with self.assertRaises(TypeError):
            reduce(self.state, "refresh")


class TestFindTeacher(unittest.TestCase):
    def test_by_id_then_by_name(self) -> None:
        snapshot = empty_snapshot()
        snapshot["teachers"] = [{"_id": "t1", "name": "A"}, {"name": "B"}]
        self.assertEqual(find_teacher(snapshot, "t1")["name"], "A")
        self.assertEqual(find_teacher(snapshot, "B"), {"name": "B"})
        self.assertIsNone(find_teacher(snapshot, "A"))


if __name__ == "__main__":
    unittest.main()
