"""
Unit tests for French date formatting and directory helpers.

Output must not depend on the machine's locale.
"""

import unittest
from datetime import date

from classboard.formatting import FrenchDateFormatter, teacher_contact_link, teacher_subjects


class TestFrenchDateFormatter(unittest.TestCase):
    def setUp(self) -> None:
        self.fmt = FrenchDateFormatter()

    def test_format_date(self) -> None:
        self.assertEqual(self.fmt.format_date("2024-03-01"), "01/03/2024")
        self.assertEqual(self.fmt.format_date(date(2024, 12, 25)), "25/12/2024")
        self.assertEqual(self.fmt.format_date("garbage"), "")
        self.assertEqual(self.fmt.format_date(None), "")

    def test_full_date_and_month(self) -> None:
        self.assertEqual(self.fmt.format_full_date(date(2024, 3, 1)), "vendredi 1 mars 2024")
        self.assertEqual(self.fmt.format_month_year(date(2024, 8, 10)), "août 2024")

    def test_day_names_start_monday(self) -> None:
        self.assertEqual(self.fmt.format_day_name(date(2024, 3, 4)), "Lun")
        self.assertEqual(self.fmt.format_day_name(date(2024, 3, 10)), "Dim")

    def test_kind_labels(self) -> None:
        self.assertEqual(self.fmt.kind_label("homework"), "Devoir")
        self.assertEqual(self.fmt.kind_label("exam"), "Examen")
        self.assertEqual(self.fmt.kind_label("event"), "Événement")


class TestTeacherHelpers(unittest.TestCase):
    def test_subjects(self) -> None:
        self.assertEqual(teacher_subjects({"subjects": [{"name": "Maths"}, {"name": "Physique"}]}), "Maths, Physique")
        self.assertEqual(teacher_subjects({"subjects": []}), "Matière non spécifiée")
        self.assertEqual(teacher_subjects({}), "Matière non spécifiée")

    def test_contact_link_prefers_phone(self) -> None:
        teacher = {"phone": "+961 12 345 678", "email": "x@example.com"}
        self.assertEqual(teacher_contact_link(teacher), "https://wa.me/+96112345678")
        self.assertEqual(teacher_contact_link({"email": "x@example.com"}), "mailto:x@example.com")
        self.assertEqual(teacher_contact_link({}), "#")


if __name__ == "__main__":
    unittest.main()
