"""
Tests for pro-rating invoice periods into the reporting year
"""
import unittest
import os
import sys
from datetime import date

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from proration import (applicable_amount, applicable_percentage, days_inclusive,
                       overlap_days, period_overlaps_year)


class TestProration(unittest.TestCase):

    def test_days_are_inclusive(self):
        self.assertEqual(days_inclusive(date(2024, 1, 1), date(2024, 1, 1)), 1)
        self.assertEqual(days_inclusive(date(2024, 1, 1), date(2024, 12, 31)), 366)

    def test_period_inside_year_keeps_exact_amount(self):
        amount = applicable_amount(date(2024, 3, 1), date(2024, 3, 31), 1234.56, 2024)
        self.assertEqual(amount, 1234.56)

    def test_period_spanning_new_year(self):
        # 2023-12-17 .. 2024-01-15 is 30 days, 15 of them in 2024
        start, end = date(2023, 12, 17), date(2024, 1, 15)
        self.assertEqual(overlap_days(start, end, 2024), 15)
        self.assertAlmostEqual(applicable_amount(start, end, 300.0, 2024), 150.0)
        self.assertAlmostEqual(applicable_percentage(start, end, 2024), 50.0)

    def test_leap_day_is_counted(self):
        start, end = date(2024, 2, 1), date(2024, 3, 1)
        self.assertEqual(days_inclusive(start, end), 30)
        self.assertAlmostEqual(applicable_amount(date(2023, 12, 31), date(2024, 2, 29), 61.0, 2024), 60.0)

    def test_disjoint_period_is_zero(self):
        start, end = date(2023, 1, 1), date(2023, 1, 31)
        self.assertEqual(applicable_amount(start, end, 500.0, 2024), 0.0)
        self.assertFalse(period_overlaps_year(start, end, 2024))
        self.assertEqual(applicable_percentage(start, end, 2024), 0.0)

    def test_missing_or_reversed_dates_are_zero(self):
        self.assertEqual(applicable_amount(None, date(2024, 1, 31), 100.0, 2024), 0.0)
        self.assertEqual(applicable_amount(date(2024, 2, 1), date(2024, 1, 1), 100.0, 2024), 0.0)
        self.assertEqual(applicable_percentage(None, None, 2024), 0.0)

    def test_sign_is_preserved(self):
        start, end = date(2023, 12, 17), date(2024, 1, 15)
        self.assertAlmostEqual(applicable_amount(start, end, -300.0, 2024), -150.0)

    def test_single_day_period_keeps_amount(self):
        day = date(2025, 6, 15)
        self.assertEqual(days_inclusive(day, day), 1)
        self.assertEqual(applicable_amount(day, day, 1234.5, 2025), 1234.5)
        self.assertEqual(applicable_percentage(day, day, 2025), 100.0)

    def test_negative_full_year_is_exact(self):
        start, end = date(2025, 1, 1), date(2025, 12, 31)
        self.assertEqual(applicable_amount(start, end, -1200.0, 2025), -1200.0)

    def test_zero_amount(self):
        self.assertEqual(applicable_amount(date(2024, 1, 1), date(2024, 1, 31), 0, 2024), 0.0)


if __name__ == '__main__':
    unittest.main(verbosity=2)
