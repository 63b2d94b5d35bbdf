"""
Tests for the lenient cell parsers
"""
import unittest
import os
import sys
from datetime import date, datetime

import numpy as np

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from parsers import (format_cell_text, is_blank, normalize_key, normalize_label,
                     parse_date, parse_datetime, parse_double)


class TestParseDouble(unittest.TestCase):
    """Numbers written with either decimal separator"""

    def test_both_separators_last_one_is_decimal(self):
        self.assertAlmostEqual(parse_double("1.234,56"), 1234.56)
        self.assertAlmostEqual(parse_double("1,234.56"), 1234.56)

    def test_lone_comma(self):
        self.assertAlmostEqual(parse_double("21,5"), 21.5)
        self.assertEqual(parse_double("1,234"), 1234.0)
        self.assertEqual(parse_double("1,234,567"), 1234567.0)

    def test_lone_dot(self):
        self.assertAlmostEqual(parse_double("14.600"), 14.6)
        self.assertEqual(parse_double("1.234.567"), 1234567.0)

    def test_units_and_currency_are_ignored(self):
        self.assertEqual(parse_double("12 kWh"), 12.0)
        self.assertAlmostEqual(parse_double("€ 1.234,50"), 1234.5)

    def test_spaces_inside_number(self):
        self.assertAlmostEqual(parse_double("1 234,5"), 1234.5)

    def test_negative_values(self):
        self.assertAlmostEqual(parse_double("-150,25"), -150.25)

    def test_native_numbers(self):
        self.assertEqual(parse_double(42), 42.0)
        self.assertEqual(parse_double(np.float64(3.5)), 3.5)

    def test_unparseable_returns_none(self):
        self.assertIsNone(parse_double("abc"))
        self.assertIsNone(parse_double(""))
        self.assertIsNone(parse_double(None))
        self.assertIsNone(parse_double(float('nan')))
        self.assertIsNone(parse_double(True))


class TestParseDate(unittest.TestCase):

    def test_native_values(self):
        self.assertEqual(parse_date(date(2024, 3, 1)), date(2024, 3, 1))
        self.assertEqual(parse_date(datetime(2024, 3, 1, 10, 30)), date(2024, 3, 1))

    def test_excel_serial(self):
        self.assertEqual(parse_date(45292), date(2024, 1, 1))
        self.assertEqual(parse_date(45292.75), date(2024, 1, 1))

    def test_iso_and_compact(self):
        self.assertEqual(parse_date("2024-02-29"), date(2024, 2, 29))
        self.assertEqual(parse_date("2024-02-29T08:00:00"), date(2024, 2, 29))
        self.assertEqual(parse_date("20240131"), date(2024, 1, 31))

    def test_day_first_wins(self):
        self.assertEqual(parse_date("02/03/2024"), date(2024, 3, 2))
        self.assertEqual(parse_date("2.3.2024"), date(2024, 3, 2))

    def test_month_first_when_day_first_is_invalid(self):
        self.assertEqual(parse_date("03/25/2024"), date(2024, 3, 25))

    def test_two_digit_years(self):
        self.assertEqual(parse_date("15/06/24"), date(2024, 6, 15))
        self.assertEqual(parse_date("15/06/75"), date(1975, 6, 15))

    def test_invalid_values(self):
        self.assertIsNone(parse_date("31/02/2024"))
        self.assertIsNone(parse_date("not a date"))
        self.assertIsNone(parse_date(None))
        self.assertIsNone(parse_date(""))


class TestParseDatetime(unittest.TestCase):

    def test_plain_date_is_midnight(self):
        self.assertEqual(parse_datetime("05/01/2024"), datetime(2024, 1, 5))

    def test_iso_timestamp(self):
        self.assertEqual(parse_datetime("2024-01-05 17:45:00"), datetime(2024, 1, 5, 17, 45))

    def test_utc_suffix_is_converted_to_naive(self):
        self.assertEqual(parse_datetime("2024-01-05T17:45:00Z"), datetime(2024, 1, 5, 17, 45))


class TestTextHelpers(unittest.TestCase):

    def test_is_blank(self):
        self.assertTrue(is_blank(None))
        self.assertTrue(is_blank("    "))
        self.assertTrue(is_blank(float('nan')))
        self.assertFalse(is_blank(0))
        self.assertFalse(is_blank("x"))

    def test_normalize_key(self):
        self.assertEqual(normalize_key(" Iberdrola "), "iberdrola")
        self.assertEqual(normalize_key("IBERDROLA"), normalize_key("iberdrola"))
        self.assertEqual(normalize_key(None), "")

    def test_normalize_label_strips_accents(self):
        self.assertEqual(normalize_label("Nº Factura "), normalize_label("nº factura"))
        self.assertEqual(normalize_label("Fecha Conformidad"), "fecha conformidad")
        self.assertEqual(normalize_label("Tipo de vehículo"), "tipo de vehiculo")

    def test_format_cell_text(self):
        self.assertEqual(format_cell_text(1234.0), "1234")
        self.assertEqual(format_cell_text(12.5), "12.5")
        self.assertEqual(format_cell_text(datetime(2024, 1, 1)), "2024-01-01")
        self.assertEqual(format_cell_text("  A   B "), "A B")
        self.assertEqual(format_cell_text(None), "")

    def test_control_characters_removed(self):
        self.assertEqual(format_cell_text("Centro\x01A"), "CentroA")
        self.assertEqual(format_cell_text("\x00Madrid\x1f"), "Madrid")
        self.assertEqual(format_cell_text("Línea\tB"), "Línea B")


if __name__ == '__main__':
    unittest.main(verbosity=2)
