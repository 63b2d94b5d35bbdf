"""
Tests for the CUPS to center mapping store
"""
import unittest
import os
import sys
import tempfile
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from cups_store import COLUMNS, CupsCenterMapping, CupsStore, normalize_cups


class TestCupsStore(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(prefix="cups_test_"))
        self.csv_path = self.test_dir / "cups_center" / "cups.csv"
        self.store = CupsStore(str(self.csv_path))

    def tearDown(self):
        import shutil
        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    def test_missing_file_is_empty(self):
        self.assertEqual(self.store.load_mappings(), [])
        self.assertEqual(self.store.centers_per_cups(), {})

    def test_normalize_cups(self):
        self.assertEqual(normalize_cups(" es 0021 0000 "), "es00210000")

    def test_add_sorts_by_center_and_renumbers(self):
        self.store.add_mapping(CupsCenterMapping("ES002", "Zaragoza", marketer="Endesa"))
        self.store.add_mapping(CupsCenterMapping("ES001", "almería", marketer="Iberdrola"))
        saved = self.store.add_mapping(CupsCenterMapping("ES003", "Bilbao"))

        self.assertEqual([m.center_name for m in saved], ["almería", "Bilbao", "Zaragoza"])
        self.assertEqual([m.id for m in saved], [1, 2, 3])

        loaded = self.store.load_mappings()
        self.assertEqual([(m.id, m.cups) for m in loaded], [(1, "ES001"), (2, "ES003"), (3, "ES002")])

        header = self.csv_path.read_text(encoding='utf-8').splitlines()[0]
        self.assertEqual(header.split(','), COLUMNS)

    def test_add_replaces_same_cups_and_center(self):
        self.store.add_mapping(CupsCenterMapping("ES001", "Madrid", marketer="Iberdrola"))
        saved = self.store.add_mapping(CupsCenterMapping("es001", "MADRID", marketer="Endesa"))
        self.assertEqual(len(saved), 1)
        self.assertEqual(saved[0].marketer, "Endesa")

    def test_add_requires_cups_and_center(self):
        with self.assertRaises(ValueError):
            self.store.add_mapping(CupsCenterMapping("", "Madrid"))
        with self.assertRaises(ValueError):
            self.store.add_mapping(CupsCenterMapping("ES001", "  "))

    def test_delete_mapping(self):
        self.store.add_mapping(CupsCenterMapping("ES001", "Madrid"))
        self.store.add_mapping(CupsCenterMapping("ES002", "Sevilla"))
        self.assertTrue(self.store.delete_mapping("es001", "madrid"))
        self.assertFalse(self.store.delete_mapping("ES001", "Madrid"))

        remaining = self.store.load_mappings()
        self.assertEqual([(m.id, m.center_name) for m in remaining], [(1, "Sevilla")])

    def test_centers_per_cups_and_marketer(self):
        self.store.add_mapping(CupsCenterMapping("ES001", "Madrid Norte", marketer=""))
        self.store.add_mapping(CupsCenterMapping("ES001", "Madrid Sur", marketer="Iberdrola"))
        self.store.add_mapping(CupsCenterMapping("ES002", "Sevilla", marketer="Endesa"))

        self.assertEqual(self.store.centers_per_cups(), {"es001": 2, "es002": 1})
        self.assertEqual(self.store.cups_to_marketer(), {"es001": "Iberdrola", "es002": "Endesa"})

    def test_file_without_header_or_trailing_columns(self):
        self.csv_path.parent.mkdir(parents=True)
        self.csv_path.write_text("7,ES009,Naturgy,Valencia\n\n8,,Endesa,Sin cups\n",
                                 encoding='utf-8')
        mappings = self.store.load_mappings()
        self.assertEqual(len(mappings), 1)
        self.assertEqual(mappings[0].id, 7)
        self.assertEqual(mappings[0].center_name, "Valencia")
        self.assertEqual(mappings[0].marketer, "Naturgy")
        self.assertEqual(mappings[0].province, "")


if __name__ == '__main__':
    unittest.main(verbosity=2)
