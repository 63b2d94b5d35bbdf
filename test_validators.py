"""
Tests for source file, mapping and factor form validation
"""
import unittest
import os
import sys
import tempfile
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import CarbonConfig
from mappings import create_mapping
from validators import FactorInputValidator, SourceFileValidator


class TestSourceFileValidator(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.test_dir = Path(tempfile.mkdtemp(prefix="validator_test_"))
        cls.config = CarbonConfig(str(cls.test_dir / "config.json"))
        cls.validator = SourceFileValidator(cls.config)
        cls.csv_path = cls.test_dir / "refrigerantes.csv"
        cls.csv_path.write_text("Centro;Factura;Proveedor;Fecha;Gas;Kg\nMadrid;R1;Frio SL;2024-05-05;R-32;2\n",
                                encoding='utf-8')

    @classmethod
    def tearDownClass(cls):
        import shutil
        if cls.test_dir.exists():
            shutil.rmtree(cls.test_dir)

    def test_file_path_checks(self):
        self.assertFalse(self.validator.validate_file_path('')[0])
        self.assertFalse(self.validator.validate_file_path(str(self.test_dir / "none.xlsx"))[0])
        self.assertFalse(self.validator.validate_file_path(str(self.test_dir))[0])

        text_file = self.test_dir / "notes.txt"
        text_file.write_text("x", encoding='utf-8')
        valid, message = self.validator.validate_file_path(str(text_file))
        self.assertFalse(valid)
        self.assertIn('Unsupported', message)

        self.assertTrue(self.validator.validate_file_path(str(self.csv_path))[0])

    def test_validate_sheet(self):
        self.assertTrue(self.validator.validate_sheet(str(self.csv_path), None)[0])
        self.assertTrue(self.validator.validate_sheet(str(self.csv_path), 'Sheet1')[0])
        self.assertFalse(self.validator.validate_sheet(str(self.csv_path), 'Hoja2')[0])

    def test_validate_mapping(self):
        mapping = create_mapping('refrigerant', {'center': 0, 'invoice_number': 1})
        valid, message = self.validator.validate_mapping(mapping)
        self.assertFalse(valid)
        self.assertIn('quantity', message)

        mapping = create_mapping('refrigerant', {'center': 0, 'invoice_number': 1, 'provider': 2,
                                                 'invoice_date': 3, 'refrigerant_type': 4, 'quantity': 9})
        valid, message = self.validator.validate_mapping(mapping, column_count=6)
        self.assertFalse(valid)
        self.assertIn('quantity', message)

    def test_run_full_validation(self):
        mapping = create_mapping('refrigerant', {'center': 0, 'invoice_number': 1, 'provider': 2,
                                                 'invoice_date': 3, 'refrigerant_type': 4, 'quantity': 5})
        results = self.validator.run_full_validation(str(self.csv_path), None, mapping)
        self.assertTrue(results['overall_valid'])
        self.assertEqual(set(results['validation_steps']), {'file_path', 'sheet', 'structure', 'mapping'})

        results = self.validator.run_full_validation(str(self.test_dir / "none.csv"), None, mapping)
        self.assertFalse(results['overall_valid'])
        self.assertEqual(list(results['validation_steps']), ['file_path'])


class TestFactorInputValidator(unittest.TestCase):

    def setUp(self):
        self.validator = FactorInputValidator()

    def test_validate_year(self):
        self.assertTrue(self.validator.validate_year('2024')[0])
        self.assertFalse(self.validator.validate_year('20x4')[0])
        self.assertFalse(self.validator.validate_year(1800)[0])

    def test_validate_factor_value(self):
        self.assertTrue(self.validator.validate_factor_value('factor', '0,25')[0])
        self.assertFalse(self.validator.validate_factor_value('factor', '')[0])
        self.assertFalse(self.validator.validate_factor_value('factor', '-1')[0])

    def test_validate_factor_fields(self):
        errors = self.validator.validate_factor_fields({'entity': ' ', 'factor': 'x'}, ['entity'], ['factor'])
        self.assertEqual(len(errors), 2)
        self.assertEqual(self.validator.validate_factor_fields({'entity': 'R-32', 'factor': '675'},
                                                               ['entity'], ['factor']), [])

    def test_validate_cups_mapping(self):
        self.assertTrue(self.validator.validate_cups_mapping('ES001', 'Madrid', 'Electricidad')[0])
        self.assertFalse(self.validator.validate_cups_mapping('', 'Madrid')[0])
        self.assertFalse(self.validator.validate_cups_mapping('ES001', '')[0])
        self.assertFalse(self.validator.validate_cups_mapping('ES001', 'Madrid', 'Agua')[0])


if __name__ == '__main__':
    unittest.main(verbosity=2)
