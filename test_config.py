"""
Tests for configuration, year selection and labels
"""
import unittest
import os
import sys
import json
import tempfile
from datetime import date
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import CarbonConfig, YearSettings
from labels import ENGLISH, SPANISH, Labels


class TestCarbonConfig(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.test_dir = Path(tempfile.mkdtemp(prefix="config_test_"))

    @classmethod
    def tearDownClass(cls):
        import shutil
        if cls.test_dir.exists():
            shutil.rmtree(cls.test_dir)

    def test_default_file_is_created(self):
        path = self.test_dir / "default.json"
        config = CarbonConfig(str(path))
        self.assertTrue(path.exists())
        self.assertEqual(config.get('export.no_center_label'), 'SIN_CENTRO')
        self.assertEqual(config.get('export.emission_divisor'), 1000)

    def test_custom_values_are_merged_with_defaults(self):
        path = self.test_dir / "custom.json"
        path.write_text(json.dumps({'export': {'no_center_label': 'SIN CENTRO'}}), encoding='utf-8')
        config = CarbonConfig(str(path))
        self.assertEqual(config.get('export.no_center_label'), 'SIN CENTRO')
        self.assertEqual(config.get('export.emission_divisor'), 1000)
        self.assertEqual(config.validate_config(), [])

    def test_invalid_json_falls_back_to_defaults(self):
        path = self.test_dir / "broken.json"
        path.write_text("{not json", encoding='utf-8')
        config = CarbonConfig(str(path))
        self.assertEqual(config.get('paths.output_dir'), 'output_reports')

    def test_get_and_set_dot_notation(self):
        config = CarbonConfig(str(self.test_dir / "set.json"))
        config.set('localization.language', 'en')
        config.set('custom.nested.value', 3)
        self.assertEqual(config.get('localization.language'), 'en')
        self.assertEqual(config.get('custom.nested.value'), 3)
        self.assertIsNone(config.get('missing.key'))
        self.assertEqual(config.get('missing.key', 'x'), 'x')

    def test_validate_config_reports_issues(self):
        config = CarbonConfig(str(self.test_dir / "invalid.json"))
        config.set('export.emission_divisor', 0)
        config.set('export.no_center_label', ' ')
        issues = config.validate_config()
        self.assertEqual(len(issues), 2)


class TestYearSettings(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(prefix="year_test_"))
        self.config = CarbonConfig(str(self.test_dir / "config.json"))
        self.year_file = self.test_dir / "year" / "current_year.txt"

    def tearDown(self):
        import shutil
        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    def test_defaults_to_current_calendar_year(self):
        settings = YearSettings(str(self.year_file), self.config)
        self.assertEqual(settings.load_current_year(), date.today().year)

    def test_save_and_reload(self):
        YearSettings(str(self.year_file), self.config).save_current_year(2023)
        self.assertEqual(self.year_file.read_text(encoding='utf-8'), "2023")
        self.assertEqual(YearSettings(str(self.year_file), self.config).current_year, 2023)

    def test_invalid_year_is_rejected(self):
        settings = YearSettings(str(self.year_file), self.config)
        with self.assertRaises(ValueError):
            settings.save_current_year(1800)
        self.assertFalse(settings.is_valid_year("abc"))
        self.assertTrue(settings.is_valid_year("2024"))

    def test_invalid_file_content_is_ignored(self):
        self.year_file.parent.mkdir(parents=True)
        self.year_file.write_text("twenty", encoding='utf-8')
        settings = YearSettings(str(self.year_file), self.config)
        self.assertEqual(settings.load_current_year(), date.today().year)


class TestLabels(unittest.TestCase):

    def test_spanish_sheet_names(self):
        labels = Labels(language='es', overrides={})
        self.assertEqual(labels.sheet_name('electricity', 'per_center'), 'Electricidad - Por centro')
        self.assertEqual(labels.sheet_name('fuel', 'detailed'), 'Combustibles - Extendido')

    def test_english_bundle_is_complete(self):
        self.assertEqual(set(ENGLISH) - set(SPANISH), set())
        self.assertEqual(set(SPANISH) - set(ENGLISH), set())
        labels = Labels(language='en', overrides={})
        self.assertEqual(labels.sheet_name('fuel', 'per_center'), 'Fuel - Per center')
        self.assertEqual(labels.get('per_center.market'), 'Total emissions tCO2 Market Based')

    def test_unknown_language_uses_spanish(self):
        labels = Labels(language='fr', overrides={})
        self.assertEqual(labels.sheet_name('gas', 'total'), 'Gas - Total')
        self.assertEqual(labels.get('per_center.market'), 'Total Emisiones tCO2 Market Based')

    def test_overrides_and_unknown_keys(self):
        labels = Labels(language='es', overrides={'module.gas': 'Gas natural'})
        self.assertEqual(labels.module_label('gas'), 'Gas natural')
        self.assertEqual(labels.get('no.such.key'), 'no.such.key')


if __name__ == '__main__':
    unittest.main(verbosity=2)
