"""
Tests for the per-year emission factor store
"""
import unittest
import os
import sys
import tempfile
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from factor_store import (ElectricityGeneralFactors, FactorStore, FuelFactorEntry, GasFactorEntry,
                          RefrigerantFactorEntry, TradingCompanyFactor, build_factor_entry)


class TestFactorStore(unittest.TestCase):
    """Load, upsert and delete factor rows on disk"""

    def setUp(self):
        self.base_dir = Path(tempfile.mkdtemp(prefix="factors_test_"))
        self.store = FactorStore(str(self.base_dir))

    def tearDown(self):
        import shutil
        if self.base_dir.exists():
            shutil.rmtree(self.base_dir)

    def test_missing_file_gives_empty_table(self):
        self.assertEqual(self.store.load_factors('gas', 2024), {})
        self.assertEqual(self.store.available_years(), [])

    def test_unknown_energy_type(self):
        with self.assertRaises(ValueError):
            self.store.load_factors('water', 2024)

    def test_save_and_load_trading_company(self):
        self.store.save_factor(TradingCompanyFactor("Iberdrola", 2024, 0.25, "renovable"))
        factors = self.store.load_factors('electricity', 2024)
        self.assertEqual(list(factors), ['iberdrola'])
        self.assertAlmostEqual(factors['iberdrola'].emission_factor, 0.25)
        self.assertEqual(factors['iberdrola'].gdo_type, "renovable")

    def test_upsert_matches_normalized_key(self):
        self.store.save_factor(GasFactorEntry("Gas Natural", 2024, 0.18, 0.2))
        self.store.save_factor(GasFactorEntry("  GAS NATURAL ", 2024, 0.19, 0.21))
        factors = self.store.load_factors('gas', 2024)
        self.assertEqual(len(factors), 1)
        self.assertAlmostEqual(factors['gas natural'].market_factor, 0.19)

    def test_rows_are_written_sorted_by_key(self):
        for name in ("R-410A", "R-134a", "R-32"):
            self.store.save_factor(RefrigerantFactorEntry(name, 2024, 1000))
        text = self.store.factor_path('refrigerant', 2024).read_text(encoding='utf-8')
        names = [line.split(',')[0] for line in text.splitlines()[1:]]
        self.assertEqual(names, ["R-134a", "R-32", "R-410A"])

    def test_negative_factor_is_rejected(self):
        with self.assertRaises(ValueError):
            self.store.save_factor(RefrigerantFactorEntry("R-32", 2024, -1))
        self.assertFalse(self.store.factor_path('refrigerant', 2024).exists())

    def test_fuel_key_includes_vehicle(self):
        self.store.save_factor(FuelFactorEntry("Diésel", 2024, 2.6, "Turismo"))
        self.store.save_factor(FuelFactorEntry("Diésel", 2024, 2.7))
        factors = self.store.load_factors('fuel', 2024)
        self.assertIn(FuelFactorEntry.make_key("diésel", "turismo"), factors)
        self.assertIn("diésel", factors)

        removed = self.store.delete_factor('fuel', 2024, "DIÉSEL|Turismo")
        self.assertEqual(removed, 1)
        self.assertEqual(list(self.store.load_factors('fuel', 2024)), ["diésel"])

    def test_delete_missing_entity(self):
        self.store.save_factor(RefrigerantFactorEntry("R-32", 2024, 675))
        self.assertEqual(self.store.delete_factor('refrigerant', 2024, "R-404A"), 0)
        self.assertEqual(self.store.delete_factor('refrigerant', 2024, " r-32 "), 1)

    def test_malformed_rows_are_skipped(self):
        path = self.store.factor_path('refrigerant', 2024)
        path.parent.mkdir(parents=True)
        path.write_text("refrigerantType,pca\nR-32,675\nR-404A,abc\n,100\nR-410A,\"2.088\"\n",
                        encoding='utf-8')
        factors = self.store.load_factors('refrigerant', 2024)
        self.assertEqual(sorted(factors), ["r-32", "r-410a"])
        self.assertAlmostEqual(factors["r-410a"].pca, 2.088)

    def test_general_factors_default_to_zero(self):
        general = self.store.load_general_factors(2024)
        self.assertEqual(general.location_based_factor, 0.0)
        self.assertEqual(general.trading_companies, [])

    def test_general_factors_round_trip(self):
        general = ElectricityGeneralFactors(2024, mix_without_gdo=0.3, location_based_factor=0.12)
        general.add_trading_company(TradingCompanyFactor("Endesa", 2024, 0.2))
        general.add_trading_company(TradingCompanyFactor("ENDESA", 2024, 0.22))
        general.add_trading_company(TradingCompanyFactor("Naturgy", 2024, 0.3))
        self.store.save_general_factors(general)

        loaded = self.store.load_general_factors(2024)
        self.assertAlmostEqual(loaded.mix_without_gdo, 0.3)
        self.assertAlmostEqual(loaded.location_based_factor, 0.12)
        companies = {c.key: c.emission_factor for c in loaded.trading_companies}
        self.assertEqual(companies, {'endesa': 0.22, 'naturgy': 0.3})

        self.assertTrue(loaded.remove_trading_company(" endesa"))
        self.assertFalse(loaded.remove_trading_company("Endesa"))

    def test_available_years_newest_first(self):
        self.store.save_factor(RefrigerantFactorEntry("R-32", 2023, 675))
        self.store.save_factor(GasFactorEntry("Gas Natural", 2024, 0.18, 0.2))
        (self.base_dir / "notes").mkdir()
        self.assertEqual(self.store.available_years(), [2024, 2023])
        self.assertEqual(self.store.available_years('gas'), [2024])


class TestBuildFactorEntry(unittest.TestCase):
    """Entries built from form and command-line values"""

    def test_text_numbers_are_parsed(self):
        entry = build_factor_entry('electricity', 2024, {'entity': 'Iberdrola', 'factor': '0,25'})
        self.assertIsInstance(entry, TradingCompanyFactor)
        self.assertAlmostEqual(entry.emission_factor, 0.25)

    def test_gas_location_defaults_to_zero(self):
        entry = build_factor_entry('gas', 2024, {'entity': 'Gas Natural', 'factor': 0.18,
                                                 'location_factor': ''})
        self.assertEqual(entry.location_factor, 0.0)

    def test_fuel_optional_fields(self):
        entry = build_factor_entry('fuel', 2024, {'entity': 'Gasolina', 'factor': '2.3',
                                                  'vehicle_type': 'Furgoneta', 'price_per_unit': None})
        self.assertEqual(entry.key, 'gasolina|furgoneta')
        self.assertIsNone(entry.price_per_unit)

    def test_missing_or_invalid_factor(self):
        with self.assertRaises(ValueError):
            build_factor_entry('refrigerant', 2024, {'entity': 'R-32'})
        with self.assertRaises(ValueError):
            build_factor_entry('refrigerant', 2024, {'entity': 'R-32', 'factor': 'n/a'})
        with self.assertRaises(ValueError):
            build_factor_entry('water', 2024, {'entity': 'x', 'factor': 1})


if __name__ == '__main__':
    unittest.main(verbosity=2)
