"""
Tests for the combined, results and summary reports
"""
import unittest
import os
import sys
import tempfile
from pathlib import Path

from openpyxl import Workbook, load_workbook

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import CarbonConfig
from cups_store import CupsStore
from exporter_interface import ExportRequest, export_general_report_headless
from factor_store import ElectricityGeneralFactors, FactorStore, FuelFactorEntry, TradingCompanyFactor
from labels import Labels
from mappings import create_mapping
from src.exporters.general_report import (GeneralReportExporter, find_column_index_by_keywords,
                                          is_diagnostic_sheet_name, make_unique_sheet_name,
                                          prefixed_sheet_name, rewrite_sheet_references)
from src.exporters.module_exporter import ModuleExporter

ELECTRICITY_ROWS = [
    'CUPS;Factura;Emision;Inicio;Fin;Consumo;Centro;Comercializadora',
    'ES001;F1;2024-02-01;2024-01-01;2024-01-31;1000;Madrid;Iberdrola',
    'ES002;F2;2024-03-01;2024-02-01;2024-02-29;400;Sevilla;Endesa',
]

FUEL_ROWS = [
    'Centro;Responsable;Factura;Proveedor;Fecha;Combustible;Vehiculo;Importe',
    'Madrid;Ana;C1;Repsol;2024-03-15;Diésel;Turismo;50',
    'Bilbao;Luis;C2;BP;2024-06-02;Diésel;Camión;30',
]


class TestSheetNameHelpers(unittest.TestCase):

    def test_prefixed_sheet_name(self):
        self.assertEqual(prefixed_sheet_name('Gas', 'Total'), 'Gas - Total')
        self.assertEqual(prefixed_sheet_name('Electricidad', 'Electricidad - Total'), 'Electricidad - Total')
        self.assertEqual(prefixed_sheet_name('Electricidad', 'ELECTRICIDAD Por centro'),
                         'ELECTRICIDAD Por centro')

    def test_make_unique_sheet_name(self):
        self.assertEqual(make_unique_sheet_name('Gas - Total', ['Otra']), 'Gas - Total')
        self.assertEqual(make_unique_sheet_name('Gas - Total', ['gas - total']), 'Gas - Total (2)')
        self.assertEqual(make_unique_sheet_name('Gas - Total', ['Gas - Total', 'Gas - Total (2)']),
                         'Gas - Total (3)')
        long_name = 'Refrigerantes - Extendido por proveedor'
        unique = make_unique_sheet_name(long_name, [long_name[:31]])
        self.assertEqual(len(unique), 31)
        self.assertTrue(unique.endswith(' (2)'))

    def test_is_diagnostic_sheet_name(self):
        self.assertTrue(is_diagnostic_sheet_name('Diagnostics'))
        self.assertTrue(is_diagnostic_sheet_name('Debug'))
        self.assertTrue(is_diagnostic_sheet_name('Errores'))
        self.assertFalse(is_diagnostic_sheet_name('Gas - Por centro'))

    def test_rewrite_sheet_references(self):
        renames = {'Extendido': 'Gas - Extendido', 'Por centro': 'Gas - Por centro'}
        self.assertEqual(rewrite_sheet_references("=SUMIF(Extendido!$B:$B,$A2,Extendido!$M:$M)", renames),
                         "=SUMIF('Gas - Extendido'!$B:$B,$A2,'Gas - Extendido'!$M:$M)")
        self.assertEqual(rewrite_sheet_references("=SUM('Por centro'!$B:$B)", renames),
                         "=SUM('Gas - Por centro'!$B:$B)")
        self.assertEqual(rewrite_sheet_references("=SUM(Otro!A1)", renames), "=SUM(Otro!A1)")

    def test_find_column_index_by_keywords(self):
        wb = Workbook()
        ws = wb.active
        for col, header in enumerate(['Centro', 'Consumo gas', 'Emisiones tCO2', 'Emisiones gas tCO2'], start=1):
            ws.cell(row=1, column=col, value=header)
        self.assertEqual(find_column_index_by_keywords(ws, ['emisiones', 'gas']), 4)
        self.assertEqual(find_column_index_by_keywords(ws, ['EMISIONES']), 3)
        self.assertEqual(find_column_index_by_keywords(ws, ['market']), -1)
        self.assertEqual(find_column_index_by_keywords(None, ['market']), -1)


class TestGeneralReportExporter(unittest.TestCase):
    """Reports built from module workbooks written by the module exporter"""

    @classmethod
    def setUpClass(cls):
        cls.test_dir = Path(tempfile.mkdtemp(prefix="report_test_"))
        cls.config = CarbonConfig(str(cls.test_dir / "config.json"))
        cls.labels = Labels(language='es', overrides={})

        factor_store = FactorStore(str(cls.test_dir / "factors"))
        general = ElectricityGeneralFactors(2024, location_based_factor=0.1)
        general.add_trading_company(TradingCompanyFactor("Iberdrola", 2024, 0.25))
        factor_store.save_general_factors(general)
        factor_store.save_factor(FuelFactorEntry("Diésel", 2024, 2.5))
        cups_store = CupsStore(str(cls.test_dir / "cups.csv"))

        cls.module_files = {}
        for energy_type, rows, mapping_config in (
                ('electricity', ELECTRICITY_ROWS, {field: i for i, field in enumerate(
                    ['cups', 'invoice_number', 'issue_date', 'start_date', 'end_date', 'consumption',
                     'center', 'emission_entity'])}),
                ('fuel', FUEL_ROWS, {field: i for i, field in enumerate(
                    ['center', 'responsible', 'invoice_number', 'provider', 'invoice_date', 'fuel_type',
                     'vehicle_type', 'amount'])})):
            source = cls.test_dir / f"{energy_type}.csv"
            source.write_text('\n'.join(rows) + '\n', encoding='utf-8')
            exporter = ModuleExporter(energy_type, factor_store=factor_store, cups_store=cups_store,
                                      labels=cls.labels, config=cls.config)
            cls.module_files[energy_type] = exporter.export(ExportRequest(
                create_mapping(energy_type, mapping_config), 2024,
                str(cls.test_dir / f"{energy_type}.xlsx"), source_path=str(source)))

        cls.gas_file = cls._create_unprefixed_gas_workbook()

    @classmethod
    def tearDownClass(cls):
        import shutil
        if cls.test_dir.exists():
            shutil.rmtree(cls.test_dir)

    @classmethod
    def _create_unprefixed_gas_workbook(cls):
        """A module file whose sheet names carry no module label"""
        wb = Workbook()
        detailed = wb.active
        detailed.title = 'Extendido'
        detailed['A1'] = 'Id'
        detailed['B1'] = 'Centro'
        per_center = wb.create_sheet('Por centro')
        per_center['A1'] = 'Centro'
        per_center['B1'] = 'Total Consumo kWh'
        per_center['C1'] = 'Total Emisiones tCO2 Market Based'
        per_center['A2'] = 'Valencia'
        per_center['C2'] = "=SUMIF(Extendido!$B:$B,$A2,Extendido!$M:$M)"
        wb.create_sheet('Debug log')
        path = cls.test_dir / "gas_manual.xlsx"
        wb.save(path)
        wb.close()
        return str(path)

    def create_exporter(self):
        return GeneralReportExporter(labels=self.labels, config=self.config)

    def test_per_center_variants(self):
        exporter = self.create_exporter()
        self.assertEqual(exporter.per_center_variants('gas'), ['Gas - Por centro', 'Gas Por centro', 'Por centro'])
        renames = {'Por centro': 'Gas - Por centro', 'Extendido': 'Gas - Extendido'}
        self.assertEqual(exporter.resolve_per_center_sheet('gas', renames), 'Gas - Por centro')
        self.assertIsNone(exporter.resolve_per_center_sheet('gas', {'Hoja1': 'Gas - Hoja1'}))

    def test_combined_report(self):
        exporter = self.create_exporter()
        output = exporter.export_combined_report(self.module_files, str(self.test_dir / "combinado.xlsx"))
        stats = exporter.get_stats()
        self.assertEqual(stats['centers'], ['Madrid', 'Sevilla', 'Bilbao'])
        self.assertEqual(stats['failed_files'], [])

        wb = load_workbook(output)
        try:
            self.assertEqual(wb.sheetnames, [
                'Reporte huella de carbono',
                'Electricidad - Extendido', 'Electricidad - Por centro', 'Electricidad - Total',
                'Combustibles - Extendido', 'Combustibles - Por centro', 'Combustibles - Total',
            ])
            summary = wb['Reporte huella de carbono']
            self.assertEqual(summary['A1'].value, 'Centro')
            self.assertEqual(summary['A2'].value, 'Madrid')
            self.assertEqual(summary['B2'].value,
                             "=IFERROR(VLOOKUP($A2,'Electricidad - Por centro'!$A:$D,3,FALSE),0)")
            self.assertEqual(summary['C3'].value,
                             "=IFERROR(VLOOKUP($A3,'Electricidad - Por centro'!$A:$D,4,FALSE),0)")
            self.assertEqual(summary['D2'].value, 0)
            self.assertEqual(summary['E4'].value,
                             "=IFERROR(VLOOKUP($A4,'Combustibles - Por centro'!$A:$C,3,FALSE),0)")
            self.assertEqual(summary['G2'].value, '=SUM(D2:F2)')
            self.assertEqual(summary['H2'].value, '=B2')
            self.assertEqual(summary['J2'].value, '=G2+H2')
            self.assertEqual(summary['K2'].value, '=G2+I2')
            self.assertEqual(summary['A5'].value, 'Total')
            self.assertEqual(summary['B5'].value, '=SUM(B2:B4)')

            copied = wb['Electricidad - Por centro']
            self.assertEqual(copied['C2'].value, "=SUMIF('Electricidad - Extendido'!$B:$B,$A2,"
                                                 "'Electricidad - Extendido'!$M:$M)")
        finally:
            wb.close()

    def test_unprefixed_sheets_are_renamed_and_rewired(self):
        exporter = self.create_exporter()
        module_files = {'electricity': self.module_files['electricity'], 'gas': self.gas_file}
        output = exporter.export_combined_report(module_files, str(self.test_dir / "con_gas.xlsx"))

        wb = load_workbook(output)
        try:
            self.assertIn('Gas - Extendido', wb.sheetnames)
            self.assertIn('Gas - Por centro', wb.sheetnames)
            self.assertFalse(any('Debug' in name for name in wb.sheetnames))
            self.assertEqual(wb['Gas - Por centro']['C2'].value,
                             "=SUMIF('Gas - Extendido'!$B:$B,$A2,'Gas - Extendido'!$M:$M)")

            summary = wb['Reporte huella de carbono']
            self.assertEqual(summary['A4'].value, 'Valencia')
            self.assertEqual(summary['D4'].value,
                             "=IFERROR(VLOOKUP($A4,'Gas - Por centro'!$A:$C,3,FALSE),0)")
            self.assertEqual(summary['E4'].value, 0)
        finally:
            wb.close()

    def test_results_report(self):
        exporter = self.create_exporter()
        output = exporter.export_results_report(self.module_files, str(self.test_dir / "resultados.xls"))
        self.assertTrue(output.endswith('resultados.xlsx'))

        wb = load_workbook(output)
        try:
            self.assertEqual(wb.sheetnames[:2], ['Resultados generales', 'Resultados por alcance'])
            self.assertEqual(wb.sheetnames[-1], 'Diagnostics')
            scope = wb['Resultados por alcance']
            self.assertEqual(scope['B2'].value,
                             "=IFERROR(VLOOKUP($A2,'Resultados generales'!$A:$K,7,FALSE),0)")
            self.assertEqual(scope['F3'].value,
                             "=IFERROR(VLOOKUP($A3,'Resultados generales'!$A:$K,11,FALSE),0)")
            self.assertEqual(scope['A5'].value, 'Total')

            keys = [cell.value for cell in wb['Diagnostics']['A']]
            self.assertIn('Centers discovered', keys)
            self.assertIn('Column fuel/emissions', keys)
        finally:
            wb.close()

    def test_summary_report(self):
        exporter = self.create_exporter()
        output = exporter.export_summary_report({'gas': self.gas_file}, str(self.test_dir / "modulos.xlsx"))
        wb = load_workbook(output)
        try:
            ws = wb['Módulos']
            self.assertEqual(ws['A2'].value, 'Electricidad')
            self.assertEqual(ws['B2'].value, '-')
            self.assertEqual(ws['B3'].value, self.gas_file)
        finally:
            wb.close()

    def test_unreadable_module_is_reported(self):
        missing = str(self.test_dir / "no_existe.xlsx")
        exporter = self.create_exporter()
        output = exporter.export_combined_report({'refrigerant': missing}, str(self.test_dir / "vacio.xlsx"))
        self.assertEqual(exporter.get_stats()['failed_files'], [missing])

        wb = load_workbook(output)
        try:
            self.assertEqual(wb.sheetnames, ['Reporte huella de carbono'])
            self.assertEqual(wb['Reporte huella de carbono']['A2'].value, 'Total')
        finally:
            wb.close()

    def test_no_module_files(self):
        with self.assertRaises(ValueError):
            self.create_exporter().export_combined_report({}, str(self.test_dir / "nada.xlsx"))
        result = export_general_report_headless({'gas': ''}, str(self.test_dir / "nada.xlsx"),
                                                labels=self.labels, config=self.config)
        self.assertFalse(result['success'])

    def test_headless_unknown_report(self):
        result = export_general_report_headless(self.module_files, str(self.test_dir / "x.xlsx"),
                                                report='monthly', labels=self.labels, config=self.config)
        self.assertFalse(result['success'])
        self.assertIn('monthly', result['error'])


if __name__ == '__main__':
    unittest.main(verbosity=2)
