"""
Localized labels for sheet names and column headers

Labels are looked up by key. Spanish is the default bundle; English labels can be
selected with the ``localization.language`` setting, and single keys can be
overridden with ``localization.overrides`` in the configuration file.
"""
from typing import Dict, Optional

from config import carbon_config

SPANISH = {
    # Modules
    'module.electricity': 'Electricidad',
    'module.gas': 'Gas',
    'module.fuel': 'Combustibles',
    'module.refrigerant': 'Refrigerantes',

    # Sheet kinds
    'sheet.detailed': 'Extendido',
    'sheet.per_center': 'Por centro',
    'sheet.total': 'Total',
    'sheet.diagnostics': 'Diagnostics',

    # Detailed sheet headers
    'detailed.id': 'Id',
    'detailed.center': 'Centro',
    'detailed.emission_entity': 'Sociedad emisora',
    'detailed.cups': 'CUPS',
    'detailed.invoice': 'Factura',
    'detailed.start_date': 'Fecha inicio suministro',
    'detailed.end_date': 'Fecha fin suministro',
    'detailed.consumption': 'Consumo (kWh)',
    'detailed.year_percentage': 'Consumo aplicable al año (%)',
    'detailed.applicable': 'Consumo aplicable por año (kWh)',
    'detailed.center_percentage': 'Consumo aplicable al centro (%)',
    'detailed.center_amount': 'Consumo aplicable por año al centro (kWh)',
    'detailed.market_emissions': 'Emisiones Market-based (tCO2e)',
    'detailed.location_emissions': 'Emisiones Location-based (tCO2e)',
    'detailed.market_factor': 'Factor de emisión Market-based (kgCO2e/kWh)',
    'detailed.location_factor': 'Factor de emisión Location-based (kgCO2e/kWh)',
    'detailed.gas_type': 'Tipo de gas',
    'detailed.responsible': 'Responsable',
    'detailed.person': 'Persona',
    'detailed.provider': 'Proveedor',
    'detailed.invoice_date': 'Fecha factura',
    'detailed.fuel_type': 'Tipo de combustible',
    'detailed.vehicle_type': 'Tipo de vehículo',
    'detailed.fuel_amount': 'Importe (L)',
    'detailed.refrigerant_type': 'Tipo de refrigerante',
    'detailed.refrigerant_quantity': 'Cantidad (kg)',
    'detailed.emission_factor': 'Factor de emisión',
    'detailed.emissions': 'Emisiones (tCO2e)',

    # Per-center and total sheet headers
    'per_center.consumption': 'Total Consumo kWh',
    'per_center.market': 'Total Emisiones tCO2 Market Based',
    'per_center.location': 'Total Emisiones tCO2 Location Based',
    'per_center.fuel_amount': 'Consumo (L)',
    'per_center.refrigerant_quantity': 'Consumo kg',
    'per_center.emissions': 'Emisiones tCO2',
    'total.fuel_amount': 'Total Consumo (L)',
    'total.refrigerant_quantity': 'Total Consumo kg',
    'total.emissions': 'Total Emisiones tCO2',

    # Combined and results reports
    'report.summary_sheet': 'Reporte huella de carbono',
    'report.results_sheet': 'Resultados generales',
    'report.scope_sheet': 'Resultados por alcance',
    'report.electricity_market': 'Electricidad (Market-based) (tCO2)',
    'report.electricity_location': 'Electricidad (Location-based) (tCO2)',
    'report.gas': 'Gas (tCO2)',
    'report.fuel': 'Combustibles (tCO2)',
    'report.refrigerant': 'Refrigerantes (tCO2)',
    'report.scope1': 'Alcance 1 (tCO2)',
    'report.scope2_market': 'Alcance 2 (Market-based) (tCO2)',
    'report.scope2_location': 'Alcance 2 (Location-based) (tCO2)',
    'report.total_market': 'Total (Market-based) (tCO2)',
    'report.total_location': 'Total (Location-based) (tCO2)',
    'report.scope_total_market': 'Total Market-based (tCO2e)',
    'report.scope_total_location': 'Total Location-based (tCO2e)',
    'report.total_row': 'Total',
    'report.modules_sheet': 'Módulos',
    'report.module': 'Módulo',
    'report.file': 'Fichero',

    # Desktop dialogs; the exception detail only goes to the log
    'error.export_failed': 'No se pudo exportar el módulo. Consulte el registro para más detalles.',
    'error.report_failed': 'No se pudo generar el informe. Consulte el registro para más detalles.',
    'error.read_failed': 'No se pudo leer el fichero seleccionado.',
}

ENGLISH = {
    'module.electricity': 'Electricity',
    'module.gas': 'Gas',
    'module.fuel': 'Fuel',
    'module.refrigerant': 'Refrigerants',

    'sheet.detailed': 'Extended',
    'sheet.per_center': 'Per center',
    'sheet.total': 'Total',
    'sheet.diagnostics': 'Diagnostics',

    'detailed.id': 'Id',
    'detailed.center': 'Center',
    'detailed.emission_entity': 'Trading company',
    'detailed.cups': 'CUPS',
    'detailed.invoice': 'Invoice',
    'detailed.start_date': 'Supply start date',
    'detailed.end_date': 'Supply end date',
    'detailed.consumption': 'Consumption (kWh)',
    'detailed.year_percentage': 'Consumption in year (%)',
    'detailed.applicable': 'Consumption in year (kWh)',
    'detailed.center_percentage': 'Share of center (%)',
    'detailed.center_amount': 'Consumption in year for center (kWh)',
    'detailed.market_emissions': 'Market-based emissions (tCO2e)',
    'detailed.location_emissions': 'Location-based emissions (tCO2e)',
    'detailed.market_factor': 'Market-based emission factor (kgCO2e/kWh)',
    'detailed.location_factor': 'Location-based emission factor (kgCO2e/kWh)',
    'detailed.gas_type': 'Gas type',
    'detailed.responsible': 'Responsible',
    'detailed.person': 'Person',
    'detailed.provider': 'Provider',
    'detailed.invoice_date': 'Invoice date',
    'detailed.fuel_type': 'Fuel type',
    'detailed.vehicle_type': 'Vehicle type',
    'detailed.fuel_amount': 'Amount (L)',
    'detailed.refrigerant_type': 'Refrigerant type',
    'detailed.refrigerant_quantity': 'Quantity (kg)',
    'detailed.emission_factor': 'Emission factor',
    'detailed.emissions': 'Emissions (tCO2e)',

    'per_center.consumption': 'Total consumption kWh',
    'per_center.market': 'Total emissions tCO2 Market Based',
    'per_center.location': 'Total emissions tCO2 Location Based',
    'per_center.fuel_amount': 'Consumption (L)',
    'per_center.refrigerant_quantity': 'Consumption kg',
    'per_center.emissions': 'Emissions tCO2',
    'total.fuel_amount': 'Total consumption (L)',
    'total.refrigerant_quantity': 'Total consumption kg',
    'total.emissions': 'Total emissions tCO2',

    'report.summary_sheet': 'Carbon footprint report',
    'report.results_sheet': 'General results',
    'report.scope_sheet': 'Results by scope',
    'report.electricity_market': 'Electricity (Market-based) (tCO2)',
    'report.electricity_location': 'Electricity (Location-based) (tCO2)',
    'report.gas': 'Gas (tCO2)',
    'report.fuel': 'Fuel (tCO2)',
    'report.refrigerant': 'Refrigerants (tCO2)',
    'report.scope1': 'Scope 1 (tCO2)',
    'report.scope2_market': 'Scope 2 (Market-based) (tCO2)',
    'report.scope2_location': 'Scope 2 (Location-based) (tCO2)',
    'report.total_market': 'Total (Market-based) (tCO2)',
    'report.total_location': 'Total (Location-based) (tCO2)',
    'report.scope_total_market': 'Total Market-based (tCO2e)',
    'report.scope_total_location': 'Total Location-based (tCO2e)',
    'report.total_row': 'Total',
    'report.modules_sheet': 'Modules',
    'report.module': 'Module',
    'report.file': 'File',

    'error.export_failed': 'The module could not be exported. See the log for details.',
    'error.report_failed': 'The report could not be generated. See the log for details.',
    'error.read_failed': 'The selected file could not be read.',
}

BUNDLES = {
    'es': SPANISH,
    'en': ENGLISH,
}


class Labels:
    """Resource-bundle style lookup with fallback to the Spanish bundle"""

    def __init__(self, language: Optional[str] = None, overrides: Optional[Dict[str, str]] = None):
        self.language = language or carbon_config.get('localization.language', 'es')
        if overrides is None:
            overrides = carbon_config.get('localization.overrides', {}) or {}
        self.overrides = dict(overrides)

    def get(self, key: str) -> str:
        if key in self.overrides:
            return self.overrides[key]
        bundle = BUNDLES.get(self.language, SPANISH)
        if key in bundle:
            return bundle[key]
        return SPANISH.get(key, key)

    def module_label(self, energy_type: str) -> str:
        return self.get(f"module.{energy_type}")

    def sheet_name(self, energy_type: str, kind: str) -> str:
        """Module-prefixed sheet name, e.g. 'Electricidad - Por centro'"""
        return f"{self.module_label(energy_type)} - {self.get(f'sheet.{kind}')}"


# Global labels instance
labels = Labels()
