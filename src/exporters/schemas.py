"""
Schema descriptors for the four energy types

A schema lists the detailed-sheet columns in order, the formula template of
each computed column, and the metrics aggregated on the per-center and total
sheets. The generic exporter is driven entirely by these descriptors.

Formula templates reference other columns as ``{column_key}``; the formula
writer replaces each placeholder with ``<letter><row>`` for the current row.
"""
from typing import List, Optional

from mappings import ElectricityMapping, GasMapping, FuelMapping, RefrigerantMapping

TEXT = 'text'
DATE = 'date'
NUMBER = 'number'
PERCENT = 'percent'
EMISSION = 'emission'
FACTOR = 'factor'


class DetailedColumn:
    """One column of the detailed ("Extendido") sheet"""

    def __init__(self, key: str, label_key: str, kind: str = TEXT, formula: Optional[str] = None):
        self.key = key
        self.label_key = label_key
        self.kind = kind
        self.formula = formula

    @property
    def is_formula(self) -> bool:
        return self.formula is not None

    def __repr__(self):
        return f"DetailedColumn({self.key!r})"


class AggregateMetric:
    """
    A per-center metric

    ``source_label_key`` names the detailed-sheet header the SUMIF reads from;
    ``fallback_key`` is the detailed column used when that header cannot be
    found in the written sheet.
    """

    def __init__(self, label_key: str, total_label_key: str, source_label_key: str, fallback_key: str):
        self.label_key = label_key
        self.total_label_key = total_label_key
        self.source_label_key = source_label_key
        self.fallback_key = fallback_key


class EnergySchema:
    def __init__(self, energy_type: str, mapping_class, columns: List[DetailedColumn],
                 metrics: List[AggregateMetric], period_based: bool = False,
                 filter_invoice_year: bool = False, skip_non_positive: bool = False,
                 amount_field: str = 'consumption'):
        self.energy_type = energy_type
        self.mapping_class = mapping_class
        self.columns = columns
        self.metrics = metrics
        self.period_based = period_based
        self.filter_invoice_year = filter_invoice_year
        self.skip_non_positive = skip_non_positive
        self.amount_field = amount_field

    @property
    def module_label_key(self) -> str:
        return f"module.{self.energy_type}"

    def column_keys(self) -> List[str]:
        return [c.key for c in self.columns]

    def column_index(self, key: str) -> int:
        """Zero-based position of a column key in the detailed sheet"""
        return self.column_keys().index(key)

    def get_column(self, key: str) -> DetailedColumn:
        return self.columns[self.column_index(key)]


_PERIOD_COLUMNS = [
    DetailedColumn('id', 'detailed.id', NUMBER),
    DetailedColumn('center', 'detailed.center'),
    DetailedColumn('emission_entity', 'detailed.emission_entity'),
    DetailedColumn('cups', 'detailed.cups'),
    DetailedColumn('invoice', 'detailed.invoice'),
    DetailedColumn('start_date', 'detailed.start_date', DATE),
    DetailedColumn('end_date', 'detailed.end_date', DATE),
    DetailedColumn('consumption', 'detailed.consumption', NUMBER),
    DetailedColumn('year_percentage', 'detailed.year_percentage', PERCENT),
    DetailedColumn('applicable', 'detailed.applicable', NUMBER,
                   '{consumption}*({year_percentage}/100)'),
    DetailedColumn('center_percentage', 'detailed.center_percentage', PERCENT),
    DetailedColumn('center_amount', 'detailed.center_amount', NUMBER,
                   '{applicable}*({center_percentage}/100)'),
    DetailedColumn('market_emissions', 'detailed.market_emissions', EMISSION,
                   '({center_amount}*{market_factor})/{divisor}'),
    DetailedColumn('location_emissions', 'detailed.location_emissions', EMISSION,
                   '({center_amount}*{location_factor})/{divisor}'),
]

_PERIOD_METRICS = [
    AggregateMetric('per_center.consumption', 'per_center.consumption', 'detailed.center_amount', 'center_amount'),
    AggregateMetric('per_center.market', 'per_center.market', 'detailed.market_emissions', 'market_emissions'),
    AggregateMetric('per_center.location', 'per_center.location', 'detailed.location_emissions',
                    'location_emissions'),
]

ELECTRICITY = EnergySchema(
    'electricity', ElectricityMapping,
    _PERIOD_COLUMNS + [
        DetailedColumn('market_factor', 'detailed.market_factor', FACTOR),
        DetailedColumn('location_factor', 'detailed.location_factor', FACTOR),
    ],
    _PERIOD_METRICS,
    period_based=True,
)

GAS = EnergySchema(
    'gas', GasMapping,
    _PERIOD_COLUMNS + [
        DetailedColumn('gas_type', 'detailed.gas_type'),
        DetailedColumn('market_factor', 'detailed.market_factor', FACTOR),
        DetailedColumn('location_factor', 'detailed.location_factor', FACTOR),
    ],
    _PERIOD_METRICS,
    period_based=True,
)

FUEL = EnergySchema(
    'fuel', FuelMapping,
    [
        DetailedColumn('id', 'detailed.id', NUMBER),
        DetailedColumn('center', 'detailed.center'),
        DetailedColumn('responsible', 'detailed.responsible'),
        DetailedColumn('invoice', 'detailed.invoice'),
        DetailedColumn('provider', 'detailed.provider'),
        DetailedColumn('invoice_date', 'detailed.invoice_date', DATE),
        DetailedColumn('fuel_type', 'detailed.fuel_type'),
        DetailedColumn('vehicle_type', 'detailed.vehicle_type'),
        DetailedColumn('amount', 'detailed.fuel_amount', NUMBER),
        DetailedColumn('emission_factor', 'detailed.emission_factor', FACTOR),
        DetailedColumn('emissions', 'detailed.emissions', EMISSION,
                       '{amount}*{emission_factor}/{divisor}'),
    ],
    [
        AggregateMetric('per_center.fuel_amount', 'total.fuel_amount', 'detailed.fuel_amount', 'amount'),
        AggregateMetric('per_center.emissions', 'total.emissions', 'detailed.emissions', 'emissions'),
    ],
    filter_invoice_year=True,
    skip_non_positive=True,
    amount_field='amount',
)

REFRIGERANT = EnergySchema(
    'refrigerant', RefrigerantMapping,
    [
        DetailedColumn('id', 'detailed.id', NUMBER),
        DetailedColumn('center', 'detailed.center'),
        DetailedColumn('person', 'detailed.person'),
        DetailedColumn('invoice', 'detailed.invoice'),
        DetailedColumn('provider', 'detailed.provider'),
        DetailedColumn('invoice_date', 'detailed.invoice_date', DATE),
        DetailedColumn('refrigerant_type', 'detailed.refrigerant_type'),
        DetailedColumn('quantity', 'detailed.refrigerant_quantity', NUMBER),
        DetailedColumn('emission_factor', 'detailed.emission_factor', FACTOR),
        DetailedColumn('emissions', 'detailed.emissions', EMISSION,
                       '{quantity}*{emission_factor}/{divisor}'),
    ],
    [
        AggregateMetric('per_center.refrigerant_quantity', 'total.refrigerant_quantity',
                        'detailed.refrigerant_quantity', 'quantity'),
        AggregateMetric('per_center.emissions', 'total.emissions', 'detailed.emissions', 'emissions'),
    ],
    skip_non_positive=True,
    amount_field='quantity',
)

SCHEMAS = {
    'electricity': ELECTRICITY,
    'gas': GAS,
    'fuel': FUEL,
    'refrigerant': REFRIGERANT,
}


def get_schema(energy_type: str) -> EnergySchema:
    try:
        return SCHEMAS[energy_type]
    except KeyError:
        raise ValueError(f"Unknown energy type: {energy_type}")
