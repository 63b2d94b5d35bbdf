"""
Column mappings: which source column feeds each logical field

A mapping is built from the user's selections every time a sheet is chosen and
is not modified afterwards. Indices are zero-based; -1 means unmapped.
"""
from typing import Dict, Any, List, Optional, Sequence

from parsers import normalize_label

UNMAPPED = -1


class ColumnMapping:
    """Base class for the per-energy-type mappings"""

    energy_type = ''
    FIELDS: List[str] = []
    REQUIRED: List[str] = []
    EXTRA_ATTRIBUTES: List[str] = []

    def __init__(self, **indices):
        unknown = set(indices) - set(self.FIELDS)
        if unknown:
            raise ValueError(f"Unknown {self.energy_type} mapping fields: {sorted(unknown)}")
        values = {}
        for field in self.FIELDS:
            index = indices.get(field, UNMAPPED)
            values[field] = UNMAPPED if index is None else int(index)
        self._indices = values

    def get_index(self, field: str) -> int:
        return self._indices.get(field, UNMAPPED)

    def is_mapped(self, field: str) -> bool:
        return self.get_index(field) >= 0

    def missing_fields(self) -> List[str]:
        return [field for field in self.REQUIRED if not self.is_mapped(field)]

    def is_complete(self) -> bool:
        """True when every required field has a column index >= 0"""
        return not self.missing_fields()

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._indices)

    @classmethod
    def from_config(cls, config: Dict[str, Any], headers: Optional[Sequence[str]] = None) -> 'ColumnMapping':
        """
        Build a mapping from a dict of field -> index or header label

        Integer values (or digit strings) are used as column indices. Any other
        text is matched against ``headers`` ignoring case and accents.
        """
        config = dict(config)
        extra = {k: config.pop(k) for k in cls.EXTRA_ATTRIBUTES if k in config}
        normalized_headers = [normalize_label(h) for h in (headers or [])]
        indices = {}
        for field, value in config.items():
            indices[field] = resolve_column(value, normalized_headers)
        return cls(**indices, **extra)

    def __eq__(self, other):
        return type(self) is type(other) and self.to_dict() == other.to_dict()

    def __repr__(self):
        mapped = ', '.join(f"{k}={v}" for k, v in self._indices.items() if v >= 0)
        return f"{self.__class__.__name__}({mapped})"


def resolve_column(value: Any, normalized_headers: Sequence[str]) -> int:
    """Resolve an index, digit string or header label to a column index"""
    if value is None:
        return UNMAPPED
    if isinstance(value, bool):
        raise ValueError(f"Invalid column reference: {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.lstrip('-').isdigit():
        return int(text)
    label = normalize_label(text)
    if label in normalized_headers:
        return list(normalized_headers).index(label)
    raise ValueError(f"Column '{value}' not found in header row")


class ElectricityMapping(ColumnMapping):
    energy_type = 'electricity'
    FIELDS = ['cups', 'invoice_number', 'issue_date', 'start_date', 'end_date',
              'consumption', 'center', 'emission_entity']
    REQUIRED = list(FIELDS)


class GasMapping(ColumnMapping):
    """Gas invoices; the gas type is a fixed value chosen by the user, not a column"""

    energy_type = 'gas'
    FIELDS = ['cups', 'invoice_number', 'issue_date', 'start_date', 'end_date',
              'consumption', 'center', 'emission_entity']
    REQUIRED = ['cups', 'invoice_number', 'start_date', 'end_date', 'consumption',
                'center', 'emission_entity']
    EXTRA_ATTRIBUTES = ['gas_type']

    def __init__(self, gas_type: str = '', **indices):
        super().__init__(**indices)
        self.gas_type = (gas_type or '').strip()

    def missing_fields(self) -> List[str]:
        missing = super().missing_fields()
        if not self.gas_type:
            missing.append('gas_type')
        return missing

    def to_dict(self):
        values = super().to_dict()
        values['gas_type'] = self.gas_type
        return values


class FuelMapping(ColumnMapping):
    energy_type = 'fuel'
    FIELDS = ['center', 'responsible', 'invoice_number', 'provider', 'invoice_date',
              'fuel_type', 'vehicle_type', 'amount', 'completion_time']
    REQUIRED = ['center', 'responsible', 'invoice_number', 'provider', 'invoice_date',
                'fuel_type', 'vehicle_type', 'amount']


class RefrigerantMapping(ColumnMapping):
    energy_type = 'refrigerant'
    FIELDS = ['center', 'person', 'invoice_number', 'provider', 'invoice_date',
              'refrigerant_type', 'quantity']
    REQUIRED = ['center', 'invoice_number', 'provider', 'invoice_date',
                'refrigerant_type', 'quantity']


MAPPING_CLASSES = {
    'electricity': ElectricityMapping,
    'gas': GasMapping,
    'fuel': FuelMapping,
    'refrigerant': RefrigerantMapping,
}


def create_mapping(energy_type: str, config: Dict[str, Any],
                   headers: Optional[Sequence[str]] = None) -> ColumnMapping:
    """Factory used by the CLI and GUI to build a mapping for an energy type"""
    try:
        mapping_class = MAPPING_CLASSES[energy_type]
    except KeyError:
        raise ValueError(f"Unknown energy type: {energy_type}")
    return mapping_class.from_config(config, headers)
