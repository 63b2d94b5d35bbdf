"""
CUPS to center mapping store

One CSV file (``data/cups_center/cups.csv`` by default) with the columns
``id,cups,marketer,centerName,acronym,energyType,street,postalCode,city,province``.
Rows are kept sorted by center name and IDs are renumbered 1..N on every save.
"""
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from config import carbon_config
from csv_io import write_csv_atomic
from logger_config import storage_logger
from parsers import normalize_key

COLUMNS = ['id', 'cups', 'marketer', 'centerName', 'acronym', 'energyType',
           'street', 'postalCode', 'city', 'province']


def normalize_cups(value) -> str:
    """CUPS codes compare case-insensitively and ignore embedded spaces"""
    return normalize_key(value).replace(' ', '')


class CupsCenterMapping:
    """A supply point (CUPS) assigned to a center"""

    def __init__(self, cups: str, center_name: str, marketer: str = '', acronym: str = '',
                 energy_type: str = '', street: str = '', postal_code: str = '', city: str = '',
                 province: str = '', mapping_id: Optional[int] = None):
        self.id = mapping_id
        self.cups = (cups or '').strip()
        self.center_name = (center_name or '').strip()
        self.marketer = (marketer or '').strip()
        self.acronym = (acronym or '').strip()
        self.energy_type = (energy_type or '').strip()
        self.street = (street or '').strip()
        self.postal_code = (postal_code or '').strip()
        self.city = (city or '').strip()
        self.province = (province or '').strip()

    @property
    def key(self):
        return normalize_cups(self.cups), normalize_key(self.center_name)

    def to_row(self) -> Dict[str, str]:
        return {
            'id': '' if self.id is None else str(self.id),
            'cups': self.cups,
            'marketer': self.marketer,
            'centerName': self.center_name,
            'acronym': self.acronym,
            'energyType': self.energy_type,
            'street': self.street,
            'postalCode': self.postal_code,
            'city': self.city,
            'province': self.province,
        }

    @classmethod
    def from_row(cls, row: Dict[str, str]) -> 'CupsCenterMapping':
        raw_id = (row.get('id') or '').strip()
        return cls(
            cups=row.get('cups', ''),
            center_name=row.get('centerName', ''),
            marketer=row.get('marketer', ''),
            acronym=row.get('acronym', ''),
            energy_type=row.get('energyType', ''),
            street=row.get('street', ''),
            postal_code=row.get('postalCode', ''),
            city=row.get('city', ''),
            province=row.get('province', ''),
            mapping_id=int(raw_id) if raw_id.isdigit() else None,
        )

    def __repr__(self):
        return f"CupsCenterMapping(cups={self.cups!r}, center={self.center_name!r}, marketer={self.marketer!r})"


class CupsStore:
    """Read-modify-write access to the CUPS/center CSV"""

    def __init__(self, csv_path: Optional[str] = None):
        self.csv_path = Path(csv_path or carbon_config.get('paths.cups_file', 'data/cups_center/cups.csv'))
        self.logger = storage_logger

    def load_mappings(self) -> List[CupsCenterMapping]:
        """
        Load every mapping

        Tolerates a missing header row, missing trailing columns and blank
        lines. Rows without a CUPS or a center name are skipped.
        """
        if not self.csv_path.exists():
            return []

        try:
            df = pd.read_csv(self.csv_path, header=None, dtype=str, keep_default_na=False,
                             skip_blank_lines=True, on_bad_lines='warn', encoding='utf-8-sig')
        except pd.errors.EmptyDataError:
            return []

        df = df.iloc[:, :len(COLUMNS)]
        columns = COLUMNS[:len(df.columns)]
        if len(df.index) and str(df.iloc[0, 0]).strip().lower() == 'id':
            header = [str(v).strip() for v in df.iloc[0]]
            if all(h in COLUMNS for h in header if h):
                columns = [h or f"_unused_{i}" for i, h in enumerate(header)]
            df = df.iloc[1:]
        df.columns = columns

        mappings = []
        for line_no, record in enumerate(df.to_dict('records'), start=1):
            row = {k: ('' if pd.isna(v) else str(v)) for k, v in record.items()}
            if not any(v.strip() for v in row.values()):
                continue
            mapping = CupsCenterMapping.from_row(row)
            if not mapping.cups or not mapping.center_name:
                self.logger.warning("Skipping CUPS row without cups or center", path=str(self.csv_path), row=line_no)
                continue
            mappings.append(mapping)

        self.logger.log_data_stats({'mappings': len(mappings)}, "CUPS")
        return mappings

    def save_mappings(self, mappings: List[CupsCenterMapping]) -> List[CupsCenterMapping]:
        """Sort by center name (case-insensitive), renumber IDs and rewrite the file"""
        ordered = sorted(mappings, key=lambda m: (m.center_name.casefold(), normalize_cups(m.cups)))
        for new_id, mapping in enumerate(ordered, start=1):
            mapping.id = new_id
        df = pd.DataFrame([m.to_row() for m in ordered], columns=COLUMNS)
        write_csv_atomic(df, self.csv_path)
        return ordered

    def add_mapping(self, mapping: CupsCenterMapping) -> List[CupsCenterMapping]:
        """Insert a mapping, replacing any existing row with the same CUPS and center"""
        if not mapping.cups or not mapping.center_name:
            raise ValueError("CUPS and center name are required")
        mappings = [m for m in self.load_mappings() if m.key != mapping.key]
        mappings.append(mapping)
        self.logger.info("Saving CUPS mapping", cups=mapping.cups, center=mapping.center_name)
        return self.save_mappings(mappings)

    def delete_mapping(self, cups: str, center_name: str) -> bool:
        target = (normalize_cups(cups), normalize_key(center_name))
        mappings = self.load_mappings()
        remaining = [m for m in mappings if m.key != target]
        if len(remaining) == len(mappings):
            return False
        self.save_mappings(remaining)
        self.logger.info("Deleted CUPS mapping", cups=cups, center=center_name)
        return True

    def centers_per_cups(self, mappings: Optional[List[CupsCenterMapping]] = None) -> Dict[str, int]:
        """Number of centers sharing each CUPS, keyed by normalized CUPS"""
        counts: Dict[str, int] = {}
        for mapping in self.load_mappings() if mappings is None else mappings:
            key = normalize_cups(mapping.cups)
            counts[key] = counts.get(key, 0) + 1
        return counts

    def cups_to_marketer(self, mappings: Optional[List[CupsCenterMapping]] = None) -> Dict[str, str]:
        """First non-empty marketer registered for each normalized CUPS"""
        marketers: Dict[str, str] = {}
        for mapping in self.load_mappings() if mappings is None else mappings:
            key = normalize_cups(mapping.cups)
            if mapping.marketer and key not in marketers:
                marketers[key] = mapping.marketer
        return marketers
