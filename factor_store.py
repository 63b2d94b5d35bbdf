"""
Per-year emission factor store backed by CSV files

Layout::

    {base}/{year}/emission_factors_electricity.csv          trading companies
    {base}/{year}/emission_factors_electricity_general.csv  general electricity factors
    {base}/{year}/gas_factors.csv
    {base}/{year}/fuel_factors.csv
    {base}/{year}/refrigerant_factors.csv
"""
import math
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from config import carbon_config
from csv_io import read_csv_table, write_csv_atomic
from logger_config import storage_logger
from parsers import normalize_key, parse_double

ENERGY_TYPES = ['electricity', 'gas', 'fuel', 'refrigerant']


def _check_factor(name: str, value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(number) or number < 0:
        raise ValueError(f"{name} must be a finite value >= 0, got {value!r}")
    return number


def _format_number(value: Optional[float]) -> str:
    if value is None:
        return ''
    return repr(float(value))


class FactorEntry:
    """Base class for one row of a factor table"""

    energy_type = ''
    columns: List[str] = []

    def __init__(self, entity: str, year: int, unit: str = ''):
        self.entity = (entity or '').strip()
        self.year = int(year)
        self.unit = unit

    @property
    def key(self) -> str:
        return normalize_key(self.entity)

    def validate(self) -> None:
        """Raise ValueError when the entry cannot be persisted"""
        if not self.key:
            raise ValueError(f"{self.energy_type} factor entity must not be empty")

    def to_row(self) -> Dict[str, str]:
        raise NotImplementedError

    @classmethod
    def from_row(cls, row: Dict[str, str], year: int) -> 'FactorEntry':
        raise NotImplementedError

    def __eq__(self, other):
        return type(self) is type(other) and self.to_row() == other.to_row() and self.year == other.year

    def __repr__(self):
        return f"{self.__class__.__name__}({self.to_row()!r}, year={self.year})"


class TradingCompanyFactor(FactorEntry):
    """Electricity trading company (marketer) with its market-based factor"""

    energy_type = 'electricity'
    columns = ['comercializadora', 'factor_emision', 'tipo_gdo']

    def __init__(self, name: str, year: int, emission_factor: float, gdo_type: str = ''):
        super().__init__(name, year, unit='kgCO2e/kWh')
        self.emission_factor = emission_factor
        self.gdo_type = (gdo_type or '').strip()

    @property
    def name(self) -> str:
        return self.entity

    def validate(self) -> None:
        super().validate()
        self.emission_factor = _check_factor('factor_emision', self.emission_factor)

    def to_row(self) -> Dict[str, str]:
        return {
            'comercializadora': self.entity,
            'factor_emision': _format_number(self.emission_factor),
            'tipo_gdo': self.gdo_type,
        }

    @classmethod
    def from_row(cls, row, year):
        return cls(row['comercializadora'], year, _check_factor('factor_emision', parse_double(row['factor_emision'])),
                   row.get('tipo_gdo', ''))


class GasFactorEntry(FactorEntry):
    """Gas type with market-based and location-based factors"""

    energy_type = 'gas'
    columns = ['gasType', 'marketFactor', 'locationFactor']

    def __init__(self, gas_type: str, year: int, market_factor: float, location_factor: float):
        super().__init__(gas_type, year, unit='kgCO2e/kWh')
        self.market_factor = market_factor
        self.location_factor = location_factor

    @property
    def gas_type(self) -> str:
        return self.entity

    def validate(self) -> None:
        super().validate()
        self.market_factor = _check_factor('marketFactor', self.market_factor)
        self.location_factor = _check_factor('locationFactor', self.location_factor)

    def to_row(self):
        return {
            'gasType': self.entity,
            'marketFactor': _format_number(self.market_factor),
            'locationFactor': _format_number(self.location_factor),
        }

    @classmethod
    def from_row(cls, row, year):
        return cls(row['gasType'], year,
                   _check_factor('marketFactor', parse_double(row['marketFactor'])),
                   _check_factor('locationFactor', parse_double(row['locationFactor'])))


class FuelFactorEntry(FactorEntry):
    """Fuel type, optionally specialised per vehicle type"""

    energy_type = 'fuel'
    columns = ['fuelType', 'vehicleType', 'emissionFactor', 'pricePerUnit']

    def __init__(self, fuel_type: str, year: int, emission_factor: float,
                 vehicle_type: str = '', price_per_unit: Optional[float] = None):
        super().__init__(fuel_type, year, unit='kgCO2e/L')
        self.vehicle_type = (vehicle_type or '').strip()
        self.emission_factor = emission_factor
        self.price_per_unit = price_per_unit

    @property
    def fuel_type(self) -> str:
        return self.entity

    @property
    def key(self) -> str:
        return self.make_key(self.entity, self.vehicle_type)

    @staticmethod
    def make_key(fuel_type, vehicle_type='') -> str:
        fuel_key = normalize_key(fuel_type)
        vehicle_key = normalize_key(vehicle_type)
        return f"{fuel_key}|{vehicle_key}" if vehicle_key else fuel_key

    def validate(self) -> None:
        if not normalize_key(self.entity):
            raise ValueError("fuel factor entity must not be empty")
        self.emission_factor = _check_factor('emissionFactor', self.emission_factor)
        if self.price_per_unit is not None:
            self.price_per_unit = _check_factor('pricePerUnit', self.price_per_unit)

    def to_row(self):
        return {
            'fuelType': self.entity,
            'vehicleType': self.vehicle_type,
            'emissionFactor': _format_number(self.emission_factor),
            'pricePerUnit': _format_number(self.price_per_unit),
        }

    @classmethod
    def from_row(cls, row, year):
        price = parse_double(row.get('pricePerUnit', ''))
        return cls(row['fuelType'], year, _check_factor('emissionFactor', parse_double(row['emissionFactor'])),
                   row.get('vehicleType', ''), _check_factor('pricePerUnit', price) if price is not None else None)


class RefrigerantFactorEntry(FactorEntry):
    """Refrigerant gas with its global warming potential (PCA)"""

    energy_type = 'refrigerant'
    columns = ['refrigerantType', 'pca']

    def __init__(self, refrigerant_type: str, year: int, pca: float):
        super().__init__(refrigerant_type, year, unit='kgCO2e/kg')
        self.pca = pca

    @property
    def refrigerant_type(self) -> str:
        return self.entity

    def validate(self) -> None:
        super().validate()
        self.pca = _check_factor('pca', self.pca)

    def to_row(self):
        return {'refrigerantType': self.entity, 'pca': _format_number(self.pca)}

    @classmethod
    def from_row(cls, row, year):
        return cls(row['refrigerantType'], year, _check_factor('pca', parse_double(row['pca'])))


ENTRY_CLASSES = {
    'electricity': TradingCompanyFactor,
    'gas': GasFactorEntry,
    'fuel': FuelFactorEntry,
    'refrigerant': RefrigerantFactorEntry,
}


def build_factor_entry(energy_type: str, year: int, values: Dict[str, object]) -> FactorEntry:
    """
    Factor entry from form or command-line values

    ``values`` holds ``entity`` and ``factor`` plus, depending on the type,
    ``location_factor``, ``vehicle_type``, ``gdo_type`` and ``price_per_unit``.
    Numbers may be given as text; ValueError is raised for unparseable ones.
    """
    def number(name, required=True):
        raw = values.get(name)
        if raw is None or str(raw).strip() == '':
            if required:
                raise ValueError(f"{name} is required")
            return None
        parsed = parse_double(raw)
        if parsed is None:
            raise ValueError(f"{name} must be a number, got {raw!r}")
        return parsed

    entity = str(values.get('entity') or '')
    if energy_type == 'electricity':
        return TradingCompanyFactor(entity, year, number('factor'), str(values.get('gdo_type') or ''))
    if energy_type == 'gas':
        location = number('location_factor', required=False)
        return GasFactorEntry(entity, year, number('factor'), 0.0 if location is None else location)
    if energy_type == 'fuel':
        return FuelFactorEntry(entity, year, number('factor'), str(values.get('vehicle_type') or ''),
                               number('price_per_unit', required=False))
    if energy_type == 'refrigerant':
        return RefrigerantFactorEntry(entity, year, number('factor'))
    raise ValueError(f"Unknown energy type: {energy_type}")


class ElectricityGeneralFactors:
    """Year-wide electricity factors plus the ordered list of trading companies"""

    columns = ['mix_sin_gdo', 'gdo_renovable', 'gdo_cogeneracion_alta_eficiencia', 'location_based_factor']

    def __init__(self, year: int, mix_without_gdo: float = 0.0, gdo_renewable: float = 0.0,
                 gdo_high_efficiency_cogeneration: float = 0.0, location_based_factor: float = 0.0,
                 trading_companies: Optional[List[TradingCompanyFactor]] = None):
        self.year = int(year)
        self.mix_without_gdo = mix_without_gdo
        self.gdo_renewable = gdo_renewable
        self.gdo_high_efficiency_cogeneration = gdo_high_efficiency_cogeneration
        self.location_based_factor = location_based_factor
        self.trading_companies = list(trading_companies or [])

    def validate(self) -> None:
        self.mix_without_gdo = _check_factor('mix_sin_gdo', self.mix_without_gdo)
        self.gdo_renewable = _check_factor('gdo_renovable', self.gdo_renewable)
        self.gdo_high_efficiency_cogeneration = _check_factor(
            'gdo_cogeneracion_alta_eficiencia', self.gdo_high_efficiency_cogeneration)
        self.location_based_factor = _check_factor('location_based_factor', self.location_based_factor)
        for company in self.trading_companies:
            company.validate()

    def add_trading_company(self, company: TradingCompanyFactor) -> None:
        """Insert or replace a trading company, matched by normalized name"""
        for i, existing in enumerate(self.trading_companies):
            if existing.key == company.key:
                self.trading_companies[i] = company
                return
        self.trading_companies.append(company)

    def remove_trading_company(self, name: str) -> bool:
        key = normalize_key(name)
        before = len(self.trading_companies)
        self.trading_companies = [c for c in self.trading_companies if c.key != key]
        return len(self.trading_companies) < before

    def to_row(self) -> Dict[str, str]:
        return {
            'mix_sin_gdo': _format_number(self.mix_without_gdo),
            'gdo_renovable': _format_number(self.gdo_renewable),
            'gdo_cogeneracion_alta_eficiencia': _format_number(self.gdo_high_efficiency_cogeneration),
            'location_based_factor': _format_number(self.location_based_factor),
        }


class FactorStore:
    """Load and persist emission factors per (energy type, year)"""

    FILE_NAMES = {
        'electricity': 'emission_factors_electricity.csv',
        'electricity_general': 'emission_factors_electricity_general.csv',
        'gas': 'gas_factors.csv',
        'fuel': 'fuel_factors.csv',
        'refrigerant': 'refrigerant_factors.csv',
    }

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or carbon_config.get('paths.factors_dir', 'data/emission_factors'))
        self.logger = storage_logger

    def factor_path(self, energy_type: str, year: int) -> Path:
        if energy_type not in self.FILE_NAMES:
            raise ValueError(f"Unknown energy type: {energy_type}")
        return self.base_dir / str(int(year)) / self.FILE_NAMES[energy_type]

    def _entry_class(self, energy_type: str):
        try:
            return ENTRY_CLASSES[energy_type]
        except KeyError:
            raise ValueError(f"Unknown energy type: {energy_type}")

    def load_factors(self, energy_type: str, year: int) -> Dict[str, FactorEntry]:
        """
        Load the factor table for a type and year

        Returns a dict keyed by normalized entity key. A missing file gives an
        empty dict; rows with missing columns or invalid numbers are skipped.
        """
        entry_class = self._entry_class(energy_type)
        path = self.factor_path(energy_type, year)
        if not path.exists():
            self.logger.debug("No factor file", energy_type=energy_type, year=year, path=str(path))
            return {}

        df = read_csv_table(path, entry_class.columns)
        missing = [c for c in entry_class.columns if c not in df.columns]
        required = [c for c in missing if c not in ('pricePerUnit', 'vehicleType', 'tipo_gdo')]
        if required:
            self.logger.warning("Factor file is missing columns", path=str(path), missing=required)
            return {}

        factors = {}
        skipped = 0
        for line_no, record in enumerate(df.to_dict('records'), start=2):
            row = {k: ('' if pd.isna(v) else str(v)) for k, v in record.items()}
            try:
                entry = entry_class.from_row(row, year)
                entry.validate()
            except (KeyError, ValueError) as e:
                skipped += 1
                self.logger.warning("Skipping malformed factor row", path=str(path), line=line_no, error=str(e))
                continue
            factors[entry.key] = entry

        self.logger.log_data_stats({'energy_type': energy_type, 'year': year,
                                    'loaded': len(factors), 'skipped': skipped}, "FACTORS")
        return factors

    def _write_entries(self, energy_type: str, year: int, entries) -> None:
        entry_class = self._entry_class(energy_type)
        ordered = sorted(entries, key=lambda e: e.key)
        df = pd.DataFrame([e.to_row() for e in ordered], columns=entry_class.columns)
        write_csv_atomic(df, self.factor_path(energy_type, year))

    def save_factor(self, entry: FactorEntry) -> None:
        """Upsert an entry by normalized key and rewrite the file sorted by key"""
        entry.validate()
        factors = self.load_factors(entry.energy_type, entry.year)
        factors[entry.key] = entry
        self._write_entries(entry.energy_type, entry.year, factors.values())
        self.logger.info("Saved factor", energy_type=entry.energy_type, year=entry.year, entity=entry.entity)

    def delete_factor(self, energy_type: str, year: int, entity_key: str) -> int:
        """Remove rows whose normalized key matches; returns the number removed"""
        key = normalize_key(entity_key)
        if energy_type == 'fuel' and '|' in key:
            fuel, vehicle = key.split('|', 1)
            key = FuelFactorEntry.make_key(fuel, vehicle)
        factors = self.load_factors(energy_type, year)
        remaining = [e for k, e in factors.items() if k != key]
        removed = len(factors) - len(remaining)
        if removed:
            self._write_entries(energy_type, year, remaining)
            self.logger.info("Deleted factor", energy_type=energy_type, year=year, entity=entity_key)
        return removed

    def load_general_factors(self, year: int) -> ElectricityGeneralFactors:
        """General electricity factors for a year; zeros when the file is missing"""
        general = ElectricityGeneralFactors(year)
        path = self.factor_path('electricity_general', year)
        if path.exists():
            df = read_csv_table(path, ElectricityGeneralFactors.columns)
            if len(df.index) > 0:
                row = df.iloc[0]
                values = []
                for column in ElectricityGeneralFactors.columns:
                    value = parse_double(row.get(column, '')) if column in df.columns else None
                    if value is None or value < 0:
                        self.logger.warning("Invalid general electricity factor, using 0",
                                            path=str(path), column=column)
                        value = 0.0
                    values.append(value)
                (general.mix_without_gdo, general.gdo_renewable,
                 general.gdo_high_efficiency_cogeneration, general.location_based_factor) = values

        general.trading_companies = list(self.load_factors('electricity', year).values())
        return general

    def save_general_factors(self, general: ElectricityGeneralFactors) -> None:
        general.validate()
        df = pd.DataFrame([general.to_row()], columns=ElectricityGeneralFactors.columns)
        write_csv_atomic(df, self.factor_path('electricity_general', general.year))
        self._write_entries('electricity', general.year, general.trading_companies)
        self.logger.info("Saved general electricity factors", year=general.year,
                         companies=len(general.trading_companies))

    def available_years(self, energy_type: Optional[str] = None) -> List[int]:
        """Years with a factor directory (or a file for ``energy_type``), newest first"""
        if not self.base_dir.exists():
            return []
        years = []
        for child in self.base_dir.iterdir():
            if not child.is_dir() or not child.name.isdigit():
                continue
            if energy_type and not (child / self.FILE_NAMES[energy_type]).exists():
                continue
            years.append(int(child.name))
        return sorted(years, reverse=True)
