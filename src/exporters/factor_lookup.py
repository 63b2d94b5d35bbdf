"""
Emission factor resolution per energy type

Unmatched entities resolve to a factor of 0.0 with ``found`` set to False; the
exporter records them on the diagnostics sheet and keeps going.
"""
from typing import Dict, Optional

from cups_store import CupsStore, normalize_cups
from factor_store import ElectricityGeneralFactors, FactorStore, FuelFactorEntry
from parsers import normalize_key


class FactorMatch:
    def __init__(self, entity: str, found: bool, **factors: float):
        self.entity = entity
        self.found = found
        self.factors = factors

    def __repr__(self):
        return f"FactorMatch({self.entity!r}, found={self.found}, {self.factors})"


class FactorLookup:
    """Base class: resolve the factor columns for one transformed row"""

    def resolve(self, values: Dict[str, object]) -> FactorMatch:
        raise NotImplementedError


class ElectricityFactorLookup(FactorLookup):
    """
    Market-based factor from the trading company, location-based from the year mix

    The marketer comes from the CUPS store when the supply point is registered
    there, otherwise from the row's emission-entity column.
    """

    def __init__(self, general: ElectricityGeneralFactors, cups_to_marketer: Optional[Dict[str, str]] = None):
        self.general = general
        self.cups_to_marketer = cups_to_marketer or {}
        self.marketer_factors = {c.key: c.emission_factor for c in general.trading_companies}

    def marketer_for(self, values) -> str:
        marketer = self.cups_to_marketer.get(normalize_cups(values.get('cups', '')), '')
        return marketer or str(values.get('emission_entity', '') or '')

    def resolve(self, values):
        marketer = self.marketer_for(values)
        key = normalize_key(marketer)
        found = key in self.marketer_factors
        return FactorMatch(marketer, found,
                           market_factor=self.marketer_factors.get(key, 0.0),
                           location_factor=self.general.location_based_factor)


class GasFactorLookup(FactorLookup):
    def __init__(self, factors: Dict[str, object], gas_type: str):
        self.factors = factors
        self.gas_type = gas_type

    def resolve(self, values):
        entry = self.factors.get(normalize_key(self.gas_type))
        if entry is None:
            return FactorMatch(self.gas_type, False, market_factor=0.0, location_factor=0.0)
        return FactorMatch(self.gas_type, True, market_factor=entry.market_factor,
                           location_factor=entry.location_factor)


class FuelFactorLookup(FactorLookup):
    """Tries the ``fuel|vehicle`` entry first, then the plain fuel entry"""

    def __init__(self, factors: Dict[str, object]):
        self.factors = factors

    def resolve(self, values):
        fuel_type = str(values.get('fuel_type', '') or '')
        vehicle_type = str(values.get('vehicle_type', '') or '')
        for key in (FuelFactorEntry.make_key(fuel_type, vehicle_type), FuelFactorEntry.make_key(fuel_type)):
            entry = self.factors.get(key)
            if entry is not None:
                return FactorMatch(fuel_type, True, emission_factor=entry.emission_factor)
        entity = f"{fuel_type} | {vehicle_type}" if vehicle_type else fuel_type
        return FactorMatch(entity, False, emission_factor=0.0)


class RefrigerantFactorLookup(FactorLookup):
    def __init__(self, factors: Dict[str, object]):
        self.factors = factors

    def resolve(self, values):
        refrigerant_type = str(values.get('refrigerant_type', '') or '')
        entry = self.factors.get(normalize_key(refrigerant_type))
        if entry is None:
            return FactorMatch(refrigerant_type, False, emission_factor=0.0)
        return FactorMatch(refrigerant_type, True, emission_factor=entry.pca)


def create_factor_lookup(energy_type: str, year: int, factor_store: FactorStore,
                         cups_store: Optional[CupsStore] = None, mapping=None) -> FactorLookup:
    """Load the factor tables an energy type needs for ``year``"""
    if energy_type == 'electricity':
        general = factor_store.load_general_factors(year)
        cups_to_marketer = cups_store.cups_to_marketer() if cups_store is not None else {}
        return ElectricityFactorLookup(general, cups_to_marketer)
    if energy_type == 'gas':
        return GasFactorLookup(factor_store.load_factors('gas', year), getattr(mapping, 'gas_type', ''))
    if energy_type == 'fuel':
        return FuelFactorLookup(factor_store.load_factors('fuel', year))
    if energy_type == 'refrigerant':
        return RefrigerantFactorLookup(factor_store.load_factors('refrigerant', year))
    raise ValueError(f"Unknown energy type: {energy_type}")
