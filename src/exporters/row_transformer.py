"""
Turns provider rows into detailed-sheet rows

Each source row is read through the column mapping, parsed leniently,
pro-rated into the reporting year, matched to its emission factor and either
accepted or skipped with a status code for the diagnostics sheet.
"""
from datetime import date, datetime, time
from typing import Dict, List, Optional, Set

from cups_store import normalize_cups
from proration import applicable_amount, applicable_percentage, period_overlaps_year
from source_reader import SourceRow
from .factor_lookup import FactorLookup
from .schemas import EnergySchema

ACCEPTED = 'ACCEPTED'
SKIPPED_INVOICE_FILTER = 'SKIPPED_INVOICE_FILTER'
SKIPPED_ZERO_AMOUNT = 'SKIPPED_ZERO_AMOUNT'
SKIPPED_YEAR = 'SKIPPED_YEAR'
SKIPPED_OUTSIDE_YEAR = 'SKIPPED_OUTSIDE_YEAR'
SKIPPED_LAST_MODIFIED_AFTER_LIMIT = 'SKIPPED_LAST_MODIFIED_AFTER_LIMIT'
# Skip status for quantity rows, note for period rows
FORMULA_UNEVALUATED = 'FORMULA_UNEVALUATED'

# Notes attached to accepted rows
FACTOR_NOT_FOUND = 'FACTOR_NOT_FOUND'
DATE_UNPARSEABLE = 'DATE_UNPARSEABLE'
AMOUNT_UNPARSEABLE = 'AMOUNT_UNPARSEABLE'


class TransformedRow:
    """Outcome of transforming one source row"""

    def __init__(self, row_number: int, status: str, invoice: str = '', detail: str = ''):
        self.row_number = row_number
        self.status = status
        self.invoice = invoice
        self.detail = detail
        self.center = ''
        self.values: Dict[str, object] = {}
        self.computed: Dict[str, float] = {}
        self.notes: List[str] = []

    @property
    def accepted(self) -> bool:
        return self.status == ACCEPTED

    def __repr__(self):
        return f"TransformedRow(row={self.row_number}, status={self.status}, center={self.center!r})"


def end_of_day(limit) -> Optional[datetime]:
    """Date limits are inclusive: a plain date covers the whole day"""
    if limit is None:
        return None
    if isinstance(limit, datetime):
        return limit
    if isinstance(limit, date):
        return datetime.combine(limit, time.max)
    raise TypeError(f"Unsupported date limit: {limit!r}")


class RowTransformer:
    def __init__(self, schema: EnergySchema, mapping, year: int, factor_lookup: FactorLookup,
                 centers_per_cups: Optional[Dict[str, int]] = None,
                 valid_invoices: Optional[Set[str]] = None,
                 date_limit=None, last_modified_index: int = -1,
                 no_center_label: str = 'SIN_CENTRO', divisor: float = 1000.0,
                 skip_outside_year: bool = True):
        self.schema = schema
        self.mapping = mapping
        self.year = int(year)
        self.factor_lookup = factor_lookup
        self.centers_per_cups = centers_per_cups or {}
        self.valid_invoices = {str(v).strip() for v in (valid_invoices or set()) if str(v).strip()}
        self.date_limit = end_of_day(date_limit)
        self.last_modified_index = last_modified_index
        self.no_center_label = no_center_label
        self.divisor = float(divisor)
        self.skip_outside_year = skip_outside_year

    def _field(self, row: SourceRow, field: str) -> str:
        return row.text(self.mapping.get_index(field))

    def _resolve_center(self, *candidates: str) -> str:
        for candidate in candidates:
            if candidate:
                return candidate
        return self.no_center_label

    def _filtered_out(self, invoice: str) -> bool:
        return bool(self.valid_invoices) and invoice not in self.valid_invoices

    def transform(self, row: SourceRow) -> TransformedRow:
        invoice = self._field(row, 'invoice_number')
        if self._filtered_out(invoice):
            return TransformedRow(row.row_number, SKIPPED_INVOICE_FILTER, invoice,
                                  f"invoice '{invoice}' is not in the valid invoice set")
        if self.schema.period_based:
            return self._transform_period_row(row, invoice)
        return self._transform_quantity_row(row, invoice)

    def _transform_period_row(self, row: SourceRow, invoice: str) -> TransformedRow:
        mapping = self.mapping
        start = row.date(mapping.get_index('start_date'))
        end = row.date(mapping.get_index('end_date'))

        if (self.skip_outside_year and start is not None and end is not None
                and end >= start and not period_overlaps_year(start, end, self.year)):
            return TransformedRow(row.row_number, SKIPPED_OUTSIDE_YEAR, invoice,
                                  f"period {start.isoformat()}..{end.isoformat()} is outside {self.year}")

        result = TransformedRow(row.row_number, ACCEPTED, invoice)
        cups = self._field(row, 'cups')
        entity = self._field(row, 'emission_entity')

        consumption_index = mapping.get_index('consumption')
        consumption = row.number(consumption_index)
        if consumption is None:
            consumption = 0.0
            if row.is_unevaluated(consumption_index):
                result.notes.append(FORMULA_UNEVALUATED)
                result.detail = 'consumption formula could not be evaluated; using 0.0'
            else:
                result.notes.append(AMOUNT_UNPARSEABLE)
        if start is None or end is None:
            result.notes.append(DATE_UNPARSEABLE)

        year_percentage = applicable_percentage(start, end, self.year)
        applicable = applicable_amount(start, end, consumption, self.year)

        centers = self.centers_per_cups.get(normalize_cups(cups), 1) if cups else 1
        center_percentage = 100.0 / centers if centers > 0 else 100.0
        center_amount = applicable * center_percentage / 100.0

        values = {
            'center': '',
            'emission_entity': entity,
            'cups': cups,
            'invoice': invoice,
            'start_date': start,
            'end_date': end,
            'consumption': consumption,
            'year_percentage': year_percentage,
            'center_percentage': center_percentage,
        }
        if self.schema.energy_type == 'gas':
            values['gas_type'] = getattr(mapping, 'gas_type', '')

        match = self.factor_lookup.resolve(values)
        values.update(match.factors)
        if not match.found:
            result.notes.append(FACTOR_NOT_FOUND)
            result.detail = f"no emission factor for '{match.entity}' in {self.year}; using 0.0"

        result.center = self._resolve_center(self._field(row, 'center'), cups, invoice)
        values['center'] = result.center
        result.values = values
        result.computed = {
            'applicable': applicable,
            'center_amount': center_amount,
            'market_emissions': center_amount * match.factors.get('market_factor', 0.0) / self.divisor,
            'location_emissions': center_amount * match.factors.get('location_factor', 0.0) / self.divisor,
        }
        return result

    def _last_modified(self, row: SourceRow) -> Optional[datetime]:
        if self.last_modified_index < 0:
            return None
        return row.datetime(self.last_modified_index)

    def _transform_quantity_row(self, row: SourceRow, invoice: str) -> TransformedRow:
        schema = self.schema
        mapping = self.mapping
        amount_field = 'amount' if schema.energy_type == 'fuel' else 'quantity'

        amount_index = mapping.get_index(amount_field)
        amount = row.number(amount_index)
        if amount is None and row.is_unevaluated(amount_index):
            return TransformedRow(row.row_number, FORMULA_UNEVALUATED, invoice,
                                  f"{amount_field} formula could not be evaluated")
        if schema.skip_non_positive and (amount is None or amount <= 0):
            return TransformedRow(row.row_number, SKIPPED_ZERO_AMOUNT, invoice,
                                  f"{amount_field} is empty or not positive")

        invoice_date = row.date(mapping.get_index('invoice_date'))
        if schema.filter_invoice_year and (invoice_date is None or invoice_date.year != self.year):
            detail = 'invoice date could not be parsed' if invoice_date is None \
                else f"invoice date {invoice_date.isoformat()} is not in {self.year}"
            return TransformedRow(row.row_number, SKIPPED_YEAR, invoice, detail)

        if self.date_limit is not None:
            modified = self._last_modified(row)
            if modified is not None and modified > self.date_limit:
                return TransformedRow(row.row_number, SKIPPED_LAST_MODIFIED_AFTER_LIMIT, invoice,
                                      f"last modified {modified.isoformat(sep=' ')} is after the limit")

        result = TransformedRow(row.row_number, ACCEPTED, invoice)
        if invoice_date is None:
            result.notes.append(DATE_UNPARSEABLE)
        amount = amount if amount is not None else 0.0

        if schema.energy_type == 'fuel':
            values = {
                'responsible': self._field(row, 'responsible'),
                'fuel_type': self._field(row, 'fuel_type'),
                'vehicle_type': self._field(row, 'vehicle_type'),
            }
        else:
            values = {
                'person': self._field(row, 'person'),
                'refrigerant_type': self._field(row, 'refrigerant_type'),
            }
        values.update({
            'invoice': invoice,
            'provider': self._field(row, 'provider'),
            'invoice_date': invoice_date,
            amount_field: amount,
        })

        match = self.factor_lookup.resolve(values)
        values['emission_factor'] = match.factors.get('emission_factor', 0.0)
        if not match.found:
            result.notes.append(FACTOR_NOT_FOUND)
            result.detail = f"no emission factor for '{match.entity}' in {self.year}; using 0.0"

        result.center = self._resolve_center(self._field(row, 'center'), invoice)
        values['center'] = result.center
        result.values = values
        result.computed = {
            amount_field: amount,
            'emissions': amount * values['emission_factor'] / self.divisor,
        }
        return result
