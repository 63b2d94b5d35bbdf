"""
Single-module workbook export

One engine serves the four energy types. It writes:

* ``<Module> - Extendido``   one row per accepted invoice, computed columns as formulas
* ``<Module> - Por centro``  SUMIF formulas per center over the detailed sheet
* ``<Module> - Total``       SUM formulas over the per-center sheet
* ``Diagnostics``            skipped rows, unmatched factors and counters
"""
import time
from pathlib import Path
from typing import Dict, Any, List, Optional

from openpyxl import Workbook

from config import carbon_config, YearSettings
from cups_store import CupsStore
from exporter_interface import EmissionExporterInterface, ExportRequest
from factor_store import FactorStore
from labels import Labels
from logger_config import data_logger, ProgressLogger
from parsers import normalize_label
from source_reader import SourceReadError, load_sheet
from .factor_lookup import create_factor_lookup
from .formula_writer import (MetricColumn, build_row_formula, column_letter,
                             write_per_center_sheet, write_total_sheet)
from .row_transformer import RowTransformer, ACCEPTED
from .schemas import EMISSION, TEXT, get_schema
from .workbook_styles import auto_fit_columns, number_format_for, style_header_row

DIAGNOSTICS_HEADERS = ['Row', 'Invoice', 'Status', 'Detail']


def resolve_output_path(output_path) -> Path:
    """openpyxl writes OOXML only, so legacy .xls targets become .xlsx"""
    path = Path(output_path)
    suffix = path.suffix.lower()
    if suffix == '.xls':
        new_path = path.with_suffix('.xlsx')
        data_logger.warning("Legacy .xls output is not supported, writing .xlsx instead",
                            requested=str(path), written=str(new_path))
        return new_path
    if suffix != '.xlsx':
        return path.with_name(path.name + '.xlsx')
    return path


def find_last_modified_column(headers: List[str], mapping, explicit_header: Optional[str] = None) -> int:
    """
    Column holding the last-modified timestamp of a fuel row

    Priority: the mapped ``completion_time`` column, then a header equal to
    ``explicit_header``, then any header mentioning "last" and "modif".
    """
    if mapping is not None and mapping.get_index('completion_time') >= 0:
        return mapping.get_index('completion_time')
    normalized = [normalize_label(h) for h in headers]
    if explicit_header:
        wanted = normalize_label(explicit_header)
        if wanted in normalized:
            return normalized.index(wanted)
    for index, header in enumerate(normalized):
        compact = header.replace(' ', '').replace('_', '')
        if ('last' in header and 'modif' in header) or 'lastmodified' in compact:
            return index
    return -1


class ModuleExporter(EmissionExporterInterface):
    """Generic exporter parametrized by an energy-type schema"""

    def __init__(self, energy_type: str, factor_store: FactorStore = None, cups_store: CupsStore = None,
                 labels: Labels = None, year_settings: YearSettings = None, config=None):
        super().__init__()
        self.schema = get_schema(energy_type)
        self.config = config or carbon_config
        self.factor_store = factor_store or FactorStore()
        self.cups_store = cups_store or CupsStore()
        self.labels = labels or Labels()
        self.year_settings = year_settings
        self.logger = data_logger
        self.diagnostics: List[List[Any]] = []

    def get_energy_type(self) -> str:
        return self.schema.energy_type

    def sheet_name(self, kind: str) -> str:
        return self.labels.sheet_name(self.schema.energy_type, kind)

    def get_sheet_names(self) -> List[str]:
        names = [self.sheet_name('detailed'), self.sheet_name('per_center'), self.sheet_name('total')]
        if self.config.get('export.write_diagnostics', True):
            names.append(self.labels.get('sheet.diagnostics'))
        return names

    def metric_columns(self) -> List[MetricColumn]:
        return [
            MetricColumn(
                self.labels.get(metric.label_key),
                self.labels.get(metric.total_label_key),
                self.labels.get(metric.source_label_key),
                column_letter(self.schema.column_index(metric.fallback_key)),
            )
            for metric in self.schema.metrics
        ]

    def _diagnose(self, row_number, invoice, status, detail='') -> None:
        self.diagnostics.append([row_number, invoice, status, detail])

    def export(self, request: ExportRequest) -> str:
        """
        Write the module workbook and return its path

        A missing or unreadable source still produces the sheet templates; the
        reason is recorded on the diagnostics sheet.
        """
        mapping = request.mapping
        if mapping is None or not mapping.is_complete():
            missing = mapping.missing_fields() if mapping is not None else ['mapping']
            raise ValueError(f"Incomplete {self.schema.energy_type} mapping, missing: {', '.join(missing)}")

        year = request.year
        if not year and self.year_settings is not None:
            year = self.year_settings.load_current_year()

        output_path = resolve_output_path(request.output_path)
        start_time = time.time()
        self.diagnostics = []
        self.stats = {
            'energy_type': self.schema.energy_type,
            'year': year,
            'rows_read': 0,
            'rows_accepted': 0,
            'skipped': {},
            'missing_factors': [],
            'centers': [],
            'totals': {},
        }
        self.logger.log_processing_step("EXPORT START", {'energy_type': self.schema.energy_type,
                                                         'source': request.source_path, 'year': year})

        wb = Workbook()
        detailed_ws = wb.active
        detailed_ws.title = self.sheet_name('detailed')
        self._write_detailed_header(detailed_ws)

        centers = self._write_detailed_rows(detailed_ws, request, year)

        per_center_ws = wb.create_sheet(self.sheet_name('per_center'))
        metrics = self.metric_columns()
        write_per_center_sheet(per_center_ws, detailed_ws, centers, self.labels.get('detailed.center'),
                               metrics, logger=self.logger)
        total_ws = wb.create_sheet(self.sheet_name('total'))
        write_total_sheet(total_ws, per_center_ws, metrics)

        for ws, first_value_col in ((per_center_ws, 2), (total_ws, 1)):
            style_header_row(ws)
            for row in ws.iter_rows(min_row=2, min_col=first_value_col):
                for cell in row:
                    cell.number_format = number_format_for(EMISSION)

        if self.config.get('export.write_diagnostics', True):
            self._write_diagnostics_sheet(wb.create_sheet(self.labels.get('sheet.diagnostics')))

        for ws in wb.worksheets:
            auto_fit_columns(ws)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            self.logger.error("Failed to write module workbook", exception=e, path=str(output_path))
            raise RuntimeError(f"Export error: {str(e)}")
        finally:
            wb.close()

        self.stats['output_path'] = str(output_path)
        self.stats['centers'] = centers
        self.logger.log_performance(f"{self.schema.energy_type} export", time.time() - start_time,
                                    self.stats['rows_read'])
        self.logger.log_file_operation("export", str(output_path), True, output_path.stat().st_size)
        return str(output_path)

    def _write_detailed_header(self, ws) -> None:
        for col, column in enumerate(self.schema.columns, start=1):
            ws.cell(row=1, column=col, value=self.labels.get(column.label_key))
        style_header_row(ws)
        ws.freeze_panes = 'A2'

    def _load_source(self, request: ExportRequest):
        if not request.source_path:
            self._diagnose('', '', 'NO_SOURCE', 'no provider file selected; writing template only')
            return None
        try:
            return load_sheet(request.source_path, request.sheet_name)
        except SourceReadError as e:
            self.logger.error("Provider sheet could not be read, writing template only", exception=e)
            self._diagnose('', '', 'SOURCE_READ_ERROR', str(e))
            return None

    def _build_transformer(self, request: ExportRequest, year: int, headers: List[str]) -> RowTransformer:
        schema = self.schema
        lookup = create_factor_lookup(schema.energy_type, year, self.factor_store, self.cups_store, request.mapping)
        centers_per_cups = self.cups_store.centers_per_cups() if schema.period_based else {}

        last_modified_index = -1
        if request.date_limit is not None and schema.energy_type == 'fuel':
            last_modified_index = find_last_modified_column(headers, request.mapping, request.last_modified_header)
            if last_modified_index < 0:
                self._diagnose('', '', 'LAST_MODIFIED_COLUMN_NOT_FOUND',
                               'date limit ignored: no last-modified column in the source sheet')

        return RowTransformer(
            schema, request.mapping, year, lookup,
            centers_per_cups=centers_per_cups,
            valid_invoices=request.valid_invoices,
            date_limit=request.date_limit,
            last_modified_index=last_modified_index,
            no_center_label=self.config.get('export.no_center_label', 'SIN_CENTRO'),
            divisor=self.config.get('export.emission_divisor', 1000),
            skip_outside_year=self.config.get('export.skip_rows_outside_year', True),
        )

    def _write_detailed_rows(self, ws, request: ExportRequest, year: int) -> List[str]:
        """Write accepted rows; returns center names in first-encounter order"""
        source = self._load_source(request)
        if source is None:
            return []
        if source.header_row is None:
            self._diagnose('', '', 'NO_HEADER_ROW', 'no non-empty header row detected in source sheet')
            return []

        transformer = self._build_transformer(request, year, source.headers)
        schema = self.schema
        letters = {key: column_letter(i) for i, key in enumerate(schema.column_keys())}
        divisor = transformer.divisor
        totals: Dict[str, float] = {}
        centers: List[str] = []
        seen = set()
        out_row = 2

        progress = ProgressLogger(self.logger, source.data_row_count, f"{schema.energy_type} rows")
        for source_row in source.rows():
            progress.update()
            self.stats['rows_read'] += 1
            result = transformer.transform(source_row)

            if result.status != ACCEPTED:
                skipped = self.stats['skipped']
                skipped[result.status] = skipped.get(result.status, 0) + 1
                self._diagnose(result.row_number, result.invoice, result.status, result.detail)
                continue

            for note in result.notes:
                self._diagnose(result.row_number, result.invoice, note, result.detail)
                if note == 'FACTOR_NOT_FOUND':
                    self.logger.warning("Emission factor not found, emissions computed as 0",
                                        row=result.row_number, detail=result.detail)
                    if result.detail not in self.stats['missing_factors']:
                        self.stats['missing_factors'].append(result.detail)

            values = dict(result.values)
            values['id'] = out_row - 1
            for col, column in enumerate(schema.columns, start=1):
                if column.is_formula:
                    value = build_row_formula(column.formula, letters, out_row, divisor)
                else:
                    value = values.get(column.key)
                cell = ws.cell(row=out_row, column=col, value=value)
                if column.kind != TEXT:
                    cell.number_format = number_format_for(column.kind)

            for key, amount in result.computed.items():
                totals[key] = totals.get(key, 0.0) + amount
            if result.center not in seen:
                seen.add(result.center)
                centers.append(result.center)
            out_row += 1
            self.stats['rows_accepted'] += 1

        progress.complete()
        self.stats['totals'] = totals
        self.logger.log_data_stats({
            'rows_read': self.stats['rows_read'],
            'rows_accepted': self.stats['rows_accepted'],
            'centers': len(centers),
        }, schema.energy_type.upper())
        return centers

    def _write_diagnostics_sheet(self, ws) -> None:
        for col, header in enumerate(DIAGNOSTICS_HEADERS, start=1):
            ws.cell(row=1, column=col, value=header)
        style_header_row(ws)
        row = 2
        for entry in self.diagnostics:
            for col, value in enumerate(entry, start=1):
                ws.cell(row=row, column=col, value=value)
            row += 1

        row += 1
        counters = [('processedRows', self.stats['rows_read']),
                    ('acceptedRows', self.stats['rows_accepted'])]
        counters += [(status, count) for status, count in sorted(self.stats['skipped'].items())]
        for name, value in counters:
            ws.cell(row=row, column=1, value=name)
            ws.cell(row=row, column=2, value=value)
            row += 1

    def calculate_summary_stats(self) -> Dict[str, Any]:
        stats = self.stats
        skipped_total = sum(stats.get('skipped', {}).values())
        return {
            'energy_type': stats.get('energy_type', self.schema.energy_type),
            'year': stats.get('year'),
            'rows_read': stats.get('rows_read', 0),
            'rows_accepted': stats.get('rows_accepted', 0),
            'rows_skipped': skipped_total,
            'center_count': len(stats.get('centers', [])),
            'missing_factor_count': len(stats.get('missing_factors', [])),
            'totals': dict(stats.get('totals', {})),
        }
