"""
General reports built from the per-module workbooks

* combined report: a cross-module summary sheet followed by every module sheet
* results report:  "Resultados generales", "Resultados por alcance", the module
  sheets and a diagnostics sheet describing what was detected
* summary report:  the list of module files that were supplied

Module sheets are copied with their styles and widths. A sheet name is prefixed
with the module label unless it already carries it. Formulas that point at a
renamed sheet are rewritten to the new name.
"""
import re
from copy import copy
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font

from config import carbon_config
from labels import Labels
from logger_config import main_logger
from parsers import format_cell_text, is_blank, normalize_label, strip_illegal_characters
from source_reader import SourceReadError, list_sheet_names, read_raw_frame
from .formula_writer import quote_sheet_name
from .module_exporter import resolve_output_path
from .workbook_styles import auto_fit_columns, style_header_row, style_total_row

MODULE_ORDER = ['electricity', 'gas', 'fuel', 'refrigerant']
MAX_SHEET_NAME = 31
_DIAGNOSTIC_MARKERS = ('diagn', 'debug', 'error', 'log')

# Keywords used to find the emissions column of each per-center sheet
_METRIC_KEYWORDS = {
    ('electricity', 'market'): (['market'], 3),
    ('electricity', 'location'): (['location'], 4),
    ('gas', 'emissions'): (['emisiones', 'emissions'], 3),
    ('fuel', 'emissions'): (['emisiones', 'emissions'], 3),
    ('refrigerant', 'emissions'): (['emisiones', 'emissions'], 3),
}


def is_diagnostic_sheet_name(name: str) -> bool:
    text = normalize_label(name)
    return any(marker in text for marker in _DIAGNOSTIC_MARKERS)


def make_unique_sheet_name(base: str, existing) -> str:
    """Trim to Excel's 31 characters and append " (n)" until the name is free"""
    taken = {name.casefold() for name in existing}
    candidate = base[:MAX_SHEET_NAME]
    counter = 2
    while candidate.casefold() in taken:
        suffix = f" ({counter})"
        candidate = base[:MAX_SHEET_NAME - len(suffix)] + suffix
        counter += 1
    return candidate


def prefixed_sheet_name(module_label: str, sheet_name: str) -> str:
    """'<Module> - <sheet>' unless the sheet name already starts with the module label"""
    if normalize_label(sheet_name).startswith(normalize_label(module_label)):
        return sheet_name
    return f"{module_label} - {sheet_name}"


def rewrite_sheet_references(formula: str, renames: Dict[str, str]) -> str:
    """Point ``'Old'!A1`` and ``Old!A1`` references at the renamed sheets"""
    for old, new in renames.items():
        if old == new:
            continue
        replacement = quote_sheet_name(new) + '!'
        formula = formula.replace(quote_sheet_name(old) + '!', replacement)
        if re.fullmatch(r'[A-Za-z_][\w.]*', old):
            formula = re.sub(r"(?<![\w'.])" + re.escape(old) + '!', lambda _m: replacement, formula)
    return formula


def find_column_index_by_keywords(ws, keywords: List[str], scan_rows: int = 3) -> int:
    """
    1-based column whose header holds every keyword, else any keyword, else -1

    Only the first ``scan_rows`` rows are inspected.
    """
    if ws is None or not keywords:
        return -1
    wanted = [normalize_label(k) for k in keywords]
    rows = list(ws.iter_rows(min_row=1, max_row=min(scan_rows, max(ws.max_row, 1))))
    for match_all in (True, False):
        for row in rows:
            for cell in row:
                text = normalize_label(cell.value)
                if not text:
                    continue
                hits = [k in text for k in wanted]
                if (all(hits) if match_all else any(hits)):
                    return cell.column
    return -1


def copy_sheet(source_ws, target_ws, renames: Dict[str, str]) -> None:
    """Copy values, styles, widths, merges and frozen panes between workbooks"""
    for row in source_ws.iter_rows():
        for cell in row:
            if cell.__class__.__name__ == 'MergedCell':
                continue
            value = cell.value
            if isinstance(value, str) and value.startswith('='):
                value = rewrite_sheet_references(value, renames)
            new_cell = target_ws.cell(row=cell.row, column=cell.column, value=value)
            if cell.has_style:
                new_cell.font = copy(cell.font)
                new_cell.fill = copy(cell.fill)
                new_cell.border = copy(cell.border)
                new_cell.alignment = copy(cell.alignment)
                new_cell.protection = copy(cell.protection)
                new_cell.number_format = cell.number_format

    for key, dimension in source_ws.column_dimensions.items():
        target_ws.column_dimensions[key].width = dimension.width
    for key, dimension in source_ws.row_dimensions.items():
        if dimension.height is not None:
            target_ws.row_dimensions[key].height = dimension.height
    for merged in source_ws.merged_cells.ranges:
        target_ws.merge_cells(str(merged))
    target_ws.freeze_panes = source_ws.freeze_panes


class GeneralReportExporter:
    """Builds the cross-module reports from module workbooks"""

    def __init__(self, labels: Labels = None, config=None):
        self.labels = labels or Labels()
        self.config = config or carbon_config
        self.logger = main_logger
        self.stats: Dict[str, object] = {}

    def get_stats(self):
        return self.stats

    def module_label(self, energy_type: str) -> str:
        return self.labels.module_label(energy_type)

    def load_module_workbook(self, path) -> Workbook:
        """Open a module file; .xls and .csv are converted to an in-memory workbook of values"""
        path = Path(path)
        if not path.exists():
            raise SourceReadError(f"File does not exist: {path}")
        if path.suffix.lower() == '.xlsx':
            try:
                return load_workbook(path)
            except Exception as e:
                raise SourceReadError(f"Cannot open workbook {path}: {e}") from e

        wb = Workbook()
        wb.remove(wb.active)
        for sheet_name in list_sheet_names(path):
            ws = wb.create_sheet(sheet_name[:MAX_SHEET_NAME])
            frame = read_raw_frame(path, sheet_name)
            for r, values in enumerate(frame.itertuples(index=False), start=1):
                for c, value in enumerate(values, start=1):
                    if isinstance(value, str):
                        value = strip_illegal_characters(value)
                    if not is_blank(value):
                        ws.cell(row=r, column=c, value=value)
        return wb

    def _copy_module_sheets(self, target_wb, energy_type: str, path) -> Dict[str, str]:
        """Copy every non-diagnostic sheet; returns source name -> copied name"""
        source_wb = self.load_module_workbook(path)
        module_label = self.module_label(energy_type)
        try:
            renames = {}
            for ws in source_wb.worksheets:
                if is_diagnostic_sheet_name(ws.title):
                    continue
                new_name = make_unique_sheet_name(prefixed_sheet_name(module_label, ws.title),
                                                  target_wb.sheetnames + list(renames.values()))
                renames[ws.title] = new_name

            for ws in source_wb.worksheets:
                if ws.title not in renames:
                    continue
                target_ws = target_wb.create_sheet(renames[ws.title])
                copy_sheet(ws, target_ws, renames)
                style_header_row(target_ws)
        finally:
            source_wb.close()

        self.logger.log_processing_step("MODULE SHEETS COPIED", {'module': energy_type,
                                                                 'sheets': list(renames.values())})
        return renames

    def per_center_variants(self, energy_type: str) -> List[str]:
        module_label = self.module_label(energy_type)
        per_center = self.labels.get('sheet.per_center')
        return [f"{module_label} - {per_center}", f"{module_label} {per_center}", per_center]

    def resolve_per_center_sheet(self, energy_type: str, renames: Dict[str, str]) -> Optional[str]:
        """Copied name of the module's per-center sheet, whichever naming variant the source used"""
        by_label = {normalize_label(source): target for source, target in renames.items()}
        for variant in self.per_center_variants(energy_type):
            target = by_label.get(normalize_label(variant))
            if target is not None:
                return target
        return None

    def _copy_modules(self, wb, module_files: Dict[str, str]) -> Tuple[Dict[str, str], List[str]]:
        """Copy each supplied module; returns energy type -> per-center sheet name, and skipped files"""
        per_center = {}
        failed = []
        for energy_type in MODULE_ORDER:
            path = module_files.get(energy_type)
            if not path:
                continue
            try:
                renames = self._copy_module_sheets(wb, energy_type, path)
            except SourceReadError as e:
                self.logger.error("Module workbook could not be read", exception=e, module=energy_type)
                failed.append(str(path))
                continue
            sheet_name = self.resolve_per_center_sheet(energy_type, renames)
            if sheet_name is None:
                self.logger.warning("No per-center sheet found in module workbook", module=energy_type,
                                    path=str(path))
            else:
                per_center[energy_type] = sheet_name
        return per_center, failed

    @staticmethod
    def collect_centers(wb, sheet_names: List[str]) -> List[str]:
        """Center names from column A of the per-center sheets, first-encounter order"""
        centers = []
        seen = set()
        for name in sheet_names:
            ws = wb[name]
            for row in range(2, ws.max_row + 1):
                center = format_cell_text(ws.cell(row=row, column=1).value)
                if center and center not in seen:
                    seen.add(center)
                    centers.append(center)
        return centers

    def _detect_columns(self, wb, per_center: Dict[str, str]) -> Dict[Tuple[str, str], int]:
        detected = {}
        for (energy_type, metric), (keywords, fallback) in _METRIC_KEYWORDS.items():
            ws = wb[per_center[energy_type]] if energy_type in per_center else None
            column = find_column_index_by_keywords(ws, keywords)
            detected[(energy_type, metric)] = column if column > 0 else fallback
        return detected

    def _write_summary_sheet(self, ws, centers: List[str], per_center: Dict[str, str],
                             columns: Dict[Tuple[str, str], int]) -> List[str]:
        """Cross-module table of VLOOKUP formulas; returns a few sample formulas"""
        labels = self.labels
        headers = [labels.get('detailed.center'), labels.get('report.electricity_market'),
                   labels.get('report.electricity_location'), labels.get('report.gas'),
                   labels.get('report.fuel'), labels.get('report.refrigerant'), labels.get('report.scope1'),
                   labels.get('report.scope2_market'), labels.get('report.scope2_location'),
                   labels.get('report.total_market'), labels.get('report.total_location')]
        for col, header in enumerate(headers, start=1):
            ws.cell(row=1, column=col, value=header)
        style_header_row(ws)

        def lookup(energy_type, metric, row):
            sheet = per_center.get(energy_type)
            if sheet is None:
                return 0
            last_letter = 'D' if energy_type == 'electricity' else 'C'
            column = columns[(energy_type, metric)]
            if column > (4 if energy_type == 'electricity' else 3):
                last_letter = 'Z'
            return f"=IFERROR(VLOOKUP($A{row},{quote_sheet_name(sheet)}!$A:${last_letter},{column},FALSE),0)"

        number_format = self.config.get('export.summary_format', '#,##0.00')
        samples = []
        row = 2
        for center in centers:
            values = [
                center,
                lookup('electricity', 'market', row),
                lookup('electricity', 'location', row),
                lookup('gas', 'emissions', row),
                lookup('fuel', 'emissions', row),
                lookup('refrigerant', 'emissions', row),
                f"=SUM(D{row}:F{row})",
                f"=B{row}",
                f"=C{row}",
                f"=G{row}+H{row}",
                f"=G{row}+I{row}",
            ]
            for col, value in enumerate(values, start=1):
                cell = ws.cell(row=row, column=col, value=value)
                if col > 1:
                    cell.number_format = number_format
            if len(samples) < 3:
                samples.append(str(values[1]))
            row += 1

        self._write_totals_row(ws, row, len(headers), number_format)
        return samples

    def _write_totals_row(self, ws, row: int, last_col: int, number_format: str) -> None:
        ws.cell(row=row, column=1, value=self.labels.get('report.total_row'))
        for col in range(2, last_col + 1):
            letter = ws.cell(row=1, column=col).column_letter
            value = f"=SUM({letter}2:{letter}{row - 1})" if row > 2 else 0
            ws.cell(row=row, column=col, value=value)
        style_total_row(ws, row, number_format)

    def _save(self, wb, output_path) -> str:
        path = resolve_output_path(output_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(path)
        except OSError as e:
            self.logger.error("Failed to write report", exception=e, path=str(path))
            raise RuntimeError(f"Export error: {str(e)}")
        finally:
            wb.close()
        self.logger.log_file_operation("report", str(path), True, path.stat().st_size)
        return str(path)

    def export_combined_report(self, module_files: Dict[str, str], output_path) -> str:
        """Summary sheet first, then the copied module sheets"""
        if not any(module_files.get(t) for t in MODULE_ORDER):
            raise ValueError("At least one module file is required")

        wb = Workbook()
        summary_ws = wb.active
        summary_ws.title = self.labels.get('report.summary_sheet')

        per_center, failed = self._copy_modules(wb, module_files)
        centers = self.collect_centers(wb, [per_center[t] for t in MODULE_ORDER if t in per_center])
        columns = self._detect_columns(wb, per_center)
        self._write_summary_sheet(summary_ws, centers, per_center, columns)
        auto_fit_columns(summary_ws)

        self.stats = {'report': 'combined', 'centers': centers, 'sheets': list(wb.sheetnames),
                      'failed_files': failed}
        return self._save(wb, output_path)

    def export_results_report(self, module_files: Dict[str, str], output_path) -> str:
        """General results, results by scope and a diagnostics sheet, plus the module sheets"""
        if not any(module_files.get(t) for t in MODULE_ORDER):
            raise ValueError("At least one module file is required")

        labels = self.labels
        wb = Workbook()
        results_ws = wb.active
        results_ws.title = labels.get('report.results_sheet')
        scope_ws = wb.create_sheet(labels.get('report.scope_sheet'))

        per_center, failed = self._copy_modules(wb, module_files)
        centers = self.collect_centers(wb, [per_center[t] for t in MODULE_ORDER if t in per_center])
        columns = self._detect_columns(wb, per_center)
        samples = self._write_summary_sheet(results_ws, centers, per_center, columns)
        self._write_scope_sheet(scope_ws, results_ws.title, centers)

        diagnostics_ws = wb.create_sheet(labels.get('sheet.diagnostics'))
        self._write_results_diagnostics(diagnostics_ws, module_files, failed, columns,
                                        list(wb.sheetnames), samples, centers)

        for ws in (results_ws, scope_ws, diagnostics_ws):
            auto_fit_columns(ws)

        self.stats = {'report': 'results', 'centers': centers, 'sheets': list(wb.sheetnames),
                      'failed_files': failed}
        return self._save(wb, output_path)

    def _write_scope_sheet(self, ws, results_name: str, centers: List[str]) -> None:
        labels = self.labels
        headers = [labels.get('detailed.center'), labels.get('report.scope1'), labels.get('report.scope2_market'),
                   labels.get('report.scope2_location'), labels.get('report.scope_total_market'),
                   labels.get('report.scope_total_location')]
        for col, header in enumerate(headers, start=1):
            ws.cell(row=1, column=col, value=header)
        style_header_row(ws)

        number_format = self.config.get('export.summary_format', '#,##0.00')
        sheet = quote_sheet_name(results_name)
        row = 2
        for center in centers:
            ws.cell(row=row, column=1, value=center)
            for col, source_col in enumerate(range(7, 12), start=2):
                cell = ws.cell(row=row, column=col,
                               value=f"=IFERROR(VLOOKUP($A{row},{sheet}!$A:$K,{source_col},FALSE),0)")
                cell.number_format = number_format
            row += 1
        self._write_totals_row(ws, row, len(headers), number_format)
        for cell in ws[row]:
            cell.font = Font(bold=True)

    def _write_results_diagnostics(self, ws, module_files, failed, columns, sheet_names, samples, centers):
        rows = [
            ('Generated', datetime.now().strftime('%Y-%m-%d %H:%M:%S')),
            ('Module sheets included', 'yes'),
            ('Centers discovered', len(centers)),
        ]
        for energy_type in MODULE_ORDER:
            rows.append((f"File {energy_type}", str(module_files.get(energy_type) or '')))
        for path in failed:
            rows.append(('Unreadable file', path))
        for (energy_type, metric), column in sorted(columns.items()):
            rows.append((f"Column {energy_type}/{metric}", column))
        rows.append(('Sheets', ', '.join(sheet_names)))
        for i, sample in enumerate(samples, start=1):
            rows.append((f"Sample formula {i}", sample.lstrip('=')))
        for center in centers:
            rows.append(('Center', center))

        for r, (key, value) in enumerate(rows, start=1):
            ws.cell(row=r, column=1, value=key)
            ws.cell(row=r, column=2, value=value)

    def export_summary_report(self, module_files: Dict[str, str], output_path) -> str:
        """One sheet listing which module files were supplied"""
        labels = self.labels
        wb = Workbook()
        ws = wb.active
        ws.title = labels.get('report.modules_sheet')
        ws.cell(row=1, column=1, value=labels.get('report.module'))
        ws.cell(row=1, column=2, value=labels.get('report.file'))
        style_header_row(ws)

        row = 2
        for energy_type in MODULE_ORDER:
            path = module_files.get(energy_type)
            ws.cell(row=row, column=1, value=self.module_label(energy_type))
            ws.cell(row=row, column=2, value=str(path) if path else '-')
            row += 1
        auto_fit_columns(ws)

        self.stats = {'report': 'summary', 'modules': [t for t in MODULE_ORDER if module_files.get(t)]}
        return self._save(wb, output_path)
