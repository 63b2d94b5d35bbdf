"""
Loading provider and ERP spreadsheets

Workbooks (.xlsx/.xls) are read through pandas with openpyxl/xlrd; formula
cells come back as their last computed value. Formula cells of an .xlsx sheet
that carry no computed value (files written by scripts rather than a
spreadsheet application) are evaluated with pycel. CSV files are loaded as a
single sheet named ``Sheet1``.
"""
import io
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

import pandas as pd
from openpyxl import load_workbook
from pycel import ExcelCompiler

from logger_config import data_logger
from parsers import format_cell_text, is_blank, normalize_label, parse_date, parse_double, parse_datetime

CSV_SHEET_NAME = 'Sheet1'
FORMULA_SUFFIXES = ('.xlsx', '.xlsm')
_MOJIBAKE_MARKERS = ('Ã', 'Â')
_YEAR_PATTERN = re.compile(r'(?<!\d)(19\d{2}|20\d{2})(?!\d)')


class SourceReadError(Exception):
    """Raised when a source file or sheet cannot be opened"""


def is_csv(path) -> bool:
    return Path(path).suffix.lower() == '.csv'


def _excel_engine(path) -> Optional[str]:
    return 'xlrd' if Path(path).suffix.lower() == '.xls' else None


def read_csv_text(path) -> str:
    """Decode a CSV file as UTF-8 (BOM tolerated), falling back to Windows-1252"""
    raw = Path(path).read_bytes()
    try:
        text = raw.decode('utf-8-sig')
    except UnicodeDecodeError:
        data_logger.debug("CSV is not UTF-8, decoding as cp1252", path=str(path))
        return raw.decode('cp1252')

    if any(marker in text for marker in _MOJIBAKE_MARKERS):
        try:
            repaired = text.encode('cp1252').decode('utf-8')
        except (UnicodeEncodeError, UnicodeDecodeError):
            repaired = None
        if repaired is not None:
            data_logger.debug("Repaired double-encoded CSV text", path=str(path))
            return repaired
    return text


def _guess_delimiter(text: str) -> str:
    first_line = next((line for line in text.splitlines() if line.strip()), '')
    counts = {sep: first_line.count(sep) for sep in (',', ';', '\t')}
    best = max(counts, key=counts.get)
    return best if counts[best] else ','


def list_sheet_names(path) -> List[str]:
    """Sheet names of a workbook; CSV files expose a single sheet"""
    path = Path(path)
    if not path.exists():
        raise SourceReadError(f"File does not exist: {path}")
    if is_csv(path):
        return [CSV_SHEET_NAME]
    try:
        with pd.ExcelFile(path, engine=_excel_engine(path)) as workbook:
            return list(workbook.sheet_names)
    except Exception as e:
        raise SourceReadError(f"Cannot open workbook {path}: {e}") from e


def read_raw_frame(path, sheet_name: Optional[str] = None) -> pd.DataFrame:
    """Read a sheet with no header interpretation; every cell keeps its native type"""
    path = Path(path)
    if not path.exists():
        raise SourceReadError(f"File does not exist: {path}")

    if is_csv(path):
        if sheet_name not in (None, CSV_SHEET_NAME):
            raise SourceReadError(f"Sheet '{sheet_name}' not found in {path.name}")
        try:
            text = read_csv_text(path)
            if not text.strip():
                return pd.DataFrame()
            return pd.read_csv(io.StringIO(text), header=None, dtype=object, keep_default_na=False,
                               sep=_guess_delimiter(text), skip_blank_lines=False)
        except (OSError, pd.errors.ParserError) as e:
            raise SourceReadError(f"Cannot read CSV {path}: {e}") from e

    try:
        with pd.ExcelFile(path, engine=_excel_engine(path)) as workbook:
            if sheet_name is None:
                sheet_name = workbook.sheet_names[0]
            if sheet_name not in workbook.sheet_names:
                raise SourceReadError(f"Sheet '{sheet_name}' not found in {path.name}")
            return workbook.parse(sheet_name=sheet_name, header=None, dtype=object)
    except SourceReadError:
        raise
    except Exception as e:
        raise SourceReadError(f"Cannot read workbook {path}: {e}") from e


def _formula_address(sheet_name: str, coordinate: str) -> str:
    if re.fullmatch(r'\w+', sheet_name):
        return f"{sheet_name}!{coordinate}"
    escaped = sheet_name.replace("'", "''")
    return f"'{escaped}'!{coordinate}"


def _frame_value(frame: pd.DataFrame, position: int, col: int) -> Any:
    if position >= len(frame.index) or col >= len(frame.columns):
        return None
    return frame.iat[position, col]


def evaluate_formula_cells(path, sheet_name: str,
                           frame: pd.DataFrame) -> Tuple[pd.DataFrame, Set[Tuple[int, int]]]:
    """
    Fill formula cells that have no computed value

    Returns the completed frame and the (row position, column) pairs of the
    formulas that could not be evaluated; those cells stay blank.
    """
    path = Path(path)
    if path.suffix.lower() not in FORMULA_SUFFIXES:
        return frame, set()

    try:
        workbook = load_workbook(path, read_only=True, data_only=False)
    except Exception as e:
        raise SourceReadError(f"Cannot read workbook {path}: {e}") from e
    try:
        pending = [(cell.row - 1, cell.column - 1, cell.coordinate)
                   for row in workbook[sheet_name].iter_rows() for cell in row
                   if cell.data_type == 'f']
    finally:
        workbook.close()
    pending = [cell for cell in pending if is_blank(_frame_value(frame, cell[0], cell[1]))]
    if not pending:
        return frame, set()

    # Trailing rows or columns whose formulas have no value were dropped by pandas
    row_count = max([len(frame.index)] + [position + 1 for position, _, _ in pending])
    col_count = max([len(frame.columns)] + [col + 1 for _, col, _ in pending])
    frame = frame.reindex(index=range(row_count), columns=range(col_count)).astype(object)

    compiler = ExcelCompiler(filename=str(path))
    unevaluated = set()
    for position, col, coordinate in pending:
        try:
            value = compiler.evaluate(_formula_address(sheet_name, coordinate))
        except Exception as e:
            data_logger.warning("Formula could not be evaluated", sheet=sheet_name, cell=coordinate,
                                error=f"{type(e).__name__}: {e}")
            unevaluated.add((position, col))
            continue
        if isinstance(value, str) and value.startswith('#'):
            data_logger.warning("Formula evaluated to an error", sheet=sheet_name, cell=coordinate, value=value)
            unevaluated.add((position, col))
            continue
        frame.iat[position, col] = value

    data_logger.log_data_stats({
        'sheet': sheet_name,
        'evaluated': len(pending) - len(unevaluated),
        'unevaluated': len(unevaluated),
    }, "FORMULAS")
    return frame, unevaluated


def detect_header_row(df: pd.DataFrame) -> Optional[int]:
    """Index of the first row holding at least one non-empty cell"""
    for position in range(len(df.index)):
        if any(not is_blank(value) for value in df.iloc[position].tolist()):
            return position
    return None


class SourceRow:
    """One data row of a provider sheet with typed accessors by column index"""

    def __init__(self, row_number: int, values: List[Any], unevaluated: Optional[Set[int]] = None):
        self.row_number = row_number
        self.values = values
        self.unevaluated = unevaluated or set()

    def raw(self, index: int) -> Any:
        if index is None or index < 0 or index >= len(self.values):
            return None
        value = self.values[index]
        return None if is_blank(value) else value

    def text(self, index: int) -> str:
        return format_cell_text(self.raw(index))

    def number(self, index: int) -> Optional[float]:
        return parse_double(self.raw(index))

    def date(self, index: int):
        return parse_date(self.raw(index))

    def datetime(self, index: int):
        return parse_datetime(self.raw(index))

    def is_unevaluated(self, index: int) -> bool:
        """True when the cell holds a formula that could not be evaluated"""
        return index in self.unevaluated

    def is_empty(self) -> bool:
        return not self.unevaluated and all(is_blank(v) for v in self.values)


class SourceSheet:
    """A loaded provider sheet: header labels plus the data rows below them"""

    def __init__(self, frame: pd.DataFrame, name: str = CSV_SHEET_NAME, path: Optional[str] = None,
                 unevaluated: Optional[Set[Tuple[int, int]]] = None):
        self.frame = frame
        self.name = name
        self.path = path
        self.unevaluated: Dict[int, Set[int]] = {}
        for position, col in unevaluated or ():
            self.unevaluated.setdefault(position, set()).add(col)
        self.header_row = detect_header_row(frame)

    @property
    def headers(self) -> List[str]:
        if self.header_row is None:
            return []
        return [format_cell_text(v) for v in self.frame.iloc[self.header_row].tolist()]

    def find_column(self, label: str) -> int:
        """Column index whose header matches ``label`` ignoring case and accents, or -1"""
        wanted = normalize_label(label)
        for index, header in enumerate(self.headers):
            if wanted and normalize_label(header) == wanted:
                return index
        return -1

    def rows(self) -> Iterator[SourceRow]:
        """Data rows after the header; row numbers are 1-based like the spreadsheet"""
        if self.header_row is None:
            return
        for position in range(self.header_row + 1, len(self.frame.index)):
            values = self.frame.iloc[position].tolist()
            row = SourceRow(position + 1, values, self.unevaluated.get(position))
            if not row.is_empty():
                yield row

    @property
    def data_row_count(self) -> int:
        if self.header_row is None:
            return 0
        return len(self.frame.index) - self.header_row - 1


def load_sheet(path, sheet_name: Optional[str] = None) -> SourceSheet:
    """Load a sheet for export; raises SourceReadError when it cannot be read"""
    if sheet_name is None and not is_csv(path):
        sheet_names = list_sheet_names(path)
        sheet_name = sheet_names[0] if sheet_names else None
    frame = read_raw_frame(path, sheet_name)
    frame, unevaluated = evaluate_formula_cells(path, sheet_name, frame) if sheet_name else (frame, set())
    sheet = SourceSheet(frame, sheet_name or CSV_SHEET_NAME, str(path), unevaluated)
    data_logger.log_data_stats({
        'sheet': sheet.name,
        'rows': len(frame.index),
        'columns': len(frame.columns),
        'header_row': sheet.header_row,
        'unevaluated_formulas': len(unevaluated),
    }, "SOURCE")
    return sheet


def extract_year(value: Any) -> Optional[int]:
    """Year of a date-like cell, or the first 19xx/20xx number found in its text"""
    parsed = parse_date(value)
    if parsed is not None:
        return parsed.year
    match = _YEAR_PATTERN.search(format_cell_text(value))
    return int(match.group(1)) if match else None


def load_valid_invoices(path, sheet_name: Optional[str], invoice_header: str,
                        conformity_header: str, year: int) -> Set[str]:
    """
    Invoice numbers from an ERP export whose conformity date is in ``year`` or later

    Both columns are located by header label. Returns an empty set when either
    header is missing.
    """
    sheet = load_sheet(path, sheet_name)
    invoice_col = sheet.find_column(invoice_header)
    conformity_col = sheet.find_column(conformity_header)
    if invoice_col < 0 or conformity_col < 0:
        data_logger.warning("ERP headers not found", invoice_header=invoice_header,
                            conformity_header=conformity_header, path=str(path))
        return set()

    valid = set()
    for row in sheet.rows():
        invoice = row.text(invoice_col)
        conformity_year = extract_year(row.raw(conformity_col))
        if invoice and conformity_year is not None and conformity_year >= year:
            valid.add(invoice)

    data_logger.log_data_stats({'valid_invoices': len(valid), 'year': year}, "ERP")
    return valid
