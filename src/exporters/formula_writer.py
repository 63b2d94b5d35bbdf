"""
Formula-linked aggregation sheets

The per-center sheet holds one SUMIF formula per center and metric, reading
from the detailed sheet; the total sheet holds one SUM formula per metric over
the per-center sheet. Value columns are located by header label in the written
detailed sheet, never by a fixed index, so the same code serves every energy
type and language.
"""
from typing import Dict, Iterable, List, Optional, Sequence

from openpyxl.utils import get_column_letter

from parsers import normalize_label


def column_letter(index: int) -> str:
    """Zero-based column index to spreadsheet letters (0 -> A, 26 -> AA)"""
    if index < 0:
        raise ValueError(f"Column index must be >= 0, got {index}")
    return get_column_letter(index + 1)


def quote_sheet_name(name: str) -> str:
    return "'" + name.replace("'", "''") + "'"


def header_labels(ws, header_row: int = 1) -> List[str]:
    return ['' if cell.value is None else str(cell.value) for cell in ws[header_row]]


def find_column_letter_by_label(ws, label: str, header_row: int = 1) -> Optional[str]:
    """
    Letter of the first header cell matching ``label``

    Matching ignores case, accents and surrounding whitespace. Returns None
    when no header matches.
    """
    wanted = normalize_label(label)
    if not wanted:
        return None
    for cell in ws[header_row]:
        if normalize_label(cell.value) == wanted:
            return cell.column_letter
    return None


def build_row_formula(template: str, letters: Dict[str, str], row: int, divisor) -> str:
    """Expand a ``{column_key}`` template into a formula for one detailed row"""
    references = {key: f"{letter}{row}" for key, letter in letters.items()}
    divisor_text = str(int(divisor)) if float(divisor).is_integer() else repr(float(divisor))
    return '=' + template.format(divisor=divisor_text, **references)


def sumif_formula(detailed_name: str, center_letter: str, criteria_cell: str, value_letter: str) -> str:
    sheet = quote_sheet_name(detailed_name)
    return (f"=SUMIF({sheet}!${center_letter}:${center_letter},{criteria_cell},"
            f"{sheet}!${value_letter}:${value_letter})")


def sum_formula(per_center_name: str, letter: str) -> str:
    sheet = quote_sheet_name(per_center_name)
    return f"=SUM({sheet}!${letter}:${letter})"


class MetricColumn:
    """A per-center column: its header and where its values come from"""

    def __init__(self, label: str, total_label: str, source_label: str, fallback_letter: Optional[str] = None):
        self.label = label
        self.total_label = total_label
        self.source_label = source_label
        self.fallback_letter = fallback_letter


def write_per_center_sheet(ws, detailed_ws, centers: Iterable[str], center_label: str,
                           metrics: Sequence[MetricColumn], logger=None) -> Dict[str, str]:
    """
    Fill ``ws`` with one row per center and a SUMIF per metric

    ``centers`` must be in first-encounter order. Returns the resolved detailed
    column letter for each metric label.
    """
    center_letter = find_column_letter_by_label(detailed_ws, center_label) or 'B'

    resolved = {}
    for metric in metrics:
        letter = find_column_letter_by_label(detailed_ws, metric.source_label)
        if letter is None:
            letter = metric.fallback_letter
            if logger is not None:
                logger.warning("Detailed header not found, using fallback column",
                               header=metric.source_label, column=letter)
        resolved[metric.label] = letter

    ws.cell(row=1, column=1, value=center_label)
    for col, metric in enumerate(metrics, start=2):
        ws.cell(row=1, column=col, value=metric.label)

    for row, center in enumerate(centers, start=2):
        ws.cell(row=row, column=1, value=center)
        for col, metric in enumerate(metrics, start=2):
            value_letter = resolved[metric.label]
            if value_letter is None:
                ws.cell(row=row, column=col, value=0)
                continue
            ws.cell(row=row, column=col,
                    value=sumif_formula(detailed_ws.title, center_letter, f"$A{row}", value_letter))

    return resolved


def write_total_sheet(ws, per_center_ws, metrics: Sequence[MetricColumn]) -> None:
    """One header row and one row of SUM formulas over the per-center metric columns"""
    for col, metric in enumerate(metrics, start=1):
        source_letter = find_column_letter_by_label(per_center_ws, metric.label) or column_letter(col)
        ws.cell(row=1, column=col, value=metric.total_label)
        ws.cell(row=2, column=col, value=sum_formula(per_center_ws.title, source_letter))
