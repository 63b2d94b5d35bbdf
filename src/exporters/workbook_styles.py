"""
Cell styles shared by the module and general report workbooks
"""
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter

from config import carbon_config
from . import schemas

THIN_BORDER = Border(
    left=Side(style='thin', color='808080'),
    right=Side(style='thin', color='808080'),
    top=Side(style='thin', color='808080'),
    bottom=Side(style='thin', color='808080')
)


def number_format_for(kind: str) -> str:
    """openpyxl number format for a detailed column kind"""
    formats = {
        schemas.DATE: carbon_config.get('export.date_format', 'dd/mm/yyyy'),
        schemas.PERCENT: carbon_config.get('export.percentage_format', '0.00'),
        schemas.EMISSION: carbon_config.get('export.emission_format', '0.000000'),
        schemas.FACTOR: '0.000000',
        schemas.NUMBER: '#,##0.00',
    }
    return formats.get(kind, 'General')


def style_header_row(ws, row: int = 1) -> None:
    """Bold labels on a grey fill with thin borders"""
    fill_color = carbon_config.get('formatting.header_fill', 'D9D9D9')
    for cell in ws[row]:
        if cell.value is None:
            continue
        cell.font = Font(bold=True)
        cell.fill = PatternFill(start_color=fill_color, end_color=fill_color, fill_type="solid")
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        cell.border = THIN_BORDER


def style_total_row(ws, row: int, number_format: str = None) -> None:
    for cell in ws[row]:
        cell.font = Font(bold=True)
        cell.border = THIN_BORDER
        if number_format and cell.column > 1:
            cell.number_format = number_format


def auto_fit_columns(ws) -> None:
    """Size each column to its longest rendered value within the configured bounds"""
    if not carbon_config.get('formatting.auto_fit_columns', True):
        return
    min_width = carbon_config.get('formatting.min_column_width', 8)
    max_width = carbon_config.get('formatting.max_column_width', 45)

    for col_idx in range(1, ws.max_column + 1):
        max_length = 0
        for row_idx in range(1, ws.max_row + 1):
            value = ws.cell(row=row_idx, column=col_idx).value
            if value is None:
                continue
            text = str(value)
            # Formulas render as numbers
            length = 14 if text.startswith('=') else len(text)
            max_length = max(max_length, length)
        ws.column_dimensions[get_column_letter(col_idx)].width = max(min_width, min(max_width, max_length + 2))
