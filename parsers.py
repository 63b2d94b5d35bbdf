"""
Lenient parsers for values read from provider spreadsheets

Provider files mix locales (``1.234,56`` and ``1,234.56``), date layouts and
stray whitespace. Every parser here returns ``None`` instead of raising so a
single bad cell never aborts an export.
"""
import math
import re
import unicodedata
from datetime import date, datetime, timezone
from numbers import Number
from typing import Any, Optional

import numpy as np
import pandas as pd
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils.datetime import from_excel

# Whitespace variants that appear in exported spreadsheets
_SPACES = ('\u00a0', '\u202f', '\u2007')

_ISO_DATE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ][\d:.]+(?:Z|[+-]\d{2}:?\d{2})?)?$')
_COMPACT_DATE = re.compile(r'^(\d{4})(\d{2})(\d{2})$')
_LOOSE_DATE = re.compile(r'^(\d{1,2})\s*[/\-.]\s*(\d{1,2})\s*[/\-.]\s*(\d{2,4})$')

_COMMA_GROUPING = re.compile(r'^[+-]?[1-9]\d{0,2}(,\d{3})+$')
_DOT_GROUPING = re.compile(r'^[+-]?[1-9]\d{0,2}(\.\d{3}){2,}$')
_NUMBER_TOKEN = re.compile(r'[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?')
_EDGE_TEXT = re.compile(r'^[^\d+-]+|[^\d]+$')

# Plausible Excel serial day numbers (1954-10-03 .. 2119-01-09)
_SERIAL_RANGE = (20000, 80000)


def is_blank(value: Any) -> bool:
    """True for None, NaN/NaT and whitespace-only strings"""
    if value is None:
        return True
    if isinstance(value, str):
        return not clean_text(value)
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def strip_illegal_characters(text: str) -> str:
    """Drop control characters that worksheets cannot store"""
    return ILLEGAL_CHARACTERS_RE.sub('', text)


def clean_text(text: str) -> str:
    """Trim, drop control characters, turn non-breaking spaces into spaces and collapse whitespace"""
    text = strip_illegal_characters(text)
    for space in _SPACES:
        text = text.replace(space, ' ')
    return re.sub(r'\s+', ' ', text).strip()


def normalize_key(value: Any) -> str:
    """
    Normalize an entity name for lookups

    Applies NBSP-to-space, trim, Unicode NFKC and case folding so that
    "Iberdrola ", "IBERDROLA" and "iberdrola" resolve to the same key.
    """
    if is_blank(value):
        return ''
    text = clean_text(format_cell_text(value))
    text = unicodedata.normalize('NFKC', text)
    return text.casefold()


def normalize_label(value: Any) -> str:
    """Normalize a header label: accents stripped, trimmed, case folded"""
    if is_blank(value):
        return ''
    text = unicodedata.normalize('NFD', clean_text(str(value)))
    text = ''.join(ch for ch in text if not unicodedata.combining(ch))
    return text.casefold()


def format_cell_text(value: Any) -> str:
    """Render a cell value as the text a user would read in the spreadsheet"""
    if is_blank(value):
        return ''
    if isinstance(value, str):
        return clean_text(value)
    if isinstance(value, (bool, np.bool_)):
        return 'TRUE' if value else 'FALSE'
    if isinstance(value, datetime):
        if value.hour == value.minute == value.second == value.microsecond == 0:
            return value.date().isoformat()
        return value.isoformat(sep=' ')
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Number):
        number = float(value)
        if math.isfinite(number) and number.is_integer():
            return str(int(number))
        return repr(number)
    return clean_text(str(value))


def _expand_year(year_text: str) -> int:
    year = int(year_text)
    if len(year_text) == 2:
        return 1900 + year if year >= 50 else 2000 + year
    return year


def _build_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a date from a cell value

    Tries, in order: native date/datetime values, Excel serial numbers, ISO
    ``yyyy-MM-dd`` (optionally followed by a time), compact ``yyyyMMdd`` and
    finally ``d/M/y`` style text with ``/``, ``-`` or ``.`` separators. For the
    last form the day-first reading wins; the month-first reading is used only
    when day-first is not a valid calendar date. Two-digit years >= 50 map to
    19xx, the rest to 20xx.

    Returns None when nothing matches.
    """
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, Number) and not isinstance(value, (bool, np.bool_)):
        number = float(value)
        if not math.isfinite(number):
            return None
        if _SERIAL_RANGE[0] <= number < _SERIAL_RANGE[1]:
            try:
                return from_excel(number).date()
            except (ValueError, OverflowError):
                return None
        if not number.is_integer():
            return None
        value = str(int(number))

    text = clean_text(str(value))
    if not text:
        return None

    match = _ISO_DATE.match(text)
    if match:
        return _build_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    match = _COMPACT_DATE.match(text)
    if match:
        return _build_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    match = _LOOSE_DATE.match(text)
    if match:
        first, second = int(match.group(1)), int(match.group(2))
        year = _expand_year(match.group(3))
        day_first = _build_date(year, second, first)
        if day_first is not None:
            return day_first
        return _build_date(year, first, second)

    return None


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a timestamp; plain dates resolve to midnight. Aware values are converted to naive UTC."""
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        if isinstance(value, pd.Timestamp):
            value = value.to_pydatetime()
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, str):
        text = clean_text(value)
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            parsed = None
        if parsed is not None:
            if parsed.tzinfo is not None:
                parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
            return parsed
    parsed_date = parse_date(value)
    if parsed_date is None:
        return None
    return datetime(parsed_date.year, parsed_date.month, parsed_date.day)


def parse_double(value: Any) -> Optional[float]:
    """
    Parse a number written with either decimal separator

    Rules:
      * when both ``,`` and ``.`` appear, the last one is the decimal separator
        and the other one is stripped as grouping
      * a lone ``,`` is grouping when every group after it has exactly three
        digits (``1,234,567``), otherwise it is the decimal separator (``21,5``)
      * a lone ``.`` is always decimal (``14.600`` is 14.6) unless it repeats in
        three-digit groups (``1.234.567``)
      * any remaining text around the number (units, currency) is ignored

    Returns None for unparseable or non-finite input, never 0 by default.
    """
    if is_blank(value):
        return None
    if isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, Number):
        number = float(value)
        return number if math.isfinite(number) else None

    text = str(value)
    for space in _SPACES:
        text = text.replace(space, '')
    text = re.sub(r'\s+', '', text)
    if not text:
        return None
    core = _EDGE_TEXT.sub('', text)

    last_comma = text.rfind(',')
    last_dot = text.rfind('.')
    if last_comma >= 0 and last_dot >= 0:
        if last_comma > last_dot:
            text = text.replace('.', '').replace(',', '.')
        else:
            text = text.replace(',', '')
    elif last_comma >= 0:
        if _COMMA_GROUPING.match(core):
            text = text.replace(',', '')
        else:
            text = text.replace(',', '.')
    elif last_dot >= 0 and _DOT_GROUPING.match(core):
        text = text.replace('.', '')

    match = _NUMBER_TOKEN.search(text)
    if not match:
        return None
    try:
        number = float(match.group(0))
    except ValueError:
        return None
    return number if math.isfinite(number) else None
