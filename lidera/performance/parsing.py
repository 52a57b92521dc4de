# lidera/performance/parsing.py
"""
Value coercion helpers shared by analytics, forms and import.

Nothing here raises on malformed input: scores fall back to 0 and
unparseable dates to None.
"""

import math
import re
from datetime import date, datetime
from typing import Any, Dict, Optional

from .constants import PT_MONTHS, PT_MONTH_NUMBERS, MIN_SCORE, MAX_SCORE, HIGHLIGHT_YES

_MONTH_KEY_RE = re.compile(r'^(\d{4})-(\d{1,2})')
_NUMERIC_MONTH_RE = re.compile(r'^(\d{1,2})[/\-.](\d{2}|\d{4})$')
_YEAR_SUFFIX_RE = re.compile(r'(\d{2,4})$')


# =============================================================================
# SCORES
# =============================================================================

def parse_score(value: Any) -> float:
    """
    Coerce a score to float.

    "8,5" -> 8.5, 7 -> 7.0, None / NaN / junk -> 0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return 0.0 if math.isnan(value) or math.isinf(value) else float(value)
    text = str(value).strip().replace(',', '.')
    if not text:
        return 0.0
    try:
        number = float(text)
    except ValueError:
        return 0.0
    return 0.0 if math.isnan(number) or math.isinf(number) else number


def clamp_score(value: Any) -> float:
    return min(MAX_SCORE, max(MIN_SCORE, parse_score(value)))


def evaluation_score(record: Dict[str, Any]) -> float:
    """Overall score of an evaluation: `average`, falling back to legacy `notaFinal`."""
    average = record.get('average')
    if isinstance(average, (int, float)) and not isinstance(average, bool):
        return parse_score(average)
    if isinstance(average, str) and average.strip():
        return parse_score(average)
    return parse_score(record.get('notaFinal'))


def evaluation_details(record: Dict[str, Any]) -> Dict[str, float]:
    """Criterion -> score map, reading legacy `detalhes` when `details` is absent."""
    raw = record.get('details') or record.get('detalhes') or {}
    if not isinstance(raw, dict):
        return {}
    return {str(k): parse_score(v) for k, v in raw.items()}


def average_of(scores: Dict[str, Any]) -> float:
    """Mean of a score map rounded to 2 decimals, 0 for an empty map."""
    values = [parse_score(v) for v in scores.values()]
    if not values:
        return 0.0
    return round(sum(values) / len(values), 2)


def is_highlight(value: Any) -> bool:
    """funcionarioMes may be 'Sim', 'sim' or True."""
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == HIGHLIGHT_YES.lower()


# =============================================================================
# DATES
# =============================================================================

def month_key(value: Any) -> Optional[str]:
    """'YYYY-MM' of a date-like value, None when it cannot be read."""
    if isinstance(value, (datetime, date)):
        return f"{value.year:04d}-{value.month:02d}"
    if not isinstance(value, str):
        return None
    match = _MONTH_KEY_RE.match(value.strip())
    if not match:
        return None
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        return None
    return f"{year:04d}-{month:02d}"


def month_label(key: Optional[str]) -> str:
    """'2024-01' -> 'jan/24'"""
    key = month_key(key) if key else None
    if not key:
        return 'N/A'
    year, month = key.split('-')
    return f"{PT_MONTHS[int(month) - 1]}/{year[2:]}"


def reference_date(key: str) -> str:
    """'2024-01' -> '2024-01-01'"""
    return f"{key}-01"


def parse_reference_month(raw: Any) -> Optional[str]:
    """
    Normalize a reference month from an import file to 'YYYY-MM-01'.

    Accepts ISO dates ('2024-01-15', '2024-01'), numeric months ('01/2024',
    '1/24') and pt-BR labels ('jan/24', '/ago./25', 'janeiro 2024').
    """
    if raw is None:
        return None
    if isinstance(raw, (datetime, date)):
        return reference_date(month_key(raw))

    text = str(raw).strip()
    if not text:
        return None

    key = month_key(text)
    if key:
        return reference_date(key)

    numeric = _NUMERIC_MONTH_RE.match(text)
    if numeric:
        month, year = int(numeric.group(1)), numeric.group(2)
        if 1 <= month <= 12:
            year = f"20{year}" if len(year) == 2 else year
            return f"{year}-{month:02d}-01"
        return None

    clean = re.sub(r'[/.\s]', '', text).lower()
    month = None
    for name, number in PT_MONTH_NUMBERS.items():
        if clean.startswith(name) or name in clean:
            month = number
            break
    year_match = _YEAR_SUFFIX_RE.search(clean)
    if month is None or not year_match:
        return None

    year = year_match.group(1)
    if len(year) == 2:
        year = f"20{year}"
    elif len(year) != 4:
        return None
    return f"{year}-{month:02d}-01"


def in_date_range(date_raw: str, start: Optional[str], end: Optional[str]) -> bool:
    """String comparison on ISO dates; empty bounds are open."""
    if start and (not date_raw or date_raw < start):
        return False
    if end and (not date_raw or date_raw[:10] > end):
        return False
    return True


# =============================================================================
# NAMES & CODES
# =============================================================================

def normalize_name(value: Any) -> str:
    """Case-insensitive, trimmed, whitespace-collapsed name for joins."""
    if value is None:
        return ''
    return ' '.join(str(value).split()).casefold()


def normalize_code(value: Any) -> str:
    """Employee code for joins: '0042 ' and 42.0 both become '42'."""
    if value is None or isinstance(value, bool):
        return ''
    if isinstance(value, float):
        if math.isnan(value):
            return ''
        if value.is_integer():
            value = int(value)
    text = ''.join(str(value).split()).upper()
    if text.isdigit():
        text = text.lstrip('0') or '0'
    return text


def clean_text(value: Any) -> str:
    """CSV cell to stripped text, NaN and None to ''."""
    if value is None:
        return ''
    if isinstance(value, float) and math.isnan(value):
        return ''
    return str(value).strip()


__all__ = [
    'parse_score',
    'clamp_score',
    'evaluation_score',
    'evaluation_details',
    'average_of',
    'is_highlight',
    'month_key',
    'month_label',
    'reference_date',
    'parse_reference_month',
    'in_date_range',
    'normalize_name',
    'normalize_code',
    'clean_text',
]
