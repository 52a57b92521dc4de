# lidera/performance/formatters.py
"""
Formatting utilities for names, scores and dates shown in pages.
"""
import logging
from datetime import date, datetime
from typing import Any, Optional, Union
from urllib.parse import quote

import pandas as pd

from .parsing import month_label, parse_score

logger = logging.getLogger(__name__)

PROFILE_PAGE_PATH = "Employee_Profile"


def get_initials(name: str) -> str:
    """
    First letter of the first and last name.

    'Ana Maria Souza' -> 'AS', 'Ana' -> 'A', '' -> ''
    """
    parts = (name or '').split()
    if not parts:
        return ''
    if len(parts) == 1:
        return parts[0][0].upper()
    return f"{parts[0][0]}{parts[-1][0]}".upper()


def format_short_name(name: str) -> str:
    """First and last name only; one- and two-word names are returned as is."""
    parts = (name or '').split()
    if not parts:
        return ''
    if len(parts) <= 2:
        return ' '.join(parts)
    return f"{parts[0]} {parts[-1]}"


def employee_link(key: str, page: str = PROFILE_PAGE_PATH) -> str:
    """Relative URL of the profile page for a resolution key ('id:...' / 'name:...')."""
    return f"{page}?employee={quote(key or '', safe='')}"


def format_score(value: Any, decimals: int = 2) -> str:
    """
    Format score with fixed decimals

    Args:
        value: Score (comma decimals accepted)
        decimals: Number of decimal places

    Returns:
        Formatted string, '-' for missing values
    """
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return "-"
    return f"{parse_score(value):.{decimals}f}"


def format_date(value: Union[str, datetime, date, None], format_str: str = "%d/%m/%Y") -> str:
    """
    Format date consistently

    Args:
        value: Date value to format
        format_str: Output format string

    Returns:
        Formatted date string
    """
    if value is None or value == "":
        return "-"
    if isinstance(value, (datetime, date)):
        return value.strftime(format_str)
    try:
        return pd.to_datetime(str(value)[:19]).strftime(format_str)
    except (ValueError, TypeError):
        logger.debug(f"Unparseable date: {value}")
        return str(value)


def format_period(value: Optional[str]) -> str:
    """Any stored date to the 'jan/24' period label."""
    return month_label(value)


__all__ = [
    'get_initials',
    'format_short_name',
    'employee_link',
    'format_score',
    'format_date',
    'format_period',
    'PROFILE_PAGE_PATH',
]
