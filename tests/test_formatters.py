from datetime import date

import pytest

from lidera.performance.formatters import (
    employee_link,
    format_date,
    format_period,
    format_score,
    format_short_name,
    get_initials,
)


@pytest.mark.parametrize("name, expected", [
    ("Ana Maria Souza", "AS"),
    ("ana", "A"),
    ("", ""),
    (None, ""),
])
def test_get_initials(name, expected):
    assert get_initials(name) == expected


def test_format_short_name():
    assert format_short_name("Ana Maria de Souza") == "Ana Souza"
    assert format_short_name("  Ana   Souza ") == "Ana Souza"
    assert format_short_name("") == ""


def test_employee_link_encodes_key():
    assert employee_link("id:abc123") == "Employee_Profile?employee=id%3Aabc123"
    assert employee_link("name:ana souza") == "Employee_Profile?employee=name%3Aana%20souza"


@pytest.mark.parametrize("value, expected", [
    (8.456, "8.46"),
    ("7,5", "7.50"),
    (None, "-"),
    (float("nan"), "-"),
])
def test_format_score(value, expected):
    assert format_score(value) == expected


def test_format_score_decimals():
    assert format_score(9, decimals=1) == "9.0"


def test_format_date():
    assert format_date("2024-01-15") == "15/01/2024"
    assert format_date("2024-01-15T10:30:00.123456") == "15/01/2024"
    assert format_date(date(2024, 3, 1), "%m/%Y") == "03/2024"
    assert format_date("") == "-"
    assert format_date(None) == "-"
    assert format_date("sem data") == "sem data"


def test_format_period():
    assert format_period("2024-08-01") == "ago/24"
    assert format_period(None) == "N/A"
