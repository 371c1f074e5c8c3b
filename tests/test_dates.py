from datetime import date, datetime

import pytest

from budgetwatch.dates import month_key, month_range, parse_date, parse_month, prev_month, recent_months


def test_month_range_handles_leap_february():
    assert month_range("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_range("2023-02") == (date(2023, 2, 1), date(2023, 2, 28))


def test_month_range_rejects_bad_key():
    with pytest.raises(ValueError):
        month_range("2024/02")


def test_parse_date_variants():
    assert parse_date("2024-03-05") == date(2024, 3, 5)
    assert parse_date("2024-03-05T10:00:00") == date(2024, 3, 5)
    assert parse_date(datetime(2024, 3, 5, 23, 59)) == date(2024, 3, 5)
    assert parse_date("yesterday") is None
    assert parse_date(20240305) is None
    assert parse_date("") is None


def test_month_helpers():
    assert month_key(date(2024, 3, 31)) == "2024-03"
    assert parse_month("2024-13") is None
    assert prev_month("2024-01") == "2023-12"
    assert recent_months("2024-02", 3) == ("2023-12", "2024-01", "2024-02")
