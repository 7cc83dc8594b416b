import datetime

import pytest

from tobacco_inventory.common.parsing import (
    format_amount,
    format_display_date,
    format_grouped,
    in_date_range,
    parse_date,
    parse_number,
)


@pytest.mark.parametrize(
    "value, expected",
    [("12.5", 12.5), ("12.5kg", 12.5), (" 7", 7.0), ("-3", -3.0), (".5", 0.5), (4, 4.0)],
)
def test_parse_number_reads_leading_number(value, expected):
    assert parse_number(value) == pytest.approx(expected)


@pytest.mark.parametrize("value", ["", "abc", None, "kg 12"])
def test_parse_number_defaults(value):
    assert parse_number(value) == 0.0
    assert parse_number(value, default=-1.0) == -1.0


def test_parse_date_iso_timestamp_keeps_written_day():
    assert parse_date("2025-01-15T23:30:00.000Z") == datetime.date(2025, 1, 15)


def test_parse_date_slash_dates():
    assert parse_date("2/4/2025") == datetime.date(2025, 2, 4)
    assert parse_date("2/4/2025", day_first=True) == datetime.date(2025, 4, 2)


def test_parse_date_javascript_string():
    value = "Thu Jul 31 2025 06:57:49 GMT+0200 (Central Africa Time)"
    assert parse_date(value) == datetime.date(2025, 7, 31)


@pytest.mark.parametrize("value", ["", "yesterday", "13/45/2025", "2025-02-30", None])
def test_parse_date_unreadable(value):
    assert parse_date(value) is None


def test_in_date_range_inclusive_bounds():
    start, end = datetime.date(2025, 1, 1), datetime.date(2025, 1, 31)
    assert in_date_range("2025-01-01T00:00:00Z", start, end)
    assert in_date_range("1/31/2025", start, end)
    assert not in_date_range("2025-02-01", start, end)


def test_in_date_range_without_bounds_accepts_anything():
    assert in_date_range("garbage", None, None)
    assert not in_date_range("garbage", datetime.date(2025, 1, 1), None)


def test_formatters():
    assert format_amount(2.5) == "2.50"
    assert format_amount(10) == "10.00"
    assert format_grouped(12345.6) == "12,346"
    assert format_display_date(datetime.date(2025, 7, 3)) == "03/07/2025"
