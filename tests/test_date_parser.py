"""Tests for date parser with relative dates."""

import pytest
from datetime import date, timedelta
from dateutil.relativedelta import relativedelta
from microledger.utils.date_parser import parse_date, get_date_range


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    result = parse_date("2025-01-15")
    assert result == date(2025, 1, 15)


def test_parse_today():
    """Test parsing 'today'."""
    assert parse_date("today") == date.today()
    assert parse_date("  Today ") == date.today()


def test_parse_yesterday_and_tomorrow():
    """Test parsing 'yesterday' and 'tomorrow'."""
    assert parse_date("yesterday") == date.today() - timedelta(days=1)
    assert parse_date("tomorrow") == date.today() + timedelta(days=1)


def test_parse_last_month():
    """Test parsing 'last month'."""
    result = parse_date("last month")
    # Should be first day of last month
    today = date.today()
    if today.month == 1:
        expected = date(today.year - 1, 12, 1)
    else:
        expected = date(today.year, today.month - 1, 1)
    assert result == expected


def test_parse_month_boundaries():
    """Test parsing 'start of month' and 'end of month'."""
    today = date.today()
    assert parse_date("start of month") == today.replace(day=1)

    end = parse_date("end of month")
    assert end.month == today.month
    assert (end + timedelta(days=1)).day == 1


def test_parse_year_boundaries():
    """Test parsing 'start of year' and 'end of year'."""
    today = date.today()
    assert parse_date("start of year") == date(today.year, 1, 1)
    assert parse_date("end of year") == date(today.year, 12, 31)


def test_parse_invalid():
    """Test parsing an unparseable date."""
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date("next fortnight-ish")


def test_parse_standard_formats():
    """Test parsing various standard date formats."""
    # These should all work via dateutil parser
    assert parse_date("January 15, 2025") == date(2025, 1, 15)
    assert parse_date("15/01/2025") == date(2025, 1, 15)


def test_get_date_range_this_month():
    """Test get_date_range for this-month."""
    today = date.today()
    start, end = get_date_range("this-month")
    assert start == date(today.year, today.month, 1)
    assert end == today


def test_get_date_range_this_year():
    """Test get_date_range for this-year."""
    today = date.today()
    start, end = get_date_range("this-year")
    assert start == date(today.year, 1, 1)
    assert end == today


def test_get_date_range_this_quarter():
    """Test get_date_range for this-quarter."""
    today = date.today()
    start, end = get_date_range("this-quarter")
    assert start.day == 1
    assert start.month in (1, 4, 7, 10)
    assert start <= today < start + relativedelta(months=3)
    assert end == today


def test_get_date_range_last_quarter():
    """Test get_date_range for last-quarter."""
    this_start, _ = get_date_range("this-quarter")
    start, end = get_date_range("last-quarter")
    assert start == this_start - relativedelta(months=3)
    assert end == this_start - timedelta(days=1)


def test_get_date_range_last_month():
    """Test get_date_range for last-month."""
    today = date.today()
    start, end = get_date_range("last-month")
    # First day of last month
    expected_start = (today - relativedelta(months=1)).replace(day=1)
    # Last day of last month (day before first day of current month)
    expected_end = today.replace(day=1) - timedelta(days=1)
    assert start == expected_start
    assert end == expected_end


def test_get_date_range_last_year():
    """Test get_date_range for last-year."""
    today = date.today()
    start, end = get_date_range("last-year")
    assert start == date(today.year - 1, 1, 1)
    assert end == date(today.year - 1, 12, 31)


def test_get_date_range_explicit_year():
    """Test get_date_range for a four-digit year."""
    assert get_date_range("2025") == (date(2025, 1, 1), date(2025, 12, 31))


def test_get_date_range_invalid_period():
    """Test get_date_range with invalid period."""
    with pytest.raises(ValueError, match="Unknown period"):
        get_date_range("invalid-period")
