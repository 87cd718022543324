from __future__ import annotations

from datetime import date, timedelta

import pytest

from gadash.dates import parse_compact_date, relative_date


def test_relative_date_zero_is_today_zero_padded() -> None:
    assert relative_date(0, today=date(2024, 5, 7)) == "2024-05-07"


def test_relative_date_crosses_year_boundary() -> None:
    assert relative_date(3, today=date(2024, 1, 2)) == "2023-12-30"


def test_relative_date_uses_calendar_days_across_leap_february() -> None:
    assert relative_date(1, today=date(2024, 3, 1)) == "2024-02-29"
    assert relative_date(1, today=date(2023, 3, 1)) == "2023-02-28"


def test_relative_date_is_exactly_n_days_before_today() -> None:
    today = date(2024, 1, 2)
    anchor = date.fromisoformat(relative_date(0, today=today))
    for n in range(0, 400, 7):
        assert anchor - date.fromisoformat(relative_date(n, today=today)) == timedelta(days=n)


def test_relative_date_defaults_to_current_date() -> None:
    assert relative_date(0) == date.today().isoformat()


def test_parse_compact_date() -> None:
    assert parse_compact_date("20240115") == date(2024, 1, 15)
    assert parse_compact_date("19991231") == date(1999, 12, 31)


def test_parse_compact_date_ignores_trailing_characters() -> None:
    assert parse_compact_date("20240115T00") == date(2024, 1, 15)


@pytest.mark.parametrize("value", ["2024011", "", "2024-01-15", "2024ab15"])
def test_parse_compact_date_rejects_malformed_strings(value: str) -> None:
    with pytest.raises(ValueError, match="YYYYMMDD"):
        parse_compact_date(value)


def test_parse_compact_date_rejects_impossible_dates() -> None:
    with pytest.raises(ValueError, match="calendar date"):
        parse_compact_date("20230229")
