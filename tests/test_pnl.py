# tests/test_pnl.py

from datetime import date

import pytest

from parsing import clean_number, parse_trade_date
from pnl import (
    DailyPnL, DayOfMonthPnLSource, SAMPLE_DAILY_PNL, StaticPnLSource, lookup_pnl, parse_pnl_csv,
)


def test_lookup_returns_exact_stored_pair():
    source = StaticPnLSource({date(2025, 3, 3): DailyPnL(-0.0, True)})

    assert lookup_pnl(source, date(2025, 3, 3)) == DailyPnL(-0.0, True)
    assert lookup_pnl(source, date(2025, 3, 4)) is None
    assert source.get(date(2025, 3, 3)) == 0.0
    assert source.get(date(2025, 3, 4)) is None


def test_full_date_keys_do_not_collide_across_months():
    source = StaticPnLSource({date(2025, 3, 3): DailyPnL(10.0, True)})
    assert lookup_pnl(source, date(2025, 4, 3)) is None


def test_day_of_month_fixture_repeats_every_month():
    source = DayOfMonthPnLSource()

    assert lookup_pnl(source, date(2025, 3, 1)) == DailyPnL(-123.45, False)
    assert lookup_pnl(source, date(2025, 7, 15)) == DailyPnL(678.90, True)
    assert lookup_pnl(source, date(2025, 7, 2)) is None


def test_for_month_skips_days_the_month_does_not_have():
    month = DayOfMonthPnLSource().for_month(2025, 2)

    assert date(2025, 2, 28) in month
    assert len(month) == len([day for day in SAMPLE_DAILY_PNL if day <= 28])


def test_daily_pnl_from_amount():
    assert DailyPnL.from_amount(5.0) == DailyPnL(5.0, True)
    assert DailyPnL.from_amount(-5.0) == DailyPnL(-5.0, False)
    assert DailyPnL.from_amount(0.0).is_gain is False


@pytest.mark.parametrize("raw, expected", [
    ("12", 12.0), (" $1,234.50 ", 1234.5), ("(12.00)", -12.0), ("-3.5", -3.5),
])
def test_clean_number(raw, expected):
    assert clean_number(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "nan", "inf", "1.2.3"])
def test_clean_number_rejects(raw):
    with pytest.raises(ValueError):
        clean_number(raw)


def test_parse_trade_date_formats():
    assert parse_trade_date("01/31/2025 12:53 PM").hour == 12
    assert parse_trade_date("01/31/2025 18:05").minute == 5
    assert parse_trade_date("01/31/2025").date() == date(2025, 1, 31)
    assert parse_trade_date("2025-01-31").date() == date(2025, 1, 31)
    with pytest.raises(ValueError):
        parse_trade_date("yesterday")


def test_parse_pnl_csv_sums_per_day_and_skips_bad_rows():
    data = (
        "Date,Instrument,NetPl\n"
        "01/31/2025 09:15,BTC,10.50\n"
        "01/31/2025 14:40,ETH,(4.25)\n"
        "02/03/2025,BTC,7\n"
        "not a date,BTC,1\n"
        "02/04/2025,BTC,oops\n"
    )

    amounts, rejected = parse_pnl_csv(data)

    assert amounts == {date(2025, 1, 31): pytest.approx(6.25), date(2025, 2, 3): 7.0}
    assert rejected == 2


def test_parse_pnl_csv_missing_column_rejects_rows():
    amounts, rejected = parse_pnl_csv("Date,Amount\n01/31/2025,3\n")
    assert amounts == {}
    assert rejected == 1


def test_database_source_round_trip(pnl_db):
    pnl_db.record(date(2025, 3, 3), 120.0)
    pnl_db.record(date(2025, 3, 4), -20.0)
    pnl_db.record(date(2025, 4, 1), 5.0, is_gain=False)

    assert lookup_pnl(pnl_db, date(2025, 3, 3)) == DailyPnL(120.0, True)
    assert lookup_pnl(pnl_db, date(2025, 4, 1)) == DailyPnL(5.0, False)
    assert lookup_pnl(pnl_db, date(2025, 3, 5)) is None
    assert pnl_db.for_month(2025, 3) == {
        date(2025, 3, 3): DailyPnL(120.0, True),
        date(2025, 3, 4): DailyPnL(-20.0, False),
    }


def test_database_source_import_adds_to_existing_days(pnl_db):
    pnl_db.record(date(2025, 3, 3), 100.0)

    changed = pnl_db.import_rows({date(2025, 3, 3): -150.0, date(2025, 3, 6): 30.0})

    assert changed == 2
    assert lookup_pnl(pnl_db, date(2025, 3, 3)) == DailyPnL(-50.0, False)
    assert pnl_db.get(date(2025, 3, 6)) == 30.0


def test_parse_pnl_csv_short_row_is_rejected():
    amounts, rejected = parse_pnl_csv("Instrument,Date,NetPl\nBTC,01/31/2025,5\nETH\n")

    assert amounts == {date(2025, 1, 31): 5.0}
    assert rejected == 1


def test_parse_trade_date_rejects_missing_value():
    with pytest.raises(ValueError):
        parse_trade_date(None)
