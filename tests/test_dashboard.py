# tests/test_dashboard.py

from datetime import date

from Dashboard import build_pnl_figure, month_from_query
from palette import AppColors
from pnl import DailyPnL


def test_month_from_query():
    today = date(2026, 10, 19)
    assert month_from_query('?year=2025&month=3', today) == date(2025, 3, 1)
    assert month_from_query('', today) == date(2026, 10, 1)
    assert month_from_query('?month=14', today) == date(2026, 10, 1)
    assert month_from_query(None, today) == date(2026, 10, 1)


def test_figure_bars_colored_by_gain_flag():
    figure = build_pnl_figure({
        date(2025, 3, 5): DailyPnL(-89.32, False),
        date(2025, 3, 3): DailyPnL(456.78, True),
    })

    bar = figure.data[0]
    assert list(bar.x) == ['2025-03-03', '2025-03-05']
    assert list(bar.y) == [456.78, -89.32]
    assert list(bar.marker.color) == [AppColors.secondary_accent, AppColors.warning_accent]


def test_empty_month_figure():
    figure = build_pnl_figure({})
    assert len(figure.data[0].x or []) == 0


def test_month_from_query_huge_year():
    today = date(2026, 10, 19)
    assert month_from_query('?year=99999999999999999999&month=3', today) == date(2026, 10, 1)
