# tests/test_journal_stats.py

import pytest

from journal_stats import JournalStatistics, compute_statistics


def test_empty_input():
    assert compute_statistics([]) == JournalStatistics()


def test_mixed_days():
    stats = compute_statistics([-123.45, 456.78, -89.32, 234.56, 0.0])

    assert stats.count == 5
    assert stats.total == pytest.approx(478.57)
    assert stats.win_rate == pytest.approx(40.0)
    assert stats.average_win == pytest.approx(345.67)
    assert stats.average_loss == pytest.approx(-106.385)
    assert stats.profit_factor == pytest.approx(691.34 / 212.77)
    assert stats.expected_value == pytest.approx(0.4 * 345.67 - 0.4 * 106.385)
    assert stats.average_rr == pytest.approx(345.67 / 106.385)


def test_only_wins_has_no_ratios():
    stats = compute_statistics([10.0, 20.0])

    assert stats.win_rate == 100.0
    assert stats.profit_factor == 0.0
    assert stats.average_rr == 0.0
    assert stats.as_dict()['average_win'] == 15.0
