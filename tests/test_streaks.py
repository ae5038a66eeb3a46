"""
Unit tests for streak calculation.
"""

from datetime import date

import pytest

from claude_metrics.core.history import DailyAggregate
from claude_metrics.core.streaks import StreakResult, calculate_streaks


def _days(*pairs):
    return [DailyAggregate(date=d, prompts=p) for d, p in pairs]


class TestStreakResult:
    """Test StreakResult validation."""

    def test_longest_must_cover_current(self):
        with pytest.raises(ValueError, match="longest streak"):
            StreakResult(current=3, longest=2, best_day=None)

    def test_negative_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            StreakResult(current=-1, longest=0, best_day=None)


class TestCalculateStreaks:
    """Test streak and best-day detection."""

    def test_empty_input(self):
        """No activity gives zero streaks and no best day."""
        result = calculate_streaks([], today=date(2024, 1, 10))
        assert result == StreakResult(current=0, longest=0, best_day=None)
        assert result.to_dict() == {"current": 0, "longest": 0, "bestDay": None}

    def test_three_consecutive_days(self):
        """Longest streak 3, best day is the busiest."""
        daily = _days(("2024-01-01", 5), ("2024-01-02", 5), ("2024-01-03", 9))
        result = calculate_streaks(daily, today=date(2024, 1, 3))
        assert result.longest == 3
        assert result.current == 3
        assert result.best_day.date == "2024-01-03"
        assert result.best_day.prompts == 9

    def test_current_counts_when_last_day_was_yesterday(self):
        """A streak ending yesterday is still current."""
        daily = _days(("2024-01-08", 1), ("2024-01-09", 1))
        assert calculate_streaks(daily, today=date(2024, 1, 10)).current == 2

    def test_current_zero_after_gap(self):
        """More than one day since last activity breaks the streak."""
        daily = _days(("2024-01-01", 1), ("2024-01-02", 1), ("2024-01-03", 1))
        result = calculate_streaks(daily, today=date(2024, 1, 5))
        assert result.current == 0
        assert result.longest == 3

    def test_current_stops_at_first_gap(self):
        """Current streak walks back only through consecutive days."""
        daily = _days(
            ("2024-01-01", 1), ("2024-01-02", 1), ("2024-01-03", 1),
            ("2024-01-07", 1), ("2024-01-08", 1),
        )
        result = calculate_streaks(daily, today=date(2024, 1, 8))
        assert result.current == 2
        assert result.longest == 3

    def test_longest_across_month_boundary(self):
        """Calendar arithmetic handles month ends."""
        daily = _days(("2024-02-28", 1), ("2024-02-29", 1), ("2024-03-01", 1))
        assert calculate_streaks(daily, today=date(2024, 6, 1)).longest == 3

    def test_isolated_days(self):
        """Non-consecutive days give a longest streak of 1."""
        daily = _days(("2024-01-01", 1), ("2024-01-05", 1))
        result = calculate_streaks(daily, today=date(2024, 1, 5))
        assert result.longest == 1
        assert result.current == 1

    def test_best_day_tie_keeps_first(self):
        """Equal prompt counts keep the earliest day."""
        daily = _days(("2024-01-01", 7), ("2024-01-02", 3), ("2024-01-03", 7))
        result = calculate_streaks(daily, today=date(2024, 1, 3))
        assert result.best_day.date == "2024-01-01"

    def test_longest_never_below_current(self):
        """Invariant holds for assorted calendars."""
        calendars = [
            _days(("2024-01-01", 1)),
            _days(("2024-01-01", 1), ("2024-01-02", 2), ("2024-01-04", 3)),
            _days(("2024-01-01", 1), ("2024-01-03", 2), ("2024-01-04", 3), ("2024-01-05", 1)),
        ]
        for daily in calendars:
            result = calculate_streaks(daily, today=date(2024, 1, 5))
            assert result.longest >= result.current
