"""
Streak detection over sparse activity calendars.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from .history import DailyAggregate


@dataclass(frozen=True)
class StreakResult:
    """Current and longest run of consecutive active days."""
    current: int
    longest: int
    best_day: Optional[DailyAggregate]

    def __post_init__(self):
        """Validate streak lengths."""
        if self.current < 0 or self.longest < 0:
            raise ValueError("streak lengths cannot be negative")
        if self.longest < self.current:
            raise ValueError("longest streak cannot be shorter than current streak")

    def to_dict(self) -> Dict[str, object]:
        return {
            "current": self.current,
            "longest": self.longest,
            "bestDay": self.best_day.to_dict() if self.best_day else None,
        }


def _gap_days(earlier: date, later: date) -> int:
    return (later - earlier).days


def calculate_streaks(
    daily: List[DailyAggregate],
    today: Optional[date] = None,
) -> StreakResult:
    """Compute current streak, longest streak, and best day.

    The current streak only counts if the latest active date is today or
    yesterday. Best day keeps the first of several equally busy days.

    Args:
        daily: Daily aggregates (any order; dates are sorted here)
        today: Reference date, defaults to the current UTC date

    Returns:
        StreakResult
    """
    if not daily:
        return StreakResult(current=0, longest=0, best_day=None)

    if today is None:
        today = datetime.now(timezone.utc).date()

    dates = sorted(date.fromisoformat(day.date) for day in daily)

    longest = 1
    run = 1
    for previous, current in zip(dates, dates[1:]):
        if _gap_days(previous, current) == 1:
            run += 1
        else:
            longest = max(longest, run)
            run = 1
    longest = max(longest, run)

    current_streak = 0
    if _gap_days(dates[-1], today) <= 1:
        current_streak = 1
        for index in range(len(dates) - 2, -1, -1):
            if _gap_days(dates[index], dates[index + 1]) != 1:
                break
            current_streak += 1

    best_day = None
    for day in daily:
        if day.prompts > (best_day.prompts if best_day else 0):
            best_day = day

    return StreakResult(current=current_streak, longest=longest, best_day=best_day)
