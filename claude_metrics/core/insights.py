"""
Human-facing approximations derived from usage totals.

The constants are fixed heuristics (0.75 words per token, 500 words per
page, 80,000 words per book, 40 words per minute of typing).
"""

from dataclasses import dataclass
from typing import Dict, List

from .history import HistoryData
from .rounding import js_round, to_fixed

WORDS_PER_TOKEN = 0.75
WORDS_PER_PAGE = 500
WORDS_PER_BOOK = 80000
WORDS_PER_MINUTE = 40


@dataclass(frozen=True)
class FunStats:
    """Output volume restated as words, pages, books and typing time."""
    words_written: int
    pages_written: int
    books_equivalent: float
    hours_saved: float
    minutes_saved: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "wordsWritten": self.words_written,
            "pagesWritten": self.pages_written,
            "booksEquivalent": self.books_equivalent,
            "hoursSaved": self.hours_saved,
            "minutesSaved": self.minutes_saved,
        }


def synthesize_fun_stats(output_tokens: int) -> FunStats:
    """Derive fun stats from the total output token count."""
    words = js_round(output_tokens * WORDS_PER_TOKEN)
    minutes = js_round(words / WORDS_PER_MINUTE)
    return FunStats(
        words_written=words,
        pages_written=js_round(words / WORDS_PER_PAGE),
        books_equivalent=to_fixed(words / WORDS_PER_BOOK, 1),
        hours_saved=to_fixed(minutes / 60, 1),
        minutes_saved=minutes,
    )


@dataclass(frozen=True)
class PromptStats:
    total: int
    avg_length: int
    max_length: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "avgLength": self.avg_length,
            "maxLength": self.max_length,
        }


def prompt_stats(total: int, lengths: List[int]) -> PromptStats:
    """Average (rounded) and maximum prompt length; 0 when none recorded."""
    if not lengths:
        return PromptStats(total=total, avg_length=0, max_length=0)
    return PromptStats(
        total=total,
        avg_length=js_round(sum(lengths) / len(lengths)),
        max_length=max(lengths),
    )


@dataclass(frozen=True)
class Productivity:
    avg_prompts_per_day: int
    avg_prompts_per_session: int
    active_days: int
    total_days_span: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "avgPromptsPerDay": self.avg_prompts_per_day,
            "avgPromptsPerSession": self.avg_prompts_per_session,
            "activeDays": self.active_days,
            "totalDaysSpan": self.total_days_span,
        }


def productivity(history: HistoryData) -> Productivity:
    """Per-day and per-session prompt averages."""
    per_day = (
        js_round(history.total_prompts / history.active_days)
        if history.active_days > 0 else 0
    )
    per_session = (
        js_round(history.total_prompts / history.total_sessions)
        if history.total_sessions > 0 else 0
    )
    return Productivity(
        avg_prompts_per_day=per_day,
        avg_prompts_per_session=per_session,
        active_days=history.active_days,
        total_days_span=history.day_span,
    )
