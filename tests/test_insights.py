"""
Unit tests for insight synthesis.
"""

from datetime import datetime, timezone

from claude_metrics.core.history import HistoryData, aggregate_history
from claude_metrics.core.insights import productivity, prompt_stats, synthesize_fun_stats
from claude_metrics.storage.models import EventRecord


class TestFunStats:
    """Test the fixed word/page/book heuristics."""

    def test_eighty_thousand_tokens(self):
        stats = synthesize_fun_stats(80000)
        assert stats.words_written == 60000
        assert stats.pages_written == 120
        assert stats.books_equivalent == 0.8
        assert stats.minutes_saved == 1500
        assert stats.hours_saved == 25.0

    def test_zero_tokens(self):
        stats = synthesize_fun_stats(0)
        assert stats.to_dict() == {
            "wordsWritten": 0,
            "pagesWritten": 0,
            "booksEquivalent": 0.0,
            "hoursSaved": 0.0,
            "minutesSaved": 0,
        }

    def test_half_word_rounds_up(self):
        """2 tokens is 1.5 words, which rounds to 2."""
        assert synthesize_fun_stats(2).words_written == 2


class TestPromptStats:
    """Test prompt length statistics."""

    def test_no_lengths(self):
        stats = prompt_stats(5, [])
        assert (stats.avg_length, stats.max_length) == (0, 0)
        assert stats.total == 5

    def test_average_and_max(self):
        stats = prompt_stats(3, [10, 20, 31])
        assert stats.avg_length == 20  # 20.33 rounded
        assert stats.max_length == 31

    def test_half_average_rounds_up(self):
        assert prompt_stats(2, [1, 2]).avg_length == 2


class TestProductivity:
    """Test averages derived from history."""

    def test_empty_history(self):
        result = productivity(HistoryData())
        assert result.to_dict() == {
            "avgPromptsPerDay": 0,
            "avgPromptsPerSession": 0,
            "activeDays": 0,
            "totalDaysSpan": 0,
        }

    def test_averages(self):
        utc = timezone.utc
        records = [
            EventRecord(timestamp=datetime(2024, 1, 1, 9, tzinfo=utc), session_id="a"),
            EventRecord(timestamp=datetime(2024, 1, 1, 10, tzinfo=utc), session_id="a"),
            EventRecord(timestamp=datetime(2024, 1, 1, 11, tzinfo=utc), session_id="b"),
            EventRecord(timestamp=datetime(2024, 1, 3, 9, tzinfo=utc)),
        ]
        result = productivity(aggregate_history(records, tz=utc))
        assert result.avg_prompts_per_day == 2
        assert result.avg_prompts_per_session == 2
        assert result.active_days == 2
        assert result.total_days_span == 3
