"""
Read-only query operations behind the metrics dashboard.

Each query re-reads its sources and recomputes from scratch, so repeated
or overlapping calls never share mutable state. Results are plain
JSON-shaped dicts and lists in the camelCase shape the dashboard expects.

Activity views (daily, heatmap, projects, tools) treat a missing log as
empty data. Views that need the usage snapshot (stats, insights, cache,
models) fail when it is missing.
"""

import logging
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Callable, Dict, List, Optional

from .history import HistoryData, aggregate_history
from .insights import productivity, prompt_stats, synthesize_fun_stats
from .pricing import compute_cache_report, compute_cost_report, compute_model_breakdown
from .streaks import calculate_streaks
from .tools import tally_tools
from claude_metrics.config.loader import MetricsConfig
from claude_metrics.storage.models import UsageSnapshot
from claude_metrics.storage.reader import load_snapshot, read_history, read_transcripts

logger = logging.getLogger(__name__)

DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def format_timestamp(moment: Optional[datetime]) -> Optional[str]:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    if moment is None:
        return None
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


class MetricsQueries:
    """Query operations over one Claude data directory.

    Args:
        config: Resolved configuration (paths, pricing, subscription)
        tz: Time zone for hour/weekday buckets; None means local time
        today: Fixed reference date for streaks; None means the current UTC date
    """

    def __init__(
        self,
        config: MetricsConfig,
        tz: Optional[tzinfo] = None,
        today: Optional[date] = None,
    ):
        self.config = config
        self.tz = tz
        self.today = today

    def _history(self) -> HistoryData:
        return aggregate_history(read_history(self.config.history_file), tz=self.tz)

    def _snapshot(self) -> UsageSnapshot:
        return load_snapshot(self.config.stats_file)

    def stats(self) -> Dict[str, Any]:
        """Overview totals, cost, savings and ROI."""
        snapshot = self._snapshot()
        history = self._history()
        cost = compute_cost_report(
            snapshot.model_usage,
            table=self.config.pricing,
            subscription=self.config.subscription_cost,
        )
        return {
            "totalSessions": history.total_sessions,
            "totalMessages": snapshot.total_messages,
            "totalPrompts": history.total_prompts,
            **cost.to_dict(),
            "modelUsage": {
                model: usage.to_dict() for model, usage in snapshot.model_usage.items()
            },
            "firstSession": format_timestamp(history.first_timestamp),
            "lastSession": format_timestamp(history.last_timestamp),
            "longestSession": snapshot.longest_session,
            "activeDays": history.active_days,
        }

    def daily(self) -> List[Dict[str, Any]]:
        """Date-sorted daily prompt and session counts."""
        return [day.to_dict() for day in self._history().daily]

    def heatmap(self) -> Dict[str, Any]:
        """7x24 weekday/hour grid of prompt counts."""
        cells = self._history().weekday_hours
        rows = []
        for day_index, day_name in enumerate(DAY_NAMES):
            rows.append({
                "day": day_name,
                "dayIndex": day_index,
                "hours": [
                    {"hour": hour, "count": cells.get((day_index, hour), 0)}
                    for hour in range(24)
                ],
            })
        return {"heatmap": rows, "maxCount": max([1, *cells.values()])}

    def insights(self) -> Dict[str, Any]:
        """Streaks, productivity averages, prompt stats and fun stats."""
        snapshot = self._snapshot()
        history = self._history()
        streaks = calculate_streaks(history.daily, today=self.today)
        output_tokens = sum(usage.output_tokens for usage in snapshot.model_usage.values())
        return {
            "streaks": streaks.to_dict(),
            "productivity": productivity(history).to_dict(),
            "prompts": prompt_stats(history.total_prompts, history.prompt_lengths).to_dict(),
            "funStats": synthesize_fun_stats(output_tokens).to_dict(),
        }

    def cache(self) -> Dict[str, Any]:
        """Cache hit rate, savings and efficiency ratio."""
        snapshot = self._snapshot()
        return compute_cache_report(snapshot.model_usage, table=self.config.pricing).to_dict()

    def projects(self) -> List[Dict[str, Any]]:
        """Prompt counts per project, busiest first."""
        counts = self._history().projects
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [{"name": name, "prompts": prompts} for name, prompts in ranked]

    def tools(self, limit: Optional[int] = None) -> Dict[str, Any]:
        """Tool invocation counts and the exploring/building label."""
        report = tally_tools(read_transcripts(self.config.projects_dir))
        return report.to_dict(limit=limit)

    def models(self) -> List[Dict[str, Any]]:
        """Per-model breakdown sorted by output tokens."""
        snapshot = self._snapshot()
        breakdown = compute_model_breakdown(snapshot.model_usage, table=self.config.pricing)
        return [model.to_dict() for model in breakdown]


def run_query(query: Callable[[], Any]) -> Dict[str, Any]:
    """Run a query and wrap the outcome in a uniform envelope.

    Returns:
        ``{"ok": True, "data": ...}`` on success, or
        ``{"ok": False, "error": message}`` on any failure
    """
    try:
        data = query()
    except Exception as e:
        logger.warning("query %s failed: %s", getattr(query, "__name__", query), e)
        return {"ok": False, "error": str(e)}
    return {"ok": True, "data": data}
