"""
History aggregation.

Buckets prompts from the history log by calendar date, hour of day,
weekday/hour cell, and project.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Set, Tuple

from claude_metrics.storage.models import EventRecord

UNKNOWN_PROJECT = "unknown"

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class DailyAggregate:
    """Prompt count and distinct sessions for one UTC calendar date."""
    date: str  # YYYY-MM-DD
    prompts: int
    session_ids: frozenset = frozenset()

    def __post_init__(self):
        """Validate counts are consistent."""
        if self.prompts < 0:
            raise ValueError("prompts cannot be negative")
        if len(self.session_ids) > self.prompts:
            raise ValueError("distinct sessions cannot exceed prompt count")

    @property
    def session_count(self) -> int:
        return len(self.session_ids)

    def to_dict(self) -> Dict[str, object]:
        return {
            "date": self.date,
            "prompts": self.prompts,
            "sessionCount": self.session_count,
        }


@dataclass(frozen=True)
class HistoryData:
    """Everything derived from one pass over the history log."""
    daily: List[DailyAggregate] = field(default_factory=list)
    hours: Dict[int, int] = field(default_factory=dict)
    weekday_hours: Dict[Tuple[int, int], int] = field(default_factory=dict)
    projects: Dict[str, int] = field(default_factory=dict)
    total_prompts: int = 0
    total_sessions: int = 0
    prompt_lengths: List[int] = field(default_factory=list)
    first_timestamp: Optional[datetime] = None
    last_timestamp: Optional[datetime] = None

    @property
    def active_days(self) -> int:
        return len(self.daily)

    @property
    def day_span(self) -> int:
        """Calendar span from first to last prompt, counting both ends."""
        if self.first_timestamp is None or self.last_timestamp is None:
            return 0
        elapsed = (self.last_timestamp - self.first_timestamp).total_seconds()
        return math.ceil(elapsed / SECONDS_PER_DAY) + 1


def project_label(project: Optional[str]) -> str:
    """Final path segment of a project path, or ``"unknown"``."""
    if not project:
        return UNKNOWN_PROJECT
    return project.split('/')[-1] or UNKNOWN_PROJECT


def weekday_index(moment: datetime) -> int:
    """Day of week with Sunday as 0."""
    return moment.isoweekday() % 7


def aggregate_history(
    records: Iterable[EventRecord],
    tz: Optional[tzinfo] = None,
) -> HistoryData:
    """Aggregate validated history records.

    Dates are always UTC calendar dates. Hour and weekday buckets use
    ``tz``, defaulting to the local time zone of the process.

    Args:
        records: Validated records in file order
        tz: Time zone for hour/weekday bucketing

    Returns:
        HistoryData with date-sorted daily aggregates
    """
    prompts_by_date: Dict[str, int] = {}
    sessions_by_date: Dict[str, Set[str]] = {}
    hours: Dict[int, int] = {}
    weekday_hours: Dict[Tuple[int, int], int] = {}
    projects: Dict[str, int] = {}
    all_sessions: Set[str] = set()
    prompt_lengths: List[int] = []
    total = 0
    first_timestamp = None
    last_timestamp = None

    for record in records:
        if record.timestamp is None:
            continue
        total += 1
        if first_timestamp is None:
            first_timestamp = record.timestamp
        last_timestamp = record.timestamp

        date_str = record.timestamp.astimezone(timezone.utc).date().isoformat()
        prompts_by_date[date_str] = prompts_by_date.get(date_str, 0) + 1
        day_sessions = sessions_by_date.setdefault(date_str, set())
        if record.session_id:
            day_sessions.add(record.session_id)
            all_sessions.add(record.session_id)

        local = record.timestamp.astimezone(tz)
        hours[local.hour] = hours.get(local.hour, 0) + 1
        cell = (weekday_index(local), local.hour)
        weekday_hours[cell] = weekday_hours.get(cell, 0) + 1

        label = project_label(record.project)
        projects[label] = projects.get(label, 0) + 1

        if record.display:
            prompt_lengths.append(len(record.display))

    daily = [
        DailyAggregate(
            date=date_str,
            prompts=prompts_by_date[date_str],
            session_ids=frozenset(sessions_by_date[date_str]),
        )
        for date_str in sorted(prompts_by_date)
    ]

    return HistoryData(
        daily=daily,
        hours=hours,
        weekday_hours=weekday_hours,
        projects=projects,
        total_prompts=total,
        total_sessions=len(all_sessions),
        prompt_lengths=prompt_lengths,
        first_timestamp=first_timestamp,
        last_timestamp=last_timestamp,
    )
