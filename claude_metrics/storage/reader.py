"""
Readers for the Claude data directory.

Parses the history log, per-project transcripts, and the usage snapshot.
Every raw JSON object passes a shape check here and comes out as either a
validated model or a rejection, so nothing downstream has to second-guess
loosely typed input.
"""

import json
import logging
import math
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from .models import (
    ContentBlock,
    EventRecord,
    ModelUsageCounters,
    TranscriptMessage,
    UsageSnapshot,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Timestamps closer than a day to the datetime bounds cannot be moved into
# every UTC offset, so they are rejected at the boundary.
_EARLIEST = datetime.min.replace(tzinfo=timezone.utc) + timedelta(days=1)
_LATEST = datetime.max.replace(tzinfo=timezone.utc) - timedelta(days=1)


class SnapshotUnavailableError(Exception):
    """Raised when the usage snapshot cannot be loaded."""


def parse_jsonl(path: PathLike) -> List[Dict[str, Any]]:
    """Parse a newline-delimited JSON file, dropping lines that fail.

    Args:
        path: Path to the JSONL file

    Returns:
        JSON objects in file order. Empty if the file does not exist.
    """
    file_path = Path(path)
    if not file_path.is_file():
        return []

    objects = []
    dropped = 0
    with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except (ValueError, RecursionError):
                dropped += 1
                continue
            if not isinstance(obj, dict):
                dropped += 1
                continue
            objects.append(obj)

    if dropped:
        logger.debug("dropped %d malformed line(s) in %s", dropped, file_path)
    return objects


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Convert an epoch-millisecond or ISO-8601 timestamp to aware UTC.

    Returns None for anything that is missing, falsy, or unparseable.
    """
    if not value or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            return _within_bounds(datetime.fromtimestamp(value / 1000, tz=timezone.utc))
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        text = value.strip()
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return _within_bounds(parsed.astimezone(timezone.utc))
        except (ValueError, OverflowError):
            return None

    return None


def _within_bounds(moment: datetime) -> Optional[datetime]:
    if moment < _EARLIEST or moment > _LATEST:
        return None
    return moment


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def parse_event_record(raw: Dict[str, Any]) -> Optional[EventRecord]:
    """Validate one history line.

    Args:
        raw: Decoded JSON object

    Returns:
        EventRecord, or None if the line has no usable timestamp
    """
    timestamp = parse_timestamp(raw.get('timestamp'))
    if timestamp is None:
        return None
    return EventRecord(
        timestamp=timestamp,
        session_id=_optional_str(raw.get('sessionId')),
        project=_optional_str(raw.get('project')),
        display=_optional_str(raw.get('display')),
    )


def parse_transcript_message(raw: Dict[str, Any]) -> Optional[TranscriptMessage]:
    """Validate one transcript line.

    Args:
        raw: Decoded JSON object

    Returns:
        TranscriptMessage, or None if there is no ``message.content`` list
    """
    message = raw.get('message')
    if not isinstance(message, dict):
        return None
    content = message.get('content')
    if not isinstance(content, list):
        return None

    blocks = []
    for block in content:
        if not isinstance(block, dict):
            continue
        block_type = block.get('type')
        if not isinstance(block_type, str):
            continue
        blocks.append(ContentBlock(type=block_type, name=_optional_str(block.get('name'))))
    return TranscriptMessage(content=tuple(blocks))


def read_history(path: PathLike) -> List[EventRecord]:
    """Read and validate the history log. Missing file yields []."""
    records = []
    rejected = 0
    for raw in parse_jsonl(path):
        record = parse_event_record(raw)
        if record is None:
            rejected += 1
            continue
        records.append(record)

    if rejected:
        logger.debug("skipped %d history record(s) without a timestamp", rejected)
    return records


def iter_transcript_files(projects_dir: PathLike) -> Iterator[Path]:
    """Yield ``<projects_dir>/<project>/*.jsonl`` in a stable order."""
    root = Path(projects_dir)
    if not root.is_dir():
        return
    for project_dir in sorted(root.iterdir()):
        if not project_dir.is_dir():
            continue
        for file_path in sorted(project_dir.glob('*.jsonl')):
            if file_path.is_file():
                yield file_path


def read_transcripts(projects_dir: PathLike) -> Iterator[TranscriptMessage]:
    """Yield validated transcript messages across every project."""
    for file_path in iter_transcript_files(projects_dir):
        for raw in parse_jsonl(file_path):
            message = parse_transcript_message(raw)
            if message is not None:
                yield message


def _count(value: Any) -> Union[int, float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return value


def parse_model_usage(raw: Any) -> ModelUsageCounters:
    """Build counters from a snapshot ``modelUsage`` entry."""
    if not isinstance(raw, dict):
        return ModelUsageCounters()
    return ModelUsageCounters(
        input_tokens=_count(raw.get('inputTokens')),
        output_tokens=_count(raw.get('outputTokens')),
        cache_read_tokens=_count(raw.get('cacheReadInputTokens')),
        cache_write_tokens=_count(raw.get('cacheCreationInputTokens')),
    )


def load_snapshot(path: PathLike) -> UsageSnapshot:
    """Load the usage snapshot.

    Unlike the logs, the snapshot is a required dependency: its absence is
    an error rather than an empty dataset.

    Args:
        path: Path to ``stats-cache.json``

    Returns:
        Parsed UsageSnapshot

    Raises:
        SnapshotUnavailableError: If the file is missing, unreadable, or
            not a JSON object
    """
    snapshot_path = Path(path)
    try:
        with open(snapshot_path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except OSError as e:
        raise SnapshotUnavailableError(
            f"Usage snapshot not readable: {snapshot_path} ({e.strerror or e})"
        ) from e
    except (ValueError, RecursionError) as e:
        raise SnapshotUnavailableError(
            f"Invalid JSON in usage snapshot {snapshot_path}: {e}"
        ) from e

    if not isinstance(raw, dict):
        raise SnapshotUnavailableError(
            f"Usage snapshot {snapshot_path} must contain a JSON object"
        )

    model_usage_raw = raw.get('modelUsage')
    if not isinstance(model_usage_raw, dict):
        model_usage_raw = {}

    total_messages = raw.get('totalMessages')
    if isinstance(total_messages, bool) or not isinstance(total_messages, int):
        total_messages = None

    return UsageSnapshot(
        model_usage={
            str(model): parse_model_usage(counters)
            for model, counters in model_usage_raw.items()
        },
        total_messages=total_messages,
        longest_session=raw.get('longestSession'),
    )
