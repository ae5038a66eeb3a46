"""
Data models for the storage layer.

Defines the validated shapes of records read from the Claude data directory.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class EventRecord:
    """One prompt from the append-only history log.

    Records are owned by the client that writes the log and are never
    modified by this package.
    """
    timestamp: datetime  # timezone-aware, UTC
    session_id: Optional[str] = None
    project: Optional[str] = None
    display: Optional[str] = None


@dataclass(frozen=True)
class ContentBlock:
    """Single block of a transcript message's content array."""
    type: str
    name: Optional[str] = None


@dataclass(frozen=True)
class TranscriptMessage:
    """Transcript line reduced to the content blocks we inspect."""
    content: Tuple[ContentBlock, ...]


@dataclass(frozen=True)
class ModelUsageCounters:
    """Token counters for one model from the usage snapshot.

    Counters are kept exactly as the snapshot reports them, fractional
    values included.
    """
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_write_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        """Tokens across all four billing categories."""
        return (
            self.input_tokens
            + self.output_tokens
            + self.cache_read_tokens
            + self.cache_write_tokens
        )

    def to_dict(self) -> Dict[str, int]:
        """Snapshot-style camelCase representation."""
        return {
            "inputTokens": self.input_tokens,
            "outputTokens": self.output_tokens,
            "cacheReadInputTokens": self.cache_read_tokens,
            "cacheCreationInputTokens": self.cache_write_tokens,
        }


@dataclass(frozen=True)
class UsageSnapshot:
    """Periodically refreshed usage summary written by the client."""
    model_usage: Dict[str, ModelUsageCounters] = field(default_factory=dict)
    total_messages: Optional[int] = None
    longest_session: Any = None
