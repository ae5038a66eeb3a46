"""
Tool usage counting and work-style classification.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from claude_metrics.storage.models import TranscriptMessage

TOOL_USE_BLOCK = "tool_use"
UNKNOWN_TOOL = "unknown"


class ToolCategory(Enum):
    """Whether a tool gathers information or changes things."""
    READ = "read"
    WRITE = "write"
    UNCLASSIFIED = "unclassified"


class WorkStyle(Enum):
    """Overall character of a body of tool usage."""
    EXPLORING = "exploring"
    BUILDING = "building"


READ_TOOLS = frozenset({"Read", "Glob", "Grep", "WebFetch", "WebSearch"})
WRITE_TOOLS = frozenset({"Write", "Edit", "Bash", "NotebookEdit"})


def classify_tool(name: str) -> ToolCategory:
    """Map a tool name onto exactly one category."""
    if name in READ_TOOLS:
        return ToolCategory.READ
    if name in WRITE_TOOLS:
        return ToolCategory.WRITE
    return ToolCategory.UNCLASSIFIED


@dataclass(frozen=True)
class ToolUsageReport:
    """Tool invocation counts with the read/write tally."""
    tools: List[Tuple[str, int]]  # (name, count), busiest first
    read: int
    write: int

    def __post_init__(self):
        """Validate the tally is bounded by total invocations."""
        if self.read + self.write > self.total:
            raise ValueError("read/write tally cannot exceed total invocations")

    @property
    def total(self) -> int:
        return sum(count for _, count in self.tools)

    @property
    def work_style(self) -> WorkStyle:
        # Ties go to building.
        return WorkStyle.EXPLORING if self.read > self.write else WorkStyle.BUILDING

    def top(self, limit: Optional[int]) -> List[Tuple[str, int]]:
        """The ``limit`` most used tools, or all of them when None."""
        if limit is None:
            return list(self.tools)
        return self.tools[:max(limit, 0)]

    def to_dict(self, limit: Optional[int] = None) -> Dict[str, object]:
        return {
            "tools": [{"name": name, "count": count} for name, count in self.top(limit)],
            "readWriteRatio": {"read": self.read, "write": self.write},
            "exploringVsBuilding": self.work_style.value,
        }


def tally_tools(messages: Iterable[TranscriptMessage]) -> ToolUsageReport:
    """Count ``tool_use`` blocks by tool name.

    Args:
        messages: Validated transcript messages

    Returns:
        ToolUsageReport with tools sorted by count (ties keep encounter order)
    """
    counts: Dict[str, int] = {}
    tally = {ToolCategory.READ: 0, ToolCategory.WRITE: 0, ToolCategory.UNCLASSIFIED: 0}

    for message in messages:
        for block in message.content:
            if block.type != TOOL_USE_BLOCK:
                continue
            name = block.name or UNKNOWN_TOOL
            counts[name] = counts.get(name, 0) + 1
            tally[classify_tool(name)] += 1

    tools = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return ToolUsageReport(
        tools=tools,
        read=tally[ToolCategory.READ],
        write=tally[ToolCategory.WRITE],
    )
