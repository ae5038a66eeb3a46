"""
Unit tests for tool usage classification.
"""

import pytest

from claude_metrics.core.tools import (
    ToolCategory,
    ToolUsageReport,
    WorkStyle,
    classify_tool,
    tally_tools,
)
from claude_metrics.storage.models import ContentBlock, TranscriptMessage


def _message(*names, block_type="tool_use"):
    return TranscriptMessage(content=tuple(ContentBlock(type=block_type, name=n) for n in names))


class TestClassifyTool:
    """Test closed read/write sets."""

    @pytest.mark.parametrize("name", ["Read", "Glob", "Grep", "WebFetch", "WebSearch"])
    def test_read_tools(self, name):
        assert classify_tool(name) == ToolCategory.READ

    @pytest.mark.parametrize("name", ["Write", "Edit", "Bash", "NotebookEdit"])
    def test_write_tools(self, name):
        assert classify_tool(name) == ToolCategory.WRITE

    @pytest.mark.parametrize("name", ["Task", "TodoWrite", "read", "unknown"])
    def test_everything_else_unclassified(self, name):
        """Matching is exact and case sensitive."""
        assert classify_tool(name) == ToolCategory.UNCLASSIFIED


class TestTallyTools:
    """Test counting and work-style labelling."""

    def test_exploring_when_reads_dominate(self):
        """3 reads vs 1 write is exploring."""
        report = tally_tools([_message("Read", "Read"), _message("Read", "Write")])
        assert report.tools == [("Read", 3), ("Write", 1)]
        assert report.read == 3
        assert report.write == 1
        assert report.work_style == WorkStyle.EXPLORING

    def test_tie_is_building(self):
        """Equal reads and writes resolve to building."""
        report = tally_tools([_message("Read", "Write")])
        assert report.work_style == WorkStyle.BUILDING

    def test_no_tools_is_building(self):
        report = tally_tools([])
        assert report.tools == []
        assert report.work_style == WorkStyle.BUILDING

    def test_unclassified_counted_but_not_tallied(self):
        """Unclassified tools appear in counts only."""
        report = tally_tools([_message("Task", "Task", "Grep")])
        assert report.total == 3
        assert report.read + report.write == 1

    def test_missing_name_counted_as_unknown(self):
        report = tally_tools([_message(None, "")])
        assert report.tools == [("unknown", 2)]

    def test_non_tool_blocks_ignored(self):
        report = tally_tools([_message("Read", block_type="text")])
        assert report.total == 0

    def test_ties_keep_encounter_order(self):
        """Stable sort by count descending."""
        report = tally_tools([_message("Edit", "Grep", "Bash", "Grep", "Task")])
        assert report.tools == [("Grep", 2), ("Edit", 1), ("Bash", 1), ("Task", 1)]

    def test_top_and_to_dict(self):
        report = tally_tools([_message("Read", "Read", "Edit", "Task")])
        assert report.top(1) == [("Read", 2)]
        assert report.top(None) == report.tools
        assert report.to_dict(limit=2) == {
            "tools": [{"name": "Read", "count": 2}, {"name": "Edit", "count": 1}],
            "readWriteRatio": {"read": 2, "write": 1},
            "exploringVsBuilding": "exploring",
        }


class TestToolUsageReport:
    """Test report validation."""

    def test_tally_cannot_exceed_total(self):
        with pytest.raises(ValueError, match="cannot exceed"):
            ToolUsageReport(tools=[("Read", 1)], read=1, write=1)
