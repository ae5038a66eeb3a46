"""
Claude Metrics: analytics over local Claude Code usage data.
"""

__version__ = "0.1.0"
