"""
Core modules for Claude Metrics.

This package contains the aggregation engine: history rollups, streaks,
cost and cache accounting, tool classification, and insights.
"""
