"""
Readers and models for the Claude data directory.
"""
