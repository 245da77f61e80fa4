"""
MoodCheck - A personal mood journal with live sync, stats and insights.

This package provides a view-model for recording mood check-ins against a
per-user entry store, a small HTTP/SSE service hosting that store, and a
terminal client built on top of both.
"""

__version__ = "0.1.0"
