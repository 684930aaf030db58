"""System Drift stats backend: session records, leaderboards and player aggregates."""

__version__ = "0.1.0"
