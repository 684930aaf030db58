"""Shared enums used across features.

This module provides a single source of truth for enums used in both services and schemas.
"""

from enum import Enum


class LeaderboardWindow(str, Enum):
    """Relative time ranges a leaderboard can be scoped to."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"

    @classmethod
    def _missing_(cls, value):
        # Clients built against older payloads send camelCase or snake_case all-time
        if isinstance(value, str) and value.strip().lower() in ("alltime", "all_time"):
            return cls.ALL
        return None
