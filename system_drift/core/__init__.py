"""Core infrastructure module.

This module exports core utilities used across features.
Never imports from features - only from external libraries.
"""

from .config import Settings, get_settings, get_global_settings
from .database import get_db, get_db_manager, close_db_manager, DatabaseManager
from .exceptions import (
    ServiceException,
    GameStatsServiceError,
    DatabaseError,
    StoreUnavailableError,
    ValidationError,
)
from .enums import LeaderboardWindow
from .models import Base

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "get_global_settings",
    # Database
    "get_db",
    "get_db_manager",
    "close_db_manager",
    "DatabaseManager",
    # Exceptions
    "ServiceException",
    "GameStatsServiceError",
    "DatabaseError",
    "StoreUnavailableError",
    "ValidationError",
    # Enums
    "LeaderboardWindow",
    # Models
    "Base",
]
