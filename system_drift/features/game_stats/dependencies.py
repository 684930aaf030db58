"""Dependencies for the game stats feature.

Injects the record store into services following dependency inversion.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from system_drift.core import get_db
from .repository import SQLAlchemyRecordStore
from .service import GameStatsService


async def get_record_store(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SQLAlchemyRecordStore:
    """Get a record store bound to the request's database session.

    :param db: Database session
    :returns: Record store implementation
    """
    return SQLAlchemyRecordStore(db)


async def get_game_stats_service(
    store: Annotated[SQLAlchemyRecordStore, Depends(get_record_store)],
) -> GameStatsService:
    """Get game stats service instance.

    :param store: Record store
    :returns: Game stats service with injected store
    """
    return GameStatsService(store)


# Type aliases for cleaner dependency injection
RecordStoreDep = Annotated[SQLAlchemyRecordStore, Depends(get_record_store)]
GameStatsServiceDep = Annotated[GameStatsService, Depends(get_game_stats_service)]

__all__ = [
    "get_record_store",
    "get_game_stats_service",
    "RecordStoreDep",
    "GameStatsServiceDep",
]
