"""Database initialization script using SQLAlchemy create_all().

Usage:
    python -m system_drift.init_db
"""

import asyncio
import sys
from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from system_drift.core.config import get_global_settings
from system_drift.core.logging import setup_logging
from system_drift.core.models import Base

# Register tables on Base.metadata
from system_drift.features.players.orm_models import PlayerProfileORM  # noqa: F401
from system_drift.features.game_stats.orm_models import GameSessionORM  # noqa: F401

logger = structlog.get_logger(__name__)


async def create_tables(engine: AsyncEngine) -> None:
    """Create every table known to ``Base.metadata`` (existing ones are kept)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db(database_url: Optional[str] = None) -> None:
    """Initialize the database by creating all tables.

    :raises SQLAlchemyError: If database connection or table creation fails
    """
    settings = get_global_settings()
    database_url = database_url or settings.database_url

    logger.info(
        "Initializing database",
        database_url=database_url.replace(settings.postgres_password, "***"),
    )

    engine = create_async_engine(database_url, echo=settings.debug, future=True)
    try:
        await create_tables(engine)
    except SQLAlchemyError as e:
        logger.error("Database initialization failed", error=str(e))
        raise
    finally:
        await engine.dispose()

    logger.info(
        "Database initialization completed successfully",
        tables=sorted(Base.metadata.tables),
    )


def main() -> None:
    setup_logging(get_global_settings().log_level)
    try:
        asyncio.run(init_db())
    except SQLAlchemyError:
        sys.exit(1)


if __name__ == "__main__":
    main()
