"""Record store for game sessions.

Defines the read contract the leaderboard engine depends on and the
SQLAlchemy implementation backing it. The engine never writes through this
interface; the write operations exist for the session-reporting endpoints.
"""

from datetime import datetime, timezone
from typing import Optional, Protocol, runtime_checkable

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from system_drift.core.decorators import store_error_handler
from system_drift.core.exceptions import GameStatsServiceError
from system_drift.features.players.orm_models import PlayerProfileORM

from .orm_models import GameSessionORM
from .schemas import SessionRecord, SessionReport
from .transformers import report_to_session_orm, session_orm_to_record

logger = structlog.get_logger(__name__)


class RecordStore(Protocol):
    """Read-only access to session records."""

    async def fetch_by_player(self, player_id: str) -> list[SessionRecord]:
        """All records for one player, any order."""
        ...

    async def fetch_all(
        self, since: Optional[datetime] = None
    ) -> list[SessionRecord]:
        """All records with ``played_at >= since``, annotated with display names."""
        ...

    async def resolve_display_name(self, player_id: str) -> Optional[str]:
        """Display name for a player, or None when none is resolvable."""
        ...


@runtime_checkable
class SupportsBestPerPlayer(Protocol):
    """Optional store-native best-score-per-player query."""

    async def fetch_best_per_player(self, limit: int) -> list[SessionRecord]:
        """One record per player (their maximum score), score descending, limited."""
        ...


class SessionWriter(Protocol):
    """Write operations used by session reporting."""

    async def find_by_session_id(self, session_id: str) -> Optional[SessionRecord]:
        ...

    async def create_session(self, report: SessionReport) -> tuple[SessionRecord, bool]:
        ...

    async def find_recent_by_player(
        self, player_id: str, limit: int = 50
    ) -> list[SessionRecord]:
        ...

    async def count_by_player(self, player_id: str) -> int:
        ...

    async def delete_by_player(self, player_id: str) -> int:
        ...


class SessionStore(RecordStore, SessionWriter, Protocol):
    """A store offering both the read contract and session writes."""


class SQLAlchemyRecordStore:
    """SQLAlchemy implementation of the record store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @store_error_handler("SQLAlchemyRecordStore")
    async def fetch_by_player(self, player_id: str) -> list[SessionRecord]:
        stmt = select(GameSessionORM).where(GameSessionORM.player_id == player_id)
        result = await self.db.execute(stmt)
        return [session_orm_to_record(row) for row in result.scalars().all()]

    @store_error_handler("SQLAlchemyRecordStore")
    async def fetch_all(
        self, since: Optional[datetime] = None
    ) -> list[SessionRecord]:
        stmt = select(GameSessionORM, PlayerProfileORM.username).outerjoin(
            PlayerProfileORM, PlayerProfileORM.id == GameSessionORM.player_id
        )
        if since is not None:
            stmt = stmt.where(GameSessionORM.played_at >= since)
        stmt = stmt.order_by(GameSessionORM.final_score.desc())

        result = await self.db.execute(stmt)
        return [
            session_orm_to_record(row, display_name=username)
            for row, username in result.all()
        ]

    @store_error_handler("SQLAlchemyRecordStore")
    async def fetch_best_per_player(self, limit: int) -> list[SessionRecord]:
        # Earliest session wins ties on a player's maximum score
        ranked = select(
            GameSessionORM,
            func.row_number()
            .over(
                partition_by=GameSessionORM.player_id,
                order_by=(
                    GameSessionORM.final_score.desc(),
                    GameSessionORM.played_at.asc(),
                ),
            )
            .label("rn"),
        ).subquery()
        best = aliased(GameSessionORM, ranked)

        stmt = (
            select(best, PlayerProfileORM.username)
            .outerjoin(PlayerProfileORM, PlayerProfileORM.id == best.player_id)
            .where(ranked.c.rn == 1)
            .order_by(
                best.final_score.desc(), best.played_at.asc(), best.player_id.asc()
            )
            .limit(limit)
        )
        try:
            result = await self.db.execute(stmt)
        except DBAPIError:
            # Leave the session usable for a scan-and-reduce fallback
            await self.db.rollback()
            raise
        return [
            session_orm_to_record(row, display_name=username)
            for row, username in result.all()
        ]

    @store_error_handler("SQLAlchemyRecordStore")
    async def resolve_display_name(self, player_id: str) -> Optional[str]:
        stmt = select(PlayerProfileORM.username).where(
            PlayerProfileORM.id == player_id
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    @store_error_handler("SQLAlchemyRecordStore")
    async def find_by_session_id(self, session_id: str) -> Optional[SessionRecord]:
        stmt = select(GameSessionORM).where(GameSessionORM.session_id == session_id)
        result = await self.db.execute(stmt)
        row = result.scalar_one_or_none()
        return session_orm_to_record(row) if row else None

    @store_error_handler("SQLAlchemyRecordStore")
    async def create_session(self, report: SessionReport) -> tuple[SessionRecord, bool]:
        """Insert a session unless its ``session_id`` already exists.

        :returns: The stored record and whether it was created by this call
        """
        existing = await self.find_by_session_id(report.session_id)
        if existing is not None:
            return existing, False

        row = report_to_session_orm(report, played_at=datetime.now(timezone.utc))
        self.db.add(row)
        try:
            await self.db.commit()
        except IntegrityError as e:
            # Concurrent report of the same session won the insert
            await self.db.rollback()
            existing = await self.find_by_session_id(report.session_id)
            if existing is None:
                raise GameStatsServiceError(
                    message="Session violates a storage constraint (unknown player?)",
                    operation="create_session",
                    context={
                        "session_id": report.session_id,
                        "player_id": report.player_id,
                    },
                    original_error=e,
                ) from e
            logger.info(
                "duplicate_session_insert_resolved",
                session_id=report.session_id,
                player_id=report.player_id,
            )
            return existing, False

        await self.db.refresh(row)
        return session_orm_to_record(row), True

    @store_error_handler("SQLAlchemyRecordStore")
    async def find_recent_by_player(
        self, player_id: str, limit: int = 50
    ) -> list[SessionRecord]:
        stmt = (
            select(GameSessionORM)
            .where(GameSessionORM.player_id == player_id)
            .order_by(GameSessionORM.played_at.desc(), GameSessionORM.id.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [session_orm_to_record(row) for row in result.scalars().all()]

    @store_error_handler("SQLAlchemyRecordStore")
    async def count_by_player(self, player_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(GameSessionORM)
            .where(GameSessionORM.player_id == player_id)
        )
        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    @store_error_handler("SQLAlchemyRecordStore")
    async def delete_by_player(self, player_id: str) -> int:
        stmt = delete(GameSessionORM).where(GameSessionORM.player_id == player_id)
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount or 0
