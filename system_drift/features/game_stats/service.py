"""Service for reporting sessions and reading a player's own history."""

from typing import Optional

import structlog

from system_drift.core.exceptions import ValidationError

from .repository import SessionStore
from .schemas import (
    EraseResponse,
    SessionHistoryResponse,
    SessionRecord,
    SessionReport,
)
from .transformers import record_to_response

logger = structlog.get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 50
MAX_HISTORY_LIMIT = 500


class GameStatsService:
    """Orchestrates session reporting on top of the record store."""

    def __init__(self, store: SessionStore):
        self.store = store

    async def record_session(self, report: SessionReport) -> tuple[SessionRecord, bool]:
        """Store a reported session.

        Re-submitting an existing ``session_id`` returns the original record
        unchanged.

        :returns: The stored record and whether this call created it
        """
        record, created = await self.store.create_session(report)
        if created:
            logger.info(
                "session_recorded",
                session_id=record.session_id,
                player_id=record.player_id,
                final_score=record.final_score,
                won=record.won,
            )
        else:
            logger.info(
                "session_already_recorded",
                session_id=record.session_id,
                player_id=record.player_id,
            )
        return record, created

    async def get_history(
        self, player_id: str, limit: Optional[int] = None
    ) -> SessionHistoryResponse:
        """A player's most recent sessions, newest first."""
        limit = DEFAULT_HISTORY_LIMIT if limit is None else limit
        if (
            isinstance(limit, bool)
            or not isinstance(limit, int)
            or not 1 <= limit <= MAX_HISTORY_LIMIT
        ):
            raise ValidationError(
                message=f"limit must be an integer between 1 and {MAX_HISTORY_LIMIT}",
                service="GameStatsService",
                operation="get_history",
                field="limit",
                value=limit,
            )

        records = await self.store.find_recent_by_player(player_id, limit)
        total = await self.store.count_by_player(player_id)
        return SessionHistoryResponse(
            player_id=player_id,
            total=total,
            sessions=[record_to_response(record) for record in records],
        )

    async def erase_player(self, player_id: str) -> EraseResponse:
        """Remove every session of a player (account deletion)."""
        deleted = await self.store.delete_by_player(player_id)
        logger.info("player_sessions_erased", player_id=player_id, deleted=deleted)
        return EraseResponse(player_id=player_id, deleted=deleted)
