"""Transformers for converting between layers in the game stats feature.

- ORM rows → ``SessionRecord`` domain values
- ``SessionReport`` payloads → ORM rows
- ``SessionRecord`` → API response schemas
"""

from datetime import datetime, timezone
from typing import Optional

from .orm_models import GameSessionORM
from .schemas import (
    BehaviorMetrics,
    SessionRecord,
    SessionRecordResponse,
    SessionReport,
)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps (SQLite drops tz info on read)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def session_orm_to_record(
    row: GameSessionORM, display_name: Optional[str] = None
) -> SessionRecord:
    """Transform a GameSessionORM row to a SessionRecord.

    :param row: Stored session
    :param display_name: Username resolved by a profile join, if any
    :returns: Session record used by the engine
    """
    return SessionRecord(
        session_id=row.session_id,
        player_id=row.player_id,
        final_score=row.final_score,
        final_entropy=row.final_entropy,
        won=row.won,
        phase_reached=row.phase_reached,
        behavior=BehaviorMetrics.model_validate(row.behavior or {}),
        played_at=ensure_utc(row.played_at),
        display_name=display_name,
    )


def report_to_session_orm(report: SessionReport, played_at: datetime) -> GameSessionORM:
    """Build a new GameSessionORM row from a client report."""
    return GameSessionORM(
        session_id=report.session_id,
        player_id=report.player_id,
        final_score=report.final_score,
        final_entropy=report.final_entropy,
        won=report.won,
        phase_reached=report.phase_reached,
        behavior=report.behavior.model_dump(exclude_none=True),
        played_at=played_at,
    )


def record_to_response(record: SessionRecord) -> SessionRecordResponse:
    """Drop store annotations before returning a record to a client."""
    return SessionRecordResponse.model_validate(
        record.model_dump(exclude={"display_name"})
    )
