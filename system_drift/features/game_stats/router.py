"""Session reporting and per-player history endpoints.

Callers are assumed to be authenticated and scoped to ``player_id`` by the
surrounding gateway.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Query, Request, Response, status

from system_drift.core.config import get_global_settings
from system_drift.core.exceptions import ServiceException
from system_drift.core.http_errors import to_http_exception
from system_drift.core.rate_limiter import limiter, session_report_limit
from system_drift.core.validation import query_int_or_raw
from system_drift.features.leaderboard.dependencies import LeaderboardEngineDep
from system_drift.features.leaderboard.schemas import AggregateStats
from .dependencies import GameStatsServiceDep
from .schemas import (
    EraseResponse,
    SessionHistoryResponse,
    SessionRecordResponse,
    SessionReport,
)
from .transformers import record_to_response

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/stats", tags=["stats"])


@router.post(
    "/sessions",
    response_model=SessionRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(session_report_limit)
async def report_session(
    request: Request,
    response: Response,
    report: SessionReport,
    service: GameStatsServiceDep,
):
    """
    Record a finished game session.

    Idempotent on ``session_id``: re-submitting a known session returns the
    stored record with status 200 instead of creating a duplicate.
    """
    try:
        record, created = await service.record_session(report)
    except ServiceException as e:
        logger.error(
            "session_report_failed",
            session_id=report.session_id,
            player_id=report.player_id,
            error=str(e),
        )
        raise to_http_exception(e)

    if not created:
        response.status_code = status.HTTP_200_OK
    return record_to_response(record)


@router.get("/{player_id}/history", response_model=SessionHistoryResponse)
async def get_session_history(
    player_id: str,
    service: GameStatsServiceDep,
    limit: Optional[str] = Query(None, description="Number of recent sessions"),
):
    """A player's most recent sessions, newest first."""
    try:
        return await service.get_history(
            player_id,
            query_int_or_raw(limit, get_global_settings().history_default_limit),
        )
    except ServiceException as e:
        logger.error("session_history_failed", player_id=player_id, error=str(e))
        raise to_http_exception(e)


@router.get("/{player_id}/aggregate", response_model=AggregateStats)
async def get_session_aggregate(player_id: str, engine: LeaderboardEngineDep):
    """Aggregate statistics over all of a player's sessions.

    Same computation as ``/leaderboard/aggregate/{player_id}``.
    """
    try:
        return await engine.player_aggregate(player_id)
    except ServiceException as e:
        logger.error("session_aggregate_failed", player_id=player_id, error=str(e))
        raise to_http_exception(e)


@router.delete("/{player_id}", response_model=EraseResponse)
async def erase_player_sessions(player_id: str, service: GameStatsServiceDep):
    """Erase every session of a player, e.g. on account deletion."""
    try:
        return await service.erase_player(player_id)
    except ServiceException as e:
        logger.error("player_erase_failed", player_id=player_id, error=str(e))
        raise to_http_exception(e)
