"""Leaderboard API endpoints."""

from typing import Annotated, Optional

import structlog
from fastapi import APIRouter, Depends, Query

from system_drift.core.config import Settings, get_global_settings
from system_drift.core.exceptions import ServiceException
from system_drift.core.http_errors import to_http_exception
from system_drift.core.validation import query_int_or_raw
from .dependencies import LeaderboardEngineDep
from .schemas import AggregateStats, LeaderboardEntry, PlayerRankResponse, TopWinner

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])

SettingsDep = Annotated[Settings, Depends(get_global_settings)]


@router.get("/global", response_model=list[LeaderboardEntry])
async def get_global_leaderboard(
    engine: LeaderboardEngineDep,
    settings: SettingsDep,
    limit: Optional[str] = Query(None, description="Maximum number of entries"),
):
    """Best score per player across all sessions."""
    try:
        return await engine.global_leaderboard(
            query_int_or_raw(limit, settings.leaderboard_default_limit)
        )
    except ServiceException as e:
        logger.error("global_leaderboard_failed", error=str(e))
        raise to_http_exception(e)


@router.get("/period/{window}", response_model=list[LeaderboardEntry])
async def get_period_leaderboard(
    window: str,
    engine: LeaderboardEngineDep,
    settings: SettingsDep,
    limit: Optional[str] = Query(None, description="Maximum number of entries"),
):
    """
    Best score per player among sessions played within a time window.

    Windows: ``day`` (last 24 hours), ``week`` (last 7 days),
    ``month`` (since the same day last month), ``all``.
    """
    try:
        return await engine.windowed_leaderboard(
            window, query_int_or_raw(limit, settings.leaderboard_default_limit)
        )
    except ServiceException as e:
        logger.error("period_leaderboard_failed", window=window, error=str(e))
        raise to_http_exception(e)


@router.get("/top-winners", response_model=list[TopWinner])
async def get_top_winners(
    engine: LeaderboardEngineDep,
    settings: SettingsDep,
    limit: Optional[str] = Query(None, description="Maximum number of players"),
):
    """Players ordered by number of winning sessions."""
    try:
        return await engine.top_winners(
            query_int_or_raw(limit, settings.top_winners_default_limit)
        )
    except ServiceException as e:
        logger.error("top_winners_failed", error=str(e))
        raise to_http_exception(e)


@router.get("/rank/{player_id}", response_model=PlayerRankResponse)
async def get_player_rank(player_id: str, engine: LeaderboardEngineDep):
    """A player's rank by personal best; ``rank`` is null when unranked."""
    try:
        rank = await engine.player_rank(player_id)
    except ServiceException as e:
        logger.error("player_rank_failed", player_id=player_id, error=str(e))
        raise to_http_exception(e)
    return PlayerRankResponse(player_id=player_id, rank=rank)


@router.get("/aggregate/{player_id}", response_model=AggregateStats)
async def get_player_aggregate(player_id: str, engine: LeaderboardEngineDep):
    """Totals, averages and best score over all of a player's sessions."""
    try:
        return await engine.player_aggregate(player_id)
    except ServiceException as e:
        logger.error("player_aggregate_failed", player_id=player_id, error=str(e))
        raise to_http_exception(e)
