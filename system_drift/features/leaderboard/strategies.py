"""Strategies for producing the best-score-per-player leaderboard.

Two implementations satisfy the same contract:

- ``AcceleratedBestScores`` asks the store to reduce server-side.
- ``ScanBestScores`` fetches every record and reduces in memory.

``FallbackBestScores`` tries the first and drops to the second when the store
cannot answer the accelerated query.
"""

from typing import Protocol

import structlog

from system_drift.core.exceptions import StoreUnavailableError
from system_drift.features.game_stats.repository import (
    RecordStore,
    SupportsBestPerPlayer,
)
from system_drift.features.game_stats.schemas import SessionRecord

from .ranker import build_leaderboard

logger = structlog.get_logger(__name__)


class BestScoreStrategy(Protocol):
    """Produce one record per player, score descending, at most ``limit`` long."""

    name: str

    async def best_scores(self, limit: int) -> list[SessionRecord]:
        ...


class ScanBestScores:
    """Full scan of the store followed by client-side reduction."""

    name = "scan"

    def __init__(self, store: RecordStore):
        self.store = store

    async def best_scores(self, limit: int) -> list[SessionRecord]:
        records = await self.store.fetch_all()
        return build_leaderboard(records, limit)


class AcceleratedBestScores:
    """Store-native best-score-per-player query."""

    name = "accelerated"

    def __init__(self, store: SupportsBestPerPlayer):
        self.store = store

    async def best_scores(self, limit: int) -> list[SessionRecord]:
        if limit <= 0:
            return []
        return await self.store.fetch_best_per_player(limit)


class FallbackBestScores:
    """Use ``primary`` and fall back to ``fallback`` when the store fails it."""

    def __init__(self, primary: BestScoreStrategy, fallback: BestScoreStrategy):
        self.primary = primary
        self.fallback = fallback
        self.name = f"{primary.name}+{fallback.name}"

    async def best_scores(self, limit: int) -> list[SessionRecord]:
        try:
            return await self.primary.best_scores(limit)
        except (StoreUnavailableError, NotImplementedError) as e:
            logger.warning(
                "best_scores_fallback",
                primary=self.primary.name,
                fallback=self.fallback.name,
                error=str(e),
            )
        return await self.fallback.best_scores(limit)


def select_best_score_strategy(
    store: RecordStore, prefer_accelerated: bool = True
) -> BestScoreStrategy:
    """Pick the accelerated path when the store offers it, scanning otherwise."""
    scan = ScanBestScores(store)
    if prefer_accelerated and isinstance(store, SupportsBestPerPlayer):
        return FallbackBestScores(AcceleratedBestScores(store), scan)
    return scan
