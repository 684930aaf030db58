"""Leaderboard engine: the single entry point for leaderboard and aggregate queries.

The engine owns no state. Each call fetches from the record store (the only
suspension point) and reduces synchronously, so concurrent queries never
share mutable data. Arguments are validated before any store access, and
store failures surface as ``StoreUnavailableError``.
"""

from datetime import datetime, timezone
from typing import Callable, Optional, Union

import structlog

from system_drift.core.decorators import store_error_handler
from system_drift.core.enums import LeaderboardWindow
from system_drift.core.exceptions import ValidationError
from system_drift.features.game_stats.repository import RecordStore
from system_drift.features.game_stats.schemas import SessionRecord
from system_drift.features.players.orm_models import display_name_or_anonymous

from .aggregator import aggregate
from .ranker import (
    best_per_player,
    build_leaderboard,
    rank_for_score,
    to_leaderboard_entry,
    window_cutoff,
)
from .schemas import AggregateStats, LeaderboardEntry, TopWinner
from .strategies import BestScoreStrategy, select_best_score_strategy
from .win_counter import count_wins

logger = structlog.get_logger(__name__)

DEFAULT_LEADERBOARD_LIMIT = 100
DEFAULT_TOP_WINNERS_LIMIT = 20


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LeaderboardEngine:
    """Facade over the ranker, win counter and aggregator."""

    def __init__(
        self,
        store: RecordStore,
        strategy: Optional[BestScoreStrategy] = None,
        clock: Optional[Callable[[], datetime]] = None,
        max_limit: Optional[int] = None,
    ):
        self.store = store
        self.strategy = strategy or select_best_score_strategy(store)
        self.clock = clock or _utcnow
        self.max_limit = max_limit

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate_limit(self, limit: object, operation: str) -> int:
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise ValidationError(
                message="limit must be an integer",
                service="LeaderboardEngine",
                operation=operation,
                field="limit",
                value=limit,
            )
        if limit < 1:
            raise ValidationError(
                message="limit must be a positive integer",
                service="LeaderboardEngine",
                operation=operation,
                field="limit",
                value=limit,
            )
        # Only deployments that configure a cap reject large limits
        if self.max_limit is not None and limit > self.max_limit:
            raise ValidationError(
                message=f"limit must not exceed {self.max_limit}",
                service="LeaderboardEngine",
                operation=operation,
                field="limit",
                value=limit,
            )
        return limit

    @staticmethod
    def _validate_window(
        window: Union[LeaderboardWindow, str], operation: str
    ) -> LeaderboardWindow:
        try:
            return LeaderboardWindow(window)
        except ValueError:
            raise ValidationError(
                message="window must be one of: day, week, month, all",
                service="LeaderboardEngine",
                operation=operation,
                field="window",
                value=window,
            ) from None

    @staticmethod
    def _validate_player_id(player_id: object, operation: str) -> str:
        if not isinstance(player_id, str) or not player_id.strip():
            raise ValidationError(
                message="player_id cannot be empty",
                service="LeaderboardEngine",
                operation=operation,
                field="player_id",
                value=player_id,
            )
        return player_id

    # ------------------------------------------------------------------
    # Display names
    # ------------------------------------------------------------------

    async def _fill_display_names(
        self, records: list[SessionRecord]
    ) -> list[SessionRecord]:
        """Look up names the store did not annotate.

        Lookups run one after another; a store may share a single session
        across calls.
        """
        resolved: dict[str, Optional[str]] = {}
        filled = []
        for record in records:
            if record.display_name is None:
                if record.player_id not in resolved:
                    resolved[record.player_id] = await self.store.resolve_display_name(
                        record.player_id
                    )
                record = record.model_copy(
                    update={"display_name": resolved[record.player_id]}
                )
            filled.append(record)
        return filled

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @store_error_handler("LeaderboardEngine")
    async def global_leaderboard(
        self, limit: int = DEFAULT_LEADERBOARD_LIMIT
    ) -> list[LeaderboardEntry]:
        """Each player's personal best, score descending."""
        limit = self._validate_limit(limit, "global_leaderboard")

        best = await self.strategy.best_scores(limit)
        best = await self._fill_display_names(best[:limit])

        logger.debug(
            "global_leaderboard_built",
            strategy=self.strategy.name,
            limit=limit,
            entries=len(best),
        )
        return [to_leaderboard_entry(record) for record in best]

    @store_error_handler("LeaderboardEngine")
    async def windowed_leaderboard(
        self,
        window: Union[LeaderboardWindow, str],
        limit: int = DEFAULT_LEADERBOARD_LIMIT,
    ) -> list[LeaderboardEntry]:
        """Personal bests among sessions played within ``window``."""
        window = self._validate_window(window, "windowed_leaderboard")
        limit = self._validate_limit(limit, "windowed_leaderboard")

        cutoff = window_cutoff(window, self.clock())
        if cutoff is None:
            # No lower bound: identical to the global board
            return await self.global_leaderboard(limit)

        records = await self.store.fetch_all(since=cutoff)
        # Stores may return a superset; the window is enforced here as well
        eligible = (record for record in records if record.played_at >= cutoff)
        best = await self._fill_display_names(build_leaderboard(eligible, limit))

        logger.debug(
            "windowed_leaderboard_built",
            window=window.value,
            cutoff=cutoff.isoformat(),
            limit=limit,
            entries=len(best),
        )
        return [to_leaderboard_entry(record) for record in best]

    @store_error_handler("LeaderboardEngine")
    async def top_winners(
        self, limit: int = DEFAULT_TOP_WINNERS_LIMIT
    ) -> list[TopWinner]:
        """Players ordered by their number of winning sessions."""
        limit = self._validate_limit(limit, "top_winners")

        records = await self.store.fetch_all()
        tallies = count_wins(records, limit)

        winners = []
        for tally in tallies:
            name = tally.display_name
            if name is None:
                name = await self.store.resolve_display_name(tally.player_id)
            winners.append(
                TopWinner(display_name=display_name_or_anonymous(name), wins=tally.wins)
            )
        return winners

    @store_error_handler("LeaderboardEngine")
    async def player_rank(self, player_id: str) -> Optional[int]:
        """1-based rank of the player's best score; None when unranked.

        Computed over every competing player's personal best, never over raw
        session counts.
        """
        player_id = self._validate_player_id(player_id, "player_rank")

        own_records = await self.store.fetch_by_player(player_id)
        if not own_records:
            return None
        own_best = max(record.final_score for record in own_records)

        competitors = best_per_player(await self.store.fetch_all())
        rank = rank_for_score(own_best, competitors)

        logger.debug(
            "player_rank_computed", player_id=player_id, best_score=own_best, rank=rank
        )
        return rank

    @store_error_handler("LeaderboardEngine")
    async def player_aggregate(self, player_id: str) -> AggregateStats:
        """Totals, averages and maximum over all of the player's sessions."""
        player_id = self._validate_player_id(player_id, "player_aggregate")
        records = await self.store.fetch_by_player(player_id)
        return aggregate(records)
