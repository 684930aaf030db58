"""Dependencies for the leaderboard feature."""

from typing import Annotated

from fastapi import Depends

from system_drift.core.config import Settings, get_global_settings
from system_drift.features.game_stats.dependencies import RecordStoreDep
from .service import LeaderboardEngine
from .strategies import select_best_score_strategy


async def get_leaderboard_engine(
    store: RecordStoreDep,
    settings: Annotated[Settings, Depends(get_global_settings)],
) -> LeaderboardEngine:
    """Get a leaderboard engine for the request.

    The best-score strategy is chosen here: the store-native query when the
    store offers it and it is enabled, a full scan otherwise.

    :param store: Record store bound to the request session
    :param settings: Application settings
    :returns: Leaderboard engine
    """
    strategy = select_best_score_strategy(
        store, prefer_accelerated=settings.use_accelerated_leaderboard
    )
    return LeaderboardEngine(
        store, strategy=strategy, max_limit=settings.leaderboard_max_limit
    )


LeaderboardEngineDep = Annotated[LeaderboardEngine, Depends(get_leaderboard_engine)]

__all__ = ["get_leaderboard_engine", "LeaderboardEngineDep"]
