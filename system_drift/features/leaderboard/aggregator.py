"""Per-player aggregate statistics."""

from typing import Iterable

from system_drift.features.game_stats.schemas import SessionRecord

from .schemas import AggregateStats


def aggregate(records: Iterable[SessionRecord]) -> AggregateStats:
    """Summarize a player's sessions.

    An empty input is a valid case: every field is zero.
    """
    total_games = 0
    games_won = 0
    score_sum = 0
    entropy_sum = 0.0
    highest_score = 0

    for record in records:
        total_games += 1
        if record.won:
            games_won += 1
        score_sum += record.final_score
        entropy_sum += record.final_entropy
        highest_score = max(highest_score, record.final_score)

    if total_games == 0:
        return AggregateStats()

    return AggregateStats(
        total_games=total_games,
        games_won=games_won,
        games_lost=total_games - games_won,
        average_score=score_sum / total_games,
        average_entropy=entropy_sum / total_games,
        highest_score=highest_score,
    )
