"""Best-per-player reduction, leaderboard ordering, windows and rank.

Every leaderboard view agrees on one entry per player holding that player's
personal best, so a prolific player never occupies several slots.
"""

import calendar
from datetime import datetime, timedelta
from typing import Iterable, Optional

from system_drift.core.enums import LeaderboardWindow
from system_drift.features.game_stats.schemas import SessionRecord
from system_drift.features.players.orm_models import display_name_or_anonymous

from .schemas import LeaderboardEntry


def _is_better(candidate: SessionRecord, current: SessionRecord) -> bool:
    # Equal scores keep the earlier session
    if candidate.final_score != current.final_score:
        return candidate.final_score > current.final_score
    return candidate.played_at < current.played_at


def leaderboard_sort_key(record: SessionRecord) -> tuple:
    """Score descending; equal scores by earliest session, then player id."""
    return (-record.final_score, record.played_at, record.player_id)


def best_per_player(records: Iterable[SessionRecord]) -> dict[str, SessionRecord]:
    """Collapse records into each player's maximum-score record."""
    best: dict[str, SessionRecord] = {}
    for record in records:
        current = best.get(record.player_id)
        if current is None or _is_better(record, current):
            best[record.player_id] = record
    return best


def build_leaderboard(
    records: Iterable[SessionRecord], limit: int
) -> list[SessionRecord]:
    """Best record per player, sorted by score descending, truncated to ``limit``."""
    if limit <= 0:
        return []
    ranked = sorted(best_per_player(records).values(), key=leaderboard_sort_key)
    return ranked[:limit]


def to_leaderboard_entry(record: SessionRecord) -> LeaderboardEntry:
    """Project a record onto a leaderboard row."""
    return LeaderboardEntry(
        display_name=display_name_or_anonymous(record.display_name),
        score=record.final_score,
        entropy=record.final_entropy,
        phase=record.phase_reached,
        won=record.won,
        played_at=record.played_at,
    )


def subtract_months(moment: datetime, months: int = 1) -> datetime:
    """Calendar-aware month subtraction.

    The day is clamped to the length of the target month, so March 31st
    minus one month is the last day of February.
    """
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def window_cutoff(window: LeaderboardWindow, now: datetime) -> Optional[datetime]:
    """Earliest ``played_at`` included in ``window``; None means no lower bound."""
    if window is LeaderboardWindow.DAY:
        return now - timedelta(hours=24)
    if window is LeaderboardWindow.WEEK:
        return now - timedelta(days=7)
    if window is LeaderboardWindow.MONTH:
        return subtract_months(now, 1)
    if window is LeaderboardWindow.ALL:
        return None
    raise ValueError(f"Unsupported leaderboard window: {window!r}")


def rank_for_score(best_score: int, competitors: dict[str, SessionRecord]) -> int:
    """1 + the number of distinct players whose best strictly exceeds ``best_score``.

    Ties share the lower ordinal.
    """
    above = sum(
        1 for record in competitors.values() if record.final_score > best_score
    )
    return above + 1
