"""Players ranked by number of winning sessions."""

from dataclasses import dataclass
from typing import Iterable, Optional

from system_drift.features.game_stats.schemas import SessionRecord


@dataclass
class WinTally:
    player_id: str
    display_name: Optional[str]
    wins: int = 0


def count_wins(records: Iterable[SessionRecord], limit: int) -> list[WinTally]:
    """Count winning sessions per player, most wins first, truncated to ``limit``.

    Every winning session counts once; players without a win never appear.
    """
    if limit <= 0:
        return []

    tallies: dict[str, WinTally] = {}
    for record in records:
        if not record.won:
            continue
        tally = tallies.get(record.player_id)
        if tally is None:
            tally = tallies[record.player_id] = WinTally(
                player_id=record.player_id, display_name=record.display_name
            )
        elif tally.display_name is None:
            tally.display_name = record.display_name
        tally.wins += 1

    ordered = sorted(tallies.values(), key=lambda t: (-t.wins, t.player_id))
    return ordered[:limit]
