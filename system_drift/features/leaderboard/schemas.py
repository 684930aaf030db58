"""Pydantic schemas for leaderboard and aggregate responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class LeaderboardEntry(BaseModel):
    """One player's personal best as shown on a leaderboard."""

    display_name: str = Field(..., description="Username, or 'Anonymous'")
    score: int = Field(..., ge=0)
    entropy: float
    phase: int = Field(..., ge=0)
    won: bool
    played_at: datetime

    model_config = ConfigDict(frozen=True)


class TopWinner(BaseModel):
    """A player's total number of winning sessions."""

    display_name: str
    wins: int = Field(..., ge=1)

    model_config = ConfigDict(frozen=True)


class AggregateStats(BaseModel):
    """Per-player summary recomputed from all of the player's sessions."""

    total_games: int = Field(0, ge=0)
    games_won: int = Field(0, ge=0)
    games_lost: int = Field(0, ge=0)
    average_score: float = 0.0
    average_entropy: float = 0.0
    highest_score: int = Field(0, ge=0)

    model_config = ConfigDict(frozen=True)


class PlayerRankResponse(BaseModel):
    """A player's 1-based rank; ``rank`` is None when the player is unranked."""

    player_id: str
    rank: Optional[int] = Field(None, ge=1)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ranked(self) -> bool:
        """False for players with no recorded sessions."""
        return self.rank is not None
