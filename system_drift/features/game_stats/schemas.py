"""Pydantic schemas for reported game sessions."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BehaviorMetrics(BaseModel):
    """Behavioral metrics reported alongside a session.

    Carried through storage and responses untouched; ranking and aggregation
    never read them. Unknown keys are kept so newer clients can add metrics.
    """

    final_sanity: Optional[float] = None
    total_time: Optional[float] = None
    collapse_count: Optional[int] = None
    total_clicks: Optional[int] = None
    average_click_speed: Optional[float] = None
    most_clicked_color: Optional[str] = None
    repetition_count: Optional[int] = None
    variety_score: Optional[float] = None
    hesitation_score: Optional[float] = None
    impulsivity_score: Optional[float] = None
    pattern_adherence: Optional[float] = None
    dominant_behavior: Optional[str] = None
    click_sequence: Optional[List[str]] = None
    rules_followed: Optional[int] = None
    rules_broken: Optional[int] = None
    hints_ignored: Optional[int] = None
    hint_exposure_count: Optional[int] = None
    misleading_hint_count: Optional[int] = None
    trust_level: Optional[float] = None
    rebellion_count: Optional[int] = None
    compliance_count: Optional[int] = None
    manipulation_resistance: Optional[float] = None

    model_config = ConfigDict(extra="allow")


class SessionOutcome(BaseModel):
    """Fields shared by incoming reports and stored records."""

    session_id: str = Field(..., min_length=1, max_length=128)
    final_score: int = Field(..., ge=0)
    final_entropy: float = Field(...)
    won: bool = Field(...)
    phase_reached: int = Field(..., ge=0)
    behavior: BehaviorMetrics = Field(default_factory=BehaviorMetrics)


class SessionReport(SessionOutcome):
    """Schema for a client reporting a finished (or abandoned) session."""

    player_id: str = Field(..., min_length=1, max_length=64)


class SessionRecord(SessionOutcome):
    """A stored session as seen by the leaderboard engine.

    ``display_name`` is an annotation the store fills in when it joins the
    player's profile; it is not part of the stored row.
    """

    player_id: str
    played_at: datetime
    display_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SessionRecordResponse(SessionOutcome):
    """Schema for session response data."""

    player_id: str
    played_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SessionHistoryResponse(BaseModel):
    """A player's most recent sessions, newest first."""

    player_id: str
    total: int = Field(..., ge=0, description="Total sessions stored for the player")
    sessions: list[SessionRecordResponse] = Field(default_factory=list)


class EraseResponse(BaseModel):
    """Result of erasing a player's session history."""

    player_id: str
    deleted: int = Field(..., ge=0)
