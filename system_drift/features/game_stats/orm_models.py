"""SQLAlchemy 2.0 ORM model for reported game sessions."""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime as SQLDateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from system_drift.core.models import Base
from system_drift.features.players.orm_models import PlayerProfileORM


class GameSessionORM(Base):
    """One reported outcome of a single played game.

    Rows are written once and never updated; the only delete path is the
    bulk erase of a player's history.
    """

    __tablename__ = "game_sessions"
    __table_args__ = (
        Index("idx_game_sessions_player_score", "player_id", "final_score"),
        Index("idx_game_sessions_won_player", "won", "player_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Client-assigned, used for idempotent inserts
    session_id: Mapped[str] = mapped_column(
        String(128),
        unique=True,
        nullable=False,
        index=True,
        comment="Session identifier generated by the game client",
    )

    player_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Outcome
    final_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    final_entropy: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    won: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    phase_reached: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Opaque client metrics (clicks, timing, rule compliance)
    behavior: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSON, nullable=True, comment="Behavioral metrics reported by the client"
    )

    played_at: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    player: Mapped[Optional[PlayerProfileORM]] = relationship(
        PlayerProfileORM, lazy="raise"
    )

    def __repr__(self) -> str:
        return (
            f"<GameSession(session_id='{self.session_id}', "
            f"player_id='{self.player_id}', final_score={self.final_score})>"
        )
