"""SQLAlchemy 2.0 ORM model for player profiles.

Profiles are owned by the identity layer; this service only reads the
display name when building leaderboards.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime as SQLDateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from system_drift.core.models import Base

ANONYMOUS_DISPLAY_NAME = "Anonymous"


class PlayerProfileORM(Base):
    """Player profile as provisioned by the identity provider."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Identity provider user id",
    )

    username: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, comment="Public display name"
    )

    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    @property
    def display_name(self) -> str:
        """Username, or the anonymous placeholder when none was chosen."""
        return display_name_or_anonymous(self.username)

    def __repr__(self) -> str:
        return f"<PlayerProfile(id='{self.id}', username='{self.username}')>"


def display_name_or_anonymous(name: Optional[str]) -> str:
    """Return ``name`` unless it is missing or blank."""
    if name and name.strip():
        return name
    return ANONYMOUS_DISPLAY_NAME
