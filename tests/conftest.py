"""Shared fixtures for the test suite."""

from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from system_drift.core.models import Base
from system_drift.features.game_stats.orm_models import GameSessionORM  # noqa: F401
from system_drift.features.game_stats.schemas import SessionRecord
from system_drift.features.players.orm_models import PlayerProfileORM  # noqa: F401

NOW = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)

_session_ids = count(1)


def make_record(
    player_id: str,
    score: int,
    won: bool = False,
    played_at: Optional[datetime] = None,
    entropy: float = 0.5,
    phase: int = 1,
    session_id: Optional[str] = None,
    display_name: Optional[str] = None,
) -> SessionRecord:
    """Build a session record with sensible defaults."""
    return SessionRecord(
        session_id=session_id or f"session-{next(_session_ids)}",
        player_id=player_id,
        final_score=score,
        final_entropy=entropy,
        won=won,
        phase_reached=phase,
        played_at=played_at or NOW - timedelta(minutes=5),
        display_name=display_name,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    """Fixed clock so window cutoffs are deterministic."""
    return lambda: NOW


@pytest.fixture
def scenario_records():
    """P1 plays twice (50 lost, 90 won), P2 once (80 won)."""
    return [
        make_record("p1", 50, won=False, played_at=NOW - timedelta(minutes=3)),
        make_record("p1", 90, won=True, played_at=NOW - timedelta(minutes=2)),
        make_record("p2", 80, won=True, played_at=NOW - timedelta(minutes=1)),
    ]


@pytest.fixture
def names():
    return {"p1": "Drifter", "p2": "Entropia"}


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite database with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    async with factory() as session:
        yield session
