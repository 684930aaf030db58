from unittest.mock import AsyncMock

import pytest

from system_drift.core.exceptions import ValidationError
from system_drift.features.game_stats.repository import SQLAlchemyRecordStore
from system_drift.features.game_stats.schemas import SessionReport
from system_drift.features.game_stats.service import GameStatsService
from tests.conftest import make_record


@pytest.fixture
def mock_store():
    return AsyncMock(spec=SQLAlchemyRecordStore)


@pytest.fixture
def service(mock_store):
    return GameStatsService(mock_store)


@pytest.fixture
def report():
    return SessionReport(
        session_id="abc",
        player_id="p1",
        final_score=64,
        final_entropy=0.8,
        won=True,
        phase_reached=3,
    )


async def test_record_session_new(service, mock_store, report):
    stored = make_record("p1", 64, won=True, session_id="abc")
    mock_store.create_session.return_value = (stored, True)

    record, created = await service.record_session(report)

    assert created is True
    assert record == stored
    mock_store.create_session.assert_awaited_once_with(report)


async def test_record_session_already_known(service, mock_store, report):
    stored = make_record("p1", 12, session_id="abc")
    mock_store.create_session.return_value = (stored, False)

    record, created = await service.record_session(report)

    assert created is False
    assert record.final_score == 12


async def test_get_history(service, mock_store):
    mock_store.find_recent_by_player.return_value = [
        make_record("p1", 10, display_name="Drifter"),
        make_record("p1", 20),
    ]
    mock_store.count_by_player.return_value = 7

    history = await service.get_history("p1", limit=2)

    assert history.player_id == "p1"
    assert history.total == 7
    assert [s.final_score for s in history.sessions] == [10, 20]
    assert "display_name" not in history.sessions[0].model_dump()
    mock_store.find_recent_by_player.assert_awaited_once_with("p1", 2)


async def test_get_history_default_limit(service, mock_store):
    mock_store.find_recent_by_player.return_value = []
    mock_store.count_by_player.return_value = 0

    await service.get_history("p1")

    mock_store.find_recent_by_player.assert_awaited_once_with("p1", 50)


@pytest.mark.parametrize("limit", [0, 501, "abc", True])
async def test_get_history_rejects_limit(service, mock_store, limit):
    with pytest.raises(ValidationError) as exc_info:
        await service.get_history("p1", limit=limit)

    assert exc_info.value.field == "limit"
    mock_store.find_recent_by_player.assert_not_called()


async def test_erase_player(service, mock_store):
    mock_store.delete_by_player.return_value = 4

    result = await service.erase_player("p1")

    assert result.deleted == 4
    mock_store.delete_by_player.assert_awaited_once_with("p1")
