from datetime import timedelta

import pytest

from system_drift.core.enums import LeaderboardWindow
from system_drift.core.exceptions import StoreUnavailableError, ValidationError
from system_drift.features.leaderboard.service import LeaderboardEngine
from tests.conftest import NOW, make_record
from tests.doubles import (
    AcceleratedInMemoryStore,
    BrokenAcceleratedStore,
    FailingStore,
    InMemoryRecordStore,
)

STORE_KINDS = {
    "scan": InMemoryRecordStore,
    "accelerated": AcceleratedInMemoryStore,
    "fallback": BrokenAcceleratedStore,
}


@pytest.fixture(params=sorted(STORE_KINDS))
def make_engine(request, clock):
    """Engine factory, run once per best-score strategy."""

    def factory(records, names=None, **store_kwargs):
        store = STORE_KINDS[request.param](records, names, **store_kwargs)
        return LeaderboardEngine(store, clock=clock)

    return factory


@pytest.fixture
def many_records():
    records = []
    for i in range(12):
        player = f"p{i % 5}"
        records.append(
            make_record(
                player,
                score=(i * 37) % 100,
                won=i % 3 == 0,
                played_at=NOW - timedelta(hours=i * 20),
            )
        )
    return records


class TestGlobalLeaderboard:
    async def test_scenario(self, make_engine, scenario_records, names):
        engine = make_engine(scenario_records, names)

        board = await engine.global_leaderboard(10)

        assert [(e.display_name, e.score, e.won) for e in board] == [
            ("Drifter", 90, True),
            ("Entropia", 80, True),
        ]

    async def test_each_player_once_with_personal_best(self, make_engine, many_records):
        engine = make_engine(many_records)

        board = await engine.global_leaderboard(100)

        expected = {}
        for r in many_records:
            expected[r.player_id] = max(expected.get(r.player_id, 0), r.final_score)
        assert len(board) == len(expected)
        assert sorted(e.score for e in board) == sorted(expected.values())

    async def test_sorted_non_increasing_and_truncated(self, make_engine, many_records):
        engine = make_engine(many_records)

        board = await engine.global_leaderboard(3)

        scores = [e.score for e in board]
        assert len(board) == 3
        assert scores == sorted(scores, reverse=True)

    async def test_anonymous_when_no_name(self, make_engine, scenario_records):
        engine = make_engine(scenario_records, {"p1": "Drifter"})

        board = await engine.global_leaderboard(10)

        assert [e.display_name for e in board] == ["Drifter", "Anonymous"]

    async def test_resolves_names_store_did_not_annotate(
        self, make_engine, scenario_records, names
    ):
        engine = make_engine(scenario_records, names, annotate_names=False)

        board = await engine.global_leaderboard(10)

        assert [e.display_name for e in board] == ["Drifter", "Entropia"]

    async def test_empty_store(self, make_engine):
        assert await make_engine([]).global_leaderboard(10) == []

    async def test_strategies_agree(self, clock, many_records):
        boards = []
        for kind in STORE_KINDS.values():
            engine = LeaderboardEngine(kind(many_records), clock=clock)
            boards.append(await engine.global_leaderboard(4))

        assert boards[0] == boards[1] == boards[2]


class TestWindowedLeaderboard:
    async def test_all_matches_global(self, make_engine, many_records):
        engine = make_engine(many_records)

        assert await engine.windowed_leaderboard("all", 4) == (
            await engine.global_leaderboard(4)
        )

    async def test_all_time_alias(self, make_engine, many_records):
        engine = make_engine(many_records)

        assert await engine.windowed_leaderboard("allTime", 4) == (
            await engine.windowed_leaderboard(LeaderboardWindow.ALL, 4)
        )

    async def test_day_excludes_older_sessions(self, make_engine):
        records = [
            make_record("old", 100, played_at=NOW - timedelta(hours=25)),
            make_record("edge", 70, played_at=NOW - timedelta(hours=24)),
            make_record("fresh", 60, played_at=NOW - timedelta(hours=1)),
            make_record("fresh", 99, played_at=NOW - timedelta(days=3)),
        ]
        engine = make_engine(records, {"old": "Old", "edge": "Edge", "fresh": "Fresh"})

        board = await engine.windowed_leaderboard("day", 10)

        assert [(e.display_name, e.score) for e in board] == [
            ("Edge", 70),
            ("Fresh", 60),
        ]

    async def test_week_window(self, make_engine):
        records = [
            make_record("a", 10, played_at=NOW - timedelta(days=6)),
            make_record("b", 20, played_at=NOW - timedelta(days=8)),
        ]
        engine = make_engine(records, {"a": "A", "b": "B"})

        board = await engine.windowed_leaderboard(LeaderboardWindow.WEEK, 10)

        assert [e.display_name for e in board] == ["A"]

    async def test_month_window_is_calendar_month(self, make_engine):
        # NOW is 2026-03-31 12:00, so the cutoff is 2026-02-28 12:00 (31 days back)
        records = [
            make_record("inside", 10, played_at=NOW - timedelta(days=30)),
            make_record("outside", 20, played_at=NOW - timedelta(days=31, minutes=1)),
        ]
        engine = make_engine(records, {"inside": "In", "outside": "Out"})

        board = await engine.windowed_leaderboard("month", 10)

        assert [e.display_name for e in board] == ["In"]

    async def test_unknown_window_rejected_before_store_access(self, make_engine):
        engine = make_engine([make_record("p1", 1)])

        with pytest.raises(ValidationError) as exc_info:
            await engine.windowed_leaderboard("year", 10)

        assert exc_info.value.field == "window"
        assert engine.store.calls == []


class TestTopWinners:
    async def test_scenario(self, make_engine, scenario_records, names):
        engine = make_engine(scenario_records, names)

        winners = await engine.top_winners(10)

        assert sorted((w.display_name, w.wins) for w in winners) == [
            ("Drifter", 1),
            ("Entropia", 1),
        ]

    async def test_counts_match_won_sessions(self, make_engine, many_records):
        engine = make_engine(many_records)

        winners = await engine.top_winners(100)

        expected = {}
        for r in many_records:
            if r.won:
                expected[r.player_id] = expected.get(r.player_id, 0) + 1
        assert sorted(w.wins for w in winners) == sorted(expected.values())
        assert all(w.wins > 0 for w in winners)

    async def test_zero_win_player_absent(self, make_engine):
        records = [make_record("w", 1, won=True), make_record("l", 99, won=False)]
        engine = make_engine(records, {"w": "Winner", "l": "Loser"})

        winners = await engine.top_winners(10)

        assert [w.display_name for w in winners] == ["Winner"]


class TestPlayerRank:
    async def test_scenario(self, make_engine, scenario_records):
        engine = make_engine(scenario_records)

        assert await engine.player_rank("p1") == 1
        assert await engine.player_rank("p2") == 2

    async def test_tied_for_first_is_rank_one(self, make_engine):
        records = [make_record("a", 100), make_record("b", 100), make_record("c", 10)]
        engine = make_engine(records)

        assert await engine.player_rank("a") == 1
        assert await engine.player_rank("b") == 1
        assert await engine.player_rank("c") == 3

    async def test_ranked_by_personal_best_not_session_count(self, make_engine):
        records = [make_record("busy", s) for s in (60, 61, 62, 63, 64)]
        records.append(make_record("me", 55))
        engine = make_engine(records)

        assert await engine.player_rank("me") == 2

    async def test_unknown_player_is_unranked(self, make_engine, scenario_records):
        engine = make_engine(scenario_records)

        assert await engine.player_rank("nobody") is None

    async def test_empty_player_id_rejected(self, make_engine):
        engine = make_engine([])

        with pytest.raises(ValidationError) as exc_info:
            await engine.player_rank("  ")

        assert exc_info.value.field == "player_id"


class TestPlayerAggregate:
    async def test_scenario(self, make_engine, scenario_records):
        engine = make_engine(scenario_records)

        stats = await engine.player_aggregate("p1")

        assert stats.total_games == 2
        assert stats.games_won == 1
        assert stats.games_lost == 1
        assert stats.average_score == 70
        assert stats.highest_score == 90

    async def test_player_without_sessions(self, make_engine):
        stats = await make_engine([]).player_aggregate("nobody")

        assert stats.total_games == 0
        assert stats.average_score == 0


class TestLimitValidation:
    @pytest.mark.parametrize("limit", [0, -1, 1.5, "10", True, None])
    async def test_invalid_limits_rejected_before_store_access(self, make_engine, limit):
        engine = make_engine([make_record("p1", 1)])

        for call in (
            lambda: engine.global_leaderboard(limit),
            lambda: engine.windowed_leaderboard("day", limit),
            lambda: engine.top_winners(limit),
        ):
            with pytest.raises(ValidationError) as exc_info:
                await call()
            assert exc_info.value.field == "limit"

        assert engine.store.calls == []

    async def test_defaults(self, clock):
        records = [make_record(f"p{i}", i, won=True) for i in range(150)]
        engine = LeaderboardEngine(InMemoryRecordStore(records), clock=clock)

        assert len(await engine.global_leaderboard()) == 100
        assert len(await engine.windowed_leaderboard("all")) == 100
        assert len(await engine.top_winners()) == 20

    async def test_large_limits_accepted(self, make_engine):
        engine = make_engine([make_record("p1", 5, won=True)])

        board = await engine.global_leaderboard(5000)
        windowed = await engine.windowed_leaderboard("week", 5000)
        winners = await engine.top_winners(5000)

        assert [e.score for e in board] == [5]
        assert [e.score for e in windowed] == [5]
        assert [w.wins for w in winners] == [1]

    async def test_configured_cap_rejects_larger_limits(self, clock):
        store = InMemoryRecordStore([make_record("p1", 5)])
        engine = LeaderboardEngine(store, clock=clock, max_limit=10)

        assert len(await engine.global_leaderboard(10)) == 1
        with pytest.raises(ValidationError) as exc_info:
            await engine.global_leaderboard(11)

        assert exc_info.value.field == "limit"
        assert store.calls == ["fetch_all"]


class TestStoreFailures:
    @pytest.mark.parametrize(
        "error", [ConnectionError("reset"), TimeoutError(), StoreUnavailableError("down")]
    )
    async def test_surface_as_store_unavailable(self, clock, error):
        engine = LeaderboardEngine(FailingStore(error), clock=clock)

        for call in (
            lambda: engine.global_leaderboard(10),
            lambda: engine.windowed_leaderboard("week", 10),
            lambda: engine.top_winners(10),
            lambda: engine.player_rank("p1"),
            lambda: engine.player_aggregate("p1"),
        ):
            with pytest.raises(StoreUnavailableError):
                await call()

    async def test_no_retry(self, clock):
        store = FailingStore(ConnectionError("reset"))
        engine = LeaderboardEngine(store, clock=clock)

        with pytest.raises(StoreUnavailableError):
            await engine.top_winners(10)

        assert store.calls == ["fetch_all"]


async def test_queries_are_idempotent(make_engine, many_records):
    engine = make_engine(many_records)

    assert await engine.global_leaderboard(5) == await engine.global_leaderboard(5)
    assert await engine.top_winners(5) == await engine.top_winners(5)
    assert await engine.player_rank("p1") == await engine.player_rank("p1")
