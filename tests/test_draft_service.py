"""Tests for the draft request surface."""

import pytest

from src.draft_room.collaborators import (
    InMemoryLeagueStore,
    InMemoryPlayerStore,
    InMemoryRosterStore,
)
from src.draft_room.draft_service import DraftService
from src.draft_room.errors import InvalidStateError, NotFoundError, NotYourTurnError
from src.draft_room.models import League, LeagueStatus, Player, Team
from src.draft_room.pick_store import InMemoryPickStore


# ── Helpers ──────────────────────────────────────────────────────────

POSITIONS = ("GK", "DEF", "DEF", "MID", "MID", "FWD")

FULL_ROSTER = {"GK": 1, "DEF": 4, "MID": 4, "FWD": 2, "BENCH": 1}


def _make_players(count):
    return [
        Player(
            f"p{i:03d}",
            f"Player {i}",
            POSITIONS[i % len(POSITIONS)],
            stats={"goals": count - i, "minutes_played": 900},
        )
        for i in range(count)
    ]


def _make_service(timer_factory, gateway, team_count=4, roster_slots=None,
                  players=None, status=LeagueStatus.SCHEDULED):
    league = League(
        league_id="L1",
        name="Sunday League",
        team_count=team_count,
        roster_slots=roster_slots or {"GK": 1, "FWD": 1},
        status=status,
    )
    # Stored out of draft order on purpose
    teams = [
        Team(f"t{i}", "L1", f"Team {i}", draft_position=i)
        for i in reversed(range(1, team_count + 1))
    ]
    league_store = InMemoryLeagueStore()
    league_store.add_league(league, teams)
    service = DraftService(
        league_store=league_store,
        player_store=InMemoryPlayerStore(players or _make_players(40)),
        roster_store=InMemoryRosterStore(),
        pick_store=InMemoryPickStore(),
        broadcast=gateway,
        timer_factory=timer_factory,
    )
    return service, league, league_store


@pytest.fixture
def service(timer_factory, gateway):
    svc, _, _ = _make_service(timer_factory, gateway)
    yield svc
    svc.close()


# ── Reads ────────────────────────────────────────────────────────────


class TestReads:
    def test_draft_order(self, service):
        order = service.get_draft_order("L1")
        assert [t.team_id for t in order] == ["t1", "t2", "t3", "t4"]

    def test_available_players_best_first(self, service):
        available = service.get_available_players("L1")
        assert [p["player_id"] for p in available[:3]] == ["p000", "p001", "p002"]
        assert available[0]["projected_points"] == 490.0

    def test_available_players_by_position(self, service):
        keepers = service.get_available_players("L1", position="GK")
        assert keepers
        assert {p["position"] for p in keepers} == {"GK"}

    def test_drafted_players_disappear(self, service):
        service.start_draft("L1")
        service.submit_pick("L1", "t1", 1, 1, "p000")
        available = [p["player_id"] for p in service.get_available_players("L1")]
        assert "p000" not in available
        assert len(available) == 39

    def test_picks_in_order(self, service):
        service.start_draft("L1")
        service.submit_pick("L1", "t1", 1, 1, "p004")
        service.submit_pick("L1", "t2", 1, 2, "p002")
        assert [p.player_id for p in service.get_picks("L1")] == ["p004", "p002"]

    def test_current_slot(self, service):
        service.start_draft("L1")
        slot = service.get_current_slot("L1")
        assert slot["round"] == 1
        assert slot["slot_in_round"] == 1
        assert slot["overall_pick"] == 1
        assert slot["team_id"] == "t1"
        assert 0 < slot["remaining_seconds"] <= 90

    @pytest.mark.parametrize("call", [
        lambda s: s.get_picks("nope"),
        lambda s: s.get_available_players("nope"),
        lambda s: s.get_draft_order("nope"),
        lambda s: s.get_current_slot("nope"),
        lambda s: s.submit_pick("nope", "t1", 1, 1, "p000"),
        lambda s: s.start_draft("nope"),
    ])
    def test_unknown_league(self, service, call):
        with pytest.raises(NotFoundError):
            call(service)


# ── Lifecycle ────────────────────────────────────────────────────────


class TestLifecycle:
    def test_pick_before_draft_starts(self, service):
        with pytest.raises(InvalidStateError):
            service.submit_pick("L1", "t1", 1, 1, "p000")

    def test_start_twice(self, service):
        service.start_draft("L1")
        with pytest.raises(InvalidStateError):
            service.start_draft("L1")

    def test_rejection_kind_passes_through(self, service):
        service.start_draft("L1")
        with pytest.raises(NotYourTurnError):
            service.submit_pick("L1", "t2", 1, 1, "p000")

    def test_drafting_league_resumes_on_request(self, timer_factory, gateway):
        svc, _, league_store = _make_service(
            timer_factory, gateway, status=LeagueStatus.DRAFTING
        )
        pick = svc.submit_pick("L1", "t1", 1, 1, "p000")
        assert pick.overall_pick == 1
        assert league_store.status_history == []
        svc.close()

    def test_timer_finished_draft_is_released(self, timer_factory, gateway):
        svc, league, _ = _make_service(timer_factory, gateway, team_count=2)
        svc.start_draft("L1")
        for _ in range(league.total_picks()):
            timer_factory.latest.fire()

        assert league.status == LeagueStatus.ACTIVE
        # Released without another request: broadcasts already flushed
        assert len(gateway.events) == 4
        assert gateway.events[-1][1].draft_complete
        assert timer_factory.running() == []
        with pytest.raises(InvalidStateError, match="cannot start drafting"):
            svc.start_draft("L1")
        svc.close()

    def test_close_stops_timers(self, service, timer_factory):
        service.start_draft("L1")
        service.close()
        assert timer_factory.running() == []


# ── Full draft ───────────────────────────────────────────────────────


class TestFullDraft:
    def test_twelve_team_draft(self, timer_factory, gateway):
        svc, league, _ = _make_service(
            timer_factory, gateway,
            team_count=12, roster_slots=FULL_ROSTER, players=_make_players(160),
        )
        svc.start_draft("L1")
        assert league.total_picks() == 144

        for n in range(1, 145):
            slot = svc.get_current_slot("L1")
            assert slot["overall_pick"] == n
            best = svc.get_available_players("L1")[0]["player_id"]
            svc.submit_pick("L1", slot["team_id"], slot["round"], slot["slot_in_round"], best)
            if n == 143:
                assert league.status == LeagueStatus.DRAFTING

        assert league.status == LeagueStatus.ACTIVE
        picks = svc.get_picks("L1")
        assert len(picks) == 144
        assert len({p.player_id for p in picks}) == 144
        assert len({p.key for p in picks}) == 144
        with pytest.raises(InvalidStateError):
            svc.get_current_slot("L1")

        # Coordinator was discarded on completion, flushing every broadcast
        events = [event for _, event in gateway.events]
        assert len(events) == 144
        assert [e.draft_complete for e in events].count(True) == 1
        assert events[-1].draft_complete
        svc.close()

    def test_snake_turns(self, timer_factory, gateway):
        svc, _, _ = _make_service(timer_factory, gateway, team_count=4)
        svc.start_draft("L1")
        teams = []
        for _ in range(8):
            slot = svc.get_current_slot("L1")
            teams.append(slot["team_id"])
            best = svc.get_available_players("L1")[0]["player_id"]
            svc.submit_pick("L1", slot["team_id"], slot["round"], slot["slot_in_round"], best)
        assert teams == ["t1", "t2", "t3", "t4", "t4", "t3", "t2", "t1"]
        svc.close()
