"""Tests for auto-pick selection."""

from src.draft_room.auto_pick import AutoPickSelector
from src.draft_room.models import DraftPick, DraftSession, League, LeagueStatus, Player, Team
from src.scoring.config import DEFAULT_SCORING_WEIGHTS


# ── Helpers ──────────────────────────────────────────────────────────


def _player(pid, position, goals=0, **kwargs):
    return Player(pid, f"Player {pid}", position, stats={"goals": goals}, **kwargs)


def _make_pool():
    return [
        _player("f1", "FWD", goals=20),
        _player("f2", "FWD", goals=18),
        _player("m1", "MID", goals=10),
        _player("d1", "DEF", goals=3),
        _player("g1", "GK", goals=0),
    ]


def _selector(needs=None):
    return AutoPickSelector(DEFAULT_SCORING_WEIGHTS, needs)


# ── Best available ───────────────────────────────────────────────────


class TestBestAvailable:
    def test_highest_projected(self):
        assert _selector().select(_make_pool()).player_id == "f1"

    def test_ties_broken_by_player_id(self):
        pool = [_player("b", "MID", goals=5), _player("a", "MID", goals=5)]
        assert _selector().select(pool).player_id == "a"

    def test_never_inactive(self):
        pool = [_player("x", "FWD", goals=99, is_active=False), _player("m", "MID", goals=1)]
        assert _selector().select(pool).player_id == "m"

    def test_injured_top_player_still_picked(self):
        pool = [_player("x", "FWD", goals=99, is_injured=True), _player("m", "MID", goals=1)]
        assert _selector().select(pool).player_id == "x"

    def test_injured_player_fills_need(self):
        selector = _selector({"GK": 1})
        pool = [_player("g", "GK", is_injured=True), _player("f", "FWD", goals=9)]
        assert selector.select(pool).player_id == "g"

    def test_empty_pool(self):
        assert _selector().select([]) is None
        assert _selector().select([_player("x", "FWD", is_active=False)]) is None


# ── Roster needs ─────────────────────────────────────────────────────


class TestRosterNeeds:
    def test_unmet_needs(self):
        selector = _selector({"GK": 1, "DEF": 2})
        team = [_player("g", "GK"), _player("d", "DEF")]
        assert selector.unmet_needs(team) == {"DEF": 1}

    def test_fills_need_first(self):
        selector = _selector({"GK": 1})
        assert selector.select(_make_pool(), team_players=[]).player_id == "g1"

    def test_best_among_needed_positions(self):
        selector = _selector({"GK": 1, "DEF": 1})
        assert selector.select(_make_pool()).player_id == "d1"

    def test_need_already_met(self):
        selector = _selector({"GK": 1})
        team = [_player("g0", "GK")]
        assert selector.select(_make_pool(), team).player_id == "f1"

    def test_falls_back_when_need_unfillable(self):
        selector = _selector({"GK": 1})
        pool = [p for p in _make_pool() if p.position != "GK"]
        assert selector.select(pool).player_id == "f1"


# ── Session selection ────────────────────────────────────────────────


class TestSelectForSession:
    def _session(self, picks):
        league = League(
            "L1", "Test", 2, roster_slots={"GK": 1, "FWD": 2},
            status=LeagueStatus.DRAFTING, auto_pick_needs={"GK": 1},
        )
        teams = [Team("t1", "L1", "A", 1), Team("t2", "L1", "B", 2)]
        return DraftSession.derive(league, teams, picks)

    def test_skips_drafted_players(self):
        picks = [DraftPick.create("L1", 1, 1, 1, "t1", "f1")]
        chosen = _selector().select_for_session(self._session(picks), _make_pool())
        assert chosen.player_id == "f2"

    def test_uses_team_on_the_clock(self):
        # t2 picks twice in a row at the turn; its first pick was the keeper
        picks = [
            DraftPick.create("L1", 1, 1, 1, "t1", "f1"),
            DraftPick.create("L1", 1, 2, 2, "t2", "g1"),
        ]
        chosen = _selector({"GK": 1}).select_for_session(self._session(picks), _make_pool())
        assert chosen.player_id == "f2"

    def test_complete_session(self):
        session = self._session([])
        picks = [
            DraftPick.create("L1", s.round, s.slot_in_round, s.overall_pick, s.team_id, f"x{s.overall_pick}")
            for s in session.slots
        ]
        assert _selector().select_for_session(self._session(picks), _make_pool()) is None
