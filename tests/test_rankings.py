"""Tests for player ranking by projected points."""

from src.draft_room.models import Player
from src.player_pool.rankings import rank_available_players, rank_players
from src.scoring.config import DEFAULT_SCORING_WEIGHTS


def _make_players():
    return [
        Player("m2", "Mid Two", "MID", stats={"goals": 2}),
        Player("f1", "Fwd One", "FWD", stats={"goals": 3}),
        Player("m1", "Mid One", "MID", stats={"goals": 2}),
        Player("g1", "Keeper", "GK", stats={"saves": 5, "clean_sheets": 1}),
        Player("x1", "Retired", "FWD", is_active=False, stats={"goals": 50}),
    ]


class TestRankPlayers:
    def test_sorted_by_points_then_id(self):
        df = rank_players(_make_players(), DEFAULT_SCORING_WEIGHTS)
        assert list(df["player_id"]) == ["x1", "f1", "m1", "m2", "g1"]

    def test_projected_points_column(self):
        df = rank_players(_make_players(), DEFAULT_SCORING_WEIGHTS).set_index("player_id")
        assert df.loc["f1", "projected_points"] == 30.0
        # 5 saves + one clean sheet at the goalkeeper weight
        assert df.loc["g1", "projected_points"] == 11.0

    def test_empty(self):
        df = rank_players([], DEFAULT_SCORING_WEIGHTS)
        assert df.empty
        assert "projected_points" in df.columns


class TestRankAvailablePlayers:
    def test_excludes_drafted_and_inactive(self):
        df = rank_available_players(_make_players(), ["f1"], DEFAULT_SCORING_WEIGHTS)
        assert list(df["player_id"]) == ["m1", "m2", "g1"]

    def test_position_filter(self):
        df = rank_available_players(
            _make_players(), [], DEFAULT_SCORING_WEIGHTS, position="MID"
        )
        assert list(df["player_id"]) == ["m1", "m2"]
