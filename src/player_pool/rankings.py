"""Rank players by projected fantasy points."""

from typing import Iterable, Mapping, Optional

import pandas as pd

from src.draft_room.models import Player
from src.scoring.fantasy_points import calculate_fantasy_points

RANKING_COLUMNS = [
    "player_id",
    "name",
    "position",
    "club",
    "is_injured",
    "projected_points",
]


def rank_players(
    players: Iterable[Player], weights: Mapping[str, float]
) -> pd.DataFrame:
    """Score and sort players: projected points descending, then ID ascending."""
    rows = [
        {
            "player_id": p.player_id,
            "name": p.name,
            "position": p.position,
            "club": p.club,
            "is_injured": p.is_injured,
            "projected_points": calculate_fantasy_points(p.stats, weights, p.position),
        }
        for p in players
    ]
    df = pd.DataFrame(rows, columns=RANKING_COLUMNS)
    if df.empty:
        return df
    return df.sort_values(
        ["projected_points", "player_id"],
        ascending=[False, True],
        kind="mergesort",
    ).reset_index(drop=True)


def rank_available_players(
    players: Iterable[Player],
    drafted_ids: Iterable[str],
    weights: Mapping[str, float],
    position: Optional[str] = None,
) -> pd.DataFrame:
    """Active, undrafted players ranked by projected points.

    Args:
        players: The full player pool.
        drafted_ids: Player IDs already picked in the league.
        weights: League scoring weights.
        position: If provided, filter to this position only.
    """
    drafted = set(drafted_ids)
    available = [
        p for p in players
        if p.is_active
        and p.player_id not in drafted
        and (position is None or p.position == position)
    ]
    return rank_players(available, weights)
