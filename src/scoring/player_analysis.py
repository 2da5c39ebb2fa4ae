"""Player analytics built on top of the fantasy points function."""

import logging
import math
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from src.scoring.config import (
    FORM_WINDOW_MATCHES,
    INJURY_LOOKBACK_DAYS,
    NEUTRAL_RATING,
    POSITION_VALUE_MULTIPLIERS,
    RATING_MAX,
    RATING_MIN,
)
from src.scoring.fantasy_points import calculate_fantasy_points, round_points, stat_value

logger = logging.getLogger(__name__)


def _clamp_rating(value: float) -> int:
    return int(min(RATING_MAX, max(RATING_MIN, math.floor(value + 0.5))))


def weekly_points(
    weekly_stats: Mapping, weights: Mapping[str, float], position: Optional[str] = None
) -> float:
    """Points for a single match week."""
    return calculate_fantasy_points(weekly_stats, weights, position)


def season_points(
    weekly_stats: Iterable[Mapping],
    weights: Mapping[str, float],
    position: Optional[str] = None,
) -> float:
    """Sum of weekly points across a season."""
    return round_points(
        sum(weekly_points(week, weights, position) for week in weekly_stats)
    )


def average_points_per_game(
    stats: Mapping, weights: Mapping[str, float], position: Optional[str] = None
) -> float:
    """Total points divided by matches played (at least one)."""
    total = calculate_fantasy_points(stats, weights, position)
    games = stat_value(stats, "matches_played") or 1
    return round_points(total / games)


def projected_points(
    stats: Mapping,
    upcoming_matches: int,
    weights: Mapping[str, float],
    position: Optional[str] = None,
) -> float:
    """Average points per game extrapolated over *upcoming_matches*."""
    return round_points(
        average_points_per_game(stats, weights, position) * upcoming_matches
    )


def fantasy_value_rating(
    stats: Mapping, weights: Mapping[str, float], position: Optional[str]
) -> int:
    """1-100 rating of per-game value, adjusted by position."""
    total = calculate_fantasy_points(stats, weights, position)
    games = stat_value(stats, "matches_played") or 1
    multiplier = POSITION_VALUE_MULTIPLIERS.get(position, 1.0)
    return _clamp_rating(total / games * multiplier * 5)


def consistency_rating(
    weekly_stats: Sequence[Mapping],
    weights: Mapping[str, float],
    position: Optional[str] = None,
) -> int:
    """1-100 rating; lower week-to-week variation rates higher.

    Returns the neutral rating with fewer than two weeks of data or a zero
    average.
    """
    if len(weekly_stats) < 2:
        return NEUTRAL_RATING

    points = pd.Series(
        [weekly_points(week, weights, position) for week in weekly_stats]
    )
    mean = points.mean()
    if mean == 0:
        return NEUTRAL_RATING

    coefficient_of_variation = points.std(ddof=0) / mean
    return _clamp_rating(100 - coefficient_of_variation * 100)


def form_rating(
    recent_stats: Sequence[Mapping],
    weights: Mapping[str, float],
    position: Optional[str] = None,
) -> int:
    """1-100 rating from average points over recent matches."""
    if not recent_stats:
        return NEUTRAL_RATING
    points = [weekly_points(week, weights, position) for week in recent_stats]
    return _clamp_rating(sum(points) / len(points) * 10)


def injury_risk_rating(
    player,
    injury_history: Iterable[Mapping] = (),
    today: Optional[date] = None,
) -> int:
    """1-100 injury risk from age, current status and recent injuries.

    Args:
        player: Object with ``age`` and ``is_injured`` attributes.
        injury_history: Records with an ISO ``date`` field.
        today: Reference date (defaults to today).
    """
    today = today or date.today()
    risk = NEUTRAL_RATING

    age = getattr(player, "age", None)
    if age:
        if age > 30:
            risk += 10
        if age > 35:
            risk += 15

    if getattr(player, "is_injured", False):
        risk += 30

    cutoff = today - timedelta(days=INJURY_LOOKBACK_DAYS)
    recent = 0
    for injury in injury_history:
        try:
            injured_on = datetime.fromisoformat(str(injury["date"])).date()
        except (KeyError, ValueError):
            logger.warning("Skipping injury record without a valid date: %r", injury)
            continue
        if injured_on > cutoff:
            recent += 1
    risk += recent * 10

    return _clamp_rating(risk)


def player_strengths(stats: Mapping) -> List[str]:
    strengths = []
    if stat_value(stats, "goals") > 0:
        strengths.append("Goal scoring")
    if stat_value(stats, "assists") > 0:
        strengths.append("Playmaking")
    if stat_value(stats, "passes_completed") > 50:
        strengths.append("Passing accuracy")
    if stat_value(stats, "key_passes") > 5:
        strengths.append("Chance creation")
    if stat_value(stats, "clean_sheets") > 0:
        strengths.append("Defensive solidity")
    if stat_value(stats, "saves") > 0:
        strengths.append("Shot stopping")
    if stat_value(stats, "minutes_played") > 1000:
        strengths.append("Playing time")
    return strengths


def player_weaknesses(stats: Mapping) -> List[str]:
    weaknesses = []
    if stat_value(stats, "yellow_cards") > 3:
        weaknesses.append("Disciplinary issues")
    if stat_value(stats, "red_cards") > 0:
        weaknesses.append("Red card risk")
    if stat_value(stats, "minutes_played") < 500:
        weaknesses.append("Limited playing time")
    if stat_value(stats, "passes_completed") < 20:
        weaknesses.append("Low involvement")
    return weaknesses


def player_recommendations(
    player, stats: Mapping, weights: Mapping[str, float]
) -> List[str]:
    average = average_points_per_game(stats, weights, getattr(player, "position", None))
    if average > 15:
        recommendations = ["High-value starter"]
    elif average > 10:
        recommendations = ["Solid starter"]
    elif average > 5:
        recommendations = ["Bench option"]
    else:
        recommendations = ["Avoid"]

    if getattr(player, "is_injured", False):
        recommendations.append("Monitor injury status")
    return recommendations


def player_analysis(
    player,
    weekly_stats: Sequence[Mapping],
    weights: Mapping[str, float],
    injury_history: Iterable[Mapping] = (),
) -> Dict:
    """Combined analysis of a player's season.

    Args:
        player: A :class:`~src.draft_room.models.Player` (season totals in
            ``player.stats``).
        weekly_stats: Per-match stat dicts, oldest first.
        weights: League scoring weights.
        injury_history: Records with an ISO ``date`` field.
    """
    stats = player.stats
    position = player.position
    return {
        "total_points": calculate_fantasy_points(stats, weights, position),
        "avg_points_per_game": average_points_per_game(stats, weights, position),
        "fantasy_value": fantasy_value_rating(stats, weights, position),
        "consistency": consistency_rating(weekly_stats, weights, position),
        "form": form_rating(weekly_stats[-FORM_WINDOW_MATCHES:], weights, position),
        "injury_risk": injury_risk_rating(player, injury_history),
        "analysis": {
            "strengths": player_strengths(stats),
            "weaknesses": player_weaknesses(stats),
            "recommendations": player_recommendations(player, stats, weights),
        },
    }
