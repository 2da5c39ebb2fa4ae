"""Fantasy points for soccer players.

A pure weighted sum of season statistics. Clean sheets are weighted by the
player's position (``clean_sheets_gk``, ``clean_sheets_def``, ...), falling
back to a generic ``clean_sheets`` weight when no position-specific weight
is configured. Positions outside GK/DEF/MID/FWD score nothing for clean
sheets.
"""

import math
from typing import Mapping, Optional

from src.scoring.config import LINEAR_SCORING_STATS, POSITIONS


def round_points(value: float) -> float:
    """Round half-up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def stat_value(stats: Mapping, name: str) -> float:
    """Numeric stat value, treating missing/None/NaN as 0."""
    value = stats.get(name)
    if value is None:
        return 0.0
    value = float(value)
    return 0.0 if math.isnan(value) else value


def clean_sheet_weight(weights: Mapping[str, float], position: Optional[str]) -> float:
    """Weight applied to clean sheets for a position."""
    generic = weights.get("clean_sheets", 0.0)
    if not position:
        return generic
    if position.upper() not in POSITIONS:
        return 0.0
    return weights.get(f"clean_sheets_{position.lower()}", generic)


def calculate_fantasy_points(
    stats: Mapping,
    weights: Mapping[str, float],
    position: Optional[str] = None,
) -> float:
    """Weighted linear combination of *stats*, rounded to one decimal.

    Args:
        stats: Season statistics keyed by stat name (``goals``, ``saves``...).
        weights: Points per unit keyed by stat name. Cards carry negative
            weights.
        position: Player position (GK/DEF/MID/FWD) for clean-sheet weighting.

    Returns:
        Total fantasy points.
    """
    total = 0.0
    for name in LINEAR_SCORING_STATS:
        total += stat_value(stats, name) * weights.get(name, 0.0)

    total += stat_value(stats, "clean_sheets") * clean_sheet_weight(weights, position)

    return round_points(total)
