from src.scoring.fantasy_points import calculate_fantasy_points, round_points
from src.scoring.player_analysis import player_analysis

__all__ = ["calculate_fantasy_points", "player_analysis", "round_points"]
