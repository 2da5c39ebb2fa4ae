# Canonical positions
POSITIONS = ("GK", "DEF", "MID", "FWD")

# Season statistics read from the player store
STAT_FIELDS = (
    "passes_completed",
    "key_passes",
    "assists",
    "goals",
    "clean_sheets",
    "saves",
    "minutes_played",
    "yellow_cards",
    "red_cards",
    "matches_played",
)

# Stats scored as count * weight (clean sheets are position-aware)
LINEAR_SCORING_STATS = (
    "passes_completed",
    "key_passes",
    "assists",
    "goals",
    "saves",
    "minutes_played",
    "yellow_cards",
    "red_cards",
)

DEFAULT_SCORING_WEIGHTS = {
    "passes_completed": 1.0,
    "key_passes": 2.0,
    "assists": 6.0,
    "goals": 10.0,
    "clean_sheets_gk": 6.0,
    "clean_sheets_def": 4.0,
    "clean_sheets_mid": 4.0,
    "clean_sheets_fwd": 0.0,
    "saves": 1.0,
    "minutes_played": 0.1,
    "yellow_cards": -1.0,
    "red_cards": -3.0,
}

# Fantasy value rating multipliers
POSITION_VALUE_MULTIPLIERS = {
    "GK": 0.8,
    "DEF": 0.9,
    "MID": 1.1,
    "FWD": 1.2,
}

# Ratings are clamped to [RATING_MIN, RATING_MAX]
RATING_MIN = 1
RATING_MAX = 100
NEUTRAL_RATING = 50

FORM_WINDOW_MATCHES = 5
INJURY_LOOKBACK_DAYS = 365
