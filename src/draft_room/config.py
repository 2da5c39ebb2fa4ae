from pathlib import Path

# Base project directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Data directories
DRAFTS_DIR = PROJECT_ROOT / "data" / "drafts"
PLAYERS_DIR = PROJECT_ROOT / "data" / "players"

# Default roster configuration (one round per roster spot)
DEFAULT_ROSTER_SLOTS = {
    "GK": 1,
    "DEF": 4,
    "MID": 4,
    "FWD": 2,
    "BENCH": 6,
}

# Roster slot a drafted player lands in until the owner moves the player
DEFAULT_ROSTER_SLOT = "BENCH"

# Default league settings
DEFAULT_LEAGUE_SIZE = 12
MIN_LEAGUE_SIZE = 2
DEFAULT_PICK_TIME_SECONDS = 90

# Pick commit retry policy (attempts include the first try)
COMMIT_MAX_ATTEMPTS = 3
COMMIT_BACKOFF_SECONDS = 0.05
