"""CSV ingestion for the player pool.

Reads two files from a data directory:

- ``players.csv``: player_id, name, position and optional club, age,
  is_active, is_injured columns.
- ``player_stats.csv`` (optional): player_id, season and season totals for
  each stat in ``STAT_FIELDS``.

Positions are normalized to GK/DEF/MID/FWD and missing stats become 0.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from src.draft_room.models import Player
from src.scoring.config import POSITIONS, STAT_FIELDS

logger = logging.getLogger(__name__)

PLAYERS_FILE = "players.csv"
STATS_FILE = "player_stats.csv"

_REQUIRED_PLAYER_COLUMNS = ("player_id", "name", "position")

_POSITION_ALIASES = {
    "G": "GK",
    "GKP": "GK",
    "GOALKEEPER": "GK",
    "D": "DEF",
    "DF": "DEF",
    "DEFENDER": "DEF",
    "M": "MID",
    "MF": "MID",
    "MIDFIELDER": "MID",
    "F": "FWD",
    "FW": "FWD",
    "ST": "FWD",
    "FORWARD": "FWD",
}

_TRUE_VALUES = {"true", "1", "yes", "y", "t"}


class IngestionError(Exception):
    """Raised when player-pool CSV ingestion fails."""


def normalize_position(value) -> Optional[str]:
    """Map a raw position string to GK/DEF/MID/FWD, or None if unknown."""
    if pd.isna(value):
        return None
    pos = str(value).strip().upper()
    pos = _POSITION_ALIASES.get(pos, pos)
    return pos if pos in POSITIONS else None


def _parse_bool(value, default: bool) -> bool:
    if pd.isna(value):
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


class PlayerPoolLoader:
    """Loads the draftable player pool from CSV files."""

    def __init__(self, data_dir: Path, season: Optional[str] = None):
        self.data_dir = Path(data_dir)
        self.season = season

    def read_players(self) -> pd.DataFrame:
        """Read and clean ``players.csv``.

        Raises:
            FileNotFoundError: If the file is missing.
            IngestionError: If required columns are missing or player IDs
                are duplicated.
        """
        filepath = self.data_dir / PLAYERS_FILE
        if not filepath.exists():
            raise FileNotFoundError(f"Expected file not found: {filepath}")
        logger.info("Reading players: %s", filepath.name)

        df = pd.read_csv(filepath, dtype={"player_id": str})
        df.columns = [str(c).strip().lower() for c in df.columns]

        missing = [c for c in _REQUIRED_PLAYER_COLUMNS if c not in df.columns]
        if missing:
            raise IngestionError(f"{filepath.name} missing columns: {missing}")

        df = df.dropna(subset=["player_id"])
        df["player_id"] = df["player_id"].str.strip()
        df["name"] = df["name"].astype(str).str.strip()

        raw_positions = df["position"]
        df["position"] = raw_positions.map(normalize_position)
        unknown = df["position"].isna()
        if unknown.any():
            logger.warning(
                "Dropping %d players with unknown positions: %s",
                int(unknown.sum()),
                sorted(set(raw_positions[unknown].astype(str))),
            )
            df = df.loc[~unknown]

        duplicated = df["player_id"].duplicated()
        if duplicated.any():
            raise IngestionError(
                f"Duplicate player_id values: {sorted(df.loc[duplicated, 'player_id'])}"
            )

        for col, default in (("is_active", True), ("is_injured", False)):
            if col in df.columns:
                df[col] = df[col].map(lambda v, d=default: _parse_bool(v, d))
            else:
                df[col] = default

        if "age" in df.columns:
            df["age"] = pd.to_numeric(df["age"], errors="coerce")
        else:
            df["age"] = pd.NA
        if "club" not in df.columns:
            df["club"] = None

        logger.info("Loaded %d players", len(df))
        return df.reset_index(drop=True)

    def read_stats(self) -> pd.DataFrame:
        """Read ``player_stats.csv``, one row per player.

        When no season is configured and the file has a ``season`` column,
        the most recent season is used. Returns an empty frame if the file
        does not exist.
        """
        filepath = self.data_dir / STATS_FILE
        columns = ["player_id", *STAT_FIELDS]
        if not filepath.exists():
            logger.warning("No stats file at %s; all players score 0", filepath)
            return pd.DataFrame(columns=columns)
        logger.info("Reading player stats: %s", filepath.name)

        df = pd.read_csv(filepath, dtype={"player_id": str, "season": str})
        df.columns = [str(c).strip().lower() for c in df.columns]
        if "player_id" not in df.columns:
            raise IngestionError(f"{filepath.name} missing columns: ['player_id']")

        if "season" in df.columns:
            season = self.season or df["season"].dropna().max()
            df = df.loc[df["season"] == str(season)]
            logger.info("Using %s season stats (%d rows)", season, len(df))

        for col in STAT_FIELDS:
            if col in df.columns:
                df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0.0)
            else:
                df[col] = 0.0

        df = df.drop_duplicates(subset=["player_id"], keep="last")
        return df[columns].reset_index(drop=True)

    def load(self) -> Dict[str, Player]:
        """Load the pool as :class:`Player` objects keyed by player ID."""
        players_df = self.read_players()
        stats_df = self.read_stats()

        player_columns = ["player_id", "name", "position", "club", "age", "is_active", "is_injured"]
        merged = players_df[player_columns].merge(stats_df, on="player_id", how="left")
        for col in STAT_FIELDS:
            merged[col] = pd.to_numeric(merged[col], errors="coerce").fillna(0.0)

        players = {}
        for row in merged.itertuples(index=False):
            age, club = row.age, row.club
            players[row.player_id] = Player(
                player_id=row.player_id,
                name=row.name,
                position=row.position,
                club=None if pd.isna(club) else str(club),
                age=None if pd.isna(age) else int(age),
                is_active=bool(row.is_active),
                is_injured=bool(row.is_injured),
                stats={col: float(getattr(row, col)) for col in STAT_FIELDS},
            )

        logger.info("Player pool ready: %d players", len(players))
        return players
