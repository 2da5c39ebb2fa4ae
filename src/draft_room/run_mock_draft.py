"""Run a complete mock draft where every slot is auto-picked.

Usage:
    python -m src.draft_room.run_mock_draft [players_dir] [teams] [log_level]

Examples:
    python -m src.draft_room.run_mock_draft
    python -m src.draft_room.run_mock_draft data/players 10 DEBUG
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from src.draft_room.broadcast import InProcessBroadcastGateway, PickMade, draft_topic
from src.draft_room.collaborators import (
    InMemoryLeagueStore,
    InMemoryPlayerStore,
    InMemoryRosterStore,
)
from src.draft_room.config import DEFAULT_LEAGUE_SIZE, PLAYERS_DIR
from src.draft_room.draft_coordinator import DraftCoordinator
from src.draft_room.models import DraftPick, League, Player, Team
from src.draft_room.pick_store import InMemoryPickStore
from src.logging_config import setup_logging
from src.player_pool.ingestion import PlayerPoolLoader

logger = logging.getLogger(__name__)

MOCK_LEAGUE_ID = "mock"


def draft_board(picks: List[DraftPick], players: dict, teams: List[Team]) -> pd.DataFrame:
    """Round x team grid of drafted player names."""
    names = {t.team_id: t.name for t in teams}
    rows = [
        {
            "round": pick.round,
            "team": names.get(pick.team_id, pick.team_id),
            "player": players[pick.player_id].name if pick.player_id in players else pick.player_id,
        }
        for pick in picks
    ]
    columns = [t.name for t in sorted(teams, key=lambda t: t.draft_position)]
    if not rows:
        return pd.DataFrame(columns=columns)
    board = pd.DataFrame(rows).pivot(index="round", columns="team", values="player")
    return board.reindex(columns=columns)


def run_mock_draft(
    players: dict,
    team_count: int = DEFAULT_LEAGUE_SIZE,
    league: Optional[League] = None,
) -> pd.DataFrame:
    """Auto-pick every slot of a fresh league and return the draft board.

    Args:
        players: Player pool keyed by player ID.
        team_count: Number of teams, ignored when *league* is given.
        league: League settings to use instead of the defaults.

    Returns:
        Draft board DataFrame (rounds x teams).
    """
    league = league or League(
        league_id=MOCK_LEAGUE_ID, name="Mock Draft", team_count=team_count
    )
    teams = [
        Team(
            team_id=f"team_{i}",
            league_id=league.league_id,
            name=f"Team {i}",
            draft_position=i,
        )
        for i in range(1, league.team_count + 1)
    ]

    league_store = InMemoryLeagueStore()
    league_store.add_league(league, teams)
    gateway = InProcessBroadcastGateway()

    def log_pick(event: PickMade):
        logger.debug("Broadcast %s", event.to_dict())

    gateway.subscribe(draft_topic(league.league_id), log_pick)

    coordinator = DraftCoordinator(
        league.league_id,
        league_store=league_store,
        player_store=InMemoryPlayerStore(players.values()),
        roster_store=InMemoryRosterStore(),
        pick_store=InMemoryPickStore(),
        broadcast=gateway,
    )
    try:
        coordinator.start()
        while not coordinator.is_complete:
            if coordinator.force_auto_pick() is None:
                logger.error(
                    "Mock draft stalled at %s; player pool exhausted?",
                    coordinator.current_slot(),
                )
                break
        picks = coordinator.get_picks()
    finally:
        coordinator.close()

    logger.info(
        "Mock draft finished: %d of %d picks made",
        len(picks), league.total_picks(),
    )
    return draft_board(picks, players, teams)


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    players_dir = Path(argv[0]) if len(argv) > 0 else PLAYERS_DIR
    team_count = int(argv[1]) if len(argv) > 1 else DEFAULT_LEAGUE_SIZE
    log_level = argv[2] if len(argv) > 2 else "INFO"

    setup_logging(log_level)

    try:
        players = PlayerPoolLoader(players_dir).load()
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 1

    board = run_mock_draft(players, team_count=team_count)
    with pd.option_context("display.max_columns", None, "display.width", 200):
        print(board.to_string())
    return 0


if __name__ == "__main__":
    sys.exit(main())
