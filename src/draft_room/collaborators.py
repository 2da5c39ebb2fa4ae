"""Interfaces to the stores the draft reads from and writes to.

The league, player and roster stores belong to the surrounding application;
the in-memory implementations back tests and the mock draft runner.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from src.draft_room.config import DEFAULT_ROSTER_SLOT
from src.draft_room.models import League, LeagueStatus, Player, RosterSpot, Team

logger = logging.getLogger(__name__)


class LeagueStore(ABC):
    @abstractmethod
    def get_league(self, league_id: str) -> Optional[League]:
        """League settings, or None if the league does not exist."""

    @abstractmethod
    def get_teams(self, league_id: str) -> List[Team]:
        """Teams in the league, in any order."""

    @abstractmethod
    def update_status(self, league_id: str, status: LeagueStatus):
        """Persist a league status transition."""


class PlayerStore(ABC):
    @abstractmethod
    def get_player(self, player_id: str) -> Optional[Player]:
        """Player by ID, or None if unknown."""

    @abstractmethod
    def list_players(self) -> List[Player]:
        """The whole player pool."""


class RosterStore(ABC):
    @abstractmethod
    def add_player(
        self, team_id: str, player_id: str, position: str = DEFAULT_ROSTER_SLOT
    ) -> RosterSpot:
        """Append a drafted player to a team's roster."""


class InMemoryLeagueStore(LeagueStore):
    def __init__(self, leagues: Iterable[League] = (), teams: Iterable[Team] = ()):
        self._leagues: Dict[str, League] = {l.league_id: l for l in leagues}
        self._teams: Dict[str, List[Team]] = {}
        for team in teams:
            self._teams.setdefault(team.league_id, []).append(team)
        self._lock = threading.Lock()
        self.status_history: List[tuple] = []

    def add_league(self, league: League, teams: Iterable[Team]):
        with self._lock:
            self._leagues[league.league_id] = league
            self._teams[league.league_id] = list(teams)

    def get_league(self, league_id: str) -> Optional[League]:
        with self._lock:
            return self._leagues.get(league_id)

    def get_teams(self, league_id: str) -> List[Team]:
        with self._lock:
            return list(self._teams.get(league_id, []))

    def update_status(self, league_id: str, status: LeagueStatus):
        with self._lock:
            league = self._leagues[league_id]
            logger.info(
                "League %s status %s -> %s",
                league_id, league.status.value, status.value,
            )
            league.status = status
            self.status_history.append((league_id, status))


class InMemoryPlayerStore(PlayerStore):
    def __init__(self, players: Iterable[Player] = ()):
        self._players: Dict[str, Player] = {p.player_id: p for p in players}

    def get_player(self, player_id: str) -> Optional[Player]:
        return self._players.get(player_id)

    def list_players(self) -> List[Player]:
        return list(self._players.values())


class InMemoryRosterStore(RosterStore):
    def __init__(self):
        self._spots: List[RosterSpot] = []
        self._lock = threading.Lock()

    def add_player(
        self, team_id: str, player_id: str, position: str = DEFAULT_ROSTER_SLOT
    ) -> RosterSpot:
        spot = RosterSpot(team_id=team_id, player_id=player_id, position=position)
        with self._lock:
            self._spots.append(spot)
        return spot

    def get_roster(self, team_id: str) -> List[RosterSpot]:
        with self._lock:
            return [spot for spot in self._spots if spot.team_id == team_id]
