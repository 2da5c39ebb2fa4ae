"""Draft data models.

Committed picks are the single source of truth; :class:`DraftSession` is a
read model rebuilt from them on demand, never mutated in place.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, FrozenSet, List, Optional
import uuid

from src.draft_room.config import DEFAULT_PICK_TIME_SECONDS, DEFAULT_ROSTER_SLOTS
from src.draft_room.errors import InvalidParameterError
from src.draft_room.pick_order import build_draft_order
from src.scoring.config import DEFAULT_SCORING_WEIGHTS


class LeagueStatus(str, Enum):
    SCHEDULED = "scheduled"
    DRAFTING = "drafting"
    ACTIVE = "active"
    COMPLETED = "completed"


class CoordinatorState(str, Enum):
    NOT_STARTED = "not_started"
    DRAFTING = "drafting"
    COMPLETED = "completed"


@dataclass
class League:
    """League settings that drive the draft."""

    league_id: str
    name: str
    team_count: int
    roster_slots: Dict[str, int] = field(
        default_factory=lambda: dict(DEFAULT_ROSTER_SLOTS)
    )
    scoring_weights: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_SCORING_WEIGHTS)
    )
    status: LeagueStatus = LeagueStatus.SCHEDULED
    pick_time_seconds: float = DEFAULT_PICK_TIME_SECONDS
    # Minimum players per position the auto-picker tries to satisfy
    auto_pick_needs: Dict[str, int] = field(default_factory=dict)

    def total_rounds(self) -> int:
        """One round per roster spot."""
        if not self.roster_slots:
            raise InvalidParameterError("roster_slots cannot be empty")
        return sum(self.roster_slots.values())

    def total_picks(self) -> int:
        return self.team_count * self.total_rounds()


@dataclass
class Team:
    team_id: str
    league_id: str
    name: str
    draft_position: int


@dataclass
class Player:
    """A player in the shared pool. Never mutated by the draft."""

    player_id: str
    name: str
    position: str
    club: Optional[str] = None
    age: Optional[int] = None
    is_active: bool = True
    is_injured: bool = False
    stats: Dict[str, float] = field(default_factory=dict)


@dataclass
class RosterSpot:
    team_id: str
    player_id: str
    position: str
    is_starting: bool = False


@dataclass(frozen=True)
class DraftSlot:
    """One (round, pick-in-round) position owned by a team."""

    overall_pick: int
    round: int
    slot_in_round: int
    draft_position: int
    team_id: str

    @property
    def key(self):
        return (self.round, self.slot_in_round)


@dataclass(frozen=True)
class DraftPick:
    """A committed pick. Rows are only ever created, never updated."""

    pick_id: str
    league_id: str
    round: int
    slot_in_round: int
    overall_pick: int
    team_id: str
    player_id: str
    is_auto_pick: bool
    picked_at: str

    @classmethod
    def create(
        cls,
        league_id: str,
        round: int,
        slot_in_round: int,
        overall_pick: int,
        team_id: str,
        player_id: str,
        is_auto_pick: bool = False,
    ) -> "DraftPick":
        return cls(
            pick_id=str(uuid.uuid4()),
            league_id=league_id,
            round=round,
            slot_in_round=slot_in_round,
            overall_pick=overall_pick,
            team_id=team_id,
            player_id=player_id,
            is_auto_pick=is_auto_pick,
            picked_at=datetime.now(timezone.utc).isoformat(),
        )

    @property
    def key(self):
        return (self.round, self.slot_in_round)

    def to_dict(self) -> Dict:
        return {
            "pick_id": self.pick_id,
            "league_id": self.league_id,
            "round": self.round,
            "slot_in_round": self.slot_in_round,
            "overall_pick": self.overall_pick,
            "team_id": self.team_id,
            "player_id": self.player_id,
            "is_auto_pick": self.is_auto_pick,
            "picked_at": self.picked_at,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "DraftPick":
        return cls(
            pick_id=data["pick_id"],
            league_id=data["league_id"],
            round=data["round"],
            slot_in_round=data["slot_in_round"],
            overall_pick=data["overall_pick"],
            team_id=data["team_id"],
            player_id=data["player_id"],
            is_auto_pick=data.get("is_auto_pick", False),
            picked_at=data["picked_at"],
        )


@dataclass
class DraftSession:
    """Derived view of a league's draft at one point in time."""

    league: League
    slots: List[DraftSlot]
    picks: List[DraftPick]
    remaining_seconds: Optional[float] = None

    @classmethod
    def derive(
        cls,
        league: League,
        teams: List[Team],
        picks: List[DraftPick],
        remaining_seconds: Optional[float] = None,
    ) -> "DraftSession":
        """Build the session from league settings and committed picks.

        Raises:
            InvalidParameterError: If draft positions are not exactly
                ``1..team_count``.
        """
        team_by_position = {team.draft_position: team.team_id for team in teams}
        expected = set(range(1, league.team_count + 1))
        if len(teams) != league.team_count or set(team_by_position) != expected:
            raise InvalidParameterError(
                f"League {league.league_id} needs draft positions 1..{league.team_count}, "
                f"got {sorted(team.draft_position for team in teams)}"
            )

        slots = [
            DraftSlot(
                overall_pick=pos.overall_pick,
                round=pos.round,
                slot_in_round=pos.slot_in_round,
                draft_position=pos.draft_position,
                team_id=team_by_position[pos.draft_position],
            )
            for pos in build_draft_order(league.team_count, league.total_rounds())
        ]
        ordered = sorted(picks, key=lambda p: (p.round, p.slot_in_round))
        return cls(
            league=league,
            slots=slots,
            picks=ordered,
            remaining_seconds=remaining_seconds,
        )

    @property
    def filled_keys(self) -> FrozenSet:
        return frozenset(pick.key for pick in self.picks)

    @property
    def next_slot_index(self) -> Optional[int]:
        """Index into ``slots`` of the first unfilled slot."""
        filled = self.filled_keys
        for index, slot in enumerate(self.slots):
            if slot.key not in filled:
                return index
        return None

    @property
    def next_slot(self) -> Optional[DraftSlot]:
        index = self.next_slot_index
        return None if index is None else self.slots[index]

    @property
    def drafted_player_ids(self) -> FrozenSet[str]:
        return frozenset(pick.player_id for pick in self.picks)

    @property
    def is_complete(self) -> bool:
        return len(self.picks) >= len(self.slots)

    def is_slot_filled(self, round_number: int, slot_in_round: int) -> bool:
        return (round_number, slot_in_round) in self.filled_keys

    def picks_for_team(self, team_id: str) -> List[DraftPick]:
        return [pick for pick in self.picks if pick.team_id == team_id]
