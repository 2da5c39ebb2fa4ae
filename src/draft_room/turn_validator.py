"""Pick legality checks."""

from typing import Optional, Tuple

from src.draft_room.collaborators import PlayerStore
from src.draft_room.errors import (
    AlreadyDraftedError,
    DraftError,
    InvalidParameterError,
    InvalidStateError,
    NotFoundError,
    NotYourTurnError,
    SlotConflictError,
)
from src.draft_room.models import DraftSession, LeagueStatus


class TurnValidator:
    """Decides whether a proposed pick is legal for the current session."""

    def __init__(self, player_store: PlayerStore):
        self.player_store = player_store

    def validate_pick(
        self,
        session: DraftSession,
        team_id: str,
        round_number: int,
        slot_in_round: int,
        player_id: str,
    ) -> Tuple[bool, Optional[DraftError]]:
        """
        Validate a pick against the session.

        Returns:
            (is_valid, error) - (True, None) if valid, otherwise the first
            failing check as a :class:`DraftError` of the matching kind.
        """
        league = session.league

        # Check 1: Is the league drafting?
        if league.status != LeagueStatus.DRAFTING:
            return False, InvalidStateError(
                f"League {league.league_id} is not drafting "
                f"(status: {league.status.value})"
            )
        if session.is_complete:
            return False, InvalidStateError(
                f"Draft for league {league.league_id} is already complete"
            )

        # Check 2: Is the slot on the board?
        total_rounds = league.total_rounds()
        if not (
            1 <= round_number <= total_rounds
            and 1 <= slot_in_round <= league.team_count
        ):
            return False, InvalidParameterError(
                f"Slot {round_number}.{slot_in_round} is outside "
                f"{total_rounds} rounds x {league.team_count} teams"
            )

        # Check 3: Is the team in this league?
        if team_id not in {slot.team_id for slot in session.slots}:
            return False, NotFoundError(
                f"Team {team_id} not found in league {league.league_id}"
            )

        # Check 4: Is it this slot's turn, and this team's slot?
        if session.is_slot_filled(round_number, slot_in_round):
            return False, SlotConflictError(
                f"Pick {round_number}.{slot_in_round} has already been made"
            )
        current = session.next_slot
        if current.key != (round_number, slot_in_round):
            return False, NotYourTurnError(
                f"Pick {round_number}.{slot_in_round} is not on the clock "
                f"(current: {current.round}.{current.slot_in_round})"
            )
        if current.team_id != team_id:
            return False, NotYourTurnError(
                f"Not team {team_id}'s turn (current: {current.team_id})"
            )

        # Check 5: Does the player exist and is the player draftable?
        player = self.player_store.get_player(player_id)
        if player is None:
            return False, NotFoundError(
                f"Player {player_id} not found in player database"
            )
        if not player.is_active:
            return False, NotFoundError(
                f"{player.name} is not active and cannot be drafted"
            )
        if player_id in session.drafted_player_ids:
            return False, AlreadyDraftedError(
                f"{player.name} has already been drafted"
            )

        return True, None
