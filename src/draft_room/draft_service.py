"""Synchronous request surface for drafts.

Routes each league's requests to its own :class:`DraftCoordinator`. Leagues
are independent; the only state shared between them is the read-only
player pool.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional

from src.draft_room.broadcast import BroadcastGateway
from src.draft_room.collaborators import LeagueStore, PlayerStore, RosterStore
from src.draft_room.draft_coordinator import DraftCoordinator
from src.draft_room.errors import InvalidStateError, NotFoundError
from src.draft_room.models import DraftPick, League, LeagueStatus, Team
from src.draft_room.pick_store import PickStore, RetryingPickStore
from src.player_pool.rankings import rank_available_players

logger = logging.getLogger(__name__)


class DraftService:
    """GetPicks / GetAvailablePlayers / GetDraftOrder / SubmitPick."""

    def __init__(
        self,
        league_store: LeagueStore,
        player_store: PlayerStore,
        roster_store: RosterStore,
        pick_store: PickStore,
        broadcast: BroadcastGateway,
        timer_factory: Callable = threading.Timer,
    ):
        self.league_store = league_store
        self.player_store = player_store
        self.roster_store = roster_store
        if not isinstance(pick_store, RetryingPickStore):
            pick_store = RetryingPickStore(pick_store)
        self.pick_store = pick_store
        self.broadcast = broadcast
        self.timer_factory = timer_factory
        self._coordinators: Dict[str, DraftCoordinator] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Draft lifecycle
    # ------------------------------------------------------------------

    def start_draft(self, league_id: str) -> DraftCoordinator:
        """Start (or resume) the draft for a league.

        Raises:
            NotFoundError: If the league does not exist.
            InvalidStateError: If the draft is already running here or the
                league is past its draft.
        """
        with self._lock:
            if league_id in self._coordinators:
                raise InvalidStateError(f"Draft for league {league_id} already running")
            return self._start_locked(league_id)

    def close(self):
        """Stop every running draft."""
        with self._lock:
            coordinators = list(self._coordinators.values())
            self._coordinators.clear()
        for coordinator in coordinators:
            coordinator.close()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def get_picks(self, league_id: str) -> List[DraftPick]:
        """Committed picks in draft order."""
        self._require_league(league_id)
        return self.pick_store.list_picks(league_id)

    def get_available_players(
        self, league_id: str, position: Optional[str] = None
    ) -> List[Dict]:
        """Undrafted active players with projected points, best first."""
        league = self._require_league(league_id)
        drafted = [pick.player_id for pick in self.pick_store.list_picks(league_id)]
        ranked = rank_available_players(
            self.player_store.list_players(),
            drafted,
            league.scoring_weights,
            position=position,
        )
        return ranked.to_dict("records")

    def get_draft_order(self, league_id: str) -> List[Team]:
        """Teams ordered by draft position."""
        self._require_league(league_id)
        return sorted(
            self.league_store.get_teams(league_id), key=lambda t: t.draft_position
        )

    def get_current_slot(self, league_id: str) -> Optional[Dict]:
        """The slot on the clock with time remaining.

        Raises:
            InvalidStateError: If the league is not drafting.
        """
        coordinator = self._coordinator_for(league_id)
        session = coordinator.session()
        slot = session.next_slot
        if slot is None:
            return None
        return {
            "round": slot.round,
            "slot_in_round": slot.slot_in_round,
            "overall_pick": slot.overall_pick,
            "team_id": slot.team_id,
            "remaining_seconds": session.remaining_seconds,
        }

    def submit_pick(
        self,
        league_id: str,
        team_id: str,
        round_number: int,
        slot_in_round: int,
        player_id: str,
        is_auto_pick: bool = False,
    ) -> DraftPick:
        """Submit a pick for the league's draft.

        Raises:
            DraftError: Rejection with a specific kind.
        """
        coordinator = self._coordinator_for(league_id)
        try:
            return coordinator.submit_pick(
                team_id, round_number, slot_in_round, player_id, is_auto_pick
            )
        finally:
            if coordinator.is_complete:
                self._discard(league_id, coordinator)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _new_coordinator(self, league_id: str) -> DraftCoordinator:
        return DraftCoordinator(
            league_id,
            league_store=self.league_store,
            player_store=self.player_store,
            roster_store=self.roster_store,
            pick_store=self.pick_store,
            broadcast=self.broadcast,
            timer_factory=self.timer_factory,
            on_complete=self._on_draft_complete,
        )

    def _require_league(self, league_id: str) -> League:
        league = self.league_store.get_league(league_id)
        if league is None:
            raise NotFoundError(f"League {league_id} not found")
        return league

    def _start_locked(self, league_id: str) -> DraftCoordinator:
        coordinator = self._new_coordinator(league_id)
        try:
            coordinator.start()
        except Exception:
            coordinator.close()
            raise
        if coordinator.is_complete:
            coordinator.close()
        else:
            self._coordinators[league_id] = coordinator
        return coordinator

    def _coordinator_for(self, league_id: str) -> DraftCoordinator:
        """Running coordinator for a drafting league, resuming if needed."""
        with self._lock:
            coordinator = self._coordinators.get(league_id)
            if coordinator is not None and not coordinator.is_complete:
                return coordinator
            if coordinator is not None:
                del self._coordinators[league_id]
            else:
                league = self._require_league(league_id)
                if league.status == LeagueStatus.DRAFTING:
                    logger.info("Resuming draft for league %s", league_id)
                    return self._start_locked(league_id)

        if coordinator is not None:
            coordinator.close()
        league = self._require_league(league_id)
        raise InvalidStateError(
            f"League {league_id} is not drafting (status: {league.status.value})"
        )

    def _on_draft_complete(self, coordinator: DraftCoordinator):
        # Also reached from the timer thread when an auto-pick ends the draft
        self._discard(coordinator.league_id, coordinator)

    def _discard(self, league_id: str, coordinator: DraftCoordinator):
        with self._lock:
            if self._coordinators.get(league_id) is coordinator:
                del self._coordinators[league_id]
            else:
                return
        coordinator.close()
