"""Draft coordinator - the per-league draft state machine."""

import logging
import threading
import time
from typing import Callable, List, Optional

from src.draft_room.auto_pick import AutoPickSelector
from src.draft_room.broadcast import (
    BroadcastGateway,
    FireAndForgetPublisher,
    PickMade,
    draft_topic,
)
from src.draft_room.collaborators import LeagueStore, PlayerStore, RosterStore
from src.draft_room.config import DEFAULT_ROSTER_SLOT, MIN_LEAGUE_SIZE
from src.draft_room.errors import (
    AlreadyDraftedError,
    DraftError,
    InvalidParameterError,
    InvalidStateError,
    NotFoundError,
    SlotConflictError,
)
from src.draft_room.models import (
    CoordinatorState,
    DraftPick,
    DraftSession,
    DraftSlot,
    League,
    LeagueStatus,
    Team,
)
from src.draft_room.pick_store import Conflict, PickStore, RetryingPickStore
from src.draft_room.pick_timer import PickTimer
from src.draft_room.turn_validator import TurnValidator

logger = logging.getLogger(__name__)


class DraftCoordinator:
    """Runs one league's draft: NOT_STARTED -> DRAFTING -> COMPLETED.

    Human picks and timer expiries are funneled through one lock into
    :meth:`_process_pick`, the single decision point. The current slot is
    never stored; it is re-derived from committed picks every time, and the
    pick store's compare-and-swap commit settles any race that reaches it
    from another coordinator sharing the same store.
    """

    def __init__(
        self,
        league_id: str,
        league_store: LeagueStore,
        player_store: PlayerStore,
        roster_store: RosterStore,
        pick_store: PickStore,
        broadcast: BroadcastGateway,
        timer_factory: Callable = threading.Timer,
        clock: Callable[[], float] = time.monotonic,
        on_complete: Optional[Callable[["DraftCoordinator"], None]] = None,
    ):
        self.league_id = league_id
        self._on_complete = on_complete
        self.league_store = league_store
        self.player_store = player_store
        self.roster_store = roster_store
        if not isinstance(pick_store, RetryingPickStore):
            pick_store = RetryingPickStore(pick_store)
        self.pick_store = pick_store

        league = self._load_league()
        self.state = CoordinatorState.NOT_STARTED
        self.validator = TurnValidator(player_store)
        self.auto_picker = AutoPickSelector(
            league.scoring_weights, league.auto_pick_needs
        )
        self.timer = PickTimer(
            league.pick_time_seconds,
            self._on_timer_expired,
            timer_factory=timer_factory,
            clock=clock,
        )
        self.publisher = FireAndForgetPublisher(broadcast)
        self._lock = threading.RLock()
        # Slots whose auto-pick failed; left pending for manual intervention
        self._failed_auto_slots = set()
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> DraftSession:
        """Enter DRAFTING and put the first open slot on the clock.

        A SCHEDULED league is moved to DRAFTING; a league already DRAFTING
        (e.g. after a restart) resumes from its committed picks.

        Raises:
            InvalidStateError: If the coordinator already started or the
                league is past its draft.
            InvalidParameterError: If teams or roster settings are not
                finalized.
        """
        with self._lock:
            if self.state != CoordinatorState.NOT_STARTED:
                raise InvalidStateError(
                    f"Draft for league {self.league_id} already {self.state.value}"
                )

            league = self._load_league()
            teams = self._load_teams()
            self._check_ready(league, teams)

            if league.status == LeagueStatus.SCHEDULED:
                self.league_store.update_status(self.league_id, LeagueStatus.DRAFTING)
                league = self._load_league()
            elif league.status != LeagueStatus.DRAFTING:
                raise InvalidStateError(
                    f"League {self.league_id} cannot start drafting "
                    f"(status: {league.status.value})"
                )

            self.state = CoordinatorState.DRAFTING
            session = self._derive_session(league, teams)
            logger.info(
                "Draft started for league %s: %d teams x %d rounds, %d picks made",
                self.league_id,
                league.team_count,
                league.total_rounds(),
                len(session.picks),
            )

            if session.is_complete:
                self._complete()
            else:
                self.timer.start(session.next_slot)
            return session

    def close(self):
        """Stop the pick timer and flush pending broadcasts."""
        with self._lock:
            self._closed = True
            self.timer.cancel()
        self.publisher.shutdown(wait=True)

    @property
    def is_complete(self) -> bool:
        return self.state == CoordinatorState.COMPLETED

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def session(self) -> DraftSession:
        """Current derived session, including time left on the clock."""
        league = self._load_league()
        return self._derive_session(league, self._load_teams())

    def get_picks(self) -> List[DraftPick]:
        return self.pick_store.list_picks(self.league_id)

    def current_slot(self) -> Optional[DraftSlot]:
        return self.session().next_slot

    # ------------------------------------------------------------------
    # Picks
    # ------------------------------------------------------------------

    def submit_pick(
        self,
        team_id: str,
        round_number: int,
        slot_in_round: int,
        player_id: str,
        is_auto_pick: bool = False,
    ) -> DraftPick:
        """Validate and commit a pick.

        Returns:
            The committed :class:`DraftPick`.

        Raises:
            DraftError: The specific rejection kind (not your turn, player
                already drafted, slot conflict, draft not active, ...).
        """
        with self._lock:
            return self._process_pick(
                team_id, round_number, slot_in_round, player_id, is_auto_pick
            )

    def force_auto_pick(self) -> Optional[DraftPick]:
        """Auto-pick for the slot on the clock right now.

        Same path as a timer expiry; returns None if no pick was made.
        """
        with self._lock:
            if self.state != CoordinatorState.DRAFTING:
                return None
            session = self.session()
            slot = session.next_slot
            if slot is None:
                return None
            self.timer.cancel()
            return self._auto_pick(slot, session)

    def _process_pick(
        self,
        team_id: str,
        round_number: int,
        slot_in_round: int,
        player_id: str,
        is_auto_pick: bool,
    ) -> DraftPick:
        if self.state != CoordinatorState.DRAFTING:
            raise InvalidStateError(
                f"Draft for league {self.league_id} is {self.state.value}"
            )

        league = self._load_league()
        teams = self._load_teams()
        session = self._derive_session(league, teams)

        is_valid, error = self.validator.validate_pick(
            session, team_id, round_number, slot_in_round, player_id
        )
        if not is_valid:
            logger.warning(
                "Rejected pick %d.%d by team %s (%s): %s",
                round_number, slot_in_round, team_id, error.kind.value, error,
            )
            raise error

        slot = session.next_slot
        outcome = self.pick_store.commit_pick(
            self.league_id,
            team_id,
            slot.round,
            slot.slot_in_round,
            slot.overall_pick,
            player_id,
            is_auto_pick,
        )

        if isinstance(outcome, Conflict):
            logger.warning(
                "Lost commit race for %d.%d in league %s (%s taken by pick %s)",
                slot.round, slot.slot_in_round, self.league_id,
                outcome.reason, outcome.existing.pick_id,
            )
            self._resync(league, teams)
            if outcome.is_slot_taken:
                raise SlotConflictError(
                    f"Pick {slot.round}.{slot.slot_in_round} has already been made"
                )
            raise AlreadyDraftedError(f"Player {player_id} has already been drafted")

        self._after_commit(league, teams, session, outcome)
        return outcome

    def _after_commit(
        self, league: League, teams: List[Team], session: DraftSession, pick: DraftPick
    ):
        """Roster, clock and broadcast for a durable pick.

        A failed store re-read never fails the pick: *session* is the
        pre-commit view, so the next slot is known without another read.
        """
        logger.info(
            "Pick %d (Rd %d.%d): team %s selects %s%s",
            pick.overall_pick,
            pick.round,
            pick.slot_in_round,
            pick.team_id,
            pick.player_id,
            " (auto)" if pick.is_auto_pick else "",
        )

        try:
            self.roster_store.add_player(
                pick.team_id, pick.player_id, DEFAULT_ROSTER_SLOT
            )
        except Exception:
            # The pick is already durable; roster placement is fixed up later.
            logger.exception(
                "Failed to add player %s to roster of team %s",
                pick.player_id, pick.team_id,
            )

        draft_complete = len(session.picks) + 1 >= league.total_picks()
        if not draft_complete:
            draft_complete = self._advance_clock(league, teams, session, pick)

        self.publisher.publish(
            draft_topic(self.league_id),
            PickMade(
                league_id=self.league_id,
                round=pick.round,
                slot_in_round=pick.slot_in_round,
                overall_pick=pick.overall_pick,
                team_id=pick.team_id,
                player_id=pick.player_id,
                is_auto_pick=pick.is_auto_pick,
                draft_complete=draft_complete,
            ),
        )
        if draft_complete:
            self._complete()

    def _advance_clock(
        self,
        league: League,
        teams: List[Team],
        session: DraftSession,
        pick: DraftPick,
    ) -> bool:
        """Put the next open slot on the clock; returns True if none is left."""
        try:
            fresh = self._derive_session(league, teams)
        except DraftError:
            logger.exception(
                "Could not re-read picks for league %s after pick %d; "
                "timing the next slot from the pre-commit view",
                self.league_id, pick.overall_pick,
            )
            filled = session.filled_keys | {pick.key}
            upcoming = [slot for slot in session.slots if slot.key not in filled]
            self._arm_timer(upcoming[0] if upcoming else None)
            return not upcoming

        if fresh.is_complete:
            return True
        self._arm_timer(fresh.next_slot)
        return False

    def _complete(self):
        self.timer.cancel()
        if self.state == CoordinatorState.COMPLETED:
            return
        self.state = CoordinatorState.COMPLETED
        self.league_store.update_status(self.league_id, LeagueStatus.ACTIVE)
        logger.info("Draft complete for league %s", self.league_id)
        if self._on_complete is not None:
            self._on_complete(self)

    def _resync(self, league: League, teams: List[Team]):
        """Re-derive state after losing a commit race to another writer."""
        session = self._derive_session(league, teams)
        if session.is_complete:
            self._complete()
        else:
            self._arm_timer(session.next_slot)

    def _arm_timer(self, slot: Optional[DraftSlot]):
        if slot is None:
            self.timer.cancel()
        elif slot.key in self._failed_auto_slots:
            # Waiting on manual intervention; don't spin on the same slot
            self.timer.cancel()
        else:
            self.timer.start(slot)

    # ------------------------------------------------------------------
    # Auto-pick
    # ------------------------------------------------------------------

    def _on_timer_expired(self, slot: DraftSlot):
        with self._lock:
            if self._closed or self.state != CoordinatorState.DRAFTING:
                return
            try:
                session = self.session()
            except DraftError:
                logger.exception(
                    "Auto-pick for %d.%d in league %s could not read the draft; "
                    "slot left pending",
                    slot.round, slot.slot_in_round, self.league_id,
                )
                self._failed_auto_slots.add(slot.key)
                return

            current = session.next_slot
            if current is None:
                self._complete()
                return
            if current.key != slot.key:
                logger.debug(
                    "Ignoring stale timer for %d.%d", slot.round, slot.slot_in_round
                )
                # Filled by another writer; the clock is stopped unless a pick
                # landed here meanwhile and re-armed it
                if self.timer.active_slot is None:
                    self._arm_timer(current)
                return
            self._auto_pick(current, session)

    def _auto_pick(self, slot: DraftSlot, session: DraftSession) -> Optional[DraftPick]:
        player = self.auto_picker.select_for_session(
            session, self.player_store.list_players()
        )
        if player is None:
            logger.error(
                "Auto-pick found no eligible player for %d.%d in league %s; "
                "slot left pending",
                slot.round, slot.slot_in_round, self.league_id,
            )
            self._failed_auto_slots.add(slot.key)
            return None

        try:
            return self._process_pick(
                slot.team_id,
                slot.round,
                slot.slot_in_round,
                player.player_id,
                is_auto_pick=True,
            )
        except DraftError as e:
            if e.is_turn_taken:
                # Someone else filled the slot first
                logger.info("Auto-pick for %d.%d lost: %s", slot.round, slot.slot_in_round, e)
                return None
            logger.error(
                "Auto-pick %s for %d.%d in league %s failed (%s); slot left pending",
                player.player_id, slot.round, slot.slot_in_round,
                self.league_id, e,
            )
            self._failed_auto_slots.add(slot.key)
            return None

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _load_league(self) -> League:
        league = self.league_store.get_league(self.league_id)
        if league is None:
            raise NotFoundError(f"League {self.league_id} not found")
        return league

    def _load_teams(self) -> List[Team]:
        return self.league_store.get_teams(self.league_id)

    def _derive_session(self, league: League, teams: List[Team]) -> DraftSession:
        return DraftSession.derive(
            league,
            teams,
            self.pick_store.list_picks(self.league_id),
            remaining_seconds=self.timer.remaining_seconds(),
        )

    @staticmethod
    def _check_ready(league: League, teams: List[Team]):
        if league.team_count < MIN_LEAGUE_SIZE:
            raise InvalidParameterError(
                f"League {league.league_id} needs at least {MIN_LEAGUE_SIZE} teams, "
                f"has {league.team_count}"
            )
        if league.total_rounds() < 1:
            raise InvalidParameterError(
                f"League {league.league_id} has no roster spots to draft"
            )
        positions = sorted(team.draft_position for team in teams)
        if positions != list(range(1, league.team_count + 1)):
            raise InvalidParameterError(
                f"League {league.league_id} needs draft positions "
                f"1..{league.team_count}, got {positions}"
            )
