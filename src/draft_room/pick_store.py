"""Draft pick storage - the single serialization point for commits.

``commit_pick`` is a compare-and-swap: it succeeds only when neither the
(round, slot) nor the player is already taken in the league, and reports a
:class:`Conflict` otherwise. Two callers racing for the same slot or player
can never both succeed.
"""

import json
import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from src.draft_room.config import (
    COMMIT_BACKOFF_SECONDS,
    COMMIT_MAX_ATTEMPTS,
    DRAFTS_DIR,
)
from src.draft_room.errors import StorageUnavailableError
from src.draft_room.models import DraftPick

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised by a store when a read or write fails transiently."""


@dataclass(frozen=True)
class Conflict:
    """Commit refused because the slot or the player is already taken."""

    league_id: str
    round: int
    slot_in_round: int
    player_id: str
    reason: str  # "slot" or "player"
    existing: DraftPick

    @property
    def is_slot_taken(self) -> bool:
        return self.reason == "slot"


CommitOutcome = Union[DraftPick, Conflict]


def _find_conflict(
    picks: List[DraftPick],
    league_id: str,
    round_number: int,
    slot_in_round: int,
    player_id: str,
) -> Optional[Conflict]:
    # Slot conflicts take precedence over player conflicts
    checks = (
        ("slot", lambda p: p.key == (round_number, slot_in_round)),
        ("player", lambda p: p.player_id == player_id),
    )
    for reason, matches in checks:
        for pick in picks:
            if matches(pick):
                return Conflict(
                    league_id=league_id,
                    round=round_number,
                    slot_in_round=slot_in_round,
                    player_id=player_id,
                    reason=reason,
                    existing=pick,
                )
    return None


class PickStore(ABC):
    """Authoritative record of committed picks per league."""

    @abstractmethod
    def list_picks(self, league_id: str) -> List[DraftPick]:
        """All committed picks for a league, ordered by (round, slot)."""

    @abstractmethod
    def commit_pick(
        self,
        league_id: str,
        team_id: str,
        round: int,
        slot_in_round: int,
        overall_pick: int,
        player_id: str,
        is_auto_pick: bool = False,
    ) -> CommitOutcome:
        """Atomically insert a pick unless the slot or player is taken."""

    def current_pick_count(self, league_id: str) -> int:
        return len(self.list_picks(league_id))

    def is_player_drafted(self, league_id: str, player_id: str) -> bool:
        return any(p.player_id == player_id for p in self.list_picks(league_id))


class InMemoryPickStore(PickStore):
    """Process-local store guarded by a single lock."""

    def __init__(self):
        self._picks: Dict[str, List[DraftPick]] = {}
        self._lock = threading.Lock()

    def list_picks(self, league_id: str) -> List[DraftPick]:
        with self._lock:
            picks = list(self._picks.get(league_id, []))
        return sorted(picks, key=lambda p: (p.round, p.slot_in_round))

    def commit_pick(
        self,
        league_id: str,
        team_id: str,
        round: int,
        slot_in_round: int,
        overall_pick: int,
        player_id: str,
        is_auto_pick: bool = False,
    ) -> CommitOutcome:
        with self._lock:
            picks = self._picks.setdefault(league_id, [])
            conflict = _find_conflict(picks, league_id, round, slot_in_round, player_id)
            if conflict is not None:
                return conflict
            pick = DraftPick.create(
                league_id=league_id,
                round=round,
                slot_in_round=slot_in_round,
                overall_pick=overall_pick,
                team_id=team_id,
                player_id=player_id,
                is_auto_pick=is_auto_pick,
            )
            picks.append(pick)
            return pick


class JsonPickStore(PickStore):
    """Persists each league's picks to ``picks_<league_id>.json``.

    Writes go to a temporary file that replaces the real one, so a reader
    never sees a partially written pick list.
    """

    def __init__(self, storage_dir: Optional[Path] = None):
        self.storage_dir = storage_dir or DRAFTS_DIR
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _league_lock(self, league_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(league_id, threading.Lock())

    def _path(self, league_id: str) -> Path:
        return self.storage_dir / f"picks_{league_id}.json"

    def _read(self, league_id: str) -> List[DraftPick]:
        filepath = self._path(league_id)
        if not filepath.exists():
            return []
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
            return [DraftPick.from_dict(item) for item in data["picks"]]
        except (OSError, json.JSONDecodeError, KeyError) as e:
            raise PersistenceError(f"Cannot read picks from {filepath}: {e}") from e

    def _write(self, league_id: str, picks: List[DraftPick]):
        filepath = self._path(league_id)
        tmp_path = filepath.with_suffix(".json.tmp")
        state_dict = {
            "league_id": league_id,
            "picks": [pick.to_dict() for pick in picks],
        }
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(state_dict, f, indent=2)
            os.replace(tmp_path, filepath)
        except OSError as e:
            raise PersistenceError(f"Cannot write picks to {filepath}: {e}") from e

    def list_picks(self, league_id: str) -> List[DraftPick]:
        with self._league_lock(league_id):
            picks = self._read(league_id)
        return sorted(picks, key=lambda p: (p.round, p.slot_in_round))

    def commit_pick(
        self,
        league_id: str,
        team_id: str,
        round: int,
        slot_in_round: int,
        overall_pick: int,
        player_id: str,
        is_auto_pick: bool = False,
    ) -> CommitOutcome:
        with self._league_lock(league_id):
            picks = self._read(league_id)
            conflict = _find_conflict(picks, league_id, round, slot_in_round, player_id)
            if conflict is not None:
                return conflict
            pick = DraftPick.create(
                league_id=league_id,
                round=round,
                slot_in_round=slot_in_round,
                overall_pick=overall_pick,
                team_id=team_id,
                player_id=player_id,
                is_auto_pick=is_auto_pick,
            )
            self._write(league_id, picks + [pick])

        logger.debug("Wrote pick %d for league %s", overall_pick, league_id)
        return pick


class RetryingPickStore(PickStore):
    """Wraps a store with bounded retry and exponential backoff.

    Exhaustion surfaces as :class:`StorageUnavailableError`; the wrapped
    store's atomic commit guarantees no partial pick is ever visible.
    """

    def __init__(
        self,
        store: PickStore,
        max_attempts: int = COMMIT_MAX_ATTEMPTS,
        backoff_seconds: float = COMMIT_BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.store = store
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep

    def _with_retry(self, description: str, operation: Callable):
        for attempt in range(1, self.max_attempts + 1):
            try:
                return operation()
            except PersistenceError as e:
                if attempt == self.max_attempts:
                    logger.error(
                        "%s failed after %d attempts: %s",
                        description, attempt, e,
                    )
                    raise StorageUnavailableError(
                        f"{description} failed after {attempt} attempts"
                    ) from e
                delay = self.backoff_seconds * (2 ** (attempt - 1))
                logger.warning(
                    "%s failed (attempt %d/%d), retrying in %.2fs: %s",
                    description, attempt, self.max_attempts, delay, e,
                )
                self._sleep(delay)

    def list_picks(self, league_id: str) -> List[DraftPick]:
        return self._with_retry(
            f"Reading picks for league {league_id}",
            lambda: self.store.list_picks(league_id),
        )

    def commit_pick(
        self,
        league_id: str,
        team_id: str,
        round: int,
        slot_in_round: int,
        overall_pick: int,
        player_id: str,
        is_auto_pick: bool = False,
    ) -> CommitOutcome:
        attempts = []

        def commit():
            attempts.append(1)
            return self.store.commit_pick(
                league_id, team_id, round, slot_in_round,
                overall_pick, player_id, is_auto_pick,
            )

        outcome = self._with_retry(
            f"Committing pick {round}.{slot_in_round} in league {league_id}", commit
        )

        # A failed attempt may still have landed; our own row is not a conflict.
        if isinstance(outcome, Conflict) and len(attempts) > 1:
            existing = outcome.existing
            if (
                existing.key == (round, slot_in_round)
                and existing.team_id == team_id
                and existing.player_id == player_id
            ):
                return existing
        return outcome
