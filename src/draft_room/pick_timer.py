"""Per-slot countdown that triggers an auto-pick on expiry."""

import logging
import threading
import time
from typing import Callable, Optional

from src.draft_room.models import DraftSlot

logger = logging.getLogger(__name__)


class PickTimer:
    """One running countdown, scoped to the slot on the clock.

    Starting the timer for a new slot cancels the previous one. Each start
    fires at most once; a timer that was superseded before its callback ran
    is ignored.

    Args:
        duration_seconds: Time allowed per pick.
        on_expire: Called with the expired slot, on the timer thread.
        timer_factory: ``threading.Timer``-compatible constructor.
        clock: Monotonic clock used for the remaining-time readout.
    """

    def __init__(
        self,
        duration_seconds: float,
        on_expire: Callable[[DraftSlot], None],
        timer_factory: Callable = threading.Timer,
        clock: Callable[[], float] = time.monotonic,
    ):
        if duration_seconds <= 0:
            raise ValueError(f"duration_seconds must be > 0, got {duration_seconds}")
        self.duration_seconds = duration_seconds
        self._on_expire = on_expire
        self._timer_factory = timer_factory
        self._clock = clock
        self._lock = threading.Lock()
        self._timer = None
        self._generation = 0
        self._slot: Optional[DraftSlot] = None
        self._deadline: Optional[float] = None

    @property
    def active_slot(self) -> Optional[DraftSlot]:
        with self._lock:
            return self._slot

    def start(self, slot: DraftSlot):
        """Cancel any running countdown and start one for *slot*."""
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            self._slot = slot
            self._deadline = self._clock() + self.duration_seconds
            timer = self._timer_factory(
                self.duration_seconds, self._fire, args=(self._generation, slot)
            )
            timer.daemon = True
            self._timer = timer
            timer.start()
        logger.debug(
            "Pick timer started for %d.%d (%.0fs)",
            slot.round, slot.slot_in_round, self.duration_seconds,
        )

    def cancel(self):
        with self._lock:
            self._cancel_locked()

    def remaining_seconds(self) -> Optional[float]:
        """Seconds left on the clock, or None when no timer is running."""
        with self._lock:
            if self._deadline is None:
                return None
            return max(0.0, self._deadline - self._clock())

    def _cancel_locked(self):
        if self._timer is not None:
            self._timer.cancel()
        self._generation += 1
        self._timer = None
        self._slot = None
        self._deadline = None

    def _fire(self, generation: int, slot: DraftSlot):
        with self._lock:
            if generation != self._generation:
                return
            self._generation += 1
            self._timer = None
            self._slot = None
            self._deadline = None

        logger.info("Pick timer expired for %d.%d", slot.round, slot.slot_in_round)
        self._on_expire(slot)
