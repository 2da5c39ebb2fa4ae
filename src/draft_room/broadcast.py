"""Pick broadcasts to connected clients.

Delivery is best-effort and at-most-once per subscriber. The coordinator
publishes through :class:`FireAndForgetPublisher`, so a slow or broken
subscriber never holds up turn advancement; clients reconcile by
re-fetching picks on reconnect.
"""

import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import asdict, dataclass
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

PICK_MADE = "pick-made"


def draft_topic(league_id: str) -> str:
    return f"draft-{league_id}"


@dataclass(frozen=True)
class PickMade:
    league_id: str
    round: int
    slot_in_round: int
    overall_pick: int
    team_id: str
    player_id: str
    is_auto_pick: bool
    draft_complete: bool

    event_type = PICK_MADE

    def to_dict(self) -> Dict:
        return {"event": self.event_type, **asdict(self)}


Subscriber = Callable[[PickMade], None]


class BroadcastGateway(ABC):
    @abstractmethod
    def publish(self, topic: str, event: PickMade):
        """Deliver *event* to every subscriber of *topic*."""


class InProcessBroadcastGateway(BroadcastGateway):
    """Topic fan-out to in-process callbacks."""

    def __init__(self):
        self._subscribers: Dict[str, List[Subscriber]] = {}
        self._lock = threading.Lock()

    def subscribe(self, topic: str, callback: Subscriber) -> Callable[[], None]:
        """Register *callback*; returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.setdefault(topic, []).append(callback)

        def unsubscribe():
            with self._lock:
                callbacks = self._subscribers.get(topic, [])
                if callback in callbacks:
                    callbacks.remove(callback)

        return unsubscribe

    def publish(self, topic: str, event: PickMade):
        with self._lock:
            callbacks = list(self._subscribers.get(topic, []))
        for callback in callbacks:
            try:
                callback(event)
            except Exception:
                logger.warning(
                    "Subscriber %r failed on %s for %s",
                    callback, event.event_type, topic, exc_info=True,
                )


class FireAndForgetPublisher:
    """Publishes on a background worker so callers never wait on delivery.

    A single worker keeps events for a league in commit order.
    """

    def __init__(
        self,
        gateway: BroadcastGateway,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self.gateway = gateway
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="draft-broadcast"
        )

    def publish(self, topic: str, event: PickMade) -> Future:
        future = self._executor.submit(self.gateway.publish, topic, event)
        future.add_done_callback(
            lambda f: self._log_failure(f, topic, event)
        )
        return future

    @staticmethod
    def _log_failure(future: Future, topic: str, event: PickMade):
        error = future.exception()
        if error is not None:
            logger.warning(
                "Broadcast of pick %d to %s failed: %s",
                event.overall_pick, topic, error,
            )

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)
