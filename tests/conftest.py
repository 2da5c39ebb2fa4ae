"""Shared fixtures for the draft test suite."""

import pytest

from src.draft_room.broadcast import BroadcastGateway


# ------------------------------------------------------------------
# Deterministic stand-in for threading.Timer
# ------------------------------------------------------------------

class FakeTimer:
    """Records start/cancel; fires only when a test calls :meth:`fire`."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        """Run the callback, as a timer thread that already woke up would."""
        self.fired = True
        self.function(*self.args, **self.kwargs)


class FakeTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = FakeTimer(interval, function, args=args, kwargs=kwargs)
        self.timers.append(timer)
        return timer

    @property
    def latest(self) -> FakeTimer:
        return self.timers[-1]

    def running(self):
        return [t for t in self.timers if t.started and not t.cancelled and not t.fired]


class RecordingGateway(BroadcastGateway):
    """Collects every published event in order."""

    def __init__(self):
        self.events = []

    def publish(self, topic, event):
        self.events.append((topic, event))


@pytest.fixture
def timer_factory():
    return FakeTimerFactory()


@pytest.fixture
def gateway():
    return RecordingGateway()
