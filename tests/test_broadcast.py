"""Tests for pick broadcasts."""

import logging
import threading

from src.draft_room.broadcast import (
    FireAndForgetPublisher,
    InProcessBroadcastGateway,
    PickMade,
    draft_topic,
)


def _event(overall=1, draft_complete=False):
    return PickMade(
        league_id="L1",
        round=1,
        slot_in_round=overall,
        overall_pick=overall,
        team_id="t1",
        player_id=f"p{overall}",
        is_auto_pick=False,
        draft_complete=draft_complete,
    )


class TestPickMade:
    def test_topic(self):
        assert draft_topic("abc") == "draft-abc"

    def test_to_dict(self):
        data = _event(3, draft_complete=True).to_dict()
        assert data["event"] == "pick-made"
        assert data["overall_pick"] == 3
        assert data["draft_complete"] is True


class TestInProcessGateway:
    def test_delivers_to_topic_subscribers(self):
        gateway = InProcessBroadcastGateway()
        received, other = [], []
        gateway.subscribe("draft-L1", received.append)
        gateway.subscribe("draft-L2", other.append)
        gateway.publish("draft-L1", _event())
        assert received == [_event()]
        assert other == []

    def test_unsubscribe(self):
        gateway = InProcessBroadcastGateway()
        received = []
        unsubscribe = gateway.subscribe("draft-L1", received.append)
        unsubscribe()
        gateway.publish("draft-L1", _event())
        assert received == []

    def test_broken_subscriber_does_not_stop_others(self, caplog):
        gateway = InProcessBroadcastGateway()
        received = []

        def broken(event):
            raise RuntimeError("socket closed")

        gateway.subscribe("draft-L1", broken)
        gateway.subscribe("draft-L1", received.append)
        with caplog.at_level(logging.WARNING):
            gateway.publish("draft-L1", _event())
        assert received == [_event()]
        assert "failed" in caplog.text


class TestFireAndForgetPublisher:
    def test_publish_does_not_wait_for_slow_subscriber(self):
        gateway = InProcessBroadcastGateway()
        release = threading.Event()
        received = []

        def slow(event):
            release.wait(5)
            received.append(event)

        gateway.subscribe("draft-L1", slow)
        publisher = FireAndForgetPublisher(gateway)
        future = publisher.publish("draft-L1", _event())
        assert not future.done()
        release.set()
        publisher.shutdown(wait=True)
        assert received == [_event()]

    def test_events_keep_commit_order(self):
        gateway = InProcessBroadcastGateway()
        received = []
        gateway.subscribe("draft-L1", lambda e: received.append(e.overall_pick))
        publisher = FireAndForgetPublisher(gateway)
        for overall in range(1, 21):
            publisher.publish("draft-L1", _event(overall))
        publisher.shutdown(wait=True)
        assert received == list(range(1, 21))

    def test_gateway_failure_is_logged(self, caplog):
        class BrokenGateway(InProcessBroadcastGateway):
            def publish(self, topic, event):
                raise ConnectionError("realtime service down")

        publisher = FireAndForgetPublisher(BrokenGateway())
        with caplog.at_level(logging.WARNING):
            future = publisher.publish("draft-L1", _event())
            publisher.shutdown(wait=True)
        assert isinstance(future.exception(), ConnectionError)
        assert "realtime service down" in caplog.text
