"""Tests for the in-process tick source."""

from signalgen_app.data.feed import TickSource


class TestTickSource:
    """Test TickSource fan-out."""

    def test_publish_in_subscription_order(self):
        source = TickSource()
        received = []
        source.subscribe(lambda payload: received.append(("first", payload)))
        source.subscribe(lambda payload: received.append(("second", payload)))

        source.publish({"symbol": "R_10", "quote": "1.5"})

        assert [name for name, _ in received] == ["first", "second"]

    def test_subscriber_error_isolated(self):
        source = TickSource()
        received = []

        def broken(payload):
            raise ValueError("boom")

        source.subscribe(broken)
        source.subscribe(received.append)

        source.publish("tick")

        assert received == ["tick"]

    def test_subscribe_unsubscribe(self):
        source = TickSource()
        received = []

        source.subscribe(received.append)
        source.subscribe(received.append)
        assert source.subscriber_count == 1

        source.unsubscribe(received.append)
        source.publish("tick")

        assert received == []
        assert source.subscriber_count == 0
