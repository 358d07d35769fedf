"""
Tests for the in-process event registry
"""

import pytest

from biztrack.services.events import EventBus, event_bus, PURCHASE_RECEIVED, PURCHASE_CANCELLED
from biztrack.services.reorder.lifecycle import resolve_reorders_for_purchase, cancel_reorders_for_purchase


class TestEventBus:

    def test_publish_calls_handlers_in_order(self):
        bus = EventBus()
        calls = []
        bus.subscribe("thing.happened", lambda db, **payload: calls.append(("first", payload)))
        bus.subscribe("thing.happened", lambda db, **payload: calls.append(("second", payload)))

        assert bus.publish("thing.happened", None, value=1) == 2
        assert calls == [("first", {"value": 1}), ("second", {"value": 1})]

    def test_subscribe_is_idempotent(self):
        bus = EventBus()

        def handler(db, **payload):
            pass

        bus.subscribe("thing.happened", handler)
        bus.subscribe("thing.happened", handler)
        assert bus.handlers("thing.happened") == [handler]

        bus.unsubscribe("thing.happened", handler)
        assert bus.publish("thing.happened", None) == 0

    def test_handler_errors_reach_publisher(self):
        bus = EventBus()

        def broken(db, **payload):
            raise RuntimeError("handler failed")

        bus.subscribe("thing.happened", broken)
        with pytest.raises(RuntimeError):
            bus.publish("thing.happened", None)

    def test_receipt_handler_registered(self):
        assert resolve_reorders_for_purchase in event_bus.handlers(PURCHASE_RECEIVED)

    def test_cancel_handler_registered(self):
        assert cancel_reorders_for_purchase in event_bus.handlers(PURCHASE_CANCELLED)
