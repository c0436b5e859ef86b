"""Tests for the event bus."""

import pytest

from nerc_dashboard.bus import CATEGORY_SELECTED, REGION_SELECTED, EventBus, UnknownEventError


class TestEventBus:
    def test_handlers_run_in_registration_order(self, bus):
        calls = []
        bus.register(CATEGORY_SELECTED, lambda payload: calls.append(("first", payload)))
        bus.register(CATEGORY_SELECTED, lambda payload: calls.append(("second", payload)))

        bus.emit(CATEGORY_SELECTED, frozenset({"Sabotage"}))

        assert calls == [("first", frozenset({"Sabotage"})), ("second", frozenset({"Sabotage"}))]

    def test_payload_passed_unchanged(self, bus):
        received = []
        bus.register(REGION_SELECTED, received.append)
        payload = frozenset({"WECC"})
        bus.emit(REGION_SELECTED, payload)
        assert received[0] is payload

    def test_emit_without_handlers_is_silent(self, bus):
        bus.emit(REGION_SELECTED, frozenset())

    def test_events_are_independent(self, bus):
        received = []
        bus.register(CATEGORY_SELECTED, received.append)
        bus.emit(REGION_SELECTED, frozenset({"MRO"}))
        assert received == []

    def test_unknown_event_rejected(self, bus):
        with pytest.raises(UnknownEventError):
            bus.emit("brushed", None)
        with pytest.raises(UnknownEventError):
            bus.register("brushed", print)

    def test_event_names(self):
        assert EventBus("a", "b").event_names == ["a", "b"]
