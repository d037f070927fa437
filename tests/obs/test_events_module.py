"""Tests for :mod:`stepgraph.obs.events`."""

from __future__ import annotations

from stepgraph.obs.events import RUN_START, RUN_STEP, EventBus


def test_event_bus_emit_and_history():
    bus = EventBus()
    event = bus.emit(kind=RUN_START, msg="Starting", program="dfa", extras={"arguments": 1})

    assert event.msg == "Starting"
    assert event.extras == {"arguments": 1}
    assert list(bus.history()) == [event]


def test_event_bus_filters_by_kind_and_clears():
    bus = EventBus()
    bus.emit(kind=RUN_START, msg="a")
    step = bus.emit(kind=RUN_STEP, msg="b", step=0)

    assert bus.history(RUN_STEP) == (step,)

    bus.clear()
    assert bus.history() == ()
