"""Tests for the event dispatcher."""

from __future__ import annotations

import threading
from types import SimpleNamespace

import pytest

from workflow_sm.services import EventDispatcher, NullDispatcher
from workflow_sm.state_machine import StateMachineEvent


def _event():
    return SimpleNamespace(propagation_stopped=False, seen=[])


def test_priority_then_registration_order():
    dispatcher = EventDispatcher()
    dispatcher.add_listener("pre_transition", lambda e: e.seen.append("low"), priority=-5)
    dispatcher.add_listener("pre_transition", lambda e: e.seen.append("first"))
    dispatcher.add_listener("pre_transition", lambda e: e.seen.append("second"))
    dispatcher.add_listener("pre_transition", lambda e: e.seen.append("high"), priority=10)

    event = dispatcher.dispatch("pre_transition", _event())
    assert event.seen == ["high", "first", "second", "low"]


def test_enum_and_string_names_are_equivalent():
    dispatcher = EventDispatcher()
    dispatcher.add_listener(StateMachineEvent.POST_TRANSITION, lambda e: e.seen.append("x"))

    assert dispatcher.has_listeners("post_transition")
    assert dispatcher.dispatch("post_transition", _event()).seen == ["x"]


def test_stop_propagation():
    def stop(event):
        event.seen.append("stop")
        event.propagation_stopped = True

    dispatcher = EventDispatcher()
    dispatcher.add_listener("test_transition", stop)
    dispatcher.add_listener("test_transition", lambda e: e.seen.append("never"))

    assert dispatcher.dispatch("test_transition", _event()).seen == ["stop"]


def test_remove_listener():
    def listener(event):
        event.seen.append("called")

    dispatcher = EventDispatcher()
    dispatcher.add_listener("test_transition", listener)
    dispatcher.remove_listener("test_transition", listener)
    dispatcher.remove_listener("unknown", listener)

    assert not dispatcher.has_listeners()
    assert dispatcher.get_listeners("test_transition") == ()
    assert dispatcher.dispatch("test_transition", _event()).seen == []


def test_listener_errors_propagate():
    def explode(event):
        raise RuntimeError("listener failed")

    dispatcher = EventDispatcher()
    dispatcher.add_listener("test_transition", explode)
    with pytest.raises(RuntimeError, match="listener failed"):
        dispatcher.dispatch("test_transition", _event())


def test_null_dispatcher_returns_event():
    event = _event()
    assert NullDispatcher().dispatch("test_transition", event) is event


def test_concurrent_registration():
    dispatcher = EventDispatcher()

    def register():
        for _ in range(100):
            dispatcher.add_listener("post_transition", lambda e: None)

    threads = [threading.Thread(target=register) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(dispatcher.get_listeners("post_transition")) == 400
