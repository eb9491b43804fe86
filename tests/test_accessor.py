"""Tests for reading and writing subject state."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import SimpleNamespace

import pytest

from workflow_sm.state_machine import AccessError, StateAccessor, StateMachine, StatefulSubject

from .conftest import ARTICLE_CONFIG


class Ticket:
    """Subject exposing the state capability instead of a field."""

    def __init__(self, status):
        self._status = status

    def get_state(self):
        return self._status

    def set_state(self, value):
        self._status = value


@dataclass
class Envelope:
    meta: dict = field(default_factory=lambda: {"workflow": {"state": "draft"}})


def test_attribute_path():
    accessor = StateAccessor()
    subject = SimpleNamespace(status="draft")

    assert accessor.read(subject, "status") == "draft"
    accessor.write(subject, "status", "review")
    assert subject.status == "review"


def test_dotted_path_through_mappings():
    accessor = StateAccessor()
    subject = Envelope()

    assert accessor.read(subject, "meta.workflow.state") == "draft"
    accessor.write(subject, "meta.workflow.state", "review")
    assert subject.meta["workflow"]["state"] == "review"


def test_capability_protocol_ignores_path():
    accessor = StateAccessor()
    ticket = Ticket("draft")

    assert isinstance(ticket, StatefulSubject)
    assert accessor.read(ticket, "whatever") == "draft"
    accessor.write(ticket, "whatever", "review")
    assert ticket.get_state() == "review"


@pytest.mark.parametrize("path", ["missing", "meta.missing", "meta.workflow.missing.deeper", ""])
def test_read_errors(path):
    with pytest.raises(AccessError) as excinfo:
        StateAccessor().read(Envelope(), path)
    assert excinfo.value.context["object_type"] == "Envelope"


def test_write_to_missing_attribute():
    with pytest.raises(AccessError):
        StateAccessor().write(SimpleNamespace(), "status", "review")


def test_write_to_read_only_property():
    class ReadOnly:
        @property
        def state(self):
            return "draft"

    with pytest.raises(AccessError):
        StateAccessor().write(ReadOnly(), "state", "review")


def test_machine_uses_configured_property_path():
    subject = Envelope()
    config = dict(ARTICLE_CONFIG, property_path="meta.workflow.state")

    machine = StateMachine(subject, _NoHooks(config))
    assert machine.get_state() == "draft"
    assert machine.apply("submit") is True
    assert subject.meta["workflow"]["state"] == "review"


def test_machine_with_stateful_subject():
    ticket = Ticket("review")
    machine = StateMachine(ticket, _NoHooks(ARTICLE_CONFIG))
    assert machine.get_possible_transitions() == ["publish"]
    assert machine.apply("publish") is True
    assert ticket.get_state() == "published"


class _NoHooks:
    def __init__(self, config):
        self.config = config

    def __getattr__(self, name):
        if name.startswith(("before", "after")):
            return lambda subject, previous_state: None
        raise AttributeError(name)
