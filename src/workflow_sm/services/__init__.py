"""Collaborators wired around the state machine."""

from .event_bus import EventDispatcher, EventGate, Listener, NullDispatcher

__all__ = ["EventDispatcher", "EventGate", "Listener", "NullDispatcher"]
