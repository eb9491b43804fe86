"""Synchronous event dispatcher used as the transition event gate."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

logger = logging.getLogger("services.event_bus")

Listener = Callable[[Any], None]


class EventGate(Protocol):
    """What the state machine needs from a dispatcher."""

    def dispatch(self, event_name: str, event: Any) -> Any:
        ...


def _event_key(event_name: Any) -> str:
    return getattr(event_name, "value", event_name)


class EventDispatcher:
    """Named-event dispatcher with prioritised listeners.

    Listeners run in the dispatching thread, highest priority first and in
    registration order within a priority. The listener table is guarded by a
    lock; listeners themselves are called outside of it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: Dict[str, List[Tuple[int, int, Listener]]] = {}
        self._sequence = 0

    def add_listener(self, event_name: str, listener: Listener, priority: int = 0) -> None:
        key = _event_key(event_name)
        with self._lock:
            self._sequence += 1
            entries = self._listeners.setdefault(key, [])
            entries.append((-priority, self._sequence, listener))
            entries.sort(key=lambda entry: (entry[0], entry[1]))
        logger.debug("Listener %r registered for %s (priority %d)", listener, key, priority)

    def remove_listener(self, event_name: str, listener: Listener) -> None:
        key = _event_key(event_name)
        with self._lock:
            entries = self._listeners.get(key)
            if not entries:
                return
            self._listeners[key] = [entry for entry in entries if entry[2] != listener]
            if not self._listeners[key]:
                del self._listeners[key]

    def get_listeners(self, event_name: str) -> Tuple[Listener, ...]:
        with self._lock:
            return tuple(entry[2] for entry in self._listeners.get(_event_key(event_name), ()))

    def has_listeners(self, event_name: Optional[str] = None) -> bool:
        with self._lock:
            if event_name is None:
                return bool(self._listeners)
            return bool(self._listeners.get(_event_key(event_name)))

    def dispatch(self, event_name: str, event: Any) -> Any:
        listeners = self.get_listeners(event_name)
        if not listeners:
            return event
        logger.debug("Dispatching %s to %d listener(s)", _event_key(event_name), len(listeners))
        for listener in listeners:
            if getattr(event, "propagation_stopped", False):
                break
            listener(event)
        return event


class NullDispatcher:
    """Event gate that never has listeners."""

    def dispatch(self, event_name: str, event: Any) -> Any:
        return event


__all__ = ["EventDispatcher", "EventGate", "Listener", "NullDispatcher"]
