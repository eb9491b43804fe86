"""Exception types raised by the state machine engine."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class StateMachineError(Exception):
    """Base class for every engine error.

    ``context`` holds structured details (graph, transition, states, subject)
    meant for log enrichment only.
    """

    def __init__(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})

    def log_info(self) -> Dict[str, Any]:
        """Return a copy of the context with the message attached."""
        info = dict(self.context)
        info["error"] = type(self).__name__
        info["message"] = self.message
        return info


class ConfigurationError(StateMachineError):
    """Malformed transition graph."""


class UnknownTransitionError(StateMachineError):
    """Transition name not present in the graph."""


class IllegalTransitionError(StateMachineError):
    """Transition not allowed from the subject's current state."""


class AccessError(StateMachineError):
    """Subject state field cannot be read or written."""


class HookResolutionError(StateMachineError):
    """Expected lifecycle hook is missing on the workflow object."""


class InvalidStateError(StateMachineError):
    """Attempted write of a state that the graph does not declare."""


__all__ = [
    "AccessError",
    "ConfigurationError",
    "HookResolutionError",
    "IllegalTransitionError",
    "InvalidStateError",
    "StateMachineError",
    "UnknownTransitionError",
]
