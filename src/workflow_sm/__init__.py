"""Configuration-driven finite state machine engine."""

from __future__ import annotations

from .state_machine import (
    AccessError,
    ConfigurationError,
    GraphBuilder,
    HookRegistry,
    HookResolutionError,
    IllegalTransitionError,
    InvalidStateError,
    StateMachine,
    StateMachineError,
    StateMachineEvent,
    TransitionEvent,
    TransitionGraph,
    UnknownTransitionError,
    hook,
    studly_case,
)
from .services import EventDispatcher, NullDispatcher

__version__ = "0.1.0"

__all__ = [
    "AccessError",
    "ConfigurationError",
    "EventDispatcher",
    "GraphBuilder",
    "HookRegistry",
    "HookResolutionError",
    "IllegalTransitionError",
    "InvalidStateError",
    "NullDispatcher",
    "StateMachine",
    "StateMachineError",
    "StateMachineEvent",
    "TransitionEvent",
    "TransitionGraph",
    "UnknownTransitionError",
    "hook",
    "studly_case",
]
