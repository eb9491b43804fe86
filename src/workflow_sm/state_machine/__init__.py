"""State machine package exports."""

from .accessor import StateAccessor, StatefulSubject
from .callbacks import CALLBACK_POSITIONS, Callback, CallbackFactory
from .errors import (
    AccessError,
    ConfigurationError,
    HookResolutionError,
    IllegalTransitionError,
    InvalidStateError,
    StateMachineError,
    UnknownTransitionError,
)
from .events import StateMachineEvent, TransitionEvent
from .graph import DEFAULT_PROPERTY_PATH, GraphBuilder, TransitionDefinition, TransitionGraph
from .hooks import HOOK_POSITIONS, HookRegistry, hook, hook_name, studly_case
from .machine import StateMachine

__all__ = [
    "AccessError",
    "CALLBACK_POSITIONS",
    "Callback",
    "CallbackFactory",
    "ConfigurationError",
    "DEFAULT_PROPERTY_PATH",
    "GraphBuilder",
    "HOOK_POSITIONS",
    "HookRegistry",
    "HookResolutionError",
    "IllegalTransitionError",
    "InvalidStateError",
    "StateAccessor",
    "StateMachine",
    "StateMachineError",
    "StateMachineEvent",
    "StatefulSubject",
    "TransitionDefinition",
    "TransitionEvent",
    "TransitionGraph",
    "UnknownTransitionError",
    "hook",
    "hook_name",
    "studly_case",
]
