"""Lifecycle hooks run immediately before and after a transition."""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Tuple

from .errors import ConfigurationError, HookResolutionError
from .graph import TransitionGraph

HOOK_POSITIONS: Tuple[str, ...] = ("before", "after")

_HOOK_ATTRIBUTE = "__workflow_hooks__"
_WORD_SEPARATORS = re.compile(r"[-_\s]+")

Hook = Callable[[Any, Any], Any]


def studly_case(value: str) -> str:
    """Convert ``start_review`` or ``go-live`` into ``StartReview`` / ``GoLive``."""
    return "".join(word[:1].upper() + word[1:] for word in _WORD_SEPARATORS.split(value) if word)


def _check_position(position: str) -> None:
    if position not in HOOK_POSITIONS:
        raise ValueError(f"Hook position must be one of {HOOK_POSITIONS}, got {position!r}")


def hook_name(position: str, transition: str) -> str:
    """Return the conventional workflow method name, e.g. ``beforeStartReview``."""
    _check_position(position)
    return position + studly_case(transition)


def hook(position: str, transition: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Mark a workflow method as the ``position`` hook of ``transition``."""
    _check_position(position)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        bindings = list(getattr(func, _HOOK_ATTRIBUTE, ()))
        bindings.append((position, transition))
        setattr(func, _HOOK_ATTRIBUTE, tuple(bindings))
        return func

    return decorator


def _passthrough(subject: Any, previous_state: Any) -> None:
    return None


class HookRegistry:
    """Explicit ``(position, transition) -> callable`` table."""

    def __init__(self, graph_name: str = "") -> None:
        self.graph_name = graph_name
        self._hooks: Dict[Tuple[str, str], Hook] = {}

    def register(self, position: str, transition: str, func: Hook) -> None:
        _check_position(position)
        if not callable(func):
            raise TypeError(f"Hook for {position} {transition} must be callable")
        self._hooks[(position, transition)] = func

    def has(self, position: str, transition: str) -> bool:
        return (position, transition) in self._hooks

    def resolve(self, position: str, transition: str) -> Hook:
        _check_position(position)
        try:
            return self._hooks[(position, transition)]
        except KeyError:
            name = hook_name(position, transition)
            raise HookResolutionError(
                f"Hook {name} for transition {transition} is not defined on the workflow of graph {self.graph_name}",
                {"graph": self.graph_name, "transition_name": transition, "hook": name},
            ) from None

    def invoke(self, position: str, transition: str, subject: Any, previous_state: Any) -> Any:
        return self.resolve(position, transition)(subject, previous_state)

    def missing(self, graph: TransitionGraph) -> List[str]:
        """Names of the conventional hooks absent for ``graph``'s transitions."""
        return [
            hook_name(position, transition)
            for transition in graph.transition_names()
            for position in HOOK_POSITIONS
            if not self.has(position, transition)
        ]

    @classmethod
    def from_workflow(cls, workflow: Any, graph: TransitionGraph) -> "HookRegistry":
        """Bind a workflow object once.

        ``@hook`` decorated methods take precedence; remaining slots are filled
        from methods following the ``before<Name>``/``after<Name>`` convention.
        """
        registry = cls(graph.name)
        workflow_type = type(workflow)
        for attr in dir(workflow_type):
            bindings = getattr(getattr(workflow_type, attr, None), _HOOK_ATTRIBUTE, ())
            for position, transition in bindings:
                if not graph.has_transition(transition):
                    raise ConfigurationError(
                        f"Hook {attr} is bound to unknown transition {transition} of graph {graph.name}",
                        {"graph": graph.name, "transition_name": transition, "hook": attr},
                    )
                registry.register(position, transition, getattr(workflow, attr))

        for transition in graph.transition_names():
            for position in HOOK_POSITIONS:
                if registry.has(position, transition):
                    continue
                method = getattr(workflow, hook_name(position, transition), None)
                if callable(method):
                    registry.register(position, transition, method)
        return registry

    @classmethod
    def passthrough(cls, graph: TransitionGraph) -> "HookRegistry":
        """Registry with a no-op hook for every transition of ``graph``."""
        registry = cls(graph.name)
        for transition in graph.transition_names():
            for position in HOOK_POSITIONS:
                registry.register(position, transition, _passthrough)
        return registry


__all__ = [
    "HOOK_POSITIONS",
    "HookRegistry",
    "hook",
    "hook_name",
    "studly_case",
]
