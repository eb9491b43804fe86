"""Immutable transition graph model and its builders."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .callbacks import CALLBACK_POSITIONS, Callback, CallbackFactory
from .errors import ConfigurationError

DEFAULT_PROPERTY_PATH = "state"


@dataclass(frozen=True)
class TransitionDefinition:
    """A named edge: any of ``sources`` leads to ``target``."""

    name: str
    sources: Tuple[str, ...]
    target: str

    def allows(self, state: Any) -> bool:
        return state in self.sources

    def as_dict(self) -> Dict[str, Any]:
        return {"from": list(self.sources), "to": self.target}


@dataclass(frozen=True)
class TransitionGraph:
    """States, transitions and callback bindings governing one class of subjects.

    Instances are validated on construction and never change afterwards, so a
    single graph can back any number of state machines. With ``strict=False``
    the membership checks on ``from``/``to`` are skipped; an undeclared target
    then only fails when a transition writes it.
    """

    name: str
    states: Tuple[str, ...]
    transitions: Mapping[str, TransitionDefinition]
    property_path: str = DEFAULT_PROPERTY_PATH
    callbacks: Mapping[str, Tuple[Callback, ...]] = field(default_factory=dict)
    strict: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "states", tuple(self.states))
        object.__setattr__(self, "transitions", MappingProxyType(dict(self.transitions)))
        object.__setattr__(
            self,
            "callbacks",
            MappingProxyType({position: tuple(items) for position, items in self.callbacks.items()}),
        )
        if not self.property_path:
            object.__setattr__(self, "property_path", DEFAULT_PROPERTY_PATH)
        self._validate()

    def _validate(self) -> None:
        context = {"graph": self.name}
        if not self.name:
            raise ConfigurationError("Graph name must not be empty", context)
        if not self.states:
            raise ConfigurationError(f"Graph {self.name} declares no states", context)
        if len(set(self.states)) != len(self.states):
            duplicates = sorted({s for s in self.states if self.states.count(s) > 1}, key=str)
            raise ConfigurationError(
                f"Graph {self.name} declares duplicate states: {', '.join(map(str, duplicates))}",
                context,
            )

        known = set(self.states)
        for key, definition in self.transitions.items():
            tcontext = dict(context, transition_name=key)
            if key != definition.name:
                raise ConfigurationError(
                    f"Transition registered as {key} is named {definition.name} in graph {self.name}",
                    tcontext,
                )
            if not definition.sources:
                raise ConfigurationError(
                    f"Transition {key} of graph {self.name} has no source states", tcontext
                )
            if not self.strict:
                continue
            if definition.target not in known:
                raise ConfigurationError(
                    f"Transition {key} of graph {self.name} targets undeclared state {definition.target}",
                    dict(tcontext, to_status=definition.target),
                )
            unknown_sources = [s for s in definition.sources if s not in known]
            if unknown_sources:
                raise ConfigurationError(
                    f"Transition {key} of graph {self.name} starts from undeclared "
                    f"state(s) {', '.join(map(str, unknown_sources))}",
                    tcontext,
                )

        for position in self.callbacks:
            if position not in CALLBACK_POSITIONS:
                raise ConfigurationError(
                    f"Unknown callback position '{position}' in graph {self.name}",
                    dict(context, position=position),
                )

    # Queries ---------------------------------------------------------------

    def get_transition(self, name: str) -> Optional[TransitionDefinition]:
        return self.transitions.get(name)

    def has_transition(self, name: str) -> bool:
        return name in self.transitions

    def transition_names(self) -> Tuple[str, ...]:
        return tuple(self.transitions)

    def has_state(self, state: Any) -> bool:
        return state in self.states

    def callbacks_for(self, position: str) -> Tuple[Callback, ...]:
        return self.callbacks.get(position, ())

    def as_config(self) -> Dict[str, Any]:
        """Return the associative form accepted by :meth:`from_config`."""
        return {
            "graph": self.name,
            "states": list(self.states),
            "transitions": {name: t.as_dict() for name, t in self.transitions.items()},
            "property_path": self.property_path,
        }

    # Construction ----------------------------------------------------------

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        strict: bool = True,
        callback_factory: Optional[CallbackFactory] = None,
    ) -> "TransitionGraph":
        """Build a graph from the ``{graph, states, transitions, ...}`` structure.

        ``transitions`` may be a mapping of name to ``{from, to}`` or a list of
        ``{name, from, to}`` entries; the list form is checked for duplicate
        names.
        """
        if not isinstance(config, Mapping):
            raise ConfigurationError("Graph configuration must be a mapping")

        name = config.get("graph")
        builder = GraphBuilder(
            name if name is not None else "",
            property_path=config.get("property_path") or DEFAULT_PROPERTY_PATH,
            strict=strict,
            callback_factory=callback_factory,
        )

        states = config.get("states")
        if not isinstance(states, (list, tuple)):
            raise ConfigurationError(f"Graph {name} must declare 'states' as a sequence", {"graph": name})
        for state in states:
            builder.add_state(state)

        raw_transitions = config.get("transitions") or {}
        if isinstance(raw_transitions, Mapping):
            entries: Iterable[Tuple[Any, Any]] = raw_transitions.items()
        elif isinstance(raw_transitions, (list, tuple)):
            entries = [(_entry_name(entry, name), entry) for entry in raw_transitions]
        else:
            raise ConfigurationError(
                f"Graph {name} 'transitions' must be a mapping or a list", {"graph": name}
            )
        for transition_name, spec in entries:
            if not isinstance(spec, Mapping) or "to" not in spec:
                raise ConfigurationError(
                    f"Transition {transition_name} of graph {name} needs 'from' and 'to'",
                    {"graph": name, "transition_name": transition_name},
                )
            builder.add_transition(str(transition_name), spec.get("from") or (), spec["to"])

        factory = builder.callback_factory
        for position, callbacks in factory.build_all(config.get("callbacks")).items():
            for callback in callbacks:
                builder.add_callback(position, callback)

        return builder.build()


def _entry_name(entry: Any, graph: Any) -> Any:
    if not isinstance(entry, Mapping) or "name" not in entry:
        raise ConfigurationError(
            f"Transition entries of graph {graph} must carry a 'name'", {"graph": graph}
        )
    return entry["name"]


class GraphBuilder:
    """Incrementally assemble a :class:`TransitionGraph`."""

    def __init__(
        self,
        name: str,
        property_path: str = DEFAULT_PROPERTY_PATH,
        strict: bool = True,
        callback_factory: Optional[CallbackFactory] = None,
    ) -> None:
        self.name = name
        self.property_path = property_path
        self.strict = strict
        self.callback_factory = callback_factory or CallbackFactory()
        self._states: List[str] = []
        self._transitions: Dict[str, TransitionDefinition] = {}
        self._callbacks: Dict[str, List[Callback]] = {}

    def add_state(self, state: str) -> "GraphBuilder":
        self._states.append(state)
        return self

    def add_states(self, states: Iterable[str]) -> "GraphBuilder":
        for state in states:
            self.add_state(state)
        return self

    def add_transition(self, name: str, sources: Any, target: str) -> "GraphBuilder":
        if name in self._transitions:
            raise ConfigurationError(
                f"Duplicate transition {name} in graph {self.name}",
                {"graph": self.name, "transition_name": name},
            )
        if isinstance(sources, str):
            sources = (sources,)
        self._transitions[name] = TransitionDefinition(name=name, sources=tuple(sources), target=target)
        return self

    def add_callback(self, position: str, callback: Any, label: str = "") -> "GraphBuilder":
        built = self.callback_factory.get(position, callback, label)
        self._callbacks.setdefault(position, []).append(built)
        return self

    def build(self) -> TransitionGraph:
        return TransitionGraph(
            name=self.name,
            states=tuple(self._states),
            transitions=dict(self._transitions),
            property_path=self.property_path,
            callbacks={position: tuple(items) for position, items in self._callbacks.items()},
            strict=self.strict,
        )


__all__ = ["DEFAULT_PROPERTY_PATH", "GraphBuilder", "TransitionDefinition", "TransitionGraph"]
