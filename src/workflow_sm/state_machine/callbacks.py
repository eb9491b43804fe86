"""Callback descriptors bound to a graph in addition to the named hooks."""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib import import_module
from typing import TYPE_CHECKING, Any, Callable, FrozenSet, Iterable, Mapping, Tuple

from .errors import ConfigurationError

if TYPE_CHECKING:  # pragma: no cover
    from .events import TransitionEvent

CALLBACK_POSITIONS: Tuple[str, ...] = ("guard", "before", "after")


def _as_frozenset(value: Any) -> FrozenSet[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return frozenset([value])
    return frozenset(value)


@dataclass(frozen=True)
class Callback:
    """A callable filtered on transition name, source state and target state.

    Empty filters match everything. A callback whose filters do not match the
    event is treated as satisfied.
    """

    position: str
    do: Callable[..., Any]
    on: FrozenSet[str] = field(default_factory=frozenset)
    from_: FrozenSet[str] = field(default_factory=frozenset)
    to: FrozenSet[str] = field(default_factory=frozenset)
    args: Tuple[Any, ...] = ()
    label: str = ""

    def is_satisfied_by(self, event: "TransitionEvent") -> bool:
        if self.on and event.transition not in self.on:
            return False
        if self.from_ and event.state not in self.from_:
            return False
        if self.to and event.config.target not in self.to:
            return False
        return True

    def __call__(self, event: "TransitionEvent") -> Any:
        if not self.is_satisfied_by(event):
            return True
        return self.do(event, *self.args)


class CallbackFactory:
    """Builds :class:`Callback` objects from configuration mappings."""

    def get(self, position: str, spec: Any, label: str = "") -> Callback:
        if isinstance(spec, Callback):
            return spec
        if position not in CALLBACK_POSITIONS:
            raise ConfigurationError(
                f"Unknown callback position '{position}'",
                {"position": position, "callback": label},
            )
        if callable(spec):
            return Callback(position=position, do=spec, label=label)
        if not isinstance(spec, Mapping) or "do" not in spec:
            raise ConfigurationError(
                f"Callback '{label}' must be a callable or a mapping with a 'do' key",
                {"position": position, "callback": label},
            )

        args = spec.get("args") or ()
        if isinstance(args, (str, bytes)) or not isinstance(args, Iterable):
            args = (args,)
        # YAML 1.1 loads a bare ``on`` key as the boolean True.
        on = spec["on"] if "on" in spec else spec.get(True)
        return Callback(
            position=position,
            do=self.resolve_callable(spec["do"], label),
            on=_as_frozenset(on),
            from_=_as_frozenset(spec.get("from")),
            to=_as_frozenset(spec.get("to")),
            args=tuple(args),
            label=label,
        )

    def resolve_callable(self, target: Any, label: str = "") -> Callable[..., Any]:
        """Return ``target`` if callable, else import a ``module:attr`` reference."""
        if callable(target):
            return target
        if not isinstance(target, str) or not target:
            raise ConfigurationError(
                f"Callback '{label}' target is neither callable nor an import path",
                {"callback": label},
            )

        if ":" in target:
            module_name, _, attr_path = target.partition(":")
        else:
            module_name, _, attr_path = target.rpartition(".")
        if not module_name or not attr_path:
            raise ConfigurationError(f"Invalid callback import path '{target}'", {"callback": label})

        try:
            resolved: Any = import_module(module_name)
            for part in attr_path.split("."):
                resolved = getattr(resolved, part)
        except (ImportError, AttributeError) as exc:
            raise ConfigurationError(
                f"Cannot import callback '{target}'", {"callback": label}
            ) from exc

        if not callable(resolved):
            raise ConfigurationError(f"Callback '{target}' is not callable", {"callback": label})
        return resolved

    def build_all(self, raw: Any) -> dict[str, Tuple[Callback, ...]]:
        """Build the per-position callback table from the ``callbacks`` config key."""
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise ConfigurationError("'callbacks' must be a mapping of position to callbacks")

        table: dict[str, Tuple[Callback, ...]] = {}
        for position, entries in raw.items():
            if isinstance(entries, Mapping):
                items = list(entries.items())
            elif isinstance(entries, (list, tuple)):
                items = [(f"{position}_{index}", entry) for index, entry in enumerate(entries)]
            else:
                raise ConfigurationError(
                    f"Callbacks for position '{position}' must be a mapping or a list",
                    {"position": position},
                )
            table[position] = tuple(self.get(position, spec, str(label)) for label, spec in items)
        return table


__all__ = ["CALLBACK_POSITIONS", "Callback", "CallbackFactory"]
