"""Read and write the current state of a subject."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any, Protocol, runtime_checkable

from .errors import AccessError


@runtime_checkable
class StatefulSubject(Protocol):
    """Capability implemented by subjects that manage their own state field."""

    def get_state(self) -> Any:
        ...

    def set_state(self, value: Any) -> None:
        ...


class StateAccessor:
    """Resolve a dotted property path on a subject.

    Subjects implementing :class:`StatefulSubject` are accessed through that
    capability and the path is ignored. Otherwise every segment of the path is
    looked up as a mapping key or an attribute.
    """

    def read(self, subject: Any, property_path: str) -> Any:
        if isinstance(subject, StatefulSubject):
            return subject.get_state()

        target = subject
        for segment in self._segments(subject, property_path):
            target = self._get(target, segment, subject, property_path)
        return target

    def write(self, subject: Any, property_path: str, value: Any) -> None:
        if isinstance(subject, StatefulSubject):
            subject.set_state(value)
            return

        segments = self._segments(subject, property_path)
        owner = subject
        for segment in segments[:-1]:
            owner = self._get(owner, segment, subject, property_path)
        last = segments[-1]

        if isinstance(owner, MutableMapping):
            owner[last] = value
            return
        if isinstance(owner, Mapping) or not hasattr(owner, last):
            raise self._error("write", subject, property_path)
        try:
            setattr(owner, last, value)
        except AttributeError as exc:
            raise self._error("write", subject, property_path) from exc

    def _segments(self, subject: Any, property_path: str) -> list[str]:
        segments = [part for part in (property_path or "").split(".") if part]
        if not segments:
            raise self._error("resolve", subject, property_path)
        return segments

    def _get(self, owner: Any, segment: str, subject: Any, property_path: str) -> Any:
        if isinstance(owner, Mapping):
            if segment not in owner:
                raise self._error("read", subject, property_path)
            return owner[segment]
        try:
            return getattr(owner, segment)
        except AttributeError as exc:
            raise self._error("read", subject, property_path) from exc

    @staticmethod
    def _error(action: str, subject: Any, property_path: str) -> AccessError:
        return AccessError(
            f"Cannot {action} property path {property_path!r} on object {type(subject).__name__}",
            {"property_path": property_path, "object_type": type(subject).__name__},
        )


__all__ = ["StateAccessor", "StatefulSubject"]
