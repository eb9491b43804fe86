"""Events exchanged between the state machine and its event gate."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from .graph import TransitionDefinition

if TYPE_CHECKING:  # pragma: no cover
    from .machine import StateMachine


class StateMachineEvent(str, Enum):
    """Checkpoints dispatched during a transition attempt."""

    TEST_TRANSITION = "test_transition"
    PRE_TRANSITION = "pre_transition"
    POST_TRANSITION = "post_transition"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TransitionEvent:
    """One ``can``/``apply`` call as seen by listeners.

    Listeners veto the transition with :meth:`reject`.
    """

    transition: str
    state: Any
    config: TransitionDefinition
    state_machine: "StateMachine"
    rejected: bool = False
    propagation_stopped: bool = False
    created_at: datetime = field(default_factory=_utc_now)

    def reject(self) -> None:
        self.rejected = True

    def is_rejected(self) -> bool:
        return self.rejected

    def stop_propagation(self) -> None:
        self.propagation_stopped = True

    def get_subject(self) -> Any:
        return self.state_machine.get_subject()

    @property
    def target(self) -> Any:
        return self.config.target


__all__ = ["StateMachineEvent", "TransitionEvent"]
