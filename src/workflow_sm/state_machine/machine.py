"""State machine orchestration."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Type

from workflow_sm.infra.logging import format_context, subject_log_info
from workflow_sm.services.event_bus import EventGate, NullDispatcher

from .accessor import StateAccessor
from .errors import (
    AccessError,
    ConfigurationError,
    IllegalTransitionError,
    InvalidStateError,
    StateMachineError,
    UnknownTransitionError,
)
from .events import StateMachineEvent, TransitionEvent
from .graph import TransitionDefinition, TransitionGraph
from .hooks import HookRegistry

logger = logging.getLogger("workflow_sm.state_machine")

_UNSET = object()
_BOUND_GRAPH_ATTRIBUTE = "_workflow_sm_bound_graph"


class StateMachine:
    """Drives one subject through the graph owned by a workflow object.

    A transition attempt goes through the graph check, the ``test_transition``
    listeners and the guard callbacks (:meth:`can`), then the
    ``pre_transition`` listeners, the before hook, the state write, the after
    hook and finally the ``post_transition`` listeners. Everything up to the
    before hook may refuse the transition; the after hook runs once the new
    state is committed and cannot undo it.
    """

    def __init__(
        self,
        subject: Any,
        workflow: Any,
        dispatcher: Optional[EventGate] = None,
        accessor: Optional[StateAccessor] = None,
        hooks: Optional[HookRegistry] = None,
    ) -> None:
        self._subject = subject
        self._workflow = workflow
        self._graph = self._graph_of(workflow)
        self._dispatcher: EventGate = dispatcher if dispatcher is not None else NullDispatcher()
        self._accessor = accessor or StateAccessor()
        self._hooks = hooks if hooks is not None else HookRegistry.from_workflow(workflow, self._graph)
        self._previous_state: Any = None

        # The subject must expose a readable state before the machine exists.
        try:
            self.get_state()
        except AccessError as exc:
            raise AccessError(
                f"Cannot access to configured property path {self._graph.property_path} "
                f"on object {type(subject).__name__} with graph {self._graph.name}",
                dict(exc.context, **self._context(state=None)),
            ) from exc

    @staticmethod
    def _graph_of(workflow: Any) -> TransitionGraph:
        config = getattr(workflow, "config", None)
        if isinstance(config, TransitionGraph):
            return config
        if isinstance(config, Mapping):
            # A mapping config is built once per workflow and reused while the
            # workflow keeps the same config object.
            bound = getattr(workflow, _BOUND_GRAPH_ATTRIBUTE, None)
            if bound is not None and bound[0] is config:
                return bound[1]
            graph = TransitionGraph.from_config(config)
            try:
                object.__setattr__(workflow, _BOUND_GRAPH_ATTRIBUTE, (config, graph))
            except AttributeError:
                logger.debug(
                    "Workflow %s cannot hold its bound graph; building one per machine",
                    type(workflow).__name__,
                )
            return graph
        raise ConfigurationError(
            f"Workflow {type(workflow).__name__} does not expose a graph 'config'",
            {"workflow": type(workflow).__name__},
        )

    # Queries ---------------------------------------------------------------

    @property
    def graph(self) -> TransitionGraph:
        return self._graph

    @property
    def workflow(self) -> Any:
        return self._workflow

    @property
    def previous_state(self) -> Any:
        return self._previous_state

    def get_state(self) -> Any:
        return self._accessor.read(self._subject, self._graph.property_path)

    def get_subject(self) -> Any:
        return self._subject

    def get_graph_name(self) -> str:
        return self._graph.name

    def get_possible_transitions(self) -> List[str]:
        return [name for name in self._graph.transition_names() if self.can(name)]

    def log_info(self, transition: str = "") -> Dict[str, Any]:
        """Structured context describing the subject and a transition."""
        return self._context(transition)

    # Transitions -----------------------------------------------------------

    def can(self, transition: str) -> bool:
        definition = self._require_transition(transition)
        state = self.get_state()
        if not definition.allows(state):
            return False

        event = TransitionEvent(transition, state, definition, self)
        self._dispatcher.dispatch(StateMachineEvent.TEST_TRANSITION.value, event)
        if event.is_rejected():
            logger.debug("Transition %s on %s rejected by a listener", transition, self._graph.name)
            return False

        return self._call_callbacks(event, "guard")

    def apply(self, transition: str, soft: bool = False) -> bool:
        definition = self._require_transition(transition)
        logger.info("Execute transition %s on %s", transition, self._graph.name)

        if not self.can(transition):
            if soft:
                logger.debug(
                    "Transition %s not applicable on state %s with graph %s",
                    transition,
                    self.get_state(),
                    self._graph.name,
                )
                return False
            raise self._error(
                IllegalTransitionError,
                f"Transition {transition} cannot be applied on state {self.get_state()} "
                f"of object {type(self._subject).__name__} with graph {self._graph.name}",
                transition,
            )

        state = self.get_state()
        event = TransitionEvent(transition, state, definition, self)
        self._dispatcher.dispatch(StateMachineEvent.PRE_TRANSITION.value, event)
        if event.is_rejected():
            logger.info("Transition %s on %s rejected before apply", transition, self._graph.name)
            return False

        self._previous_state = state
        self._call_callbacks(event, "before")
        if self._hooks.invoke("before", transition, self._subject, self._previous_state) is False:
            logger.info("Transition %s on %s vetoed by its before hook", transition, self._graph.name)
            return False

        self._set_state(definition.target, transition)

        self._hooks.invoke("after", transition, self._subject, self._previous_state)
        self._call_callbacks(event, "after")
        self._dispatcher.dispatch(StateMachineEvent.POST_TRANSITION.value, event)
        logger.debug(
            "Transition %s on %s completed: %s -> %s",
            transition,
            self._graph.name,
            self._previous_state,
            definition.target,
        )
        return True

    # Internals -------------------------------------------------------------

    def _require_transition(self, transition: str) -> TransitionDefinition:
        definition = self._graph.get_transition(transition)
        if definition is None:
            raise self._error(
                UnknownTransitionError,
                f"Transition {transition} does not exist on object "
                f"{type(self._subject).__name__} with graph {self._graph.name}",
                transition,
            )
        return definition

    def _set_state(self, state: Any, transition: str = "") -> None:
        if not self._graph.has_state(state):
            raise self._error(
                InvalidStateError,
                f"Cannot set the state to {state} to object {type(self._subject).__name__} "
                f"with graph {self._graph.name} because it is not pre-defined.",
                transition,
            )
        try:
            self._accessor.write(self._subject, self._graph.property_path, state)
        except AccessError as exc:
            exc.context.update(self._context(transition))
            raise

    def _call_callbacks(self, event: TransitionEvent, position: str) -> bool:
        for callback in self._graph.callbacks_for(position):
            if callback(event) is False and position == "guard":
                logger.debug(
                    "Guard callback %s refused transition %s on %s",
                    callback.label or callback.do,
                    event.transition,
                    self._graph.name,
                )
                return False
        return True

    def _context(self, transition: str = "", state: Any = _UNSET) -> Dict[str, Any]:
        definition = self._graph.get_transition(transition) if transition else None
        if state is _UNSET:
            try:
                state = self.get_state()
            except AccessError:
                state = None
        info: Dict[str, Any] = {
            "from_status": state,
            "to_status": definition.target if definition is not None else None,
            "transition_name": transition,
            "graph": self._graph.name,
            "event": "transition",
            "component": "state machine",
        }
        info.update(subject_log_info(self._subject))
        return info

    def _error(
        self, error_type: Type[StateMachineError], message: str, transition: str = ""
    ) -> StateMachineError:
        context = self._context(transition)
        logger.warning("%s [%s]", message, format_context(context))
        return error_type(message, context)


__all__ = ["StateMachine"]
