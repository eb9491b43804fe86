"""Command line entry point: inspect a graph and replay transitions on it."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import yaml

from workflow_sm.config import LoggingConfig, load_config, load_graph
from workflow_sm.infra import configure_logging, format_context, install_exception_hook
from workflow_sm.state_machine import HookRegistry, StateMachine, StateMachineError, TransitionGraph

logger = logging.getLogger("workflow_sm.cli")


@dataclass(frozen=True)
class _GraphWorkflow:
    config: TransitionGraph


def _build_subject(property_path: str, state: Any) -> Dict[str, Any]:
    """In-memory subject holding ``state`` under a (possibly dotted) path."""
    subject: Dict[str, Any] = {}
    *parents, last = property_path.split(".")
    target = subject
    for parent in parents:
        target = target.setdefault(parent, {})
    target[last] = state
    return subject


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="workflow-sm",
        description="Inspect a transition graph and replay transitions on an in-memory subject.",
    )
    parser.add_argument("graph", type=Path, help="Graph definition file (YAML/JSON).")
    parser.add_argument("--state", help="Initial state of the subject (defaults to the first declared state).")
    parser.add_argument("--apply", nargs="+", default=[], metavar="TRANSITION", help="Transitions to apply in order.")
    parser.add_argument("--soft", action="store_true", help="Report illegal transitions instead of failing.")
    parser.add_argument("--lenient", action="store_true", help="Skip state membership checks when loading the graph.")
    parser.add_argument("--config", type=Path, help="Engine configuration file (YAML/JSON) for logging.")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level on the console.")
    return parser.parse_args(argv)


def _setup_logging(args: argparse.Namespace) -> None:
    if args.config is not None:
        logging_config = load_config(args.config).logging
    else:
        logging_config = LoggingConfig(filepath=None, level="WARNING")
    if args.verbose:
        logging_config = LoggingConfig(
            level="DEBUG",
            filepath=logging_config.filepath,
            max_bytes=logging_config.max_bytes,
            backup_count=logging_config.backup_count,
            console=True,
        )
    configure_logging(logging_config)


def run(args: argparse.Namespace) -> int:
    graph = load_graph(args.graph, strict=not args.lenient)
    state = args.state if args.state is not None else graph.states[0]
    if not graph.has_state(state):
        raise ValueError(f"Unknown state {state} for graph {graph.name}")

    subject = _build_subject(graph.property_path, state)
    machine = StateMachine(subject, _GraphWorkflow(graph), hooks=HookRegistry.passthrough(graph))

    print(f"graph: {graph.name}")
    print(f"states: {', '.join(map(str, graph.states))}")
    print(f"state: {machine.get_state()}")
    print(f"possible: {', '.join(machine.get_possible_transitions()) or '-'}")

    for transition in args.apply:
        applied = machine.apply(transition, soft=args.soft)
        print(f"{transition}: {'applied' if applied else 'skipped'} -> {machine.get_state()}")

    if args.apply:
        print(f"final: {machine.get_state()}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        _setup_logging(args)
        install_exception_hook()
        return run(args)
    except StateMachineError as exc:
        logger.debug("Command failed [%s]", format_context(exc.context))
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except (FileNotFoundError, ValueError, yaml.YAMLError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
