"""Global exception handling for command line entry points."""

from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

from workflow_sm.state_machine.errors import StateMachineError

from .logging import format_context

logger = logging.getLogger("app.exceptions")


def install_exception_hook() -> None:
    """Route uncaught errors through the log before the interpreter reports them."""

    _ExceptionHook().install()


def error_log_info(exc_value: BaseException) -> Dict[str, Any]:
    """Structured fields for an uncaught error; engine errors carry their context."""

    if isinstance(exc_value, StateMachineError):
        return exc_value.log_info()
    return {"error": type(exc_value).__name__, "message": str(exc_value)}


@dataclass
class _ExceptionHook:
    _original_excepthook: Optional[callable] = None
    _original_thread_excepthook: Optional[callable] = None

    def install(self) -> None:
        self._original_excepthook = sys.excepthook
        sys.excepthook = self._handle_exception

        if hasattr(threading, "excepthook"):
            self._original_thread_excepthook = threading.excepthook
            threading.excepthook = self._handle_thread_exception  # type: ignore[assignment]

    @staticmethod
    def _log(origin: str, exc_type, exc_value, exc_traceback) -> None:
        info = error_log_info(exc_value)
        logger.critical(
            "Unhandled %s in %s [%s]",
            info["error"],
            origin,
            format_context(info),
            exc_info=(exc_type, exc_value, exc_traceback),
            extra={"error_context": info},
        )

    def _handle_exception(self, exc_type, exc_value, exc_traceback) -> None:
        self._log("main thread", exc_type, exc_value, exc_traceback)
        if self._original_excepthook:
            self._original_excepthook(exc_type, exc_value, exc_traceback)

    def _handle_thread_exception(self, args: "threading.ExceptHookArgs") -> None:  # pragma: no cover
        origin = args.thread.name if args.thread else "<unknown thread>"
        self._log(origin, args.exc_type, args.exc_value, args.exc_traceback)
        if self._original_thread_excepthook:
            self._original_thread_excepthook(args)
