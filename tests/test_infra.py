"""Tests for logging helpers and the exception hook."""

from __future__ import annotations

import logging
import sys
import threading

import pytest

from workflow_sm.config import LoggingConfig
from workflow_sm.infra import (
    configure_logging,
    error_log_info,
    format_context,
    install_exception_hook,
    subject_log_info,
)
from workflow_sm.state_machine import IllegalTransitionError

from .conftest import Article


@pytest.fixture
def restore_hooks():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    excepthook, thread_excepthook = sys.excepthook, threading.excepthook
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    sys.excepthook, threading.excepthook = excepthook, thread_excepthook


def test_subject_log_info():
    assert subject_log_info(Article()) == {"object_type": "Article", "object_id": 7}
    assert subject_log_info({"state": "draft"}) == {"object_type": "dict"}


def test_format_context_is_sorted():
    assert format_context({"b": 1, "a": "x"}) == "a='x' b=1"


def test_configure_logging_writes_file(tmp_path, restore_hooks):
    log_file = tmp_path / "logs" / "engine.log"
    configure_logging(LoggingConfig(level="DEBUG", filepath=log_file, console=False))

    logging.getLogger("workflow_sm.test").debug("hello %s", "file")
    for handler in logging.getLogger().handlers:
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert "| DEBUG    | workflow_sm.test | hello file" in content


def test_exception_hook_logs_context(restore_hooks, caplog):
    delegated = []
    sys.excepthook = lambda *args: delegated.append(args[0])
    install_exception_hook()

    error = IllegalTransitionError("Transition publish cannot be applied", {"graph": "article"})
    with caplog.at_level(logging.CRITICAL, logger="app.exceptions"):
        sys.excepthook(type(error), error, None)

    assert delegated == [IllegalTransitionError]
    assert "graph='article'" in caplog.text
    assert "Transition publish cannot be applied" in caplog.text


def test_error_log_info():
    error = IllegalTransitionError("nope", {"graph": "article"})
    assert error.log_info() == {"graph": "article", "error": "IllegalTransitionError", "message": "nope"}


def test_error_log_info_for_foreign_errors():
    assert error_log_info(KeyError("state")) == {"error": "KeyError", "message": "'state'"}
    assert error_log_info(IllegalTransitionError("nope", {"graph": "article"}))["graph"] == "article"


def test_exception_hook_attaches_structured_context(restore_hooks, caplog):
    sys.excepthook = lambda *args: None
    install_exception_hook()

    error = IllegalTransitionError("Transition publish cannot be applied", {"transition_name": "publish"})
    with caplog.at_level(logging.CRITICAL, logger="app.exceptions"):
        sys.excepthook(type(error), error, None)

    (record,) = caplog.records
    assert record.error_context["transition_name"] == "publish"
    assert record.error_context["error"] == "IllegalTransitionError"
    assert "Unhandled IllegalTransitionError in main thread" in record.getMessage()
