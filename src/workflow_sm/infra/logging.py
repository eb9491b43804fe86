"""Logging configuration helpers."""

from __future__ import annotations

import logging
import logging.handlers
from typing import Any, Dict

from workflow_sm.config.models import LoggingConfig

_IDENTITY_ATTRIBUTES = ("id", "pk", "uuid", "name")


def configure_logging(config: LoggingConfig) -> None:
    """Setup Python logging according to provided configuration."""

    log_level = getattr(logging, config.level.upper(), logging.INFO)
    logging.captureWarnings(True)

    handlers: list[logging.Handler] = []
    log_path = config.resolved_path()
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(_build_formatter())
        handlers.append(file_handler)

    if config.console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(_build_formatter())
        handlers.append(console_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(level=log_level, handlers=handlers, force=True)


def subject_log_info(subject: Any) -> Dict[str, Any]:
    """Identity fields of a subject for log records and error contexts."""

    info: Dict[str, Any] = {"object_type": type(subject).__name__}
    for attribute in _IDENTITY_ATTRIBUTES:
        value = getattr(subject, attribute, None)
        if value is not None and not callable(value):
            info[f"object_{attribute}"] = value
            break
    return info


def format_context(context: Dict[str, Any]) -> str:
    """Render a context mapping as ``key=value`` pairs for log messages."""

    return " ".join(f"{key}={value!r}" for key, value in sorted(context.items()))


def _build_formatter() -> logging.Formatter:
    fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    return logging.Formatter(fmt=fmt, datefmt=datefmt)
