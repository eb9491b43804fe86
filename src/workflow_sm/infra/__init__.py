"""Infrastructure helpers such as logging and exception handling."""

from .exceptions import error_log_info, install_exception_hook
from .logging import configure_logging, format_context, subject_log_info

__all__ = [
    "configure_logging",
    "error_log_info",
    "format_context",
    "install_exception_hook",
    "subject_log_info",
]
