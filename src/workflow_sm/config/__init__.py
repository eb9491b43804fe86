"""Configuration package for the workflow state machine."""

from .loader import load_config, load_graph, load_graphs
from .models import Config, GraphConfig, LoggingConfig

__all__ = [
    "Config",
    "GraphConfig",
    "LoggingConfig",
    "load_config",
    "load_graph",
    "load_graphs",
]
