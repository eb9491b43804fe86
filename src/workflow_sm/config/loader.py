"""Configuration and graph definition loaders."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Tuple

import yaml

from workflow_sm.state_machine.errors import ConfigurationError
from workflow_sm.state_machine.graph import TransitionGraph

from .models import Config, GraphConfig, LoggingConfig

_YAML_MERGE_TAG = "tag:yaml.org,2002:merge"


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses a key repeated within one mapping."""

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = set()
            for key_node, _ in node.value:
                # Keys pulled in through ``<<`` merges may be overridden.
                if not isinstance(key_node, yaml.ScalarNode) or key_node.tag == _YAML_MERGE_TAG:
                    continue
                key = self.construct_object(key_node, deep=deep)
                if key in seen:
                    raise ConfigurationError(
                        f"Duplicate key {key!r} in {key_node.start_mark.name} "
                        f"at line {key_node.start_mark.line + 1}",
                        {"key": key},
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _unique_pairs(source: Path) -> Callable[[List[Tuple[str, Any]]], Dict[str, Any]]:
    def hook(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for key, value in pairs:
            if key in result:
                raise ConfigurationError(f"Duplicate key {key!r} in {source}", {"key": key})
            result[key] = value
        return result

    return hook


def _normalize_path(path: Path | str) -> Path:
    return path if isinstance(path, Path) else Path(path)


def _load_raw_config(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found at {config_path}")

    suffix = config_path.suffix.lower()
    with config_path.open("r", encoding="utf-8") as stream:
        if suffix in {".yaml", ".yml"}:
            raw = yaml.load(stream, Loader=_UniqueKeyLoader) or {}
        elif suffix == ".json":
            raw = json.load(stream, object_pairs_hook=_unique_pairs(config_path))
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Top level of {config_path} must be a mapping")
    return dict(raw)


def load_config(config_path: Path | str) -> Config:
    """Load configuration file and construct Config dataclass."""

    config_path = _normalize_path(config_path)
    raw = _load_raw_config(config_path)

    logging_raw = dict(raw.get("logging") or {})
    log_path = logging_raw.get("filepath")
    if log_path:
        logging_raw["filepath"] = (config_path.parent / log_path).resolve()
    logging = LoggingConfig(**logging_raw)

    graphs_raw = dict(raw.get("graphs") or {})
    # Graph files are resolved relative to the config file.
    paths = tuple((config_path.parent / path).resolve() for path in graphs_raw.pop("paths", ()) or ())
    graphs = GraphConfig(paths=paths, **graphs_raw)

    return Config(logging=logging, graphs=graphs)


def load_graph(graph_path: Path | str, strict: bool = True) -> TransitionGraph:
    """Load one graph definition file (YAML or JSON)."""

    graph_path = _normalize_path(graph_path)
    raw = _load_raw_config(graph_path)
    return TransitionGraph.from_config(raw, strict=strict)


def load_graphs(config: Config) -> Dict[str, TransitionGraph]:
    """Load every configured graph, keyed by graph name."""

    graphs: Dict[str, TransitionGraph] = {}
    for path in config.graphs.paths:
        graph = load_graph(path, strict=config.graphs.strict)
        if graph.name in graphs:
            raise ConfigurationError(
                f"Graph {graph.name} is defined more than once (last in {path})",
                {"graph": graph.name},
            )
        graphs[graph.name] = graph
    return graphs
