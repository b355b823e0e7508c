"""Configuration loading for the graph engine and its startup patch."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping

from .scheduler import TIE_BREAKS

_REPO_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = _REPO_ROOT / "configs" / "default.json"

DEFAULT_TIE_BREAK = "insertion"


@dataclass(slots=True)
class EngineConfig:
    """Engine behaviour that is independent of the graph layout."""

    tie_break: str = DEFAULT_TIE_BREAK
    # Raise on internal-consistency faults; when False they are logged and ignored.
    strict_invariants: bool = __debug__
    log_mutations: bool = False


@dataclass(slots=True)
class NodeConfig:
    name: str
    type: str
    params: Mapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ConnectionConfig:
    source: str
    target: str
    source_port: int = 0
    target_port: int = 0


@dataclass(slots=True)
class GraphConfig:
    nodes: List[NodeConfig] = field(default_factory=list)
    connections: List[ConnectionConfig] = field(default_factory=list)


@dataclass(slots=True)
class AppConfig:
    engine: EngineConfig
    graph: GraphConfig


def _normalise_engine(data: Mapping[str, Any]) -> EngineConfig:
    tie_break = str(data.get("tie_break", DEFAULT_TIE_BREAK))
    if tie_break not in TIE_BREAKS:
        raise ValueError(f"engine.tie_break must be one of {TIE_BREAKS}, got '{tie_break}'")
    return EngineConfig(
        tie_break=tie_break,
        strict_invariants=bool(data.get("strict_invariants", __debug__)),
        log_mutations=bool(data.get("log_mutations", False)),
    )


def _normalise_graph(data: Mapping[str, Any]) -> GraphConfig:
    nodes: List[NodeConfig] = []
    seen: set[str] = set()
    for item in data.get("nodes", []) or []:
        name = str(item.get("name", "")).strip()
        if not name:
            raise ValueError("graph.nodes[].name must be a non-empty string")
        if name in seen:
            raise ValueError(f"graph.nodes contains duplicate name '{name}'")
        seen.add(name)
        if "type" not in item:
            raise ValueError(f"graph.nodes['{name}'] is missing a type")
        nodes.append(
            NodeConfig(
                name=name,
                type=str(item["type"]),
                params=dict(item.get("params", {}) or {}),
            )
        )
    connections: List[ConnectionConfig] = []
    for item in data.get("connections", []) or []:
        source = str(item["source"])
        target = str(item["target"])
        for endpoint in (source, target):
            if endpoint not in seen:
                raise ValueError(f"graph.connections references unknown node '{endpoint}'")
        source_port = item.get("source_port", 0)
        target_port = item.get("target_port", 0)
        if not isinstance(source_port, int) or not isinstance(target_port, int):
            raise ValueError("graph.connections[] ports must be integer indices")
        connections.append(
            ConnectionConfig(
                source=source,
                target=target,
                source_port=source_port,
                target_port=target_port,
            )
        )
    return GraphConfig(nodes=nodes, connections=connections)


def parse_configuration(raw: Mapping[str, Any]) -> AppConfig:
    """Build an :class:`AppConfig` from an already-decoded JSON mapping."""

    engine = _normalise_engine(dict(raw.get("engine", {}) or {}))
    graph = _normalise_graph(raw.get("graph", {}) or {})
    return AppConfig(engine=engine, graph=graph)


def load_configuration(path: str | Path) -> AppConfig:
    """Load an :class:`AppConfig` from ``path``."""

    with open(path, "r", encoding="utf8") as fh:
        raw = json.load(fh)
    return parse_configuration(raw)


__all__ = [
    "AppConfig",
    "ConnectionConfig",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_TIE_BREAK",
    "EngineConfig",
    "GraphConfig",
    "NodeConfig",
    "load_configuration",
    "parse_configuration",
]
