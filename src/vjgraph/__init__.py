"""Dataflow graph engine for audio-visual performance patches."""

from __future__ import annotations

from .connections import Connection
from .datatypes import DataType
from .errors import (
    ConnectionNotFound,
    CycleDetected,
    GraphError,
    GraphInvariantError,
    InvalidPortIndex,
    NodeAlreadyExists,
    NodeNotFound,
    PortTypeMismatch,
)
from .graph import GraphSnapshot, NodeGraph
from .ids import ConnectionId, NodeId, new_connection_id, new_node_id
from .scene import Scene

__all__ = [
    "Connection",
    "ConnectionId",
    "ConnectionNotFound",
    "CycleDetected",
    "DataType",
    "GraphError",
    "GraphInvariantError",
    "GraphSnapshot",
    "InvalidPortIndex",
    "NodeAlreadyExists",
    "NodeGraph",
    "NodeId",
    "NodeNotFound",
    "PortTypeMismatch",
    "Scene",
    "new_connection_id",
    "new_node_id",
]
