"""Error taxonomy for graph mutations and queries."""

from __future__ import annotations

from typing import Sequence

from .datatypes import DataType
from .ids import ConnectionId, NodeId


class GraphError(Exception):
    """Base class for recoverable, caller-facing graph errors."""


class NodeNotFound(GraphError):
    def __init__(self, node_id: NodeId) -> None:
        super().__init__(f"Node {node_id} not found")
        self.node_id = node_id


class NodeAlreadyExists(GraphError):
    def __init__(self, node_id: NodeId) -> None:
        super().__init__(f"Node {node_id} already exists")
        self.node_id = node_id


class ConnectionNotFound(GraphError):
    def __init__(self, connection_id: ConnectionId) -> None:
        super().__init__(f"Connection {connection_id} not found")
        self.connection_id = connection_id


class CycleDetected(GraphError):
    """Raised when a prospective edge would close a directed cycle.

    ``path`` holds the existing route from ``to_node`` back to ``from_node``
    that the rejected edge would have completed.
    """

    def __init__(
        self,
        from_node: NodeId,
        to_node: NodeId,
        path: Sequence[NodeId] = (),
    ) -> None:
        super().__init__(f"Adding connection {from_node} -> {to_node} would create a cycle")
        self.from_node = from_node
        self.to_node = to_node
        self.path = tuple(path)


class PortTypeMismatch(GraphError):
    def __init__(self, expected: DataType, actual: DataType) -> None:
        super().__init__(f"Port type mismatch: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class InvalidPortIndex(GraphError):
    def __init__(self, port: int, count: int, *, direction: str = "port") -> None:
        super().__init__(f"Invalid {direction} index {port} (node declares {count})")
        self.port = port
        self.count = count
        self.direction = direction


class GraphInvariantError(RuntimeError):
    """Internal-consistency fault: the engine broke one of its own invariants."""


__all__ = [
    "ConnectionNotFound",
    "CycleDetected",
    "GraphError",
    "GraphInvariantError",
    "InvalidPortIndex",
    "NodeAlreadyExists",
    "NodeNotFound",
    "PortTypeMismatch",
]
