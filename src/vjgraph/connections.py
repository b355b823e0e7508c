"""Connection records and the registry that owns them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Tuple

from .datatypes import DataType
from .errors import ConnectionNotFound
from .ids import ConnectionId, NodeId


@dataclass(frozen=True, slots=True)
class Connection:
    """Typed edge from an output port of one node to an input port of another."""

    id: ConnectionId
    from_node: NodeId
    from_port: int
    to_node: NodeId
    to_port: int
    data_type: DataType = DataType.FLOAT

    def touches(self, node_id: NodeId) -> bool:
        return self.from_node == node_id or self.to_node == node_id


class ConnectionRegistry:
    """Connection records keyed by :class:`ConnectionId`, in insertion order."""

    def __init__(self) -> None:
        self._connections: Dict[ConnectionId, Connection] = {}

    def register(self, connection: Connection) -> None:
        if connection.id in self._connections:
            raise ValueError(f"Duplicate connection registration for {connection.id}")
        self._connections[connection.id] = connection

    def remove(self, connection_id: ConnectionId) -> Connection:
        try:
            return self._connections.pop(connection_id)
        except KeyError:
            raise ConnectionNotFound(connection_id) from None

    def get(self, connection_id: ConnectionId) -> Connection | None:
        return self._connections.get(connection_id)

    def connections(self) -> Tuple[Connection, ...]:
        return tuple(self._connections.values())

    def touching(self, node_id: NodeId) -> Tuple[Connection, ...]:
        return tuple(conn for conn in self._connections.values() if conn.touches(node_id))

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    def __iter__(self) -> Iterator[Connection]:
        return iter(tuple(self._connections.values()))


__all__ = ["Connection", "ConnectionRegistry"]
