"""Process-unique identifiers for graph nodes and connections."""

from __future__ import annotations

import uuid
from dataclasses import dataclass


@dataclass(frozen=True, slots=True, order=True)
class NodeId:
    """Opaque node handle backed by a random 128-bit UUID."""

    value: uuid.UUID

    @classmethod
    def parse(cls, text: str | uuid.UUID) -> "NodeId":
        if isinstance(text, uuid.UUID):
            return cls(text)
        return cls(uuid.UUID(str(text)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True, order=True)
class ConnectionId:
    """Opaque connection handle; shares the shape of :class:`NodeId`."""

    value: uuid.UUID

    @classmethod
    def parse(cls, text: str | uuid.UUID) -> "ConnectionId":
        if isinstance(text, uuid.UUID):
            return cls(text)
        return cls(uuid.UUID(str(text)))

    def __str__(self) -> str:
        return str(self.value)


def new_node_id() -> NodeId:
    return NodeId(uuid.uuid4())


def new_connection_id() -> ConnectionId:
    return ConnectionId(uuid.uuid4())


__all__ = ["ConnectionId", "NodeId", "new_connection_id", "new_node_id"]
