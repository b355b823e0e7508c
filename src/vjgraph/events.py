"""Change notifications published by :class:`~vjgraph.graph.NodeGraph`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, FrozenSet, List

from .connections import Connection
from .diagnostics import log_graph_event
from .ids import NodeId


@dataclass(frozen=True, slots=True)
class NodeAdded:
    node_id: NodeId


@dataclass(frozen=True, slots=True)
class NodeRemoved:
    node_id: NodeId
    connections: tuple[Connection, ...] = ()


@dataclass(frozen=True, slots=True)
class ConnectionAdded:
    connection: Connection


@dataclass(frozen=True, slots=True)
class ConnectionRemoved:
    connection: Connection


@dataclass(frozen=True, slots=True)
class NodesDirtied:
    """Nodes that went from clean to dirty during a single operation."""

    nodes: FrozenSet[NodeId]


GraphEvent = NodeAdded | NodeRemoved | ConnectionAdded | ConnectionRemoved | NodesDirtied
Listener = Callable[[GraphEvent], None]


class EventDispatcher:
    """Fan-out of graph events to subscribed callables, in subscription order."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unsubscribes it."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def emit(self, event: GraphEvent) -> int:
        """Deliver ``event`` to every listener; return how many of them failed.

        A failing listener is logged through :mod:`vjgraph.diagnostics` and
        skipped; later listeners still receive the event.
        """

        failures = 0
        for listener in tuple(self._listeners):
            try:
                listener(event)
            except Exception as exc:
                failures += 1
                log_graph_event(f"listener {listener!r} failed on {type(event).__name__}: {exc!r}")
        return failures

    def __len__(self) -> int:
        return len(self._listeners)


__all__ = [
    "ConnectionAdded",
    "ConnectionRemoved",
    "EventDispatcher",
    "GraphEvent",
    "Listener",
    "NodeAdded",
    "NodeRemoved",
    "NodesDirtied",
]
