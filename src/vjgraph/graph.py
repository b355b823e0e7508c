"""Dataflow graph store: nodes, connections, evaluation order and dirty state."""

from __future__ import annotations

import operator
from dataclasses import dataclass
from threading import RLock
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Tuple

from .config import EngineConfig
from .connections import Connection, ConnectionRegistry
from .cycles import find_path
from .datatypes import DataType
from .diagnostics import log_graph_event
from .dirty import DirtyTracker
from .errors import (
    ConnectionNotFound,
    CycleDetected,
    GraphInvariantError,
    NodeAlreadyExists,
    NodeNotFound,
)
from .events import (
    ConnectionAdded,
    ConnectionRemoved,
    EventDispatcher,
    GraphEvent,
    NodeAdded,
    NodeRemoved,
    NodesDirtied,
)
from .ids import ConnectionId, NodeId, new_connection_id
from .scheduler import TopologicalScheduler


@dataclass(frozen=True, slots=True)
class GraphSnapshot:
    """Immutable view of the graph taken atomically under the store lock."""

    order: Tuple[NodeId, ...]
    dirty: FrozenSet[NodeId]
    connections: Tuple[Connection, ...]

    def dirty_in_order(self) -> Tuple[NodeId, ...]:
        return tuple(node for node in self.order if node in self.dirty)


class NodeGraph:
    """Directed acyclic graph of opaque node ids joined by typed connections.

    Nodes live in an arena of integer slots. ``_slots`` maps slot to id and
    ``_positions`` maps id to slot; freed slots are recycled but ids never
    are. Adjacency is kept per slot as ``ConnectionId -> neighbour slot`` so
    parallel connections between the same pair stay distinct.

    Every public method runs under a single re-entrant lock. A mutation
    commits the registry and adjacency change, propagates dirty state,
    recomputes the evaluation order and only then notifies listeners.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config if config is not None else EngineConfig()
        self._slots: List[NodeId | None] = []
        self._positions: Dict[NodeId, int] = {}
        self._free_slots: List[int] = []
        self._outgoing: List[Dict[ConnectionId, int]] = []
        self._incoming: List[Dict[ConnectionId, int]] = []
        self._registry = ConnectionRegistry()
        self._dirty = DirtyTracker()
        self._scheduler = TopologicalScheduler(self.config.tie_break)
        self._events = EventDispatcher()
        self._lock = RLock()

    # ------------------------------------------------------------------
    # Arena helpers

    def _slot_of(self, node_id: NodeId) -> int:
        try:
            return self._positions[node_id]
        except KeyError:
            raise NodeNotFound(node_id) from None

    def _successor_slots(self, slot: int) -> Iterable[int]:
        return self._outgoing[slot].values()

    def _successor_ids(self, node_id: NodeId) -> Iterator[NodeId]:
        for slot in self._outgoing[self._positions[node_id]].values():
            yield self._slots[slot]  # type: ignore[misc]

    def _allocate_slot(self, node_id: NodeId) -> int:
        if self._free_slots:
            slot = self._free_slots.pop()
            self._slots[slot] = node_id
            self._outgoing[slot] = {}
            self._incoming[slot] = {}
        else:
            slot = len(self._slots)
            self._slots.append(node_id)
            self._outgoing.append({})
            self._incoming.append({})
        self._positions[node_id] = slot
        return slot

    def _release_slot(self, slot: int) -> None:
        self._slots[slot] = None
        self._outgoing[slot] = {}
        self._incoming[slot] = {}
        self._free_slots.append(slot)

    # ------------------------------------------------------------------
    # Internal side effects

    def _log(self, message: str) -> None:
        if self.config.log_mutations:
            log_graph_event(message)

    def _propagate_dirty(self, node_id: NodeId) -> List[NodeId]:
        return self._dirty.mark(node_id, self._successor_ids)

    def _recompute_order(self) -> None:
        # Dict order of ``_positions`` is node insertion order, which the
        # scheduler uses as its default tie-break.
        vertices = list(self._positions.values())
        slots = self._slots
        try:
            self._scheduler.recompute(
                vertices,
                self._successor_slots,
                key=lambda slot: slots[slot],
            )
        except GraphInvariantError as exc:
            log_graph_event(f"invariant fault: {exc}")
            if self.config.strict_invariants:
                raise

    def _notify(self, events: Iterable[GraphEvent]) -> None:
        if not len(self._events):
            return
        for event in events:
            self._events.emit(event)

    # ------------------------------------------------------------------
    # Mutation API

    def add_node(self, node_id: NodeId) -> None:
        """Insert ``node_id`` as a new, dirty vertex."""

        with self._lock:
            if node_id in self._positions:
                raise NodeAlreadyExists(node_id)
            self._allocate_slot(node_id)
            dirtied = self._propagate_dirty(node_id)
            self._recompute_order()
            self._log(f"add_node {node_id}")
            self._notify([NodeAdded(node_id), NodesDirtied(frozenset(dirtied))])

    def remove_node(self, node_id: NodeId) -> Tuple[Connection, ...]:
        """Remove ``node_id`` and every connection touching it.

        Former downstream neighbours lose an input and are marked dirty.
        Returns the removed connections in registration order.
        """

        with self._lock:
            slot = self._slot_of(node_id)
            removed = self._registry.touching(node_id)
            downstream: List[NodeId] = []
            for conn in removed:
                self._registry.remove(conn.id)
                if conn.from_node == node_id and conn.to_node != node_id:
                    self._incoming[self._positions[conn.to_node]].pop(conn.id, None)
                    downstream.append(conn.to_node)
                elif conn.to_node == node_id:
                    self._outgoing[self._positions[conn.from_node]].pop(conn.id, None)
            del self._positions[node_id]
            self._release_slot(slot)
            self._dirty.discard(node_id)
            dirtied: List[NodeId] = []
            for target in dict.fromkeys(downstream):
                dirtied.extend(self._propagate_dirty(target))
            self._recompute_order()
            self._log(f"remove_node {node_id} ({len(removed)} connections)")
            events: List[GraphEvent] = [NodeRemoved(node_id, removed)]
            events.extend(ConnectionRemoved(conn) for conn in removed)
            if dirtied:
                events.append(NodesDirtied(frozenset(dirtied)))
            self._notify(events)
            return removed

    def add_connection(
        self,
        from_node: NodeId,
        from_port: int,
        to_node: NodeId,
        to_port: int,
        data_type: DataType | str = DataType.FLOAT,
    ) -> ConnectionId:
        """Connect ``from_node[from_port]`` to ``to_node[to_port]``.

        The cycle check runs before anything is committed; on
        :class:`CycleDetected` the graph is left untouched.
        """

        with self._lock:
            source = self._slot_of(from_node)
            target = self._slot_of(to_node)
            route = find_path(target, source, self._successor_slots)
            if route is not None:
                raise CycleDetected(
                    from_node,
                    to_node,
                    [self._slots[slot] for slot in route],  # type: ignore[misc]
                )
            connection = Connection(
                id=new_connection_id(),
                from_node=from_node,
                from_port=operator.index(from_port),
                to_node=to_node,
                to_port=operator.index(to_port),
                data_type=DataType.parse(data_type),
            )
            self._registry.register(connection)
            self._outgoing[source][connection.id] = target
            self._incoming[target][connection.id] = source
            dirtied = self._propagate_dirty(to_node)
            self._recompute_order()
            self._log(
                f"add_connection {connection.id} {from_node}[{from_port}] -> {to_node}[{to_port}] {connection.data_type}"
            )
            events: List[GraphEvent] = [ConnectionAdded(connection)]
            if dirtied:
                events.append(NodesDirtied(frozenset(dirtied)))
            self._notify(events)
            return connection.id

    def remove_connection(self, connection_id: ConnectionId) -> Connection:
        """Remove a connection and mark its former target dirty."""

        with self._lock:
            connection = self._registry.remove(connection_id)
            source = self._positions[connection.from_node]
            target = self._positions[connection.to_node]
            self._outgoing[source].pop(connection_id, None)
            self._incoming[target].pop(connection_id, None)
            dirtied = self._propagate_dirty(connection.to_node)
            self._recompute_order()
            self._log(f"remove_connection {connection_id}")
            events: List[GraphEvent] = [ConnectionRemoved(connection)]
            if dirtied:
                events.append(NodesDirtied(frozenset(dirtied)))
            self._notify(events)
            return connection

    # ------------------------------------------------------------------
    # Dirty state

    def mark_dirty(self, node_id: NodeId) -> Tuple[NodeId, ...]:
        """Mark ``node_id`` (and its descendants) stale, e.g. after a parameter edit."""

        with self._lock:
            self._slot_of(node_id)
            dirtied = self._propagate_dirty(node_id)
            if dirtied:
                self._notify([NodesDirtied(frozenset(dirtied))])
            return tuple(dirtied)

    def clear_dirty(self, node_id: NodeId) -> None:
        """Mark ``node_id`` clean. Does not cascade; unknown ids are ignored."""

        with self._lock:
            self._dirty.clear(node_id)

    def is_dirty(self, node_id: NodeId) -> bool:
        with self._lock:
            return node_id in self._dirty

    def dirty_nodes(self) -> FrozenSet[NodeId]:
        with self._lock:
            return self._dirty.snapshot()  # type: ignore[return-value]

    def dirty_in_order(self) -> Tuple[NodeId, ...]:
        """Dirty nodes in evaluation order: what a processing cycle must recompute."""

        with self._lock:
            return tuple(node for node in self.evaluation_order() if node in self._dirty)

    # ------------------------------------------------------------------
    # Read API

    def evaluation_order(self) -> Tuple[NodeId, ...]:
        with self._lock:
            slots = self._slots
            return tuple(slots[slot] for slot in self._scheduler.order)  # type: ignore[misc]

    def position(self, node_id: NodeId) -> int | None:
        """Index of ``node_id`` in the current evaluation order."""

        with self._lock:
            slot = self._positions.get(node_id)
            if slot is None:
                return None
            return self._scheduler.position(slot)

    def has_node(self, node_id: NodeId) -> bool:
        with self._lock:
            return node_id in self._positions

    def nodes(self) -> Tuple[NodeId, ...]:
        """Live node ids in insertion order."""

        with self._lock:
            return tuple(self._positions)

    def connection(self, connection_id: ConnectionId) -> Connection:
        with self._lock:
            connection = self._registry.get(connection_id)
            if connection is None:
                raise ConnectionNotFound(connection_id)
            return connection

    def connections(self) -> Tuple[Connection, ...]:
        with self._lock:
            return self._registry.connections()

    def connections_of(self, node_id: NodeId) -> Tuple[Connection, ...]:
        with self._lock:
            return self._registry.touching(node_id)

    def inputs_of(self, node_id: NodeId) -> Tuple[Connection, ...]:
        with self._lock:
            slot = self._positions.get(node_id)
            if slot is None:
                return ()
            return tuple(self._registry.get(cid) for cid in self._incoming[slot])  # type: ignore[misc]

    def outputs_of(self, node_id: NodeId) -> Tuple[Connection, ...]:
        with self._lock:
            slot = self._positions.get(node_id)
            if slot is None:
                return ()
            return tuple(self._registry.get(cid) for cid in self._outgoing[slot])  # type: ignore[misc]

    def snapshot(self) -> GraphSnapshot:
        with self._lock:
            return GraphSnapshot(
                order=self.evaluation_order(),
                dirty=self.dirty_nodes(),
                connections=self._registry.connections(),
            )

    def subscribe(self, listener: Callable[[GraphEvent], None]) -> Callable[[], None]:
        """Register a change listener; returns a callable that unsubscribes it."""

        with self._lock:
            return self._events.subscribe(listener)

    @property
    def node_count(self) -> int:
        with self._lock:
            return len(self._positions)

    @property
    def connection_count(self) -> int:
        with self._lock:
            return len(self._registry)

    def __contains__(self, node_id: object) -> bool:
        return self.has_node(node_id)  # type: ignore[arg-type]

    def __len__(self) -> int:
        return self.node_count


__all__ = ["GraphSnapshot", "NodeGraph"]
