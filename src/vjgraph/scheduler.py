"""Evaluation-order computation for the node graph."""

from __future__ import annotations

import heapq
from collections import deque
from typing import Any, Callable, Deque, Dict, Hashable, Iterable, List, Sequence, Tuple, TypeVar

from .errors import GraphInvariantError

V = TypeVar("V", bound=Hashable)

TIE_BREAKS = ("insertion", "id")


def kahn_order(
    vertices: Sequence[V],
    successors: Callable[[V], Iterable[V]],
    *,
    key: Callable[[V], Any] | None = None,
) -> List[V]:
    """Return a topological order of ``vertices`` using Kahn's algorithm.

    ``successors`` yields one entry per edge, so parallel edges are counted in
    the in-degree and released one at a time. Ready vertices leave in
    ``vertices`` order unless ``key`` is supplied, in which case the smallest
    key goes first. Vertices on a cycle are omitted from the result.
    """

    incoming: Dict[V, int] = {vertex: 0 for vertex in vertices}
    for vertex in vertices:
        for successor in successors(vertex):
            incoming[successor] += 1
    order: List[V] = []
    if key is None:
        queue: Deque[V] = deque(vertex for vertex in vertices if incoming[vertex] == 0)
        while queue:
            vertex = queue.popleft()
            order.append(vertex)
            for successor in successors(vertex):
                incoming[successor] -= 1
                if incoming[successor] == 0:
                    queue.append(successor)
        return order
    # Sequence number keeps heap entries comparable when keys tie.
    heap: List[Tuple[Any, int, V]] = []
    for seq, vertex in enumerate(vertices):
        if incoming[vertex] == 0:
            heap.append((key(vertex), seq, vertex))
    heapq.heapify(heap)
    seq = len(vertices)
    while heap:
        _, _, vertex = heapq.heappop(heap)
        order.append(vertex)
        for successor in successors(vertex):
            incoming[successor] -= 1
            if incoming[successor] == 0:
                heapq.heappush(heap, (key(successor), seq, successor))
                seq += 1
    return order


class TopologicalScheduler:
    """Holds the most recent full evaluation order and recomputes it on demand."""

    def __init__(self, tie_break: str = "insertion") -> None:
        if tie_break not in TIE_BREAKS:
            raise ValueError(f"Unknown tie-break policy '{tie_break}' (expected one of {TIE_BREAKS})")
        self.tie_break = tie_break
        self._order: Tuple[Hashable, ...] = ()
        self._positions: Dict[Hashable, int] = {}

    @property
    def order(self) -> Tuple[Hashable, ...]:
        return self._order

    def position(self, vertex: Hashable) -> int | None:
        return self._positions.get(vertex)

    def recompute(
        self,
        vertices: Sequence[V],
        successors: Callable[[V], Iterable[V]],
        *,
        key: Callable[[V], Any] | None = None,
    ) -> Tuple[V, ...]:
        """Sort ``vertices`` from scratch and store the result.

        The new order is stored even when incomplete so callers running in
        lenient mode keep a usable (if partial) schedule. A missing vertex is
        reported with :class:`GraphInvariantError` afterwards.
        """

        order = tuple(kahn_order(vertices, successors, key=key if self.tie_break == "id" else None))
        self._order = order
        self._positions = {vertex: index for index, vertex in enumerate(order)}
        if len(order) != len(vertices):
            missing = len(vertices) - len(order)
            raise GraphInvariantError(
                f"Topological sort emitted {len(order)} of {len(vertices)} vertices ({missing} left on a cycle)"
            )
        return order


__all__ = ["TIE_BREAKS", "TopologicalScheduler", "kahn_order"]
