"""Reachability checks that keep the graph acyclic before an edge is committed."""

from __future__ import annotations

from typing import Callable, Dict, Hashable, Iterable, List, TypeVar

V = TypeVar("V", bound=Hashable)

SuccessorFn = Callable[[V], Iterable[V]]


def find_path(start: V, goal: V, successors: SuccessorFn) -> List[V] | None:
    """Return a directed path ``start -> ... -> goal`` or ``None``.

    Depth-first with an explicit stack so deep chains never hit the
    interpreter recursion limit.
    """

    if start == goal:
        return [start]
    parents: Dict[V, V | None] = {start: None}
    stack: List[V] = [start]
    while stack:
        current = stack.pop()
        for neighbour in successors(current):
            if neighbour in parents:
                continue
            parents[neighbour] = current
            if neighbour == goal:
                path: List[V] = [neighbour]
                step = parents[neighbour]
                while step is not None:
                    path.append(step)
                    step = parents[step]
                path.reverse()
                return path
            stack.append(neighbour)
    return None


__all__ = ["find_path"]
