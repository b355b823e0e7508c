"""Stale-output tracking with forward propagation along edges."""

from __future__ import annotations

from collections import deque
from typing import Callable, Deque, FrozenSet, Hashable, Iterable, List, Set, TypeVar

V = TypeVar("V", bound=Hashable)


class DirtyTracker:
    """Set of nodes whose cached outputs must be recomputed.

    Marking is transitive along outgoing edges. Clearing is not: downstream
    nodes dirtied as a side effect keep their flag until cleared themselves.
    """

    def __init__(self) -> None:
        self._dirty: Set[Hashable] = set()

    def mark(self, node: V, successors: Callable[[V], Iterable[V]]) -> List[V]:
        """Mark ``node`` and everything downstream of it; return the newly dirtied nodes.

        The descendants of ``node`` are always walked, even when ``node`` was
        already dirty, because a clean descendant may sit behind a new edge or
        behind an earlier :meth:`clear`. Below the root the walk stops at
        nodes that were already dirty.
        """

        newly: List[V] = []
        if node not in self._dirty:
            self._dirty.add(node)
            newly.append(node)
        worklist: Deque[V] = deque([node])
        while worklist:
            current = worklist.popleft()
            for successor in successors(current):
                if successor in self._dirty:
                    continue
                self._dirty.add(successor)
                newly.append(successor)
                worklist.append(successor)
        return newly

    def clear(self, node: Hashable) -> bool:
        """Clear ``node``; return ``True`` if it was dirty."""

        if node in self._dirty:
            self._dirty.remove(node)
            return True
        return False

    def discard(self, node: Hashable) -> None:
        self._dirty.discard(node)

    def is_dirty(self, node: Hashable) -> bool:
        return node in self._dirty

    def snapshot(self) -> FrozenSet[Hashable]:
        return frozenset(self._dirty)

    def __contains__(self, node: object) -> bool:
        return node in self._dirty

    def __len__(self) -> int:
        return len(self._dirty)


__all__ = ["DirtyTracker"]
