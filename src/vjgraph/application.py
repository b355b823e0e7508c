"""High level application orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List

from .config import AppConfig, load_configuration
from .ids import NodeId
from .scene import Scene


@dataclass(slots=True)
class GraphApplication:
    """Runtime container for a configured scene and its graph engine.

    The application does not know how nodes process data. Once per
    processing cycle it hands each stale node, in evaluation order, to an
    evaluator supplied by the host and marks it clean afterwards.
    """

    config: AppConfig
    scene: Scene

    @classmethod
    def from_config(cls, config: AppConfig) -> "GraphApplication":
        scene = Scene.from_config(config.graph, engine=config.engine)
        return cls(config=config, scene=scene)

    @classmethod
    def from_file(cls, path: str) -> "GraphApplication":
        return cls.from_config(load_configuration(path))

    def process_cycle(self, evaluate: Callable[[NodeId], None]) -> List[NodeId]:
        """Recompute every dirty node in evaluation order.

        Each node is cleared only after ``evaluate`` returns. If it raises,
        that node and the remaining ones stay dirty and the exception
        propagates to the caller.

        Returns
        -------
        list of NodeId
            The nodes that were evaluated, in order.
        """

        graph = self.scene.graph
        processed: List[NodeId] = []
        for node_id in graph.dirty_in_order():
            evaluate(node_id)
            graph.clear_dirty(node_id)
            processed.append(node_id)
        return processed

    def summary(self) -> str:
        """Return a human-readable description of the scene and its schedule."""

        graph = self.scene.graph
        lines = [
            f"Nodes: {graph.node_count}",
            f"Connections: {graph.connection_count}",
            f"Tie-break: {graph.config.tie_break}",
            f"Dirty: {len(graph.dirty_nodes())}",
            "Evaluation order:",
        ]
        for node_id in graph.evaluation_order():
            node = self.scene.node(node_id)
            marker = "*" if graph.is_dirty(node_id) else " "
            lines.append(f" {marker} {node.name} ({node.type})")
        return "\n".join(lines)


__all__ = ["GraphApplication"]
