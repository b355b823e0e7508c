"""Port-aware scene built on :class:`NodeGraph`, with JSON persistence.

A scene owns what the engine deliberately does not: node types, display
names and parameters. Saving records enough (ids, type names, port indices
and data types) to rebuild an equivalent graph by replaying ``add_node`` and
``add_connection``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Tuple

from .config import EngineConfig, GraphConfig
from .connections import Connection
from .datatypes import DataType
from .errors import NodeNotFound
from .graph import NodeGraph
from .ids import ConnectionId, NodeId, new_node_id
from .node_types import NodeTypeDefinition, NodeTypeRegistry, check_port_compatibility, default_registry

SCENE_FORMAT_VERSION = 1


@dataclass(slots=True)
class SceneNode:
    id: NodeId
    type: str
    name: str
    params: Dict[str, Any] = field(default_factory=dict)


class Scene:
    """Typed nodes and validated connections on top of an engine graph."""

    def __init__(
        self,
        registry: NodeTypeRegistry | None = None,
        graph: NodeGraph | None = None,
        *,
        engine: EngineConfig | None = None,
    ) -> None:
        self.registry = registry if registry is not None else default_registry()
        self.graph = graph if graph is not None else NodeGraph(engine)
        self._nodes: Dict[NodeId, SceneNode] = {}
        # Per-type counters for generated names; never decremented.
        self._name_counters: Dict[str, int] = {}

    @classmethod
    def from_config(
        cls,
        config: GraphConfig,
        *,
        engine: EngineConfig | None = None,
        registry: NodeTypeRegistry | None = None,
    ) -> "Scene":
        scene = cls(registry, engine=engine)
        names: Dict[str, NodeId] = {}
        for node_cfg in config.nodes:
            names[node_cfg.name] = scene.create_node(node_cfg.type, node_cfg.params, name=node_cfg.name)
        for conn_cfg in config.connections:
            scene.connect(
                names[conn_cfg.source],
                conn_cfg.source_port,
                names[conn_cfg.target],
                conn_cfg.target_port,
            )
        return scene

    # ------------------------------------------------------------------
    # Editing

    def create_node(
        self,
        type_name: str,
        params: Mapping[str, Any] | None = None,
        *,
        name: str | None = None,
        node_id: NodeId | None = None,
    ) -> NodeId:
        self.registry.require(type_name)
        node_id = node_id if node_id is not None else new_node_id()
        self.graph.add_node(node_id)
        self._nodes[node_id] = SceneNode(
            id=node_id,
            type=type_name,
            name=name or self._default_name(type_name),
            params=dict(params or {}),
        )
        return node_id

    def _default_name(self, type_name: str) -> str:
        while True:
            count = self._name_counters.get(type_name, 0) + 1
            self._name_counters[type_name] = count
            candidate = f"{type_name}_{count}"
            if self.find(candidate) is None:
                return candidate

    def delete_node(self, node_id: NodeId) -> Tuple[Connection, ...]:
        removed = self.graph.remove_node(node_id)
        del self._nodes[node_id]
        return removed

    def connect(self, from_node: NodeId, from_port: int, to_node: NodeId, to_port: int) -> ConnectionId:
        """Validate ports against the node types, then add the connection."""

        data_type = check_port_compatibility(
            self.definition(from_node), from_port, self.definition(to_node), to_port
        )
        return self.graph.add_connection(from_node, from_port, to_node, to_port, data_type)

    def disconnect(self, connection_id: ConnectionId) -> Connection:
        return self.graph.remove_connection(connection_id)

    def set_parameter(self, node_id: NodeId, name: str, value: Any) -> None:
        """Store a parameter value and mark the node (and its downstream) dirty."""

        self.node(node_id).params[name] = value
        self.graph.mark_dirty(node_id)

    # ------------------------------------------------------------------
    # Lookup

    def node(self, node_id: NodeId) -> SceneNode:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NodeNotFound(node_id) from None

    def definition(self, node_id: NodeId) -> NodeTypeDefinition:
        return self.registry.require(self.node(node_id).type)

    def find(self, name: str) -> SceneNode | None:
        for node in self._nodes.values():
            if node.name == name:
                return node
        return None

    def nodes(self) -> Tuple[SceneNode, ...]:
        return tuple(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    # ------------------------------------------------------------------
    # Persistence

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": SCENE_FORMAT_VERSION,
            "nodes": [
                {
                    "id": str(node.id),
                    "type": node.type,
                    "name": node.name,
                    "params": dict(node.params),
                }
                for node in self._nodes.values()
            ],
            "connections": [
                {
                    "from_node": str(conn.from_node),
                    "from_port": conn.from_port,
                    "to_node": str(conn.to_node),
                    "to_port": conn.to_port,
                    "data_type": conn.data_type.value,
                }
                for conn in self.graph.connections()
            ],
        }

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        *,
        registry: NodeTypeRegistry | None = None,
        engine: EngineConfig | None = None,
    ) -> "Scene":
        """Rebuild a scene by replaying its nodes then its connections.

        Node ids are preserved; connection ids are freshly allocated. Stored
        data types are checked against what the port declarations produce.
        """

        version = int(data.get("version", SCENE_FORMAT_VERSION))
        if version != SCENE_FORMAT_VERSION:
            raise ValueError(f"Unsupported scene format version {version}")
        scene = cls(registry, engine=engine)
        for item in data.get("nodes", []):
            scene.create_node(
                str(item["type"]),
                item.get("params") or {},
                name=item.get("name"),
                node_id=NodeId.parse(item["id"]),
            )
        for item in data.get("connections", []):
            from_node = NodeId.parse(item["from_node"])
            to_node = NodeId.parse(item["to_node"])
            connection_id = scene.connect(from_node, int(item["from_port"]), to_node, int(item["to_port"]))
            stored = item.get("data_type")
            if stored is not None:
                carried = scene.graph.connection(connection_id).data_type
                if DataType.parse(stored) != carried:
                    raise ValueError(
                        f"Scene connection {item['from_node']} -> {item['to_node']} stores data type "
                        f"'{stored}' but the ports carry '{carried}'"
                    )
        return scene

    def save(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as fh:
                json.dump(self.to_dict(), fh, indent=2)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
        os.replace(tmp, path)

    @classmethod
    def load(
        cls,
        path: str | Path,
        *,
        registry: NodeTypeRegistry | None = None,
        engine: EngineConfig | None = None,
    ) -> "Scene":
        with open(path, "r", encoding="utf-8") as fh:
            raw: MutableMapping[str, Any] = json.load(fh)
        return cls.from_dict(raw, registry=registry, engine=engine)


__all__ = ["SCENE_FORMAT_VERSION", "Scene", "SceneNode"]
