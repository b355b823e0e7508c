import pytest

from vjgraph.application import GraphApplication
from vjgraph.config import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    ConnectionConfig,
    EngineConfig,
    GraphConfig,
    NodeConfig,
)


def simple_config() -> AppConfig:
    graph = GraphConfig(
        nodes=[
            NodeConfig(name="lfo", type="lfo", params={"rate": 0.5}),
            NodeConfig(name="noise", type="noise"),
            NodeConfig(name="blur", type="blur"),
            NodeConfig(name="screen", type="screen_output"),
        ],
        connections=[
            ConnectionConfig(source="lfo", target="noise", target_port=1),
            ConnectionConfig(source="noise", target="blur"),
            ConnectionConfig(source="blur", target="screen"),
        ],
    )
    return AppConfig(engine=EngineConfig(), graph=graph)


def names(app: GraphApplication, node_ids):
    return [app.scene.node(node_id).name for node_id in node_ids]


def test_from_config_builds_scene() -> None:
    app = GraphApplication.from_config(simple_config())
    assert names(app, app.scene.graph.evaluation_order()) == ["lfo", "noise", "blur", "screen"]
    assert app.scene.graph.connection_count == 3


def test_process_cycle_evaluates_dirty_nodes_in_order() -> None:
    app = GraphApplication.from_config(simple_config())
    calls = []
    processed = app.process_cycle(calls.append)
    assert names(app, calls) == ["lfo", "noise", "blur", "screen"]
    assert processed == calls
    assert app.scene.graph.dirty_nodes() == frozenset()

    assert app.process_cycle(calls.append) == []

    blur = app.scene.find("blur").id
    app.scene.set_parameter(blur, "radius", 8.0)
    assert names(app, app.process_cycle(lambda node_id: None)) == ["blur", "screen"]


def test_failed_evaluation_leaves_remaining_nodes_dirty() -> None:
    app = GraphApplication.from_config(simple_config())
    noise = app.scene.find("noise").id

    def evaluate(node_id) -> None:
        if node_id == noise:
            raise RuntimeError("shader compile failed")

    with pytest.raises(RuntimeError):
        app.process_cycle(evaluate)
    dirty = {app.scene.node(node_id).name for node_id in app.scene.graph.dirty_nodes()}
    assert dirty == {"noise", "blur", "screen"}


def test_summary_lists_nodes() -> None:
    app = GraphApplication.from_file(str(DEFAULT_CONFIG_PATH))
    summary = app.summary()
    assert "Evaluation order:" in summary
    assert "screen (screen_output)" in summary
    assert "Tie-break: insertion" in summary
