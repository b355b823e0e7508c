import pytest

from vjgraph.events import (
    ConnectionAdded,
    ConnectionRemoved,
    EventDispatcher,
    NodeAdded,
    NodeRemoved,
    NodesDirtied,
)
from vjgraph.errors import CycleDetected
from vjgraph.graph import NodeGraph
from vjgraph.ids import new_node_id


def test_mutations_publish_events_in_order() -> None:
    graph = NodeGraph()
    received = []
    graph.subscribe(received.append)

    a, b = new_node_id(), new_node_id()
    graph.add_node(a)
    graph.add_node(b)
    conn_id = graph.add_connection(a, 0, b, 0)
    graph.remove_node(a)

    kinds = [type(event) for event in received]
    assert kinds == [
        NodeAdded,
        NodesDirtied,
        NodeAdded,
        NodesDirtied,
        ConnectionAdded,
        NodeRemoved,
        ConnectionRemoved,
    ]
    assert received[0].node_id == a
    assert received[1].nodes == frozenset({a})
    assert received[4].connection.id == conn_id
    assert received[5].connections[0].id == conn_id


def test_rejected_mutation_publishes_nothing() -> None:
    graph = NodeGraph()
    a = new_node_id()
    graph.add_node(a)
    received = []
    graph.subscribe(received.append)
    with pytest.raises(CycleDetected):
        graph.add_connection(a, 0, a, 0)
    assert received == []


def test_listener_sees_committed_state() -> None:
    graph = NodeGraph()
    seen_orders = []

    def listener(event) -> None:
        if isinstance(event, ConnectionAdded):
            seen_orders.append(graph.evaluation_order())

    graph.subscribe(listener)
    a, b = new_node_id(), new_node_id()
    graph.add_node(b)
    graph.add_node(a)
    graph.add_connection(a, 0, b, 0)
    assert seen_orders == [(a, b)]


def test_unsubscribe_stops_delivery() -> None:
    graph = NodeGraph()
    received = []
    unsubscribe = graph.subscribe(received.append)
    graph.add_node(new_node_id())
    unsubscribe()
    unsubscribe()
    graph.add_node(new_node_id())
    assert len(received) == 2


def test_mark_dirty_reports_only_new_nodes() -> None:
    graph = NodeGraph()
    a = new_node_id()
    graph.add_node(a)
    received = []
    graph.subscribe(received.append)
    graph.mark_dirty(a)
    assert received == []
    graph.clear_dirty(a)
    graph.mark_dirty(a)
    assert received == [NodesDirtied(frozenset({a}))]


def test_failing_listener_does_not_break_the_mutation(tmp_path) -> None:
    from vjgraph import diagnostics

    graph = NodeGraph()
    a, b = new_node_id(), new_node_id()
    graph.add_node(a)
    graph.add_node(b)
    graph.clear_dirty(b)

    def broken(event) -> None:
        if isinstance(event, (ConnectionAdded, NodeRemoved)):
            raise RuntimeError("listener exploded")

    received = []
    graph.subscribe(broken)
    graph.subscribe(received.append)
    log_path = tmp_path / "events.log"
    diagnostics.enable_graph_logging(True, log_path)
    try:
        conn_id = graph.add_connection(a, 0, b, 0)
        removed = graph.remove_node(a)
    finally:
        diagnostics.enable_graph_logging(False, diagnostics.DEFAULT_LOG_PATH)

    assert graph.connection_count == 0
    assert [conn.id for conn in removed] == [conn_id]
    assert [type(event) for event in received] == [
        ConnectionAdded,
        NodesDirtied,
        NodeRemoved,
        ConnectionRemoved,
    ]
    assert log_path.read_text().count("listener exploded") == 2


def test_dispatcher_counts_listener_failures() -> None:
    dispatcher = EventDispatcher()
    dispatcher.subscribe(lambda event: None)
    dispatcher.subscribe(lambda event: 1 / 0)
    assert dispatcher.emit(NodeAdded(new_node_id())) == 1
