import pytest

from vjgraph.errors import GraphInvariantError
from vjgraph.scheduler import TopologicalScheduler, kahn_order


def successors_from(edges):
    def _successors(node):
        return edges.get(node, [])

    return _successors


def test_kahn_order_respects_edges() -> None:
    edges = {"osc": ["filter"], "lfo": ["filter"], "filter": ["out"], "out": []}
    order = kahn_order(["out", "filter", "lfo", "osc"], successors_from(edges))
    assert order.index("osc") < order.index("filter") < order.index("out")
    assert order.index("lfo") < order.index("filter")
    assert sorted(order) == sorted(edges)


def test_ready_vertices_leave_in_input_order() -> None:
    assert kahn_order([3, 1, 2], successors_from({})) == [3, 1, 2]


def test_key_orders_ready_vertices() -> None:
    assert kahn_order([3, 1, 2], successors_from({}), key=lambda v: v) == [1, 2, 3]
    edges = {5: [1]}
    assert kahn_order([1, 5, 3], successors_from(edges), key=lambda v: v) == [3, 5, 1]


def test_parallel_edges_count_towards_in_degree() -> None:
    edges = {"a": ["b", "b"], "c": ["b"]}
    assert kahn_order(["a", "b", "c"], successors_from(edges)) == ["a", "c", "b"]


def test_cycle_members_are_omitted() -> None:
    edges = {"a": ["b"], "b": ["a"]}
    assert kahn_order(["a", "b", "c"], successors_from(edges)) == ["c"]


def test_scheduler_reports_incomplete_order() -> None:
    scheduler = TopologicalScheduler()
    edges = {"a": ["b"], "b": ["a"]}
    with pytest.raises(GraphInvariantError):
        scheduler.recompute(["a", "b", "c"], successors_from(edges))
    assert scheduler.order == ("c",)
    assert scheduler.position("c") == 0
    assert scheduler.position("a") is None


def test_scheduler_ignores_key_for_insertion_policy() -> None:
    scheduler = TopologicalScheduler("insertion")
    assert scheduler.recompute([2, 1], successors_from({}), key=lambda v: v) == (2, 1)
    scheduler = TopologicalScheduler("id")
    assert scheduler.recompute([2, 1], successors_from({}), key=lambda v: v) == (1, 2)


def test_unknown_tie_break_is_rejected() -> None:
    with pytest.raises(ValueError):
        TopologicalScheduler("random")
