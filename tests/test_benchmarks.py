from __future__ import annotations

import numpy as np

from vjgraph import benchmarks


def test_random_layered_edges_are_forward_only() -> None:
    edges = benchmarks.random_layered_edges(np.random.default_rng(7), 50)
    assert edges
    assert all(source < target for source, target in edges)
    assert len(edges) == len(set(edges))


def test_run_graph_benchmarks_smoke() -> None:
    frame = benchmarks.run_graph_benchmarks([10, 20], iterations=1, seed=123)
    assert set(frame["operation"]) == set(benchmarks.OPERATIONS)
    assert set(frame["nodes"]) == {10, 20}
    assert (frame["mean_seconds"] >= 0.0).all()
    assert (frame["max_seconds"] >= frame["min_seconds"]).all()

    table = benchmarks.summarise(frame)
    assert len(table) == 2 * len(benchmarks.OPERATIONS)


def test_main_prints_table(capsys) -> None:
    exit_code = benchmarks.main(["--sizes", "8", "--seed", "1"])
    assert exit_code == 0
    out = capsys.readouterr().out
    assert "add_connection" in out
    assert "mean_ms" in out
