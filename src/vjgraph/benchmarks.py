"""Timing harness for structural mutations on synthetic graphs.

Every structural change re-sorts the whole graph, so the cost of
``add_connection`` and ``remove_node`` grows with graph size. This module
builds random layered DAGs of increasing size and reports per-call latency
so that cost can be checked for graphs in the low thousands of nodes.
"""

from __future__ import annotations

import argparse
import time
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np
import pandas as pd

from .config import EngineConfig
from .graph import NodeGraph
from .ids import NodeId, new_node_id

OPERATIONS = ("add_node", "add_connection", "mark_dirty", "remove_node")


@dataclass(slots=True)
class BenchmarkStats:
    """Simple statistics captured for each (size, operation) pair."""

    calls: int
    mean_seconds: float
    stdev_seconds: float
    min_seconds: float
    max_seconds: float


def _stats(samples: Sequence[float]) -> BenchmarkStats:
    if not samples:
        return BenchmarkStats(0, float("nan"), float("nan"), float("nan"), float("nan"))
    data = np.asarray(samples, dtype=float)
    return BenchmarkStats(
        calls=int(data.size),
        mean_seconds=float(data.mean()),
        stdev_seconds=float(data.std()),
        min_seconds=float(data.min()),
        max_seconds=float(data.max()),
    )


def random_layered_edges(
    rng: np.random.Generator,
    nodes: int,
    *,
    fan_in: int = 2,
    window: int = 32,
) -> List[Tuple[int, int]]:
    """Return edges ``(i, j)`` with ``i < j`` so the result is always acyclic.

    Each node ``j`` draws up to ``fan_in`` sources from the ``window`` nodes
    before it, which keeps chains long enough to exercise propagation.
    """

    edges: List[Tuple[int, int]] = []
    for target in range(1, nodes):
        low = max(0, target - window)
        count = min(fan_in, target - low)
        sources = rng.choice(np.arange(low, target), size=count, replace=False)
        edges.extend((int(source), target) for source in np.sort(sources))
    return edges


def _timed(fn, *args) -> float:
    start = time.perf_counter()
    fn(*args)
    return time.perf_counter() - start


def benchmark_graph(
    nodes: int,
    *,
    rng: np.random.Generator,
    removals: int = 16,
    config: EngineConfig | None = None,
) -> dict[str, BenchmarkStats]:
    """Build one synthetic graph of ``nodes`` vertices and time each operation."""

    graph = NodeGraph(config)
    ids: List[NodeId] = [new_node_id() for _ in range(nodes)]
    samples: dict[str, List[float]] = {name: [] for name in OPERATIONS}
    for node_id in ids:
        samples["add_node"].append(_timed(graph.add_node, node_id))
    for source, target in random_layered_edges(rng, nodes):
        samples["add_connection"].append(_timed(graph.add_connection, ids[source], 0, ids[target], 0))
    for node_id in ids:
        graph.clear_dirty(node_id)
    roots = ids[: max(1, min(8, nodes))]
    for node_id in roots:
        samples["mark_dirty"].append(_timed(graph.mark_dirty, node_id))
    if nodes:
        picks = rng.choice(nodes, size=min(removals, nodes), replace=False)
        for index in picks:
            samples["remove_node"].append(_timed(graph.remove_node, ids[int(index)]))
    return {name: _stats(values) for name, values in samples.items()}


def run_graph_benchmarks(
    sizes: Iterable[int],
    *,
    iterations: int = 1,
    seed: int = 0,
    config: EngineConfig | None = None,
) -> pd.DataFrame:
    """Benchmark every size ``iterations`` times; one row per size/operation/iteration."""

    rng = np.random.default_rng(seed)
    records = []
    for size in sizes:
        for iteration in range(max(1, int(iterations))):
            results = benchmark_graph(int(size), rng=rng, config=config)
            for operation, stats in results.items():
                records.append(
                    {
                        "nodes": int(size),
                        "iteration": iteration,
                        "operation": operation,
                        "calls": stats.calls,
                        "mean_seconds": stats.mean_seconds,
                        "stdev_seconds": stats.stdev_seconds,
                        "min_seconds": stats.min_seconds,
                        "max_seconds": stats.max_seconds,
                    }
                )
    return pd.DataFrame.from_records(
        records,
        columns=[
            "nodes",
            "iteration",
            "operation",
            "calls",
            "mean_seconds",
            "stdev_seconds",
            "min_seconds",
            "max_seconds",
        ],
    )


def summarise(frame: pd.DataFrame) -> pd.DataFrame:
    """Average the per-iteration rows into one row per size and operation."""

    if frame.empty:
        return frame
    return (
        frame.groupby(["nodes", "operation"], sort=True)[["mean_seconds", "max_seconds"]]
        .mean()
        .reset_index()
    )


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Benchmark structural mutations on synthetic DAGs")
    parser.add_argument(
        "--sizes",
        type=int,
        nargs="*",
        default=[100, 500, 1000, 2000],
        help="Node counts to benchmark",
    )
    parser.add_argument("--iterations", type=int, default=1, help="Graphs built per size")
    parser.add_argument("--seed", type=int, default=0, help="RNG seed for edge generation")
    parser.add_argument(
        "--tie-break",
        choices=("insertion", "id"),
        default="insertion",
        help="Scheduler tie-break policy",
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    frame = run_graph_benchmarks(
        args.sizes,
        iterations=args.iterations,
        seed=args.seed,
        config=EngineConfig(tie_break=args.tie_break),
    )
    table = summarise(frame)
    table["mean_ms"] = table["mean_seconds"] * 1e3
    table["max_ms"] = table["max_seconds"] * 1e3
    print(table[["nodes", "operation", "mean_ms", "max_ms"]].to_string(index=False))
    return 0


__all__ = [
    "BenchmarkStats",
    "OPERATIONS",
    "benchmark_graph",
    "main",
    "random_layered_edges",
    "run_graph_benchmarks",
    "summarise",
]


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    raise SystemExit(main())
