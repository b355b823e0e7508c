"""Command line entry point for inspecting and converting graph scenes."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from .application import GraphApplication
from .config import DEFAULT_CONFIG_PATH, AppConfig, load_configuration
from .diagnostics import enable_graph_logging
from .errors import GraphError
from .scene import Scene


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="vjgraph dataflow graph inspector")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to configuration file")
    parser.add_argument(
        "--scene",
        type=Path,
        help="Load a saved scene instead of building the configured graph",
    )
    parser.add_argument("--save", type=Path, help="Write the loaded scene to this path as JSON")
    parser.add_argument(
        "--order",
        action="store_true",
        help="Print only the evaluation order (one node name per line)",
    )
    parser.add_argument(
        "--tie-break",
        choices=("insertion", "id"),
        help="Override the scheduler tie-break policy from the configuration",
    )
    parser.add_argument(
        "--log",
        type=Path,
        help="Append graph mutation events to this log file",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.log:
        enable_graph_logging(True, args.log)

    try:
        config: AppConfig = load_configuration(args.config)
        if args.tie_break:
            config.engine.tie_break = args.tie_break
        if args.log:
            config.engine.log_mutations = True
        if args.scene:
            app = GraphApplication(config=config, scene=Scene.load(args.scene, engine=config.engine))
        else:
            app = GraphApplication.from_config(config)
    except (OSError, ValueError, TypeError, KeyError, GraphError) as exc:
        print(f"error: {exc}")
        return 1

    if args.order:
        for node_id in app.scene.graph.evaluation_order():
            print(app.scene.node(node_id).name)
    else:
        print(app.summary())

    if args.save:
        app.scene.save(args.save)
        print(f"Saved scene to {args.save}")
    return 0


__all__ = ["main", "build_parser"]
