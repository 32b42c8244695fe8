"""Command line entrypoint for the mock cluster generator."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional

from .config import Config
from .exporter import load_registry, run_from_config
from .manifests import RENDERERS, render
from .snapshot import get_snapshot
from .timeseries import TIME_RANGES

RENDER_COLLECTIONS = {
    "configmap": "config_maps",
    "secret": "secrets",
    "ingress": "ingress_rules",
    "service": "services",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="k8s-mock-cluster",
        description="Generate deterministic mock Kubernetes cluster data for dashboards.",
    )
    parser.add_argument(
        "--cluster",
        type=str,
        default=None,
        help="Cluster profile id (default from CLUSTER_ID env, unknown ids use the default profile).",
    )
    parser.add_argument(
        "--range",
        dest="time_range",
        choices=sorted(TIME_RANGES),
        default=None,
        help="Time range of the utilisation series (default from TIME_RANGE env).",
    )
    parser.add_argument(
        "--profiles",
        type=str,
        default=None,
        help="Path to a YAML profile document (default: bundled profiles).",
    )
    parser.add_argument(
        "--list-clusters",
        action="store_true",
        help="Print the known cluster ids and exit.",
    )
    parser.add_argument(
        "--snapshot",
        action="store_true",
        help="Print one snapshot as JSON and exit.",
    )
    parser.add_argument(
        "--render",
        type=str,
        default=None,
        metavar="KIND/NAME",
        help=f"Print the YAML manifest of one object and exit ({', '.join(sorted(RENDERERS))}).",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=None,
        help="Number of refresh iterations to run before exiting (default: run forever).",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run exactly one refresh cycle and exit.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Override the metrics HTTP port (default from METRICS_PORT env).",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Override the metrics HTTP host (default from METRICS_HOST env).",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Override the refresh interval in seconds.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Set an explicit log level (default from LOG_LEVEL env).",
    )
    return parser


def _configure_logging(level: str) -> None:
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _render(parser: argparse.ArgumentParser, target: str, config: Config) -> str:
    kind, _, name = target.partition("/")
    kind = kind.lower()
    if kind not in RENDER_COLLECTIONS or not name:
        parser.error(f"--render expects KIND/NAME with KIND one of {', '.join(sorted(RENDERERS))}")
    snapshot = get_snapshot(
        config.cluster_id, config.time_range, registry=load_registry(config), event_count=0
    )
    for entity in getattr(snapshot, RENDER_COLLECTIONS[kind]):
        if entity.name == name:
            return render(kind, entity)
    parser.error(f"No {kind} named {name!r} in cluster {snapshot.cluster_id}")
    return ""  # pragma: no cover - parser.error exits


def main(argv: Optional[list[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    config = Config.from_env()

    if args.cluster is not None:
        config.cluster_id = args.cluster
    if args.time_range is not None:
        config.time_range = args.time_range
    if args.profiles is not None:
        config.profiles_path = args.profiles
    if args.port is not None:
        config.metrics_port = args.port
    if args.host is not None:
        config.metrics_host = args.host
    if args.interval is not None:
        config.refresh_interval_seconds = args.interval

    log_level = args.log_level or config.log_level
    _configure_logging(log_level)

    if args.list_clusters:
        for cluster_id in load_registry(config).cluster_ids():
            sys.stdout.write(f"{cluster_id}\n")
        return
    if args.render:
        sys.stdout.write(_render(parser, args.render, config))
        return
    if args.snapshot:
        snapshot = get_snapshot(
            config.cluster_id,
            config.time_range,
            registry=load_registry(config),
            event_count=config.event_count,
        )
        json.dump(snapshot.to_dict(), sys.stdout, indent=2)
        sys.stdout.write("\n")
        return

    iterations = args.iterations
    if args.once:
        iterations = 1 if iterations is None else max(1, iterations)

    try:
        run_from_config(config, iterations=iterations)
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Received interrupt, shutting down.")


if __name__ == "__main__":  # pragma: no cover - module entrypoint
    main()
