"""Serve the current snapshot as Prometheus metrics and refresh it periodically."""

from __future__ import annotations

import itertools
import logging
import time

from prometheus_client import CollectorRegistry, start_http_server

from .config import Config
from .metrics import MetricSet
from .profiles import ProfileRegistry
from .snapshot import DashboardSession

logger = logging.getLogger(__name__)


def load_registry(config: Config) -> ProfileRegistry:
    if config.profiles_path:
        return ProfileRegistry.from_file(config.profiles_path)
    return ProfileRegistry.default()


class DashboardExporter:
    """Keeps a :class:`DashboardSession` fresh and publishes it."""

    def __init__(
        self,
        config: Config,
        registry: CollectorRegistry | None = None,
        profiles: ProfileRegistry | None = None,
    ) -> None:
        self.config = config
        self.registry = registry or CollectorRegistry()
        self.metrics = MetricSet(self.registry)
        self.session = DashboardSession(
            registry=profiles or load_registry(config),
            cluster_id=config.cluster_id,
            time_range=config.time_range,
            event_count=config.event_count,
        )

    def update_metrics(self) -> None:
        snapshot = self.session.refresh()
        self.metrics.update(snapshot)

    def run(self, iterations: int | None = None) -> None:
        logger.info(
            "Starting dashboard exporter for %s (%s) on port %s",
            self.session.cluster_id,
            self.session.time_range,
            self.config.metrics_port,
        )
        start_http_server(self.config.metrics_port, addr=self.config.metrics_host, registry=self.registry)
        loop = itertools.count() if iterations is None else range(iterations)
        for iteration in loop:
            start = time.time()
            logger.debug("Refreshing snapshot iteration %s", iteration)
            self.update_metrics()
            if iterations is not None and iteration == iterations - 1:
                break
            elapsed = time.time() - start
            sleep_time = max(self.config.refresh_interval_seconds - elapsed, 0.0)
            if sleep_time > 0:
                time.sleep(sleep_time)


def run_from_config(config: Config, iterations: int | None = None) -> None:
    """Run the exporter with the provided configuration."""

    exporter = DashboardExporter(config)
    exporter.run(iterations=iterations)


__all__ = ["DashboardExporter", "load_registry", "run_from_config"]
