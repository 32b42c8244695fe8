"""Assemble complete snapshots and track the one currently on display."""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timezone
from typing import Optional

from .entities import Snapshot
from .events import DEFAULT_EVENT_COUNT, generate_alerts, generate_events
from .generator import (
    generate_config_maps,
    generate_deployments,
    generate_ingress_rules,
    generate_namespace_usage,
    generate_nodes,
    generate_pods,
    generate_secrets,
    generate_services,
)
from .profiles import ProfileRegistry
from .random_source import RandomSource
from .stats import aggregate
from .timeseries import DEFAULT_TIME_RANGE, generate_time_series, resolve_time_range

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_snapshot(
    cluster_id: Optional[str],
    time_range: str = DEFAULT_TIME_RANGE,
    registry: Optional[ProfileRegistry] = None,
    now: Optional[datetime] = None,
    event_count: int = DEFAULT_EVENT_COUNT,
) -> Snapshot:
    """Run one full generation pass for ``cluster_id`` and ``time_range``."""

    registry = registry if registry is not None else ProfileRegistry.default()
    now = now or _utcnow()
    profile = registry.resolve(cluster_id)
    time_range = resolve_time_range(time_range)

    nodes = generate_nodes(profile, RandomSource.derive(profile.seed, "nodes"), now)
    deployments = generate_deployments(profile, RandomSource.derive(profile.seed, "deployments"), now)
    pods = generate_pods(deployments, profile, RandomSource.derive(profile.seed, "pods"), now)
    services = generate_services(deployments, RandomSource.derive(profile.seed, "services"))
    events = generate_events(profile, RandomSource.derive(profile.seed, "events"), now, count=event_count)

    snapshot = Snapshot(
        cluster_id=profile.cluster_id,
        time_range=time_range,
        generated_at=now,
        nodes=nodes,
        deployments=deployments,
        pods=pods,
        services=services,
        config_maps=generate_config_maps(profile, now),
        secrets=generate_secrets(profile, now),
        ingress_rules=generate_ingress_rules(profile),
        time_series=generate_time_series(profile, time_range, now),
        events=events,
        alerts=generate_alerts(profile, now),
        stats=aggregate(nodes, pods, deployments, profile),
        namespace_usage=generate_namespace_usage(profile),
    )
    logger.debug(
        "Generated snapshot for %s (%s): %s nodes, %s deployments, %s pods",
        profile.cluster_id,
        time_range,
        len(nodes),
        len(deployments),
        len(pods),
    )
    return snapshot


class DashboardSession:
    """Holds the snapshot for the selected cluster and time range.

    Selection changes rebuild the whole snapshot; :meth:`refresh` only
    re-runs the time series, alerts and stats. Results computed elsewhere are
    applied through :meth:`begin_request` / :meth:`complete`, where only the
    most recently issued request may replace the current snapshot.
    """

    def __init__(
        self,
        registry: Optional[ProfileRegistry] = None,
        cluster_id: Optional[str] = None,
        time_range: str = DEFAULT_TIME_RANGE,
        event_count: int = DEFAULT_EVENT_COUNT,
    ) -> None:
        self.registry = registry if registry is not None else ProfileRegistry.default()
        self.cluster_id = self.registry.resolve(cluster_id).cluster_id
        self.time_range = resolve_time_range(time_range)
        self.event_count = event_count
        self.snapshot: Optional[Snapshot] = None
        self._issued = 0
        self._applied = 0

    def begin_request(self) -> int:
        """Issue a sequence number for a regeneration about to start."""

        self._issued += 1
        return self._issued

    def complete(self, sequence: int, snapshot: Snapshot) -> bool:
        """Apply ``snapshot`` unless a newer request has been issued since."""

        if sequence != self._issued or sequence <= self._applied:
            logger.debug("Discarding superseded snapshot %s (latest %s)", sequence, self._issued)
            return False
        self._applied = sequence
        self.snapshot = snapshot
        self.cluster_id = snapshot.cluster_id
        self.time_range = snapshot.time_range
        return True

    def select(
        self,
        cluster_id: Optional[str] = None,
        time_range: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Snapshot:
        """Switch cluster and/or time range and regenerate everything."""

        sequence = self.begin_request()
        snapshot = get_snapshot(
            cluster_id if cluster_id is not None else self.cluster_id,
            time_range if time_range is not None else self.time_range,
            registry=self.registry,
            now=now,
            event_count=self.event_count,
        )
        self.complete(sequence, snapshot)
        return snapshot

    def refresh(self, now: Optional[datetime] = None) -> Snapshot:
        """Periodic update of time series, alerts and stats."""

        if self.snapshot is None:
            return self.select(now=now)
        sequence = self.begin_request()
        now = now or _utcnow()
        profile = self.registry.resolve(self.cluster_id)
        current = self.snapshot
        snapshot = dataclasses.replace(
            current,
            generated_at=now,
            time_series=generate_time_series(profile, self.time_range, now),
            alerts=generate_alerts(profile, now),
            stats=aggregate(current.nodes, current.pods, current.deployments, profile),
        )
        self.complete(sequence, snapshot)
        return snapshot


__all__ = ["DashboardSession", "get_snapshot"]
