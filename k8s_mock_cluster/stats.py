"""Cluster-wide summary statistics."""

from __future__ import annotations

from typing import Sequence

from .entities import (
    FAILED_POD_STATUSES,
    ClusterStats,
    Deployment,
    Node,
    NodeCounts,
    Pod,
    PodCounts,
    ResourceSummary,
    ResourceTotals,
)
from .profiles import ClusterProfile


def usage_percent(used: float, capacity: float) -> float:
    """``used / capacity`` as a percentage with one decimal; 0.0 without capacity."""

    if capacity <= 0:
        return 0.0
    return round(used / capacity * 100, 1)


def _totals(capacities: Sequence[float], used: Sequence[float]) -> ResourceTotals:
    total = sum(capacities)
    used_total = sum(used)
    return ResourceTotals(
        total=total,
        used=round(used_total, 2),
        usage_percent=usage_percent(used_total, total),
    )


def aggregate(
    nodes: Sequence[Node],
    pods: Sequence[Pod],
    deployments: Sequence[Deployment],
    profile: ClusterProfile,
) -> ClusterStats:
    healthy = sum(1 for node in nodes if node.ready)
    return ClusterStats(
        cluster_health="Healthy" if healthy == len(nodes) else "Warning",
        nodes=NodeCounts(total=len(nodes), healthy=healthy, unhealthy=len(nodes) - healthy),
        pods=PodCounts(
            total=len(pods),
            running=sum(1 for pod in pods if pod.status == "Running"),
            pending=sum(1 for pod in pods if pod.status == "Pending"),
            failed=sum(1 for pod in pods if pod.status in FAILED_POD_STATUSES),
        ),
        resources=ResourceSummary(
            cpu=_totals([node.cpu.capacity for node in nodes], [node.cpu.used for node in nodes]),
            memory=_totals([node.memory.capacity for node in nodes], [node.memory.used for node in nodes]),
        ),
        namespaces=len(profile.namespaces),
        deployments=len(deployments),
        services=len(profile.microservices),
    )


__all__ = ["aggregate", "usage_percent"]
