"""Prometheus metric registrations for the simulated dashboard."""

from __future__ import annotations

from collections import Counter as TallyCounter

from prometheus_client import CollectorRegistry, Gauge

from .entities import POD_STATUSES, Snapshot

TIME_SERIES_FIELDS = ("cpu", "memory", "disk", "network_in", "network_out")


class MetricSet:
    """Wrapper object holding Prometheus metric instances."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        reg = registry
        self.node_cpu_usage_percent = Gauge(
            "dashboard_node_cpu_usage_percent",
            "CPU usage of the node as a percentage of its capacity.",
            labelnames=("cluster", "node"),
            registry=reg,
        )
        self.node_memory_usage_percent = Gauge(
            "dashboard_node_memory_usage_percent",
            "Memory usage of the node as a percentage of its capacity.",
            labelnames=("cluster", "node"),
            registry=reg,
        )
        self.node_ready = Gauge(
            "dashboard_node_ready",
            "Whether the node reports Ready (1) or Warning (0).",
            labelnames=("cluster", "node"),
            registry=reg,
        )
        self.deployment_replicas = Gauge(
            "dashboard_deployment_replicas",
            "Replica counts of the deployment by condition.",
            labelnames=("cluster", "namespace", "deployment", "condition"),
            registry=reg,
        )
        self.pods = Gauge(
            "dashboard_pods",
            "Number of pods by status.",
            labelnames=("cluster", "status"),
            registry=reg,
        )
        self.cluster_usage_percent = Gauge(
            "dashboard_cluster_resource_usage_percent",
            "Cluster wide resource usage as a percentage of total capacity.",
            labelnames=("cluster", "resource"),
            registry=reg,
        )
        self.cluster_healthy = Gauge(
            "dashboard_cluster_healthy",
            "Whether every node of the cluster is Ready.",
            labelnames=("cluster",),
            registry=reg,
        )
        self.time_series_latest = Gauge(
            "dashboard_time_series_latest",
            "Most recent utilisation sample of the selected time range.",
            labelnames=("cluster", "metric"),
            registry=reg,
        )
        self.alerts_unacknowledged = Gauge(
            "dashboard_alerts_unacknowledged",
            "Number of alerts not yet acknowledged, by severity.",
            labelnames=("cluster", "severity"),
            registry=reg,
        )
        self.events = Gauge(
            "dashboard_events",
            "Number of events in the feed by type.",
            labelnames=("cluster", "type"),
            registry=reg,
        )
        self.snapshot_timestamp = Gauge(
            "dashboard_snapshot_timestamp_seconds",
            "Unix time of the snapshot currently published.",
            labelnames=("cluster",),
            registry=reg,
        )

    def _all(self) -> tuple[Gauge, ...]:
        return tuple(metric for metric in vars(self).values() if isinstance(metric, Gauge))

    def update(self, snapshot: Snapshot) -> None:
        """Replace every published sample with values from ``snapshot``."""

        for metric in self._all():
            metric.clear()
        cluster = snapshot.cluster_id

        for node in snapshot.nodes:
            self.node_cpu_usage_percent.labels(cluster=cluster, node=node.name).set(node.cpu.usage_percent)
            self.node_memory_usage_percent.labels(cluster=cluster, node=node.name).set(
                node.memory.usage_percent
            )
            self.node_ready.labels(cluster=cluster, node=node.name).set(1 if node.ready else 0)

        for deployment in snapshot.deployments:
            for condition, value in (
                ("desired", deployment.replicas.desired),
                ("ready", deployment.replicas.ready),
                ("available", deployment.replicas.available),
            ):
                self.deployment_replicas.labels(
                    cluster=cluster,
                    namespace=deployment.namespace,
                    deployment=deployment.name,
                    condition=condition,
                ).set(value)

        statuses = TallyCounter(pod.status for pod in snapshot.pods)
        for status in POD_STATUSES:
            self.pods.labels(cluster=cluster, status=status).set(statuses.get(status, 0))

        resources = snapshot.stats.resources
        self.cluster_usage_percent.labels(cluster=cluster, resource="cpu").set(resources.cpu.usage_percent)
        self.cluster_usage_percent.labels(cluster=cluster, resource="memory").set(
            resources.memory.usage_percent
        )
        self.cluster_healthy.labels(cluster=cluster).set(
            1 if snapshot.stats.cluster_health == "Healthy" else 0
        )

        if snapshot.time_series:
            latest = snapshot.time_series[-1]
            for field_name in TIME_SERIES_FIELDS:
                self.time_series_latest.labels(cluster=cluster, metric=field_name).set(
                    getattr(latest, field_name)
                )

        pending = TallyCounter(alert.severity for alert in snapshot.alerts if not alert.acknowledged)
        for severity, count in pending.items():
            self.alerts_unacknowledged.labels(cluster=cluster, severity=severity).set(count)

        for event_type, count in TallyCounter(event.type for event in snapshot.events).items():
            self.events.labels(cluster=cluster, type=event_type).set(count)

        self.snapshot_timestamp.labels(cluster=cluster).set(snapshot.generated_at.timestamp())


__all__ = ["MetricSet"]
