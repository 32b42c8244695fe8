"""Value types produced by a generation pass."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

NODE_STATUSES: tuple[str, ...] = ("Ready", "Warning")
POD_STATUSES: tuple[str, ...] = ("Running", "Pending", "CrashLoopBackOff", "Completed", "Failed")
FAILED_POD_STATUSES: frozenset[str] = frozenset({"CrashLoopBackOff", "Failed"})
EVENT_TYPES: tuple[str, ...] = ("Normal", "Warning")
ALERT_SEVERITIES: tuple[str, ...] = ("critical", "warning", "info")
SERVICE_TYPES: tuple[str, ...] = ("ClusterIP", "NodePort", "LoadBalancer")


@dataclass(slots=True, frozen=True)
class ResourceUsage:
    """Capacity and consumption of a node resource."""

    capacity: float
    used: float
    usage_percent: float


@dataclass(slots=True, frozen=True)
class PodCapacity:
    capacity: int
    current: int


@dataclass(slots=True, frozen=True)
class Node:
    id: str
    name: str
    status: str
    roles: Tuple[str, ...]
    cpu: ResourceUsage
    memory: ResourceUsage
    pods: PodCapacity
    os: str
    kernel: str
    container_runtime: str
    kubelet_version: str
    ip: str
    created_at: datetime

    @property
    def ready(self) -> bool:
        return self.status == "Ready"


@dataclass(slots=True, frozen=True)
class ReplicaCounts:
    desired: int
    ready: int
    available: int


@dataclass(slots=True, frozen=True)
class ResourceAllocation:
    """Container request/limit strings plus the observed consumption."""

    request: str
    limit: str
    current: int


@dataclass(slots=True, frozen=True)
class Deployment:
    id: str
    name: str
    namespace: str
    replicas: ReplicaCounts
    image: str
    status: str
    last_updated: datetime
    strategy: str
    revisions: int
    liveness_probe: bool
    readiness_probe: bool
    cpu: ResourceAllocation
    memory: ResourceAllocation

    @property
    def healthy(self) -> bool:
        return self.replicas.ready == self.replicas.desired


@dataclass(slots=True, frozen=True)
class Pod:
    """A replica of a deployment; ``cpu`` is in millicores, ``memory`` in MiB."""

    id: str
    name: str
    namespace: str
    deployment: str
    status: str
    node: Optional[str]
    restarts: int
    started_at: datetime
    ip: str
    cpu: int
    memory: int


@dataclass(slots=True, frozen=True)
class ServicePort:
    name: str
    port: int
    target_port: int
    protocol: str = "TCP"


@dataclass(slots=True, frozen=True)
class Service:
    id: str
    name: str
    namespace: str
    type: str
    cluster_ip: str
    ports: Tuple[ServicePort, ...]
    selector: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class ConfigMap:
    id: str
    name: str
    namespace: str
    data_keys: Tuple[str, ...]
    keys_count: int
    last_modified: datetime


@dataclass(slots=True, frozen=True)
class Secret:
    id: str
    name: str
    namespace: str
    type: str
    keys_count: int
    last_modified: datetime


@dataclass(slots=True, frozen=True)
class IngressPath:
    path: str
    service: str
    port: int

    @property
    def backend(self) -> str:
        return f"{self.service}:{self.port}"


@dataclass(slots=True, frozen=True)
class IngressRule:
    id: str
    name: str
    namespace: str
    host: str
    paths: Tuple[IngressPath, ...]
    tls: bool


@dataclass(slots=True, frozen=True)
class TimeSeriesPoint:
    """One utilisation sample; ``timestamp`` is the ``HH:MM`` chart label."""

    timestamp: str
    full_timestamp: datetime
    cpu: float
    memory: float
    disk: float
    network_in: float
    network_out: float


@dataclass(slots=True, frozen=True)
class Event:
    id: str
    type: str
    reason: str
    message: str
    namespace: str
    object: str
    timestamp: datetime
    count: int


@dataclass(slots=True, frozen=True)
class Alert:
    id: str
    severity: str
    title: str
    message: str
    timestamp: datetime
    acknowledged: bool


@dataclass(slots=True, frozen=True)
class NamespaceUsage:
    name: str
    cpu: float
    memory: float


@dataclass(slots=True, frozen=True)
class NodeCounts:
    total: int
    healthy: int
    unhealthy: int


@dataclass(slots=True, frozen=True)
class PodCounts:
    total: int
    running: int
    pending: int
    failed: int


@dataclass(slots=True, frozen=True)
class ResourceTotals:
    total: float
    used: float
    usage_percent: float


@dataclass(slots=True, frozen=True)
class ResourceSummary:
    cpu: ResourceTotals
    memory: ResourceTotals


@dataclass(slots=True, frozen=True)
class ClusterStats:
    """Aggregate view derived from one generation pass."""

    cluster_health: str
    nodes: NodeCounts
    pods: PodCounts
    resources: ResourceSummary
    namespaces: int
    deployments: int
    services: int


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Everything a dashboard needs for one cluster and time range."""

    cluster_id: str
    time_range: str
    generated_at: datetime
    nodes: List[Node]
    deployments: List[Deployment]
    pods: List[Pod]
    services: List[Service]
    config_maps: List[ConfigMap]
    secrets: List[Secret]
    ingress_rules: List[IngressRule]
    time_series: List[TimeSeriesPoint]
    events: List[Event]
    alerts: List[Alert]
    stats: ClusterStats
    namespace_usage: List[NamespaceUsage]

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready representation with ISO-8601 timestamps."""

        return _jsonable(asdict(self))


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


__all__ = [
    "ALERT_SEVERITIES",
    "Alert",
    "ClusterStats",
    "ConfigMap",
    "Deployment",
    "EVENT_TYPES",
    "Event",
    "FAILED_POD_STATUSES",
    "IngressPath",
    "IngressRule",
    "NODE_STATUSES",
    "NamespaceUsage",
    "Node",
    "NodeCounts",
    "POD_STATUSES",
    "Pod",
    "PodCapacity",
    "PodCounts",
    "ReplicaCounts",
    "ResourceAllocation",
    "ResourceSummary",
    "ResourceTotals",
    "ResourceUsage",
    "SERVICE_TYPES",
    "Secret",
    "Service",
    "ServicePort",
    "Snapshot",
    "TimeSeriesPoint",
]
