"""Entity generators for a simulated cluster.

Every generator is a plain function of a :class:`ClusterProfile`, an explicit
:class:`RandomSource` and the reference time ``now``. Nothing is cached or
shared between calls, so a pass can be repeated with a fresh random source and
the same profile to reproduce its output.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, TypeVar

from .entities import (
    ConfigMap,
    Deployment,
    IngressPath,
    IngressRule,
    NamespaceUsage,
    Node,
    Pod,
    PodCapacity,
    ReplicaCounts,
    ResourceAllocation,
    ResourceUsage,
    SERVICE_TYPES,
    Secret,
    Service,
    ServicePort,
)
from .profiles import ClusterProfile
from .random_source import RandomSource

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CPU_CAPACITY = 4
DEFAULT_MEMORY_CAPACITY = 16
DEFAULT_REPLICAS = 1
DEFAULT_SERVICE_PORT = 8080

DEPLOYMENT_STRATEGY = "RollingUpdate"
CPU_REQUEST, CPU_LIMIT = "100m", "500m"
MEMORY_REQUEST, MEMORY_LIMIT = "128Mi", "512Mi"
UNHEALTHY_POD_STATUS = "CrashLoopBackOff"
HEALTHY_POD_STATUS = "Running"


def node_name(index: int) -> str:
    """Name of the node at zero-based ``index``."""

    return f"worker-node-{index + 1}"


def _positional(values: Sequence[T], index: int, default: T, label: str) -> T:
    if not values:
        logger.debug("No %s configured, using default %r", label, default)
        return default
    if index >= len(values):
        logger.debug("Only %s %s configured, cycling for index %s", len(values), label, index)
    return values[index % len(values)]


# ----------------------------------------------------------------------
# Workloads
# ----------------------------------------------------------------------
def generate_nodes(profile: ClusterProfile, rng: RandomSource, now: datetime) -> List[Node]:
    ranges = profile.resource_ranges
    nodes: List[Node] = []
    for index in range(profile.node_count):
        cpu_capacity = _positional(profile.node_cpu_capacities, index, DEFAULT_CPU_CAPACITY, "cpu capacities")
        memory_capacity = _positional(
            profile.node_memory_capacities, index, DEFAULT_MEMORY_CAPACITY, "memory capacities"
        )
        cpu_percent = ranges.cpu.sample(rng)
        memory_percent = ranges.memory.sample(rng)
        nodes.append(
            Node(
                id=f"node-{index + 1}",
                name=node_name(index),
                status="Warning" if index == profile.warning_node_index else "Ready",
                roles=("master", "worker") if index == 0 else ("worker",),
                cpu=ResourceUsage(
                    capacity=cpu_capacity,
                    used=round(cpu_capacity * cpu_percent / 100, 2),
                    usage_percent=cpu_percent,
                ),
                memory=ResourceUsage(
                    capacity=memory_capacity,
                    used=round(memory_capacity * memory_percent / 100, 2),
                    usage_percent=memory_percent,
                ),
                pods=PodCapacity(capacity=profile.node_pod_capacity, current=rng.integer(15, 35)),
                os=profile.os,
                kernel=profile.kernel_version,
                container_runtime=profile.container_runtime,
                kubelet_version=profile.k8s_version,
                ip=rng.ipv4(),
                created_at=now - timedelta(hours=rng.integer(720, 8760)),
            )
        )
    return nodes


def generate_deployments(profile: ClusterProfile, rng: RandomSource, now: datetime) -> List[Deployment]:
    deployments: List[Deployment] = []
    for index, service in enumerate(profile.microservices):
        desired = max(_positional(profile.replicas, index, DEFAULT_REPLICAS, "replica counts"), 0)
        ready = max(desired - 1, 0) if index == profile.degraded_deployment_index else desired
        version = f"v{rng.integer(1, 3)}.{rng.integer(0, 9)}.{rng.integer(0, 20)}"
        deployments.append(
            Deployment(
                id=service,
                name=service,
                namespace=profile.assign_namespace(index, rng),
                replicas=ReplicaCounts(desired=desired, ready=ready, available=ready),
                image=f"{profile.image_registry}/{service}:{version}",
                status="Healthy" if ready == desired else "Degraded",
                last_updated=now - timedelta(hours=rng.integer(2, 168)),
                strategy=DEPLOYMENT_STRATEGY,
                revisions=rng.integer(5, 25),
                liveness_probe=True,
                readiness_probe=True,
                cpu=ResourceAllocation(request=CPU_REQUEST, limit=CPU_LIMIT, current=rng.integer(80, 400)),
                memory=ResourceAllocation(
                    request=MEMORY_REQUEST, limit=MEMORY_LIMIT, current=rng.integer(150, 450)
                ),
            )
        )
    return deployments


def generate_pods(
    deployments: Sequence[Deployment], profile: ClusterProfile, rng: RandomSource, now: datetime
) -> List[Pod]:
    """One pod per desired replica; a short deployment gets a crash-looping last pod."""

    pods: List[Pod] = []
    for deployment in deployments:
        desired = deployment.replicas.desired
        for index in range(desired):
            unhealthy = index == desired - 1 and deployment.replicas.ready < desired
            name = f"{deployment.name}-{rng.alphanumeric(10)}"
            pods.append(
                Pod(
                    id=name,
                    name=name,
                    namespace=deployment.namespace,
                    deployment=deployment.name,
                    status=UNHEALTHY_POD_STATUS if unhealthy else HEALTHY_POD_STATUS,
                    node=_random_node(profile, rng),
                    restarts=rng.integer(5, 20) if unhealthy else rng.integer(0, 3),
                    started_at=now - timedelta(hours=rng.integer(1, 240)),
                    ip=rng.ipv4(),
                    cpu=rng.integer(50, 400),
                    memory=rng.integer(100, 450),
                )
            )
    return pods


def _random_node(profile: ClusterProfile, rng: RandomSource) -> Optional[str]:
    if profile.node_count < 1:
        return None
    return node_name(rng.integer(1, profile.node_count) - 1)


def generate_services(deployments: Sequence[Deployment], rng: RandomSource) -> List[Service]:
    """One Service per deployment, in the deployment's namespace and selecting its pods."""

    services: List[Service] = []
    for deployment in deployments:
        services.append(
            Service(
                id=deployment.name,
                name=deployment.name,
                namespace=deployment.namespace,
                type=rng.choice(SERVICE_TYPES),
                cluster_ip=rng.ipv4(),
                ports=(ServicePort(name="http", port=DEFAULT_SERVICE_PORT, target_port=DEFAULT_SERVICE_PORT),),
                selector={"app": deployment.name},
            )
        )
    return services


# ----------------------------------------------------------------------
# Configuration objects
# ----------------------------------------------------------------------
def generate_config_maps(profile: ClusterProfile, now: datetime) -> List[ConfigMap]:
    return [
        ConfigMap(
            id=template.name,
            name=template.name,
            namespace=template.namespace,
            data_keys=template.data_keys,
            keys_count=len(template.data_keys),
            last_modified=now - timedelta(hours=template.hours_ago),
        )
        for template in profile.config_maps
    ]


def generate_secrets(profile: ClusterProfile, now: datetime) -> List[Secret]:
    return [
        Secret(
            id=template.name,
            name=template.name,
            namespace=template.namespace,
            type=template.type,
            keys_count=template.keys_count,
            last_modified=now - timedelta(hours=template.hours_ago),
        )
        for template in profile.secrets
    ]


def generate_ingress_rules(profile: ClusterProfile) -> List[IngressRule]:
    rules: List[IngressRule] = []
    for template in profile.ingress_rules:
        paths = tuple(_parse_backend(path.path, path.backend) for path in template.paths)
        rules.append(
            IngressRule(
                id=template.name,
                name=template.name,
                namespace=template.namespace,
                host=template.host,
                paths=paths,
                tls=template.tls,
            )
        )
    return rules


def _parse_backend(path: str, backend: str) -> IngressPath:
    service, _, port = backend.partition(":")
    try:
        number = int(port)
    except ValueError:
        logger.debug("Backend %r has no numeric port, assuming %s", backend, DEFAULT_SERVICE_PORT)
        number = DEFAULT_SERVICE_PORT
    return IngressPath(path=path, service=service, port=number)


def generate_namespace_usage(profile: ClusterProfile) -> List[NamespaceUsage]:
    return [
        NamespaceUsage(name=item.name, cpu=item.cpu, memory=item.memory)
        for item in profile.namespace_usage
    ]


__all__ = [
    "generate_config_maps",
    "generate_deployments",
    "generate_ingress_rules",
    "generate_namespace_usage",
    "generate_nodes",
    "generate_pods",
    "generate_secrets",
    "generate_services",
    "node_name",
]
