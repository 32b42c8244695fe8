"""Cluster profiles describing the shape of each simulated cluster.

Profiles are loaded from a YAML document with a ``default_cluster`` key and a
``clusters`` mapping keyed by cluster id. Any key missing from a cluster entry
falls back to the defaults below; the generators only ever see complete,
immutable :class:`ClusterProfile` values.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, TypeVar

import yaml

from .random_source import RandomSource

logger = logging.getLogger(__name__)

BUNDLED_PROFILES = Path(__file__).resolve().parent / "data" / "profiles.yaml"
FALLBACK_CLUSTER_ID = "default"
NAMESPACE_STRATEGIES: tuple[str, ...] = ("positional", "uniform")

T = TypeVar("T")


class ProfileError(ValueError):
    """Raised when a profile document cannot be interpreted."""


@dataclass(slots=True, frozen=True)
class ResourceRange:
    minimum: float
    maximum: float

    @classmethod
    def parse(cls, value: Any, default: Tuple[float, float]) -> "ResourceRange":
        if isinstance(value, (list, tuple)) and len(value) == 2:
            low, high = float(value[0]), float(value[1])
            return cls(min(low, high), max(low, high))
        if value is not None:
            logger.debug("Ignoring malformed resource range %r", value)
        return cls(*default)

    def sample(self, rng: RandomSource) -> float:
        """Draw a value within the range.

        Whole-number bounds give whole numbers; fractional bounds are drawn
        uniformly and rounded to one decimal place.
        """

        if float(self.minimum).is_integer() and float(self.maximum).is_integer():
            return rng.integer(int(self.minimum), int(self.maximum))
        return round(rng.uniform(self.minimum, self.maximum), 1)


@dataclass(slots=True, frozen=True)
class ResourceRanges:
    cpu: ResourceRange = ResourceRange(30, 85)
    memory: ResourceRange = ResourceRange(40, 80)
    disk: ResourceRange = ResourceRange(45, 75)
    network_in: ResourceRange = ResourceRange(100, 500)
    network_out: ResourceRange = ResourceRange(80, 400)


@dataclass(slots=True, frozen=True)
class NamespaceBand:
    """Deployments with an index below ``until`` land in ``namespace``."""

    namespace: str
    until: Optional[int] = None


@dataclass(slots=True, frozen=True)
class AlertTemplate:
    severity: str
    title: str
    message: str
    minutes_ago: int = 0


@dataclass(slots=True, frozen=True)
class ConfigMapTemplate:
    name: str
    namespace: str
    data_keys: Tuple[str, ...] = ()
    hours_ago: int = 0


@dataclass(slots=True, frozen=True)
class SecretTemplate:
    name: str
    namespace: str
    type: str = "Opaque"
    keys_count: int = 1
    hours_ago: int = 0


@dataclass(slots=True, frozen=True)
class IngressPathTemplate:
    path: str
    backend: str


@dataclass(slots=True, frozen=True)
class IngressTemplate:
    name: str
    namespace: str
    host: str
    paths: Tuple[IngressPathTemplate, ...] = ()
    tls: bool = False


@dataclass(slots=True, frozen=True)
class NamespaceUsageTemplate:
    name: str
    cpu: float
    memory: float


@dataclass(slots=True, frozen=True)
class ClusterProfile:
    """Static configuration for one simulated cluster."""

    cluster_id: str
    name: str = ""
    environment: str = "Development"
    provider: str = "aws"
    seed: int = 1
    node_count: int = 1
    warning_node_index: Optional[int] = None
    degraded_deployment_index: Optional[int] = None
    microservices: Tuple[str, ...] = ()
    replicas: Tuple[int, ...] = ()
    namespaces: Tuple[str, ...] = ("default",)
    namespace_strategy: str = "positional"
    namespace_bands: Tuple[NamespaceBand, ...] = ()
    resource_ranges: ResourceRanges = field(default_factory=ResourceRanges)
    node_cpu_capacities: Tuple[int, ...] = ()
    node_memory_capacities: Tuple[int, ...] = ()
    node_pod_capacity: int = 110
    k8s_version: str = "v1.28.5"
    kernel_version: str = "5.15.0-91-generic"
    container_runtime: str = "containerd://1.6.26"
    os: str = "Linux"
    image_registry: str = "mycompany"
    alerts: Tuple[AlertTemplate, ...] = ()
    config_maps: Tuple[ConfigMapTemplate, ...] = ()
    secrets: Tuple[SecretTemplate, ...] = ()
    ingress_rules: Tuple[IngressTemplate, ...] = ()
    namespace_usage: Tuple[NamespaceUsageTemplate, ...] = ()

    def assign_namespace(self, index: int, rng: RandomSource) -> str:
        """Namespace for the microservice at ``index``.

        The positional strategy walks ``namespace_bands`` in order; the
        uniform strategy draws one of ``namespaces`` from ``rng``.
        """

        if self.namespace_strategy == "uniform":
            return rng.choice(self.namespaces) if self.namespaces else "default"
        for band in self.namespace_bands:
            if band.until is None or index < band.until:
                return band.namespace
        if self.namespaces:
            return self.namespaces[0]
        return "default"

    @classmethod
    def from_mapping(cls, cluster_id: str, data: Mapping[str, Any]) -> "ClusterProfile":
        if not isinstance(data, Mapping):
            raise ProfileError(f"Cluster {cluster_id!r} must be a mapping, got {type(data).__name__}")
        try:
            return cls._parse(cluster_id, data)
        except ProfileError:
            raise
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ProfileError(f"Invalid profile for cluster {cluster_id!r}: {exc}") from exc

    @classmethod
    def _parse(cls, cluster_id: str, data: Mapping[str, Any]) -> "ClusterProfile":
        ranges = data.get("resource_ranges") or {}
        defaults = ResourceRanges()
        resource_ranges = ResourceRanges(
            cpu=ResourceRange.parse(ranges.get("cpu"), (defaults.cpu.minimum, defaults.cpu.maximum)),
            memory=ResourceRange.parse(
                ranges.get("memory"), (defaults.memory.minimum, defaults.memory.maximum)
            ),
            disk=ResourceRange.parse(ranges.get("disk"), (defaults.disk.minimum, defaults.disk.maximum)),
            network_in=ResourceRange.parse(
                ranges.get("network_in"), (defaults.network_in.minimum, defaults.network_in.maximum)
            ),
            network_out=ResourceRange.parse(
                ranges.get("network_out"), (defaults.network_out.minimum, defaults.network_out.maximum)
            ),
        )
        strategy = str(data.get("namespace_strategy", "positional"))
        if strategy not in NAMESPACE_STRATEGIES:
            raise ProfileError(f"Unknown namespace strategy {strategy!r} for cluster {cluster_id!r}")

        return cls(
            cluster_id=cluster_id,
            name=str(data.get("name", cluster_id)),
            environment=str(data.get("environment", "Development")),
            provider=str(data.get("provider", "aws")),
            seed=int(data.get("seed", 1)),
            node_count=max(int(data.get("node_count", 1)), 0),
            warning_node_index=_optional_int(data.get("warning_node_index")),
            degraded_deployment_index=_optional_int(data.get("degraded_deployment_index")),
            microservices=tuple(str(name) for name in data.get("microservices") or ()),
            replicas=tuple(int(count) for count in data.get("replicas") or ()),
            namespaces=tuple(str(name) for name in data.get("namespaces") or ("default",)),
            namespace_strategy=strategy,
            namespace_bands=_entries(cluster_id, "namespace_bands", data.get("namespace_bands"), _band),
            resource_ranges=resource_ranges,
            node_cpu_capacities=tuple(int(value) for value in data.get("node_cpu_capacities") or ()),
            node_memory_capacities=tuple(int(value) for value in data.get("node_memory_capacities") or ()),
            node_pod_capacity=int(data.get("node_pod_capacity", 110)),
            k8s_version=str(data.get("k8s_version", "v1.28.5")),
            kernel_version=str(data.get("kernel_version", "5.15.0-91-generic")),
            container_runtime=str(data.get("container_runtime", "containerd://1.6.26")),
            os=str(data.get("os", "Linux")),
            image_registry=str(data.get("image_registry", "mycompany")),
            alerts=_entries(cluster_id, "alerts", data.get("alerts"), _alert),
            config_maps=_entries(cluster_id, "config_maps", data.get("config_maps"), _config_map),
            secrets=_entries(cluster_id, "secrets", data.get("secrets"), _secret),
            ingress_rules=_entries(
                cluster_id, "ingress_rules", data.get("ingress_rules"), functools.partial(_ingress, cluster_id)
            ),
            namespace_usage=_entries(
                cluster_id, "namespace_usage", data.get("namespace_usage"), _namespace_usage
            ),
        )


def _optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    return int(value)


def _entries(
    cluster_id: str, label: str, items: Any, build: Callable[[Mapping[str, Any]], T]
) -> Tuple[T, ...]:
    """Build one template per list entry, skipping entries that cannot be read."""

    if items is None:
        return ()
    if not isinstance(items, (list, tuple)):
        logger.warning(
            "Ignoring %s of cluster %r: expected a list, got %s", label, cluster_id, type(items).__name__
        )
        return ()
    built: List[T] = []
    for position, item in enumerate(items):
        try:
            built.append(build(item))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping %s[%s] of cluster %r: %r", label, position, cluster_id, exc)
    return tuple(built)


def _band(item: Mapping[str, Any]) -> NamespaceBand:
    return NamespaceBand(namespace=str(item["namespace"]), until=_optional_int(item.get("until")))


def _alert(item: Mapping[str, Any]) -> AlertTemplate:
    return AlertTemplate(
        severity=str(item.get("severity", "info")),
        title=str(item["title"]),
        message=str(item.get("message", "")),
        minutes_ago=int(item.get("minutes_ago", 0)),
    )


def _config_map(item: Mapping[str, Any]) -> ConfigMapTemplate:
    return ConfigMapTemplate(
        name=str(item["name"]),
        namespace=str(item.get("namespace", "default")),
        data_keys=tuple(str(key) for key in item.get("data_keys") or ()),
        hours_ago=int(item.get("hours_ago", 0)),
    )


def _secret(item: Mapping[str, Any]) -> SecretTemplate:
    return SecretTemplate(
        name=str(item["name"]),
        namespace=str(item.get("namespace", "default")),
        type=str(item.get("type", "Opaque")),
        keys_count=int(item.get("keys_count", 1)),
        hours_ago=int(item.get("hours_ago", 0)),
    )


def _ingress_path(item: Mapping[str, Any]) -> IngressPathTemplate:
    return IngressPathTemplate(path=str(item["path"]), backend=str(item["backend"]))


def _ingress(cluster_id: str, item: Mapping[str, Any]) -> IngressTemplate:
    name = str(item["name"])
    return IngressTemplate(
        name=name,
        namespace=str(item.get("namespace", "default")),
        host=str(item["host"]),
        paths=_entries(cluster_id, f"ingress_rules.{name}.paths", item.get("paths"), _ingress_path),
        tls=bool(item.get("tls", False)),
    )


def _namespace_usage(item: Mapping[str, Any]) -> NamespaceUsageTemplate:
    return NamespaceUsageTemplate(
        name=str(item["name"]),
        cpu=float(item.get("cpu", 0.0)),
        memory=float(item.get("memory", 0.0)),
    )


class ProfileRegistry:
    """Immutable lookup of cluster profiles by id."""

    def __init__(self, profiles: Iterable[ClusterProfile], default_cluster: Optional[str] = None) -> None:
        self._profiles: Dict[str, ClusterProfile] = {}
        for profile in profiles:
            self._profiles[profile.cluster_id] = profile
        if default_cluster is None and self._profiles:
            default_cluster = next(iter(self._profiles))
        if default_cluster is not None and default_cluster not in self._profiles:
            raise ProfileError(f"Default cluster {default_cluster!r} is not defined")
        self.default_cluster = default_cluster

    @classmethod
    def from_mapping(cls, document: Any) -> "ProfileRegistry":
        if not isinstance(document, Mapping):
            raise ProfileError("Profile document must be a mapping")
        clusters = document.get("clusters") or {}
        if not isinstance(clusters, Mapping):
            raise ProfileError("'clusters' must be a mapping of cluster id to profile")
        profiles = [ClusterProfile.from_mapping(str(cluster_id), data) for cluster_id, data in clusters.items()]
        default_cluster = document.get("default_cluster")
        return cls(profiles, default_cluster=str(default_cluster) if default_cluster is not None else None)

    @classmethod
    def from_file(cls, path: str | Path) -> "ProfileRegistry":
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as handle:
                document = yaml.safe_load(handle)
        except OSError as exc:
            raise ProfileError(f"Unable to read profiles from {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ProfileError(f"Invalid YAML in {path}: {exc}") from exc
        registry = cls.from_mapping(document)
        logger.debug("Loaded %s cluster profiles from %s", len(registry), path)
        return registry

    @classmethod
    @functools.lru_cache(maxsize=None)
    def default(cls) -> "ProfileRegistry":
        """Registry backed by the profiles shipped with the package.

        The bundled document is parsed once per process; the registry is
        read-only so every caller shares the same instance.
        """

        return cls.from_file(BUNDLED_PROFILES)

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, cluster_id: object) -> bool:
        return cluster_id in self._profiles

    def cluster_ids(self) -> List[str]:
        return list(self._profiles)

    def profiles(self) -> Sequence[ClusterProfile]:
        return tuple(self._profiles.values())

    def resolve(self, cluster_id: Optional[str]) -> ClusterProfile:
        """Return the profile for ``cluster_id`` or the default profile."""

        if cluster_id is not None and cluster_id in self._profiles:
            return self._profiles[cluster_id]
        if self.default_cluster is None:
            logger.info("No profiles loaded, using built-in profile for %r", cluster_id)
            return ClusterProfile(cluster_id=FALLBACK_CLUSTER_ID, name=FALLBACK_CLUSTER_ID)
        logger.info("Unknown cluster %r, falling back to %s", cluster_id, self.default_cluster)
        return self._profiles[self.default_cluster]


__all__ = [
    "AlertTemplate",
    "BUNDLED_PROFILES",
    "ClusterProfile",
    "ConfigMapTemplate",
    "FALLBACK_CLUSTER_ID",
    "IngressPathTemplate",
    "IngressTemplate",
    "NamespaceBand",
    "NamespaceUsageTemplate",
    "ProfileError",
    "ProfileRegistry",
    "ResourceRange",
    "ResourceRanges",
    "SecretTemplate",
]
