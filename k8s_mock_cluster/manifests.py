"""Render generated configuration objects as Kubernetes YAML manifests."""

from __future__ import annotations

from typing import Any, Callable, Dict, Union

import yaml

from .entities import ConfigMap, IngressRule, Secret, Service

REDACTED = "***REDACTED***"
PLACEHOLDER_VALUE = "value-here"
TLS_SECRET_NAME = "tls-secret"

Manifest = Dict[str, Any]


def _dump(manifest: Manifest) -> str:
    return yaml.safe_dump(manifest, sort_keys=False, default_flow_style=False)


def _metadata(name: str, namespace: str) -> Dict[str, str]:
    return {"name": name, "namespace": namespace}


def config_map_manifest(config_map: ConfigMap) -> Manifest:
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": _metadata(config_map.name, config_map.namespace),
        "data": {key: PLACEHOLDER_VALUE for key in config_map.data_keys},
    }


def secret_manifest(secret: Secret) -> Manifest:
    # Values are never generated, only the key layout.
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": _metadata(secret.name, secret.namespace),
        "type": secret.type,
        "data": {f"key{index + 1}": REDACTED for index in range(secret.keys_count)},
    }


def ingress_manifest(ingress: IngressRule) -> Manifest:
    spec: Dict[str, Any] = {}
    if ingress.tls:
        spec["tls"] = [{"hosts": [ingress.host], "secretName": TLS_SECRET_NAME}]
    spec["rules"] = [
        {
            "host": ingress.host,
            "http": {
                "paths": [
                    {
                        "path": path.path,
                        "pathType": "Prefix",
                        "backend": {"service": {"name": path.service, "port": {"number": path.port}}},
                    }
                    for path in ingress.paths
                ]
            },
        }
    ]
    return {
        "apiVersion": "networking.k8s.io/v1",
        "kind": "Ingress",
        "metadata": _metadata(ingress.name, ingress.namespace),
        "spec": spec,
    }


def service_manifest(service: Service) -> Manifest:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": _metadata(service.name, service.namespace),
        "spec": {
            "type": service.type,
            "selector": dict(service.selector),
            "ports": [
                {
                    "name": port.name,
                    "port": port.port,
                    "targetPort": port.target_port,
                    "protocol": port.protocol,
                }
                for port in service.ports
            ],
        },
    }


def render_config_map(config_map: ConfigMap) -> str:
    return _dump(config_map_manifest(config_map))


def render_secret(secret: Secret) -> str:
    return _dump(secret_manifest(secret))


def render_ingress(ingress: IngressRule) -> str:
    return _dump(ingress_manifest(ingress))


def render_service(service: Service) -> str:
    return _dump(service_manifest(service))


Renderable = Union[ConfigMap, Secret, IngressRule, Service]

RENDERERS: Dict[str, Callable[[Any], str]] = {
    "configmap": render_config_map,
    "secret": render_secret,
    "ingress": render_ingress,
    "service": render_service,
}


def render(kind: str, entity: Renderable) -> str:
    """Render ``entity`` using the renderer registered for ``kind``."""

    try:
        renderer = RENDERERS[kind.lower()]
    except KeyError as exc:
        raise ValueError(f"Unsupported manifest kind: {kind}") from exc
    return renderer(entity)


__all__ = [
    "RENDERERS",
    "config_map_manifest",
    "ingress_manifest",
    "render",
    "render_config_map",
    "render_ingress",
    "render_secret",
    "render_service",
    "secret_manifest",
    "service_manifest",
]
