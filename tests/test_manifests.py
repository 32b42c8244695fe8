import pytest
import yaml

from k8s_mock_cluster.manifests import REDACTED, render
from k8s_mock_cluster.snapshot import get_snapshot


@pytest.fixture
def snapshot(registry, now):
    return get_snapshot("production-us-east-1", registry=registry, now=now, event_count=0)


def _by_name(items, name):
    return next(item for item in items if item.name == name)


def test_config_map_manifest(snapshot):
    text = render("ConfigMap", _by_name(snapshot.config_maps, "app-config"))
    assert text.startswith("apiVersion: v1\nkind: ConfigMap\n")
    manifest = yaml.safe_load(text)
    assert manifest["metadata"] == {"name": "app-config", "namespace": "production"}
    assert list(manifest["data"]) == ["database.url", "redis.host", "api.timeout"]


def test_secret_values_are_redacted(snapshot):
    manifest = yaml.safe_load(render("secret", _by_name(snapshot.secrets, "api-keys")))
    assert manifest["type"] == "Opaque"
    assert len(manifest["data"]) == 5
    assert set(manifest["data"].values()) == {REDACTED}


def test_ingress_manifest_tls(snapshot):
    secured = yaml.safe_load(render("ingress", _by_name(snapshot.ingress_rules, "api-ingress")))
    assert secured["apiVersion"] == "networking.k8s.io/v1"
    assert secured["spec"]["tls"] == [{"hosts": ["api.mycompany.com"], "secretName": "tls-secret"}]
    paths = secured["spec"]["rules"][0]["http"]["paths"]
    assert paths[1]["backend"]["service"] == {"name": "user-service", "port": {"number": 8080}}

    plain = yaml.safe_load(render("ingress", _by_name(snapshot.ingress_rules, "admin-ingress")))
    assert "tls" not in plain["spec"]
    assert plain["spec"]["rules"][0]["http"]["paths"][0]["backend"]["service"]["port"]["number"] == 3000


def test_service_manifest(snapshot):
    service = _by_name(snapshot.services, "payment-service")
    manifest = yaml.safe_load(render("service", service))
    assert manifest["spec"]["type"] == service.type
    assert manifest["spec"]["selector"] == {"app": "payment-service"}
    assert manifest["spec"]["ports"] == [
        {"name": "http", "port": 8080, "targetPort": 8080, "protocol": "TCP"}
    ]


def test_unknown_kind(snapshot):
    with pytest.raises(ValueError):
        render("deployment", snapshot.deployments[0])
