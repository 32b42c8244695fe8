import logging

import pytest

from k8s_mock_cluster.profiles import (
    FALLBACK_CLUSTER_ID,
    ClusterProfile,
    IngressPathTemplate,
    ProfileError,
    ProfileRegistry,
    ResourceRange,
)
from k8s_mock_cluster.random_source import RandomSource


def test_bundled_profiles(registry):
    assert registry.cluster_ids() == [
        "production-us-east-1",
        "staging-us-west-2",
        "development-eu-central-1",
    ]
    assert registry.default_cluster == "production-us-east-1"
    assert "staging-us-west-2" in registry


def test_production_profile_shape(production):
    assert production.node_count == 5
    assert production.warning_node_index == 4
    assert production.degraded_deployment_index == 1
    assert len(production.microservices) == len(production.replicas) == 10
    assert production.resource_ranges.cpu == ResourceRange(30, 85)
    assert production.config_maps[0].data_keys == ("database.url", "redis.host", "api.timeout")
    assert production.ingress_rules[0].paths[0].backend == "auth-service:8080"


def test_unknown_cluster_falls_back_to_default(registry):
    assert registry.resolve("does-not-exist").cluster_id == "production-us-east-1"
    assert registry.resolve(None).cluster_id == "production-us-east-1"


def test_empty_registry_resolves_to_builtin_profile():
    profile = ProfileRegistry([]).resolve("anything")
    assert profile.cluster_id == FALLBACK_CLUSTER_ID
    assert profile.node_count == 1
    assert profile.microservices == ()


def test_positional_namespace_bands(production):
    rng = RandomSource(0)
    namespaces = [production.assign_namespace(index, rng) for index in range(10)]
    assert namespaces == ["production"] * 3 + ["default"] * 4 + ["staging"] * 3


def test_uniform_namespace_strategy(registry):
    profile = registry.resolve("development-eu-central-1")
    rng = RandomSource(5)
    assigned = {profile.assign_namespace(index, rng) for index in range(30)}
    assert assigned <= set(profile.namespaces)


def test_positional_without_bands_uses_first_namespace():
    profile = ClusterProfile(cluster_id="x", namespaces=("team-a", "team-b"))
    assert profile.assign_namespace(3, RandomSource(1)) == "team-a"


def test_missing_keys_take_defaults():
    profile = ClusterProfile.from_mapping("bare", {})
    assert profile.name == "bare"
    assert profile.node_count == 1
    assert profile.warning_node_index is None
    assert profile.namespaces == ("default",)
    assert profile.resource_ranges.memory == ResourceRange(40, 80)


def test_reversed_range_is_normalised():
    assert ResourceRange.parse([90, 10], (0, 1)) == ResourceRange(10, 90)
    assert ResourceRange.parse("oops", (1, 2)) == ResourceRange(1, 2)


def test_negative_node_count_clamped():
    assert ClusterProfile.from_mapping("c", {"node_count": -3}).node_count == 0


@pytest.mark.parametrize(
    "document",
    [
        ["not", "a", "mapping"],
        {"clusters": ["a", "b"]},
        {"clusters": {"a": "not a mapping"}},
        {"clusters": {"a": {"namespace_strategy": "round-robin"}}},
        {"clusters": {"a": {"seed": "abc"}}},
        {"default_cluster": "missing", "clusters": {"a": {}}},
    ],
)
def test_invalid_documents_raise_profile_error(document):
    with pytest.raises(ProfileError):
        ProfileRegistry.from_mapping(document)


def test_from_file_errors(tmp_path):
    with pytest.raises(ProfileError):
        ProfileRegistry.from_file(tmp_path / "missing.yaml")

    broken = tmp_path / "broken.yaml"
    broken.write_text("clusters: [unterminated", encoding="utf-8")
    with pytest.raises(ProfileError):
        ProfileRegistry.from_file(broken)


def test_from_file_loads_custom_profiles(tmp_path):
    path = tmp_path / "profiles.yaml"
    path.write_text(
        "clusters:\n"
        "  lab:\n"
        "    seed: 9\n"
        "    node_count: 2\n"
        "    microservices: [web, worker]\n"
        "    replicas: [2]\n",
        encoding="utf-8",
    )
    registry = ProfileRegistry.from_file(path)
    assert registry.default_cluster == "lab"
    assert registry.resolve("other").microservices == ("web", "worker")


def test_malformed_entries_are_skipped_with_a_warning(caplog):
    document = {
        "clusters": {
            "lab": {
                "alerts": [{"severity": "info"}, {"severity": "warning", "title": "Disk filling up"}],
                "ingress_rules": [
                    {"name": "no-host"},
                    {
                        "name": "web",
                        "host": "web.example.com",
                        "paths": [{"path": "/"}, {"path": "/api", "backend": "api:80"}],
                    },
                ],
                "config_maps": ["not-a-mapping", {"name": "app-config"}],
                "secrets": {"name": "not-a-list"},
                "namespace_usage": [{"name": "default", "cpu": "lots"}, {"name": "qa", "cpu": 1.5}],
            }
        }
    }
    with caplog.at_level(logging.WARNING, logger="k8s_mock_cluster.profiles"):
        profile = ProfileRegistry.from_mapping(document).resolve("lab")

    assert [alert.title for alert in profile.alerts] == ["Disk filling up"]
    assert [rule.name for rule in profile.ingress_rules] == ["web"]
    assert profile.ingress_rules[0].paths == (IngressPathTemplate(path="/api", backend="api:80"),)
    assert [config_map.name for config_map in profile.config_maps] == ["app-config"]
    assert profile.secrets == ()
    assert [usage.name for usage in profile.namespace_usage] == ["qa"]
    assert "Skipping alerts[0] of cluster 'lab'" in caplog.text
    assert "Skipping ingress_rules[0] of cluster 'lab'" in caplog.text
    assert "Ignoring secrets of cluster 'lab'" in caplog.text


def test_default_registry_is_parsed_once():
    assert ProfileRegistry.default() is ProfileRegistry.default()


def test_range_sampling_keeps_fractions():
    rng = RandomSource(3)
    assert ResourceRange(1, 3).sample(rng) in (1, 2, 3)
    values = [ResourceRange(0.5, 2.5).sample(rng) for _ in range(50)]
    assert all(0.5 <= value <= 2.5 for value in values)
    assert any(value != int(value) for value in values)
