import math

from k8s_mock_cluster.generator import generate_deployments, generate_nodes, generate_pods
from k8s_mock_cluster.profiles import ClusterProfile
from k8s_mock_cluster.random_source import RandomSource
from k8s_mock_cluster.stats import aggregate, usage_percent


def _pass(profile, now):
    nodes = generate_nodes(profile, RandomSource.derive(profile.seed, "nodes"), now)
    deployments = generate_deployments(profile, RandomSource.derive(profile.seed, "deployments"), now)
    pods = generate_pods(deployments, profile, RandomSource.derive(profile.seed, "pods"), now)
    return nodes, pods, deployments


def test_production_stats(production, now):
    nodes, pods, deployments = _pass(production, now)
    stats = aggregate(nodes, pods, deployments, production)

    assert stats.cluster_health == "Warning"
    assert (stats.nodes.total, stats.nodes.healthy, stats.nodes.unhealthy) == (5, 4, 1)
    assert stats.pods.total == 31
    assert stats.pods.failed == 1
    assert stats.pods.running == 30
    assert stats.pods.pending == 0
    assert stats.deployments == 10
    assert stats.services == 10
    assert stats.namespaces == 5

    cpu_total = sum(node.cpu.capacity for node in nodes)
    cpu_used = sum(node.cpu.used for node in nodes)
    assert stats.resources.cpu.total == cpu_total == 80
    assert stats.resources.cpu.usage_percent == round(cpu_used / cpu_total * 100, 1)


def test_all_ready_nodes_are_healthy(now):
    profile = ClusterProfile(cluster_id="c", node_count=3)
    nodes, pods, deployments = _pass(profile, now)
    assert aggregate(nodes, pods, deployments, profile).cluster_health == "Healthy"


def test_zero_nodes_never_produce_nan(now):
    profile = ClusterProfile(cluster_id="empty", node_count=0)
    stats = aggregate([], [], [], profile)
    assert stats.resources.cpu.usage_percent == 0.0
    assert stats.resources.memory.usage_percent == 0.0
    assert not math.isnan(stats.resources.cpu.usage_percent)
    assert stats.nodes.total == stats.nodes.unhealthy == 0
    assert stats.pods.total == 0


def test_usage_percent_rounding():
    assert usage_percent(1, 3) == 33.3
    assert usage_percent(5, 0) == 0.0
