import json
from datetime import timedelta

from k8s_mock_cluster.profiles import ProfileRegistry
from k8s_mock_cluster.snapshot import DashboardSession, get_snapshot


def test_production_scenario(registry, now):
    snapshot = get_snapshot("production-us-east-1", "1h", registry=registry, now=now)
    assert snapshot.nodes[4].status == "Warning"
    assert all(node.status == "Ready" for node in snapshot.nodes[:4])
    assert snapshot.stats.nodes.unhealthy == 1
    assert len(snapshot.time_series) == 31
    assert len(snapshot.events) == 50
    assert len(snapshot.alerts) == 4
    assert len(snapshot.namespace_usage) == 5
    assert sum(deployment.replicas.desired for deployment in snapshot.deployments) == len(snapshot.pods)


def test_unknown_cluster_and_range_fall_back(registry, now):
    snapshot = get_snapshot("nope", "3d", registry=registry, now=now)
    assert snapshot.cluster_id == "production-us-east-1"
    assert snapshot.time_range == "24h"


def test_snapshots_are_deterministic(registry, now):
    first = get_snapshot("staging-us-west-2", "6h", registry=registry, now=now)
    second = get_snapshot("staging-us-west-2", "6h", registry=registry, now=now)
    assert first == second


def test_clusters_differ(registry, now):
    production = get_snapshot("production-us-east-1", registry=registry, now=now)
    staging = get_snapshot("staging-us-west-2", registry=registry, now=now)
    assert len(production.nodes) == 5
    assert len(staging.nodes) == 3
    assert staging.stats.cluster_health == "Healthy"


def test_event_count_does_not_perturb_other_streams(registry, now):
    few = get_snapshot("production-us-east-1", registry=registry, now=now, event_count=5)
    many = get_snapshot("production-us-east-1", registry=registry, now=now, event_count=80)
    assert len(few.events) == 5
    assert len(many.events) == 80
    assert few.nodes == many.nodes
    assert few.pods == many.pods
    assert few.services == many.services


def test_to_dict_is_json_ready(registry, now):
    data = get_snapshot("development-eu-central-1", "12h", registry=registry, now=now).to_dict()
    decoded = json.loads(json.dumps(data))
    assert decoded["cluster_id"] == "development-eu-central-1"
    assert decoded["generated_at"] == now.isoformat()
    assert decoded["nodes"][1]["status"] == "Warning"
    assert decoded["stats"]["resources"]["cpu"]["total"] == 8
    assert decoded["ingress_rules"][0]["paths"][0]["service"] == "api-gateway"


def test_session_select_and_refresh(registry, now):
    session = DashboardSession(registry=registry, cluster_id="staging-us-west-2", time_range="1h")
    selected = session.select(now=now)
    assert session.snapshot is selected

    later = now + timedelta(seconds=30)
    refreshed = session.refresh(now=later)
    assert session.snapshot is refreshed
    assert refreshed.generated_at == later
    assert refreshed.nodes == selected.nodes
    assert refreshed.pods == selected.pods
    assert refreshed.events == selected.events
    assert refreshed.time_series[-1].full_timestamp == later
    assert [point.cpu for point in refreshed.time_series] == [point.cpu for point in selected.time_series]


def test_session_switches_cluster_and_range(registry, now):
    session = DashboardSession(registry=registry)
    assert session.cluster_id == "production-us-east-1"
    snapshot = session.select("development-eu-central-1", "6h", now=now)
    assert (session.cluster_id, session.time_range) == ("development-eu-central-1", "6h")
    assert len(snapshot.time_series) == 25


def test_refresh_without_snapshot_selects(registry, now):
    session = DashboardSession(registry=registry, cluster_id="staging-us-west-2")
    snapshot = session.refresh(now=now)
    assert snapshot.cluster_id == "staging-us-west-2"
    assert session.snapshot is snapshot


def test_superseded_requests_are_discarded(registry, now):
    session = DashboardSession(registry=registry)
    old = session.begin_request()
    new = session.begin_request()
    staging = get_snapshot("staging-us-west-2", registry=registry, now=now)
    production = get_snapshot("production-us-east-1", registry=registry, now=now)

    assert session.complete(new, production) is True
    assert session.complete(old, staging) is False
    assert session.snapshot is production
    assert session.complete(new, staging) is False


def test_services_select_pods_in_their_own_namespace(registry, now):
    snapshot = get_snapshot("development-eu-central-1", "1h", registry=registry, now=now)
    for service in snapshot.services:
        selected = [pod for pod in snapshot.pods if pod.deployment == service.selector["app"]]
        assert selected
        assert {pod.namespace for pod in selected} == {service.namespace}


def test_default_registry_is_shared(now):
    assert get_snapshot("staging-us-west-2", "1h", now=now) == get_snapshot(
        "staging-us-west-2", "1h", now=now
    )
    assert ProfileRegistry.default() is ProfileRegistry.default()
