from datetime import datetime, timezone

import pytest

from k8s_mock_cluster.profiles import ProfileRegistry


@pytest.fixture
def now():
    return datetime(2024, 3, 14, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def registry():
    return ProfileRegistry.default()


@pytest.fixture
def production(registry):
    return registry.resolve("production-us-east-1")


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "CLUSTER_ID",
        "TIME_RANGE",
        "PROFILES_PATH",
        "EVENT_COUNT",
        "REFRESH_INTERVAL_SECONDS",
        "METRICS_PORT",
        "METRICS_HOST",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("k8s_mock_cluster.config.load_dotenv", lambda *args, **kwargs: False)
    return monkeypatch
