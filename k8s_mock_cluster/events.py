"""Synthetic event feed and alert list."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, List, Sequence, Tuple

from .entities import EVENT_TYPES, Alert, Event
from .profiles import ClusterProfile
from .random_source import RandomSource

DEFAULT_EVENT_COUNT = 50
UNACKNOWLEDGED_ALERTS = 2

# (reason, message) pairs per event type.
EVENT_VOCABULARY: Dict[str, Sequence[Tuple[str, str]]] = {
    "Normal": (
        ("Scheduled", "Successfully assigned pod to node"),
        ("Pulling", "Pulling image from registry"),
        ("Pulled", "Successfully pulled image"),
        ("Created", "Created container"),
        ("Started", "Started container"),
    ),
    "Warning": (
        ("FailedScheduling", "0/3 nodes are available: insufficient memory."),
        ("BackOff", "Back-off restarting failed container"),
        ("Unhealthy", "Liveness probe failed: HTTP probe failed"),
        ("FailedMount", "Unable to mount volumes"),
    ),
}


def generate_events(
    profile: ClusterProfile, rng: RandomSource, now: datetime, count: int = DEFAULT_EVENT_COUNT
) -> List[Event]:
    """Return ``count`` events, most recent first."""

    objects = profile.microservices or ("pod",)
    namespaces = profile.namespaces or ("default",)
    events: List[Event] = []
    for _ in range(max(count, 0)):
        event_type = rng.choice(EVENT_TYPES)
        reason, message = rng.choice(EVENT_VOCABULARY[event_type])
        events.append(
            Event(
                id=rng.uuid4(),
                type=event_type,
                reason=reason,
                message=message,
                namespace=rng.choice(namespaces),
                object=f"{rng.choice(objects)}-{rng.alphanumeric(10)}",
                timestamp=now - timedelta(minutes=rng.integer(1, 1440)),
                count=rng.integer(1, 10),
            )
        )
    events.sort(key=lambda event: event.timestamp, reverse=True)
    return events


def generate_alerts(profile: ClusterProfile, now: datetime) -> List[Alert]:
    # Only the first alerts are still waiting for an operator.
    return [
        Alert(
            id=str(index + 1),
            severity=template.severity,
            title=template.title,
            message=template.message,
            timestamp=now - timedelta(minutes=template.minutes_ago),
            acknowledged=index >= UNACKNOWLEDGED_ALERTS,
        )
        for index, template in enumerate(profile.alerts)
    ]


__all__ = ["DEFAULT_EVENT_COUNT", "EVENT_VOCABULARY", "generate_alerts", "generate_events"]
