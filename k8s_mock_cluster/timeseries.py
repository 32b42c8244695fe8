"""Resource utilisation samples for the dashboard charts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List

from .entities import TimeSeriesPoint
from .profiles import ClusterProfile
from .random_source import RandomSource

logger = logging.getLogger(__name__)

DEFAULT_TIME_RANGE = "24h"


@dataclass(slots=True, frozen=True)
class TimeRange:
    total_minutes: int
    interval_minutes: int

    @property
    def point_count(self) -> int:
        return self.total_minutes // self.interval_minutes + 1


TIME_RANGES: Dict[str, TimeRange] = {
    "1h": TimeRange(total_minutes=60, interval_minutes=2),
    "6h": TimeRange(total_minutes=360, interval_minutes=15),
    "12h": TimeRange(total_minutes=720, interval_minutes=30),
    "24h": TimeRange(total_minutes=1440, interval_minutes=60),
}


def resolve_time_range(time_range: str) -> str:
    """Return ``time_range`` if known, otherwise the default range."""

    if time_range in TIME_RANGES:
        return time_range
    logger.warning("Unknown time range %r, using %s", time_range, DEFAULT_TIME_RANGE)
    return DEFAULT_TIME_RANGE


def generate_time_series(profile: ClusterProfile, time_range: str, now: datetime) -> List[TimeSeriesPoint]:
    """Samples from ``now - range`` to ``now`` inclusive, oldest first.

    The stream is seeded from the profile seed and the range name, so a given
    cluster and range always produce the same values. Each sample is drawn
    independently from the profile ranges; adjacent points are not correlated.
    """

    key = resolve_time_range(time_range)
    window = TIME_RANGES[key]
    rng = RandomSource.derive(profile.seed, f"timeseries:{key}")
    ranges = profile.resource_ranges
    points: List[TimeSeriesPoint] = []
    for offset in range(window.total_minutes, -1, -window.interval_minutes):
        timestamp = now - timedelta(minutes=offset)
        points.append(
            TimeSeriesPoint(
                timestamp=timestamp.strftime("%H:%M"),
                full_timestamp=timestamp,
                cpu=ranges.cpu.sample(rng),
                memory=ranges.memory.sample(rng),
                disk=ranges.disk.sample(rng),
                network_in=ranges.network_in.sample(rng),
                network_out=ranges.network_out.sample(rng),
            )
        )
    return points


__all__ = ["DEFAULT_TIME_RANGE", "TIME_RANGES", "TimeRange", "generate_time_series", "resolve_time_range"]
