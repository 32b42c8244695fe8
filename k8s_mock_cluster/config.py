"""Application configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .events import DEFAULT_EVENT_COUNT
from .timeseries import DEFAULT_TIME_RANGE


@dataclass(slots=True)
class Config:
    """Runtime configuration parsed from environment variables."""

    cluster_id: Optional[str] = None
    time_range: str = DEFAULT_TIME_RANGE
    profiles_path: Optional[str] = None
    event_count: int = DEFAULT_EVENT_COUNT
    refresh_interval_seconds: float = 30.0
    metrics_port: int = 8000
    metrics_host: str = "0.0.0.0"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables and defaults."""

        load_dotenv()

        def _get_int(name: str, default: int) -> int:
            value = os.getenv(name)
            if value is None:
                return default
            try:
                return int(value)
            except ValueError as exc:
                raise ValueError(f"Invalid integer for {name}: {value}") from exc

        def _get_float(name: str, default: float) -> float:
            value = os.getenv(name)
            if value is None:
                return default
            try:
                return float(value)
            except ValueError as exc:
                raise ValueError(f"Invalid float for {name}: {value}") from exc

        return cls(
            cluster_id=os.getenv("CLUSTER_ID") or None,
            time_range=os.getenv("TIME_RANGE", DEFAULT_TIME_RANGE),
            profiles_path=os.getenv("PROFILES_PATH") or None,
            event_count=_get_int("EVENT_COUNT", DEFAULT_EVENT_COUNT),
            refresh_interval_seconds=_get_float("REFRESH_INTERVAL_SECONDS", 30.0),
            metrics_port=_get_int("METRICS_PORT", 8000),
            metrics_host=os.getenv("METRICS_HOST", "0.0.0.0"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


__all__ = ["Config"]
