"""Environment-driven runtime configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

from twilight_tracker.time.clock import resolve_timezone

LocationMode = Literal["static", "push"]


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Runtime settings for one twilight service instance."""

    location_mode: LocationMode = "push"
    latitude: float | None = None
    longitude: float | None = None
    timezone_name: str | None = None
    settings_path: str | None = None

    def __post_init__(self) -> None:
        """Validate mode-specific requirements."""
        if self.location_mode not in {"static", "push"}:
            raise ValueError("location_mode must be one of: static, push")
        if self.location_mode == "static" and (self.latitude is None or self.longitude is None):
            raise ValueError(
                "TWILIGHT_LATITUDE and TWILIGHT_LONGITUDE are required for static location mode"
            )
        if self.timezone_name:
            resolve_timezone(self.timezone_name)


def _resolve_mode(raw: str | None) -> LocationMode:
    mode = (raw or "push").strip().lower()
    if mode == "static":
        return "static"
    if mode == "push":
        return "push"
    raise ValueError("TWILIGHT_LOCATION_MODE must be one of: static, push")


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def load_config_from_env() -> ServiceConfig:
    """Build :class:`ServiceConfig` from ``TWILIGHT_*`` environment variables."""
    return ServiceConfig(
        location_mode=_resolve_mode(os.getenv("TWILIGHT_LOCATION_MODE")),
        latitude=_optional_float("TWILIGHT_LATITUDE"),
        longitude=_optional_float("TWILIGHT_LONGITUDE"),
        timezone_name=os.getenv("TWILIGHT_TIMEZONE") or None,
        settings_path=os.getenv("TWILIGHT_SETTINGS_PATH") or None,
    )
