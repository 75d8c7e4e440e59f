"""Collaborator factory functions driven by :class:`ServiceConfig`."""

from __future__ import annotations

from twilight_tracker.config import ServiceConfig
from twilight_tracker.ingest.interfaces import LocationSource
from twilight_tracker.ingest.location_providers import PushLocationSource, StaticLocationSource
from twilight_tracker.state.settings_store import (
    InMemorySettingsMirror,
    SettingsMirror,
    SQLiteSettingsMirror,
)


def create_location_source(config: ServiceConfig) -> LocationSource:
    """Create the location source for the configured mode."""
    if config.location_mode == "static":
        assert config.latitude is not None and config.longitude is not None
        return StaticLocationSource(config.latitude, config.longitude)
    return PushLocationSource()


def create_settings_mirror(config: ServiceConfig) -> SettingsMirror:
    """Create a SQLite settings mirror when a path is configured, else in-memory."""
    if config.settings_path:
        return SQLiteSettingsMirror(config.settings_path)
    return InMemorySettingsMirror()
