"""Tests for environment configuration and collaborator factories."""

from __future__ import annotations

import pytest

from twilight_tracker.config import ServiceConfig, load_config_from_env
from twilight_tracker.ingest.factory import create_location_source, create_settings_mirror
from twilight_tracker.ingest.location_providers import PushLocationSource, StaticLocationSource
from twilight_tracker.state.settings_store import InMemorySettingsMirror, SQLiteSettingsMirror

_ENV_VARS = (
    "TWILIGHT_LOCATION_MODE",
    "TWILIGHT_LATITUDE",
    "TWILIGHT_LONGITUDE",
    "TWILIGHT_TIMEZONE",
    "TWILIGHT_SETTINGS_PATH",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_to_push_mode_with_in_memory_settings() -> None:
    config = load_config_from_env()

    assert config == ServiceConfig()
    assert isinstance(create_location_source(config), PushLocationSource)
    assert isinstance(create_settings_mirror(config), InMemorySettingsMirror)


def test_static_mode_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("TWILIGHT_LOCATION_MODE", "Static")
    monkeypatch.setenv("TWILIGHT_LATITUDE", "37.4")
    monkeypatch.setenv("TWILIGHT_LONGITUDE", "-122.1")
    monkeypatch.setenv("TWILIGHT_TIMEZONE", "America/Los_Angeles")
    monkeypatch.setenv("TWILIGHT_SETTINGS_PATH", str(tmp_path / "settings.db"))

    config = load_config_from_env()

    assert config.location_mode == "static"
    assert (config.latitude, config.longitude) == (37.4, -122.1)
    assert config.timezone_name == "America/Los_Angeles"
    source = create_location_source(config)
    assert isinstance(source, StaticLocationSource)
    assert isinstance(create_settings_mirror(config), SQLiteSettingsMirror)


def test_static_mode_requires_coordinates(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TWILIGHT_LOCATION_MODE", "static")

    with pytest.raises(ValueError, match="TWILIGHT_LATITUDE"):
        load_config_from_env()


def test_rejects_invalid_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TWILIGHT_LOCATION_MODE", "gps")
    with pytest.raises(ValueError, match="TWILIGHT_LOCATION_MODE"):
        load_config_from_env()

    monkeypatch.setenv("TWILIGHT_LOCATION_MODE", "push")
    monkeypatch.setenv("TWILIGHT_LATITUDE", "north")
    with pytest.raises(ValueError, match="TWILIGHT_LATITUDE"):
        load_config_from_env()

    monkeypatch.delenv("TWILIGHT_LATITUDE")
    monkeypatch.setenv("TWILIGHT_TIMEZONE", "Mars/Olympus_Mons")
    with pytest.raises(ValueError, match="unknown timezone"):
        load_config_from_env()
