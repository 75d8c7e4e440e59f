"""Tests for is-night settings mirrors."""

from twilight_tracker.state.settings_store import InMemorySettingsMirror, SQLiteSettingsMirror


def test_sqlite_settings_mirror_persists_flag(tmp_path) -> None:
    """Flag written by one connection should be visible to a new one."""
    db = str(tmp_path / "settings.db")
    mirror = SQLiteSettingsMirror(db)

    assert mirror.get_is_night() is None
    mirror.set_is_night(True)
    mirror.set_is_night(False)
    mirror.set_is_night(True)
    mirror.close()

    reopened = SQLiteSettingsMirror(db)
    assert reopened.get_is_night() is True


def test_in_memory_settings_mirror_counts_writes() -> None:
    mirror = InMemorySettingsMirror()

    mirror.set_is_night(False)
    mirror.set_is_night(True)

    assert mirror.get_is_night() is True
    assert mirror.write_count == 2
