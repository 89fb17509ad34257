import importlib
import json

import keepawake.settings
from keepawake.local.config import MergedSettings


def test_defaults_are_loaded(tmp_path):
    settings = MergedSettings(tmp_path / "overrides.json")

    assert settings.TINY_TIMEOUT_MINUTES == 2
    assert settings.CANCELABLE_TIMEOUT_SECONDS == 3600
    assert settings.KEEP_AWAKE_EXECUTABLE == "caffeinate"


def test_only_modifiable_overrides_apply(tmp_path):
    overrides = tmp_path / "overrides.json"
    overrides.write_text(json.dumps({
        "DEFAULT_TIMEOUT_MINUTES": 15,
        "KEEP_AWAKE_EXECUTABLE": "/tmp/evil",
        "NOT_A_SETTING": 1,
    }))

    settings = MergedSettings(overrides)

    assert settings.DEFAULT_TIMEOUT_MINUTES == 15
    assert settings.KEEP_AWAKE_EXECUTABLE == "caffeinate"
    assert not hasattr(settings, "NOT_A_SETTING")


def test_malformed_overrides_are_ignored(tmp_path):
    overrides = tmp_path / "overrides.json"
    overrides.write_text("{not json")

    settings = MergedSettings(overrides)

    assert settings.DEFAULT_TIMEOUT_MINUTES == 10


def test_update_setting_coerces_and_persists(tmp_path):
    overrides = tmp_path / "overrides.json"
    settings = MergedSettings(overrides)

    ok, _ = settings.update_setting("CANCELABLE_TIMEOUT_SECONDS", "7200")
    assert ok
    assert settings.CANCELABLE_TIMEOUT_SECONDS == 7200
    assert json.loads(overrides.read_text())["CANCELABLE_TIMEOUT_SECONDS"] == 7200

    ok, _ = settings.update_setting("VERBOSE_LOGGING", "yes")
    assert ok and settings.VERBOSE_LOGGING is True

    assert MergedSettings(overrides).CANCELABLE_TIMEOUT_SECONDS == 7200


def test_update_setting_rejects_bad_input(tmp_path):
    settings = MergedSettings(tmp_path / "overrides.json")

    ok, message = settings.update_setting("KEEP_AWAKE_EXECUTABLE", "sh")
    assert not ok and "not modifiable" in message

    ok, _ = settings.update_setting("DEFAULT_TIMEOUT_MINUTES", "soon")
    assert not ok
    assert settings.DEFAULT_TIMEOUT_MINUTES == 10


def test_timeouts_are_read_from_environment(tmp_path, monkeypatch):
    for name, value in (("TINY_TIMEOUT_MINUTES", "1"), ("SMALL_TIMEOUT_MINUTES", "3"),
                        ("MEDIUM_TIMEOUT_MINUTES", "45"), ("GRACEFUL_SHUTDOWN_TIMEOUT", "0.5")):
        monkeypatch.setenv(name, value)
    try:
        importlib.reload(keepawake.settings)
        settings = MergedSettings(tmp_path / "overrides.json")

        assert settings.TINY_TIMEOUT_MINUTES == 1
        assert settings.SMALL_TIMEOUT_MINUTES == 3
        assert settings.MEDIUM_TIMEOUT_MINUTES == 45
        assert settings.GRACEFUL_SHUTDOWN_TIMEOUT == 0.5
    finally:
        monkeypatch.undo()
        importlib.reload(keepawake.settings)
