import json
from pathlib import Path

import pytest
from PySide6.QtCore import QSettings

from ntg.app.app_settings_manager import AppSettingsManager, RunMode, PACKAGE_SETTINGS_FILE
from ntg.utils.json_loader import SettingsError


@pytest.fixture
def defaults_file(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "general": {"run_mode": "development"},
        "gesture": {"max_y_translation": 80},
    }), encoding="utf-8")
    return path


def test_package_defaults_are_loaded(tmp_settings):
    mgr = AppSettingsManager()
    assert PACKAGE_SETTINGS_FILE.exists()
    assert mgr.run_mode is RunMode.PRODUCTION
    assert mgr.logging_level == "INFO"
    assert mgr.max_y_translation is None
    assert mgr.initial_transform is None
    assert mgr.gesture_config() == {}
    assert mgr.warnings == []


def test_json_defaults_override_code_defaults(tmp_settings, defaults_file):
    mgr = AppSettingsManager(defaults_path=defaults_file)
    assert mgr.dev_mode
    assert mgr.max_y_translation == 80.0
    assert mgr.gesture_config() == {"maxYTranslation": 80.0}


def test_missing_defaults_fall_back_with_warning(tmp_settings, tmp_path):
    mgr = AppSettingsManager(defaults_path=tmp_path / "nope.json")
    assert mgr.run_mode is RunMode.PRODUCTION
    assert any("missing" in w for w in mgr.warnings)


def test_strict_mode_raises_on_missing_defaults(tmp_settings, tmp_path, monkeypatch):
    monkeypatch.setenv("NTG_STRICT_SETTINGS", "1")
    with pytest.raises(SettingsError):
        AppSettingsManager(defaults_path=tmp_path / "nope.json")


def test_user_values_persist_across_instances(tmp_settings, defaults_file):
    mgr = AppSettingsManager(defaults_path=defaults_file)
    mgr.set_run_mode("verbose")
    mgr.set_logging_level("debug")
    mgr.set_max_y_translation(12.5)
    mgr.set_initial_transform({"a": 1, "b": 0, "c": 0, "d": 1, "tx": 4, "ty": -2})

    again = AppSettingsManager(defaults_path=defaults_file)
    assert again.run_mode is RunMode.VERBOSE
    assert again.logging_level == "DEBUG"
    assert again.max_y_translation == 12.5
    assert again.initial_transform == {"a": 1.0, "b": 0.0, "c": 0.0, "d": 1.0, "tx": 4.0, "ty": -2.0}
    assert again.gesture_config()["initialTransform"]["tx"] == 4.0


def test_invalid_values_fall_back(tmp_settings, defaults_file):
    mgr = AppSettingsManager(defaults_path=defaults_file)
    mgr.set_run_mode("nonsense")
    mgr.set_logging_level("LOUD")
    mgr.set_max_y_translation("far")
    mgr.set_initial_transform([1, 2])

    assert mgr.run_mode is RunMode.PRODUCTION
    assert mgr.logging_level == "INFO"
    assert mgr.max_y_translation is None
    assert mgr.initial_transform is None


def test_broken_qsettings_value_is_validated(tmp_settings, defaults_file):
    tmp_settings.setValue("gesture/max_y_translation", "not a number")
    tmp_settings.setValue("general/run_mode", "development")
    tmp_settings.sync()

    mgr = AppSettingsManager(defaults_path=defaults_file)
    assert mgr.max_y_translation is None
    assert mgr.run_mode is RunMode.DEVELOPMENT


def test_reset_section(tmp_settings, defaults_file):
    mgr = AppSettingsManager(defaults_path=defaults_file)
    mgr.set_max_y_translation(1.0)
    mgr.set_run_mode("production")

    mgr.reset_section("gesture")
    assert mgr.max_y_translation == 80.0
    assert mgr.run_mode is RunMode.PRODUCTION

    mgr.reset_all_to_default()
    assert mgr.run_mode is RunMode.DEVELOPMENT

    with pytest.raises(ValueError):
        mgr.reset_section("view")


def test_to_dict(tmp_settings, defaults_file):
    mgr = AppSettingsManager(defaults_path=defaults_file)
    assert mgr.to_dict() == {
        "general": {"run_mode": "development", "logging_level": "INFO"},
        "gesture": {"max_y_translation": 80.0, "initial_transform": None},
    }
