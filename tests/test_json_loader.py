import logging
from pathlib import Path

import pytest

from ntg.utils.json_loader import SettingsError, deep_merge, read_json_dict, truthy_env


def test_deep_merge_keeps_base_untouched():
    base = {"general": {"run_mode": "production", "logging_level": "INFO"}, "x": 1}
    merged = deep_merge(base, {"general": {"run_mode": "development"}, "y": 2})

    assert merged == {"general": {"run_mode": "development", "logging_level": "INFO"}, "x": 1, "y": 2}
    assert base["general"]["run_mode"] == "production"


def test_truthy_env(monkeypatch):
    monkeypatch.setenv("NTG_FLAG", " Yes ")
    assert truthy_env("NTG_FLAG")
    monkeypatch.setenv("NTG_FLAG", "0")
    assert not truthy_env("NTG_FLAG")


def test_reads_object(tmp_path: Path):
    path = tmp_path / "s.json"
    path.write_text('{"gesture": {"max_y_translation": 5}}', encoding="utf-8")
    warnings = []
    assert read_json_dict(path, strict=True, quarantine_broken=False, warnings=warnings) == {
        "gesture": {"max_y_translation": 5}
    }
    assert warnings == []


def test_non_object_is_rejected(tmp_path: Path):
    path = tmp_path / "s.json"
    path.write_text("[1, 2]", encoding="utf-8")
    warnings = []
    assert read_json_dict(path, strict=False, quarantine_broken=False, warnings=warnings) is None
    assert "object" in warnings[0]
    with pytest.raises(SettingsError):
        read_json_dict(path, strict=True, quarantine_broken=False, warnings=[])


def test_broken_file_is_quarantined(tmp_path: Path, caplog):
    path = tmp_path / "s.json"
    path.write_text("{not json", encoding="utf-8")
    warnings = []

    with caplog.at_level(logging.WARNING):
        result = read_json_dict(path, strict=False, quarantine_broken=True,
                                warnings=warnings, logger=logging.getLogger("ntg.test"))

    assert result is None
    assert not path.exists()
    assert list(tmp_path.glob("s.broken-*"))
    assert "quarantined" in warnings[0]
    assert "Broken settings JSON" in caplog.text


def test_strict_broken_file_raises(tmp_path: Path):
    path = tmp_path / "s.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SettingsError):
        read_json_dict(path, strict=True, quarantine_broken=False, warnings=[])
    assert path.exists()
