import time
import logging
from pathlib import Path

import pytest

from ntg.app import logging_setup
from ntg.app.app_settings_manager import RunMode


@pytest.fixture(autouse=True)
def _isolate_logging():
    """Reset the root logger after each test."""
    yield
    logging.shutdown()
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(logging.WARNING)


@pytest.fixture
def tmp_log_dir(tmp_path: Path):
    d = tmp_path / "logs"
    d.mkdir(parents=True, exist_ok=True)
    return d


@pytest.fixture
def module(tmp_log_dir, monkeypatch):
    """logging_setup with default_log_dir pointing at a temporary directory."""
    monkeypatch.setattr(logging_setup, "default_log_dir", lambda app_name: tmp_log_dir)
    return logging_setup


def _read_text(path: Path) -> str:
    """Short retry in case the listener thread is still writing."""
    for _ in range(10):
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            time.sleep(0.02)
    return path.read_text(encoding="utf-8", errors="replace")


class _Settings:
    def __init__(self, run_mode, logging_level="INFO"):
        self.run_mode = run_mode
        self.logging_level = logging_level


def test_info_level_writes_file(module, tmp_log_dir):
    logs = module.LogSystem.from_levels("ntg", root_level=logging.INFO, console_level=logging.INFO)
    logger = logging.getLogger("ntg.test")

    logger.debug("debug should NOT appear")
    logger.info("info should appear")
    logger.warning("warning should appear")
    logs.stop()

    log_file = tmp_log_dir / "ntg.log"
    assert log_file.exists()
    assert logs.log_file == log_file

    text = _read_text(log_file)
    assert "info should appear" in text
    assert "warning should appear" in text
    assert "debug should NOT appear" not in text
    assert " INFO " in text
    assert "ntg.test" in text


def test_debug_level_outputs_debug(module, tmp_log_dir):
    logs = module.LogSystem.from_levels("ntg", root_level=logging.DEBUG, console_level=logging.DEBUG)
    logger = logging.getLogger("ntg.gestures")

    logger.debug("debug visible")
    logger.info("info visible")
    logs.stop()

    text = _read_text(tmp_log_dir / "ntg.log")
    assert "debug visible" in text
    assert "info visible" in text


def test_queue_listener_flush_on_stop(module, tmp_log_dir):
    logs = module.LogSystem.from_levels("ntg", root_level=logging.INFO, console_level=logging.INFO)
    logger = logging.getLogger("ntg.bulk")

    for i in range(200):
        logger.info("line %04d", i)
    logs.stop()

    text = _read_text(tmp_log_dir / "ntg.log")
    assert "line 0000" in text
    assert "line 0199" in text
    assert "line 0200" not in text


def test_env_level_is_used_by_default(module, tmp_log_dir, monkeypatch):
    monkeypatch.setenv("NTG_LOG_LEVEL", "warning")
    cfg = module.build_config("ntg")
    assert cfg["root"]["level"] == logging.WARNING
    assert cfg["_file_settings"]["filename"] == str(tmp_log_dir / "ntg.log")


def test_backup_count_from_env(module, monkeypatch):
    monkeypatch.setenv("NTG_LOG_BACKUP_COUNT", "2")
    assert module.build_config("ntg")["_file_settings"]["backupCount"] == 2


@pytest.mark.parametrize("mode, console", [
    (RunMode.DEVELOPMENT, logging.DEBUG),
    (RunMode.VERBOSE, logging.DEBUG),
    (RunMode.PRODUCTION, logging.WARNING),
])
def test_logging_policy_by_run_mode(module, mode, console):
    logs = module.LogSystem.from_levels("ntg", root_level=logging.INFO, console_level=logging.INFO)
    try:
        module.apply_logging_policy(logs, _Settings(mode, logging_level="WARNING"))
        assert logging.getLogger().level == logging.DEBUG
        assert logs._console_handler.level == console
        assert logs._file_handler.level == logging.DEBUG
    finally:
        logs.stop()
