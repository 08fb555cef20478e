from __future__ import annotations

import logging
import logging.config
import os
import queue
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path

from ntg.app.app_settings_manager import AppSettingsManager, RunMode
from ntg.utils.log_util import level_from_name

FORMAT = "%(asctime)s.%(msecs)03dZ %(levelname)s %(process)d %(threadName)s %(name)s %(message)s"
DATEFMT = "%Y-%m-%dT%H:%M:%S"


def default_log_dir(app_name: str) -> Path:
    base = Path.home() / f".{app_name.lower()}" / "logs"
    base.mkdir(parents=True, exist_ok=True)
    return base


def build_config(
        app_name: str,
        root_level: int | str | None = None,
        console_level: int | str | None = None,
        log_dir: Path | None = None,
) -> dict:
    """
    Build a logging config dict.

    The root logger writes to the console directly and to a queue; the
    file side is described in ``_file_settings`` and attached to a
    QueueListener by LogSystem.
    """
    root = level_from_name(root_level or os.getenv("NTG_LOG_LEVEL", "INFO"))
    console = level_from_name(console_level, default=logging.INFO)
    log_dir = log_dir or default_log_dir(app_name)
    log_file = str(log_dir / f"{app_name}.log")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": FORMAT, "datefmt": DATEFMT},
        },
        "handlers": {
            "queue": {"class": "logging.handlers.QueueHandler", "queue": queue.Queue(-1)},
            "console": {"class": "logging.StreamHandler", "formatter": "standard", "level": console},
        },
        "root": {"level": root, "handlers": ["queue", "console"]},
        # consumed by LogSystem, not by dictConfig
        "_file_settings": {
            "filename": log_file,
            "maxBytes": 1024 * 1024 * 5,
            "backupCount": int(os.getenv("NTG_LOG_BACKUP_COUNT", 5)),
            "encoding": "utf-8",
            "format": FORMAT,
            "datefmt": DATEFMT,
        },
    }


class LogSystem:
    """Thin wrapper owning the QueueListener that writes the log file."""

    def __init__(self, app_name: str, level: int | str | None = None,
                 console_level: int | str | None = None):
        cfg = build_config(app_name, level, console_level)
        file_settings = cfg.pop("_file_settings")
        logging.config.dictConfig(cfg)

        root_logger = logging.getLogger()
        qh = next((h for h in root_logger.handlers if isinstance(h, QueueHandler)), None)
        if qh is None:
            raise RuntimeError("QueueHandler not found.")
        self._console_handler = next(
            (h for h in root_logger.handlers
             if type(h) is logging.StreamHandler), None)

        self._file_handler = RotatingFileHandler(
            file_settings["filename"],
            maxBytes=file_settings["maxBytes"],
            backupCount=file_settings["backupCount"],
            encoding=file_settings["encoding"],
        )
        self._file_handler.setFormatter(
            logging.Formatter(file_settings["format"], file_settings["datefmt"]))
        self.log_file = Path(file_settings["filename"])

        self.listener = QueueListener(qh.queue, self._file_handler, respect_handler_level=True)
        self.listener.start()

    @classmethod
    def from_levels(cls, app_name: str, root_level: int, console_level: int | None = None) -> LogSystem:
        return cls(app_name, level=root_level, console_level=console_level)

    def apply_levels(self, root_level: int, console_level: int | None = None,
                     file_level: int | None = None) -> None:
        """Change levels after startup."""
        logging.getLogger().setLevel(root_level)
        if self._console_handler is not None and console_level is not None:
            self._console_handler.setLevel(console_level)
        if file_level is not None:
            self._file_handler.setLevel(file_level)

    def stop(self) -> None:
        """Flush the queue and close the log file."""
        self.listener.stop()
        self._file_handler.close()


def apply_logging_policy(logs: LogSystem, settings: AppSettingsManager) -> None:
    """Switch log levels according to the run mode and configured level."""
    mode = getattr(settings, "run_mode", RunMode.PRODUCTION)

    if mode == RunMode.DEVELOPMENT or mode == RunMode.VERBOSE:
        logs.apply_levels(root_level=logging.DEBUG,
                          console_level=logging.DEBUG,
                          file_level=logging.DEBUG)
    else:
        console = level_from_name(getattr(settings, "logging_level", "INFO"))
        logs.apply_levels(root_level=logging.DEBUG,
                          console_level=console,
                          file_level=logging.DEBUG)
