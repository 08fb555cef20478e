from __future__ import annotations

from datetime import datetime
import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional


class SettingsError(RuntimeError):
    """Raised when strict settings loading fails (dev/CI)."""


def truthy_env(name: str) -> bool:
    """Return True if the environment variable is set to 1/true/yes/on."""
    v = os.environ.get(name, "")
    return v.strip().lower() in ("1", "true", "yes", "on")


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge dictionaries (override wins). Neither input is modified."""
    out: dict[str, Any] = dict(base)
    for k, v in override.items():
        if isinstance(v, Mapping) and isinstance(out.get(k), Mapping):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _report(
        msg: str,
        *,
        strict: bool,
        warnings: list[str],
        logger: Any = None,
        exc: Exception | None = None,
        with_traceback: bool = False,
) -> None:
    """Raise SettingsError in strict mode, otherwise record and log the problem."""
    if strict:
        raise SettingsError(msg) from exc
    warnings.append(msg)
    if logger is None:
        return
    if with_traceback and exc is not None:
        logger.exception(msg)
    else:
        logger.warning(msg)


def _quarantine(path: Path, *, logger: Any = None) -> Path:
    """Move a broken file aside as <name>.broken-YYYYmmdd-HHMMSS and return the new path."""
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    broken = path.with_suffix(f".broken-{ts}")
    path.rename(broken)
    if logger is not None:
        logger.warning("Broken settings JSON moved to %s", broken)
    return broken


def read_json_dict(
        path: Path,
        *,
        strict: bool,
        quarantine_broken: bool,
        warnings: list[str],
        logger: Any = None,
) -> Optional[dict[str, Any]]:
    """
    Read a JSON settings file whose top level must be an object.

    - strict=True: missing / unreadable / broken / non-object -> SettingsError
    - strict=False: return None, append a message to ``warnings`` and log it
    - quarantine_broken=True: rename files that fail to parse, so the next
      start doesn't trip over them again
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        _report(f"Settings JSON missing: {path}",
                strict=strict, warnings=warnings, logger=logger, exc=e)
        return None
    except OSError as e:
        _report(f"Failed to read settings JSON {path}: ({e})",
                strict=strict, warnings=warnings, logger=logger, exc=e, with_traceback=True)
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse settings JSON {path}: ({e})"
        if quarantine_broken:
            try:
                msg += f" -> quarantined to {_quarantine(path, logger=logger)}"
            except OSError as qe:
                _report(msg, strict=strict, warnings=warnings, logger=logger, exc=qe,
                        with_traceback=True)
                return None
        _report(msg, strict=strict, warnings=warnings, logger=logger, exc=e)
        return None

    if not isinstance(data, dict):
        _report(f"Settings JSON must be an object at top-level: {path}",
                strict=strict, warnings=warnings, logger=logger)
        return None
    return data
