from __future__ import annotations
from dataclasses import dataclass, asdict, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
from PySide6.QtCore import QSettings
import logging
import math

from ntg.utils.json_loader import deep_merge, read_json_dict, truthy_env

logger = logging.getLogger(__name__)

TRANSFORM_FIELDS = ("a", "b", "c", "d", "tx", "ty")

PACKAGE_SETTINGS_FILE = Path(__file__).resolve().parents[1] / "settings" / "settings.json"


class RunMode(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    VERBOSE = "verbose"

    def __str__(self):
        return self.value
    def __repr__(self):
        return self.value


# ----------------------
# Default settings
# ----------------------
DEFAULTS: Dict[str, Any] = {
    "general": {
        "run_mode": RunMode.PRODUCTION.value,
        "logging_level": "INFO",  # "DEBUG", "INFO", "WARNING", "ERROR"
    },
    "gesture": {
        "max_y_translation": None,   # None -> no clamp
        "initial_transform": None,   # None -> identity
    },
}

# ---------------------
# Data model
# ---------------------
@dataclass
class GeneralConfig:
    run_mode: RunMode = RunMode.PRODUCTION
    logging_level: str = "INFO"

@dataclass
class GestureConfig:
    max_y_translation: Optional[float] = None
    initial_transform: Optional[dict[str, float]] = None

@dataclass
class AppSettingsData:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    gesture: GestureConfig = field(default_factory=GestureConfig)

# ----------------------
# Utility
# ----------------------
def _validate_run_mode(v: Any) -> RunMode:
    if isinstance(v, RunMode):
        return v
    mode = str(v).strip().lower()
    try:
        return RunMode(mode)
    except ValueError:
        return RunMode(DEFAULTS["general"]["run_mode"])

def _validate_logging_level(v: str) -> str:
    v = str(v).upper()
    return v if v in ("DEBUG", "INFO", "WARNING", "ERROR") else "INFO"

def _validate_max_y_translation(v: Any) -> Optional[float]:
    if v is None or (isinstance(v, str) and not v.strip()):
        return None
    try:
        f = float(v)
    except Exception:
        return None
    return f if math.isfinite(f) else None

def _validate_initial_transform(v: Any) -> Optional[dict[str, float]]:
    """
    Accepts a dict with the six transform fields, a sequence of six numbers,
    or the comma separated string QSettings stores. Anything else -> None.
    """
    if v is None:
        return None
    if isinstance(v, str):
        if not v.strip():
            return None
        v = v.split(",")
    try:
        if isinstance(v, dict):
            values = [float(v[k]) for k in TRANSFORM_FIELDS]
        else:
            values = [float(x) for x in v]
    except Exception:
        return None
    if len(values) != len(TRANSFORM_FIELDS) or not all(math.isfinite(x) for x in values):
        return None
    return dict(zip(TRANSFORM_FIELDS, values))


# ---------------------
# AppSettingManager
# ---------------------
class AppSettingsManager:
    """
    Manages the general and gesture settings of the application.

    Effective values are layered as:
    DEFAULTS (code) <- settings/settings.json (package) <- QSettings (user).
    Values are validated on load and fall back when out of range.
    set_* persists to QSettings immediately.
    """
    def __init__(self,
                 org_domain: str = "ntg.org",
                 app_name: str = "NTG",
                 defaults_path: Path | None = None):
        self._settings = QSettings(org_domain, app_name)
        self._defaults_path = defaults_path or PACKAGE_SETTINGS_FILE
        self.warnings: list[str] = []
        self._data = self._load_effective()

    # Read
    @property
    def data(self) -> AppSettingsData:
        return self._data

    @property
    def run_mode(self) -> RunMode:
        return self._data.general.run_mode

    @property
    def dev_mode(self) -> bool:
        return self.run_mode is RunMode.DEVELOPMENT

    @property
    def logging_level(self) -> str:
        return self._data.general.logging_level

    @property
    def max_y_translation(self) -> Optional[float]:
        return self._data.gesture.max_y_translation

    @property
    def initial_transform(self) -> Optional[dict[str, float]]:
        return self._data.gesture.initial_transform

    def gesture_config(self) -> dict[str, Any]:
        """Gesture settings in the handler's configure() format."""
        config: dict[str, Any] = {}
        if self.initial_transform is not None:
            config["initialTransform"] = dict(self.initial_transform)
        if self.max_y_translation is not None:
            config["maxYTranslation"] = self.max_y_translation
        return config

    # Write
    def set_run_mode(self, v: str | RunMode) -> None:
        mode = _validate_run_mode(v)
        self._settings.setValue("general/run_mode", mode.value)
        self._data.general.run_mode = mode

    def set_logging_level(self, v: str) -> None:
        level = _validate_logging_level(v)
        self._settings.setValue("general/logging_level", level)
        self._data.general.logging_level = level

    def set_max_y_translation(self, v: float | None) -> None:
        value = _validate_max_y_translation(v)
        if value is None:
            self._settings.remove("gesture/max_y_translation")
        else:
            self._settings.setValue("gesture/max_y_translation", value)
        self._data.gesture.max_y_translation = value

    def set_initial_transform(self, v: Any) -> None:
        value = _validate_initial_transform(v)
        if value is None:
            self._settings.remove("gesture/initial_transform")
        else:
            self._settings.setValue("gesture/initial_transform",
                                    ",".join(repr(value[k]) for k in TRANSFORM_FIELDS))
        self._data.gesture.initial_transform = value

    # Reset
    def reset_all_to_default(self) -> None:
        """Remove every user setting."""
        self._settings.remove("general")
        self._settings.remove("gesture")
        self._data = self._load_effective()

    def reset_section(self, section: str) -> None:
        """Reset a single section to its defaults."""
        if section not in ("general", "gesture"):
            raise ValueError(f"Invalid section: {section}")
        self._settings.remove(section)
        self._data = self._load_effective()

    def to_dict(self) -> dict[str, Any]:
        data = {
            "general": asdict(self._data.general),
            "gesture": asdict(self._data.gesture),
        }
        data["general"]["run_mode"] = self._data.general.run_mode.value
        return data

    # ---------- internals ---------------
    def _load_effective(self) -> AppSettingsData:
        """DEFAULTS + package JSON + QSettings overrides, validated into the model."""
        base = self._load_package_defaults()
        merged = self._apply_qsettings_overrides(base)
        return self._make_model_from(merged)

    def _load_package_defaults(self) -> dict[str, Any]:
        self.warnings.clear()
        loaded = read_json_dict(
            self._defaults_path,
            strict=truthy_env("NTG_STRICT_SETTINGS"),
            quarantine_broken=False,
            warnings=self.warnings,
            logger=logger,
        )
        return deep_merge(DEFAULTS, loaded) if loaded else dict(DEFAULTS)

    def _apply_qsettings_overrides(self, base: dict[str, Any]) -> dict[str, Any]:
        """
        Read the dict based settings and apply QSettings overrides.
        :param base:
        :return: apply QSettings overrides
        """
        # general
        g = dict(base.get("general", {}))
        v = self._settings.value("general/run_mode", None)
        if v is not None:
            g["run_mode"] = _validate_run_mode(v).value
        v = self._settings.value("general/logging_level", None)
        if v is not None:
            g["logging_level"] = _validate_logging_level(v)

        # gesture
        gs = dict(base.get("gesture", {}))
        v = self._settings.value("gesture/max_y_translation", None)
        if v is not None:
            gs["max_y_translation"] = _validate_max_y_translation(v)
        v = self._settings.value("gesture/initial_transform", None)
        if v is not None:
            gs["initial_transform"] = _validate_initial_transform(v)

        return {"general": g, "gesture": gs}

    def _make_model_from(self, merged: dict[str, Any]) -> AppSettingsData:
        """
        making model from merged dict and returning merged AppSettingsData
        :param merged:
        :return: merged AppSettingsData
        """
        g = merged.get("general", {})
        gs = merged.get("gesture", {})
        return AppSettingsData(
            general=GeneralConfig(
                run_mode=_validate_run_mode(g.get("run_mode", DEFAULTS["general"]["run_mode"])),
                logging_level=_validate_logging_level(g.get("logging_level", DEFAULTS["general"]["logging_level"])),
            ),
            gesture=GestureConfig(
                max_y_translation=_validate_max_y_translation(gs.get("max_y_translation")),
                initial_transform=_validate_initial_transform(gs.get("initial_transform")),
            ),
        )
