from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from .logger import get_logger

_logger = get_logger("settings")


def default_settings_path() -> str:
    """Settings file under the per-user Qt config location."""
    try:
        from PySide6.QtCore import QStandardPaths

        app_cfg = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppConfigLocation)
    except ImportError:
        app_cfg = ""
    if app_cfg:
        return (Path(app_cfg) / "text_cleaner" / "settings.json").as_posix()
    return (Path.home() / ".config" / "text_cleaner" / "settings.json").as_posix()


class SettingsManager:
    def __init__(self, settings_path: str):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "tool_name": "imgclean",
        "tool_path": None,
        "algorithm_flag": "-a",
        "default_algorithm": None,
        "timeout_seconds": None,
        "scratch_dir": None,
        "scratch_dir_name": "text_cleaner",
        "orphan_max_age_hours": 24.0,
        "max_workers": 2,
    }

    def load(self) -> None:
        try:
            if os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                        return
                    _logger.warning("settings ignored (not an object): %s", self.settings_path)
        except (OSError, ValueError) as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def save(self) -> None:
        try:
            parent = os.path.dirname(self.settings_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except OSError as e:
            _logger.error("settings save failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def has(self, key: str) -> bool:
        return key in self._settings

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    @property
    def tool_path(self) -> str | None:
        val = self.get("tool_path")
        return val if isinstance(val, str) and val.strip() else None

    @property
    def scratch_dir_name(self) -> str:
        val = self.get("scratch_dir_name")
        return val.strip() if isinstance(val, str) and val.strip() else self.DEFAULTS["scratch_dir_name"]

    @property
    def timeout_seconds(self) -> float | None:
        val = self.get("timeout_seconds")
        try:
            timeout = float(val) if val is not None else None
        except (TypeError, ValueError):
            _logger.warning("invalid timeout_seconds: %r", val)
            return None
        return timeout if timeout and timeout > 0 else None

    @property
    def orphan_max_age_seconds(self) -> float:
        val = self.get("orphan_max_age_hours")
        try:
            return max(0.0, float(val)) * 3600.0
        except (TypeError, ValueError):
            _logger.warning("invalid orphan_max_age_hours: %r", val)
            return float(self.DEFAULTS["orphan_max_age_hours"]) * 3600.0

    @property
    def max_workers(self) -> int:
        try:
            return max(1, int(self.get("max_workers")))
        except (TypeError, ValueError):
            return int(self.DEFAULTS["max_workers"])
