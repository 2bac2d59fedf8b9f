from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict

SETTINGS_FILE = "playsql_config.json"
LOG_FILE = "playsql.log"
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

logger = logging.getLogger("playsql_engine.config")


@dataclass
class EngineSettings:
    default_position: Dict[str, float] = field(default_factory=lambda: {"x": 100, "y": 100})
    table_id_prefix: str = "t-"
    log_level: str = "INFO"
    log_file: str = LOG_FILE


def load_settings(path: str | None = None) -> EngineSettings:
    settings = EngineSettings()
    config_path = path or SETTINGS_FILE
    try:
        if not os.path.exists(config_path):
            return settings
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Load settings failed (%s): %s", config_path, exc)
        return settings

    if not isinstance(data, dict):
        logger.warning("Ignoring settings file %s: expected a JSON object", config_path)
        return settings
    return _apply(settings, data)


def save_settings(settings: EngineSettings, path: str | None = None) -> None:
    data = {
        "default_position": dict(settings.default_position),
        "table_id_prefix": settings.table_id_prefix,
        "log_level": settings.log_level,
        "log_file": settings.log_file,
    }
    with open(path or SETTINGS_FILE, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def _apply(settings: EngineSettings, data: Dict[str, Any]) -> EngineSettings:
    position = data.get("default_position")
    if isinstance(position, dict) and "x" in position and "y" in position:
        settings.default_position = {"x": position["x"], "y": position["y"]}
    prefix = data.get("table_id_prefix")
    if isinstance(prefix, str) and prefix:
        settings.table_id_prefix = prefix
    level = data.get("log_level")
    if isinstance(level, str) and level.upper() in _LOG_LEVELS:
        settings.log_level = level.upper()
    log_file = data.get("log_file")
    if isinstance(log_file, str) and log_file.strip():
        settings.log_file = log_file.strip()
    return settings


def build_logger(settings: EngineSettings) -> logging.Logger:
    log_path = os.path.abspath(settings.log_file)
    pkg_logger = logging.getLogger("playsql_engine")
    pkg_logger.setLevel(settings.log_level)
    pkg_logger.propagate = False

    has_file_handler = False
    for handler in pkg_logger.handlers:
        if isinstance(handler, logging.FileHandler) and getattr(handler, "baseFilename", None) == log_path:
            has_file_handler = True
            break

    if not has_file_handler:
        handler = logging.FileHandler(log_path, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        pkg_logger.addHandler(handler)
    return pkg_logger
