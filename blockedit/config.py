# blockedit/config.py
from __future__ import annotations

import contextlib
import copy
import json
import logging
import os
import tempfile
from datetime import datetime

APP_DIR = os.path.expanduser("~/.blockedit")
CONFIG_PATH = os.path.join(APP_DIR, "config.json")

logger = logging.getLogger(__name__)

DEFAULTS = {
    "default_profile": "input",
    # Target files by profile name; falls back to the profile's own path.
    "targets": {},
    "escape_timeout_ms": 20,
    "log_level": "WARNING",
    "log_file": os.path.join(APP_DIR, "blockedit.log"),
}


class ConfigSaveError(Exception):
    """Raised when the configuration cannot be written to disk."""


def _defaults() -> dict:
    return copy.deepcopy(DEFAULTS)


def _backup_corrupt(reason: str) -> None:
    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    backup = f"{CONFIG_PATH}.corrupt-{stamp}"
    with contextlib.suppress(OSError):
        os.replace(CONFIG_PATH, backup)
        logger.warning("Settings file %s was %s; kept it as %s", CONFIG_PATH, reason, backup)


def load_config() -> dict:
    try:
        os.makedirs(APP_DIR, exist_ok=True)
        if not os.path.exists(CONFIG_PATH):
            save_config(DEFAULTS)
            return _defaults()
        try:
            with open(CONFIG_PATH, encoding="utf-8") as f:
                data = json.load(f)
        except ValueError:
            _backup_corrupt("not valid JSON")
            save_config(DEFAULTS)
            return _defaults()
        if not isinstance(data, dict):
            _backup_corrupt("not a JSON object")
            save_config(DEFAULTS)
            return _defaults()

        changed = False
        for k, v in DEFAULTS.items():
            if k not in data:
                data[k] = copy.deepcopy(v)
                changed = True
        if not isinstance(data.get("targets"), dict):
            data["targets"] = {}
            changed = True
        if changed:
            save_config(data)
        return data
    except Exception:
        logger.warning("Could not load settings from %s; using defaults", CONFIG_PATH, exc_info=True)
        return _defaults()


def save_config(cfg: dict) -> None:
    os.makedirs(APP_DIR, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix="config.", suffix=".tmp", dir=APP_DIR)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(cfg, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, CONFIG_PATH)
    except Exception as exc:
        with contextlib.suppress(Exception):
            os.unlink(tmp_path)
        raise ConfigSaveError(f"Failed to save config to {CONFIG_PATH}: {exc}") from exc
