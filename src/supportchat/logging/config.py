"""Persisted logging preferences (currently just the log level)."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

PathArg = Optional[os.PathLike[str] | str]


def _config_path(config_file: PathArg = None) -> Path:
    """Resolve the logging config file.

    ``config_file`` wins, then ``SUPPORTCHAT_LOG_CONFIG``, then
    ``<SUPPORTCHAT_CONFIG_DIR or ~/.supportchat>/logging.json``.
    """

    if config_file is not None:
        return Path(config_file)

    raw = (os.environ.get("SUPPORTCHAT_LOG_CONFIG") or "").strip()
    if raw:
        return Path(raw).expanduser()

    config_dir = (os.environ.get("SUPPORTCHAT_CONFIG_DIR") or "").strip()
    base = Path(config_dir).expanduser() if config_dir else Path.home() / ".supportchat"
    return base / "logging.json"


def load_config(config_file: PathArg = None) -> dict[str, Any]:
    """Load the logging configuration JSON file.

    Missing, unreadable or malformed files are treated as an empty
    configuration.
    """

    path = _config_path(config_file)
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError):
        return {}

    return data if isinstance(data, dict) else {}


def save_config(config: dict[str, Any], config_file: PathArg = None) -> Path:
    path = _config_path(config_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(config, handle, indent=2, sort_keys=True)
        handle.write("\n")
    return path


def _level_name(level: str | int) -> str:
    """Return the canonical name for ``level``.

    Raises
    ------
    ValueError
        If the provided level cannot be resolved.
    """

    if isinstance(level, int):
        name = logging.getLevelName(level)
        return name if isinstance(name, str) and not name.startswith("Level ") else str(level)

    name = str(level).upper()
    if isinstance(logging.getLevelName(name), int):
        return name
    raise ValueError(f"Unknown logging level: {level!r}")


def load_log_level(config_file: PathArg = None) -> Optional[int]:
    """Fetch the persisted numeric log level, if any."""

    value = load_config(config_file).get("log_level")
    if value is None:
        return None
    if isinstance(value, int):
        return value

    candidate = logging.getLevelName(str(value).upper())
    return candidate if isinstance(candidate, int) else None


def save_log_level(level: str | int, config_file: PathArg = None) -> Path:
    """Persist the supplied log level and return the config path."""

    config = load_config(config_file)
    config["log_level"] = _level_name(level)
    return save_config(config, config_file)


__all__ = [
    "load_config",
    "save_config",
    "load_log_level",
    "save_log_level",
]
