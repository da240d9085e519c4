"""Runtime settings for the Turtle scout client."""

from __future__ import annotations

import os
from dataclasses import dataclass

from huntdata.patches import Patch, parse_patch

'''
Default configuration values.
Each can be overridden with the matching TURTLESCOUT_* environment variable.
'''
defaults = {
    "api_base_url": "https://scout.wobbuffet.net",  #Base URL of the Turtle API.
    "api_train_path": "/api/v1/scout",              #Path of the train endpoint, relative to the base URL.
    "api_timeout": 5.0,                             #Seconds before a Turtle request is abandoned.
    "include_name_in_session": True,                #Send the player's name@world tag with session updates.
    "data_file": "data/turtle_data.json",           #Turtle dataset (mobs and maps per patch).
    "default_patch": "DT",                          #Patch reported for links generated without any mobs.
}

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class TurtleSettings:
    api_base_url: str = defaults["api_base_url"]
    api_train_path: str = defaults["api_train_path"]
    api_timeout: float = defaults["api_timeout"]
    include_name_in_session: bool = defaults["include_name_in_session"]
    data_file: str = defaults["data_file"]
    default_patch: Patch = Patch[defaults["default_patch"]]


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _env_patch(name: str, default: str) -> Patch:
    raw = os.getenv(name, default)
    try:
        return parse_patch(raw)
    except ValueError:
        raise ValueError(f"{name} must name a known patch, got {raw!r}") from None


def load_settings() -> TurtleSettings:
    return TurtleSettings(
        api_base_url=os.getenv("TURTLESCOUT_API_BASE_URL", defaults["api_base_url"]),
        api_train_path=os.getenv("TURTLESCOUT_API_TRAIN_PATH", defaults["api_train_path"]),
        api_timeout=_env_float("TURTLESCOUT_API_TIMEOUT", defaults["api_timeout"]),
        include_name_in_session=_env_bool("TURTLESCOUT_INCLUDE_NAME", defaults["include_name_in_session"]),
        data_file=os.getenv("TURTLESCOUT_DATA_FILE", defaults["data_file"]),
        default_patch=_env_patch("TURTLESCOUT_DEFAULT_PATCH", defaults["default_patch"]),
    )
