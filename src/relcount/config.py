"""Loading of the optional YAML configuration file."""

import logging
from pathlib import Path
from typing import Any, TypedDict

import yaml

from .api import DEFAULT_TIMEOUT, FLATHUB_API_BASE, GITHUB_API_BASE
from .stats import (
    DEFAULT_EXCLUDED_EXTENSIONS,
    DEFAULT_TIME_RANGE,
    NO_EXTENSION,
    TIME_RANGES,
)

logger = logging.getLogger("relcount")

DEFAULT_CONFIG_FILE = "relcount.yml"


class Config(TypedDict):
    """Settings read from relcount.yml."""

    github_api_base: str
    flathub_api_base: str
    timeout: float
    excluded_extensions: list[str]
    time_range: str
    flathub_apps: dict[str, str]


def default_config() -> Config:
    """Return the built-in settings."""
    return {
        "github_api_base": GITHUB_API_BASE,
        "flathub_api_base": FLATHUB_API_BASE,
        "timeout": DEFAULT_TIMEOUT,
        "excluded_extensions": sorted(DEFAULT_EXCLUDED_EXTENSIONS),
        "time_range": DEFAULT_TIME_RANGE,
        "flathub_apps": {},
    }


def normalize_extension(ext: str) -> str:
    """Lower-case an extension and add the leading dot if missing."""
    ext = ext.strip().lower()
    if ext and ext != NO_EXTENSION and not ext.startswith("."):
        ext = f".{ext}"
    return ext


def parse_config(data: dict[str, Any] | None) -> Config:
    """Merge raw YAML data over the defaults, validating each known key.

    Raises:
        ValueError: If a value has the wrong type or an unknown time range.
    """
    config = default_config()
    if not data:
        return config
    if not isinstance(data, dict):
        raise ValueError("Configuration must be a mapping")

    for key in ("github_api_base", "flathub_api_base"):
        if key in data:
            if not isinstance(data[key], str) or not data[key]:
                raise ValueError(f"{key} must be a non-empty string")
            config[key] = data[key]  # type: ignore[literal-required]

    if "timeout" in data:
        try:
            config["timeout"] = float(data["timeout"])
        except (TypeError, ValueError) as e:
            raise ValueError("timeout must be a number") from e

    if "excluded_extensions" in data:
        exts = data["excluded_extensions"] or []
        if not isinstance(exts, list):
            raise ValueError("excluded_extensions must be a list")
        config["excluded_extensions"] = [normalize_extension(str(e)) for e in exts]

    if "time_range" in data:
        if data["time_range"] not in TIME_RANGES:
            raise ValueError(
                f"time_range must be one of: {', '.join(TIME_RANGES)}"
            )
        config["time_range"] = data["time_range"]

    if "flathub_apps" in data:
        apps = data["flathub_apps"] or {}
        if not isinstance(apps, dict):
            raise ValueError("flathub_apps must map owner/repo to an app id")
        config["flathub_apps"] = {str(k): str(v) for k, v in apps.items()}

    return config


def load_config(config_file: str = DEFAULT_CONFIG_FILE) -> Config:
    """Load settings from a YAML file, using defaults if it does not exist."""
    path = Path(config_file)
    if not path.exists():
        logger.debug("No config file at %s, using defaults", config_file)
        return default_config()

    with open(path) as f:
        data = yaml.safe_load(f)
    return parse_config(data)
