"""
Configuration management for blame-heatmap.

Global config:  ~/.blame-heatmap/config.json
Project config: .blame-heatmap/config.json
Dotenv:         ~/.blame-heatmap/.env (BLAME_HEATMAP_* variables)

Settings are layered (lowest priority first): built-in defaults, global
config, project config, BLAME_HEATMAP_* environment variables, explicit
overrides.  Keys keep the camelCase names used by editor settings
(``heatLevels``, ``heatColour``, ``coolColour``, ``showInRuler``).

No external dependencies, stdlib only.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .colour import Colour, parse_colour


class ConfigurationError(ValueError):
    """Raised when the heatmap settings cannot produce a usable style set."""


# -------------------------------------------------------------------
# Paths and defaults
# -------------------------------------------------------------------

GLOBAL_CONFIG_DIR = Path.home() / ".blame-heatmap"
GLOBAL_CONFIG_FILE = GLOBAL_CONFIG_DIR / "config.json"
GLOBAL_DOTENV_FILE = GLOBAL_CONFIG_DIR / ".env"

PROJECT_CONFIG_DIR_NAME = ".blame-heatmap"
PROJECT_CONFIG_FILE_NAME = "config.json"

DEFAULT_HEAT_LEVELS = 10
DEFAULT_HEAT_COLOUR = "200,0,0"
DEFAULT_HOT = Colour(200, 0, 0)

DEFAULTS: dict[str, Any] = {
    "heatLevels": DEFAULT_HEAT_LEVELS,
    "heatColour": DEFAULT_HEAT_COLOUR,
    "coolColour": "",
    "showInRuler": False,
}

# setting key -> environment variable
ENV_OVERRIDES = {
    "heatLevels": "BLAME_HEATMAP_LEVELS",
    "heatColour": "BLAME_HEATMAP_HEAT_COLOUR",
    "coolColour": "BLAME_HEATMAP_COOL_COLOUR",
    "showInRuler": "BLAME_HEATMAP_SHOW_IN_RULER",
}

_TRUE_STRINGS = ("1", "true", "yes", "on")
_FALSE_STRINGS = ("0", "false", "no", "off", "")


# -------------------------------------------------------------------
# Resolved configuration
# -------------------------------------------------------------------

@dataclass(frozen=True)
class HeatmapConfig:
    """Validated settings the style set is built from."""

    heat_levels: int
    hot: Colour
    cool: Colour
    show_in_ruler: bool = False


def _coerce_levels(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid number of heat levels: {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"Invalid number of heat levels: {value!r}") from None


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ConfigurationError(f"Invalid boolean value: {value!r}")


def resolve_config(settings: dict[str, Any] | None = None) -> HeatmapConfig:
    """Turn raw settings into a HeatmapConfig.

    Missing keys fall back to DEFAULTS.  Unparseable colours fall back
    silently (hot -> 200,0,0; cool -> hot with alpha 0).  A heat level
    count below 1 raises ConfigurationError.
    """
    merged = dict(DEFAULTS)
    if settings:
        merged.update({k: v for k, v in settings.items() if v is not None})

    levels = _coerce_levels(merged["heatLevels"])
    if levels < 1:
        raise ConfigurationError(
            "Invalid number of heat levels (must be at least 1)."
        )

    hot = parse_colour(str(merged["heatColour"]), DEFAULT_HOT)
    cool = parse_colour(str(merged["coolColour"]), hot.with_alpha(0.0))

    return HeatmapConfig(
        heat_levels=levels,
        hot=hot,
        cool=cool,
        show_in_ruler=_coerce_bool(merged["showInRuler"]),
    )


def validate_setting(key: str, value: str) -> Any:
    """Convert a CLI string value for *key* to its stored JSON type."""
    if key not in DEFAULTS:
        raise ConfigurationError(
            f"Unknown setting: {key} (expected one of: {', '.join(DEFAULTS)})"
        )
    if key == "heatLevels":
        levels = _coerce_levels(value)
        if levels < 1:
            raise ConfigurationError(
                "Invalid number of heat levels (must be at least 1)."
            )
        return levels
    if key == "showInRuler":
        return _coerce_bool(value)
    return value


# -------------------------------------------------------------------
# Global config
# -------------------------------------------------------------------

def _read_json(path: Path) -> dict:
    if path.exists():
        try:
            data = json.loads(path.read_text())
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}
    return {}


def get_global_config() -> dict:
    """Load ~/.blame-heatmap/config.json (returns {} if missing)."""
    return _read_json(GLOBAL_CONFIG_FILE)


def save_global_config(config: dict) -> None:
    """Write ~/.blame-heatmap/config.json."""
    GLOBAL_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    GLOBAL_CONFIG_FILE.write_text(json.dumps(config, indent=2) + "\n")


# -------------------------------------------------------------------
# Project config
# -------------------------------------------------------------------

def project_config_path(project_dir: str | None = None) -> Path:
    if project_dir is None:
        project_dir = os.getcwd()
    return Path(project_dir) / PROJECT_CONFIG_DIR_NAME / PROJECT_CONFIG_FILE_NAME


def get_project_config(project_dir: str | None = None) -> dict:
    """Load .blame-heatmap/config.json (returns {} if missing)."""
    return _read_json(project_config_path(project_dir))


def save_project_config(config: dict, project_dir: str | None = None) -> None:
    """Write .blame-heatmap/config.json."""
    path = project_config_path(project_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config, indent=2) + "\n")


# -------------------------------------------------------------------
# Layered settings
# -------------------------------------------------------------------

def load_dotenv(path: Path | None = None) -> None:
    """Read key=value pairs from ~/.blame-heatmap/.env into os.environ.

    Variables already set in the real environment are left alone.
    """
    env_path = path if path is not None else GLOBAL_DOTENV_FILE
    if not env_path.is_file():
        return
    try:
        text = env_path.read_text()
    except OSError:
        return
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        if key:
            os.environ.setdefault(key, value.strip().strip("'\""))


def _env_settings() -> dict[str, Any]:
    found: dict[str, Any] = {}
    for key, env_var in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            found[key] = value
    return found


def load_settings(
    project_dir: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Merge settings.  Priority (highest last):
      1. DEFAULTS
      2. Global config  (~/.blame-heatmap/config.json)
      3. Project config (.blame-heatmap/config.json)
      4. BLAME_HEATMAP_* env vars
      5. *overrides* (None values ignored)
    """
    settings = dict(DEFAULTS)
    for layer in (
        get_global_config(),
        get_project_config(project_dir),
        _env_settings(),
        overrides or {},
    ):
        settings.update({k: v for k, v in layer.items() if k in DEFAULTS and v is not None})
    return settings
