"""
config.py
─────────
Settings loaded from a YAML file, with environment overrides.

Lookup order for the file: ``--config``, ``./config.yaml``, then
``~/.config/ffiii-tui/config.yaml``. ``FFIII_TUI_FIREFLY_API_KEY`` and
``FFIII_TUI_FIREFLY_API_URL`` replace the file values when set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError
from .logger import get_logger

log = get_logger(__name__)

LOCAL_CONFIG = Path("config.yaml")
USER_CONFIG = Path.home() / ".config" / "ffiii-tui" / "config.yaml"

ENV_API_KEY = "FFIII_TUI_FIREFLY_API_KEY"
ENV_API_URL = "FFIII_TUI_FIREFLY_API_URL"


@dataclass(frozen=True)
class Settings:
    api_url: str
    api_key: str
    full_view: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "firefly": {"api_key": self.api_key, "api_url": self.api_url},
            "ui": {"full_view": self.full_view},
        }


def candidate_paths(explicit: Optional[str | Path] = None) -> List[Path]:
    if explicit:
        return [Path(explicit)]
    return [LOCAL_CONFIG, USER_CONFIG]


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config file {path}: expected a mapping")
    return data


def find_config(explicit: Optional[str | Path] = None) -> Optional[Path]:
    """First existing config file, or ``None``."""
    for path in candidate_paths(explicit):
        if path.exists():
            return path
    if explicit:
        raise ConfigError(f"Config file not found: {explicit}")
    return None


def load_settings(explicit: Optional[str | Path] = None) -> Settings:
    """Read settings, raising :class:`ConfigError` when the API is not configured."""
    path = find_config(explicit)
    data: Dict[str, Any] = {}
    if path is not None:
        log.info("loading config from %s", path)
        data = _load_yaml(path)

    firefly = data.get("firefly") or {}
    ui = data.get("ui") or {}
    api_key = os.getenv(ENV_API_KEY) or firefly.get("api_key") or ""
    api_url = os.getenv(ENV_API_URL) or firefly.get("api_url") or ""

    if not api_key:
        raise ConfigError("Firefly API key is not configured (firefly.api_key)")
    if not api_url:
        raise ConfigError("Firefly API URL is not configured (firefly.api_url)")
    return Settings(api_url=str(api_url), api_key=str(api_key), full_view=bool(ui.get("full_view", False)))


def write_settings(settings: Settings, path: str | Path = LOCAL_CONFIG) -> Path:
    """Write ``settings`` to a new file; an existing file is never replaced."""
    target = Path(path)
    if target.exists():
        raise ConfigError(f"Config file already exists: {target}")
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as f:
        yaml.safe_dump(settings.to_dict(), f, default_flow_style=False, sort_keys=False)
    log.info("wrote config to %s", target)
    return target
