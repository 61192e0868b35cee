"""Persistent user configuration for lexterm.

Settings are stored as JSON in the user config directory
(``$XDG_CONFIG_HOME/lexterm`` or ``~/.config/lexterm``). The loaded
config is cached per process; call ``clear_config_cache`` to force a
reload.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from .gateway import DEFAULT_TIMEOUT
from .importer import COMPLETION_GRACE_SECONDS, FAILURE_PREVIEW_LIMIT, POLL_INTERVAL_SECONDS
from .review.session import DEFAULT_LIMIT

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"

DEFAULT_API_BASE_URL = "http://localhost:8000/api/v1"


@dataclass
class Config:
    """User-adjustable settings."""

    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = DEFAULT_TIMEOUT
    poll_interval: float = POLL_INTERVAL_SECONDS
    completion_grace: float = COMPLETION_GRACE_SECONDS
    review_limit: int = DEFAULT_LIMIT
    failure_preview: int = FAILURE_PREVIEW_LIMIT


_config_cache: Config | None = None


def _get_config_dir() -> Path:
    """Return the directory holding config, session and log files."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "lexterm"


def get_config_dir() -> Path:
    """Public accessor for the config directory."""
    return _get_config_dir()


def _config_path() -> Path:
    return _get_config_dir() / CONFIG_FILENAME


def load_config() -> Config:
    """Load config from disk, falling back to defaults.

    Unknown keys are ignored and invalid files are replaced by defaults,
    so a hand-edited config never prevents startup.
    """
    global _config_cache
    if _config_cache is not None:
        return _config_cache

    path = _config_path()
    config = Config()
    if path.exists():
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable config %s: %s", path, exc)
            raw = {}
        if isinstance(raw, dict):
            known = {f.name for f in fields(Config)}
            values = {k: v for k, v in raw.items() if k in known}
            try:
                config = Config(**values)
            except TypeError as exc:
                logger.warning("Ignoring invalid config %s: %s", path, exc)

    _config_cache = config
    return config


def save_config(config: Config) -> None:
    """Write config to disk atomically and update the cache."""
    global _config_cache
    path = _config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(asdict(config), indent=2, sort_keys=True), encoding="utf-8")
    os.replace(tmp, path)
    _config_cache = config


def clear_config_cache() -> None:
    """Drop the cached config (useful for testing)."""
    global _config_cache
    _config_cache = None
