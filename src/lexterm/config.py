"""Runtime path and endpoint resolution for lexterm."""

from __future__ import annotations

import os
from pathlib import Path

from .config_store import Config, get_config_dir

API_URL_ENV = "LEXTERM_API_URL"

SESSION_FILENAME = "session.json"
COOKIE_FILENAME = "cookies.txt"
LOG_DIRNAME = "log"


def resolve_api_base(config: Config) -> str:
    """Resolve the API base URL.

    The ``LEXTERM_API_URL`` environment variable takes precedence over the
    configured value. Trailing slashes are removed.

    Raises:
        ValueError: If the resolved URL is not an http(s) URL.
    """
    url = os.environ.get(API_URL_ENV) or config.api_base_url
    url = url.strip().rstrip("/")
    if not url.startswith(("http://", "https://")):
        raise ValueError(f"Invalid API base URL: {url!r}")
    return url


def resolve_session_path() -> Path:
    """Path of the persisted session (credential and identity)."""
    return get_config_dir() / SESSION_FILENAME


def resolve_cookie_path() -> Path:
    """Path of the persisted cookie jar holding the refresh cookie."""
    return get_config_dir() / COOKIE_FILENAME


def resolve_log_dir() -> Path:
    return get_config_dir() / LOG_DIRNAME
