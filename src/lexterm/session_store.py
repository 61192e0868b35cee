"""Session store holding the access credential and cached identity.

The store is an explicitly owned object: the CLI/TUI creates one and
passes it to the request gateway and auth client. Only login, logout and
credential renewal write to it.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any

from .models import UserIdentity

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "access_token"
USER_KEY = "user"


class SessionStorage:
    """Durable key/value file backing a session store.

    All keys live in one JSON document written with a temp file and
    ``os.replace``, so clearing the credential and identity is atomic.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Discarding unreadable session file %s: %s", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def write(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        try:
            os.chmod(tmp, 0o600)
        except OSError:
            pass
        os.replace(tmp, self._path)

    def clear(self) -> None:
        try:
            self._path.unlink()
        except FileNotFoundError:
            pass


class SessionStore:
    """Current access credential and user identity."""

    def __init__(self, storage: SessionStorage | None = None) -> None:
        self._storage = storage
        self._lock = threading.Lock()
        self._access_token: str | None = None
        self._user: UserIdentity | None = None
        if storage is not None:
            self._load()

    def _load(self) -> None:
        assert self._storage is not None
        data = self._storage.read()
        token = data.get(ACCESS_TOKEN_KEY) or None
        user = None
        if token and data.get(USER_KEY):
            try:
                user = UserIdentity.from_wire(data[USER_KEY])
            except Exception as exc:
                logger.warning("Ignoring invalid persisted user: %s", exc)
        # A user without a credential was never authenticated here
        self._access_token = token
        self._user = user

    def _persist(self) -> None:
        if self._storage is None:
            return
        if self._access_token is None:
            self._storage.clear()
            return
        data: dict[str, Any] = {ACCESS_TOKEN_KEY: self._access_token}
        if self._user is not None:
            data[USER_KEY] = self._user.to_dict()
        self._storage.write(data)

    @property
    def access_token(self) -> str | None:
        with self._lock:
            return self._access_token

    @property
    def user(self) -> UserIdentity | None:
        with self._lock:
            return self._user

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def start(self, access_token: str, user: UserIdentity | None) -> None:
        """Begin a session after a successful login or registration."""
        if not access_token:
            raise ValueError("access_token must not be empty")
        with self._lock:
            self._access_token = access_token
            self._user = user
            self._persist()

    def update_credential(self, access_token: str) -> None:
        """Replace the credential after a successful renewal.

        The cached identity is left untouched.
        """
        if not access_token:
            raise ValueError("access_token must not be empty")
        with self._lock:
            self._access_token = access_token
            self._persist()

    def clear(self) -> None:
        """Drop the credential and identity together."""
        with self._lock:
            self._access_token = None
            self._user = None
            self._persist()
