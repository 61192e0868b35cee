"""Wiring of the session store, request gateway and API clients."""

from __future__ import annotations

from dataclasses import dataclass

from .api import AuthApi, DictionaryApi, LearningApi
from .config import resolve_api_base, resolve_cookie_path, resolve_session_path
from .config_store import Config
from .gateway import RequestGateway
from .importer import ImportTracker
from .review import ReviewSession
from .session_store import SessionStorage, SessionStore


@dataclass
class Client:
    """Everything a UI needs to talk to the vocabulary service."""

    config: Config
    store: SessionStore
    gateway: RequestGateway
    auth: AuthApi
    dictionaries: DictionaryApi
    learning: LearningApi

    def import_tracker(self, **kwargs) -> ImportTracker:
        kwargs.setdefault("poll_interval", self.config.poll_interval)
        kwargs.setdefault("failure_preview", self.config.failure_preview)
        kwargs.setdefault("completion_grace", self.config.completion_grace)
        return ImportTracker(self.dictionaries, **kwargs)

    def review_session(self, dictionary_id: int, limit: int | None = None) -> ReviewSession:
        return ReviewSession(
            self.learning,
            dictionary_id,
            limit=limit if limit is not None else self.config.review_limit,
        )

    def close(self) -> None:
        self.gateway.close()


def build_client(config: Config, persist: bool = True) -> Client:
    """Create a client for the configured server.

    Args:
        config: Loaded user configuration.
        persist: Keep the session and refresh cookie on disk between runs.

    Raises:
        ValueError: If the API base URL is invalid.
    """
    base_url = resolve_api_base(config)
    storage = SessionStorage(resolve_session_path()) if persist else None
    store = SessionStore(storage)
    gateway = RequestGateway(
        base_url,
        store,
        timeout=config.request_timeout,
        cookie_path=resolve_cookie_path() if persist else None,
    )
    return Client(
        config=config,
        store=store,
        gateway=gateway,
        auth=AuthApi(gateway),
        dictionaries=DictionaryApi(gateway),
        learning=LearningApi(gateway),
    )
