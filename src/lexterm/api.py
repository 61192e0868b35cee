"""Typed clients for the vocabulary service endpoints."""

from __future__ import annotations

import base64
import logging
from typing import Any

from .errors import MalformedResponse, TransientError, Unauthenticated, ValidationError
from .gateway import ApiRequest, RequestGateway
from .models import (
    AuthResult,
    Dictionary,
    ImportJob,
    LearningStats,
    SubmitResult,
    TodayTasks,
    UserIdentity,
    pick,
)
from .review.session import DEFAULT_LIMIT

logger = logging.getLogger(__name__)

DEFAULT_TASK_LIMIT = DEFAULT_LIMIT


class AuthApi:
    """Login, registration, logout and identity lookup.

    Login and logout are the only operations besides credential renewal
    that write to the session store.
    """

    def __init__(self, gateway: RequestGateway) -> None:
        self._gateway = gateway

    def _authenticate(self, path: str, username: str, password: str) -> UserIdentity:
        username = username.strip()
        if not username or not password:
            raise ValidationError("Username and password must not be empty")

        data = self._gateway.call(
            ApiRequest(
                "POST",
                path,
                json={"username": username, "password": password},
                authenticated=False,
            )
        )
        result = AuthResult.from_wire(data)
        user = result.user or UserIdentity(id=0, display_name=username)
        self._gateway.store.start(result.access_token, user)
        logger.info("Signed in as %s", user.display_name)
        return user

    def login(self, username: str, password: str) -> UserIdentity:
        return self._authenticate("/auth/login", username, password)

    def register(self, username: str, password: str) -> UserIdentity:
        return self._authenticate("/auth/register", username, password)

    def logout(self) -> None:
        """Invalidate the refresh cookie server-side and clear the session.

        The local session is cleared even if the server call fails.
        """
        try:
            self._gateway.call(ApiRequest("POST", "/auth/logout"))
        except (TransientError, Unauthenticated) as exc:
            logger.warning("Server logout failed, clearing local session anyway: %s", exc)
        finally:
            self._gateway.clear_session()
            logger.info("Signed out")

    def me(self) -> UserIdentity:
        """Fetch the identity behind the current credential."""
        data = self._gateway.call(ApiRequest("GET", "/auth/me"))
        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            data = data["user"]
        return UserIdentity.from_wire(data)


class DictionaryApi:
    """Dictionary listing and the asynchronous upload endpoints."""

    def __init__(self, gateway: RequestGateway) -> None:
        self._gateway = gateway

    def list_dictionaries(self) -> list[Dictionary]:
        data = self._gateway.call(ApiRequest("GET", "/dictionaries"))
        items: Any = data.get("items") if isinstance(data, dict) else data
        if items is None:
            return []
        if not isinstance(items, list):
            raise MalformedResponse("Dictionary list is not a list")
        return [Dictionary.from_wire(item) for item in items]

    def upload(self, name: str, content: bytes, description: str = "") -> str:
        """Start an import job and return its id.

        The file content is sent base64-encoded in a JSON body.
        """
        data = self._gateway.call(
            ApiRequest(
                "POST",
                "/dictionaries/upload",
                json={
                    "fileContent": base64.b64encode(content).decode("ascii"),
                    "name": name,
                    "description": description,
                },
            )
        )
        if not isinstance(data, dict):
            raise MalformedResponse("Upload response is not an object")
        job_id = pick(data, "task_id", "taskId", "job_id", "jobId")
        if not job_id:
            raise MalformedResponse("Upload response carries no job id")
        return str(job_id)

    def upload_status(self, job_id: str) -> ImportJob:
        data = self._gateway.call(ApiRequest("GET", f"/dictionaries/upload/status/{job_id}"))
        return ImportJob.from_wire(data, job_id=job_id)


class LearningApi:
    """Due-word queue and outcome submission."""

    def __init__(self, gateway: RequestGateway) -> None:
        self._gateway = gateway

    def today_tasks(self, dictionary_id: int, limit: int = DEFAULT_TASK_LIMIT) -> TodayTasks:
        data = self._gateway.call(
            ApiRequest(
                "GET",
                "/learning/today-tasks",
                params={"dict_id": dictionary_id, "limit": limit},
            )
        )
        return TodayTasks.from_wire(data)

    def submit(
        self,
        word_id: int,
        quality: int,
        dictionary_id: int | None = None,
        time_spent: int | None = None,
    ) -> SubmitResult:
        """Forward a review outcome to the scheduler.

        ``quality`` is passed through verbatim; the server owns its meaning.
        """
        payload: dict[str, Any] = {"word_id": word_id, "quality": quality}
        if dictionary_id is not None:
            payload["dictionary_id"] = dictionary_id
        if time_spent is not None:
            payload["time_spent"] = time_spent
        data = self._gateway.call(ApiRequest("POST", "/learning/submit", json=payload))
        return SubmitResult.from_wire(data)

    def stats(self) -> LearningStats:
        data = self._gateway.call(ApiRequest("GET", "/learning/stats"))
        return LearningStats.from_wire(data)
