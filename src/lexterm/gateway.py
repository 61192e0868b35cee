"""Authenticated request gateway.

Every outbound call goes through ``RequestGateway.call``, which:
- attaches the current access credential from the session store
- on HTTP 401, renews the credential once using the refresh cookie and
  replays the original request exactly once
- unwraps the ``{code, message, data}`` response envelope

Errors other than 401 are raised unchanged; the gateway never retries
them.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from http.cookiejar import LoadError, LWPCookieJar
from pathlib import Path
from typing import Any

import requests

from .errors import (
    ApiError,
    MalformedResponse,
    RenewalFailed,
    TransientError,
    Unauthenticated,
)
from .models import AuthResult
from .session_store import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
REFRESH_PATH = "/auth/refresh"
SUCCESS_CODE = 0


@dataclass
class ApiRequest:
    """A single outbound call.

    ``retried`` is set by the gateway once the request has been replayed
    after a credential renewal; a request is never replayed twice.
    """

    method: str
    path: str
    params: dict[str, Any] | None = None
    json: Any = None
    authenticated: bool = True
    retried: bool = False


def _error_message(response: requests.Response) -> str:
    """Best-effort message from an error response body."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("reason") or body.get("error")
        if message:
            return str(message)
    return f"HTTP {response.status_code} {response.reason or ''}".strip()


class RequestGateway:
    """Single chokepoint for calls to the vocabulary service."""

    def __init__(
        self,
        base_url: str,
        store: SessionStore,
        timeout: float = DEFAULT_TIMEOUT,
        transport: requests.Session | None = None,
        cookie_path: Path | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            base_url: API root, e.g. ``http://localhost:8000/api/v1``.
            store: Session store supplying and receiving the credential.
            timeout: Per-request timeout in seconds.
            transport: HTTP session to send requests with (a new
                ``requests.Session`` by default).
            cookie_path: Optional file to persist the refresh cookie in.
        """
        self._base_url = base_url.rstrip("/")
        self._store = store
        self._timeout = timeout
        self._transport = transport if transport is not None else requests.Session()
        self._renew_lock = threading.Lock()
        self._cookie_jar: LWPCookieJar | None = None
        if cookie_path is not None:
            self._cookie_jar = LWPCookieJar(str(cookie_path))
            if Path(cookie_path).exists():
                try:
                    self._cookie_jar.load(ignore_discard=True, ignore_expires=True)
                except (LoadError, OSError) as exc:
                    logger.warning("Ignoring unreadable cookie jar %s: %s", cookie_path, exc)
            self._transport.cookies = self._cookie_jar

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def base_url(self) -> str:
        return self._base_url

    def call(self, request: ApiRequest) -> Any:
        """Send a request and return the unwrapped envelope data.

        Raises:
            Unauthenticated: The credential was rejected and could not be
                renewed, or was rejected again after renewal. In the latter
                case the session is cleared.
            RenewalFailed: Renewal itself failed; the session is cleared.
            ApiError: The server answered with a failure status or code.
            TransientError: The request could not be delivered.
            MalformedResponse: The body is not valid JSON.
        """
        sent_token = self._store.access_token if request.authenticated else None
        response = self._send(request, sent_token)

        if response.status_code == 401:
            rejection = Unauthenticated(_error_message(response))
            if not request.authenticated:
                raise rejection
            if request.retried:
                logger.warning(
                    "Credential rejected again after renewal: %s %s",
                    request.method,
                    request.path,
                )
                raise rejection

            request.retried = True
            self._renew(sent_token, rejection)
            response = self._send(request, self._store.access_token)
            if response.status_code == 401:
                logger.warning(
                    "Renewed credential rejected: %s %s, clearing session",
                    request.method,
                    request.path,
                )
                self.clear_session()
                raise Unauthenticated(_error_message(response))

        return self._unwrap(response)

    def _send(self, request: ApiRequest, token: str | None) -> requests.Response:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        url = f"{self._base_url}{request.path}"
        try:
            response = self._transport.request(
                request.method,
                url,
                params=request.params,
                json=request.json,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", request.method, request.path, exc)
            raise TransientError(f"Could not reach server: {exc}") from exc

        logger.debug("%s %s -> %s", request.method, request.path, response.status_code)
        if response.cookies:
            self.save_cookies()
        return response

    def _unwrap(self, response: requests.Response) -> Any:
        if response.status_code >= 400:
            raise ApiError(_error_message(response), status_code=response.status_code)

        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponse(f"Response is not JSON: {exc}") from exc

        if isinstance(body, dict) and "code" in body:
            code = body.get("code")
            if code != SUCCESS_CODE:
                raise ApiError(
                    str(body.get("message") or f"Request failed with code {code}"),
                    status_code=response.status_code,
                    code=code if isinstance(code, int) else None,
                )
            return body.get("data")
        return body

    def _renew(self, stale_token: str | None, rejection: Unauthenticated) -> None:
        """Mint a new access credential from the refresh cookie.

        Renewals are serialized. If another request already replaced the
        stale credential, that credential is reused instead of renewing
        again.
        """
        with self._renew_lock:
            current = self._store.access_token
            if current is not None and current != stale_token:
                logger.debug("Credential already renewed by a concurrent request")
                return

            logger.info("Access credential rejected, renewing")
            refresh = ApiRequest("POST", REFRESH_PATH, authenticated=False)
            try:
                response = self._send(refresh, None)
                if response.status_code == 401:
                    raise Unauthenticated(_error_message(response))
                result = AuthResult.from_wire(self._unwrap(response))
            except (Unauthenticated, TransientError) as exc:
                logger.warning("Credential renewal failed: %s", exc)
                self.clear_session()
                raise RenewalFailed(original=rejection) from exc

            self._store.update_credential(result.access_token)
            logger.info("Access credential renewed")

    def save_cookies(self) -> None:
        """Persist the cookie jar, if it is file-backed."""
        if self._cookie_jar is None:
            return
        try:
            Path(self._cookie_jar.filename).parent.mkdir(parents=True, exist_ok=True)
            self._cookie_jar.save(ignore_discard=True, ignore_expires=True)
        except OSError as exc:
            logger.warning("Could not save cookies: %s", exc)

    def clear_session(self) -> None:
        """Clear the session store and the refresh cookie together."""
        self._store.clear()
        self._transport.cookies.clear()
        self.save_cookies()

    def close(self) -> None:
        self._transport.close()
