"""Exception hierarchy shared by the request layer and the engines.

- ValidationError: bad local input, raised before any network call
- Unauthenticated / RenewalFailed: session-fatal, the UI must return to login
- TransientError / ApiError / MalformedResponse: network or server failures
  the calling UI may retry
"""

from __future__ import annotations


class LextermError(Exception):
    """Base class for all lexterm errors."""


class ValidationError(LextermError):
    """Raised when local input is rejected before reaching the server."""


class Unauthenticated(LextermError):
    """Raised when the server rejects the request's credential."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class RenewalFailed(Unauthenticated):
    """Raised when the refresh cookie could not mint a new access token.

    The session store has already been cleared when this is raised.
    """

    def __init__(
        self,
        message: str = "Session expired, please log in again",
        original: Unauthenticated | None = None,
    ) -> None:
        super().__init__(message)
        self.original = original


class TransientError(LextermError):
    """Raised for network or server errors that may succeed on retry."""


class ApiError(TransientError):
    """Raised when the server answers with a failure status or envelope code."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class MalformedResponse(TransientError):
    """Raised when a response body cannot be decoded into the expected shape."""
