"""Review session management for lexterm."""

from .session import (
    Quality,
    ReviewError,
    ReviewSession,
    ReviewStateError,
    SessionState,
)

__all__ = [
    "Quality",
    "ReviewError",
    "ReviewSession",
    "ReviewStateError",
    "SessionState",
]
