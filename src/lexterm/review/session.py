"""Review session engine.

A ``ReviewSession`` serves a fixed, ordered queue of due words for one
sitting. Each word goes through two phases: the learner reveals it, then
scores it with a quality from 0 to 5. Outcomes are forwarded verbatim to
the server scheduler; the cursor only advances once the server has
acknowledged the outcome.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import Counter
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Callable

from ..errors import LextermError, ValidationError
from ..models import SubmitResult, Word

if TYPE_CHECKING:
    from ..api import LearningApi

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20

MIN_QUALITY = 0
MAX_QUALITY = 5


class Quality(IntEnum):
    """Named points of the 0-5 recall scale, used for labels only."""

    NO_RECOGNITION = 0
    VAGUE = 1
    RECALLED_WITH_EFFORT = 2
    HESITANT = 3
    EASY = 4
    INSTANT = 5

    @property
    def label(self) -> str:
        return _QUALITY_LABELS[self]


_QUALITY_LABELS = {
    Quality.NO_RECOGNITION: "No idea",
    Quality.VAGUE: "Vague",
    Quality.RECALLED_WITH_EFFORT: "Recalled",
    Quality.HESITANT: "Hesitant",
    Quality.EASY: "Easy",
    Quality.INSTANT: "Instant",
}


class SessionState(str, Enum):
    """Lifecycle of a review session."""

    IDLE = "idle"
    LOADING = "loading"
    ACTIVE = "active"
    FINISHED = "finished"


class ReviewError(LextermError):
    """Base class for review session errors."""


class ReviewStateError(ReviewError):
    """Raised when an operation is not valid in the current session state."""


class ReviewSession:
    """Serve due words for one dictionary and submit per-word outcomes."""

    def __init__(
        self,
        api: LearningApi,
        dictionary_id: int,
        limit: int = DEFAULT_LIMIT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the session. Call ``load`` to fetch words.

        Args:
            api: Learning endpoints.
            dictionary_id: Dictionary to draw due words from.
            limit: Maximum number of words per sitting.
            clock: Monotonic clock used to measure time spent per word.
        """
        self._api = api
        self._dictionary_id = dictionary_id
        self._limit = limit
        self._clock = clock

        self._lock = threading.Lock()
        self._state = SessionState.IDLE
        self._words: tuple[Word, ...] = ()
        self._cursor = 0
        self._completed = 0
        self._revealed = False
        self._submitting = False
        self._shown_at: float | None = None
        self._error: LextermError | None = None
        self._review_count = 0
        self._new_count = 0
        self._outcomes: Counter[int] = Counter()

    # --- Observable state ---

    @property
    def dictionary_id(self) -> int:
        return self._dictionary_id

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_finished(self) -> bool:
        return self._state is SessionState.FINISHED

    @property
    def words(self) -> tuple[Word, ...]:
        return self._words

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def completed_count(self) -> int:
        return self._completed

    @property
    def total(self) -> int:
        return len(self._words)

    @property
    def remaining(self) -> int:
        return len(self._words) - self._cursor

    @property
    def revealed(self) -> bool:
        return self._revealed

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def error(self) -> LextermError | None:
        return self._error

    @property
    def review_count(self) -> int:
        """Number of words in this sitting the server marked as reviews."""
        return self._review_count

    @property
    def new_count(self) -> int:
        return self._new_count

    @property
    def outcomes(self) -> dict[int, int]:
        """How many words were scored with each quality value."""
        return {q: self._outcomes.get(q, 0) for q in range(MIN_QUALITY, MAX_QUALITY + 1)}

    # --- Operations ---

    def load(self, dictionary_id: int | None = None, limit: int | None = None) -> SessionState:
        """Fetch a fresh queue of due words.

        An empty queue finishes the session immediately; that is not an
        error.

        Raises:
            LextermError: The fetch failed. The session returns to IDLE.
        """
        if dictionary_id is not None:
            self._dictionary_id = dictionary_id
        if limit is not None:
            self._limit = limit

        with self._lock:
            self._state = SessionState.LOADING
            self._error = None

        try:
            tasks = self._api.today_tasks(self._dictionary_id, self._limit)
        except LextermError as exc:
            logger.warning("Loading due words for dictionary %s failed: %s", self._dictionary_id, exc)
            with self._lock:
                self._state = SessionState.IDLE
                self._error = exc
            raise

        words = tasks.words[: self._limit] if self._limit > 0 else tasks.words
        with self._lock:
            self._words = tuple(words)
            self._cursor = 0
            self._completed = 0
            self._revealed = False
            self._submitting = False
            self._outcomes = Counter()
            self._review_count = tasks.review_count
            self._new_count = tasks.new_count
            if self._words:
                self._state = SessionState.ACTIVE
                self._shown_at = self._clock()
            else:
                self._state = SessionState.FINISHED
                self._shown_at = None

        logger.info(
            "Loaded %d due word(s) for dictionary %s (%d new, %d review)",
            len(self._words),
            self._dictionary_id,
            self._new_count,
            self._review_count,
        )
        return self._state

    def restart(self) -> SessionState:
        """Discard the current queue and fetch a fresh due set."""
        return self.load()

    def current_word(self) -> Word | None:
        if self._state is not SessionState.ACTIVE or self._cursor >= len(self._words):
            return None
        return self._words[self._cursor]

    def reveal(self) -> None:
        """Reveal the current word. Idempotent; no network."""
        if self.current_word() is None:
            return
        self._revealed = True

    def submit(self, quality: int) -> SubmitResult:
        """Score the current word and advance on success.

        On failure the cursor stays put and the word stays revealed, so
        the learner can retry.

        Raises:
            ValidationError: ``quality`` is not an integer in [0, 5].
            ReviewStateError: No current word, not revealed yet, or a
                submission is already in flight.
            LextermError: The server rejected or did not receive the outcome.
        """
        if isinstance(quality, bool) or not isinstance(quality, int):
            raise ValidationError(f"Quality must be an integer, got {quality!r}")
        if not MIN_QUALITY <= quality <= MAX_QUALITY:
            raise ValidationError(
                f"Quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality}"
            )

        with self._lock:
            word = self.current_word()
            if word is None:
                raise ReviewStateError("No word to score")
            if not self._revealed:
                raise ReviewStateError("Reveal the word before scoring it")
            if self._submitting:
                raise ReviewStateError("A submission is already in progress")
            self._submitting = True
            cursor = self._cursor

        time_spent = None
        if self._shown_at is not None:
            time_spent = max(0, int(round(self._clock() - self._shown_at)))

        try:
            result = self._api.submit(
                word.id,
                int(quality),
                dictionary_id=self._dictionary_id,
                time_spent=time_spent,
            )
        except LextermError as exc:
            logger.warning("Submitting outcome for word %s failed: %s", word.id, exc)
            with self._lock:
                self._error = exc
                self._submitting = False
            raise
        except Exception:
            with self._lock:
                self._submitting = False
            raise

        with self._lock:
            self._submitting = False
            self._error = None
            # The queue may have been reloaded while the outcome was in flight
            if self._cursor == cursor and self._words and self._words[cursor] is word:
                self._completed += 1
                self._cursor += 1
                self._revealed = False
                self._outcomes[int(quality)] += 1
                if self._cursor >= len(self._words):
                    self._state = SessionState.FINISHED
                    self._shown_at = None
                    logger.info(
                        "Review session for dictionary %s finished: %d word(s)",
                        self._dictionary_id,
                        self._completed,
                    )
                else:
                    self._shown_at = self._clock()
        return result
