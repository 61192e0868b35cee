"""Data records exchanged with the vocabulary service.

The server has shipped two schema revisions (snake_case JSON and
camelCase protobuf-JSON), so every ``from_wire`` reader accepts both
spellings of a field.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import MalformedResponse


def pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the value of the first key present in ``data``."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _require_mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise MalformedResponse(f"Expected {what} object, got {type(data).__name__}")
    return data


def _optional_int(value: Any, what: str) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise MalformedResponse(f"Invalid {what} value: {value!r}") from exc


@dataclass(frozen=True)
class UserIdentity:
    """The logged-in user as reported by the server."""

    id: int
    display_name: str

    @classmethod
    def from_wire(cls, data: Any) -> UserIdentity:
        data = _require_mapping(data, "user")
        try:
            return cls(
                id=int(pick(data, "id", "userId", "user_id")),
                display_name=str(pick(data, "username", "displayName", "name", default="")),
            )
        except (TypeError, ValueError) as exc:
            raise MalformedResponse(f"Invalid user payload: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "username": self.display_name}


@dataclass(frozen=True)
class AuthResult:
    """Credential and identity returned by login, register and refresh."""

    access_token: str
    user: UserIdentity | None = None

    @classmethod
    def from_wire(cls, data: Any) -> AuthResult:
        data = _require_mapping(data, "auth")
        token = pick(data, "access_token", "accessToken", "token")
        if not token:
            raise MalformedResponse("Auth response carries no access token")
        user_data = pick(data, "user")
        user = UserIdentity.from_wire(user_data) if user_data else None
        return cls(access_token=str(token), user=user)


# --- Import jobs ---


class JobStatus(str, Enum):
    """Server-side status of an import job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)

    @classmethod
    def from_wire(cls, value: Any) -> JobStatus:
        try:
            return cls(str(value).lower())
        except ValueError as exc:
            raise MalformedResponse(f"Unknown job status: {value!r}") from exc


class FailureStage(str, Enum):
    """Pipeline stage at which an imported word failed."""

    TRANSLATE = "translate"
    PERSIST = "persist"
    REUSE = "reuse"
    UNKNOWN = "unknown"

    @classmethod
    def from_wire(cls, value: Any) -> FailureStage:
        text = str(value or "").lower()
        if text == "save":
            return cls.PERSIST
        try:
            return cls(text)
        except ValueError:
            return cls.UNKNOWN

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class FailedItem:
    """One word that the import pipeline could not process."""

    item: str
    stage: FailureStage = FailureStage.UNKNOWN
    reason: str = ""
    timestamp: str | None = None

    @classmethod
    def from_wire(cls, data: Any) -> FailedItem:
        if isinstance(data, str):
            # Older servers only report the word itself
            return cls(item=data)
        data = _require_mapping(data, "failed item")
        return cls(
            item=str(pick(data, "item", "word", default="")),
            stage=FailureStage.from_wire(pick(data, "stage")),
            reason=str(pick(data, "reason", default="")),
            timestamp=pick(data, "timestamp", "at"),
        )


@dataclass(frozen=True)
class ImportJob:
    """Snapshot of an import job as last reported by the server."""

    job_id: str
    status: JobStatus = JobStatus.PENDING
    progress_percent: float = 0.0
    total_items: int | None = None
    processed_items: int | None = None
    failed_items: tuple[FailedItem, ...] = ()
    message: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @classmethod
    def pending(cls, job_id: str) -> ImportJob:
        """Synthetic snapshot used between submission and the first poll."""
        return cls(job_id=job_id, status=JobStatus.PENDING, progress_percent=0.0)

    @classmethod
    def from_wire(cls, data: Any, job_id: str | None = None) -> ImportJob:
        data = _require_mapping(data, "upload status")
        wire_id = pick(data, "task_id", "taskId", "job_id", "jobId", default=job_id)
        if not wire_id:
            raise MalformedResponse("Upload status carries no job id")

        details = pick(data, "failed_details", "failedDetails")
        if details:
            failed = tuple(FailedItem.from_wire(d) for d in details)
        else:
            words = pick(data, "failed_items", "failedItems", "failed_words", "failedWords", default=[])
            failed = tuple(FailedItem.from_wire(w) for w in words)

        try:
            progress = float(pick(data, "progress", "progress_percent", default=0.0))
        except (TypeError, ValueError) as exc:
            raise MalformedResponse(f"Invalid progress value: {exc}") from exc

        total = _optional_int(pick(data, "total", "total_items", "totalItems"), "total")
        processed = _optional_int(
            pick(data, "processed", "processed_items", "processedItems"), "processed"
        )
        return cls(
            job_id=str(wire_id),
            status=JobStatus.from_wire(pick(data, "status", default="pending")),
            progress_percent=min(100.0, max(0.0, progress)),
            total_items=total,
            processed_items=processed,
            failed_items=failed,
            message=pick(data, "message"),
        )


# --- Dictionaries ---


@dataclass(frozen=True)
class Dictionary:
    """A user's word list with learning progress."""

    id: int
    name: str
    description: str = ""
    total_words: int = 0
    learned_words: int = 0
    progress: float = 0.0
    created_at: str | None = None

    @classmethod
    def from_wire(cls, data: Any) -> Dictionary:
        data = _require_mapping(data, "dictionary")
        try:
            return cls(
                id=int(pick(data, "id")),
                name=str(pick(data, "name", default="")),
                description=str(pick(data, "description", default="")),
                total_words=int(pick(data, "total_words", "totalWords", default=0)),
                learned_words=int(pick(data, "learned_words", "learnedWords", default=0)),
                progress=float(pick(data, "progress", default=0.0)),
                created_at=pick(data, "created_at", "createdAt"),
            )
        except (TypeError, ValueError) as exc:
            raise MalformedResponse(f"Invalid dictionary payload: {exc}") from exc

    def format_counts(self) -> str:
        """Format counts as learned/total string."""
        return f"{self.learned_words}/{self.total_words}"


# --- Learning ---


@dataclass(frozen=True)
class Sense:
    """One meaning of a word."""

    part_of_speech: str
    gloss: str


def _parse_senses(meaning: Any) -> tuple[Sense, ...]:
    if isinstance(meaning, str):
        if not meaning.strip():
            return ()
        try:
            meaning = json.loads(meaning)
        except json.JSONDecodeError:
            # Plain-text meaning
            return (Sense(part_of_speech="", gloss=meaning),)
    if isinstance(meaning, dict):
        definitions = meaning.get("definitions") or []
    elif isinstance(meaning, list):
        definitions = meaning
    else:
        return ()

    senses = []
    for item in definitions:
        if isinstance(item, dict):
            senses.append(
                Sense(
                    part_of_speech=str(pick(item, "pos", "partOfSpeech", "part_of_speech", default="")),
                    gloss=str(pick(item, "text", "gloss", default="")),
                )
            )
        elif item:
            senses.append(Sense(part_of_speech="", gloss=str(item)))
    return tuple(senses)


@dataclass(frozen=True)
class Word:
    """A due vocabulary item served for review."""

    id: int
    text: str
    phonetic: str | None = None
    senses: tuple[Sense, ...] = ()
    example: str | None = None
    audio_url: str | None = None
    status: str | None = None
    next_review_date: str | None = None

    @classmethod
    def from_wire(cls, data: Any) -> Word:
        data = _require_mapping(data, "word")
        try:
            word_id = int(pick(data, "id"))
        except (TypeError, ValueError) as exc:
            raise MalformedResponse(f"Invalid word id: {exc}") from exc
        return cls(
            id=word_id,
            text=str(pick(data, "word", "text", default="")),
            phonetic=pick(data, "phonetic") or None,
            senses=_parse_senses(pick(data, "meaning", "senses")),
            example=pick(data, "example") or None,
            audio_url=pick(data, "audio_url", "audioUrl") or None,
            status=pick(data, "status") or None,
            next_review_date=pick(data, "next_review_date", "nextReviewDate") or None,
        )


@dataclass(frozen=True)
class TodayTasks:
    """Due words for one sitting plus the server's new/review split."""

    words: tuple[Word, ...] = ()
    review_count: int = 0
    new_count: int = 0

    @classmethod
    def from_wire(cls, data: Any) -> TodayTasks:
        data = _require_mapping(data, "today tasks")
        words = pick(data, "words", default=[])
        if not isinstance(words, list):
            raise MalformedResponse("Today tasks 'words' is not a list")
        return cls(
            words=tuple(Word.from_wire(w) for w in words),
            review_count=_optional_int(
                pick(data, "review_count", "reviewCount", default=0), "review count"
            ),
            new_count=_optional_int(pick(data, "new_count", "newCount", default=0), "new count"),
        )


@dataclass(frozen=True)
class SubmitResult:
    """Acknowledgement of a submitted outcome; fields are informational."""

    word_id: int | None = None
    new_status: str | None = None
    new_interval: int | None = None
    next_review_date: str | None = None
    ef_factor: float | None = None

    @classmethod
    def from_wire(cls, data: Any) -> SubmitResult:
        if not isinstance(data, dict):
            return cls()
        ef_factor = pick(data, "ef_factor", "efFactor")
        try:
            ef_factor = float(ef_factor) if ef_factor is not None else None
        except (TypeError, ValueError) as exc:
            raise MalformedResponse(f"Invalid ef_factor value: {ef_factor!r}") from exc
        return cls(
            word_id=_optional_int(pick(data, "word_id", "wordId"), "word id"),
            new_status=pick(data, "new_status", "newStatus"),
            new_interval=_optional_int(pick(data, "new_interval", "newInterval"), "interval"),
            next_review_date=pick(data, "next_review_date", "nextReviewDate"),
            ef_factor=ef_factor,
        )


@dataclass(frozen=True)
class LearningStats:
    """Overall learning statistics for the current user."""

    total_learned: int = 0
    streak_days: int = 0

    @classmethod
    def from_wire(cls, data: Any) -> LearningStats:
        data = _require_mapping(data, "learning stats")
        return cls(
            total_learned=_optional_int(
                pick(data, "total_learned", "totalLearned", default=0), "total learned"
            ),
            streak_days=_optional_int(pick(data, "streak_days", "streakDays", default=0), "streak"),
        )


@dataclass
class PartialFailure:
    """Structured detail for a job that finished with some failed items."""

    job_id: str
    failed_items: list[FailedItem] = field(default_factory=list)
    summary: str = ""

    @property
    def count(self) -> int:
        return len(self.failed_items)
