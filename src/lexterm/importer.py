"""Asynchronous dictionary import tracking.

An ``ImportTracker`` turns a one-shot upload into an observable,
terminating progress stream:

    Idle -> Submitting -> Polling -> Done
                       -> Failed (local)
            Polling -> Failed (remote)

Polling runs on one daemon worker thread per tracker that waits on a
stop event between polls, so polls are strictly sequential and the timer
is cancelled the moment a terminal status is seen.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from .errors import LextermError, TransientError, Unauthenticated, ValidationError
from .models import ImportJob, JobStatus, PartialFailure

if TYPE_CHECKING:
    from .api import DictionaryApi

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 2.0

# How long callers keep a completed import on screen before leaving it
COMPLETION_GRACE_SECONDS = 2.0

FAILURE_PREVIEW_LIMIT = 5

ALLOWED_EXTENSIONS = (".txt",)


class ImportState(str, Enum):
    """Client-side state of the tracked import."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    POLLING = "polling"
    DONE = "done"
    FAILED_LOCAL = "failed_local"
    FAILED_REMOTE = "failed_remote"

    @property
    def is_terminal(self) -> bool:
        return self in (ImportState.DONE, ImportState.FAILED_LOCAL, ImportState.FAILED_REMOTE)


def validate_upload_file(path: str | Path) -> Path:
    """Check that ``path`` is an existing plain-text word list.

    This is a fast-fail guard run before any network call; the server
    still validates the content.

    Raises:
        ValidationError: If the extension is not ``.txt`` or the file is
            missing.
    """
    path = Path(path)
    if path.suffix.lower() not in ALLOWED_EXTENSIONS:
        raise ValidationError(f"Only .txt word lists can be uploaded (got {path.name})")
    if not path.is_file():
        raise ValidationError(f"File not found: {path}")
    return path


def failure_summary(job: ImportJob, limit: int = FAILURE_PREVIEW_LIMIT) -> str | None:
    """Compose an advisory message naming the first ``limit`` failed items.

    Returns None when the job has not failed and has no failed items. The
    full list stays available on ``job.failed_items``.
    """
    count = len(job.failed_items)
    if job.status is not JobStatus.FAILED and count == 0:
        return None

    if job.status is JobStatus.FAILED:
        if count:
            text = f"Import failed: {count} word(s) could not be processed."
        else:
            text = f"Import failed: {job.message or 'the server gave no reason'}."
    else:
        text = f"Import has {count} failed word(s)."

    preview = ", ".join(item.item for item in job.failed_items[:limit] if item.item)
    if preview:
        text += f" e.g. {preview}"
        if count > limit:
            text += f" (+{count - limit} more)"
    return text


def _merge_snapshot(previous: ImportJob, snapshot: ImportJob) -> ImportJob:
    """Keep non-terminal progress from moving backwards."""
    if snapshot.is_terminal:
        return snapshot
    if snapshot.progress_percent < previous.progress_percent:
        logger.debug(
            "Job %s progress went back from %.1f to %.1f, keeping %.1f",
            snapshot.job_id,
            previous.progress_percent,
            snapshot.progress_percent,
            previous.progress_percent,
        )
        snapshot = replace(snapshot, progress_percent=previous.progress_percent)
    if previous.status is JobStatus.PROCESSING and snapshot.status is JobStatus.PENDING:
        snapshot = replace(snapshot, status=JobStatus.PROCESSING)
    return snapshot


class ImportTracker:
    """Submit a word list and follow the import job to a terminal status."""

    def __init__(
        self,
        api: DictionaryApi,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        failure_preview: int = FAILURE_PREVIEW_LIMIT,
        completion_grace: float = COMPLETION_GRACE_SECONDS,
        on_update: Callable[[ImportTracker], None] | None = None,
        on_finished: Callable[[ImportTracker], None] | None = None,
        thread_factory: Callable[..., threading.Thread] = threading.Thread,
    ) -> None:
        """Initialize the tracker.

        Args:
            api: Dictionary endpoints used to upload and poll.
            poll_interval: Seconds between status polls.
            failure_preview: How many failed items the summary names.
            completion_grace: Seconds a UI keeps a completed import on
                screen before leaving it.
            on_update: Called after every state change (from the polling
                thread when polling).
            on_finished: Called exactly once per job when tracking ends.
            thread_factory: Constructor for the polling thread.
        """
        self._api = api
        self._poll_interval = poll_interval
        self._failure_preview = failure_preview
        self._completion_grace = completion_grace
        self._on_update = on_update
        self._on_finished = on_finished
        self._thread_factory = thread_factory

        self._lock = threading.Lock()
        self._poll_lock = threading.Lock()
        self._state = ImportState.IDLE
        self._job: ImportJob | None = None
        self._error: LextermError | None = None
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None
        self._finished = threading.Event()
        self._finished_notified = False

    # --- Observable state ---

    @property
    def completion_grace(self) -> float:
        return self._completion_grace

    @property
    def state(self) -> ImportState:
        with self._lock:
            return self._state

    @property
    def job(self) -> ImportJob | None:
        with self._lock:
            return self._job

    @property
    def error(self) -> LextermError | None:
        with self._lock:
            return self._error

    @property
    def summary(self) -> str | None:
        job = self.job
        if job is None:
            return None
        return failure_summary(job, self._failure_preview)

    @property
    def partial_failure(self) -> PartialFailure | None:
        """Detail for a completed job that still has failed items."""
        job = self.job
        if job is None or job.status is not JobStatus.COMPLETED or not job.failed_items:
            return None
        return PartialFailure(
            job_id=job.job_id,
            failed_items=list(job.failed_items),
            summary=failure_summary(job, self._failure_preview) or "",
        )

    @property
    def is_polling(self) -> bool:
        with self._lock:
            return self._stop_event is not None and not self._stop_event.is_set()

    # --- Operations ---

    def submit(self, path: str | Path, name: str | None = None) -> ImportJob:
        """Upload a word list and start polling its import job.

        Raises:
            ValidationError: The file was rejected locally; nothing was sent.
            LextermError: The upload request failed.
        """
        try:
            path = validate_upload_file(path)
            content = path.read_bytes()
        except ValidationError as exc:
            with self._lock:
                self._error = exc
            raise
        except OSError as exc:
            error = ValidationError(f"Cannot read {path}: {exc}")
            with self._lock:
                self._error = error
            raise error from exc

        self.cancel()
        with self._lock:
            self._state = ImportState.SUBMITTING
            self._job = None
            self._error = None
            self._finished.clear()
            self._finished_notified = False
        self._notify_update()

        name = name or Path(path).stem
        logger.info("Uploading %s as %r (%d bytes)", path, name, len(content))
        try:
            job_id = self._api.upload(name, content)
        except LextermError as exc:
            logger.warning("Upload of %s failed: %s", path, exc)
            with self._lock:
                self._state = ImportState.FAILED_LOCAL
                self._error = exc
            self._notify_update()
            self._notify_finished()
            raise

        job = ImportJob.pending(job_id)
        with self._lock:
            self._job = job
            self._state = ImportState.POLLING
        logger.info("Import job %s started", job_id)
        self._notify_update()
        self._start_polling(job_id)
        return job

    def poll(self) -> ImportJob | None:
        """Fetch one status snapshot for the tracked job.

        Does nothing once the job is terminal.
        """
        with self._lock:
            job = self._job
            stop_event = self._stop_event
        if job is None or job.is_terminal:
            return job
        return self._poll_job(job.job_id, stop_event)

    def cancel(self) -> None:
        """Stop the polling timer, if any. Safe to call repeatedly."""
        with self._lock:
            stop_event = self._stop_event
            self._stop_event = None
            self._thread = None
        if stop_event is not None and not stop_event.is_set():
            stop_event.set()
            logger.debug("Import polling cancelled")
        self._finished.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until tracking ends. Returns False on timeout."""
        return self._finished.wait(timeout)

    # --- Internals ---

    def _start_polling(self, job_id: str) -> None:
        stop_event = threading.Event()
        thread = self._thread_factory(
            target=lambda: self._run(job_id, stop_event),
            name="lexterm-import-poll",
            daemon=True,
        )
        with self._lock:
            self._stop_event = stop_event
            self._thread = thread
        thread.start()

    def _run(self, job_id: str, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._poll_interval):
            self._poll_job(job_id, stop_event)

    def _is_current(self, job_id: str, stop_event: threading.Event | None) -> bool:
        if stop_event is not None and stop_event.is_set():
            return False
        return self._job is not None and self._job.job_id == job_id and not self._job.is_terminal

    def _poll_job(self, job_id: str, stop_event: threading.Event | None) -> ImportJob | None:
        with self._poll_lock:
            try:
                snapshot = self._api.upload_status(job_id)
            except Unauthenticated as exc:
                logger.warning("Polling job %s stopped, session rejected: %s", job_id, exc)
                with self._lock:
                    if not self._is_current(job_id, stop_event):
                        return self._job
                    self._state = ImportState.FAILED_LOCAL
                    self._error = exc
                    job = self._job
                self._stop(stop_event)
                self._notify_update()
                self._notify_finished()
                return job
            except TransientError as exc:
                logger.warning("Polling job %s failed, will retry: %s", job_id, exc)
                with self._lock:
                    if not self._is_current(job_id, stop_event):
                        return self._job
                    self._error = exc
                    job = self._job
                self._notify_update()
                return job

            with self._lock:
                if not self._is_current(job_id, stop_event):
                    logger.debug("Discarding stale snapshot for job %s", job_id)
                    return self._job
                assert self._job is not None
                merged = _merge_snapshot(self._job, snapshot)
                self._job = merged
                self._error = None
                if merged.status is JobStatus.COMPLETED:
                    self._state = ImportState.DONE
                elif merged.status is JobStatus.FAILED:
                    self._state = ImportState.FAILED_REMOTE

            if merged.is_terminal:
                self._stop(stop_event)
                logger.info(
                    "Import job %s finished: %s (%d failed item(s))",
                    job_id,
                    merged.status.value,
                    len(merged.failed_items),
                )
            self._notify_update()
            if merged.is_terminal:
                self._notify_finished()
            return merged

    def _stop(self, stop_event: threading.Event | None) -> None:
        with self._lock:
            if stop_event is None:
                stop_event = self._stop_event
            if self._stop_event is stop_event:
                self._stop_event = None
                self._thread = None
        if stop_event is not None:
            stop_event.set()

    def _notify_update(self) -> None:
        if self._on_update is None:
            return
        try:
            self._on_update(self)
        except Exception:
            logger.exception("Import update callback failed")

    def _notify_finished(self) -> None:
        with self._lock:
            if self._finished_notified:
                return
            self._finished_notified = True
        self._finished.set()
        if self._on_finished is None:
            return
        try:
            self._on_finished(self)
        except Exception:
            logger.exception("Import finished callback failed")
