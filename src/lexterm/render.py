"""Plain-text rendering of words and import jobs for terminal output."""

from __future__ import annotations

from .models import ImportJob, JobStatus, Word

_STATUS_TEXT = {
    JobStatus.PENDING: "Waiting to start...",
    JobStatus.PROCESSING: "Processing...",
    JobStatus.COMPLETED: "Import complete!",
    JobStatus.FAILED: "Import failed",
}


def _clean(text: str | None) -> str:
    """Collapse internal whitespace and strip."""
    if not text:
        return ""
    return " ".join(text.split())


def render_word_front(word: Word) -> str:
    """Question side: the word and its phonetic transcription."""
    lines = [_clean(word.text)]
    if word.phonetic:
        phonetic = _clean(word.phonetic).strip("/")
        lines.append(f"/{phonetic}/")
    return "\n".join(lines)


def render_word_back(word: Word) -> str:
    """Answer side: numbered senses followed by the example sentence."""
    lines: list[str] = []
    for index, sense in enumerate(word.senses, start=1):
        gloss = _clean(sense.gloss)
        pos = _clean(sense.part_of_speech)
        lines.append(f"{index}. {pos} {gloss}" if pos else f"{index}. {gloss}")
    if not lines:
        lines.append("(no definition)")
    if word.example:
        lines.append("")
        lines.append(f"e.g. {_clean(word.example)}")
    return "\n".join(lines)


def job_status_text(job: ImportJob) -> str:
    if job.status is JobStatus.COMPLETED and job.failed_items:
        return "Import complete (some words failed)"
    return _STATUS_TEXT[job.status]


def render_progress_bar(percent: float, width: int = 30) -> str:
    """Render ``[#####-----]  50%`` style progress."""
    percent = min(100.0, max(0.0, percent))
    filled = int(round(width * percent / 100))
    return f"[{'#' * filled}{'-' * (width - filled)}] {percent:3.0f}%"


def render_job_line(job: ImportJob) -> str:
    """One-line job progress for plain mode."""
    line = f"{render_progress_bar(job.progress_percent)}  {job_status_text(job)}"
    if job.total_items is not None and job.processed_items is not None:
        line += f"  ({job.processed_items}/{job.total_items})"
    return line


def render_failed_items(job: ImportJob) -> str:
    """Full failed-item listing, one per line."""
    lines = []
    for item in job.failed_items:
        line = f"  {item.item}  [{item.stage.label}]"
        if item.reason:
            line += f"  {item.reason}"
        lines.append(line)
    return "\n".join(lines)
