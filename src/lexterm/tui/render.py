"""TUI-specific rendering helpers for words and import jobs.

These build Rich renderables; the plain-text equivalents live in
``lexterm.render``.
"""

from __future__ import annotations

from rich.console import RenderableType
from rich.markup import escape
from rich.text import Text

from ..models import Dictionary, FailedItem, ImportJob, JobStatus, Word
from ..render import job_status_text, render_progress_bar

STATUS_STYLES = {
    JobStatus.PENDING: "bold #e9a55c",
    JobStatus.PROCESSING: "bold #e9a55c",
    JobStatus.COMPLETED: "bold #6cd97e",
    JobStatus.FAILED: "bold #e96c6c",
}

STATUS_ICONS = {
    JobStatus.PENDING: "⟳",
    JobStatus.PROCESSING: "⟳",
    JobStatus.COMPLETED: "✓",
    JobStatus.FAILED: "✗",
}


def word_front_text(word: Word) -> Text:
    """Headword with its phonetic transcription."""
    text = Text(word.text, style="bold")
    if word.phonetic:
        text.append(f"  /{word.phonetic.strip('/')}/", style="dim")
    return text


def word_back_renderables(word: Word) -> list[RenderableType]:
    """Senses and example sentence, one renderable per block."""
    renderables: list[RenderableType] = []
    for index, sense in enumerate(word.senses, start=1):
        line = Text(f"{index}. ")
        if sense.part_of_speech:
            line.append(sense.part_of_speech, style="italic #6c9fd4")
            line.append(" ")
        line.append(" ".join(sense.gloss.split()))
        renderables.append(line)

    if not renderables:
        renderables.append(Text("(no definition)", style="dim"))

    if word.example:
        example = Text("e.g. ", style="dim")
        example.append(" ".join(word.example.split()), style="italic")
        renderables.append(Text(""))
        renderables.append(example)
    return renderables


def dictionary_label(dictionary: Dictionary) -> str:
    """Markup line for a dictionary in the picker list."""
    return (
        f"{escape(dictionary.name)}  [dim]({dictionary.format_counts()} learned, "
        f"{dictionary.progress:.0f}%)[/dim]"
    )


def upload_error_markup(error: object) -> str:
    """Markup for an upload that failed before a job was created."""
    return f"[bold #e96c6c]Upload failed:[/bold #e96c6c] {escape(str(error))}"


def _failed_item_text(item: FailedItem) -> Text:
    text = Text(f"  {item.item}", style="bold")
    text.append(f"  [{item.stage.label}]", style="#e9a55c")
    if item.reason:
        text.append(f"  {item.reason}", style="dim")
    return text


def job_renderable(
    job: ImportJob,
    summary: str | None = None,
    error: str | None = None,
    max_failed: int = 50,
) -> Text:
    """Status header, progress bar, summary and failed-item detail."""
    style = STATUS_STYLES[job.status]
    text = Text()
    text.append(f"{STATUS_ICONS[job.status]} {job_status_text(job)}", style=style)
    text.append("\n\n")
    text.append(render_progress_bar(job.progress_percent, width=40))
    if job.total_items is not None and job.processed_items is not None:
        text.append(f"  {job.processed_items}/{job.total_items} words", style="dim")

    if summary:
        text.append("\n\n")
        text.append(summary, style="#e96c6c" if job.status is JobStatus.FAILED else "#e0c55a")

    if error:
        text.append("\n\n")
        text.append(f"Status check failed: {error}", style="dim")

    if job.failed_items:
        text.append("\n\n")
        text.append(f"Failed words ({len(job.failed_items)})", style="bold")
        for item in job.failed_items[:max_failed]:
            text.append("\n")
            text.append_text(_failed_item_text(item))
        hidden = len(job.failed_items) - max_failed
        if hidden > 0:
            text.append(f"\n  ... and {hidden} more", style="dim")
    return text
