"""Upload status widget showing import progress and failed words."""

from __future__ import annotations

from textual.widgets import Static

from ...importer import ImportState, ImportTracker
from ..render import job_renderable, upload_error_markup


class UploadStatus(Static):
    """Widget rendering the state of an ``ImportTracker``."""

    DEFAULT_CSS = """
    UploadStatus {
        height: auto;
        border: solid $primary;
        padding: 1 2;
    }
    """

    def show_tracker(self, tracker: ImportTracker) -> None:
        state = tracker.state
        job = tracker.job
        error = tracker.error

        if state is ImportState.SUBMITTING:
            self.update("[bold]Uploading...[/bold]")
            return
        if job is None:
            if error is not None:
                self.update(upload_error_markup(error))
            else:
                self.update("[dim]Enter the path of a .txt word list (one word per line)[/dim]")
            return

        self.update(
            job_renderable(
                job,
                summary=tracker.summary,
                error=str(error) if error is not None else None,
            )
        )
