"""Upload screen for lexterm TUI.

Submits a plain-text word list as a new dictionary and follows the
server-side import until it completes or fails.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Input, Static

from ...errors import LextermError, Unauthenticated
from ...importer import ImportState, ImportTracker
from ..widgets.upload_status import UploadStatus

if TYPE_CHECKING:
    from ..app import LextermApp


class UploadScreen(Screen[None]):
    """Screen for importing a word list."""

    BINDINGS = [
        Binding("escape", "back", "Back"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._tracker: ImportTracker | None = None

    @property
    def lexterm_app(self) -> "LextermApp":
        """Get the typed app instance."""
        from ..app import LextermApp

        assert isinstance(self.app, LextermApp)
        return self.app

    def compose(self) -> ComposeResult:
        yield Vertical(
            Static("[bold]Import word list[/bold]", markup=True),
            Input(placeholder="Path to .txt file", id="path-input"),
            Input(placeholder="Dictionary name (defaults to file name)", id="name-input"),
            UploadStatus(id="upload-status"),
            Static(
                "[dim]Enter[/dim] upload  [dim]Esc[/dim] back",
                classes="help-text",
                markup=True,
            ),
        )

    async def on_mount(self) -> None:
        self._tracker = self.lexterm_app.client.import_tracker(
            on_update=self._on_tracker_update,
            on_finished=self._on_tracker_finished,
        )
        self._refresh_status()
        self.query_one("#path-input", Input).focus()

    def on_unmount(self) -> None:
        """Stop polling when the screen goes away."""
        if self._tracker is not None:
            self._tracker.cancel()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if self._tracker is None:
            return
        if self._tracker.state in (ImportState.SUBMITTING, ImportState.POLLING):
            self.notify("An import is already running", severity="warning")
            return

        path = self.query_one("#path-input", Input).value.strip()
        name = self.query_one("#name-input", Input).value.strip() or None
        if not path:
            self.query_one("#path-input", Input).focus()
            return

        self.run_worker(
            lambda: self._submit(path, name),
            thread=True,
            exclusive=True,
            group="upload",
        )

    def _submit(self, path: str, name: str | None) -> None:
        """Worker body; runs off the UI thread."""
        assert self._tracker is not None
        try:
            self._tracker.submit(path, name=name)
        except LextermError:
            # The tracker keeps the error; an expired session is handled
            # by the finished callback
            self.app.call_from_thread(self._refresh_status)

    # Tracker callbacks arrive on worker or polling threads

    def _on_tracker_update(self, tracker: ImportTracker) -> None:
        self.app.call_from_thread(self._refresh_status)

    def _on_tracker_finished(self, tracker: ImportTracker) -> None:
        self.app.call_from_thread(self._on_finished, tracker.state, tracker.error)

    def _refresh_status(self) -> None:
        if self._tracker is not None:
            self.query_one("#upload-status", UploadStatus).show_tracker(self._tracker)

    def _on_finished(self, state: ImportState, error: LextermError | None) -> None:
        assert self._tracker is not None
        if state is ImportState.DONE:
            job = self._tracker.job
            if job is not None and job.failed_items:
                self.notify(
                    f"Import finished with {len(job.failed_items)} failed word(s)",
                    severity="warning",
                )
            else:
                self.notify("Import complete", severity="information")
            self.set_timer(self._tracker.completion_grace, self._leave)
        elif isinstance(error, Unauthenticated):
            self.lexterm_app.session_expired(str(error))

    def _leave(self) -> None:
        if self.is_current:
            self.app.pop_screen()

    async def action_back(self) -> None:
        self.app.pop_screen()
