"""Review screen for lexterm TUI.

This screen handles the word review flow:
- Show the headword, reveal its meaning on space/enter
- Once revealed, score it 0-5
- A failed submission keeps the word revealed so it can be retried
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.screen import Screen
from textual.widgets import Static

from ...errors import LextermError, Unauthenticated
from ...review import Quality, ReviewSession, ReviewStateError
from ..widgets.stats_bar import StatsBar
from ..widgets.word_view import WordViewWidget

if TYPE_CHECKING:
    from ..app import LextermApp


class ReviewScreen(Screen[None]):
    """Screen for reviewing the due words of a dictionary."""

    BINDINGS = [
        Binding("escape", "back_to_picker", "Back"),
        Binding("q", "app.quit", "Quit"),
        Binding("space", "reveal", "Reveal", show=True),
        Binding("enter", "reveal", "Reveal", show=False),
        Binding("0", "rate(0)", "No idea", show=False),
        Binding("1", "rate(1)", "Vague", show=False),
        Binding("2", "rate(2)", "Recalled", show=False),
        Binding("3", "rate(3)", "Hesitant", show=False),
        Binding("4", "rate(4)", "Easy", show=False),
        Binding("5", "rate(5)", "Instant", show=False),
    ]

    def __init__(
        self,
        dictionary_id: int | None = None,
        name: str | None = None,
        limit: int | None = None,
        session: ReviewSession | None = None,
    ) -> None:
        """Create the screen for a dictionary or an existing session.

        Passing ``session`` reuses it and fetches a fresh due set, which
        is how the done screen starts another round.
        """
        super().__init__()
        if session is None and dictionary_id is None:
            raise ValueError("ReviewScreen needs a dictionary id or a session")
        self._dictionary_id = session.dictionary_id if session else dictionary_id
        self._title = name or f"Dictionary {self._dictionary_id}"
        self._limit = limit
        self._session = session

    @property
    def lexterm_app(self) -> "LextermApp":
        """Get the typed app instance."""
        from ..app import LextermApp

        assert isinstance(self.app, LextermApp)
        return self.app

    def compose(self) -> ComposeResult:
        yield Vertical(
            Static(f"[bold]{escape(self._title)}[/bold]", id="dictionary-title", markup=True),
            StatsBar(id="stats-bar"),
            VerticalScroll(
                WordViewWidget(id="word-view"),
            ),
            Static(
                "[dim]Loading...[/dim]",
                id="help-bar",
                classes="help-text",
                markup=True,
            ),
        )

    def _get_help_text(self) -> str:
        """Get context-appropriate help text."""
        session = self._session
        if session is None or session.current_word() is None:
            return "[dim]Esc[/dim] back  [dim]q[/dim] quit"
        if not session.revealed:
            return "[dim]Space[/dim] reveal  [dim]Esc[/dim] back  [dim]q[/dim] quit"
        return "  ".join(f"[dim]{q.value}[/dim] {q.label}" for q in Quality) + "  [dim]Esc[/dim] back"

    async def on_mount(self) -> None:
        """Create the session if needed and fetch due words."""
        if self._session is None:
            self._session = self.lexterm_app.client.review_session(
                self._dictionary_id, limit=self._limit
            )
        self.run_worker(self._load, thread=True, exclusive=True, group="review")

    def _load(self) -> None:
        """Worker body; runs off the UI thread."""
        assert self._session is not None
        try:
            self._session.load()
        except Unauthenticated as exc:
            self.app.call_from_thread(self.lexterm_app.session_expired, str(exc))
            return
        except LextermError as exc:
            self.app.call_from_thread(self._on_load_failed, str(exc))
            return
        self.app.call_from_thread(self._after_change)

    def _on_load_failed(self, message: str) -> None:
        self.notify(f"Could not load words: {escape(message)}", severity="error")
        self.app.pop_screen()

    async def _after_change(self) -> None:
        """Redraw from session state or move on to the done screen."""
        session = self._session
        if session is None:
            return

        stats_bar = self.query_one("#stats-bar", StatsBar)
        stats_bar.update_counts(new=session.new_count, review=session.review_count)
        stats_bar.update_progress(session.completed_count, session.total)

        if session.is_finished:
            from .done import DoneScreen

            await self.app.switch_screen(DoneScreen(session, name=self._title))
            return

        self._display_word()

    def _display_word(self) -> None:
        session = self._session
        word = session.current_word() if session else None
        word_view = self.query_one("#word-view", WordViewWidget)
        if word is None:
            word_view.clear()
        elif session.revealed:
            word_view.show_back(word)
        else:
            word_view.show_front(word)

        self.query_one("#help-bar", Static).update(self._get_help_text())

    async def action_reveal(self) -> None:
        """Reveal the meaning of the current word."""
        if self._session is None or self._session.revealed:
            return
        self._session.reveal()
        self._display_word()

    async def action_rate(self, quality: int) -> None:
        """Score the current word."""
        session = self._session
        if session is None or not session.revealed or session.is_submitting:
            return
        self.run_worker(
            lambda: self._submit(quality),
            thread=True,
            exclusive=True,
            group="review",
        )

    def _submit(self, quality: int) -> None:
        """Worker body; runs off the UI thread."""
        assert self._session is not None
        try:
            self._session.submit(quality)
        except ReviewStateError:
            return
        except Unauthenticated as exc:
            self.app.call_from_thread(self.lexterm_app.session_expired, str(exc))
            return
        except LextermError as exc:
            self.app.call_from_thread(
                self.notify, f"Could not save answer: {escape(str(exc))}", severity="error"
            )
            return
        self.app.call_from_thread(self._after_change)

    async def action_back_to_picker(self) -> None:
        """Return to the dictionary picker."""
        if len(self.app.screen_stack) > 2:
            self.app.pop_screen()
            return

        from .dictionary_picker import DictionaryPickerScreen

        await self.app.switch_screen(DictionaryPickerScreen())
