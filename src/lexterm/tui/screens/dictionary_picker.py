"""Dictionary picker screen for lexterm TUI.

This screen displays a filterable list of the user's dictionaries with
their learning progress, allowing users to start a review session, upload
a new word list, or log out.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Input, ListItem, ListView, Static

from ...errors import LextermError, Unauthenticated
from ...models import Dictionary, LearningStats
from ..render import dictionary_label

if TYPE_CHECKING:
    from ..app import LextermApp


class DictionaryListItem(ListItem):
    """A list item representing a dictionary."""

    def __init__(self, dictionary: Dictionary) -> None:
        super().__init__()
        self.dictionary = dictionary

    def compose(self) -> ComposeResult:
        yield Static(dictionary_label(self.dictionary), markup=True)


class DictionaryPickerScreen(Screen[None]):
    """Screen for selecting a dictionary to review."""

    BINDINGS = [
        Binding("escape", "app.quit", "Quit"),
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
        Binding("enter", "select_dictionary", "Review"),
        Binding("/", "focus_filter", "Filter", show=False),
        Binding("u", "upload", "Upload"),
        Binding("r", "refresh", "Refresh", show=False),
        Binding("L", "logout", "Log out", show=False),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._dictionaries: list[Dictionary] = []
        self._filtered: list[Dictionary] = []

    @property
    def lexterm_app(self) -> "LextermApp":
        """Get the typed app instance."""
        from ..app import LextermApp

        assert isinstance(self.app, LextermApp)
        return self.app

    def compose(self) -> ComposeResult:
        yield Vertical(
            Static("", id="user-line", markup=True),
            Input(placeholder="Filter dictionaries...", id="filter-input"),
            ListView(id="dictionary-list"),
            Static(
                "[dim]j/k[/dim] navigate  [dim]Enter[/dim] review  [dim]u[/dim] upload  "
                "[dim]r[/dim] refresh  [dim]L[/dim] log out  [dim]q[/dim] quit",
                classes="help-text",
                markup=True,
            ),
        )

    async def on_mount(self) -> None:
        """Load dictionaries when screen mounts."""
        self.query_one("#dictionary-list", ListView).focus()
        self._reload()

    async def on_screen_resume(self) -> None:
        """Refresh after returning from an upload or review."""
        self._reload()

    def _reload(self) -> None:
        self.run_worker(self._fetch, thread=True, exclusive=True, group="dictionaries")

    def _fetch(self) -> None:
        """Worker body; runs off the UI thread."""
        client = self.lexterm_app.client
        try:
            dictionaries = client.dictionaries.list_dictionaries()
        except Unauthenticated as exc:
            self.app.call_from_thread(self.lexterm_app.session_expired, str(exc))
            return
        except LextermError as exc:
            self.app.call_from_thread(
                self.notify, f"Could not load dictionaries: {escape(str(exc))}", severity="error"
            )
            return

        try:
            stats: LearningStats | None = client.learning.stats()
        except LextermError:
            stats = None
        self.app.call_from_thread(self._show, dictionaries, stats)

    def _show(self, dictionaries: list[Dictionary], stats: LearningStats | None) -> None:
        self._dictionaries = dictionaries
        user = self.lexterm_app.client.store.user
        line = f"[bold]{escape(user.display_name) if user else 'lexterm'}[/bold]"
        if stats is not None:
            line += (
                f"  [dim]{stats.total_learned} learned, "
                f"{stats.streak_days} day streak[/dim]"
            )
        self.query_one("#user-line", Static).update(line)
        self._update_list(self.query_one("#filter-input", Input).value)

    def _update_list(self, filter_text: str = "") -> None:
        """Update the dictionary list with optional filtering."""
        list_view = self.query_one("#dictionary-list", ListView)
        list_view.clear()

        filter_lower = filter_text.lower()
        self._filtered = [
            d for d in self._dictionaries if not filter_text or filter_lower in d.name.lower()
        ]
        for dictionary in self._filtered:
            list_view.append(DictionaryListItem(dictionary))

    async def on_input_changed(self, event: Input.Changed) -> None:
        """Handle filter input changes."""
        if event.input.id == "filter-input":
            self._update_list(event.value)

    async def on_list_view_selected(self, event: ListView.Selected) -> None:
        """Handle dictionary selection from list."""
        if isinstance(event.item, DictionaryListItem):
            await self._select(event.item.dictionary)

    async def action_cursor_down(self) -> None:
        self.query_one("#dictionary-list", ListView).action_cursor_down()

    async def action_cursor_up(self) -> None:
        self.query_one("#dictionary-list", ListView).action_cursor_up()

    async def action_select_dictionary(self) -> None:
        """Select the currently highlighted dictionary."""
        list_view = self.query_one("#dictionary-list", ListView)
        if isinstance(list_view.highlighted_child, DictionaryListItem):
            await self._select(list_view.highlighted_child.dictionary)

    async def action_focus_filter(self) -> None:
        self.query_one("#filter-input", Input).focus()

    async def action_refresh(self) -> None:
        self._reload()

    async def action_upload(self) -> None:
        from .upload import UploadScreen

        await self.app.push_screen(UploadScreen())

    async def action_logout(self) -> None:
        self.run_worker(self._logout, thread=True, exclusive=True, group="dictionaries")

    def _logout(self) -> None:
        """Worker body; runs off the UI thread."""
        self.lexterm_app.client.auth.logout()
        self.app.call_from_thread(self._on_logged_out)

    async def _on_logged_out(self) -> None:
        from .login import LoginScreen

        self.notify("Logged out", severity="information")
        await self.app.switch_screen(LoginScreen())

    async def _select(self, dictionary: Dictionary) -> None:
        """Push the review screen for a dictionary."""
        if dictionary.total_words == 0:
            self.notify(f"{escape(dictionary.name)} has no words yet", severity="warning")
            return

        from .review import ReviewScreen

        await self.app.push_screen(
            ReviewScreen(
                dictionary.id,
                name=dictionary.name,
                limit=self.lexterm_app.state.review_limit,
            )
        )
