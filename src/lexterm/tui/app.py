"""Textual TUI application for lexterm.

This module provides the main Textual App that manages:
- Client lifecycle (built on mount, closed on exit)
- Screen navigation (login, dictionary picker, upload, review, done)
- Returning to the login screen when the session cannot be renewed
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.markup import escape
from textual.app import App

from ..client import Client, build_client
from ..config_store import Config


@dataclass
class AppState:
    """Shared application state."""

    config: Config
    client: Client | None = None
    initial_dictionary: int | None = None
    review_limit: int | None = None


class LextermApp(App[None]):
    """Main Textual application for lexterm."""

    TITLE = "lexterm"
    CSS = """
    Screen {
        background: $surface;
    }

    #dictionary-list {
        height: 1fr;
        border: solid $primary;
    }

    #filter-input {
        dock: top;
        margin: 1 0;
    }

    #path-input, #name-input {
        margin: 1 0 0 0;
    }

    #upload-status {
        margin-top: 1;
    }

    .centered-screen {
        align: center middle;
        height: 1fr;
    }

    .login-form {
        width: 60;
        height: auto;
        border: solid $primary;
        padding: 1 2;
    }

    .button-row {
        height: auto;
        layout: horizontal;
        margin-top: 1;
    }

    .button-row Button {
        width: 1fr;
        margin: 0 1;
    }

    .done-container {
        align: center middle;
        height: 1fr;
    }

    .done-stats {
        width: 60;
        height: auto;
        border: solid $success;
        padding: 2;
    }

    .help-text {
        dock: bottom;
        height: 1;
        background: $surface-darken-1;
        color: $text-muted;
        text-align: center;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        config: Config,
        initial_dictionary: int | None = None,
        review_limit: int | None = None,
        client: Client | None = None,
    ) -> None:
        """Initialize the lexterm app.

        Args:
            config: Loaded user configuration.
            initial_dictionary: Optional dictionary id to start reviewing
                immediately after login.
            review_limit: Optional override for words per session.
            client: Prebuilt client; built from ``config`` when omitted.
        """
        super().__init__()
        self._state = AppState(
            config=config,
            client=client,
            initial_dictionary=initial_dictionary,
            review_limit=review_limit,
        )

    @property
    def state(self) -> AppState:
        """Get the shared application state."""
        return self._state

    @property
    def client(self) -> Client:
        assert self._state.client is not None
        return self._state.client

    async def on_mount(self) -> None:
        """Build the client and push the initial screen."""
        if self._state.client is None:
            self._state.client = build_client(self._state.config)

        if self._state.client.store.is_authenticated:
            await self.push_screen(self.home_screen())
        else:
            from .screens.login import LoginScreen

            await self.push_screen(LoginScreen())

    def home_screen(self):
        """Screen shown after login: the requested review or the picker."""
        initial = self._state.initial_dictionary
        if initial is not None:
            from .screens.review import ReviewScreen

            self._state.initial_dictionary = None
            return ReviewScreen(initial, limit=self._state.review_limit)

        from .screens.dictionary_picker import DictionaryPickerScreen

        return DictionaryPickerScreen()

    def session_expired(self, message: str) -> None:
        """Drop back to the login screen after a session-fatal error."""
        from .screens.login import LoginScreen

        self.notify(escape(message), severity="error")
        while len(self.screen_stack) > 1:
            self.pop_screen()
        self.push_screen(LoginScreen())

    async def action_quit(self) -> None:
        """Quit the application."""
        self._close_client()
        self.exit()

    def _close_client(self) -> None:
        if self._state.client is not None:
            self._state.client.close()

    def on_unmount(self) -> None:
        """Ensure the HTTP session is closed on unmount."""
        self._close_client()


def run_tui(
    config: Config,
    initial_dictionary: int | None = None,
    limit: int | None = None,
) -> None:
    """Run the lexterm TUI.

    Args:
        config: Loaded user configuration.
        initial_dictionary: Optional dictionary id to start reviewing immediately.
        limit: Optional override for words per review session.

    Raises:
        ValueError: If the configured API base URL is invalid.
    """
    client = build_client(config)
    app = LextermApp(
        config=config,
        initial_dictionary=initial_dictionary,
        review_limit=limit,
        client=client,
    )
    app.run()
