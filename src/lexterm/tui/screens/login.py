"""Login screen for lexterm TUI.

Collects a username and password and logs in or registers. Network calls
run in a thread worker so the UI stays responsive.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Button, Input, Static

from ...errors import LextermError
from ...models import UserIdentity

if TYPE_CHECKING:
    from ..app import LextermApp


class LoginScreen(Screen[None]):
    """Screen for signing in or creating an account."""

    BINDINGS = [
        Binding("escape", "app.quit", "Quit"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._busy = False

    @property
    def lexterm_app(self) -> "LextermApp":
        """Get the typed app instance."""
        from ..app import LextermApp

        assert isinstance(self.app, LextermApp)
        return self.app

    def compose(self) -> ComposeResult:
        yield Static(
            "[dim]Tab[/dim] next field  [dim]Enter[/dim] log in  [dim]Esc[/dim] quit",
            classes="help-text",
            markup=True,
        )
        yield Container(
            Vertical(
                Static("[bold]Sign in[/bold]", markup=True),
                Static(""),
                Input(placeholder="Username", id="username-input"),
                Input(placeholder="Password", password=True, id="password-input"),
                Static("", id="login-message", markup=True),
                Horizontal(
                    Button("Log in", id="login-button", variant="primary"),
                    Button("Register", id="register-button"),
                    classes="button-row",
                ),
                classes="login-form",
            ),
            classes="centered-screen",
        )

    async def on_mount(self) -> None:
        self.query_one("#username-input", Input).focus()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "username-input":
            self.query_one("#password-input", Input).focus()
        else:
            self._start(register=False)

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "login-button":
            self._start(register=False)
        elif event.button.id == "register-button":
            self._start(register=True)

    def _set_message(self, message: str) -> None:
        self.query_one("#login-message", Static).update(message)

    def _start(self, register: bool) -> None:
        if self._busy:
            return
        username = self.query_one("#username-input", Input).value
        password = self.query_one("#password-input", Input).value
        self._busy = True
        self._set_message("[dim]Signing in...[/dim]")
        self.run_worker(
            lambda: self._authenticate(username, password, register),
            thread=True,
            exclusive=True,
        )

    def _authenticate(self, username: str, password: str, register: bool) -> None:
        """Worker body; runs off the UI thread."""
        auth = self.lexterm_app.client.auth
        try:
            if register:
                user = auth.register(username, password)
            else:
                user = auth.login(username, password)
        except LextermError as exc:
            self.app.call_from_thread(self._on_failure, str(exc))
            return
        self.app.call_from_thread(self._on_success, user)

    def _on_failure(self, message: str) -> None:
        self._busy = False
        self._set_message(f"[bold #e96c6c]{escape(message)}[/bold #e96c6c]")
        self.query_one("#password-input", Input).value = ""

    async def _on_success(self, user: UserIdentity) -> None:
        self._busy = False
        self.notify(f"Logged in as {escape(user.display_name)}", severity="information")
        await self.app.switch_screen(self.lexterm_app.home_screen())
