"""Done screen for lexterm TUI.

This screen displays session statistics after completing a review
and allows starting another round or returning to the dictionary picker.
"""

from __future__ import annotations

from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Center, Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Button, Static

from ...review import Quality, ReviewSession


class DoneScreen(Screen[None]):
    """Screen displayed when a review session is complete."""

    BINDINGS = [
        Binding("escape", "back_to_picker", "Back to Dictionaries"),
        Binding("enter", "back_to_picker", "Continue", show=False),
        Binding("r", "review_again", "Review again"),
        Binding("q", "app.quit", "Quit"),
    ]

    def __init__(self, session: ReviewSession, name: str | None = None) -> None:
        super().__init__()
        self._session = session
        self._title = name or f"Dictionary {session.dictionary_id}"

    def compose(self) -> ComposeResult:
        session = self._session
        if session.completed_count:
            heading = "[bold green]Review Complete![/bold green]"
        else:
            heading = "[bold green]Nothing due right now[/bold green]"

        outcomes = session.outcomes
        breakdown = [
            Static(f"  {quality.label:<9} ({quality.value}): {outcomes[quality.value]}")
            for quality in Quality
        ]

        yield Center(
            Vertical(
                Static(heading, id="done-title", markup=True),
                Static(""),
                Static(f"[bold]{escape(self._title)}[/bold]", markup=True),
                Static(""),
                Static(f"Words reviewed: [bold]{session.completed_count}[/bold]", markup=True),
                Static(""),
                Static("[dim]Answers breakdown:[/dim]", markup=True),
                *breakdown,
                Static(""),
                Horizontal(
                    Button("Back to Dictionaries", id="back-button", variant="primary"),
                    Button("Review again", id="again-button"),
                    classes="button-row",
                ),
                classes="done-stats",
            ),
            classes="done-container",
        )

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button press."""
        if event.button.id == "back-button":
            await self.action_back_to_picker()
        elif event.button.id == "again-button":
            await self.action_review_again()

    async def action_review_again(self) -> None:
        """Fetch a fresh due set for the same dictionary."""
        from .review import ReviewScreen

        await self.app.switch_screen(ReviewScreen(name=self._title, session=self._session))

    async def action_back_to_picker(self) -> None:
        """Return to the dictionary picker."""
        if len(self.app.screen_stack) > 2:
            self.app.pop_screen()
            return

        from .dictionary_picker import DictionaryPickerScreen

        # Replace the done screen when review was the first screen shown
        await self.app.switch_screen(DictionaryPickerScreen())
