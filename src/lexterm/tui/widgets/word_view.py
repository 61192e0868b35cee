"""Word view widget for displaying the front and back of a flashcard."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from ...models import Word
from ..render import word_back_renderables, word_front_text


class WordViewWidget(Static):
    """Widget for displaying a word and, once revealed, its meaning."""

    DEFAULT_CSS = """
    WordViewWidget {
        height: 1fr;
        padding: 1 2;
    }

    WordViewWidget .front-section {
        border: solid $primary;
        padding: 1 2;
        margin-bottom: 1;
        height: auto;
    }

    WordViewWidget .back-section {
        border: solid $success;
        padding: 1 2;
        height: auto;
    }

    WordViewWidget .section-label {
        color: $text-muted;
        text-style: bold;
        margin-bottom: 1;
    }

    WordViewWidget .content {
        height: auto;
    }
    """

    def __init__(self, id: str | None = None) -> None:
        super().__init__(id=id)
        self._word: Word | None = None
        self._revealed = False

    def compose(self) -> ComposeResult:
        yield Vertical(id="word-content")

    def show_front(self, word: Word) -> None:
        """Display only the headword."""
        self._word = word
        self._revealed = False
        self._refresh_content()

    def show_back(self, word: Word) -> None:
        """Display the headword and its meaning."""
        self._word = word
        self._revealed = True
        self._refresh_content()

    def clear(self) -> None:
        self._word = None
        self._revealed = False
        self._refresh_content()

    def _refresh_content(self) -> None:
        container = self.query_one("#word-content", Vertical)
        container.remove_children()
        if self._word is None:
            return

        container.mount(
            Vertical(
                Static("[bold]Word[/bold]", classes="section-label", markup=True),
                Static(word_front_text(self._word), classes="content"),
                classes="front-section",
            )
        )

        if self._revealed:
            container.mount(
                Vertical(
                    Static("[bold]Meaning[/bold]", classes="section-label", markup=True),
                    *[
                        Static(renderable, classes="content")
                        for renderable in word_back_renderables(self._word)
                    ],
                    classes="back-section",
                )
            )
