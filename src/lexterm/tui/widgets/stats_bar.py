"""Stats bar widget for displaying queue and session progress."""

from __future__ import annotations

from textual.widgets import Static


class StatsBar(Static):
    """Widget displaying the due split and progress through the queue."""

    DEFAULT_CSS = """
    StatsBar {
        height: 1;
        background: $surface-darken-1;
        padding: 0 1;
    }
    """

    def __init__(self, id: str | None = None) -> None:
        super().__init__(id=id)
        self._new = 0
        self._review = 0
        self._completed = 0
        self._total = 0

    def update_counts(self, new: int, review: int) -> None:
        """Update the new/review split of the queue."""
        self._new = new
        self._review = review
        self._refresh_display()

    def update_progress(self, completed: int, total: int) -> None:
        """Update how many words of the queue are done."""
        self._completed = completed
        self._total = total
        self._refresh_display()

    def _refresh_display(self) -> None:
        text = (
            f"[bold blue]{self._new}[/bold blue] new  "
            f"[bold green]{self._review}[/bold green] review  "
            f"[dim]|[/dim]  "
            f"Done: {self._completed}/{self._total}"
        )
        self.update(text)
