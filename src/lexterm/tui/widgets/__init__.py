"""TUI widgets for lexterm."""

from .stats_bar import StatsBar
from .upload_status import UploadStatus
from .word_view import WordViewWidget

__all__ = ["StatsBar", "UploadStatus", "WordViewWidget"]
