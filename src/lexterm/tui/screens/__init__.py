"""TUI screens for lexterm."""

from .dictionary_picker import DictionaryPickerScreen
from .done import DoneScreen
from .login import LoginScreen
from .review import ReviewScreen
from .upload import UploadScreen

__all__ = [
    "DictionaryPickerScreen",
    "DoneScreen",
    "LoginScreen",
    "ReviewScreen",
    "UploadScreen",
]
