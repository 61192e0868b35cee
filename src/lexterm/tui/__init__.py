"""Textual TUI for lexterm."""

from .app import LextermApp, run_tui

__all__ = ["LextermApp", "run_tui"]
