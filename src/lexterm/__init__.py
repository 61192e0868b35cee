"""lexterm - terminal client for a vocabulary-learning service."""

__version__ = "0.1.0"
