"""Command-line interface for Fret Recall."""

from .main import main

__all__ = ["main"]
