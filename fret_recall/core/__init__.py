"""Core components for the Fret Recall application."""

from .config import ConfigManager
from .factory import ComponentFactory

__all__ = ["ConfigManager", "ComponentFactory"]
