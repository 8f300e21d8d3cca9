"""Logging setup for the Fret Recall CLI.

Library code only creates loggers through :func:`fret_recall.logger.get_logger`;
applications call :func:`setup_logging` once to attach output.
"""

import logging
import sys
from typing import Dict, Optional, TextIO

from .logger import ROOT_LOGGER_NAME

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

MODULE_LOG_LEVELS: Dict[str, int] = {
    ROOT_LOGGER_NAME: logging.INFO,
    "fret_recall.audio.pitch_detector": logging.INFO,  # DEBUG logs every rejected buffer
    "fret_recall.note_matcher": logging.INFO,  # DEBUG logs per-target cents
    "fret_recall.services.pitch_detection_service": logging.INFO,
    "fret_recall.core.config": logging.WARNING,
}

THIRD_PARTY_LOG_LEVELS: Dict[str, int] = {
    "sounddevice": logging.ERROR,
}

_handler: Optional[logging.Handler] = None


def _parse_level(level: str) -> Optional[int]:
    numeric = logging.getLevelName(level.upper())
    return numeric if isinstance(numeric, int) else None


def setup_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> logging.Logger:
    """Attach a console handler to the ``fret_recall`` logger tree.

    Args:
        level: Name of a level (e.g. "DEBUG") that replaces every per-module
            default; an unknown name is reported and ignored
        stream: Output stream for the handler, stdout by default. Only used
            the first time a handler is created.

    Returns:
        The package root logger
    """
    global _handler

    if _handler is None:
        _handler = logging.StreamHandler(stream or sys.stdout)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if _handler not in root.handlers:
        root.addHandler(_handler)
    root.propagate = False

    override = None
    if level:
        override = _parse_level(level)
        if override is None:
            root.error(f"Invalid log level: {level}")

    for module_name, default_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(override if override is not None else default_level)
    for module_name, module_level in THIRD_PARTY_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root.debug("Logging configured")
    return root
