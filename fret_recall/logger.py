"""Logger lookup for Fret Recall modules.

Every logger handed out lives under the ``fret_recall`` namespace, so the
handler installed by :func:`fret_recall.logging_config.setup_logging` sees it.
"""
import logging
from typing import Dict

ROOT_LOGGER_NAME = "fret_recall"

_loggers: Dict[str, logging.Logger] = {}


def get_logger(name: str) -> logging.Logger:
    """Return the cached logger for ``name``.

    Names outside the package (``__main__`` when a module is run as a
    script, for instance) are nested under ``fret_recall``.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = _loggers.get(name)
    if logger is None:
        logger = _loggers[name] = logging.getLogger(name)
    return logger
