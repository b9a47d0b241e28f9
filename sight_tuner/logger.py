"""Logger lookup for Sight Tuner modules."""
import logging
from typing import Dict, Optional

PACKAGE_LOGGER = "sight_tuner"

_logger_cache: Dict[str, logging.Logger] = {}


def qualified_name(name: Optional[str]) -> str:
    """Place a logger name under the package namespace.

    ``None`` is the package logger itself and bare names such as 'detection'
    become 'sight_tuner.detection'. Dotted module names and '__main__'
    pass through unchanged.
    """
    if not name:
        return PACKAGE_LOGGER
    if name in (PACKAGE_LOGGER, "__main__") or "." in name:
        return name
    return f"{PACKAGE_LOGGER}.{name}"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get the logger for a module, so MODULE_LOG_LEVELS applies to it.

    Args:
        name: Module name ('sight_tuner.note_matcher'), a short name inside
            the package ('cli'), or None for the package logger
    """
    full_name = qualified_name(name)
    logger = _logger_cache.get(full_name)
    if logger is None:
        logger = _logger_cache[full_name] = logging.getLogger(full_name)
    return logger
