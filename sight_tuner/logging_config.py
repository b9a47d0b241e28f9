"""Centralized logging configuration for Sight Tuner.

This module provides a consistent way to configure logging across the application.
"""

import logging
import sys
from typing import Optional

from .logger import get_logger

# Log levels for different modules
MODULE_LOG_LEVELS = {
    # Core modules
    "sight_tuner": logging.INFO,
    "sight_tuner.cli": logging.INFO,
    # Signal path
    "sight_tuner.detection": logging.INFO,  # Set to DEBUG for per-frame estimates
    "sight_tuner.note_matcher": logging.INFO,
    "sight_tuner.note_game_core": logging.INFO,
    "sight_tuner.services": logging.INFO,
    "sight_tuner.core": logging.INFO,
    "sight_tuner.logger": logging.WARNING,  # Logger module itself should be quiet
    # Libraries/third-party
    "sounddevice": logging.WARNING,
    # Root logger
    "": logging.ERROR,
}

# Shared console handler
_console_handler: Optional[logging.Handler] = None


def setup_logging(level: Optional[str] = None) -> None:
    """Set up logging configuration for the application.

    Args:
        level: If provided, override all 'sight_tuner' log levels with this level (e.g., "DEBUG").
    """
    global _console_handler

    # Create a single, shared console handler if it doesn't exist
    if _console_handler is None:
        _console_handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        _console_handler.setFormatter(formatter)

    # Determine log levels
    log_levels = MODULE_LOG_LEVELS.copy()
    if level:
        numeric_level = logging.getLevelName(level.upper())
        if isinstance(numeric_level, int):
            for module_name in log_levels:
                if module_name.startswith("sight_tuner"):
                    log_levels[module_name] = numeric_level
        else:
            get_logger(__name__).error(f"Invalid log level: {level}")

    # Apply module-specific levels
    for module_name, module_level in log_levels.items():
        logger = logging.getLogger(module_name)
        logger.setLevel(module_level)

        # Clear existing handlers and add the shared one
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.addHandler(_console_handler)
        logger.propagate = False

    get_logger().debug("Logging configuration complete")
