"""Core components for the Sight Tuner application."""

# Import interfaces for easier access
from .interfaces import (
    IAudioProvider,
    IRenderer,
)
from .config import ConfigManager
from .events import TunerEvents

__all__ = ["IAudioProvider", "IRenderer", "ConfigManager", "TunerEvents"]
