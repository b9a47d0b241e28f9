"""Sight Tuner: real-time pitch estimation and staff note-reading practice."""

from .detection import AutocorrelationEstimator, StabilityFilter, estimate
from .note_game_core import NoteGame
from .note_types import SILENT, StableValue
from .note_utils import note_from_pitch, pitch_class, remove_octave

__version__ = "0.1.0"

__all__ = [
    "AutocorrelationEstimator",
    "StabilityFilter",
    "estimate",
    "NoteGame",
    "SILENT",
    "StableValue",
    "note_from_pitch",
    "pitch_class",
    "remove_octave",
]
