"""Utility functions for working with musical notes and frequencies."""

import re
from typing import List

import numpy as np

from .logger import get_logger

# Get logger for this module
logger = get_logger(__name__)

# Standard reference: A4 = 440Hz, MIDI note 69
A4_FREQUENCY = 440.0
A4_MIDI = 69

# Pitch classes, indexed by MIDI note number modulo 12. Flat spelling only.
NOTE_STRINGS: List[str] = [
    "C",
    "Db",
    "D",
    "Eb",
    "E",
    "F",
    "Gb",
    "G",
    "Ab",
    "A",
    "Bb",
    "B",
]

# Note name, optional accidental, optional (possibly negative) octave
NAMED_NOTE_PATTERN = re.compile(r"^([A-Ga-g][#b]?)(-?[0-9]*)$")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upwards (-29.5 -> -29, 0.5 -> 1)."""
    return int(np.floor(value + 0.5))


def note_from_pitch(frequency: float) -> int:
    """Convert a frequency to a MIDI-style note number.

    Args:
        frequency: Frequency in Hz, must be positive

    Returns:
        int: Note number, where A4 (440 Hz) is 69 and middle C is 60

    Raises:
        ValueError: If frequency is not a positive, finite number
    """
    if not np.isfinite(frequency) or frequency <= 0:
        raise ValueError(f"Frequency must be positive, got {frequency}")

    half_steps = round_half_up(12 * np.log2(frequency / A4_FREQUENCY))
    return half_steps + A4_MIDI


def pitch_class(frequency: float) -> str:
    """Convert frequency to its pitch class, ignoring the octave (e.g. 'A')."""
    return NOTE_STRINGS[note_from_pitch(frequency) % 12]


def note_name(frequency: float) -> str:
    """Convert frequency to note name using Scientific Pitch Notation (SPN).

    Note:
        - Middle C is C4 (261.63 Hz)
        - A4 is 440 Hz
        - Octave numbers change between B and C (e.g., B3 -> C4)
    """
    midi_number = note_from_pitch(frequency)
    octave = (midi_number // 12) - 1
    return f"{NOTE_STRINGS[midi_number % 12]}{octave}"


def remove_octave(note: str) -> str:
    """Strip the octave from a named note ('Gb5' -> 'Gb').

    Names without an octave are returned unchanged.
    """
    match = NAMED_NOTE_PATTERN.match(note.strip())
    if not match:
        raise ValueError(f"Invalid note name: {note!r}")
    return match.group(1)


def octave_of(note: str) -> int:
    """Return the octave number of a named note ('C4' -> 4)."""
    match = NAMED_NOTE_PATTERN.match(note.strip())
    if not match or not match.group(2):
        raise ValueError(f"Note has no octave: {note!r}")
    return int(match.group(2))


def frequency_of(note: str) -> float:
    """Equal-tempered frequency of a named note ('A4' -> 440.0)."""
    name = remove_octave(note)
    name = name[0].upper() + name[1:]
    # Sharps are accepted on input even though we never produce them
    sharp_to_flat = {"C#": "Db", "D#": "Eb", "F#": "Gb", "G#": "Ab", "A#": "Bb"}
    name = sharp_to_flat.get(name, name)
    midi_number = (octave_of(note) + 1) * 12 + NOTE_STRINGS.index(name)
    return float(A4_FREQUENCY * 2.0 ** ((midi_number - A4_MIDI) / 12.0))
