"""Type definitions for the Sight Tuner project."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class Silence(Enum):
    """Marker returned by the estimator when the signal is below the noise gate."""

    SILENT = "silent"

    def __repr__(self):
        return "SILENT"


SILENT = Silence.SILENT

# A frequency in Hz, or SILENT
Frequency = Union[float, Silence]

# What the display shows for one frame: Hz value or pitch class label
DisplayValue = Union[float, int, str]

TOO_QUIET_TEXT = "Too quiet..."


@dataclass(frozen=True)
class StableValue:
    """A value emitted by the stability filter."""

    value: Optional[DisplayValue]  # Hz (float/int) or pitch class (e.g. 'C')
    too_quiet: bool = False

    @property
    def is_numeric(self) -> bool:
        return isinstance(self.value, (int, float)) and not self.too_quiet

    def display_text(self) -> str:
        """Text for the rendering collaborator ('440 Hz', 'A' or 'Too quiet...')."""
        if self.too_quiet:
            return TOO_QUIET_TEXT
        if self.is_numeric:
            return f"{self.value} Hz"
        return str(self.value)

    def __str__(self):
        return self.display_text()


TOO_QUIET = StableValue(value=None, too_quiet=True)


@dataclass
class GuessResult:
    """Outcome of comparing a stable guess with the current target."""

    played: str  # Pitch class that was played (e.g. 'C')
    target: str  # Named target note (e.g. 'C4')
    correct: bool
    timestamp: float


@dataclass
class FrameResult:
    """Everything one pipeline pass produced for a single analysis frame."""

    frequency: Frequency  # Raw estimator output
    stable: Optional[StableValue] = None  # Emitted by the stability filter, if any
    guess: Optional[GuessResult] = None  # Set only when the matcher was fed

    @property
    def is_silent(self) -> bool:
        return self.frequency is SILENT


# How a frequency is shown: pitch class, whole Hz, or unrounded Hz
DISPLAY_MODES = ("note", "hz", "raw")
