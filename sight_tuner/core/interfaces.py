"""Defines the collaborator interfaces for the Sight Tuner application."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable, List

import numpy as np

from ..note_types import GuessResult
from ..staff import DrawCommand


class IAudioProvider(ABC):
    """An abstract interface for audio providers."""

    @abstractmethod
    def start(self, on_data_callback: Callable[[np.ndarray], None]) -> None:
        """Starts the audio stream, calling the callback with mono float32 chunks."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stops the audio stream."""
        pass

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """The sample rate of the audio stream."""
        pass

    @property
    @abstractmethod
    def channels(self) -> int:
        """The number of channels in the audio stream."""
        pass


class IRenderer(ABC):
    """Interface for whatever shows the tuner state to the user."""

    @abstractmethod
    def show_value(self, text: str) -> None:
        """Show the stabilized value ('440 Hz', 'A' or 'Too quiet...')."""
        pass

    @abstractmethod
    def show_guess(self, result: GuessResult) -> None:
        """Give match/no-match feedback for a judged guess."""
        pass

    @abstractmethod
    def show_target(self, note: str, commands: List[DrawCommand]) -> None:
        """Show a new target note, with the draw commands for its staff."""
        pass
