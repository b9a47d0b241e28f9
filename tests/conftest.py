"""
Shared fixtures for Sight Tuner tests.
"""
import numpy as np
import pytest

SAMPLE_RATE = 44100
BUFFER_SIZE = 2048


def sine(frequency, sample_rate=SAMPLE_RATE, size=BUFFER_SIZE, amplitude=0.5, phase=0.0):
    """Generate a sine wave buffer."""
    t = np.arange(size) / sample_rate
    return amplitude * np.sin(2 * np.pi * frequency * t + phase)


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def sample_rate():
    """Standard sample rate."""
    return SAMPLE_RATE


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def silence_audio():
    """Generate silent audio samples."""
    return np.zeros(BUFFER_SIZE, dtype=np.float32)


@pytest.fixture
def sine_wave_440hz():
    """Generate a 440Hz sine wave (A4 note)."""
    return sine(440.0)


@pytest.fixture
def sine_wave_261hz():
    """Generate a 261.63Hz sine wave (C4 note)."""
    return sine(261.63)
