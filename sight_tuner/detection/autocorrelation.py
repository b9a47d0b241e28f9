"""Autocorrelation pitch estimation for a single analysis window."""

from __future__ import annotations

from typing import ClassVar, Tuple

import numpy as np

from ..exceptions import InvalidInputError
from ..logger import get_logger
from ..note_types import SILENT, Frequency

logger = get_logger(__name__)


class AutocorrelationEstimator:
    """Estimates the fundamental frequency of a sample buffer.

    The buffer is gated on RMS energy, trimmed to the region between the first
    and last quiet samples, autocorrelated, and the strongest lag after the
    zero-lag peak is refined with parabolic interpolation.
    """

    DEFAULT_SILENCE_RMS: ClassVar[float] = 0.01  # Below this the buffer is SILENT
    DEFAULT_TRIM_THRESHOLD: ClassVar[float] = 0.2  # Edge trimming amplitude

    def __init__(
        self,
        silence_rms: float = DEFAULT_SILENCE_RMS,
        trim_threshold: float = DEFAULT_TRIM_THRESHOLD,
    ) -> None:
        self._silence_rms = silence_rms
        self._trim_threshold = trim_threshold

    @property
    def silence_rms(self) -> float:
        return self._silence_rms

    @property
    def trim_threshold(self) -> float:
        return self._trim_threshold

    def estimate(self, buffer: np.ndarray, sample_rate: float) -> Frequency:
        """Estimate the fundamental frequency of ``buffer``.

        Args:
            buffer: 1-D array of float samples (one analysis window)
            sample_rate: Sample rate of the buffer in Hz

        Returns:
            The frequency in Hz, or SILENT if the signal is too quiet or no
            usable period could be found

        Raises:
            InvalidInputError: If the buffer is empty, not 1-D, contains
                non-finite samples, or the sample rate is not positive
        """
        samples = self._validate(buffer, sample_rate)

        rms = float(np.sqrt(np.mean(samples * samples)))
        if rms < self._silence_rms:
            return SILENT

        r1, r2 = self._trim_bounds(samples)
        trimmed = samples[r1:r2]
        if trimmed.size < 3:
            logger.debug(f"Trimmed buffer too short ({trimmed.size} samples)")
            return SILENT

        c = self.autocorrelate(trimmed)
        period = self._find_period(c)
        if period is None or period <= 0:
            return SILENT

        frequency = float(sample_rate / period)
        logger.debug(
            f"rms={rms:.4f} trim=[{r1}:{r2}) period={period:.3f} -> {frequency:.2f}Hz"
        )
        return frequency

    @staticmethod
    def _validate(buffer: np.ndarray, sample_rate: float) -> np.ndarray:
        if not isinstance(sample_rate, (int, float, np.number)) or not np.isfinite(
            sample_rate
        ):
            raise InvalidInputError(f"Invalid sample rate: {sample_rate!r}")
        if sample_rate <= 0:
            raise InvalidInputError(f"Sample rate must be positive, got {sample_rate}")

        samples = np.asarray(buffer, dtype=np.float64)
        if samples.ndim != 1:
            raise InvalidInputError(
                f"Expected a 1-D sample buffer, got shape {samples.shape}"
            )
        if samples.size == 0:
            raise InvalidInputError("Sample buffer is empty")
        if not np.all(np.isfinite(samples)):
            raise InvalidInputError("Sample buffer contains non-finite values")
        return samples

    def _trim_bounds(self, samples: np.ndarray) -> Tuple[int, int]:
        """Return [r1, r2) around the loud centre of the buffer.

        r1 is the first quiet sample in the first half, r2 the last quiet
        sample in the second half. Defaults leave the buffer whole except for
        its final sample.
        """
        size = samples.size
        half = (size + 1) // 2  # scan i < size / 2
        quiet = np.abs(samples) < self._trim_threshold

        r1 = 0
        head = np.flatnonzero(quiet[:half])
        if head.size:
            r1 = int(head[0])

        r2 = size - 1
        # Backward scan visits size-1, size-2, ... down to size-half+1
        tail_start = size - half + 1
        tail = np.flatnonzero(quiet[tail_start:])
        if tail.size:
            r2 = tail_start + int(tail[-1])

        return r1, r2

    @staticmethod
    def autocorrelate(samples: np.ndarray) -> np.ndarray:
        """Unnormalized autocorrelation c[i] = sum(x[j] * x[j + i]) for i in [0, N)."""
        full = np.correlate(samples, samples, mode="full")
        return full[samples.size - 1 :]

    @staticmethod
    def _find_period(c: np.ndarray):
        """Locate the period, in (fractional) samples, from the autocorrelation."""
        size = c.size

        # Walk down the zero-lag peak to its first local minimum
        d = 0
        while d < size - 1 and c[d] > c[d + 1]:
            d += 1
        if d >= size - 1:
            logger.debug("Autocorrelation never stops descending; no period")
            return None

        t0 = d + int(np.argmax(c[d:]))
        if t0 == 0:
            return None

        period = float(t0)
        # Interpolation needs both neighbours
        if t0 < size - 1:
            x1, x2, x3 = c[t0 - 1], c[t0], c[t0 + 1]
            a = (x1 + x3 - 2 * x2) / 2
            b = (x3 - x1) / 2
            if a:
                period -= b / (2 * a)
        return period


_default_estimator = AutocorrelationEstimator()


def estimate(buffer: np.ndarray, sample_rate: float) -> Frequency:
    """Estimate the fundamental frequency of a buffer with default thresholds."""
    return _default_estimator.estimate(buffer, sample_rate)
