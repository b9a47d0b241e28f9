"""Per-frame tuner pipeline and the service that drives it from an audio source.

Each frame runs estimator -> note mapping -> stability filter -> matcher
synchronously, in arrival order. Audio threads only append samples to a
rolling window; frames are taken from that window on a fixed cadence.
"""

import threading
import time
from typing import Callable, Iterable, Iterator, Optional

import numpy as np

from ..core.events import TunerEvents
from ..core.interfaces import IAudioProvider, IRenderer
from ..detection.autocorrelation import AutocorrelationEstimator
from ..detection.stability_filter import StabilityFilter
from ..exceptions import ConfigError
from ..logger import get_logger
from ..note_game_core import NoteGame
from ..note_types import DISPLAY_MODES, SILENT, DisplayValue, FrameResult
from ..note_utils import pitch_class
from ..staff import StaffLayout

logger = get_logger(__name__)


class SampleWindow:
    """The most recent ``size`` mono samples, safe to feed from another thread."""

    def __init__(self, size: int):
        if size <= 0:
            raise ValueError(f"Window size must be positive, got {size}")
        self._size = size
        self._data = np.zeros(size, dtype=np.float32)
        self._filled = 0
        self._lock = threading.Lock()

    @property
    def size(self) -> int:
        return self._size

    @property
    def is_full(self) -> bool:
        return self._filled >= self._size

    def extend(self, samples: np.ndarray) -> None:
        samples = np.asarray(samples, dtype=np.float32).ravel()
        if samples.size == 0:
            return
        with self._lock:
            if samples.size >= self._size:
                self._data = samples[-self._size :].copy()
            else:
                self._data = np.concatenate((self._data[samples.size :], samples))
            self._filled = min(self._size, self._filled + samples.size)

    def snapshot(self) -> np.ndarray:
        with self._lock:
            return self._data.copy()

    def clear(self) -> None:
        with self._lock:
            self._data = np.zeros(self._size, dtype=np.float32)
            self._filled = 0


class TunerPipeline:
    """Turns analysis frames into stable display values and guess results."""

    def __init__(
        self,
        estimator: Optional[AutocorrelationEstimator] = None,
        stability_filter: Optional[StabilityFilter] = None,
        game: Optional[NoteGame] = None,
        display_mode: str = "note",
        events: Optional[TunerEvents] = None,
        layout: Optional[StaffLayout] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.estimator = estimator if estimator is not None else AutocorrelationEstimator()
        self.stability_filter = (
            stability_filter if stability_filter is not None else StabilityFilter()
        )
        self.game = game
        self.events = events if events is not None else TunerEvents()
        self.layout = layout if layout is not None else StaffLayout()
        self._clock = clock
        self._display_mode = ""
        self.set_display_mode(display_mode)

        if self.game is not None:
            self.game.on_target_changed(self._publish_target)

    @property
    def display_mode(self) -> str:
        return self._display_mode

    def set_display_mode(self, mode: str) -> None:
        if mode not in DISPLAY_MODES:
            raise ConfigError(
                f"Unknown display mode '{mode}', expected one of {list(DISPLAY_MODES)}"
            )
        self._display_mode = mode

    def set_smoothing(self, mode: str) -> None:
        self.stability_filter.configure(mode)

    def attach_renderer(self, renderer: IRenderer) -> None:
        """Send all output to ``renderer`` and show it the current target."""
        self.events.attach_renderer(renderer)
        if self.game is not None:
            self._publish_target(self.game.current_target)

    def format_value(self, frequency: float) -> DisplayValue:
        """Value shown for a frequency in the current display mode."""
        if self._display_mode == "note":
            return pitch_class(frequency)
        if self._display_mode == "hz":
            return int(round(frequency))
        return frequency

    def process_frame(
        self, buffer: np.ndarray, sample_rate: float, now: Optional[float] = None
    ) -> FrameResult:
        """Run one frame through the whole pipeline.

        Raises:
            InvalidInputError: If the buffer or sample rate is malformed
        """
        now = self._clock() if now is None else now
        if self.game is not None:
            self.game.update(now)

        frequency = self.estimator.estimate(buffer, sample_rate)
        if frequency is SILENT:
            stable = self.stability_filter.accept(SILENT)
            self.events.emit_value(stable.display_text())
            return FrameResult(frequency=frequency, stable=stable)

        stable = self.stability_filter.accept(self.format_value(frequency))
        result = FrameResult(frequency=frequency, stable=stable)
        if stable is None:
            return result

        if self.game is not None and self.game.listening:
            played = pitch_class(stable.value) if stable.is_numeric else stable.value
            result.guess = self.game.submit_guess(played, now)
            if result.guess is not None:
                self.events.emit_guess(result.guess)

        self.events.emit_value(stable.display_text())
        return result

    def _publish_target(self, note: str) -> None:
        try:
            commands = self.layout.draw_commands(note)
        except KeyError:
            logger.warning(f"No staff position for target {note}")
            commands = []
        self.events.emit_target(note, commands)


def analyze_stream(
    pipeline: TunerPipeline,
    chunks: Iterable[np.ndarray],
    sample_rate: float,
    buffer_size: int = 2048,
    frame_rate: float = 60.0,
) -> Iterator[FrameResult]:
    """Run a pipeline over recorded audio as fast as possible.

    A frame is taken every ``sample_rate / frame_rate`` samples once the
    window is full, with the stream position used as the clock so cooldowns
    run in audio time.
    """
    window = SampleWindow(buffer_size)
    hop = max(1, int(round(sample_rate / frame_rate)))
    if pipeline.game is not None:
        # Time the first target from the start of the recording
        pipeline.game.restart_timer(0.0)
    consumed = 0
    next_frame = buffer_size

    for chunk in chunks:
        chunk = np.asarray(chunk, dtype=np.float32).ravel()
        start = 0
        while start < chunk.size:
            take = min(chunk.size - start, next_frame - consumed)
            window.extend(chunk[start : start + take])
            consumed += take
            start += take
            if consumed == next_frame:
                yield pipeline.process_frame(
                    window.snapshot(), sample_rate, now=consumed / sample_rate
                )
                next_frame += hop


class TunerService:
    """Feeds live or streamed audio through a TunerPipeline at a fixed frame rate."""

    def __init__(
        self,
        audio_provider: IAudioProvider,
        pipeline: TunerPipeline,
        buffer_size: int = 2048,
        frame_rate: float = 60.0,
    ) -> None:
        if frame_rate <= 0:
            raise ValueError(f"Frame rate must be positive, got {frame_rate}")
        self._audio_provider = audio_provider
        self.pipeline = pipeline
        self.window = SampleWindow(buffer_size)
        self._frame_interval = 1.0 / frame_rate
        self._stop_event = threading.Event()
        self.frames_processed = 0

    def start(self) -> None:
        """Start the audio provider; samples accumulate in the window."""
        self._stop_event.clear()
        self.window.clear()
        self._audio_provider.start(self.window.extend)

    def stop(self) -> None:
        """Stop frame delivery. Safe to call from another thread."""
        self._stop_event.set()
        self._audio_provider.stop()

    def tick(self) -> Optional[FrameResult]:
        """Process the current window, if enough audio has arrived."""
        if not self.window.is_full:
            return None
        result = self.pipeline.process_frame(
            self.window.snapshot(), self._audio_provider.sample_rate
        )
        self.frames_processed += 1
        return result

    def run(self, duration: Optional[float] = None) -> None:
        """Process frames until ``duration`` seconds pass or stop() is called."""
        self.start()
        deadline = None if duration is None else time.monotonic() + duration
        try:
            while not self._stop_event.is_set():
                if deadline is not None and time.monotonic() >= deadline:
                    break
                self.tick()
                self._stop_event.wait(self._frame_interval)
        finally:
            self.stop()
        logger.info(f"Tuner stopped after {self.frames_processed} frames")
