import threading
import time
from typing import Callable, Iterator, Optional

import numpy as np
import soundfile as sf

from ..core.interfaces import IAudioProvider
from ..logger import get_logger

logger = get_logger(__name__)


def to_mono(data: np.ndarray) -> np.ndarray:
    """Average a (frames, channels) block down to a 1-D float32 array."""
    data = np.asarray(data, dtype=np.float32)
    if data.ndim > 1:
        data = data.mean(axis=1)
    return data


def open_input_stream(**kwargs):
    """Open a sounddevice input stream.

    sounddevice loads PortAudio on import, so it is only imported when live
    input is actually requested.
    """
    import sounddevice as sd

    return sd.InputStream(**kwargs)


class LiveAudioProvider(IAudioProvider):
    """Provides live audio from an input device using sounddevice."""

    def __init__(
        self,
        sample_rate: int,
        chunk_size: int,
        channels: int = 1,
        device_id: Optional[int] = None,
    ):
        self._device_id = device_id
        self._sample_rate = sample_rate
        self._channels = channels
        self._chunk_size = chunk_size
        self._stream = None
        self._on_data_callback: Optional[Callable[[np.ndarray], None]] = None

    def start(self, on_data_callback: Callable[[np.ndarray], None]) -> None:
        self._on_data_callback = on_data_callback
        self._stream = open_input_stream(
            device=self._device_id,
            channels=self._channels,
            samplerate=self._sample_rate,
            blocksize=self._chunk_size,
            callback=self._audio_callback,
            dtype="float32",
        )
        self._stream.start()
        logger.info(
            f"Listening: sample_rate={self._sample_rate}, chunk_size={self._chunk_size}"
        )

    def stop(self) -> None:
        if self._stream:
            self._stream.stop()
            self._stream.close()
            self._stream = None

    @property
    def is_running(self) -> bool:
        return self._stream is not None

    def _audio_callback(
        self, indata: np.ndarray, _frames: int, _time_info, status
    ) -> None:
        if status:
            logger.warning(f"Audio stream status: {status}")
        if self._on_data_callback:
            try:
                self._on_data_callback(to_mono(indata.copy()))
            except Exception as e:
                # Raising here would kill the PortAudio callback thread
                logger.error(f"Error handling audio block: {e}", exc_info=True)

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._channels


class WavFileAudioProvider(IAudioProvider):
    """Provides audio data by reading from a WAV file."""

    def __init__(
        self,
        file_path: str,
        chunk_size: int,
        loop: bool = False,
        gain: float = 1.0,
        realtime: bool = True,
    ):
        self._file_path = file_path
        self._chunk_size = chunk_size
        self._loop = loop
        self._gain = gain
        self._realtime = realtime
        self._on_data_callback: Optional[Callable[[np.ndarray], None]] = None
        self._is_running = False
        self._thread: Optional[threading.Thread] = None

        with sf.SoundFile(self._file_path) as f:
            self._sample_rate = f.samplerate
            self._channels = f.channels

    def start(self, on_data_callback: Callable[[np.ndarray], None]) -> None:
        if self._is_running:
            return

        self._on_data_callback = on_data_callback
        self._is_running = True
        self._thread = threading.Thread(target=self._stream_data, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._is_running = False
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None

    @property
    def is_running(self) -> bool:
        """Returns True if the provider is currently streaming data."""
        return self._is_running

    def chunks(self) -> Iterator[np.ndarray]:
        """Yield the file as mono chunks, once, without real-time pacing."""
        with sf.SoundFile(self._file_path) as f:
            while True:
                data = f.read(self._chunk_size, dtype="float32", always_2d=True)
                if len(data) == 0:
                    break
                if self._gain != 1.0:
                    data *= self._gain
                yield to_mono(data)

    def _stream_data(self) -> None:
        try:
            while self._is_running:
                for chunk in self.chunks():
                    if not self._is_running:
                        break
                    if self._on_data_callback:
                        self._on_data_callback(chunk)
                    # Simulate real-time playback speed
                    if self._realtime:
                        time.sleep(len(chunk) / self.sample_rate)

                if not self._loop:
                    break
        except (OSError, RuntimeError) as e:
            logger.error(f"Error streaming WAV file {self._file_path}: {e}")
        finally:
            self._is_running = False

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._channels
