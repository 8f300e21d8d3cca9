"""Audio providers that replay recorded sound files."""

import math
import numbers
import threading
import time
from typing import Optional

import numpy as np
import soundfile as sf

from ..exceptions import AudioSourceError, InvalidConfigurationError
from ..logger import get_logger
from .interfaces import AudioCallback, IAudioProvider

logger = get_logger(__name__)


class WavFileAudioProvider(IAudioProvider):
    """Provides 16-bit mono audio chunks by reading from a sound file.

    Multi-channel files are reduced to their first channel.
    """

    def __init__(
        self,
        file_path: str,
        chunk_size: int = 4096,
        loop: bool = False,
        gain: float = 1.0,
        realtime: bool = True,
    ):
        if (
            not isinstance(chunk_size, numbers.Integral)
            or isinstance(chunk_size, bool)
            or chunk_size < 1
        ):
            raise InvalidConfigurationError(f"Invalid chunk size: {chunk_size!r}")
        if not isinstance(gain, numbers.Real) or isinstance(gain, bool) or not math.isfinite(gain):
            raise InvalidConfigurationError(f"Invalid gain: {gain!r}")

        self._file_path = file_path
        self._chunk_size = chunk_size
        self._loop = loop
        self._gain = gain
        self._realtime = realtime
        self._on_data_callback: Optional[AudioCallback] = None
        self._is_running = False
        self._thread: Optional[threading.Thread] = None
        self._finished = threading.Event()
        self._error: Optional[AudioSourceError] = None

        try:
            with sf.SoundFile(self._file_path) as f:
                self._sample_rate = float(f.samplerate)
                self._channels = f.channels
        except (RuntimeError, OSError) as e:
            raise AudioSourceError(f"Cannot open {self._file_path}: {e}") from e

    def start(self, on_data_callback: AudioCallback) -> None:
        if self._is_running:
            return

        self._on_data_callback = on_data_callback
        self._is_running = True
        self._error = None
        self._finished.clear()
        self._thread = threading.Thread(target=self._stream_data, name="WavFileAudioProvider")
        self._thread.start()

    def stop(self) -> None:
        self._is_running = False
        if self._thread:
            self._thread.join()
            self._thread = None

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the file has been fully streamed. Returns False on timeout.

        Raises:
            AudioSourceError: If reading the file failed part way through
        """
        finished = self._finished.wait(timeout)
        if finished and self._error is not None:
            raise self._error
        return finished

    @property
    def is_running(self) -> bool:
        """Returns True if the provider is currently streaming data."""
        return self._is_running

    def _to_pcm(self, data: np.ndarray) -> bytes:
        mono = data[:, 0]
        if self._gain != 1.0:
            mono = np.clip(mono.astype(np.float64) * self._gain, -32768, 32767).astype(np.int16)
        return mono.astype("<i2").tobytes()

    def _read_chunk(self, f: sf.SoundFile) -> np.ndarray:
        return f.read(self._chunk_size, dtype="int16", always_2d=True)

    def _stream_data(self) -> None:
        try:
            with sf.SoundFile(self._file_path) as f:
                while self._is_running:
                    data = self._read_chunk(f)
                    if len(data) == 0:
                        if self._loop:
                            f.seek(0)
                            continue
                        break

                    if self._on_data_callback:
                        self._on_data_callback(self._to_pcm(data))

                    # Simulate real-time playback speed
                    if self._realtime:
                        time.sleep(len(data) / self._sample_rate)
        except (RuntimeError, OSError) as e:
            logger.error(f"Error streaming {self._file_path}: {e}")
            self._error = AudioSourceError(f"Error reading {self._file_path}: {e}")
            self._error.__cause__ = e
        finally:
            self._is_running = False  # Ensure flag is reset on exit
            self._finished.set()

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._channels
