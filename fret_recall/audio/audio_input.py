"""Live audio input for pitch detection."""

import math
import numbers
from typing import ClassVar, Optional, Union

import sounddevice as sd

from ..exceptions import AudioSourceError, InvalidConfigurationError
from ..logger import get_logger
from ..services.interfaces import AudioCallback, IAudioProvider

logger = get_logger(__name__)


class LiveAudioProvider(IAudioProvider):
    """Provides live 16-bit mono audio from an input device using sounddevice.

    The device is chosen by the caller; None uses the system default input.
    """

    # Audio configuration
    SAMPLE_RATE: ClassVar[float] = 44100.0  # Hz
    CHUNK_SIZE: ClassVar[int] = 4096  # Frames per buffer

    def __init__(
        self,
        device_id: Optional[Union[int, str]] = None,
        sample_rate: Optional[float] = None,
        chunk_size: Optional[int] = None,
    ):
        sample_rate = self.SAMPLE_RATE if sample_rate is None else sample_rate
        chunk_size = self.CHUNK_SIZE if chunk_size is None else chunk_size
        if (
            not isinstance(sample_rate, numbers.Real)
            or isinstance(sample_rate, bool)
            or not math.isfinite(sample_rate)
            or sample_rate <= 0
        ):
            raise InvalidConfigurationError(f"Invalid sample rate: {sample_rate!r}")
        if (
            not isinstance(chunk_size, numbers.Integral)
            or isinstance(chunk_size, bool)
            or chunk_size < 1
        ):
            raise InvalidConfigurationError(f"Invalid chunk size: {chunk_size!r}")
        # sounddevice accepts a device index or a substring of the device name
        if device_id is not None and (
            isinstance(device_id, bool) or not isinstance(device_id, (int, str))
        ):
            raise InvalidConfigurationError(f"Invalid device: {device_id!r}")

        self._device_id = device_id
        self._sample_rate = float(sample_rate)
        self._chunk_size = int(chunk_size)
        self._stream: Optional[sd.RawInputStream] = None
        self._on_data_callback: Optional[AudioCallback] = None

    def start(self, on_data_callback: AudioCallback) -> None:
        self._on_data_callback = on_data_callback
        try:
            self._stream = sd.RawInputStream(
                device=self._device_id,
                channels=1,
                samplerate=self._sample_rate,
                blocksize=self._chunk_size,
                callback=self._audio_callback,
                dtype="int16",
            )
            self._stream.start()
        except sd.PortAudioError as e:
            self._stream = None
            raise AudioSourceError(f"Cannot open input device {self._device_id}: {e}") from e
        logger.info(
            f"Live capture started: device={self._device_id}, rate={self._sample_rate}Hz, "
            f"chunk={self._chunk_size}"
        )

    def stop(self) -> None:
        if self._stream:
            self._stream.stop()
            self._stream.close()
            self._stream = None
            logger.info("Live capture stopped")

    def _audio_callback(self, indata, _frames: int, _time_info, status) -> None:
        """Callback for the PortAudio capture thread.

        This is called from a separate audio thread, so it only copies the
        bytes and hands them on without blocking.
        """
        if status:
            logger.warning(f"Audio callback status: {status}")
        if self._on_data_callback:
            self._on_data_callback(bytes(indata))

    @property
    def sample_rate(self) -> float:
        return self._sample_rate
