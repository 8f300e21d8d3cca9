"""Abstract seams between audio sources and pitch detection."""

from abc import ABC, abstractmethod
from typing import Callable, Optional

# Receives one chunk of 16-bit signed little-endian mono PCM
AudioCallback = Callable[[bytes], None]

# Receives a frequency in Hz, or None for a buffer without a clear pitch
PitchCallback = Callable[[Optional[float]], None]


class IAudioProvider(ABC):
    """A source of mono PCM chunks.

    ``start`` may deliver chunks from any thread, including synchronously
    before it returns. Callbacks must not block.
    """

    @abstractmethod
    def start(self, on_data_callback: AudioCallback) -> None:
        """Begin delivering chunks to ``on_data_callback``."""

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering chunks. Safe to call when not started."""

    @property
    @abstractmethod
    def sample_rate(self) -> float:
        """Samples per second of every chunk."""


class IPitchDetectionService(ABC):
    @abstractmethod
    def start(self, on_pitch: PitchCallback) -> None:
        """Start detecting; results go to ``on_pitch`` from a worker thread."""

    @abstractmethod
    def stop(self) -> None:
        """Stop the source and finish the buffers already accepted."""

    @abstractmethod
    def is_running(self) -> bool:
        """True between a successful ``start`` and ``stop``."""
