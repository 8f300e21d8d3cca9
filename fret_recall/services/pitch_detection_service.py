"""Pitch detection service that connects an audio provider to the detector.

The provider's capture thread only ever calls :meth:`PitchDetectionService.submit`,
which never blocks: buffers go into a bounded queue and, when the queue is
full, the oldest pending buffer is dropped. A single worker thread runs the
detector on each buffer and reports the result.
"""

import queue
import threading
from typing import ClassVar, Optional

from ..audio.pitch_detector import AudioBuffer, PitchDetector
from ..exceptions import InvalidConfigurationError
from ..logger import get_logger
from .interfaces import IAudioProvider, IPitchDetectionService, PitchCallback

logger = get_logger(__name__)

_STOP = object()


class PitchDetectionService(IPitchDetectionService):
    """A service that detects pitches from an audio stream."""

    DEFAULT_MAX_PENDING: ClassVar[int] = 8
    # Seconds between liveness checks while queueing the stop marker
    STOP_POLL_INTERVAL: ClassVar[float] = 0.1

    def __init__(
        self,
        audio_provider: IAudioProvider,
        detector: Optional[PitchDetector] = None,
        max_pending: int = DEFAULT_MAX_PENDING,
    ) -> None:
        """Initialize the pitch detection service.

        Args:
            audio_provider: Source of PCM buffers
            detector: Pitch detector, or None to create one with default settings
            max_pending: Maximum number of buffers waiting for detection
        """
        if not isinstance(max_pending, int) or isinstance(max_pending, bool) or max_pending < 1:
            raise InvalidConfigurationError(f"Invalid queue size: {max_pending!r}")

        self._audio_provider = audio_provider
        self._detector = detector or PitchDetector()
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=max_pending)
        self._on_pitch: Optional[PitchCallback] = None
        self._worker: Optional[threading.Thread] = None
        self._running = False
        self._dropped = 0
        self._processed = 0
        self._failed = 0
        self._lock = threading.Lock()

    @property
    def dropped_buffers(self) -> int:
        """Number of buffers discarded because the queue was full."""
        return self._dropped

    @property
    def processed_buffers(self) -> int:
        return self._processed

    @property
    def failed_buffers(self) -> int:
        """Number of buffers on which the detector raised."""
        return self._failed

    def submit(self, buffer: AudioBuffer) -> None:
        """Queue a buffer for detection, dropping the oldest one if the queue is full."""
        data = bytes(buffer)
        with self._lock:
            while True:
                try:
                    self._queue.put_nowait(data)
                    return
                except queue.Full:
                    try:
                        self._queue.get_nowait()
                    except queue.Empty:
                        continue
                    self._dropped += 1
                    logger.warning(f"Detection falling behind, dropped oldest buffer ({self._dropped} total)")

    def start(self, on_pitch: PitchCallback) -> None:
        """Start detection.

        Args:
            on_pitch: Called from the worker thread with the detected frequency
                in Hz, or None when a buffer holds no clear pitch
        """
        if self._running:
            logger.warning("Pitch detection already running")
            return

        self._on_pitch = on_pitch
        self._running = True
        self._worker = threading.Thread(target=self._run, name="PitchDetectionWorker", daemon=True)
        self._worker.start()
        try:
            self._audio_provider.start(self.submit)
        except Exception:
            self._queue.put(_STOP)
            self._worker.join()
            self._worker = None
            self._running = False
            raise
        logger.info(f"Pitch detection started at {self._audio_provider.sample_rate}Hz")

    def stop(self) -> None:
        """Stop the provider, finish the buffers already queued and stop the worker."""
        if not self._running:
            return

        self._audio_provider.stop()
        worker = self._worker
        # Queue the stop marker behind every pending buffer; a dead worker drains nothing
        while worker and worker.is_alive():
            try:
                self._queue.put(_STOP, timeout=self.STOP_POLL_INTERVAL)
                break
            except queue.Full:
                continue
        if worker:
            worker.join()
            self._worker = None
        self._running = False
        logger.info(
            f"Pitch detection stopped: {self._processed} buffers processed, "
            f"{self._failed} failed, {self._dropped} dropped"
        )

    def is_running(self) -> bool:
        return self._running

    def _run(self) -> None:
        sample_rate = self._audio_provider.sample_rate
        while True:
            item = self._queue.get()
            if item is _STOP:
                break
            if not item:
                continue

            try:
                frequency = self._detector.detect(item, sample_rate)
            except Exception as e:
                self._failed += 1
                logger.error(f"Pitch detection failed on buffer: {e}", exc_info=True)
                continue
            self._processed += 1

            if self._on_pitch:
                try:
                    self._on_pitch(frequency)
                except Exception as e:
                    logger.error(f"Error in pitch callback: {e}", exc_info=True)
