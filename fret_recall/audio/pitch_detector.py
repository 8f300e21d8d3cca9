"""Autocorrelation pitch detection for raw PCM audio."""

from __future__ import annotations

import math
import numbers
from typing import ClassVar, Optional, Union

import numpy as np

from ..exceptions import InvalidAudioBufferError, InvalidConfigurationError
from ..logger import get_logger
from ..note_types import DetectedPitch

logger = get_logger(__name__)

AudioBuffer = Union[bytes, bytearray, memoryview]

# 16-bit signed little-endian PCM
PCM_DTYPE = np.dtype("<i2")
PCM_SCALE = 32768.0


def _is_real(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)


def decode_pcm16(buffer: AudioBuffer) -> np.ndarray:
    """Convert 16-bit signed mono PCM bytes to float samples in [-1, 1].

    A trailing odd byte is ignored.
    """
    usable = len(buffer) - (len(buffer) % PCM_DTYPE.itemsize)
    samples = np.frombuffer(buffer, dtype=PCM_DTYPE, count=usable // PCM_DTYPE.itemsize)
    return samples.astype(np.float64) / PCM_SCALE


def encode_pcm16(samples: np.ndarray) -> bytes:
    """Convert float samples in [-1, 1] to 16-bit signed mono PCM bytes."""
    scaled = np.clip(np.asarray(samples, dtype=np.float64) * PCM_SCALE, -PCM_SCALE, PCM_SCALE - 1)
    return np.round(scaled).astype(PCM_DTYPE).tobytes()


class PitchDetector:
    """Estimates the fundamental frequency of one buffer of audio.

    Every call is a pure function of the buffer: nothing is carried between
    buffers, so a single detector can be shared between threads. Silence,
    noise, weak periodicity and out-of-range results all return None; only a
    missing buffer or an invalid sample rate raises.
    """

    # Lowest note on an 8-string guitar is ~24Hz, highest fretted note ~1320Hz
    MIN_FREQUENCY: ClassVar[float] = 20.0
    MAX_FREQUENCY: ClassVar[float] = 1400.0
    # Minimum normalised autocorrelation peak to accept a pitch
    MIN_CONFIDENCE: ClassVar[float] = 0.8
    # RMS amplitude below this is considered silence
    NOISE_GATE_THRESHOLD: ClassVar[float] = 0.01
    # Fewer samples than this cannot give a reliable period estimate
    MIN_SAMPLES: ClassVar[int] = 256

    def __init__(
        self,
        min_frequency: float = MIN_FREQUENCY,
        max_frequency: float = MAX_FREQUENCY,
        min_confidence: float = MIN_CONFIDENCE,
        noise_gate: float = NOISE_GATE_THRESHOLD,
        min_samples: int = MIN_SAMPLES,
    ) -> None:
        """Initialize the PitchDetector.

        Args:
            min_frequency: Lowest frequency to report, in Hz
            max_frequency: Highest frequency to report, in Hz
            min_confidence: Minimum normalised correlation peak (0-1)
            noise_gate: Minimum RMS amplitude of the buffer
            min_samples: Minimum number of samples per buffer

        Raises:
            InvalidConfigurationError: If a setting has the wrong type or the
                bounds are inconsistent
        """
        settings = {
            "min_frequency": min_frequency,
            "max_frequency": max_frequency,
            "min_confidence": min_confidence,
            "noise_gate": noise_gate,
        }
        for name, value in settings.items():
            if not _is_real(value):
                raise InvalidConfigurationError(f"Invalid {name}: {value!r}")
        if not isinstance(min_samples, numbers.Integral) or isinstance(min_samples, bool):
            raise InvalidConfigurationError(f"Invalid minimum sample count: {min_samples!r}")

        if not 0 < min_frequency < max_frequency:
            raise InvalidConfigurationError(
                f"Invalid frequency bounds: {min_frequency}-{max_frequency}Hz"
            )
        if not 0 <= min_confidence <= 1:
            raise InvalidConfigurationError(f"Invalid confidence threshold: {min_confidence}")
        if noise_gate < 0:
            raise InvalidConfigurationError(f"Invalid noise gate: {noise_gate}")
        if min_samples < 3:
            raise InvalidConfigurationError(f"Invalid minimum sample count: {min_samples}")

        self._min_frequency = float(min_frequency)
        self._max_frequency = float(max_frequency)
        self._min_confidence = float(min_confidence)
        self._noise_gate = float(noise_gate)
        self._min_samples = int(min_samples)

    @property
    def min_frequency(self) -> float:
        return self._min_frequency

    @property
    def max_frequency(self) -> float:
        return self._max_frequency

    @property
    def min_confidence(self) -> float:
        return self._min_confidence

    @property
    def noise_gate(self) -> float:
        return self._noise_gate

    def detect(self, buffer: AudioBuffer, sample_rate: float) -> Optional[float]:
        """Detect the fundamental frequency of a PCM buffer.

        Args:
            buffer: Raw 16-bit signed little-endian mono PCM bytes
            sample_rate: Sample rate of the buffer in Hz

        Returns:
            The detected frequency in Hz, or None if no clear pitch is present

        Raises:
            InvalidAudioBufferError: If the buffer is missing or empty, or the
                sample rate is not a positive finite number
        """
        result = self.analyze(buffer, sample_rate)
        return result.frequency if result else None

    def analyze(self, buffer: AudioBuffer, sample_rate: float) -> Optional[DetectedPitch]:
        """Like :meth:`detect`, but also return the correlation peak that was accepted."""
        if buffer is None or len(buffer) == 0:
            raise InvalidAudioBufferError("Audio buffer is empty")
        if not _is_real(sample_rate) or sample_rate <= 0:
            raise InvalidAudioBufferError(f"Invalid sample rate: {sample_rate!r}")

        samples = decode_pcm16(buffer)
        if len(samples) < self._min_samples:
            logger.debug(f"Buffer too short: {len(samples)} < {self._min_samples} samples")
            return None

        rms = float(np.sqrt(np.mean(samples**2)))
        if rms < self._noise_gate:
            logger.debug(f"Signal below noise gate: RMS {rms:.4f} < {self._noise_gate}")
            return None

        # Apply a window function to reduce spectral leakage
        samples *= np.hanning(len(samples))

        return self._autocorrelation_pitch(samples, float(sample_rate))

    def _autocorrelation_pitch(
        self, samples: np.ndarray, sample_rate: float
    ) -> Optional[DetectedPitch]:
        n = len(samples)
        lag_min = int(sample_rate / self._max_frequency)
        lag_max = min(n // 2, int(sample_rate / self._min_frequency))
        if lag_min >= lag_max or lag_max <= 0:
            logger.debug(f"Empty lag range {lag_min}-{lag_max} for {n} samples")
            return None

        energy = float(np.dot(samples, samples))
        if energy == 0:
            return None

        acf = self._autocorrelation(samples, lag_max) / energy

        # argmax returns the first lag on ties
        best_lag = lag_min + int(np.argmax(acf[lag_min : lag_max + 1]))
        peak = float(acf[best_lag])
        if peak < self._min_confidence:
            logger.debug(f"Correlation peak too weak: {peak:.3f} at lag {best_lag}")
            return None

        refined_lag = float(best_lag)
        if lag_min < best_lag < lag_max:
            refined_lag += self._parabolic_offset(
                acf[best_lag - 1], acf[best_lag], acf[best_lag + 1]
            )

        frequency = sample_rate / refined_lag
        if not self._min_frequency <= frequency <= self._max_frequency:
            logger.debug(f"Frequency out of range: {frequency:.2f}Hz")
            return None

        logger.debug(f"Detected {frequency:.2f}Hz (lag {refined_lag:.2f}, peak {peak:.3f})")
        return DetectedPitch(frequency=frequency, confidence=peak)

    @staticmethod
    def _autocorrelation(samples: np.ndarray, max_lag: int) -> np.ndarray:
        """Linear (non-circular) autocorrelation for lags 0..max_lag via FFT."""
        n = len(samples)
        n_fft = 1 << (2 * n - 1).bit_length()
        spectrum = np.fft.rfft(samples, n=n_fft)
        acf = np.fft.irfft(spectrum * np.conj(spectrum), n=n_fft)
        return acf[: max_lag + 1]

    @staticmethod
    def _parabolic_offset(left: float, centre: float, right: float) -> float:
        """Sub-sample offset of a peak from three neighbouring values.

        Returns 0 when the parabola is degenerate or the vertex falls more
        than one sample away from the centre.
        """
        denominator = 2 * (2 * centre - left - right)
        if denominator == 0:
            return 0.0
        delta = (right - left) / denominator
        return float(delta) if abs(delta) < 1 else 0.0
