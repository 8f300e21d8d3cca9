import threading
import unittest

import numpy as np

from fret_recall.audio.pitch_detector import PitchDetector, encode_pcm16
from fret_recall.exceptions import AudioSourceError, InvalidConfigurationError
from fret_recall.services.interfaces import IAudioProvider
from fret_recall.services.pitch_detection_service import PitchDetectionService

SAMPLE_RATE = 44100.0


def sine_pcm(frequency, num_samples=4096, amplitude=0.5):
    t = np.arange(num_samples) / SAMPLE_RATE
    return encode_pcm16(amplitude * np.sin(2 * np.pi * frequency * t))


class FakeAudioProvider(IAudioProvider):
    """Delivers a fixed list of buffers synchronously when started."""

    def __init__(self, buffers=None):
        self._buffers = list(buffers or [])
        self.started = False
        self.stopped = False

    def start(self, on_data_callback):
        self.started = True
        for buffer in self._buffers:
            on_data_callback(buffer)

    def stop(self):
        self.stopped = True

    @property
    def sample_rate(self):
        return SAMPLE_RATE


class TestPitchDetectionService(unittest.TestCase):
    def test_reports_each_buffer_in_order(self):
        provider = FakeAudioProvider([sine_pcm(110.0), bytes(8192), sine_pcm(440.0)])
        service = PitchDetectionService(provider)
        results = []

        service.start(results.append)
        self.assertTrue(service.is_running())
        service.stop()

        self.assertTrue(provider.started)
        self.assertTrue(provider.stopped)
        self.assertFalse(service.is_running())
        self.assertEqual(len(results), 3)
        self.assertAlmostEqual(results[0], 110.0, delta=1.1)
        self.assertIsNone(results[1])
        self.assertAlmostEqual(results[2], 440.0, delta=4.4)
        self.assertEqual(service.processed_buffers, 3)
        self.assertEqual(service.dropped_buffers, 0)

    def test_full_queue_drops_oldest_buffer(self):
        provider = FakeAudioProvider()
        service = PitchDetectionService(provider, max_pending=2)
        service.submit(sine_pcm(110.0))
        service.submit(sine_pcm(220.0))
        service.submit(sine_pcm(330.0))
        self.assertEqual(service.dropped_buffers, 1)

        results = []
        service.start(results.append)
        service.stop()

        self.assertEqual(len(results), 2)
        self.assertAlmostEqual(results[0], 220.0, delta=2.2)
        self.assertAlmostEqual(results[1], 330.0, delta=3.3)

    def test_callback_errors_do_not_stop_the_worker(self):
        provider = FakeAudioProvider([sine_pcm(110.0), sine_pcm(220.0)])
        service = PitchDetectionService(provider)
        results = []

        def on_pitch(frequency):
            results.append(frequency)
            if len(results) == 1:
                raise RuntimeError("listener failed")

        service.start(on_pitch)
        service.stop()
        self.assertEqual(len(results), 2)

    def test_detector_errors_do_not_stop_the_worker(self):
        class FlakyDetector(PitchDetector):
            calls = 0

            def detect(self, buffer, sample_rate):
                FlakyDetector.calls += 1
                if FlakyDetector.calls == 1:
                    raise RuntimeError("detector failed")
                return super().detect(buffer, sample_rate)

        service = PitchDetectionService(FakeAudioProvider(), FlakyDetector())
        for frequency in (110.0, 220.0, 330.0):
            service.submit(sine_pcm(frequency))
        results = []
        service.start(results.append)
        service.stop()

        self.assertEqual(len(results), 2)
        self.assertAlmostEqual(results[0], 220.0, delta=2.2)
        self.assertEqual(service.failed_buffers, 1)
        self.assertEqual(service.processed_buffers, 2)

    def test_stop_returns_when_every_buffer_fails(self):
        class BrokenDetector(PitchDetector):
            def detect(self, buffer, sample_rate):
                raise RuntimeError("detector failed")

        buffers = [sine_pcm(110.0)] * 6
        service = PitchDetectionService(FakeAudioProvider(buffers), BrokenDetector(), max_pending=2)
        service.start(lambda _frequency: None)

        stopper = threading.Thread(target=service.stop)
        stopper.start()
        stopper.join(timeout=5.0)

        self.assertFalse(stopper.is_alive())
        self.assertFalse(service.is_running())
        self.assertEqual(service.failed_buffers + service.dropped_buffers, 6)

    def test_empty_buffers_are_skipped(self):
        provider = FakeAudioProvider([b"", sine_pcm(110.0)])
        service = PitchDetectionService(provider)
        results = []
        service.start(results.append)
        service.stop()
        self.assertEqual(len(results), 1)

    def test_callback_runs_off_the_capture_thread(self):
        provider = FakeAudioProvider([sine_pcm(110.0)])
        service = PitchDetectionService(provider)
        threads = []
        service.start(lambda _frequency: threads.append(threading.current_thread()))
        service.stop()
        self.assertEqual(len(threads), 1)
        self.assertIsNot(threads[0], threading.current_thread())

    def test_stop_without_start_is_a_no_op(self):
        provider = FakeAudioProvider()
        service = PitchDetectionService(provider)
        service.stop()
        self.assertFalse(provider.stopped)

    def test_provider_failure_leaves_service_stopped(self):
        class BrokenProvider(FakeAudioProvider):
            def start(self, on_data_callback):
                raise AudioSourceError("no input device")

        service = PitchDetectionService(BrokenProvider())
        with self.assertRaises(AudioSourceError):
            service.start(lambda _frequency: None)
        self.assertFalse(service.is_running())

    def test_invalid_queue_size(self):
        with self.assertRaises(InvalidConfigurationError):
            PitchDetectionService(FakeAudioProvider(), max_pending=0)


if __name__ == "__main__":
    unittest.main()
