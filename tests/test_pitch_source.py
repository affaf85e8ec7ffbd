import tempfile
import unittest
from pathlib import Path

import numpy as np
import pytest

from pitch_coach.audio.pitch_source import PitchGate, PitchSource
from pitch_coach.audio.rolling_input import RollingAudioInput
from pitch_coach.core.interfaces import IPitchEstimator
from pitch_coach.errors import AudioDeviceError
from pitch_coach.note_types import PitchEstimate


class FakeInput(RollingAudioInput):
    def __init__(self, frame_size=4, can_start=True):
        super().__init__(44100, frame_size)
        self.can_start = can_start

    def start(self):
        self._running = self.can_start
        return self.can_start

    def stop(self):
        self._running = False


class FixedEstimator(IPitchEstimator):
    def __init__(self, estimate):
        self.result = estimate
        self.frames = []

    def estimate(self, frame):
        self.frames.append(frame)
        return self.result


class TestPitchGate(unittest.TestCase):
    def test_accepts_confident_voice(self):
        self.assertTrue(PitchGate().accepts(PitchEstimate(440.0, 0.95)))

    def test_rejects_at_thresholds(self):
        gate = PitchGate()
        self.assertFalse(gate.accepts(PitchEstimate(440.0, 0.9)))
        self.assertFalse(gate.accepts(PitchEstimate(60.0, 0.99)))
        self.assertFalse(gate.accepts(PitchEstimate(1000.0, 0.99)))
        self.assertFalse(gate.accepts(PitchEstimate(None, 0.99)))

    def test_apply_keeps_clarity(self):
        gated = PitchGate().apply(PitchEstimate(1500.0, 0.97))
        self.assertIsNone(gated.frequency)
        self.assertEqual(gated.clarity, 0.97)

    def test_custom_thresholds(self):
        gate = PitchGate(min_clarity=0.5, min_frequency=50.0, max_frequency=2000.0)
        self.assertTrue(gate.accepts(PitchEstimate(1500.0, 0.6)))


class TestRollingInput(unittest.TestCase):
    def test_write_shifts_in_new_samples(self):
        audio = FakeInput(frame_size=4)
        audio._write(np.array([1.0, 2.0, 3.0]))
        audio._write(np.array([4.0, 5.0]))
        np.testing.assert_array_equal(audio.read_frame(), [2.0, 3.0, 4.0, 5.0])

    def test_long_chunk_keeps_tail(self):
        audio = FakeInput(frame_size=3)
        audio._write(np.arange(10, dtype=np.float32))
        np.testing.assert_array_equal(audio.read_frame(), [7.0, 8.0, 9.0])

    def test_stereo_is_mixed_down(self):
        audio = FakeInput(frame_size=2)
        audio._write(np.array([[1.0, 3.0], [2.0, 4.0]]))
        np.testing.assert_array_equal(audio.read_frame(), [2.0, 3.0])

    def test_read_frame_is_a_copy(self):
        audio = FakeInput(frame_size=2)
        frame = audio.read_frame()
        frame[:] = 9.0
        np.testing.assert_array_equal(audio.read_frame(), [0.0, 0.0])

    def test_invalid_frame_size(self):
        with self.assertRaises(ValueError):
            FakeInput(frame_size=0)


class TestPitchSource(unittest.TestCase):
    def test_read_before_start_is_silent(self):
        estimator = FixedEstimator(PitchEstimate(440.0, 0.99))
        source = PitchSource(FakeInput(), estimator=estimator)
        self.assertEqual(source.read(), PitchEstimate(None, 0.0))
        self.assertEqual(estimator.frames, [])

    def test_read_gates_estimates(self):
        source = PitchSource(FakeInput(), estimator=FixedEstimator(PitchEstimate(440.0, 0.99)))
        self.assertTrue(source.start())
        self.assertEqual(source.read(), PitchEstimate(440.0, 0.99))

        source = PitchSource(FakeInput(), estimator=FixedEstimator(PitchEstimate(440.0, 0.5)))
        source.start()
        self.assertEqual(source.read(), PitchEstimate(None, 0.5))

    def test_start_failure(self):
        source = PitchSource(
            FakeInput(can_start=False), estimator=FixedEstimator(PitchEstimate(None))
        )
        self.assertFalse(source.start())
        self.assertFalse(source.is_running())

    def test_stop(self):
        source = PitchSource(FakeInput(), estimator=FixedEstimator(PitchEstimate(None)))
        source.start()
        source.stop()
        self.assertFalse(source.is_running())

    def test_default_estimator_is_aubio(self):
        pytest.importorskip("aubio")
        from pitch_coach.audio.pitch_estimator import AubioPitchEstimator

        source = PitchSource(FakeInput())
        self.assertIsInstance(source.estimator, AubioPitchEstimator)


class TestAubioPitchEstimator(unittest.TestCase):
    def setUp(self):
        pytest.importorskip("aubio")
        from pitch_coach.audio.pitch_estimator import AubioPitchEstimator

        self.estimator = AubioPitchEstimator(sample_rate=44100, frame_size=2048)

    def sine(self, frequency, length=2048):
        t = np.arange(length) / 44100.0
        return (0.5 * np.sin(2 * np.pi * frequency * t)).astype(np.float32)

    def test_sine_wave(self):
        estimate = None
        # yin needs a couple of frames to settle
        for _ in range(3):
            estimate = self.estimator.estimate(self.sine(440.0))
        self.assertIsNotNone(estimate.frequency)
        self.assertAlmostEqual(estimate.frequency, 440.0, delta=3.0)

    def test_silence(self):
        estimate = self.estimator.estimate(np.zeros(2048, dtype=np.float32))
        self.assertIsNone(estimate.frequency)

    def test_short_frame_is_padded(self):
        estimate = self.estimator.estimate(self.sine(440.0, length=100))
        self.assertIsInstance(estimate, PitchEstimate)

    def test_unknown_method(self):
        from pitch_coach.audio.pitch_estimator import AubioPitchEstimator

        with self.assertRaises(ValueError):
            AubioPitchEstimator(method="guess")


class TestWavFileInput(unittest.TestCase):
    def test_missing_file(self):
        pytest.importorskip("soundfile")
        from pitch_coach.audio.wav_input import WavFileInput

        with self.assertRaises(AudioDeviceError):
            WavFileInput("/nonexistent/voice.wav")

    def test_reads_file_properties(self):
        sf = pytest.importorskip("soundfile")
        from pitch_coach.audio.wav_input import WavFileInput

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "tone.wav"
            sf.write(str(path), np.zeros((2205, 2), dtype=np.float32), 22050)
            audio = WavFileInput(str(path), frame_size=1024)
            self.assertEqual(audio.sample_rate, 22050)
            self.assertEqual(audio.channels, 2)
            self.assertEqual(audio.frame_size, 1024)
            self.assertFalse(audio.is_running())


if __name__ == "__main__":
    unittest.main()
