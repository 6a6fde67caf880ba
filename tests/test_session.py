"""
Tests for yintuner/session.py: config validation and the per-frame pipeline.

Validates:
    - construct_config rejects every invalid combination
    - process_frame returns None for silence / no pitch, a TuningReading otherwise
    - FrameError on caller-side contract violations
    - Purity: same frame, same answer; caller buffers are never written
"""

import math
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from yintuner.dataset import generate_harmonic_tone, generate_silence, generate_sine
from yintuner.errors import ConfigError, FrameError
from yintuner.session import (
    DetectionConfig,
    TunerSession,
    TuningReading,
    construct_config,
    default_config,
    process_frame,
)
from yintuner.tuning import TuningTarget, get_tuning

# ---------------------------------------------------------------------------
# DetectionConfig
# ---------------------------------------------------------------------------


class TestConstructConfig:
    def test_valid(self, config):
        """Guitar defaults build fine."""
        assert isinstance(config, DetectionConfig)
        assert config.frame_size == 4096
        assert config.sample_rate == 44100

    def test_default_config(self):
        """default_config() uses the module constants."""
        cfg = default_config()
        assert cfg.frame_size == 4096
        assert cfg.min_freq_hz == 70.0
        assert cfg.max_freq_hz == 400.0
        assert cfg.yin_threshold == 0.15

    def test_min_equal_max(self):
        """min_freq_hz == max_freq_hz is rejected."""
        with pytest.raises(ConfigError):
            construct_config(min_freq_hz=200.0, max_freq_hz=200.0)

    def test_min_above_max(self):
        """min_freq_hz > max_freq_hz is rejected."""
        with pytest.raises(ConfigError):
            construct_config(min_freq_hz=400.0, max_freq_hz=70.0)

    def test_frame_too_short_for_min_freq(self):
        """sample_rate / min_freq must fit in half a frame."""
        with pytest.raises(ConfigError):
            construct_config(frame_size=1024, sample_rate=44100, min_freq_hz=70.0)

    def test_frame_exactly_two_periods(self):
        """sample_rate / min_freq == frame_size / 2 is allowed."""
        cfg = construct_config(frame_size=1000, sample_rate=50000, min_freq_hz=100.0, max_freq_hz=400.0)
        assert cfg.frame_size == 1000

    @pytest.mark.parametrize("threshold", [0.0, -0.1, 1.0, 1.5, math.nan])
    def test_bad_threshold(self, threshold):
        """YIN threshold must lie strictly inside (0, 1)."""
        with pytest.raises(ConfigError):
            construct_config(yin_threshold=threshold)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"sample_rate": 0},
            {"sample_rate": -44100},
            {"min_freq_hz": 0.0},
            {"max_freq_hz": -1.0},
            {"silence_rms_gate": 0.0},
            {"silence_rms_gate": math.inf},
            {"frame_size": 0},
            {"frame_size": 4096.0},
            {"frame_size": True},
        ],
    )
    def test_bad_values(self, kwargs):
        """Non-positive, non-finite or mistyped values are rejected."""
        with pytest.raises(ConfigError):
            construct_config(**kwargs)

    def test_empty_lag_range(self):
        """A range too narrow to hold two distinct lags is rejected."""
        with pytest.raises(ConfigError):
            construct_config(frame_size=64, sample_rate=100, min_freq_hz=40.0, max_freq_hz=45.0)

    def test_frame_duration(self, config):
        """4096 samples at 44.1 kHz last about 93 ms."""
        assert config.frame_duration == pytest.approx(4096 / 44100)

    def test_frame_duration_other_rate(self):
        """Duration follows the configured sample rate."""
        cfg = construct_config(frame_size=1000, sample_rate=50000, min_freq_hz=100.0, max_freq_hz=400.0)
        assert cfg.frame_duration == pytest.approx(0.02)

    def test_config_is_frozen(self, config):
        """DetectionConfig is immutable."""
        with pytest.raises((TypeError, AttributeError)):
            config.frame_size = 2048  # type: ignore[misc]


# ---------------------------------------------------------------------------
# process_frame
# ---------------------------------------------------------------------------


class TestProcessFrame:
    def test_silence_gives_no_reading(self, config, standard):
        """All-zero frame is gated out."""
        assert process_frame(config, standard, generate_silence(4096)) is None

    def test_quiet_tone_gives_no_reading(self, config, standard):
        """A tone under the RMS gate is treated as silence."""
        frame = generate_sine(110.0, amplitude=0.005)
        assert process_frame(config, standard, frame) is None

    def test_noise_gives_no_reading(self, config, standard):
        """Loud but aperiodic input finds no pitch."""
        noise = np.random.default_rng(1).standard_normal(4096) * 0.3
        assert process_frame(config, standard, noise) is None

    def test_a2_reading(self, config, standard):
        """A 110 Hz sine reads as A2 on target."""
        reading = process_frame(config, standard, generate_sine(110.0), sample_rate=44100)
        assert isinstance(reading, TuningReading)
        assert reading.frequency_hz == pytest.approx(110.0, rel=0.01)
        assert reading.note_name == "A2"
        assert reading.midi_number == 45
        assert reading.nearest_target == TuningTarget(name="A2", frequency_hz=110.0)
        assert abs(reading.cents_deviation) < 5.0

    def test_sharp_a2_reading(self, config, standard):
        """113 Hz reads as sharp against A2."""
        reading = process_frame(config, standard, generate_harmonic_tone(113.0, seed=3))
        assert reading.nearest_target.name == "A2"
        assert reading.cents_deviation == pytest.approx(46.58, abs=15.0)
        assert reading.direction == "sharp"
        assert not reading.in_tune

    @pytest.mark.parametrize("name", ["E2", "A2", "D3", "G3", "B3", "E4"])
    def test_every_standard_string(self, config, standard, name):
        """Each open string's tone is matched to its own target."""
        target = next(t for t in standard if t.name == name)
        frame = generate_harmonic_tone(target.frequency_hz, seed=11)
        reading = process_frame(config, standard, frame)
        assert reading.nearest_target.name == name
        assert reading.note_name == name

    def test_drop_d(self, config):
        """Low D matches D2 in Drop D."""
        frame = generate_harmonic_tone(73.42, seed=5)
        reading = process_frame(config, get_tuning("Drop D"), frame)
        assert reading.nearest_target.name == "D2"

    def test_idempotent(self, config, standard):
        """Same frame twice gives identical readings."""
        frame = generate_harmonic_tone(196.0, seed=2)
        assert process_frame(config, standard, frame) == process_frame(config, standard, frame)

    def test_buffer_not_modified(self, config, standard):
        """Read-only caller buffers are accepted and left untouched."""
        frame = generate_sine(146.83)
        original = frame.copy()
        frame.flags.writeable = False
        process_frame(config, standard, frame)
        assert np.array_equal(frame, original)

    def test_list_frame(self, config, standard):
        """Plain Python lists are valid frames."""
        reading = process_frame(config, standard, generate_sine(246.94).tolist())
        assert reading.nearest_target.name == "B3"

    def test_concurrent_calls(self, config, standard):
        """Independent frames can be processed from several threads."""
        freqs = [82.41, 110.0, 146.83, 196.0, 246.94, 329.63]
        frames = [generate_sine(f) for f in freqs]
        with ThreadPoolExecutor(max_workers=3) as pool:
            readings = list(pool.map(lambda fr: process_frame(config, standard, fr), frames))
        assert [r.nearest_target.name for r in readings] == ["E2", "A2", "D3", "G3", "B3", "E4"]


class TestFrameErrors:
    def test_too_short(self, config, standard):
        """Short frames are not padded."""
        with pytest.raises(FrameError):
            process_frame(config, standard, generate_sine(110.0, n_samples=4095))

    def test_too_long(self, config, standard):
        """Long frames are not truncated."""
        with pytest.raises(FrameError):
            process_frame(config, standard, generate_sine(110.0, n_samples=8192))

    def test_two_dimensional(self, config, standard):
        """Stereo / 2D buffers are rejected."""
        with pytest.raises(FrameError):
            process_frame(config, standard, np.zeros((4096, 1)))

    def test_nan_sample(self, config, standard):
        """NaN samples are a caller error."""
        frame = generate_sine(110.0)
        frame[100] = np.nan
        with pytest.raises(FrameError):
            process_frame(config, standard, frame)

    def test_inf_sample(self, config, standard):
        """Infinite samples are a caller error, even in a quiet frame."""
        frame = generate_silence()
        frame[0] = np.inf
        with pytest.raises(FrameError):
            process_frame(config, standard, frame)

    def test_sample_rate_mismatch(self, config, standard):
        """Frames captured at another rate are rejected."""
        with pytest.raises(FrameError):
            process_frame(config, standard, generate_sine(110.0), sample_rate=48000)

    def test_non_numeric(self, config, standard):
        """Non-numeric frames raise FrameError."""
        with pytest.raises(FrameError):
            process_frame(config, standard, ["x"] * 4096)


# ---------------------------------------------------------------------------
# TuningReading display helpers
# ---------------------------------------------------------------------------


def _reading(cents):
    return TuningReading(
        frequency_hz=110.0,
        note_name="A2",
        nearest_target=TuningTarget(name="A2", frequency_hz=110.0),
        cents_deviation=cents,
        midi_number=45,
    )


class TestTuningReading:
    def test_in_tune_boundary(self):
        """|cents| <= 5 counts as in tune."""
        assert _reading(5.0).in_tune
        assert _reading(-5.0).in_tune
        assert not _reading(5.1).in_tune

    def test_direction(self):
        """Sign of cents picks sharp/flat."""
        assert _reading(0.0).direction == "in tune"
        assert _reading(20.0).direction == "sharp"
        assert _reading(-20.0).direction == "flat"

    def test_note_frequency(self):
        """Equal-tempered pitch of the detected note."""
        assert _reading(0.0).note_frequency_hz == pytest.approx(110.0)

    def test_needle_centre(self):
        """0 cents puts the needle in the middle."""
        assert _reading(0.0).needle_position == 0.5

    def test_needle_clamped(self):
        """Needle stops at the ends of +/-50 cents."""
        assert _reading(-80.0).needle_position == 0.0
        assert _reading(120.0).needle_position == 1.0
        assert _reading(25.0).needle_position == pytest.approx(0.75)


# ---------------------------------------------------------------------------
# TunerSession
# ---------------------------------------------------------------------------


class TestTunerSession:
    def test_defaults(self):
        """Session defaults to default_config() and the standard tuning."""
        session = TunerSession()
        assert session.config == default_config()
        assert session.tuning == get_tuning("Standard")

    def test_process_frame(self, config, standard):
        """Session forwards to the pipeline."""
        session = TunerSession(config=config, tuning=standard)
        reading = session.process_frame(generate_sine(329.63), 44100)
        assert reading.nearest_target.name == "E4"

    def test_silence(self):
        """Silence through a session is still just None."""
        assert TunerSession().process_frame(generate_silence()) is None
