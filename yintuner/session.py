"""
Session controller: the per-frame contract between the capture loop and
the pitch core.

    frame -> [gate] -> [YIN] -> [note name + nearest string] -> TuningReading

Everything here is immutable or stateless. A DetectionConfig and a Tuning
are built once when the tuner starts; every call to process_frame() is
independent of the ones before it, so the same frame always gives the same
reading and calls can run from any thread.
"""

import logging
import math
import numbers
from dataclasses import dataclass

import numpy as np

from yintuner import config as defaults
from yintuner.errors import ConfigError, FrameError
from yintuner.gate import is_loud_enough
from yintuner.notes import frequency_to_note, midi_to_frequency
from yintuner.pitch import estimate_pitch, lag_bounds
from yintuner.tuning import TuningTarget, get_tuning, nearest_target

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectionConfig:
    """
    Fixed analysis settings shared by the gate and the estimator.

    Build it with construct_config() so the invariants get checked:
        0 < yin_threshold < 1
        min_freq_hz < max_freq_hz
        sample_rate / min_freq_hz <= frame_size / 2
    """

    frame_size: int
    sample_rate: float
    min_freq_hz: float
    max_freq_hz: float
    yin_threshold: float
    silence_rms_gate: float

    @property
    def frame_duration(self):
        """Seconds of audio in one frame (frame_size / sample_rate)."""
        return self.frame_size / self.sample_rate


@dataclass(frozen=True)
class TuningReading:
    """What the tuner heard in one frame, ready to render."""

    frequency_hz: float
    note_name: str
    nearest_target: TuningTarget
    cents_deviation: float
    midi_number: int

    @property
    def in_tune(self):
        """True when within IN_TUNE_CENTS of the target string."""
        return abs(self.cents_deviation) <= defaults.IN_TUNE_CENTS

    @property
    def needle_position(self):
        """
        Needle position for a meter, 0.0 (flat) .. 0.5 (centred) .. 1.0 (sharp).

        Cents are clamped to +/-NEEDLE_RANGE_CENTS first.
        """
        span = defaults.NEEDLE_RANGE_CENTS
        clamped = max(-span, min(span, self.cents_deviation))
        return (clamped + span) / (2 * span)

    @property
    def note_frequency_hz(self):
        """Equal-tempered pitch of note_name, e.g. 110.0 for A2."""
        return midi_to_frequency(self.midi_number)

    @property
    def direction(self):
        if self.in_tune:
            return "in tune"
        return "sharp" if self.cents_deviation > 0 else "flat"


def _positive(name, value):
    if not (isinstance(value, numbers.Real) and math.isfinite(value) and value > 0):
        raise ConfigError(f"{name} must be a finite number > 0, got {value!r}")


def construct_config(
    frame_size=defaults.FRAME_SIZE,
    sample_rate=defaults.SAMPLE_RATE,
    min_freq_hz=defaults.MIN_FREQ,
    max_freq_hz=defaults.MAX_FREQ,
    yin_threshold=defaults.YIN_THRESHOLD,
    silence_rms_gate=defaults.SILENCE_RMS_GATE,
):
    """
    Build a validated DetectionConfig. Defaults come from yintuner.config.

    Raises:
        ConfigError: On any non-positive value, a threshold outside (0, 1),
                     min_freq_hz >= max_freq_hz, or a frame too short to hold
                     two periods of min_freq_hz.
    """
    if isinstance(frame_size, bool) or not isinstance(frame_size, (int, np.integer)) or frame_size <= 0:
        raise ConfigError(f"frame_size must be a positive integer, got {frame_size!r}")
    _positive("sample_rate", sample_rate)
    _positive("min_freq_hz", min_freq_hz)
    _positive("max_freq_hz", max_freq_hz)
    _positive("silence_rms_gate", silence_rms_gate)
    _positive("yin_threshold", yin_threshold)

    if yin_threshold >= 1:
        raise ConfigError(f"yin_threshold must be < 1, got {yin_threshold}")
    if min_freq_hz >= max_freq_hz:
        raise ConfigError(f"min_freq_hz ({min_freq_hz}) must be below max_freq_hz ({max_freq_hz})")
    if sample_rate / min_freq_hz > frame_size / 2:
        raise ConfigError(
            f"frame_size {frame_size} is too short for {min_freq_hz} Hz at {sample_rate} Hz; "
            f"need at least {math.ceil(2 * sample_rate / min_freq_hz)} samples"
        )
    if lag_bounds(frame_size, sample_rate, min_freq_hz, max_freq_hz) is None:
        raise ConfigError(f"No lag fits between {min_freq_hz} Hz and {max_freq_hz} Hz at {sample_rate} Hz")

    cfg = DetectionConfig(
        frame_size=int(frame_size),
        sample_rate=sample_rate,
        min_freq_hz=min_freq_hz,
        max_freq_hz=max_freq_hz,
        yin_threshold=yin_threshold,
        silence_rms_gate=silence_rms_gate,
    )
    logger.debug("Detection config: %s", cfg)
    return cfg


def default_config():
    """DetectionConfig built from the constants in yintuner.config."""
    return construct_config()


def _check_frame(config, frame, sample_rate):
    if sample_rate is not None and sample_rate != config.sample_rate:
        raise FrameError(f"Frame sample rate {sample_rate} Hz doesn't match configured {config.sample_rate} Hz")

    try:
        # No copy for float64 arrays; the caller's buffer is only read
        x = np.asarray(frame, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise FrameError(f"Frame is not a sequence of numbers: {e}") from e

    if x.ndim != 1:
        raise FrameError(f"Frame must be 1D, got shape {x.shape}")
    if len(x) != config.frame_size:
        raise FrameError(f"Frame has {len(x)} samples, expected {config.frame_size}")
    if not np.all(np.isfinite(x)):
        raise FrameError("Frame contains NaN or infinite samples")
    return x


def process_frame(config, tuning, frame, sample_rate=None):
    """
    Run one frame through the tuner.

    Args:
        config: DetectionConfig
        tuning: Tuning to match against
        frame: 1D sequence of config.frame_size samples in [-1, 1]
        sample_rate: Sample rate the frame was captured at. Optional; if
                     given it must equal config.sample_rate.

    Returns:
        TuningReading, or None when the frame is too quiet or no pitch
        was found. None is the normal "nothing to show" answer.

    Raises:
        FrameError: Wrong length/shape/sample rate, or non-finite samples.
    """
    x = _check_frame(config, frame, sample_rate)

    if not is_loud_enough(x, config.silence_rms_gate):
        logger.debug("Frame below RMS gate %.4f", config.silence_rms_gate)
        return None

    freq = estimate_pitch(x, config.sample_rate, config.min_freq_hz, config.max_freq_hz, config.yin_threshold)
    if freq is None:
        return None

    match = nearest_target(freq, tuning)
    if match is None:
        return None
    target, cents = match
    note_name, midi = frequency_to_note(freq)

    return TuningReading(
        frequency_hz=freq,
        note_name=note_name,
        nearest_target=target,
        cents_deviation=cents,
        midi_number=midi,
    )


class TunerSession:
    """
    One config + one tuning, for the lifetime of a tuning session.

    Holds no per-frame state: process_frame() is a plain pipeline call.
    """

    def __init__(self, config=None, tuning=None):
        self.config = config if config is not None else default_config()
        self.tuning = tuning if tuning is not None else get_tuning("Standard")

    def process_frame(self, frame, sample_rate=None):
        return process_frame(self.config, self.tuning, frame, sample_rate)
