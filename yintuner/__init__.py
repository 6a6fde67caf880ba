"""
yintuner: YIN-based pitch detection and guitar tuning core.

    from yintuner import TunerSession
    reading = TunerSession().process_frame(frame)
    if reading is not None:
        print(reading.note_name, reading.nearest_target.name, reading.cents_deviation)
"""

from yintuner.errors import ConfigError, FrameError, TunerError
from yintuner.gate import is_loud_enough, rms
from yintuner.notes import frequency_to_note, midi_to_frequency
from yintuner.pitch import estimate_pitch
from yintuner.session import (
    DetectionConfig,
    TunerSession,
    TuningReading,
    construct_config,
    default_config,
    process_frame,
)
from yintuner.tuning import Tuning, TuningTarget, cents_between, construct_tuning, get_tuning, nearest_target

__all__ = [
    "ConfigError",
    "DetectionConfig",
    "FrameError",
    "TunerError",
    "TunerSession",
    "Tuning",
    "TuningReading",
    "TuningTarget",
    "cents_between",
    "construct_config",
    "construct_tuning",
    "default_config",
    "estimate_pitch",
    "frequency_to_note",
    "get_tuning",
    "is_loud_enough",
    "midi_to_frequency",
    "nearest_target",
    "process_frame",
    "rms",
]
