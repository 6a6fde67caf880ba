"""
Exceptions raised by the tuner core.

Both are caller-side contract violations, not runtime conditions:
  - ConfigError: a DetectionConfig or Tuning was built from bad values.
  - FrameError:  a frame handed to process_frame doesn't match the config.

"No pitch this frame" is NOT an error. The core returns None for that.
"""


class TunerError(ValueError):
    """Base class for every error raised by yintuner."""


class ConfigError(TunerError):
    """Invalid construction parameters for a config or tuning."""


class FrameError(TunerError):
    """Frame length, shape, sample rate or sample values don't fit the config."""
