"""
Shared fixtures for the test suite.

Every fixture here is deterministic: synthetic tones are generated from
fixed frequencies and seeded noise, so a failing test fails every run.
"""

import pytest

from yintuner.session import construct_config
from yintuner.tuning import get_tuning

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SR = 44100
N = 4096


# ---------------------------------------------------------------------------
# Config / tuning
# ---------------------------------------------------------------------------


@pytest.fixture
def config():
    """Guitar-range detection config at 44.1 kHz / 4096 samples."""
    return construct_config(
        frame_size=N,
        sample_rate=SR,
        min_freq_hz=70.0,
        max_freq_hz=400.0,
        yin_threshold=0.15,
        silence_rms_gate=0.01,
    )


@pytest.fixture
def standard():
    """Built-in standard 6-string tuning."""
    return get_tuning("Standard")
