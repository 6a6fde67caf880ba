"""
Signal gate: a cheap loudness check run before pitch detection.

YIN costs O(n * tau_max) per frame, while RMS is a single O(n) pass.
Skipping quiet frames keeps the tuner from reporting random "notes"
picked out of room noise between plucks.
"""

import numpy as np


def rms(frame):
    """
    Root-mean-square amplitude of a frame: sqrt(mean(sample^2)).

    Returns 0.0 for an empty frame.
    """
    x = np.asarray(frame, dtype=np.float64)
    if x.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(x * x)))


def is_loud_enough(frame, threshold):
    """True when the frame's RMS is strictly above `threshold`."""
    return rms(frame) > threshold
