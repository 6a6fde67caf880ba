"""
Pitch detection module: the YIN fundamental-frequency estimator.

HOW YIN WORKS (de Cheveigné & Kawahara, 2002):
  1. Difference function: slide the frame against a copy of itself and
     measure how different they are at each lag tau. A periodic signal
     lines up with itself when tau equals its period, so d[tau] dips.
  2. Cumulative mean normalization (CMNDF): divide each d[tau] by the
     running average of d up to tau. This removes the trivial dip at
     tau=0 and puts every lag on the same 0..~1 scale.
  3. Absolute threshold: the first lag whose CMNDF drops below the
     threshold is taken as the period. We then walk down to the bottom
     of that dip so we don't stop on its leading edge.
  4. Parabolic interpolation: fit a parabola through the dip and its two
     neighbours to get a sub-sample period.
  5. f0 = sample_rate / period.

"Not found" (None) is a normal answer: silence, noise, or a pitch outside
the search range. Nothing in here raises for those.
"""

import logging
import math

import numpy as np

logger = logging.getLogger(__name__)

# Below this the parabola is flat enough that its vertex is meaningless
_CURVATURE_EPSILON = 1e-12


def lag_bounds(n, sample_rate, min_freq, max_freq):
    """
    Search range of lags (in samples) for a frame of length n.

    The longest period we look for is the lowest frequency, capped at half
    the frame so at least two periods fit. The shortest is the highest
    frequency, never below 2 samples.

    Returns:
        (tau_min, tau_max), or None if the range is empty.
    """
    if not (sample_rate > 0 and min_freq > 0 and max_freq > 0):
        return None
    tau_max = min(n // 2, int(math.floor(sample_rate / min_freq)))
    tau_min = max(2, int(math.floor(sample_rate / max_freq)))
    if tau_min >= tau_max:
        return None
    return tau_min, tau_max


def difference_function(frame, tau_max):
    """
    YIN step 1: d[tau] = sum_i (x[i] - x[i + tau])^2 for tau in [1, tau_max].

    Returns:
        float64 array of length tau_max + 1 (d[0] is left at 0).
    """
    x = np.asarray(frame, dtype=np.float64)
    n = len(x)
    d = np.zeros(tau_max + 1)
    # One scratch buffer reused for every lag
    buf = np.empty(n)
    for tau in range(1, tau_max + 1):
        diff = buf[: n - tau]
        np.subtract(x[: n - tau], x[tau:], out=diff)
        d[tau] = np.dot(diff, diff)
    return d


def cumulative_mean_normalized_difference(d):
    """
    YIN step 2: cmndf[tau] = d[tau] * tau / sum(d[1..tau]), cmndf[0] = 1.

    Where the running sum is exactly zero (a perfectly flat signal) the
    value is pinned to 1 instead of dividing by zero.
    """
    d = np.asarray(d, dtype=np.float64)
    cmndf = np.ones(len(d))
    if len(d) < 2:
        return cmndf

    running = np.cumsum(d[1:])
    taus = np.arange(1, len(d))
    nonzero = running != 0
    cmndf[1:][nonzero] = d[1:][nonzero] * taus[nonzero] / running[nonzero]
    return cmndf


def absolute_threshold(cmndf, tau_min, tau_max, threshold):
    """
    YIN step 3: first lag in [tau_min, tau_max] with cmndf below threshold,
    then descend while the next lag is strictly smaller.

    Returns:
        Integer lag, or None if nothing crosses the threshold.
    """
    for tau in range(tau_min, tau_max + 1):
        if cmndf[tau] < threshold:
            while tau + 1 <= tau_max and cmndf[tau + 1] < cmndf[tau]:
                tau += 1
            return tau
    return None


def parabolic_interpolation(cmndf, tau):
    """
    YIN step 4: refine an integer lag to sub-sample precision.

    Neighbours are clamped to [1, len(cmndf) - 1]. If the three points are
    (numerically) collinear the integer lag is returned unchanged.
    """
    t0 = max(1, tau - 1)
    t2 = min(len(cmndf) - 1, tau + 1)
    s0, s1, s2 = cmndf[t0], cmndf[tau], cmndf[t2]

    a = (s0 + s2 - 2 * s1) / 2
    if abs(a) < _CURVATURE_EPSILON:
        return float(tau)

    b = (s2 - s0) / 2
    return tau - b / (2 * a)


def estimate_pitch(frame, sample_rate, min_freq, max_freq, threshold):
    """
    Estimate the fundamental frequency of a monophonic frame.

    Args:
        frame: 1D sequence of samples in [-1, 1]. Only read, never modified.
        sample_rate: Sample rate in Hz
        min_freq: Lowest frequency to search for (Hz)
        max_freq: Highest frequency to search for (Hz)
        threshold: YIN absolute threshold, 0 < threshold < 1

    Returns:
        Frequency in Hz, or None if no confident pitch was found.
    """
    bounds = lag_bounds(len(frame), sample_rate, min_freq, max_freq)
    if bounds is None:
        logger.debug("No valid lag range for n=%d sr=%s", len(frame), sample_rate)
        return None
    tau_min, tau_max = bounds

    d = difference_function(frame, tau_max)
    cmndf = cumulative_mean_normalized_difference(d)

    tau = absolute_threshold(cmndf, tau_min, tau_max, threshold)
    if tau is None:
        logger.debug("No lag in [%d, %d] crossed threshold %.3f", tau_min, tau_max, threshold)
        return None

    better_tau = parabolic_interpolation(cmndf, tau)
    if not math.isfinite(better_tau) or better_tau <= 0:
        return None

    return sample_rate / better_tau
