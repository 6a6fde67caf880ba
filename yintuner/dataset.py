"""
Synthetic test signals for exercising the tuner without a microphone.

WHY SYNTHETIC DATA?
A tone we generate ourselves has a known fundamental, so we can check the
detector against ground truth exactly. We simulate guitar-like sounds by
combining:
  1. A fundamental frequency (the note's pitch)
  2. Harmonics (integer multiples of the fundamental, which give a real
     string its timbre and which trip up naive peak-picking detectors)
  3. Random noise (simulates real-world recording conditions)
"""

import numpy as np

from yintuner.config import FRAME_SIZE, SAMPLE_RATE


def generate_sine(f0, n_samples=FRAME_SIZE, sr=SAMPLE_RATE, amplitude=0.5, phase=0.0):
    """
    A pure sine wave: exactly one frame of a single frequency.

    Returns:
        numpy array of n_samples float64 samples
    """
    t = np.arange(n_samples) / sr
    return amplitude * np.sin(2 * np.pi * f0 * t + phase)


def generate_harmonic_tone(f0, n_samples=FRAME_SIZE, sr=SAMPLE_RATE, n_harmonics=5, noise_level=0.01, seed=None):
    """
    Generate a frame that mimics a plucked string.

    Args:
        f0: Fundamental frequency in Hz (the "pitch" we hear)
        n_samples: Length in samples (one analysis frame by default)
        sr: Sample rate
        n_harmonics: Number of partials including the fundamental.
                     Real guitar strings produce 5-15+ harmonics.
        noise_level: Standard deviation of added gaussian noise
                     (0 = clean)
        seed: Seed for the noise, so tests get the same frame every run

    Returns:
        numpy array of audio samples (float32)
    """
    t = np.arange(n_samples) / sr
    signal = np.zeros(n_samples)

    # A string vibrating at 110 Hz (A2) also produces energy at 220 Hz,
    # 330 Hz, 440 Hz, etc. Each harmonic is quieter than the last.
    for h in range(1, n_harmonics + 1):
        amplitude = 1.0 / h  # 1, 1/2, 1/3, ...
        signal += amplitude * np.sin(2 * np.pi * f0 * h * t)

    # Normalize to [-1, 1] range (standard for audio), leaving headroom for noise
    signal = 0.8 * signal / np.max(np.abs(signal))

    if noise_level > 0:
        rng = np.random.default_rng(seed)
        signal += noise_level * rng.standard_normal(n_samples)

    return signal.astype(np.float32)


def generate_silence(n_samples=FRAME_SIZE):
    """An all-zero frame."""
    return np.zeros(n_samples)
