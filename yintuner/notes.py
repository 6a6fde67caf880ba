"""
Note mapping in 12-tone equal temperament, referenced to A4 = 440 Hz.

This is for display only ("you're playing a G#3"). Which string you're
tuning is decided separately against the active tuning, see tuning.py.
"""

import math

A4_FREQ = 440.0
A4_MIDI = 69

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")


def frequency_to_note(freq_hz):
    """
    Map a frequency to the nearest equal-tempered note.

    midi = round(69 + 12 * log2(freq / 440))

    Args:
        freq_hz: Frequency in Hz. Must be finite and > 0.

    Returns:
        (note_name, midi_number), e.g. ("A4", 69)

    Raises:
        ValueError: If freq_hz is non-positive or non-finite.
    """
    if not math.isfinite(freq_hz) or freq_hz <= 0:
        raise ValueError(f"Frequency must be finite and > 0, got {freq_hz}")

    # Halves round up (floor(x + 0.5)), not to even
    midi = math.floor(A4_MIDI + 12 * math.log2(freq_hz / A4_FREQ) + 0.5)
    # Python's % and // already floor toward -inf, so negative MIDI numbers
    # still land on the right name and octave.
    name = NOTE_NAMES[midi % 12]
    octave = midi // 12 - 1
    return f"{name}{octave}", midi


def midi_to_frequency(midi):
    """Equal-tempered frequency of a MIDI note number (69 -> 440.0)."""
    return A4_FREQ * 2 ** ((midi - A4_MIDI) / 12)
