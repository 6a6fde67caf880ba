# Tuning profiles: dict of { display_label: frequency_hz } per string (low to high)
TUNINGS = {
    "Standard": {
        "E2": 82.41,
        "A2": 110.00,
        "D3": 146.83,
        "G3": 196.00,
        "B3": 246.94,
        "E4": 329.63,
    },
    "Drop D": {
        "D2": 73.42,
        "A2": 110.00,
        "D3": 146.83,
        "G3": 196.00,
        "B3": 246.94,
        "E4": 329.63,
    },
    "Seasons (Chris Cornell)": {
        "F2(6)": 87.31,
        "F2(5)": 87.31,
        "C3(4)": 130.81,
        "C3(3)": 130.81,
        "C3(2)": 130.81,
        "F3(1)": 174.61,
    },
}

# Default tuning
STANDARD_TUNING = TUNINGS["Standard"]

# Audio settings
# 44.1kHz is what most sound cards hand out without resampling
SAMPLE_RATE = 44100

# Frame size for analysis (~93ms window at 44.1kHz).
# YIN needs at least two periods of the lowest note inside one frame,
# so this must satisfy SAMPLE_RATE / MIN_FREQ <= FRAME_SIZE / 2.
FRAME_SIZE = 4096

# Pitch search range: a little below low E (82 Hz) and above high E (330 Hz)
MIN_FREQ = 70.0
MAX_FREQ = 400.0

# YIN absolute threshold. 0.10-0.20 works for a single plucked string;
# lower = stricter (fewer but more confident readings)
YIN_THRESHOLD = 0.15

# Frames quieter than this RMS are treated as silence and never analysed
SILENCE_RMS_GATE = 0.01

# Display settings
IN_TUNE_CENTS = 5.0        # |cents| at or below this counts as "in tune"
NEEDLE_RANGE_CENTS = 50.0  # needle spans -50..+50 cents (half a semitone each way)
