"""
Tuning targets and nearest-string matching.

A tuning is an ordered set of target frequencies, one per string, low to
high. Given a detected frequency we find the closest string and how many
cents sharp/flat it is:

    cents = 1200 * log2(detected / target)

100 cents = 1 semitone, 1200 cents = 1 octave. Positive = sharp (too high),
negative = flat (too low).
"""

import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass

from yintuner.config import TUNINGS
from yintuner.errors import ConfigError


@dataclass(frozen=True)
class TuningTarget:
    """One string of a tuning: a display label and its target pitch."""

    name: str
    frequency_hz: float


@dataclass(frozen=True)
class Tuning:
    """
    Ordered, non-empty sequence of TuningTargets.

    Build it with construct_tuning() so the frequencies get validated.
    Order matters: it's the tie-break order for nearest_target().
    """

    name: str
    targets: tuple

    def __iter__(self):
        return iter(self.targets)

    def __len__(self):
        return len(self.targets)

    def __getitem__(self, index):
        return self.targets[index]


def _coerce_target(item):
    if isinstance(item, TuningTarget):
        name, freq = item.name, item.frequency_hz
    elif isinstance(item, (str, bytes)):
        # A bare "E2" would otherwise unpack into ("E", "2")
        raise ConfigError(f"Expected a TuningTarget or (name, frequency_hz) pair, got {item!r}")
    else:
        try:
            name, freq = item
        except (TypeError, ValueError):
            raise ConfigError(f"Expected a TuningTarget or (name, frequency_hz) pair, got {item!r}") from None
    if isinstance(freq, bool) or not isinstance(freq, numbers.Real):
        raise ConfigError(f"Target {name!r} has non-numeric frequency {freq!r}")
    return TuningTarget(name=str(name), frequency_hz=float(freq))


def construct_tuning(targets, name="Custom"):
    """
    Build a validated Tuning.

    Args:
        targets: TuningTargets, (name, frequency_hz) pairs, or a
                 {name: frequency_hz} dict like the ones in config.TUNINGS.
                 Order is kept.
        name: Display name of the tuning

    Returns:
        Tuning

    Raises:
        ConfigError: If there are no targets, or any frequency is <= 0 or
                     not finite.
    """
    if isinstance(targets, Mapping):
        targets = targets.items()
    coerced = tuple(_coerce_target(t) for t in targets)

    if not coerced:
        raise ConfigError("A tuning needs at least one target")
    for target in coerced:
        if not math.isfinite(target.frequency_hz) or target.frequency_hz <= 0:
            raise ConfigError(
                f"Target {target.name!r} has invalid frequency {target.frequency_hz}; must be finite and > 0"
            )

    return Tuning(name=name, targets=coerced)


def get_tuning(name="Standard"):
    """Look up one of the built-in tunings from config.TUNINGS by name."""
    if name not in TUNINGS:
        raise ConfigError(f"Unknown tuning {name!r}; choose from {sorted(TUNINGS)}")
    return construct_tuning(TUNINGS[name], name=name)


def cents_between(freq_hz, reference_hz):
    """Signed interval from reference_hz to freq_hz in cents."""
    return 1200 * math.log2(freq_hz / reference_hz)


def nearest_target(freq_hz, tuning):
    """
    Given a detected frequency, find the closest string of the tuning and
    how many cents sharp/flat it is.

    Ties keep the earlier target: only a strictly smaller |cents| replaces
    the current best.

    Args:
        freq_hz: Detected frequency in Hz
        tuning: Tuning (or any ordered iterable of TuningTargets)

    Returns:
        (target, cents_deviation), or None if the tuning is empty or
        freq_hz is non-positive / non-finite.
    """
    if not math.isfinite(freq_hz) or freq_hz <= 0:
        return None

    best = None
    for target in tuning:
        cents = cents_between(freq_hz, target.frequency_hz)
        if best is None or abs(cents) < abs(best[1]):
            best = (target, cents)

    return best
