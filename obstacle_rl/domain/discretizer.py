"""Mapping of continuous observations onto finite state keys."""

import math
from typing import Sequence, Tuple

from .errors import ConfigurationError
from .types import Observation, FieldBins, StateKey, DEFAULT_BINS


def discretize_value(value: float, minimum: float, maximum: float, bins: int) -> int:
    """Return the bin index of `value` in `bins` equal-width buckets over [minimum, maximum].

    Values below the range land in bin 0 and values above it in the last bin.
    The upper bound itself belongs to the last bin, and NaN is treated as bin 0,
    so every input yields a valid index.
    """
    if bins <= 0:
        raise ConfigurationError(f"bin count must be positive, got {bins}")
    if maximum <= minimum:
        raise ConfigurationError(f"maximum must exceed minimum ({minimum} >= {maximum})")
    if math.isnan(value) or value < minimum:
        return 0
    if value >= maximum:
        return bins - 1
    return min(bins - 1, int(math.floor((value - minimum) / (maximum - minimum) * bins)))


class Discretizer:
    """Turns an Observation into a StateKey using a fixed per-field binning."""

    def __init__(self, field_bins: Sequence[FieldBins] = DEFAULT_BINS):
        self.field_bins: Tuple[FieldBins, ...] = tuple(field_bins)
        if not self.field_bins:
            raise ConfigurationError("at least one discretization field is required")
        labels = [b.label for b in self.field_bins]
        if len(set(labels)) != len(labels):
            raise ConfigurationError(f"bin labels must be unique, got {labels}")

    def bin_indices(self, observation: Observation) -> Tuple[int, ...]:
        """Bin index of every configured field, in configuration order."""
        return tuple(
            discretize_value(getattr(observation, b.field), b.minimum, b.maximum, b.bins)
            for b in self.field_bins
        )

    def discretize(self, observation: Observation) -> StateKey:
        # Labels are alphabetic and indices numeric, so distinct bin tuples never share a key
        indices = self.bin_indices(observation)
        return "_".join(f"{b.label}{i}" for b, i in zip(self.field_bins, indices))

    def state_count(self) -> int:
        """Number of distinct keys this discretizer can produce."""
        return math.prod(b.bins for b in self.field_bins)
