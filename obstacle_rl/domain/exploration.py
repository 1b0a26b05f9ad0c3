"""Exploration rate schedule."""

from .errors import ConfigurationError

MAX_EXPLORATION_RATE = 1.0


class ExplorationSchedule:
    """Multiplicative per-episode decay of epsilon, floored at a minimum."""

    def __init__(self, decay_factor: float, minimum_rate: float):
        if not 0.0 < decay_factor <= 1.0:
            raise ConfigurationError(f"decay factor must be in (0, 1], got {decay_factor}")
        if not 0.0 <= minimum_rate <= 1.0:
            raise ConfigurationError(f"minimum rate must be in [0, 1], got {minimum_rate}")
        self.decay_factor = decay_factor
        self.minimum_rate = minimum_rate

    def decay(self, current_rate: float) -> float:
        """Decay epsilon for less exploration over time."""
        return min(MAX_EXPLORATION_RATE,
                   max(self.minimum_rate, current_rate * self.decay_factor))

    def reset(self) -> float:
        return MAX_EXPLORATION_RATE
