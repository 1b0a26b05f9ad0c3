"""Error types raised by the Q-learning core."""


class RLError(Exception):
    """Base class for errors raised by the training core."""


class ConfigurationError(RLError, ValueError):
    """An out-of-range hyperparameter or an invalid discretization setting."""


class OrchestratorStateError(RLError, RuntimeError):
    """A transition was delivered that the episode protocol does not allow."""
