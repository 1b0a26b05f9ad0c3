"""Sparse action-value table keyed by discretized state."""

import logging
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .types import StateKey, DEFAULT_ACTIONS

logger = logging.getLogger(__name__)


class ActionValueTable:
    """Maps each StateKey to a mutable vector with one value per action.

    Vectors are created lazily, zero-initialized, on first access and live
    until `reset()`. Insertion order is the order of first access.
    """

    def __init__(self, actions: Sequence[str] = DEFAULT_ACTIONS):
        self.actions: Tuple[str, ...] = tuple(actions)
        if not self.actions:
            raise ValueError("action set must not be empty")
        if len(set(self.actions)) != len(self.actions):
            raise ValueError(f"action names must be unique, got {self.actions}")
        self._values: Dict[StateKey, np.ndarray] = {}

    def values(self, state_key: StateKey) -> np.ndarray:
        """Get-or-create the action values of a state."""
        q_values = self._values.get(state_key)
        if q_values is None:
            q_values = np.zeros(len(self.actions), dtype=np.float64)
            self._values[state_key] = q_values
            logger.debug("New state %s (%d known)", state_key, len(self._values))
        return q_values

    def get(self, state_key: StateKey) -> Optional[np.ndarray]:
        """Action values of a known state, without creating an entry."""
        return self._values.get(state_key)

    def action_index(self, action: str) -> int:
        try:
            return self.actions.index(action)
        except ValueError:
            raise ValueError(f"unknown action {action!r}, expected one of {self.actions}") from None

    def size(self) -> int:
        return len(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def items(self) -> Iterator[Tuple[StateKey, np.ndarray]]:
        return iter(self._values.items())

    def snapshot(self, max_entries: int) -> List[Tuple[StateKey, np.ndarray]]:
        """Copies of up to `max_entries` entries in first-access order."""
        snapshot = []
        for state_key, q_values in self._values.items():
            if len(snapshot) >= max_entries:
                break
            snapshot.append((state_key, q_values.copy()))
        return snapshot

    def load(self, entries: Dict[StateKey, Sequence[float]]) -> None:
        """Replace the table contents with previously exported values."""
        loaded = {}
        for state_key, q_values in entries.items():
            array = np.asarray(q_values, dtype=np.float64)
            if array.shape != (len(self.actions),):
                raise ValueError(
                    f"state {state_key!r} has {array.size} values, expected {len(self.actions)}")
            loaded[state_key] = array.copy()
        self._values = loaded

    def reset(self) -> None:
        """Forget every state."""
        self._values.clear()
