"""Epsilon-greedy action selection."""

from typing import Optional

import numpy as np

from .discretizer import Discretizer
from .qtable import ActionValueTable
from .types import Observation
from ..utils.rng import SeededRNG


class EpsilonGreedyPolicy:
    """Picks a random action with probability epsilon, otherwise a best one."""

    def __init__(self, table: ActionValueTable, discretizer: Discretizer,
                 rng: Optional[SeededRNG] = None):
        self.table = table
        self.discretizer = discretizer
        self.rng = rng or SeededRNG()

    def choose_action(self, observation: Observation, exploration_rate: float) -> str:
        """Select an action for the observation's state.

        Unseen states get a zero-initialized entry. Ties between maximal values
        are broken uniformly at random, so a fresh state does not always map
        to the first action.
        """
        q_values = self.table.values(self.discretizer.discretize(observation))

        if self.rng.random() < exploration_rate:
            return self.rng.choice(self.table.actions)

        return self.table.actions[self.greedy_index(q_values)]

    def greedy_index(self, q_values: np.ndarray) -> int:
        """Index of a maximal value, chosen uniformly among ties."""
        best = np.flatnonzero(q_values == q_values.max())
        return int(self.rng.choice(best))
