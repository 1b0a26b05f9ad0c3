"""One-step temporal-difference (Q-learning) update."""

from .discretizer import Discretizer
from .qtable import ActionValueTable
from .types import Transition


class QLearner:
    """Applies the Q-learning update rule to an ActionValueTable."""

    def __init__(self, table: ActionValueTable, discretizer: Discretizer):
        self.table = table
        self.discretizer = discretizer

    def target(self, transition: Transition, discount_factor: float) -> float:
        """TD target: the reward, plus the discounted best next value unless terminal."""
        if transition.terminal:
            return transition.reward
        next_values = self.table.values(self.discretizer.discretize(transition.next_observation))
        # Off-policy: best next value, not the value of the next action taken
        return transition.reward + discount_factor * float(next_values.max())

    def learn(self, transition: Transition, learning_rate: float, discount_factor: float) -> float:
        """Move Q(s, a) toward the TD target and return the new value.

        Range checks on the rates happen where the configuration is accepted.
        """
        action_index = self.table.action_index(transition.action)
        q_values = self.table.values(self.discretizer.discretize(transition.observation))
        old_q = float(q_values[action_index])

        target = self.target(transition, discount_factor)
        new_q = old_q + learning_rate * (target - old_q)

        q_values[action_index] = new_q
        return new_q
