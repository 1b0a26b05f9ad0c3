"""Q-Learning agent for the obstacle course."""

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .discretizer import Discretizer
from .learner import QLearner
from .policy import EpsilonGreedyPolicy
from .qtable import ActionValueTable
from .types import (
    Observation, Transition, RLConfig, QTableEntry, StateKey, DEFAULT_ACTIONS
)
from ..utils.rng import SeededRNG

logger = logging.getLogger(__name__)


class QLearningAgent:
    """Tabular Q-learning agent: discretizer, value table, policy and learner."""

    def __init__(self, config: Optional[RLConfig] = None,
                 actions: Sequence[str] = DEFAULT_ACTIONS,
                 rng: Optional[SeededRNG] = None):
        self.config = config or RLConfig()
        self.discretizer = Discretizer(self.config.bins)
        self.q_table = ActionValueTable(actions)
        self.policy = EpsilonGreedyPolicy(self.q_table, self.discretizer, rng)
        self.learner = QLearner(self.q_table, self.discretizer)

    @property
    def actions(self) -> Tuple[str, ...]:
        return self.q_table.actions

    def get_discrete_state(self, observation: Observation) -> StateKey:
        return self.discretizer.discretize(observation)

    def get_q_values(self, state_key: StateKey) -> np.ndarray:
        """Get-or-create the Q-values of a state."""
        return self.q_table.values(state_key)

    def choose_action(self, observation: Observation, exploration_rate: float) -> str:
        return self.policy.choose_action(observation, exploration_rate)

    def learn(self, transition: Transition,
              learning_rate: Optional[float] = None,
              discount_factor: Optional[float] = None) -> float:
        """Update Q-values from one transition, using the config rates by default."""
        if learning_rate is None:
            learning_rate = self.config.learning_rate
        if discount_factor is None:
            discount_factor = self.config.discount_factor
        return self.learner.learn(transition, learning_rate, discount_factor)

    def get_q_table_size(self) -> int:
        return self.q_table.size()

    def get_q_table_snapshot(self, max_entries: int = 10,
                             visit_counts: Optional[Mapping[StateKey, int]] = None
                             ) -> List[QTableEntry]:
        """Exportable copies of up to `max_entries` states, with visit counts."""
        visit_counts = visit_counts or {}
        return [
            QTableEntry(
                state_key=state_key,
                action_values=tuple(float(q) for q in q_values),
                action_names=self.actions,
                visit_count=int(visit_counts.get(state_key, 0)),
            )
            for state_key, q_values in self.q_table.snapshot(max_entries)
        ]

    def reset_q_table(self):
        """Reset Q-table for a new training session."""
        self.q_table.reset()

    def get_agent_state(self) -> Dict:
        """Get current agent state for checkpointing."""
        return {
            "actions": list(self.actions),
            "q_table": {
                state_key: [float(q) for q in q_values]
                for state_key, q_values in self.q_table.items()
            },
            "config": self.config.to_dict(),
        }

    def load_agent_state(self, state: Dict):
        """Load agent state from checkpoint."""
        actions = tuple(state.get("actions", self.actions))
        if actions != self.actions:
            raise ValueError(f"checkpoint actions {actions} do not match agent actions {self.actions}")

        if "config" in state:
            self.config = RLConfig.from_dict(state["config"]).validate()
            self.discretizer = Discretizer(self.config.bins)
            self.policy.discretizer = self.discretizer
            self.learner.discretizer = self.discretizer

        self.q_table.load(state.get("q_table", {}))
        logger.info("Loaded agent state with %d states", self.q_table.size())
