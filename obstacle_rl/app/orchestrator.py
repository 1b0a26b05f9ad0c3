"""Episode orchestration between an environment and the Q-learning agent."""

import logging
import math
import time
from collections import Counter
from typing import List, Optional

from ..domain.errors import ConfigurationError, OrchestratorStateError
from ..domain.exploration import ExplorationSchedule
from ..domain.qlearning import QLearningAgent
from ..domain.telemetry import TelemetryRecorder
from ..domain.types import (
    Observation, Transition, RLConfig, EpisodeRecord, StepRecord, QTableEntry,
    LiveStats, Outcome
)
from .fsm import EpisodeStateMachine, EpisodePhase

logger = logging.getLogger(__name__)


class EpisodeOrchestrator:
    """Drives one agent through consecutive episodes, one delivery per tick.

    The environment calls `step` once per tick: first with the opening
    observation of an episode, then with (observation, reward, terminal) for
    the action returned by the previous call. A terminal delivery finishes the
    episode, decays the exploration rate and rearms for the next episode.
    """

    def __init__(self, agent: QLearningAgent, config: Optional[RLConfig] = None,
                 recorder: Optional[TelemetryRecorder] = None):
        self.config = (config or agent.config).validate()
        self.agent = agent
        self.agent.config = self.config
        self.recorder = recorder
        self.schedule = ExplorationSchedule(self.config.epsilon_decay, self.config.epsilon_min)
        self.exploration_rate = self.config.epsilon
        self.phase = EpisodeStateMachine()

        self.episode_count = 0
        self.episode_reward = 0.0
        self.step_count = 0
        self.state_visits: Counter = Counter()
        self.last_episode: Optional[EpisodeRecord] = None

        self._previous_observation: Optional[Observation] = None
        self._previous_action: Optional[str] = None
        self._episode_exploration_rate = self.exploration_rate

    @property
    def current_phase(self) -> EpisodePhase:
        return self.phase.current_state

    @property
    def previous_observation(self) -> Optional[Observation]:
        return self._previous_observation

    @property
    def pending_action(self) -> Optional[str]:
        """Action most recently emitted and not yet answered by the environment."""
        return self._previous_action

    def step(self, observation: Observation, reward: Optional[float] = None,
             terminal: bool = False) -> Optional[str]:
        """Feed one tick of environment output; return the next action.

        Returns None when the delivery ended the episode.
        """
        if self.phase.is_awaiting_first_observation():
            if terminal:
                raise OrchestratorStateError(
                    "terminal transition delivered before the episode's first observation")
            return self._begin_episode(observation)

        if reward is None:
            raise OrchestratorStateError(
                f"episode {self.episode_count} is in progress; a reward is required")
        reward = float(reward)
        if not math.isfinite(reward):
            raise OrchestratorStateError(f"reward must be a finite number, got {reward}")
        return self._advance(observation, reward, bool(terminal))

    def force_terminal(self, observation: Observation, reward: float = 0.0) -> Optional[EpisodeRecord]:
        """End the running episode now, through the normal finishing path."""
        if not self.phase.is_stepping():
            logger.debug("Restart requested with no episode in progress")
            return None
        self.step(observation, reward, terminal=True)
        return self.last_episode

    def classify_outcome(self, terminal_reward: float, steps: int) -> Outcome:
        if terminal_reward > self.config.success_threshold:
            return "goal"
        max_steps = self.config.max_steps_per_episode
        if max_steps is not None and steps > max_steps:
            return "timeout"
        return "fall"

    def update_config(self, config: RLConfig):
        """Apply new hyperparameters from the next step on.

        The exploration rate carries over, clamped to the new minimum.
        """
        config.validate()
        if tuple(config.bins) != tuple(self.config.bins):
            raise ConfigurationError("discretization bins cannot change during training")
        self.config = config
        self.agent.config = config
        self.schedule = ExplorationSchedule(config.epsilon_decay, config.epsilon_min)
        # A raised floor lifts the current rate so it stays within [epsilon_min, 1]
        self.exploration_rate = min(1.0, max(config.epsilon_min, self.exploration_rate))
        logger.debug("Hyperparameters updated: %s", config.hyperparameters())

    def reset_exploration(self) -> float:
        self.exploration_rate = self.schedule.reset()
        return self.exploration_rate

    def q_table_snapshot(self) -> List[QTableEntry]:
        return self.agent.get_q_table_snapshot(self.config.snapshot_limit, self.state_visits)

    def live_stats(self) -> LiveStats:
        """Current figures, read without creating table entries."""
        state_key = None
        q_values = None
        if self._previous_observation is not None:
            state_key = self.agent.get_discrete_state(self._previous_observation)
            values = self.agent.q_table.get(state_key)
            if values is not None:
                q_values = tuple(float(q) for q in values)

        return LiveStats(
            episode_count=self.episode_count,
            episode_reward=self.episode_reward,
            exploration_rate=self.exploration_rate,
            q_table_size=self.agent.get_q_table_size(),
            current_state_key=state_key,
            current_action_values=q_values,
        )

    def _begin_episode(self, observation: Observation) -> str:
        self._previous_observation = observation
        self._episode_exploration_rate = self.exploration_rate
        action = self._choose(observation)
        self.phase.begin()
        return action

    def _choose(self, observation: Observation) -> str:
        self.state_visits[self.agent.get_discrete_state(observation)] += 1
        action = self.agent.choose_action(observation, self.exploration_rate)
        self._previous_action = action
        return action

    def _advance(self, observation: Observation, reward: float, terminal: bool) -> Optional[str]:
        self.step_count += 1
        self.episode_reward += reward

        max_steps = self.config.max_steps_per_episode
        if not terminal and max_steps is not None and self.step_count > max_steps:
            terminal = True

        transition = Transition(
            observation=self._previous_observation,
            action=self._previous_action,
            reward=reward,
            next_observation=observation,
            terminal=terminal,
        )
        self.agent.learn(transition, self.config.learning_rate, self.config.discount_factor)
        self._record_step(transition)

        if terminal:
            self._finish_episode(observation, reward)
            return None

        self._previous_observation = observation
        return self._choose(observation)

    def _record_step(self, transition: Transition):
        if self.recorder is None or not self.config.record_steps:
            return
        state_key = self.agent.get_discrete_state(transition.observation)
        self.recorder.record_step(StepRecord(
            episode_number=self.episode_count,
            step_number=self.step_count,
            state_key=state_key,
            action=transition.action,
            reward=transition.reward,
            observation=transition.observation,
            action_values=tuple(float(q) for q in self.agent.get_q_values(state_key)),
            exploration_rate=self.exploration_rate,
            timestamp=time.time(),
        ))

    def _finish_episode(self, observation: Observation, terminal_reward: float):
        self.phase.complete()

        episode = EpisodeRecord(
            episode_number=self.episode_count,
            total_reward=self.episode_reward,
            steps=self.step_count,
            outcome=self.classify_outcome(terminal_reward, self.step_count),
            final_distance=observation.distance_to_goal,
            exploration_rate=self._episode_exploration_rate,
            timestamp=time.time(),
        )
        if self.recorder is not None:
            self.recorder.record_episode(episode)
        logger.info("Episode %d ended: %s, total reward %.2f",
                    episode.episode_number, episode.outcome, episode.total_reward)

        self.exploration_rate = self.schedule.decay(self.exploration_rate)
        logger.debug("Exploration rate decayed to %.4f", self.exploration_rate)
        self.episode_count += 1
        self.last_episode = episode

        self._previous_observation = None
        self._previous_action = None
        self.episode_reward = 0.0
        self.step_count = 0
        self.phase.rearm()
