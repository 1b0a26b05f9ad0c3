"""Training controller connecting an environment to the episode orchestrator."""

import logging
from typing import List, Optional, Protocol, Sequence, Tuple

from ..domain.qlearning import QLearningAgent
from ..domain.telemetry import TelemetryRecorder
from ..domain.types import (
    Observation, RLConfig, EpisodeRecord, TrainingSession, LiveStats, DEFAULT_ACTIONS
)
from ..utils.rng import SeededRNG
from .fsm import SessionStateMachine, SessionState
from .orchestrator import EpisodeOrchestrator

logger = logging.getLogger(__name__)


class Environment(Protocol):
    """What the controller needs from a simulation."""

    def reset(self) -> Observation: ...

    def observe(self) -> Observation: ...

    def step(self, action: str) -> Tuple[Observation, float, bool]: ...


class TrainingController:
    """Owns the agent for the duration of a training session and drives ticks."""

    def __init__(self, environment: Environment, config: Optional[RLConfig] = None,
                 actions: Sequence[str] = DEFAULT_ACTIONS, seed: Optional[int] = None,
                 recorder: Optional[TelemetryRecorder] = None):
        self.environment = environment
        self._config = (config or RLConfig()).validate()
        self.actions = tuple(actions)
        self.rng = SeededRNG(seed)
        self.recorder = recorder or TelemetryRecorder()
        self.state_machine = SessionStateMachine()
        self.orchestrator: Optional[EpisodeOrchestrator] = None
        self._pending_action: Optional[str] = None

    @property
    def config(self) -> RLConfig:
        return self._config

    @property
    def current_state(self) -> SessionState:
        return self.state_machine.current_state

    @property
    def agent(self) -> Optional[QLearningAgent]:
        return self.orchestrator.agent if self.orchestrator else None

    def update_config(self, config: RLConfig):
        """Change hyperparameters; a running session picks them up next tick."""
        config.validate()
        if self.orchestrator is not None:
            self.orchestrator.update_config(config)
        # Environments that compute rewards from the config follow the change
        if hasattr(self.environment, "update_config"):
            self.environment.update_config(config)
        self._config = config

    def start_training(self, resume: bool = False) -> bool:
        """Open a recording session and begin ticking.

        Without `resume` the session gets a fresh agent and exploration rate.
        """
        if not self.state_machine.is_idle():
            return False

        if not resume or self.orchestrator is None:
            agent = QLearningAgent(self._config, self.actions, self.rng)
            self.orchestrator = EpisodeOrchestrator(agent, self._config, self.recorder)
            self._pending_action = None

        self.recorder.start_session(self._config.hyperparameters())
        self.state_machine.start_training()
        logger.info("Training started (%s)", "resumed" if resume else "fresh agent")
        return True

    def stop_training(self) -> Optional[TrainingSession]:
        """Close the session and return its recording."""
        if self.state_machine.is_idle():
            return None

        session = self.recorder.finish_session(
            self.orchestrator.q_table_snapshot(), self.orchestrator.exploration_rate)
        self.state_machine.reset_to_idle()
        return session

    def pause(self) -> bool:
        return self.state_machine.pause()

    def resume(self) -> bool:
        return self.state_machine.resume()

    def tick(self) -> Optional[EpisodeRecord]:
        """Advance the interaction by one simulation tick.

        Returns the episode record when this tick finished an episode.
        """
        if not self.state_machine.is_training():
            return None

        if self._pending_action is None:
            observation = self.environment.reset()
            self._pending_action = self.orchestrator.step(observation)
            return None

        observation, reward, done = self.environment.step(self._pending_action)
        self._pending_action = self.orchestrator.step(observation, reward, done)
        if self._pending_action is None:
            return self.orchestrator.last_episode
        return None

    def run(self, episodes: int, max_ticks: Optional[int] = None) -> List[EpisodeRecord]:
        """Tick until `episodes` more episodes have finished."""
        if self.state_machine.is_idle():
            self.start_training(resume=self.orchestrator is not None)

        finished: List[EpisodeRecord] = []
        ticks = 0
        while len(finished) < episodes and self.state_machine.is_training():
            if max_ticks is not None and ticks >= max_ticks:
                logger.warning("Stopped after %d ticks with %d/%d episodes finished",
                               ticks, len(finished), episodes)
                break
            episode = self.tick()
            ticks += 1
            if episode is not None:
                finished.append(episode)
        return finished

    def restart_episode(self) -> Optional[EpisodeRecord]:
        """End the running episode as if the environment reported it terminal."""
        if self.orchestrator is None or self._pending_action is None:
            return None
        episode = self.orchestrator.force_terminal(self.environment.observe())
        self._pending_action = None
        return episode

    def export_snapshot(self) -> Optional[TrainingSession]:
        if self.orchestrator is None:
            return self.recorder.export_snapshot()
        return self.recorder.export_snapshot(self.orchestrator.exploration_rate)

    def live_stats(self) -> Optional[LiveStats]:
        return self.orchestrator.live_stats() if self.orchestrator else None
