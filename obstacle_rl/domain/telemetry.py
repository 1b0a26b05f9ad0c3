"""Recording of training sessions for later analysis and export."""

import copy
import logging
import time
from typing import Dict, List, Optional, Sequence

from .types import (
    EpisodeRecord, StepRecord, QTableEntry, SessionSummary, TrainingSession
)

logger = logging.getLogger(__name__)


def summarize(episodes: Sequence[EpisodeRecord],
              steps: Sequence[StepRecord],
              final_q_table: Sequence[QTableEntry],
              final_exploration_rate: float) -> SessionSummary:
    """Aggregate statistics over the recorded episodes."""
    successful = [ep for ep in episodes if ep.outcome == "goal"]

    average_reward = (
        sum(ep.total_reward for ep in episodes) / len(episodes) if episodes else 0.0
    )
    average_steps_to_goal = (
        sum(ep.steps for ep in successful) / len(successful) if successful else 0.0
    )
    if final_q_table:
        states_explored = len(final_q_table)
    else:
        states_explored = len({step.state_key for step in steps})

    return SessionSummary(
        total_episodes=len(episodes),
        successful_episodes=len(successful),
        average_reward=average_reward,
        average_steps_to_goal=average_steps_to_goal,
        final_exploration_rate=final_exploration_rate,
        states_explored=states_explored,
    )


class TelemetryRecorder:
    """Accumulates step and episode records of one training session at a time."""

    def __init__(self):
        self._session: Optional[TrainingSession] = None
        self._recording = False
        self._last_exploration_rate = 0.0

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def current_session(self) -> Optional[TrainingSession]:
        """The open session, or the last finished one."""
        return self._session

    def start_session(self, hyperparameters: Dict[str, float]) -> Optional[TrainingSession]:
        """Open a new session; does nothing while one is already open."""
        if self._recording:
            return None

        start_time = time.time()
        self._session = TrainingSession(
            session_id=f"rl_session_{int(start_time * 1000)}",
            start_time=start_time,
            hyperparameters=dict(hyperparameters),
        )
        self._recording = True
        self._last_exploration_rate = hyperparameters.get("initial_epsilon", 0.0)
        logger.info("Started recording training session %s", self._session.session_id)
        return self._session

    def record_step(self, step: StepRecord) -> None:
        if not self._recording or self._session is None:
            return
        self._session.steps.append(step)
        self._last_exploration_rate = step.exploration_rate

    def record_episode(self, episode: EpisodeRecord) -> None:
        if not self._recording or self._session is None:
            return
        self._session.episodes.append(episode)
        self._last_exploration_rate = episode.exploration_rate

    def finish_session(self, final_q_table: List[QTableEntry],
                       final_exploration_rate: float) -> Optional[TrainingSession]:
        """Freeze the summary, close the session and return it."""
        if not self._recording or self._session is None:
            logger.warning("No training session is being recorded")
            return None

        session = self._session
        if not final_q_table:
            logger.warning("Q-table is empty - no learning occurred in session %s",
                           session.session_id)

        session.end_time = time.time()
        session.final_q_table = list(final_q_table)
        session.summary = summarize(session.episodes, session.steps,
                                    session.final_q_table, final_exploration_rate)
        self._recording = False
        logger.info("Finished recording session %s: %s", session.session_id, session.summary)
        return session

    def export_snapshot(self, exploration_rate: Optional[float] = None) -> Optional[TrainingSession]:
        """Copy of the current session with a freshly computed summary.

        Recording continues; later records do not show up in the copy. While
        recording, `exploration_rate` is reported as the final rate; without it
        the rate of the last record is used, which trails the live rate by one
        decay after an episode ends.
        """
        if self._session is None:
            logger.warning("No training session to export")
            return None

        session = self._session
        if self._recording:
            final_rate = (self._last_exploration_rate if exploration_rate is None
                          else exploration_rate)
        else:
            final_rate = session.summary.final_exploration_rate

        snapshot = copy.copy(session)
        snapshot.hyperparameters = dict(session.hyperparameters)
        snapshot.episodes = list(session.episodes)
        snapshot.steps = list(session.steps)
        snapshot.final_q_table = list(session.final_q_table)
        snapshot.end_time = time.time() if self._recording else session.end_time
        snapshot.summary = summarize(snapshot.episodes, snapshot.steps,
                                     snapshot.final_q_table, final_rate)
        return snapshot
