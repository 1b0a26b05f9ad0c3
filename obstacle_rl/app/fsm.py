"""Finite state machines for episode phases and training sessions."""

import logging
from enum import Enum, auto
from typing import Dict, Generic, Set, TypeVar

S = TypeVar("S", bound=Enum)

logger = logging.getLogger(__name__)


class EpisodePhase(Enum):
    """Phases of a single training episode."""
    AWAITING_FIRST_OBSERVATION = auto()
    STEPPING = auto()
    EPISODE_COMPLETE = auto()


class SessionState(Enum):
    """States of a training session."""
    IDLE = auto()
    TRAINING = auto()
    PAUSED = auto()


class StateMachine(Generic[S]):
    """Table-driven state machine."""

    def __init__(self, initial: S, valid_transitions: Dict[S, Set[S]]):
        self.current_state = initial
        self._valid_transitions = valid_transitions

    def can_transition(self, to_state: S) -> bool:
        """Check if transition to target state is valid."""
        return to_state in self._valid_transitions.get(self.current_state, set())

    def transition(self, to_state: S) -> bool:
        """Attempt to transition to target state."""
        if not self.can_transition(to_state):
            logger.debug("Ignored transition %s -> %s", self.current_state.name, to_state.name)
            return False

        self.current_state = to_state
        return True


class EpisodeStateMachine(StateMachine[EpisodePhase]):
    """AWAITING_FIRST_OBSERVATION -> STEPPING -> EPISODE_COMPLETE -> AWAITING_FIRST_OBSERVATION."""

    def __init__(self):
        super().__init__(EpisodePhase.AWAITING_FIRST_OBSERVATION, {
            EpisodePhase.AWAITING_FIRST_OBSERVATION: {EpisodePhase.STEPPING},
            EpisodePhase.STEPPING: {EpisodePhase.EPISODE_COMPLETE},
            EpisodePhase.EPISODE_COMPLETE: {EpisodePhase.AWAITING_FIRST_OBSERVATION},
        })

    def begin(self) -> bool:
        return self.transition(EpisodePhase.STEPPING)

    def complete(self) -> bool:
        return self.transition(EpisodePhase.EPISODE_COMPLETE)

    def rearm(self) -> bool:
        return self.transition(EpisodePhase.AWAITING_FIRST_OBSERVATION)

    def is_awaiting_first_observation(self) -> bool:
        return self.current_state == EpisodePhase.AWAITING_FIRST_OBSERVATION

    def is_stepping(self) -> bool:
        return self.current_state == EpisodePhase.STEPPING


class SessionStateMachine(StateMachine[SessionState]):
    """State machine for managing a training session."""

    def __init__(self):
        super().__init__(SessionState.IDLE, {
            SessionState.IDLE: {SessionState.TRAINING},
            SessionState.TRAINING: {SessionState.PAUSED, SessionState.IDLE},
            SessionState.PAUSED: {SessionState.TRAINING, SessionState.IDLE},
        })

    def start_training(self) -> bool:
        """Start training mode."""
        if self.current_state == SessionState.IDLE:
            return self.transition(SessionState.TRAINING)
        return False

    def pause(self) -> bool:
        """Pause current operation."""
        return self.transition(SessionState.PAUSED)

    def resume(self) -> bool:
        """Resume training from paused state."""
        if self.current_state == SessionState.PAUSED:
            return self.transition(SessionState.TRAINING)
        return False

    def reset_to_idle(self) -> bool:
        """Reset to idle state."""
        return self.transition(SessionState.IDLE)

    def is_idle(self) -> bool:
        return self.current_state == SessionState.IDLE

    def is_training(self) -> bool:
        return self.current_state == SessionState.TRAINING

    def is_paused(self) -> bool:
        return self.current_state == SessionState.PAUSED
