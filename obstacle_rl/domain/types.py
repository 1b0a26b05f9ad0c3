"""Core type definitions for the obstacle course Q-learning agent."""

import math
import numbers
from dataclasses import dataclass, field, fields, asdict
from typing import Optional, Tuple, Literal, Dict, List, Any

from .errors import ConfigurationError

# Actions the agent can emit by default
DEFAULT_ACTIONS: Tuple[str, ...] = ("forward", "backward", "jump", "none")

# How an episode ended
Outcome = Literal["goal", "fall", "timeout"]

# Discretized state identifier, e.g. "d12_y1_x1_v2"
StateKey = str


@dataclass(frozen=True)
class Observation:
    """Continuous readings produced by the environment once per tick."""
    x: float
    y: float
    velocity_x: float
    velocity_y: float
    velocity_z: float
    distance_to_goal: float


OBSERVATION_FIELDS: Tuple[str, ...] = tuple(f.name for f in fields(Observation))


@dataclass(frozen=True)
class FieldBins:
    """Binning of one observation field into `bins` equal-width buckets."""
    field: str
    label: str
    minimum: float
    maximum: float
    bins: int

    def __post_init__(self):
        if self.field not in OBSERVATION_FIELDS:
            raise ConfigurationError(f"unknown observation field {self.field!r}")
        if not self.label.isalpha():
            raise ConfigurationError(
                f"bin label for {self.field!r} must be alphabetic, got {self.label!r}")
        if (isinstance(self.bins, bool) or not isinstance(self.bins, numbers.Integral)
                or self.bins <= 0):
            raise ConfigurationError(
                f"bin count for {self.field!r} must be a positive integer, got {self.bins!r}")
        # Stored as a plain int
        object.__setattr__(self, "bins", int(self.bins))
        if not (math.isfinite(self.minimum) and math.isfinite(self.maximum)):
            raise ConfigurationError(f"bounds for {self.field!r} must be finite")
        if self.maximum <= self.minimum:
            raise ConfigurationError(
                f"maximum for {self.field!r} must exceed minimum "
                f"({self.minimum} >= {self.maximum})")


# Distance is mandatory; height, lateral position and forward speed refine it
DEFAULT_BINS: Tuple[FieldBins, ...] = (
    FieldBins("distance_to_goal", "d", 0.0, 50.0, 20),
    FieldBins("y", "y", -2.0, 4.0, 3),
    FieldBins("x", "x", -2.0, 2.0, 3),
    FieldBins("velocity_z", "v", -4.0, 4.0, 4),
)


@dataclass(frozen=True)
class Transition:
    """One (s, a, r, s', done) tuple, consumed by a single learning update."""
    observation: Observation
    action: str
    reward: float
    next_observation: Observation
    terminal: bool


@dataclass
class RLConfig:
    """Configuration for the Q-learning agent and its training loop."""
    learning_rate: float = 0.1
    discount_factor: float = 0.95
    epsilon: float = 1.0  # Initial exploration rate
    epsilon_decay: float = 0.99  # Applied once per finished episode
    epsilon_min: float = 0.05
    max_steps_per_episode: Optional[int] = 1000
    success_threshold: float = 0.0  # Terminal rewards above this count as reaching the goal

    # Reward magnitudes used by the environment
    reward_goal: float = 100.0
    penalty_fall: float = -50.0
    penalty_obstacle_hit: float = -10.0
    penalty_wall_hit: float = -5.0
    reward_per_tick: float = -0.01

    # Telemetry
    snapshot_limit: int = 1000
    record_steps: bool = True

    bins: Tuple[FieldBins, ...] = field(default_factory=lambda: DEFAULT_BINS)

    def validate(self) -> "RLConfig":
        """Raise ConfigurationError for the first out-of-range setting."""
        if not 0.0 < self.learning_rate <= 1.0:
            raise ConfigurationError(
                f"learning_rate must be in (0, 1], got {self.learning_rate}")
        if not 0.0 <= self.discount_factor < 1.0:
            raise ConfigurationError(
                f"discount_factor must be in [0, 1), got {self.discount_factor}")
        if not 0.0 < self.epsilon_decay <= 1.0:
            raise ConfigurationError(
                f"epsilon_decay must be in (0, 1], got {self.epsilon_decay}")
        if not 0.0 <= self.epsilon_min <= 1.0:
            raise ConfigurationError(
                f"epsilon_min must be in [0, 1], got {self.epsilon_min}")
        if not self.epsilon_min <= self.epsilon <= 1.0:
            raise ConfigurationError(
                f"epsilon must be in [epsilon_min, 1], got {self.epsilon}")
        if self.max_steps_per_episode is not None and self.max_steps_per_episode <= 0:
            raise ConfigurationError(
                f"max_steps_per_episode must be positive, got {self.max_steps_per_episode}")
        if self.snapshot_limit <= 0:
            raise ConfigurationError(
                f"snapshot_limit must be positive, got {self.snapshot_limit}")
        if not self.bins:
            raise ConfigurationError("at least one discretization field is required")
        if not any(b.field == "distance_to_goal" for b in self.bins):
            raise ConfigurationError("distance_to_goal must be discretized")
        labels = [b.label for b in self.bins]
        if len(set(labels)) != len(labels):
            raise ConfigurationError(f"bin labels must be unique, got {labels}")
        return self

    def hyperparameters(self) -> Dict[str, float]:
        """Hyperparameters stored with a recorded training session."""
        return {
            "learning_rate": self.learning_rate,
            "discount_factor": self.discount_factor,
            "initial_epsilon": self.epsilon,
            "epsilon_decay": self.epsilon_decay,
            "epsilon_min": self.epsilon_min,
            "reward_goal": self.reward_goal,
            "penalty_fall": self.penalty_fall,
            "penalty_obstacle_hit": self.penalty_obstacle_hit,
            "penalty_wall_hit": self.penalty_wall_hit,
            "reward_per_tick": self.reward_per_tick,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["bins"] = [asdict(b) for b in self.bins]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RLConfig":
        """Build a config from a dict; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        if "bins" in kwargs:
            kwargs["bins"] = tuple(
                b if isinstance(b, FieldBins) else FieldBins(**b) for b in kwargs["bins"]
            )
        return cls(**kwargs)


@dataclass(frozen=True)
class EpisodeRecord:
    """Summary of a single finished training episode."""
    episode_number: int
    total_reward: float
    steps: int
    outcome: Outcome
    final_distance: float
    exploration_rate: float
    timestamp: float


@dataclass(frozen=True)
class StepRecord:
    """One learning step: the state acted from, the action and its reward."""
    episode_number: int
    step_number: int
    state_key: StateKey
    action: str
    reward: float
    observation: Observation
    action_values: Tuple[float, ...]
    exploration_rate: float
    timestamp: float


@dataclass(frozen=True)
class QTableEntry:
    """Exported action values of one state."""
    state_key: StateKey
    action_values: Tuple[float, ...]
    action_names: Tuple[str, ...]
    visit_count: int = 0


@dataclass
class SessionSummary:
    """Aggregate statistics of a training session."""
    total_episodes: int = 0
    successful_episodes: int = 0
    average_reward: float = 0.0
    average_steps_to_goal: float = 0.0
    final_exploration_rate: float = 0.0
    states_explored: int = 0

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        return self.successful_episodes / self.total_episodes if self.total_episodes > 0 else 0.0


@dataclass
class TrainingSession:
    """Append-only record of everything logged while recording was on."""
    session_id: str
    start_time: float
    hyperparameters: Dict[str, float]
    end_time: Optional[float] = None
    episodes: List[EpisodeRecord] = field(default_factory=list)
    steps: List[StepRecord] = field(default_factory=list)
    final_q_table: List[QTableEntry] = field(default_factory=list)
    summary: SessionSummary = field(default_factory=SessionSummary)


@dataclass(frozen=True)
class LiveStats:
    """Point-in-time training figures for a status display."""
    episode_count: int
    episode_reward: float
    exploration_rate: float
    q_table_size: int
    current_state_key: Optional[StateKey] = None
    current_action_values: Optional[Tuple[float, ...]] = None
