"""Minimal obstacle course environment for headless training runs.

The track runs from position 0 to `length`. Gaps have no ground and must be
jumped; obstacles block a runner that is not airborne. Forward speed is
reported as `velocity_z` and height above the track as `y`.
"""

from dataclasses import dataclass
from typing import Tuple

from ..domain.types import Observation, RLConfig


@dataclass(frozen=True)
class CourseLayout:
    """Geometry of a course."""
    length: float = 40.0
    gaps: Tuple[Tuple[float, float], ...] = ((12.0, 14.0), (25.0, 27.0))
    obstacles: Tuple[float, ...] = (33.0,)
    obstacle_height: float = 0.3


class ObstacleCourse:
    """Environment for training the runner with the configured reward system."""

    DT = 0.1
    GRAVITY = 9.8
    ACCELERATION = 0.6
    DAMPING = 0.9
    MAX_SPEED = 4.0
    JUMP_SPEED = 4.0
    FALL_HEIGHT = -2.0

    def __init__(self, config: RLConfig, layout: CourseLayout = CourseLayout()):
        self.config = config
        self.layout = layout
        self.position = 0.0
        self.height = 0.0
        self.speed = 0.0
        self.vertical_speed = 0.0
        self.steps_taken = 0

    def update_config(self, config: RLConfig):
        """Use new reward magnitudes from the next step on."""
        self.config = config

    def reset(self) -> Observation:
        """Reset environment to initial state."""
        self.position = 0.0
        self.height = 0.0
        self.speed = 0.0
        self.vertical_speed = 0.0
        self.steps_taken = 0
        return self.observe()

    def observe(self) -> Observation:
        return Observation(
            x=0.0,
            y=self.height,
            velocity_x=0.0,
            velocity_y=self.vertical_speed,
            velocity_z=self.speed,
            distance_to_goal=max(0.0, self.layout.length - self.position),
        )

    def step(self, action: str) -> Tuple[Observation, float, bool]:
        """
        Execute action and return (next_observation, reward, done).

        Args:
            action: One of "forward", "backward", "jump", "none"

        Returns:
            Tuple of (next_observation, reward, episode_done)
        """
        self.steps_taken += 1
        reward = self.config.reward_per_tick

        if action == "forward":
            self.speed += self.ACCELERATION
        elif action == "backward":
            self.speed -= self.ACCELERATION
        elif action == "jump" and self._on_ground():
            self.vertical_speed = self.JUMP_SPEED

        self.speed = max(-self.MAX_SPEED, min(self.MAX_SPEED, self.speed * self.DAMPING))
        old_position = self.position
        self.position += self.speed * self.DT

        self.vertical_speed -= self.GRAVITY * self.DT
        self.height += self.vertical_speed * self.DT
        if self.height <= 0.0 and self._over_ground() and self.height > -0.5:
            # Landed (or still running) on solid track
            self.height = 0.0
            self.vertical_speed = 0.0

        if self.position < 0.0:
            # Ran into the start wall
            self.position = 0.0
            self.speed = 0.0
            reward += self.config.penalty_wall_hit

        if self._hit_obstacle(old_position, self.position):
            self.position = old_position
            self.speed = 0.0
            reward += self.config.penalty_obstacle_hit

        if self.position >= self.layout.length:
            return self.observe(), self.config.reward_goal, True
        if self.height < self.FALL_HEIGHT:
            return self.observe(), self.config.penalty_fall, True
        return self.observe(), reward, False

    def _on_ground(self) -> bool:
        return self.height == 0.0 and self._over_ground()

    def _over_ground(self) -> bool:
        return not any(start <= self.position <= end for start, end in self.layout.gaps)

    def _hit_obstacle(self, old_position: float, new_position: float) -> bool:
        if self.height >= self.layout.obstacle_height:
            return False
        low, high = sorted((old_position, new_position))
        return any(low < obstacle <= high for obstacle in self.layout.obstacles)
