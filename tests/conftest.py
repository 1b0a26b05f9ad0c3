import pytest

from obstacle_rl.domain.types import Observation


@pytest.fixture
def make_observation():
    def _make(distance: float = 25.0, y: float = 0.0, x: float = 0.0,
              velocity_z: float = 0.0) -> Observation:
        return Observation(
            x=x,
            y=y,
            velocity_x=0.0,
            velocity_y=0.0,
            velocity_z=velocity_z,
            distance_to_goal=distance,
        )

    return _make
