import pytest

from obstacle_rl.domain.errors import ConfigurationError, RLError
from obstacle_rl.domain.types import DEFAULT_BINS, FieldBins, RLConfig


def test_defaults_are_valid():
    config = RLConfig()

    assert config.validate() is config
    assert config.bins == DEFAULT_BINS


@pytest.mark.parametrize("overrides", [
    {"learning_rate": 0.0},
    {"learning_rate": 1.5},
    {"discount_factor": 1.0},
    {"discount_factor": -0.1},
    {"epsilon_decay": 0.0},
    {"epsilon_min": 1.2},
    {"epsilon": 0.01},
    {"max_steps_per_episode": 0},
    {"snapshot_limit": 0},
    {"bins": ()},
    {"bins": (FieldBins("y", "y", -2.0, 4.0, 3),)},
    {"bins": (FieldBins("distance_to_goal", "d", 0.0, 50.0, 20),
              FieldBins("y", "d", -2.0, 4.0, 3))},
])
def test_invalid_settings_are_rejected(overrides):
    with pytest.raises(ConfigurationError):
        RLConfig(**overrides).validate()


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        RLConfig(learning_rate=-1.0).validate()
    assert issubclass(ConfigurationError, RLError)


def test_round_trip_through_dict():
    config = RLConfig(learning_rate=0.2, max_steps_per_episode=None,
                      bins=(FieldBins("distance_to_goal", "d", 0.0, 10.0, 5),))

    data = config.to_dict()
    data["unknown_setting"] = 1

    assert data["bins"][0]["label"] == "d"
    assert RLConfig.from_dict(data) == config


def test_hyperparameters_report_initial_exploration():
    params = RLConfig(epsilon=0.8, epsilon_min=0.1).hyperparameters()

    assert params["initial_epsilon"] == 0.8
    assert params["epsilon_min"] == 0.1
    assert params["reward_goal"] == 100.0
