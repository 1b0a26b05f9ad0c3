from collections import Counter

from obstacle_rl.domain.discretizer import Discretizer
from obstacle_rl.domain.policy import EpsilonGreedyPolicy
from obstacle_rl.domain.qtable import ActionValueTable
from obstacle_rl.domain.types import DEFAULT_ACTIONS
from obstacle_rl.utils.rng import SeededRNG


def _policy(seed: int = 0):
    table = ActionValueTable()
    discretizer = Discretizer()
    return EpsilonGreedyPolicy(table, discretizer, SeededRNG(seed)), table, discretizer


def test_full_exploration_is_roughly_uniform(make_observation):
    policy, table, discretizer = _policy(seed=11)
    observation = make_observation()
    table.values(discretizer.discretize(observation))[0] = 100.0

    counts = Counter(policy.choose_action(observation, 1.0) for _ in range(8000))

    assert set(counts) == set(DEFAULT_ACTIONS)
    for action in DEFAULT_ACTIONS:
        assert 1700 <= counts[action] <= 2300


def test_greedy_choice_returns_the_strictly_best_action(make_observation):
    policy, table, discretizer = _policy(seed=3)
    observation = make_observation()
    table.values(discretizer.discretize(observation))[:] = [0.5, -1.0, 2.0, 1.9]

    actions = {policy.choose_action(observation, 0.0) for _ in range(200)}

    assert actions == {DEFAULT_ACTIONS[2]}


def test_ties_are_broken_at_random(make_observation):
    policy, table, discretizer = _policy(seed=5)
    observation = make_observation()
    table.values(discretizer.discretize(observation))[:] = [4.0, -1.0, -1.0, 4.0]

    counts = Counter(policy.choose_action(observation, 0.0) for _ in range(400))

    assert set(counts) == {"forward", "none"}
    assert counts["forward"] > 100
    assert counts["none"] > 100


def test_unseen_state_gets_an_entry_without_value_changes(make_observation):
    policy, table, discretizer = _policy()
    observation = make_observation(distance=3.0)

    action = policy.choose_action(observation, 0.0)

    assert action in DEFAULT_ACTIONS
    assert table.size() == 1
    assert list(table.values(discretizer.discretize(observation))) == [0.0] * 4


def test_same_seed_gives_same_choices(make_observation):
    observation = make_observation()
    first, _, _ = _policy(seed=42)
    second, _, _ = _policy(seed=42)

    assert ([first.choose_action(observation, 0.5) for _ in range(50)]
            == [second.choose_action(observation, 0.5) for _ in range(50)])
