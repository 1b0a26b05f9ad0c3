import pytest

from obstacle_rl.domain.discretizer import Discretizer
from obstacle_rl.domain.learner import QLearner
from obstacle_rl.domain.qtable import ActionValueTable
from obstacle_rl.domain.types import Transition


def _learner():
    table = ActionValueTable()
    discretizer = Discretizer()
    return QLearner(table, discretizer), table, discretizer


def test_terminal_update_moves_toward_reward(make_observation):
    learner, table, discretizer = _learner()
    state, next_state = make_observation(distance=30.0), make_observation(distance=0.0)
    table.values(discretizer.discretize(state))[2] = 4.0

    new_q = learner.learn(Transition(state, "jump", 10.0, next_state, True), 0.5, 0.9)

    assert new_q == pytest.approx(4.0 + 0.5 * (10.0 - 4.0))
    assert table.values(discretizer.discretize(state))[2] == pytest.approx(7.0)


def test_non_terminal_update_uses_max_of_next_state(make_observation):
    learner, table, discretizer = _learner()
    state, next_state = make_observation(distance=30.0), make_observation(distance=20.0)
    table.values(discretizer.discretize(next_state))[:] = [1.0, 3.0, 2.0, 0.0]

    learner.learn(Transition(state, "forward", 1.0, next_state, False), 0.5, 0.9)

    expected = 0.0 + 0.5 * (1.0 + 0.9 * 3.0 - 0.0)
    assert table.values(discretizer.discretize(state))[0] == pytest.approx(expected)
    # Other actions and the next state are untouched
    assert list(table.values(discretizer.discretize(state))[1:]) == [0.0, 0.0, 0.0]
    assert list(table.values(discretizer.discretize(next_state))) == [1.0, 3.0, 2.0, 0.0]


def test_terminal_update_ignores_next_state_values(make_observation):
    learner, table, discretizer = _learner()
    state, next_state = make_observation(distance=30.0), make_observation(distance=20.0)
    table.values(discretizer.discretize(next_state))[:] = [50.0, 50.0, 50.0, 50.0]

    new_q = learner.learn(Transition(state, "none", -5.0, next_state, True), 1.0, 0.9)

    assert new_q == pytest.approx(-5.0)


def test_repeated_updates_converge_to_target(make_observation):
    learner, table, discretizer = _learner()
    state, next_state = make_observation(distance=30.0), make_observation(distance=20.0)
    table.values(discretizer.discretize(next_state))[:] = [2.0, 0.0, 0.0, 0.0]
    transition = Transition(state, "backward", 1.0, next_state, False)
    target = 1.0 + 0.9 * 2.0

    gaps = []
    for _ in range(40):
        gaps.append(abs(learner.learn(transition, 0.3, 0.9) - target))

    assert all(later < earlier for earlier, later in zip(gaps, gaps[1:]))
    assert gaps[-1] < 1e-5


def test_unknown_action_leaves_table_untouched(make_observation):
    learner, table, discretizer = _learner()
    state = make_observation(distance=30.0)

    with pytest.raises(ValueError):
        learner.learn(Transition(state, "fly", 10.0, state, True), 0.5, 0.9)

    assert table.size() == 0
