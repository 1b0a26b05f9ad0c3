from obstacle_rl.app.fsm import (
    EpisodePhase, EpisodeStateMachine, SessionState, SessionStateMachine
)


def test_episode_phases_cycle_in_order():
    phase = EpisodeStateMachine()

    assert not phase.complete()
    assert phase.begin()
    assert phase.is_stepping()
    assert not phase.begin()
    assert phase.complete()
    assert phase.current_state == EpisodePhase.EPISODE_COMPLETE
    assert phase.rearm()
    assert phase.is_awaiting_first_observation()


def test_session_pause_and_resume():
    session = SessionStateMachine()

    assert not session.pause()
    assert not session.resume()
    assert session.start_training()
    assert session.pause()
    assert session.is_paused()
    assert not session.start_training()
    assert session.resume()
    assert session.is_training()
    assert session.reset_to_idle()
    assert session.current_state == SessionState.IDLE
