import json

import pytest

from obstacle_rl.__main__ import main, parse_gaps


def test_parse_gaps():
    assert parse_gaps("12-14,25-27") == ((12.0, 14.0), (25.0, 27.0))
    assert parse_gaps("") == ()


def test_training_run_writes_exports(tmp_path, capsys):
    session_file = tmp_path / "session.json"
    episodes_file = tmp_path / "episodes.csv"
    qtable_file = tmp_path / "qtable.csv"

    exit_code = main([
        "--episodes", "4", "--seed", "3", "--max-steps", "150", "--progress-interval", "2",
        "--export-json", str(session_file),
        "--export-csv", str(episodes_file),
        "--export-qtable", str(qtable_file),
    ])

    assert exit_code == 0
    assert "Training completed" in capsys.readouterr().out
    assert json.loads(session_file.read_text())["summary"]["total_episodes"] == 4
    assert episodes_file.read_text().startswith("# RL Training Session")
    assert qtable_file.read_text().startswith("State,Action_Forward")


def test_invalid_hyperparameters_exit_with_error(capsys):
    assert main(["--episodes", "1", "--learning-rate", "0"]) == 1
    assert "Training aborted" in capsys.readouterr().out


def test_unknown_flag_is_rejected():
    with pytest.raises(SystemExit):
        main(["--no-such-flag"])
