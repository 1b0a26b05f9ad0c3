import csv
import io
import json

import pytest

from obstacle_rl.domain.telemetry import TelemetryRecorder
from obstacle_rl.domain.types import EpisodeRecord, QTableEntry, StepRecord
from obstacle_rl.utils.session_export import (
    EPISODE_HEADERS, episodes_to_csv, qtable_to_csv, session_to_json
)


@pytest.fixture
def session(make_observation):
    recorder = TelemetryRecorder()
    recorder.start_session({"learning_rate": 0.1, "initial_epsilon": 1.0})
    recorder.record_step(StepRecord(0, 1, "d16_y1_x1_v1", "forward", -0.01,
                                    make_observation(distance=40.0), (0.0, 0.0, 0.0, 0.0),
                                    1.0, 0.0))
    recorder.record_episode(EpisodeRecord(0, 99.99, 1, "goal", 0.0, 1.0, 0.0))
    recorder.record_episode(EpisodeRecord(1, -50.0, 7, "fall", 26.456, 0.99, 60.0))
    entries = [
        QTableEntry("d16_y1_x1_v1", (1.0, -0.5, 0.25, 0.0), ("forward", "backward", "jump", "none"), 4),
    ]
    return recorder.finish_session(entries, 0.98)


def _rows(text):
    return list(csv.reader(io.StringIO(text)))


def test_json_contains_everything(session):
    data = json.loads(session_to_json(session))

    assert data["session_id"] == session.session_id
    assert data["hyperparameters"]["learning_rate"] == 0.1
    assert len(data["episodes"]) == 2
    assert data["steps"][0]["observation"]["distance_to_goal"] == 40.0
    assert data["final_q_table"][0]["visit_count"] == 4
    assert data["summary"]["total_episodes"] == 2
    assert data["summary"]["success_rate"] == 0.5


def test_episode_csv(session):
    lines = episodes_to_csv(session).splitlines()

    comments = [line for line in lines if line.startswith("#")]
    assert comments[0] == f"# RL Training Session: {session.session_id}"
    assert comments[2] == "# Episodes recorded: 2"

    rows = _rows("\n".join(line for line in lines if not line.startswith("#")))
    assert rows[0] == EPISODE_HEADERS
    assert rows[1][:6] == ["0", "99.99", "1", "goal", "0.00", "1.0000"]
    assert rows[2][:6] == ["1", "-50.00", "7", "fall", "26.46", "0.9900"]
    assert rows[2][6] == "1970-01-01T00:01:00+00:00"


def test_qtable_csv(session):
    rows = _rows(qtable_to_csv(session.final_q_table))

    assert rows[0] == ["State", "Action_Forward", "Action_Backward", "Action_Jump",
                       "Action_None", "Visits"]
    assert rows[1] == ["d16_y1_x1_v1", "1.0000", "-0.5000", "0.2500", "0.0000", "4"]


def test_empty_qtable_csv_has_only_header():
    assert _rows(qtable_to_csv([])) == [["State", "Visits"]]
