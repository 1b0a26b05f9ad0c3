"""
Rendering of recorded training sessions as JSON and CSV text.
The JSON form carries everything; the CSV forms are tabular views of the
episode log and of the final Q-table.
"""

import csv
import io
import json
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence

from ..domain.types import TrainingSession, QTableEntry

EPISODE_HEADERS = [
    "Episode", "TotalReward", "Steps", "Outcome", "FinalDistance", "Epsilon", "Timestamp"
]


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def session_to_dict(session: TrainingSession) -> Dict[str, Any]:
    """Convert a session to plain JSON-compatible data."""
    data = asdict(session)
    data["summary"]["success_rate"] = session.summary.success_rate
    return data


def session_to_json(session: TrainingSession) -> str:
    return json.dumps(session_to_dict(session), indent=2)


def episodes_to_csv(session: TrainingSession) -> str:
    """Episode log as CSV, preceded by '#' comment lines describing the session."""
    output = io.StringIO()
    output.write(f"# RL Training Session: {session.session_id}\n")
    output.write(f"# Parameters: {json.dumps(session.hyperparameters, sort_keys=True)}\n")
    output.write(f"# Episodes recorded: {len(session.episodes)}\n")

    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(EPISODE_HEADERS)
    for ep in session.episodes:
        writer.writerow([
            ep.episode_number,
            f"{ep.total_reward:.2f}",
            ep.steps,
            ep.outcome,
            f"{ep.final_distance:.2f}",
            f"{ep.exploration_rate:.4f}",
            _iso(ep.timestamp),
        ])
    return output.getvalue()


def qtable_to_csv(entries: Sequence[QTableEntry]) -> str:
    """One row per state: its action values and how often it was visited."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")

    action_names: List[str] = list(entries[0].action_names) if entries else []
    writer.writerow(["State"] + [f"Action_{name.capitalize()}" for name in action_names] + ["Visits"])
    for entry in entries:
        writer.writerow(
            [entry.state_key]
            + [f"{q:.4f}" for q in entry.action_values]
            + [entry.visit_count]
        )
    return output.getvalue()
