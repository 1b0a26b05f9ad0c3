"""Headless training entry point for the obstacle course agent."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .app.controller import TrainingController
from .domain.errors import RLError
from .domain.types import RLConfig
from .sim.course import CourseLayout, ObstacleCourse
from .utils.session_export import session_to_json, episodes_to_csv, qtable_to_csv


def parse_gaps(text: str):
    """Parse 'start-end,start-end' into gap intervals."""
    gaps = []
    for part in filter(None, text.split(",")):
        start, end = part.split("-")
        gaps.append((float(start), float(end)))
    return tuple(gaps)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Train a Q-learning agent on an obstacle course")
    parser.add_argument("--episodes", type=int, default=500, help="Number of episodes to train")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible runs")
    parser.add_argument("--learning-rate", type=float, default=0.1)
    parser.add_argument("--discount-factor", type=float, default=0.95)
    parser.add_argument("--epsilon-decay", type=float, default=0.99)
    parser.add_argument("--epsilon-min", type=float, default=0.05)
    parser.add_argument("--max-steps", type=int, default=1000, help="Step budget per episode")
    parser.add_argument("--length", type=float, default=40.0, help="Course length")
    parser.add_argument("--gaps", type=parse_gaps, default=CourseLayout().gaps,
                        help="Gaps as start-end pairs, e.g. 12-14,25-27")
    parser.add_argument("--progress-interval", type=int, default=50,
                        help="Episodes between progress lines")
    parser.add_argument("--export-json", type=Path, help="Write the session as JSON")
    parser.add_argument("--export-csv", type=Path, help="Write the episode log as CSV")
    parser.add_argument("--export-qtable", type=Path, help="Write the final Q-table as CSV")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for headless training."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("🧠 Obstacle Course Q-Learning")
    print("=" * 50)

    try:
        config = RLConfig(
            learning_rate=args.learning_rate,
            discount_factor=args.discount_factor,
            epsilon_decay=args.epsilon_decay,
            epsilon_min=args.epsilon_min,
            max_steps_per_episode=args.max_steps,
        )
        layout = CourseLayout(length=args.length, gaps=args.gaps)
        controller = TrainingController(ObstacleCourse(config, layout), config, seed=args.seed)

        print(f"📐 Course length: {layout.length}, gaps: {list(layout.gaps)}")
        print(f"⚙️  Learning rate: {config.learning_rate}, discount: {config.discount_factor}")
        print(f"   Epsilon: {config.epsilon} → {config.epsilon_min} (decay {config.epsilon_decay})")
        print(f"\n🚀 Training for {args.episodes} episodes...")

        controller.start_training()
        completed = 0
        while completed < args.episodes:
            batch = min(args.progress_interval, args.episodes - completed)
            recent = controller.run(batch)
            if not recent:
                break
            completed += len(recent)
            goals = sum(1 for ep in recent if ep.outcome == "goal")
            stats = controller.live_stats()
            print(f"Episode {completed}: Success rate: {goals / len(recent):.1%}, "
                  f"Epsilon: {stats.exploration_rate:.3f}, States: {stats.q_table_size}")

        session = controller.stop_training()
    except RLError as e:
        print(f"\n❌ Training aborted: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n⏹️  Training interrupted by user")
        return 1

    summary = session.summary
    print("\n🎉 Training completed!")
    print(f"   Total episodes: {summary.total_episodes}")
    print(f"   Successful episodes: {summary.successful_episodes}")
    print(f"   Success rate: {summary.success_rate:.1%}")
    print(f"   Average reward: {summary.average_reward:.2f}")
    print(f"   Average steps to goal: {summary.average_steps_to_goal:.1f}")
    print(f"   States explored: {summary.states_explored}")
    print(f"   Final epsilon: {summary.final_exploration_rate:.3f}")

    if args.export_json:
        args.export_json.write_text(session_to_json(session))
        print(f"📁 Session written to {args.export_json}")
    if args.export_csv:
        args.export_csv.write_text(episodes_to_csv(session))
        print(f"📁 Episode log written to {args.export_csv}")
    if args.export_qtable:
        args.export_qtable.write_text(qtable_to_csv(session.final_q_table))
        print(f"📁 Q-table written to {args.export_qtable}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
