"""Obstacle Course RL - tabular Q-learning for an obstacle course runner.

This package implements a Q-Learning agent that learns to traverse an obstacle
course by trial and error, together with the episode orchestration and the
telemetry recording used to analyse training runs.
"""

__version__ = "1.0.0"
__author__ = "Obstacle Course RL"
