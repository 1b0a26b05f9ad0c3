#!/usr/bin/env python3
"""
Launch script for headless obstacle course training.
Equivalent to `python -m obstacle_rl`.
"""

import sys

from obstacle_rl.__main__ import main

if __name__ == "__main__":
    sys.exit(main())
