"""Test helpers for Pathly tests.

This module re-exports all helpers for convenient imports:

    from tests.helpers import make_goal, make_reward, make_utc_dt, ms

See builders.py for full documentation.
"""

from tests.helpers.builders import (
    make_goal,
    make_reward,
    make_stats,
    make_utc_dt,
    ms,
)

__all__ = [
    "make_goal",
    "make_reward",
    "make_stats",
    "make_utc_dt",
    "ms",
]
