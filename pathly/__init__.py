"""Pathly - goal tracking core.

Stateless engines for periods, progress, recurrence, streaks, statistics,
achievements, and rewards, plus a JSON file store and a coordinator that
runs the load / compute / persist cycle.
"""

from .coordinator import PathlyCoordinator
from .exceptions import (
    GoalHierarchyError,
    GoalNotFoundError,
    InsufficientFundsError,
    PathlyError,
    RewardAlreadyRedeemedError,
    RewardNotFoundError,
    StorageError,
)
from .store import PathlyStore

__version__ = "0.1.0"

__all__ = [
    "GoalHierarchyError",
    "GoalNotFoundError",
    "InsufficientFundsError",
    "PathlyCoordinator",
    "PathlyError",
    "PathlyStore",
    "RewardAlreadyRedeemedError",
    "RewardNotFoundError",
    "StorageError",
]
