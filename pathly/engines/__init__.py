"""Engine modules for Pathly.

Contains stateless computation engines:
- period_engine: Period boundaries and time remaining
- progress_engine: Progress percentages and subgoal aggregation
- recurrence_engine: Recurring goal archive-and-reset
- streak_engine: Consecutive-period streaks
- statistics_engine: Statistics snapshots and review windows
- gamification_engine: Achievement progress and unlock diffs
- economy_engine: Points and reward redemption
"""

# Use relative imports within package to avoid mypy module resolution issues
from .economy_engine import (
    EconomyEngine,
    InsufficientFundsError,
    RewardAlreadyRedeemedError,
)
from .gamification_engine import GamificationEngine
from .period_engine import PeriodEngine
from .progress_engine import GoalHierarchyError, ProgressEngine
from .recurrence_engine import RecurrenceEngine
from .statistics_engine import StatisticsEngine
from .streak_engine import StreakEngine

__all__ = [
    "EconomyEngine",
    "GamificationEngine",
    "GoalHierarchyError",
    "InsufficientFundsError",
    "PeriodEngine",
    "ProgressEngine",
    "RecurrenceEngine",
    "RewardAlreadyRedeemedError",
    "StatisticsEngine",
    "StreakEngine",
]
