"""Record builders for Pathly tests.

Builders return complete records with sensible defaults; keyword arguments
override individual fields by their DATA_* key name.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pathly import const
from pathly.utils.dt_utils import dt_to_ms


def make_utc_dt(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
) -> datetime:
    """Create a UTC datetime for testing."""
    return datetime(year, month, day, hour, minute, 0, tzinfo=UTC)


def ms(dt_obj: datetime) -> int:
    """Epoch milliseconds of a datetime."""
    return dt_to_ms(dt_obj)


def make_goal(goal_id: int = 1, **overrides: Any) -> dict[str, Any]:
    """Create a goal record.

    Defaults: increasing 0/10 goal, custom 30-day period, not recurring,
    10 points, created 2024-01-01 10:00 UTC.
    """
    created_at = ms(make_utc_dt(2024, 1, 1))
    goal: dict[str, Any] = {
        const.DATA_GOAL_ID: goal_id,
        const.DATA_GOAL_TITLE: f"Goal {goal_id}",
        const.DATA_GOAL_PARENT_ID: None,
        const.DATA_GOAL_SUB_GOALS: [],
        const.DATA_GOAL_CURRENT: 0,
        const.DATA_GOAL_TARGET: 10,
        const.DATA_GOAL_INITIAL_VALUE: 0,
        const.DATA_GOAL_DIRECTION: const.DIRECTION_INCREASE,
        const.DATA_GOAL_UNIT: "times",
        const.DATA_GOAL_PERIOD: const.PERIOD_CUSTOM,
        const.DATA_GOAL_CUSTOM_PERIOD_DAYS: 30,
        const.DATA_GOAL_PERIOD_START_DATE: created_at,
        const.DATA_GOAL_CREATED_AT: created_at,
        const.DATA_GOAL_IS_RECURRING: False,
        const.DATA_GOAL_IS_COMPLETE: False,
        const.DATA_GOAL_COMPLETED_AT: None,
        const.DATA_GOAL_COMPLETION_HISTORY: [],
        const.DATA_GOAL_IS_PAUSED: False,
        const.DATA_GOAL_IS_ARCHIVED: False,
        const.DATA_GOAL_CURRENT_STREAK: 0,
        const.DATA_GOAL_LONGEST_STREAK: 0,
        const.DATA_GOAL_POINTS: 10,
        const.DATA_GOAL_POINTS_AWARDED: False,
        const.DATA_GOAL_NOTIFICATIONS_ENABLED: False,
        const.DATA_GOAL_NOTIFICATION_TIME: None,
        const.DATA_GOAL_NOTIFICATION_DAYS: list(const.DEFAULT_NOTIFICATION_DAYS),
    }
    goal.update(overrides)
    return goal


def make_reward(reward_id: int = 1, **overrides: Any) -> dict[str, Any]:
    """Create an unredeemed reward record costing 100 points."""
    reward: dict[str, Any] = {
        const.DATA_REWARD_ID: reward_id,
        const.DATA_REWARD_TITLE: f"Reward {reward_id}",
        const.DATA_REWARD_POINTS_COST: 100,
        const.DATA_REWARD_IS_REDEEMED: False,
        const.DATA_REWARD_REDEEMED_AT: None,
        const.DATA_REWARD_CREATED_AT: ms(make_utc_dt(2024, 1, 1)),
    }
    reward.update(overrides)
    return reward


def make_stats(**overrides: Any) -> dict[str, Any]:
    """Create an all-zero Statistics snapshot."""
    stats: dict[str, Any] = {
        const.DATA_STATS_TOTAL_GOALS: 0,
        const.DATA_STATS_COMPLETED_GOALS: 0,
        const.DATA_STATS_TOTAL_POINTS: 0,
        const.DATA_STATS_LIFETIME_POINTS_EARNED: 0,
        const.DATA_STATS_SPENT_POINTS: 0,
        const.DATA_STATS_AVAILABLE_POINTS: 0,
        const.DATA_STATS_CURRENT_STREAK: 0,
        const.DATA_STATS_LONGEST_STREAK: 0,
        const.DATA_STATS_LAST_ACTIVITY_DATE: 0,
        const.DATA_STATS_COMPLETION_RATE: 0.0,
        const.DATA_STATS_ACHIEVEMENTS_UNLOCKED: [],
    }
    stats.update(overrides)
    return stats
