# File: const.py
"""Constants for the Pathly goal tracker.

This file centralizes storage keys, record field keys, period kinds,
achievement requirement types, the achievement catalog, and defaults so the
engines, the store, and the coordinator agree on a single vocabulary.
"""

import logging
from typing import Final

# ------------------------------------------------------------------------------------------------
# General
# ------------------------------------------------------------------------------------------------
# Logger
LOGGER = logging.getLogger(__package__)

# ------------------------------------------------------------------------------------------------
# Storage and Versioning
# ------------------------------------------------------------------------------------------------
STORAGE_VERSION = 1

# Top-level storage keys (one key per collection, one scalar for lifetime points)
STORAGE_KEY_META = "meta"
STORAGE_KEY_GOALS = "goals"
STORAGE_KEY_REWARDS = "rewards"
STORAGE_KEY_LIFETIME_POINTS = "lifetime_points"
STORAGE_KEY_ACHIEVEMENTS_UNLOCKED = "achievements_unlocked"

DATA_META_STORAGE_VERSION = "storage_version"
DATA_META_LAST_SAVED = "last_saved"

# ------------------------------------------------------------------------------------------------
# Goal Record Keys
# ------------------------------------------------------------------------------------------------
DATA_GOAL_ID = "id"
DATA_GOAL_TITLE = "title"
DATA_GOAL_PARENT_ID = "parent_id"
DATA_GOAL_SUB_GOALS = "sub_goals"
DATA_GOAL_CURRENT = "current"
DATA_GOAL_TARGET = "target"
DATA_GOAL_INITIAL_VALUE = "initial_value"
DATA_GOAL_DIRECTION = "direction"
DATA_GOAL_UNIT = "unit"
DATA_GOAL_PERIOD = "period"
DATA_GOAL_CUSTOM_PERIOD_DAYS = "custom_period_days"
DATA_GOAL_PERIOD_START_DATE = "period_start_date"
DATA_GOAL_CREATED_AT = "created_at"
DATA_GOAL_IS_RECURRING = "is_recurring"
DATA_GOAL_IS_COMPLETE = "is_complete"
DATA_GOAL_COMPLETED_AT = "completed_at"
DATA_GOAL_COMPLETION_HISTORY = "completion_history"
DATA_GOAL_IS_PAUSED = "is_paused"
DATA_GOAL_IS_ARCHIVED = "is_archived"
DATA_GOAL_CURRENT_STREAK = "current_streak"
DATA_GOAL_LONGEST_STREAK = "longest_streak"
DATA_GOAL_POINTS = "points"
DATA_GOAL_POINTS_AWARDED = "points_awarded"
DATA_GOAL_NOTIFICATIONS_ENABLED = "notifications_enabled"
DATA_GOAL_NOTIFICATION_TIME = "notification_time"
DATA_GOAL_NOTIFICATION_DAYS = "notification_days"

# ------------------------------------------------------------------------------------------------
# Reward Record Keys
# ------------------------------------------------------------------------------------------------
DATA_REWARD_ID = "id"
DATA_REWARD_TITLE = "title"
DATA_REWARD_POINTS_COST = "points_cost"
DATA_REWARD_IS_REDEEMED = "is_redeemed"
DATA_REWARD_REDEEMED_AT = "redeemed_at"
DATA_REWARD_CREATED_AT = "created_at"

# ------------------------------------------------------------------------------------------------
# Statistics Snapshot Keys
# ------------------------------------------------------------------------------------------------
DATA_STATS_TOTAL_GOALS = "total_goals"
DATA_STATS_COMPLETED_GOALS = "completed_goals"
DATA_STATS_TOTAL_POINTS = "total_points"
DATA_STATS_LIFETIME_POINTS_EARNED = "lifetime_points_earned"
DATA_STATS_SPENT_POINTS = "spent_points"
DATA_STATS_AVAILABLE_POINTS = "available_points"
DATA_STATS_CURRENT_STREAK = "current_streak"
DATA_STATS_LONGEST_STREAK = "longest_streak"
DATA_STATS_LAST_ACTIVITY_DATE = "last_activity_date"
DATA_STATS_COMPLETION_RATE = "completion_rate"
DATA_STATS_ACHIEVEMENTS_UNLOCKED = "achievements_unlocked"

# ------------------------------------------------------------------------------------------------
# Goal Direction
# ------------------------------------------------------------------------------------------------
DIRECTION_INCREASE = "increase"
DIRECTION_DECREASE = "decrease"

DIRECTIONS: Final[tuple[str, ...]] = (DIRECTION_INCREASE, DIRECTION_DECREASE)

# ------------------------------------------------------------------------------------------------
# Periods
# ------------------------------------------------------------------------------------------------
PERIOD_DAILY = "daily"
PERIOD_WEEKLY = "weekly"
PERIOD_MONTHLY = "monthly"
PERIOD_YEARLY = "yearly"
PERIOD_CUSTOM = "custom"
PERIOD_ONGOING = "ongoing"

PERIOD_KINDS: Final[tuple[str, ...]] = (
    PERIOD_DAILY,
    PERIOD_WEEKLY,
    PERIOD_MONTHLY,
    PERIOD_YEARLY,
    PERIOD_CUSTOM,
    PERIOD_ONGOING,
)

# Period for new goals without one and for records persisted before periods
# existed. A custom period needs a day count, so it cannot be the fallback.
DEFAULT_PERIOD = PERIOD_ONGOING

# Review windows
REVIEW_THIS_WEEK = "this_week"
REVIEW_LAST_WEEK = "last_week"
REVIEW_THIS_MONTH = "this_month"
REVIEW_LAST_MONTH = "last_month"

# ------------------------------------------------------------------------------------------------
# Recurrence States
# ------------------------------------------------------------------------------------------------
RECURRENCE_STATE_ACTIVE = "active"
RECURRENCE_STATE_COMPLETE_PENDING_RESET = "complete_pending_reset"
RECURRENCE_STATE_ELAPSED = "elapsed"

# ------------------------------------------------------------------------------------------------
# Achievements
# ------------------------------------------------------------------------------------------------
DATA_ACHIEVEMENT_ID = "id"
DATA_ACHIEVEMENT_NAME = "name"
DATA_ACHIEVEMENT_REQUIREMENT = "requirement"
DATA_ACHIEVEMENT_REQUIREMENT_TYPE = "type"
DATA_ACHIEVEMENT_REQUIREMENT_VALUE = "value"

ACHIEVEMENT_TYPE_GOALS_COMPLETED = "goals_completed"
ACHIEVEMENT_TYPE_POINTS_EARNED = "points_earned"
ACHIEVEMENT_TYPE_STREAK_DAYS = "streak_days"

# Requirement type -> statistics field it is measured against
ACHIEVEMENT_TYPE_TO_STAT: Final[dict[str, str]] = {
    ACHIEVEMENT_TYPE_GOALS_COMPLETED: DATA_STATS_COMPLETED_GOALS,
    ACHIEVEMENT_TYPE_POINTS_EARNED: DATA_STATS_LIFETIME_POINTS_EARNED,
    ACHIEVEMENT_TYPE_STREAK_DAYS: DATA_STATS_CURRENT_STREAK,
}

ACHIEVEMENT_FIRST_GOAL = "first_goal"
ACHIEVEMENT_GOAL_MASTER = "goal_master"
ACHIEVEMENT_CENTURY_CLUB = "century_club"
ACHIEVEMENT_POINT_COLLECTOR = "point_collector"
ACHIEVEMENT_POINT_LEGEND = "point_legend"
ACHIEVEMENT_WEEK_WARRIOR = "week_warrior"
ACHIEVEMENT_MONTH_CHAMPION = "month_champion"
ACHIEVEMENT_UNSTOPPABLE = "unstoppable"


def _achievement(
    achievement_id: str, name: str, requirement_type: str, value: int
) -> dict:
    return {
        DATA_ACHIEVEMENT_ID: achievement_id,
        DATA_ACHIEVEMENT_NAME: name,
        DATA_ACHIEVEMENT_REQUIREMENT: {
            DATA_ACHIEVEMENT_REQUIREMENT_TYPE: requirement_type,
            DATA_ACHIEVEMENT_REQUIREMENT_VALUE: value,
        },
    }


# Immutable catalog; order is the order newly unlocked ids are reported in
ACHIEVEMENTS: Final[tuple[dict, ...]] = (
    _achievement(
        ACHIEVEMENT_FIRST_GOAL, "First Goal", ACHIEVEMENT_TYPE_GOALS_COMPLETED, 1
    ),
    _achievement(
        ACHIEVEMENT_GOAL_MASTER, "Goal Master", ACHIEVEMENT_TYPE_GOALS_COMPLETED, 10
    ),
    _achievement(
        ACHIEVEMENT_CENTURY_CLUB,
        "Century Club",
        ACHIEVEMENT_TYPE_GOALS_COMPLETED,
        100,
    ),
    _achievement(
        ACHIEVEMENT_POINT_COLLECTOR,
        "Point Collector",
        ACHIEVEMENT_TYPE_POINTS_EARNED,
        1000,
    ),
    _achievement(
        ACHIEVEMENT_POINT_LEGEND, "Point Legend", ACHIEVEMENT_TYPE_POINTS_EARNED, 10000
    ),
    _achievement(
        ACHIEVEMENT_WEEK_WARRIOR, "Week Warrior", ACHIEVEMENT_TYPE_STREAK_DAYS, 7
    ),
    _achievement(
        ACHIEVEMENT_MONTH_CHAMPION,
        "Month Champion",
        ACHIEVEMENT_TYPE_STREAK_DAYS,
        30,
    ),
    _achievement(
        ACHIEVEMENT_UNSTOPPABLE, "Unstoppable", ACHIEVEMENT_TYPE_STREAK_DAYS, 100
    ),
)

# ------------------------------------------------------------------------------------------------
# Notifications
# ------------------------------------------------------------------------------------------------
# Weekday numbering for notification days: 0 = Sunday ... 6 = Saturday
DEFAULT_NOTIFICATION_DAYS: Final[tuple[int, ...]] = (0, 1, 2, 3, 4, 5, 6)
MINUTES_PER_DAY = 1440

# ------------------------------------------------------------------------------------------------
# Numeric
# ------------------------------------------------------------------------------------------------
DATA_FLOAT_PRECISION = 2
PROGRESS_MIN = 0.0
PROGRESS_MAX = 100.0

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR

DEFAULT_ZERO = 0
