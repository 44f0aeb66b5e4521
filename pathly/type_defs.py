"""Type definitions for Pathly data structures.

Records are plain dicts keyed by the ``const.DATA_*`` keys so they round-trip
through JSON storage untouched. The TypedDicts below describe those dicts for
static analysis only; nothing here is enforced at runtime, so engines keep
using ``.get()`` with defaults when reading records.

IMPORTANT: This file must NOT import from coordinator.py or the engines.
Only typing machinery is imported here.
"""

from typing import Any, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

GoalId = int
RewardId = int
AchievementId = str
EpochMs = int  # Milliseconds since the Unix epoch


# =============================================================================
# Persisted Entity Types
# =============================================================================


class GoalData(TypedDict):
    """Type definition for a goal record.

    Created via data_builders.build_goal() and normalized on load by
    data_builders.normalize_goal().
    """

    # Identification and hierarchy
    id: GoalId
    title: str
    parent_id: NotRequired[GoalId | None]
    sub_goals: list[GoalId]  # Non-empty => progress is derived from children

    # Quantity
    current: float
    target: float
    initial_value: NotRequired[float | None]  # Required for decreasing goals
    direction: str  # "increase" | "decrease"
    unit: str

    # Scheduling
    period: str  # daily | weekly | monthly | yearly | custom | ongoing
    custom_period_days: NotRequired[int | None]
    period_start_date: NotRequired[EpochMs | None]
    created_at: NotRequired[EpochMs]

    # Recurrence and completion
    is_recurring: bool
    is_complete: bool
    completed_at: NotRequired[EpochMs | None]
    completion_history: list[EpochMs]  # Append-only

    # Lifecycle flags
    is_paused: bool
    is_archived: bool

    # Streak cache (recomputed by StreakEngine, never hand-edited)
    current_streak: int
    longest_streak: int

    # Reward
    points: int
    points_awarded: NotRequired[bool]  # Paid out for the current period

    # Reminder fields consumed by an external scheduler
    notifications_enabled: NotRequired[bool]
    notification_time: NotRequired[int | None]  # Minutes after local midnight
    notification_days: NotRequired[list[int]]  # 0 = Sunday ... 6 = Saturday


class RewardData(TypedDict):
    """Type definition for a reward record."""

    id: RewardId
    title: str
    points_cost: int
    is_redeemed: bool
    redeemed_at: NotRequired[EpochMs | None]
    created_at: NotRequired[EpochMs]


class AchievementRequirement(TypedDict):
    """Requirement of an achievement catalog entry."""

    type: str  # goals_completed | points_earned | streak_days
    value: float


class AchievementData(TypedDict):
    """Static achievement catalog entry."""

    id: AchievementId
    name: str
    requirement: AchievementRequirement


# =============================================================================
# Ephemeral / Computed Types
# =============================================================================


class StatisticsData(TypedDict):
    """Statistics snapshot produced by StatisticsEngine.calculate_statistics().

    Recomputed on demand; only achievements_unlocked is ever persisted.
    """

    total_goals: int
    completed_goals: int
    total_points: float
    lifetime_points_earned: int
    spent_points: float
    available_points: float
    current_streak: int
    longest_streak: int
    last_activity_date: EpochMs
    completion_rate: float
    achievements_unlocked: list[AchievementId]


class TimeRemaining(TypedDict):
    """Time-remaining breakdown produced by PeriodEngine.time_remaining()."""

    days: float  # math.inf for ongoing goals
    hours: int
    minutes: int
    is_expired: bool
    total_ms: float  # math.inf for ongoing goals


class StreakResult(TypedDict):
    """Streak counts in period units."""

    current_streak: int
    longest_streak: int


class EvaluationResult(TypedDict):
    """The verdict on a single achievement.

    Returned by GamificationEngine.evaluate_achievement(). Progress is a
    percentage in [0, 100].
    """

    entity_id: AchievementId
    entity_name: str
    criteria_met: bool
    progress: float
    current_value: float
    threshold: float
    reason: str


class ReviewPeriod(TypedDict):
    """A closed review window in epoch milliseconds."""

    start_date: EpochMs
    end_date: EpochMs
    label: str


class ReviewStatistics(TypedDict):
    """Completion summary for a review window."""

    goals_completed: int
    total_goals: int
    completion_rate: float
    points_earned: float
    completed_goal_ids: list[GoalId]


class NotificationRequest(TypedDict):
    """Reminder payload handed to an external notification scheduler."""

    goal_id: GoalId
    title: str
    notification_time: int  # Minutes after local midnight
    notification_days: list[int]  # 0 = Sunday ... 6 = Saturday


# Storage file layout: {meta, goals, rewards, lifetime_points, achievements_unlocked}
StorageData = dict[str, Any]
