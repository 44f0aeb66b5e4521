"""Statistics Engine - Snapshot aggregation over goals and rewards.

Reduces the goal list, the reward list, and the lifetime-points counter into
one Statistics snapshot, and summarizes review windows (this/last week,
this/last month).

Counting rules:
    - Only top-level (no parent_id), unpaused goals count. Archived goals
      still count; only pausing excludes.
    - Subgoal points never contribute directly.
    - Recurring goals contribute ``points × (archived completions + current)``.
    - completion_rate is 0 when there are no goals (no division by zero).
    - lifetime_points_earned is passed through verbatim; total_points is the
      instantaneous view derived from goals.

Design Principles:
    - Stateless: operates on passed data structures, returns new dicts
    - Ephemeral: snapshots are recomputed on demand; only the unlocked
      achievement ids are carried over from the previous snapshot
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from dateutil.relativedelta import relativedelta

from .. import const
from ..utils.dt_utils import (
    dt_now_utc,
    dt_to_ms,
    end_of_local_date,
    local_date,
    start_of_local_date,
)
from ..utils.math_utils import calculate_percentage, round_points
from .economy_engine import EconomyEngine
from .recurrence_engine import RecurrenceEngine
from .streak_engine import StreakEngine

if TYPE_CHECKING:
    from collections.abc import Iterable
    from zoneinfo import ZoneInfo

    from ..type_defs import (
        GoalData,
        ReviewPeriod,
        ReviewStatistics,
        RewardData,
        StatisticsData,
    )


class StatisticsEngine:
    """Unified engine for statistics snapshots.

    All methods are static and operate on data passed as arguments.
    The engine does NOT persist data; the caller is responsible for persistence.

    Example:
        stats = StatisticsEngine.calculate_statistics(goals, rewards, 1200)
        stats["completion_rate"]  # 40.0
    """

    # ────────────────────────────────────────────────────────────────
    # Filtering
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def filter_active_top_level(goals: Iterable[GoalData]) -> list[GoalData]:
        """Top-level goals that are not paused (archived goals are kept)."""
        return [
            goal
            for goal in goals
            if goal.get(const.DATA_GOAL_PARENT_ID) is None
            and not goal.get(const.DATA_GOAL_IS_PAUSED)
        ]

    # ────────────────────────────────────────────────────────────────
    # Snapshot
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def goal_points(goal: GoalData) -> float:
        """Points a top-level goal contributes to total_points."""
        points = goal.get(const.DATA_GOAL_POINTS, 0)
        if goal.get(const.DATA_GOAL_IS_RECURRING) and goal.get(
            const.DATA_GOAL_COMPLETION_HISTORY
        ):
            return RecurrenceEngine.get_total_points_earned(goal)
        return points if goal.get(const.DATA_GOAL_IS_COMPLETE) else 0

    @staticmethod
    def calculate_statistics(
        goals: Iterable[GoalData],
        rewards: Iterable[RewardData] = (),
        lifetime_points_earned: float = 0,
        achievements_unlocked: Iterable[str] | None = None,
        now: datetime | None = None,
        tz: ZoneInfo | None = None,
    ) -> StatisticsData:
        """Build a Statistics snapshot.

        Args:
            goals: All goal records
            rewards: All reward records
            lifetime_points_earned: Caller-tracked all-time points total
            achievements_unlocked: Previously persisted unlocked ids to carry over
            now: Reference time for streaks
            tz: Optional timezone override for local-day buckets

        Returns:
            StatisticsData snapshot
        """
        active = StatisticsEngine.filter_active_top_level(goals)
        completed = [goal for goal in active if goal.get(const.DATA_GOAL_IS_COMPLETE)]

        total_goals = len(active)
        completed_goals = len(completed)
        total_points = round_points(
            sum(StatisticsEngine.goal_points(goal) for goal in active)
        )
        completion_rate = calculate_percentage(completed_goals, total_goals)

        spent_points = EconomyEngine.calculate_spent_points(rewards)

        streak = StreakEngine.calculate_population_streak(completed, now=now, tz=tz)
        current_streak = streak["current_streak"]
        longest_streak = streak["longest_streak"]
        for goal in active:
            if goal.get(const.DATA_GOAL_IS_RECURRING):
                current_streak = max(
                    current_streak, goal.get(const.DATA_GOAL_CURRENT_STREAK) or 0
                )
                longest_streak = max(
                    longest_streak, goal.get(const.DATA_GOAL_LONGEST_STREAK) or 0
                )
        longest_streak = max(longest_streak, current_streak)

        activity = [
            timestamp
            for goal in active
            for timestamp in StreakEngine.completion_timestamps(goal)
        ]

        return {
            const.DATA_STATS_TOTAL_GOALS: total_goals,
            const.DATA_STATS_COMPLETED_GOALS: completed_goals,
            const.DATA_STATS_TOTAL_POINTS: total_points,
            const.DATA_STATS_LIFETIME_POINTS_EARNED: lifetime_points_earned,
            const.DATA_STATS_SPENT_POINTS: spent_points,
            const.DATA_STATS_AVAILABLE_POINTS: EconomyEngine.calculate_available_points(
                lifetime_points_earned, spent_points
            ),
            const.DATA_STATS_CURRENT_STREAK: current_streak,
            const.DATA_STATS_LONGEST_STREAK: longest_streak,
            const.DATA_STATS_LAST_ACTIVITY_DATE: max(activity, default=0),
            const.DATA_STATS_COMPLETION_RATE: completion_rate,
            const.DATA_STATS_ACHIEVEMENTS_UNLOCKED: list(achievements_unlocked or []),
        }  # type: ignore[return-value]

    # ────────────────────────────────────────────────────────────────
    # Review Windows
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def get_review_period(
        review_kind: str,
        now: datetime | None = None,
        tz: ZoneInfo | None = None,
    ) -> ReviewPeriod:
        """Return the closed window for a const.REVIEW_* kind.

        Weeks start on Sunday. Windows open at 00:00 local and close at
        23:59:59.999 local.

        Raises:
            ValueError: unknown review kind
        """
        today = local_date(now or dt_now_utc(), tz)

        if review_kind in (const.REVIEW_THIS_WEEK, const.REVIEW_LAST_WEEK):
            # weekday(): Monday = 0 ... Sunday = 6
            first_day = today - timedelta(days=(today.weekday() + 1) % 7)
            if review_kind == const.REVIEW_LAST_WEEK:
                first_day -= timedelta(days=7)
            last_day = first_day + timedelta(days=6)
            label = "This Week" if review_kind == const.REVIEW_THIS_WEEK else "Last Week"
        elif review_kind in (const.REVIEW_THIS_MONTH, const.REVIEW_LAST_MONTH):
            first_day = today.replace(day=1)
            if review_kind == const.REVIEW_LAST_MONTH:
                first_day -= relativedelta(months=1)
            last_day = first_day + relativedelta(months=1) - timedelta(days=1)
            label = (
                "This Month" if review_kind == const.REVIEW_THIS_MONTH else "Last Month"
            )
        else:
            raise ValueError(f"Unknown review period: {review_kind}")

        return {
            "start_date": dt_to_ms(start_of_local_date(first_day, tz)),
            "end_date": dt_to_ms(end_of_local_date(last_day, tz)),
            "label": label,
        }

    @staticmethod
    def calculate_review_statistics(
        goals: Iterable[GoalData],
        period: ReviewPeriod,
    ) -> ReviewStatistics:
        """Summarize goal completions inside a review window.

        A goal counts toward the total if it existed by the window's end and
        is not archived; it counts as completed if completed_at falls inside
        the window.
        """
        goals = list(goals)
        start = period["start_date"]
        end = period["end_date"]

        completed_in_period = [
            goal
            for goal in goals
            if goal.get(const.DATA_GOAL_COMPLETED_AT) is not None
            and start <= goal[const.DATA_GOAL_COMPLETED_AT] <= end
        ]
        active_in_period = [
            goal
            for goal in goals
            if goal.get(const.DATA_GOAL_CREATED_AT, 0) <= end
            and not goal.get(const.DATA_GOAL_IS_ARCHIVED)
        ]

        total_goals = len(active_in_period)
        return {
            "goals_completed": len(completed_in_period),
            "total_goals": total_goals,
            "completion_rate": calculate_percentage(
                len(completed_in_period), total_goals
            ),
            "points_earned": round_points(
                sum(goal.get(const.DATA_GOAL_POINTS, 0) for goal in completed_in_period)
            ),
            "completed_goal_ids": [
                goal[const.DATA_GOAL_ID] for goal in completed_in_period
            ],
        }
