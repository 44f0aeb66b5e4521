"""Streak Engine - Consecutive-period completion streaks.

Streaks are derived from completion timestamps, never stored as a source of
truth. Each timestamp falls into a period bucket in local time:

- daily (also custom and ongoing goals): the local calendar day
- weekly: the ISO week (Monday start)
- monthly: the calendar month
- yearly: the calendar year

Buckets are mapped to consecutive integers so "consecutive periods" is just
``index - 1``.

Current streak: walk back from the bucket containing ``now``; if that bucket
is empty, start from the previous one instead (the period in progress may
not be finished yet). Longest streak: the longest run of consecutive
non-empty buckets anywhere in the history. ``longest >= current`` holds by
construction.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date, datetime
from typing import TYPE_CHECKING, ClassVar

from .. import const
from ..utils.dt_utils import dt_now_utc, local_date

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from ..type_defs import GoalData, StreakResult


def _day_index(day: date) -> int:
    return day.toordinal()


def _week_index(day: date) -> int:
    # date(1, 1, 1) is a Monday with ordinal 1
    return (day.toordinal() - 1) // 7


def _month_index(day: date) -> int:
    return day.year * 12 + day.month - 1


def _year_index(day: date) -> int:
    return day.year


class StreakEngine:
    """Pure logic engine for streak computation.

    All methods are static - no instance state.
    """

    # Maps a goal period to the bucket function for its streak unit
    BUCKET_FUNCTIONS: ClassVar[dict[str, Callable[[date], int]]] = {
        const.PERIOD_DAILY: _day_index,
        const.PERIOD_WEEKLY: _week_index,
        const.PERIOD_MONTHLY: _month_index,
        const.PERIOD_YEARLY: _year_index,
    }

    # =========================================================================
    # CORE
    # =========================================================================

    @staticmethod
    def calculate_streaks(
        timestamps: Iterable[int],
        now: datetime | None = None,
        period_kind: str = const.PERIOD_DAILY,
        tz: ZoneInfo | None = None,
    ) -> StreakResult:
        """Compute current and longest streaks from completion instants.

        Args:
            timestamps: Completion instants (epoch ms), any order, duplicates ok
            now: Reference time for the current streak
            period_kind: Goal period selecting the streak unit
            tz: Optional timezone override for local buckets

        Returns:
            StreakResult in period units

        Example:
            Completions today, yesterday, and three days ago → current 2,
            longest 2.
        """
        bucket_of = StreakEngine.BUCKET_FUNCTIONS.get(period_kind, _day_index)
        buckets = {bucket_of(local_date(ts, tz)) for ts in timestamps}
        if not buckets:
            return {"current_streak": 0, "longest_streak": 0}

        ordered = sorted(buckets, reverse=True)

        longest = 1
        run = 1
        for previous, index in zip(ordered, ordered[1:]):
            run = run + 1 if previous - index == 1 else 1
            longest = max(longest, run)

        now_index = bucket_of(local_date(now or dt_now_utc(), tz))
        if now_index in buckets:
            cursor = now_index
        elif now_index - 1 in buckets:
            cursor = now_index - 1
        else:
            cursor = None

        current = 0
        while cursor is not None and cursor in buckets:
            current += 1
            cursor -= 1

        return {"current_streak": current, "longest_streak": max(longest, current)}

    # =========================================================================
    # GOAL LEVEL
    # =========================================================================

    @staticmethod
    def completion_timestamps(goal: GoalData) -> list[int]:
        """Archived completions plus the current one, when complete."""
        timestamps = list(goal.get(const.DATA_GOAL_COMPLETION_HISTORY) or [])
        completed_at = goal.get(const.DATA_GOAL_COMPLETED_AT)
        if goal.get(const.DATA_GOAL_IS_COMPLETE) and completed_at is not None:
            timestamps.append(completed_at)
        return timestamps

    @staticmethod
    def calculate_goal_streak(
        goal: GoalData,
        now: datetime | None = None,
        tz: ZoneInfo | None = None,
    ) -> StreakResult:
        """Compute a single goal's streaks in the goal's own period units."""
        return StreakEngine.calculate_streaks(
            StreakEngine.completion_timestamps(goal),
            now=now,
            period_kind=goal.get(const.DATA_GOAL_PERIOD, const.PERIOD_DAILY),
            tz=tz,
        )

    @staticmethod
    def refresh_goal_streaks(
        goal: GoalData,
        now: datetime | None = None,
        tz: ZoneInfo | None = None,
    ) -> GoalData:
        """Invalidate and recompute a goal's cached streak fields.

        Returns a copy; the cached longest streak is kept as a high-water mark.
        """
        result = StreakEngine.calculate_goal_streak(goal, now, tz)
        cached_longest = goal.get(const.DATA_GOAL_LONGEST_STREAK) or 0

        updated = dict(goal)
        updated[const.DATA_GOAL_CURRENT_STREAK] = result["current_streak"]
        updated[const.DATA_GOAL_LONGEST_STREAK] = max(
            result["longest_streak"], cached_longest
        )
        return updated  # type: ignore[return-value]

    # =========================================================================
    # POPULATION LEVEL
    # =========================================================================

    @staticmethod
    def calculate_population_streak(
        goals: Iterable[GoalData],
        now: datetime | None = None,
        tz: ZoneInfo | None = None,
    ) -> StreakResult:
        """Daily streak across completed terminal (non-recurring) goals."""
        timestamps = [
            goal[const.DATA_GOAL_COMPLETED_AT]
            for goal in goals
            if not goal.get(const.DATA_GOAL_IS_RECURRING)
            and goal.get(const.DATA_GOAL_IS_COMPLETE)
            and goal.get(const.DATA_GOAL_COMPLETED_AT) is not None
        ]
        return StreakEngine.calculate_streaks(
            timestamps, now=now, period_kind=const.PERIOD_DAILY, tz=tz
        )
