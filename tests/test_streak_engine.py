"""Unit tests for StreakEngine - consecutive-period streaks.

Test Categories:
- Daily streaks (today / yesterday tolerance, gaps, duplicates)
- Weekly, monthly and yearly buckets
- Local timezone day buckets
- Goal-level refresh and population-level streaks
"""

from __future__ import annotations

from datetime import timedelta
from zoneinfo import ZoneInfo

from pathly import const
from pathly.engines.streak_engine import StreakEngine
from tests.helpers import make_goal, make_utc_dt, ms

NOW = make_utc_dt(2024, 3, 20, 18)


def days_ago(*offsets: int) -> list[int]:
    """Completion timestamps the given number of days before NOW."""
    return [ms(NOW - timedelta(days=offset)) for offset in offsets]


# =============================================================================
# Test: Daily Streaks
# =============================================================================


class TestDailyStreaks:
    """Tests for calculate_streaks with daily buckets."""

    def test_empty(self) -> None:
        """No completions, no streak."""
        assert StreakEngine.calculate_streaks([], NOW) == {
            "current_streak": 0,
            "longest_streak": 0,
        }

    def test_consecutive_including_today(self) -> None:
        """Today, yesterday, the day before → 3."""
        result = StreakEngine.calculate_streaks(days_ago(0, 1, 2), NOW)
        assert result == {"current_streak": 3, "longest_streak": 3}

    def test_today_not_done_yet(self) -> None:
        """A streak ending yesterday is still current."""
        result = StreakEngine.calculate_streaks(days_ago(1, 2), NOW)
        assert result["current_streak"] == 2

    def test_broken_streak(self) -> None:
        """A gap of two days ends the current streak."""
        result = StreakEngine.calculate_streaks(days_ago(2, 3, 4), NOW)
        assert result == {"current_streak": 0, "longest_streak": 3}

    def test_longest_independent_of_recency(self) -> None:
        """An older, longer run is the longest streak."""
        result = StreakEngine.calculate_streaks(
            days_ago(0, 1, 5, 6, 7, 8, 9), NOW
        )
        assert result == {"current_streak": 2, "longest_streak": 5}

    def test_duplicates_and_order(self) -> None:
        """Several completions in one day count once; order is irrelevant."""
        timestamps = days_ago(2, 0, 1, 0, 1)
        result = StreakEngine.calculate_streaks(timestamps, NOW)
        assert result == {"current_streak": 3, "longest_streak": 3}

    def test_longest_at_least_current(self) -> None:
        """longest >= current for assorted histories."""
        histories = [
            days_ago(0),
            days_ago(1, 3, 4),
            days_ago(0, 1, 2, 10, 11),
            days_ago(30, 31, 32, 33),
        ]
        for timestamps in histories:
            result = StreakEngine.calculate_streaks(timestamps, NOW)
            assert result["longest_streak"] >= result["current_streak"]

    def test_local_day_buckets(self) -> None:
        """Days are bucketed in the local zone."""
        tokyo = ZoneInfo("Asia/Tokyo")
        # 2024-03-19 14:00 UTC is 23:00 in Tokyo, where NOW is already Mar 21
        timestamps = [ms(make_utc_dt(2024, 3, 19, 14)), ms(NOW)]

        assert StreakEngine.calculate_streaks(timestamps, NOW)["current_streak"] == 2
        assert (
            StreakEngine.calculate_streaks(timestamps, NOW, tz=tokyo)["current_streak"]
            == 1
        )


# =============================================================================
# Test: Other Period Units
# =============================================================================


class TestPeriodUnits:
    """Tests for weekly, monthly and yearly buckets."""

    def test_weekly(self) -> None:
        """Consecutive ISO weeks (2024-03-20 is a Wednesday)."""
        timestamps = [
            ms(make_utc_dt(2024, 3, 18)),  # this week (Monday)
            ms(make_utc_dt(2024, 3, 17)),  # last week (Sunday)
            ms(make_utc_dt(2024, 3, 5)),  # two weeks ago
        ]
        result = StreakEngine.calculate_streaks(
            timestamps, NOW, period_kind=const.PERIOD_WEEKLY
        )
        assert result == {"current_streak": 3, "longest_streak": 3}

    def test_monthly_tolerates_current_month(self) -> None:
        """Last two months done, this month not yet."""
        timestamps = [ms(make_utc_dt(2024, 2, 10)), ms(make_utc_dt(2024, 1, 31))]
        result = StreakEngine.calculate_streaks(
            timestamps, NOW, period_kind=const.PERIOD_MONTHLY
        )
        assert result["current_streak"] == 2

    def test_monthly_across_year_boundary(self) -> None:
        """December → January is consecutive."""
        timestamps = [
            ms(make_utc_dt(2023, 12, 15)),
            ms(make_utc_dt(2024, 1, 15)),
            ms(make_utc_dt(2024, 2, 15)),
            ms(make_utc_dt(2024, 3, 15)),
        ]
        result = StreakEngine.calculate_streaks(
            timestamps, NOW, period_kind=const.PERIOD_MONTHLY
        )
        assert result == {"current_streak": 4, "longest_streak": 4}

    def test_yearly(self) -> None:
        """Consecutive calendar years."""
        timestamps = [ms(make_utc_dt(2022, 6, 1)), ms(make_utc_dt(2023, 6, 1))]
        result = StreakEngine.calculate_streaks(
            timestamps, NOW, period_kind=const.PERIOD_YEARLY
        )
        assert result == {"current_streak": 2, "longest_streak": 2}


# =============================================================================
# Test: Goal and Population Level
# =============================================================================


class TestGoalStreaks:
    """Tests for per-goal and population streaks."""

    def test_goal_streak_includes_current_completion(self) -> None:
        """History plus the current completed_at."""
        goal = make_goal(
            period=const.PERIOD_DAILY,
            is_recurring=True,
            completion_history=days_ago(2, 1),
            is_complete=True,
            completed_at=ms(NOW),
        )
        assert StreakEngine.calculate_goal_streak(goal, NOW)["current_streak"] == 3

    def test_refresh_returns_copy(self) -> None:
        """The cache refresh does not mutate the input."""
        goal = make_goal(period=const.PERIOD_DAILY, completion_history=days_ago(0, 1))

        refreshed = StreakEngine.refresh_goal_streaks(goal, NOW)

        assert refreshed[const.DATA_GOAL_CURRENT_STREAK] == 2
        assert refreshed[const.DATA_GOAL_LONGEST_STREAK] == 2
        assert goal[const.DATA_GOAL_CURRENT_STREAK] == 0

    def test_refresh_keeps_longest_high_water_mark(self) -> None:
        """A cached longest streak is never lowered."""
        goal = make_goal(
            period=const.PERIOD_DAILY,
            completion_history=days_ago(0),
            current_streak=9,
            longest_streak=9,
        )

        refreshed = StreakEngine.refresh_goal_streaks(goal, NOW)

        assert refreshed[const.DATA_GOAL_CURRENT_STREAK] == 1
        assert refreshed[const.DATA_GOAL_LONGEST_STREAK] == 9

    def test_population_uses_terminal_completed_goals(self) -> None:
        """Recurring and incomplete goals are ignored."""
        goals = [
            make_goal(1, is_complete=True, completed_at=ms(NOW)),
            make_goal(2, is_complete=True, completed_at=ms(NOW - timedelta(days=1))),
            make_goal(3, is_complete=False, completed_at=ms(NOW - timedelta(days=2))),
            make_goal(
                4,
                is_recurring=True,
                is_complete=True,
                completed_at=ms(NOW - timedelta(days=2)),
            ),
        ]
        assert StreakEngine.calculate_population_streak(goals, NOW) == {
            "current_streak": 2,
            "longest_streak": 2,
        }
