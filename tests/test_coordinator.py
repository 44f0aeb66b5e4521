"""Tests for PathlyCoordinator - the load / update / persist cycle.

Each test seeds a storage file through PathlyStore, loads a coordinator from
it, and checks both the in-memory result and what a fresh coordinator reads
back from disk.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta
from pathlib import Path

from freezegun import freeze_time
import pytest
import voluptuous as vol

from pathly import const
from pathly.coordinator import PathlyCoordinator
from pathly.exceptions import (
    GoalHierarchyError,
    GoalNotFoundError,
    InsufficientFundsError,
    RewardAlreadyRedeemedError,
    RewardNotFoundError,
)
from pathly.store import PathlyStore
from tests.helpers import make_goal, make_reward, make_utc_dt, ms

NOW = make_utc_dt(2024, 3, 20, 18)


def seed(
    path: Path,
    goals: Iterable[dict] = (),
    rewards: Iterable[dict] = (),
    lifetime_points: float = 0,
) -> None:
    """Write a storage file holding the given records."""
    store = PathlyStore(path)
    store.save_goals(list(goals))
    store.save_rewards(list(rewards))
    store.save_lifetime_points(lifetime_points)


def load(path: Path, now=NOW) -> PathlyCoordinator:
    """Create and load a coordinator."""
    coordinator = PathlyCoordinator(path)
    coordinator.load(now)
    return coordinator


# =============================================================================
# Test: Load
# =============================================================================


class TestLoad:
    """Tests for startup loading and recurring processing."""

    def test_empty_storage(self, storage_path: Path) -> None:
        """A fresh install loads with nothing and writes nothing."""
        coordinator = load(storage_path)

        assert coordinator.goals == []
        assert coordinator.rewards == []
        assert coordinator.lifetime_points_earned == 0
        assert not storage_path.exists()

    def test_elapsed_recurring_goal_reset_and_persisted(
        self, storage_path: Path
    ) -> None:
        """A daily goal completed two days ago is archived and reset on load."""
        completed_at = ms(make_utc_dt(2024, 3, 18, 12))
        seed(
            storage_path,
            [
                make_goal(
                    1,
                    period=const.PERIOD_DAILY,
                    is_recurring=True,
                    period_start_date=ms(make_utc_dt(2024, 3, 18)),
                    current=10,
                    is_complete=True,
                    completed_at=completed_at,
                )
            ],
        )

        goal = load(storage_path).get_goal(1)

        assert goal[const.DATA_GOAL_CURRENT] == 0
        assert goal[const.DATA_GOAL_IS_COMPLETE] is False
        assert goal[const.DATA_GOAL_COMPLETION_HISTORY] == [completed_at]
        assert goal[const.DATA_GOAL_PERIOD_START_DATE] == ms(NOW)
        assert goal[const.DATA_GOAL_CURRENT_STREAK] == 0
        assert goal[const.DATA_GOAL_LONGEST_STREAK] == 1

        reloaded = load(storage_path)
        assert reloaded.get_goal(1)[const.DATA_GOAL_COMPLETION_HISTORY] == [
            completed_at
        ]
        assert reloaded.process_recurring_goals(NOW) == []

    def test_old_records_normalized(self, storage_path: Path) -> None:
        """Goals stored without newer fields load with defaults."""
        seed(storage_path, [{const.DATA_GOAL_ID: 1, const.DATA_GOAL_TARGET: 5}])

        goal = load(storage_path).get_goal(1)

        assert goal[const.DATA_GOAL_PERIOD] == const.PERIOD_ONGOING
        assert goal[const.DATA_GOAL_SUB_GOALS] == []

    def test_cycle_rejected(self, storage_path: Path) -> None:
        """Goals that list each other as subgoals fail to load."""
        seed(
            storage_path,
            [
                make_goal(1, parent_id=2, sub_goals=[2]),
                make_goal(2, parent_id=1, sub_goals=[1]),
            ],
        )

        with pytest.raises(GoalHierarchyError):
            load(storage_path)


# =============================================================================
# Test: Progress and Completion
# =============================================================================


class TestRecordProgress:
    """Tests for progress updates, completion, and point awards."""

    def test_completion_awards_points_once(self, storage_path: Path) -> None:
        """Points are added on the transition to complete and never removed."""
        seed(storage_path, [make_goal(1, points=10)])
        coordinator = load(storage_path)

        coordinator.record_progress(1, 4, NOW)
        assert coordinator.lifetime_points_earned == 0

        goal = coordinator.record_progress(1, 10, NOW)
        assert goal[const.DATA_GOAL_IS_COMPLETE] is True
        assert goal[const.DATA_GOAL_COMPLETED_AT] == ms(NOW)
        assert coordinator.lifetime_points_earned == 10

        coordinator.record_progress(1, 12, NOW)
        assert coordinator.lifetime_points_earned == 10

        goal = coordinator.record_progress(1, 5, NOW)
        assert goal[const.DATA_GOAL_IS_COMPLETE] is False
        assert goal[const.DATA_GOAL_COMPLETED_AT] is None
        assert coordinator.lifetime_points_earned == 10

        goal = coordinator.record_progress(1, 10, NOW)
        assert goal[const.DATA_GOAL_IS_COMPLETE] is True
        assert coordinator.lifetime_points_earned == 10

        assert load(storage_path).lifetime_points_earned == 10

    def test_recurring_goal_paid_once_per_period(self, storage_path: Path) -> None:
        """Toggling completion pays nothing extra; a new period pays again."""
        seed(
            storage_path,
            [
                make_goal(
                    1,
                    period=const.PERIOD_DAILY,
                    is_recurring=True,
                    period_start_date=ms(NOW),
                    points=10,
                )
            ],
        )
        coordinator = load(storage_path)

        coordinator.record_progress(1, 10, NOW)
        coordinator.record_progress(1, 3, NOW)
        coordinator.record_progress(1, 10, NOW)
        assert coordinator.lifetime_points_earned == 10

        next_day = NOW + timedelta(days=1)
        assert coordinator.process_recurring_goals(next_day) == [1]
        assert coordinator.get_goal(1)[const.DATA_GOAL_POINTS_AWARDED] is False

        coordinator.record_progress(1, 10, next_day)
        assert coordinator.lifetime_points_earned == 20
        assert load(storage_path, next_day).lifetime_points_earned == 20

    def test_stored_fractional_points_survive_reload(self, storage_path: Path) -> None:
        """The lifetime total read back from disk matches the one in memory."""
        seed(storage_path, [make_goal(1, points=2.6)], lifetime_points=7)
        coordinator = load(storage_path)

        coordinator.record_progress(1, 10, NOW)

        assert coordinator.lifetime_points_earned == 10
        assert load(storage_path).lifetime_points_earned == 10

    def test_subgoals_complete_parent(self, storage_path: Path) -> None:
        """Finishing every subgoal completes the parent."""
        seed(
            storage_path,
            [
                make_goal(1, sub_goals=[2, 3]),
                make_goal(2, parent_id=1),
                make_goal(3, parent_id=1),
            ],
        )
        coordinator = load(storage_path)

        coordinator.record_progress(2, 10, NOW)
        assert coordinator.get_goal_progress(1) == 50.0
        assert coordinator.get_goal(1)[const.DATA_GOAL_IS_COMPLETE] is False

        coordinator.record_progress(3, 10, NOW)
        assert coordinator.get_goal(1)[const.DATA_GOAL_IS_COMPLETE] is True
        assert coordinator.lifetime_points_earned == 30

        coordinator.record_progress(3, 5, NOW)
        assert coordinator.get_goal(1)[const.DATA_GOAL_IS_COMPLETE] is False
        assert coordinator.lifetime_points_earned == 30

        coordinator.record_progress(3, 10, NOW)
        assert coordinator.get_goal(1)[const.DATA_GOAL_IS_COMPLETE] is True
        assert coordinator.lifetime_points_earned == 30

    def test_parent_progress_is_derived(self, storage_path: Path) -> None:
        """Goals with subgoals do not take direct progress."""
        seed(storage_path, [make_goal(1, sub_goals=[2]), make_goal(2, parent_id=1)])
        coordinator = load(storage_path)

        with pytest.raises(GoalHierarchyError):
            coordinator.record_progress(1, 5, NOW)

    def test_unknown_goal(self, storage_path: Path) -> None:
        """Unknown ids raise GoalNotFoundError."""
        coordinator = load(storage_path)

        with pytest.raises(GoalNotFoundError):
            coordinator.record_progress(42, 1, NOW)

    def test_complete_goal_idempotent(self, storage_path: Path) -> None:
        """complete_goal fills the target once; repeating changes nothing."""
        seed(storage_path, [make_goal(1, target=8, points=15)])
        coordinator = load(storage_path)

        goal = coordinator.complete_goal(1, NOW)
        assert goal[const.DATA_GOAL_CURRENT] == 8
        assert goal[const.DATA_GOAL_IS_COMPLETE] is True

        coordinator.complete_goal(1, NOW + timedelta(hours=1))
        assert coordinator.get_goal(1)[const.DATA_GOAL_COMPLETED_AT] == ms(NOW)
        assert coordinator.lifetime_points_earned == 15

    @freeze_time("2024-03-20 18:00:00", tz_offset=0)
    def test_complete_goal_defaults_to_now(self, storage_path: Path) -> None:
        """Without an explicit instant the wall clock is used."""
        seed(storage_path, [make_goal(1)])
        coordinator = PathlyCoordinator(storage_path)
        coordinator.load()

        goal = coordinator.complete_goal(1)

        assert goal[const.DATA_GOAL_COMPLETED_AT] == ms(NOW)


# =============================================================================
# Test: Flags and Time Remaining
# =============================================================================


class TestGoalState:
    """Tests for pause, archive, and deadlines."""

    def test_pause_excludes_from_statistics(self, storage_path: Path) -> None:
        """Paused goals drop out of statistics until resumed."""
        seed(storage_path, [make_goal(1), make_goal(2)])
        coordinator = load(storage_path)

        coordinator.pause_goal(1)
        assert coordinator.calculate_statistics(NOW)[const.DATA_STATS_TOTAL_GOALS] == 1
        assert load(storage_path).get_goal(1)[const.DATA_GOAL_IS_PAUSED] is True

        coordinator.resume_goal(1)
        assert coordinator.calculate_statistics(NOW)[const.DATA_STATS_TOTAL_GOALS] == 2

    def test_archive_keeps_goal_in_statistics(self, storage_path: Path) -> None:
        """Archived goals still count."""
        seed(storage_path, [make_goal(1)])
        coordinator = load(storage_path)

        coordinator.archive_goal(1)

        assert coordinator.get_goal(1)[const.DATA_GOAL_IS_ARCHIVED] is True
        assert coordinator.calculate_statistics(NOW)[const.DATA_STATS_TOTAL_GOALS] == 1

    def test_time_remaining(self, storage_path: Path) -> None:
        """A lapsed terminal goal is expired; today's daily goal is not."""
        seed(
            storage_path,
            [
                make_goal(1),
                make_goal(
                    2,
                    period=const.PERIOD_DAILY,
                    is_recurring=True,
                    period_start_date=ms(NOW),
                ),
            ],
        )
        coordinator = load(storage_path)

        assert coordinator.get_time_remaining(1, NOW)["is_expired"] is True

        remaining = coordinator.get_time_remaining(2, NOW)
        assert remaining["is_expired"] is False
        assert (remaining["days"], remaining["hours"], remaining["minutes"]) == (
            0,
            5,
            59,
        )


# =============================================================================
# Test: Rewards
# =============================================================================


class TestRewards:
    """Tests for reward redemption against available points."""

    def test_redeem(self, storage_path: Path) -> None:
        """Redemption spends points and persists the flag."""
        seed(
            storage_path,
            rewards=[make_reward(1, points_cost=100), make_reward(2, points_cost=100)],
            lifetime_points=150,
        )
        coordinator = load(storage_path)

        reward = coordinator.redeem_reward(1, NOW)

        assert reward[const.DATA_REWARD_IS_REDEEMED] is True
        assert coordinator.get_available_points() == 50
        assert load(storage_path).get_reward(1)[const.DATA_REWARD_IS_REDEEMED] is True

        with pytest.raises(InsufficientFundsError):
            coordinator.redeem_reward(2, NOW)

    def test_redeem_twice(self, storage_path: Path) -> None:
        """A reward can be redeemed once."""
        seed(storage_path, rewards=[make_reward(1, points_cost=10)], lifetime_points=100)
        coordinator = load(storage_path)
        coordinator.redeem_reward(1, NOW)

        with pytest.raises(RewardAlreadyRedeemedError):
            coordinator.redeem_reward(1, NOW)

    def test_unknown_reward(self, storage_path: Path) -> None:
        """Unknown ids raise RewardNotFoundError."""
        coordinator = load(storage_path)

        with pytest.raises(RewardNotFoundError):
            coordinator.redeem_reward(99, NOW)


# =============================================================================
# Test: Statistics, Achievements, Reviews, Notifications
# =============================================================================


class TestStatisticsAndAchievements:
    """Tests for the statistics refresh and achievement unlocks."""

    def test_first_goal_unlocked_once(self, storage_path: Path) -> None:
        """The unlock is reported once and survives a reload."""
        seed(storage_path, [make_goal(1), make_goal(2)])
        coordinator = load(storage_path)
        coordinator.complete_goal(1, NOW)

        stats, new_ids = coordinator.refresh_statistics(NOW)
        assert new_ids == [const.ACHIEVEMENT_FIRST_GOAL]
        assert stats[const.DATA_STATS_ACHIEVEMENTS_UNLOCKED] == [
            const.ACHIEVEMENT_FIRST_GOAL
        ]
        assert stats[const.DATA_STATS_COMPLETION_RATE] == 50.0

        _, new_ids = coordinator.refresh_statistics(NOW)
        assert new_ids == []

        assert load(storage_path).achievements_unlocked == [
            const.ACHIEVEMENT_FIRST_GOAL
        ]

    def test_achievement_progress(self, storage_path: Path) -> None:
        """Progress is read from the current statistics."""
        seed(storage_path, [make_goal(1)])
        coordinator = load(storage_path)
        coordinator.complete_goal(1, NOW)

        assert coordinator.get_achievement_progress(const.ACHIEVEMENT_GOAL_MASTER) == 10.0

    def test_custom_catalog(self, storage_path: Path) -> None:
        """The coordinator evaluates the catalog it was given."""
        seed(storage_path, [make_goal(1, points=500)])
        catalog = [
            {
                const.DATA_ACHIEVEMENT_ID: "big_spender",
                const.DATA_ACHIEVEMENT_NAME: "Big Spender",
                const.DATA_ACHIEVEMENT_REQUIREMENT: {
                    const.DATA_ACHIEVEMENT_REQUIREMENT_TYPE: (
                        const.ACHIEVEMENT_TYPE_POINTS_EARNED
                    ),
                    const.DATA_ACHIEVEMENT_REQUIREMENT_VALUE: 500,
                },
            }
        ]
        coordinator = PathlyCoordinator(storage_path, achievements=catalog)
        coordinator.load(NOW)
        coordinator.complete_goal(1, NOW)

        _, new_ids = coordinator.refresh_statistics(NOW)

        assert new_ids == ["big_spender"]

    def test_review_statistics(self, storage_path: Path) -> None:
        """This week's review sees today's completion; last week's does not."""
        seed(storage_path, [make_goal(1, points=20), make_goal(2)])
        coordinator = load(storage_path)
        coordinator.complete_goal(1, NOW)

        this_week = coordinator.get_review_statistics(const.REVIEW_THIS_WEEK, NOW)
        last_week = coordinator.get_review_statistics(const.REVIEW_LAST_WEEK, NOW)

        assert this_week["goals_completed"] == 1
        assert this_week["points_earned"] == 20
        assert last_week["goals_completed"] == 0

    def test_notification_requests(self, storage_path: Path) -> None:
        """Reminder payloads come from active goals only."""
        seed(
            storage_path,
            [
                make_goal(
                    1, notifications_enabled=True, notification_time=450
                ),
                make_goal(
                    2,
                    notifications_enabled=True,
                    notification_time=600,
                    is_paused=True,
                ),
            ],
        )
        coordinator = load(storage_path)

        requests = coordinator.get_notification_requests()

        assert [request["goal_id"] for request in requests] == [1]
        assert requests[0]["notification_time"] == 450

    def test_malformed_catalog_rejected(self, storage_path: Path) -> None:
        """A catalog entry without a requirement fails validation."""
        catalog = [{const.DATA_ACHIEVEMENT_ID: "x", const.DATA_ACHIEVEMENT_NAME: "X"}]

        with pytest.raises(vol.Invalid):
            PathlyCoordinator(storage_path, achievements=catalog)
