# File: coordinator.py
"""Coordinator for Pathly.

Owns the in-memory goal and reward collections and runs the single-writer
recompute-and-persist cycle: load from the store, hand records to the
engines, replace changed records, persist.

Load sequence:
    1. Read and normalize goals and rewards
    2. Validate the subgoal tree (GoalHierarchyError on a bad tree)
    3. Archive-and-reset elapsed recurring goals
    4. Recompute the per-goal streak caches
    5. Persist if anything changed

The coordinator holds no locks. Callers embedding it in a multi-threaded
host must serialize access to one instance.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from . import const
from .data_builders import normalize_goal, normalize_reward
from .engines import (
    EconomyEngine,
    GamificationEngine,
    PeriodEngine,
    ProgressEngine,
    RecurrenceEngine,
    StatisticsEngine,
    StreakEngine,
)
from .exceptions import GoalHierarchyError, GoalNotFoundError, RewardNotFoundError
from .notification_helper import build_notification_requests
from .schemas import ACHIEVEMENT_CATALOG_SCHEMA
from .store import PathlyStore
from .utils.dt_utils import dt_now_utc, dt_to_ms, set_default_timezone

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from .type_defs import (
        AchievementData,
        GoalData,
        NotificationRequest,
        ReviewStatistics,
        RewardData,
        StatisticsData,
        TimeRemaining,
    )


class PathlyCoordinator:
    """Coordinator for Pathly goal tracking.

    Manages goals and rewards by their integer ids.
    """

    def __init__(
        self,
        storage_path: str | Path,
        time_zone: ZoneInfo | None = None,
        achievements: Sequence[AchievementData] | None = None,
    ) -> None:
        """Initialize the PathlyCoordinator.

        Args:
            storage_path: Location of the JSON storage file
            time_zone: Local timezone for day boundaries (applied process-wide)
            achievements: Achievement catalog override (default: const.ACHIEVEMENTS)

        Raises:
            vol.Invalid: the catalog override is malformed
        """
        if time_zone is not None:
            set_default_timezone(time_zone)

        self.store = PathlyStore(storage_path)
        self._achievements: tuple[Any, ...] = (
            tuple(ACHIEVEMENT_CATALOG_SCHEMA(list(achievements)))
            if achievements is not None
            else const.ACHIEVEMENTS
        )
        self._goals: list[GoalData] = []
        self._rewards: list[RewardData] = []
        self._lifetime_points_earned: float = 0
        self._achievements_unlocked: list[str] = []

    # -------------------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------------------

    @property
    def goals(self) -> list[GoalData]:
        """Current goal records (do not mutate)."""
        return list(self._goals)

    @property
    def rewards(self) -> list[RewardData]:
        """Current reward records (do not mutate)."""
        return list(self._rewards)

    @property
    def lifetime_points_earned(self) -> float:
        """All-time points total; never decreases."""
        return self._lifetime_points_earned

    @property
    def achievements_unlocked(self) -> list[str]:
        """Unlocked achievement ids in unlock order."""
        return list(self._achievements_unlocked)

    # -------------------------------------------------------------------------------------
    # Load
    # -------------------------------------------------------------------------------------

    def load(self, now: datetime | None = None) -> None:
        """Load storage, validate the goal tree, and run recurring processing.

        Raises:
            GoalHierarchyError: stored subgoal references do not form a tree
        """
        now = now or dt_now_utc()
        self.store.initialize()

        self._goals = [normalize_goal(goal, now) for goal in self.store.load_goals()]
        self._rewards = [normalize_reward(reward) for reward in self.store.load_rewards()]
        self._lifetime_points_earned = self.store.load_lifetime_points()
        self._achievements_unlocked = self.store.load_achievements_unlocked()

        ProgressEngine.validate_goal_tree(self._goals)

        const.LOGGER.info(
            "INFO: Loaded %d goal(s) and %d reward(s)",
            len(self._goals),
            len(self._rewards),
        )
        self.process_recurring_goals(now)

    def process_recurring_goals(self, now: datetime | None = None) -> list[int]:
        """Reset elapsed recurring goals and refresh streak caches.

        Safe to call repeatedly (foreground plus a timer): a second call in
        the same window changes nothing and writes nothing.

        Returns:
            Ids of the goals that were reset
        """
        now = now or dt_now_utc()
        processed = RecurrenceEngine.process_recurring_goals(self._goals, now)
        reset_ids = [
            new[const.DATA_GOAL_ID]
            for old, new in zip(self._goals, processed)
            if new is not old
        ]
        self._goals = processed

        streaks_changed = self._refresh_streaks(now)
        if reset_ids or streaks_changed:
            self.store.save_goals(self._goals)
        return reset_ids

    def _refresh_streaks(self, now: datetime) -> bool:
        changed = False
        for position, goal in enumerate(self._goals):
            refreshed = StreakEngine.refresh_goal_streaks(goal, now)
            if (
                refreshed[const.DATA_GOAL_CURRENT_STREAK]
                != goal.get(const.DATA_GOAL_CURRENT_STREAK)
                or refreshed[const.DATA_GOAL_LONGEST_STREAK]
                != goal.get(const.DATA_GOAL_LONGEST_STREAK)
            ):
                self._goals[position] = refreshed
                changed = True
        if changed:
            const.LOGGER.debug("DEBUG: Streak caches refreshed")
        return changed

    # -------------------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------------------

    def get_goal(self, goal_id: int) -> GoalData:
        """Return a goal by id.

        Raises:
            GoalNotFoundError: no goal has this id
        """
        for goal in self._goals:
            if goal[const.DATA_GOAL_ID] == goal_id:
                return goal
        raise GoalNotFoundError(goal_id)

    def get_reward(self, reward_id: int) -> RewardData:
        """Return a reward by id.

        Raises:
            RewardNotFoundError: no reward has this id
        """
        for reward in self._rewards:
            if reward[const.DATA_REWARD_ID] == reward_id:
                return reward
        raise RewardNotFoundError(reward_id)

    def get_goal_progress(self, goal_id: int) -> float:
        """Progress of a goal, averaged over its subgoals when it has any."""
        return ProgressEngine.aggregate_progress(self.get_goal(goal_id), self._goals)

    def get_time_remaining(
        self, goal_id: int, now: datetime | None = None
    ) -> TimeRemaining:
        """Time left in a goal's current period."""
        goal = self.get_goal(goal_id)
        return PeriodEngine.time_remaining(
            goal.get(const.DATA_GOAL_PERIOD_START_DATE),
            goal.get(const.DATA_GOAL_PERIOD, const.DEFAULT_PERIOD),
            goal.get(const.DATA_GOAL_CUSTOM_PERIOD_DAYS),
            is_recurring=bool(goal.get(const.DATA_GOAL_IS_RECURRING)),
            now=now,
        )

    # -------------------------------------------------------------------------------------
    # Goal Updates
    # -------------------------------------------------------------------------------------

    def _replace_goal(self, updated: GoalData) -> None:
        goal_id = updated[const.DATA_GOAL_ID]
        for position, goal in enumerate(self._goals):
            if goal[const.DATA_GOAL_ID] == goal_id:
                self._goals[position] = updated
                return
        raise GoalNotFoundError(goal_id)

    def _set_completion(
        self, goal: GoalData, is_complete: bool, now: datetime
    ) -> GoalData:
        """Apply a completion flag; points are paid once per period.

        Un-completing keeps the points and the paid flag, so completing again
        within the same period pays nothing. reset_goal clears the flag.
        """
        was_complete = bool(goal.get(const.DATA_GOAL_IS_COMPLETE))
        updated = dict(goal)

        if is_complete and not was_complete:
            updated[const.DATA_GOAL_IS_COMPLETE] = True
            updated[const.DATA_GOAL_COMPLETED_AT] = dt_to_ms(now)
            if goal.get(const.DATA_GOAL_POINTS_AWARDED):
                const.LOGGER.debug(
                    "DEBUG: Goal %s completed again, points already paid this period",
                    goal[const.DATA_GOAL_ID],
                )
            else:
                self._lifetime_points_earned = EconomyEngine.award_points(
                    self._lifetime_points_earned, goal.get(const.DATA_GOAL_POINTS, 0)
                )
                updated[const.DATA_GOAL_POINTS_AWARDED] = True
                const.LOGGER.info(
                    "INFO: Goal %s completed, awarded %s point(s)",
                    goal[const.DATA_GOAL_ID],
                    goal.get(const.DATA_GOAL_POINTS, 0),
                )
        elif not is_complete and was_complete:
            # Lifetime points are never taken back
            updated[const.DATA_GOAL_IS_COMPLETE] = False
            updated[const.DATA_GOAL_COMPLETED_AT] = None

        updated = StreakEngine.refresh_goal_streaks(updated, now)  # type: ignore[arg-type]
        self._replace_goal(updated)
        return updated

    def _refresh_parents(self, goal: GoalData, now: datetime) -> None:
        """Re-derive completion for every ancestor of ``goal``."""
        parent_id = goal.get(const.DATA_GOAL_PARENT_ID)
        visited: set[int] = set()
        while parent_id is not None and parent_id not in visited:
            visited.add(parent_id)
            try:
                parent = self.get_goal(parent_id)
            except GoalNotFoundError:
                const.LOGGER.warning(
                    "WARNING: Goal %s has unknown parent %s",
                    goal[const.DATA_GOAL_ID],
                    parent_id,
                )
                return
            progress = ProgressEngine.aggregate_progress(parent, self._goals)
            self._set_completion(
                parent, ProgressEngine.is_goal_completed(progress), now
            )
            goal = parent
            parent_id = parent.get(const.DATA_GOAL_PARENT_ID)

    def _persist_goals(self, lifetime_before: float) -> None:
        self.store.save_goals(self._goals)
        if self._lifetime_points_earned != lifetime_before:
            self.store.save_lifetime_points(self._lifetime_points_earned)

    def record_progress(
        self, goal_id: int, value: float, now: datetime | None = None
    ) -> GoalData:
        """Set a goal's current value and re-derive completion.

        Reaching 100% progress completes the goal and awards its points once.
        Dropping below 100% clears completion without taking points back.

        Raises:
            GoalNotFoundError: unknown goal
            GoalHierarchyError: the goal has subgoals, so its progress is derived
        """
        now = now or dt_now_utc()
        goal = self.get_goal(goal_id)
        if goal.get(const.DATA_GOAL_SUB_GOALS):
            raise GoalHierarchyError(
                goal_id, "progress of a goal with subgoals is derived"
            )

        lifetime_before = self._lifetime_points_earned
        updated = dict(goal)
        updated[const.DATA_GOAL_CURRENT] = value
        progress = ProgressEngine.goal_progress(updated)  # type: ignore[arg-type]

        result = self._set_completion(
            updated,  # type: ignore[arg-type]
            ProgressEngine.is_goal_completed(progress),
            now,
        )
        self._refresh_parents(result, now)
        self._persist_goals(lifetime_before)
        const.LOGGER.debug(
            "DEBUG: Goal %s progress recorded: current=%s progress=%.1f",
            goal_id,
            value,
            progress,
        )
        return self.get_goal(goal_id)

    def complete_goal(self, goal_id: int, now: datetime | None = None) -> GoalData:
        """Mark a goal complete, moving its current value onto the target.

        Completing an already complete goal changes nothing.
        """
        now = now or dt_now_utc()
        goal = self.get_goal(goal_id)
        if goal.get(const.DATA_GOAL_IS_COMPLETE):
            return goal

        lifetime_before = self._lifetime_points_earned
        updated = dict(goal)
        if not goal.get(const.DATA_GOAL_SUB_GOALS):
            updated[const.DATA_GOAL_CURRENT] = goal.get(const.DATA_GOAL_TARGET, 0)

        result = self._set_completion(updated, True, now)  # type: ignore[arg-type]
        self._refresh_parents(result, now)
        self._persist_goals(lifetime_before)
        return self.get_goal(goal_id)

    def _set_flag(self, goal_id: int, key: str, value: bool) -> GoalData:
        updated = dict(self.get_goal(goal_id))
        updated[key] = value
        self._replace_goal(updated)  # type: ignore[arg-type]
        self.store.save_goals(self._goals)
        const.LOGGER.debug("DEBUG: Goal %s %s set to %s", goal_id, key, value)
        return updated  # type: ignore[return-value]

    def pause_goal(self, goal_id: int) -> GoalData:
        """Pause a goal; paused goals drop out of statistics."""
        return self._set_flag(goal_id, const.DATA_GOAL_IS_PAUSED, True)

    def resume_goal(self, goal_id: int) -> GoalData:
        return self._set_flag(goal_id, const.DATA_GOAL_IS_PAUSED, False)

    def archive_goal(self, goal_id: int) -> GoalData:
        """Archive a goal. Archived goals still count in statistics."""
        return self._set_flag(goal_id, const.DATA_GOAL_IS_ARCHIVED, True)

    # -------------------------------------------------------------------------------------
    # Rewards
    # -------------------------------------------------------------------------------------

    def get_available_points(self) -> float:
        """Lifetime points minus the cost of redeemed rewards."""
        return EconomyEngine.calculate_available_points(
            self._lifetime_points_earned,
            EconomyEngine.calculate_spent_points(self._rewards),
        )

    def redeem_reward(self, reward_id: int, now: datetime | None = None) -> RewardData:
        """Redeem a reward against available points.

        Raises:
            RewardNotFoundError: unknown reward
            RewardAlreadyRedeemedError: reward was redeemed before
            InsufficientFundsError: not enough available points
        """
        reward = self.get_reward(reward_id)
        updated = EconomyEngine.redeem_reward(
            reward, self.get_available_points(), now
        )
        self._rewards = [
            updated if item[const.DATA_REWARD_ID] == reward_id else item
            for item in self._rewards
        ]
        self.store.save_rewards(self._rewards)
        const.LOGGER.info(
            "INFO: Reward %s redeemed for %s point(s)",
            reward_id,
            reward.get(const.DATA_REWARD_POINTS_COST, 0),
        )
        return updated

    # -------------------------------------------------------------------------------------
    # Statistics and Achievements
    # -------------------------------------------------------------------------------------

    def calculate_statistics(self, now: datetime | None = None) -> StatisticsData:
        """Current Statistics snapshot (read-only; nothing is persisted)."""
        return StatisticsEngine.calculate_statistics(
            self._goals,
            self._rewards,
            self._lifetime_points_earned,
            self._achievements_unlocked,
            now=now,
        )

    def refresh_statistics(
        self, now: datetime | None = None
    ) -> tuple[StatisticsData, list[str]]:
        """Recompute statistics, unlock achievements, and persist new unlocks.

        Returns:
            (snapshot with merged unlocked ids, ids unlocked by this call)
        """
        now = now or dt_now_utc()
        if self._refresh_streaks(now):
            self.store.save_goals(self._goals)

        previous: dict[str, Any] = {
            const.DATA_STATS_ACHIEVEMENTS_UNLOCKED: list(self._achievements_unlocked)
        }
        stats = self.calculate_statistics(now)
        new_ids = GamificationEngine.get_newly_unlocked_achievements(
            previous, stats, self._achievements
        )
        if not new_ids:
            return stats, []

        stats = GamificationEngine.merge_unlocked(stats, new_ids)
        self._achievements_unlocked = list(
            stats[const.DATA_STATS_ACHIEVEMENTS_UNLOCKED]
        )
        self.store.save_achievements_unlocked(self._achievements_unlocked)
        const.LOGGER.info("INFO: Achievements unlocked: %s", ", ".join(new_ids))
        return stats, new_ids

    def get_achievement_progress(self, achievement_id: str) -> float:
        """Progress toward one achievement from the current statistics."""
        return GamificationEngine.get_achievement_progress(
            achievement_id, self.calculate_statistics(), self._achievements
        )

    def get_review_statistics(
        self, review_kind: str, now: datetime | None = None
    ) -> ReviewStatistics:
        """Completion summary for this/last week or this/last month."""
        period = StatisticsEngine.get_review_period(review_kind, now)
        return StatisticsEngine.calculate_review_statistics(self._goals, period)

    # -------------------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------------------

    def get_notification_requests(self) -> list[NotificationRequest]:
        """Reminder payloads for an external scheduler."""
        return build_notification_requests(self._goals)
