"""Recurrence Engine - Period rollover for recurring goals.

State machine per recurring goal:

    ACTIVE ──(current reaches target / marked complete)──► COMPLETE_PENDING_RESET
       │                                                        │
       └──────────────(period boundary passes)──────────────────┤
                                                                ▼
                                                             ELAPSED
                                                                │
                          (process_recurring_goals: archive + reset)
                                                                ▼
                                                  ACTIVE, fresh period from now

On reset the prior ``completed_at`` (if the goal was complete) is appended to
``completion_history``; existing entries are never rewritten. The new
``period_start_date`` is the processing instant, so a second pass inside the
same window sees a period that has not elapsed yet and does nothing. That
makes processing safe to run more than once (app foreground plus a timer).

ARCHITECTURE: Stateless. Input records are never mutated; changed goals are
returned as shallow copies with fresh lists.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_now_utc, dt_to_ms
from .period_engine import PeriodEngine

if TYPE_CHECKING:
    from collections.abc import Iterable
    from zoneinfo import ZoneInfo

    from ..type_defs import GoalData


class RecurrenceEngine:
    """Pure logic engine for recurring goal resets.

    All methods are static - no instance state.
    """

    # =========================================================================
    # STATE
    # =========================================================================

    @staticmethod
    def is_period_elapsed(
        goal: GoalData,
        now: datetime | None = None,
        tz: ZoneInfo | None = None,
    ) -> bool:
        """Return True when the goal's current period boundary has passed."""
        return PeriodEngine.is_period_elapsed(
            goal.get(const.DATA_GOAL_PERIOD_START_DATE),
            goal.get(const.DATA_GOAL_PERIOD, const.DEFAULT_PERIOD),
            goal.get(const.DATA_GOAL_CUSTOM_PERIOD_DAYS),
            now=now,
            tz=tz,
        )

    @staticmethod
    def get_recurrence_state(
        goal: GoalData,
        now: datetime | None = None,
        tz: ZoneInfo | None = None,
    ) -> str:
        """Classify a goal into a const.RECURRENCE_STATE_* value.

        Non-recurring and ongoing goals never reach ELAPSED.
        """
        if RecurrenceEngine.should_reset_goal(goal, now, tz):
            return const.RECURRENCE_STATE_ELAPSED
        if goal.get(const.DATA_GOAL_IS_COMPLETE):
            return const.RECURRENCE_STATE_COMPLETE_PENDING_RESET
        return const.RECURRENCE_STATE_ACTIVE

    @staticmethod
    def should_reset_goal(
        goal: GoalData,
        now: datetime | None = None,
        tz: ZoneInfo | None = None,
    ) -> bool:
        """Return True if a recurring goal's period has ended.

        Completion is not required: an incomplete period resets as well.
        A period without a usable length (custom with no day count, unknown
        kind) never resets.
        """
        if not goal.get(const.DATA_GOAL_IS_RECURRING):
            return False
        period_kind = goal.get(const.DATA_GOAL_PERIOD, const.DEFAULT_PERIOD)
        if period_kind == const.PERIOD_ONGOING:
            return False
        if not PeriodEngine.has_fixed_length(
            period_kind, goal.get(const.DATA_GOAL_CUSTOM_PERIOD_DAYS)
        ):
            const.LOGGER.warning(
                "WARNING: Recurring goal %s has no usable %s period length, "
                "skipping reset",
                goal.get(const.DATA_GOAL_ID),
                period_kind,
            )
            return False
        return RecurrenceEngine.is_period_elapsed(goal, now, tz)

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    @staticmethod
    def record_completion(goal: GoalData, now: datetime | None = None) -> GoalData:
        """Return a copy with the current completion appended to history.

        Uses ``completed_at`` when set, otherwise ``now``. Goals that are not
        complete are returned as an unchanged copy.
        """
        history = list(goal.get(const.DATA_GOAL_COMPLETION_HISTORY) or [])
        if goal.get(const.DATA_GOAL_IS_COMPLETE):
            completed_at = goal.get(const.DATA_GOAL_COMPLETED_AT)
            if completed_at is None:
                completed_at = dt_to_ms(now or dt_now_utc())
            history.append(completed_at)

        updated = dict(goal)
        updated[const.DATA_GOAL_COMPLETION_HISTORY] = history
        return updated  # type: ignore[return-value]

    @staticmethod
    def reset_goal(goal: GoalData, now: datetime | None = None) -> GoalData:
        """Return a copy opened on a fresh, incomplete period starting at ``now``.

        Increasing goals restart from 0. Decreasing goals restart from their
        ``initial_value`` when one is recorded.
        """
        updated = dict(goal)

        restart_value: float = 0
        initial_value = goal.get(const.DATA_GOAL_INITIAL_VALUE)
        if (
            goal.get(const.DATA_GOAL_DIRECTION) == const.DIRECTION_DECREASE
            and initial_value is not None
        ):
            restart_value = initial_value

        updated[const.DATA_GOAL_CURRENT] = restart_value
        updated[const.DATA_GOAL_IS_COMPLETE] = False
        updated[const.DATA_GOAL_COMPLETED_AT] = None
        updated[const.DATA_GOAL_POINTS_AWARDED] = False
        updated[const.DATA_GOAL_PERIOD_START_DATE] = dt_to_ms(now or dt_now_utc())
        updated[const.DATA_GOAL_COMPLETION_HISTORY] = list(
            goal.get(const.DATA_GOAL_COMPLETION_HISTORY) or []
        )
        return updated  # type: ignore[return-value]

    @staticmethod
    def process_recurring_goals(
        goals: Iterable[GoalData],
        now: datetime | None = None,
        tz: ZoneInfo | None = None,
    ) -> list[GoalData]:
        """Archive and reset every recurring goal whose period has elapsed.

        Args:
            goals: Goal records (not mutated)
            now: Processing instant; also the start of every new period
            tz: Optional timezone override for local-day boundaries

        Returns:
            New list in input order. Unchanged goals are the original objects.
        """
        now = now or dt_now_utc()
        processed: list[GoalData] = []
        reset_count = 0

        for goal in goals:
            if not RecurrenceEngine.should_reset_goal(goal, now, tz):
                processed.append(goal)
                continue

            archived = RecurrenceEngine.record_completion(goal, now)
            processed.append(RecurrenceEngine.reset_goal(archived, now))
            reset_count += 1
            const.LOGGER.debug(
                "DEBUG: Reset recurring goal %s (was_complete=%s, history=%d)",
                goal.get(const.DATA_GOAL_ID),
                bool(goal.get(const.DATA_GOAL_IS_COMPLETE)),
                len(archived.get(const.DATA_GOAL_COMPLETION_HISTORY, [])),
            )

        if reset_count:
            const.LOGGER.info("INFO: Reset %d recurring goal(s)", reset_count)

        return processed

    # =========================================================================
    # COMPLETION COUNTS
    # =========================================================================

    @staticmethod
    def get_completion_count(goal: GoalData) -> int:
        """Number of completion events a goal has earned points for.

        Terminal goals count once when complete. Recurring goals count every
        archived completion plus the current one.
        """
        current = 1 if goal.get(const.DATA_GOAL_IS_COMPLETE) else 0
        if not goal.get(const.DATA_GOAL_IS_RECURRING):
            return current
        return len(goal.get(const.DATA_GOAL_COMPLETION_HISTORY) or []) + current

    @staticmethod
    def get_total_points_earned(goal: GoalData) -> float:
        """Points a goal has produced across all of its completions."""
        return RecurrenceEngine.get_completion_count(goal) * goal.get(
            const.DATA_GOAL_POINTS, 0
        )
