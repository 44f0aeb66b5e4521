"""Record construction and load-time normalization.

This module is the SINGLE SOURCE OF TRUTH for:
- Goal and reward field defaults
- Complete record structure building
- Normalizing records persisted by older versions (missing fields)

### Build Functions
``build_goal()`` / ``build_reward()``:
- Take user input with DATA_* keys (may have missing fields)
- Validate it against schemas.GOAL_INPUT_SCHEMA / REWARD_INPUT_SCHEMA
- Assign the next integer id when none is supplied
- Set created_at (and period_start_date for goals)
- Apply field defaults
- Return a complete record ready for storage

### Normalize Functions
``normalize_goal()`` / ``normalize_reward()`` fill fields that older
storage files lack, without overwriting anything already present.

See Also:
- type_defs.py: TypedDict definitions for type safety
- store.py: persistence of the built records
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any, cast

from . import const
from .schemas import GOAL_INPUT_SCHEMA, REWARD_INPUT_SCHEMA
from .type_defs import GoalData, RewardData
from .utils.dt_utils import dt_now_utc, dt_to_ms

# ==============================================================================
# HELPER FUNCTIONS FOR FIELD NORMALIZATION
# ==============================================================================


def _normalize_list_field(value: Any) -> list[Any]:
    """Normalize a field that should be a list.

    - Already a list → copy
    - None → empty list
    - Other iterables → list
    """
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    if isinstance(value, str):
        return [value] if value else []
    return list(value) if value else []


def _normalize_points(value: Any) -> int:
    """Normalize a stored point value to a whole number.

    - Fractional → rounded to the nearest integer
    - None or unparseable → 0 (logged)
    """
    try:
        return round(float(value if value is not None else const.DEFAULT_ZERO))
    except (TypeError, ValueError, OverflowError):
        const.LOGGER.warning("WARNING: Invalid point value %r; using 0", value)
        return const.DEFAULT_ZERO


def next_id(
records: Iterable[dict[str, Any]]) -> int:
    """Return one past the highest integer id in ``records`` (1 when empty)."""
    return max((record.get("id", 0) for record in records), default=0) + 1


# ==============================================================================
# GOALS
# ==============================================================================


def build_goal(
    user_input: dict[str, Any],
    existing_goals: Iterable[GoalData] = (),
    now: datetime | None = None,
) -> GoalData:
    """Build a complete goal record for storage.

    Args:
        user_input: Data with DATA_GOAL_* keys (may have missing fields)
        existing_goals: Goals already stored, used to assign the next id
        now: Creation instant override

    Returns:
        Complete GoalData ready for storage

    Raises:
        vol.Invalid: the input fails GOAL_INPUT_SCHEMA

    Examples:
        goal = build_goal({DATA_GOAL_TITLE: "Read", DATA_GOAL_TARGET: 20})
        goal["period"]  # "ongoing"
    """
    user_input = GOAL_INPUT_SCHEMA(dict(user_input))
    created_at = dt_to_ms(now or dt_now_utc())

    def get_field(data_key: str, default: Any) -> Any:
        return user_input.get(data_key, default)

    current = float(get_field(const.DATA_GOAL_CURRENT, const.DEFAULT_ZERO))
    goal_id = get_field(const.DATA_GOAL_ID, None)
    if goal_id is None:
        goal_id = next_id(cast("Iterable[dict[str, Any]]", existing_goals))

    return cast(
        "GoalData",
        {
            const.DATA_GOAL_ID: goal_id,
            const.DATA_GOAL_TITLE: str(get_field(const.DATA_GOAL_TITLE, "")).strip(),
            const.DATA_GOAL_PARENT_ID: get_field(const.DATA_GOAL_PARENT_ID, None),
            const.DATA_GOAL_SUB_GOALS: _normalize_list_field(
                get_field(const.DATA_GOAL_SUB_GOALS, None)
            ),
            const.DATA_GOAL_CURRENT: current,
            const.DATA_GOAL_TARGET: float(
                get_field(const.DATA_GOAL_TARGET, const.DEFAULT_ZERO)
            ),
            const.DATA_GOAL_INITIAL_VALUE: get_field(
                const.DATA_GOAL_INITIAL_VALUE, current
            ),
            const.DATA_GOAL_DIRECTION: get_field(
                const.DATA_GOAL_DIRECTION, const.DIRECTION_INCREASE
            ),
            const.DATA_GOAL_UNIT: str(get_field(const.DATA_GOAL_UNIT, "")),
            const.DATA_GOAL_PERIOD: get_field(
                const.DATA_GOAL_PERIOD, const.DEFAULT_PERIOD
            ),
            const.DATA_GOAL_CUSTOM_PERIOD_DAYS: get_field(
                const.DATA_GOAL_CUSTOM_PERIOD_DAYS, None
            ),
            const.DATA_GOAL_PERIOD_START_DATE: get_field(
                const.DATA_GOAL_PERIOD_START_DATE, created_at
            ),
            const.DATA_GOAL_CREATED_AT: created_at,
            const.DATA_GOAL_IS_RECURRING: bool(
                get_field(const.DATA_GOAL_IS_RECURRING, False)
            ),
            const.DATA_GOAL_IS_COMPLETE: False,
            const.DATA_GOAL_COMPLETED_AT: None,
            const.DATA_GOAL_COMPLETION_HISTORY: [],
            const.DATA_GOAL_IS_PAUSED: False,
            const.DATA_GOAL_IS_ARCHIVED: False,
            const.DATA_GOAL_CURRENT_STREAK: 0,
            const.DATA_GOAL_LONGEST_STREAK: 0,
            const.DATA_GOAL_POINTS: int(
                get_field(const.DATA_GOAL_POINTS, const.DEFAULT_ZERO)
            ),
            const.DATA_GOAL_POINTS_AWARDED: False,
            const.DATA_GOAL_NOTIFICATIONS_ENABLED: bool(
                get_field(const.DATA_GOAL_NOTIFICATIONS_ENABLED, False)
            ),
            const.DATA_GOAL_NOTIFICATION_TIME: get_field(
                const.DATA_GOAL_NOTIFICATION_TIME, None
            ),
            const.DATA_GOAL_NOTIFICATION_DAYS: _normalize_list_field(
                get_field(
                    const.DATA_GOAL_NOTIFICATION_DAYS, const.DEFAULT_NOTIFICATION_DAYS
                )
            ),
        },
    )


# Defaults applied by normalize_goal to records missing a field.
# initial_value and period_start_date depend on other fields and are handled
# separately.
_GOAL_FIELD_DEFAULTS: dict[str, Any] = {
    const.DATA_GOAL_PARENT_ID: None,
    const.DATA_GOAL_CURRENT: const.DEFAULT_ZERO,
    const.DATA_GOAL_TARGET: const.DEFAULT_ZERO,
    const.DATA_GOAL_DIRECTION: const.DIRECTION_INCREASE,
    const.DATA_GOAL_UNIT: "",
    const.DATA_GOAL_PERIOD: const.DEFAULT_PERIOD,
    const.DATA_GOAL_CUSTOM_PERIOD_DAYS: None,
    const.DATA_GOAL_IS_RECURRING: False,
    const.DATA_GOAL_IS_COMPLETE: False,
    const.DATA_GOAL_COMPLETED_AT: None,
    const.DATA_GOAL_IS_PAUSED: False,
    const.DATA_GOAL_IS_ARCHIVED: False,
    const.DATA_GOAL_CURRENT_STREAK: 0,
    const.DATA_GOAL_LONGEST_STREAK: 0,
    const.DATA_GOAL_POINTS: const.DEFAULT_ZERO,
    const.DATA_GOAL_NOTIFICATIONS_ENABLED: False,
    const.DATA_GOAL_NOTIFICATION_TIME: None,
}


def normalize_goal(goal: dict[str, Any], now: datetime | None = None) -> GoalData:
    """Return a copy of a stored goal with every missing field filled in.

    - initial_value ← current
    - period ← ongoing
    - sub_goals / completion_history ← []
    - period_start_date ← created_at, or now when that is missing too
    - flags ← False, streak caches ← 0
    - points_awarded ← is_complete
    - points ← rounded to a whole number
    """
    normalized = dict(goal)
    for key, default in _GOAL_FIELD_DEFAULTS.items():
        normalized.setdefault(key, default)

    normalized[const.DATA_GOAL_SUB_GOALS] = _normalize_list_field(
        normalized.get(const.DATA_GOAL_SUB_GOALS)
    )
    normalized[const.DATA_GOAL_COMPLETION_HISTORY] = _normalize_list_field(
        normalized.get(const.DATA_GOAL_COMPLETION_HISTORY)
    )
    if normalized.get(const.DATA_GOAL_NOTIFICATION_DAYS) is None:
        normalized[const.DATA_GOAL_NOTIFICATION_DAYS] = list(
            const.DEFAULT_NOTIFICATION_DAYS
        )

    normalized[const.DATA_GOAL_POINTS] = _normalize_points(
        normalized[const.DATA_GOAL_POINTS]
    )

    # Records that predate the flag were paid when they completed
    normalized.setdefault(
        const.DATA_GOAL_POINTS_AWARDED, bool(normalized[const.DATA_GOAL_IS_COMPLETE])
    )

    if normalized.get(const.DATA_GOAL_INITIAL_VALUE) is None:
        normalized[const.DATA_GOAL_INITIAL_VALUE] = normalized[const.DATA_GOAL_CURRENT]

    if normalized.get(const.DATA_GOAL_PERIOD_START_DATE) is None:
        created_at = normalized.get(const.DATA_GOAL_CREATED_AT)
        normalized[const.DATA_GOAL_PERIOD_START_DATE] = (
            created_at if created_at is not None else dt_to_ms(now or dt_now_utc())
        )

    return cast("GoalData", normalized)


# ==============================================================================
# REWARDS
# ==============================================================================


def build_reward(
    user_input: dict[str, Any],
    existing_rewards: Iterable[RewardData] = (),
    now: datetime | None = None,
) -> RewardData:
    """Build a complete, unredeemed reward record for storage.

    Raises:
        vol.Invalid: the input fails REWARD_INPUT_SCHEMA
    """
    user_input = REWARD_INPUT_SCHEMA(dict(user_input))
    reward_id = user_input.get(const.DATA_REWARD_ID)
    if reward_id is None:
        reward_id = next_id(cast("Iterable[dict[str, Any]]", existing_rewards))

    return cast(
        "RewardData",
        {
            const.DATA_REWARD_ID: reward_id,
            const.DATA_REWARD_TITLE: str(
                user_input.get(const.DATA_REWARD_TITLE, "")
            ).strip(),
            const.DATA_REWARD_POINTS_COST: int(
                user_input.get(const.DATA_REWARD_POINTS_COST, const.DEFAULT_ZERO)
            ),
            const.DATA_REWARD_IS_REDEEMED: False,
            const.DATA_REWARD_REDEEMED_AT: None,
            const.DATA_REWARD_CREATED_AT: dt_to_ms(now or dt_now_utc()),
        },
    )


def normalize_reward(reward: dict[str, Any]) -> RewardData:
    """Return a copy of a stored reward with missing fields filled in."""
    normalized = dict(reward)
    normalized.setdefault(const.DATA_REWARD_TITLE, "")
    normalized[const.DATA_REWARD_POINTS_COST] = _normalize_points(
        normalized.get(const.DATA_REWARD_POINTS_COST)
    )
    normalized.setdefault(const.DATA_REWARD_IS_REDEEMED, False)
    normalized.setdefault(const.DATA_REWARD_REDEEMED_AT, None)
    return cast("RewardData", normalized)
