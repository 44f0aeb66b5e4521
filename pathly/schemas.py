# File: schemas.py
"""Input validation schemas for Pathly.

Callers hand Pathly goal and reward input plus an optional achievement
catalog. These voluptuous schemas check that input at the boundary; the
engines then assume well-formed records.

Unknown extra keys are allowed so builders can accept full records.
"""

import voluptuous as vol

from . import const

# --- Shared Validators ---
NON_EMPTY_STRING = vol.All(vol.Coerce(str), vol.Strip, vol.Length(min=1))
NUMBER = vol.Coerce(float)


def _whole_number(value: float) -> int:
    """Accept 12, 12.0 and "12" as 12; reject fractional points."""
    if not float(value).is_integer():
        raise vol.Invalid(f"points must be a whole number, got {value}")
    return int(value)


WHOLE_POINTS = vol.All(vol.Coerce(float), _whole_number, vol.Range(min=0))


# --- Record Input Schemas ---
def _require_custom_period_days(user_input: dict) -> dict:
    """A custom period is only meaningful with a day count."""
    if (
        user_input.get(const.DATA_GOAL_PERIOD) == const.PERIOD_CUSTOM
        and user_input.get(const.DATA_GOAL_CUSTOM_PERIOD_DAYS) is None
    ):
        raise vol.Invalid(
            "custom period requires custom_period_days",
            path=[const.DATA_GOAL_CUSTOM_PERIOD_DAYS],
        )
    return user_input


GOAL_INPUT_SCHEMA = vol.All(
    vol.Schema(
        {
            vol.Required(const.DATA_GOAL_TITLE): NON_EMPTY_STRING,
            vol.Optional(const.DATA_GOAL_CURRENT): NUMBER,
            vol.Optional(const.DATA_GOAL_TARGET): NUMBER,
            vol.Optional(const.DATA_GOAL_INITIAL_VALUE): vol.Any(None, NUMBER),
            vol.Optional(const.DATA_GOAL_DIRECTION): vol.In(const.DIRECTIONS),
            vol.Optional(const.DATA_GOAL_PERIOD): vol.In(const.PERIOD_KINDS),
            vol.Optional(const.DATA_GOAL_CUSTOM_PERIOD_DAYS): vol.Any(
                None, vol.All(vol.Coerce(int), vol.Range(min=1))
            ),
            vol.Optional(const.DATA_GOAL_POINTS): WHOLE_POINTS,
            vol.Optional(const.DATA_GOAL_NOTIFICATION_TIME): vol.Any(
                None,
                vol.All(
                    vol.Coerce(int), vol.Range(min=0, max=const.MINUTES_PER_DAY - 1)
                ),
            ),
            vol.Optional(const.DATA_GOAL_NOTIFICATION_DAYS): [
                vol.All(vol.Coerce(int), vol.Range(min=0, max=6))
            ],
        },
        extra=vol.ALLOW_EXTRA,
    ),
    _require_custom_period_days,
)

REWARD_INPUT_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_REWARD_TITLE): NON_EMPTY_STRING,
        vol.Optional(const.DATA_REWARD_POINTS_COST): WHOLE_POINTS,
    },
    extra=vol.ALLOW_EXTRA,
)

# --- Achievement Catalog Schemas ---
# Requirement types are not restricted here: an unknown type evaluates to
# zero progress with a warning instead of failing the whole catalog.
ACHIEVEMENT_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_ACHIEVEMENT_ID): NON_EMPTY_STRING,
        vol.Required(const.DATA_ACHIEVEMENT_NAME): NON_EMPTY_STRING,
        vol.Required(const.DATA_ACHIEVEMENT_REQUIREMENT): {
            vol.Required(const.DATA_ACHIEVEMENT_REQUIREMENT_TYPE): NON_EMPTY_STRING,
            vol.Required(const.DATA_ACHIEVEMENT_REQUIREMENT_VALUE): NUMBER,
        },
    },
    extra=vol.ALLOW_EXTRA,
)

ACHIEVEMENT_CATALOG_SCHEMA = vol.Schema([ACHIEVEMENT_SCHEMA])
