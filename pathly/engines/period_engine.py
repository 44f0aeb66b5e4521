"""Period Engine - Period boundaries and time-remaining arithmetic.

Maps a goal's period start instant and period kind to the instant the period
ends, and breaks the distance to that instant down into days/hours/minutes.

Period end rule:
    - daily:   23:59:59.999 local on the start day
    - weekly:  start + 7 x 24h
    - monthly: same local wall-clock time on the same day next month
    - yearly:  same local wall-clock time on the same day next year
    - custom:  start + custom_days x 24h
    - ongoing: never ends

    Month/year arithmetic uses ``dateutil.relativedelta`` so it is calendar
    aware. When the day-of-month does not exist in the target month the end
    clamps to that month's last day (Jan 31 + 1 month = Feb 28).

    Custom periods without a positive day count and unknown kinds have no
    fixed length; their end is the start instant itself.

ARCHITECTURE: Stateless. All methods are static and take an optional ``now``
so callers control the clock.
"""

from __future__ import annotations

from datetime import datetime, timedelta
import math
from typing import TYPE_CHECKING, ClassVar

from dateutil.relativedelta import relativedelta

from .. import const
from ..utils.dt_utils import (
    as_local,
    dt_format_duration,
    dt_from_ms,
    dt_now_utc,
    dt_to_ms,
    end_of_local_day,
)

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from ..type_defs import TimeRemaining


class PeriodEngine:
    """Pure logic engine for period boundaries.

    All methods are static - no instance state.
    """

    # Period kinds whose length is a calendar offset subject to day clamping
    CALENDAR_OFFSETS: ClassVar[dict[str, relativedelta]] = {
        const.PERIOD_MONTHLY: relativedelta(months=1),
        const.PERIOD_YEARLY: relativedelta(years=1),
    }

    # =========================================================================
    # PERIOD END
    # =========================================================================

    @staticmethod
    def has_fixed_length(period_kind: str, custom_days: int | None = None) -> bool:
        """Return True when a period kind has a usable, bounded length."""
        if period_kind == const.PERIOD_CUSTOM:
            return custom_days is not None and custom_days > 0
        return (
            period_kind in (const.PERIOD_DAILY, const.PERIOD_WEEKLY)
            or period_kind in PeriodEngine.CALENDAR_OFFSETS
        )

    @staticmethod
    def period_end(
        period_start: int,
        period_kind: str,
        custom_days: int | None = None,
        tz: ZoneInfo | None = None,
    ) -> int | None:
        """Return the instant a period ends, in epoch milliseconds.

        Args:
            period_start: Period opening instant (epoch ms)
            period_kind: One of const.PERIOD_KINDS
            custom_days: Period length in days for custom periods
            tz: Optional timezone override for local-day boundaries

        Returns:
            End instant, None for ongoing goals, or ``period_start`` itself
            for periods without a fixed length.

        Example:
            Monthly period opening 2025-01-31 10:00 ends 2025-02-28 10:00.
        """
        if period_kind == const.PERIOD_ONGOING:
            return None

        if not PeriodEngine.has_fixed_length(period_kind, custom_days):
            const.LOGGER.warning(
                "WARNING: Period %s without a usable length (custom days: %s); "
                "treating it as already ended",
                period_kind,
                custom_days,
            )
            return period_start

        if period_kind == const.PERIOD_DAILY:
            return dt_to_ms(end_of_local_day(dt_from_ms(period_start), tz))

        if period_kind == const.PERIOD_WEEKLY:
            return period_start + 7 * const.MS_PER_DAY

        if period_kind == const.PERIOD_CUSTOM:
            return period_start + int(custom_days) * const.MS_PER_DAY

        start_local = as_local(dt_from_ms(period_start), tz)
        return dt_to_ms(start_local + PeriodEngine.CALENDAR_OFFSETS[period_kind])

    @staticmethod
    def is_period_elapsed(
        period_start: int | None,
        period_kind: str,
        custom_days: int | None = None,
        now: datetime | None = None,
        tz: ZoneInfo | None = None,
    ) -> bool:
        """Return True once ``now`` has reached the period's end instant.

        Ongoing goals and goals without a period start never elapse.
        """
        if period_start is None or period_kind == const.PERIOD_ONGOING:
            return False

        end = PeriodEngine.period_end(period_start, period_kind, custom_days, tz)
        if end is None:
            return False

        now_ms = dt_to_ms(now or dt_now_utc())
        return now_ms >= end

    # =========================================================================
    # TIME REMAINING
    # =========================================================================

    @staticmethod
    def time_remaining(
        period_start: int | None,
        period_kind: str,
        custom_days: int | None = None,
        is_recurring: bool = False,
        now: datetime | None = None,
        tz: ZoneInfo | None = None,
    ) -> TimeRemaining:
        """Break the time until the period ends into whole units.

        Rules:
        - Ongoing: unbounded (days = inf), never expired.
        - No period start: all zero, not expired ("not yet scheduled").
        - Past the end: all zero. Terminal goals are expired (lapsed);
          recurring goals are not (the period is about to reset).
        - Otherwise: floor-divided, non-negative days/hours/minutes.

        Args:
            period_start: Period opening instant (epoch ms) or None
            period_kind: One of const.PERIOD_KINDS
            custom_days: Period length in days for custom periods
            is_recurring: Whether the goal resets instead of lapsing
            now: Optional current time override for deterministic callers
            tz: Optional timezone override

        Returns:
            TimeRemaining dict
        """
        if period_kind == const.PERIOD_ONGOING:
            return PeriodEngine._make_remaining(
                days=math.inf, hours=0, minutes=0, is_expired=False, total_ms=math.inf
            )

        if period_start is None:
            return PeriodEngine._make_remaining(
                days=0, hours=0, minutes=0, is_expired=False, total_ms=0
            )

        end = PeriodEngine.period_end(period_start, period_kind, custom_days, tz)
        now_ms = dt_to_ms(now or dt_now_utc())
        difference = (end if end is not None else period_start) - now_ms

        if difference <= 0:
            return PeriodEngine._make_remaining(
                days=0,
                hours=0,
                minutes=0,
                is_expired=not is_recurring,
                total_ms=0,
            )

        days, remainder = divmod(difference, const.MS_PER_DAY)
        hours, remainder = divmod(remainder, const.MS_PER_HOUR)
        minutes = remainder // const.MS_PER_MINUTE

        return PeriodEngine._make_remaining(
            days=days,
            hours=hours,
            minutes=minutes,
            is_expired=False,
            total_ms=difference,
        )

    @staticmethod
    def format_time_remaining(remaining: TimeRemaining, is_recurring: bool) -> str:
        """Render a TimeRemaining as compact English text.

        Minutes are dropped when whole days remain; hours are dropped when
        only minutes remain. Recurring goals read "resets in ...", terminal
        goals read "... left".

        Examples:
            {days: 2, hours: 5, minutes: 10}, False → "2d 5h left"
            {days: 0, hours: 0, minutes: 45}, True → "resets in 45m"
        """
        if math.isinf(remaining["days"]):
            return "no deadline"

        if remaining["is_expired"]:
            return "expired"

        days = int(remaining["days"])
        hours = remaining["hours"]
        minutes = remaining["minutes"]

        if days > 0:
            text = dt_format_duration(timedelta(days=days, hours=hours))
        elif hours > 0:
            text = f"{hours}h {minutes}m"
        else:
            text = f"{minutes}m"

        return f"resets in {text}" if is_recurring else f"{text} left"

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _make_remaining(
        days: float,
        hours: int,
        minutes: int,
        is_expired: bool,
        total_ms: float,
    ) -> TimeRemaining:
        return {
            "days": days,
            "hours": int(hours),
            "minutes": int(minutes),
            "is_expired": is_expired,
            "total_ms": total_ms,
        }
