# File: utils/dt_utils.py
"""Date and time utilities for Pathly.

Pure Python date/time functions used by every engine that needs a clock or
a local-day boundary. Records store instants as epoch milliseconds; these
helpers convert between that representation and timezone-aware datetimes.

Functions:
    - set_default_timezone / get_default_timezone: Process-wide local zone
    - dt_now_utc: Current time (aware, UTC)
    - as_utc / as_local: Timezone conversion (naive input assumed UTC)
    - dt_from_ms / dt_to_ms: Epoch-millisecond conversion
    - local_date: Local calendar date of an instant
    - end_of_local_day: Last instant (23:59:59.999) of a datetime's local day
    - start_of_local_date / end_of_local_date: Bounds of a given calendar date
    - dt_format_duration: Compact "1d 6h 30m" rendering
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
import logging
from zoneinfo import ZoneInfo

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

# Last representable instant of a day at millisecond precision
END_OF_DAY_TIME = time(23, 59, 59, 999000)


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this once during setup to configure the user's timezone; all local
    day boundaries (period ends, streak buckets, review windows) follow it.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz
    _LOGGER.debug("Default timezone set to %s", tz)


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC. Naive input is assumed to already be UTC."""
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Args:
        dt_obj: Datetime object (naive input is assumed to be UTC)
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime in local timezone
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


# ==============================================================================
# Epoch Milliseconds
# ==============================================================================


def dt_from_ms(epoch_ms: float) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime.

    Examples:
        dt_from_ms(0) → datetime(1970, 1, 1, tzinfo=UTC)
    """
    return datetime.fromtimestamp(epoch_ms / 1000, tz=UTC)


def dt_to_ms(dt_obj: datetime) -> int:
    """Convert a datetime to integer epoch milliseconds.

    Naive input is assumed to be UTC. Sub-millisecond precision is truncated
    toward the past so that an end-of-day instant stays inside its day.
    """
    delta = as_utc(dt_obj) - datetime(1970, 1, 1, tzinfo=UTC)
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000


def dt_now_ms() -> int:
    """Return the current time as epoch milliseconds."""
    return dt_to_ms(dt_now_utc())


# ==============================================================================
# Local Day Boundaries
# ==============================================================================


def local_date(value: datetime | float, tz: ZoneInfo | None = None) -> date:
    """Return the local calendar date of an instant.

    Args:
        value: Aware datetime or epoch milliseconds
        tz: Optional timezone override.
    """
    dt_obj = dt_from_ms(value) if isinstance(value, (int, float)) else value
    return as_local(dt_obj, tz).date()


def start_of_local_date(day: date, tz: ZoneInfo | None = None) -> datetime:
    """Return 00:00 local on the given calendar date."""
    return datetime.combine(day, time.min, tzinfo=tz or DEFAULT_TIME_ZONE)


def end_of_local_date(day: date, tz: ZoneInfo | None = None) -> datetime:
    """Return 23:59:59.999 local on the given calendar date."""
    return datetime.combine(day, END_OF_DAY_TIME, tzinfo=tz or DEFAULT_TIME_ZONE)


def end_of_local_day(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Get the last instant (23:59:59.999) of a datetime's local day."""
    tz_info = tz or DEFAULT_TIME_ZONE
    return end_of_local_date(as_local(dt_obj, tz_info).date(), tz_info)


# ==============================================================================
# Formatting
# ==============================================================================


def dt_format_duration(td: timedelta | None) -> str:
    """Format a timedelta into a compact duration string.

    Returns:
        Duration string like "1d 6h 30m", or "0" if None/zero.

    Examples:
        dt_format_duration(timedelta(days=1, hours=6)) → "1d 6h"
        dt_format_duration(timedelta(minutes=30)) → "30m"
        dt_format_duration(None) → "0"
    """
    if td is None or td <= timedelta():
        return "0"

    total_seconds = int(td.total_seconds())
    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes = remainder // 60

    parts: list[str] = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    return " ".join(parts) if parts else "0"
