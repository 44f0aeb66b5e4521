# File: notification_helper.py
"""Builds reminder payloads for an external notification scheduler.

Pathly does not schedule anything itself. For each goal with reminders
enabled it hands out ``{goal_id, title, notification_time, notification_days}``
where ``notification_time`` is minutes after local midnight and
``notification_days`` uses 0 = Sunday ... 6 = Saturday.
"""

from __future__ import annotations

from collections.abc import Iterable

from . import const
from .type_defs import GoalData, NotificationRequest


def build_notification_request(goal: GoalData) -> NotificationRequest | None:
    """Return the reminder payload for a goal, or None if it has no reminder.

    Out-of-range times are logged and skipped. An empty day list means every
    day of the week.
    """
    if not goal.get(const.DATA_GOAL_NOTIFICATIONS_ENABLED):
        return None

    notification_time = goal.get(const.DATA_GOAL_NOTIFICATION_TIME)
    if notification_time is None:
        return None
    if not 0 <= notification_time < const.MINUTES_PER_DAY:
        const.LOGGER.warning(
            "WARNING: Goal %s has invalid notification time %s (minutes after midnight)",
            goal.get(const.DATA_GOAL_ID),
            notification_time,
        )
        return None

    days = sorted(
        {
            day
            for day in goal.get(const.DATA_GOAL_NOTIFICATION_DAYS) or []
            if 0 <= day <= 6
        }
    )

    return {
        "goal_id": goal[const.DATA_GOAL_ID],
        "title": goal.get(const.DATA_GOAL_TITLE, ""),
        "notification_time": int(notification_time),
        "notification_days": days or list(const.DEFAULT_NOTIFICATION_DAYS),
    }


def build_notification_requests(
    goals: Iterable[GoalData],
) -> list[NotificationRequest]:
    """Reminder payloads for every goal that is neither paused nor archived."""
    requests: list[NotificationRequest] = []
    for goal in goals:
        if goal.get(const.DATA_GOAL_IS_PAUSED) or goal.get(const.DATA_GOAL_IS_ARCHIVED):
            continue
        request = build_notification_request(goal)
        if request is not None:
            requests.append(request)
    return requests
