"""Gamification Engine - Pure logic for achievement evaluation.

This engine provides stateless, pure Python functions for:
- Achievement progress against a Statistics snapshot
- Newly unlocked achievement detection (previous vs current snapshot diff)
- Merging unlocked ids back into a snapshot

Requirement types map onto one statistics field each:
- goals_completed: completed_goals
- points_earned:   lifetime_points_earned
- streak_days:     current_streak

Idempotence: an id already present in the previous snapshot's
``achievements_unlocked`` is never reported again, so once the caller merges
the returned ids a repeated diff yields ``[]``.

ARCHITECTURE: No side effects, no storage access, no state mutation. The
coordinator persists the merged unlocked ids.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.math_utils import calculate_percentage

if TYPE_CHECKING:
    from ..type_defs import AchievementData, EvaluationResult, StatisticsData


class GamificationEngine:
    """Pure logic engine for achievement evaluation.

    All methods are static - no instance state.

    Evaluation Flow:
        1. Coordinator computes a fresh Statistics snapshot
        2. Engine diffs it against the previous snapshot
        3. Coordinator merges the new ids and persists them
    """

    # =========================================================================
    # CATALOG LOOKUP
    # =========================================================================

    @staticmethod
    def get_achievement(
        achievement_id: str,
        catalog: Sequence[AchievementData] | None = None,
    ) -> AchievementData | None:
        """Find a catalog entry by id, or None."""
        for achievement in catalog if catalog is not None else const.ACHIEVEMENTS:
            if achievement.get(const.DATA_ACHIEVEMENT_ID) == achievement_id:
                return achievement  # type: ignore[return-value]
        return None

    # =========================================================================
    # MAIN EVALUATION METHODS
    # =========================================================================

    @staticmethod
    def evaluate_achievement(
        achievement_data: AchievementData | dict[str, Any],
        stats: StatisticsData | dict[str, Any],
    ) -> EvaluationResult:
        """Evaluate one achievement against a statistics snapshot.

        Args:
            achievement_data: Catalog entry
            stats: Statistics snapshot

        Returns:
            EvaluationResult with progress in [0, 100]
        """
        achievement_id = achievement_data.get(const.DATA_ACHIEVEMENT_ID, "unknown")
        achievement_name = achievement_data.get(
            const.DATA_ACHIEVEMENT_NAME, "Unknown Achievement"
        )
        requirement = achievement_data.get(const.DATA_ACHIEVEMENT_REQUIREMENT) or {}
        requirement_type = requirement.get(const.DATA_ACHIEVEMENT_REQUIREMENT_TYPE)
        threshold = requirement.get(const.DATA_ACHIEVEMENT_REQUIREMENT_VALUE, 0)

        stat_key = const.ACHIEVEMENT_TYPE_TO_STAT.get(requirement_type or "")
        if stat_key is None:
            const.LOGGER.warning(
                "Achievement %s has unknown requirement type: %s",
                achievement_id,
                requirement_type,
            )
            return GamificationEngine._make_result(
                achievement_id,
                achievement_name,
                criteria_met=False,
                progress=0.0,
                current_value=0,
                threshold=threshold,
                reason=f"Unknown requirement type: {requirement_type}",
            )

        current_value = stats.get(stat_key) or 0
        progress = calculate_percentage(current_value, threshold)

        return GamificationEngine._make_result(
            achievement_id,
            achievement_name,
            criteria_met=progress >= const.PROGRESS_MAX,
            progress=progress,
            current_value=current_value,
            threshold=threshold,
            reason=f"{requirement_type}: {current_value}/{threshold}",
        )

    @staticmethod
    def get_achievement_progress(
        achievement_id: str,
        stats: StatisticsData | dict[str, Any],
        catalog: Sequence[AchievementData] | None = None,
    ) -> float:
        """Progress percentage toward an achievement.

        Returns:
            Progress in [0, 100]; 0 for ids missing from the catalog
        """
        achievement = GamificationEngine.get_achievement(achievement_id, catalog)
        if achievement is None:
            const.LOGGER.warning("Unknown achievement id: %s", achievement_id)
            return 0.0
        return GamificationEngine.evaluate_achievement(achievement, stats)["progress"]

    @staticmethod
    def get_newly_unlocked_achievements(
        previous_stats: StatisticsData | dict[str, Any],
        current_stats: StatisticsData | dict[str, Any],
        catalog: Sequence[AchievementData] | None = None,
    ) -> list[str]:
        """Diff two snapshots into achievement ids unlocked just now.

        Ids already in ``previous_stats`` are never reported. Result order is
        catalog order.
        """
        already_unlocked = set(
            previous_stats.get(const.DATA_STATS_ACHIEVEMENTS_UNLOCKED) or []
        )
        newly_unlocked: list[str] = []

        for achievement in catalog if catalog is not None else const.ACHIEVEMENTS:
            achievement_id = achievement[const.DATA_ACHIEVEMENT_ID]
            if achievement_id in already_unlocked:
                continue
            result = GamificationEngine.evaluate_achievement(achievement, current_stats)
            if result["criteria_met"]:
                newly_unlocked.append(achievement_id)

        return newly_unlocked

    @staticmethod
    def merge_unlocked(
        stats: StatisticsData,
        new_ids: Iterable[str],
    ) -> StatisticsData:
        """Return a copy of ``stats`` with ``new_ids`` appended (no duplicates)."""
        unlocked = list(stats.get(const.DATA_STATS_ACHIEVEMENTS_UNLOCKED) or [])
        for achievement_id in new_ids:
            if achievement_id not in unlocked:
                unlocked.append(achievement_id)

        merged = dict(stats)
        merged[const.DATA_STATS_ACHIEVEMENTS_UNLOCKED] = unlocked
        return merged  # type: ignore[return-value]

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    @staticmethod
    def _make_result(
        entity_id: str,
        entity_name: str,
        criteria_met: bool,
        progress: float,
        current_value: float,
        threshold: float,
        reason: str = "",
    ) -> EvaluationResult:
        """Create a standardized EvaluationResult."""
        return {
            "entity_id": entity_id,
            "entity_name": entity_name,
            "criteria_met": criteria_met,
            "progress": progress,
            "current_value": current_value,
            "threshold": threshold,
            "reason": reason,
        }
