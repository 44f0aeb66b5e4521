"""Progress Engine - Goal progress percentages and subgoal aggregation.

Progress is always a percentage in [0, 100]. Malformed numbers (non-positive
targets, negative values, a decreasing goal whose starting value is already
at or below the target) are normalized to the nearest valid result instead
of raising.

Hierarchy:
    A goal with a non-empty ``sub_goals`` list is an aggregator: its progress
    is the arithmetic mean of its children's progress, recursively. Children
    are resolved through an id -> goal index (an arena); ids that do not
    resolve are dropped. The tree shape is checked once at load time by
    ``validate_goal_tree``. ``aggregate_progress`` does not guard against
    cycles itself.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from .. import const
from ..exceptions import GoalHierarchyError
from ..utils.math_utils import clamp

if TYPE_CHECKING:
    from ..type_defs import GoalData, GoalId

__all__ = ["GoalHierarchyError", "ProgressEngine"]


class ProgressEngine:
    """Pure logic engine for progress calculations.

    All methods are static - no instance state.
    """

    # =========================================================================
    # SINGLE GOAL
    # =========================================================================

    @staticmethod
    def progress(
        current: float,
        target: float,
        direction: str,
        initial_value: float | None = None,
    ) -> float:
        """Calculate progress percentage from a goal's own values.

        Args:
            current: Current value
            target: Target value to reach
            direction: const.DIRECTION_INCREASE or const.DIRECTION_DECREASE
            initial_value: Starting value (decreasing goals); defaults to current

        Returns:
            Progress in [0, 100]

        Examples:
            progress(5, 20, "increase") → 25.0
            progress(70, 60, "decrease", 80) → 50.0  # 80 → 60, now at 70
            progress(50, 70, "decrease", 100) → 100.0  # already past target
            progress(0, 0, "increase") → 0.0
        """
        if target <= 0:
            return 0.0

        if direction == const.DIRECTION_DECREASE:
            initial = current if initial_value is None else initial_value
            span = initial - target
            if span <= 0:
                # Started at or below the target: complete or malformed
                return const.PROGRESS_MAX if current <= target else const.PROGRESS_MIN
            ratio = (initial - current) / span * 100
        else:
            ratio = current / target * 100

        return clamp(ratio, const.PROGRESS_MIN, const.PROGRESS_MAX)

    @staticmethod
    def goal_progress(goal: GoalData) -> float:
        """Calculate a goal's own progress, ignoring any subgoals."""
        return ProgressEngine.progress(
            goal.get(const.DATA_GOAL_CURRENT, 0),
            goal.get(const.DATA_GOAL_TARGET, 0),
            goal.get(const.DATA_GOAL_DIRECTION, const.DIRECTION_INCREASE),
            goal.get(const.DATA_GOAL_INITIAL_VALUE),
        )

    @staticmethod
    def is_goal_completed(progress: float) -> bool:
        """Return True when a progress percentage has reached 100."""
        return progress >= const.PROGRESS_MAX

    # =========================================================================
    # HIERARCHY
    # =========================================================================

    @staticmethod
    def build_goal_index(
        goals: Iterable[GoalData] | Mapping[GoalId, GoalData],
    ) -> dict[GoalId, GoalData]:
        """Build an id -> goal index from a goal list (mappings pass through)."""
        if isinstance(goals, Mapping):
            return dict(goals)
        return {goal[const.DATA_GOAL_ID]: goal for goal in goals}

    @staticmethod
    def aggregate_progress(
        goal: GoalData,
        all_goals: Iterable[GoalData] | Mapping[GoalId, GoalData],
    ) -> float:
        """Calculate progress, averaging over subgoals when present.

        PRECONDITION: the subgoal references must form a tree (see
        validate_goal_tree). A cycle here would loop forever.

        Uses an explicit stack so arbitrarily deep chains do not hit the
        interpreter's recursion limit.

        Args:
            goal: Goal to evaluate
            all_goals: Every goal (list or id -> goal mapping) to resolve ids

        Returns:
            Mean of resolved subgoal progress; 0.0 if none resolve; the goal's
            own progress when it has no subgoals.
        """
        index = ProgressEngine.build_goal_index(all_goals)
        resolved: dict[int, float] = {}

        # Post-order walk keyed by object identity, so the root need not be
        # present in the index.
        stack: list[tuple[GoalData, bool]] = [(goal, False)]
        while stack:
            node, children_done = stack.pop()
            child_ids = node.get(const.DATA_GOAL_SUB_GOALS) or []

            if not child_ids:
                resolved[id(node)] = ProgressEngine.goal_progress(node)
                continue

            children = [index[cid] for cid in child_ids if cid in index]
            if not children_done:
                stack.append((node, True))
                stack.extend(
                    (child, False) for child in children if id(child) not in resolved
                )
                continue

            if len(children) < len(child_ids):
                const.LOGGER.debug(
                    "DEBUG: Goal %s references %d unknown subgoal(s)",
                    node.get(const.DATA_GOAL_ID),
                    len(child_ids) - len(children),
                )

            if not children:
                resolved[id(node)] = 0.0
                continue

            resolved[id(node)] = sum(resolved[id(child)] for child in children) / len(
                children
            )

        return resolved[id(goal)]

    @staticmethod
    def validate_goal_tree(goals: Iterable[GoalData]) -> None:
        """Check once, at load time, that subgoal references form a forest.

        Raises:
            GoalHierarchyError: a goal lists itself, a child is listed under
                more than one parent, a child's parent_id disagrees with the
                listing parent, or following sub_goals revisits a goal (cycle).
        """
        index = ProgressEngine.build_goal_index(goals)
        listed_parent: dict[GoalId, GoalId] = {}

        for goal_id, goal in index.items():
            for child_id in goal.get(const.DATA_GOAL_SUB_GOALS) or []:
                if child_id == goal_id:
                    raise GoalHierarchyError(goal_id, "goal lists itself as a subgoal")
                if child_id in listed_parent and listed_parent[child_id] != goal_id:
                    raise GoalHierarchyError(
                        child_id,
                        f"listed under both {listed_parent[child_id]} and {goal_id}",
                    )
                listed_parent[child_id] = goal_id

                child = index.get(child_id)
                if child is None:
                    const.LOGGER.warning(
                        "Goal %s lists unknown subgoal %s", goal_id, child_id
                    )
                    continue
                child_parent = child.get(const.DATA_GOAL_PARENT_ID)
                if child_parent is not None and child_parent != goal_id:
                    raise GoalHierarchyError(
                        child_id,
                        f"parent_id is {child_parent} but goal {goal_id} lists it",
                    )

        # With single parents guaranteed, a cycle shows up as a walk up the
        # parent chain that returns to a goal already on the path.
        cleared: set[Any] = set()
        for start_id in index:
            path: set[Any] = set()
            node_id: Any = start_id
            while node_id in listed_parent and node_id not in cleared:
                if node_id in path:
                    raise GoalHierarchyError(node_id, "subgoal references form a cycle")
                path.add(node_id)
                node_id = listed_parent[node_id]
            cleared.update(path)
