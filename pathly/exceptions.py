"""
Exceptions for the Pathly goal tracker.

Calculation engines clamp malformed numbers instead of raising; the types
below cover structural problems (bad goal trees), one-way transitions
(reward redemption), lookups, and persistence failures.
"""


class PathlyError(Exception):
    """Base exception for Pathly"""


class GoalHierarchyError(PathlyError):
    """Raised at load time when the subgoal references do not form a tree"""

    def __init__(self, goal_id: int, reason: str) -> None:
        self.goal_id = goal_id
        self.reason = reason
        super().__init__(f"Invalid goal hierarchy at goal {goal_id}: {reason}")


class GoalNotFoundError(PathlyError):
    """Raised when a goal is not found"""

    def __init__(self, goal_id: int) -> None:
        self.goal_id = goal_id
        super().__init__(f"Goal with ID {goal_id} not found")


class RewardNotFoundError(PathlyError):
    """Raised when a reward is not found"""

    def __init__(self, reward_id: int) -> None:
        self.reward_id = reward_id
        super().__init__(f"Reward with ID {reward_id} not found")


class RewardAlreadyRedeemedError(PathlyError):
    """Raised when redeeming a reward whose is_redeemed flag is already set"""

    def __init__(self, reward_id: int) -> None:
        self.reward_id = reward_id
        super().__init__(f"Reward {reward_id} has already been redeemed")


class InsufficientFundsError(PathlyError):
    """Raised when available points do not cover a reward's cost"""

    def __init__(
        self,
        reward_id: int,
        available_points: float,
        requested_amount: float,
    ) -> None:
        self.reward_id = reward_id
        self.available_points = available_points
        self.requested_amount = requested_amount
        self.shortfall = requested_amount - available_points
        super().__init__(
            f"Insufficient points for reward {reward_id}: "
            f"available={available_points}, requested={requested_amount}, "
            f"shortfall={self.shortfall}"
        )


class StorageError(PathlyError):
    """Raised when persisting data fails"""

    def __init__(self, operation: str, details: str) -> None:
        self.operation = operation
        self.details = details
        super().__init__(f"Storage {operation} failed: {details}")
