"""Economy Engine - Pure logic for points and reward redemption.

This engine provides stateless functions for:
- Point rounding (float drift protection)
- Spent / available point totals
- Sufficient funds validation
- The one-way reward redemption transition (is_redeemed: False -> True)

``lifetime_points_earned`` is the caller-tracked, never-decreasing record of
everything ever earned; available points are that total minus what redeemed
rewards cost.

ARCHITECTURE: This is a pure logic engine. All methods are static; redeemed
rewards are returned as copies.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from .. import const
from ..exceptions import InsufficientFundsError, RewardAlreadyRedeemedError
from ..utils.dt_utils import dt_now_utc, dt_to_ms

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..type_defs import RewardData

__all__ = ["EconomyEngine", "InsufficientFundsError", "RewardAlreadyRedeemedError"]


class EconomyEngine:
    """Pure logic engine for point calculations and reward redemption.

    All methods are static - no instance state.
    """

    @staticmethod
    def round_points(
        value: float, precision: int = const.DATA_FLOAT_PRECISION
    ) -> float:
        """Round points to consistent precision.

        Prevents Python float arithmetic drift (e.g., 27.499999999999996 → 27.5).
        """
        return round(value, precision)

    @staticmethod
    def validate_sufficient_funds(balance: float, cost: float) -> bool:
        """Check if balance is sufficient for a redemption.

        Returns:
            True if balance >= cost, False otherwise
        """
        return balance >= cost

    @staticmethod
    def calculate_spent_points(rewards: Iterable[RewardData]) -> float:
        """Sum the cost of every redeemed reward."""
        return EconomyEngine.round_points(
            sum(
                reward.get(const.DATA_REWARD_POINTS_COST, 0)
                for reward in rewards
                if reward.get(const.DATA_REWARD_IS_REDEEMED)
            )
        )

    @staticmethod
    def calculate_available_points(
        lifetime_points_earned: float, spent_points: float
    ) -> float:
        """Points that can still be spent: lifetime earned minus spent."""
        return EconomyEngine.round_points(lifetime_points_earned - spent_points)

    @staticmethod
    def award_points(lifetime_points_earned: float, points: float) -> float:
        """Return the lifetime total after a completion awards ``points``.

        Negative awards are ignored; the lifetime total never decreases.
        """
        return EconomyEngine.round_points(lifetime_points_earned + max(points, 0))

    @staticmethod
    def redeem_reward(
        reward: RewardData,
        available_points: float,
        now: datetime | None = None,
    ) -> RewardData:
        """Redeem a reward, enforcing the one-way transition and funds.

        Args:
            reward: Reward record (not mutated)
            available_points: Points currently available to spend
            now: Optional redemption time override

        Returns:
            Copy of the reward with is_redeemed set and redeemed_at stamped

        Raises:
            RewardAlreadyRedeemedError: reward was already redeemed
            InsufficientFundsError: available points do not cover the cost
        """
        reward_id = reward.get(const.DATA_REWARD_ID)
        if reward.get(const.DATA_REWARD_IS_REDEEMED):
            raise RewardAlreadyRedeemedError(reward_id)

        cost = reward.get(const.DATA_REWARD_POINTS_COST, 0)
        if not EconomyEngine.validate_sufficient_funds(available_points, cost):
            raise InsufficientFundsError(reward_id, available_points, cost)

        updated = dict(reward)
        updated[const.DATA_REWARD_IS_REDEEMED] = True
        updated[const.DATA_REWARD_REDEEMED_AT] = dt_to_ms(now or dt_now_utc())
        return updated  # type: ignore[return-value]
