"""Pricing policy for steals and shields.

Steal cost and compensation are pluggable: anything with ``steal_cost`` and
``compensation`` satisfies StealPolicy. The default is linear in the steal
count (11, 12, 13, ... AP) with an optional surcharge on the scenario's pool.
"""

from dataclasses import dataclass
from typing import Protocol

from config.settings import settings
from src.ap_common.coins import apply_bps_ceil, apply_bps_floor
from src.ap_common.enums import ShieldTier
from src.ap_common.errors import InvalidShieldTierError


class StealPolicy(Protocol):
    def steal_cost(self, total_pool: int, steal_count: int) -> int: ...

    def compensation(self, cost: int) -> int: ...


@dataclass(frozen=True)
class LinearStealPolicy:
    base_price: int = 11
    pool_bps: int = 0
    compensation_bps: int = 5000

    def steal_cost(self, total_pool: int, steal_count: int) -> int:
        return self.base_price + steal_count + apply_bps_ceil(total_pool, self.pool_bps)

    def compensation(self, cost: int) -> int:
        # Never more than was paid, so a steal cannot mint coins
        return min(apply_bps_floor(cost, self.compensation_bps), cost)


def default_policy() -> LinearStealPolicy:
    return LinearStealPolicy(
        base_price=settings.STEAL_BASE_PRICE,
        pool_bps=settings.STEAL_POOL_BPS,
        compensation_bps=settings.STEAL_COMPENSATION_BPS,
    )


@dataclass(frozen=True)
class ShieldTierSpec:
    tier: ShieldTier
    name: str
    duration_hours: int
    cost: int


SHIELD_TIERS: dict[ShieldTier, ShieldTierSpec] = {
    ShieldTier.BASIC: ShieldTierSpec(ShieldTier.BASIC, "Basic Shield", 6, 15),
    ShieldTier.PREMIUM: ShieldTierSpec(ShieldTier.PREMIUM, "Premium Shield", 24, 40),
    ShieldTier.ULTIMATE: ShieldTierSpec(ShieldTier.ULTIMATE, "Ultimate Shield", 72, 100),
}


def get_tier(tier: str | ShieldTier) -> ShieldTierSpec:
    key = tier.value if isinstance(tier, ShieldTier) else str(tier).lower()
    try:
        return SHIELD_TIERS[ShieldTier(key)]
    except ValueError:
        raise InvalidShieldTierError(str(tier)) from None
