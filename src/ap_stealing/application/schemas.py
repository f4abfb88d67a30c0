"""Pydantic schemas for ap_stealing API."""

from datetime import datetime

from pydantic import BaseModel

from src.ap_common.enums import ShieldTier
from src.ap_stealing.domain.models import StealRecord, UserStealStats


def _iso(ts: datetime | None) -> str | None:
    return ts.isoformat() if ts else None


class ApplyShieldRequest(BaseModel):
    tier: ShieldTier


class StealResultResponse(BaseModel):
    scenario_id: str
    thief_id: str
    previous_holder_id: str
    price_paid: int
    compensation: int
    retained: int               # price_paid - compensation, kept in the theft pool
    steal_number: int
    next_price: int
    theft_pool: int
    balance_after: int


class ShieldResultResponse(BaseModel):
    scenario_id: str
    tier: ShieldTier
    cost: int
    protected_until: str
    balance_after: int


class StealRecordItem(BaseModel):
    id: int | None
    thief_id: str
    victim_id: str
    price_paid: int
    compensation: int
    steal_number: int
    stolen_at: str | None

    @classmethod
    def from_domain(cls, r: StealRecord) -> "StealRecordItem":
        return cls(
            id=r.id,
            thief_id=r.thief_id,
            victim_id=r.victim_id,
            price_paid=r.price_paid,
            compensation=r.compensation,
            steal_number=r.steal_number,
            stolen_at=_iso(r.stolen_at),
        )


class StealInfoResponse(BaseModel):
    scenario_id: str
    title: str
    creator_id: str
    holder_id: str
    next_price: int
    steal_count: int
    theft_pool: int
    is_protected: bool
    protected_until: str | None
    shield_tier: str | None
    can_be_stolen: bool
    history: list[StealRecordItem]


class StealableItem(BaseModel):
    scenario_id: str
    title: str
    holder_id: str
    next_price: int
    total_pool: int
    theft_pool: int


class UserStealStatsResponse(BaseModel):
    user_id: str
    steals_as_thief: int
    times_robbed: int
    total_spent: int
    total_compensation: int
    current_holdings: int
    net_coins: int

    @classmethod
    def from_domain(cls, s: UserStealStats) -> "UserStealStatsResponse":
        return cls(
            user_id=s.user_id,
            steals_as_thief=s.steals_as_thief,
            times_robbed=s.times_robbed,
            total_spent=s.total_spent,
            total_compensation=s.total_compensation,
            current_holdings=s.current_holdings,
            net_coins=s.net_coins,
        )


class LeaderboardItem(BaseModel):
    rank: int
    user_id: str
    steal_count: int
