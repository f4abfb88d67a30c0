"""Domain models for ap_stealing: pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Shield:
    scenario_id: str
    holder_id: str
    tier: str                        # ShieldTier value
    cost: int
    protected_until: datetime
    created_at: datetime | None = None

    def is_active(self, now: datetime) -> bool:
        return self.protected_until > now


@dataclass
class StealRecord:
    id: int | None
    scenario_id: str
    thief_id: str
    victim_id: str
    price_paid: int
    compensation: int
    steal_number: int                # steal_count after this steal
    stolen_at: datetime | None = None


@dataclass
class UserStealStats:
    user_id: str
    steals_as_thief: int = 0
    times_robbed: int = 0
    total_spent: int = 0
    total_compensation: int = 0
    current_holdings: int = 0

    @property
    def net_coins(self) -> int:
        return self.total_compensation - self.total_spent
