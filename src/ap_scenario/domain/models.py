"""Domain models for ap_scenario: pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Scenario:
    id: str
    creator_id: str
    current_holder_id: str | None    # None until the first steal
    title: str
    description: str | None
    category: str | None
    status: str                      # ScenarioStatus value
    yes_pool: int = 0
    no_pool: int = 0
    total_pool: int = 0              # always yes_pool + no_pool
    participant_count: int = 0
    steal_count: int = 0
    theft_pool: int = 0              # steal fees retained by the platform
    protected_until: datetime | None = None
    outcome: bool | None = None      # True = YES won; None until resolved
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def holder_id(self) -> str:
        return self.current_holder_id or self.creator_id


@dataclass
class Prediction:
    id: str
    scenario_id: str
    user_id: str
    side: str                        # PredictionSide value
    amount: int                      # 0 for legacy vote-only rows
    created_at: datetime | None = None


@dataclass(frozen=True)
class PoolSnapshot:
    yes_pool: int
    no_pool: int
    total_pool: int
    participant_count: int
