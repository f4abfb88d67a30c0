"""Pydantic schemas for ap_scenario API."""

from pydantic import BaseModel, Field

from src.ap_common.enums import PredictionSide, ScenarioStatus
from src.ap_scenario.domain.models import PoolSnapshot, Prediction, Scenario

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateScenarioRequest(BaseModel):
    title: str = Field(..., min_length=5, max_length=500)
    description: str | None = Field(None, max_length=5000)
    category: str | None = Field(None, max_length=64)


class PlacePredictionRequest(BaseModel):
    side: PredictionSide
    amount: int = Field(0, ge=0, description="AP coins to stake; 0 casts a plain vote")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PoolResponse(BaseModel):
    yes_pool: int
    no_pool: int
    total_pool: int
    participant_count: int

    @classmethod
    def from_snapshot(cls, pools: PoolSnapshot) -> "PoolResponse":
        return cls(
            yes_pool=pools.yes_pool,
            no_pool=pools.no_pool,
            total_pool=pools.total_pool,
            participant_count=pools.participant_count,
        )


class ScenarioDetail(BaseModel):
    id: str
    title: str
    description: str | None
    category: str | None
    status: ScenarioStatus
    creator_id: str
    holder_id: str
    yes_pool: int
    no_pool: int
    total_pool: int
    participant_count: int
    steal_count: int
    theft_pool: int
    protected_until: str | None
    outcome: bool | None
    created_at: str | None

    @classmethod
    def from_domain(cls, s: Scenario) -> "ScenarioDetail":
        return cls(
            id=s.id,
            title=s.title,
            description=s.description,
            category=s.category,
            status=ScenarioStatus(s.status),
            creator_id=s.creator_id,
            holder_id=s.holder_id,
            yes_pool=s.yes_pool,
            no_pool=s.no_pool,
            total_pool=s.total_pool,
            participant_count=s.participant_count,
            steal_count=s.steal_count,
            theft_pool=s.theft_pool,
            protected_until=s.protected_until.isoformat() if s.protected_until else None,
            outcome=s.outcome,
            created_at=s.created_at.isoformat() if s.created_at else None,
        )


class ScenarioListResponse(BaseModel):
    items: list[ScenarioDetail]
    total: int


class PredictionResponse(BaseModel):
    id: str
    scenario_id: str
    side: PredictionSide
    amount: int
    pools: PoolResponse

    @classmethod
    def from_result(cls, p: Prediction, pools: PoolSnapshot) -> "PredictionResponse":
        return cls(
            id=p.id,
            scenario_id=p.scenario_id,
            side=PredictionSide(p.side),
            amount=p.amount,
            pools=PoolResponse.from_snapshot(pools),
        )
