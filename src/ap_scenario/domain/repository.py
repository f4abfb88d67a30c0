# src/ap_scenario/domain/repository.py
"""Repository Protocol: dependency inversion for testability.

The scenario row is the only place the holder, pools and shield guard are
written; nothing else in the codebase issues UPDATEs against `scenarios`.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_scenario.domain.models import PoolSnapshot, Prediction, Scenario


class ScenarioRepositoryProtocol(Protocol):
    async def get_scenario(self, db: AsyncSession, scenario_id: str) -> Scenario | None: ...

    async def create_scenario(self, db: AsyncSession, scenario: Scenario) -> Scenario: ...

    async def list_scenarios(
        self, db: AsyncSession, status: str | None, limit: int
    ) -> list[Scenario]: ...

    async def list_active_ids(self, db: AsyncSession) -> list[str]: ...

    async def transfer_holder(
        self,
        db: AsyncSession,
        scenario_id: str,
        from_user_id: str,
        to_user_id: str,
        expected_steal_count: int | None = None,
        retained: int = 0,
    ) -> Scenario | None:
        """Compare-and-swap the holder. Returns None when the expectation failed."""
        ...

    async def protect(
        self, db: AsyncSession, scenario_id: str, holder_id: str, until: datetime
    ) -> Scenario | None:
        """Set protected_until iff holder_id still holds it. None otherwise."""
        ...

    async def update_pools(
        self, db: AsyncSession, scenario_id: str, pools: PoolSnapshot
    ) -> None: ...

    async def list_predictions(self, db: AsyncSession, scenario_id: str) -> list[Prediction]: ...

    async def get_prediction(
        self, db: AsyncSession, scenario_id: str, user_id: str
    ) -> Prediction | None: ...

    async def insert_prediction(self, db: AsyncSession, prediction: Prediction) -> Prediction: ...

    async def list_stealable(
        self, db: AsyncSession, user_id: str, now: datetime, limit: int
    ) -> list[Scenario]: ...

    async def count_holdings(self, db: AsyncSession, user_id: str) -> int: ...
