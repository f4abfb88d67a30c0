"""Repository Protocol for shields and steal history."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_stealing.domain.models import Shield, StealRecord, UserStealStats


class StealingRepositoryProtocol(Protocol):
    async def get_shield(self, db: AsyncSession, scenario_id: str) -> Shield | None: ...

    async def upsert_shield(self, db: AsyncSession, shield: Shield) -> Shield: ...

    async def insert_steal_record(self, db: AsyncSession, record: StealRecord) -> StealRecord: ...

    async def list_steal_history(
        self, db: AsyncSession, scenario_id: str, limit: int
    ) -> list[StealRecord]: ...

    async def get_user_stats(self, db: AsyncSession, user_id: str) -> UserStealStats: ...

    async def top_thieves(self, db: AsyncSession, limit: int) -> list[tuple[str, int]]: ...
