"""ScenarioService: ownership & pool tracker.

Owns the scenario holder and the aggregate pools. Mutating methods commit on
success and roll back on any failure; `_recalculate` is the shared
no-commit core used by `place_prediction` and the admin bulk job.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import NoReturn

from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_common.datetime_utils import seconds_until, utc_now
from src.ap_common.enums import PredictionSide, ScenarioStatus, TransactionType
from src.ap_common.errors import (
    DuplicatePredictionError,
    InvalidAmountError,
    OwnershipMismatchError,
    ScenarioNotActiveError,
    ScenarioNotFoundError,
    ScenarioShieldedError,
)
from src.ap_common.id_generator import generate_id
from src.ap_scenario.application.schemas import (
    PredictionResponse,
    ScenarioDetail,
    ScenarioListResponse,
)
from src.ap_scenario.domain.models import PoolSnapshot, Prediction, Scenario
from src.ap_scenario.domain.pools import compute_pools
from src.ap_scenario.domain.repository import ScenarioRepositoryProtocol
from src.ap_scenario.infrastructure.persistence import ScenarioRepository
from src.ap_wallet.domain.repository import WalletRepositoryProtocol
from src.ap_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger("ap.scenario")


class ScenarioService:
    def __init__(
        self,
        repo: ScenarioRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: ScenarioRepositoryProtocol = repo or ScenarioRepository()
        self._wallet: WalletRepositoryProtocol = wallet_repo or WalletRepository()
        self._clock = clock

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def load(self, db: AsyncSession, scenario_id: str) -> Scenario:
        scenario = await self._repo.get_scenario(db, scenario_id)
        if scenario is None:
            raise ScenarioNotFoundError(scenario_id)
        return scenario

    async def get_scenario(self, db: AsyncSession, scenario_id: str) -> ScenarioDetail:
        return ScenarioDetail.from_domain(await self.load(db, scenario_id))

    async def list_scenarios(
        self, db: AsyncSession, status: str | None, limit: int
    ) -> ScenarioListResponse:
        # status=None -> ACTIVE only; status='ALL' -> no filter
        sql_status = None if status == "ALL" else (status or ScenarioStatus.ACTIVE.value)
        scenarios = await self._repo.list_scenarios(db, sql_status, limit)
        items = [ScenarioDetail.from_domain(s) for s in scenarios]
        return ScenarioListResponse(items=items, total=len(items))

    async def get_holder(self, db: AsyncSession, scenario_id: str) -> str:
        """Current holder, falling back to the creator if never stolen."""
        return (await self.load(db, scenario_id)).holder_id

    async def list_active_ids(self, db: AsyncSession) -> list[str]:
        return await self._repo.list_active_ids(db)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_scenario(
        self,
        db: AsyncSession,
        creator_id: str,
        title: str,
        description: str | None = None,
        category: str | None = None,
    ) -> ScenarioDetail:
        draft = Scenario(
            id=generate_id("SCN-"),
            creator_id=creator_id,
            current_holder_id=None,
            title=title,
            description=description,
            category=category,
            status=ScenarioStatus.ACTIVE.value,
        )
        try:
            scenario = await self._repo.create_scenario(db, draft)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("scenario created id=%s creator=%s", scenario.id, creator_id)
        return ScenarioDetail.from_domain(scenario)

    async def transfer_holder(
        self,
        db: AsyncSession,
        scenario_id: str,
        from_user_id: str,
        to_user_id: str,
    ) -> ScenarioDetail:
        """Move the holder role iff ``from_user_id`` still holds the scenario.

        The update only matches an ACTIVE, unshielded scenario held by
        ``from_user_id``; when it matches nothing the error names which of
        those no longer holds.
        """
        try:
            updated = await self._repo.transfer_holder(db, scenario_id, from_user_id, to_user_id)
            if updated is None:
                self._raise_transfer_rejected(await self.load(db, scenario_id), from_user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ScenarioDetail.from_domain(updated)

    async def recalculate_pools(self, db: AsyncSession, scenario_id: str) -> PoolSnapshot:
        """Rebuild pools from predictions and persist them. Safe to repeat."""
        try:
            await self.load(db, scenario_id)
            pools = await self._recalculate(db, scenario_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return pools

    async def place_prediction(
        self,
        db: AsyncSession,
        user_id: str,
        scenario_id: str,
        side: PredictionSide,
        amount: int,
    ) -> PredictionResponse:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise InvalidAmountError(amount)
        try:
            scenario = await self.load(db, scenario_id)
            if scenario.status != ScenarioStatus.ACTIVE:
                raise ScenarioNotActiveError(scenario_id, scenario.status)
            if await self._repo.get_prediction(db, scenario_id, user_id) is not None:
                raise DuplicatePredictionError(scenario_id)

            if amount > 0:
                await self._wallet.debit(
                    db, user_id, amount, TransactionType.PREDICTION_STAKE, scenario_id,
                    f"Stake on {PredictionSide(side).value}",
                )
            prediction = await self._repo.insert_prediction(
                db,
                Prediction(
                    id=generate_id("PRD-"),
                    scenario_id=scenario_id,
                    user_id=user_id,
                    side=PredictionSide(side).value,
                    amount=amount,
                ),
            )
            pools = await self._recalculate(db, scenario_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "prediction scenario=%s user=%s side=%s amount=%d",
            scenario_id, user_id, prediction.side, amount,
        )
        return PredictionResponse.from_result(prediction, pools)

    def _raise_transfer_rejected(self, scenario: Scenario, from_user_id: str) -> NoReturn:
        if scenario.status != ScenarioStatus.ACTIVE:
            raise ScenarioNotActiveError(scenario.id, scenario.status)
        if scenario.holder_id != from_user_id:
            raise OwnershipMismatchError(scenario.id, from_user_id)
        now = self._clock()
        until = scenario.protected_until
        if until is not None and until > now:
            raise ScenarioShieldedError(scenario.id, until, seconds_until(until, now))
        # Row changed between the update and this read
        raise OwnershipMismatchError(scenario.id, from_user_id)

    async def _recalculate(self, db: AsyncSession, scenario_id: str) -> PoolSnapshot:
        predictions = await self._repo.list_predictions(db, scenario_id)
        pools = compute_pools(predictions)
        await self._repo.update_pools(db, scenario_id, pools)
        return pools
