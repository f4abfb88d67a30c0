"""StealingService: the single authority on steals and shields.

A steal spans two database transactions:

  T1  debit the thief                                   (commit)
  T2  CAS the holder, compensate the old holder,
      grow the theft pool, append steal history         (commit)

If T2 cannot take the scenario (someone else's steal or shield committed
first) or fails for any other reason, T2 is rolled back and the thief gets a
STEAL_REFUND credit for the full price before the error surfaces. This is the
only place in the codebase that catches a lower-level error to run a
compensating action.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_common.datetime_utils import hours_from, utc_now
from src.ap_common.enums import ScenarioStatus, ShieldTier, TransactionType
from src.ap_common.errors import (
    NotHolderError,
    OwnershipMismatchError,
    ScenarioNotActiveError,
    ScenarioNotFoundError,
    StealRaceLostError,
)
from src.ap_scenario.domain.models import Scenario
from src.ap_scenario.domain.repository import ScenarioRepositoryProtocol
from src.ap_scenario.infrastructure.persistence import ScenarioRepository
from src.ap_stealing.application.schemas import (
    LeaderboardItem,
    ShieldResultResponse,
    StealableItem,
    StealInfoResponse,
    StealRecordItem,
    StealResultResponse,
    UserStealStatsResponse,
)
from src.ap_stealing.domain.models import Shield, StealRecord
from src.ap_stealing.domain.policy import StealPolicy, default_policy, get_tier
from src.ap_stealing.domain.repository import StealingRepositoryProtocol
from src.ap_stealing.domain.rules import assert_stealable
from src.ap_stealing.infrastructure.persistence import StealingRepository
from src.ap_wallet.domain.repository import WalletRepositoryProtocol
from src.ap_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger("ap.stealing")


class StealingService:
    def __init__(
        self,
        scenario_repo: ScenarioRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
        repo: StealingRepositoryProtocol | None = None,
        policy: StealPolicy | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._scenarios: ScenarioRepositoryProtocol = scenario_repo or ScenarioRepository()
        self._wallet: WalletRepositoryProtocol = wallet_repo or WalletRepository()
        self._repo: StealingRepositoryProtocol = repo or StealingRepository()
        self._policy: StealPolicy = policy or default_policy()
        self._clock = clock

    async def _load(self, db: AsyncSession, scenario_id: str) -> Scenario:
        scenario = await self._scenarios.get_scenario(db, scenario_id)
        if scenario is None:
            raise ScenarioNotFoundError(scenario_id)
        return scenario

    def next_price(self, scenario: Scenario) -> int:
        return self._policy.steal_cost(scenario.total_pool, scenario.steal_count)

    # ------------------------------------------------------------------
    # Steal
    # ------------------------------------------------------------------

    async def attempt_steal(
        self, db: AsyncSession, scenario_id: str, thief_id: str
    ) -> StealResultResponse:
        scenario = await self._load(db, scenario_id)
        holder_id = assert_stealable(scenario, thief_id, self._clock())

        cost = self._policy.steal_cost(scenario.total_pool, scenario.steal_count)
        compensation = self._policy.compensation(cost)

        # T1: pay first. InsufficientFunds leaves ownership untouched.
        try:
            _, thief_tx = await self._wallet.debit(
                db, thief_id, cost, TransactionType.STEAL, scenario_id,
                f"Steal #{scenario.steal_count + 1}",
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        # T2: take the scenario, or refund.
        try:
            updated = await self._scenarios.transfer_holder(
                db,
                scenario_id,
                holder_id,
                thief_id,
                expected_steal_count=scenario.steal_count,
                retained=cost - compensation,
            )
            if updated is None:
                raise OwnershipMismatchError(scenario_id, holder_id)
            if compensation > 0:
                await self._wallet.credit(
                    db, holder_id, compensation, TransactionType.STEAL_COMPENSATION,
                    scenario_id, "Compensation for stolen scenario",
                )
            await self._repo.insert_steal_record(
                db,
                StealRecord(
                    id=None,
                    scenario_id=scenario_id,
                    thief_id=thief_id,
                    victim_id=holder_id,
                    price_paid=cost,
                    compensation=compensation,
                    steal_number=updated.steal_count,
                ),
            )
            await db.commit()
        except OwnershipMismatchError:
            await db.rollback()
            await self._refund(db, scenario_id, thief_id, cost)
            logger.warning(
                "steal race lost scenario=%s thief=%s refunded=%d", scenario_id, thief_id, cost
            )
            raise StealRaceLostError(scenario_id, cost) from None
        except Exception:
            await db.rollback()
            await self._refund(db, scenario_id, thief_id, cost)
            logger.exception(
                "steal failed after payment scenario=%s thief=%s", scenario_id, thief_id
            )
            raise

        logger.info(
            "scenario stolen id=%s from=%s to=%s price=%d compensation=%d",
            scenario_id, holder_id, thief_id, cost, compensation,
        )
        return StealResultResponse(
            scenario_id=scenario_id,
            thief_id=thief_id,
            previous_holder_id=holder_id,
            price_paid=cost,
            compensation=compensation,
            retained=cost - compensation,
            steal_number=updated.steal_count,
            next_price=self.next_price(updated),
            theft_pool=updated.theft_pool,
            balance_after=thief_tx.balance_after,
        )

    async def _refund(self, db: AsyncSession, scenario_id: str, thief_id: str, cost: int) -> None:
        try:
            await self._wallet.credit(
                db, thief_id, cost, TransactionType.STEAL_REFUND, scenario_id,
                "Refund for steal that did not go through",
            )
            await db.commit()
        except Exception:
            await db.rollback()
            logger.critical(
                "steal refund FAILED scenario=%s thief=%s amount=%d", scenario_id, thief_id, cost
            )
            raise

    # ------------------------------------------------------------------
    # Shield
    # ------------------------------------------------------------------

    async def apply_shield(
        self, db: AsyncSession, scenario_id: str, user_id: str, tier: ShieldTier | str
    ) -> ShieldResultResponse:
        tier_info = get_tier(tier)
        try:
            scenario = await self._load(db, scenario_id)
            if scenario.status != ScenarioStatus.ACTIVE:
                raise ScenarioNotActiveError(scenario_id, scenario.status)
            if scenario.holder_id != user_id:
                raise NotHolderError(scenario_id, scenario.holder_id)

            # Scenario row before the users row, the same lock order as a steal
            until = hours_from(self._clock(), tier_info.duration_hours)
            if await self._scenarios.protect(db, scenario_id, user_id, until) is None:
                current = await self._load(db, scenario_id)
                raise NotHolderError(scenario_id, current.holder_id)
            _, tx = await self._wallet.debit(
                db, user_id, tier_info.cost, TransactionType.SHIELD_PURCHASE, scenario_id,
                f"{tier_info.name} ({tier_info.duration_hours}h)",
            )
            shield = await self._repo.upsert_shield(
                db,
                Shield(
                    scenario_id=scenario_id,
                    holder_id=user_id,
                    tier=tier_info.tier.value,
                    cost=tier_info.cost,
                    protected_until=until,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "shield applied scenario=%s holder=%s tier=%s until=%s",
            scenario_id, user_id, tier_info.tier.value, shield.protected_until.isoformat(),
        )
        return ShieldResultResponse(
            scenario_id=scenario_id,
            tier=tier_info.tier,
            cost=tier_info.cost,
            protected_until=shield.protected_until.isoformat(),
            balance_after=tx.balance_after,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_steal_info(
        self, db: AsyncSession, scenario_id: str, history_limit: int = 20
    ) -> StealInfoResponse:
        scenario = await self._load(db, scenario_id)
        shield = await self._repo.get_shield(db, scenario_id)
        history = await self._repo.list_steal_history(db, scenario_id, history_limit)
        now = self._clock()
        is_protected = scenario.protected_until is not None and scenario.protected_until > now
        return StealInfoResponse(
            scenario_id=scenario.id,
            title=scenario.title,
            creator_id=scenario.creator_id,
            holder_id=scenario.holder_id,
            next_price=self.next_price(scenario),
            steal_count=scenario.steal_count,
            theft_pool=scenario.theft_pool,
            is_protected=is_protected,
            protected_until=(
                scenario.protected_until.isoformat() if scenario.protected_until else None
            ),
            shield_tier=shield.tier if shield is not None and shield.is_active(now) else None,
            can_be_stolen=scenario.status == ScenarioStatus.ACTIVE and not is_protected,
            history=[StealRecordItem.from_domain(r) for r in history],
        )

    async def list_steal_history(
        self, db: AsyncSession, scenario_id: str, limit: int
    ) -> list[StealRecordItem]:
        await self._load(db, scenario_id)
        records = await self._repo.list_steal_history(db, scenario_id, limit)
        return [StealRecordItem.from_domain(r) for r in records]

    async def list_stealable(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[StealableItem]:
        scenarios = await self._scenarios.list_stealable(db, user_id, self._clock(), limit)
        return [
            StealableItem(
                scenario_id=s.id,
                title=s.title,
                holder_id=s.holder_id,
                next_price=self.next_price(s),
                total_pool=s.total_pool,
                theft_pool=s.theft_pool,
            )
            for s in scenarios
        ]

    async def get_user_stats(self, db: AsyncSession, user_id: str) -> UserStealStatsResponse:
        stats = await self._repo.get_user_stats(db, user_id)
        stats.current_holdings = await self._scenarios.count_holdings(db, user_id)
        return UserStealStatsResponse.from_domain(stats)

    async def top_thieves(self, db: AsyncSession, limit: int) -> list[LeaderboardItem]:
        rows = await self._repo.top_thieves(db, limit)
        return [
            LeaderboardItem(rank=i, user_id=user_id, steal_count=count)
            for i, (user_id, count) in enumerate(rows, start=1)
        ]
