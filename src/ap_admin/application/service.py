"""Admin application service: bulk pool recalculation, ledger reconciliation,
manual balance adjustment."""

import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_common.enums import TransactionType
from src.ap_common.errors import InvalidAmountError
from src.ap_scenario.application.service import ScenarioService
from src.ap_wallet.application.service import LedgerService

logger = logging.getLogger("ap.admin")

_RECONCILE_SQL = text("""
    SELECT u.id::text AS user_id,
           u.ap_coins AS balance,
           COALESCE(SUM(t.amount), 0) AS ledger_total
    FROM users u
    LEFT JOIN coin_transactions t ON t.user_id = u.id::text
    GROUP BY u.id, u.ap_coins
    HAVING u.ap_coins <> COALESCE(SUM(t.amount), 0)
    ORDER BY u.id
""")


class AdminService:
    def __init__(
        self,
        scenarios: ScenarioService | None = None,
        ledger: LedgerService | None = None,
    ) -> None:
        self._scenarios = scenarios or ScenarioService()
        self._ledger = ledger or LedgerService()

    async def recalculate_all_pools(self, db: AsyncSession) -> dict[str, int]:
        """Recompute pools for every ACTIVE scenario, one commit per scenario."""
        ids = await self._scenarios.list_active_ids(db)
        updated = 0
        for scenario_id in ids:
            await self._scenarios.recalculate_pools(db, scenario_id)
            updated += 1
        logger.info("recalculated pools for %d/%d active scenarios", updated, len(ids))
        return {"updated": updated, "total": len(ids)}

    async def reconcile_ledger(self, db: AsyncSession) -> dict[str, Any]:
        """Report users whose balance differs from the sum of their transactions."""
        rows = (await db.execute(_RECONCILE_SQL)).fetchall()
        mismatches = [
            {
                "user_id": r.user_id,
                "balance": int(r.balance),
                "ledger_total": int(r.ledger_total),
                "difference": int(r.balance) - int(r.ledger_total),
            }
            for r in rows
        ]
        if mismatches:
            logger.error("ledger reconciliation found %d mismatched users", len(mismatches))
        return {"ok": not mismatches, "mismatches": mismatches}

    async def adjust_balance(
        self, db: AsyncSession, user_id: str, amount: int, reason: str, admin_id: str
    ) -> dict[str, Any]:
        """Signed manual adjustment recorded as ADMIN_ADJUSTMENT."""
        if isinstance(amount, bool) or not isinstance(amount, int) or amount == 0:
            raise InvalidAmountError(amount)

        description = f"{reason} (by {admin_id})"
        if amount > 0:
            tx = await self._ledger.credit(
                db, user_id, amount, TransactionType.ADMIN_ADJUSTMENT, description=description
            )
        else:
            tx = await self._ledger.debit(
                db, user_id, -amount, TransactionType.ADMIN_ADJUSTMENT, description=description
            )
        logger.warning(
            "admin adjustment user=%s amount=%+d admin=%s reason=%s",
            user_id, amount, admin_id, reason,
        )
        return {
            "user_id": user_id,
            "amount": amount,
            "balance_after": tx.balance_after,
            "transaction_id": tx.id,
        }
