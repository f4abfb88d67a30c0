"""LedgerService: the public credit/debit surface of the economy.

Each call updates the balance and appends the ledger row, then commits; any
failure rolls both back. Callers that need several ledger moves inside one
transaction (the steal rule engine) talk to the repository directly.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_common.enums import TransactionType
from src.ap_common.errors import WalletNotFoundError
from src.ap_wallet.application.schemas import (
    TransactionItem,
    TransactionListResponse,
    cursor_decode,
    cursor_encode,
)
from src.ap_wallet.domain.models import Transaction
from src.ap_wallet.domain.repository import WalletRepositoryProtocol
from src.ap_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger("ap.wallet")


class LedgerService:
    def __init__(self, repo: WalletRepositoryProtocol | None = None) -> None:
        self._repo: WalletRepositoryProtocol = repo or WalletRepository()

    async def get_balance(self, db: AsyncSession, user_id: str) -> int:
        wallet = await self._repo.get_wallet(db, user_id)
        if wallet is None:
            raise WalletNotFoundError(user_id)
        return wallet.balance

    async def credit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        tx_type: TransactionType,
        scenario_id: str | None = None,
        description: str | None = None,
    ) -> Transaction:
        try:
            _, tx = await self._repo.credit(
                db, user_id, amount, tx_type, scenario_id, description
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("credit user=%s %s +%d -> %d", user_id, tx.tx_type, amount, tx.balance_after)
        return tx

    async def debit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        tx_type: TransactionType,
        scenario_id: str | None = None,
        description: str | None = None,
    ) -> Transaction:
        try:
            _, tx = await self._repo.debit(
                db, user_id, amount, tx_type, scenario_id, description
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("debit user=%s %s -%d -> %d", user_id, tx.tx_type, amount, tx.balance_after)
        return tx

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
        tx_type: str | None,
    ) -> TransactionListResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        txs = await self._repo.list_transactions(db, user_id, cursor_id, limit + 1, tx_type)
        has_more = len(txs) > limit
        page = txs[:limit]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return TransactionListResponse(
            items=[TransactionItem.from_domain(t) for t in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )
