"""Repository Protocol: dependency inversion for testability.

Unit tests inject an in-memory implementation that conforms to this Protocol.
Implementations never commit: the caller owns the transaction, so the balance
update and the ledger insert always land together or not at all.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_common.enums import TransactionType
from src.ap_wallet.domain.models import Transaction, Wallet


class WalletRepositoryProtocol(Protocol):
    async def get_wallet(self, db: AsyncSession, user_id: str) -> Wallet | None: ...

    async def credit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        tx_type: TransactionType,
        scenario_id: str | None = None,
        description: str | None = None,
    ) -> tuple[Wallet, Transaction]: ...

    async def debit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        tx_type: TransactionType,
        scenario_id: str | None = None,
        description: str | None = None,
    ) -> tuple[Wallet, Transaction]: ...

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        tx_type: str | None,
    ) -> list[Transaction]: ...
