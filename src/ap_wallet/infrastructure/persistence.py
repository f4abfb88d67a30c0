"""WalletRepository: concrete implementation of WalletRepositoryProtocol.

The AP coin balance lives on `users.ap_coins`; `coin_transactions` is the
append-only ledger it caches. Both mutations use atomic UPDATE/INSERT ...
RETURNING; a debit that matches 0 rows means the balance was too low.

Transaction ownership: the CALLER commits or rolls back.
"""

import uuid

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_common.coins import validate_amount
from src.ap_common.enums import TransactionType
from src.ap_common.errors import InsufficientFundsError, InternalError, WalletNotFoundError
from src.ap_wallet.domain.models import Transaction, Wallet

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GET_WALLET_SQL = text("""
    SELECT id, ap_coins, version
    FROM users
    WHERE id = CAST(:user_id AS UUID)
""")

_CREDIT_SQL = text("""
    UPDATE users
    SET ap_coins = ap_coins + :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE id = CAST(:user_id AS UUID)
    RETURNING id, ap_coins, version
""")

_DEBIT_SQL = text("""
    UPDATE users
    SET ap_coins = ap_coins - :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE id = CAST(:user_id AS UUID) AND ap_coins >= :amount
    RETURNING id, ap_coins, version
""")

_INSERT_TX_SQL = text("""
    INSERT INTO coin_transactions
        (user_id, tx_type, amount, balance_after, scenario_id, description)
    VALUES
        (:user_id, :tx_type, :amount, :balance_after, :scenario_id, :description)
    RETURNING id, user_id, tx_type, amount, balance_after,
              scenario_id, description, created_at
""")

_LIST_TX_SQL = text("""
    SELECT id, user_id, tx_type, amount, balance_after,
           scenario_id, description, created_at
    FROM coin_transactions
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < CAST(:cursor_id AS BIGINT))
      AND (CAST(:tx_type AS TEXT) IS NULL OR tx_type = CAST(:tx_type AS TEXT))
    ORDER BY id DESC
    LIMIT :limit
""")


def _is_user_id(user_id: str) -> bool:
    """users.id is a UUID; anything else cannot name a wallet."""
    try:
        uuid.UUID(str(user_id))
    except ValueError:
        return False
    return True


def _row_to_wallet(row: object) -> Wallet:
    return Wallet(
        user_id=str(row.id),  # type: ignore[attr-defined]
        balance=row.ap_coins,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
    )


def _row_to_tx(row: object) -> Transaction:
    return Transaction(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        tx_type=row.tx_type,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        scenario_id=row.scenario_id,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class WalletRepository:
    """Concrete repository: every mutation is balance UPDATE + ledger INSERT."""

    async def get_wallet(self, db: AsyncSession, user_id: str) -> Wallet | None:
        if not _is_user_id(user_id):
            return None
        result = await db.execute(_GET_WALLET_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_wallet(row) if row else None

    async def credit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        tx_type: TransactionType,
        scenario_id: str | None = None,
        description: str | None = None,
    ) -> tuple[Wallet, Transaction]:
        validate_amount(amount)
        if not _is_user_id(user_id):
            raise WalletNotFoundError(user_id)
        result = await db.execute(_CREDIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            raise WalletNotFoundError(user_id)
        wallet = _row_to_wallet(row)
        tx = await self._append(db, wallet, amount, tx_type, scenario_id, description)
        return wallet, tx

    async def debit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        tx_type: TransactionType,
        scenario_id: str | None = None,
        description: str | None = None,
    ) -> tuple[Wallet, Transaction]:
        validate_amount(amount)
        if not _is_user_id(user_id):
            raise WalletNotFoundError(user_id)
        result = await db.execute(_DEBIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            current = await self.get_wallet(db, user_id)
            if current is None:
                raise WalletNotFoundError(user_id)
            raise InsufficientFundsError(amount, current.balance)
        wallet = _row_to_wallet(row)
        tx = await self._append(db, wallet, -amount, tx_type, scenario_id, description)
        return wallet, tx

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        tx_type: str | None,
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_TX_SQL,
            {
                "user_id": user_id,
                "cursor_id": cursor_id,
                "tx_type": tx_type,
                "limit": limit,
            },
        )
        return [_row_to_tx(row) for row in result.fetchall()]

    async def _append(
        self,
        db: AsyncSession,
        wallet: Wallet,
        signed_amount: int,
        tx_type: TransactionType,
        scenario_id: str | None,
        description: str | None,
    ) -> Transaction:
        result = await db.execute(
            _INSERT_TX_SQL,
            {
                "user_id": wallet.user_id,
                "tx_type": TransactionType(tx_type).value,
                "amount": signed_amount,
                "balance_after": wallet.balance,
                "scenario_id": scenario_id,
                "description": description,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Ledger insert returned no rows")
        return _row_to_tx(row)
