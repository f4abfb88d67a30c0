"""Domain models for ap_wallet: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Wallet:
    user_id: str
    balance: int        # AP coins, materialized sum of the user's transactions
    version: int


@dataclass
class Transaction:
    id: int                          # BIGSERIAL
    user_id: str
    tx_type: str                     # TransactionType value
    amount: int                      # positive=credit, negative=debit
    balance_after: int
    scenario_id: str | None = None
    description: str | None = None
    created_at: datetime | None = None
