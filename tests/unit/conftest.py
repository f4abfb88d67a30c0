"""In-memory repositories for service-level unit tests.

Each fake satisfies its repository Protocol. Writes register an undo step on
the FakeSession passed in, so ``rollback()`` really discards uncommitted work
and ``commit()`` makes it permanent, like the SQL repositories.
"""

import asyncio
import dataclasses
from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from src.ap_common.coins import validate_amount
from src.ap_common.enums import ScenarioStatus, TransactionType
from src.ap_common.errors import (
    DuplicatePredictionError,
    InsufficientFundsError,
    WalletNotFoundError,
)
from src.ap_scenario.domain.models import PoolSnapshot, Prediction, Scenario
from src.ap_stealing.domain.models import Shield, StealRecord, UserStealStats
from src.ap_wallet.domain.models import Transaction, Wallet

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class FakeSession:
    def __init__(self) -> None:
        self._undo: list[Callable[[], None]] = []
        self.commits = 0
        self.rollbacks = 0

    def on_rollback(self, fn: Callable[[], None]) -> None:
        self._undo.append(fn)

    async def commit(self) -> None:
        self._undo.clear()
        self.commits += 1

    async def rollback(self) -> None:
        while self._undo:
            self._undo.pop()()
        self.rollbacks += 1


class FakeClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# ---------------------------------------------------------------------------
# Wallet
# ---------------------------------------------------------------------------


class FakeWalletRepository:
    def __init__(self) -> None:
        self.balances: dict[str, int] = {}
        self.transactions: list[Transaction] = []
        self._next_id = 1

    def seed(self, user_id: str, balance: int) -> None:
        """Open a wallet whose balance is backed by a REWARD row."""
        self.balances[user_id] = 0
        if balance:
            self._apply(None, user_id, balance, TransactionType.REWARD, None, "seed")

    def ledger_sum(self, user_id: str) -> int:
        return sum(t.amount for t in self.transactions if t.user_id == user_id)

    def _apply(
        self,
        db: FakeSession | None,
        user_id: str,
        signed: int,
        tx_type: TransactionType,
        scenario_id: str | None,
        description: str | None,
    ) -> tuple[Wallet, Transaction]:
        self.balances[user_id] += signed
        tx = Transaction(
            id=self._next_id,
            user_id=user_id,
            tx_type=TransactionType(tx_type).value,
            amount=signed,
            balance_after=self.balances[user_id],
            scenario_id=scenario_id,
            description=description,
            created_at=NOW,
        )
        self._next_id += 1
        self.transactions.append(tx)
        if db is not None:
            def undo() -> None:
                self.balances[user_id] -= signed
                self.transactions.remove(tx)

            db.on_rollback(undo)
        return Wallet(user_id, self.balances[user_id], tx.id), tx

    async def get_wallet(self, db: FakeSession, user_id: str) -> Wallet | None:
        await asyncio.sleep(0)
        if user_id not in self.balances:
            return None
        return Wallet(user_id, self.balances[user_id], 0)

    async def credit(
        self, db, user_id, amount, tx_type, scenario_id=None, description=None
    ) -> tuple[Wallet, Transaction]:
        validate_amount(amount)
        await asyncio.sleep(0)
        if user_id not in self.balances:
            raise WalletNotFoundError(user_id)
        return self._apply(db, user_id, amount, tx_type, scenario_id, description)

    async def debit(
        self, db, user_id, amount, tx_type, scenario_id=None, description=None
    ) -> tuple[Wallet, Transaction]:
        validate_amount(amount)
        await asyncio.sleep(0)
        if user_id not in self.balances:
            raise WalletNotFoundError(user_id)
        if self.balances[user_id] < amount:
            raise InsufficientFundsError(amount, self.balances[user_id])
        return self._apply(db, user_id, -amount, tx_type, scenario_id, description)

    async def list_transactions(self, db, user_id, cursor_id, limit, tx_type):
        rows = [
            t for t in reversed(self.transactions)
            if t.user_id == user_id
            and (cursor_id is None or t.id < cursor_id)
            and (tx_type is None or t.tx_type == tx_type)
        ]
        return rows[:limit]


# ---------------------------------------------------------------------------
# Scenario
# ---------------------------------------------------------------------------


class FakeScenarioRepository:
    def __init__(self, clock: Callable[[], datetime]) -> None:
        self.scenarios: dict[str, Scenario] = {}
        self.predictions: dict[str, list[Prediction]] = {}
        self.clock = clock
        # Set to an asyncio.Barrier to hold readers until all have read
        self.read_barrier: asyncio.Barrier | None = None

    def add(self, scenario: Scenario) -> Scenario:
        self.scenarios[scenario.id] = scenario
        self.predictions.setdefault(scenario.id, [])
        return scenario

    def _replace(self, db: FakeSession, scenario_id: str, **changes: object) -> Scenario:
        before = self.scenarios[scenario_id]
        after = dataclasses.replace(before, **changes)
        self.scenarios[scenario_id] = after

        def undo() -> None:
            self.scenarios[scenario_id] = before

        db.on_rollback(undo)
        return dataclasses.replace(after)

    async def get_scenario(self, db, scenario_id):
        current = self.scenarios.get(scenario_id)
        snapshot = dataclasses.replace(current) if current else None
        if self.read_barrier is not None:
            await self.read_barrier.wait()
        else:
            await asyncio.sleep(0)
        return snapshot

    async def create_scenario(self, db, scenario):
        stored = dataclasses.replace(scenario, created_at=NOW, updated_at=NOW)
        self.add(stored)

        def undo() -> None:
            self.scenarios.pop(scenario.id, None)

        db.on_rollback(undo)
        return dataclasses.replace(stored)

    async def list_scenarios(self, db, status, limit):
        rows = [s for s in self.scenarios.values() if status is None or s.status == status]
        return [dataclasses.replace(s) for s in rows[:limit]]

    async def list_active_ids(self, db):
        return sorted(
            s.id for s in self.scenarios.values() if s.status == ScenarioStatus.ACTIVE
        )

    async def transfer_holder(
        self, db, scenario_id, from_user_id, to_user_id, expected_steal_count=None, retained=0
    ):
        await asyncio.sleep(0)
        s = self.scenarios.get(scenario_id)
        if (
            s is None
            or s.status != ScenarioStatus.ACTIVE
            or s.holder_id != from_user_id
            or (expected_steal_count is not None and s.steal_count != expected_steal_count)
            or (s.protected_until is not None and s.protected_until > self.clock())
        ):
            return None
        return self._replace(
            db,
            scenario_id,
            current_holder_id=to_user_id,
            steal_count=s.steal_count + 1,
            theft_pool=s.theft_pool + retained,
        )

    async def protect(self, db, scenario_id, holder_id, until):
        await asyncio.sleep(0)
        s = self.scenarios.get(scenario_id)
        if s is None or s.status != ScenarioStatus.ACTIVE or s.holder_id != holder_id:
            return None
        return self._replace(db, scenario_id, protected_until=until)

    async def update_pools(self, db, scenario_id, pools: PoolSnapshot):
        self._replace(
            db,
            scenario_id,
            yes_pool=pools.yes_pool,
            no_pool=pools.no_pool,
            total_pool=pools.total_pool,
            participant_count=pools.participant_count,
        )

    async def list_predictions(self, db, scenario_id):
        return list(self.predictions.get(scenario_id, []))

    async def get_prediction(self, db, scenario_id, user_id):
        for p in self.predictions.get(scenario_id, []):
            if p.user_id == user_id:
                return p
        return None

    async def insert_prediction(self, db, prediction):
        rows = self.predictions.setdefault(prediction.scenario_id, [])
        if any(p.user_id == prediction.user_id for p in rows):
            raise DuplicatePredictionError(prediction.scenario_id)
        stored = dataclasses.replace(prediction, created_at=NOW)
        rows.append(stored)

        def undo() -> None:
            rows.remove(stored)

        db.on_rollback(undo)
        return stored

    async def list_stealable(self, db, user_id, now, limit):
        rows = [
            s for s in self.scenarios.values()
            if s.status == ScenarioStatus.ACTIVE
            and s.holder_id != user_id
            and (s.protected_until is None or s.protected_until <= now)
        ]
        rows.sort(key=lambda s: (-s.theft_pool, -s.total_pool, s.id))
        return [dataclasses.replace(s) for s in rows[:limit]]

    async def count_holdings(self, db, user_id):
        return sum(
            1 for s in self.scenarios.values()
            if s.status == ScenarioStatus.ACTIVE and s.holder_id == user_id
        )


# ---------------------------------------------------------------------------
# Stealing
# ---------------------------------------------------------------------------


class FakeStealingRepository:
    def __init__(self) -> None:
        self.shields: dict[str, Shield] = {}
        self.history: list[StealRecord] = []

    async def get_shield(self, db, scenario_id):
        return self.shields.get(scenario_id)

    async def upsert_shield(self, db, shield):
        before = self.shields.get(shield.scenario_id)
        stored = dataclasses.replace(shield, created_at=NOW)
        self.shields[shield.scenario_id] = stored

        def undo() -> None:
            if before is None:
                self.shields.pop(shield.scenario_id, None)
            else:
                self.shields[shield.scenario_id] = before

        db.on_rollback(undo)
        return stored

    async def insert_steal_record(self, db, record):
        stored = dataclasses.replace(record, id=len(self.history) + 1, stolen_at=NOW)
        self.history.append(stored)

        def undo() -> None:
            self.history.remove(stored)

        db.on_rollback(undo)
        return stored

    async def list_steal_history(self, db, scenario_id, limit):
        rows = [r for r in reversed(self.history) if r.scenario_id == scenario_id]
        return rows[:limit]

    async def get_user_stats(self, db, user_id):
        stats = UserStealStats(user_id=user_id)
        for r in self.history:
            if r.thief_id == user_id:
                stats.steals_as_thief += 1
                stats.total_spent += r.price_paid
            if r.victim_id == user_id:
                stats.times_robbed += 1
                stats.total_compensation += r.compensation
        return stats

    async def top_thieves(self, db, limit):
        counts: dict[str, int] = {}
        for r in self.history:
            counts[r.thief_id] = counts.get(r.thief_id, 0) + 1
        ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        return ranked[:limit]


def make_scenario(
    scenario_id: str = "SCN-1",
    creator_id: str = "user-b",
    holder_id: str | None = None,
    **overrides: object,
) -> Scenario:
    fields: dict[str, object] = {
        "id": scenario_id,
        "creator_id": creator_id,
        "current_holder_id": holder_id,
        "title": "Will it rain on Friday?",
        "description": None,
        "category": "weather",
        "status": ScenarioStatus.ACTIVE.value,
        "created_at": NOW,
        "updated_at": NOW,
    }
    fields.update(overrides)
    return Scenario(**fields)  # type: ignore[arg-type]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db() -> FakeSession:
    return FakeSession()


@pytest.fixture
def wallet_repo() -> FakeWalletRepository:
    return FakeWalletRepository()


@pytest.fixture
def scenario_repo(clock: FakeClock) -> FakeScenarioRepository:
    return FakeScenarioRepository(clock)


@pytest.fixture
def stealing_repo() -> FakeStealingRepository:
    return FakeStealingRepository()


@pytest.fixture
def new_scenario(scenario_repo: FakeScenarioRepository) -> Callable[..., Scenario]:
    """Factory: build a scenario and store it in the fake repository."""

    def _factory(*args: object, **kwargs: object) -> Scenario:
        return scenario_repo.add(make_scenario(*args, **kwargs))  # type: ignore[arg-type]

    return _factory


@pytest.fixture
def session_factory() -> Callable[[], FakeSession]:
    """For tests that need one session per concurrent request."""
    return FakeSession
