"""ScenarioRepository: concrete implementation of ScenarioRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.

The holder transfer is a single conditional UPDATE: it only matches while the
row still shows the expected holder (and steal_count, and no live shield).
0 rows returned == somebody else got there first.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_common.errors import DuplicatePredictionError, InternalError
from src.ap_scenario.domain.models import PoolSnapshot, Prediction, Scenario

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_SCENARIO_COLUMNS = """
    id, creator_id, current_holder_id, title, description, category, status,
    yes_pool, no_pool, total_pool, participant_count,
    steal_count, theft_pool, protected_until, outcome,
    created_at, updated_at
"""

_GET_SCENARIO_SQL = text(f"""
    SELECT {_SCENARIO_COLUMNS}
    FROM scenarios
    WHERE id = :scenario_id
""")

_INSERT_SCENARIO_SQL = text(f"""
    INSERT INTO scenarios (id, creator_id, title, description, category, status)
    VALUES (:id, :creator_id, :title, :description, :category, :status)
    RETURNING {_SCENARIO_COLUMNS}
""")

_LIST_SCENARIOS_SQL = text(f"""
    SELECT {_SCENARIO_COLUMNS}
    FROM scenarios
    WHERE CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT)
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_LIST_ACTIVE_IDS_SQL = text("SELECT id FROM scenarios WHERE status = 'ACTIVE' ORDER BY id")

_TRANSFER_HOLDER_SQL = text(f"""
    UPDATE scenarios
    SET current_holder_id = :to_user_id,
        steal_count = steal_count + 1,
        theft_pool = theft_pool + :retained,
        updated_at = NOW()
    WHERE id = :scenario_id
      AND status = 'ACTIVE'
      AND COALESCE(current_holder_id, creator_id) = :from_user_id
      AND (CAST(:expected_steal_count AS INT) IS NULL
           OR steal_count = CAST(:expected_steal_count AS INT))
      AND (protected_until IS NULL OR protected_until <= NOW())
    RETURNING {_SCENARIO_COLUMNS}
""")

_PROTECT_SQL = text(f"""
    UPDATE scenarios
    SET protected_until = :until,
        updated_at = NOW()
    WHERE id = :scenario_id
      AND status = 'ACTIVE'
      AND COALESCE(current_holder_id, creator_id) = :holder_id
    RETURNING {_SCENARIO_COLUMNS}
""")

_UPDATE_POOLS_SQL = text("""
    UPDATE scenarios
    SET yes_pool = :yes_pool,
        no_pool = :no_pool,
        total_pool = :total_pool,
        participant_count = :participant_count,
        updated_at = NOW()
    WHERE id = :scenario_id
""")

_LIST_PREDICTIONS_SQL = text("""
    SELECT id, scenario_id, user_id, side, amount, created_at
    FROM predictions
    WHERE scenario_id = :scenario_id
    ORDER BY created_at, id
""")

_GET_PREDICTION_SQL = text("""
    SELECT id, scenario_id, user_id, side, amount, created_at
    FROM predictions
    WHERE scenario_id = :scenario_id AND user_id = :user_id
""")

_INSERT_PREDICTION_SQL = text("""
    INSERT INTO predictions (id, scenario_id, user_id, side, amount)
    VALUES (:id, :scenario_id, :user_id, :side, :amount)
    RETURNING id, scenario_id, user_id, side, amount, created_at
""")

_LIST_STEALABLE_SQL = text(f"""
    SELECT {_SCENARIO_COLUMNS}
    FROM scenarios
    WHERE status = 'ACTIVE'
      AND COALESCE(current_holder_id, creator_id) <> :user_id
      AND (protected_until IS NULL OR protected_until <= :now)
    ORDER BY theft_pool DESC, total_pool DESC, id
    LIMIT :limit
""")

_COUNT_HOLDINGS_SQL = text("""
    SELECT COUNT(*) AS holdings
    FROM scenarios
    WHERE status = 'ACTIVE' AND COALESCE(current_holder_id, creator_id) = :user_id
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_scenario(row: object) -> Scenario:
    return Scenario(
        id=row.id,  # type: ignore[attr-defined]
        creator_id=row.creator_id,  # type: ignore[attr-defined]
        current_holder_id=row.current_holder_id,  # type: ignore[attr-defined]
        title=row.title,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        yes_pool=row.yes_pool,  # type: ignore[attr-defined]
        no_pool=row.no_pool,  # type: ignore[attr-defined]
        total_pool=row.total_pool,  # type: ignore[attr-defined]
        participant_count=row.participant_count,  # type: ignore[attr-defined]
        steal_count=row.steal_count,  # type: ignore[attr-defined]
        theft_pool=row.theft_pool,  # type: ignore[attr-defined]
        protected_until=row.protected_until,  # type: ignore[attr-defined]
        outcome=row.outcome,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_prediction(row: object) -> Prediction:
    return Prediction(
        id=row.id,  # type: ignore[attr-defined]
        scenario_id=row.scenario_id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        side=row.side,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ScenarioRepository:
    async def get_scenario(self, db: AsyncSession, scenario_id: str) -> Scenario | None:
        result = await db.execute(_GET_SCENARIO_SQL, {"scenario_id": scenario_id})
        row = result.fetchone()
        return _row_to_scenario(row) if row else None

    async def create_scenario(self, db: AsyncSession, scenario: Scenario) -> Scenario:
        result = await db.execute(
            _INSERT_SCENARIO_SQL,
            {
                "id": scenario.id,
                "creator_id": scenario.creator_id,
                "title": scenario.title,
                "description": scenario.description,
                "category": scenario.category,
                "status": scenario.status,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Scenario insert returned no rows")
        return _row_to_scenario(row)

    async def list_scenarios(
        self, db: AsyncSession, status: str | None, limit: int
    ) -> list[Scenario]:
        result = await db.execute(_LIST_SCENARIOS_SQL, {"status": status, "limit": limit})
        return [_row_to_scenario(row) for row in result.fetchall()]

    async def list_active_ids(self, db: AsyncSession) -> list[str]:
        result = await db.execute(_LIST_ACTIVE_IDS_SQL)
        return [row.id for row in result.fetchall()]

    async def transfer_holder(
        self,
        db: AsyncSession,
        scenario_id: str,
        from_user_id: str,
        to_user_id: str,
        expected_steal_count: int | None = None,
        retained: int = 0,
    ) -> Scenario | None:
        result = await db.execute(
            _TRANSFER_HOLDER_SQL,
            {
                "scenario_id": scenario_id,
                "from_user_id": from_user_id,
                "to_user_id": to_user_id,
                "expected_steal_count": expected_steal_count,
                "retained": retained,
            },
        )
        row = result.fetchone()
        return _row_to_scenario(row) if row else None

    async def protect(
        self, db: AsyncSession, scenario_id: str, holder_id: str, until: datetime
    ) -> Scenario | None:
        result = await db.execute(
            _PROTECT_SQL,
            {"scenario_id": scenario_id, "holder_id": holder_id, "until": until},
        )
        row = result.fetchone()
        return _row_to_scenario(row) if row else None

    async def update_pools(
        self, db: AsyncSession, scenario_id: str, pools: PoolSnapshot
    ) -> None:
        await db.execute(
            _UPDATE_POOLS_SQL,
            {
                "scenario_id": scenario_id,
                "yes_pool": pools.yes_pool,
                "no_pool": pools.no_pool,
                "total_pool": pools.total_pool,
                "participant_count": pools.participant_count,
            },
        )

    async def list_predictions(self, db: AsyncSession, scenario_id: str) -> list[Prediction]:
        result = await db.execute(_LIST_PREDICTIONS_SQL, {"scenario_id": scenario_id})
        return [_row_to_prediction(row) for row in result.fetchall()]

    async def get_prediction(
        self, db: AsyncSession, scenario_id: str, user_id: str
    ) -> Prediction | None:
        result = await db.execute(
            _GET_PREDICTION_SQL, {"scenario_id": scenario_id, "user_id": user_id}
        )
        row = result.fetchone()
        return _row_to_prediction(row) if row else None

    async def insert_prediction(self, db: AsyncSession, prediction: Prediction) -> Prediction:
        try:
            result = await db.execute(
                _INSERT_PREDICTION_SQL,
                {
                    "id": prediction.id,
                    "scenario_id": prediction.scenario_id,
                    "user_id": prediction.user_id,
                    "side": prediction.side,
                    "amount": prediction.amount,
                },
            )
        except IntegrityError as exc:
            # uq_predictions_scenario_user: lost a race with the same user's other request
            raise DuplicatePredictionError(prediction.scenario_id) from exc
        row = result.fetchone()
        if row is None:
            raise InternalError("Prediction insert returned no rows")
        return _row_to_prediction(row)

    async def list_stealable(
        self, db: AsyncSession, user_id: str, now: datetime, limit: int
    ) -> list[Scenario]:
        result = await db.execute(
            _LIST_STEALABLE_SQL, {"user_id": user_id, "now": now, "limit": limit}
        )
        return [_row_to_scenario(row) for row in result.fetchall()]

    async def count_holdings(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(_COUNT_HOLDINGS_SQL, {"user_id": user_id})
        row = result.fetchone()
        return int(row.holdings) if row else 0
