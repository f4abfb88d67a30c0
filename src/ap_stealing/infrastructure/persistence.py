"""StealingRepository: shields table and append-only steal history.

Shield rows are keyed by scenario: re-applying a shield overwrites the row,
so there is never more than one shield per scenario.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_common.errors import InternalError
from src.ap_stealing.domain.models import Shield, StealRecord, UserStealStats

_GET_SHIELD_SQL = text("""
    SELECT scenario_id, holder_id, tier, cost, protected_until, created_at
    FROM scenario_shields
    WHERE scenario_id = :scenario_id
""")

_UPSERT_SHIELD_SQL = text("""
    INSERT INTO scenario_shields (scenario_id, holder_id, tier, cost, protected_until)
    VALUES (:scenario_id, :holder_id, :tier, :cost, :protected_until)
    ON CONFLICT (scenario_id) DO UPDATE
        SET holder_id = EXCLUDED.holder_id,
            tier = EXCLUDED.tier,
            cost = EXCLUDED.cost,
            protected_until = EXCLUDED.protected_until,
            created_at = NOW()
    RETURNING scenario_id, holder_id, tier, cost, protected_until, created_at
""")

_INSERT_STEAL_SQL = text("""
    INSERT INTO scenario_steal_history
        (scenario_id, thief_id, victim_id, price_paid, compensation, steal_number)
    VALUES
        (:scenario_id, :thief_id, :victim_id, :price_paid, :compensation, :steal_number)
    RETURNING id, scenario_id, thief_id, victim_id, price_paid, compensation,
              steal_number, stolen_at
""")

_LIST_HISTORY_SQL = text("""
    SELECT id, scenario_id, thief_id, victim_id, price_paid, compensation,
           steal_number, stolen_at
    FROM scenario_steal_history
    WHERE scenario_id = :scenario_id
    ORDER BY stolen_at DESC, id DESC
    LIMIT :limit
""")

_USER_STATS_SQL = text("""
    SELECT
        COUNT(*) FILTER (WHERE thief_id = :user_id)                          AS steals_as_thief,
        COUNT(*) FILTER (WHERE victim_id = :user_id)                         AS times_robbed,
        COALESCE(SUM(price_paid) FILTER (WHERE thief_id = :user_id), 0)      AS total_spent,
        COALESCE(SUM(compensation) FILTER (WHERE victim_id = :user_id), 0)   AS total_compensation
    FROM scenario_steal_history
    WHERE thief_id = :user_id OR victim_id = :user_id
""")

_TOP_THIEVES_SQL = text("""
    SELECT thief_id, COUNT(*) AS steal_count
    FROM scenario_steal_history
    GROUP BY thief_id
    ORDER BY steal_count DESC, thief_id
    LIMIT :limit
""")


def _row_to_shield(row: object) -> Shield:
    return Shield(
        scenario_id=row.scenario_id,  # type: ignore[attr-defined]
        holder_id=row.holder_id,  # type: ignore[attr-defined]
        tier=row.tier,  # type: ignore[attr-defined]
        cost=row.cost,  # type: ignore[attr-defined]
        protected_until=row.protected_until,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_record(row: object) -> StealRecord:
    return StealRecord(
        id=row.id,  # type: ignore[attr-defined]
        scenario_id=row.scenario_id,  # type: ignore[attr-defined]
        thief_id=row.thief_id,  # type: ignore[attr-defined]
        victim_id=row.victim_id,  # type: ignore[attr-defined]
        price_paid=row.price_paid,  # type: ignore[attr-defined]
        compensation=row.compensation,  # type: ignore[attr-defined]
        steal_number=row.steal_number,  # type: ignore[attr-defined]
        stolen_at=row.stolen_at,  # type: ignore[attr-defined]
    )


class StealingRepository:
    async def get_shield(self, db: AsyncSession, scenario_id: str) -> Shield | None:
        row = (await db.execute(_GET_SHIELD_SQL, {"scenario_id": scenario_id})).fetchone()
        return _row_to_shield(row) if row else None

    async def upsert_shield(self, db: AsyncSession, shield: Shield) -> Shield:
        row = (
            await db.execute(
                _UPSERT_SHIELD_SQL,
                {
                    "scenario_id": shield.scenario_id,
                    "holder_id": shield.holder_id,
                    "tier": shield.tier,
                    "cost": shield.cost,
                    "protected_until": shield.protected_until,
                },
            )
        ).fetchone()
        if row is None:
            raise InternalError("Shield upsert returned no rows")
        return _row_to_shield(row)

    async def insert_steal_record(self, db: AsyncSession, record: StealRecord) -> StealRecord:
        row = (
            await db.execute(
                _INSERT_STEAL_SQL,
                {
                    "scenario_id": record.scenario_id,
                    "thief_id": record.thief_id,
                    "victim_id": record.victim_id,
                    "price_paid": record.price_paid,
                    "compensation": record.compensation,
                    "steal_number": record.steal_number,
                },
            )
        ).fetchone()
        if row is None:
            raise InternalError("Steal history insert returned no rows")
        return _row_to_record(row)

    async def list_steal_history(
        self, db: AsyncSession, scenario_id: str, limit: int
    ) -> list[StealRecord]:
        rows = (
            await db.execute(_LIST_HISTORY_SQL, {"scenario_id": scenario_id, "limit": limit})
        ).fetchall()
        return [_row_to_record(r) for r in rows]

    async def get_user_stats(self, db: AsyncSession, user_id: str) -> UserStealStats:
        row = (await db.execute(_USER_STATS_SQL, {"user_id": user_id})).fetchone()
        if row is None:
            return UserStealStats(user_id=user_id)
        return UserStealStats(
            user_id=user_id,
            steals_as_thief=int(row.steals_as_thief),
            times_robbed=int(row.times_robbed),
            total_spent=int(row.total_spent),
            total_compensation=int(row.total_compensation),
        )

    async def top_thieves(self, db: AsyncSession, limit: int) -> list[tuple[str, int]]:
        rows = (await db.execute(_TOP_THIEVES_SQL, {"limit": limit})).fetchall()
        return [(r.thief_id, int(r.steal_count)) for r in rows]
