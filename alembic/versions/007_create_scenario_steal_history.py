"""007: create scenario_steal_history table

Revision ID: 007
Revises: 006
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE scenario_steal_history (
            id              BIGSERIAL       PRIMARY KEY,
            scenario_id     VARCHAR(64)     NOT NULL REFERENCES scenarios (id),
            thief_id        VARCHAR(64)     NOT NULL,
            victim_id       VARCHAR(64)     NOT NULL,
            price_paid      BIGINT          NOT NULL,
            compensation    BIGINT          NOT NULL DEFAULT 0,
            steal_number    INT             NOT NULL,
            stolen_at       TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_steal_history_number UNIQUE (scenario_id, steal_number),
            CONSTRAINT ck_steal_history_not_self CHECK (thief_id <> victim_id),
            CONSTRAINT ck_steal_history_price_gt_0 CHECK (price_paid > 0),
            CONSTRAINT ck_steal_history_compensation CHECK (
                compensation >= 0 AND compensation <= price_paid
            )
        );
    """)
    op.execute("""
        CREATE INDEX idx_steal_history_scenario
            ON scenario_steal_history (scenario_id, stolen_at DESC);
    """)
    op.execute("CREATE INDEX idx_steal_history_thief ON scenario_steal_history (thief_id);")
    op.execute("CREATE INDEX idx_steal_history_victim ON scenario_steal_history (victim_id);")
    op.execute("""
        CREATE TRIGGER trg_steal_history_append_only
            BEFORE UPDATE OR DELETE ON scenario_steal_history
            FOR EACH ROW EXECUTE FUNCTION fn_reject_history_change();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS scenario_steal_history CASCADE;")
