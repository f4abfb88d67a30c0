"""003: create scenarios table

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE scenarios (
            id                  VARCHAR(64)     PRIMARY KEY,
            creator_id          VARCHAR(64)     NOT NULL,
            current_holder_id   VARCHAR(64),
            title               VARCHAR(200)    NOT NULL,
            description         TEXT,
            category            VARCHAR(64),
            status              VARCHAR(20)     NOT NULL DEFAULT 'ACTIVE',
            yes_pool            BIGINT          NOT NULL DEFAULT 0,
            no_pool             BIGINT          NOT NULL DEFAULT 0,
            total_pool          BIGINT          NOT NULL DEFAULT 0,
            participant_count   INT             NOT NULL DEFAULT 0,
            steal_count         INT             NOT NULL DEFAULT 0,
            theft_pool          BIGINT          NOT NULL DEFAULT 0,
            protected_until     TIMESTAMPTZ,
            outcome             BOOLEAN,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_scenarios_status CHECK (
                status IN ('ACTIVE', 'RESOLVED', 'CANCELLED')
            ),
            CONSTRAINT ck_scenarios_outcome_resolved CHECK (outcome IS NULL OR status = 'RESOLVED'),
            CONSTRAINT ck_scenarios_pools_gte_0 CHECK (
                yes_pool >= 0 AND no_pool >= 0 AND participant_count >= 0
            ),
            CONSTRAINT ck_scenarios_total_pool CHECK (total_pool = yes_pool + no_pool),
            CONSTRAINT ck_scenarios_steal_count_gte_0 CHECK (steal_count >= 0),
            CONSTRAINT ck_scenarios_theft_pool_gte_0 CHECK (theft_pool >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_scenarios_status ON scenarios (status, created_at DESC);")
    op.execute("""
        CREATE INDEX idx_scenarios_holder
            ON scenarios (COALESCE(current_holder_id, creator_id))
            WHERE status = 'ACTIVE';
    """)
    op.execute("""
        CREATE TRIGGER trg_scenarios_updated_at
            BEFORE UPDATE ON scenarios
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        COMMENT ON COLUMN scenarios.current_holder_id IS
            'NULL until first steal; effective holder is COALESCE(current_holder_id, creator_id)';
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS scenarios CASCADE;")
