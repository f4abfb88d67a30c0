"""004: create predictions table

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE predictions (
            id              VARCHAR(64)     PRIMARY KEY,
            scenario_id     VARCHAR(64)     NOT NULL REFERENCES scenarios (id),
            user_id         VARCHAR(64)     NOT NULL,
            side            VARCHAR(3)      NOT NULL,
            amount          BIGINT          NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_predictions_scenario_user UNIQUE (scenario_id, user_id),
            CONSTRAINT ck_predictions_side CHECK (side IN ('YES', 'NO')),
            CONSTRAINT ck_predictions_amount_gte_0 CHECK (amount >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_predictions_scenario ON predictions (scenario_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS predictions CASCADE;")
