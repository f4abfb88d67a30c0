"""006: create scenario_shields table

Revision ID: 006
Revises: 005
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE scenario_shields (
            scenario_id     VARCHAR(64)     PRIMARY KEY REFERENCES scenarios (id),
            holder_id       VARCHAR(64)     NOT NULL,
            tier            VARCHAR(20)     NOT NULL,
            cost            BIGINT          NOT NULL,
            protected_until TIMESTAMPTZ     NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_shields_tier CHECK (tier IN ('basic', 'premium', 'ultimate')),
            CONSTRAINT ck_shields_cost_gt_0 CHECK (cost > 0)
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS scenario_shields CASCADE;")
