"""001: extensions and shared trigger functions

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # gen_random_uuid() for users.id
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto";')

    # BEFORE UPDATE on mutable tables (users, scenarios)
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)

    # BEFORE UPDATE OR DELETE on history tables; corrections are new rows
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_reject_history_change()
        RETURNS TRIGGER AS $$
        BEGIN
            RAISE EXCEPTION '% is append-only (% rejected)', TG_TABLE_NAME, TG_OP;
        END;
        $$ LANGUAGE plpgsql;
    """)


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS fn_reject_history_change();")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
