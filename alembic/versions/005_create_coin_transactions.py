"""005: create coin_transactions table

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE coin_transactions (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL,
            tx_type         VARCHAR(30)     NOT NULL,
            amount          BIGINT          NOT NULL,
            balance_after   BIGINT          NOT NULL,
            scenario_id     VARCHAR(64),
            description     VARCHAR(255),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_coin_tx_type CHECK (tx_type IN (
                'PURCHASE', 'SALE', 'WIN', 'LOSS', 'REWARD',
                'STEAL', 'STEAL_REFUND', 'STEAL_COMPENSATION', 'SHIELD_PURCHASE',
                'PREDICTION_STAKE', 'ADMIN_ADJUSTMENT'
            )),
            CONSTRAINT ck_coin_tx_amount_ne_0 CHECK (amount <> 0),
            CONSTRAINT ck_coin_tx_balance_after_gte_0 CHECK (balance_after >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_coin_tx_user ON coin_transactions (user_id, id DESC);")
    op.execute("CREATE INDEX idx_coin_tx_scenario ON coin_transactions (scenario_id);")
    op.execute("""
        CREATE TRIGGER trg_coin_tx_append_only
            BEFORE UPDATE OR DELETE ON coin_transactions
            FOR EACH ROW EXECUTE FUNCTION fn_reject_history_change();
    """)
    op.execute(
        "COMMENT ON TABLE coin_transactions IS 'Append-only AP coin ledger; amount is signed';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS coin_transactions CASCADE;")
