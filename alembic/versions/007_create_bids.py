"""007: create bids table

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
        CREATE TABLE bids (
            id              VARCHAR(64)     PRIMARY KEY,
            item_id         VARCHAR(64)     NOT NULL REFERENCES auction_items(id) ON DELETE RESTRICT,
            user_id         VARCHAR(64)     NOT NULL REFERENCES users(id),
            amount          BIGINT          NOT NULL,
            is_anonymous    BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_bids_amount CHECK (amount > 0)
        );
    """)
    op.execute("CREATE INDEX idx_bids_item_amount ON bids (item_id, amount DESC, created_at);")
    op.execute("CREATE INDEX idx_bids_user ON bids (user_id, created_at DESC);")
    # Append-only ledger
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_bids_immutable()
        RETURNS TRIGGER AS $$
        BEGIN
            RAISE EXCEPTION 'bids are append-only';
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER trg_bids_immutable
            BEFORE UPDATE ON bids
            FOR EACH ROW EXECUTE FUNCTION fn_bids_immutable();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bids CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_bids_immutable();")
