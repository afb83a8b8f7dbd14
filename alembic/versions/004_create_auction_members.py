"""004: create auction_members table

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
        CREATE TABLE auction_members (
            id              VARCHAR(64)     PRIMARY KEY,
            auction_id      VARCHAR(64)     NOT NULL REFERENCES auctions(id) ON DELETE CASCADE,
            user_id         VARCHAR(64)     NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            role            VARCHAR(20)     NOT NULL DEFAULT 'BIDDER',
            invited_by_id   VARCHAR(64)     REFERENCES users(id) ON DELETE SET NULL,
            joined_at       TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_auction_members_auction_user UNIQUE (auction_id, user_id),
            CONSTRAINT ck_auction_members_role CHECK (role IN ('OWNER', 'ADMIN', 'CREATOR', 'BIDDER'))
        );
    """)
    # Exactly one OWNER per auction
    op.execute("""
        CREATE UNIQUE INDEX uq_auction_members_one_owner
            ON auction_members (auction_id) WHERE role = 'OWNER';
    """)
    op.execute("CREATE INDEX idx_auction_members_user ON auction_members (user_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS auction_members CASCADE;")
