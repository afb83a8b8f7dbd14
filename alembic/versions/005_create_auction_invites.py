"""005: create auction_invites table

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
        CREATE TABLE auction_invites (
            id              VARCHAR(64)     PRIMARY KEY,
            auction_id      VARCHAR(64)     NOT NULL REFERENCES auctions(id) ON DELETE CASCADE,
            email           VARCHAR(255)    NOT NULL,
            role            VARCHAR(20)     NOT NULL DEFAULT 'BIDDER',
            token           VARCHAR(64)     NOT NULL,
            sender_id       VARCHAR(64)     NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            expires_at      TIMESTAMPTZ,
            used_at         TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_auction_invites_token         UNIQUE (token),
            CONSTRAINT uq_auction_invites_auction_email UNIQUE (auction_id, email),
            CONSTRAINT ck_auction_invites_role CHECK (role IN ('ADMIN', 'CREATOR', 'BIDDER'))
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS auction_invites CASCADE;")
