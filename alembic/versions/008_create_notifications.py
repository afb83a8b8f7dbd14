"""008: create notifications table

Revision ID: 008
Revises: 007
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE notifications (
            id              VARCHAR(64)     PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            type            VARCHAR(20)     NOT NULL,
            title           VARCHAR(255)    NOT NULL,
            message         TEXT            NOT NULL,
            auction_id      VARCHAR(64)     REFERENCES auctions(id) ON DELETE CASCADE,
            item_id         VARCHAR(64)     REFERENCES auction_items(id) ON DELETE CASCADE,
            image_url       VARCHAR(1024),
            read            BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_notifications_type CHECK (
                type IN ('OUTBID', 'AUCTION_WON', 'MEMBER_JOINED', 'NEW_ITEM')
            )
        );
    """)
    op.execute("CREATE INDEX idx_notifications_user ON notifications (user_id, read, created_at DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS notifications CASCADE;")
