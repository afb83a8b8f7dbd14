"""003: create auctions table

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
        CREATE TABLE auctions (
            id                              VARCHAR(64)     PRIMARY KEY,
            name                            VARCHAR(100)    NOT NULL,
            description                     VARCHAR(500),
            creator_id                      VARCHAR(64)     NOT NULL REFERENCES users(id),
            join_mode                       VARCHAR(20)     NOT NULL DEFAULT 'INVITE_ONLY',
            member_can_invite               BOOLEAN         NOT NULL DEFAULT FALSE,
            invite_token                    VARCHAR(64),
            bidder_visibility               VARCHAR(20)     NOT NULL DEFAULT 'VISIBLE',
            end_date                        TIMESTAMPTZ,
            item_end_mode                   VARCHAR(20)     NOT NULL DEFAULT 'CUSTOM',
            default_items_editable_by_admin BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at                      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_auctions_invite_token     UNIQUE (invite_token),
            CONSTRAINT ck_auctions_join_mode        CHECK (join_mode IN ('INVITE_ONLY', 'LINK', 'FREE')),
            CONSTRAINT ck_auctions_bidder_visibility CHECK (
                bidder_visibility IN ('VISIBLE', 'ANONYMOUS', 'PER_BID')
            ),
            CONSTRAINT ck_auctions_item_end_mode    CHECK (
                item_end_mode IN ('AUCTION_END', 'CUSTOM', 'NONE')
            )
        );
    """)
    op.execute("CREATE INDEX idx_auctions_creator ON auctions (creator_id);")
    op.execute("""
        CREATE TRIGGER trg_auctions_updated_at
            BEFORE UPDATE ON auctions
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS auctions CASCADE;")
