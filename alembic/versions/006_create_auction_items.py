"""006: create auction_items table

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
        CREATE TABLE auction_items (
            id                              VARCHAR(64)     PRIMARY KEY,
            auction_id                      VARCHAR(64)     NOT NULL REFERENCES auctions(id) ON DELETE CASCADE,
            creator_id                      VARCHAR(64)     NOT NULL REFERENCES users(id),
            name                            VARCHAR(200)    NOT NULL,
            description                     TEXT,
            currency_code                   CHAR(3)         NOT NULL DEFAULT 'USD',
            starting_bid                    BIGINT          NOT NULL DEFAULT 1,
            min_bid_increment               BIGINT          NOT NULL DEFAULT 1,
            current_bid                     BIGINT,
            highest_bidder_id               VARCHAR(64)     REFERENCES users(id),
            bidder_anonymous                BOOLEAN         NOT NULL DEFAULT FALSE,
            is_editable_by_admin            BOOLEAN         NOT NULL DEFAULT TRUE,
            discussions_enabled             BOOLEAN         NOT NULL DEFAULT TRUE,
            image_url                       VARCHAR(1024),
            end_date                        TIMESTAMPTZ,
            anti_snipe_enabled              BOOLEAN         NOT NULL DEFAULT FALSE,
            anti_snipe_threshold_seconds    INT             NOT NULL DEFAULT 300,
            anti_snipe_extension_seconds    INT             NOT NULL DEFAULT 300,
            winner_notified                 BOOLEAN         NOT NULL DEFAULT FALSE,
            bid_count                       INT             NOT NULL DEFAULT 0,
            created_at                      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_auction_items_starting_bid    CHECK (starting_bid >= 1),
            CONSTRAINT ck_auction_items_increment       CHECK (min_bid_increment >= 1),
            CONSTRAINT ck_auction_items_current_bid     CHECK (
                current_bid IS NULL OR current_bid >= starting_bid
            ),
            CONSTRAINT ck_auction_items_pointer_pair    CHECK (
                (current_bid IS NULL) = (highest_bidder_id IS NULL)
            ),
            CONSTRAINT ck_auction_items_bid_count       CHECK (bid_count >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_auction_items_auction ON auction_items (auction_id);")
    op.execute("""
        CREATE INDEX idx_auction_items_unnotified_ended
            ON auction_items (end_date)
            WHERE winner_notified = FALSE AND highest_bidder_id IS NOT NULL;
    """)
    op.execute("""
        CREATE TRIGGER trg_auction_items_updated_at
            BEFORE UPDATE ON auction_items
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS auction_items CASCADE;")
