"""010: item publish status and item_discussions table

Revision ID: 010
Revises: 009
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "010"
down_revision: Union[str, None] = "009"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Existing rows stay published
    op.execute("""
        ALTER TABLE auction_items
            ADD COLUMN is_published BOOLEAN NOT NULL DEFAULT TRUE;
    """)
    op.execute("""
        CREATE TABLE item_discussions (
            id              VARCHAR(64)     PRIMARY KEY,
            item_id         VARCHAR(64)     NOT NULL REFERENCES auction_items(id) ON DELETE CASCADE,
            user_id         VARCHAR(64)     NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            parent_id       VARCHAR(64)     REFERENCES item_discussions(id) ON DELETE CASCADE,
            content         TEXT            NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_item_discussions_content CHECK (
                char_length(content) BETWEEN 1 AND 2000
            )
        );
    """)
    op.execute("""
        CREATE INDEX idx_item_discussions_item_created
            ON item_discussions (item_id, created_at);
    """)
    op.execute("CREATE INDEX idx_item_discussions_parent ON item_discussions (parent_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS item_discussions CASCADE;")
    op.execute("ALTER TABLE auction_items DROP COLUMN IF EXISTS is_published;")
