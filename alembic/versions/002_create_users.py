"""002: create users table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE users (
            id                  VARCHAR(64)     PRIMARY KEY,
            email               VARCHAR(255)    NOT NULL,
            name                VARCHAR(255),
            is_active           BOOLEAN         NOT NULL DEFAULT TRUE,
            email_on_outbid     BOOLEAN         NOT NULL DEFAULT TRUE,
            email_on_new_item   BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_email UNIQUE (email)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE users IS 'Users: provisioned by the auth service, read-only here';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
