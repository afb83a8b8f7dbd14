"""009: create email_jobs outbox table

Revision ID: 009
Revises: 008
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "009"
down_revision: Union[str, None] = "008"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE email_jobs (
            id                  VARCHAR(64)     PRIMARY KEY,
            kind                VARCHAR(20)     NOT NULL,
            recipient_email     VARCHAR(255)    NOT NULL,
            recipient_name      VARCHAR(255),
            subject             VARCHAR(255)    NOT NULL,
            template_data       JSONB           NOT NULL DEFAULT '{}'::jsonb,
            status              VARCHAR(20)     NOT NULL DEFAULT 'PENDING',
            retry_count         INT             NOT NULL DEFAULT 0,
            last_error          TEXT,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_email_jobs_kind   CHECK (kind IN ('INVITE', 'OUTBID', 'ITEM_WON', 'NEW_ITEM')),
            CONSTRAINT ck_email_jobs_status CHECK (status IN ('PENDING', 'SENT', 'FAILED'))
        );
    """)
    op.execute("""
        CREATE INDEX idx_email_jobs_pending
            ON email_jobs (created_at) WHERE status IN ('PENDING', 'FAILED');
    """)
    op.execute("""
        CREATE TRIGGER trg_email_jobs_updated_at
            BEFORE UPDATE ON email_jobs
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE email_jobs IS 'Email outbox: drained and retried by the external sender';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS email_jobs CASCADE;")
