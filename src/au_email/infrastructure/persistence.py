"""EmailOutbox: raw SQL insert into the email_jobs table.

Rows are written as PENDING. Delivery, backoff and the SENT/FAILED
transitions belong to the external email worker that polls this table.
"""

import json

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_email.domain.models import EmailJob

_INSERT_JOB_SQL = text("""
    INSERT INTO email_jobs (id, kind, recipient_email, recipient_name, subject,
        template_data, status, retry_count)
    VALUES (:id, :kind, :recipient_email, :recipient_name, :subject,
        CAST(:template_data AS JSONB), :status, 0)
""")


class EmailOutbox:
    """Concrete implementation of EmailOutboxProtocol using raw SQL."""

    async def insert_job(self, db: AsyncSession, job: EmailJob) -> None:
        await db.execute(
            _INSERT_JOB_SQL,
            {
                "id": job.id,
                "kind": job.kind.value,
                "recipient_email": job.recipient_email,
                "recipient_name": job.recipient_name,
                "subject": job.subject,
                "template_data": json.dumps(job.template_data),
                "status": job.status.value,
            },
        )
