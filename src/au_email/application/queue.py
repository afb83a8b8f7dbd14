"""EmailQueue: ``enqueue(kind, recipient, template_data) -> job_id``."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_common.enums import EmailKind
from src.au_common.id_generator import generate_id
from src.au_email.domain.models import EmailJob, EmailRecipient
from src.au_email.domain.repository import EmailOutboxProtocol
from src.au_email.infrastructure.persistence import EmailOutbox

logger = logging.getLogger(__name__)


class EmailQueue:
    def __init__(self, outbox: EmailOutboxProtocol | None = None) -> None:
        self._outbox: EmailOutboxProtocol = outbox or EmailOutbox()

    async def enqueue(
        self,
        db: AsyncSession,
        kind: EmailKind,
        recipient: EmailRecipient,
        subject: str,
        template_data: dict[str, Any],
    ) -> str:
        """Insert a PENDING job in the caller's transaction and return its id.

        The caller commits. Nothing here waits on delivery.
        """
        job = EmailJob(
            id=generate_id(),
            kind=kind,
            recipient_email=recipient.email,
            recipient_name=recipient.name,
            subject=subject,
            template_data=template_data,
        )
        await self._outbox.insert_job(db, job)
        logger.info("Queued %s email %s for %s", kind.value, job.id, recipient.email)
        return job.id
