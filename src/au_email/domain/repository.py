"""EmailOutbox Protocol: interface contract for the outbox table."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_email.domain.models import EmailJob


class EmailOutboxProtocol(Protocol):
    async def insert_job(self, db: AsyncSession, job: EmailJob) -> None: ...
