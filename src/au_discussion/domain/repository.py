"""DiscussionRepository Protocol: interface contract for persistence layer."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_discussion.domain.models import Discussion


class DiscussionRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, discussion: Discussion) -> None: ...

    async def get(self, db: AsyncSession, discussion_id: str) -> Discussion | None: ...

    async def list_for_item(self, db: AsyncSession, item_id: str) -> list[Discussion]: ...

    async def update_content(
        self, db: AsyncSession, discussion_id: str, content: str, now: datetime
    ) -> None: ...

    async def delete(self, db: AsyncSession, discussion_id: str) -> None: ...
