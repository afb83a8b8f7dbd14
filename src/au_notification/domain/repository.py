"""NotificationRepository Protocol: interface contract for persistence layer."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_notification.domain.models import Notification


class NotificationRepositoryProtocol(Protocol):
    async def insert_many(self, db: AsyncSession, notifications: list[Notification]) -> None: ...

    async def get(self, db: AsyncSession, notification_id: str) -> Notification | None: ...

    async def list_for_user(
        self, db: AsyncSession, user_id: str, unread_only: bool, limit: int
    ) -> list[Notification]: ...

    async def count_unread(self, db: AsyncSession, user_id: str) -> int: ...

    async def mark_read(self, db: AsyncSession, notification_id: str) -> None: ...

    async def mark_all_read(self, db: AsyncSession, user_id: str) -> int: ...

    async def delete(self, db: AsyncSession, notification_id: str) -> None: ...
