"""NotificationService: the owner-facing read API for in-app notifications."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_common.errors import ForbiddenError, NotificationNotFoundError
from src.au_notification.domain.models import Notification
from src.au_notification.domain.repository import NotificationRepositoryProtocol
from src.au_notification.infrastructure.persistence import NotificationRepository


class NotificationService:
    def __init__(self, repo: NotificationRepositoryProtocol | None = None) -> None:
        self._repo: NotificationRepositoryProtocol = repo or NotificationRepository()

    async def list_notifications(
        self, db: AsyncSession, user_id: str, unread_only: bool = False, limit: int = 20
    ) -> list[Notification]:
        return await self._repo.list_for_user(db, user_id, unread_only, limit)

    async def unread_count(self, db: AsyncSession, user_id: str) -> int:
        return await self._repo.count_unread(db, user_id)

    async def mark_read(self, db: AsyncSession, user_id: str, notification_id: str) -> None:
        try:
            await self._get_owned(db, user_id, notification_id)
            await self._repo.mark_read(db, notification_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def mark_all_read(self, db: AsyncSession, user_id: str) -> int:
        try:
            count = await self._repo.mark_all_read(db, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return count

    async def delete(self, db: AsyncSession, user_id: str, notification_id: str) -> None:
        try:
            await self._get_owned(db, user_id, notification_id)
            await self._repo.delete(db, notification_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def _get_owned(
        self, db: AsyncSession, user_id: str, notification_id: str
    ) -> Notification:
        notification = await self._repo.get(db, notification_id)
        if notification is None:
            raise NotificationNotFoundError(notification_id)
        if notification.user_id != user_id:
            raise ForbiddenError("Not your notification", "NOT_OWNER")
        return notification
