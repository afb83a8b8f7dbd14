"""NotificationRepository: raw SQL persistence for in-app notifications."""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_common.enums import NotificationType
from src.au_notification.domain.models import Notification

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_COLUMNS = "id, user_id, type, title, message, auction_id, item_id, image_url, read, created_at"

_INSERT_SQL = text("""
    INSERT INTO notifications (id, user_id, type, title, message, auction_id, item_id, image_url)
    VALUES (:id, :user_id, :type, :title, :message, :auction_id, :item_id, :image_url)
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM notifications WHERE id = :id")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS} FROM notifications
    WHERE user_id = :user_id AND (:unread_only = FALSE OR read = FALSE)
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_COUNT_UNREAD_SQL = text("""
    SELECT COUNT(*) FROM notifications WHERE user_id = :user_id AND read = FALSE
""")

_MARK_READ_SQL = text("UPDATE notifications SET read = TRUE WHERE id = :id")

_MARK_ALL_READ_SQL = text("""
    UPDATE notifications SET read = TRUE WHERE user_id = :user_id AND read = FALSE
""")

_DELETE_SQL = text("DELETE FROM notifications WHERE id = :id")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_notification(row: Any) -> Notification:
    return Notification(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        type=NotificationType(row.type),  # type: ignore[attr-defined]
        title=row.title,  # type: ignore[attr-defined]
        message=row.message,  # type: ignore[attr-defined]
        auction_id=row.auction_id,  # type: ignore[attr-defined]
        item_id=row.item_id,  # type: ignore[attr-defined]
        image_url=row.image_url,  # type: ignore[attr-defined]
        read=row.read,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class NotificationRepository:
    """Concrete implementation of NotificationRepositoryProtocol using raw SQL."""

    async def insert_many(self, db: AsyncSession, notifications: list[Notification]) -> None:
        if not notifications:
            return
        await db.execute(
            _INSERT_SQL,
            [
                {
                    "id": n.id,
                    "user_id": n.user_id,
                    "type": n.type.value,
                    "title": n.title,
                    "message": n.message,
                    "auction_id": n.auction_id,
                    "item_id": n.item_id,
                    "image_url": n.image_url,
                }
                for n in notifications
            ],
        )

    async def get(self, db: AsyncSession, notification_id: str) -> Notification | None:
        result = await db.execute(_GET_SQL, {"id": notification_id})
        row = result.fetchone()
        return _row_to_notification(row) if row else None

    async def list_for_user(
        self, db: AsyncSession, user_id: str, unread_only: bool, limit: int
    ) -> list[Notification]:
        result = await db.execute(
            _LIST_SQL, {"user_id": user_id, "unread_only": unread_only, "limit": limit}
        )
        return [_row_to_notification(row) for row in result.fetchall()]

    async def count_unread(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(_COUNT_UNREAD_SQL, {"user_id": user_id})
        return int(result.scalar_one())

    async def mark_read(self, db: AsyncSession, notification_id: str) -> None:
        await db.execute(_MARK_READ_SQL, {"id": notification_id})

    async def mark_all_read(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(_MARK_ALL_READ_SQL, {"user_id": user_id})
        return int(result.rowcount)  # type: ignore[attr-defined]

    async def delete(self, db: AsyncSession, notification_id: str) -> None:
        await db.execute(_DELETE_SQL, {"id": notification_id})
