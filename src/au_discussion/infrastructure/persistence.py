"""DiscussionRepository: raw SQL persistence for item discussions."""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_discussion.domain.models import Discussion

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT = """
    SELECT d.id, d.item_id, d.user_id, d.parent_id, d.content,
           d.created_at, d.updated_at, u.name AS author_name
    FROM item_discussions d
    LEFT JOIN users u ON u.id = d.user_id
"""

_INSERT_SQL = text("""
    INSERT INTO item_discussions (id, item_id, user_id, parent_id, content, created_at, updated_at)
    VALUES (:id, :item_id, :user_id, :parent_id, :content, :created_at, :created_at)
""")

_GET_SQL = text(f"{_SELECT} WHERE d.id = :id")

_LIST_FOR_ITEM_SQL = text(f"""
    {_SELECT}
    WHERE d.item_id = :item_id
    ORDER BY d.created_at ASC, d.id ASC
""")

_UPDATE_CONTENT_SQL = text("""
    UPDATE item_discussions SET content = :content, updated_at = :now WHERE id = :id
""")

# Replies go with their parent through ON DELETE CASCADE
_DELETE_SQL = text("DELETE FROM item_discussions WHERE id = :id")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_discussion(row: Any) -> Discussion:
    return Discussion(
        id=row.id,  # type: ignore[attr-defined]
        item_id=row.item_id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        parent_id=row.parent_id,  # type: ignore[attr-defined]
        content=row.content,  # type: ignore[attr-defined]
        author_name=row.author_name,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class DiscussionRepository:
    """Concrete implementation of DiscussionRepositoryProtocol using raw SQL."""

    async def insert(self, db: AsyncSession, discussion: Discussion) -> None:
        await db.execute(
            _INSERT_SQL,
            {
                "id": discussion.id,
                "item_id": discussion.item_id,
                "user_id": discussion.user_id,
                "parent_id": discussion.parent_id,
                "content": discussion.content,
                "created_at": discussion.created_at,
            },
        )

    async def get(self, db: AsyncSession, discussion_id: str) -> Discussion | None:
        result = await db.execute(_GET_SQL, {"id": discussion_id})
        row = result.fetchone()
        return _row_to_discussion(row) if row else None

    async def list_for_item(self, db: AsyncSession, item_id: str) -> list[Discussion]:
        result = await db.execute(_LIST_FOR_ITEM_SQL, {"item_id": item_id})
        return [_row_to_discussion(row) for row in result.fetchall()]

    async def update_content(
        self, db: AsyncSession, discussion_id: str, content: str, now: datetime
    ) -> None:
        await db.execute(_UPDATE_CONTENT_SQL, {"id": discussion_id, "content": content, "now": now})

    async def delete(self, db: AsyncSession, discussion_id: str) -> None:
        await db.execute(_DELETE_SQL, {"id": discussion_id})
