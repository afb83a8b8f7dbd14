"""ItemRepository: raw SQL persistence for auction items.

The price pointer (current_bid, highest_bidder_id) is written only by
``apply_bid``, guarded by a compare-and-set on the value the ledger read under
``get_item_for_update``.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_item.domain.lifecycle import EDITABLE_FIELDS
from src.au_item.domain.models import Item

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_ITEM_COLUMNS = """
    id, auction_id, creator_id, name, description, currency_code,
    starting_bid, min_bid_increment, current_bid, highest_bidder_id,
    bidder_anonymous, is_editable_by_admin, discussions_enabled, is_published,
    image_url, end_date, anti_snipe_enabled, anti_snipe_threshold_seconds,
    anti_snipe_extension_seconds, winner_notified, bid_count,
    created_at, updated_at
"""

_INSERT_ITEM_SQL = text("""
    INSERT INTO auction_items (id, auction_id, creator_id, name, description,
        currency_code, starting_bid, min_bid_increment, bidder_anonymous,
        is_editable_by_admin, discussions_enabled, is_published, image_url, end_date,
        anti_snipe_enabled, anti_snipe_threshold_seconds, anti_snipe_extension_seconds)
    VALUES (:id, :auction_id, :creator_id, :name, :description,
        :currency_code, :starting_bid, :min_bid_increment, :bidder_anonymous,
        :is_editable_by_admin, :discussions_enabled, :is_published, :image_url, :end_date,
        :anti_snipe_enabled, :anti_snipe_threshold_seconds, :anti_snipe_extension_seconds)
""")

_GET_ITEM_SQL = text(f"""
    SELECT {_ITEM_COLUMNS} FROM auction_items WHERE id = :id
""")

# Row lock held until commit/rollback: concurrent bids on one item serialize here
_GET_ITEM_FOR_UPDATE_SQL = text(f"""
    SELECT {_ITEM_COLUMNS} FROM auction_items WHERE id = :id FOR UPDATE
""")

_LIST_ITEMS_SQL = text(f"""
    SELECT {_ITEM_COLUMNS} FROM auction_items
    WHERE auction_id = :auction_id
    ORDER BY created_at, id
""")

_DELETE_ITEM_SQL = text("DELETE FROM auction_items WHERE id = :id AND bid_count = 0")

_APPLY_BID_SQL = text("""
    UPDATE auction_items
    SET current_bid = :amount,
        highest_bidder_id = :bidder_id,
        bid_count = bid_count + 1,
        end_date = :end_date,
        updated_at = NOW()
    WHERE id = :id
      AND current_bid IS NOT DISTINCT FROM :expected
      AND :amount >= COALESCE(current_bid + min_bid_increment, starting_bid)
""")

# Close cascade: one statement, so items end together or not at all
_END_OPEN_ITEMS_SQL = text("""
    UPDATE auction_items SET end_date = :now, updated_at = NOW()
    WHERE auction_id = :auction_id AND (end_date IS NULL OR end_date > :now)
""")

# Items in AUCTION_END mode follow a moved auction end while still open
_INHERIT_AUCTION_END_SQL = text("""
    UPDATE auction_items SET end_date = :end_date, updated_at = NOW()
    WHERE auction_id = :auction_id AND (end_date IS NULL OR end_date > :now)
""")

# Other modes only get clamped so no open item outlives the auction
_CLAMP_TO_AUCTION_END_SQL = text("""
    UPDATE auction_items SET end_date = :end_date, updated_at = NOW()
    WHERE auction_id = :auction_id AND end_date > :now AND end_date > :end_date
""")

_LIST_UNNOTIFIED_ENDED_SQL = text("""
    SELECT id FROM auction_items
    WHERE winner_notified = FALSE
      AND highest_bidder_id IS NOT NULL
      AND end_date IS NOT NULL AND end_date <= :now
    ORDER BY end_date, id
    LIMIT :limit
""")

_CLAIM_WINNER_NOTIFICATIONS_SQL = text("""
    UPDATE auction_items SET winner_notified = TRUE
    WHERE id IN :item_ids AND winner_notified = FALSE
    RETURNING id
""").bindparams(bindparam("item_ids", expanding=True))


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_item(row: Any) -> Item:
    return Item(
        id=row.id,  # type: ignore[attr-defined]
        auction_id=row.auction_id,  # type: ignore[attr-defined]
        creator_id=row.creator_id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        currency_code=row.currency_code,  # type: ignore[attr-defined]
        starting_bid=row.starting_bid,  # type: ignore[attr-defined]
        min_bid_increment=row.min_bid_increment,  # type: ignore[attr-defined]
        current_bid=row.current_bid,  # type: ignore[attr-defined]
        highest_bidder_id=row.highest_bidder_id,  # type: ignore[attr-defined]
        bidder_anonymous=row.bidder_anonymous,  # type: ignore[attr-defined]
        is_editable_by_admin=row.is_editable_by_admin,  # type: ignore[attr-defined]
        discussions_enabled=row.discussions_enabled,  # type: ignore[attr-defined]
        is_published=row.is_published,  # type: ignore[attr-defined]
        image_url=row.image_url,  # type: ignore[attr-defined]
        end_date=row.end_date,  # type: ignore[attr-defined]
        anti_snipe_enabled=row.anti_snipe_enabled,  # type: ignore[attr-defined]
        anti_snipe_threshold_seconds=row.anti_snipe_threshold_seconds,  # type: ignore[attr-defined]
        anti_snipe_extension_seconds=row.anti_snipe_extension_seconds,  # type: ignore[attr-defined]
        winner_notified=row.winner_notified,  # type: ignore[attr-defined]
        bid_count=row.bid_count,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ItemRepository:
    """Concrete implementation of ItemRepositoryProtocol using raw SQL."""

    async def insert_item(self, db: AsyncSession, item: Item) -> None:
        await db.execute(
            _INSERT_ITEM_SQL,
            {
                "id": item.id,
                "auction_id": item.auction_id,
                "creator_id": item.creator_id,
                "name": item.name,
                "description": item.description,
                "currency_code": item.currency_code,
                "starting_bid": item.starting_bid,
                "min_bid_increment": item.min_bid_increment,
                "bidder_anonymous": item.bidder_anonymous,
                "is_editable_by_admin": item.is_editable_by_admin,
                "discussions_enabled": item.discussions_enabled,
                "is_published": item.is_published,
                "image_url": item.image_url,
                "end_date": item.end_date,
                "anti_snipe_enabled": item.anti_snipe_enabled,
                "anti_snipe_threshold_seconds": item.anti_snipe_threshold_seconds,
                "anti_snipe_extension_seconds": item.anti_snipe_extension_seconds,
            },
        )

    async def get_item(self, db: AsyncSession, item_id: str) -> Item | None:
        result = await db.execute(_GET_ITEM_SQL, {"id": item_id})
        row = result.fetchone()
        return _row_to_item(row) if row else None

    async def get_item_for_update(self, db: AsyncSession, item_id: str) -> Item | None:
        result = await db.execute(_GET_ITEM_FOR_UPDATE_SQL, {"id": item_id})
        row = result.fetchone()
        return _row_to_item(row) if row else None

    async def list_items(self, db: AsyncSession, auction_id: str) -> list[Item]:
        result = await db.execute(_LIST_ITEMS_SQL, {"auction_id": auction_id})
        return [_row_to_item(row) for row in result.fetchall()]

    async def update_item(
        self, db: AsyncSession, item_id: str, fields: dict[str, Any]
    ) -> Item:
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Not updatable: {sorted(unknown)}")
        assignments = ", ".join(f"{col} = :{col}" for col in sorted(fields))
        sql = text(f"""
            UPDATE auction_items SET {assignments}, updated_at = NOW()
            WHERE id = :id
            RETURNING {_ITEM_COLUMNS}
        """)
        result = await db.execute(sql, {**fields, "id": item_id})
        return _row_to_item(result.fetchone())

    async def delete_item(self, db: AsyncSession, item_id: str) -> None:
        await db.execute(_DELETE_ITEM_SQL, {"id": item_id})

    async def apply_bid(
        self,
        db: AsyncSession,
        item_id: str,
        expected_current_bid: int | None,
        amount: int,
        bidder_id: str,
        end_date: datetime | None,
    ) -> bool:
        """Move the price pointer. False if it no longer holds ``expected_current_bid``."""
        result = await db.execute(
            _APPLY_BID_SQL,
            {
                "id": item_id,
                "expected": expected_current_bid,
                "amount": amount,
                "bidder_id": bidder_id,
                "end_date": end_date,
            },
        )
        return result.rowcount == 1  # type: ignore[attr-defined]

    async def end_open_items(self, db: AsyncSession, auction_id: str, now: datetime) -> int:
        result = await db.execute(_END_OPEN_ITEMS_SQL, {"auction_id": auction_id, "now": now})
        return int(result.rowcount)  # type: ignore[attr-defined]

    async def sync_open_item_end_dates(
        self,
        db: AsyncSession,
        auction_id: str,
        auction_end_date: datetime | None,
        inherit: bool,
        now: datetime,
    ) -> int:
        if inherit:
            sql = _INHERIT_AUCTION_END_SQL
        elif auction_end_date is not None:
            sql = _CLAMP_TO_AUCTION_END_SQL
        else:
            return 0
        result = await db.execute(
            sql, {"auction_id": auction_id, "end_date": auction_end_date, "now": now}
        )
        return int(result.rowcount)  # type: ignore[attr-defined]

    async def list_unnotified_ended(
        self, db: AsyncSession, now: datetime, limit: int
    ) -> list[str]:
        result = await db.execute(_LIST_UNNOTIFIED_ENDED_SQL, {"now": now, "limit": limit})
        return [row.id for row in result.fetchall()]  # type: ignore[attr-defined]

    async def claim_winner_notifications(
        self, db: AsyncSession, item_ids: list[str]
    ) -> list[str]:
        """Flip ``winner_notified`` and return the ids this call flipped."""
        if not item_ids:
            return []
        result = await db.execute(_CLAIM_WINNER_NOTIFICATIONS_SQL, {"item_ids": item_ids})
        return [row.id for row in result.fetchall()]  # type: ignore[attr-defined]
