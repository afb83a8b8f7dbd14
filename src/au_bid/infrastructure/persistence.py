"""BidRepository: raw SQL persistence for the append-only bids table."""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_bid.domain.models import Bid, BidderBid, UserBid

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_BID_SQL = text("""
    INSERT INTO bids (id, item_id, user_id, amount, is_anonymous, created_at)
    VALUES (:id, :item_id, :user_id, :amount, :is_anonymous, :created_at)
""")

_LIST_BIDS_SQL = text("""
    SELECT b.id, b.item_id, b.user_id, b.amount, b.is_anonymous, b.created_at,
           u.name AS bidder_name, u.email AS bidder_email
    FROM bids b
    LEFT JOIN users u ON u.id = b.user_id
    WHERE b.item_id = :item_id
    ORDER BY b.amount DESC, b.created_at ASC, b.id ASC
""")

_LIST_USER_BIDS_SQL = text("""
    SELECT b.id, b.item_id, b.user_id, b.amount, b.is_anonymous, b.created_at,
           i.name AS item_name, i.currency_code, i.current_bid AS item_current_bid,
           i.highest_bidder_id AS item_highest_bidder_id, i.end_date AS item_end_date,
           a.id AS auction_id, a.name AS auction_name
    FROM bids b
    JOIN auction_items i ON i.id = b.item_id
    JOIN auctions a ON a.id = i.auction_id
    WHERE b.user_id = :user_id
    ORDER BY b.created_at DESC, b.id DESC
    LIMIT :limit
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_bid(row: Any) -> Bid:
    return Bid(
        id=row.id,  # type: ignore[attr-defined]
        item_id=row.item_id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        is_anonymous=row.is_anonymous,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class BidRepository:
    """Concrete implementation of BidRepositoryProtocol using raw SQL."""

    async def insert_bid(self, db: AsyncSession, bid: Bid) -> None:
        await db.execute(
            _INSERT_BID_SQL,
            {
                "id": bid.id,
                "item_id": bid.item_id,
                "user_id": bid.user_id,
                "amount": bid.amount,
                "is_anonymous": bid.is_anonymous,
                "created_at": bid.created_at,
            },
        )

    async def list_bids(self, db: AsyncSession, item_id: str) -> list[BidderBid]:
        result = await db.execute(_LIST_BIDS_SQL, {"item_id": item_id})
        return [
            BidderBid(
                bid=_row_to_bid(row),
                bidder_name=row.bidder_name,  # type: ignore[attr-defined]
                bidder_email=row.bidder_email,  # type: ignore[attr-defined]
            )
            for row in result.fetchall()
        ]

    async def list_user_bids(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[UserBid]:
        result = await db.execute(_LIST_USER_BIDS_SQL, {"user_id": user_id, "limit": limit})
        return [
            UserBid(
                bid=_row_to_bid(row),
                item_name=row.item_name,  # type: ignore[attr-defined]
                auction_id=row.auction_id,  # type: ignore[attr-defined]
                auction_name=row.auction_name,  # type: ignore[attr-defined]
                currency_code=row.currency_code,  # type: ignore[attr-defined]
                item_current_bid=row.item_current_bid,  # type: ignore[attr-defined]
                item_highest_bidder_id=row.item_highest_bidder_id,  # type: ignore[attr-defined]
                item_end_date=row.item_end_date,  # type: ignore[attr-defined]
            )
            for row in result.fetchall()
        ]
