"""AuctionRepository: raw SQL persistence for auctions, close and winners."""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_auction.domain.models import Auction, AuctionSummary, Winner
from src.au_common.enums import BidderVisibility, ItemEndMode, JoinMode, MemberRole

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_AUCTION_COLUMNS = """
    a.id, a.name, a.description, a.creator_id, a.join_mode, a.member_can_invite,
    a.invite_token, a.bidder_visibility, a.end_date, a.item_end_mode,
    a.default_items_editable_by_admin, a.created_at, a.updated_at
"""

_INSERT_AUCTION_SQL = text("""
    INSERT INTO auctions (id, name, description, creator_id, join_mode,
        member_can_invite, invite_token, bidder_visibility, end_date,
        item_end_mode, default_items_editable_by_admin)
    VALUES (:id, :name, :description, :creator_id, :join_mode,
        :member_can_invite, :invite_token, :bidder_visibility, :end_date,
        :item_end_mode, :default_items_editable_by_admin)
""")

_GET_AUCTION_SQL = text(f"""
    SELECT {_AUCTION_COLUMNS} FROM auctions a WHERE a.id = :id
""")

# Serializes concurrent close/update on one auction
_GET_AUCTION_FOR_UPDATE_SQL = text(f"""
    SELECT {_AUCTION_COLUMNS} FROM auctions a WHERE a.id = :id FOR UPDATE
""")

_LIST_FOR_USER_SQL = text(f"""
    SELECT {_AUCTION_COLUMNS}, m.role,
        (SELECT COUNT(*) FROM auction_items i WHERE i.auction_id = a.id) AS item_count,
        (SELECT COUNT(*) FROM auction_members mm WHERE mm.auction_id = a.id) AS member_count
    FROM auctions a
    JOIN auction_members m ON m.auction_id = a.id
    WHERE m.user_id = :user_id
    ORDER BY a.created_at DESC
""")

_DELETE_AUCTION_SQL = text("DELETE FROM auctions WHERE id = :id")

# Only an open auction can be ended; a past end date is never rewritten
_END_AUCTION_SQL = text("""
    UPDATE auctions SET end_date = :now, updated_at = NOW()
    WHERE id = :id AND (end_date IS NULL OR end_date > :now)
    RETURNING id
""")

_COUNT_BIDS_SQL = text("""
    SELECT COUNT(*) AS bid_count
    FROM bids b JOIN auction_items i ON i.id = b.item_id
    WHERE i.auction_id = :auction_id
""")

# Highest bid per item, ties broken by the earliest bid
_WINNER_COLUMNS = """
    DISTINCT ON (i.id)
    a.id AS auction_id, a.name AS auction_name,
    i.id AS item_id, i.name AS item_name, i.currency_code,
    b.id AS bid_id, b.user_id AS winner_id, b.amount, b.created_at AS bid_at
"""

_LIST_WINNERS_SQL = text(f"""
    SELECT {_WINNER_COLUMNS}
    FROM auction_items i
    JOIN auctions a ON a.id = i.auction_id
    JOIN bids b ON b.item_id = i.id
    WHERE i.auction_id = :auction_id
      AND i.end_date IS NOT NULL AND i.end_date <= :now
    ORDER BY i.id, b.amount DESC, b.created_at ASC, b.id ASC
""")

_LIST_WINNERS_FOR_ITEMS_SQL = text(f"""
    SELECT {_WINNER_COLUMNS}
    FROM auction_items i
    JOIN auctions a ON a.id = i.auction_id
    JOIN bids b ON b.item_id = i.id
    WHERE i.id IN :item_ids
    ORDER BY i.id, b.amount DESC, b.created_at ASC, b.id ASC
""").bindparams(bindparam("item_ids", expanding=True))

_UPDATABLE_COLUMNS = frozenset({
    "name",
    "description",
    "join_mode",
    "member_can_invite",
    "invite_token",
    "bidder_visibility",
    "end_date",
    "item_end_mode",
    "default_items_editable_by_admin",
})


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_auction(row: Any) -> Auction:
    return Auction(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        creator_id=row.creator_id,  # type: ignore[attr-defined]
        join_mode=JoinMode(row.join_mode),  # type: ignore[attr-defined]
        member_can_invite=row.member_can_invite,  # type: ignore[attr-defined]
        invite_token=row.invite_token,  # type: ignore[attr-defined]
        bidder_visibility=BidderVisibility(row.bidder_visibility),  # type: ignore[attr-defined]
        end_date=row.end_date,  # type: ignore[attr-defined]
        item_end_mode=ItemEndMode(row.item_end_mode),  # type: ignore[attr-defined]
        default_items_editable_by_admin=row.default_items_editable_by_admin,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_winner(row: Any) -> Winner:
    return Winner(
        auction_id=row.auction_id,  # type: ignore[attr-defined]
        auction_name=row.auction_name,  # type: ignore[attr-defined]
        item_id=row.item_id,  # type: ignore[attr-defined]
        item_name=row.item_name,  # type: ignore[attr-defined]
        winner_id=row.winner_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        currency_code=row.currency_code,  # type: ignore[attr-defined]
        bid_id=row.bid_id,  # type: ignore[attr-defined]
        bid_at=row.bid_at,  # type: ignore[attr-defined]
    )


def _db_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AuctionRepository:
    """Concrete implementation of AuctionRepositoryProtocol using raw SQL."""

    async def insert_auction(self, db: AsyncSession, auction: Auction) -> None:
        await db.execute(
            _INSERT_AUCTION_SQL,
            {
                "id": auction.id,
                "name": auction.name,
                "description": auction.description,
                "creator_id": auction.creator_id,
                "join_mode": auction.join_mode.value,
                "member_can_invite": auction.member_can_invite,
                "invite_token": auction.invite_token,
                "bidder_visibility": auction.bidder_visibility.value,
                "end_date": auction.end_date,
                "item_end_mode": auction.item_end_mode.value,
                "default_items_editable_by_admin": auction.default_items_editable_by_admin,
            },
        )

    async def get_auction(self, db: AsyncSession, auction_id: str) -> Auction | None:
        result = await db.execute(_GET_AUCTION_SQL, {"id": auction_id})
        row = result.fetchone()
        return _row_to_auction(row) if row else None

    async def get_auction_for_update(
        self, db: AsyncSession, auction_id: str
    ) -> Auction | None:
        result = await db.execute(_GET_AUCTION_FOR_UPDATE_SQL, {"id": auction_id})
        row = result.fetchone()
        return _row_to_auction(row) if row else None

    async def list_for_user(self, db: AsyncSession, user_id: str) -> list[AuctionSummary]:
        result = await db.execute(_LIST_FOR_USER_SQL, {"user_id": user_id})
        return [
            AuctionSummary(
                auction=_row_to_auction(row),
                role=MemberRole(row.role),  # type: ignore[attr-defined]
                item_count=row.item_count,  # type: ignore[attr-defined]
                member_count=row.member_count,  # type: ignore[attr-defined]
            )
            for row in result.fetchall()
        ]

    async def update_auction(
        self, db: AsyncSession, auction_id: str, fields: dict[str, Any]
    ) -> Auction:
        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Not updatable: {sorted(unknown)}")
        assignments = ", ".join(f"{col} = :{col}" for col in sorted(fields))
        params = {col: _db_value(value) for col, value in fields.items()}
        params["id"] = auction_id
        sql = text(f"""
            UPDATE auctions a SET {assignments}, updated_at = NOW()
            WHERE a.id = :id
            RETURNING {_AUCTION_COLUMNS}
        """)
        result = await db.execute(sql, params)
        return _row_to_auction(result.fetchone())

    async def delete_auction(self, db: AsyncSession, auction_id: str) -> None:
        await db.execute(_DELETE_AUCTION_SQL, {"id": auction_id})

    async def end_auction(self, db: AsyncSession, auction_id: str, now: datetime) -> bool:
        """Set the auction end to ``now``. False if it had already ended."""
        result = await db.execute(_END_AUCTION_SQL, {"id": auction_id, "now": now})
        return result.fetchone() is not None

    async def count_bids(self, db: AsyncSession, auction_id: str) -> int:
        result = await db.execute(_COUNT_BIDS_SQL, {"auction_id": auction_id})
        return int(result.scalar_one())

    async def list_winners(
        self, db: AsyncSession, auction_id: str, now: datetime
    ) -> list[Winner]:
        result = await db.execute(_LIST_WINNERS_SQL, {"auction_id": auction_id, "now": now})
        return [_row_to_winner(row) for row in result.fetchall()]

    async def list_winners_for_items(
        self, db: AsyncSession, item_ids: list[str]
    ) -> list[Winner]:
        if not item_ids:
            return []
        result = await db.execute(_LIST_WINNERS_FOR_ITEMS_SQL, {"item_ids": item_ids})
        return [_row_to_winner(row) for row in result.fetchall()]
