"""BidRepository Protocol: interface contract for persistence layer."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_bid.domain.models import Bid, BidderBid, UserBid


class BidRepositoryProtocol(Protocol):
    async def insert_bid(self, db: AsyncSession, bid: Bid) -> None: ...

    async def list_bids(self, db: AsyncSession, item_id: str) -> list[BidderBid]: ...

    async def list_user_bids(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[UserBid]: ...
