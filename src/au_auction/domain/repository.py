"""AuctionRepository Protocol: interface contract for persistence layer."""

from datetime import datetime
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_auction.domain.models import Auction, AuctionSummary, Winner


class AuctionRepositoryProtocol(Protocol):
    async def insert_auction(self, db: AsyncSession, auction: Auction) -> None: ...

    async def get_auction(self, db: AsyncSession, auction_id: str) -> Auction | None: ...

    async def get_auction_for_update(
        self, db: AsyncSession, auction_id: str
    ) -> Auction | None: ...

    async def list_for_user(self, db: AsyncSession, user_id: str) -> list[AuctionSummary]: ...

    async def update_auction(
        self, db: AsyncSession, auction_id: str, fields: dict[str, Any]
    ) -> Auction: ...

    async def delete_auction(self, db: AsyncSession, auction_id: str) -> None: ...

    async def end_auction(self, db: AsyncSession, auction_id: str, now: datetime) -> bool: ...

    async def count_bids(self, db: AsyncSession, auction_id: str) -> int: ...

    async def list_winners(
        self, db: AsyncSession, auction_id: str, now: datetime
    ) -> list[Winner]: ...

    async def list_winners_for_items(
        self, db: AsyncSession, item_ids: list[str]
    ) -> list[Winner]: ...
