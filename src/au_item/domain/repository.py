"""ItemRepository Protocol: interface contract for persistence layer."""

from datetime import datetime
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_item.domain.models import Item


class ItemRepositoryProtocol(Protocol):
    async def insert_item(self, db: AsyncSession, item: Item) -> None: ...

    async def get_item(self, db: AsyncSession, item_id: str) -> Item | None: ...

    async def get_item_for_update(self, db: AsyncSession, item_id: str) -> Item | None: ...

    async def list_items(self, db: AsyncSession, auction_id: str) -> list[Item]: ...

    async def update_item(
        self, db: AsyncSession, item_id: str, fields: dict[str, Any]
    ) -> Item: ...

    async def delete_item(self, db: AsyncSession, item_id: str) -> None: ...

    async def apply_bid(
        self,
        db: AsyncSession,
        item_id: str,
        expected_current_bid: int | None,
        amount: int,
        bidder_id: str,
        end_date: datetime | None,
    ) -> bool: ...

    async def end_open_items(self, db: AsyncSession, auction_id: str, now: datetime) -> int: ...

    async def sync_open_item_end_dates(
        self,
        db: AsyncSession,
        auction_id: str,
        auction_end_date: datetime | None,
        inherit: bool,
        now: datetime,
    ) -> int: ...

    async def list_unnotified_ended(
        self, db: AsyncSession, now: datetime, limit: int
    ) -> list[str]: ...

    async def claim_winner_notifications(
        self, db: AsyncSession, item_ids: list[str]
    ) -> list[str]: ...
