"""Domain models for au_item: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from src.au_common.datetime_utils import is_past


class ItemState(str, Enum):
    OPEN = "OPEN"
    ENDED = "ENDED"


@dataclass
class Item:
    id: str
    auction_id: str
    creator_id: str
    name: str
    starting_bid: int                  # minor units
    min_bid_increment: int = 1         # minor units, >= 1
    currency_code: str = "USD"
    description: str | None = None
    current_bid: int | None = None     # minor units, NULL until the first bid
    highest_bidder_id: str | None = None
    bidder_anonymous: bool = False     # default for the per-bid anonymity choice
    is_editable_by_admin: bool = True
    discussions_enabled: bool = True
    is_published: bool = True          # drafts are visible to their creator and admins only
    image_url: str | None = None
    end_date: datetime | None = None
    anti_snipe_enabled: bool = False
    anti_snipe_threshold_seconds: int = 300
    anti_snipe_extension_seconds: int = 300
    winner_notified: bool = False
    bid_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def state(self, now: datetime | None = None) -> ItemState:
        return ItemState.ENDED if is_past(self.end_date, now) else ItemState.OPEN

    def is_ended(self, now: datetime | None = None) -> bool:
        return self.state(now) == ItemState.ENDED

    @property
    def min_bid(self) -> int:
        if self.current_bid is None:
            return self.starting_bid
        return self.current_bid + self.min_bid_increment
