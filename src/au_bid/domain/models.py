"""Domain models for au_bid: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Bid:
    """Append-only: a bid is never updated or deleted once stored."""

    id: str
    item_id: str
    user_id: str
    amount: int          # minor units
    is_anonymous: bool
    created_at: datetime


@dataclass(frozen=True)
class BidderBid:
    """A stored bid joined with the bidder's profile."""

    bid: Bid
    bidder_name: str | None
    bidder_email: str | None = None

    @property
    def display_name(self) -> str | None:
        if self.bidder_name:
            return self.bidder_name
        return self.bidder_email.split("@")[0] if self.bidder_email else None


@dataclass(frozen=True)
class BidView:
    """A bid as shown to one viewer. Identity fields are None when hidden."""

    id: str
    item_id: str
    amount: int
    is_anonymous: bool
    created_at: datetime
    user_id: str | None
    bidder_name: str | None
    is_own: bool = False


@dataclass(frozen=True)
class UserBid:
    """One entry of a user's bid history across auctions."""

    bid: Bid
    item_name: str
    auction_id: str
    auction_name: str
    currency_code: str
    item_current_bid: int | None
    item_highest_bidder_id: str | None
    item_end_date: datetime | None

    @property
    def is_winning(self) -> bool:
        return (
            self.item_highest_bidder_id == self.bid.user_id
            and self.item_current_bid == self.bid.amount
        )
