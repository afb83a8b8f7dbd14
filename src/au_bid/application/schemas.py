from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field

from src.au_bid.domain.models import Bid, BidView, UserBid
from src.au_common.money import MAX_AMOUNT, format_amount


class PlaceBidRequest(BaseModel):
    amount: int = Field(..., gt=0, le=MAX_AMOUNT, description="Bid in minor currency units")
    is_anonymous: bool | None = Field(
        None, validation_alias=AliasChoices("is_anonymous", "isAnonymous")
    )


class BidResponse(BaseModel):
    id: str
    item_id: str
    user_id: str
    amount: int
    is_anonymous: bool
    created_at: datetime

    @classmethod
    def from_domain(cls, bid: Bid) -> "BidResponse":
        return cls(
            id=bid.id,
            item_id=bid.item_id,
            user_id=bid.user_id,
            amount=bid.amount,
            is_anonymous=bid.is_anonymous,
            created_at=bid.created_at,
        )


class BidViewResponse(BaseModel):
    id: str
    item_id: str
    amount: int
    is_anonymous: bool
    created_at: datetime
    user_id: str | None
    bidder_name: str | None
    is_own: bool

    @classmethod
    def from_domain(cls, view: BidView) -> "BidViewResponse":
        return cls(
            id=view.id,
            item_id=view.item_id,
            amount=view.amount,
            is_anonymous=view.is_anonymous,
            created_at=view.created_at,
            user_id=view.user_id,
            bidder_name=view.bidder_name,
            is_own=view.is_own,
        )


class BidListResponse(BaseModel):
    items: list[BidViewResponse]


class UserBidResponse(BaseModel):
    id: str
    amount: int
    amount_display: str
    created_at: datetime
    is_winning: bool
    item_id: str
    item_name: str
    item_current_bid: int | None
    item_end_date: datetime | None
    auction_id: str
    auction_name: str
    currency_code: str

    @classmethod
    def from_domain(cls, entry: UserBid) -> "UserBidResponse":
        return cls(
            id=entry.bid.id,
            amount=entry.bid.amount,
            amount_display=format_amount(entry.bid.amount, entry.currency_code),
            created_at=entry.bid.created_at,
            is_winning=entry.is_winning,
            item_id=entry.bid.item_id,
            item_name=entry.item_name,
            item_current_bid=entry.item_current_bid,
            item_end_date=entry.item_end_date,
            auction_id=entry.auction_id,
            auction_name=entry.auction_name,
            currency_code=entry.currency_code,
        )


class UserBidStats(BaseModel):
    total_bids: int
    winning_bids: int


class UserBidHistoryResponse(BaseModel):
    bids: list[UserBidResponse]
    stats: UserBidStats

    @classmethod
    def from_domain(cls, entries: list[UserBid]) -> "UserBidHistoryResponse":
        bids = [UserBidResponse.from_domain(e) for e in entries]
        return cls(
            bids=bids,
            stats=UserBidStats(
                total_bids=len(bids),
                winning_bids=sum(1 for b in bids if b.is_winning),
            ),
        )
