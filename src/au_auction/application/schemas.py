from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.au_auction.domain.models import Auction, AuctionSummary, Winner
from src.au_common.datetime_utils import utc_now
from src.au_common.enums import BidderVisibility, ItemEndMode, JoinMode, MemberRole
from src.au_common.money import format_amount


def _require_aware(v: datetime | None) -> datetime | None:
    if v is not None and v.tzinfo is None:
        raise ValueError("end_date must include a timezone offset")
    return v


class CreateAuctionRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    join_mode: JoinMode = JoinMode.INVITE_ONLY
    member_can_invite: bool = False
    bidder_visibility: BidderVisibility = BidderVisibility.VISIBLE
    end_date: datetime | None = None
    item_end_mode: ItemEndMode = ItemEndMode.CUSTOM
    default_items_editable_by_admin: bool = True

    @field_validator("end_date")
    @classmethod
    def end_date_is_aware(cls, v: datetime | None) -> datetime | None:
        return _require_aware(v)


class UpdateAuctionRequest(BaseModel):
    """Partial update: only fields present in the request body are applied."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    join_mode: JoinMode | None = None
    member_can_invite: bool | None = None
    bidder_visibility: BidderVisibility | None = None
    end_date: datetime | None = None
    item_end_mode: ItemEndMode | None = None
    default_items_editable_by_admin: bool | None = None

    @field_validator("end_date")
    @classmethod
    def end_date_is_aware(cls, v: datetime | None) -> datetime | None:
        return _require_aware(v)

    def changes(self) -> dict[str, object]:
        nullable = {"end_date", "description"}
        return {
            k: v
            for k, v in self.model_dump(exclude_unset=True).items()
            if v is not None or k in nullable
        }


class AuctionResponse(BaseModel):
    id: str
    name: str
    description: str | None
    creator_id: str
    join_mode: JoinMode
    member_can_invite: bool
    bidder_visibility: BidderVisibility
    end_date: datetime | None
    item_end_mode: ItemEndMode
    default_items_editable_by_admin: bool
    is_ended: bool
    invite_token: str | None = None
    role: MemberRole | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(
        cls, auction: Auction, role: MemberRole | None = None, now: datetime | None = None
    ) -> "AuctionResponse":
        # Only admins get to see the shareable join token
        show_token = role in (MemberRole.OWNER, MemberRole.ADMIN)
        return cls(
            id=auction.id,
            name=auction.name,
            description=auction.description,
            creator_id=auction.creator_id,
            join_mode=auction.join_mode,
            member_can_invite=auction.member_can_invite,
            bidder_visibility=auction.bidder_visibility,
            end_date=auction.end_date,
            item_end_mode=auction.item_end_mode,
            default_items_editable_by_admin=auction.default_items_editable_by_admin,
            is_ended=auction.is_ended(now or utc_now()),
            invite_token=auction.invite_token if show_token else None,
            role=role,
            created_at=auction.created_at,
            updated_at=auction.updated_at,
        )


class AuctionSummaryResponse(AuctionResponse):
    item_count: int
    member_count: int

    @classmethod
    def from_summary(cls, summary: AuctionSummary, now: datetime) -> "AuctionSummaryResponse":
        base = AuctionResponse.from_domain(summary.auction, summary.role, now)
        return cls(
            **base.model_dump(),
            item_count=summary.item_count,
            member_count=summary.member_count,
        )


class AuctionListResponse(BaseModel):
    items: list[AuctionSummaryResponse]


class WinnerResponse(BaseModel):
    item_id: str
    item_name: str
    winner_id: str
    amount: int
    amount_display: str
    currency_code: str
    bid_id: str
    bid_at: datetime | None

    @classmethod
    def from_domain(cls, w: Winner) -> "WinnerResponse":
        return cls(
            item_id=w.item_id,
            item_name=w.item_name,
            winner_id=w.winner_id,
            amount=w.amount,
            amount_display=format_amount(w.amount, w.currency_code),
            currency_code=w.currency_code,
            bid_id=w.bid_id,
            bid_at=w.bid_at,
        )


class CloseAuctionResponse(BaseModel):
    auction_id: str
    end_date: datetime | None
    already_closed: bool
    items_ended: int
    winners: list[WinnerResponse]


class ResultsResponse(BaseModel):
    auction_id: str
    winners: list[WinnerResponse]


class ProcessEndedItemsResponse(BaseModel):
    notified: int
