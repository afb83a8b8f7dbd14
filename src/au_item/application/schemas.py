from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.au_common.currencies import DEFAULT_CURRENCY
from src.au_common.datetime_utils import utc_now
from src.au_common.money import MAX_AMOUNT, format_amount
from src.au_item.domain.models import Item


def _require_aware(v: datetime | None) -> datetime | None:
    if v is not None and v.tzinfo is None:
        raise ValueError("end_date must include a timezone offset")
    return v


class CreateItemRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    currency_code: str = Field(DEFAULT_CURRENCY, min_length=3, max_length=3)
    starting_bid: int = Field(1, ge=1, le=MAX_AMOUNT, description="Minor currency units")
    min_bid_increment: int = Field(1, ge=1, le=MAX_AMOUNT, description="Minor currency units")
    end_date: datetime | None = None
    bidder_anonymous: bool = False
    is_editable_by_admin: bool | None = None
    discussions_enabled: bool = True
    is_published: bool = True
    image_url: str | None = None
    anti_snipe_enabled: bool = False
    anti_snipe_threshold_seconds: int = Field(300, ge=1)
    anti_snipe_extension_seconds: int = Field(300, ge=1)

    @field_validator("end_date")
    @classmethod
    def end_date_is_aware(cls, v: datetime | None) -> datetime | None:
        return _require_aware(v)


class UpdateItemRequest(BaseModel):
    """Partial update: only fields present in the request body are applied."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    currency_code: str | None = Field(None, min_length=3, max_length=3)
    starting_bid: int | None = Field(None, ge=1, le=MAX_AMOUNT)
    min_bid_increment: int | None = Field(None, ge=1, le=MAX_AMOUNT)
    end_date: datetime | None = None
    bidder_anonymous: bool | None = None
    is_editable_by_admin: bool | None = None
    discussions_enabled: bool | None = None
    is_published: bool | None = None
    image_url: str | None = None
    anti_snipe_enabled: bool | None = None
    anti_snipe_threshold_seconds: int | None = Field(None, ge=1)
    anti_snipe_extension_seconds: int | None = Field(None, ge=1)

    @field_validator("end_date")
    @classmethod
    def end_date_is_aware(cls, v: datetime | None) -> datetime | None:
        return _require_aware(v)

    def changes(self) -> dict[str, object]:
        # Nullable columns can be cleared with an explicit null
        nullable = {"end_date", "description", "image_url"}
        return {
            k: v
            for k, v in self.model_dump(exclude_unset=True).items()
            if v is not None or k in nullable
        }


class ItemResponse(BaseModel):
    id: str
    auction_id: str
    creator_id: str
    name: str
    description: str | None
    currency_code: str
    starting_bid: int
    min_bid_increment: int
    current_bid: int | None
    current_bid_display: str | None
    highest_bidder_id: str | None
    min_bid: int
    min_bid_display: str
    bid_count: int
    state: str
    end_date: datetime | None
    bidder_anonymous: bool
    is_editable_by_admin: bool
    discussions_enabled: bool
    is_published: bool
    image_url: str | None
    anti_snipe_enabled: bool
    anti_snipe_threshold_seconds: int
    anti_snipe_extension_seconds: int
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_domain(cls, item: Item, now: datetime | None = None) -> "ItemResponse":
        return cls(
            id=item.id,
            auction_id=item.auction_id,
            creator_id=item.creator_id,
            name=item.name,
            description=item.description,
            currency_code=item.currency_code,
            starting_bid=item.starting_bid,
            min_bid_increment=item.min_bid_increment,
            current_bid=item.current_bid,
            current_bid_display=(
                format_amount(item.current_bid, item.currency_code)
                if item.current_bid is not None
                else None
            ),
            highest_bidder_id=item.highest_bidder_id,
            min_bid=item.min_bid,
            min_bid_display=format_amount(item.min_bid, item.currency_code),
            bid_count=item.bid_count,
            state=item.state(now or utc_now()).value,
            end_date=item.end_date,
            bidder_anonymous=item.bidder_anonymous,
            is_editable_by_admin=item.is_editable_by_admin,
            discussions_enabled=item.discussions_enabled,
            is_published=item.is_published,
            image_url=item.image_url,
            anti_snipe_enabled=item.anti_snipe_enabled,
            anti_snipe_threshold_seconds=item.anti_snipe_threshold_seconds,
            anti_snipe_extension_seconds=item.anti_snipe_extension_seconds,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )


class ItemListResponse(BaseModel):
    items: list[ItemResponse]
