"""Closed set of domain events and their payloads.

Each ``EventName`` maps to exactly one payload dataclass (``EVENT_PAYLOADS``).
Payloads are plain data so handlers never reach back into request state.
"""

from dataclasses import dataclass
from enum import Enum


class EventName(str, Enum):
    BID_OUTBID = "bid.outbid"
    ITEM_WON = "item.won"
    ITEM_CREATED = "item.created"
    MEMBER_JOINED = "member.joined"
    INVITE_CREATED = "invite.created"


@dataclass(frozen=True)
class OutbidEvent:
    notification_id: str
    previous_bidder_id: str
    auction_id: str
    auction_name: str
    item_id: str
    item_name: str
    new_amount: int
    currency_code: str


@dataclass(frozen=True)
class ItemWonEvent:
    notification_id: str
    winner_id: str
    auction_id: str
    auction_name: str
    item_id: str
    item_name: str
    amount: int
    currency_code: str


@dataclass(frozen=True)
class NewItemEvent:
    notification_id: str
    recipient_id: str
    auction_id: str
    auction_name: str
    item_id: str
    item_name: str
    item_description: str | None


@dataclass(frozen=True)
class MemberJoinedEvent:
    notification_id: str
    owner_id: str
    auction_id: str
    auction_name: str
    member_id: str
    member_name: str


@dataclass(frozen=True)
class InviteCreatedEvent:
    invite_id: str
    email: str
    auction_id: str
    auction_name: str
    sender_name: str
    token: str
    role: str


EventPayload = OutbidEvent | ItemWonEvent | NewItemEvent | MemberJoinedEvent | InviteCreatedEvent

EVENT_PAYLOADS: dict[EventName, type] = {
    EventName.BID_OUTBID: OutbidEvent,
    EventName.ITEM_WON: ItemWonEvent,
    EventName.ITEM_CREATED: NewItemEvent,
    EventName.MEMBER_JOINED: MemberJoinedEvent,
    EventName.INVITE_CREATED: InviteCreatedEvent,
}
