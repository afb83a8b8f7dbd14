"""Subject lines and template variables for each outgoing email kind.

The external worker renders the HTML; the outbox only stores the data.
"""

from typing import Any
from urllib.parse import quote

from config.settings import settings
from src.au_common.money import format_amount


def _item_url(auction_id: str, item_id: str) -> str:
    return f"{settings.APP_URL}/auctions/{quote(auction_id)}/items/{quote(item_id)}"


def invite_email(
    auction_name: str, sender_name: str, role: str, token: str
) -> tuple[str, dict[str, Any]]:
    return (
        f'You\'re invited to "{auction_name}" on {settings.APP_NAME}',
        {
            "sender_name": sender_name,
            "auction_name": auction_name,
            "role": role,
            "invite_url": f"{settings.APP_URL}/invite/{token}",
        },
    )


def outbid_email(
    auction_id: str, auction_name: str, item_id: str, item_name: str,
    new_amount: int, currency_code: str,
) -> tuple[str, dict[str, Any]]:
    return (
        f'You\'ve been outbid on "{item_name}"',
        {
            "item_name": item_name,
            "auction_name": auction_name,
            "new_bid": format_amount(new_amount, currency_code),
            "item_url": _item_url(auction_id, item_id),
        },
    )


def item_won_email(
    auction_id: str, auction_name: str, item_id: str, item_name: str,
    amount: int, currency_code: str,
) -> tuple[str, dict[str, Any]]:
    return (
        f'Congratulations! You won "{item_name}"',
        {
            "item_name": item_name,
            "auction_name": auction_name,
            "winning_bid": format_amount(amount, currency_code),
            "item_url": _item_url(auction_id, item_id),
        },
    )


def new_item_email(
    auction_id: str, auction_name: str, item_id: str, item_name: str,
    item_description: str | None,
) -> tuple[str, dict[str, Any]]:
    return (
        f'New item in "{auction_name}": {item_name}',
        {
            "item_name": item_name,
            "item_description": item_description or "",
            "auction_name": auction_name,
            "item_url": _item_url(auction_id, item_id),
        },
    )
