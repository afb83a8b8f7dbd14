"""Title and message text for each notification type."""

from src.au_common.enums import NotificationType
from src.au_common.money import format_amount
from src.au_notification.domain.models import NotificationContext

DESCRIPTION_PREVIEW_LENGTH = 50


def _price(ctx: NotificationContext) -> str:
    return format_amount(ctx.amount or 0, ctx.currency_code or "USD")


def _preview(description: str | None) -> str:
    if not description:
        return "No description"
    if len(description) <= DESCRIPTION_PREVIEW_LENGTH:
        return description
    return description[:DESCRIPTION_PREVIEW_LENGTH] + "..."


def render(kind: NotificationType, ctx: NotificationContext) -> tuple[str, str]:
    """Return ``(title, message)``."""
    if kind == NotificationType.OUTBID:
        return (
            "You've been outbid!",
            f'Someone placed a higher bid of {_price(ctx)} on "{ctx.item_name}"',
        )
    if kind == NotificationType.AUCTION_WON:
        return (
            "Congratulations! You won!",
            f'You won "{ctx.item_name}" with a bid of {_price(ctx)}',
        )
    if kind == NotificationType.MEMBER_JOINED:
        return (
            "New member joined",
            f'{ctx.member_name} joined your auction "{ctx.auction_name}"',
        )
    if kind == NotificationType.NEW_ITEM:
        return (ctx.item_name or "New item", _preview(ctx.item_description))
    raise ValueError(f"Unsupported notification type: {kind}")
