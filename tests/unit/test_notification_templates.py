"""Unit tests for notification titles and messages."""

from src.au_common.enums import NotificationType
from src.au_notification.domain.models import NotificationContext
from src.au_notification.domain.templates import render


def _ctx(**kwargs) -> NotificationContext:
    defaults = dict(auction_id="A1", auction_name="Spring Gala", item_id="I1", item_name="Guitar")
    defaults.update(kwargs)
    return NotificationContext(**defaults)


def test_outbid() -> None:
    title, message = render(NotificationType.OUTBID, _ctx(amount=11000, currency_code="USD"))
    assert title == "You've been outbid!"
    assert message == 'Someone placed a higher bid of $110.00 on "Guitar"'


def test_auction_won() -> None:
    title, message = render(NotificationType.AUCTION_WON, _ctx(amount=250, currency_code="EUR"))
    assert title == "Congratulations! You won!"
    assert message == 'You won "Guitar" with a bid of €2.50'


def test_member_joined() -> None:
    title, message = render(NotificationType.MEMBER_JOINED, _ctx(member_id="u2", member_name="Alice"))
    assert title == "New member joined"
    assert message == 'Alice joined your auction "Spring Gala"'


def test_new_item_short_description() -> None:
    title, message = render(NotificationType.NEW_ITEM, _ctx(item_description="Signed by the band"))
    assert title == "Guitar"
    assert message == "Signed by the band"


def test_new_item_long_description_is_truncated() -> None:
    _, message = render(NotificationType.NEW_ITEM, _ctx(item_description="x" * 80))
    assert message == "x" * 50 + "..."


def test_new_item_without_description() -> None:
    _, message = render(NotificationType.NEW_ITEM, _ctx(item_description=None))
    assert message == "No description"
