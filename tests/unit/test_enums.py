"""Enum values must match the DB CHECK constraints."""

from src.au_common.enums import (
    ADMIN_ROLES,
    ITEM_CREATOR_ROLES,
    BidderVisibility,
    EmailKind,
    ItemEndMode,
    JoinMode,
    MemberRole,
    NotificationType,
)


def test_member_roles() -> None:
    assert {r.value for r in MemberRole} == {"OWNER", "ADMIN", "CREATOR", "BIDDER"}


def test_role_groups() -> None:
    assert ADMIN_ROLES == {MemberRole.OWNER, MemberRole.ADMIN}
    assert MemberRole.CREATOR in ITEM_CREATOR_ROLES
    assert MemberRole.BIDDER not in ITEM_CREATOR_ROLES


def test_auction_settings() -> None:
    assert {m.value for m in JoinMode} == {"INVITE_ONLY", "LINK", "FREE"}
    assert {v.value for v in BidderVisibility} == {"VISIBLE", "ANONYMOUS", "PER_BID"}
    assert {m.value for m in ItemEndMode} == {"AUCTION_END", "CUSTOM", "NONE"}


def test_notification_and_email_kinds() -> None:
    assert {t.value for t in NotificationType} == {
        "OUTBID", "AUCTION_WON", "MEMBER_JOINED", "NEW_ITEM",
    }
    assert {k.value for k in EmailKind} == {"INVITE", "OUTBID", "ITEM_WON", "NEW_ITEM"}


def test_str_enum_compares_to_value() -> None:
    assert MemberRole.OWNER == "OWNER"
