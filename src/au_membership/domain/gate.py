"""Membership authorization gate.

Every capability question about a user inside an auction is answered here,
from an explicit (policy, membership) pair. The functions are pure: callers
load a fresh membership row per request and never cache the answer, because
roles change between requests.

``require_*`` helpers raise the matching ``Forbidden`` error so services can
guard an operation in one line.
"""

from datetime import datetime

from src.au_common.datetime_utils import is_past
from src.au_common.enums import ADMIN_ROLES, ITEM_CREATOR_ROLES, MemberRole
from src.au_common.errors import (
    InsufficientRoleError,
    MemberNotModifiableError,
    NotAMemberError,
)
from src.au_membership.domain.models import AuctionPolicy, Membership


def can_bid(
    membership: Membership | None,
    item_creator_id: str,
    item_end_date: datetime | None,
    now: datetime | None = None,
) -> bool:
    if membership is None:
        return False
    if membership.user_id == item_creator_id:
        return False
    return not is_past(item_end_date, now)


def can_edit_item(
    membership: Membership | None, item_creator_id: str, is_editable_by_admin: bool
) -> bool:
    if membership is None:
        return False
    if membership.user_id == item_creator_id:
        return True
    if membership.role == MemberRole.OWNER:
        return True
    return membership.role == MemberRole.ADMIN and is_editable_by_admin


def can_invite(policy: AuctionPolicy, membership: Membership | None) -> bool:
    if membership is None:
        return False
    return membership.role in ADMIN_ROLES or policy.member_can_invite


def can_invite_role(membership: Membership | None, role: MemberRole) -> bool:
    """Only admins hand out roles above BIDDER; nobody invites a second OWNER."""
    if membership is None or role == MemberRole.OWNER:
        return False
    return role == MemberRole.BIDDER or membership.role in ADMIN_ROLES


def can_manage_members(membership: Membership | None) -> bool:
    return membership is not None and membership.role in ADMIN_ROLES


def can_manage_auction(membership: Membership | None) -> bool:
    return membership is not None and membership.role in ADMIN_ROLES


def can_close_auction(membership: Membership | None) -> bool:
    return membership is not None and membership.role == MemberRole.OWNER


def can_delete_auction(membership: Membership | None) -> bool:
    return membership is not None and membership.role == MemberRole.OWNER


def can_create_item(membership: Membership | None) -> bool:
    return membership is not None and membership.role in ITEM_CREATOR_ROLES


def can_see_bidder_identities(membership: Membership | None, item_creator_id: str) -> bool:
    if membership is None:
        return False
    return membership.user_id == item_creator_id or membership.role in ADMIN_ROLES


def can_view_item(
    membership: Membership | None, item_creator_id: str, is_published: bool
) -> bool:
    """Drafts are visible only to their creator and the auction admins."""
    if membership is None:
        return False
    if is_published:
        return True
    return membership.user_id == item_creator_id or membership.role in ADMIN_ROLES


def can_edit_discussion(membership: Membership | None, author_id: str) -> bool:
    return membership is not None and membership.user_id == author_id


def can_delete_discussion(
    membership: Membership | None, author_id: str, item_creator_id: str
) -> bool:
    if membership is None:
        return False
    if membership.user_id in (author_id, item_creator_id):
        return True
    return membership.role in ADMIN_ROLES


def check_member_modifiable(target: Membership, actor_user_id: str) -> None:
    """Raise if ``target`` may not be demoted or removed by ``actor_user_id``."""
    if target.role == MemberRole.OWNER:
        raise MemberNotModifiableError("Cannot modify the auction owner")
    if target.user_id == actor_user_id:
        raise MemberNotModifiableError("Cannot modify your own membership")


def require_member(membership: Membership | None, auction_id: str) -> Membership:
    if membership is None:
        raise NotAMemberError(auction_id)
    return membership


def require(allowed: bool, action: str) -> None:
    if not allowed:
        raise InsufficientRoleError(action)
