from datetime import datetime

from pydantic import BaseModel, EmailStr

from src.au_common.enums import MemberRole
from src.au_membership.domain.models import Invite, Membership, MemberView


class JoinAuctionRequest(BaseModel):
    token: str | None = None


class CreateInviteRequest(BaseModel):
    email: EmailStr
    role: MemberRole = MemberRole.BIDDER


class UpdateMemberRequest(BaseModel):
    role: MemberRole


class MembershipResponse(BaseModel):
    id: str
    auction_id: str
    user_id: str
    role: MemberRole
    invited_by_id: str | None
    joined_at: datetime | None

    @classmethod
    def from_domain(cls, m: Membership) -> "MembershipResponse":
        return cls(
            id=m.id,
            auction_id=m.auction_id,
            user_id=m.user_id,
            role=m.role,
            invited_by_id=m.invited_by_id,
            joined_at=m.joined_at,
        )


class MemberResponse(MembershipResponse):
    email: str
    name: str | None

    @classmethod
    def from_view(cls, view: MemberView) -> "MemberResponse":
        m = view.membership
        return cls(
            id=m.id,
            auction_id=m.auction_id,
            user_id=m.user_id,
            role=m.role,
            invited_by_id=m.invited_by_id,
            joined_at=m.joined_at,
            email=view.email,
            name=view.name,
        )


class MemberListResponse(BaseModel):
    items: list[MemberResponse]


class InviteResponse(BaseModel):
    id: str
    auction_id: str
    email: str
    role: MemberRole
    token: str
    expires_at: datetime | None
    used_at: datetime | None
    created_at: datetime | None

    @classmethod
    def from_domain(cls, invite: Invite) -> "InviteResponse":
        return cls(
            id=invite.id,
            auction_id=invite.auction_id,
            email=invite.email,
            role=invite.role,
            token=invite.token,
            expires_at=invite.expires_at,
            used_at=invite.used_at,
            created_at=invite.created_at,
        )


class InviteListResponse(BaseModel):
    items: list[InviteResponse]
