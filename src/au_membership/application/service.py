"""MembershipService: joining, invites and role management.

Every mutating call re-reads the acting user's membership and asks the gate;
nothing about roles is cached between requests.
"""

import logging
import secrets
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.au_auction.domain.models import Auction
from src.au_auction.domain.repository import AuctionRepositoryProtocol
from src.au_auction.infrastructure.persistence import AuctionRepository
from src.au_common.datetime_utils import utc_now
from src.au_common.enums import JoinMode, MemberRole
from src.au_common.errors import (
    AlreadyMemberError,
    AuctionNotFoundError,
    ForbiddenError,
    InviteNotFoundError,
    MemberNotFoundError,
    ValidationError,
)
from src.au_common.id_generator import generate_id
from src.au_events.bus import EventBus
from src.au_events.events import EventName, InviteCreatedEvent
from src.au_membership.domain.gate import (
    can_invite,
    can_invite_role,
    can_manage_members,
    check_member_modifiable,
    require,
    require_member,
)
from src.au_membership.domain.models import Invite, Membership, MemberView
from src.au_membership.domain.repository import MembershipRepositoryProtocol
from src.au_membership.infrastructure.persistence import MembershipRepository
from src.au_notification.application.fanout import NotificationFanout

logger = logging.getLogger(__name__)


class MembershipService:
    def __init__(
        self,
        bus: EventBus,
        fanout: NotificationFanout,
        membership_repo: MembershipRepositoryProtocol | None = None,
        auction_repo: AuctionRepositoryProtocol | None = None,
    ) -> None:
        self._bus = bus
        self._fanout = fanout
        self._members: MembershipRepositoryProtocol = membership_repo or MembershipRepository()
        self._auctions: AuctionRepositoryProtocol = auction_repo or AuctionRepository()

    # ------------------------------------------------------------------
    # Joining
    # ------------------------------------------------------------------

    async def join(
        self,
        db: AsyncSession,
        auction_id: str,
        user_id: str,
        user_name: str,
        token: str | None = None,
    ) -> Membership:
        """Self-service join for FREE auctions, or LINK auctions with the right token."""
        try:
            auction = await self._get_auction(db, auction_id)
            if auction.join_mode == JoinMode.INVITE_ONLY:
                raise ForbiddenError("This auction is invite only", "INVITE_ONLY")
            if auction.join_mode == JoinMode.LINK and (
                not token
                or not auction.invite_token
                or not secrets.compare_digest(token, auction.invite_token)
            ):
                raise ForbiddenError("Invalid invite link", "INVALID_INVITE_LINK")

            membership = Membership(
                id=generate_id(),
                auction_id=auction_id,
                user_id=user_id,
                role=MemberRole.BIDDER,
                joined_at=utc_now(),
            )
            if not await self._members.add_member(db, membership):
                raise AlreadyMemberError(auction_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await self._announce_join(db, auction, user_id, user_name)
        return membership

    # ------------------------------------------------------------------
    # Invites
    # ------------------------------------------------------------------

    async def create_invite(
        self,
        db: AsyncSession,
        auction_id: str,
        sender_id: str,
        sender_name: str,
        email: str,
        role: MemberRole = MemberRole.BIDDER,
    ) -> Invite:
        try:
            auction = await self._get_auction(db, auction_id)
            membership = require_member(
                await self._members.get_membership(db, auction_id, sender_id), auction_id
            )
            require(can_invite(auction.policy(), membership), "invite members")
            if role == MemberRole.OWNER:
                raise ValidationError("An auction has exactly one owner", "INVALID_ROLE")
            if not can_invite_role(membership, role):
                # Members allowed to invite can only hand out the bidder role
                role = MemberRole.BIDDER

            invite = await self._members.upsert_invite(
                db,
                Invite(
                    id=generate_id(),
                    auction_id=auction_id,
                    email=email.strip().lower(),
                    role=role,
                    token=secrets.token_urlsafe(32),
                    sender_id=sender_id,
                    expires_at=utc_now() + timedelta(days=settings.INVITE_EXPIRE_DAYS),
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        self._bus.emit(
            EventName.INVITE_CREATED,
            InviteCreatedEvent(
                invite_id=invite.id,
                email=invite.email,
                auction_id=auction.id,
                auction_name=auction.name,
                sender_name=sender_name,
                token=invite.token,
                role=invite.role.value,
            ),
        )
        return invite

    async def list_invites(
        self, db: AsyncSession, auction_id: str, user_id: str
    ) -> list[Invite]:
        await self._get_auction(db, auction_id)
        membership = await self._members.get_membership(db, auction_id, user_id)
        require(can_manage_members(require_member(membership, auction_id)), "view invites")
        return await self._members.list_invites(db, auction_id)

    async def accept_invite(
        self,
        db: AsyncSession,
        token: str,
        user_id: str,
        user_email: str,
        user_name: str,
    ) -> Membership:
        try:
            now = utc_now()
            invite = await self._members.get_invite_by_token(db, token)
            if invite is None or not invite.is_usable(now):
                raise InviteNotFoundError()
            if invite.email.lower() != user_email.lower():
                raise ForbiddenError(
                    f"This invite is for {invite.email}. Please sign in with that email.",
                    "INVITE_EMAIL_MISMATCH",
                )
            auction = await self._get_auction(db, invite.auction_id)

            if not await self._members.mark_invite_used(db, invite.id, now):
                raise InviteNotFoundError()
            membership = Membership(
                id=generate_id(),
                auction_id=invite.auction_id,
                user_id=user_id,
                role=invite.role,
                invited_by_id=invite.sender_id,
                joined_at=now,
            )
            if not await self._members.add_member(db, membership):
                raise AlreadyMemberError(invite.auction_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await self._announce_join(db, auction, user_id, user_name)
        return membership

    # ------------------------------------------------------------------
    # Member management
    # ------------------------------------------------------------------

    async def list_members(
        self, db: AsyncSession, auction_id: str, user_id: str
    ) -> list[MemberView]:
        await self._get_auction(db, auction_id)
        require_member(await self._members.get_membership(db, auction_id, user_id), auction_id)
        return await self._members.list_members(db, auction_id)

    async def update_role(
        self,
        db: AsyncSession,
        auction_id: str,
        member_id: str,
        actor_id: str,
        role: MemberRole,
    ) -> Membership:
        try:
            target = await self._get_modifiable_target(db, auction_id, member_id, actor_id)
            if role == MemberRole.OWNER:
                raise ValidationError("Ownership cannot be transferred", "INVALID_ROLE")
            await self._members.update_role(db, member_id, role)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Member %s in auction %s set to %s by %s", member_id, auction_id, role.value, actor_id)
        target.role = role
        return target

    async def remove_member(
        self, db: AsyncSession, auction_id: str, member_id: str, actor_id: str
    ) -> None:
        try:
            await self._get_modifiable_target(db, auction_id, member_id, actor_id)
            await self._members.remove_member(db, member_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Member %s removed from auction %s by %s", member_id, auction_id, actor_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get_auction(self, db: AsyncSession, auction_id: str) -> Auction:
        auction = await self._auctions.get_auction(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        return auction

    async def _get_modifiable_target(
        self, db: AsyncSession, auction_id: str, member_id: str, actor_id: str
    ) -> Membership:
        await self._get_auction(db, auction_id)
        actor = require_member(
            await self._members.get_membership(db, auction_id, actor_id), auction_id
        )
        require(can_manage_members(actor), "manage members")
        target = await self._members.get_member_by_id(db, auction_id, member_id)
        if target is None:
            raise MemberNotFoundError(member_id)
        check_member_modifiable(target, actor_id)
        return target

    async def _announce_join(
        self, db: AsyncSession, auction: Auction, user_id: str, user_name: str
    ) -> None:
        if auction.creator_id == user_id:
            return
        await self._fanout.notify_member_joined(
            db, auction.creator_id, auction.id, auction.name, user_id, user_name
        )
