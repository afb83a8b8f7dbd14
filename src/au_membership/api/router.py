"""au_membership REST API: join, invites and member management."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_common.database import get_db_session
from src.au_common.response import ApiResponse, success_response
from src.au_gateway.auth.dependencies import get_current_user
from src.au_gateway.user.db_models import UserModel
from src.au_membership.application.schemas import (
    CreateInviteRequest,
    InviteListResponse,
    InviteResponse,
    JoinAuctionRequest,
    MemberListResponse,
    MemberResponse,
    MembershipResponse,
    UpdateMemberRequest,
)
from src.bootstrap import Services, get_services

router = APIRouter(tags=["members"])


@router.post("/auctions/{auction_id}/join", status_code=201)
async def join_auction(
    auction_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
    body: JoinAuctionRequest | None = None,
) -> ApiResponse:
    token = body.token if body else None
    membership = await services.members.join(
        db, auction_id, current_user.id, current_user.display_name, token
    )
    data = MembershipResponse.from_domain(membership)
    return success_response(data.model_dump(mode="json"), request)


@router.get("/auctions/{auction_id}/members")
async def list_members(
    auction_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    views = await services.members.list_members(db, auction_id, current_user.id)
    data = MemberListResponse(items=[MemberResponse.from_view(v) for v in views])
    return success_response(data.model_dump(mode="json"), request)


@router.patch("/auctions/{auction_id}/members/{member_id}")
async def update_member(
    auction_id: str,
    member_id: str,
    body: UpdateMemberRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    membership = await services.members.update_role(
        db, auction_id, member_id, current_user.id, body.role
    )
    data = MembershipResponse.from_domain(membership)
    return success_response(data.model_dump(mode="json"), request)


@router.delete("/auctions/{auction_id}/members/{member_id}")
async def remove_member(
    auction_id: str,
    member_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    await services.members.remove_member(db, auction_id, member_id, current_user.id)
    return success_response({"id": member_id, "removed": True}, request)


@router.post("/auctions/{auction_id}/invites", status_code=201)
async def create_invite(
    auction_id: str,
    body: CreateInviteRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    invite = await services.members.create_invite(
        db, auction_id, current_user.id, current_user.display_name, body.email, body.role
    )
    return success_response(InviteResponse.from_domain(invite).model_dump(mode="json"), request)


@router.get("/auctions/{auction_id}/invites")
async def list_invites(
    auction_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    invites = await services.members.list_invites(db, auction_id, current_user.id)
    data = InviteListResponse(items=[InviteResponse.from_domain(i) for i in invites])
    return success_response(data.model_dump(mode="json"), request)


@router.post("/invites/{token}/accept", status_code=201)
async def accept_invite(
    token: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    membership = await services.members.accept_invite(
        db, token, current_user.id, current_user.email, current_user.display_name
    )
    data = MembershipResponse.from_domain(membership)
    return success_response(data.model_dump(mode="json"), request)
