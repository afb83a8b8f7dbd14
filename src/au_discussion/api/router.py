"""au_discussion REST API: threaded discussions under an auction item."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_common.database import get_db_session
from src.au_common.response import ApiResponse, success_response
from src.au_discussion.application.schemas import (
    CreateDiscussionRequest,
    DiscussionListResponse,
    DiscussionResponse,
    UpdateDiscussionRequest,
)
from src.au_discussion.domain.models import DiscussionOrder
from src.au_gateway.auth.dependencies import get_current_user
from src.au_gateway.user.db_models import UserModel
from src.bootstrap import Services, get_services

router = APIRouter(
    prefix="/auctions/{auction_id}/items/{item_id}/discussions", tags=["discussions"]
)


@router.get("")
async def list_discussions(
    auction_id: str,
    item_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
    order: DiscussionOrder = Query(DiscussionOrder.NEWEST),
) -> ApiResponse:
    board = await services.discussions.list_discussions(
        db, auction_id, item_id, current_user.id, order
    )
    data = DiscussionListResponse.from_domain(board)
    return success_response(data.model_dump(mode="json"), request)


@router.post("", status_code=201)
async def create_discussion(
    auction_id: str,
    item_id: str,
    body: CreateDiscussionRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    discussion = await services.discussions.create_discussion(
        db, auction_id, item_id, current_user.id, body.content, body.parent_id
    )
    data = DiscussionResponse.from_domain(discussion)
    return success_response(data.model_dump(mode="json"), request)


@router.patch("/{discussion_id}")
async def update_discussion(
    auction_id: str,
    item_id: str,
    discussion_id: str,
    body: UpdateDiscussionRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    discussion = await services.discussions.update_discussion(
        db, auction_id, item_id, discussion_id, current_user.id, body.content
    )
    data = DiscussionResponse.from_domain(discussion)
    return success_response(data.model_dump(mode="json"), request)


@router.delete("/{discussion_id}")
async def delete_discussion(
    auction_id: str,
    item_id: str,
    discussion_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    await services.discussions.delete_discussion(
        db, auction_id, item_id, discussion_id, current_user.id
    )
    return success_response({"id": discussion_id, "deleted": True}, request)
