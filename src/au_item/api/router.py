"""au_item REST API: items scoped under an auction."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_common.database import get_db_session
from src.au_common.datetime_utils import utc_now
from src.au_common.response import ApiResponse, success_response
from src.au_gateway.auth.dependencies import get_current_user
from src.au_gateway.user.db_models import UserModel
from src.au_item.application.schemas import (
    CreateItemRequest,
    ItemListResponse,
    ItemResponse,
    UpdateItemRequest,
)
from src.bootstrap import Services, get_services

router = APIRouter(prefix="/auctions/{auction_id}/items", tags=["items"])


@router.post("", status_code=201)
async def create_item(
    auction_id: str,
    body: CreateItemRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    item = await services.items.create_item(
        db, auction_id, current_user.id, **body.model_dump()
    )
    return success_response(ItemResponse.from_domain(item).model_dump(mode="json"), request)


@router.get("")
async def list_items(
    auction_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    items = await services.items.list_items(db, auction_id, current_user.id)
    now = utc_now()
    data = ItemListResponse(items=[ItemResponse.from_domain(i, now) for i in items])
    return success_response(data.model_dump(mode="json"), request)


@router.get("/{item_id}")
async def get_item(
    auction_id: str,
    item_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    item = await services.items.get_item(db, auction_id, item_id, current_user.id)
    return success_response(ItemResponse.from_domain(item).model_dump(mode="json"), request)


@router.patch("/{item_id}")
async def update_item(
    auction_id: str,
    item_id: str,
    body: UpdateItemRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    item = await services.items.update_item(
        db, auction_id, item_id, current_user.id, body.changes()
    )
    return success_response(ItemResponse.from_domain(item).model_dump(mode="json"), request)


@router.delete("/{item_id}")
async def delete_item(
    auction_id: str,
    item_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    await services.items.delete_item(db, auction_id, item_id, current_user.id)
    return success_response({"id": item_id, "deleted": True}, request)
