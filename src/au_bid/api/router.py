"""au_bid REST API: place and list bids on an item, and the caller's bid history."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_bid.application.schemas import (
    BidListResponse,
    BidResponse,
    BidViewResponse,
    PlaceBidRequest,
    UserBidHistoryResponse,
)
from src.au_common.database import get_db_session
from src.au_common.response import ApiResponse, success_response
from src.au_gateway.auth.dependencies import get_current_user
from src.au_gateway.user.db_models import UserModel
from src.bootstrap import Services, get_services

router = APIRouter(tags=["bids"])


@router.post("/auctions/{auction_id}/items/{item_id}/bids", status_code=201)
async def place_bid(
    auction_id: str,
    item_id: str,
    body: PlaceBidRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    bid = await services.bids.place_bid(
        db, auction_id, item_id, current_user.id, body.amount, body.is_anonymous
    )
    return success_response(BidResponse.from_domain(bid).model_dump(mode="json"), request)


@router.get("/auctions/{auction_id}/items/{item_id}/bids")
async def list_bids(
    auction_id: str,
    item_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    views = await services.bids.list_bids(db, auction_id, item_id, current_user.id)
    data = BidListResponse(items=[BidViewResponse.from_domain(v) for v in views])
    return success_response(data.model_dump(mode="json"), request)


@router.get("/user/bids")
async def my_bids(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    entries = await services.bids.my_bids(db, current_user.id)
    data = UserBidHistoryResponse.from_domain(entries)
    return success_response(data.model_dump(mode="json"), request)
