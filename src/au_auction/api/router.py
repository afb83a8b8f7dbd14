"""au_auction REST API: auctions, close, results and the ended-item sweep."""

import secrets
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.au_auction.application.schemas import (
    AuctionListResponse,
    AuctionResponse,
    AuctionSummaryResponse,
    CloseAuctionResponse,
    CreateAuctionRequest,
    ProcessEndedItemsResponse,
    ResultsResponse,
    UpdateAuctionRequest,
    WinnerResponse,
)
from src.au_common.database import get_db_session
from src.au_common.datetime_utils import utc_now
from src.au_common.enums import MemberRole
from src.au_common.errors import UnauthorizedError
from src.au_common.response import ApiResponse, success_response
from src.au_gateway.auth.dependencies import get_current_user
from src.au_gateway.user.db_models import UserModel
from src.bootstrap import Services, get_services

router = APIRouter(prefix="/auctions", tags=["auctions"])
cron_router = APIRouter(prefix="/cron", tags=["cron"])


@router.post("", status_code=201)
async def create_auction(
    body: CreateAuctionRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    auction = await services.auctions.create_auction(db, current_user.id, **body.model_dump())
    data = AuctionResponse.from_domain(auction, MemberRole.OWNER)
    return success_response(data.model_dump(mode="json"), request)


@router.get("")
async def list_my_auctions(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    summaries = await services.auctions.list_my_auctions(db, current_user.id)
    now = utc_now()
    data = AuctionListResponse(
        items=[AuctionSummaryResponse.from_summary(s, now) for s in summaries]
    )
    return success_response(data.model_dump(mode="json"), request)


@router.get("/{auction_id}")
async def get_auction(
    auction_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    auction, membership = await services.auctions.get_auction(db, auction_id, current_user.id)
    data = AuctionResponse.from_domain(auction, membership.role)
    return success_response(data.model_dump(mode="json"), request)


@router.patch("/{auction_id}")
async def update_auction(
    auction_id: str,
    body: UpdateAuctionRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    auction = await services.auctions.update_auction(
        db, auction_id, current_user.id, body.changes()
    )
    data = AuctionResponse.from_domain(auction, MemberRole.ADMIN)
    return success_response(data.model_dump(mode="json"), request)


@router.delete("/{auction_id}")
async def delete_auction(
    auction_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    await services.auctions.delete_auction(db, auction_id, current_user.id)
    return success_response({"id": auction_id, "deleted": True}, request)


@router.post("/{auction_id}/close")
async def close_auction(
    auction_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    result = await services.auctions.close_auction(db, auction_id, current_user.id)
    data = CloseAuctionResponse(
        auction_id=result.auction.id,
        end_date=result.auction.end_date,
        already_closed=not result.closed_now,
        items_ended=result.items_ended,
        winners=[WinnerResponse.from_domain(w) for w in result.winners],
    )
    return success_response(data.model_dump(mode="json"), request)


@router.get("/{auction_id}/results")
async def get_results(
    auction_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    winners = await services.auctions.get_results(db, auction_id, current_user.id)
    data = ResultsResponse(
        auction_id=auction_id,
        winners=[WinnerResponse.from_domain(w) for w in winners],
    )
    return success_response(data.model_dump(mode="json"), request)


def verify_cron_secret(authorization: Annotated[str | None, Header()] = None) -> None:
    """Scheduler calls carry ``Authorization: Bearer <CRON_SECRET>``."""
    expected = f"Bearer {settings.CRON_SECRET}"
    if not settings.CRON_SECRET or not authorization:
        raise UnauthorizedError("Invalid cron secret")
    if not secrets.compare_digest(authorization, expected):
        raise UnauthorizedError("Invalid cron secret")


@cron_router.post("/process-ended-items", dependencies=[Depends(verify_cron_secret)])
async def process_ended_items(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    notified = await services.auctions.process_ended_items(db)
    data = ProcessEndedItemsResponse(notified=notified)
    return success_response(data.model_dump(), request)
