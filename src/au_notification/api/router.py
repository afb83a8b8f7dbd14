"""au_notification REST API: the caller's own notifications."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_common.database import get_db_session
from src.au_common.response import ApiResponse, success_response
from src.au_gateway.auth.dependencies import get_current_user
from src.au_gateway.user.db_models import UserModel
from src.au_notification.application.schemas import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from src.bootstrap import Services, get_services

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
    unread_only: bool = Query(False, description="Only unread notifications"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    svc = services.notifications
    notifications = await svc.list_notifications(db, current_user.id, unread_only, limit)
    unread = await svc.unread_count(db, current_user.id)
    data = NotificationListResponse(
        items=[NotificationResponse.from_domain(n) for n in notifications],
        unread_count=unread,
    )
    return success_response(data.model_dump(mode="json"), request)


@router.get("/unread-count")
async def unread_count(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    count = await services.notifications.unread_count(db, current_user.id)
    return success_response(UnreadCountResponse(count=count).model_dump(), request)


@router.post("/read-all")
async def mark_all_read(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    updated = await services.notifications.mark_all_read(db, current_user.id)
    return success_response(MarkAllReadResponse(updated=updated).model_dump(), request)


@router.patch("/{notification_id}")
async def mark_read(
    notification_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    await services.notifications.mark_read(db, current_user.id, notification_id)
    return success_response({"id": notification_id, "read": True}, request)


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ApiResponse:
    await services.notifications.delete(db, current_user.id, notification_id)
    return success_response({"id": notification_id, "deleted": True}, request)
