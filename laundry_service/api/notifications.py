from fastapi import APIRouter, Depends, Query

from laundry_service.api.deps import get_current_actor, get_notification_service
from laundry_service.core.security import Actor
from laundry_service.schemas.notification import (
    NotificationListResponse,
    NotificationMarkRead,
    NotificationMarkReadResponse,
    NotificationResponse,
)
from laundry_service.services.notification import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    unread: bool = False,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service)
) -> NotificationListResponse:
    return await service.list_notifications(actor, unread, page, limit)


@router.post("/read", response_model=NotificationMarkReadResponse)
async def mark_notifications_read(
    request: NotificationMarkRead,
    actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service)
) -> NotificationMarkReadResponse:
    updated = await service.mark_read(actor, request.notification_ids, request.mark_all)
    return NotificationMarkReadResponse(updated=updated)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service)
) -> NotificationResponse:
    return await service.mark_one_read(actor, notification_id)
