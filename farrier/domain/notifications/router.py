"""Notification router - inbox endpoints and the live stream"""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...config import NOTIFICATION_HEARTBEAT_SECONDS
from ...database import get_db
from ...models import User
from ...services.notification_hub import NotificationHub, get_notification_hub
from ...utils.sse import STREAM_HEADERS
from .schemas import NotificationListResponse, NotificationResponse, UnreadCountResponse
from .service import NotificationService
from .stream import notification_events

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    page: int = Query(1, ge=1),
    include_read: bool = Query(True),
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return service.list_notifications(current_user, page, include_read)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return service.unread_count(current_user)


@router.get("/stream")
async def stream_notifications(
    request: Request,
    current_user: User = Depends(get_current_user),
    hub: NotificationHub = Depends(get_notification_hub),
) -> StreamingResponse:
    """Server-sent events: one event per new notification, plus heartbeats"""
    events = notification_events(
        hub,
        current_user.id,
        NOTIFICATION_HEARTBEAT_SECONDS,
        is_disconnected=request.is_disconnected,
    )
    return StreamingResponse(events, media_type="text/event-stream", headers=STREAM_HEADERS)


@router.post("/read-all")
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return service.mark_all_read(current_user)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return service.mark_read(notification_id, current_user)


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return service.delete_notification(notification_id, current_user)
