"""Notification inbox routes.

Every endpoint works on the caller's own notifications only.
"""

from fastapi import APIRouter, Query, Request, status

from resilinked.notifications import NotificationType

from ..auth import CurrentUser
from ..database import Notifications
from ..errors import APIError
from ..logging_config import get_logger
from ..models import (
    NotificationListResponse,
    NotificationMeta,
    Pagination,
    to_notification_response,
    total_pages,
)
from ..rate_limit import limiter

logger = get_logger("routes.notifications")
router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
@limiter.limit("60/minute")
async def list_notifications(
    request: Request,
    auth: CurrentUser,
    store: Notifications,
    type: NotificationType | None = Query(None),
    is_read: bool | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    """List the caller's notifications, newest first."""
    logger.info(f"GET /notifications | user={auth.user_id} | type={type} | is_read={is_read}")

    items, total, unread = store.list_for(
        auth.user_id,
        type=type.value if type else None,
        is_read=is_read,
        limit=limit,
        offset=(page - 1) * limit,
    )

    return NotificationListResponse(
        data=[to_notification_response(n) for n in items],
        meta=NotificationMeta(
            total=total,
            unread_count=unread,
            pagination=Pagination(page=page, limit=limit, total_pages=total_pages(total, limit)),
        ),
        alert=f"You have {unread} unread notifications" if unread else "No new notifications",
    )


@router.patch("/read-all")
@limiter.limit("30/minute")
async def mark_all_read(request: Request, auth: CurrentUser, store: Notifications):
    """Mark every unread notification of the caller as read."""
    logger.info(f"PATCH /notifications/read-all | user={auth.user_id}")

    count = store.mark_all_read(auth.user_id)
    return {
        "message": "All notifications marked as read",
        "updated_count": count,
        "alert": f"Marked {count} notifications as read",
    }


@router.patch("/{notification_id}/read")
@limiter.limit("60/minute")
async def mark_read(
    request: Request,
    notification_id: str,
    auth: CurrentUser,
    store: Notifications,
):
    """Mark one unread notification as read."""
    logger.info(f"PATCH /notifications/{notification_id}/read | user={auth.user_id}")

    notification = store.mark_read(notification_id, auth.user_id)
    if notification is None:
        raise APIError(
            status.HTTP_404_NOT_FOUND,
            "Notification not found or already read",
        )

    return {
        "message": "Notification marked as read",
        "notification": to_notification_response(notification).model_dump(mode="json"),
        "alert": "Notification marked as read",
    }


@router.delete("/{notification_id}")
@limiter.limit("30/minute")
async def delete_notification(
    request: Request,
    notification_id: str,
    auth: CurrentUser,
    store: Notifications,
):
    """Delete one of the caller's notifications."""
    logger.info(f"DELETE /notifications/{notification_id} | user={auth.user_id}")

    notification = store.delete(notification_id, auth.user_id)
    if notification is None:
        raise APIError(
            status.HTTP_404_NOT_FOUND,
            "Notification not found",
            "Notification not found or already deleted",
        )

    return {"message": "Notification deleted", "alert": "Notification deleted successfully"}
