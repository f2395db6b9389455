"""
/api/notifications -- In-app notifications for the authenticated user.
"""

from fastapi import APIRouter, Depends, HTTPException

from lumina.auth import get_current_user
from lumina.models.schemas import Notification, SuccessResponse
from lumina.store import storage

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get("", response_model=list[Notification], summary="Your notifications, newest first")
async def list_notifications(user: dict = Depends(get_current_user)) -> list[Notification]:
    return [Notification(**n) for n in storage.get_notifications(user["id"])]


@router.patch("/{notification_id}/read", response_model=SuccessResponse, summary="Mark as read")
async def mark_read(notification_id: str, user: dict = Depends(get_current_user)) -> SuccessResponse:
    notification = storage.get_notification(notification_id)
    # someone else's notification is reported the same as a missing one
    if not notification or notification["user_id"] != user["id"]:
        raise HTTPException(status_code=404, detail="Notification not found")

    storage.mark_notification_as_read(notification_id)
    return SuccessResponse(success=True)
