"""
Notification Routes

GET /notifications - List own notifications (newest first)
PUT /notifications/read-all - Mark all as read
PUT /notifications/{notification_id}/read - Mark one as read
"""

from fastapi import APIRouter, Depends, Query

from career_api.core.auth import get_current_user
from career_api.services.notification_service import NotificationService, get_notification_service

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("")
async def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    user: dict = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service)
):
    items = notifications.list_for_user(user["user_id"], unread_only, limit)
    return {
        "success": True,
        "notifications": items,
        "unread_count": notifications.unread_count(user["user_id"]),
    }


@router.put("/read-all")
async def mark_all_read(
    user: dict = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service)
):
    updated = notifications.mark_all_read(user["user_id"])
    return {"success": True, "message": "All notifications marked as read", "updated": updated}


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    user: dict = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service)
):
    notification = notifications.mark_read(user["user_id"], notification_id)
    return {"success": True, "notification": notification}
