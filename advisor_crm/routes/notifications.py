"""In-app notification feed for the signed-in user"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from ..auth import get_current_user
from ..models import User
from ..services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def get_notification_service(request: Request) -> NotificationService:
    """Dependency injection for the app-wide NotificationService"""
    return request.app.state.notifications


@router.get("")
async def get_notifications(
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    feed = notifications.feed_for(current_user.id)
    return {
        "notifications": [n.to_dict() for n in feed.items()],
        "unreadCount": feed.unread_count,
    }


@router.post("/read-all")
async def mark_all_notifications_read(
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    changed = notifications.feed_for(current_user.id).mark_all_read()
    return {"message": "All notifications marked as read", "updated": changed}


@router.post("/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    if not notifications.feed_for(current_user.id).mark_read(notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"message": "Notification marked as read"}


@router.delete("")
async def clear_notifications(
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    notifications.feed_for(current_user.id).clear()
    logger.info(f"🧹 Cleared notifications for user {current_user.id}")
    return {"message": "Notifications cleared"}
