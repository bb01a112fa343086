"""
Notification Service - user-facing notifications.

emit() is best-effort: a failure to record a notification is logged and
never propagates into the request that triggered it.
"""

import logging
from typing import List, Optional

from fastapi import Depends

from career_api.core.exceptions import NotFound
from career_api.db.mongodb import COLLECTIONS
from career_api.services.document_store import DocumentStore, get_document_store

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = {"info", "success", "warning", "error"}


class NotificationService:

    def __init__(self, store: DocumentStore):
        self.store = store
        self.collection = COLLECTIONS["notifications"]

    def emit(
        self,
        user_id: str,
        title: str,
        message: str,
        notification_type: str = "info",
        action_url: Optional[str] = None
    ) -> bool:
        """Record a notification. Returns False (and logs) on failure."""
        if notification_type not in NOTIFICATION_TYPES:
            notification_type = "info"
        try:
            self.store.insert(self.collection, {
                "user_id": user_id,
                "title": title,
                "message": message,
                "type": notification_type,
                "action_url": action_url,
                "read": False
            })
            return True
        except Exception:
            logger.exception("Failed to create notification %r for user %s", title, user_id)
            return False

    def list_for_user(self, user_id: str, unread_only: bool = False, limit: int = 50) -> List[dict]:
        filters = {"user_id": user_id}
        if unread_only:
            filters["read"] = False
        return self.store.find(self.collection, filters, sort=[("created_at", -1)], limit=limit)

    def unread_count(self, user_id: str) -> int:
        return self.store.count(self.collection, {"user_id": user_id, "read": False})

    def mark_read(self, user_id: str, notification_id: str) -> dict:
        notification = self.store.get(self.collection, notification_id)
        if not notification or notification["user_id"] != user_id:
            raise NotFound("Notification not found")
        return self.store.update(self.collection, notification_id, {"read": True})

    def mark_all_read(self, user_id: str) -> int:
        unread = self.store.find(self.collection, {"user_id": user_id, "read": False})
        for notification in unread:
            self.store.update(self.collection, notification["id"], {"read": True})
        return len(unread)


def get_notification_service(store: DocumentStore = Depends(get_document_store)) -> NotificationService:
    """FastAPI dependency - notification service over the request's store."""
    return NotificationService(store)
