"""
Notification Service
In-app notification feeds per user plus the email side channel.
A single NotificationService lives on app.state and is injected with Depends.
"""

import logging
import random
import string
import threading
import time
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from ..config import NOTIFICATION_FEED_LIMIT

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = ("appointment", "reminder", "system", "team", "client", "urgent")


def _new_notification_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{int(time.time() * 1000)}-{suffix}"


@dataclass
class Notification:
    title: str
    body: str
    type: str = "system"
    url: Optional[str] = None
    require_push: bool = False
    created_by: Optional[str] = None
    appointment_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    id: str = field(default_factory=_new_notification_id)
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))
    read: bool = False

    @property
    def wants_push(self) -> bool:
        """Urgent and appointment notifications ask the browser to keep them on screen"""
        return self.require_push or self.type in ("appointment", "urgent")

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "type": self.type,
            "url": self.url,
            "timestamp": self.timestamp,
            "read": self.read,
            "requirePush": self.wants_push,
            "createdBy": self.created_by,
        }
        if self.appointment_id is not None:
            data["appointmentId"] = self.appointment_id
        if self.assigned_to_id is not None:
            data["assignedToId"] = self.assigned_to_id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Notification":
        kwargs = {
            "title": data.get("title", ""),
            "body": data.get("body", ""),
            "type": data.get("type", "system"),
            "url": data.get("url"),
            "require_push": bool(data.get("requirePush", False)),
            "created_by": data.get("createdBy"),
            "appointment_id": data.get("appointmentId"),
            "assigned_to_id": data.get("assignedToId"),
            "read": bool(data.get("read", False)),
        }
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        if data.get("timestamp"):
            kwargs["timestamp"] = int(data["timestamp"])
        return cls(**kwargs)


class NotificationFeed:
    """Bounded newest-first list of notifications for one user"""

    def __init__(self, limit: int = NOTIFICATION_FEED_LIMIT):
        self.limit = limit
        self._items: list[Notification] = []
        self._shown: set[str] = set()
        self._lock = threading.Lock()

    def add(self, notification: Notification, key: Optional[str] = None) -> bool:
        """
        Prepend a notification.

        `key` identifies the event that produced it; an event that was already
        shown (or a notification id already present) is ignored.
        Returns True when the feed changed.
        """
        dedupe_key = key or notification.id
        with self._lock:
            if dedupe_key in self._shown:
                return False
            self._shown.add(dedupe_key)
            self._items.insert(0, notification)
            del self._items[self.limit :]
        return True

    def mark_read(self, notification_id: str) -> bool:
        with self._lock:
            for item in self._items:
                if item.id == notification_id:
                    item.read = True
                    return True
        return False

    def mark_all_read(self) -> int:
        with self._lock:
            changed = 0
            for item in self._items:
                if not item.read:
                    item.read = True
                    changed += 1
        return changed

    def clear(self) -> None:
        """Drop every notification and forget which events were shown"""
        with self._lock:
            self._items.clear()
            self._shown.clear()

    @property
    def unread_count(self) -> int:
        return sum(1 for item in self._items if not item.read)

    def items(self) -> list[Notification]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        return len(self._items)


class NotificationService:
    """Owns one NotificationFeed per user id"""

    def __init__(self, feed_limit: int = NOTIFICATION_FEED_LIMIT):
        self.feed_limit = feed_limit
        self._feeds: dict[int, NotificationFeed] = {}
        self._lock = threading.Lock()

    def feed_for(self, user_id: int) -> NotificationFeed:
        with self._lock:
            feed = self._feeds.get(user_id)
            if feed is None:
                feed = NotificationFeed(self.feed_limit)
                self._feeds[user_id] = feed
            return feed

    def notify(self, user_id: int, notification: Notification, key: Optional[str] = None) -> bool:
        added = self.feed_for(user_id).add(notification, key=key)
        if added:
            logger.debug(f"🔔 Notification {notification.id} ({notification.type}) queued for user {user_id}")
        return added

    def publish(
        self, notification: Notification, user_ids: Iterable[int], key: Optional[str] = None
    ) -> int:
        """Add the notification to several feeds; returns how many feeds changed"""
        delivered = 0
        for user_id in user_ids:
            # Each feed gets its own copy so read state stays per user
            copy = replace(notification)
            if self.notify(user_id, copy, key=key):
                delivered += 1
        logger.info(f"🔔 Published '{notification.title}' to {delivered} feed(s)")
        return delivered

    def reset(self) -> None:
        with self._lock:
            self._feeds.clear()


async def send_email_notification(
    notification_type: str,
    email_func: Callable[..., Awaitable],
    **email_kwargs,
) -> bool:
    """
    Send an email for a workflow event without letting failures reach the caller

    Returns:
        True when the email function completed
    """
    try:
        logger.info(f"📧 Sending {notification_type} email")
        await email_func(**email_kwargs)
    except Exception as e:
        logger.error(f"❌ Failed to send {notification_type} email: {e}")
        return False
    logger.info(f"✅ {notification_type} email handled")
    return True
