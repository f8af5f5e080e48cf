"""
Presence Hub
Tracks which staff users hold an open WebSocket and relays notifications.

One socket per user id. A user is marked offline only after their socket has
been gone for the grace period, so a quick reconnect does not flicker.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from fastapi import WebSocket
from sqlalchemy.orm import Session

from ..config import PRESENCE_OFFLINE_GRACE_SECONDS
from ..database import SessionLocal
from ..models import User
from ..services.notification_service import Notification

logger = logging.getLogger(__name__)


class PresenceHub:
    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        grace_seconds: float = PRESENCE_OFFLINE_GRACE_SECONDS,
    ):
        self.session_factory = session_factory
        self.grace_seconds = grace_seconds
        self.connections: dict[int, WebSocket] = {}
        self._offline_tasks: set[asyncio.Task] = set()

    def is_connected(self, user_id: int) -> bool:
        return user_id in self.connections

    def _update_user(self, user_id: int, is_online: Optional[bool] = None) -> None:
        db = self.session_factory()
        try:
            user = db.query(User).filter(User.id == user_id).first()
            if not user:
                logger.warning(f"⚠️ Presence update for unknown user {user_id}")
                return
            if is_online is not None:
                user.is_online = is_online
            user.last_seen = datetime.utcnow()
            db.commit()
        finally:
            db.close()

    async def join(self, user_id: int, websocket: WebSocket) -> None:
        previous = self.connections.get(user_id)
        self.connections[user_id] = websocket
        if previous is not None and previous is not websocket:
            logger.debug(f"🔁 User {user_id} replaced an older socket")

        self._update_user(user_id, is_online=True)
        await self.broadcast_presence(user_id, True)
        logger.info(f"🟢 User {user_id} connected via WebSocket")

    def heartbeat(self, user_id: int) -> None:
        self._update_user(user_id)

    async def disconnect(self, user_id: int, websocket: WebSocket) -> None:
        # A newer socket for the same user must survive the old one closing
        if self.connections.get(user_id) is websocket:
            del self.connections[user_id]

        task = asyncio.create_task(self._mark_offline_after_grace(user_id))
        self._offline_tasks.add(task)
        task.add_done_callback(self._offline_tasks.discard)

    async def _mark_offline_after_grace(self, user_id: int) -> None:
        await asyncio.sleep(self.grace_seconds)
        if user_id in self.connections:
            return
        self._update_user(user_id, is_online=False)
        await self.broadcast_presence(user_id, False)
        logger.info(f"⚪ User {user_id} marked as offline")

    async def wait_for_pending(self) -> None:
        """Let scheduled offline checks finish"""
        if self._offline_tasks:
            await asyncio.gather(*list(self._offline_tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        for task in list(self._offline_tasks):
            task.cancel()
        await self.wait_for_pending()
        self.connections.clear()

    async def send_to(self, user_id: int, message: dict) -> bool:
        websocket = self.connections.get(user_id)
        if websocket is None:
            return False
        try:
            await websocket.send_json(message)
        except (RuntimeError, ConnectionError) as e:
            # Lost messages are not retried
            logger.warning(f"⚠️ Dropping message to user {user_id}: {e}")
            if self.connections.get(user_id) is websocket:
                del self.connections[user_id]
            return False
        return True

    async def broadcast(self, message: dict) -> int:
        sent = 0
        for user_id in list(self.connections):
            if await self.send_to(user_id, message):
                sent += 1
        return sent

    async def broadcast_presence(self, user_id: int, is_online: bool) -> int:
        return await self.broadcast(
            {
                "type": "presence_update",
                "userId": user_id,
                "isOnline": is_online,
                "timestamp": datetime.utcnow().isoformat() + "Z",
            }
        )

    async def send_appointment_notification(self, notification: Notification) -> bool:
        """Deliver an assignment notice to the assignee's socket only"""
        if notification.assigned_to_id is None:
            return False
        return await self.send_to(
            notification.assigned_to_id,
            {"type": "appointment_notification", "data": notification.to_dict()},
        )

    async def broadcast_notification(self, notification: Notification) -> int:
        return await self.broadcast({"type": "notification", "data": notification.to_dict()})
