"""
Presence client

Keeps a WebSocket open to the CRM's /ws endpoint: joins as a user, sends a
heartbeat every 30 seconds, reconnects 3 seconds after any drop (forever),
tracks who is online and feeds incoming notifications into an injected
NotificationFeed.
"""

import asyncio
import json
import logging
from typing import Callable, Optional

import aiohttp

from ..services.notification_service import Notification, NotificationFeed

logger = logging.getLogger(__name__)

RECONNECT_DELAY_SECONDS = 3.0
HEARTBEAT_INTERVAL_SECONDS = 30.0


class PresenceClient:
    def __init__(
        self,
        url: str,
        user_id: int,
        feed: NotificationFeed,
        reconnect_delay: float = RECONNECT_DELAY_SECONDS,
        heartbeat_interval: float = HEARTBEAT_INTERVAL_SECONDS,
        on_presence: Optional[Callable[[int, bool], None]] = None,
    ):
        self.url = url
        self.user_id = user_id
        self.feed = feed
        self.reconnect_delay = reconnect_delay
        self.heartbeat_interval = heartbeat_interval
        self.on_presence = on_presence
        self.online: dict[int, bool] = {}
        self.connections = 0
        self._stopping = asyncio.Event()
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None

    def handle_message(self, message: dict) -> None:
        message_type = message.get("type")

        if message_type == "presence_update":
            user_id = message.get("userId")
            if user_id is None:
                return
            self.online[user_id] = bool(message.get("isOnline"))
            if self.on_presence:
                self.on_presence(user_id, self.online[user_id])

        elif message_type == "appointment_notification":
            data = message.get("data") or {}
            # Only the assignee keeps an assignment notice
            if data.get("assignedToId") != self.user_id:
                return
            key = f"appointment_{data.get('appointmentId')}" if data.get("appointmentId") else None
            self.feed.add(Notification.from_dict(data), key=key)

        elif message_type == "notification" and message.get("data"):
            self.feed.add(Notification.from_dict(message["data"]))

    async def _heartbeat(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        while not ws.closed:
            await asyncio.sleep(self.heartbeat_interval)
            if not ws.closed:
                await ws.send_json({"type": "heartbeat"})

    async def _session(self, session: aiohttp.ClientSession) -> None:
        async with session.ws_connect(self.url) as ws:
            self._ws = ws
            self.connections += 1
            logger.info(f"🟢 Presence socket connected as user {self.user_id}")
            await ws.send_json({"type": "join", "userId": self.user_id})

            heartbeat = asyncio.create_task(self._heartbeat(ws))
            try:
                async for msg in ws:
                    if msg.type == aiohttp.WSMsgType.TEXT:
                        try:
                            self.handle_message(json.loads(msg.data))
                        except json.JSONDecodeError:
                            logger.warning("⚠️ Ignoring non-JSON presence message")
                    elif msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.ERROR):
                        break
            finally:
                heartbeat.cancel()
                self._ws = None

    async def run(self) -> None:
        """Connect and stay connected until stop() is called"""
        async with aiohttp.ClientSession() as session:
            while not self._stopping.is_set():
                try:
                    await self._session(session)
                except (aiohttp.ClientError, OSError) as e:
                    logger.warning(f"⚠️ Presence socket error: {e}")
                if self._stopping.is_set():
                    break
                logger.info(f"🔁 Reconnecting presence socket in {self.reconnect_delay}s")
                try:
                    await asyncio.wait_for(self._stopping.wait(), timeout=self.reconnect_delay)
                except asyncio.TimeoutError:
                    pass

    async def stop(self) -> None:
        self._stopping.set()
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
