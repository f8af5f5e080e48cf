"""Presence WebSocket endpoint"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect

from .hub import PresenceHub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Presence"])


def get_presence_hub(request: Request) -> PresenceHub:
    """Dependency injection for the app-wide PresenceHub"""
    return request.app.state.presence_hub


@router.websocket("/ws")
async def presence_socket(websocket: WebSocket):
    hub: PresenceHub = websocket.app.state.presence_hub
    await websocket.accept()
    user_id: Optional[int] = None

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("⚠️ Ignoring non-JSON WebSocket message")
                continue
            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "join" and message.get("userId"):
                try:
                    joined_id = int(message["userId"])
                except (TypeError, ValueError):
                    logger.warning(f"⚠️ Invalid userId in join: {message.get('userId')!r}")
                    continue
                # One socket speaks for one user at a time
                if user_id is not None and user_id != joined_id:
                    await hub.disconnect(user_id, websocket)
                user_id = joined_id
                await hub.join(user_id, websocket)
            elif message_type == "heartbeat" and user_id is not None:
                hub.heartbeat(user_id)
    except WebSocketDisconnect:
        logger.debug(f"WebSocket closed for user {user_id}")
    finally:
        if user_id is not None:
            await hub.disconnect(user_id, websocket)
