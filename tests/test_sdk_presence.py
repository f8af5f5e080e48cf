import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from advisor_crm.sdk.presence import PresenceClient
from advisor_crm.services.notification_service import NotificationFeed

ME = 7


def client(feed=None, **kwargs):
    return PresenceClient("ws://unused/ws", ME, feed if feed is not None else NotificationFeed(), **kwargs)


class TestHandleMessage:
    def test_presence_updates(self):
        seen = []
        presence = client(on_presence=lambda user_id, is_online: seen.append((user_id, is_online)))
        presence.handle_message({"type": "presence_update", "userId": 3, "isOnline": True})
        presence.handle_message({"type": "presence_update", "userId": 3, "isOnline": False})
        presence.handle_message({"type": "presence_update"})
        assert presence.online == {3: False}
        assert seen == [(3, True), (3, False)]

    def test_assignment_notice_only_for_assignee(self):
        feed = NotificationFeed()
        presence = client(feed)
        notice = {"title": "New appointment", "body": "", "type": "appointment", "appointmentId": 5}
        presence.handle_message({"type": "appointment_notification", "data": {**notice, "assignedToId": 8}})
        assert len(feed) == 0

        presence.handle_message({"type": "appointment_notification", "data": {**notice, "assignedToId": ME}})
        presence.handle_message({"type": "appointment_notification", "data": {**notice, "assignedToId": ME, "id": "other"}})
        assert len(feed) == 1
        assert feed.items()[0].appointment_id == 5

    def test_notifications_go_to_feed(self):
        feed = NotificationFeed()
        presence = client(feed)
        presence.handle_message({"type": "notification", "data": {"id": "n1", "title": "Hi", "body": "there"}})
        presence.handle_message({"type": "notification", "data": {"id": "n1", "title": "Hi", "body": "there"}})
        presence.handle_message({"type": "notification"})
        presence.handle_message({"type": "something_else"})
        assert [n.title for n in feed.items()] == ["Hi"]


class TestPresenceClientConnection:
    @pytest.mark.asyncio
    async def test_joins_and_reconnects_after_drop(self):
        joins = []

        async def ws_handler(request):
            ws = web.WebSocketResponse()
            await ws.prepare(request)
            joins.append(await ws.receive_json())
            await ws.send_json({"type": "notification", "data": {"id": f"n{len(joins)}", "title": "Hello", "body": ""}})
            # Drop the connection so the client has to reconnect
            await ws.close()
            return ws

        app = web.Application()
        app.router.add_get("/ws", ws_handler)
        server = TestServer(app)
        await server.start_server()
        try:
            feed = NotificationFeed()
            presence = PresenceClient(str(server.make_url("/ws")), ME, feed, reconnect_delay=0.01)
            task = asyncio.create_task(presence.run())

            async def reconnected():
                while presence.connections < 2 or len(feed) < 2:
                    await asyncio.sleep(0.01)

            await asyncio.wait_for(reconnected(), timeout=5)
            await presence.stop()
            await asyncio.wait_for(task, timeout=5)
        finally:
            await server.close()

        assert joins[:2] == [{"type": "join", "userId": ME}] * 2
        assert {n.id for n in feed.items()} >= {"n1", "n2"}

    @pytest.mark.asyncio
    async def test_heartbeats_are_sent(self):
        received = []
        done = asyncio.Event()

        async def ws_handler(request):
            ws = web.WebSocketResponse()
            await ws.prepare(request)
            async for msg in ws:
                received.append(msg.json())
                if msg.json()["type"] == "heartbeat":
                    done.set()
            return ws

        app = web.Application()
        app.router.add_get("/ws", ws_handler)
        server = TestServer(app)
        await server.start_server()
        try:
            presence = PresenceClient(str(server.make_url("/ws")), ME, NotificationFeed(), heartbeat_interval=0.01)
            task = asyncio.create_task(presence.run())
            await asyncio.wait_for(done.wait(), timeout=5)
            await presence.stop()
            await asyncio.wait_for(task, timeout=5)
        finally:
            await server.close()

        assert received[0] == {"type": "join", "userId": ME}
        assert {"type": "heartbeat"} in received
