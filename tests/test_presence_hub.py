import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import auth_headers, create_user

from advisor_crm.models import User
from advisor_crm.realtime.hub import PresenceHub
from advisor_crm.services.notification_service import Notification


def fake_socket():
    websocket = MagicMock()
    websocket.send_json = AsyncMock()
    return websocket


def sent_messages(websocket):
    return [call.args[0] for call in websocket.send_json.await_args_list]


def online(db, user_id):
    db.expire_all()
    return db.get(User, user_id).is_online


class TestPresenceHub:
    @pytest.mark.asyncio
    async def test_join_marks_online_and_broadcasts(self, db):
        alice = create_user(db, "alice")
        bob = create_user(db, "bob")
        hub = PresenceHub(grace_seconds=0)
        alice_socket, bob_socket = fake_socket(), fake_socket()

        await hub.join(alice.id, alice_socket)
        await hub.join(bob.id, bob_socket)

        assert online(db, alice.id) and online(db, bob.id)
        updates = [m for m in sent_messages(alice_socket) if m["type"] == "presence_update"]
        assert [(m["userId"], m["isOnline"]) for m in updates] == [(alice.id, True), (bob.id, True)]

    @pytest.mark.asyncio
    async def test_offline_after_grace_period(self, db):
        alice = create_user(db, "alice")
        bob = create_user(db, "bob")
        hub = PresenceHub(grace_seconds=0)
        alice_socket, bob_socket = fake_socket(), fake_socket()
        await hub.join(alice.id, alice_socket)
        await hub.join(bob.id, bob_socket)

        await hub.disconnect(alice.id, alice_socket)
        await hub.wait_for_pending()

        assert not online(db, alice.id)
        assert sent_messages(bob_socket)[-1]["userId"] == alice.id
        assert sent_messages(bob_socket)[-1]["isOnline"] is False

    @pytest.mark.asyncio
    async def test_quick_reconnect_stays_online(self, db):
        alice = create_user(db, "alice")
        hub = PresenceHub(grace_seconds=0.05)
        first, second = fake_socket(), fake_socket()
        await hub.join(alice.id, first)

        await hub.disconnect(alice.id, first)
        await hub.join(alice.id, second)
        await hub.wait_for_pending()

        assert hub.is_connected(alice.id)
        assert online(db, alice.id)

    @pytest.mark.asyncio
    async def test_old_socket_closing_keeps_new_one(self, db):
        alice = create_user(db, "alice")
        hub = PresenceHub(grace_seconds=0)
        old, new = fake_socket(), fake_socket()
        await hub.join(alice.id, old)
        await hub.join(alice.id, new)

        await hub.disconnect(alice.id, old)
        await hub.wait_for_pending()

        assert hub.connections[alice.id] is new
        assert online(db, alice.id)

    @pytest.mark.asyncio
    async def test_broken_socket_is_dropped(self, db):
        alice = create_user(db, "alice")
        hub = PresenceHub(grace_seconds=0)
        broken = fake_socket()
        await hub.join(alice.id, broken)
        broken.send_json.side_effect = RuntimeError("closed")

        assert await hub.broadcast({"type": "ping"}) == 0
        assert not hub.is_connected(alice.id)

    @pytest.mark.asyncio
    async def test_appointment_notification_goes_to_assignee_only(self, db):
        alice = create_user(db, "alice")
        bob = create_user(db, "bob")
        hub = PresenceHub(grace_seconds=0)
        alice_socket, bob_socket = fake_socket(), fake_socket()
        await hub.join(alice.id, alice_socket)
        await hub.join(bob.id, bob_socket)
        alice_socket.send_json.reset_mock()
        bob_socket.send_json.reset_mock()

        notice = Notification("New appointment", "Review", type="appointment", appointment_id=4, assigned_to_id=bob.id)
        assert await hub.send_appointment_notification(notice)

        assert sent_messages(alice_socket) == []
        (message,) = sent_messages(bob_socket)
        assert message["type"] == "appointment_notification"
        assert message["data"]["appointmentId"] == 4

        assert not await hub.send_appointment_notification(Notification("x", "y"))

    @pytest.mark.asyncio
    async def test_broadcast_notification(self, db):
        hub = PresenceHub(grace_seconds=0)
        sockets = {create_user(db, name).id: fake_socket() for name in ("alice", "bob")}
        for user_id, websocket in sockets.items():
            await hub.join(user_id, websocket)

        assert await hub.broadcast_notification(Notification("Heads up", "")) == 2

    @pytest.mark.asyncio
    async def test_shutdown_cancels_pending_offline_checks(self, db):
        alice = create_user(db, "alice")
        hub = PresenceHub(grace_seconds=60)
        websocket = fake_socket()
        await hub.join(alice.id, websocket)
        await hub.disconnect(alice.id, websocket)

        await asyncio.wait_for(hub.shutdown(), timeout=1)
        assert hub.connections == {}


class TestPresenceSocket:
    def test_join_over_websocket(self, api, db, users):
        advisor, staff = users["advisor"], users["staff"]
        with api.websocket_connect("/ws") as first:
            first.send_json({"type": "join", "userId": advisor.id})
            joined = first.receive_json()
            assert joined["type"] == "presence_update"
            assert (joined["userId"], joined["isOnline"]) == (advisor.id, True)
            assert online(db, advisor.id)
            with api.websocket_connect("/ws") as second:
                second.send_json({"type": "join", "userId": staff.id})
                update = first.receive_json()
                assert update["userId"] == staff.id
                assert update["isOnline"] is True

    def test_rejoin_as_someone_else_releases_the_first_user(self, api, users):
        advisor, staff = users["advisor"], users["staff"]
        hub = api.app.state.presence_hub
        with api.websocket_connect("/ws") as socket:
            socket.send_json({"type": "join", "userId": advisor.id})
            assert socket.receive_json()["userId"] == advisor.id

            socket.send_json({"type": "join", "userId": staff.id})
            seen = [socket.receive_json()]
            if (seen[-1]["userId"], seen[-1]["isOnline"]) != (staff.id, True):
                seen.append(socket.receive_json())
            assert (seen[-1]["userId"], seen[-1]["isOnline"]) == (staff.id, True)

            assert advisor.id not in hub.connections
            assert staff.id in hub.connections

    def test_presence_endpoint_lists_online_first(self, api, db, users):
        users["staff"].is_online = True
        db.commit()
        listed = api.get("/api/users/presence", headers=auth_headers(users["admin"])).json()
        assert listed[0]["id"] == users["staff"].id
        assert listed[0]["isOnline"] is True
