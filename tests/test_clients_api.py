from datetime import date, timedelta

from conftest import auth_headers, create_client

from advisor_crm.models import Appointment, CdnQuotation, Document, KanbanBoard, KanbanCard, KanbanColumn


class TestClientCrud:
    def test_create_and_read(self, api, users):
        headers = auth_headers(users["advisor"])
        response = api.post(
            "/api/clients",
            json={
                "firstName": "Emily",
                "surname": "Rodriguez",
                "email": "Emily.R@DigitalWave.com",
                "cellPhone": "+1 (555) 456-7890",
                "dutySplitAdmin": 40,
                "value": 120000,
            },
            headers=headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "emily.r@digitalwave.com"
        assert body["cellPhone"] == "+15554567890"
        assert body["status"] == "active"
        assert body["userId"] == users["advisor"].id

        fetched = api.get(f"/api/clients/{body['id']}", headers=headers)
        assert fetched.json()["surname"] == "Rodriguez"

    def test_validation(self, api, users):
        headers = auth_headers(users["admin"])
        assert api.post("/api/clients", json={"surname": "X"}, headers=headers).status_code == 422
        assert (
            api.post("/api/clients", json={"firstName": "A", "surname": "B", "email": "nope"}, headers=headers).status_code
            == 422
        )
        assert (
            api.post(
                "/api/clients", json={"firstName": "A", "surname": "B", "dutySplitTravel": 120}, headers=headers
            ).status_code
            == 422
        )
        assert (
            api.post("/api/clients", json={"firstName": "A", "surname": "B", "status": "vip"}, headers=headers).status_code
            == 422
        )

    def test_duplicate_email(self, api, db, users):
        create_client(db, users["admin"], email="taken@example.com")
        response = api.post(
            "/api/clients",
            json={"firstName": "A", "surname": "B", "email": "taken@example.com"},
            headers=auth_headers(users["admin"]),
        )
        assert response.status_code == 400

    def test_update_only_changes_sent_fields(self, api, db, users):
        client = create_client(db, users["admin"], email="keep@example.com", value=10)
        response = api.put(
            f"/api/clients/{client.id}",
            json={"status": "prospect", "firstName": None},
            headers=auth_headers(users["admin"]),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "prospect"
        assert body["firstName"] == "Sarah"
        assert body["email"] == "keep@example.com"
        assert body["value"] == 10


class TestVisibility:
    def test_advisor_sees_only_own_clients(self, api, db, users):
        mine = create_client(db, users["advisor"], email="a@example.com")
        theirs = create_client(db, users["other_advisor"], email="b@example.com")
        headers = auth_headers(users["advisor"])

        assert [c["id"] for c in api.get("/api/clients", headers=headers).json()] == [mine.id]
        assert api.get(f"/api/clients/{theirs.id}", headers=headers).status_code == 404
        assert api.put(f"/api/clients/{theirs.id}", json={"value": 1}, headers=headers).status_code == 404
        assert api.delete(f"/api/clients/{theirs.id}", headers=headers).status_code == 404

    def test_admin_sees_all(self, api, db, users):
        create_client(db, users["advisor"], email="a@example.com")
        create_client(db, users["other_advisor"], email="b@example.com")
        assert len(api.get("/api/clients", headers=auth_headers(users["admin"])).json()) == 2


class TestDeletion:
    def test_delete_removes_dependents(self, api, db, users):
        client = create_client(db, users["admin"])
        board = KanbanBoard(name="Pipeline", user_id=users["admin"].id)
        column = KanbanColumn(name="Todo", board=board)
        db.add_all(
            [
                board,
                column,
                KanbanCard(title="Follow up", column=column, client_id=client.id),
                Appointment(
                    title="Call", date=date.today(), start_time="10:00", end_time="10:30",
                    type="consultation", client_id=client.id,
                ),
                Document(name="x.pdf", original_name="x.pdf", size=1, type="application/pdf", client_id=client.id),
                CdnQuotation(client_id=client.id, investment_amount=1000, interest_rate="9.75", maturity_value=1098),
            ]
        )
        db.commit()

        assert api.delete(f"/api/clients/{client.id}", headers=auth_headers(users["admin"])).status_code == 204

        db.expire_all()
        for model in (KanbanCard, Appointment, Document, CdnQuotation):
            assert db.query(model).count() == 0
        assert db.query(KanbanColumn).count() == 1


class TestNewClientNotification:
    def test_every_active_user_is_notified_once(self, api, users):
        response = api.post(
            "/api/clients", json={"firstName": "Emily", "surname": "Rodriguez"}, headers=auth_headers(users["advisor"])
        )
        client_id = response.json()["id"]

        for user in users.values():
            feed = api.get("/api/notifications", headers=auth_headers(user)).json()
            assert feed["unreadCount"] == 1
            notification = feed["notifications"][0]
            assert notification["id"] == f"client_created_{client_id}"
            assert notification["title"] == "New Client Added"
            assert notification["body"] == "Emily Rodriguez has been added to your client list"
            assert notification["createdBy"] == "advisor"


class TestStats:
    def test_stats_are_role_filtered(self, api, db, users):
        create_client(db, users["advisor"], email="a@example.com", value=100, status="active")
        mine = create_client(db, users["advisor"], email="b@example.com", value=50, status="prospect")
        theirs = create_client(db, users["other_advisor"], email="c@example.com", value=1000, status="active")
        tomorrow = date.today() + timedelta(days=1)
        db.add_all(
            [
                Appointment(title="Soon", date=tomorrow, start_time="10:00", end_time="10:30",
                            type="consultation", client_id=mine.id),
                Appointment(title="Today", date=date.today(), start_time="10:00", end_time="10:30",
                            type="consultation", client_id=mine.id),
                Appointment(title="Done", date=tomorrow, start_time="11:00", end_time="11:30",
                            type="consultation", client_id=mine.id, status="cancelled"),
                Appointment(title="Theirs", date=tomorrow, start_time="10:00", end_time="10:30",
                            type="consultation", client_id=theirs.id),
            ]
        )
        db.commit()

        advisor_stats = api.get("/api/stats", headers=auth_headers(users["advisor"])).json()
        assert advisor_stats == {"totalClients": 2, "activeProjects": 1, "upcomingMeetings": 1, "revenue": 150}

        admin_stats = api.get("/api/stats", headers=auth_headers(users["admin"])).json()
        assert admin_stats == {"totalClients": 3, "activeProjects": 2, "upcomingMeetings": 2, "revenue": 1150}
