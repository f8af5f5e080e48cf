from datetime import date, timedelta

from conftest import auth_headers, create_client, create_user

from advisor_crm.models import (
    ROLE_USER,
    Appointment,
    CdnQuotation,
    Client,
    KanbanBoard,
    KanbanCard,
    KanbanColumn,
    User,
)
from advisor_crm.security_utils import verify_password


class TestRegisterAndLogin:
    def test_register_returns_token_and_default_role(self, api):
        response = api.post(
            "/api/register",
            json={"username": "newbie", "password": "secret123", "email": "New@Example.com", "firstName": "Nia"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["tokenType"] == "bearer"
        assert body["user"]["role"] == ROLE_USER
        assert body["user"]["firstName"] == "Nia"

        me = api.get("/api/user", headers={"Authorization": f"Bearer {body['accessToken']}"})
        assert me.json()["username"] == "newbie"

    def test_duplicates_are_rejected(self, api, users):
        taken_name = api.post("/api/register", json={"username": "advisor", "password": "secret123", "email": "x@example.com"})
        assert taken_name.status_code == 400
        assert taken_name.json()["detail"] == "Username already exists"

        taken_email = api.post(
            "/api/register", json={"username": "fresh", "password": "secret123", "email": "ADVISOR@example.com"}
        )
        assert taken_email.status_code == 400
        assert taken_email.json()["detail"] == "Email already registered"

    def test_register_validation(self, api):
        assert api.post("/api/register", json={"username": "u", "password": "123", "email": "u@example.com"}).status_code == 422
        assert api.post("/api/register", json={"username": "u", "password": "secret123", "email": "nope"}).status_code == 422

    def test_login_with_username_or_email(self, api, users):
        by_name = api.post("/api/login", json={"username": "advisor", "password": "secret123"})
        assert by_name.status_code == 200
        assert by_name.json()["user"]["id"] == users["advisor"].id

        by_email = api.post("/api/login", json={"username": "Advisor@Example.com", "password": "secret123"})
        assert by_email.status_code == 200

    def test_bad_credentials(self, api, users):
        assert api.post("/api/login", json={"username": "advisor", "password": "wrong"}).status_code == 401
        assert api.post("/api/login", json={"username": "ghost", "password": "secret123"}).status_code == 401

    def test_inactive_account(self, api, db):
        create_user(db, "retired", is_active=False)
        assert api.post("/api/login", json={"username": "retired", "password": "secret123"}).status_code == 403

    def test_protected_routes_need_a_token(self, api):
        assert api.get("/api/user").status_code in (401, 403)
        assert api.get("/api/user", headers={"Authorization": "Bearer garbage"}).status_code == 401


class TestUsers:
    def test_team_members_are_active_users(self, api, db, users):
        create_user(db, "retired", is_active=False)
        members = api.get("/api/team-members", headers=auth_headers(users["staff"])).json()
        usernames = {m["username"] for m in members}
        assert "retired" not in usernames
        assert {"admin", "advisor", "staff"} <= usernames
        assert all("password" not in m for m in members)

    def test_super_admin_updates_user(self, api, db, users):
        target = users["staff"]
        response = api.put(
            f"/api/users/{target.id}",
            json={"firstName": "Samuel", "role": "advisor", "password": ""},
            headers=auth_headers(users["super_admin"]),
        )
        assert response.status_code == 200
        assert response.json()["firstName"] == "Samuel"
        assert response.json()["role"] == "advisor"

        db.expire_all()
        assert verify_password("secret123", db.get(User, target.id).password)

    def test_update_changes_password(self, api, db, users):
        target = users["staff"]
        api.put(f"/api/users/{target.id}", json={"password": "brandnew1"}, headers=auth_headers(users["super_admin"]))
        db.expire_all()
        assert verify_password("brandnew1", db.get(User, target.id).password)

    def test_update_rejects_taken_username(self, api, users):
        response = api.put(
            f"/api/users/{users['staff'].id}", json={"username": "advisor"}, headers=auth_headers(users["super_admin"])
        )
        assert response.status_code == 400

    def test_only_super_admin_edits_users(self, api, users):
        response = api.put(f"/api/users/{users['staff'].id}", json={"firstName": "X"}, headers=auth_headers(users["admin"]))
        assert response.status_code == 403
        response = api.delete(f"/api/users/{users['staff'].id}", headers=auth_headers(users["admin"]))
        assert response.status_code == 403

    def test_cannot_delete_yourself(self, api, users):
        me = users["super_admin"]
        assert api.delete(f"/api/users/{me.id}", headers=auth_headers(me)).status_code == 400
        assert api.delete("/api/users/999", headers=auth_headers(me)).status_code == 404

    def test_delete_removes_user_data(self, api, db, users):
        doomed, survivor = users["advisor"], users["other_advisor"]
        client = create_client(db, doomed)
        board = KanbanBoard(name="Doomed board", user_id=doomed.id)
        db.add(board)
        db.flush()
        column = KanbanColumn(name="Todo", board_id=board.id, position=0)
        db.add(column)
        db.flush()
        db.add(KanbanCard(title="Card", column_id=column.id, position=0, client_id=client.id))
        tomorrow = date.today() + timedelta(days=1)
        own = Appointment(title="Own", date=tomorrow, start_time="10:00", end_time="11:00", type="meeting", user_id=doomed.id)
        assigned = Appointment(
            title="Assigned", date=tomorrow, start_time="12:00", end_time="13:00", type="meeting",
            user_id=survivor.id, assigned_to_id=doomed.id,
        )
        quotation = CdnQuotation(investment_amount=1000, interest_rate="5", maturity_value=1050, user_id=doomed.id)
        db.add_all([own, assigned, quotation])
        db.commit()
        doomed_id, assigned_id, quotation_id = doomed.id, assigned.id, quotation.id

        response = api.delete(f"/api/users/{doomed_id}", headers=auth_headers(users["super_admin"]))
        assert response.status_code == 204

        db.expire_all()
        assert db.get(User, doomed_id) is None
        assert db.query(Client).count() == 0
        assert db.query(KanbanBoard).count() == 0
        assert db.query(KanbanCard).count() == 0
        assert db.query(Appointment).filter(Appointment.title == "Own").count() == 0
        assert db.get(Appointment, assigned_id).assigned_to_id is None
        assert db.get(CdnQuotation, quotation_id).user_id is None
