from datetime import date, timedelta
from unittest.mock import AsyncMock, patch

import pytest
from conftest import auth_headers, create_client, create_user

from advisor_crm.domain.scheduling.booking_wizard import BookingFailed, BookingStep, SlotUnavailable
from advisor_crm.models import ROLE_ADVISOR, Appointment
from advisor_crm.sdk.api import CrmApiClient
from advisor_crm.sdk.booking import load_wizard, submit_booking

TODAY = date.today()
TOMORROW = TODAY + timedelta(days=1)


@pytest.fixture(autouse=True)
def _no_email():
    with patch("advisor_crm.domain.scheduling.router.send_appointment_confirmation", new=AsyncMock()):
        yield


@pytest.fixture
def sdk(api, db):
    create_user(db, "planner", ROLE_ADVISOR, password="planner123", first_name="Pat")
    client = CrmApiClient(client=api)
    client.login("planner", "planner123")
    return client


class TestBookingOverApi:
    def test_book_for_self(self, sdk, db):
        wizard = load_wizard(sdk, today=TODAY)
        wizard.select_person()
        wizard.select_date(TOMORROW)
        wizard.select_time("14:00")
        wizard.enter_details("Portfolio review", "consultation")

        created = submit_booking(sdk, wizard)

        assert wizard.step == BookingStep.CONFIRMED
        assert created["startTime"] == "14:00"
        assert created["endTime"] == "14:30"
        assert created["date"] == TOMORROW.isoformat()
        assert db.query(Appointment).count() == 1

    def test_server_appointments_block_slots(self, sdk, db):
        me = sdk.current_user()
        db.add(Appointment(title="Standup", date=TOMORROW, start_time="09:00", end_time="10:00",
                           type="meeting", user_id=me["id"]))
        db.commit()

        wizard = load_wizard(sdk, today=TODAY)
        wizard.select_person()
        wizard.select_date(TOMORROW)
        assert "09:30" not in wizard.available_slots()
        with pytest.raises(SlotUnavailable):
            wizard.select_time("09:30")

    def test_team_member_booking(self, sdk, db, users):
        wizard = load_wizard(sdk, person_id=users["advisor"].id, today=TODAY)
        wizard.select_person(users["advisor"].id)
        wizard.select_date(TOMORROW)
        wizard.select_time("11:00")
        wizard.enter_details("Handover", "meeting")

        created = submit_booking(sdk, wizard)
        assert created["assignedToId"] == users["advisor"].id

    def test_rejected_booking_keeps_details(self, sdk):
        wizard = load_wizard(sdk, today=TODAY)
        wizard.select_person()
        wizard.select_date(TOMORROW)
        wizard.select_time("10:00")
        wizard.enter_details("Review", "meeting", client_id=999)

        with pytest.raises(BookingFailed):
            submit_booking(sdk, wizard)
        assert wizard.step == BookingStep.ENTER_DETAILS
        assert wizard.error

    def test_clientless_appointments_block_slots(self, sdk, db):
        me = sdk.current_user()
        db.add(Appointment(title="Internal", date=TOMORROW, start_time="10:00", end_time="11:00",
                           type="meeting", user_id=me["id"]))
        db.commit()

        wizard = load_wizard(sdk, today=TODAY)
        wizard.select_person()
        wizard.select_date(TOMORROW)
        assert "10:00" not in wizard.available_slots()
        wizard.select_time("09:30")
        wizard.enter_details("Too long", "meeting")
        with pytest.raises(SlotUnavailable):
            submit_booking(sdk, wizard)
        assert db.query(Appointment).count() == 1

    def test_team_member_snapshot_holds_their_appointments(self, sdk, db, users):
        advisor = users["advisor"]
        db.add(Appointment(title="Advisor call", date=TOMORROW, start_time="13:00", end_time="13:30",
                           type="consultation", user_id=users["admin"].id, assigned_to_id=advisor.id))
        db.commit()

        wizard = load_wizard(sdk, person_id=advisor.id, today=TODAY)
        wizard.select_person(advisor.id)
        wizard.select_date(TOMORROW)
        assert "13:00" not in wizard.available_slots()
        assert "13:30" in wizard.available_slots()

    def test_server_rechecks_stale_snapshot(self, sdk, db):
        wizard = load_wizard(sdk, today=TODAY)
        wizard.select_person()
        wizard.select_date(TOMORROW)
        wizard.select_time("15:00")
        wizard.enter_details("Review", "meeting")

        me = sdk.current_user()
        db.add(Appointment(title="Booked meanwhile", date=TOMORROW, start_time="15:00", end_time="15:30",
                           type="consultation", user_id=me["id"]))
        db.commit()

        with pytest.raises(BookingFailed):
            submit_booking(sdk, wizard)
        assert wizard.step == BookingStep.ENTER_DETAILS
        assert db.query(Appointment).count() == 1


class TestBookedSlotsEndpoint:
    def test_lists_everything_attributed_to_the_person(self, api, db, users):
        advisor = users["advisor"]
        client = create_client(db, users["other_advisor"])
        db.add_all([
            Appointment(title="Later", date=TOMORROW, start_time="15:00", end_time="16:00",
                        type="meeting", user_id=advisor.id),
            Appointment(title="Other client's", date=TOMORROW, start_time="09:00", end_time="09:30",
                        type="consultation", user_id=users["other_advisor"].id, assigned_to_id=advisor.id,
                        client_id=client.id),
            Appointment(title="Past", date=TODAY - timedelta(days=3), start_time="09:00", end_time="10:00",
                        type="meeting", user_id=advisor.id),
            Appointment(title="Someone else", date=TOMORROW, start_time="11:00", end_time="12:00",
                        type="meeting", user_id=users["staff"].id),
        ])
        db.commit()

        response = api.get("/api/appointments/booked", headers=auth_headers(advisor))
        assert response.status_code == 200
        assert [a["title"] for a in response.json()] == ["Other client's", "Later"]
        assert response.json()[0]["assignedToId"] == advisor.id

        for_advisor = api.get(
            "/api/appointments/booked", params={"personId": advisor.id}, headers=auth_headers(users["staff"])
        )
        assert [a["title"] for a in for_advisor.json()] == ["Other client's", "Later"]

    def test_unknown_person(self, api, users):
        response = api.get("/api/appointments/booked", params={"personId": 999}, headers=auth_headers(users["staff"]))
        assert response.status_code == 404
