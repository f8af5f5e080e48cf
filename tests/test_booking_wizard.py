from datetime import date, timedelta

import pytest

from advisor_crm.domain.scheduling.availability_service import BookedSlot
from advisor_crm.domain.scheduling.booking_wizard import (
    GENERIC_BOOKING_ERROR,
    BookingFailed,
    BookingStep,
    BookingWizard,
    DateFullyBooked,
    DateInPast,
    InvalidDetails,
    InvalidTransition,
    SlotUnavailable,
    UnknownPerson,
)
from advisor_crm.domain.scheduling.time_calculator import TIME_SLOTS

TODAY = date(2026, 3, 2)
TOMORROW = TODAY + timedelta(days=1)
ME = 1
TEAMMATE = 2


def wizard(appointments=(), team=(TEAMMATE,)):
    return BookingWizard(ME, appointments, team_member_ids=team, today=TODAY)


def at_details(w, person=None, day=TOMORROW, time="10:00"):
    w.select_person(person)
    w.select_date(day)
    w.select_time(time)
    return w


class TestHappyPath:
    def test_self_tomorrow_meeting_is_created_with_end_time(self):
        created = []
        w = at_details(wizard())
        w.enter_details("Intro call", "meeting")

        result = w.submit(lambda request: created.append(request) or {"id": 42, **request})

        assert w.step == BookingStep.CONFIRMED
        assert result["id"] == 42
        request = created[0]
        assert request["start_time"] == "10:00"
        assert request["end_time"] == "11:00"
        assert request["assigned_to_id"] is None
        assert request["user_id"] == ME
        assert request["status"] == "scheduled"

    def test_booking_for_team_member_assigns_them(self):
        w = at_details(wizard(), person=TEAMMATE)
        w.enter_details("Review", "consultation")
        assert w.build_request()["assigned_to_id"] == TEAMMATE

    def test_own_id_counts_as_self(self):
        w = wizard()
        w.select_person(ME)
        assert w.booking_for == "self"
        assert w.assigned_to_id is None


class TestGuards:
    def test_conflicting_slot_is_refused(self):
        existing = BookedSlot(TOMORROW, "10:00", "10:30", user_id=ME, title="Standup")
        w = wizard([existing])
        w.select_person()
        w.select_date(TOMORROW)

        assert "10:00" not in w.available_slots()
        with pytest.raises(SlotUnavailable, match=r"Booked: Standup \(10:00 - 10:30\)") as exc:
            w.select_time("10:00")
        assert exc.value.conflict is existing
        assert w.step == BookingStep.SELECT_TIME

    def test_teammates_appointments_only_block_teammate(self):
        existing = BookedSlot(TOMORROW, "10:00", "11:00", user_id=ME, assigned_to_id=TEAMMATE)
        mine = at_details(wizard([existing]))
        assert mine.step == BookingStep.ENTER_DETAILS

        theirs = wizard([existing])
        theirs.select_person(TEAMMATE)
        theirs.select_date(TOMORROW)
        with pytest.raises(SlotUnavailable):
            theirs.select_time("10:30")

    def test_appointment_running_into_a_booking_is_refused(self):
        existing = BookedSlot(TOMORROW, "10:30", "11:00", user_id=ME, title="Call")
        w = at_details(wizard([existing]))
        assert w.step == BookingStep.ENTER_DETAILS
        w.enter_details("Planning", "meeting")

        with pytest.raises(SlotUnavailable, match=r"Booked: Call \(10:30 - 11:00\)") as exc:
            w.submit(lambda request: {"id": 1})
        assert exc.value.conflict is existing
        assert w.step == BookingStep.ENTER_DETAILS

        w.enter_details("Quick check", "consultation")
        assert w.submit(lambda request: {"id": 1}) == {"id": 1}

    def test_unknown_team_member(self):
        with pytest.raises(UnknownPerson):
            wizard().select_person(99)

    def test_past_date_is_refused(self):
        w = wizard()
        w.select_person()
        with pytest.raises(DateInPast):
            w.select_date(TODAY - timedelta(days=1))
        assert w.available_slots(TODAY - timedelta(days=1)) == []

    def test_fully_booked_date_is_refused(self):
        full_day = BookedSlot(TOMORROW, "09:00", "18:00", user_id=ME)
        w = wizard([full_day])
        w.select_person()
        with pytest.raises(DateFullyBooked):
            w.select_date(TOMORROW)

    def test_time_outside_the_grid_is_refused(self):
        w = wizard()
        w.select_person()
        w.select_date(TOMORROW)
        with pytest.raises(SlotUnavailable):
            w.select_time("10:15")

    def test_title_and_type_are_required(self):
        w = at_details(wizard())
        w.enter_details("   ", "meeting")
        with pytest.raises(InvalidDetails):
            w.build_request()
        w.enter_details("Call", "lunch")
        with pytest.raises(InvalidDetails):
            w.build_request()

    def test_steps_cannot_be_skipped(self):
        w = wizard()
        with pytest.raises(InvalidTransition):
            w.select_date(TOMORROW)
        with pytest.raises(InvalidTransition):
            w.select_time("10:00")


class TestNavigation:
    def test_back_returns_to_previous_step(self):
        w = at_details(wizard())
        w.back()
        assert w.step == BookingStep.SELECT_TIME
        w.back()
        assert w.step == BookingStep.SELECT_DATE
        w.back()
        assert w.step == BookingStep.SELECT_PERSON
        with pytest.raises(InvalidTransition):
            w.back()

    def test_selecting_a_new_date_clears_the_time(self):
        w = at_details(wizard())
        w.back()
        w.back()
        w.select_date(TOMORROW + timedelta(days=1))
        assert w.selected_time is None

    def test_confirmed_offers_reset_or_close_only(self):
        w = at_details(wizard())
        w.enter_details("Call", "demo")
        w.submit(lambda request: {"id": 1})

        with pytest.raises(InvalidTransition):
            w.back()
        w.reset()
        assert w.step == BookingStep.SELECT_PERSON
        assert w.selected_date is None and w.title == ""

        w.close()
        with pytest.raises(InvalidTransition):
            w.select_person()

    def test_booked_slot_is_remembered_after_submit(self):
        w = at_details(wizard())
        w.enter_details("Call", "meeting")
        w.submit(lambda request: {"id": 5})
        w.reset()
        w.select_person()
        w.select_date(TOMORROW)
        assert "10:00" not in w.available_slots()
        assert "10:30" not in w.available_slots()
        assert "11:00" in w.available_slots()


class TestFailure:
    def test_failed_create_keeps_details_step_with_generic_error(self):
        w = at_details(wizard())
        w.enter_details("Call", "meeting")

        def broken(request):
            raise ConnectionError("database unavailable")

        with pytest.raises(BookingFailed) as exc:
            w.submit(broken)

        assert isinstance(exc.value.__cause__, ConnectionError)
        assert w.step == BookingStep.ENTER_DETAILS
        assert w.error == GENERIC_BOOKING_ERROR
        assert w.appointments == []

    def test_wizard_bookings_never_overlap(self):
        w = wizard()
        booked = []
        for _ in range(len(TIME_SLOTS)):
            w.reset()
            w.select_person()
            slots = w.available_slots(TOMORROW)
            if not slots:
                break
            w.select_date(TOMORROW)
            w.select_time(slots[0])
            w.enter_details("Back to back", "demo")
            booked.append(w.submit(lambda request: dict(request)))

        ranges = sorted((b["start_time"], b["end_time"]) for b in booked)
        for (_, end), (next_start, _) in zip(ranges, ranges[1:]):
            assert end <= next_start
