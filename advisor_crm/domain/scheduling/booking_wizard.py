"""
Booking Wizard
Person -> date -> time -> details -> confirmed, as an explicit state machine.

The wizard works on a snapshot of existing appointments and refuses any
transition whose guard fails. Creating the appointment is delegated to a
callable so the same flow runs server-side (repository insert) and in the
SDK (HTTP POST).
"""

import logging
from collections.abc import Iterable
from datetime import date
from enum import Enum
from typing import Any, Callable, Optional

from .availability_service import (
    BookedSlot,
    DayAvailability,
    find_conflict,
    find_overlap,
    get_available_slots,
    get_booking_window,
)
from .time_calculator import APPOINTMENT_TYPES, TIME_SLOTS, calculate_end_time

logger = logging.getLogger(__name__)

GENERIC_BOOKING_ERROR = "Something went wrong. Please try again."


class BookingStep(str, Enum):
    SELECT_PERSON = "select_person"
    SELECT_DATE = "select_date"
    SELECT_TIME = "select_time"
    ENTER_DETAILS = "enter_details"
    CONFIRMED = "confirmed"


STEP_ORDER = list(BookingStep)


class BookingError(Exception):
    """Base class for refused wizard transitions"""


class InvalidTransition(BookingError):
    pass


class UnknownPerson(BookingError):
    pass


class DateUnavailable(BookingError):
    pass


class DateInPast(DateUnavailable):
    pass


class DateFullyBooked(DateUnavailable):
    pass


class SlotUnavailable(BookingError):
    def __init__(self, message: str, conflict: Optional[BookedSlot] = None):
        super().__init__(message)
        self.conflict = conflict


class InvalidDetails(BookingError):
    pass


class BookingFailed(BookingError):
    """The create call raised; the wizard stays on ENTER_DETAILS"""


def _booked_message(conflict: BookedSlot) -> str:
    return f"Booked: {conflict.title} ({conflict.start_time} - {conflict.end_time})"


class BookingWizard:
    def __init__(
        self,
        current_user_id: int,
        appointments: Iterable[BookedSlot] = (),
        team_member_ids: Optional[Iterable[int]] = None,
        today: Optional[date] = None,
    ):
        self.current_user_id = current_user_id
        self.appointments: list[BookedSlot] = list(appointments)
        self.team_member_ids = set(team_member_ids) if team_member_ids is not None else None
        self.today = today or date.today()
        self.closed = False
        self.result: Any = None
        self._clear_selections()

    def _clear_selections(self) -> None:
        self.step = BookingStep.SELECT_PERSON
        self.booking_for = "self"
        self.person_id: Optional[int] = None
        self.selected_date: Optional[date] = None
        self.selected_time: Optional[str] = None
        self.title = ""
        self.description: Optional[str] = None
        self.appointment_type: Optional[str] = None
        self.client_id: Optional[int] = None
        self.location: Optional[str] = None
        self.error: Optional[str] = None

    def _require(self, step: BookingStep) -> None:
        if self.closed:
            raise InvalidTransition("Booking wizard is closed")
        if self.step != step:
            raise InvalidTransition(f"Expected step {step.value}, wizard is at {self.step.value}")

    # -- step 1 ---------------------------------------------------------------

    def select_person(self, person_id: Optional[int] = None) -> None:
        """Book for yourself (None or your own id) or for a team member"""
        self._require(BookingStep.SELECT_PERSON)
        if person_id is None or person_id == self.current_user_id:
            self.booking_for = "self"
            self.person_id = self.current_user_id
        else:
            if self.team_member_ids is not None and person_id not in self.team_member_ids:
                raise UnknownPerson(f"Team member {person_id} not found")
            self.booking_for = "team_member"
            self.person_id = person_id
        self.step = BookingStep.SELECT_DATE

    @property
    def assigned_to_id(self) -> Optional[int]:
        return self.person_id if self.booking_for == "team_member" else None

    # -- step 2 ---------------------------------------------------------------

    def booking_window(self) -> list[DayAvailability]:
        if self.person_id is None:
            raise InvalidTransition("Select a person before viewing dates")
        return get_booking_window(self.appointments, self.person_id, start=self.today)

    def available_slots(self, day: Optional[date] = None) -> list[str]:
        day = day or self.selected_date
        if self.person_id is None or day is None:
            return []
        return get_available_slots(self.appointments, self.person_id, day, today=self.today)

    def select_date(self, day: date) -> None:
        self._require(BookingStep.SELECT_DATE)
        if day < self.today:
            raise DateInPast(f"{day.isoformat()} is in the past")
        if not self.available_slots(day):
            raise DateFullyBooked(f"No available slots on {day.isoformat()}")
        self.selected_date = day
        self.selected_time = None
        self.step = BookingStep.SELECT_TIME

    # -- step 3 ---------------------------------------------------------------

    def select_time(self, slot: str) -> None:
        self._require(BookingStep.SELECT_TIME)
        if slot not in TIME_SLOTS:
            raise SlotUnavailable(f"{slot} is not a bookable slot")
        conflict = find_conflict(self.appointments, self.person_id, self.selected_date, slot)
        if conflict:
            raise SlotUnavailable(_booked_message(conflict), conflict)
        self.selected_time = slot
        self.step = BookingStep.ENTER_DETAILS

    # -- step 4 ---------------------------------------------------------------

    def enter_details(
        self,
        title: str,
        appointment_type: str,
        description: Optional[str] = None,
        client_id: Optional[int] = None,
        location: Optional[str] = None,
    ) -> None:
        self._require(BookingStep.ENTER_DETAILS)
        self.title = (title or "").strip()
        self.appointment_type = appointment_type
        self.description = description
        self.client_id = client_id
        self.location = location

    def build_request(self) -> dict:
        """
        Appointment fields for the create call, end time derived from the type.

        The whole range must be free, not just the start slot.
        """
        self._require(BookingStep.ENTER_DETAILS)
        if not self.title:
            raise InvalidDetails("Title is required")
        if self.appointment_type not in APPOINTMENT_TYPES:
            raise InvalidDetails(f"Unknown appointment type '{self.appointment_type}'")

        end_time = calculate_end_time(self.selected_time, self.appointment_type)
        overlap = find_overlap(self.appointments, self.person_id, self.selected_date, self.selected_time, end_time)
        if overlap:
            raise SlotUnavailable(_booked_message(overlap), overlap)

        return {
            "title": self.title,
            "description": self.description,
            "client_id": self.client_id,
            "assigned_to_id": self.assigned_to_id,
            "user_id": self.current_user_id,
            "date": self.selected_date,
            "start_time": self.selected_time,
            "end_time": end_time,
            "type": self.appointment_type,
            "location": self.location,
            "status": "scheduled",
        }

    def submit(self, create: Callable[[dict], Any]) -> Any:
        """
        Create the appointment through `create(request)`.

        On failure the wizard stays on ENTER_DETAILS with a generic message and
        BookingFailed is raised from the original error.
        """
        request = self.build_request()
        self.error = None
        try:
            created = create(request)
        except Exception as e:
            logger.error(f"❌ Booking failed for person {self.person_id}: {e}")
            self.error = GENERIC_BOOKING_ERROR
            raise BookingFailed(GENERIC_BOOKING_ERROR) from e

        self.appointments.append(
            BookedSlot(
                date=request["date"],
                start_time=request["start_time"],
                end_time=request["end_time"],
                user_id=request["user_id"],
                assigned_to_id=request["assigned_to_id"],
                title=request["title"],
                id=created.get("id") if isinstance(created, dict) else getattr(created, "id", None),
            )
        )
        self.result = created
        self.step = BookingStep.CONFIRMED
        logger.info(
            f"✅ Booked {request['type']} for person {self.person_id} on "
            f"{request['date']} {request['start_time']}-{request['end_time']}"
        )
        return created

    # -- navigation -----------------------------------------------------------

    def back(self) -> None:
        if self.closed:
            raise InvalidTransition("Booking wizard is closed")
        if self.step in (BookingStep.SELECT_PERSON, BookingStep.CONFIRMED):
            raise InvalidTransition(f"Cannot go back from {self.step.value}")
        self.step = STEP_ORDER[STEP_ORDER.index(self.step) - 1]
        self.error = None

    def reset(self) -> None:
        """Start over with every selection cleared"""
        if self.closed:
            raise InvalidTransition("Booking wizard is closed")
        self.result = None
        self._clear_selections()

    def close(self) -> None:
        self.closed = True
