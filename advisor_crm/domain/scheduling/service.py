"""Appointment service - Business logic for appointments and booking"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_service import format_appointment_date
from ...models import ROLE_ADVISOR, Appointment, User
from .availability_service import BookedSlot, get_available_slots, get_booking_window
from .booking_wizard import (
    BookingError,
    BookingFailed,
    BookingWizard,
    DateFullyBooked,
    SlotUnavailable,
    UnknownPerson,
)
from .repository import AppointmentRepository
from .schemas import (
    AppointmentCreate,
    AppointmentUpdate,
    AvailabilityResponse,
    BookedRange,
    BookedSlotResponse,
    BookingRequest,
    BookingWindowDay,
)

logger = logging.getLogger(__name__)


def booking_error_status(error: BookingError) -> int:
    """HTTP status for a refused booking step"""
    if isinstance(error, (SlotUnavailable, DateFullyBooked)):
        return 409
    if isinstance(error, UnknownPerson):
        return 404
    if isinstance(error, BookingFailed):
        return 500
    return 400


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()

    def get_appointments(self, user: User) -> list[Appointment]:
        """Advisors only see appointments for their own clients"""
        advisor_id = user.id if user.role == ROLE_ADVISOR else None
        return self.repo.get_appointments(self.db, advisor_id)

    def get_appointments_by_client(self, client_id: int) -> list[Appointment]:
        return self.repo.get_appointments_by_client(self.db, client_id)

    def get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.repo.get_appointment_by_id(self.db, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return appointment

    def _check_references(self, client_id: Optional[int], assigned_to_id: Optional[int]) -> None:
        if client_id is not None and not self.repo.get_client(self.db, client_id):
            raise HTTPException(status_code=400, detail="Client not found")
        if assigned_to_id is not None and not self.repo.get_user(self.db, assigned_to_id):
            raise HTTPException(status_code=400, detail="Assigned user not found")

    def create_appointment(self, data: AppointmentCreate, user: User) -> Appointment:
        """Store an appointment as given; overlaps are not checked here"""
        self._check_references(data.client_id, data.assigned_to_id)
        appointment = self.repo.create_appointment(self.db, user_id=user.id, **data.model_dump())
        logger.info(f"📅 Appointment {appointment.id} created by user {user.id}")
        return appointment

    def update_appointment(self, appointment_id: int, data: AppointmentUpdate) -> Appointment:
        appointment = self.get_appointment(appointment_id)
        updates = data.model_dump(exclude_unset=True)
        self._check_references(updates.get("client_id"), updates.get("assigned_to_id"))
        return self.repo.update_appointment(self.db, appointment, **updates)

    def delete_appointment(self, appointment_id: int) -> Optional[dict]:
        """Delete and return the email context captured before deletion"""
        appointment = self.get_appointment(appointment_id)
        context = self.email_context(appointment)
        self.repo.delete_appointment(self.db, appointment)
        logger.info(f"🗑️ Appointment {appointment_id} deleted")
        return context

    def email_context(self, appointment: Appointment) -> Optional[dict]:
        """Email kwargs for an appointment, or None unless it has both a client and an assignee"""
        client = self.repo.get_client(self.db, appointment.client_id)
        assignee = self.repo.get_user(self.db, appointment.assigned_to_id)
        if not client or not assignee:
            return None
        return {
            "client_name": client.full_name,
            "client_email": client.email,
            "appointment_title": appointment.title,
            "appointment_date": format_appointment_date(appointment.date),
            "appointment_time": f"{appointment.start_time} - {appointment.end_time}",
            "team_member_name": assignee.display_name,
            "team_member_email": assignee.email,
            "description": appointment.description,
        }

    # ------------------------------------------------------------------
    # Availability and booking
    # ------------------------------------------------------------------

    def _resolve_person(self, user: User, person_id: Optional[int]) -> int:
        if person_id is None or person_id == user.id:
            return user.id
        person = self.repo.get_user(self.db, person_id)
        if not person or not person.is_active:
            raise HTTPException(status_code=404, detail="Team member not found")
        return person.id

    def _booked_slots(self, person_id: int, on_or_after: Optional[date] = None) -> list[BookedSlot]:
        return [
            BookedSlot.from_appointment(a)
            for a in self.repo.get_appointments_for_person(self.db, person_id, on_or_after)
        ]

    def get_availability(self, user: User, day: date, person_id: Optional[int] = None) -> AvailabilityResponse:
        person_id = self._resolve_person(user, person_id)
        booked = [slot for slot in self._booked_slots(person_id, day) if slot.date == day]
        return AvailabilityResponse(
            date=day,
            person_id=person_id,
            available_slots=get_available_slots(booked, person_id, day),
            booked=[
                BookedRange(id=b.id, title=b.title, start_time=b.start_time, end_time=b.end_time)
                for b in sorted(booked, key=lambda b: b.start_time)
            ],
        )

    def get_booked_slots(
        self, user: User, person_id: Optional[int] = None, start: Optional[date] = None
    ) -> list[BookedSlotResponse]:
        """A person's appointments regardless of which client they are for"""
        person_id = self._resolve_person(user, person_id)
        slots = sorted(self._booked_slots(person_id, start or date.today()), key=lambda s: (s.date, s.start_time))
        return [
            BookedSlotResponse(
                id=s.id,
                title=s.title,
                date=s.date,
                start_time=s.start_time,
                end_time=s.end_time,
                user_id=s.user_id,
                assigned_to_id=s.assigned_to_id,
            )
            for s in slots
        ]

    def get_booking_window(
        self, user: User, person_id: Optional[int] = None, start: Optional[date] = None
    ) -> list[BookingWindowDay]:
        person_id = self._resolve_person(user, person_id)
        start = start or date.today()
        window = get_booking_window(self._booked_slots(person_id, start), person_id, start=start)
        return [BookingWindowDay(date=d.date, available=d.available, booked=d.booked) for d in window]

    def book_appointment(self, data: BookingRequest, user: User) -> Appointment:
        """
        Run the booking wizard server-side.

        The overlap check uses the resolved person (assignee, or the caller
        when booking for themselves), never the client's owner.
        """
        person_id = self._resolve_person(user, data.assigned_to_id)
        if data.client_id is not None and not self.repo.get_client(self.db, data.client_id):
            raise HTTPException(status_code=400, detail="Client not found")

        wizard = BookingWizard(
            current_user_id=user.id,
            appointments=self._booked_slots(person_id, date.today()),
        )
        try:
            wizard.select_person(person_id)
            wizard.select_date(data.date)
            wizard.select_time(data.start_time)
            wizard.enter_details(
                title=data.title,
                appointment_type=data.type,
                description=data.description,
                client_id=data.client_id,
                location=data.location,
            )
            appointment = wizard.submit(lambda request: self.repo.create_appointment(self.db, **request))
        except BookingFailed as e:
            self.db.rollback()
            raise HTTPException(status_code=500, detail=str(e)) from e
        except BookingError as e:
            logger.info(f"🚫 Booking refused for person {person_id}: {e}")
            raise HTTPException(status_code=booking_error_status(e), detail=str(e)) from e

        logger.info(f"📅 Appointment {appointment.id} booked for person {person_id} by user {user.id}")
        return appointment

