"""Booking wizard driven against the REST API"""

import logging
from datetime import date
from typing import Optional

from ..domain.scheduling.availability_service import BookedSlot
from ..domain.scheduling.booking_wizard import BookingWizard
from .api import CrmApiClient

logger = logging.getLogger(__name__)


def load_wizard(api: CrmApiClient, person_id: Optional[int] = None, today: Optional[date] = None) -> BookingWizard:
    """
    A wizard for the signed-in user, booking for `person_id` (default: themselves).

    The snapshot holds that person's appointments only, whichever client
    they are for; the server checks again when the booking is submitted.
    """
    me = api.current_user()
    booked = [BookedSlot.from_dict(a) for a in api.booked_slots(person_id, start=today)]
    team_member_ids = [member["id"] for member in api.team_members()]
    logger.debug(f"Booking wizard loaded with {len(booked)} appointment(s) for person {person_id or me['id']}")
    return BookingWizard(me["id"], booked, team_member_ids=team_member_ids, today=today)


def submit_booking(api: CrmApiClient, wizard: BookingWizard) -> dict:
    """Submit the wizard's details to POST /api/appointments/book"""

    def book(request: dict) -> dict:
        return api.book_appointment(
            assignedToId=request["assigned_to_id"],
            date=request["date"].isoformat(),
            startTime=request["start_time"],
            type=request["type"],
            title=request["title"],
            description=request["description"],
            clientId=request["client_id"],
            location=request["location"],
        )

    return wizard.submit(book)
