"""
Availability Service
Decides which slots are free for one person on one day.

An appointment belongs to a person when it is assigned to them, or when it
is unassigned and they created it. A slot is taken when it falls inside
[start, end) of one of that person's appointments on the same date.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from .time_calculator import TIME_SLOTS, to_minutes

logger = logging.getLogger(__name__)

BOOKING_WINDOW_DAYS = 14


@dataclass(frozen=True)
class BookedSlot:
    """The fields of an appointment that matter for conflict checks"""

    date: date
    start_time: str
    end_time: str
    user_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    title: str = ""
    id: Optional[int] = None

    @classmethod
    def from_appointment(cls, appointment) -> "BookedSlot":
        """Build from an ORM Appointment (or anything with the same attributes)"""
        return cls(
            date=appointment.date,
            start_time=appointment.start_time,
            end_time=appointment.end_time,
            user_id=appointment.user_id,
            assigned_to_id=appointment.assigned_to_id,
            title=appointment.title or "",
            id=appointment.id,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "BookedSlot":
        """Build from a camelCase API payload"""
        return cls(
            date=date.fromisoformat(str(data["date"])[:10]),
            start_time=data["startTime"],
            end_time=data["endTime"],
            user_id=data.get("userId"),
            assigned_to_id=data.get("assignedToId"),
            title=data.get("title") or "",
            id=data.get("id"),
        )

    def belongs_to(self, person_id: int) -> bool:
        if self.assigned_to_id is not None:
            return self.assigned_to_id == person_id
        return self.user_id == person_id

    def covers(self, slot: str) -> bool:
        slot_minutes = to_minutes(slot)
        return to_minutes(self.start_time) <= slot_minutes < to_minutes(self.end_time)


@dataclass(frozen=True)
class DayAvailability:
    date: date
    available: int
    booked: int

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "available": self.available, "booked": self.booked}


def find_conflict(
    appointments: Iterable[BookedSlot], person_id: int, day: date, slot: str
) -> Optional[BookedSlot]:
    """The appointment that occupies `slot` for this person, if any"""
    for appointment in appointments:
        if appointment.date != day:
            continue
        if not appointment.belongs_to(person_id):
            continue
        if appointment.covers(slot):
            return appointment
    return None


def find_overlap(
    appointments: Iterable[BookedSlot], person_id: int, day: date, start_time: str, end_time: str
) -> Optional[BookedSlot]:
    """The person's appointment that day overlapping [start_time, end_time), if any"""
    start, end = to_minutes(start_time), to_minutes(end_time)
    for appointment in appointments:
        if appointment.date != day or not appointment.belongs_to(person_id):
            continue
        booked_start, booked_end = to_minutes(appointment.start_time), to_minutes(appointment.end_time)
        # An empty range never blocks
        if booked_start < booked_end and booked_start < end and start < booked_end:
            return appointment
    return None


def is_slot_available(appointments: Iterable[BookedSlot], person_id: int, day: date, slot: str) -> bool:
    return find_conflict(appointments, person_id, day, slot) is None


def get_available_slots(
    appointments: Iterable[BookedSlot],
    person_id: int,
    day: date,
    today: Optional[date] = None,
) -> list[str]:
    """Free slots for the person on `day`; a day before today has none"""
    today = today or date.today()
    if day < today:
        return []

    # Only this person's appointments on this day can block a slot
    relevant = [a for a in appointments if a.date == day and a.belongs_to(person_id)]
    return [slot for slot in TIME_SLOTS if not any(a.covers(slot) for a in relevant)]


def get_booking_window(
    appointments: Iterable[BookedSlot],
    person_id: int,
    start: Optional[date] = None,
    days: int = BOOKING_WINDOW_DAYS,
) -> list[DayAvailability]:
    """Available and booked slot counts for each of the next `days` days"""
    start = start or date.today()
    appointments = list(appointments)
    window = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        available = len(get_available_slots(appointments, person_id, day, today=start))
        window.append(DayAvailability(date=day, available=available, booked=len(TIME_SLOTS) - available))
    return window
