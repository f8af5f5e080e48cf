"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import date as date_type, datetime
from typing import Optional

from pydantic import Field, field_validator, model_validator

from ...schemas import CamelModel
from ...shared.validators import validate_time_of_day
from .time_calculator import APPOINTMENT_TYPES, to_minutes

APPOINTMENT_STATUS_PATTERN = "^(scheduled|completed|cancelled)$"


def _validate_type(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in APPOINTMENT_TYPES:
        raise ValueError(f"Type must be one of: {', '.join(APPOINTMENT_TYPES)}")
    return value


class AppointmentCreate(CamelModel):
    """Schema for creating an appointment directly (no conflict check)"""

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    client_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    date: date_type
    start_time: str
    end_time: str
    type: str
    location: Optional[str] = None
    status: str = Field("scheduled", pattern=APPOINTMENT_STATUS_PATTERN)
    appointment_status: str = "pending"

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, v):
        return validate_time_of_day(v)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        return _validate_type(v)

    @model_validator(mode="after")
    def check_order(self):
        if to_minutes(self.end_time) < to_minutes(self.start_time):
            raise ValueError("End time must not be before start time")
        return self


class AppointmentUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    client_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    date: Optional[date_type] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    type: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = Field(None, pattern=APPOINTMENT_STATUS_PATTERN)
    appointment_status: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, v):
        return validate_time_of_day(v)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        return _validate_type(v)


class AppointmentResponse(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    client_id: Optional[int] = None
    user_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    date: date_type
    start_time: str
    end_time: str
    type: str
    location: Optional[str] = None
    status: str
    appointment_status: str
    created_at: Optional[datetime] = None


class BookingRequest(CamelModel):
    """Server-side run of the booking wizard; assignedToId omitted books for yourself"""

    assigned_to_id: Optional[int] = None
    date: date_type
    start_time: str
    type: str
    title: str
    description: Optional[str] = None
    client_id: Optional[int] = None
    location: Optional[str] = None


class AppointmentTypeOption(CamelModel):
    value: str
    label: str
    duration: int


class BookedRange(CamelModel):
    id: Optional[int] = None
    title: str
    start_time: str
    end_time: str


class BookedSlotResponse(CamelModel):
    """One of a person's appointments, reduced to what conflict checks need"""

    id: Optional[int] = None
    title: str
    date: date_type
    start_time: str
    end_time: str
    user_id: Optional[int] = None
    assigned_to_id: Optional[int] = None


class AvailabilityResponse(CamelModel):
    date: date_type
    person_id: int
    available_slots: list[str]
    booked: list[BookedRange]


class BookingWindowDay(CamelModel):
    date: date_type
    available: int
    booked: int
