"""Appointment router - FastAPI endpoints for appointments and booking"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...email_service import send_appointment_confirmation, send_appointment_update
from ...models import Appointment, User
from ...realtime.hub import PresenceHub
from ...realtime.router import get_presence_hub
from ...routes.notifications import get_notification_service
from ...services.notification_service import (
    Notification,
    NotificationService,
    send_email_notification,
)
from .schemas import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentTypeOption,
    AppointmentUpdate,
    AvailabilityResponse,
    BookedSlotResponse,
    BookingRequest,
    BookingWindowDay,
)
from .service import AppointmentService
from .time_calculator import appointment_type_options

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


async def _announce_new_appointment(
    appointment: Appointment,
    creator: User,
    service: AppointmentService,
    notifications: NotificationService,
    hub: PresenceHub,
) -> None:
    """Notify the assignee (feed + socket) and email client and assignee"""
    if appointment.assigned_to_id and appointment.assigned_to_id != creator.id:
        notification = Notification(
            title="New Appointment Assigned",
            body=f"You have been assigned to: {appointment.title}",
            type="appointment",
            url="/appointments",
            require_push=True,
            created_by=creator.username,
            appointment_id=appointment.id,
            assigned_to_id=appointment.assigned_to_id,
        )
        notifications.notify(
            appointment.assigned_to_id, notification, key=f"appointment_{appointment.id}"
        )
        await hub.send_appointment_notification(notification)

    context = service.email_context(appointment)
    if context:
        await send_email_notification("appointment confirmation", send_appointment_confirmation, **context)


# ============================================================================
# BOOKING HELPERS (declared before /{appointment_id} routes)
# ============================================================================


@router.get("/types", response_model=list[AppointmentTypeOption])
async def get_appointment_types(current_user: User = Depends(get_current_user)):
    """Bookable appointment types and their durations in minutes"""
    return appointment_type_options()


@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(
    day: date = Query(..., alias="date"),
    person_id: Optional[int] = Query(None, alias="personId"),
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Free slots for one person on one day (defaults to the caller)"""
    return service.get_availability(current_user, day, person_id)


@router.get("/booking-window", response_model=list[BookingWindowDay])
async def get_booking_window(
    person_id: Optional[int] = Query(None, alias="personId"),
    start: Optional[date] = Query(None),
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Available/booked slot counts for the next 14 days"""
    return service.get_booking_window(current_user, person_id, start)


@router.get("/booked", response_model=list[BookedSlotResponse])
async def get_booked_slots(
    person_id: Optional[int] = Query(None, alias="personId"),
    start: Optional[date] = Query(None),
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Every appointment attributed to one person from `start` (default today) on"""
    return service.get_booked_slots(current_user, person_id, start)


@router.post("/book", response_model=AppointmentResponse, status_code=201)
async def book_appointment(
    data: BookingRequest,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
    notifications: NotificationService = Depends(get_notification_service),
    hub: PresenceHub = Depends(get_presence_hub),
):
    """Book through the wizard rules; 409 when the slot is taken"""
    appointment = service.book_appointment(data, current_user)
    await _announce_new_appointment(appointment, current_user, service, notifications, hub)
    return appointment


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[AppointmentResponse])
async def get_appointments(
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.get_appointments(current_user)


@router.get("/client/{client_id}", response_model=list[AppointmentResponse])
async def get_client_appointments(
    client_id: int,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.get_appointments_by_client(client_id)


@router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
    notifications: NotificationService = Depends(get_notification_service),
    hub: PresenceHub = Depends(get_presence_hub),
):
    """Create an appointment without a conflict check"""
    appointment = service.create_appointment(data, current_user)
    await _announce_new_appointment(appointment, current_user, service, notifications, hub)
    return appointment


@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.update_appointment(appointment_id, data)

    context = service.email_context(appointment)
    if context:
        await send_email_notification(
            "appointment update", send_appointment_update, is_update=True, **context
        )
    return appointment


@router.delete("/{appointment_id}", status_code=204)
async def delete_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    context = service.delete_appointment(appointment_id)
    if context:
        await send_email_notification(
            "appointment cancellation", send_appointment_update, is_update=False, **context
        )
    return Response(status_code=204)
