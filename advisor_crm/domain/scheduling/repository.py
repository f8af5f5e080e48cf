"""Appointment repository - Database operations for appointments"""

from datetime import date
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Appointment, Client, User


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_appointments(db: Session, advisor_id: Optional[int] = None) -> list[Appointment]:
        """All appointments, or only those for clients owned by an advisor"""
        query = db.query(Appointment)
        if advisor_id is not None:
            query = query.join(Client, Appointment.client_id == Client.id).filter(
                Client.user_id == advisor_id
            )
        return query.order_by(Appointment.date, Appointment.start_time).all()

    @staticmethod
    def get_appointments_by_client(db: Session, client_id: int) -> list[Appointment]:
        return (
            db.query(Appointment)
            .filter(Appointment.client_id == client_id)
            .order_by(Appointment.date, Appointment.start_time)
            .all()
        )

    @staticmethod
    def get_appointments_for_person(
        db: Session, person_id: int, on_or_after: Optional[date] = None
    ) -> list[Appointment]:
        """Appointments attributed to a person: assigned to them, or unassigned and created by them"""
        query = db.query(Appointment).filter(
            or_(
                Appointment.assigned_to_id == person_id,
                (Appointment.assigned_to_id.is_(None)) & (Appointment.user_id == person_id),
            )
        )
        if on_or_after is not None:
            query = query.filter(Appointment.date >= on_or_after)
        return query.all()

    @staticmethod
    def get_appointment_by_id(db: Session, appointment_id: int) -> Optional[Appointment]:
        return db.query(Appointment).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def create_appointment(db: Session, **appointment_data) -> Appointment:
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def update_appointment(db: Session, appointment: Appointment, **updates) -> Appointment:
        for key, value in updates.items():
            if hasattr(appointment, key):
                setattr(appointment, key, value)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete_appointment(db: Session, appointment: Appointment) -> None:
        db.delete(appointment)
        db.commit()

    @staticmethod
    def count_upcoming(db: Session, advisor_id: Optional[int] = None, today: Optional[date] = None) -> int:
        """Scheduled appointments dated after today"""
        today = today or date.today()
        query = db.query(func.count(Appointment.id)).filter(
            Appointment.date > today, Appointment.status == "scheduled"
        )
        if advisor_id is not None:
            query = query.join(Client, Appointment.client_id == Client.id).filter(
                Client.user_id == advisor_id
            )
        return query.scalar() or 0

    @staticmethod
    def get_user(db: Session, user_id: Optional[int]) -> Optional[User]:
        if user_id is None:
            return None
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_client(db: Session, client_id: Optional[int]) -> Optional[Client]:
        if client_id is None:
            return None
        return db.query(Client).filter(Client.id == client_id).first()

    @staticmethod
    def get_active_user_ids(db: Session) -> list[int]:
        return [user_id for (user_id,) in db.query(User.id).filter(User.is_active.is_(True))]
