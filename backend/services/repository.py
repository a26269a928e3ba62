"""Database access for appointments and consultants."""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from backend.models.appointment import Appointment
from backend.models.consultant import Consultant
from backend.scheduling.status import BLOCKING_STATUSES
from backend.scheduling.time_range import TimeRange


class ConsultantRepository:

    @staticmethod
    def find_by_id(db: Session, consultant_id: int, for_update: bool = False) -> Optional[Consultant]:
        query = db.query(Consultant).filter(Consultant.id == consultant_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def ids_for_user(db: Session, user_id: int) -> list[int]:
        rows = db.query(Consultant.id).filter(Consultant.user_id == user_id).all()
        return [consultant_id for (consultant_id,) in rows]


class AppointmentRepository:

    @staticmethod
    def find_by_id(db: Session, appointment_id: int) -> Optional[Appointment]:
        return db.query(Appointment).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def find_exact(
        db: Session,
        user_id: int,
        consultant_id: int,
        start_at: datetime,
        exclude_id: Optional[int] = None,
    ) -> Optional[Appointment]:
        query = db.query(Appointment).filter(
            Appointment.user_id == user_id,
            Appointment.consultant_id == consultant_id,
            Appointment.start_at == start_at,
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.first()

    @staticmethod
    def find_blocking_in_window(
        db: Session,
        consultant_id: int,
        window: TimeRange,
        exclude_id: Optional[int] = None,
    ) -> list[Appointment]:
        """Blocking appointments of a consultant touching ``window``."""
        query = db.query(Appointment).filter(
            Appointment.consultant_id == consultant_id,
            Appointment.status.in_([status.value for status in BLOCKING_STATUSES]),
            Appointment.start_at < window.end,
            Appointment.end_at > window.start,
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.order_by(Appointment.start_at.asc()).all()

    @staticmethod
    def find_many(
        db: Session,
        user_id: Optional[int] = None,
        consultant_id: Optional[int] = None,
        status: Optional[str] = None,
        start_from: Optional[datetime] = None,
        start_to: Optional[datetime] = None,
        party_user_id: Optional[int] = None,
        party_consultant_ids: Optional[list[int]] = None,
    ) -> list[Appointment]:
        query = db.query(Appointment)
        if user_id is not None:
            query = query.filter(Appointment.user_id == user_id)
        if consultant_id is not None:
            query = query.filter(Appointment.consultant_id == consultant_id)
        if status:
            query = query.filter(Appointment.status == status)
        if start_from is not None:
            query = query.filter(Appointment.start_at >= start_from)
        if start_to is not None:
            query = query.filter(Appointment.start_at <= start_to)
        if party_user_id is not None:
            query = query.filter(or_(
                Appointment.user_id == party_user_id,
                Appointment.consultant_id.in_(party_consultant_ids or []),
            ))
        return query.order_by(Appointment.start_at.asc()).all()

    @staticmethod
    def create(db: Session, **appointment_data) -> Appointment:
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def save(db: Session, appointment: Appointment) -> Appointment:
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete(db: Session, appointment: Appointment) -> None:
        db.delete(appointment)
        db.commit()
