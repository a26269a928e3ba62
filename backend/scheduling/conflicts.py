from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from backend.models.appointment import Appointment
from backend.scheduling.time_range import TimeRange
from backend.services.repository import AppointmentRepository


class ConflictResult(str, Enum):
    NO_CONFLICT = 'no_conflict'
    OWN_BOOKING = 'own_booking'
    OTHER_BOOKING = 'other_booking'


def find_duplicate_booking(
    db: Session,
    user_id: int,
    consultant_id: int,
    start_at: datetime,
    exclude_appointment_id: Optional[int] = None,
) -> Optional[Appointment]:
    """Same party, same consultant, same start. Status is not considered."""
    return AppointmentRepository.find_exact(
        db, user_id, consultant_id, start_at, exclude_id=exclude_appointment_id,
    )


def check_conflict(
    db: Session,
    consultant_id: int,
    proposed: TimeRange,
    booking_party_id: int,
    exclude_appointment_id: Optional[int] = None,
) -> ConflictResult:
    candidates = AppointmentRepository.find_blocking_in_window(
        db,
        consultant_id,
        proposed,
        exclude_id=exclude_appointment_id,
    )

    for existing in candidates:
        if exclude_appointment_id is not None and existing.id == exclude_appointment_id:
            continue
        if not proposed.overlaps(TimeRange(existing.start_at, existing.end_at)):
            continue
        if existing.user_id == booking_party_id:
            return ConflictResult.OWN_BOOKING
        return ConflictResult.OTHER_BOOKING

    return ConflictResult.NO_CONFLICT
