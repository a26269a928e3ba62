"""Request and response bodies for the appointment endpoints.

Payloads use camelCase on the wire (``consultantId``, ``startAt``); snake_case
names are accepted as well.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from backend.models.appointment import Appointment
from backend.scheduling.status import AppointmentStatus
from backend.schemas.base import CamelModel

MAX_APPOINTMENT_NOTES_LENGTH = 600


class TrainingMode(str, Enum):
    ONLINE = 'online'
    OFFLINE = 'offline'
    HYBRID = 'hybrid'


class _AppointmentFields(CamelModel):
    title: str | None = None
    notes: str | None = None
    mode: TrainingMode | None = None
    location: str | None = None
    price: float | None = Field(default=None, ge=0)
    metadata: dict[str, Any] | None = None

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_APPOINTMENT_NOTES_LENGTH:
            raise ValueError(f'Notes must be {MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')

        return normalized


class CreateAppointmentRequest(_AppointmentFields):
    # Timestamps are parsed by the booking service (400 Invalid startAt).
    consultant_id: int | None = None
    start_at: datetime | str | None = None
    end_at: datetime | str | None = None


class UpdateAppointmentRequest(_AppointmentFields):
    user_id: int | None = None
    consultant_id: int | None = None
    status: AppointmentStatus | None = None
    start_at: datetime | str | None = None
    end_at: datetime | str | None = None


class PartyReference(CamelModel):
    id: int
    name: str | None = None
    email: str | None = None


class ConsultantReference(CamelModel):
    id: int
    name: str | None = None
    specialty: str | None = None
    contact_email: str | None = None


class AppointmentResponse(CamelModel):
    id: int
    user: PartyReference
    consultant: ConsultantReference
    start_at: datetime
    end_at: datetime
    status: str
    mode: str | None = None
    price: float | None = None
    title: str | None = None
    notes: str | None = None
    location: str | None = None
    last_modified_by: int | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class MessageResponse(BaseModel):
    message: str


def to_appointment_response(appointment: Appointment) -> AppointmentResponse:
    user = appointment.user
    consultant = appointment.consultant
    return AppointmentResponse(
        id=appointment.id,
        user=PartyReference(
            id=appointment.user_id,
            name=user.name if user else None,
            email=user.email if user else None,
        ),
        consultant=ConsultantReference(
            id=appointment.consultant_id,
            name=consultant.name if consultant else None,
            specialty=consultant.specialty if consultant else None,
            contact_email=consultant.contact_email if consultant else None,
        ),
        start_at=appointment.start_at,
        end_at=appointment.end_at,
        status=appointment.status,
        mode=appointment.mode,
        price=appointment.price,
        title=appointment.title,
        notes=appointment.notes,
        location=appointment.location,
        last_modified_by=appointment.last_modified_by,
        metadata=appointment.extra_metadata,
        created_at=appointment.created_at,
        updated_at=appointment.updated_at,
    )
