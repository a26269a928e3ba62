import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.context import ActorContext
from backend.auth.dependencies import get_actor
from backend.database import ensure_appointment_schema, get_db
from backend.scheduling.errors import BookingError
from backend.scheduling.status import AppointmentStatus
from backend.schemas.appointments import (
    AppointmentResponse,
    CreateAppointmentRequest,
    MessageResponse,
    UpdateAppointmentRequest,
    to_appointment_response,
)
from backend.services.appointment_service import AppointmentService

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE = 'Database unavailable. Verify DATABASE_URL and database credentials.'


def ensure_database_ready() -> None:
    try:
        ensure_appointment_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE,
        ) from exc


def raise_http_error(db: Session, exc: Exception) -> NoReturn:
    db.rollback()

    if isinstance(exc, BookingError):
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc

    logger.exception('Appointment database operation failed.')
    raise HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_UNAVAILABLE,
    ) from exc


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        appointment = AppointmentService(db).create_appointment(actor, data)
        return to_appointment_response(appointment)
    except (BookingError, SQLAlchemyError) as exc:
        raise_http_error(db, exc)


@router.get('', response_model=list[AppointmentResponse])
def list_appointments(
    user_id: int | None = Query(default=None, alias='userId'),
    consultant_id: int | None = Query(default=None, alias='consultantId'),
    appointment_status: AppointmentStatus | None = Query(default=None, alias='status'),
    start_from: str | None = Query(default=None, alias='from'),
    start_to: str | None = Query(default=None, alias='to'),
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        appointments = AppointmentService(db).list_appointments(
            actor,
            user_id=user_id,
            consultant_id=consultant_id,
            status=appointment_status.value if appointment_status else None,
            start_from=start_from,
            start_to=start_to,
        )
        return [to_appointment_response(appointment) for appointment in appointments]
    except (BookingError, SQLAlchemyError) as exc:
        raise_http_error(db, exc)


@router.get('/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        appointment = AppointmentService(db).get_appointment(actor, appointment_id)
        return to_appointment_response(appointment)
    except (BookingError, SQLAlchemyError) as exc:
        raise_http_error(db, exc)


@router.patch('/{appointment_id}', response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    data: UpdateAppointmentRequest,
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        appointment = AppointmentService(db).update_appointment(actor, appointment_id, data)
        return to_appointment_response(appointment)
    except (BookingError, SQLAlchemyError) as exc:
        raise_http_error(db, exc)


@router.post('/{appointment_id}/cancel', response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        appointment = AppointmentService(db).cancel_appointment(actor, appointment_id)
        return to_appointment_response(appointment)
    except (BookingError, SQLAlchemyError) as exc:
        raise_http_error(db, exc)


@router.delete('/{appointment_id}', response_model=MessageResponse)
def delete_appointment(
    appointment_id: int,
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        AppointmentService(db).delete_appointment(actor, appointment_id)
        return MessageResponse(message='Appointment deleted')
    except (BookingError, SQLAlchemyError) as exc:
        raise_http_error(db, exc)
