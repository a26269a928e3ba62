"""Appointment booking: create, update, cancel and delete with conflict checks."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from backend.auth.context import ActorContext
from backend.core import config
from backend.models.appointment import Appointment
from backend.scheduling.conflicts import ConflictResult, check_conflict, find_duplicate_booking
from backend.scheduling.errors import (
    DuplicateBooking,
    Forbidden,
    MissingRequiredField,
    NotFound,
    SlotUnavailable,
)
from backend.scheduling.status import (
    INITIAL_STATUS,
    AppointmentStatus,
    ensure_cancellable,
    ensure_transition_allowed,
    is_blocking,
)
from backend.scheduling.time_range import TimeRange, parse_timestamp
from backend.schemas.appointments import CreateAppointmentRequest, UpdateAppointmentRequest
from backend.services.repository import AppointmentRepository, ConsultantRepository

logger = logging.getLogger(__name__)

PROTECTED_FIELDS = ('user_id', 'consultant_id')
UPDATABLE_FIELDS = ('title', 'notes', 'mode', 'location', 'price', 'metadata')


class AppointmentService:
    """Booking rules for appointments, for one request's database session."""

    def __init__(self, db: Session):
        self.db = db
        self.appointments = AppointmentRepository()
        self.consultants = ConsultantRepository()

    def get_appointment(self, actor: ActorContext, appointment_id: int) -> Appointment:
        appointment = self._get_or_404(appointment_id)
        if not self.can_modify(actor, appointment):
            raise Forbidden()
        return appointment

    def list_appointments(
        self,
        actor: ActorContext,
        user_id: Optional[int] = None,
        consultant_id: Optional[int] = None,
        status: Optional[str] = None,
        start_from: Optional[str] = None,
        start_to: Optional[str] = None,
    ) -> list[Appointment]:
        lower = parse_timestamp(start_from, 'from') if start_from else None
        upper = parse_timestamp(start_to, 'to') if start_to else None

        party_user_id = None
        party_consultant_ids: list[int] = []
        if not actor.is_privileged:
            if consultant_id is not None:
                consultant = self.consultants.find_by_id(self.db, consultant_id)
                if consultant is None:
                    raise NotFound('Consultant not found')
                if consultant.user_id != actor.actor_id:
                    raise Forbidden('Access denied to this consultant')
            else:
                party_user_id = actor.actor_id
                party_consultant_ids = self.consultants.ids_for_user(self.db, actor.actor_id)

        return self.appointments.find_many(
            self.db,
            user_id=user_id,
            consultant_id=consultant_id,
            status=status,
            start_from=lower,
            start_to=upper,
            party_user_id=party_user_id,
            party_consultant_ids=party_consultant_ids,
        )

    def create_appointment(self, actor: ActorContext, data: CreateAppointmentRequest) -> Appointment:
        if data.consultant_id is None or data.start_at is None or data.start_at == '':
            raise MissingRequiredField('consultant and startAt are required')

        # The row lock serializes bookings for one consultant until commit.
        consultant = self.consultants.find_by_id(self.db, data.consultant_id, for_update=True)
        if consultant is None:
            raise NotFound('Consultant not found')

        start = parse_timestamp(data.start_at, 'startAt')
        if data.end_at is None:
            requested = TimeRange.starting_at(start, config.DEFAULT_APPOINTMENT_MINUTES)
        else:
            requested = TimeRange(start, parse_timestamp(data.end_at, 'endAt'))

        if find_duplicate_booking(self.db, actor.actor_id, consultant.id, requested.start):
            logger.info(
                'Rejected duplicate booking user=%s consultant=%s start=%s',
                actor.actor_id, consultant.id, requested.start,
            )
            raise DuplicateBooking()

        self._ensure_slot_free(consultant.id, requested, booking_party_id=actor.actor_id)

        mode = data.mode.value if data.mode else (consultant.mode_of_training or config.DEFAULT_TRAINING_MODE)
        price = data.price if data.price is not None else consultant.price_per_session

        appointment = self.appointments.create(
            self.db,
            user_id=actor.actor_id,
            consultant_id=consultant.id,
            start_at=requested.start,
            end_at=requested.end,
            title=data.title,
            notes=data.notes,
            mode=mode,
            location=data.location,
            price=price,
            extra_metadata=data.metadata,
            last_modified_by=actor.actor_id,
            status=INITIAL_STATUS.value,
        )
        logger.info(
            'Created appointment id=%s user=%s consultant=%s range=%s..%s',
            appointment.id, actor.actor_id, consultant.id, requested.start, requested.end,
        )
        return appointment

    def update_appointment(
        self,
        actor: ActorContext,
        appointment_id: int,
        data: UpdateAppointmentRequest,
    ) -> Appointment:
        appointment = self._get_or_404(appointment_id)
        if not self.can_modify(actor, appointment):
            raise Forbidden()

        updates = data.model_dump(exclude_unset=True)
        if not actor.is_privileged:
            # Dropped, not rejected.
            for field in PROTECTED_FIELDS:
                updates.pop(field, None)

        was_blocking = is_blocking(appointment.status)

        new_status = updates.get('status')
        if new_status is not None:
            new_status = AppointmentStatus(new_status).value
            ensure_transition_allowed(appointment.status, new_status, actor.is_privileged)
            if new_status != appointment.status:
                logger.info(
                    'Appointment id=%s status %s -> %s by user=%s',
                    appointment.id, appointment.status, new_status, actor.actor_id,
                )
            appointment.status = new_status

        party_changed = False
        if updates.get('user_id') is not None and updates['user_id'] != appointment.user_id:
            appointment.user_id = updates['user_id']
            party_changed = True
        if updates.get('consultant_id') is not None and updates['consultant_id'] != appointment.consultant_id:
            if self.consultants.find_by_id(self.db, updates['consultant_id'], for_update=True) is None:
                raise NotFound('Consultant not found')
            appointment.consultant_id = updates['consultant_id']
            party_changed = True

        range_changed = 'start_at' in updates or 'end_at' in updates
        start_moved = False
        if range_changed:
            start = (
                parse_timestamp(updates['start_at'], 'startAt')
                if 'start_at' in updates else appointment.start_at
            )
            end = (
                parse_timestamp(updates['end_at'], 'endAt')
                if 'end_at' in updates else appointment.end_at
            )
            rescheduled = TimeRange(start, end)
            start_moved = rescheduled.start != appointment.start_at
            appointment.start_at = rescheduled.start
            appointment.end_at = rescheduled.end

        if (start_moved or party_changed) and find_duplicate_booking(
            self.db,
            appointment.user_id,
            appointment.consultant_id,
            appointment.start_at,
            exclude_appointment_id=appointment.id,
        ):
            logger.info(
                'Rejected duplicate reschedule id=%s user=%s consultant=%s start=%s',
                appointment.id, appointment.user_id, appointment.consultant_id, appointment.start_at,
            )
            raise DuplicateBooking()

        reactivated = not was_blocking and is_blocking(appointment.status)
        if is_blocking(appointment.status) and (range_changed or party_changed or reactivated):
            # Held until commit, as in create.
            self.consultants.find_by_id(self.db, appointment.consultant_id, for_update=True)
            self._ensure_slot_free(
                appointment.consultant_id,
                TimeRange(appointment.start_at, appointment.end_at),
                booking_party_id=appointment.user_id,
                exclude_appointment_id=appointment.id,
            )

        for field in UPDATABLE_FIELDS:
            if field not in updates:
                continue
            value = updates[field]
            if field == 'mode' and value is not None:
                value = getattr(value, 'value', value)
            setattr(appointment, 'extra_metadata' if field == 'metadata' else field, value)

        appointment.last_modified_by = actor.actor_id
        return self.appointments.save(self.db, appointment)

    def cancel_appointment(self, actor: ActorContext, appointment_id: int) -> Appointment:
        appointment = self._get_or_404(appointment_id)
        if not self.can_modify(actor, appointment):
            raise Forbidden()

        ensure_cancellable(appointment.status)

        appointment.status = AppointmentStatus.CANCELLED.value
        appointment.last_modified_by = actor.actor_id
        logger.info('Cancelled appointment id=%s by user=%s', appointment.id, actor.actor_id)
        return self.appointments.save(self.db, appointment)

    def delete_appointment(self, actor: ActorContext, appointment_id: int) -> None:
        appointment = self._get_or_404(appointment_id)

        # The assigned consultant may update but not delete.
        if not (actor.is_privileged or appointment.user_id == actor.actor_id):
            raise Forbidden()

        self.appointments.delete(self.db, appointment)
        logger.info('Deleted appointment id=%s by user=%s', appointment_id, actor.actor_id)

    def can_modify(self, actor: ActorContext, appointment: Appointment) -> bool:
        if actor.is_privileged:
            return True
        if appointment.user_id == actor.actor_id:
            return True

        consultant = self.consultants.find_by_id(self.db, appointment.consultant_id)
        return consultant is not None and consultant.user_id == actor.actor_id

    def _get_or_404(self, appointment_id: int) -> Appointment:
        appointment = self.appointments.find_by_id(self.db, appointment_id)
        if appointment is None:
            raise NotFound('Appointment not found')
        return appointment

    def _ensure_slot_free(
        self,
        consultant_id: int,
        requested: TimeRange,
        booking_party_id: int,
        exclude_appointment_id: Optional[int] = None,
    ) -> None:
        result = check_conflict(
            self.db,
            consultant_id,
            requested,
            booking_party_id,
            exclude_appointment_id=exclude_appointment_id,
        )
        if result is ConflictResult.NO_CONFLICT:
            return

        logger.info(
            'Rejected booking for consultant=%s range=%s..%s: %s',
            consultant_id, requested.start, requested.end, result.value,
        )
        if result is ConflictResult.OWN_BOOKING:
            raise SlotUnavailable(SlotUnavailable.OWN)
        raise SlotUnavailable(SlotUnavailable.OTHER)
