from enum import Enum

from backend.scheduling.errors import AlreadyFinal, InvalidStatusTransition


class AppointmentStatus(str, Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    RESCHEDULED = 'rescheduled'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


INITIAL_STATUS = AppointmentStatus.PENDING

BLOCKING_STATUSES = frozenset({
    AppointmentStatus.PENDING,
    AppointmentStatus.CONFIRMED,
    AppointmentStatus.RESCHEDULED,
})

TERMINAL_STATUSES = frozenset({
    AppointmentStatus.COMPLETED,
    AppointmentStatus.CANCELLED,
})

VALID_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CONFIRMED: frozenset({
        AppointmentStatus.RESCHEDULED,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.RESCHEDULED: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}


def is_blocking(status: str) -> bool:
    return status in {blocking.value for blocking in BLOCKING_STATUSES}


def can_transition(current: str, requested: str) -> bool:
    try:
        current_status = AppointmentStatus(current)
        requested_status = AppointmentStatus(requested)
    except ValueError:
        return False
    return requested_status in VALID_TRANSITIONS[current_status]


def ensure_transition_allowed(current: str, requested: str, privileged: bool) -> None:
    """Raise ``InvalidStatusTransition`` unless the move is in the table.

    Privileged actors skip the table entirely.
    """
    if privileged:
        return
    if not can_transition(current, requested):
        raise InvalidStatusTransition(current, requested)


def ensure_cancellable(current: str) -> None:
    if current in {terminal.value for terminal in TERMINAL_STATUSES}:
        raise AlreadyFinal(current)
