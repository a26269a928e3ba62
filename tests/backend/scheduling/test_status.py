import itertools

import pytest

from backend.scheduling.errors import AlreadyFinal, InvalidStatusTransition
from backend.scheduling.status import (
    AppointmentStatus,
    ensure_cancellable,
    ensure_transition_allowed,
    is_blocking,
)

ALLOWED = {
    ('pending', 'confirmed'),
    ('pending', 'cancelled'),
    ('confirmed', 'rescheduled'),
    ('confirmed', 'completed'),
    ('confirmed', 'cancelled'),
    ('rescheduled', 'confirmed'),
    ('rescheduled', 'cancelled'),
}

ALL_PAIRS = list(itertools.product([status.value for status in AppointmentStatus], repeat=2))


@pytest.mark.parametrize(('current', 'requested'), ALL_PAIRS)
def test_transition_table_is_enforced_for_regular_actors(current: str, requested: str) -> None:
    if (current, requested) in ALLOWED:
        ensure_transition_allowed(current, requested, privileged=False)
        return

    with pytest.raises(InvalidStatusTransition) as exception_info:
        ensure_transition_allowed(current, requested, privileged=False)

    assert exception_info.value.message == f'Cannot change status from {current} to {requested}'
    assert exception_info.value.status_code == 400


@pytest.mark.parametrize(('current', 'requested'), ALL_PAIRS)
def test_privileged_actors_bypass_transition_table(current: str, requested: str) -> None:
    ensure_transition_allowed(current, requested, privileged=True)


def test_unknown_current_status_is_not_transitionable() -> None:
    with pytest.raises(InvalidStatusTransition):
        ensure_transition_allowed('booked', 'confirmed', privileged=False)


@pytest.mark.parametrize(
    ('current', 'message'),
    [
        ('completed', 'Cannot cancel a completed appointment'),
        ('cancelled', 'Appointment is already cancelled'),
    ],
)
def test_ensure_cancellable_rejects_final_statuses(current: str, message: str) -> None:
    with pytest.raises(AlreadyFinal) as exception_info:
        ensure_cancellable(current)

    assert exception_info.value.message == message
    assert not isinstance(exception_info.value, InvalidStatusTransition)


@pytest.mark.parametrize('current', ['pending', 'confirmed', 'rescheduled'])
def test_ensure_cancellable_accepts_live_statuses(current: str) -> None:
    ensure_cancellable(current)
    assert is_blocking(current)


@pytest.mark.parametrize('current', ['completed', 'cancelled'])
def test_final_statuses_do_not_block(current: str) -> None:
    assert not is_blocking(current)
