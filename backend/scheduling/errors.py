"""Booking errors raised by the scheduling core.

Every error carries the HTTP status the route layer should answer with, so the
routes can translate them without knowing which check failed.
"""

from fastapi import status


class BookingError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingRequiredField(BookingError):
    pass


class InvalidDate(BookingError):
    pass


class InvalidRange(BookingError):
    pass


class NotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(BookingError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = 'Forbidden'):
        super().__init__(message)


class DuplicateBooking(BookingError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = 'You already have a booking for this timeslot'):
        super().__init__(message)


class SlotUnavailable(BookingError):
    status_code = status.HTTP_409_CONFLICT

    OWN = 'own'
    OTHER = 'other'

    def __init__(self, reason: str):
        if reason == self.OWN:
            message = 'You already have an overlapping appointment at this time'
        else:
            message = 'Selected timeslot is already booked'
        super().__init__(message)
        self.reason = reason


class InvalidStatusTransition(BookingError):
    def __init__(self, current: str, requested: str):
        super().__init__(f'Cannot change status from {current} to {requested}')
        self.current = current
        self.requested = requested


class AlreadyFinal(BookingError):
    def __init__(self, current: str):
        if current == 'completed':
            message = 'Cannot cancel a completed appointment'
        else:
            message = 'Appointment is already cancelled'
        super().__init__(message)
        self.current = current
