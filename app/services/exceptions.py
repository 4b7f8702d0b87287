# app/services/exceptions.py
"""
Domain errors raised by the session services.
All are local validation failures; app.main maps them to HTTP responses.
"""


class ParkingError(Exception):
    """Base class for every parking domain error."""

    status_code = 400

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidInputError(ParkingError):
    """Non-positive rate/duration, or a duration off the half-hour grid."""


class MaxDurationReachedError(ParkingError):
    """Extension would push the session past the zone's maximum duration."""


class InvalidStateError(ParkingError):
    """Operation not allowed for the session's current status."""

    status_code = 409


class NotFoundError(ParkingError):
    status_code = 404


class SessionNotFoundError(NotFoundError):
    pass


class ZoneRestrictedError(ParkingError):
    """Requested window overlaps an active zone restriction."""

    status_code = 409


class PaymentFailedError(ParkingError):
    status_code = 402
