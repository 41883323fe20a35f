# barberbook/errors.py
"""Booking error taxonomy.

Callers branch on the exception class (or its ``kind``), never on the
message: only ``SlotConflict`` should trigger an availability refresh, and
only ``StorageUnavailable`` is worth retrying with backoff.
"""


class BookingError(Exception):
    kind = "booking_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(BookingError):
    """Missing or malformed input. Fix the request, don't retry it."""

    kind = "invalid_request"
    status_code = 422


class SlotConflict(BookingError):
    """The interval is already booked on that chair."""

    kind = "slot_conflict"
    status_code = 409

    def __init__(self, message: str = "This slot was just taken, pick another"):
        super().__init__(message)


class Unauthorized(BookingError):
    kind = "unauthorized"
    status_code = 401


class Forbidden(BookingError):
    """Signed in, but not allowed to touch this appointment."""

    kind = "forbidden"
    status_code = 403


class StorageUnavailable(BookingError):
    """The ledger failed for a reason unrelated to conflicts. Nothing was committed."""

    kind = "storage_unavailable"
    status_code = 503

    def __init__(self, message: str = "Booking storage is unavailable, try again later"):
        super().__init__(message)


class NotFound(BookingError):
    kind = "not_found"
    status_code = 404


class ShopNotFound(NotFound):
    def __init__(self, message: str = "Shop not found"):
        super().__init__(message)


class AppointmentNotFound(NotFound):
    def __init__(self, message: str = "Appointment not found"):
        super().__init__(message)
