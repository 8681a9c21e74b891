# barber_agenda/errors.py


class BookingError(Exception):
    """Base class for errors reported back to whoever submitted the request."""

    status_code = 400

    def __init__(self, detail: str, *, cause: Exception | None = None):
        super().__init__(detail)
        self.detail = detail
        self.cause = cause


class AvailabilityUnreadable(BookingError):
    """The appointment store could not be read, so availability is unknown."""

    status_code = 503

    def __init__(self, detail: str = "Cannot determine availability right now, try again", *, cause=None):
        super().__init__(detail, cause=cause)


class SlotConflict(BookingError):
    status_code = 409

    def __init__(self, slot: str, *, cause=None):
        super().__init__(f"Slot {slot} is already booked, choose another", cause=cause)
        self.slot = slot


class InvalidSlotSelection(BookingError):
    status_code = 422


class PastSlotSelection(InvalidSlotSelection):
    def __init__(self, detail: str = "Cannot book an appointment in the past", *, cause=None):
        super().__init__(detail, cause=cause)


class WriteFailed(BookingError):
    status_code = 502


class OffCatalogAppointment(BookingError):
    status_code = 409


class AppointmentNotFound(BookingError):
    status_code = 404

    def __init__(self, appointment_id: int):
        super().__init__("Appointment not found")
        self.appointment_id = appointment_id


class StoreUnavailable(Exception):
    """Raised by the store when a read fails; callers translate it."""


class DuplicateStart(Exception):
    """Raised by the store when the start-time unique constraint rejects a write."""


class NotificationFailed(BookingError):
    status_code = 502


class NotificationsDisabled(BookingError):
    status_code = 503

    def __init__(self, detail: str = "WhatsApp gateway is not configured"):
        super().__init__(detail)
