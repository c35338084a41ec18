"""
Booking exceptions.

Validation problems with a candidate are raised immediately; approval
conflicts are NOT exceptions (see models.approval outcomes).
"""


class BookingValidationError(ValueError):
    """Malformed booking input (slot range, slot index, date)."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        return {'error': self.message, 'field': self.field}


class UnknownSlot(BookingValidationError):
    """Slot index outside the fixed slot universe."""

    def __init__(self, slot, field: str = None):
        super().__init__(f'Aula inexistente: {slot}', field=field)
        self.slot = slot


class StaleReservationError(RuntimeError):
    """
    Compare-and-swap on reservation status failed.

    Raised by the persistence layer when a reservation in a command batch
    no longer has the expected status; the whole batch was rolled back.
    """

    def __init__(self, reservation_id: int, expected_status: str):
        super().__init__(
            f'Reservation {reservation_id} is no longer {expected_status!r}'
        )
        self.reservation_id = reservation_id
        self.expected_status = expected_status


class ApprovalRetryExhausted(RuntimeError):
    """Concurrent modifications kept invalidating the snapshot."""


class SlotUnavailableError(RuntimeError):
    """
    Booking request refused because the slot is already taken.

    reason is 'recurring' or 'approved' (see models.conflicts).
    """

    def __init__(self, reason: str, conflicts=None):
        super().__init__(f'Slot unavailable: {reason}')
        self.reason = reason
        self.conflicts = conflicts


class ReservationNotFoundError(LookupError):
    """Reservation ID does not exist."""

    def __init__(self, reservation_id: int):
        super().__init__(f'Reservation {reservation_id} not found')
        self.reservation_id = reservation_id
