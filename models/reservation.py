"""
Reservation entities.

In-memory snapshots of reservations and recurring reservations as handed
to the conflict detector and the approval resolver. Built from database
rows with from_row(); dates are always local calendar dates.
"""

from dataclasses import dataclass, field
from datetime import date

from utils.datetime_helpers import parse_local_date, format_iso_date
from .booking_errors import BookingValidationError
from .slot import SlotRange, make_slot_range


# =============================================================================
# CONSTANTS
# =============================================================================

STATUS_PENDING = 'pendente'
STATUS_APPROVED = 'aprovado'
STATUS_REJECTED = 'rejeitado'

RESERVATION_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)

# Rejected reservations are history and never take part in conflicts
BLOCKING_STATUSES = frozenset({STATUS_PENDING, STATUS_APPROVED})

STATUS_LABELS = {
    STATUS_PENDING: 'Pendente',
    STATUS_APPROVED: 'Aprovado',
    STATUS_REJECTED: 'Rejeitado',
}


def _row_get(row, key, default=None):
    """Read a key from a sqlite3.Row or dict."""
    try:
        value = row[key]
    except (KeyError, IndexError):
        return default
    return default if value is None else value


def parse_weekdays(value) -> frozenset:
    """Parse a CSV ('1,3,5') or iterable of weekday numbers (0=Sunday)."""
    if value is None or value == '':
        return frozenset()
    if isinstance(value, str):
        items = [item.strip() for item in value.split(',') if item.strip()]
    else:
        items = list(value)
    days = set()
    for item in items:
        try:
            day = int(item)
        except (TypeError, ValueError):
            continue
        if 0 <= day <= 6:
            days.add(day)
    return frozenset(days)


def weekdays_to_csv(weekdays) -> str:
    return ','.join(str(day) for day in sorted(parse_weekdays(weekdays)))


# =============================================================================
# ENTITIES
# =============================================================================

@dataclass(frozen=True)
class Reservation:
    """Single-date, single-space booking request."""
    id: int
    space_id: int
    user_id: int
    reservation_date: date | None
    start_slot: int
    end_slot: int
    status: str = STATUS_PENDING
    notes: str | None = None
    recurring_reservation_id: int | None = None
    created_at: str | None = None

    @property
    def slot_range(self) -> SlotRange:
        return SlotRange(self.start_slot, self.end_slot)

    @property
    def is_pending(self) -> bool:
        return self.status == STATUS_PENDING

    @property
    def is_approved(self) -> bool:
        return self.status == STATUS_APPROVED

    @classmethod
    def from_row(cls, row) -> 'Reservation':
        """Build from a reservations table row (or equivalent dict)."""
        return cls(
            id=row['id'],
            space_id=row['space_id'],
            user_id=row['user_id'],
            reservation_date=parse_local_date(_row_get(row, 'reservation_date')),
            start_slot=row['start_slot'],
            end_slot=row['end_slot'],
            status=row['status'],
            notes=_row_get(row, 'notes'),
            recurring_reservation_id=_row_get(row, 'recurring_reservation_id'),
            created_at=_row_get(row, 'created_at'),
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'space_id': self.space_id,
            'user_id': self.user_id,
            'reservation_date': format_iso_date(self.reservation_date),
            'start_slot': self.start_slot,
            'end_slot': self.end_slot,
            'status': self.status,
            'notes': self.notes,
            'recurring_reservation_id': self.recurring_reservation_id,
            'created_at': self.created_at,
        }


@dataclass(frozen=True)
class RecurringReservation:
    """Block on a space repeating on given weekdays within a date range."""
    id: int
    space_id: int
    user_id: int
    start_date: date | None
    end_date: date | None
    weekdays: frozenset = field(default_factory=frozenset)
    start_slot: int = 1
    end_slot: int = 1
    active: bool = True
    notes: str | None = None
    created_at: str | None = None

    @property
    def slot_range(self) -> SlotRange:
        return SlotRange(self.start_slot, self.end_slot)

    @classmethod
    def from_row(cls, row) -> 'RecurringReservation':
        """Build from a recurring_reservations table row (or equivalent dict)."""
        return cls(
            id=row['id'],
            space_id=row['space_id'],
            user_id=row['user_id'],
            start_date=parse_local_date(_row_get(row, 'start_date')),
            end_date=parse_local_date(_row_get(row, 'end_date')),
            weekdays=parse_weekdays(_row_get(row, 'weekdays')),
            start_slot=row['start_slot'],
            end_slot=row['end_slot'],
            active=bool(_row_get(row, 'active', 0)),
            notes=_row_get(row, 'notes'),
            created_at=_row_get(row, 'created_at'),
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'space_id': self.space_id,
            'user_id': self.user_id,
            'start_date': format_iso_date(self.start_date),
            'end_date': format_iso_date(self.end_date),
            'weekdays': sorted(self.weekdays),
            'start_slot': self.start_slot,
            'end_slot': self.end_slot,
            'active': self.active,
            'notes': self.notes,
            'created_at': self.created_at,
        }


@dataclass(frozen=True)
class BookingCandidate:
    """Requested space/date/slot range being checked for conflicts."""
    space_id: int
    reservation_date: date
    start_slot: int
    end_slot: int

    @property
    def slot_range(self) -> SlotRange:
        return SlotRange(self.start_slot, self.end_slot)

    @classmethod
    def create(cls, space_id, reservation_date, start_slot, end_slot) -> 'BookingCandidate':
        """
        Validate raw input and build a candidate.

        Args:
            space_id: Space ID
            reservation_date: 'YYYY-MM-DD' string or date
            start_slot: First slot (inclusive)
            end_slot: Last slot (inclusive)

        Raises:
            BookingValidationError: Unparsable date, unknown slot or
                inverted slot range
        """
        parsed_date = parse_local_date(reservation_date)
        if parsed_date is None:
            raise BookingValidationError('Data inválida', field='reservation_date')

        slots = make_slot_range(start_slot, end_slot)
        return cls(
            space_id=space_id,
            reservation_date=parsed_date,
            start_slot=slots.start,
            end_slot=slots.end,
        )

    @classmethod
    def from_reservation(cls, reservation: Reservation) -> 'BookingCandidate':
        return cls.create(
            reservation.space_id,
            reservation.reservation_date,
            reservation.start_slot,
            reservation.end_slot,
        )
