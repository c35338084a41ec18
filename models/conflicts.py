"""
Conflict detection and availability decisions.

Pure functions over an in-memory snapshot of a space's reservations and
recurring reservations. Nothing here reads or writes the database.

Priority (highest first):
    1. Active recurring reservation  -> slot unavailable, always
    2. Approved reservation          -> slot unavailable
    3. Pending reservation           -> still available, but reported
    4. Nothing                       -> available
"""

from dataclasses import dataclass, field

from .reservation import (
    BookingCandidate,
    Reservation,
    RecurringReservation,
    BLOCKING_STATUSES,
    STATUS_APPROVED,
    STATUS_PENDING,
)
from .recurring_schedule import is_active_on
from .slot import SLOT_SCHEDULE, SlotRange, overlaps


# Unavailability reasons
REASON_RECURRING = 'recurring'
REASON_APPROVED = 'approved'
REASON_PENDING = 'pending'

# Day grid cell statuses
GRID_RECURRING = 'fixo'
GRID_APPROVED = 'aprovado'
GRID_PENDING = 'conflito'
GRID_AVAILABLE = 'disponivel'


# =============================================================================
# CONFLICT SET
# =============================================================================

@dataclass
class ConflictSet:
    """Reservations and recurring reservations competing with a candidate."""
    reservations: list = field(default_factory=list)
    recurring: list = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return len(self.reservations) + len(self.recurring) > 0

    @property
    def approved(self) -> list:
        return [r for r in self.reservations if r.status == STATUS_APPROVED]

    @property
    def pending(self) -> list:
        return [r for r in self.reservations if r.status == STATUS_PENDING]

    def to_dict(self) -> dict:
        return {
            'has_conflicts': self.has_conflicts,
            'reservations': [r.to_dict() for r in self.reservations],
            'recurring': [r.to_dict() for r in self.recurring],
            'approved_ids': [r.id for r in self.approved],
            'pending_ids': [r.id for r in self.pending],
        }


@dataclass
class AvailabilityVerdict:
    """Availability decision plus the conflicts behind it."""
    available: bool
    reason: str | None
    conflicts: ConflictSet

    def to_dict(self) -> dict:
        return {
            'available': self.available,
            'reason': self.reason,
            'conflicts': self.conflicts.to_dict(),
        }


# =============================================================================
# DETECTION
# =============================================================================

def _reservation_conflicts(candidate: BookingCandidate, reservation: Reservation,
                           exclude_reservation_id) -> bool:
    if exclude_reservation_id is not None and reservation.id == exclude_reservation_id:
        return False
    if reservation.status not in BLOCKING_STATUSES:
        return False
    if reservation.space_id != candidate.space_id:
        return False
    if reservation.reservation_date != candidate.reservation_date:
        return False
    return overlaps(candidate.slot_range, reservation.slot_range)


def _recurring_conflicts(candidate: BookingCandidate, rec: RecurringReservation) -> bool:
    if rec.space_id != candidate.space_id:
        return False
    if not is_active_on(rec, candidate.reservation_date):
        return False
    return overlaps(candidate.slot_range, rec.slot_range)


def detect_conflicts(
    candidate: BookingCandidate,
    reservations: list,
    recurring: list,
    exclude_reservation_id: int = None
) -> ConflictSet:
    """
    Find every reservation and recurring reservation overlapping a candidate.

    Linear scan over the snapshot; rejected reservations never match.

    Args:
        candidate: Validated booking candidate
        reservations: Reservation snapshot
        recurring: RecurringReservation snapshot
        exclude_reservation_id: Reservation to ignore (the one being resolved)

    Returns:
        ConflictSet
    """
    conflicting_reservations = [
        r for r in reservations
        if _reservation_conflicts(candidate, r, exclude_reservation_id)
    ]
    conflicting_recurring = [
        rec for rec in recurring
        if _recurring_conflicts(candidate, rec)
    ]
    return ConflictSet(
        reservations=conflicting_reservations,
        recurring=conflicting_recurring,
    )


# =============================================================================
# AVAILABILITY
# =============================================================================

def availability_from_conflicts(conflicts: ConflictSet) -> AvailabilityVerdict:
    """Apply the priority policy to an already computed ConflictSet."""
    if conflicts.recurring:
        return AvailabilityVerdict(False, REASON_RECURRING, conflicts)
    if conflicts.approved:
        return AvailabilityVerdict(False, REASON_APPROVED, conflicts)
    if conflicts.pending:
        return AvailabilityVerdict(True, REASON_PENDING, conflicts)
    return AvailabilityVerdict(True, None, conflicts)


def check_availability(
    candidate: BookingCandidate,
    reservations: list,
    recurring: list,
    exclude_reservation_id: int = None
) -> AvailabilityVerdict:
    """
    Availability verdict with reason and conflicts.

    A slot contested only by pending requests stays available (requests
    compete and the approver picks one); reason is then 'pending' so the
    competition can be shown.
    """
    conflicts = detect_conflicts(candidate, reservations, recurring, exclude_reservation_id)
    return availability_from_conflicts(conflicts)


def is_available(
    candidate: BookingCandidate,
    reservations: list,
    recurring: list,
    exclude_reservation_id: int = None
) -> bool:
    """True unless an active recurring or approved reservation overlaps."""
    return check_availability(candidate, reservations, recurring, exclude_reservation_id).available


# =============================================================================
# DAY GRID
# =============================================================================

def get_day_slot_grid(space_id: int, reservation_date, reservations: list, recurring: list) -> list:
    """
    Per-slot occupation of a space on a date.

    Args:
        space_id: Space ID
        reservation_date: 'YYYY-MM-DD' string or date
        reservations: Reservation snapshot
        recurring: RecurringReservation snapshot

    Returns:
        list: One dict per slot with 'slot', 'status', 'label',
            'reservation_ids' and 'recurring_ids'
    """
    grid = []
    for slot in SLOT_SCHEDULE:
        candidate = BookingCandidate.create(space_id, reservation_date, slot, slot)
        conflicts = detect_conflicts(candidate, reservations, recurring)

        if conflicts.recurring:
            status, label = GRID_RECURRING, 'Fixo'
            reservation_ids = []
        elif conflicts.approved:
            status, label = GRID_APPROVED, 'Aprovado'
            reservation_ids = [r.id for r in conflicts.approved]
        elif conflicts.pending:
            pending = conflicts.pending
            status = GRID_PENDING
            label = f'{len(pending)} conflitos' if len(pending) > 1 else 'Pendente'
            reservation_ids = [r.id for r in pending]
        else:
            status, label = GRID_AVAILABLE, 'Disponível'
            reservation_ids = []

        grid.append({
            'slot': slot,
            'start': SLOT_SCHEDULE[slot][0],
            'end': SLOT_SCHEDULE[slot][1],
            'status': status,
            'label': label,
            'reservation_ids': reservation_ids,
            'recurring_ids': [rec.id for rec in conflicts.recurring],
        })
    return grid


def find_shadowed_reservations(rec: RecurringReservation, reservations: list) -> list:
    """
    Pending/approved reservations that fall under a recurring block.

    Used to warn managers when a new recurring reservation overlaps
    requests that already exist; nothing is modified.
    """
    rec_range = SlotRange(rec.start_slot, rec.end_slot)
    return [
        r for r in reservations
        if r.status in BLOCKING_STATUSES
        and r.space_id == rec.space_id
        and is_active_on(rec, r.reservation_date)
        and overlaps(rec_range, r.slot_range)
    ]
