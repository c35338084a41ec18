"""
Slot model and interval overlap.

A day is split into a fixed, ordered set of class periods ("aulas").
Bookings always cover a contiguous, inclusive range of slot indexes.
"""

from dataclasses import dataclass
from datetime import time

from .booking_errors import BookingValidationError, UnknownSlot


# =============================================================================
# CONSTANTS
# =============================================================================

SLOT_SCHEDULE = {
    1: ('07:20', '08:10'),
    2: ('08:10', '09:00'),
    3: ('09:20', '10:10'),
    4: ('10:10', '11:00'),
    5: ('11:00', '11:50'),
    6: ('13:00', '13:50'),
    7: ('13:50', '14:40'),
    8: ('15:00', '15:50'),
    9: ('15:50', '16:40'),
}

FIRST_SLOT = min(SLOT_SCHEDULE)
LAST_SLOT = max(SLOT_SCHEDULE)


# =============================================================================
# VALUE TYPES
# =============================================================================

@dataclass(frozen=True)
class SlotInterval:
    """Wall-clock interval of a single slot."""
    slot: int
    start: time
    end: time

    def to_dict(self) -> dict:
        return {
            'slot': self.slot,
            'start': self.start.strftime('%H:%M'),
            'end': self.end.strftime('%H:%M'),
        }


@dataclass(frozen=True)
class SlotRange:
    """Inclusive range of slot indexes (start <= end)."""
    start: int
    end: int

    def __post_init__(self):
        if self.start > self.end:
            raise BookingValidationError(
                'Aula de início deve ser anterior ou igual à aula de fim',
                field='end_slot'
            )

    def __contains__(self, slot: int) -> bool:
        return self.start <= slot <= self.end

    def __len__(self) -> int:
        return self.end - self.start + 1


# =============================================================================
# SLOT LOOKUP
# =============================================================================

def is_valid_slot(slot) -> bool:
    """Check whether a value is a known slot index."""
    return isinstance(slot, int) and not isinstance(slot, bool) and slot in SLOT_SCHEDULE


def get_slot_interval(slot: int) -> SlotInterval:
    """
    Map a slot index to its wall-clock interval.

    Args:
        slot: Slot index (1..9)

    Returns:
        SlotInterval

    Raises:
        UnknownSlot: If the slot is not part of the schedule
    """
    if not is_valid_slot(slot):
        raise UnknownSlot(slot)

    start, end = SLOT_SCHEDULE[slot]
    return SlotInterval(
        slot=slot,
        start=time.fromisoformat(start),
        end=time.fromisoformat(end),
    )


def make_slot_range(start_slot, end_slot) -> SlotRange:
    """
    Build a validated SlotRange.

    Raises:
        UnknownSlot: If either index is outside the schedule
        BookingValidationError: If start_slot > end_slot
    """
    if not is_valid_slot(start_slot):
        raise UnknownSlot(start_slot, field='start_slot')
    if not is_valid_slot(end_slot):
        raise UnknownSlot(end_slot, field='end_slot')
    return SlotRange(start_slot, end_slot)


def get_slot_options() -> list:
    """List of slot choices with their labels."""
    return [
        {
            'value': slot,
            'label': f'{slot}ª aula ({start}-{end})',
            'start': start,
            'end': end,
        }
        for slot, (start, end) in SLOT_SCHEDULE.items()
    ]


# =============================================================================
# OVERLAP
# =============================================================================

def overlaps(a: SlotRange, b: SlotRange) -> bool:
    """Inclusive overlap: ranges sharing at least one slot conflict."""
    return a.start <= b.end and a.end >= b.start


# =============================================================================
# FORMATTING
# =============================================================================

def format_slot_range(start_slot: int, end_slot: int, with_times: bool = True) -> str:
    """
    Human readable slot range.

    Examples:
        format_slot_range(2, 2)  -> '2ª aula (08:10-09:00)'
        format_slot_range(1, 3)  -> '1ª à 3ª aula (07:20-10:10)'
    """
    if start_slot == end_slot:
        label = f'{start_slot}ª aula'
    else:
        label = f'{start_slot}ª à {end_slot}ª aula'

    if not with_times or start_slot not in SLOT_SCHEDULE or end_slot not in SLOT_SCHEDULE:
        return label

    return f'{label} ({SLOT_SCHEDULE[start_slot][0]}-{SLOT_SCHEDULE[end_slot][1]})'
