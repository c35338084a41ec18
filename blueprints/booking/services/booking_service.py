"""
Business logic for booking requests and recurring reservations.

Routes validate the shape of the input with forms; this module applies the
booking rules (date policy, active space, availability) and persists.
The availability check and the insert share one write transaction.
"""

import logging
from flask import current_app

from database import write_transaction
from models.booking_errors import BookingValidationError, SlotUnavailableError
from models.conflicts import (
    REASON_PENDING,
    check_availability,
    find_shadowed_reservations,
    get_day_slot_grid,
)
from models.recurring_reservation import (
    create_recurring_reservation,
    get_recurring_by_id,
    update_recurring_reservation,
)
from models.reservation import BookingCandidate
from models.reservation_crud import (
    create_reservation,
    get_reservation_details,
    get_space_snapshot,
)
from models.slot import make_slot_range
from models.space import get_space_by_id
from utils.datetime_helpers import get_today
from utils.messages import MESSAGES
from utils.validators import validate_booking_date, validate_weekdays, sanitize_input

logger = logging.getLogger(__name__)


def ensure_space_bookable(space_id: int) -> dict:
    """
    Get the space or raise if it cannot receive bookings.

    Raises:
        BookingValidationError: Space missing or inactive
    """
    space = get_space_by_id(space_id)
    if space is None:
        raise BookingValidationError(MESSAGES['space_not_found'], field='space_id')
    if not space['active']:
        raise BookingValidationError(MESSAGES['space_inactive'], field='space_id')
    return space


def build_candidate(space_id, reservation_date, start_slot, end_slot) -> BookingCandidate:
    """BookingCandidate after the calendar policy for new requests."""
    candidate = BookingCandidate.create(space_id, reservation_date, start_slot, end_slot)

    is_valid, error = validate_booking_date(
        candidate.reservation_date,
        get_today(),
        max_months_ahead=current_app.config.get('BOOKING_MAX_MONTHS_AHEAD', 6),
        allow_sunday=current_app.config.get('BOOKING_ALLOW_SUNDAY', False),
    )
    if not is_valid:
        raise BookingValidationError(error, field='reservation_date')

    return candidate


def submit_reservation(user_id: int, space_id: int, reservation_date, start_slot: int,
                       end_slot: int, notes: str = None) -> tuple:
    """
    Create a pending reservation request.

    Args:
        user_id: Requesting user
        space_id: Space ID
        reservation_date: 'YYYY-MM-DD' string or date
        start_slot: First slot
        end_slot: Last slot
        notes: Optional free text

    Returns:
        Tuple of (reservation details dict, warning message or None)

    Raises:
        BookingValidationError: Invalid input or booking rule violation
        SlotUnavailableError: Slot taken by a recurring or approved booking
    """
    ensure_space_bookable(space_id)
    candidate = build_candidate(space_id, reservation_date, start_slot, end_slot)

    max_length = current_app.config.get('BOOKING_NOTES_MAX_LENGTH', 500)

    with write_transaction():
        reservations, recurring = get_space_snapshot(space_id, candidate.reservation_date)
        verdict = check_availability(candidate, reservations, recurring)

        if not verdict.available:
            logger.info(
                f"Request by user {user_id} for space {space_id} on "
                f"{candidate.reservation_date} refused: {verdict.reason}"
            )
            raise SlotUnavailableError(verdict.reason, verdict.conflicts)

        reservation_id = create_reservation(
            space_id=space_id,
            user_id=user_id,
            reservation_date=candidate.reservation_date,
            start_slot=candidate.start_slot,
            end_slot=candidate.end_slot,
            notes=sanitize_input(notes, max_length) or None,
        )
    logger.info(f"Reservation {reservation_id} requested by user {user_id}")

    details = get_reservation_details(reservation_id)

    from extensions import notifier
    notifier.notify_new_request(details)

    warning = None
    if verdict.reason == REASON_PENDING:
        warning = MESSAGES['pending_competition']
        details['competing_ids'] = sorted(r.id for r in verdict.conflicts.pending)

    return details, warning


def get_space_day_grid(space_id: int, reservation_date) -> list:
    """Slot grid of a space for one date."""
    candidate = BookingCandidate.create(space_id, reservation_date, 1, 1)
    reservations, recurring = get_space_snapshot(space_id, candidate.reservation_date)
    return get_day_slot_grid(space_id, candidate.reservation_date, reservations, recurring)


def get_candidate_conflicts(space_id: int, reservation_date, start_slot, end_slot,
                            exclude_reservation_id: int = None):
    """AvailabilityVerdict for an arbitrary candidate (no date policy)."""
    candidate = BookingCandidate.create(space_id, reservation_date, start_slot, end_slot)
    reservations, recurring = get_space_snapshot(space_id, candidate.reservation_date)
    return check_availability(candidate, reservations, recurring, exclude_reservation_id)


# =============================================================================
# RECURRING RESERVATIONS
# =============================================================================

def _validate_recurring_fields(start_date, end_date, weekdays, start_slot, end_slot) -> None:
    make_slot_range(start_slot, end_slot)
    is_valid, error = validate_weekdays(sorted(weekdays or []))
    if not is_valid:
        raise BookingValidationError(error, field='weekdays')
    if start_date >= end_date:
        raise BookingValidationError(
            'Data de início deve ser anterior à data de fim', field='end_date'
        )


def _shadowed(recurring_id: int) -> list:
    rec = get_recurring_by_id(recurring_id)
    reservations, _ = get_space_snapshot(rec.space_id)
    return find_shadowed_reservations(rec, reservations)


def create_recurring(user_id: int, space_id: int, start_date, end_date, weekdays,
                     start_slot: int, end_slot: int, notes: str = None) -> tuple:
    """
    Create a recurring reservation and report what it shadows.

    Existing pending/approved reservations under the new block are left
    untouched; they are returned so the manager can act on them.

    Returns:
        Tuple of (RecurringReservation, list of shadowed Reservation)
    """
    ensure_space_bookable(space_id)
    _validate_recurring_fields(start_date, end_date, weekdays, start_slot, end_slot)

    max_length = current_app.config.get('BOOKING_NOTES_MAX_LENGTH', 500)
    recurring_id = create_recurring_reservation(
        space_id=space_id,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        weekdays=weekdays,
        start_slot=start_slot,
        end_slot=end_slot,
        notes=sanitize_input(notes, max_length) or None,
    )
    logger.info(f"Recurring reservation {recurring_id} created for space {space_id}")

    shadowed = _shadowed(recurring_id)
    if shadowed:
        logger.warning(
            f"Recurring reservation {recurring_id} shadows reservations "
            f"{[r.id for r in shadowed]}"
        )
    return get_recurring_by_id(recurring_id), shadowed


def update_recurring(recurring_id: int, **fields) -> tuple:
    """
    Update a recurring reservation, keeping its invariants.

    Returns:
        Tuple of (RecurringReservation, list of shadowed Reservation)
    """
    current = get_recurring_by_id(recurring_id)
    _validate_recurring_fields(
        fields.get('start_date', current.start_date),
        fields.get('end_date', current.end_date),
        fields.get('weekdays', current.weekdays),
        fields.get('start_slot', current.start_slot),
        fields.get('end_slot', current.end_slot),
    )
    if 'notes' in fields:
        max_length = current_app.config.get('BOOKING_NOTES_MAX_LENGTH', 500)
        fields['notes'] = sanitize_input(fields['notes'], max_length) or None

    update_recurring_reservation(recurring_id, **fields)
    logger.info(f"Recurring reservation {recurring_id} updated: {sorted(fields)}")
    return get_recurring_by_id(recurring_id), _shadowed(recurring_id)
