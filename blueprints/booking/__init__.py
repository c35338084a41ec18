"""
Booking blueprint initialization.
Registers all space-booking routes and maps booking errors to JSON.

Individual route logic is in:
- routes/spaces.py - Space CRUD
- routes/reservations.py - Requests, availability, day grid
- routes/approvals.py - Approval queue and decisions
- routes/recurring.py - Recurring reservations ("agendamentos fixos")
"""

import logging
from flask import Blueprint

from models.approval import OUTCOME_MESSAGES, BLOCKED_BY_RECURRING, BLOCKED_BY_APPROVED
from models.booking_errors import (
    ApprovalRetryExhausted,
    BookingValidationError,
    ReservationNotFoundError,
    SlotUnavailableError,
)
from models.conflicts import REASON_RECURRING
from utils.api_response import api_error
from utils.messages import MESSAGES

logger = logging.getLogger(__name__)

booking_bp = Blueprint('booking', __name__)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@booking_bp.errorhandler(BookingValidationError)
def handle_validation_error(error):
    return api_error(error.message, status=400, field=error.field)


@booking_bp.errorhandler(SlotUnavailableError)
def handle_slot_unavailable(error):
    outcome = BLOCKED_BY_RECURRING if error.reason == REASON_RECURRING else BLOCKED_BY_APPROVED
    return api_error(
        OUTCOME_MESSAGES[outcome],
        status=409,
        reason=outcome,
        conflicts=error.conflicts.to_dict() if error.conflicts else None
    )


@booking_bp.errorhandler(ReservationNotFoundError)
def handle_reservation_not_found(error):
    return api_error(MESSAGES['reservation_not_found'], status=404)


@booking_bp.errorhandler(ApprovalRetryExhausted)
def handle_retry_exhausted(error):
    logger.error(f"Approval retries exhausted: {error}")
    return api_error(MESSAGES['concurrent_modification'], status=409, reason='concurrent_modification')


# =============================================================================
# REGISTER ROUTES
# =============================================================================

from blueprints.booking.routes import spaces, reservations, approvals, recurring  # noqa: E402

spaces.register_routes(booking_bp)
reservations.register_routes(booking_bp)
approvals.register_routes(booking_bp)
recurring.register_routes(booking_bp)
