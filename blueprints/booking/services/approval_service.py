"""
Approval workflow.

Each action reads a snapshot of the space, asks models.approval for the
status commands and applies them, all inside one write transaction, so no
request can be inserted between the snapshot and the batch. When another
approver still got there first the batch misses its expected status, is
rolled back, and the whole decision is recomputed from a fresh snapshot.
"""

import logging
from collections import defaultdict
from flask import current_app

from database import write_transaction
from models.approval import (
    ACTION_APPROVE,
    ACTION_REJECT,
    NOT_PENDING,
    ResolutionResult,
    group_pending_conflicts,
    resolve_approval,
    resolve_bulk_rejection,
)
from models.booking_errors import (
    ApprovalRetryExhausted,
    ReservationNotFoundError,
    StaleReservationError,
)
from models.reservation import STATUS_PENDING
from models.reservation_crud import (
    apply_status_commands,
    get_reservation_by_id,
    get_reservation_details,
    get_reservations,
    get_space_snapshot,
)

logger = logging.getLogger(__name__)


def _max_retries() -> int:
    return max(1, int(current_app.config.get('APPROVAL_MAX_RETRIES', 3)))


def _notify_outcome(result: ResolutionResult) -> None:
    """Notify requesters once the batch is committed."""
    from extensions import notifier

    target = get_reservation_details(result.target_id)
    if result.action == ACTION_APPROVE:
        notifier.notify_approved(target)
        for rival_id in result.auto_rejected_ids:
            notifier.notify_rejected(get_reservation_details(rival_id), auto=True)
    else:
        notifier.notify_rejected(target)


def _resolve(action: str, reservation_id: int, approver_id: int, notes: str = '') -> ResolutionResult:
    for attempt in range(1, _max_retries() + 1):
        try:
            with write_transaction():
                target = get_reservation_by_id(reservation_id)
                if target is None:
                    raise ReservationNotFoundError(reservation_id)

                reservations, recurring = get_space_snapshot(target.space_id,
                                                             target.reservation_date)
                result = resolve_approval(action, target, reservations, recurring)

                if not result.ok:
                    logger.info(f"{action} of reservation {reservation_id} refused: {result.error}")
                    return result

                apply_status_commands(result.commands, changed_by=approver_id, notes=notes)
        except StaleReservationError as e:
            logger.warning(
                f"{action} of reservation {reservation_id} hit a concurrent change "
                f"(attempt {attempt}): {e}"
            )
            continue

        logger.info(
            f"Reservation {reservation_id} resolved ({action}) by user {approver_id}; "
            f"auto-rejected {result.auto_rejected_ids}"
        )
        _notify_outcome(result)
        return result

    raise ApprovalRetryExhausted(
        f'Reservation {reservation_id}: gave up after {_max_retries()} attempts'
    )


def approve_reservation(reservation_id: int, approver_id: int, notes: str = '') -> ResolutionResult:
    """
    Approve a pending reservation and reject its pending rivals.

    Raises:
        ReservationNotFoundError: Unknown reservation
        ApprovalRetryExhausted: Concurrent modifications on every attempt
    """
    return _resolve(ACTION_APPROVE, reservation_id, approver_id, notes or 'Aprovado')


def reject_reservation(reservation_id: int, approver_id: int, notes: str = '') -> ResolutionResult:
    """Reject a pending reservation (never blocked by conflicts)."""
    return _resolve(ACTION_REJECT, reservation_id, approver_id, notes or 'Rejeitado')


def reject_many(reservation_ids: list, approver_id: int, notes: str = '') -> dict:
    """
    Reject several reservations in one transaction.

    Reservations that are no longer pending are skipped and reported.

    Returns:
        dict with 'rejected_ids' and 'skipped_ids'

    Raises:
        ReservationNotFoundError: An ID does not exist
        ApprovalRetryExhausted: Concurrent modifications on every attempt
    """
    unique_ids = sorted(set(reservation_ids))

    for attempt in range(1, _max_retries() + 1):
        try:
            with write_transaction():
                targets = []
                for reservation_id in unique_ids:
                    target = get_reservation_by_id(reservation_id)
                    if target is None:
                        raise ReservationNotFoundError(reservation_id)
                    targets.append(target)

                results = resolve_bulk_rejection(targets)
                commands = [command for result in results for command in result.commands]
                apply_status_commands(commands, changed_by=approver_id,
                                      notes=notes or 'Rejeitado')
        except StaleReservationError as e:
            logger.warning(f"Bulk rejection hit a concurrent change (attempt {attempt}): {e}")
            continue

        rejected = [r for r in results if r.ok]
        skipped_ids = [r.target_id for r in results if r.error == NOT_PENDING]
        logger.info(
            f"User {approver_id} rejected {[r.target_id for r in rejected]}; "
            f"skipped {skipped_ids}"
        )
        for result in rejected:
            _notify_outcome(result)

        return {
            'rejected_ids': [r.target_id for r in rejected],
            'skipped_ids': skipped_ids,
        }

    raise ApprovalRetryExhausted(f'Bulk rejection gave up after {_max_retries()} attempts')


def get_pending_queue(space_ids: list) -> list:
    """
    Pending requests of the given spaces with what each competes with.

    Returns:
        list: group_pending_conflicts entries enriched with display details
    """
    pending = get_reservations(status=STATUS_PENDING, space_ids=space_ids)

    by_space_date = defaultdict(list)
    for reservation in pending:
        by_space_date[(reservation.space_id, reservation.reservation_date)].append(reservation)

    queue = []
    for (space_id, reservation_date), items in by_space_date.items():
        reservations, recurring = get_space_snapshot(space_id, reservation_date)
        for entry in group_pending_conflicts(items, reservations, recurring):
            details = get_reservation_details(entry['reservation']['id'])
            entry['space_name'] = details['space_name']
            entry['user_name'] = details['user_name']
            queue.append(entry)

    queue.sort(key=lambda e: (e['reservation']['reservation_date'] or '',
                              e['reservation']['start_slot'], e['reservation']['id']))
    return queue
