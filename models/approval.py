"""
Approval resolution.

Turns an approver action on a pending reservation into a batch of status
commands. Nothing is written here: the caller applies the whole batch in
one transaction, each command guarded by its expected current status.

State machine:
    pendente -> aprovado | rejeitado   (both terminal)

Approving a reservation rejects every other pending reservation competing
for the same space/date/slots. Approval is refused (no commands) while an
active recurring or an approved reservation overlaps.
"""

import logging
from dataclasses import dataclass, field

from .conflicts import ConflictSet, detect_conflicts
from .reservation import (
    BookingCandidate,
    Reservation,
    STATUS_APPROVED,
    STATUS_PENDING,
    STATUS_REJECTED,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

ACTION_APPROVE = 'approve'
ACTION_REJECT = 'reject'
APPROVAL_ACTIONS = (ACTION_APPROVE, ACTION_REJECT)

# Outcomes that stop an action without emitting commands
BLOCKED_BY_RECURRING = 'blocked_by_recurring'
BLOCKED_BY_APPROVED = 'blocked_by_approved'
NOT_PENDING = 'not_pending'

OUTCOME_MESSAGES = {
    BLOCKED_BY_RECURRING: 'Este horário está bloqueado por um agendamento fixo',
    BLOCKED_BY_APPROVED: 'Este horário já está aprovado para outro usuário',
    NOT_PENDING: 'Somente agendamentos pendentes podem ser aprovados ou rejeitados',
}


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class StatusCommand:
    """Set reservation status, provided it still has expected_status."""
    reservation_id: int
    new_status: str
    expected_status: str = STATUS_PENDING

    def to_dict(self) -> dict:
        return {
            'reservation_id': self.reservation_id,
            'new_status': self.new_status,
            'expected_status': self.expected_status,
        }


@dataclass
class ResolutionResult:
    """Outcome of an approve/reject decision."""
    action: str
    target_id: int
    commands: list = field(default_factory=list)
    auto_rejected_ids: list = field(default_factory=list)
    error: str | None = None
    conflicts: ConflictSet | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def auto_rejected_count(self) -> int:
        return len(self.auto_rejected_ids)

    @property
    def message(self) -> str | None:
        return OUTCOME_MESSAGES.get(self.error)

    def to_dict(self) -> dict:
        return {
            'action': self.action,
            'target_id': self.target_id,
            'ok': self.ok,
            'error': self.error,
            'message': self.message,
            'commands': [c.to_dict() for c in self.commands],
            'auto_rejected_ids': list(self.auto_rejected_ids),
            'auto_rejected_count': self.auto_rejected_count,
            'conflicts': self.conflicts.to_dict() if self.conflicts else None,
        }


# =============================================================================
# RESOLUTION
# =============================================================================

def resolve_approval(
    action: str,
    target: Reservation,
    reservations: list,
    recurring: list
) -> ResolutionResult:
    """
    Decide the status commands for an approve or reject action.

    Args:
        action: ACTION_APPROVE or ACTION_REJECT
        target: Reservation being resolved
        reservations: Reservation snapshot for the target's space
        recurring: RecurringReservation snapshot for the target's space

    Returns:
        ResolutionResult: commands to apply atomically, or an error
            outcome with no commands

    Raises:
        ValueError: Unknown action
        BookingValidationError: Target has a malformed date or slot range
    """
    if action not in APPROVAL_ACTIONS:
        raise ValueError(f'Unknown approval action: {action!r}')

    if action == ACTION_REJECT:
        if target.status != STATUS_PENDING:
            return ResolutionResult(action=action, target_id=target.id, error=NOT_PENDING)
        return ResolutionResult(
            action=action,
            target_id=target.id,
            commands=[StatusCommand(target.id, STATUS_REJECTED)],
        )

    candidate = BookingCandidate.from_reservation(target)
    conflicts = detect_conflicts(
        candidate, reservations, recurring,
        exclude_reservation_id=target.id
    )

    if conflicts.recurring:
        logger.info(
            f"Approval of reservation {target.id} blocked by recurring "
            f"{[rec.id for rec in conflicts.recurring]}"
        )
        return ResolutionResult(
            action=action, target_id=target.id,
            error=BLOCKED_BY_RECURRING, conflicts=conflicts
        )

    if conflicts.approved:
        logger.info(
            f"Approval of reservation {target.id} blocked by approved "
            f"{[r.id for r in conflicts.approved]}"
        )
        return ResolutionResult(
            action=action, target_id=target.id,
            error=BLOCKED_BY_APPROVED, conflicts=conflicts
        )

    if target.status != STATUS_PENDING:
        return ResolutionResult(
            action=action, target_id=target.id,
            error=NOT_PENDING, conflicts=conflicts
        )

    rivals = sorted(r.id for r in conflicts.pending)
    commands = [StatusCommand(rival_id, STATUS_REJECTED) for rival_id in rivals]
    commands.append(StatusCommand(target.id, STATUS_APPROVED))

    return ResolutionResult(
        action=action,
        target_id=target.id,
        commands=commands,
        auto_rejected_ids=rivals,
        conflicts=conflicts,
    )


def resolve_bulk_rejection(targets: list) -> list:
    """
    Reject several reservations independently ("reject all").

    Each target gets its own Reject resolution; there is no cascade and
    no requirement that the targets conflict with each other.

    Returns:
        list: ResolutionResult per target, in input order
    """
    return [
        resolve_approval(ACTION_REJECT, target, [], [])
        for target in targets
    ]


def group_pending_conflicts(pending: list, reservations: list, recurring: list) -> list:
    """
    Approver's view of pending requests and what each competes with.

    Args:
        pending: Pending reservations to present
        reservations: Reservation snapshot
        recurring: RecurringReservation snapshot

    Returns:
        list: dicts with 'reservation', 'competing_ids', 'blocked_by'
            ('recurring', 'approved' or None) and 'conflicts'
    """
    queue = []
    for reservation in pending:
        candidate = BookingCandidate.from_reservation(reservation)
        conflicts = detect_conflicts(
            candidate, reservations, recurring,
            exclude_reservation_id=reservation.id
        )
        if conflicts.recurring:
            blocked_by = 'recurring'
        elif conflicts.approved:
            blocked_by = 'approved'
        else:
            blocked_by = None

        queue.append({
            'reservation': reservation.to_dict(),
            'competing_ids': sorted(r.id for r in conflicts.pending),
            'blocked_by': blocked_by,
            'conflicts': conflicts.to_dict(),
        })
    return queue
