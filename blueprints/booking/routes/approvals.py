"""
Approval API routes.
Pending queue and approve/reject decisions for space managers.
"""

import logging
from flask import request
from flask_login import login_required, current_user

from blueprints.booking.forms import DecisionForm, BulkRejectForm
from blueprints.booking.services.approval_service import (
    approve_reservation,
    reject_reservation,
    reject_many,
    get_pending_queue,
)
from models.reservation_crud import get_reservation_by_id
from utils.api_response import api_success, api_error, api_form_errors
from utils.decorators import permission_required
from utils.messages import MESSAGES
from utils.permissions import can_manage_space, get_manageable_space_ids

logger = logging.getLogger(__name__)


def _check_target(reservation_id):
    """Error response unless the reservation exists and the user manages its space."""
    target = get_reservation_by_id(reservation_id)
    if target is None:
        return api_error(MESSAGES['reservation_not_found'], status=404)
    if not can_manage_space(current_user, target.space_id):
        return api_error(MESSAGES['permission_denied'], status=403)
    return None


def _outcome_response(result, success_message):
    if not result.ok:
        return api_error(
            result.message,
            status=409,
            reason=result.error,
            conflicts=result.conflicts.to_dict() if result.conflicts else None
        )

    warning = None
    if result.auto_rejected_count:
        warning = MESSAGES['auto_rejected'].format(count=result.auto_rejected_count)
    return api_success(data=result.to_dict(), message=success_message, warning=warning)


def register_routes(bp):
    """Register approval routes on the blueprint."""

    @bp.route('/approvals/pending', methods=['GET'])
    @login_required
    @permission_required('booking.approvals.manage')
    def pending_queue():
        """
        Pending requests of the spaces the user manages.

        Query params:
            space_id: Restrict to one space (optional)
        """
        space_ids = get_manageable_space_ids(current_user)
        space_id = request.args.get('space_id', type=int)
        if space_id is not None:
            if space_id not in space_ids:
                return api_error(MESSAGES['permission_denied'], status=403)
            space_ids = [space_id]

        queue = get_pending_queue(space_ids)
        return api_success(data=queue, count=len(queue))

    @bp.route('/reservations/<int:reservation_id>/approve', methods=['POST'])
    @login_required
    @permission_required('booking.approvals.manage')
    def approve(reservation_id):
        """
        Approve a pending reservation.

        Competing pending requests are rejected in the same transaction.
        409 when a recurring or approved reservation blocks the slot or the
        reservation is no longer pending.
        """
        error = _check_target(reservation_id)
        if error:
            return error

        form = DecisionForm()
        if not form.validate():
            return api_form_errors(form)

        result = approve_reservation(reservation_id, current_user.id, form.notes.data or '')
        return _outcome_response(result, MESSAGES['reservation_approved'])

    @bp.route('/reservations/<int:reservation_id>/reject', methods=['POST'])
    @login_required
    @permission_required('booking.approvals.manage')
    def reject(reservation_id):
        """Reject a pending reservation."""
        error = _check_target(reservation_id)
        if error:
            return error

        form = DecisionForm()
        if not form.validate():
            return api_form_errors(form)

        result = reject_reservation(reservation_id, current_user.id, form.notes.data or '')
        return _outcome_response(result, MESSAGES['reservation_rejected'])

    @bp.route('/approvals/reject-bulk', methods=['POST'])
    @login_required
    @permission_required('booking.approvals.manage')
    def reject_bulk():
        """
        Reject several reservations ("rejeitar todos").

        Request body:
            reservation_ids: list of IDs
            notes: optional note
        """
        form = BulkRejectForm()
        if not form.validate():
            return api_form_errors(form)

        for reservation_id in set(form.reservation_ids.data):
            error = _check_target(reservation_id)
            if error:
                return error

        outcome = reject_many(form.reservation_ids.data, current_user.id, form.notes.data or '')
        return api_success(
            data=outcome,
            message=MESSAGES['reservations_rejected'].format(count=len(outcome['rejected_ids']))
        )
