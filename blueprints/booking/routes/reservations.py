"""
Reservation API routes.
Booking requests, the requester's own list, the oversight list for admins
and gestores, availability checks and the per-day slot grid.
"""

import logging
from flask import request
from flask_login import login_required, current_user

from blueprints.booking.forms import ReservationForm
from blueprints.booking.services.booking_service import (
    submit_reservation,
    get_candidate_conflicts,
    get_space_day_grid,
)
from models.reservation_crud import (
    count_reservations_by_status,
    get_reservation_details,
    get_reservation_list,
    get_reservations,
    get_status_history,
)
from models.space import get_space_by_id
from utils.api_response import api_success, api_error, api_form_errors
from utils.decorators import permission_required, rate_limited
from utils.messages import MESSAGES
from utils.permissions import can_manage_space, get_manageable_space_ids, has_permission
from utils.validators import validate_date_format, validate_date_range

logger = logging.getLogger(__name__)


def _space_from_args():
    """Space dict from ?space_id=, or an error response."""
    space_id = request.args.get('space_id', type=int)
    if space_id is None:
        return None, api_error('O espaço é obrigatório', status=400, field='space_id')
    space = get_space_by_id(space_id)
    if space is None:
        return None, api_error(MESSAGES['space_not_found'], status=404)
    return space, None


def _date_filters():
    """(date_from, date_to, None) from the query string, or an error response."""
    date_from = request.args.get('date_from')
    date_to = request.args.get('date_to')
    for name, value in (('date_from', date_from), ('date_to', date_to)):
        if value and not validate_date_format(value):
            return None, None, api_error('Data inválida', status=400, field=name)
    if date_from and date_to and not validate_date_range(date_from, date_to):
        return None, None, api_error('Período inválido', status=400, field='date_to')
    return date_from, date_to, None


def _visible_space_ids():
    """
    Spaces whose reservations the current user may list.

    None means every space; an empty list means none.
    """
    if has_permission(current_user, 'booking.reservations.view_all'):
        return None
    if has_permission(current_user, 'booking.approvals.manage'):
        return get_manageable_space_ids(current_user)
    return []


def register_routes(bp):
    """Register reservation routes on the blueprint."""

    @bp.route('/reservations', methods=['POST'])
    @login_required
    @permission_required('booking.reservations.create')
    @rate_limited('reservation')
    def create_reservation_route():
        """
        Request a booking.

        Request body:
            space_id, reservation_date (YYYY-MM-DD), start_slot, end_slot, notes

        Returns:
            201 with the pending reservation; 'warning' when other pending
            requests compete for the same slots. 409 when the slot is taken.
        """
        form = ReservationForm()
        if not form.validate():
            return api_form_errors(form)

        details, warning = submit_reservation(
            user_id=current_user.id,
            space_id=form.space_id.data,
            reservation_date=form.reservation_date.data,
            start_slot=form.start_slot.data,
            end_slot=form.end_slot.data,
            notes=form.notes.data,
        )
        return api_success(
            data=details,
            message=MESSAGES['reservation_created'],
            warning=warning,
            status=201
        )

    @bp.route('/reservations', methods=['GET'])
    @login_required
    def list_reservations():
        """
        Every reservation the current user may oversee, with per-status totals.

        Admins see all spaces, gestores the spaces assigned to them.

        Query params:
            status: pendente / aprovado / rejeitado (optional)
            space_id, user_id: optional
            date_from, date_to: YYYY-MM-DD bounds (optional)
        """
        if not has_permission(current_user, 'booking.reservations.view_all') \
                and not has_permission(current_user, 'booking.approvals.manage'):
            return api_error(MESSAGES['permission_denied'], status=403)

        space_ids = _visible_space_ids()
        space_id = request.args.get('space_id', type=int)
        if space_id is not None:
            if space_ids is not None and space_id not in space_ids:
                return api_error(MESSAGES['permission_denied'], status=403)
            space_ids = [space_id]

        date_from, date_to, error = _date_filters()
        if error:
            return error

        filters = {
            'space_ids': space_ids,
            'user_id': request.args.get('user_id', type=int),
            'date_from': date_from,
            'date_to': date_to,
        }
        try:
            data = get_reservation_list(status=request.args.get('status'), **filters)
        except ValueError:
            return api_error(MESSAGES['invalid_data'], status=400, field='status')

        return api_success(data=data, count=len(data),
                           stats=count_reservations_by_status(**filters))

    @bp.route('/reservations/mine', methods=['GET'])
    @login_required
    def my_reservations():
        """
        Reservations requested by the current user.

        Query params:
            status: pendente / aprovado / rejeitado (optional)
            date_from, date_to: YYYY-MM-DD bounds (optional)
        """
        date_from, date_to, error = _date_filters()
        if error:
            return error

        try:
            reservations = get_reservations(
                status=request.args.get('status'),
                user_id=current_user.id,
                date_from=date_from,
                date_to=date_to,
            )
        except ValueError:
            return api_error(MESSAGES['invalid_data'], status=400, field='status')

        data = [r.to_dict() for r in reservations]
        return api_success(data=data, count=len(data))

    @bp.route('/reservations/<int:reservation_id>', methods=['GET'])
    @login_required
    def get_reservation(reservation_id):
        """Reservation detail with status history (owner or space manager)."""
        details = get_reservation_details(reservation_id)
        if not details:
            return api_error(MESSAGES['reservation_not_found'], status=404)

        if details['user_id'] != current_user.id \
                and not has_permission(current_user, 'booking.reservations.view_all') \
                and not can_manage_space(current_user, details['space_id']):
            return api_error(MESSAGES['permission_denied'], status=403)

        details['history'] = get_status_history(reservation_id)
        return api_success(data=details)

    @bp.route('/availability', methods=['GET'])
    @login_required
    def availability():
        """
        Is a slot range bookable?

        Query params:
            space_id, date (YYYY-MM-DD), start_slot, end_slot
        """
        space, error = _space_from_args()
        if error:
            return error

        verdict = get_candidate_conflicts(
            space['id'],
            request.args.get('date'),
            request.args.get('start_slot', type=int),
            request.args.get('end_slot', type=int),
        )
        return api_success(data=verdict.to_dict())

    @bp.route('/conflicts', methods=['GET'])
    @login_required
    @permission_required('booking.approvals.manage')
    def conflicts():
        """
        Everything overlapping a slot range (manager view).

        Query params:
            space_id, date, start_slot, end_slot, exclude_id (optional)
        """
        space, error = _space_from_args()
        if error:
            return error
        if not can_manage_space(current_user, space['id']):
            return api_error(MESSAGES['permission_denied'], status=403)

        verdict = get_candidate_conflicts(
            space['id'],
            request.args.get('date'),
            request.args.get('start_slot', type=int),
            request.args.get('end_slot', type=int),
            exclude_reservation_id=request.args.get('exclude_id', type=int),
        )
        return api_success(data=verdict.conflicts.to_dict())

    @bp.route('/grid', methods=['GET'])
    @login_required
    def day_grid():
        """
        Slot-by-slot occupation of a space on one date.

        Query params:
            space_id, date (YYYY-MM-DD)
        """
        space, error = _space_from_args()
        if error:
            return error

        grid = get_space_day_grid(space['id'], request.args.get('date'))
        return api_success(data=grid, space=space, date=request.args.get('date'))
