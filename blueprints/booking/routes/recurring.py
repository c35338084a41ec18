"""
Recurring reservation API routes.
Managers create weekly blocks ("agendamentos fixos") on their spaces.
"""

import logging
from flask import request
from flask_login import login_required, current_user

from blueprints.booking.forms import RecurringReservationForm, RecurringScheduleForm
from blueprints.booking.services.booking_service import create_recurring, update_recurring
from models.recurring_reservation import (
    get_recurring_by_id,
    get_recurring_reservations,
    deactivate_recurring_reservation,
)
from models.recurring_schedule import format_weekdays, iter_occurrences
from models.space import get_space_by_id
from utils.api_response import api_success, api_error, api_form_errors
from utils.datetime_helpers import parse_local_date
from utils.decorators import permission_required
from utils.messages import MESSAGES
from utils.permissions import can_manage_space

logger = logging.getLogger(__name__)


def _serialize(rec) -> dict:
    data = rec.to_dict()
    data['weekdays_label'] = format_weekdays(rec.weekdays)
    return data


def _shadow_payload(shadowed: list) -> tuple:
    """(list of dicts, warning or None) for reservations under a recurring block."""
    items = [r.to_dict() for r in shadowed]
    warning = None
    if items:
        warning = MESSAGES['recurring_shadows_reservations'].format(count=len(items))
    return items, warning


def _load_managed(recurring_id):
    """(RecurringReservation, error response)."""
    rec = get_recurring_by_id(recurring_id)
    if rec is None:
        return None, api_error(MESSAGES['recurring_not_found'], status=404)
    if not can_manage_space(current_user, rec.space_id):
        return None, api_error(MESSAGES['permission_denied'], status=403)
    return rec, None


def register_routes(bp):
    """Register recurring reservation routes on the blueprint."""

    @bp.route('/recurring', methods=['GET'])
    @login_required
    @permission_required('booking.recurring.view')
    def list_recurring():
        """
        List recurring reservations.

        Query params:
            space_id: Restrict to one space (optional)
            active_only: 'false' to include deactivated entries
        """
        space_id = request.args.get('space_id', type=int)
        active_only = request.args.get('active_only', 'true').lower() != 'false'

        items = get_recurring_reservations(
            space_ids=[space_id] if space_id is not None else None,
            active_only=active_only
        )
        data = [_serialize(rec) for rec in items]
        return api_success(data=data, count=len(data))

    @bp.route('/recurring', methods=['POST'])
    @login_required
    @permission_required('booking.recurring.manage')
    def create_recurring_route():
        """
        Create a recurring reservation.

        Request body:
            space_id, start_date, end_date (YYYY-MM-DD), weekdays (list,
            0=Sunday .. 6=Saturday), start_slot, end_slot, notes

        Existing reservations under the new block are reported in
        'shadowed_reservations' and left unchanged.
        """
        form = RecurringReservationForm()
        if not form.validate():
            return api_form_errors(form)

        if get_space_by_id(form.space_id.data) is None:
            return api_error(MESSAGES['space_not_found'], status=404)
        if not can_manage_space(current_user, form.space_id.data):
            return api_error(MESSAGES['permission_denied'], status=403)

        rec, shadowed = create_recurring(
            user_id=current_user.id,
            space_id=form.space_id.data,
            start_date=form.start_date.data,
            end_date=form.end_date.data,
            weekdays=form.weekdays.data,
            start_slot=form.start_slot.data,
            end_slot=form.end_slot.data,
            notes=form.notes.data,
        )
        shadowed_items, warning = _shadow_payload(shadowed)
        return api_success(
            data=_serialize(rec),
            message=MESSAGES['recurring_created'],
            warning=warning,
            status=201,
            shadowed_reservations=shadowed_items
        )

    @bp.route('/recurring/<int:recurring_id>', methods=['PUT'])
    @login_required
    @permission_required('booking.recurring.manage')
    def update_recurring_route(recurring_id):
        """Replace dates, weekdays, slots and notes of a recurring reservation."""
        rec, error = _load_managed(recurring_id)
        if error:
            return error

        form = RecurringScheduleForm()
        if not form.validate():
            return api_form_errors(form)

        rec, shadowed = update_recurring(
            recurring_id,
            start_date=form.start_date.data,
            end_date=form.end_date.data,
            weekdays=form.weekdays.data,
            start_slot=form.start_slot.data,
            end_slot=form.end_slot.data,
            notes=form.notes.data,
        )
        shadowed_items, warning = _shadow_payload(shadowed)
        return api_success(
            data=_serialize(rec),
            message=MESSAGES['recurring_updated'],
            warning=warning,
            shadowed_reservations=shadowed_items
        )

    @bp.route('/recurring/<int:recurring_id>/deactivate', methods=['POST'])
    @login_required
    @permission_required('booking.recurring.manage')
    def deactivate_recurring(recurring_id):
        """Stop a recurring reservation from blocking any date."""
        rec, error = _load_managed(recurring_id)
        if error:
            return error

        deactivate_recurring_reservation(recurring_id)
        logger.info(f"Recurring reservation {recurring_id} deactivated by user {current_user.id}")
        return api_success(
            data=_serialize(get_recurring_by_id(recurring_id)),
            message=MESSAGES['recurring_deactivated']
        )

    @bp.route('/recurring/<int:recurring_id>/occurrences', methods=['GET'])
    @login_required
    @permission_required('booking.recurring.view')
    def recurring_occurrences(recurring_id):
        """
        Dates on which a recurring reservation applies.

        Query params:
            date_from, date_to: YYYY-MM-DD bounds (optional)
        """
        rec = get_recurring_by_id(recurring_id)
        if rec is None:
            return api_error(MESSAGES['recurring_not_found'], status=404)

        bounds = {}
        for name in ('date_from', 'date_to'):
            raw = request.args.get(name)
            if raw:
                bounds[name] = parse_local_date(raw)
                if bounds[name] is None:
                    return api_error('Data inválida', status=400, field=name)

        dates = [d.isoformat() for d in iter_occurrences(rec, **bounds)]
        return api_success(data=dates, count=len(dates), recurring=_serialize(rec))
