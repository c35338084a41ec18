"""
Space API routes.
Listing is open to every user; creation and edition need booking.spaces.manage.
"""

import sqlite3
import logging
from flask import request
from flask_login import login_required, current_user

from blueprints.booking.forms import SpaceForm
from models.space import get_all_spaces, get_space_by_id, create_space, update_space
from models.user import ROLE_USER, get_space_managers
from utils.api_response import api_success, api_error, api_form_errors
from utils.decorators import permission_required
from utils.messages import MESSAGES
from utils.permissions import can_manage_space
from utils.validators import sanitize_input

logger = logging.getLogger(__name__)


def register_routes(bp):
    """Register space routes on the blueprint."""

    @bp.route('/spaces', methods=['GET'])
    @login_required
    @permission_required('booking.spaces.view')
    def list_spaces():
        """
        List spaces.

        Query params:
            include_inactive: 'true' to include deactivated spaces (managers only)
        """
        include_inactive = request.args.get('include_inactive', '').lower() == 'true'
        active_only = not (include_inactive and current_user.role != ROLE_USER)
        spaces = get_all_spaces(active_only=active_only)
        return api_success(data=spaces, count=len(spaces))

    @bp.route('/spaces/<int:space_id>', methods=['GET'])
    @login_required
    @permission_required('booking.spaces.view')
    def get_space(space_id):
        """Space detail with its managers."""
        space = get_space_by_id(space_id)
        if not space:
            return api_error(MESSAGES['space_not_found'], status=404)

        space['managers'] = [
            {'id': m['id'], 'full_name': m['full_name'], 'email': m['email']}
            for m in get_space_managers(space_id)
        ]
        space['can_manage'] = can_manage_space(current_user, space_id)
        return api_success(data=space)

    @bp.route('/spaces', methods=['POST'])
    @login_required
    @permission_required('booking.spaces.manage')
    def create_space_route():
        """Create a space."""
        form = SpaceForm()
        if not form.validate():
            return api_form_errors(form)

        try:
            space_id = create_space(
                name=sanitize_input(form.name.data, 100),
                capacity=form.capacity.data,
                description=sanitize_input(form.description.data, 500) or None,
                equipment=sanitize_input(form.equipment.data, 500) or None,
            )
        except sqlite3.IntegrityError:
            return api_error(MESSAGES['space_name_exists'], status=409)

        logger.info(f"Space {space_id} created by user {current_user.id}")
        return api_success(
            data=get_space_by_id(space_id),
            message=MESSAGES['space_created'],
            status=201
        )

    @bp.route('/spaces/<int:space_id>', methods=['PUT'])
    @login_required
    @permission_required('booking.spaces.manage')
    def update_space_route(space_id):
        """Update a space (send active=false to deactivate)."""
        if not get_space_by_id(space_id):
            return api_error(MESSAGES['space_not_found'], status=404)

        form = SpaceForm()
        if not form.validate():
            return api_form_errors(form)

        fields = {
            'name': sanitize_input(form.name.data, 100),
            'capacity': form.capacity.data,
            'description': sanitize_input(form.description.data, 500) or None,
            'equipment': sanitize_input(form.equipment.data, 500) or None,
        }
        if 'active' in (request.get_json(silent=True) or {}):
            fields['active'] = 1 if form.active.data else 0

        try:
            update_space(space_id, **fields)
        except sqlite3.IntegrityError:
            return api_error(MESSAGES['space_name_exists'], status=409)

        logger.info(f"Space {space_id} updated by user {current_user.id}")
        return api_success(data=get_space_by_id(space_id), message=MESSAGES['space_updated'])
