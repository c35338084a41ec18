"""
Admin routes for user management.
User CRUD (soft delete) and the spaces each gestor is responsible for.
"""

import sqlite3
import logging
from flask import Blueprint, request
from flask_login import login_required, current_user

from blueprints.admin.forms import ManagerSpacesForm, UserCreateForm, UserUpdateForm
from blueprints.admin.services.user_service import (
    assign_manager_spaces,
    can_change_role,
    can_delete_user,
    serialize_user,
    validate_email_change,
    validate_password,
    validate_space_ids,
    validate_user_creation,
)
from models.user import (
    ROLE_MANAGER,
    ROLE_USER,
    ROLES,
    create_user,
    delete_user,
    get_all_users,
    get_user_by_id,
    set_managed_spaces,
    update_password,
    update_user,
)
from utils.api_response import api_success, api_error, api_form_errors
from utils.decorators import permission_required
from utils.messages import MESSAGES
from utils.validators import sanitize_input

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__)


@admin_bp.route('/users', methods=['GET'])
@login_required
@permission_required('admin.users.view')
def users():
    """
    List users with filtering.

    Query params:
        role: admin / gestor / usuario
        active: '1' or '0'
        search: matched against username, email and full name
    """
    role_filter = request.args.get('role', '')
    active_filter = request.args.get('active', '')
    search = request.args.get('search', '').strip()

    if role_filter and role_filter not in ROLES:
        return api_error(MESSAGES['invalid_data'], status=400, field='role')

    all_users = get_all_users(active_only=False, role=role_filter or None)

    if active_filter:
        is_active = active_filter == '1'
        all_users = [u for u in all_users if bool(u['active']) == is_active]

    if search:
        search_lower = search.lower()
        all_users = [u for u in all_users if
                     search_lower in u['username'].lower() or
                     search_lower in (u['email'] or '').lower() or
                     search_lower in (u['full_name'] or '').lower()]

    data = [serialize_user(u) for u in all_users]
    return api_success(data=data, count=len(data))


@admin_bp.route('/users/<int:user_id>', methods=['GET'])
@login_required
@permission_required('admin.users.view')
def user_detail(user_id):
    user = get_user_by_id(user_id)
    if not user:
        return api_error(MESSAGES['user_not_found'], status=404)
    return api_success(data=serialize_user(user))


@admin_bp.route('/users', methods=['POST'])
@login_required
@permission_required('admin.users.manage')
def users_create():
    """
    Create a user.

    Request body:
        username, email, password, full_name, phone, role,
        space_ids (gestor only)
    """
    form = UserCreateForm()
    if not form.validate():
        return api_form_errors(form)

    username = form.username.data.strip()
    email = form.email.data.strip().lower()
    role = form.role.data or ROLE_USER

    is_valid, error_msg = validate_user_creation(username, email, form.password.data)
    if not is_valid:
        return api_error(error_msg, status=400)

    space_ids = form.space_ids.data or []
    if role == ROLE_MANAGER:
        is_valid, error_msg = validate_space_ids(space_ids)
        if not is_valid:
            return api_error(error_msg, status=400, field='space_ids')

    try:
        user_id = create_user(
            username=username,
            email=email,
            password=form.password.data,
            full_name=sanitize_input(form.full_name.data, 100),
            role=role,
            phone=sanitize_input(form.phone.data, 20) or None,
        )
    except sqlite3.IntegrityError:
        return api_error(MESSAGES['username_exists'], status=409)

    user = get_user_by_id(user_id)
    if role == ROLE_MANAGER and space_ids:
        assign_manager_spaces(user, space_ids)

    logger.info(f"User {user_id} ({role}) created by user {current_user.id}")
    return api_success(data=serialize_user(user), message=MESSAGES['user_created'], status=201)


@admin_bp.route('/users/<int:user_id>', methods=['PUT'])
@login_required
@permission_required('admin.users.manage')
def users_edit(user_id):
    """
    Update a user.

    Only the keys present in the body change. Moving a gestor to another
    role drops its space assignments.
    """
    user = get_user_by_id(user_id)
    if not user:
        return api_error(MESSAGES['user_not_found'], status=404)

    form = UserUpdateForm()
    if not form.validate():
        return api_form_errors(form)

    body = request.get_json(silent=True) or {}
    fields = {}

    if 'email' in body and form.email.data:
        email = form.email.data.strip().lower()
        is_valid, error_msg = validate_email_change(user_id, email)
        if not is_valid:
            return api_error(error_msg, status=400, field='email')
        fields['email'] = email

    if 'full_name' in body and form.full_name.data:
        fields['full_name'] = sanitize_input(form.full_name.data, 100)

    if 'phone' in body:
        fields['phone'] = sanitize_input(form.phone.data, 20) or None

    if 'role' in body and form.role.data:
        fields['role'] = form.role.data

    active = None
    if 'active' in body:
        active = bool(form.active.data)
        if not active and user_id == current_user.id:
            return api_error(MESSAGES['cannot_delete_self'], status=400, field='active')
        fields['active'] = 1 if active else 0

    allowed, error_msg = can_change_role(user, fields.get('role'), active)
    if not allowed:
        return api_error(error_msg, status=400)

    if form.password.data:
        is_valid, error_msg = validate_password(form.password.data)
        if not is_valid:
            return api_error(error_msg, status=400, field='password')
        update_password(user_id, form.password.data)

    if fields:
        update_user(user_id, **fields)

    if user['role'] == ROLE_MANAGER and fields.get('role', ROLE_MANAGER) != ROLE_MANAGER:
        set_managed_spaces(user_id, [])

    logger.info(f"User {user_id} updated by user {current_user.id}: {sorted(fields)}")
    return api_success(data=serialize_user(get_user_by_id(user_id)),
                       message=MESSAGES['user_updated'])


@admin_bp.route('/users/<int:user_id>', methods=['DELETE'])
@login_required
@permission_required('admin.users.manage')
def users_delete(user_id):
    """Soft delete user."""
    can_delete, error_msg = can_delete_user(user_id, current_user.id)
    if not can_delete:
        status = 404 if error_msg == MESSAGES['user_not_found'] else 400
        return api_error(error_msg, status=status)

    delete_user(user_id)
    logger.info(f"User {user_id} deactivated by user {current_user.id}")
    return api_success(message=MESSAGES['user_deleted'])


@admin_bp.route('/users/<int:user_id>/spaces', methods=['PUT'])
@login_required
@permission_required('admin.users.manage')
def users_spaces(user_id):
    """
    Replace the spaces a gestor is responsible for.

    Request body:
        space_ids: complete list (empty clears every assignment)
    """
    user = get_user_by_id(user_id)
    if not user:
        return api_error(MESSAGES['user_not_found'], status=404)

    form = ManagerSpacesForm()
    if not form.validate():
        return api_form_errors(form)

    space_ids = form.space_ids.data or []
    is_valid, error_msg = validate_space_ids(space_ids)
    if not is_valid:
        return api_error(error_msg, status=400, field='space_ids')

    try:
        stored = assign_manager_spaces(user, space_ids)
    except ValueError as e:
        return api_error(str(e), status=400, field='role')

    return api_success(
        data={'user_id': user_id, 'space_ids': stored},
        message=MESSAGES['manager_spaces_updated']
    )
