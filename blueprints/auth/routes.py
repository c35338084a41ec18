"""
Authentication routes: login, logout, current user, CSRF token.
JSON counterparts of the session-based login flow.
"""

import logging
from flask import Blueprint, request
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf

from blueprints.auth.forms import LoginForm
from models.user import User, get_user_by_username, update_last_login, check_password
from utils.api_response import api_success, api_error, api_form_errors
from utils.decorators import rate_limited
from utils.messages import MESSAGES
from utils.permissions import load_user_permissions

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


def _session_payload(user) -> dict:
    data = user.to_dict()
    data['permissions'] = sorted(load_user_permissions(user))
    return data


@auth_bp.route('/login', methods=['POST'])
@rate_limited('login')
def login():
    """
    Log a user in.

    Request body:
        username, password, remember_me (optional)
    """
    form = LoginForm()
    if not form.validate():
        return api_form_errors(form)

    user_dict = get_user_by_username(form.username.data)

    if user_dict is None or not check_password(user_dict, form.password.data):
        logger.warning(f"Failed login for {form.username.data!r} from {request.remote_addr}")
        return api_error(MESSAGES['invalid_credentials'], status=401)

    if not user_dict.get('active'):
        return api_error(MESSAGES['account_inactive'], status=403)

    user = User(user_dict)
    login_user(user, remember=form.remember_me.data)
    update_last_login(user.id)
    logger.info(f"User {user.username} logged in")

    return api_success(
        data=_session_payload(user),
        message=MESSAGES['login_success'].format(name=user.full_name or user.username)
    )


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Logout current user."""
    logout_user()
    return api_success(message=MESSAGES['logout_success'])


@auth_bp.route('/me')
@login_required
def me():
    """Current user with role and permissions."""
    return api_success(data=_session_payload(current_user))


@auth_bp.route('/csrf-token')
def csrf_token():
    """Token to send back in the X-CSRFToken header."""
    return api_success(data={'csrf_token': generate_csrf()})
