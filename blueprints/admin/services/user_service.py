"""
Business rules for user administration.

Validation of new accounts, last-admin protection and the manager (gestor)
to space assignments.
"""

import logging

from models.space import get_space_by_id
from models.user import (
    ROLE_ADMIN,
    ROLE_MANAGER,
    count_active_admins,
    get_managed_space_ids,
    get_user_by_email,
    get_user_by_id,
    get_user_by_username,
    set_managed_spaces,
)
from utils.messages import MESSAGES
from utils.validators import validate_email

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 8


def validate_password(password: str) -> tuple:
    """
    Check the password policy.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if len(password or '') < PASSWORD_MIN_LENGTH:
        return False, MESSAGES['password_too_short']
    if not any(c.isalpha() for c in password) or not any(c.isdigit() for c in password):
        return False, MESSAGES['password_weak']
    return True, ''


def validate_user_creation(username: str, email: str, password: str) -> tuple:
    """
    Validate user creation data.

    Args:
        username: Username to check
        email: Email to check
        password: Password to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if get_user_by_username(username):
        return False, MESSAGES['username_exists']

    if not validate_email(email):
        return False, MESSAGES['email_invalid']

    if get_user_by_email(email):
        return False, MESSAGES['email_exists']

    return validate_password(password)


def validate_email_change(user_id: int, email: str) -> tuple:
    if not validate_email(email):
        return False, MESSAGES['email_invalid']
    existing = get_user_by_email(email)
    if existing and existing['id'] != user_id:
        return False, MESSAGES['email_exists']
    return True, ''


def _is_last_admin(user: dict) -> bool:
    return user['role'] == ROLE_ADMIN and user['active'] and count_active_admins() <= 1


def can_delete_user(user_id: int, current_user_id: int) -> tuple:
    """
    Check if user can be deactivated.

    Args:
        user_id: User ID to deactivate
        current_user_id: Current logged-in user ID

    Returns:
        Tuple of (can_delete, error_message)
    """
    if user_id == current_user_id:
        return False, MESSAGES['cannot_delete_self']

    user = get_user_by_id(user_id)
    if not user:
        return False, MESSAGES['user_not_found']

    if _is_last_admin(user):
        return False, MESSAGES['last_admin']

    return True, ''


def can_change_role(user: dict, new_role: str = None, active: bool = None) -> tuple:
    """
    Demoting or deactivating the only active admin is refused.

    Returns:
        Tuple of (allowed, error_message)
    """
    losing_admin = (new_role is not None and new_role != ROLE_ADMIN) or active is False
    if losing_admin and _is_last_admin(user):
        return False, MESSAGES['last_admin']
    return True, ''


def validate_space_ids(space_ids: list) -> tuple:
    """
    Every ID must name an existing space.

    Returns:
        Tuple of (is_valid, error_message)
    """
    for space_id in space_ids:
        if get_space_by_id(space_id) is None:
            return False, MESSAGES['space_not_found']
    return True, ''


def assign_manager_spaces(user: dict, space_ids: list) -> list:
    """
    Replace the spaces a gestor answers for.

    Raises:
        ValueError: The user is not a gestor
    """
    if user['role'] != ROLE_MANAGER:
        raise ValueError(MESSAGES['not_a_manager'])

    stored = set_managed_spaces(user['id'], space_ids)
    logger.info(f"Manager {user['id']} now answers for spaces {stored}")
    return stored


def serialize_user(user: dict) -> dict:
    """Public view of a user row with the spaces it manages."""
    data = {key: value for key, value in user.items() if key != 'password_hash'}
    data['active'] = bool(user['active'])
    data['managed_space_ids'] = (
        get_managed_space_ids(user['id']) if user['role'] == ROLE_MANAGER else []
    )
    return data
