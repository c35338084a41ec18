"""
Permission checking utilities.
Maps the three roles to permission codes and resolves per-space access.
"""

from models.user import ROLE_ADMIN, ROLE_MANAGER, ROLE_USER, get_managed_space_ids
from models.space import get_all_spaces


PERMISSIONS = {
    'booking.spaces.view': 'Ver espaços',
    'booking.spaces.manage': 'Gerenciar espaços',
    'booking.reservations.create': 'Solicitar agendamentos',
    'booking.reservations.view_all': 'Ver agendamentos de todos',
    'booking.approvals.manage': 'Aprovar ou rejeitar agendamentos',
    'booking.recurring.view': 'Ver agendamentos fixos',
    'booking.recurring.manage': 'Gerenciar agendamentos fixos',
    'admin.users.view': 'Ver usuários',
    'admin.users.manage': 'Gerenciar usuários e gestores',
}

ROLE_PERMISSIONS = {
    ROLE_ADMIN: set(PERMISSIONS),
    ROLE_MANAGER: {
        'booking.spaces.view',
        'booking.reservations.create',
        'booking.approvals.manage',
        'booking.recurring.view',
        'booking.recurring.manage',
    },
    ROLE_USER: {
        'booking.spaces.view',
        'booking.reservations.create',
        'booking.recurring.view',
    },
}


def load_user_permissions(user) -> set:
    """
    Permission codes granted to a user through their role.

    Args:
        user: User object (Flask-Login)

    Returns:
        Set of permission codes
    """
    return set(ROLE_PERMISSIONS.get(getattr(user, 'role', None), set()))


def has_permission(user, permission_code: str) -> bool:
    """
    Check if user has a specific permission.

    Args:
        user: User object (Flask-Login)
        permission_code: Permission code to check

    Returns:
        True if user has permission
    """
    return permission_code in load_user_permissions(user)


def get_manageable_space_ids(user) -> list:
    """
    Spaces whose reservations the user may approve.

    Admins manage every space, managers only their assigned ones.
    """
    if user.role == ROLE_ADMIN:
        return [space['id'] for space in get_all_spaces(active_only=False)]
    if user.role == ROLE_MANAGER:
        return get_managed_space_ids(user.id)
    return []


def can_manage_space(user, space_id: int) -> bool:
    """Check whether the user may approve/manage bookings of a space."""
    if user.role == ROLE_ADMIN:
        return True
    if user.role == ROLE_MANAGER:
        return space_id in get_managed_space_ids(user.id)
    return False
