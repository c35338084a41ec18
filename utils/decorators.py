"""
Route decorators for authentication and authorization.
Provides permission-based access control and rate limiting for routes.
"""

from functools import wraps
from flask import g, request, current_app
from flask_login import login_required, current_user

from utils.api_response import api_error
from utils.messages import MESSAGES


def permission_required(permission_code: str):
    """
    Decorator to require specific permission for a route.

    Usage:
        @bp.route('/reservations/<int:reservation_id>/approve', methods=['POST'])
        @login_required
        @permission_required('booking.approvals.manage')
        def approve(reservation_id):
            ...

    Args:
        permission_code: Permission code required (e.g., 'booking.spaces.view')

    Returns:
        Decorator function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not hasattr(g, 'user_permissions'):
                from utils.permissions import load_user_permissions
                g.user_permissions = load_user_permissions(current_user)

            if permission_code not in g.user_permissions:
                return api_error(MESSAGES['permission_denied'], status=403)

            return func(*args, **kwargs)
        return wrapper
    return decorator


def rate_limited(scope: str):
    """
    Decorator applying the current app's RateLimitState to a route.

    The key combines the scope with the current user (or client address
    for anonymous requests).

    Args:
        scope: Name of the limited action (e.g., 'login')
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            limiter = current_app.extensions.get('rate_limiter')
            if limiter is not None:
                if current_user.is_authenticated:
                    who = f'user:{current_user.id}'
                else:
                    who = f'ip:{request.remote_addr}'
                if not limiter.hit(f'{scope}:{who}'):
                    return api_error(MESSAGES['too_many_attempts'], status=429)
            return func(*args, **kwargs)
        return wrapper
    return decorator


# Re-export login_required for convenience
__all__ = ['login_required', 'permission_required', 'rate_limited']
