"""
Flask extensions initialization.
Extensions are initialized here and then initialized with the app in app.py.
"""

from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect

from blueprints.booking.services.notification_service import NotificationService
from utils.rate_limiter import RateLimiter

# Initialize Flask-Login
login_manager = LoginManager()

# Initialize CSRF Protection
csrf = CSRFProtect()

# Login and booking submission throttling
rate_limiter = RateLimiter()

# Booking e-mail/log notifications
notifier = NotificationService()

# Configure Login Manager
login_manager.login_view = 'auth.login'
login_manager.login_message = 'Faça login para acessar esta página'
login_manager.login_message_category = 'warning'


@login_manager.user_loader
def load_user(user_id):
    """
    Load user by ID for Flask-Login.

    Args:
        user_id: The user ID as a string

    Returns:
        User object or None if not found
    """
    from models.user import get_user_by_id, User

    user_dict = get_user_by_id(int(user_id))
    if user_dict and user_dict['active']:
        return User(user_dict)
    return None


@login_manager.unauthorized_handler
def unauthorized():
    """JSON 401 instead of a redirect to the login page."""
    from utils.api_response import api_error
    return api_error(login_manager.login_message, status=401)
