"""
Agenda de Espaços - Space booking with approval workflow
Flask application factory and initialization
"""

import os
import click
import logging
from flask import Flask, g
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import extensions
from extensions import login_manager, csrf, rate_limiter, notifier

# Import database functions
from database import close_db, init_db


def create_app(config_name=None):
    """
    Application factory for Flask app.

    Args:
        config_name: Configuration name ('development', 'production', 'test')

    Returns:
        Flask application instance
    """
    # Determine config
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])
    if config_name == 'production':
        config[config_name].validate()

    # Initialize extensions
    initialize_extensions(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Register teardown handlers
    register_teardown_handlers(app)

    # Configure logging
    configure_logging(app)

    return app


def initialize_extensions(app):
    """Initialize Flask extensions."""
    # Initialize Flask-Login
    login_manager.init_app(app)
    # Initialize CSRF Protection
    csrf.init_app(app)
    # Per-app rate limiter state
    rate_limiter.init_app(app)
    # Notification sender (log or smtp)
    notifier.init_app(app)


def register_blueprints(app):
    """Register Flask blueprints."""
    # Import blueprints
    from blueprints.auth.routes import auth_bp
    from blueprints.booking import booking_bp
    from blueprints.api.routes import api_bp
    from blueprints.admin.routes import admin_bp

    # Register blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(booking_bp, url_prefix='/booking')
    app.register_blueprint(api_bp, url_prefix='/api')
    app.register_blueprint(admin_bp, url_prefix='/admin')

    # Set default route
    @app.route('/')
    def index():
        """Entry point: app name and the main endpoints."""
        from flask import url_for
        from flask_login import current_user
        from utils.api_response import api_success

        return api_success(data={
            'app': app.config.get('APP_NAME'),
            'authenticated': current_user.is_authenticated,
            'login': url_for('auth.login'),
            'slots': url_for('api.api_slots'),
        })


def register_error_handlers(app):
    """Register JSON error handlers."""
    from flask_wtf.csrf import CSRFError
    from utils.api_response import api_error
    from utils.messages import MESSAGES

    @app.errorhandler(400)
    def bad_request_error(error):
        """Handle 400 errors."""
        return api_error(MESSAGES['invalid_data'], status=400)

    @app.errorhandler(CSRFError)
    def csrf_error(error):
        """Handle missing or expired CSRF tokens."""
        return api_error(error.description, status=400)

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 errors."""
        return api_error(MESSAGES['not_found'], status=404)

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        # Rollback database on error
        db = g.get('db')
        if db:
            db.rollback()
        app.logger.error(f'Internal error: {error}')
        return api_error(MESSAGES['internal_error'], status=500)

    @app.errorhandler(403)
    def forbidden_error(error):
        """Handle 403 errors."""
        return api_error(MESSAGES['permission_denied'], status=403)


def register_cli_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db_command():
        """Initialize database with schema and seed data."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db()
        click.echo('Database initialized successfully!')

    @app.cli.command('create-user')
    @click.argument('username')
    @click.argument('email')
    @click.option('--role', type=click.Choice(['admin', 'gestor', 'usuario']), default='usuario')
    @click.option('--full-name', default=None)
    @click.password_option()
    def create_user_command(username, email, role, full_name, password):
        """Create a new user."""
        import sqlite3
        from models.user import create_user

        with app.app_context():
            try:
                user_id = create_user(
                    username=username,
                    email=email,
                    password=password,
                    full_name=full_name,
                    role=role
                )
                click.echo(f'User created successfully! ID: {user_id}')
            except (sqlite3.IntegrityError, ValueError) as e:
                click.echo(f'Error creating user: {str(e)}', err=True)

    @app.cli.command('assign-manager')
    @click.argument('username')
    @click.argument('space_id', type=int)
    def assign_manager_command(username, space_id):
        """Make a gestor responsible for a space."""
        from models.user import get_user_by_username, assign_space_manager, ROLE_MANAGER, ROLE_ADMIN
        from models.space import get_space_by_id

        with app.app_context():
            user = get_user_by_username(username)
            if user is None:
                raise click.ClickException(f'User not found: {username}')
            if user['role'] not in (ROLE_MANAGER, ROLE_ADMIN):
                raise click.ClickException(f'{username} is not a manager')
            if get_space_by_id(space_id) is None:
                raise click.ClickException(f'Space not found: {space_id}')

            if assign_space_manager(user['id'], space_id):
                click.echo(f'{username} now manages space {space_id}')
            else:
                click.echo(f'{username} already manages space {space_id}')


def register_teardown_handlers(app):
    """Register teardown handlers."""

    @app.teardown_appcontext
    def teardown_db(error):
        """Close database connection at end of request."""
        close_db(error)


def configure_logging(app):
    """Configure application logging."""
    if not app.debug and not app.testing:
        # Production logging
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/space_booking.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        logging.getLogger().addHandler(file_handler)
        logging.getLogger().setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('Agenda de Espaços startup')
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(host='0.0.0.0', debug=True)
