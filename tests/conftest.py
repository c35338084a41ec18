"""
Pytest configuration and fixtures.
Ensures tests use an isolated test database, not the production database.

Seed data (database/seed.py):
    users:  1 admin/admin123, 2 gestor/gestor123, 3 professor/professor123
    spaces: 1 Laboratório de Informática, 2 Auditório, 3 Sala de Vídeo
            (gestor manages all three)
"""

import os
import sqlite3
import pytest
import tempfile
from datetime import date, timedelta

# Set test database path BEFORE importing app
# This ensures all tests use an isolated database
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), 'space_booking_test.db')
os.environ['DATABASE_PATH'] = TEST_DB_PATH

ADMIN_ID = 1
MANAGER_ID = 2
PROFESSOR_ID = 3
LAB_ID = 1
AUDITORIUM_ID = 2


def next_bookable_date(days_ahead: int = 7) -> date:
    """A date inside the booking horizon that is not a Sunday."""
    candidate = date.today() + timedelta(days=days_ahead)
    if candidate.isoweekday() == 7:
        candidate += timedelta(days=1)
    return candidate


def insert_from_other_connection(reservation_date, space_id=LAB_ID, user_id=PROFESSOR_ID,
                                  start_slot=1, end_slot=2):
    """
    Insert a pending request the way a second worker process would.

    Returns 'inserted', or 'locked' when another connection holds the
    write lock for longer than the short busy timeout.
    """
    conn = sqlite3.connect(TEST_DB_PATH, timeout=0.1)
    try:
        conn.execute('''
            INSERT INTO reservations (space_id, user_id, reservation_date, start_slot, end_slot)
            VALUES (?, ?, ?, ?, ?)
        ''', (space_id, user_id, reservation_date, start_slot, end_slot))
        conn.commit()
        return 'inserted'
    except sqlite3.OperationalError:
        return 'locked'
    finally:
        conn.close()


@pytest.fixture(scope='session', autouse=True)
def setup_test_environment():
    """Set up test environment before any tests run."""
    # Ensure test database path is set
    os.environ['DATABASE_PATH'] = TEST_DB_PATH
    os.environ['FLASK_ENV'] = 'test'

    yield

    # Cleanup: remove test database after all tests
    for suffix in ('', '-wal', '-shm'):
        path = TEST_DB_PATH + suffix
        if os.path.exists(path):
            try:
                os.remove(path)
            except PermissionError:
                pass  # Windows may have file locked


@pytest.fixture
def app():
    """Create test application with isolated database."""
    from app import create_app
    from database import init_db

    # Ensure test database path
    os.environ['DATABASE_PATH'] = TEST_DB_PATH

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    app.config['DATABASE_PATH'] = TEST_DB_PATH

    with app.app_context():
        init_db()

    # Requests push their own app context (fresh g per request)
    yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def login_as(app):
    """Factory returning a logged-in test client for a seeded user."""
    def _login(username, password):
        client = app.test_client()
        response = client.post('/login', json={
            'username': username,
            'password': password
        })
        assert response.status_code == 200, response.get_json()
        return client
    return _login


@pytest.fixture
def authenticated_client(login_as):
    """Client logged in as admin."""
    return login_as('admin', 'admin123')


@pytest.fixture
def manager_client(login_as):
    """Client logged in as the seeded gestor."""
    return login_as('gestor', 'gestor123')


@pytest.fixture
def professor_client(login_as):
    """Client logged in as the seeded professor (role usuario)."""
    return login_as('professor', 'professor123')


@pytest.fixture
def booking_date():
    """ISO date that passes the booking date policy."""
    return next_bookable_date().isoformat()


@pytest.fixture
def outbox(app):
    """Notifications captured by the log sender."""
    sender = app.extensions['notification_sender']
    sender.outbox.clear()
    return sender.outbox


@pytest.fixture
def make_reservation(app):
    """Insert a pending reservation directly (no booking rules)."""
    from models.reservation_crud import create_reservation

    def _make(space_id=LAB_ID, user_id=PROFESSOR_ID, reservation_date=None,
              start_slot=1, end_slot=2, notes=None):
        with app.app_context():
            return create_reservation(
                space_id=space_id,
                user_id=user_id,
                reservation_date=reservation_date or next_bookable_date(),
                start_slot=start_slot,
                end_slot=end_slot,
                notes=notes,
            )
    return _make


@pytest.fixture
def other_professor(app):
    """A second usuario account: returns its ID."""
    from models.user import create_user

    with app.app_context():
        return create_user('professora2', 'prof2@agenda.local', 'senha12345',
                           full_name='Professora Dois')
