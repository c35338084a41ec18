"""
User model and data access functions.
Handles user authentication, roles, space assignments, user administration
and Flask-Login integration.
"""

from werkzeug.security import generate_password_hash, check_password_hash
from database import get_db
from utils.validators import validate_email


ROLE_ADMIN = 'admin'
ROLE_MANAGER = 'gestor'
ROLE_USER = 'usuario'

ROLES = (ROLE_ADMIN, ROLE_MANAGER, ROLE_USER)

ROLE_LABELS = {
    ROLE_ADMIN: 'Administrador',
    ROLE_MANAGER: 'Gestor',
    ROLE_USER: 'Usuário',
}


class User:
    """
    User class for Flask-Login integration.
    Wraps database row dictionary with required Flask-Login properties.
    """

    def __init__(self, user_dict):
        """
        Initialize User from database row.

        Args:
            user_dict: Dictionary with user data from database
        """
        self.id = user_dict['id']
        self.username = user_dict['username']
        self.email = user_dict['email']
        self.full_name = user_dict['full_name']
        self.role = user_dict['role']
        self.active = user_dict['active']
        self.created_at = user_dict['created_at']
        self.last_login = user_dict.get('last_login')

    @property
    def is_authenticated(self):
        """Required by Flask-Login."""
        return True

    @property
    def is_active(self):
        """Required by Flask-Login."""
        return self.active == 1

    @property
    def is_anonymous(self):
        """Required by Flask-Login."""
        return False

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    def get_id(self):
        """Required by Flask-Login. Returns user ID as unicode string."""
        return str(self.id)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'full_name': self.full_name,
            'role': self.role,
            'role_label': ROLE_LABELS.get(self.role, self.role),
        }


def get_user_by_id(user_id: int) -> dict:
    """
    Get user by ID.

    Args:
        user_id: User ID

    Returns:
        User dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM users WHERE id = ?', (user_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_user_by_username(username: str) -> dict:
    """
    Get user by username.

    Args:
        username: Username to search for

    Returns:
        User dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM users WHERE username = ?', (username,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_user_by_email(email: str) -> dict:
    """
    Get user by email.

    Args:
        email: Email to search for

    Returns:
        User dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM users WHERE email = ?', (email,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_all_users(active_only: bool = True, role: str = None) -> list:
    """
    Get all users.

    Args:
        active_only: If True, only return active users
        role: Restrict to one of ROLES

    Returns:
        List of user dicts (without password hashes)
    """
    db = get_db()
    cursor = db.cursor()

    query = '''
        SELECT id, username, email, full_name, phone, role, active,
               created_at, updated_at, last_login
        FROM users WHERE 1=1
    '''
    params = []

    if active_only:
        query += ' AND active = 1'

    if role:
        query += ' AND role = ?'
        params.append(role)

    query += ' ORDER BY full_name COLLATE NOCASE, username'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def count_active_admins() -> int:
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT COUNT(*) FROM users WHERE role = ? AND active = 1', (ROLE_ADMIN,))
    return cursor.fetchone()[0]


def create_user(username: str, email: str, password: str, full_name: str = None,
                role: str = ROLE_USER, phone: str = None) -> int:
    """
    Create new user with hashed password.

    Args:
        username: Unique username
        email: Unique email
        password: Plain text password (will be hashed)
        full_name: User's full name
        role: One of ROLES
        phone: Optional phone number

    Returns:
        New user ID

    Raises:
        ValueError: Unknown role or malformed email
        sqlite3.IntegrityError if username or email already exists
    """
    if role not in ROLES:
        raise ValueError(f'Unknown role: {role}')
    if not validate_email(email):
        raise ValueError(f'Invalid email: {email}')

    db = get_db()
    password_hash = generate_password_hash(password)

    cursor = db.cursor()
    cursor.execute('''
        INSERT INTO users (username, email, password_hash, full_name, role, phone)
        VALUES (?, ?, ?, ?, ?, ?)
    ''', (username, email, password_hash, full_name, role, phone))

    db.commit()
    return cursor.lastrowid


def update_user(user_id: int, **kwargs) -> bool:
    """
    Update user fields.

    Args:
        user_id: User ID to update
        **kwargs: Fields to update (email, full_name, phone, role, active)

    Returns:
        True if updated successfully

    Raises:
        ValueError: Unknown role or malformed email
        sqlite3.IntegrityError if the email belongs to another user
    """
    if 'role' in kwargs and kwargs['role'] not in ROLES:
        raise ValueError(f"Unknown role: {kwargs['role']}")
    if 'email' in kwargs and not validate_email(kwargs['email']):
        raise ValueError(f"Invalid email: {kwargs['email']}")

    db = get_db()

    allowed_fields = ['email', 'full_name', 'phone', 'role', 'active']
    updates = []
    values = []

    for field in allowed_fields:
        if field in kwargs:
            updates.append(f'{field} = ?')
            values.append(kwargs[field])

    if not updates:
        return False

    updates.append('updated_at = CURRENT_TIMESTAMP')
    values.append(user_id)

    query = f'UPDATE users SET {", ".join(updates)} WHERE id = ?'

    cursor = db.cursor()
    cursor.execute(query, values)
    db.commit()

    return cursor.rowcount > 0


def update_password(user_id: int, new_password: str) -> bool:
    """
    Update user password.

    Args:
        user_id: User ID
        new_password: New plain text password (will be hashed)

    Returns:
        True if updated successfully
    """
    db = get_db()
    password_hash = generate_password_hash(new_password)

    cursor = db.cursor()
    cursor.execute('''
        UPDATE users
        SET password_hash = ?, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (password_hash, user_id))

    db.commit()
    return cursor.rowcount > 0


def delete_user(user_id: int) -> bool:
    """
    Soft delete user (set active = 0).

    Reservations keep pointing at the user, so rows are never removed.

    Returns:
        True if deleted successfully
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        UPDATE users SET active = 0, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (user_id,))

    db.commit()
    return cursor.rowcount > 0


def update_last_login(user_id: int) -> None:
    """
    Update last login timestamp.

    Args:
        user_id: User ID
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        UPDATE users SET last_login = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (user_id,))
    db.commit()


def check_password(user_dict: dict, password: str) -> bool:
    """
    Verify password against stored hash.

    Args:
        user_dict: User dictionary with password_hash
        password: Plain text password to check

    Returns:
        True if password matches
    """
    return check_password_hash(user_dict['password_hash'], password)


# =============================================================================
# SPACE ASSIGNMENTS
# =============================================================================

def get_managed_space_ids(user_id: int) -> list:
    """IDs of the spaces a manager is responsible for."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT space_id FROM space_managers
        WHERE user_id = ?
        ORDER BY space_id
    ''', (user_id,))
    return [row['space_id'] for row in cursor.fetchall()]


def get_space_managers(space_id: int) -> list:
    """
    Active managers of a space (used for notifications).

    Returns:
        List of user dicts
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT u.* FROM users u
        JOIN space_managers sm ON sm.user_id = u.id
        WHERE sm.space_id = ? AND u.active = 1
        ORDER BY u.id
    ''', (space_id,))
    return [dict(row) for row in cursor.fetchall()]


def assign_space_manager(user_id: int, space_id: int) -> bool:
    """
    Make a user responsible for a space.

    Returns:
        True if a new assignment was created
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        INSERT OR IGNORE INTO space_managers (user_id, space_id)
        VALUES (?, ?)
    ''', (user_id, space_id))
    db.commit()
    return cursor.rowcount > 0


def set_managed_spaces(user_id: int, space_ids: list) -> list:
    """
    Replace the spaces a manager is responsible for.

    Args:
        user_id: Manager user ID
        space_ids: New complete list (empty clears every assignment)

    Returns:
        The stored space IDs, sorted
    """
    unique_ids = sorted(set(space_ids))
    db = get_db()
    cursor = db.cursor()

    try:
        cursor.execute('DELETE FROM space_managers WHERE user_id = ?', (user_id,))
        cursor.executemany(
            'INSERT INTO space_managers (user_id, space_id) VALUES (?, ?)',
            [(user_id, space_id) for space_id in unique_ids]
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    return unique_ids
