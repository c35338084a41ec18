"""
Space (bookable room) data access functions.
"""

from database import get_db


def get_all_spaces(active_only: bool = True, space_ids: list = None) -> list:
    """
    Get spaces.

    Args:
        active_only: If True, only return active spaces
        space_ids: Optional list of IDs to restrict to

    Returns:
        List of space dicts ordered by name
    """
    db = get_db()
    cursor = db.cursor()

    query = 'SELECT * FROM spaces WHERE 1=1'
    params = []

    if active_only:
        query += ' AND active = 1'

    if space_ids is not None:
        if not space_ids:
            return []
        placeholders = ','.join('?' * len(space_ids))
        query += f' AND id IN ({placeholders})'
        params.extend(space_ids)

    query += ' ORDER BY name'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def get_space_by_id(space_id: int) -> dict:
    """
    Get space by ID.

    Returns:
        Space dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM spaces WHERE id = ?', (space_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def create_space(name: str, capacity: int, description: str = None, equipment: str = None) -> int:
    """
    Create a space.

    Returns:
        New space ID

    Raises:
        sqlite3.IntegrityError if the name already exists
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        INSERT INTO spaces (name, capacity, description, equipment)
        VALUES (?, ?, ?, ?)
    ''', (name, capacity, description, equipment))
    db.commit()
    return cursor.lastrowid


def update_space(space_id: int, **kwargs) -> bool:
    """
    Update space fields.

    Args:
        space_id: Space ID
        **kwargs: Fields to update (name, capacity, description, equipment, active)

    Returns:
        True if updated successfully
    """
    db = get_db()

    allowed_fields = ['name', 'capacity', 'description', 'equipment', 'active']
    updates = []
    values = []

    for field in allowed_fields:
        if field in kwargs:
            updates.append(f'{field} = ?')
            values.append(kwargs[field])

    if not updates:
        return False

    updates.append('updated_at = CURRENT_TIMESTAMP')
    values.append(space_id)

    cursor = db.cursor()
    cursor.execute(f'UPDATE spaces SET {", ".join(updates)} WHERE id = ?', values)
    db.commit()

    return cursor.rowcount > 0
