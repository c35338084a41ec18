"""
Recurring reservation ("agendamento fixo") data access functions.
"""

from datetime import date

from database import get_db
from .reservation import RecurringReservation, weekdays_to_csv


def create_recurring_reservation(
    space_id: int,
    user_id: int,
    start_date: date,
    end_date: date,
    weekdays,
    start_slot: int,
    end_slot: int,
    notes: str = None
) -> int:
    """
    Create an active recurring reservation.

    Args:
        space_id: Space ID
        user_id: Owner (professor responsible for the class)
        start_date: First day of the range (inclusive)
        end_date: Last day of the range (inclusive)
        weekdays: Iterable of weekday numbers, 0=Sunday .. 6=Saturday
        start_slot: First slot (inclusive)
        end_slot: Last slot (inclusive)
        notes: Optional free text

    Returns:
        int: New recurring reservation ID
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        INSERT INTO recurring_reservations (
            space_id, user_id, start_date, end_date, weekdays,
            start_slot, end_slot, notes, active
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, 1)
    ''', (space_id, user_id, start_date.isoformat(), end_date.isoformat(),
          weekdays_to_csv(weekdays), start_slot, end_slot, notes))
    db.commit()
    return cursor.lastrowid


def get_recurring_by_id(recurring_id: int) -> RecurringReservation | None:
    """
    Get a recurring reservation by ID.

    Returns:
        RecurringReservation or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM recurring_reservations WHERE id = ?', (recurring_id,))
    row = cursor.fetchone()
    return RecurringReservation.from_row(row) if row else None


def get_recurring_reservations(space_ids: list = None, active_only: bool = False) -> list:
    """
    List recurring reservations.

    Args:
        space_ids: Restrict to these spaces
        active_only: Skip deactivated entries

    Returns:
        list: RecurringReservation entities
    """
    db = get_db()
    cursor = db.cursor()

    query = 'SELECT * FROM recurring_reservations WHERE 1=1'
    params = []

    if space_ids is not None:
        if not space_ids:
            return []
        placeholders = ','.join('?' * len(space_ids))
        query += f' AND space_id IN ({placeholders})'
        params.extend(space_ids)

    if active_only:
        query += ' AND active = 1'

    query += ' ORDER BY space_id, start_date, id'

    cursor.execute(query, params)
    return [RecurringReservation.from_row(row) for row in cursor.fetchall()]


def update_recurring_reservation(recurring_id: int, **kwargs) -> bool:
    """
    Update recurring reservation fields.

    Args:
        recurring_id: Recurring reservation ID
        **kwargs: start_date, end_date (date), weekdays (iterable),
            start_slot, end_slot, notes, active

    Returns:
        True if updated successfully
    """
    db = get_db()

    allowed_fields = ['start_date', 'end_date', 'weekdays', 'start_slot', 'end_slot', 'notes', 'active']
    updates = []
    values = []

    for field in allowed_fields:
        if field not in kwargs:
            continue
        value = kwargs[field]
        if field == 'weekdays':
            value = weekdays_to_csv(value)
        elif field in ('start_date', 'end_date') and isinstance(value, date):
            value = value.isoformat()
        elif field == 'active':
            value = 1 if value else 0
        updates.append(f'{field} = ?')
        values.append(value)

    if not updates:
        return False

    updates.append('updated_at = CURRENT_TIMESTAMP')
    values.append(recurring_id)

    cursor = db.cursor()
    cursor.execute(f'UPDATE recurring_reservations SET {", ".join(updates)} WHERE id = ?', values)
    db.commit()

    return cursor.rowcount > 0


def deactivate_recurring_reservation(recurring_id: int) -> bool:
    """Soft delete: the block stops applying to every date."""
    return update_recurring_reservation(recurring_id, active=False)
