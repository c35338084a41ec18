"""
Reservation data access functions.
Handles reservation creation, snapshot queries and atomic status batches.
"""

from datetime import date

from database import get_db
from .booking_errors import StaleReservationError
from .reservation import (
    Reservation,
    RecurringReservation,
    STATUS_PENDING,
    RESERVATION_STATUSES,
)


# =============================================================================
# CREATE
# =============================================================================

def create_reservation(
    space_id: int,
    user_id: int,
    reservation_date: date,
    start_slot: int,
    end_slot: int,
    notes: str = None,
    recurring_reservation_id: int = None
) -> int:
    """
    Insert a new pending reservation.

    Conflict checks are the caller's job (see models.conflicts); this
    only persists.

    Args:
        space_id: Space ID
        user_id: Requesting user ID
        reservation_date: Local calendar date
        start_slot: First slot (inclusive)
        end_slot: Last slot (inclusive)
        notes: Optional free text
        recurring_reservation_id: Optional originating recurring reservation

    Returns:
        int: New reservation ID
    """
    db = get_db()
    cursor = db.cursor()

    try:
        cursor.execute('''
            INSERT INTO reservations (
                space_id, user_id, reservation_date, start_slot, end_slot,
                status, notes, recurring_reservation_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ''', (space_id, user_id, reservation_date.isoformat(), start_slot, end_slot,
              STATUS_PENDING, notes, recurring_reservation_id))
        reservation_id = cursor.lastrowid

        cursor.execute('''
            INSERT INTO reservation_status_history
            (reservation_id, old_status, new_status, changed_by, notes)
            VALUES (?, NULL, ?, ?, 'Solicitação criada')
        ''', (reservation_id, STATUS_PENDING, user_id))

        db.commit()
        return reservation_id

    except Exception:
        db.rollback()
        raise


# =============================================================================
# READ
# =============================================================================

def _filter_clause(prefix, status, space_ids, user_id, date_from, date_to) -> tuple:
    """
    AND-clauses for the reservation list filters.

    Args:
        prefix: Column prefix ('' or a table alias such as 'r.')

    Returns:
        tuple: (sql fragment, params)

    Raises:
        ValueError: Unknown status
    """
    clauses = []
    params = []

    if status:
        if status not in RESERVATION_STATUSES:
            raise ValueError(f'Unknown reservation status: {status}')
        clauses.append(f'{prefix}status = ?')
        params.append(status)

    if space_ids is not None:
        placeholders = ','.join('?' * len(space_ids))
        clauses.append(f'{prefix}space_id IN ({placeholders})')
        params.extend(space_ids)

    if user_id:
        clauses.append(f'{prefix}user_id = ?')
        params.append(user_id)

    if date_from:
        clauses.append(f'{prefix}reservation_date >= ?')
        params.append(date_from)

    if date_to:
        clauses.append(f'{prefix}reservation_date <= ?')
        params.append(date_to)

    return ''.join(f' AND {clause}' for clause in clauses), params

def get_reservation_by_id(reservation_id: int) -> Reservation | None:
    """
    Get a reservation entity by ID.

    Returns:
        Reservation or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM reservations WHERE id = ?', (reservation_id,))
    row = cursor.fetchone()
    return Reservation.from_row(row) if row else None


def get_reservation_details(reservation_id: int) -> dict:
    """
    Reservation with space and user names for display.

    Returns:
        dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT r.*, s.name as space_name,
               u.full_name as user_name, u.email as user_email
        FROM reservations r
        JOIN spaces s ON r.space_id = s.id
        JOIN users u ON r.user_id = u.id
        WHERE r.id = ?
    ''', (reservation_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_reservations(
    status: str = None,
    space_ids: list = None,
    user_id: int = None,
    date_from: str = None,
    date_to: str = None
) -> list:
    """
    List reservations with optional filters.

    Args:
        status: One of RESERVATION_STATUSES
        space_ids: Restrict to these spaces
        user_id: Restrict to one requester
        date_from: Lower date bound (YYYY-MM-DD, inclusive)
        date_to: Upper date bound (YYYY-MM-DD, inclusive)

    Returns:
        list: Reservation entities ordered by date, slot and creation
    """
    where, params = _filter_clause('', status, space_ids, user_id, date_from, date_to)
    if space_ids is not None and not space_ids:
        return []

    db = get_db()
    cursor = db.cursor()
    cursor.execute(f'''
        SELECT * FROM reservations WHERE 1=1{where}
        ORDER BY reservation_date, start_slot, created_at, id
    ''', params)
    return [Reservation.from_row(row) for row in cursor.fetchall()]


def get_reservation_list(
    status: str = None,
    space_ids: list = None,
    user_id: int = None,
    date_from: str = None,
    date_to: str = None
) -> list:
    """
    Reservations with space and user names, same filters as get_reservations.

    Returns:
        list: dicts ordered by date, slot and creation
    """
    where, params = _filter_clause('r.', status, space_ids, user_id, date_from, date_to)
    if space_ids is not None and not space_ids:
        return []

    db = get_db()
    cursor = db.cursor()
    cursor.execute(f'''
        SELECT r.*, s.name as space_name,
               u.full_name as user_name, u.email as user_email
        FROM reservations r
        JOIN spaces s ON r.space_id = s.id
        JOIN users u ON r.user_id = u.id
        WHERE 1=1{where}
        ORDER BY r.reservation_date, r.start_slot, r.created_at, r.id
    ''', params)
    return [dict(row) for row in cursor.fetchall()]


def count_reservations_by_status(
    space_ids: list = None,
    user_id: int = None,
    date_from: str = None,
    date_to: str = None
) -> dict:
    """Number of reservations per status (every status present, zero included)."""
    counts = dict.fromkeys(RESERVATION_STATUSES, 0)
    where, params = _filter_clause('', None, space_ids, user_id, date_from, date_to)
    if space_ids is not None and not space_ids:
        return counts

    db = get_db()
    cursor = db.cursor()
    cursor.execute(f'''
        SELECT status, COUNT(*) as total FROM reservations
        WHERE 1=1{where}
        GROUP BY status
    ''', params)
    for row in cursor.fetchall():
        counts[row['status']] = row['total']
    return counts


def get_space_snapshot(space_id: int, reservation_date: date = None) -> tuple:
    """
    Point-in-time snapshot of a space for conflict decisions.

    Args:
        space_id: Space ID
        reservation_date: Optional date to restrict reservations to

    Returns:
        tuple: (reservations: list[Reservation],
                recurring: list[RecurringReservation])
    """
    db = get_db()
    cursor = db.cursor()

    query = 'SELECT * FROM reservations WHERE space_id = ?'
    params = [space_id]
    if reservation_date is not None:
        query += ' AND reservation_date = ?'
        params.append(reservation_date.isoformat())
    query += ' ORDER BY id'

    cursor.execute(query, params)
    reservations = [Reservation.from_row(row) for row in cursor.fetchall()]

    cursor.execute('''
        SELECT * FROM recurring_reservations
        WHERE space_id = ?
        ORDER BY id
    ''', (space_id,))
    recurring = [RecurringReservation.from_row(row) for row in cursor.fetchall()]

    return reservations, recurring


def get_status_history(reservation_id: int) -> list:
    """
    Get status change history for a reservation.

    Returns:
        list: History entries, oldest first
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT * FROM reservation_status_history
        WHERE reservation_id = ?
        ORDER BY id
    ''', (reservation_id,))
    return [dict(r) for r in cursor.fetchall()]


# =============================================================================
# STATUS BATCHES
# =============================================================================

def apply_status_commands(commands: list, changed_by: int, notes: str = '') -> int:
    """
    Apply a batch of status commands in a single transaction.

    Each UPDATE only matches while the reservation still has the
    command's expected_status. If any command misses, the whole batch is
    rolled back.

    Args:
        commands: StatusCommand list (from models.approval)
        changed_by: User ID applying the batch
        notes: History note

    Returns:
        int: Number of reservations updated

    Raises:
        StaleReservationError: A reservation changed since the snapshot
    """
    if not commands:
        return 0

    db = get_db()
    cursor = db.cursor()

    try:
        for command in commands:
            cursor.execute('''
                UPDATE reservations
                SET status = ?,
                    resolved_by = ?,
                    resolved_at = CURRENT_TIMESTAMP,
                    updated_at = CURRENT_TIMESTAMP
                WHERE id = ? AND status = ?
            ''', (command.new_status, changed_by, command.reservation_id,
                  command.expected_status))

            if cursor.rowcount != 1:
                raise StaleReservationError(command.reservation_id, command.expected_status)

            cursor.execute('''
                INSERT INTO reservation_status_history
                (reservation_id, old_status, new_status, changed_by, notes)
                VALUES (?, ?, ?, ?, ?)
            ''', (command.reservation_id, command.expected_status, command.new_status,
                  changed_by, notes))

        db.commit()
        return len(commands)

    except Exception:
        db.rollback()
        raise
