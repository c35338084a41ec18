"""
Recurring reservation expansion.

Decides on which calendar dates a recurring reservation ("agendamento
fixo") blocks its space. Weekdays follow the stored convention
0=Sunday .. 6=Saturday.
"""

from datetime import date, timedelta

from utils.datetime_helpers import parse_local_date
from .reservation import RecurringReservation


WEEKDAY_LABELS = ['Dom', 'Seg', 'Ter', 'Qua', 'Qui', 'Sex', 'Sáb']


def weekday_of(on_date: date) -> int:
    """Weekday of a local calendar date, 0=Sunday .. 6=Saturday."""
    return on_date.isoweekday() % 7


def format_weekdays(weekdays) -> str:
    """Short labels for a weekday set, e.g. 'Seg, Qua, Sex'."""
    return ', '.join(WEEKDAY_LABELS[day] for day in sorted(weekdays) if 0 <= day <= 6)


def _date_bounds(rec: RecurringReservation) -> tuple | None:
    start = parse_local_date(rec.start_date)
    end = parse_local_date(rec.end_date)
    if start is None or end is None or start > end:
        return None
    return start, end


def is_active_on(rec: RecurringReservation, on_date) -> bool:
    """
    Check whether a recurring reservation blocks its space on a date.

    Unparsable dates and inverted date ranges never match.

    Args:
        rec: Recurring reservation
        on_date: 'YYYY-MM-DD' string or date

    Returns:
        bool: True if active, on a listed weekday and inside the range
    """
    if not rec.active:
        return False

    day = parse_local_date(on_date)
    if day is None:
        return False

    bounds = _date_bounds(rec)
    if bounds is None:
        return False

    start, end = bounds
    return start <= day <= end and weekday_of(day) in rec.weekdays


def iter_occurrences(rec: RecurringReservation, date_from=None, date_to=None):
    """
    Yield every date on which the recurring reservation is active.

    Args:
        rec: Recurring reservation
        date_from: Optional lower bound (inclusive)
        date_to: Optional upper bound (inclusive)

    Yields:
        date
    """
    if not rec.active or not rec.weekdays:
        return

    bounds = _date_bounds(rec)
    if bounds is None:
        return

    start, end = bounds
    lower = parse_local_date(date_from) if date_from is not None else None
    upper = parse_local_date(date_to) if date_to is not None else None
    if lower is not None:
        start = max(start, lower)
    if upper is not None:
        end = min(end, upper)

    current = start
    while current <= end:
        if weekday_of(current) in rec.weekdays:
            yield current
        current += timedelta(days=1)
