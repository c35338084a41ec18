"""
Input validation helper functions.
Provides validation for common input types and booking rules.
"""

import re
from datetime import date

from utils.datetime_helpers import parse_local_date, add_months


def validate_email(email: str) -> bool:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        True if valid email format
    """
    if not email:
        return False

    if '..' in email:
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def validate_date_format(date_str: str) -> bool:
    """
    Validate date is in YYYY-MM-DD format and exists on the calendar.

    Args:
        date_str: Date string to validate

    Returns:
        True if valid format
    """
    return isinstance(date_str, str) and parse_local_date(date_str) is not None


def validate_date_range(start_date: str, end_date: str, allow_equal: bool = True) -> bool:
    """
    Validate that end date is not before start date.

    Args:
        start_date: Start date (YYYY-MM-DD)
        end_date: End date (YYYY-MM-DD)
        allow_equal: Accept a single-day range

    Returns:
        True if valid date range
    """
    start = parse_local_date(start_date)
    end = parse_local_date(end_date)
    if start is None or end is None:
        return False
    return end >= start if allow_equal else end > start


def validate_booking_date(
    booking_date,
    today: date,
    max_months_ahead: int = 6,
    allow_sunday: bool = False
) -> tuple:
    """
    Validate the date of a new booking request.

    Rules: valid calendar date, not in the past, at most
    max_months_ahead months from today, no Sundays unless allowed.

    Args:
        booking_date: Date (YYYY-MM-DD string or date)
        today: Today's local date
        max_months_ahead: Booking horizon in months
        allow_sunday: Whether Sunday bookings are accepted

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not booking_date:
        return False, 'Data é obrigatória'

    parsed = parse_local_date(booking_date)
    if parsed is None:
        return False, 'Data inválida'

    if parsed < today:
        return False, 'Não é possível agendar para datas passadas'

    if parsed > add_months(today, max_months_ahead):
        return False, f'Agendamentos só podem ser feitos com até {max_months_ahead} meses de antecedência'

    if not allow_sunday and parsed.isoweekday() == 7:
        return False, 'Agendamentos não são permitidos aos domingos'

    return True, ''


def validate_weekdays(weekdays) -> tuple:
    """
    Validate a weekday selection (0=Sunday .. 6=Saturday).

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not weekdays:
        return False, 'Selecione pelo menos um dia da semana'

    for day in weekdays:
        if not isinstance(day, int) or isinstance(day, bool) or not 0 <= day <= 6:
            return False, f'Dia da semana inválido: {day}'

    return True, ''


def sanitize_input(text: str, max_length: int = None) -> str:
    """
    Sanitize text input by trimming, collapsing whitespace and limiting length.

    Args:
        text: Text to sanitize
        max_length: Maximum length (optional)

    Returns:
        Sanitized text
    """
    if not text:
        return ''

    sanitized = re.sub(r'\s+', ' ', text.strip())
    sanitized = sanitized.replace('<', '').replace('>', '')

    # Limit length if specified
    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
