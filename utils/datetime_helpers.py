"""Local calendar date and timezone helpers for the booking application."""

import calendar
import re
from datetime import date, datetime
from zoneinfo import ZoneInfo

from flask import current_app

_ISO_DATE_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$')


def parse_local_date(value) -> date | None:
    """
    Parse a YYYY-MM-DD value into a local calendar date.

    The string is split into year/month/day components and never goes
    through a timezone-aware parser, so the weekday cannot shift.

    Args:
        value: 'YYYY-MM-DD' string, date or datetime

    Returns:
        date, or None if the value cannot be interpreted
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    match = _ISO_DATE_RE.match(value.strip())
    if not match:
        return None

    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_iso_date(value: date | None) -> str | None:
    """Format a date as YYYY-MM-DD (None passes through)."""
    return value.isoformat() if value else None


def add_months(start: date, months: int) -> date:
    """Add calendar months to a date, clamping the day to the month length."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def get_timezone() -> ZoneInfo:
    """Get the configured timezone."""
    tz_name = current_app.config.get('TIMEZONE', 'America/Sao_Paulo')
    return ZoneInfo(tz_name)


def get_today() -> date:
    """Get today's date in the configured timezone."""
    return datetime.now(get_timezone()).date()
