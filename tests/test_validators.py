"""
Tests for input validation utilities and local date helpers.
"""

from datetime import date, datetime

from utils.datetime_helpers import add_months, parse_local_date
from utils.validators import (
    validate_email,
    validate_date_range,
    validate_date_format,
    validate_booking_date,
    validate_weekdays,
    sanitize_input
)

# Wednesday
TODAY = date(2025, 3, 12)


class TestValidateEmail:
    """Tests for email validation."""

    def test_valid_email(self):
        """Test valid email formats."""
        assert validate_email('user@example.com') is True
        assert validate_email('professor.silva@escola.edu.br') is True

    def test_invalid_email(self):
        """Test invalid email formats."""
        assert validate_email('') is False
        assert validate_email(None) is False
        assert validate_email('invalid') is False
        assert validate_email('a..b@example.com') is False


class TestParseLocalDate:
    """Tests for strict YYYY-MM-DD parsing."""

    def test_components_parsed_without_timezone(self):
        """The calendar date is exactly the one written."""
        assert parse_local_date('2025-03-10') == date(2025, 3, 10)

    def test_passthrough(self):
        assert parse_local_date(date(2025, 3, 10)) == date(2025, 3, 10)
        assert parse_local_date(datetime(2025, 3, 10, 23, 59)) == date(2025, 3, 10)

    def test_rejects_other_formats(self):
        """Only zero-padded ISO dates are accepted."""
        assert parse_local_date('10/03/2025') is None
        assert parse_local_date('2025-3-10') is None
        assert parse_local_date('2025-03-10T00:00:00Z') is None
        assert parse_local_date('2025-02-29') is None
        assert parse_local_date(20250310) is None


class TestAddMonths:
    """Tests for calendar month arithmetic."""

    def test_simple(self):
        assert add_months(date(2025, 3, 12), 6) == date(2025, 9, 12)

    def test_year_wrap(self):
        assert add_months(date(2025, 10, 5), 6) == date(2026, 4, 5)

    def test_clamps_day(self):
        assert add_months(date(2025, 8, 31), 6) == date(2026, 2, 28)


class TestValidateDateRange:
    """Tests for date range validation."""

    def test_valid_date_range(self):
        assert validate_date_range('2025-01-01', '2025-01-05') is True
        assert validate_date_range('2025-01-01', '2025-01-01') is True

    def test_strict_range(self):
        assert validate_date_range('2025-01-01', '2025-01-01', allow_equal=False) is False

    def test_invalid_date_range(self):
        assert validate_date_range('2025-01-05', '2025-01-01') is False
        assert validate_date_range('01-01-2025', '05-01-2025') is False

    def test_date_format(self):
        assert validate_date_format('2025-03-10') is True
        assert validate_date_format('2025-13-10') is False


class TestValidateBookingDate:
    """Tests for the booking date policy."""

    def test_valid_dates(self):
        assert validate_booking_date('2025-03-12', TODAY) == (True, '')
        assert validate_booking_date('2025-09-12', TODAY) == (True, '')

    def test_required(self):
        assert validate_booking_date('', TODAY) == (False, 'Data é obrigatória')

    def test_invalid(self):
        assert validate_booking_date('2025-02-30', TODAY) == (False, 'Data inválida')

    def test_past(self):
        is_valid, error = validate_booking_date('2025-03-11', TODAY)
        assert is_valid is False
        assert 'passadas' in error

    def test_too_far_ahead(self):
        is_valid, error = validate_booking_date('2025-09-13', TODAY)
        assert is_valid is False
        assert '6 meses' in error

    def test_sunday(self):
        """2025-03-16 is a Sunday."""
        is_valid, error = validate_booking_date('2025-03-16', TODAY)
        assert is_valid is False
        assert 'domingos' in error
        assert validate_booking_date('2025-03-16', TODAY, allow_sunday=True) == (True, '')


class TestValidateWeekdays:
    """Tests for weekday selection."""

    def test_valid(self):
        assert validate_weekdays([0, 1, 6]) == (True, '')

    def test_empty(self):
        assert validate_weekdays([]) == (False, 'Selecione pelo menos um dia da semana')

    def test_out_of_range(self):
        is_valid, error = validate_weekdays([1, 7])
        assert is_valid is False
        assert '7' in error


class TestSanitizeInput:
    """Tests for input sanitization."""

    def test_trim_whitespace(self):
        assert sanitize_input('  hello  ') == 'hello'

    def test_collapse_whitespace(self):
        assert sanitize_input('hello    world') == 'hello world'

    def test_strips_angle_brackets(self):
        assert sanitize_input('<b>Aula</b>') == 'bAula/b'

    def test_max_length(self):
        assert sanitize_input('a' * 600, max_length=500) == 'a' * 500

    def test_empty_input(self):
        assert sanitize_input('') == ''
        assert sanitize_input(None) == ''
