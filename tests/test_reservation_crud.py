"""
Tests for reservation persistence: snapshots and atomic status batches.
"""

import pytest
from datetime import date

from conftest import LAB_ID, AUDITORIUM_ID, MANAGER_ID, PROFESSOR_ID, next_bookable_date


class TestCreateReservation:
    """Tests for create_reservation."""

    def test_creates_pending_with_history(self, app, make_reservation):
        """New reservations start pending with a history entry."""
        from models.reservation_crud import get_reservation_by_id, get_status_history

        reservation_id = make_reservation(start_slot=2, end_slot=3, notes='Aula de robótica')

        with app.app_context():
            reservation = get_reservation_by_id(reservation_id)
            assert reservation.status == 'pendente'
            assert reservation.slot_range.start == 2
            assert reservation.reservation_date == next_bookable_date()
            assert reservation.notes == 'Aula de robótica'

            history = get_status_history(reservation_id)
            assert len(history) == 1
            assert history[0]['old_status'] is None
            assert history[0]['new_status'] == 'pendente'

    def test_details_join_space_and_user(self, app, make_reservation):
        from models.reservation_crud import get_reservation_details

        reservation_id = make_reservation()
        with app.app_context():
            details = get_reservation_details(reservation_id)
            assert details['space_name'] == 'Laboratório de Informática'
            assert details['user_email'] == 'professor@agenda.local'


class TestGetReservations:
    """Tests for get_reservations filters."""

    def test_filters(self, app, make_reservation):
        from models.reservation_crud import get_reservations

        make_reservation(space_id=LAB_ID)
        make_reservation(space_id=AUDITORIUM_ID)
        make_reservation(space_id=AUDITORIUM_ID, user_id=MANAGER_ID, start_slot=5, end_slot=5)

        with app.app_context():
            assert len(get_reservations()) == 3
            assert len(get_reservations(space_ids=[AUDITORIUM_ID])) == 2
            assert len(get_reservations(user_id=MANAGER_ID)) == 1
            assert get_reservations(space_ids=[]) == []
            assert len(get_reservations(status='pendente')) == 3

    def test_unknown_status(self, app):
        from models.reservation_crud import get_reservations

        with app.app_context():
            with pytest.raises(ValueError):
                get_reservations(status='cancelado')


class TestSpaceSnapshot:
    """Tests for get_space_snapshot."""

    def test_snapshot_scoped_to_space_and_date(self, app, make_reservation):
        from models.reservation_crud import get_space_snapshot
        from models.recurring_reservation import create_recurring_reservation

        day = next_bookable_date()
        other_day = next_bookable_date(days_ahead=14)
        make_reservation(reservation_date=day)
        make_reservation(reservation_date=other_day)
        make_reservation(space_id=AUDITORIUM_ID, reservation_date=day)

        with app.app_context():
            create_recurring_reservation(
                LAB_ID, MANAGER_ID, date(2025, 1, 1), date(2030, 12, 31),
                [1, 3], 1, 2
            )
            reservations, recurring = get_space_snapshot(LAB_ID, day)
            assert len(reservations) == 1
            assert reservations[0].reservation_date == day
            assert len(recurring) == 1
            assert recurring[0].weekdays == frozenset({1, 3})

            all_reservations, _ = get_space_snapshot(LAB_ID)
            assert len(all_reservations) == 2


class TestApplyStatusCommands:
    """Tests for the compare-and-swap status batch."""

    def test_applies_batch(self, app, make_reservation):
        """All commands land together with history rows."""
        from models.approval import StatusCommand
        from models.reservation_crud import apply_status_commands, get_reservation_by_id, get_status_history

        first = make_reservation()
        second = make_reservation()

        with app.app_context():
            count = apply_status_commands([
                StatusCommand(second, 'rejeitado'),
                StatusCommand(first, 'aprovado'),
            ], changed_by=MANAGER_ID, notes='Aprovado')

            assert count == 2
            assert get_reservation_by_id(first).status == 'aprovado'
            assert get_reservation_by_id(second).status == 'rejeitado'
            assert get_status_history(first)[-1]['changed_by'] == MANAGER_ID

    def test_stale_command_rolls_back_whole_batch(self, app, make_reservation):
        """A command whose expected status no longer holds undoes the batch."""
        from models.approval import StatusCommand
        from models.booking_errors import StaleReservationError
        from models.reservation_crud import apply_status_commands, get_reservation_by_id, get_status_history

        rival = make_reservation()
        target = make_reservation()

        with app.app_context():
            apply_status_commands([StatusCommand(target, 'rejeitado')], changed_by=MANAGER_ID)

            with pytest.raises(StaleReservationError) as exc:
                apply_status_commands([
                    StatusCommand(rival, 'rejeitado'),
                    StatusCommand(target, 'aprovado'),
                ], changed_by=MANAGER_ID)

            assert exc.value.reservation_id == target
            assert get_reservation_by_id(rival).status == 'pendente'
            assert get_reservation_by_id(target).status == 'rejeitado'
            assert len(get_status_history(rival)) == 1

    def test_empty_batch(self, app):
        from models.reservation_crud import apply_status_commands

        with app.app_context():
            assert apply_status_commands([], changed_by=PROFESSOR_ID) == 0
