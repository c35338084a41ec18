"""
Tests for the booking request service.
"""

import pytest

from conftest import (
    AUDITORIUM_ID,
    LAB_ID,
    MANAGER_ID,
    PROFESSOR_ID,
    insert_from_other_connection,
    next_bookable_date,
)


class TestSubmitReservation:
    """Tests for submit_reservation."""

    def test_creates_pending(self, app, outbox):
        from blueprints.booking.services.booking_service import submit_reservation

        day = next_bookable_date().isoformat()
        with app.app_context():
            details, warning = submit_reservation(PROFESSOR_ID, LAB_ID, day, 1, 2,
                                                  notes='  Aula de redes  ')

        assert details['status'] == 'pendente'
        assert details['reservation_date'] == day
        assert details['notes'] == 'Aula de redes'
        assert warning is None
        assert [n.recipient for n in outbox] == ['gestor@agenda.local']

    def test_competing_pending_gets_warning(self, app, make_reservation, other_professor):
        from blueprints.booking.services.booking_service import submit_reservation

        first = make_reservation(start_slot=2, end_slot=3)
        with app.app_context():
            details, warning = submit_reservation(other_professor, LAB_ID,
                                                  next_bookable_date(), 3, 4)

        assert warning
        assert details['competing_ids'] == [first]

    def test_approved_slot_refused(self, app, make_reservation, other_professor):
        from blueprints.booking.services.approval_service import approve_reservation
        from blueprints.booking.services.booking_service import submit_reservation
        from models.booking_errors import SlotUnavailableError
        from models.reservation_crud import get_reservations

        a = make_reservation()
        with app.app_context():
            approve_reservation(a, MANAGER_ID)
            with pytest.raises(SlotUnavailableError) as exc:
                submit_reservation(other_professor, LAB_ID, next_bookable_date(), 2, 2)

            assert exc.value.reason == 'approved'
            assert len(get_reservations(space_ids=[LAB_ID])) == 1

    def test_inactive_space_refused(self, app):
        from blueprints.booking.services.booking_service import submit_reservation
        from models.booking_errors import BookingValidationError
        from models.space import update_space

        with app.app_context():
            update_space(AUDITORIUM_ID, active=0)
            with pytest.raises(BookingValidationError) as exc:
                submit_reservation(PROFESSOR_ID, AUDITORIUM_ID, next_bookable_date(), 1, 1)

        assert exc.value.field == 'space_id'


class TestSubmitIsolation:
    """The availability check and the insert cannot be split by another writer."""

    def test_rival_waits_for_insert(self, app, monkeypatch, other_professor):
        from blueprints.booking.services import booking_service
        from models.reservation_crud import get_reservations, get_space_snapshot

        day = next_bookable_date()
        outcomes = []

        def snapshot_then_rival(space_id, reservation_date=None):
            snapshot = get_space_snapshot(space_id, reservation_date)
            outcomes.append(insert_from_other_connection(day.isoformat(),
                                                         user_id=other_professor))
            return snapshot

        monkeypatch.setattr(booking_service, 'get_space_snapshot', snapshot_then_rival)

        with app.app_context():
            details, warning = booking_service.submit_reservation(PROFESSOR_ID, LAB_ID,
                                                                  day, 1, 2)

            assert outcomes == ['locked']
            assert warning is None
            assert [r.id for r in get_reservations(space_ids=[LAB_ID])] == [details['id']]

    def test_refusal_releases_lock(self, app, make_reservation, other_professor):
        from blueprints.booking.services.approval_service import approve_reservation
        from blueprints.booking.services.booking_service import submit_reservation
        from models.booking_errors import SlotUnavailableError

        day = next_bookable_date()
        a = make_reservation(reservation_date=day)

        with app.app_context():
            approve_reservation(a, MANAGER_ID)
            with pytest.raises(SlotUnavailableError):
                submit_reservation(other_professor, LAB_ID, day, 1, 1)

            assert insert_from_other_connection(day.isoformat(), start_slot=9,
                                                end_slot=9) == 'inserted'
