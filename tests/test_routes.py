"""
Tests for the JSON HTTP interface (auth, api and booking blueprints).
"""

from datetime import date, timedelta

from conftest import LAB_ID, AUDITORIUM_ID, next_bookable_date


class TestAuthRoutes:
    """Tests for login/logout/me."""

    def test_login_success(self, client):
        response = client.post('/login', json={'username': 'gestor', 'password': 'gestor123'})
        data = response.get_json()
        assert response.status_code == 200
        assert data['data']['role'] == 'gestor'
        assert 'booking.approvals.manage' in data['data']['permissions']

    def test_login_wrong_password(self, client):
        response = client.post('/login', json={'username': 'gestor', 'password': 'x'})
        assert response.status_code == 401

    def test_login_missing_fields(self, client):
        response = client.post('/login', json={'username': 'gestor'})
        assert response.status_code == 400
        assert 'password' in response.get_json()['errors']

    def test_me_requires_login(self, client):
        response = client.get('/me')
        assert response.status_code == 401

    def test_logout(self, professor_client):
        assert professor_client.post('/logout').status_code == 200
        assert professor_client.get('/me').status_code == 401

    def test_csrf_token(self, client):
        data = client.get('/csrf-token').get_json()
        assert data['data']['csrf_token']


class TestApiRoutes:
    """Tests for public API endpoints."""

    def test_health(self, client):
        assert client.get('/api/health').get_json()['status'] == 'ok'

    def test_slots(self, client):
        data = client.get('/api/slots').get_json()
        assert data['count'] == 9
        assert data['slots'][5]['start'] == '13:00'


class TestSubmitReservation:
    """Tests for POST /booking/reservations."""

    def test_creates_pending(self, professor_client, booking_date, outbox):
        response = professor_client.post('/booking/reservations', json={
            'space_id': LAB_ID,
            'reservation_date': booking_date,
            'start_slot': 3,
            'end_slot': 4,
            'notes': '  Aula   prática  '
        })
        data = response.get_json()

        assert response.status_code == 201
        assert data['data']['status'] == 'pendente'
        assert data['data']['notes'] == 'Aula prática'
        assert 'warning' not in data
        assert [n.recipient for n in outbox] == ['gestor@agenda.local']

    def test_pending_competition_warns(self, professor_client, make_reservation, other_professor, booking_date):
        rival = make_reservation(user_id=other_professor, start_slot=4, end_slot=5)
        response = professor_client.post('/booking/reservations', json={
            'space_id': LAB_ID, 'reservation_date': booking_date,
            'start_slot': 3, 'end_slot': 4,
        })
        data = response.get_json()
        assert response.status_code == 201
        assert data['warning']
        assert data['data']['competing_ids'] == [rival]

    def test_blocked_by_approved(self, app, professor_client, make_reservation, other_professor, booking_date):
        from blueprints.booking.services.approval_service import approve_reservation

        winner = make_reservation(user_id=other_professor, start_slot=3, end_slot=3)
        with app.app_context():
            approve_reservation(winner, 2)

        response = professor_client.post('/booking/reservations', json={
            'space_id': LAB_ID, 'reservation_date': booking_date,
            'start_slot': 2, 'end_slot': 3,
        })
        data = response.get_json()
        assert response.status_code == 409
        assert data['reason'] == 'blocked_by_approved'
        assert data['conflicts']['approved_ids'] == [winner]

    def test_inverted_slots(self, professor_client, booking_date):
        response = professor_client.post('/booking/reservations', json={
            'space_id': LAB_ID, 'reservation_date': booking_date,
            'start_slot': 5, 'end_slot': 3,
        })
        assert response.status_code == 400
        assert response.get_json()['field'] == 'end_slot'

    def test_unknown_slot(self, professor_client, booking_date):
        response = professor_client.post('/booking/reservations', json={
            'space_id': LAB_ID, 'reservation_date': booking_date,
            'start_slot': 1, 'end_slot': 10,
        })
        assert response.status_code == 400
        assert 'Aula inexistente' in response.get_json()['error']

    def test_past_date(self, professor_client):
        past = (date.today() - timedelta(days=3)).isoformat()
        response = professor_client.post('/booking/reservations', json={
            'space_id': LAB_ID, 'reservation_date': past,
            'start_slot': 1, 'end_slot': 1,
        })
        assert response.status_code == 400
        assert response.get_json()['field'] == 'reservation_date'

    def test_inactive_space(self, app, professor_client, booking_date):
        from models.space import update_space

        with app.app_context():
            update_space(AUDITORIUM_ID, active=0)

        response = professor_client.post('/booking/reservations', json={
            'space_id': AUDITORIUM_ID, 'reservation_date': booking_date,
            'start_slot': 1, 'end_slot': 1,
        })
        assert response.status_code == 400
        assert response.get_json()['field'] == 'space_id'

    def test_requires_login(self, client, booking_date):
        response = client.post('/booking/reservations', json={
            'space_id': LAB_ID, 'reservation_date': booking_date,
            'start_slot': 1, 'end_slot': 1,
        })
        assert response.status_code == 401


class TestAvailabilityRoutes:
    """Tests for availability, conflicts and grid endpoints."""

    def test_availability(self, professor_client, make_reservation, booking_date):
        make_reservation(start_slot=1, end_slot=2)
        data = professor_client.get(
            f'/booking/availability?space_id={LAB_ID}&date={booking_date}&start_slot=2&end_slot=3'
        ).get_json()['data']
        assert data['available'] is True
        assert data['reason'] == 'pending'

    def test_availability_bad_date(self, professor_client):
        response = professor_client.get(
            f'/booking/availability?space_id={LAB_ID}&date=31/12/2025&start_slot=1&end_slot=1'
        )
        assert response.status_code == 400

    def test_grid(self, professor_client, make_reservation, booking_date):
        make_reservation(start_slot=2, end_slot=2)
        data = professor_client.get(
            f'/booking/grid?space_id={LAB_ID}&date={booking_date}'
        ).get_json()['data']
        assert data[1]['status'] == 'conflito'
        assert data[0]['status'] == 'disponivel'

    def test_conflicts_manager_only(self, professor_client, manager_client, booking_date):
        url = f'/booking/conflicts?space_id={LAB_ID}&date={booking_date}&start_slot=1&end_slot=9'
        assert professor_client.get(url).status_code == 403
        assert manager_client.get(url).get_json()['data']['has_conflicts'] is False

    def test_unknown_space(self, professor_client, booking_date):
        response = professor_client.get(f'/booking/grid?space_id=999&date={booking_date}')
        assert response.status_code == 404


class TestReservationViews:
    """Tests for reservation listing and detail."""

    def test_mine(self, professor_client, make_reservation, other_professor):
        mine = make_reservation()
        make_reservation(user_id=other_professor, start_slot=5, end_slot=5)
        data = professor_client.get('/booking/reservations/mine').get_json()
        assert [r['id'] for r in data['data']] == [mine]

    def test_mine_date_filters(self, professor_client, booking_date):
        response = professor_client.get('/booking/reservations/mine?date_from=01/03/2025')
        assert response.status_code == 400
        assert response.get_json()['field'] == 'date_from'

        response = professor_client.get(
            f'/booking/reservations/mine?date_from={booking_date}&date_to=2000-01-01'
        )
        assert response.status_code == 400

        response = professor_client.get(
            f'/booking/reservations/mine?date_from={booking_date}&date_to={booking_date}'
        )
        assert response.status_code == 200

    def test_detail_owner_and_manager(self, login_as, professor_client, manager_client, make_reservation, other_professor):
        reservation_id = make_reservation(user_id=other_professor)

        assert professor_client.get(f'/booking/reservations/{reservation_id}').status_code == 403
        data = manager_client.get(f'/booking/reservations/{reservation_id}').get_json()
        assert data['data']['history'][0]['new_status'] == 'pendente'

        owner = login_as('professora2', 'senha12345')
        assert owner.get(f'/booking/reservations/{reservation_id}').status_code == 200

    def test_list_all_with_stats(self, authenticated_client, make_reservation, other_professor):
        a = make_reservation()
        b = make_reservation(user_id=other_professor)
        c = make_reservation(space_id=AUDITORIUM_ID, start_slot=5, end_slot=5)
        authenticated_client.post(f'/booking/reservations/{a}/approve', json={})

        data = authenticated_client.get('/booking/reservations').get_json()
        assert data['count'] == 3
        assert data['stats'] == {'pendente': 1, 'aprovado': 1, 'rejeitado': 1}
        by_id = {r['id']: r for r in data['data']}
        assert by_id[b]['status'] == 'rejeitado'
        assert by_id[c]['space_name']
        assert by_id[b]['user_name'] == 'Professora Dois'

    def test_list_filters(self, authenticated_client, make_reservation, other_professor, booking_date):
        make_reservation()
        theirs = make_reservation(user_id=other_professor, space_id=AUDITORIUM_ID)

        data = authenticated_client.get(
            f'/booking/reservations?space_id={AUDITORIUM_ID}&status=pendente'
        ).get_json()
        assert [r['id'] for r in data['data']] == [theirs]
        assert data['stats']['pendente'] == 1

        data = authenticated_client.get(
            f'/booking/reservations?user_id={other_professor}&date_from={booking_date}'
        ).get_json()
        assert [r['id'] for r in data['data']] == [theirs]

        assert authenticated_client.get(
            '/booking/reservations?status=cancelado'
        ).status_code == 400
        assert authenticated_client.get(
            '/booking/reservations?date_to=amanha'
        ).get_json()['field'] == 'date_to'

    def test_list_professor_forbidden(self, professor_client, make_reservation):
        make_reservation()
        assert professor_client.get('/booking/reservations').status_code == 403

    def test_list_manager_sees_own_spaces(self, app, login_as, make_reservation):
        from models.user import create_user, assign_space_manager

        with app.app_context():
            other_id = create_user('gestor2', 'g2@agenda.local', 'senha12345', role='gestor')
            assign_space_manager(other_id, AUDITORIUM_ID)

        make_reservation(space_id=LAB_ID)
        auditorium = make_reservation(space_id=AUDITORIUM_ID)
        other = login_as('gestor2', 'senha12345')

        data = other.get('/booking/reservations').get_json()
        assert [r['id'] for r in data['data']] == [auditorium]
        assert data['stats']['pendente'] == 1

        assert other.get(f'/booking/reservations?space_id={LAB_ID}').status_code == 403


class TestApprovalRoutes:
    """Tests for approval endpoints."""

    def test_professor_cannot_approve(self, professor_client, make_reservation):
        reservation_id = make_reservation()
        response = professor_client.post(f'/booking/reservations/{reservation_id}/approve')
        assert response.status_code == 403

    def test_approve_cascade(self, manager_client, make_reservation, other_professor):
        a = make_reservation()
        b = make_reservation(user_id=other_professor)

        response = manager_client.post(f'/booking/reservations/{a}/approve', json={})
        data = response.get_json()
        assert response.status_code == 200
        assert data['data']['auto_rejected_ids'] == [b]
        assert data['warning']

        response = manager_client.post(f'/booking/reservations/{b}/approve', json={})
        assert response.status_code == 409
        assert response.get_json()['reason'] == 'blocked_by_approved'

    def test_manager_of_other_space_forbidden(self, app, login_as, make_reservation):
        from models.user import create_user, assign_space_manager

        with app.app_context():
            other_id = create_user('gestor2', 'g2@agenda.local', 'senha12345', role='gestor')
            assign_space_manager(other_id, AUDITORIUM_ID)

        reservation_id = make_reservation(space_id=LAB_ID)
        other = login_as('gestor2', 'senha12345')
        response = other.post(f'/booking/reservations/{reservation_id}/approve', json={})
        assert response.status_code == 403

        queue = other.get('/booking/approvals/pending').get_json()
        assert queue['count'] == 0

    def test_reject_and_not_pending(self, manager_client, make_reservation, outbox):
        reservation_id = make_reservation()
        assert manager_client.post(
            f'/booking/reservations/{reservation_id}/reject', json={'notes': 'Sala em manutenção'}
        ).status_code == 200
        assert [n.subject for n in outbox] == ['Agendamento rejeitado']

        response = manager_client.post(f'/booking/reservations/{reservation_id}/reject', json={})
        assert response.status_code == 409
        assert response.get_json()['reason'] == 'not_pending'

    def test_unknown_reservation(self, manager_client):
        assert manager_client.post('/booking/reservations/999/approve', json={}).status_code == 404

    def test_pending_queue(self, manager_client, make_reservation, other_professor):
        a = make_reservation()
        b = make_reservation(user_id=other_professor)
        data = manager_client.get('/booking/approvals/pending').get_json()
        assert data['count'] == 2
        assert data['data'][0]['competing_ids'] == [b]
        assert data['data'][1]['competing_ids'] == [a]

    def test_reject_bulk(self, manager_client, make_reservation):
        a = make_reservation(start_slot=1, end_slot=1)
        b = make_reservation(start_slot=2, end_slot=2)
        response = manager_client.post('/booking/approvals/reject-bulk', json={
            'reservation_ids': [a, b]
        })
        assert response.status_code == 200
        assert response.get_json()['data']['rejected_ids'] == [a, b]

    def test_reject_bulk_requires_ids(self, manager_client):
        response = manager_client.post('/booking/approvals/reject-bulk', json={'reservation_ids': []})
        assert response.status_code == 400


class TestRecurringRoutes:
    """Tests for recurring reservation endpoints."""

    def _payload(self, **overrides):
        start = date.today()
        payload = {
            'space_id': LAB_ID,
            'start_date': start.isoformat(),
            'end_date': (start + timedelta(days=90)).isoformat(),
            'weekdays': [next_bookable_date().isoweekday() % 7],
            'start_slot': 1,
            'end_slot': 3,
            'notes': 'Turma 8A',
        }
        payload.update(overrides)
        return payload

    def test_create_reports_shadowed(self, manager_client, make_reservation):
        shadowed = make_reservation(start_slot=2, end_slot=2)
        response = manager_client.post('/booking/recurring', json=self._payload())
        data = response.get_json()

        assert response.status_code == 201
        assert data['data']['active'] is True
        assert [r['id'] for r in data['shadowed_reservations']] == [shadowed]
        assert data['warning']

    def test_blocks_new_requests(self, manager_client, professor_client, booking_date):
        manager_client.post('/booking/recurring', json=self._payload())
        response = professor_client.post('/booking/reservations', json={
            'space_id': LAB_ID, 'reservation_date': booking_date,
            'start_slot': 3, 'end_slot': 3,
        })
        assert response.status_code == 409
        assert response.get_json()['reason'] == 'blocked_by_recurring'

    def test_requires_weekday(self, manager_client):
        response = manager_client.post('/booking/recurring', json=self._payload(weekdays=[]))
        assert response.status_code == 400
        assert 'weekdays' in response.get_json()['errors']

    def test_end_date_after_start(self, manager_client):
        today = date.today().isoformat()
        response = manager_client.post(
            '/booking/recurring', json=self._payload(start_date=today, end_date=today)
        )
        assert response.status_code == 400
        assert 'end_date' in response.get_json()['errors']

    def test_professor_cannot_create(self, professor_client):
        assert professor_client.post('/booking/recurring', json=self._payload()).status_code == 403

    def test_update_deactivate_and_occurrences(self, manager_client, professor_client, booking_date):
        recurring_id = manager_client.post(
            '/booking/recurring', json=self._payload()
        ).get_json()['data']['id']

        response = manager_client.put(
            f'/booking/recurring/{recurring_id}', json=self._payload(start_slot=7, end_slot=8)
        )
        assert response.status_code == 200
        assert response.get_json()['data']['start_slot'] == 7

        occurrences = professor_client.get(f'/booking/recurring/{recurring_id}/occurrences').get_json()
        assert booking_date in occurrences['data']

        assert manager_client.post(f'/booking/recurring/{recurring_id}/deactivate').status_code == 200
        listed = professor_client.get('/booking/recurring').get_json()
        assert listed['count'] == 0
        listed_all = professor_client.get('/booking/recurring?active_only=false').get_json()
        assert listed_all['data'][0]['active'] is False


class TestSpaceRoutes:
    """Tests for space endpoints."""

    def test_list(self, professor_client):
        data = professor_client.get('/booking/spaces').get_json()
        assert data['count'] == 3

    def test_detail_lists_managers(self, professor_client):
        data = professor_client.get(f'/booking/spaces/{LAB_ID}').get_json()['data']
        assert data['managers'][0]['email'] == 'gestor@agenda.local'
        assert data['can_manage'] is False

    def test_admin_creates_space(self, authenticated_client):
        response = authenticated_client.post('/booking/spaces', json={
            'name': 'Quadra Coberta', 'capacity': 200
        })
        assert response.status_code == 201

        duplicate = authenticated_client.post('/booking/spaces', json={
            'name': 'Quadra Coberta', 'capacity': 10
        })
        assert duplicate.status_code == 409

    def test_manager_cannot_create_space(self, manager_client):
        response = manager_client.post('/booking/spaces', json={'name': 'X', 'capacity': 1})
        assert response.status_code == 403

    def test_invalid_capacity(self, authenticated_client):
        response = authenticated_client.post('/booking/spaces', json={'name': 'Y', 'capacity': 0})
        assert response.status_code == 400

    def test_deactivate_space(self, authenticated_client, professor_client):
        response = authenticated_client.put(f'/booking/spaces/{AUDITORIUM_ID}', json={
            'name': 'Auditório', 'capacity': 120, 'active': False
        })
        assert response.status_code == 200
        assert response.get_json()['data']['active'] == 0
        assert professor_client.get('/booking/spaces').get_json()['count'] == 2
