import pytest
from fastapi.testclient import TestClient

from agenda.auth.jwt_handler import create_access_token
from agenda.database import get_db
from agenda.main import app


@pytest.fixture
def client(appointment_db, users):
    def override_get_db():
        yield appointment_db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _auth(email: str) -> dict:
    return {'Authorization': f'Bearer {create_access_token(subject=email)}'}


SYNC_BODY = {
    'title': 'Sync',
    'appointmentDate': '2024-06-01',
    'appointmentTime': '09:00',
    'duration': 30,
    'participants': [{'email': 'u2@x.com'}],
}


def test_requests_without_token_are_unauthorized(client) -> None:
    response = client.get('/appointments', params={'date': '2024-06-01'})

    assert response.status_code == 401
    assert response.json() == {'error': 'Unauthorized'}


def test_booking_round_trip_over_http(client) -> None:
    created = client.post('/appointments', json=SYNC_BODY, headers=_auth('u1@x.com'))

    assert created.status_code == 201
    body = created.json()
    assert body['success'] is True
    appointment_id = body['appointment']['id']
    assert body['appointment']['participants'] == [
        {
            'id': body['appointment']['participants'][0]['id'],
            'user_id': body['appointment']['participants'][0]['user_id'],
            'email': 'u2@x.com',
            'is_confirmed': False,
            'name': 'Bruno Costa',
        }
    ]

    listed = client.get('/appointments', params={'date': '2024-06-01'}, headers=_auth('u2@x.com'))
    assert listed.status_code == 200
    assert [appointment['id'] for appointment in listed.json()] == [appointment_id]
    assert listed.json()[0]['appointment_time'] == '09:00:00'

    forbidden = client.put(f'/appointments/{appointment_id}', json=SYNC_BODY, headers=_auth('u2@x.com'))
    assert forbidden.status_code == 403
    assert forbidden.json()['code'] == 'FORBIDDEN'

    deleted = client.delete(f'/appointments/{appointment_id}', headers=_auth('u1@x.com'))
    assert deleted.status_code == 200
    assert deleted.json() == {'success': True, 'message': 'Appointment deleted successfully'}

    missing = client.delete(f'/appointments/{appointment_id}', headers=_auth('u1@x.com'))
    assert missing.status_code == 404
    assert missing.json() == {'error': 'Appointment not found', 'code': 'NOT_FOUND'}


def test_unknown_participants_are_reported_verbatim(client) -> None:
    body = dict(SYNC_BODY, participants=[{'email': 'ghost@x.com'}])

    response = client.post('/appointments', json=body, headers=_auth('u1@x.com'))

    assert response.status_code == 400
    assert response.json() == {
        'error': 'Some participants are not registered users',
        'code': 'UNKNOWN_PARTICIPANTS',
        'unknownParticipants': ['ghost@x.com'],
    }


def test_list_without_date_is_a_bad_request(client) -> None:
    response = client.get('/appointments', headers=_auth('u1@x.com'))

    assert response.status_code == 400
    assert response.json() == {'error': 'Date is required'}


def test_malformed_body_maps_to_validation_envelope(client) -> None:
    body = dict(SYNC_BODY, appointmentDate='not-a-date')

    response = client.post('/appointments', json=body, headers=_auth('u1@x.com'))

    assert response.status_code == 400
    assert response.json() == {
        'error': 'Invalid request payload',
        'code': 'VALIDATION_ERROR',
        'fields': ['appointmentDate'],
    }


def test_me_echoes_the_verified_identity(client, users) -> None:
    response = client.get('/auth/me', headers=_auth('u3@x.com'))

    assert response.status_code == 200
    assert response.json() == {'id': users['u3'].id, 'name': 'Chloe Dubois', 'email': 'u3@x.com'}
