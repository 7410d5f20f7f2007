"""Tests for previewing a session by QR token."""
import json
from datetime import datetime

import pytest

from present import db
from present.models import AttendanceRecord, AttendanceSession

def _preview(client, token):
    return client.get('/api/attendance/qr', query_string={'token': token})

def test_preview_returns_session_details(client, school, qr_token, freeze_time):
    freeze_time(datetime(2024, 1, 10, 8, 55))

    response = _preview(client, qr_token)

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['session'] == {
        'id': school['session_id'],
        'subjectId': school['subject_id'],
        'subjectName': 'Science',
        'subjectCode': 'SCI7',
        'sectionName': 'Sampaguita',
        'gradeLevelName': 'Grade 7',
        'date': '2024-01-10',
        'time': '09:00:00'
    }
    assert data['willBeMarkedAs'] == 'present'
    assert data['expiresAt'] == '2024-01-10T12:00:00'

@pytest.mark.parametrize('moment, expected', [
    (datetime(2024, 1, 10, 9, 14), 'present'),
    (datetime(2024, 1, 10, 9, 15), 'present'),
    (datetime(2024, 1, 10, 9, 15, 1), 'late'),
    (datetime(2024, 1, 10, 9, 16), 'late'),
])
def test_preview_classifies_lateness(client, qr_token, freeze_time, moment, expected):
    freeze_time(moment)

    data = json.loads(_preview(client, qr_token).data)

    assert data['willBeMarkedAs'] == expected

def test_preview_session_without_time_starts_at_midnight(client, school, qr_token, freeze_time):
    session = db.session.get(AttendanceSession, school['session_id'])
    session.session_time = None
    db.session.commit()

    freeze_time(datetime(2024, 1, 10, 0, 10))
    assert json.loads(_preview(client, qr_token).data)['willBeMarkedAs'] == 'present'

    freeze_time(datetime(2024, 1, 10, 0, 20))
    assert json.loads(_preview(client, qr_token).data)['willBeMarkedAs'] == 'late'

def test_preview_requires_token(client, school):
    response = client.get('/api/attendance/qr')
    assert response.status_code == 400
    assert json.loads(response.data)['error'] == 'Token is required'

def test_preview_unknown_token(client, school, qr_token):
    response = _preview(client, 'b' * 64)
    assert response.status_code == 404
    assert json.loads(response.data)['error'] == 'Invalid or expired QR code'

def test_preview_expired_token(client, qr_token, freeze_time):
    freeze_time(datetime(2024, 1, 10, 12, 0, 1))

    response = _preview(client, qr_token)

    assert response.status_code == 410
    assert json.loads(response.data)['error'] == 'This QR code has expired'

def test_preview_does_not_write(client, school, freeze_time):
    freeze_time(datetime(2024, 1, 10, 8, 30))
    issued = json.loads(client.post('/api/attendance/qr', json={
        'sessionId': school['session_id'], 'subjectId': school['subject_id']
    }).data)
    session = db.session.get(AttendanceSession, school['session_id'])
    before = (session.qr_token, session.qr_expires_at, session.allow_late_after_minutes)

    assert _preview(client, issued['token']).status_code == 200

    db.session.expire_all()
    session = db.session.get(AttendanceSession, school['session_id'])
    assert (session.qr_token, session.qr_expires_at, session.allow_late_after_minutes) == before
    assert AttendanceRecord.query.count() == 0
