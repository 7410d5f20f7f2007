"""Tests for instructor attendance session management."""
import json

from present import db
from present.models import AttendanceRecord, AttendanceSession, AttendanceStatus

def _url(school, suffix=''):
    return f"/api/teacher/subjects/{school['subject_id']}/attendance{suffix}"

def test_create_session_with_roster(client, school):
    response = client.post(_url(school), json={
        'date': '2024-02-01',
        'time': '07:30',
        'isVisible': True,
        'students': [
            {'id': school['alice_id'], 'status': 'present'},
            {'id': school['bob_id']},
        ]
    })

    assert response.status_code == 201
    session = json.loads(response.data)['session']
    assert session['date'] == '2024-02-01'
    assert session['time'] == '07:30:00'
    assert session['visible'] is True
    assert session['participants'] == 2
    assert session['present'] == 1
    assert session['absent'] == 1

    statuses = {r.student_id: r.status for r in
                AttendanceRecord.query.filter_by(session_id=session['id'])}
    assert statuses == {school['alice_id']: AttendanceStatus.PRESENT,
                        school['bob_id']: AttendanceStatus.ABSENT}

def test_create_session_validation(client, school):
    assert client.post(_url(school), json={}).status_code == 400
    assert client.post(_url(school), json={'date': '01/02/2024'}).status_code == 400
    assert client.post(_url(school), json={'date': '2024-02-01', 'time': '7pm'}).status_code == 400
    assert client.post(_url(school), json={
        'date': '2024-02-01', 'students': [{'id': school['alice_id'], 'status': 'sick'}]
    }).status_code == 400

def test_create_session_rejects_non_object_body(client, school):
    response = client.post(_url(school), json=[{'date': '2024-02-01'}])
    assert response.status_code == 400

def test_visibility_must_be_boolean(client, school):
    response = client.post(_url(school), json={'date': '2024-02-01', 'isVisible': 'false'})
    assert response.status_code == 400
    assert json.loads(response.data)['error'] == 'isVisible must be true or false'
    assert AttendanceSession.query.count() == 1

    response = client.put(_url(school, f"/{school['session_id']}"), json={'isVisible': 1})
    assert response.status_code == 400
    db.session.expire_all()
    assert db.session.get(AttendanceSession, school['session_id']).is_visible is True

def test_create_session_visibility_defaults_to_hidden(client, school):
    response = client.post(_url(school), json={'date': '2024-02-01', 'isVisible': None})
    assert response.status_code == 201
    assert json.loads(response.data)['session']['visible'] is False

def test_create_session_for_unknown_subject(client, school):
    response = client.post('/api/teacher/subjects/9999/attendance', json={'date': '2024-02-01'})
    assert response.status_code == 404

def test_list_sessions_counts_statuses(client, school):
    db.session.add_all([
        AttendanceRecord(session_id=school['session_id'], student_id=school['alice_id'],
                         status=AttendanceStatus.LATE),
        AttendanceRecord(session_id=school['session_id'], student_id=school['bob_id'],
                         status=AttendanceStatus.EXCUSED),
    ])
    db.session.commit()
    client.post(_url(school), json={'date': '2024-03-01'})

    response = client.get(_url(school))

    assert response.status_code == 200
    sessions = json.loads(response.data)['sessions']
    assert [s['date'] for s in sessions] == ['2024-03-01', '2024-01-10']
    assert sessions[1]['participants'] == 2
    assert sessions[1]['late'] == 1
    assert sessions[1]['excused'] == 1
    assert sessions[1]['present'] == 0
    assert sessions[0]['participants'] == 0

def test_get_session_detail(client, school):
    db.session.add(AttendanceRecord(session_id=school['session_id'],
                                    student_id=school['alice_id'],
                                    status=AttendanceStatus.PRESENT))
    db.session.commit()

    response = client.get(_url(school, f"/{school['session_id']}"))

    assert response.status_code == 200
    session = json.loads(response.data)['session']
    assert session['id'] == school['session_id']
    assert session['records'] == [
        {'studentId': school['alice_id'], 'status': 'present', 'name': 'Alice Bautista'}
    ]

def test_get_session_of_other_subject_is_not_found(client, school):
    url = f"/api/teacher/subjects/{school['other_subject_id']}/attendance/{school['session_id']}"
    assert client.get(url).status_code == 404

def test_update_session_replaces_records(client, school):
    db.session.add(AttendanceRecord(session_id=school['session_id'],
                                    student_id=school['alice_id'],
                                    status=AttendanceStatus.PRESENT))
    db.session.commit()

    response = client.put(_url(school, f"/{school['session_id']}"), json={
        'date': '2024-01-11',
        'time': None,
        'isVisible': True,
        'students': [{'id': school['bob_id'], 'status': 'excused'}]
    })

    assert response.status_code == 200
    session = json.loads(response.data)['session']
    assert session['date'] == '2024-01-11'
    assert session['time'] is None
    assert session['visible'] is True

    db.session.expire_all()
    records = AttendanceRecord.query.filter_by(session_id=school['session_id']).all()
    assert [(r.student_id, r.status) for r in records] == [
        (school['bob_id'], AttendanceStatus.EXCUSED)
    ]

def test_update_without_students_keeps_records(client, school):
    db.session.add(AttendanceRecord(session_id=school['session_id'],
                                    student_id=school['alice_id'],
                                    status=AttendanceStatus.ABSENT))
    db.session.commit()

    response = client.put(_url(school, f"/{school['session_id']}"), json={'isVisible': False})

    assert response.status_code == 200
    assert AttendanceRecord.query.filter_by(session_id=school['session_id']).count() == 1

def test_delete_session(client, school):
    db.session.add(AttendanceRecord(session_id=school['session_id'],
                                    student_id=school['alice_id'],
                                    status=AttendanceStatus.ABSENT))
    db.session.commit()

    response = client.delete(_url(school, f"/{school['session_id']}"))

    assert response.status_code == 200
    assert db.session.get(AttendanceSession, school['session_id']) is None
    assert AttendanceRecord.query.count() == 0
    assert client.delete(_url(school, f"/{school['session_id']}")).status_code == 404

def test_subject_stats(client, school):
    db.session.add_all([
        AttendanceRecord(session_id=school['session_id'], student_id=school['alice_id'],
                         status=AttendanceStatus.PRESENT),
        AttendanceRecord(session_id=school['session_id'], student_id=school['bob_id'],
                         status=AttendanceStatus.LATE),
    ])
    db.session.commit()
    client.post(_url(school), json={
        'date': '2024-01-17',
        'students': [{'id': school['alice_id'], 'status': 'absent'},
                     {'id': school['bob_id'], 'status': 'excused'}]
    })

    response = client.get(_url(school, '/stats'))

    assert response.status_code == 200
    stats = json.loads(response.data)['stats']
    assert stats == {
        'subjectId': school['subject_id'],
        'totalSessions': 2,
        'totalPresent': 1,
        'totalAbsent': 1,
        'totalLate': 1,
        'totalExcused': 1,
        'totalRecords': 4,
        'totalStudents': 2,
        'averageAttendance': 50
    }

def test_subject_stats_without_records(client, school):
    stats = json.loads(client.get(
        f"/api/teacher/subjects/{school['other_subject_id']}/attendance/stats"
    ).data)['stats']

    assert stats['totalSessions'] == 0
    assert stats['averageAttendance'] == 0
    assert stats['totalStudents'] == 1

def test_members_sorted_by_last_name(client, school):
    response = client.get(f"/api/teacher/subjects/{school['subject_id']}/members")

    assert response.status_code == 200
    members = json.loads(response.data)['members']
    assert [m['name'] for m in members] == ['Bob Aquino', 'Alice Bautista']
    assert members[0]['studentNumber'] == 'S-002'
    assert members[0]['email'] == 'bob@example.com'

def test_scan_after_instructor_roster(client, school, freeze_time):
    """Students pre-marked absent by the instructor can still scan in."""
    from datetime import datetime

    created = json.loads(client.post(_url(school), json={
        'date': '2024-01-24', 'time': '10:00',
        'students': [{'id': school['alice_id']}, {'id': school['bob_id']}]
    }).data)['session']

    freeze_time(datetime(2024, 1, 24, 9, 50))
    token = json.loads(client.post('/api/attendance/qr', json={
        'sessionId': created['id'], 'subjectId': school['subject_id']
    }).data)['token']

    response = client.put('/api/attendance/qr', json={'token': token,
                                                      'studentId': school['alice_id']})
    assert json.loads(response.data)['status'] == 'present'

    detail = json.loads(client.get(_url(school, f"/{created['id']}")).data)['session']
    statuses = {r['studentId']: r['status'] for r in detail['records']}
    assert statuses == {school['alice_id']: 'present', school['bob_id']: 'absent'}
