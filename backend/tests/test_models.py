"""Tests for attendance session timing rules."""
from datetime import date, datetime, time

from present.models import AttendanceSession, AttendanceStatus, StudentSubmission, SubjectStudent

def _session(**kwargs):
    fields = {'subject_id': 1, 'session_date': date(2024, 1, 10),
              'session_time': time(9, 0), 'allow_late_after_minutes': 15}
    fields.update(kwargs)
    return AttendanceSession(**fields)

def test_late_threshold(app):
    assert _session().late_threshold() == datetime(2024, 1, 10, 9, 15)

def test_missing_grace_period_defaults_to_fifteen_minutes(app):
    session = _session(allow_late_after_minutes=None)
    assert session.late_threshold() == datetime(2024, 1, 10, 9, 15)

def test_zero_grace_period(app):
    session = _session(allow_late_after_minutes=0)
    assert session.status_at(datetime(2024, 1, 10, 9, 0)) == AttendanceStatus.PRESENT
    assert session.status_at(datetime(2024, 1, 10, 9, 0, 1)) == AttendanceStatus.LATE

def test_threshold_boundary_is_present(app):
    session = _session()
    assert session.status_at(datetime(2024, 1, 10, 9, 15)) == AttendanceStatus.PRESENT
    assert session.status_at(datetime(2024, 1, 10, 9, 16)) == AttendanceStatus.LATE

def test_is_expired(app):
    session = _session(qr_expires_at=datetime(2024, 1, 10, 10, 0))
    assert not session.is_expired(datetime(2024, 1, 10, 10, 0))
    assert session.is_expired(datetime(2024, 1, 10, 10, 0, 1))
    assert not _session().is_expired(datetime(2030, 1, 1))

def test_generated_tokens_are_unique_hex(app):
    tokens = {AttendanceSession.generate_qr_token() for _ in range(20)}
    assert len(tokens) == 20
    assert all(len(t) == 64 and int(t, 16) >= 0 for t in tokens)

def test_is_enrolled(school):
    assert SubjectStudent.is_enrolled(school['subject_id'], school['alice_id']) is True
    assert SubjectStudent.is_enrolled(school['subject_id'], school['carol_id']) is False

def test_student_submission_status(app):
    assert StudentSubmission(grade=None).status == 'submitted'
    assert StudentSubmission(grade=0.0).status == 'graded'
