"""Shared fixtures for the PRESENT test suite."""
from datetime import date, datetime, time

import pytest

from present import create_app, db
from present.models import (
    AttendanceSession, GradeLevel, Profile, SchoolYear, Section, Semester,
    StudentSubmission, Subject, SubjectFolder, SubjectStudent, SubjectSubmission,
    User, UserRole
)

@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

@pytest.fixture
def freeze_time(monkeypatch):
    """Pin the clock the QR service reads."""
    def _freeze(moment: datetime):
        monkeypatch.setattr('present.services.qr_service.current_time', lambda: moment)
        return moment
    return _freeze

def _make_user(username, role, first_name=None, last_name=None, number=None):
    user = User(username=username, email=f'{username}@example.com', role=role)
    if first_name or last_name:
        user.profile = Profile(first_name=first_name, last_name=last_name,
                               employee_id=number)
    db.session.add(user)
    return user

@pytest.fixture
def school(app):
    """One subject with two enrolled students, one outsider and a 09:00 session."""
    year = SchoolYear(name='2023-2024')
    db.session.add(year)
    db.session.flush()
    semester = Semester(school_year_id=year.id, name='Second Semester')
    db.session.add(semester)
    db.session.flush()
    grade = GradeLevel(semester_id=semester.id, name='Grade 7')
    db.session.add(grade)
    db.session.flush()
    section = Section(grade_level_id=grade.id, name='Sampaguita')
    db.session.add(section)
    db.session.flush()
    subject = Subject(section_id=section.id, name='Science', code='SCI7')
    other_subject = Subject(section_id=section.id, name='English', code='ENG7')
    db.session.add_all([subject, other_subject])

    alice = _make_user('alice', UserRole.STUDENT, 'Alice', 'Bautista', 'S-001')
    bob = _make_user('bob', UserRole.STUDENT, 'Bob', 'Aquino', 'S-002')
    carol = _make_user('carol', UserRole.STUDENT, 'Carol', 'Cruz', 'S-003')
    _make_user('teacher', UserRole.INSTRUCTOR, 'Tess', 'Villanueva', 'T-001')
    db.session.flush()

    db.session.add_all([
        SubjectStudent(subject_id=subject.id, student_id=alice.id),
        SubjectStudent(subject_id=subject.id, student_id=bob.id),
        SubjectStudent(subject_id=other_subject.id, student_id=carol.id),
    ])

    session = AttendanceSession(
        subject_id=subject.id,
        session_date=date(2024, 1, 10),
        session_time=time(9, 0),
        allow_late_after_minutes=15
    )
    db.session.add(session)
    db.session.commit()

    return {
        'subject_id': subject.id,
        'other_subject_id': other_subject.id,
        'session_id': session.id,
        'alice_id': alice.id,
        'bob_id': bob.id,
        'carol_id': carol.id,
    }

@pytest.fixture
def qr_token(school):
    """Attach a known token to the session, valid until noon on session day."""
    session = db.session.get(AttendanceSession, school['session_id'])
    session.qr_token = 'a' * 64
    session.qr_expires_at = datetime(2024, 1, 10, 12, 0)
    db.session.commit()
    return session.qr_token

@pytest.fixture
def coursework(school):
    """A Science folder holding a lab report that Bob has handed in, plus an English folder."""
    folder = SubjectFolder(subject_id=school['subject_id'], name='Quarter 1')
    other_folder = SubjectFolder(subject_id=school['other_subject_id'], name='Essays')
    db.session.add_all([folder, other_folder])
    db.session.flush()

    submission = SubjectSubmission(subject_id=school['subject_id'], folder_id=folder.id,
                                   name='Lab Report', max_attempts=2, is_visible=True)
    db.session.add(submission)
    db.session.flush()

    db.session.add(StudentSubmission(submission_id=submission.id, student_id=school['bob_id'],
                                     submitted_at=datetime(2024, 1, 12, 8, 0)))
    db.session.commit()

    return {
        **school,
        'folder_id': folder.id,
        'other_folder_id': other_folder.id,
        'submission_id': submission.id,
    }
