"""Instructor-side attendance session management."""
from typing import Dict, List, Optional

from flask import current_app
from sqlalchemy import case, func

from present import db
from present.models.academics import Subject, SubjectStudent
from present.models.attendance import AttendanceRecord, AttendanceStatus
from present.models.attendance_session import AttendanceSession
from present.models.user import Profile, User, UserRole
from present.utils.errors import NotFoundError, ValidationError
from present.utils.validators import Validator

def _status_count(status: AttendanceStatus):
    return func.coalesce(
        func.sum(case((AttendanceRecord.status == status, 1), else_=0)), 0
    )

class AttendanceService:
    """Service for attendance sessions and their records."""

    @staticmethod
    def get_subject(subject_id: int) -> Subject:
        subject = db.session.get(Subject, subject_id)
        if not subject:
            raise NotFoundError('Subject not found')
        return subject

    @staticmethod
    def get_session(subject_id: int, session_id: int) -> AttendanceSession:
        session = AttendanceSession.query.filter_by(
            id=session_id, subject_id=subject_id
        ).first()
        if not session:
            raise NotFoundError('Session not found')
        return session

    @staticmethod
    def parse_students(students) -> List[Dict]:
        """Validate a ``[{id, status}]`` roster payload."""
        if students is None:
            return []
        if not isinstance(students, list):
            raise ValidationError('students must be a list')

        roster = {}
        for entry in students:
            if not isinstance(entry, dict) or Validator.is_blank(entry.get('id')):
                raise ValidationError('Each student needs an id')

            student_id = Validator.parse_int(entry['id'], 'student id', minimum=1)
            raw_status = entry.get('status') or AttendanceStatus.ABSENT.value
            try:
                status = AttendanceStatus(raw_status)
            except ValueError:
                raise ValidationError(f'Invalid attendance status: {raw_status}')

            # Last entry wins; one record per student
            roster[student_id] = status

        return [{'id': student_id, 'status': status} for student_id, status in roster.items()]

    @staticmethod
    def list_sessions(subject_id: int) -> List[Dict]:
        """Sessions of a subject with per-status counts, newest first."""
        rows = db.session.query(
            AttendanceSession,
            func.count(AttendanceRecord.id),
            _status_count(AttendanceStatus.PRESENT),
            _status_count(AttendanceStatus.ABSENT),
            _status_count(AttendanceStatus.LATE),
            _status_count(AttendanceStatus.EXCUSED)
        ).outerjoin(
            AttendanceRecord, AttendanceRecord.session_id == AttendanceSession.id
        ).filter(
            AttendanceSession.subject_id == subject_id
        ).group_by(
            AttendanceSession.id
        ).order_by(
            AttendanceSession.session_date.desc(),
            AttendanceSession.session_time.desc(),
            AttendanceSession.id.desc()
        ).all()

        return [{
            'id': session.id,
            'date': session.session_date.isoformat(),
            'time': session.time_display,
            'visible': bool(session.is_visible),
            'participants': int(total),
            'present': int(present),
            'absent': int(absent),
            'late': int(late),
            'excused': int(excused)
        } for session, total, present, absent, late, excused in rows]

    @staticmethod
    def create_session(subject_id: int, data: Dict) -> Dict:
        """Create a session and seed one record per listed student."""
        Validator.require_object(data)
        AttendanceService.get_subject(subject_id)
        Validator.require_fields(data, ['date'], message='Date is required')

        students = AttendanceService.parse_students(data.get('students'))

        session = AttendanceSession(
            subject_id=subject_id,
            session_date=Validator.parse_date(data['date']),
            session_time=Validator.parse_time(data.get('time')),
            is_visible=Validator.parse_bool(data.get('isVisible'), 'isVisible', default=False)
        )
        db.session.add(session)
        db.session.flush()

        for student in students:
            db.session.add(AttendanceRecord(
                session_id=session.id,
                student_id=student['id'],
                status=student['status']
            ))

        db.session.commit()
        current_app.logger.info('Created attendance session %s for subject %s', session.id, subject_id)

        summary = AttendanceService._summarize(students)
        return {
            'id': session.id,
            'date': session.session_date.isoformat(),
            'time': session.time_display,
            'visible': bool(session.is_visible),
            'participants': len(students),
            **summary
        }

    @staticmethod
    def _summarize(students: List[Dict]) -> Dict:
        counts = {status.value: 0 for status in AttendanceStatus}
        for student in students:
            counts[student['status'].value] += 1
        return counts

    @staticmethod
    def get_session_detail(subject_id: int, session_id: int) -> Dict:
        """Session with its records and student names."""
        session = AttendanceService.get_session(subject_id, session_id)

        rows = db.session.query(AttendanceRecord, User).join(
            User, AttendanceRecord.student_id == User.id
        ).outerjoin(
            Profile, Profile.user_id == User.id
        ).filter(
            AttendanceRecord.session_id == session.id
        ).order_by(
            Profile.last_name, Profile.first_name, User.username
        ).all()

        detail = session.to_dict()
        detail['records'] = [{
            'studentId': record.student_id,
            'status': record.status.value,
            'name': user.display_name
        } for record, user in rows]

        return detail

    @staticmethod
    def update_session(subject_id: int, session_id: int, data: Dict) -> Dict:
        """Update session fields; a ``students`` list replaces every record."""
        Validator.require_object(data)
        session = AttendanceService.get_session(subject_id, session_id)

        if 'date' in data:
            if Validator.is_blank(data['date']):
                raise ValidationError('Date is required')
            session.session_date = Validator.parse_date(data['date'])
        if 'time' in data:
            session.session_time = Validator.parse_time(data['time'])
        if 'isVisible' in data:
            session.is_visible = Validator.parse_bool(data['isVisible'], 'isVisible')

        students = data.get('students')
        if students:
            roster = AttendanceService.parse_students(students)
            AttendanceRecord.query.filter_by(session_id=session.id).delete(
                synchronize_session=False
            )
            for student in roster:
                db.session.add(AttendanceRecord(
                    session_id=session.id,
                    student_id=student['id'],
                    status=student['status']
                ))

        db.session.commit()
        current_app.logger.info('Updated attendance session %s', session.id)

        return session.to_dict()

    @staticmethod
    def delete_session(subject_id: int, session_id: int) -> None:
        session = AttendanceService.get_session(subject_id, session_id)

        AttendanceRecord.query.filter_by(session_id=session.id).delete(
            synchronize_session=False
        )
        session.delete()
        current_app.logger.info('Deleted attendance session %s', session_id)

    @staticmethod
    def subject_stats(subject_id: int) -> Dict:
        """Totals across every session of a subject.

        Late counts as attended when computing ``averageAttendance``.
        """
        total_sessions = AttendanceSession.query.filter_by(subject_id=subject_id).count()

        present, absent, late, excused, total_records = db.session.query(
            _status_count(AttendanceStatus.PRESENT),
            _status_count(AttendanceStatus.ABSENT),
            _status_count(AttendanceStatus.LATE),
            _status_count(AttendanceStatus.EXCUSED),
            func.count(AttendanceRecord.id)
        ).join(
            AttendanceSession, AttendanceRecord.session_id == AttendanceSession.id
        ).filter(
            AttendanceSession.subject_id == subject_id
        ).one()

        total_students = SubjectStudent.query.filter_by(subject_id=subject_id).count()

        average = 0
        if total_records:
            average = round((int(present) + int(late)) / int(total_records) * 100)

        return {
            'subjectId': subject_id,
            'totalSessions': total_sessions,
            'totalPresent': int(present),
            'totalAbsent': int(absent),
            'totalLate': int(late),
            'totalExcused': int(excused),
            'totalRecords': int(total_records),
            'totalStudents': total_students,
            'averageAttendance': average
        }

    @staticmethod
    def list_members(subject_id: int) -> List[Dict]:
        """Students enrolled in a subject, ordered by name."""
        rows = db.session.query(SubjectStudent, User, Profile).join(
            User, SubjectStudent.student_id == User.id
        ).outerjoin(
            Profile, Profile.user_id == User.id
        ).filter(
            SubjectStudent.subject_id == subject_id,
            User.role == UserRole.STUDENT
        ).order_by(
            Profile.last_name, Profile.first_name, User.username
        ).all()

        return [{
            'id': user.id,
            'name': user.display_name,
            'email': user.email,
            'studentNumber': profile.employee_id if profile else None,
            'enrolledAt': enrollment.enrolled_at.isoformat() if enrollment.enrolled_at else None
        } for enrollment, user, profile in rows]

    @staticmethod
    def enroll(subject_id: int, student_id: int) -> Optional[SubjectStudent]:
        """Enroll a student unless already enrolled."""
        if SubjectStudent.is_enrolled(subject_id, student_id):
            return None
        enrollment = SubjectStudent(subject_id=subject_id, student_id=student_id)
        db.session.add(enrollment)
        db.session.commit()
        return enrollment
