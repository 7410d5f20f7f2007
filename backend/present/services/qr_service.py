"""QR code check-in service: token issuing, preview and check-in."""
import base64
import io
from datetime import timedelta
from typing import Dict, Optional, Tuple
from urllib.parse import urlencode

import qrcode
from flask import current_app
from sqlalchemy.exc import IntegrityError

from present import db
from present.models.academics import GradeLevel, Section, Subject, SubjectStudent
from present.models.attendance import AttendanceRecord, AttendanceStatus
from present.models.attendance_session import AttendanceSession
from present.utils.errors import (
    ExpiredError, ForbiddenError, InternalError, NotFoundError, ValidationError
)
from present.utils.helpers import current_time
from present.utils.validators import Validator

class QRService:
    """Service for QR check-in operations."""

    @staticmethod
    def build_check_in_url(token: str, base_url: str = None) -> str:
        """Scannable link that opens the check-in page for ``token``."""
        base_url = base_url or current_app.config['APP_URL']
        return f"{base_url.rstrip('/')}/attendance/scan?{urlencode({'token': token})}"

    @staticmethod
    def render_qr_image(data: str) -> str:
        """Render ``data`` as a PNG QR code and return it as a data URI."""
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(data)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()

        return f"data:image/png;base64,{img_str}"

    @staticmethod
    def issue_token(data: Dict) -> Dict:
        """Generate a fresh token for a session, replacing any previous one.

        ``data`` carries ``sessionId``, ``subjectId`` and the optional
        ``expiresInMinutes`` / ``lateAfterMinutes``.
        """
        Validator.require_object(data)
        Validator.require_fields(
            data, ['sessionId', 'subjectId'],
            message='Session ID and Subject ID are required'
        )

        config = current_app.config
        session_id = Validator.parse_int(data['sessionId'], 'sessionId', minimum=1)
        subject_id = Validator.parse_int(data['subjectId'], 'subjectId', minimum=1)

        expires_in = data.get('expiresInMinutes')
        if expires_in is None:
            expires_in = config['QR_DEFAULT_EXPIRES_MINUTES']
        expires_in = Validator.parse_int(
            expires_in, 'expiresInMinutes',
            minimum=1, maximum=config['QR_MAX_EXPIRES_MINUTES']
        )

        late_after = data.get('lateAfterMinutes')
        if late_after is None:
            late_after = config['QR_DEFAULT_LATE_AFTER_MINUTES']
        late_after = Validator.parse_int(
            late_after, 'lateAfterMinutes',
            minimum=0, maximum=config['QR_MAX_LATE_AFTER_MINUTES']
        )

        token = AttendanceSession.generate_qr_token()
        expires_at = current_time() + timedelta(minutes=expires_in)

        updated = AttendanceSession.query.filter_by(
            id=session_id, subject_id=subject_id
        ).update({
            'qr_token': token,
            'qr_expires_at': expires_at,
            'allow_late_after_minutes': late_after
        }, synchronize_session=False)

        if not updated:
            db.session.rollback()
            raise NotFoundError('Attendance session not found for this subject')

        # Render before committing so a failed render keeps the previous token
        qr_url = QRService.build_check_in_url(token)
        qr_image = QRService.render_qr_image(qr_url)

        db.session.commit()

        current_app.logger.info(
            'Issued QR token for session %s (expires %s)', session_id, expires_at.isoformat()
        )

        return {
            'token': token,
            'qrUrl': qr_url,
            'qrImage': qr_image,
            'expiresAt': expires_at.isoformat(),
            'lateAfterMinutes': late_after
        }

    @staticmethod
    def _active_session(token: str, not_found_message: str) -> AttendanceSession:
        """Resolve a token to its session, rejecting unknown and expired tokens."""
        session = AttendanceSession.query.filter_by(qr_token=token).first()

        if not session:
            raise NotFoundError(not_found_message)

        if session.is_expired(current_time()):
            raise ExpiredError('This QR code has expired')

        return session

    @staticmethod
    def preview(token: Optional[str]) -> Dict:
        """Describe the session behind ``token`` without recording anything."""
        if Validator.is_blank(token):
            raise ValidationError('Token is required')

        row = db.session.query(AttendanceSession, Subject, Section, GradeLevel).join(
            Subject, AttendanceSession.subject_id == Subject.id
        ).join(
            Section, Subject.section_id == Section.id
        ).join(
            GradeLevel, Section.grade_level_id == GradeLevel.id
        ).filter(
            AttendanceSession.qr_token == token
        ).first()

        if not row:
            raise NotFoundError('Invalid or expired QR code')

        session, subject, section, grade_level = row
        now = current_time()

        if session.is_expired(now):
            raise ExpiredError('This QR code has expired')

        return {
            'session': {
                'id': session.id,
                'subjectId': subject.id,
                'subjectName': subject.name,
                'subjectCode': subject.code,
                'sectionName': section.name,
                'gradeLevelName': grade_level.name,
                'date': session.session_date.isoformat(),
                'time': session.time_display
            },
            'willBeMarkedAs': session.status_at(now).value,
            'expiresAt': session.qr_expires_at.isoformat() if session.qr_expires_at else None
        }

    @staticmethod
    def check_in(data: Dict) -> Dict:
        """Record a student's scan for the session behind ``data['token']``."""
        Validator.require_object(data)
        Validator.require_fields(
            data, ['token', 'studentId'],
            message='Token and Student ID are required'
        )
        if not isinstance(data['token'], str):
            raise ValidationError('Token must be a string')
        student_id = Validator.parse_int(data['studentId'], 'studentId', minimum=1)

        session = QRService._active_session(data['token'], 'Invalid QR code')

        if not SubjectStudent.is_enrolled(session.subject_id, student_id):
            raise ForbiddenError('You are not enrolled in this subject')

        status = session.status_at(current_time())
        final_status, already_marked = QRService._record_status(session.id, student_id, status)

        if already_marked:
            return {
                'message': 'You have already marked your attendance',
                'status': final_status.value,
                'sessionId': session.id,
                'alreadyMarked': True
            }

        current_app.logger.info(
            'Student %s checked in to session %s as %s', student_id, session.id, final_status.value
        )

        return {
            'message': f'You have been marked as {final_status.value}',
            'status': final_status.value,
            'sessionId': session.id
        }

    @staticmethod
    def _overwritable_statuses():
        """Manually entered statuses a scan may replace; attended ones never are."""
        statuses = [AttendanceStatus(value) for value in current_app.config['QR_OVERWRITABLE_STATUSES']]
        return [status for status in statuses if not status.attended]

    @staticmethod
    def _find_record(session_id: int, student_id: int) -> Optional[AttendanceRecord]:
        return AttendanceRecord.query.filter_by(
            session_id=session_id, student_id=student_id
        ).first()

    @staticmethod
    def _record_status(session_id: int, student_id: int,
                       status: AttendanceStatus) -> Tuple[AttendanceStatus, bool]:
        """Insert or upgrade the (session, student) record.

        Returns the stored status and whether the student had already checked
        in. The unique constraint on (session_id, student_id) settles races:
        a losing insert is rolled back to its savepoint and the winner's row
        is re-evaluated.
        """
        overwritable = QRService._overwritable_statuses()

        for _ in range(2):
            existing = QRService._find_record(session_id, student_id)

            if existing is None:
                try:
                    with db.session.begin_nested():
                        db.session.add(AttendanceRecord(
                            session_id=session_id,
                            student_id=student_id,
                            status=status
                        ))
                except IntegrityError:
                    continue
                db.session.commit()
                return status, False

            if existing.status.attended:
                return existing.status, True

            if existing.status not in overwritable:
                raise ForbiddenError(
                    f'Your attendance was already recorded as {existing.status.value}'
                )

            # Conditional update so a concurrent scan that already upgraded
            # the row is not overwritten
            updated = AttendanceRecord.query.filter(
                AttendanceRecord.session_id == session_id,
                AttendanceRecord.student_id == student_id,
                AttendanceRecord.status.in_(overwritable)
            ).update({'status': status}, synchronize_session=False)

            if updated:
                db.session.commit()
                return status, False

            db.session.expire(existing)

        existing = QRService._find_record(session_id, student_id)
        if existing is None:
            raise InternalError('Could not record attendance')
        return existing.status, existing.status.attended
