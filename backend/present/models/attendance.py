"""Attendance record model."""
from enum import Enum
from present import db
from present.models.base import BaseModel

class AttendanceStatus(Enum):
    """Attendance status enumeration."""
    PRESENT = 'present'
    ABSENT = 'absent'
    LATE = 'late'
    EXCUSED = 'excused'

    @property
    def attended(self) -> bool:
        return self in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)

class AttendanceRecord(BaseModel):
    """A student's status for one attendance session."""

    __tablename__ = 'attendance_records'
    # One record per (session, student); QR check-in relies on this
    __table_args__ = (
        db.UniqueConstraint('session_id', 'student_id', name='uq_attendance_session_student'),
    )

    session_id = db.Column(db.Integer, db.ForeignKey('attendance_sessions.id', ondelete='CASCADE'),
                           nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                           nullable=False, index=True)
    status = db.Column(db.Enum(AttendanceStatus), nullable=False, default=AttendanceStatus.ABSENT)

    student = db.relationship('User')

    def __repr__(self):
        return f'<AttendanceRecord {self.session_id}-{self.student_id} {self.status.value}>'
