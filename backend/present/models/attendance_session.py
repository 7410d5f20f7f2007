"""Attendance session with QR check-in token."""
from datetime import datetime, time, timedelta
from typing import Optional
import secrets
from present import db
from present.models.base import BaseModel
from present.models.attendance import AttendanceStatus

DEFAULT_LATE_AFTER_MINUTES = 15

class AttendanceSession(BaseModel):
    """One scheduled attendance-taking event for a subject."""

    __tablename__ = 'attendance_sessions'

    subject_id = db.Column(db.Integer, db.ForeignKey('subjects.id', ondelete='CASCADE'),
                           nullable=False, index=True)
    session_date = db.Column(db.Date, nullable=False)
    session_time = db.Column(db.Time, nullable=True)
    is_visible = db.Column(db.Boolean, default=True, nullable=False)

    # QR check-in; regenerating overwrites both columns
    qr_token = db.Column(db.String(64), unique=True, nullable=True, index=True)
    qr_expires_at = db.Column(db.DateTime, nullable=True)
    allow_late_after_minutes = db.Column(db.Integer, default=DEFAULT_LATE_AFTER_MINUTES,
                                         nullable=False)

    # Relationships
    records = db.relationship('AttendanceRecord', backref='session', lazy='dynamic',
                              cascade='all, delete-orphan', passive_deletes=True)

    @staticmethod
    def generate_qr_token() -> str:
        """Generate an unguessable check-in token (256 bits, hex encoded)."""
        return secrets.token_hex(32)

    def starts_at(self) -> datetime:
        """Session start; sessions without a time start at midnight."""
        return datetime.combine(self.session_date, self.session_time or time.min)

    def late_threshold(self) -> datetime:
        minutes = self.allow_late_after_minutes
        if minutes is None:
            minutes = DEFAULT_LATE_AFTER_MINUTES
        return self.starts_at() + timedelta(minutes=minutes)

    def status_at(self, moment: datetime) -> AttendanceStatus:
        """Status a check-in at ``moment`` earns. The threshold itself is on time."""
        if moment > self.late_threshold():
            return AttendanceStatus.LATE
        return AttendanceStatus.PRESENT

    def is_expired(self, moment: datetime) -> bool:
        """Check if the QR token is past its expiry."""
        return self.qr_expires_at is not None and self.qr_expires_at < moment

    @property
    def time_display(self) -> Optional[str]:
        return self.session_time.isoformat() if self.session_time else None

    def to_dict(self):
        """Convert to dictionary."""
        return {
            'id': self.id,
            'subjectId': self.subject_id,
            'date': self.session_date.isoformat(),
            'time': self.time_display,
            'visible': bool(self.is_visible),
            'allowLateAfterMinutes': self.allow_late_after_minutes,
            'qrExpiresAt': self.qr_expires_at.isoformat() if self.qr_expires_at else None
        }

    def __repr__(self):
        return f'<AttendanceSession {self.subject_id}@{self.session_date}>'
