"""Models package with all models."""
from .base import BaseModel
from .user import User, UserRole, Profile
from .academics import SchoolYear, Semester, GradeLevel, Section, Subject, SubjectStudent
from .attendance_session import AttendanceSession
from .attendance import AttendanceRecord, AttendanceStatus
from .coursework import SubjectFolder, SubjectSubmission, SubmissionFile, StudentSubmission

__all__ = [
    'BaseModel', 'User', 'UserRole', 'Profile',
    'SchoolYear', 'Semester', 'GradeLevel', 'Section',
    'Subject', 'SubjectStudent',
    'AttendanceSession', 'AttendanceRecord', 'AttendanceStatus',
    'SubjectFolder', 'SubjectSubmission', 'SubmissionFile', 'StudentSubmission'
]
