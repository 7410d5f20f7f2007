"""School structure: school year > semester > grade level > section > subject."""
from datetime import datetime
from present import db
from present.models.base import BaseModel

class SchoolYear(BaseModel):
    __tablename__ = 'school_years'

    name = db.Column(db.String(50), nullable=False, unique=True)
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)

    semesters = db.relationship('Semester', backref='school_year', lazy='dynamic',
                                cascade='all, delete-orphan')

class Semester(BaseModel):
    __tablename__ = 'semesters'

    school_year_id = db.Column(db.Integer, db.ForeignKey('school_years.id', ondelete='CASCADE'),
                               nullable=False)
    name = db.Column(db.String(50), nullable=False)

    grade_levels = db.relationship('GradeLevel', backref='semester', lazy='dynamic',
                                   cascade='all, delete-orphan')

class GradeLevel(BaseModel):
    __tablename__ = 'grade_levels'

    semester_id = db.Column(db.Integer, db.ForeignKey('semesters.id', ondelete='CASCADE'),
                            nullable=False)
    name = db.Column(db.String(50), nullable=False)

    sections = db.relationship('Section', backref='grade_level', lazy='dynamic',
                               cascade='all, delete-orphan')

class Section(BaseModel):
    __tablename__ = 'sections'

    grade_level_id = db.Column(db.Integer, db.ForeignKey('grade_levels.id', ondelete='CASCADE'),
                               nullable=False)
    name = db.Column(db.String(50), nullable=False)

    subjects = db.relationship('Subject', backref='section', lazy='dynamic',
                               cascade='all, delete-orphan')

class Subject(BaseModel):
    """A class taught to one section."""

    __tablename__ = 'subjects'

    section_id = db.Column(db.Integer, db.ForeignKey('sections.id', ondelete='CASCADE'),
                           nullable=False)
    name = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(50), nullable=True)

    enrollments = db.relationship('SubjectStudent', backref='subject', lazy='dynamic',
                                  cascade='all, delete-orphan')
    attendance_sessions = db.relationship('AttendanceSession', backref='subject', lazy='dynamic',
                                          cascade='all, delete-orphan')

    def __repr__(self) -> str:
        return f'<Subject {self.code or self.name}>'

class SubjectStudent(db.Model):
    """Enrollment of a student in a subject."""

    __tablename__ = 'subject_students'
    __table_args__ = (
        db.UniqueConstraint('subject_id', 'student_id', name='uq_subject_student'),
    )

    id = db.Column(db.Integer, primary_key=True)
    subject_id = db.Column(db.Integer, db.ForeignKey('subjects.id', ondelete='CASCADE'),
                           nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                           nullable=False, index=True)
    enrolled_at = db.Column(db.DateTime, default=datetime.now, nullable=False)

    student = db.relationship('User')

    @classmethod
    def is_enrolled(cls, subject_id: int, student_id: int) -> bool:
        """True if the student is on the subject's roster."""
        return db.session.query(
            cls.query.filter_by(subject_id=subject_id, student_id=student_id).exists()
        ).scalar()
