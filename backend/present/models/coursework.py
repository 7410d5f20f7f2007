"""Coursework: folders of submissions (assignments) and student grades."""
from present import db
from present.models.base import BaseModel

class SubjectFolder(BaseModel):
    """Groups a subject's submissions, e.g. "Quarter 1" or "Quizzes"."""

    __tablename__ = 'subject_folders'

    subject_id = db.Column(db.Integer, db.ForeignKey('subjects.id', ondelete='CASCADE'),
                           nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)

    submissions = db.relationship('SubjectSubmission', backref='folder',
                                  cascade='all, delete-orphan',
                                  order_by='SubjectSubmission.id')

class SubjectSubmission(BaseModel):
    """Something students hand in and the instructor grades."""

    __tablename__ = 'subject_submissions'

    subject_id = db.Column(db.Integer, db.ForeignKey('subjects.id', ondelete='CASCADE'),
                           nullable=False, index=True)
    folder_id = db.Column(db.Integer, db.ForeignKey('subject_folders.id', ondelete='CASCADE'),
                          nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    due_date = db.Column(db.Date, nullable=True)
    due_time = db.Column(db.Time, nullable=True)
    max_attempts = db.Column(db.Integer, default=1, nullable=False)
    is_visible = db.Column(db.Boolean, default=False, nullable=False)

    # Relationships
    files = db.relationship('SubmissionFile', backref='submission',
                            cascade='all, delete-orphan',
                            order_by='SubmissionFile.id')
    student_submissions = db.relationship('StudentSubmission', backref='submission',
                                          cascade='all, delete-orphan')

    def to_dict(self):
        """Convert to dictionary."""
        return {
            'id': self.id,
            'folderId': self.folder_id,
            'folderName': self.folder.name if self.folder else None,
            'name': self.name,
            'description': self.description,
            'dueDate': self.due_date.isoformat() if self.due_date else None,
            'dueTime': self.due_time.isoformat() if self.due_time else None,
            'maxAttempts': self.max_attempts,
            'visible': bool(self.is_visible),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'files': [{
                'id': f.id,
                'name': f.file_name,
                'type': f.file_type,
                'url': f.file_url
            } for f in self.files]
        }

class SubmissionFile(BaseModel):
    """Reference material attached to a submission (stored elsewhere, linked by URL)."""

    __tablename__ = 'submission_files'

    submission_id = db.Column(db.Integer,
                              db.ForeignKey('subject_submissions.id', ondelete='CASCADE'),
                              nullable=False, index=True)
    file_name = db.Column(db.String(255), nullable=False)
    file_type = db.Column(db.String(100), nullable=True)
    file_url = db.Column(db.String(1024), nullable=False)

class StudentSubmission(BaseModel):
    """A student's hand-in for a submission, and the grade it received."""

    __tablename__ = 'student_submissions'
    __table_args__ = (
        db.UniqueConstraint('submission_id', 'student_id', name='uq_student_submission'),
    )

    submission_id = db.Column(db.Integer,
                              db.ForeignKey('subject_submissions.id', ondelete='CASCADE'),
                              nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                           nullable=False, index=True)
    attempt_number = db.Column(db.Integer, default=1, nullable=False)
    submitted_at = db.Column(db.DateTime, nullable=True)
    grade = db.Column(db.Float, nullable=True)
    feedback = db.Column(db.Text, nullable=True)
    graded_at = db.Column(db.DateTime, nullable=True)

    student = db.relationship('User')

    @property
    def status(self) -> str:
        return 'graded' if self.grade is not None else 'submitted'

    def __repr__(self):
        return f'<StudentSubmission {self.submission_id}-{self.student_id}>'
