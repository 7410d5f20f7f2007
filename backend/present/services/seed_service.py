"""Database seeding service for sample data."""
from datetime import date, time
from typing import Dict

from present import db
from present.models.academics import GradeLevel, SchoolYear, Section, Semester, Subject
from present.models.attendance import AttendanceRecord, AttendanceStatus
from present.models.attendance_session import AttendanceSession
from present.models.coursework import SubjectFolder, SubjectSubmission
from present.models.user import Profile, User, UserRole
from present.services.attendance_service import AttendanceService

SAMPLE_STUDENTS = [
    ('juan.delacruz', 'Juan', 'Dela Cruz', '2024-0001'),
    ('maria.santos', 'Maria', 'Santos', '2024-0002'),
    ('jose.reyes', 'Jose', 'Reyes', '2024-0003'),
    ('ana.garcia', 'Ana', 'Garcia', '2024-0004'),
]

class SeedService:
    """Service to seed database with sample data."""

    @staticmethod
    def seed_all() -> Dict[str, int]:
        """Seed the school structure, people, enrollments, a session and coursework."""
        subject = SeedService.seed_structure()
        SeedService.seed_instructor()
        students = SeedService.seed_students()

        for student in students:
            AttendanceService.enroll(subject.id, student.id)

        session = SeedService.seed_session(subject, students)
        submission = SeedService.seed_coursework(subject)

        return {
            'subject_id': subject.id,
            'students': len(students),
            'session_id': session.id,
            'submission_id': submission.id
        }

    @staticmethod
    def seed_structure() -> Subject:
        """School year > semester > grade level > section > subject."""
        year = SchoolYear.query.filter_by(name='2024-2025').first()
        if not year:
            year = SchoolYear(name='2024-2025', start_date=date(2024, 6, 3),
                              end_date=date(2025, 3, 28))
            db.session.add(year)
            db.session.flush()

            semester = Semester(school_year_id=year.id, name='First Semester')
            db.session.add(semester)
            db.session.flush()

            grade = GradeLevel(semester_id=semester.id, name='Grade 10')
            db.session.add(grade)
            db.session.flush()

            section = Section(grade_level_id=grade.id, name='Rizal')
            db.session.add(section)
            db.session.flush()

            db.session.add(Subject(section_id=section.id, name='Mathematics', code='MATH10'))
            db.session.commit()

        return Subject.query.filter_by(code='MATH10').first()

    @staticmethod
    def _get_or_create_user(username: str, role: UserRole, first_name: str,
                            last_name: str, employee_id: str) -> User:
        user = User.query.filter_by(username=username).first()
        if user:
            return user

        user = User(username=username, email=f'{username}@present.school', role=role)
        user.profile = Profile(first_name=first_name, last_name=last_name,
                               employee_id=employee_id)
        db.session.add(user)
        return user

    @staticmethod
    def seed_instructor() -> User:
        instructor = SeedService._get_or_create_user(
            'instructor', UserRole.INSTRUCTOR, 'Liza', 'Mendoza', 'T-0001'
        )
        db.session.commit()
        return instructor

    @staticmethod
    def seed_students():
        students = [
            SeedService._get_or_create_user(username, UserRole.STUDENT, first, last, number)
            for username, first, last, number in SAMPLE_STUDENTS
        ]
        db.session.commit()
        return students

    @staticmethod
    def seed_session(subject: Subject, students) -> AttendanceSession:
        """Today's session with every student pre-marked absent."""
        session = AttendanceSession(
            subject_id=subject.id,
            session_date=date.today(),
            session_time=time(8, 0),
            is_visible=True
        )
        db.session.add(session)
        db.session.flush()

        for student in students:
            db.session.add(AttendanceRecord(
                session_id=session.id,
                student_id=student.id,
                status=AttendanceStatus.ABSENT
            ))

        db.session.commit()
        return session

    @staticmethod
    def seed_coursework(subject: Subject) -> SubjectSubmission:
        """A "Quarter 1" folder holding one visible problem set."""
        folder = SubjectFolder.query.filter_by(subject_id=subject.id, name='Quarter 1').first()
        if not folder:
            folder = SubjectFolder(subject_id=subject.id, name='Quarter 1')
            db.session.add(folder)
            db.session.flush()

        submission = SubjectSubmission.query.filter_by(
            folder_id=folder.id, name='Problem Set 1'
        ).first()
        if not submission:
            submission = SubjectSubmission(
                subject_id=subject.id,
                folder_id=folder.id,
                name='Problem Set 1',
                description='Linear equations, items 1-20.',
                due_date=date.today(),
                due_time=time(17, 0),
                is_visible=True
            )
            db.session.add(submission)

        db.session.commit()
        return submission
