"""Instructor-side coursework: folders, submissions and grading."""
from typing import Dict, List, Optional

from flask import current_app
from sqlalchemy import and_, case, func
from sqlalchemy.exc import IntegrityError

from present import db
from present.models.academics import SubjectStudent
from present.models.coursework import (
    StudentSubmission, SubjectFolder, SubjectSubmission, SubmissionFile
)
from present.models.user import Profile, User
from present.services.attendance_service import AttendanceService
from present.utils.errors import InternalError, NotFoundError, ValidationError
from present.utils.helpers import current_time
from present.utils.validators import Validator

class CourseworkService:
    """Service for submission folders, submissions and their grades."""

    @staticmethod
    def get_folder(subject_id: int, folder_id: int) -> SubjectFolder:
        folder = SubjectFolder.query.filter_by(id=folder_id, subject_id=subject_id).first()
        if not folder:
            raise NotFoundError('Folder not found')
        return folder

    @staticmethod
    def get_submission(subject_id: int, submission_id: int) -> SubjectSubmission:
        submission = SubjectSubmission.query.filter_by(
            id=submission_id, subject_id=subject_id
        ).first()
        if not submission:
            raise NotFoundError('Submission not found')
        return submission

    @staticmethod
    def _folder_name(data: Dict) -> str:
        name = data.get('name')
        if Validator.is_blank(name) or not isinstance(name, str):
            raise ValidationError('Folder name is required')
        return name.strip()

    # Folders

    @staticmethod
    def list_folders(subject_id: int) -> List[Dict]:
        """Folders of a subject in creation order, each with its submissions."""
        folders = SubjectFolder.query.filter_by(subject_id=subject_id).order_by(
            SubjectFolder.created_at, SubjectFolder.id
        ).all()

        return [{
            'id': folder.id,
            'name': folder.name,
            'submissionCount': len(folder.submissions),
            'submissions': [submission.to_dict() for submission in folder.submissions]
        } for folder in folders]

    @staticmethod
    def create_folder(subject_id: int, data: Dict) -> Dict:
        Validator.require_object(data)
        AttendanceService.get_subject(subject_id)

        folder = SubjectFolder(subject_id=subject_id, name=CourseworkService._folder_name(data))
        db.session.add(folder)
        db.session.commit()
        current_app.logger.info('Created folder %s for subject %s', folder.id, subject_id)

        return {'id': folder.id, 'name': folder.name, 'submissions': []}

    @staticmethod
    def rename_folder(subject_id: int, folder_id: int, data: Dict) -> Dict:
        Validator.require_object(data)
        folder = CourseworkService.get_folder(subject_id, folder_id)
        old_name = folder.name

        folder.name = CourseworkService._folder_name(data)
        db.session.commit()
        current_app.logger.info('Renamed folder %s from "%s" to "%s"', folder.id, old_name, folder.name)

        return {'id': folder.id, 'name': folder.name}

    @staticmethod
    def delete_folder(subject_id: int, folder_id: int) -> None:
        """Delete a folder together with its submissions and grades."""
        folder = CourseworkService.get_folder(subject_id, folder_id)
        folder.delete()
        current_app.logger.info('Deleted folder %s', folder_id)

    # Submissions

    @staticmethod
    def parse_files(files) -> List[SubmissionFile]:
        """Validate a ``[{name, type, url}]`` attachment list."""
        if files is None:
            return []
        if not isinstance(files, list):
            raise ValidationError('files must be a list')

        parsed = []
        for entry in files:
            if not isinstance(entry, dict):
                raise ValidationError('Each file needs a name and url')
            name, url, file_type = entry.get('name'), entry.get('url'), entry.get('type')
            if (Validator.is_blank(name) or Validator.is_blank(url)
                    or not isinstance(name, str) or not isinstance(url, str)):
                raise ValidationError('Each file needs a name and url')
            if file_type is not None and not isinstance(file_type, str):
                raise ValidationError('File type must be a string')
            parsed.append(SubmissionFile(file_name=name.strip(), file_url=url.strip(),
                                         file_type=file_type))
        return parsed

    @staticmethod
    def _apply_fields(submission: SubjectSubmission, data: Dict) -> None:
        """Set every editable field; omitted ones fall back to their defaults."""
        name = data.get('name')
        if Validator.is_blank(name) or not isinstance(name, str):
            raise ValidationError('Submission name is required')

        description = data.get('description')
        if description is not None and not isinstance(description, str):
            raise ValidationError('Description must be a string')

        due_date = data.get('dueDate')
        max_attempts = data.get('maxAttempts')

        submission.name = name.strip()
        submission.description = None if Validator.is_blank(description) else description
        submission.due_date = None if Validator.is_blank(due_date) else \
            Validator.parse_date(due_date, 'dueDate')
        submission.due_time = Validator.parse_time(data.get('dueTime'), 'dueTime')
        submission.max_attempts = 1 if max_attempts is None else \
            Validator.parse_int(max_attempts, 'maxAttempts', minimum=1)
        submission.is_visible = Validator.parse_bool(data.get('isVisible'), 'isVisible',
                                                     default=False)

    @staticmethod
    def list_submissions(subject_id: int) -> List[Dict]:
        """Submissions of a subject, newest first."""
        submissions = SubjectSubmission.query.filter_by(subject_id=subject_id).order_by(
            SubjectSubmission.created_at.desc(), SubjectSubmission.id.desc()
        ).all()
        return [submission.to_dict() for submission in submissions]

    @staticmethod
    def create_submission(subject_id: int, data: Dict) -> Dict:
        Validator.require_object(data)
        AttendanceService.get_subject(subject_id)

        submission = SubjectSubmission(subject_id=subject_id)
        CourseworkService._apply_fields(submission, data)

        if Validator.is_blank(data.get('folderId')):
            raise ValidationError('Folder is required')
        folder_id = Validator.parse_int(data['folderId'], 'folderId', minimum=1)
        submission.folder = CourseworkService.get_folder(subject_id, folder_id)
        submission.files = CourseworkService.parse_files(data.get('files'))

        db.session.add(submission)
        db.session.commit()
        current_app.logger.info('Created submission %s for subject %s', submission.id, subject_id)

        return submission.to_dict()

    @staticmethod
    def update_submission(subject_id: int, submission_id: int, data: Dict) -> Dict:
        """Replace a submission's fields; a ``files`` list replaces every attachment."""
        Validator.require_object(data)
        submission = CourseworkService.get_submission(subject_id, submission_id)

        CourseworkService._apply_fields(submission, data)
        if data.get('files') is not None:
            submission.files = CourseworkService.parse_files(data['files'])

        db.session.commit()
        current_app.logger.info('Updated submission %s', submission.id)

        return submission.to_dict()

    @staticmethod
    def delete_submission(subject_id: int, submission_id: int) -> None:
        submission = CourseworkService.get_submission(subject_id, submission_id)
        submission.delete()
        current_app.logger.info('Deleted submission %s', submission_id)

    # Grades

    @staticmethod
    def grade_sheet(subject_id: int, submission_id: int) -> Dict:
        """Every enrolled student with their hand-in and grade for a submission."""
        submission = CourseworkService.get_submission(subject_id, submission_id)

        rows = db.session.query(SubjectStudent, User, Profile, StudentSubmission).join(
            User, SubjectStudent.student_id == User.id
        ).outerjoin(
            Profile, Profile.user_id == User.id
        ).outerjoin(
            StudentSubmission, and_(
                StudentSubmission.submission_id == submission.id,
                StudentSubmission.student_id == User.id
            )
        ).filter(
            SubjectStudent.subject_id == subject_id
        ).order_by(
            Profile.last_name, Profile.first_name, User.username
        ).all()

        students = []
        for _, user, profile, handed_in in rows:
            students.append({
                'id': user.id,
                'name': user.display_name,
                'email': user.email,
                'studentNumber': profile.employee_id if profile else None,
                'studentSubmissionId': handed_in.id if handed_in else None,
                'attemptNumber': handed_in.attempt_number if handed_in else None,
                'submittedAt': handed_in.submitted_at.isoformat()
                if handed_in and handed_in.submitted_at else None,
                'grade': handed_in.grade if handed_in else None,
                'feedback': handed_in.feedback if handed_in else None,
                'gradedAt': handed_in.graded_at.isoformat()
                if handed_in and handed_in.graded_at else None,
                'status': handed_in.status if handed_in else 'not_submitted'
            })

        return {'submission': submission.to_dict(), 'students': students}

    @staticmethod
    def _parse_grade_entry(subject_id: int, entry: Dict) -> Optional[Dict]:
        """Validate one ``{studentId, grade, feedback}`` entry."""
        if Validator.is_blank(entry.get('studentId')):
            raise ValidationError('Student ID is required')
        student_id = Validator.parse_int(entry['studentId'], 'studentId', minimum=1)

        grade = entry.get('grade')
        if grade is None:
            return None
        grade = Validator.parse_number(grade, 'grade', minimum=0,
                                       maximum=current_app.config['GRADE_MAX_SCORE'])

        feedback = entry.get('feedback')
        if feedback is not None and not isinstance(feedback, str):
            raise ValidationError('Feedback must be a string')

        if not SubjectStudent.is_enrolled(subject_id, student_id):
            raise ValidationError(f'Student {student_id} is not enrolled in this subject')

        return {
            'student_id': student_id,
            'grade': grade,
            'feedback': None if Validator.is_blank(feedback) else feedback
        }

    @staticmethod
    def _find_student_submission(submission_id: int, student_id: int) -> Optional[StudentSubmission]:
        return StudentSubmission.query.filter_by(
            submission_id=submission_id, student_id=student_id
        ).first()

    @staticmethod
    def _store_grade(submission_id: int, entry: Dict) -> StudentSubmission:
        """Grade an existing hand-in, or create one for manual grading.

        Does not commit. A concurrent insert for the same student loses on
        the unique constraint and is applied as an update instead.
        """
        values = {
            'grade': entry['grade'],
            'feedback': entry['feedback'],
            'graded_at': current_time()
        }

        existing = CourseworkService._find_student_submission(submission_id, entry['student_id'])
        if existing is None:
            handed_in = StudentSubmission(submission_id=submission_id,
                                          student_id=entry['student_id'],
                                          attempt_number=1, **values)
            try:
                with db.session.begin_nested():
                    db.session.add(handed_in)
                return handed_in
            except IntegrityError:
                existing = CourseworkService._find_student_submission(
                    submission_id, entry['student_id']
                )
                if existing is None:
                    raise InternalError('Could not store grade')

        for key, value in values.items():
            setattr(existing, key, value)
        return existing

    @staticmethod
    def grade_student(subject_id: int, submission_id: int, data: Dict) -> Dict:
        Validator.require_object(data)
        submission = CourseworkService.get_submission(subject_id, submission_id)

        if Validator.is_blank(data.get('studentId')):
            raise ValidationError('Student ID is required')
        if data.get('grade') is None:
            raise ValidationError('Grade is required')
        entry = CourseworkService._parse_grade_entry(subject_id, data)

        handed_in = CourseworkService._store_grade(submission.id, entry)
        db.session.commit()
        current_app.logger.info(
            'Graded student %s on submission %s: %s', entry['student_id'], submission.id, entry['grade']
        )

        return {
            'studentSubmissionId': handed_in.id,
            'grade': handed_in.grade,
            'status': handed_in.status
        }

    @staticmethod
    def grade_many(subject_id: int, submission_id: int, data: Dict) -> Dict:
        """Apply a ``grades`` list; entries with a null grade are skipped.

        Every entry is validated before anything is written.
        """
        Validator.require_object(data)
        submission = CourseworkService.get_submission(subject_id, submission_id)

        grades = data.get('grades')
        if not isinstance(grades, list):
            raise ValidationError('Grades array is required')

        entries = []
        for raw in grades:
            if not isinstance(raw, dict):
                raise ValidationError('Each grade must be an object')
            entry = CourseworkService._parse_grade_entry(subject_id, raw)
            if entry is not None:
                entries.append(entry)

        for entry in entries:
            CourseworkService._store_grade(submission.id, entry)

        db.session.commit()
        current_app.logger.info(
            'Updated grades for %s students in "%s"', len(entries), submission.name
        )

        return {'updated': len(entries)}

    @staticmethod
    def grade_stats(subject_id: int) -> Dict:
        """Grading totals for a subject; a grade at or above the passing score passes."""
        passing_score = current_app.config['GRADE_PASSING_SCORE']

        total_submissions = SubjectSubmission.query.filter_by(subject_id=subject_id).count()

        graded, average, passing, failing = db.session.query(
            func.count(StudentSubmission.id),
            func.avg(StudentSubmission.grade),
            func.coalesce(func.sum(case((StudentSubmission.grade >= passing_score, 1), else_=0)), 0),
            func.coalesce(func.sum(case((StudentSubmission.grade < passing_score, 1), else_=0)), 0)
        ).join(
            SubjectSubmission, StudentSubmission.submission_id == SubjectSubmission.id
        ).filter(
            SubjectSubmission.subject_id == subject_id,
            StudentSubmission.grade.isnot(None)
        ).one()

        pending = StudentSubmission.query.join(
            SubjectSubmission, StudentSubmission.submission_id == SubjectSubmission.id
        ).filter(
            SubjectSubmission.subject_id == subject_id,
            StudentSubmission.grade.is_(None)
        ).count()

        passing_rate = 0
        if graded:
            passing_rate = round(int(passing) / int(graded) * 100)

        return {
            'subjectId': subject_id,
            'totalSubmissions': total_submissions,
            'gradedCount': int(graded),
            'pendingCount': pending,
            'averageGrade': round(float(average), 1) if graded else None,
            'passingCount': int(passing),
            'failingCount': int(failing),
            'passingRate': passing_rate
        }
