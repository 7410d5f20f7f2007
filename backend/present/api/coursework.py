"""Instructor coursework endpoints: folders, submissions and grades."""
from flask import Blueprint, current_app, request
from present import db
from present.services.coursework_service import CourseworkService
from present.utils.errors import AppError
from present.utils.helpers import success_response, error_response

coursework_bp = Blueprint('coursework', __name__)

def _failed(action: str):
    db.session.rollback()
    current_app.logger.exception('%s error', action)
    return error_response(f'Failed to {action.lower()}', 500)

# Folders

@coursework_bp.route('/folders', methods=['GET'])
def list_folders(subject_id):
    """Fetch folders with their submissions."""
    try:
        folders = CourseworkService.list_folders(subject_id)
        return success_response(data={'folders': folders})

    except Exception:
        return _failed('Fetch folders')

@coursework_bp.route('/folders', methods=['POST'])
def create_folder(subject_id):
    try:
        folder = CourseworkService.create_folder(subject_id, request.get_json(silent=True))
        return success_response(data={'folder': folder}, status_code=201)

    except AppError as e:
        db.session.rollback()
        return error_response(e.message, e.status_code)
    except Exception:
        return _failed('Create folder')

@coursework_bp.route('/folders/<int:folder_id>', methods=['PUT'])
def rename_folder(subject_id, folder_id):
    try:
        folder = CourseworkService.rename_folder(
            subject_id, folder_id, request.get_json(silent=True)
        )
        return success_response(data={'folder': folder})

    except AppError as e:
        db.session.rollback()
        return error_response(e.message, e.status_code)
    except Exception:
        return _failed('Update folder')

@coursework_bp.route('/folders/<int:folder_id>', methods=['DELETE'])
def delete_folder(subject_id, folder_id):
    """Delete a folder and everything in it."""
    try:
        CourseworkService.delete_folder(subject_id, folder_id)
        return success_response()

    except AppError as e:
        db.session.rollback()
        return error_response(e.message, e.status_code)
    except Exception:
        return _failed('Delete folder')

# Submissions

@coursework_bp.route('/submissions', methods=['GET'])
def list_submissions(subject_id):
    try:
        submissions = CourseworkService.list_submissions(subject_id)
        return success_response(data={'submissions': submissions})

    except Exception:
        return _failed('Fetch submissions')

@coursework_bp.route('/submissions', methods=['POST'])
def create_submission(subject_id):
    """Create a submission inside a folder."""
    try:
        submission = CourseworkService.create_submission(subject_id, request.get_json(silent=True))
        return success_response(data={'submission': submission}, status_code=201)

    except AppError as e:
        db.session.rollback()
        return error_response(e.message, e.status_code)
    except Exception:
        return _failed('Create submission')

@coursework_bp.route('/submissions/<int:submission_id>', methods=['PUT'])
def update_submission(subject_id, submission_id):
    try:
        submission = CourseworkService.update_submission(
            subject_id, submission_id, request.get_json(silent=True)
        )
        return success_response(data={'submission': submission})

    except AppError as e:
        db.session.rollback()
        return error_response(e.message, e.status_code)
    except Exception:
        return _failed('Update submission')

@coursework_bp.route('/submissions/<int:submission_id>', methods=['DELETE'])
def delete_submission(subject_id, submission_id):
    try:
        CourseworkService.delete_submission(subject_id, submission_id)
        return success_response()

    except AppError as e:
        db.session.rollback()
        return error_response(e.message, e.status_code)
    except Exception:
        return _failed('Delete submission')

# Grades

@coursework_bp.route('/submissions/<int:submission_id>/grades', methods=['GET'])
def grade_sheet(subject_id, submission_id):
    """Fetch every enrolled student's hand-in status and grade."""
    try:
        sheet = CourseworkService.grade_sheet(subject_id, submission_id)
        return success_response(data=sheet)

    except AppError as e:
        return error_response(e.message, e.status_code)
    except Exception:
        return _failed('Fetch grades')

@coursework_bp.route('/submissions/<int:submission_id>/grades', methods=['POST'])
def grade_student(subject_id, submission_id):
    """Grade one student."""
    try:
        result = CourseworkService.grade_student(
            subject_id, submission_id, request.get_json(silent=True)
        )
        return success_response(data=result)

    except AppError as e:
        db.session.rollback()
        return error_response(e.message, e.status_code)
    except Exception:
        return _failed('Submit grade')

@coursework_bp.route('/submissions/<int:submission_id>/grades', methods=['PUT'])
def grade_many(subject_id, submission_id):
    """Bulk update grades."""
    try:
        result = CourseworkService.grade_many(
            subject_id, submission_id, request.get_json(silent=True)
        )
        return success_response(data=result)

    except AppError as e:
        db.session.rollback()
        return error_response(e.message, e.status_code)
    except Exception:
        return _failed('Update grades')

@coursework_bp.route('/grades/stats', methods=['GET'])
def grade_stats(subject_id):
    """Grade statistics for a subject."""
    try:
        stats = CourseworkService.grade_stats(subject_id)
        return success_response(data={'stats': stats})

    except Exception:
        return _failed('Fetch grade stats')
