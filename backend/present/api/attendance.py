"""Instructor attendance session endpoints."""
from flask import Blueprint, current_app, request
from present import db
from present.services.attendance_service import AttendanceService
from present.utils.errors import AppError
from present.utils.helpers import success_response, error_response

attendance_bp = Blueprint('attendance', __name__)

@attendance_bp.route('', methods=['GET'])
def list_sessions(subject_id):
    """Fetch attendance sessions for a subject."""
    try:
        sessions = AttendanceService.list_sessions(subject_id)
        return success_response(data={'sessions': sessions})

    except Exception:
        current_app.logger.exception('Fetch attendance sessions error')
        return error_response('Failed to fetch attendance sessions', 500)

@attendance_bp.route('', methods=['POST'])
def create_session(subject_id):
    """Create a new attendance session."""
    try:
        session = AttendanceService.create_session(subject_id, request.get_json(silent=True))
        return success_response(data={'session': session}, status_code=201)

    except AppError as e:
        db.session.rollback()
        return error_response(e.message, e.status_code)
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Create attendance session error')
        return error_response('Failed to create attendance session', 500)

@attendance_bp.route('/stats', methods=['GET'])
def session_stats(subject_id):
    """Attendance statistics for a subject."""
    try:
        stats = AttendanceService.subject_stats(subject_id)
        return success_response(data={'stats': stats})

    except Exception:
        current_app.logger.exception('Fetch attendance stats error')
        return error_response('Failed to fetch attendance stats', 500)

@attendance_bp.route('/<int:session_id>', methods=['GET'])
def get_session(subject_id, session_id):
    """Fetch a single attendance session with records."""
    try:
        session = AttendanceService.get_session_detail(subject_id, session_id)
        return success_response(data={'session': session})

    except AppError as e:
        return error_response(e.message, e.status_code)
    except Exception:
        current_app.logger.exception('Fetch attendance session error')
        return error_response('Failed to fetch session', 500)

@attendance_bp.route('/<int:session_id>', methods=['PUT'])
def update_session(subject_id, session_id):
    """Update an attendance session and optionally replace its records."""
    try:
        session = AttendanceService.update_session(
            subject_id, session_id, request.get_json(silent=True)
        )
        return success_response(data={'session': session})

    except AppError as e:
        db.session.rollback()
        return error_response(e.message, e.status_code)
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Update attendance session error')
        return error_response('Failed to update session', 500)

@attendance_bp.route('/<int:session_id>', methods=['DELETE'])
def delete_session(subject_id, session_id):
    """Delete an attendance session."""
    try:
        AttendanceService.delete_session(subject_id, session_id)
        return success_response()

    except AppError as e:
        db.session.rollback()
        return error_response(e.message, e.status_code)
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Delete attendance session error')
        return error_response('Failed to delete session', 500)
