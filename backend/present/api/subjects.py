"""Subject roster endpoints."""
from flask import Blueprint, current_app
from present.services.attendance_service import AttendanceService
from present.utils.helpers import success_response, error_response

subjects_bp = Blueprint('subjects', __name__)

@subjects_bp.route('/<int:subject_id>/members', methods=['GET'])
def list_members(subject_id):
    """Fetch students enrolled in a subject."""
    try:
        members = AttendanceService.list_members(subject_id)
        return success_response(data={'members': members})

    except Exception:
        current_app.logger.exception('Fetch members error')
        return error_response('Failed to fetch members', 500)
