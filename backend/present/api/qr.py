"""QR check-in API endpoints."""
from flask import Blueprint, current_app, request
from present import db, limiter
from present.services.qr_service import QRService
from present.utils.errors import AppError
from present.utils.helpers import success_response, error_response

qr_bp = Blueprint('qr', __name__)

@qr_bp.route('', methods=['POST'])
@limiter.limit("30 per hour")
def generate_qr():
    """Generate a check-in token for an attendance session."""
    try:
        result = QRService.issue_token(request.get_json(silent=True))
        return success_response(data=result)

    except AppError as e:
        return error_response(e.message, e.status_code)
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Generate QR token error')
        return error_response('Failed to generate QR token', 500)

@qr_bp.route('', methods=['GET'])
@limiter.limit("60 per minute")
def validate_qr():
    """Preview the session behind a token (read-only)."""
    try:
        result = QRService.preview(request.args.get('token'))
        return success_response(data=result)

    except AppError as e:
        return error_response(e.message, e.status_code)
    except Exception:
        current_app.logger.exception('Validate QR token error')
        return error_response('Failed to validate QR token', 500)

@qr_bp.route('', methods=['PUT'])
@limiter.limit("60 per minute")
def mark_attendance():
    """Mark a student's attendance from a QR scan."""
    try:
        result = QRService.check_in(request.get_json(silent=True))
        return success_response(data=result)

    except AppError as e:
        db.session.rollback()
        return error_response(e.message, e.status_code)
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Mark QR attendance error')
        return error_response('Failed to mark attendance', 500)
