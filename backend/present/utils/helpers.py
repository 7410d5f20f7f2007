"""Helper functions for the application."""
from datetime import datetime
from typing import Any, Dict, Optional

from flask import jsonify

def current_time() -> datetime:
    """Wall-clock time used for QR expiry and lateness.

    Session dates and times are entered in the school's local time, so this
    is a naive local timestamp.
    """
    return datetime.now()

def handle_error(error, status_code: int):
    """Handle HTTP errors with consistent format."""
    message = getattr(error, 'description', None) or str(error)
    return jsonify({'error': message}), status_code

def success_response(data: Optional[Dict[str, Any]] = None, message: str = None,
                     status_code: int = 200):
    """Return consistent success response."""
    response = {'success': True}

    if message is not None:
        response['message'] = message

    if data:
        response.update(data)

    return jsonify(response), status_code

def error_response(message: str, status_code: int = 400):
    """Return consistent error response."""
    return jsonify({'error': message}), status_code
