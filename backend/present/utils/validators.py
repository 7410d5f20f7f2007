"""Validation utilities for request payloads."""
import math
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from present.utils.errors import ValidationError

class Validator:
    """Validation helper class."""

    @staticmethod
    def is_blank(value: Any) -> bool:
        """True for None, empty strings and whitespace-only strings."""
        if value is None:
            return True
        if isinstance(value, str):
            return not value.strip()
        return False

    @staticmethod
    def require_object(data: Any, message: str = None) -> Dict:
        """Return ``data`` if it is a JSON object, else raise ValidationError."""
        if not isinstance(data, dict):
            raise ValidationError(message or "Request body must be a JSON object")
        return data

    @staticmethod
    def require_fields(data: Dict, required_fields: List[str], message: str = None) -> None:
        """Raise ValidationError if any required field is missing or blank."""
        missing = [field for field in required_fields
                   if Validator.is_blank(data.get(field))]
        if missing:
            raise ValidationError(message or f"Missing required field: {', '.join(missing)}")

    @staticmethod
    def parse_int(value: Any, field: str, minimum: int = None, maximum: int = None) -> int:
        """Parse an integer field, rejecting booleans and fractional values."""
        if isinstance(value, bool):
            raise ValidationError(f"{field} must be an integer")

        if isinstance(value, float):
            if not value.is_integer():
                raise ValidationError(f"{field} must be an integer")
            value = int(value)

        try:
            result = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field} must be an integer")

        if minimum is not None and result < minimum:
            raise ValidationError(f"{field} must be at least {minimum}")
        if maximum is not None and result > maximum:
            raise ValidationError(f"{field} must be at most {maximum}")

        return result

    @staticmethod
    def parse_date(value: Any, field: str = 'date') -> date:
        """Parse an ISO date (YYYY-MM-DD)."""
        if isinstance(value, date) and not isinstance(value, datetime):
            return value
        try:
            return date.fromisoformat(str(value)[:10])
        except ValueError:
            raise ValidationError(f"Invalid {field} format, expected YYYY-MM-DD")

    @staticmethod
    def parse_time(value: Any, field: str = 'time') -> Optional[time]:
        """Parse HH:MM or HH:MM:SS; blank values mean no time."""
        if Validator.is_blank(value):
            return None
        if isinstance(value, time):
            return value
        try:
            return time.fromisoformat(str(value).strip())
        except ValueError:
            raise ValidationError(f"Invalid {field} format, expected HH:MM or HH:MM:SS")

    @staticmethod
    def parse_bool(value: Any, field: str, default: bool = None) -> bool:
        """Accept only JSON booleans; ``"false"`` and ``0`` are rejected.

        ``None`` yields ``default`` when one is given.
        """
        if value is None and default is not None:
            return default
        if not isinstance(value, bool):
            raise ValidationError(f"{field} must be true or false")
        return value

    @staticmethod
    def parse_number(value: Any, field: str, minimum: float = None,
                     maximum: float = None) -> float:
        """Parse a numeric field such as a grade."""
        if isinstance(value, bool):
            raise ValidationError(f"{field} must be a number")
        try:
            result = float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field} must be a number")

        if not math.isfinite(result):
            raise ValidationError(f"{field} must be a number")
        if minimum is not None and result < minimum:
            raise ValidationError(f"{field} must be at least {minimum:g}")
        if maximum is not None and result > maximum:
            raise ValidationError(f"{field} must be at most {maximum:g}")

        return result
