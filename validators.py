"""
Input Validation Utilities
Validates gateway request bodies and action inputs before anything is persisted
"""
import json
import re
from typing import Dict, Any, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

# Allowed values by field
ORGANIZATION_STATUSES = ('active', 'suspended')
SUBSCRIPTION_STATUSES = ('active', 'trial', 'past_due', 'cancelled')
PROJECT_STATUSES = ('active', 'completed', 'on-hold')
TASK_STATUSES = ('pending', 'in-progress', 'completed')
INVOICE_TYPES = ('sent', 'received')
INVOICE_STATUSES = ('pending', 'paid', 'overdue')
NOTIFICATION_TYPES = ('task_completed', 'urgent')

# Regex patterns
EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
PHONE_PATTERN = re.compile(r'^\+?\d{6,15}$')


class ValidationError(Exception):
    """Custom exception for validation errors"""
    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]) -> Tuple[bool, Optional[str]]:
    """
    Validate that all required fields are present in the data

    Args:
        data: Dictionary of input data
        required_fields: List of required field names

    Returns:
        Tuple of (is_valid, error_message)
    """
    missing_fields = [field for field in required_fields if field not in data or data[field] is None or data[field] == '']

    if missing_fields:
        return False, f"Missing required fields: {', '.join(missing_fields)}"

    return True, None


def validate_email(email: str) -> Tuple[bool, Optional[str]]:
    """
    Validate email format

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email or not isinstance(email, str):
        return False, "Email must be a non-empty string"

    if not EMAIL_PATTERN.match(email):
        return False, "Invalid email format"

    if len(email) > 254:  # RFC 5321
        return False, "Email address too long"

    return True, None


def validate_phone(phone: str) -> Tuple[bool, Optional[str]]:
    """
    Validate phone number format

    Args:
        phone: Phone number to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not phone or not isinstance(phone, str):
        return False, "Phone must be a non-empty string"

    # Remove common separators
    cleaned_phone = re.sub(r'[\s\-\(\)]', '', phone)

    if not PHONE_PATTERN.match(cleaned_phone):
        return False, "Invalid phone number format"

    return True, None


def validate_choice(value: Any, allowed: Tuple[str, ...]) -> Tuple[bool, Optional[str]]:
    """Validate that a value is one of the allowed options"""
    if value not in allowed:
        return False, f"Invalid value '{value}'. Allowed: {', '.join(allowed)}"
    return True, None


def validate_number_range(value: Any, min_value: Optional[float] = None, max_value: Optional[float] = None) -> Tuple[bool, Optional[str]]:
    """
    Validate number is within acceptable range

    Args:
        value: Number to validate
        min_value: Minimum allowed value
        max_value: Maximum allowed value

    Returns:
        Tuple of (is_valid, error_message)
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False, "Value must be a number"

    if min_value is not None and value < min_value:
        return False, f"Value too small (minimum {min_value})"

    if max_value is not None and value > max_value:
        return False, f"Value too large (maximum {max_value})"

    return True, None


def clamp_progress(value: Any) -> int:
    """Coerce a progress value into the 0-100 integer range"""
    try:
        progress = int(round(float(value)))
    except (TypeError, ValueError):
        raise ValidationError("Progress must be a number", field='progress')
    return max(0, min(100, progress))


def ensure_valid(result: Tuple[bool, Optional[str]], field: Optional[str] = None) -> None:
    """Raise ValidationError for a failed (is_valid, error_message) result"""
    is_valid, error = result
    if not is_valid:
        if field:
            error = f"Invalid {field}: {error}"
        raise ValidationError(error, field=field)


def parse_json_body(raw: Any) -> Dict[str, Any]:
    """
    Decode a request body into a JSON object

    Args:
        raw: Raw body (bytes, str) or an already-decoded object

    Returns:
        Decoded dictionary

    Raises:
        ValidationError: If the body is missing, malformed or not an object
    """
    if isinstance(raw, dict):
        return raw
    if raw is None or raw == b'' or raw == '':
        raise ValidationError("Request body is required")
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Malformed JSON body: {e}")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


# =============================================================================
# ENTITY REQUEST VALIDATORS
# =============================================================================

def validate_signup_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """Validate a signup or invite request"""
    is_valid, error = validate_required_fields(data, ['name', 'email'])
    if not is_valid:
        return False, error

    is_valid, error = validate_email(data['email'])
    if not is_valid:
        return False, f"Invalid email: {error}"

    if data.get('phone'):
        is_valid, error = validate_phone(data['phone'])
        if not is_valid:
            return False, f"Invalid phone: {error}"

    return True, None


def validate_project_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """Validate a project create/replace request"""
    is_valid, error = validate_required_fields(data, ['id', 'name'])
    if not is_valid:
        return False, error

    if 'status' in data and data['status'] is not None:
        is_valid, error = validate_choice(data['status'], PROJECT_STATUSES)
        if not is_valid:
            return False, f"Invalid status: {error}"

    if data.get('clientEmail'):
        is_valid, error = validate_email(data['clientEmail'])
        if not is_valid:
            return False, f"Invalid clientEmail: {error}"

    return True, None


def validate_task_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """Validate a task create/replace request"""
    is_valid, error = validate_required_fields(data, ['id', 'projectId', 'title'])
    if not is_valid:
        return False, error

    if 'status' in data and data['status'] is not None:
        is_valid, error = validate_choice(data['status'], TASK_STATUSES)
        if not is_valid:
            return False, f"Invalid status: {error}"

    return True, None


def validate_invoice_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """Validate an invoice create/replace request"""
    is_valid, error = validate_required_fields(data, ['id', 'type', 'amount'])
    if not is_valid:
        return False, error

    is_valid, error = validate_choice(data['type'], INVOICE_TYPES)
    if not is_valid:
        return False, f"Invalid type: {error}"

    is_valid, error = validate_number_range(data['amount'], min_value=0)
    if not is_valid:
        return False, f"Invalid amount: {error}"

    if data.get('status') is not None:
        is_valid, error = validate_choice(data['status'], INVOICE_STATUSES)
        if not is_valid:
            return False, f"Invalid status: {error}"

    return True, None


def validate_meeting_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """Validate a meeting create/replace request"""
    is_valid, error = validate_required_fields(data, ['id', 'title', 'date'])
    if not is_valid:
        return False, error

    attendees = data.get('attendees')
    if attendees is not None and not isinstance(attendees, (list, tuple, str)):
        return False, "Invalid attendees: must be a list of user ids"

    return True, None


def validate_reminder_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """Validate a reminder create/replace request"""
    return validate_required_fields(data, ['id', 'title', 'date'])


def validate_other_matter_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """Validate an other-matter (sticky note) request"""
    return validate_required_fields(data, ['id', 'title'])
