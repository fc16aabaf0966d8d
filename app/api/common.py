"""
Request helpers shared by the gateway blueprints.
"""

from typing import Any, Dict, Optional

from flask import jsonify, request

from validators import ValidationError, parse_json_body


def json_body() -> Dict[str, Any]:
    """Decode the request body; malformed JSON is a ValidationError."""
    return parse_json_body(request.get_data(cache=True) or None)


def request_org_id(body: Optional[Dict] = None) -> Optional[str]:
    """Tenant of the request: X-Organization-Id header, else organizationId in the body."""
    org_id = request.headers.get('X-Organization-Id')
    if not org_id and body:
        org_id = body.get('organizationId')
    return org_id or None


def require_field(body: Dict, field: str) -> Any:
    value = body.get(field)
    if value is None or value == '':
        raise ValidationError(f"Missing required fields: {field}", field=field)
    return value


def success(status: int = 200, **payload):
    return jsonify({'success': True, **payload}), status
