"""
List Codec - the single (de)serialization boundary for list-valued columns.

Attachments, comment images, completion images and meeting attendees are stored
as JSON text. Reads are defensive because older rows hold NULL, bare strings
or already-decoded values.
"""

import json
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def serialize_list(values: Any) -> str:
    """
    Encode a list-valued field as JSON text.

    None becomes "[]" and a bare string becomes a one-element list.
    """
    if values is None:
        return '[]'
    if isinstance(values, str):
        return json.dumps([values])
    return json.dumps(list(values))


def parse_list(raw: Any) -> List[Any]:
    """
    Decode a list-valued field. Never returns None.

    - None / empty string -> []
    - list or tuple -> returned as a list, unchanged
    - JSON array text -> the decoded list
    - JSON null -> []
    - any other JSON value -> one-element list
    - text that is not JSON (a URL, a data: URI) -> one-element list
    """
    if raw is None:
        return []
    if isinstance(raw, list):
        return raw
    if isinstance(raw, tuple):
        return list(raw)
    if not isinstance(raw, str):
        return [raw]
    if raw == '':
        return []
    try:
        decoded = json.loads(raw)
    except ValueError:
        return [raw]
    if decoded is None:
        return []
    if isinstance(decoded, list):
        return decoded
    logger.warning("List column held a non-list JSON value; wrapping it")
    return [decoded]


def parse_json_object(raw: Any) -> Optional[Dict[str, Any]]:
    """Decode an optional JSON object payload (notification data)."""
    if raw is None or raw == '':
        return None
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except ValueError:
            return {'value': raw}
        if decoded is None or isinstance(decoded, dict):
            return decoded
        return {'value': decoded}
    return {'value': raw}
