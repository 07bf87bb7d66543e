"""
Helpers for turning MongoDB documents into JSON-safe dicts.
"""

from datetime import datetime
from typing import Any

from bson import ObjectId


def to_json(value: Any) -> Any:
    """
    Recursively convert ObjectId and datetime values so the result can be
    passed straight to jsonify().

    Args:
        value: A document, list, or scalar returned by pymongo.

    Returns:
        The same structure with ObjectIds as strings and datetimes as ISO-8601 strings.
    """
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value
