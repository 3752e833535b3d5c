"""Helpers shared by the route blueprints."""

from typing import Any, Dict

from flask import current_app, request

from transapi.exceptions import ValidationError


def get_context():
    """The AppContext the running app was built with."""
    return current_app.extensions["transapi"]


def get_json_body() -> Dict[str, Any]:
    """Return the request body as a JSON object, or raise ValidationError."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Could not decode request (expected a JSON object)")
    return data


def require_string(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValidationError(f"Could not decode request ('{key}' must be a string)")
    return value
