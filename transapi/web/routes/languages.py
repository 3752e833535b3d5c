"""Language API routes."""

from __future__ import annotations

from flask import Blueprint, jsonify

import transapi.language_codes as lc
from transapi.exceptions import ValidationError
from transapi.logger import get_logger

from .common import get_context, get_json_body, require_string

languages_bp = Blueprint("languages", __name__)
logger = get_logger(__name__)


@languages_bp.get("")
def list_languages():
    """Return all registered languages."""
    languages = get_context().datastore.get_language_list()
    return jsonify([language.to_dict() for language in languages])


@languages_bp.post("")
def create_language():
    """Register a new language: {"code": "de-at", "name": "German (Austria)"}."""
    data = get_json_body()
    code = lc.normalize_language_code(require_string(data, "code"))
    name = require_string(data, "name").strip()

    if not lc.is_valid_language_code(code):
        raise ValidationError(f"Invalid language code '{code}'")
    if not name:
        raise ValidationError("Language name must not be empty")

    language_id = get_context().datastore.create_language(code, name)
    logger.info("Language %s registered via API", code)
    return jsonify({"id": language_id, "code": code, "name": name}), 201
