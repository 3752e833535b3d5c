"""String and translation API routes.

Every successful change queues a background re-export of the affected domain.
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from transapi.logger import get_logger

from .common import get_context, get_json_body, require_string

translations_bp = Blueprint("translations", __name__)
logger = get_logger(__name__)

TRANSLATION_PATH = "/<domain>/strings/<string_name>/translations/<lang>"


@translations_bp.route(TRANSLATION_PATH, methods=["POST", "PUT"])
def create_or_update_translation(domain: str, string_name: str, lang: str):
    """
    Set the content of a translation: {"content": "..."}.

    PUT only updates an existing translation. POST also creates the string and/or
    translation when missing (the domain must exist either way).
    """
    content = require_string(get_json_body(), "content")
    allow_create = request.method == "POST"

    context = get_context()
    context.datastore.create_or_update_translation(domain, string_name, lang, content, allow_create)
    context.request_export(domain)
    return jsonify({"result": "ok"})


@translations_bp.delete(TRANSLATION_PATH)
def delete_translation(domain: str, string_name: str, lang: str):
    """Delete one translation of a string."""
    context = get_context()
    context.datastore.delete_translation(domain, string_name, lang)
    context.request_export(domain)
    return jsonify({"result": "ok"})


@translations_bp.delete("/<domain>/strings/<string_name>")
def delete_string(domain: str, string_name: str):
    """Delete a string together with all its translations."""
    context = get_context()
    context.datastore.delete_string(domain, string_name)
    context.request_export(domain)
    return jsonify({"result": "ok"})
