"""Search API route."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from transapi.core.database import SEARCH_FIELDS
from transapi.exceptions import ValidationError

from .common import get_context

search_bp = Blueprint("search", __name__)


@search_bp.get("")
def search_translations():
    """Search string names and/or translation content: ?q=term&field=all|string|content."""
    term = request.args.get("q", "").strip()
    field = request.args.get("field", "all")
    if not term:
        raise ValidationError("Query parameter 'q' is required")
    if field not in SEARCH_FIELDS:
        raise ValidationError(f"Query parameter 'field' must be one of: {', '.join(SEARCH_FIELDS)}")

    results = get_context().datastore.search(term, field)
    return jsonify({"results": results})
