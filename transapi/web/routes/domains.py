"""Domain API routes: listing, full domain view and export."""

from __future__ import annotations

from flask import Blueprint, jsonify

from transapi.logger import get_logger
from transapi.model import domain_to_dict

from .common import get_context

domains_bp = Blueprint("domains", __name__)
logger = get_logger(__name__)


@domains_bp.get("")
def list_domains():
    """Return the names of all domains."""
    domains = get_context().datastore.get_domain_list()
    return jsonify({"domains": [d.name for d in domains]})


@domains_bp.get("/<name>")
def get_domain(name: str):
    """Return a domain with all its strings and translations."""
    domain = get_context().datastore.get_full_domain(name)
    return jsonify(domain_to_dict(domain))


@domains_bp.post("/<name>/export")
def export_domain(name: str):
    """Export a domain to the configured XLIFF export directory and wait for it."""
    files = get_context().export_domain(name)
    logger.info("Domain %s exported via API (%s files)", name, len(files))
    return jsonify({"result": "ok", "files": [f.name for f in files]})
