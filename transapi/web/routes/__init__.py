"""Route blueprints for the web application."""

from .domains import domains_bp
from .languages import languages_bp
from .search import search_bp
from .translations import translations_bp

__all__ = [
    "domains_bp",
    "languages_bp",
    "search_bp",
    "translations_bp",
]
