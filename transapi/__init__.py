"""Translation management service: domains of strings with per-language content, XLIFF import/export."""

__version__ = "1.0.0"
