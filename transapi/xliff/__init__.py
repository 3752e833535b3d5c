"""
XLIFF module - Conversion between the domain model and XLIFF 1.2 files

This module provides:
- XliffDocument / TransUnit: a parsed or generated file, usable as a Domain
- parse_file: decode one '{domain}.{language}.xliff' file
- export: write a domain as one file per target language
"""

from transapi.xliff.document import (
    XLIFF_NAMESPACE,
    TransUnit,
    XliffDocument,
    from_xml,
    parse_file,
    string_hash,
    to_xml,
)
from transapi.xliff.exporter import build_documents, export

__all__ = [
    "XLIFF_NAMESPACE",
    "TransUnit",
    "XliffDocument",
    "build_documents",
    "export",
    "from_xml",
    "parse_file",
    "string_hash",
    "to_xml",
]
