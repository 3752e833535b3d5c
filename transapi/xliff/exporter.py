"""
XLIFF exporter.

Writes one '{domain}.{language}.xliff' file per target language found in a domain:
- a string without a translation in some language has no entry in that file
- the <source> text is the string's content in the source language, or the string
  name when there is no source-language content
- files are written atomically and replace existing files of the same name
- files of the domain for languages that no longer have any translation are removed
"""

import os
import tempfile
from pathlib import Path
from typing import Dict, List

from transapi.language_codes import XLIFF_EXTENSION, get_xliff_file_name, parse_xliff_file_name
from transapi.logger import get_logger
from transapi.model import Domain, Language, get_translation
from transapi.xliff.document import XliffDocument, to_xml

logger = get_logger(__name__)

# Permissions of exported files (mkstemp creates them owner-only)
EXPORT_FILE_MODE = 0o644


def build_documents(domain: Domain, source_language: Language) -> Dict[Language, XliffDocument]:
    """Group a domain's translations into one document per target language."""
    documents: Dict[Language, XliffDocument] = {}

    for string in domain.strings:
        source_translation = get_translation(string, source_language)
        source_text = source_translation.content if source_translation is not None else string.name

        for language, translation in string.translations.items():
            document = documents.get(language)
            if document is None:
                document = XliffDocument(
                    name=domain.name,
                    source_language=source_language.code,
                    target_language=language.code,
                )
                documents[language] = document
            document.add(string.name, source_text, translation.content)

    return documents


def export(domain: Domain, source_language: Language, output_dir) -> List[Path]:
    """
    Export a domain to XLIFF files in output_dir (created if missing).

    Returns:
        Paths of the files written, one per target language
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for language, document in build_documents(domain, source_language).items():
        file_path = output_dir / get_xliff_file_name(domain.name, language.code)
        _atomic_write(file_path, to_xml(document))
        written.append(file_path)

    _remove_stale_files(domain.name, output_dir, keep=written)

    logger.info(f"Exported domain '{domain.name}' to {len(written)} file(s) in {output_dir}")
    return written


def _remove_stale_files(domain_name: str, output_dir: Path, keep: List[Path]):
    """Delete this domain's files for languages that were not written this time."""
    keep_names = {p.name for p in keep}
    for file_path in output_dir.glob(f"{domain_name}.*.{XLIFF_EXTENSION}"):
        info = parse_xliff_file_name(file_path.name)
        if info is None or info[0] != domain_name or file_path.name in keep_names:
            continue
        file_path.unlink(missing_ok=True)
        logger.info(f"Removed {file_path.name}, language '{info[1]}' has no translations left")


def _atomic_write(file_path: Path, data: bytes):
    """Write to a temporary file in the same directory, then rename over the target."""
    temp_fd, temp_path = tempfile.mkstemp(
        dir=file_path.parent,
        prefix=f".{file_path.stem}_",
        suffix=".tmp"
    )
    temp_path = Path(temp_path)

    try:
        with open(temp_fd, 'wb') as f:
            f.write(data)
        os.chmod(temp_path, EXPORT_FILE_MODE)
        temp_path.replace(file_path)
        logger.debug(f"Wrote {file_path}")
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
