"""
XLIFF directory synchronization module.

This module moves translation data between the database and a directory of
'{domain}.{language}.xliff' files:
- import_directory: decode every file in a directory and store its content
- export_domain: write one domain as one file per language
- export_directory: export every domain (or a single one)

Files are processed one at a time, in sorted filename order.
"""

from pathlib import Path
from typing import Callable, List, Optional

from transapi import xliff
from transapi.core.database import DataStore
from transapi.exceptions import ImportDirectoryError, TransApiError
from transapi.language_codes import XLIFF_EXTENSION, get_language_name
from transapi.logger import get_logger
from transapi.model import Language

logger = get_logger(__name__)


def list_xliff_files(directory) -> List[Path]:
    """List '*.xliff' files directly inside a directory (not recursive), sorted by name."""
    return sorted(p for p in Path(directory).glob(f"*.{XLIFF_EXTENSION}") if p.is_file())


def import_directory(datastore: DataStore, directory,
                     notify: Optional[Callable[[str], None]] = None) -> int:
    """
    Import every XLIFF file in a directory.

    Args:
        datastore: Target data store
        directory: Directory holding the files
        notify: Called with each file's base name after it has been imported

    Returns:
        Number of files imported

    Raises:
        ImportDirectoryError: On the first file that cannot be decoded or stored.
            `count` is the number of files imported before it; their data is kept.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise ImportDirectoryError(f"Import path '{directory}' is not a directory", count=0)

    files = list_xliff_files(directory)
    logger.info(f"Importing {len(files)} XLIFF file(s) from {directory}")

    for count, file_path in enumerate(files):
        try:
            document = xliff.parse_file(file_path)
            datastore.import_domain(document)
        except (TransApiError, OSError) as e:
            logger.error(f"Import of {file_path.name} failed after {count} file(s): {e}")
            raise ImportDirectoryError(
                f"Could not import '{file_path.name}': {e}", count=count, filename=file_path.name
            ) from e

        logger.debug(f"Imported {file_path.name} ({len(document.trans_units)} strings)")
        if notify is not None:
            try:
                notify(file_path.name)
            except Exception as e:
                logger.warning(f"Import progress callback failed for {file_path.name}: {e}")

    logger.info(f"Imported {len(files)} file(s) from {directory}")
    return len(files)


def source_language_for(code: str) -> Language:
    return Language(code=code, name=get_language_name(code) or "")


def export_domain(datastore: DataStore, name: str, output_dir, source_language_code: str) -> List[Path]:
    """
    Export one domain to output_dir.

    Raises:
        NotFoundError: If the domain does not exist
    """
    domain = datastore.get_full_domain(name)
    return xliff.export(domain, source_language_for(source_language_code), output_dir)


def export_directory(datastore: DataStore, output_dir, source_language_code: str,
                     domain_name: Optional[str] = None) -> int:
    """
    Export every domain (or only `domain_name`) to output_dir.

    Returns:
        Number of domains exported
    """
    if domain_name is not None:
        names = [domain_name]
    else:
        names = [d.name for d in datastore.get_domain_list()]

    for name in names:
        export_domain(datastore, name, output_dir, source_language_code)

    logger.info(f"Exported {len(names)} domain(s) to {output_dir}")
    return len(names)
