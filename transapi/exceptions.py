"""
Data Store Exceptions

Error taxonomy shared by the data store, the migration engine, the XLIFF codec and
the import/export pipeline. Kept in its own module to avoid circular imports.
"""


class TransApiError(Exception):
    """Base error with optional code and details."""

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}


class NotFoundError(TransApiError):
    """A domain, string, translation or language does not exist."""

    def __init__(self, message: str = "not found", details: dict = None):
        super().__init__(message, code="not_found", details=details)


class AlreadyExistsError(TransApiError):
    """A uniqueness conflict detected before inserting."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, code="already_exists", details=details)


class ValidationError(TransApiError):
    """Malformed input: bad request body, bad filename, language mismatch."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, code="validation_error", details=details)


class StorageError(TransApiError):
    """Unexpected database failure or adapter misconfiguration."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, code="storage_error", details=details)


class ConfigError(TransApiError):
    """Invalid or missing configuration."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, code="config_error", details=details)


class MigrationError(StorageError):
    """A migration script failed. `version` is the last version successfully reached."""

    def __init__(self, message: str, version: int):
        super().__init__(message, details={"version": version})
        self.version = version


class ImportDirectoryError(TransApiError):
    """A file in an import directory failed. `count` files were processed before it."""

    def __init__(self, message: str, count: int, filename: str = None):
        super().__init__(message, code="import_failed", details={"count": count, "file": filename})
        self.count = count
        self.filename = filename
