"""
Core module - Data access and XLIFF directory synchronization

This module provides:
- adapters: per-back-end query text and connection setup
- schema: migration scripts and the migration engine
- database: the DataStore
- sync: directory-level XLIFF import and export
"""

from transapi.core.adapters import (
    Adapter,
    PostgresAdapter,
    SqliteAdapter,
    connect,
    get_adapter,
)
from transapi.core.database import DataStore
from transapi.core.schema import (
    MIGRATIONS,
    Migration,
    Migrator,
)
from transapi.core.stats import Stats
from transapi.core.sync import (
    export_directory,
    export_domain,
    import_directory,
)
