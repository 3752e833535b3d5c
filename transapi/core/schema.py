"""
Database Schema Management Module

This module holds the ordered migration scripts for each back-end and the engine
that applies them. Index 0 of a list is the first migration; a database at
version N has had the first N migrations applied. The current version lives in a
one-row schema_migrations table.

For query text, see core/adapters.py. For CRUD operations, see core/database.py.
"""

from contextlib import closing
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from transapi.config import DRIVER_POSTGRES, DRIVER_SQLITE3
from transapi.core import adapters as q
from transapi.exceptions import MigrationError, StorageError
from transapi.language_codes import BASE_LANGUAGES, EXTENDED_LANGUAGES
from transapi.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Migration:
    """One forward script and the script that reverts it."""
    up: str
    down: str


def _language_values(languages: Sequence[Tuple[str, str]]) -> str:
    """Render (code, name) pairs as a VALUES list of SQL string literals."""
    def literal(value: str) -> str:
        return "'" + value.replace("'", "''") + "'"

    return ",\n    ".join(f"({literal(code)}, {literal(name)})" for code, name in languages)


# ============================================================
# SQLite migrations
# ============================================================

SQLITE_MIGRATIONS: List[Migration] = [
    # 1
    Migration(
        up=f"""
CREATE TABLE "domain" (
    "id" INTEGER PRIMARY KEY AUTOINCREMENT,
    "name" TEXT NOT NULL UNIQUE
);
CREATE TABLE "language" (
    "id" INTEGER PRIMARY KEY AUTOINCREMENT,
    "name" TEXT,
    "code" TEXT NOT NULL UNIQUE
);
CREATE TABLE "string" (
    "id" INTEGER PRIMARY KEY AUTOINCREMENT,
    "name" TEXT NOT NULL,
    "domain_id" INTEGER NOT NULL REFERENCES "domain"("id") ON UPDATE CASCADE ON DELETE CASCADE
);
CREATE INDEX "string_domain_id_idx" ON "string" ("domain_id");
CREATE UNIQUE INDEX "string_name_domain_id_idx" ON "string" ("name", "domain_id");
CREATE TABLE "translation" (
    "id" INTEGER PRIMARY KEY AUTOINCREMENT,
    "language_id" INTEGER NOT NULL REFERENCES "language"("id") ON UPDATE CASCADE ON DELETE CASCADE,
    "content" TEXT,
    "string_id" INTEGER NOT NULL REFERENCES "string"("id") ON UPDATE CASCADE ON DELETE CASCADE
);
CREATE INDEX "translation_string_id_idx" ON "translation" ("string_id");
CREATE UNIQUE INDEX "translation_language_id_string_id_idx" ON "translation" ("language_id", "string_id");
INSERT INTO language (code, name) VALUES
    {_language_values(BASE_LANGUAGES)};
""",
        down="""
DROP TABLE IF EXISTS translation;
DROP TABLE IF EXISTS string;
DROP TABLE IF EXISTS language;
DROP TABLE IF EXISTS domain;
""",
    ),
    # 2
    Migration(
        up="INSERT INTO language (code, name) VALUES ('nl', 'Dutch');",
        down="DELETE FROM language WHERE code = 'nl';",
    ),
]


# ============================================================
# PostgreSQL migrations
# ============================================================

POSTGRES_MIGRATIONS: List[Migration] = [
    # 1
    Migration(
        up=f"""
CREATE TABLE domain (
    id SERIAL PRIMARY KEY,
    name varchar NOT NULL UNIQUE
);
CREATE TABLE language (
    id SERIAL PRIMARY KEY,
    name varchar,
    code varchar NOT NULL UNIQUE
);
CREATE TABLE string (
    id SERIAL PRIMARY KEY,
    name varchar NOT NULL,
    domain_id integer NOT NULL REFERENCES domain(id) ON DELETE CASCADE ON UPDATE CASCADE
);
CREATE INDEX domain_id_idx ON string (domain_id);
CREATE INDEX name_idx ON string (name);
CREATE UNIQUE INDEX name_domain_idx ON string (name, domain_id);
CREATE TABLE translation (
    id SERIAL PRIMARY KEY,
    language_id integer NOT NULL REFERENCES language(id) ON DELETE CASCADE ON UPDATE CASCADE,
    content TEXT,
    string_id integer NOT NULL REFERENCES string(id) ON DELETE CASCADE ON UPDATE CASCADE
);
CREATE INDEX language_id_idx ON translation (language_id);
CREATE INDEX string_id_idx ON translation (string_id);
CREATE UNIQUE INDEX string_id_language_id_idx ON translation (language_id, string_id);
INSERT INTO language (code, name) VALUES
    {_language_values(BASE_LANGUAGES + EXTENDED_LANGUAGES)};
""",
        down="""
DROP TABLE IF EXISTS translation;
DROP TABLE IF EXISTS string;
DROP TABLE IF EXISTS language;
DROP TABLE IF EXISTS domain;
""",
    ),
]


MIGRATIONS: Dict[str, List[Migration]] = {
    DRIVER_SQLITE3: SQLITE_MIGRATIONS,
    DRIVER_POSTGRES: POSTGRES_MIGRATIONS,
}


# ============================================================
# Migration engine
# ============================================================

class Migrator:
    """Applies one back-end's migrations to a connection and tracks the version."""

    def __init__(self, conn, adapter: q.Adapter, migrations: List[Migration] = None):
        self.conn = conn
        self.adapter = adapter
        if migrations is None:
            migrations = MIGRATIONS.get(adapter.driver)
            if migrations is None:
                raise StorageError(f"no migrations available for database driver '{adapter.driver}'")
        self.migrations = migrations

    @property
    def latest_version(self) -> int:
        return len(self.migrations)

    def _execute(self, operation: str, params: tuple = ()):
        with closing(self.conn.cursor()) as cursor:
            cursor.execute(self.adapter.query(operation), params)
            if cursor.description is not None:
                return cursor.fetchall()
            return None

    def ensure_version_table_exists(self):
        """Create the version table holding a single row set to 0, if missing."""
        try:
            self._execute(q.ENSURE_VERSION_TABLE)
            count = self._execute(q.COUNT_VERSION_ROWS)[0][0]
            if count == 0:
                self._execute(q.INSERT_VERSION)
        except self.adapter.errors as e:
            raise StorageError(f"could not create schema_migrations table: {e}") from e

        if count > 1:
            raise StorageError("too many rows in schema_migrations table")

    def get_version(self) -> int:
        """Get current database version (0 when unmigrated)."""
        self.ensure_version_table_exists()
        try:
            rows = self._execute(q.GET_VERSION)
        except self.adapter.errors as e:
            raise StorageError(f"could not read schema version: {e}") from e
        return rows[0][0] if rows else 0

    def _set_version(self, version: int):
        self._execute(q.UPDATE_VERSION, (version,))

    def migrate_up(self) -> int:
        """
        Apply every migration newer than the current version, in order.

        Returns:
            The version reached.

        Raises:
            MigrationError: On the first failing script. Migrations applied before
                it stay applied; `version` is the last one reached.
        """
        start_version = self.get_version()
        version = start_version

        for i, migration in enumerate(self.migrations):
            target = i + 1
            if target <= start_version:
                continue

            logger.info(f"Migrating {self.adapter.driver} database up to version {target}")
            try:
                self.adapter.execute_script(self.conn, migration.up)
                self._set_version(target)
            except self.adapter.errors as e:
                logger.error(f"Migration to version {target} failed: {e}")
                raise MigrationError(
                    f"migration to version {target} failed: {e}", version=version
                ) from e
            version = target

        if version == start_version:
            logger.debug(f"Database already at version {version}, nothing to migrate")
        return version

    def migrate_down(self) -> int:
        """
        Revert migrations in reverse order down to version 0.

        Scripts for versions above the current one are skipped.

        Raises:
            MigrationError: On the first failing script; `version` is the last one reached.
        """
        start_version = self.get_version()
        version = start_version

        for i in range(len(self.migrations) - 1, -1, -1):
            migration_version = i + 1
            if migration_version > start_version:
                continue

            logger.info(f"Migrating {self.adapter.driver} database down to version {i}")
            try:
                self.adapter.execute_script(self.conn, self.migrations[i].down)
                self._set_version(i)
            except self.adapter.errors as e:
                logger.error(f"Reverting version {migration_version} failed: {e}")
                raise MigrationError(
                    f"reverting version {migration_version} failed: {e}", version=version
                ) from e
            version = i

        return version
