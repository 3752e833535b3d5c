"""
Database Adapters Module

Each adapter hides one SQL dialect behind the same contract:
- query(operation): parameterized query text for a logical operation
- supports_last_insert_id(): how the id of an inserted row is read back
- post_create(conn): one-time per-connection setup
- execute_script(conn, script): run a multi-statement migration script

The data store branches on supports_last_insert_id() rather than subclassing per
back-end. Use get_adapter() to select an adapter by driver name and connect() to
open a connection for a database config.
"""

import sqlite3
from contextlib import closing
from typing import Dict, Tuple, Type

from transapi.config import DRIVER_POSTGRES, DRIVER_SQLITE3, DbConfig
from transapi.exceptions import StorageError
from transapi.logger import get_logger

logger = get_logger(__name__)

# Logical operations
CREATE_DOMAIN = "create_domain"
CREATE_LANGUAGE = "create_language"
CREATE_STRING = "create_string"
CREATE_TRANSLATION = "create_translation"
DELETE_STRING = "delete_string"
DELETE_TRANSLATION = "delete_translation"
GET_ALL_DOMAINS = "get_all_domains"
GET_ALL_LANGUAGES = "get_all_languages"
GET_SINGLE_DOMAIN = "get_single_domain"
GET_SINGLE_DOMAIN_ID = "get_single_domain_id"
GET_SINGLE_LANGUAGE = "get_single_language"
GET_SINGLE_STRING_ID = "get_single_string_id"
GET_SINGLE_TRANSLATION_ID = "get_single_translation_id"
UPDATE_TRANSLATION = "update_translation"
SEARCH_BY_STRING_NAME = "search_by_string_name"
SEARCH_BY_TRANSLATION_CONTENT = "search_by_translation_content"
SEARCH_BY_ALL_FIELDS = "search_by_all_fields"
# Version table
ENSURE_VERSION_TABLE = "ensure_version_table"
COUNT_VERSION_ROWS = "count_version_rows"
INSERT_VERSION = "insert_version"
GET_VERSION = "get_version"
UPDATE_VERSION = "update_version"

SEARCH_LIMIT = 100
# Escapes % and _ in search terms so they match literally
LIKE_ESCAPE = "\\"

# Column order of GET_SINGLE_DOMAIN rows:
# string_id, string_name, language_id, language_code, language_name, translation_id, content
_SINGLE_DOMAIN_SQL = """
SELECT
    s.id AS string_id,
    s.name AS string_name,
    l.id AS language_id,
    l.code AS language_code,
    l.name AS language_name,
    t.id AS translation_id,
    t.content AS content
FROM domain d
LEFT JOIN string s ON d.id = s.domain_id
LEFT JOIN translation t ON s.id = t.string_id
LEFT JOIN language l ON t.language_id = l.id
WHERE d.name = {p}
ORDER BY s.name, l.code
"""

# Column order of SEARCH_* rows:
# domain_name, string_name, language_code, translation_id, content
_SEARCH_SQL = """
SELECT
    d.name AS domain_name,
    s.name AS string_name,
    l.code AS language_code,
    t.id AS translation_id,
    t.content AS content
FROM translation t
INNER JOIN string s ON s.id = t.string_id
INNER JOIN language l ON t.language_id = l.id
INNER JOIN domain d ON s.domain_id = d.id
WHERE {where}
ORDER BY d.name, s.name, l.code
LIMIT {limit}
"""


def _build_queries(p: str) -> Dict[str, str]:
    """Build the dialect-neutral part of the query table for placeholder `p`."""
    like = f"LIKE {p} ESCAPE '{LIKE_ESCAPE}'"
    return {
        CREATE_DOMAIN: f"INSERT INTO domain (name) VALUES ({p})",
        CREATE_LANGUAGE: f"INSERT INTO language (code, name) VALUES ({p}, {p})",
        CREATE_STRING: f"INSERT INTO string (name, domain_id) VALUES ({p}, {p})",
        CREATE_TRANSLATION: f"INSERT INTO translation (language_id, content, string_id) VALUES ({p}, {p}, {p})",
        DELETE_STRING: f"DELETE FROM string WHERE id = {p}",
        DELETE_TRANSLATION: f"DELETE FROM translation WHERE id = {p}",
        GET_ALL_DOMAINS: "SELECT name FROM domain ORDER BY name",
        GET_ALL_LANGUAGES: "SELECT id, code, name FROM language ORDER BY code",
        GET_SINGLE_DOMAIN: _SINGLE_DOMAIN_SQL.format(p=p),
        GET_SINGLE_DOMAIN_ID: f"SELECT id FROM domain WHERE name = {p}",
        GET_SINGLE_LANGUAGE: f"SELECT id, code, name FROM language WHERE code = {p}",
        GET_SINGLE_STRING_ID: f"SELECT id FROM string WHERE name = {p} AND domain_id = {p}",
        GET_SINGLE_TRANSLATION_ID: (
            "SELECT t.id FROM string s INNER JOIN translation t ON s.id = t.string_id "
            f"WHERE s.id = {p} AND t.language_id = {p} AND s.domain_id = {p}"
        ),
        UPDATE_TRANSLATION: f"UPDATE translation SET content = {p} WHERE id = {p}",
        SEARCH_BY_STRING_NAME: _SEARCH_SQL.format(where=f"s.name {like}", limit=SEARCH_LIMIT),
        SEARCH_BY_TRANSLATION_CONTENT: _SEARCH_SQL.format(where=f"t.content {like}", limit=SEARCH_LIMIT),
        SEARCH_BY_ALL_FIELDS: _SEARCH_SQL.format(
            where=f"s.name {like} OR t.content {like}", limit=SEARCH_LIMIT
        ),
        COUNT_VERSION_ROWS: "SELECT COUNT(*) FROM schema_migrations",
        INSERT_VERSION: "INSERT INTO schema_migrations (version) VALUES (0)",
        GET_VERSION: "SELECT version FROM schema_migrations",
        UPDATE_VERSION: f"UPDATE schema_migrations SET version = {p}",
    }


class Adapter:
    """Base adapter. Subclasses fill in `driver` and `queries`."""

    driver: str = ""
    queries: Dict[str, str] = {}

    def query(self, operation: str) -> str:
        """Return the query text for a logical operation."""
        try:
            return self.queries[operation]
        except KeyError:
            raise StorageError(
                f"adapter '{self.driver}' has no query for operation '{operation}'"
            ) from None

    def supports_last_insert_id(self) -> bool:
        raise NotImplementedError

    def post_create(self, conn) -> None:
        """Per-connection setup run once when the data store is built."""

    def execute_script(self, conn, script: str) -> None:
        raise NotImplementedError

    @property
    def errors(self) -> Tuple[Type[BaseException], ...]:
        """Driver exception classes that should surface as StorageError."""
        raise NotImplementedError


class SqliteAdapter(Adapter):
    """Adapter for SQLite3 databases."""

    driver = DRIVER_SQLITE3
    queries = {
        **_build_queries("?"),
        ENSURE_VERSION_TABLE: 'CREATE TABLE IF NOT EXISTS "schema_migrations" ("version" INTEGER PRIMARY KEY NOT NULL)',
    }

    def supports_last_insert_id(self) -> bool:
        return True

    def post_create(self, conn) -> None:
        with closing(conn.cursor()) as cursor:
            cursor.execute("PRAGMA foreign_keys = ON")
            # Faster than the default rollback journal
            cursor.execute("PRAGMA journal_mode = WAL")
            cursor.execute("PRAGMA synchronous = NORMAL")
        logger.debug("SQLite connection configured (foreign_keys, WAL, synchronous=NORMAL)")

    def execute_script(self, conn, script: str) -> None:
        conn.executescript(script)

    @property
    def errors(self):
        return (sqlite3.Error,)


class PostgresAdapter(Adapter):
    """Adapter for PostgreSQL databases (psycopg 3)."""

    driver = DRIVER_POSTGRES
    queries = {
        **_build_queries("%s"),
        CREATE_DOMAIN: "INSERT INTO domain (name) VALUES (%s) RETURNING id",
        CREATE_LANGUAGE: "INSERT INTO language (code, name) VALUES (%s, %s) RETURNING id",
        CREATE_STRING: "INSERT INTO string (name, domain_id) VALUES (%s, %s) RETURNING id",
        CREATE_TRANSLATION: "INSERT INTO translation (language_id, content, string_id) VALUES (%s, %s, %s) RETURNING id",
        ENSURE_VERSION_TABLE: "CREATE TABLE IF NOT EXISTS schema_migrations (version integer PRIMARY KEY NOT NULL)",
    }

    def supports_last_insert_id(self) -> bool:
        return False

    def execute_script(self, conn, script: str) -> None:
        # psycopg accepts several statements in one execute when no parameters are bound
        with closing(conn.cursor()) as cursor:
            cursor.execute(script)

    @property
    def errors(self):
        import psycopg
        return (psycopg.Error,)


ADAPTERS: Dict[str, Type[Adapter]] = {
    DRIVER_SQLITE3: SqliteAdapter,
    DRIVER_POSTGRES: PostgresAdapter,
}


def get_adapter(driver: str) -> Adapter:
    """Select the adapter for a driver name; fails immediately for unknown drivers."""
    adapter_cls = ADAPTERS.get(driver)
    if adapter_cls is None:
        raise StorageError(f"no adapter available for database driver '{driver}'")
    return adapter_cls()


def connect(db_config: DbConfig):
    """Open a connection in autocommit mode: every statement is its own transaction."""
    if db_config.driver == DRIVER_SQLITE3:
        logger.info(f"Connecting to SQLite database: {db_config.file}")
        try:
            return sqlite3.connect(
                db_config.connection_string(),
                check_same_thread=False,
                isolation_level=None,
            )
        except sqlite3.Error as e:
            raise StorageError(f"could not open database '{db_config.file}': {e}") from e

    if db_config.driver == DRIVER_POSTGRES:
        import psycopg

        logger.info(f"Connecting to PostgreSQL database {db_config.name} on {db_config.host}:{db_config.port}")
        try:
            return psycopg.connect(db_config.connection_string(), autocommit=True)
        except psycopg.Error as e:
            raise StorageError(f"could not connect to database '{db_config.name}': {e}") from e

    raise StorageError(f"no adapter available for database driver '{db_config.driver}'")
