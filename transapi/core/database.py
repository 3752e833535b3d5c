"""
Data Store Module

The DataStore is the only component that reads or writes translation data. It:
- maps rows to the domain model (Language, DomainRecord, StringRecord, TranslationRecord)
- keeps process-local caches of domain and string ids for the import hot path
- implements create-or-get for domains and strings
- creates, updates and deletes translations
- applies schema migrations through core/schema.py

Query text comes from the adapter selected for the connection's driver, see
core/adapters.py.
"""

import threading
from contextlib import closing, contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from transapi.core import adapters as q
from transapi.core.schema import Migrator
from transapi.core.stats import Stats
from transapi.exceptions import AlreadyExistsError, NotFoundError, StorageError, ValidationError
from transapi.logger import get_logger
from transapi.model import Domain, DomainRecord, Language, StringRecord, TranslationRecord

logger = get_logger(__name__)

SEARCH_FIELDS = {
    "string": q.SEARCH_BY_STRING_NAME,
    "content": q.SEARCH_BY_TRANSLATION_CONTENT,
    "all": q.SEARCH_BY_ALL_FIELDS,
}


class DataStore:
    """Persistence entry point shared by the HTTP handlers, the CLI and the import pipeline."""

    def __init__(self, conn, driver: str):
        """
        Args:
            conn: An open DB-API connection in autocommit mode
            driver: One of the config.DRIVER_* names; selects the adapter

        Raises:
            StorageError: If no adapter exists for the driver or connection setup fails
        """
        self.adapter = q.get_adapter(driver)
        self.conn = conn
        self.stats = Stats()

        # One statement at a time on the shared connection
        self._db_lock = threading.RLock()
        self._cache_lock = threading.Lock()
        self._domain_cache: Dict[str, int] = {}
        self._string_cache: Dict[Tuple[int, str], int] = {}

        with self._guard("setting up connection"):
            self.adapter.post_create(self.conn)

        self.migrator = Migrator(self.conn, self.adapter)

    def close(self):
        with self._db_lock:
            self.conn.close()

    # ============================================================
    # Statement helpers
    # ============================================================

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        """Serialize connection use and wrap driver errors in StorageError."""
        with self._db_lock:
            try:
                yield
            except self.adapter.errors as e:
                logger.error(f"Database error while {action}: {e}")
                raise StorageError(f"database error while {action}: {e}") from e

    def _fetchone(self, operation: str, params: tuple = ()) -> Optional[tuple]:
        with self._guard(operation), closing(self.conn.cursor()) as cursor:
            cursor.execute(self.adapter.query(operation), params)
            return cursor.fetchone()

    def _fetchall(self, operation: str, params: tuple = ()) -> List[tuple]:
        with self._guard(operation), closing(self.conn.cursor()) as cursor:
            cursor.execute(self.adapter.query(operation), params)
            return cursor.fetchall()

    def _execute(self, operation: str, params: tuple = ()) -> int:
        with self._guard(operation), closing(self.conn.cursor()) as cursor:
            cursor.execute(self.adapter.query(operation), params)
            return cursor.rowcount

    def _insert(self, operation: str, params: tuple) -> int:
        """Run an INSERT and return the new row id."""
        with self._guard(operation), closing(self.conn.cursor()) as cursor:
            cursor.execute(self.adapter.query(operation), params)
            if self.adapter.supports_last_insert_id():
                return cursor.lastrowid
            # INSERT ... RETURNING id
            return cursor.fetchone()[0]

    # ============================================================
    # Schema migrations
    # ============================================================

    def migrate_up(self) -> int:
        """Bring the schema to the latest version. Raises MigrationError with the version reached."""
        with self._db_lock:
            return self.migrator.migrate_up()

    def migrate_down(self) -> int:
        """Revert the schema to version 0. Raises MigrationError with the version reached."""
        with self._db_lock:
            version = self.migrator.migrate_down()
        self._clear_caches()
        return version

    def get_schema_version(self) -> int:
        with self._db_lock:
            return self.migrator.get_version()

    # ============================================================
    # Cache
    # ============================================================

    def _cached_domain_id(self, name: str) -> Optional[int]:
        with self._cache_lock:
            return self._domain_cache.get(name)

    def _cache_domain_id(self, name: str, domain_id: int):
        with self._cache_lock:
            self._domain_cache[name] = domain_id

    def _cached_string_id(self, name: str, domain_id: int) -> Optional[int]:
        with self._cache_lock:
            return self._string_cache.get((domain_id, name))

    def _cache_string_id(self, name: str, domain_id: int, string_id: int):
        with self._cache_lock:
            self._string_cache[(domain_id, name)] = string_id

    def _evict_string_id(self, name: str, domain_id: int):
        with self._cache_lock:
            self._string_cache.pop((domain_id, name), None)

    def _clear_caches(self):
        with self._cache_lock:
            self._domain_cache.clear()
            self._string_cache.clear()

    # ============================================================
    # Language Operations
    # ============================================================

    def get_language(self, code: str) -> Language:
        """Get a language by code. Raises NotFoundError if it is not registered."""
        with self.stats.timed("language", "get"):
            row = self._fetchone(q.GET_SINGLE_LANGUAGE, (code,))
        if row is None:
            raise NotFoundError(f"Language '{code}' does not exist in database")
        return Language(id=row[0], code=row[1], name=row[2] or "")

    def get_language_list(self) -> List[Language]:
        """Get all available languages, ordered by code."""
        with self.stats.timed("language", "get"):
            rows = self._fetchall(q.GET_ALL_LANGUAGES)
        return [Language(id=r[0], code=r[1], name=r[2] or "") for r in rows]

    def create_language(self, code: str, name: str) -> int:
        """
        Register a new language.

        Raises:
            AlreadyExistsError: If the code is already registered
        """
        with self._db_lock:
            try:
                existing = self.get_language(code)
            except NotFoundError:
                existing = None
            if existing is not None and existing.code == code:
                raise AlreadyExistsError(f"Language '{code}' already exists")

            with self.stats.timed("language", "insert"):
                language_id = self._insert(q.CREATE_LANGUAGE, (code, name))
        logger.info(f"Created language {code} ({name}) with id {language_id}")
        return language_id

    # ============================================================
    # Domain Operations
    # ============================================================

    def get_domain_id(self, name: str) -> int:
        """Get a domain id by name (cache first). Raises NotFoundError."""
        with self.stats.timed("domain", "get"):
            domain_id = self._cached_domain_id(name)
            if domain_id is not None:
                return domain_id

            row = self._fetchone(q.GET_SINGLE_DOMAIN_ID, (name,))
            if row is None:
                raise NotFoundError(f"Domain '{name}' does not exist")
            self._cache_domain_id(name, row[0])
            return row[0]

    def create_domain(self, name: str) -> int:
        with self.stats.timed("domain", "insert"):
            domain_id = self._insert(q.CREATE_DOMAIN, (name,))
        self._cache_domain_id(name, domain_id)
        logger.debug(f"Created domain '{name}' with id {domain_id}")
        return domain_id

    def get_or_create_domain(self, name: str) -> int:
        """Look a domain up by name and insert it if it does not exist."""
        # The connection lock makes lookup-then-insert atomic within this process
        with self._db_lock:
            try:
                return self.get_domain_id(name)
            except NotFoundError:
                return self.create_domain(name)

    def get_domain_list(self) -> List[DomainRecord]:
        """Get all domains, ordered by name. Only the name of each domain is populated."""
        with self.stats.timed("domain", "get"):
            rows = self._fetchall(q.GET_ALL_DOMAINS)
        return [DomainRecord(name=r[0]) for r in rows]

    def get_full_domain(self, name: str) -> DomainRecord:
        """
        Get a domain with all its strings and translations.

        Rows of the joined query arrive ordered by string name; each row carries one
        translation, so a string spanning several rows is looked up by name and
        extended instead of appended again.

        Raises:
            NotFoundError: If the query returns no rows
        """
        with self.stats.timed("domain", "get"):
            rows = self._fetchall(q.GET_SINGLE_DOMAIN, (name,))
        if not rows:
            raise NotFoundError(f"Domain '{name}' does not exist")

        domain = DomainRecord(name=name)
        string_index: Dict[str, int] = {}

        for string_id, string_name, language_id, code, language_name, translation_id, content in rows:
            if string_id is None:
                # Domain without strings
                continue

            idx = string_index.get(string_name)
            if idx is None:
                string_index[string_name] = len(domain.strings)
                domain.strings.append(StringRecord(id=string_id, name=string_name))
                idx = string_index[string_name]

            if translation_id is None:
                continue
            language = Language(id=language_id, code=code, name=language_name or "")
            domain.strings[idx].translations[language] = TranslationRecord(
                id=translation_id, content=content if content is not None else ""
            )

        return domain

    # ============================================================
    # String Operations
    # ============================================================

    def get_string_id(self, name: str, domain_id: int) -> int:
        """Get a string id within a domain (cache first). Raises NotFoundError."""
        with self.stats.timed("string", "get"):
            string_id = self._cached_string_id(name, domain_id)
            if string_id is not None:
                return string_id

            row = self._fetchone(q.GET_SINGLE_STRING_ID, (name, domain_id))
            if row is None:
                raise NotFoundError(f"String '{name}' does not exist")
            self._cache_string_id(name, domain_id, row[0])
            return row[0]

    def create_string(self, name: str, domain_id: int) -> int:
        with self.stats.timed("string", "insert"):
            string_id = self._insert(q.CREATE_STRING, (name, domain_id))
        self._cache_string_id(name, domain_id, string_id)
        logger.debug(f"Created string '{name}' in domain {domain_id} with id {string_id}")
        return string_id

    def get_or_create_string(self, name: str, domain_id: int) -> int:
        """Look a string up within a domain and insert it if it does not exist."""
        with self._db_lock:
            try:
                return self.get_string_id(name, domain_id)
            except NotFoundError:
                return self.create_string(name, domain_id)

    def delete_string(self, domain_name: str, string_name: str):
        """Delete a string and, by cascade, all of its translations."""
        with self._db_lock:
            domain_id = self.get_domain_id(domain_name)
            string_id = self.get_string_id(string_name, domain_id)
            with self.stats.timed("string", "delete"):
                self._execute(q.DELETE_STRING, (string_id,))
            self._evict_string_id(string_name, domain_id)
        logger.info(f"Deleted string '{string_name}' from domain '{domain_name}'")

    # ============================================================
    # Translation Operations
    # ============================================================

    def get_translation_id(self, string_id: int, language_id: int, domain_id: int) -> Optional[int]:
        """Get the id of a string's translation in a language, or None."""
        with self.stats.timed("translation", "get"):
            row = self._fetchone(q.GET_SINGLE_TRANSLATION_ID, (string_id, language_id, domain_id))
        return row[0] if row else None

    def insert_translation(self, content: str, language_id: int, string_id: int) -> int:
        with self.stats.timed("translation", "insert"):
            return self._insert(q.CREATE_TRANSLATION, (language_id, content, string_id))

    def update_translation(self, translation_id: int, content: str):
        with self.stats.timed("translation", "update"):
            self._execute(q.UPDATE_TRANSLATION, (content, translation_id))

    def _save_translation(self, content: str, language_id: int, string_id: int, domain_id: int):
        """Update a translation in place by id, or insert it if it does not exist yet."""
        translation_id = self.get_translation_id(string_id, language_id, domain_id)
        if translation_id is not None:
            self.update_translation(translation_id, content)
        else:
            self.insert_translation(content, language_id, string_id)

    def create_or_update_translation(self, domain_name: str, string_name: str, language_code: str,
                                     content: str, allow_create: bool = False):
        """
        Set the content of a string's translation.

        The domain must already exist in both modes. When allow_create is False the
        string and its translation for the language must exist too; when True, a
        missing string and/or translation is created.

        Raises:
            NotFoundError: If the domain, language, string or (without allow_create)
                translation does not exist
        """
        with self._db_lock:
            domain_id = self.get_domain_id(domain_name)
            # Resolved before any insert so an unknown language leaves no string behind
            language = self.get_language(language_code)

            if allow_create:
                string_id = self.get_or_create_string(string_name, domain_id)
            else:
                string_id = self.get_string_id(string_name, domain_id)

            translation_id = self.get_translation_id(string_id, language.id, domain_id)
            if translation_id is not None:
                self.update_translation(translation_id, content)
            elif allow_create:
                self.insert_translation(content, language.id, string_id)
            else:
                raise NotFoundError(
                    f"String '{string_name}' has no '{language_code}' translation"
                )
        logger.debug(f"Saved translation {domain_name}/{string_name}/{language_code}")

    def delete_translation(self, domain_name: str, string_name: str, language_code: str):
        """Delete one translation; the string and its other translations are kept."""
        with self._db_lock:
            domain_id = self.get_domain_id(domain_name)
            string_id = self.get_string_id(string_name, domain_id)
            language = self.get_language(language_code)
            translation_id = self.get_translation_id(string_id, language.id, domain_id)
            if translation_id is None:
                raise NotFoundError(
                    f"String '{string_name}' has no '{language_code}' translation"
                )
            with self.stats.timed("translation", "delete"):
                self._execute(q.DELETE_TRANSLATION, (translation_id,))
        logger.info(f"Deleted translation {domain_name}/{string_name}/{language_code}")

    # ============================================================
    # Batch import
    # ============================================================

    def import_domain(self, domain: Domain):
        """
        Store every string and translation of a domain, creating what is missing.

        Used by the XLIFF import: any Domain implementation is accepted. Existing
        translations are updated in place.

        Raises:
            NotFoundError: If a translation references an unregistered language
        """
        with self._db_lock:
            domain_id = self.get_or_create_domain(domain.name)

            for string in domain.strings:
                resolved = [
                    (self.get_language(lang.code), translation)
                    for lang, translation in string.translations.items()
                ]
                string_id = self.get_or_create_string(string.name, domain_id)

                for language, translation in resolved:
                    self._save_translation(translation.content, language.id, string_id, domain_id)

    # ============================================================
    # Search
    # ============================================================

    def search(self, term: str, field: str = "all") -> List[Dict[str, Any]]:
        """
        Find translations whose string name and/or content contains `term`.

        Args:
            term: Substring to look for
            field: "string", "content" or "all"

        Returns:
            Up to 100 flat result records, ordered by domain, string and language
        """
        operation = SEARCH_FIELDS.get(field)
        if operation is None:
            raise ValidationError(f"search field must be one of {', '.join(SEARCH_FIELDS)}, got '{field}'")

        escaped = (
            term.replace(q.LIKE_ESCAPE, q.LIKE_ESCAPE * 2)
            .replace("%", q.LIKE_ESCAPE + "%")
            .replace("_", q.LIKE_ESCAPE + "_")
        )
        pattern = f"%{escaped}%"
        params = (pattern, pattern) if field == "all" else (pattern,)
        with self.stats.timed("translation", "search"):
            rows = self._fetchall(operation, params)

        return [
            {
                "domain": r[0],
                "string": r[1],
                "language": r[2],
                "translation_id": r[3],
                "content": r[4],
            }
            for r in rows
        ]
