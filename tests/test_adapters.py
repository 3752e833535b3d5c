"""Tests for adapter selection and per-dialect query text."""

import pytest

from transapi.config import DbConfig
from transapi.core import adapters as q
from transapi.core.adapters import PostgresAdapter, SqliteAdapter, connect, get_adapter
from transapi.exceptions import StorageError


class TestGetAdapter:
    def test_selects_by_driver(self):
        assert isinstance(get_adapter("sqlite3"), SqliteAdapter)
        assert isinstance(get_adapter("postgres"), PostgresAdapter)

    def test_unknown_driver_fails_immediately(self):
        with pytest.raises(StorageError, match="mysql"):
            get_adapter("mysql")

    def test_connect_unknown_driver(self):
        with pytest.raises(StorageError):
            connect(DbConfig(driver="mysql"))


class TestQueries:
    def test_sqlite_uses_last_insert_id(self):
        adapter = SqliteAdapter()
        assert adapter.supports_last_insert_id() is True
        assert "?" in adapter.query(q.CREATE_DOMAIN)
        assert "RETURNING" not in adapter.query(q.CREATE_DOMAIN)

    def test_postgres_returns_ids(self):
        adapter = PostgresAdapter()
        assert adapter.supports_last_insert_id() is False
        for operation in (q.CREATE_DOMAIN, q.CREATE_LANGUAGE, q.CREATE_STRING, q.CREATE_TRANSLATION):
            assert adapter.query(operation).endswith("RETURNING id")
        assert "?" not in adapter.query(q.GET_SINGLE_STRING_ID)
        assert "%s" in adapter.query(q.GET_SINGLE_STRING_ID)

    def test_update_translation_by_id(self):
        assert SqliteAdapter().query(q.UPDATE_TRANSLATION) == "UPDATE translation SET content = ? WHERE id = ?"

    def test_both_adapters_cover_every_operation(self):
        assert set(SqliteAdapter.queries) == set(PostgresAdapter.queries)

    def test_missing_operation(self):
        with pytest.raises(StorageError, match="no query"):
            SqliteAdapter().query("drop_everything")

    def test_search_is_limited(self):
        assert f"LIMIT {q.SEARCH_LIMIT}" in SqliteAdapter().query(q.SEARCH_BY_ALL_FIELDS)
