"""
Pytest configuration and fixtures for the translation API.

This module provides:
- A Config pointing every path at a per-test temporary directory
- A migrated SQLite DataStore, optionally seeded with a small 'homepage' domain
- An AppContext and a Flask test client built around them
"""

from pathlib import Path
from typing import Generator

import pytest

from transapi.config import Config
from transapi.context import AppContext
from transapi.core.adapters import connect
from transapi.core.database import DataStore
from transapi.web import create_app

HOMEPAGE = {
    "welcome": {"en": "Welcome", "de": "Willkommen"},
    "goodbye": {"en": "Goodbye", "de": "Auf Wiedersehen", "fr": "Au revoir"},
}


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config with the database and XLIFF directories inside tmp_path."""
    config = Config()
    config.db.file = str(tmp_path / "translations.db")
    config.xliff.import_path = str(tmp_path / "xliff-in")
    config.xliff.export_path = str(tmp_path / "xliff-out")
    config.logging.mode = "debug"
    return config


@pytest.fixture
def datastore(config: Config) -> Generator[DataStore, None, None]:
    """A DataStore on a freshly migrated SQLite database."""
    store = DataStore(connect(config.db), config.db.driver)
    store.migrate_up()
    yield store
    store.close()


def seed_homepage(store: DataStore):
    store.get_or_create_domain("homepage")
    for string_name, translations in HOMEPAGE.items():
        for code, content in translations.items():
            store.create_or_update_translation("homepage", string_name, code, content, allow_create=True)


@pytest.fixture
def seeded_datastore(datastore: DataStore) -> DataStore:
    """The migrated DataStore holding the 'homepage' domain."""
    seed_homepage(datastore)
    return datastore


@pytest.fixture
def app_context(config: Config) -> Generator[AppContext, None, None]:
    """AppContext with a migrated, seeded database and no export worker."""
    context = AppContext.create(config)
    context.datastore.migrate_up()
    seed_homepage(context.datastore)
    yield context
    context.close()


@pytest.fixture
def client(app_context: AppContext):
    """Flask test client for the JSON API."""
    app = create_app(app_context)
    app.config["TESTING"] = True
    return app.test_client()
