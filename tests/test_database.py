"""
Tests for the DataStore.

Covers languages, domains, strings and translations on a migrated SQLite
database, including the NotFound/AlreadyExists paths and search.
"""

from contextlib import closing

import pytest

from transapi.exceptions import AlreadyExistsError, NotFoundError, ValidationError
from transapi.model import Language, get_translation
from transapi.xliff import XliffDocument


def count_rows(store, table: str) -> int:
    with closing(store.conn.cursor()) as cursor:
        cursor.execute(f"SELECT COUNT(*) FROM {table}")
        return cursor.fetchone()[0]


def find_string(domain, name):
    return next(s for s in domain.strings if s.name == name)


class TestLanguages:
    def test_get_seeded_language(self, datastore):
        language = datastore.get_language("de")
        assert language.code == "de"
        assert language.name == "German"
        assert language.id is not None

    def test_unknown_language(self, datastore):
        with pytest.raises(NotFoundError):
            datastore.get_language("xx")

    def test_list_is_ordered_by_code(self, datastore):
        codes = [language.code for language in datastore.get_language_list()]
        assert codes == sorted(codes)
        assert "nl" in codes

    def test_create_language(self, datastore):
        language_id = datastore.create_language("pt-br", "Portuguese (Brazil)")
        language = datastore.get_language("pt-br")
        assert language.id == language_id
        assert language.name == "Portuguese (Brazil)"

    def test_create_language_twice(self, datastore):
        datastore.create_language("pt-br", "Portuguese (Brazil)")
        before = count_rows(datastore, "language")

        with pytest.raises(AlreadyExistsError):
            datastore.create_language("pt-br", "Brazilian")

        assert count_rows(datastore, "language") == before


class TestDomains:
    def test_get_or_create_domain_is_stable(self, datastore):
        first = datastore.get_or_create_domain("help")
        assert datastore.get_or_create_domain("help") == first
        assert count_rows(datastore, "domain") == 1

    def test_unknown_domain(self, datastore):
        with pytest.raises(NotFoundError):
            datastore.get_domain_id("missing")
        with pytest.raises(NotFoundError):
            datastore.get_full_domain("missing")

    def test_empty_domain_has_no_strings(self, datastore):
        datastore.get_or_create_domain("empty")
        domain = datastore.get_full_domain("empty")
        assert domain.name == "empty"
        assert domain.strings == []

    def test_domain_list(self, seeded_datastore):
        seeded_datastore.get_or_create_domain("about")
        assert [d.name for d in seeded_datastore.get_domain_list()] == ["about", "homepage"]

    def test_full_domain(self, seeded_datastore):
        domain = seeded_datastore.get_full_domain("homepage")

        assert [s.name for s in domain.strings] == ["goodbye", "welcome"]
        goodbye = find_string(domain, "goodbye")
        assert {lang.code for lang in goodbye.translations} == {"de", "en", "fr"}
        assert get_translation(goodbye, Language("fr")).content == "Au revoir"


class TestTranslations:
    def test_update_existing_translation(self, seeded_datastore):
        seeded_datastore.create_or_update_translation("homepage", "welcome", "de", "Herzlich willkommen")

        domain = seeded_datastore.get_full_domain("homepage")
        welcome = find_string(domain, "welcome")
        assert get_translation(welcome, Language("de")).content == "Herzlich willkommen"
        assert get_translation(welcome, Language("en")).content == "Welcome"

    def test_update_does_not_create_rows(self, seeded_datastore):
        before = count_rows(seeded_datastore, "translation")
        seeded_datastore.create_or_update_translation("homepage", "welcome", "de", "Hallo")
        assert count_rows(seeded_datastore, "translation") == before

    def test_update_missing_translation_without_create(self, seeded_datastore):
        before = count_rows(seeded_datastore, "translation")

        with pytest.raises(NotFoundError):
            seeded_datastore.create_or_update_translation("homepage", "welcome", "fr", "Bienvenue")

        assert count_rows(seeded_datastore, "translation") == before

    def test_update_missing_string_without_create(self, seeded_datastore):
        with pytest.raises(NotFoundError):
            seeded_datastore.create_or_update_translation("homepage", "news", "en", "News")
        assert count_rows(seeded_datastore, "string") == 2

    def test_create_translation_and_string(self, seeded_datastore):
        seeded_datastore.create_or_update_translation("homepage", "news", "en", "News", allow_create=True)

        news = find_string(seeded_datastore.get_full_domain("homepage"), "news")
        assert get_translation(news, Language("en")).content == "News"

    def test_unknown_language_creates_no_string(self, seeded_datastore):
        before = count_rows(seeded_datastore, "string")

        with pytest.raises(NotFoundError):
            seeded_datastore.create_or_update_translation("homepage", "ghost", "xx", "?", allow_create=True)

        assert count_rows(seeded_datastore, "string") == before
        names = [s.name for s in seeded_datastore.get_full_domain("homepage").strings]
        assert names == ["goodbye", "welcome"]

    def test_create_requires_existing_domain(self, datastore):
        with pytest.raises(NotFoundError):
            datastore.create_or_update_translation("nowhere", "title", "en", "Title", allow_create=True)
        assert count_rows(datastore, "domain") == 0

    def test_unknown_language(self, seeded_datastore):
        with pytest.raises(NotFoundError):
            seeded_datastore.create_or_update_translation("homepage", "welcome", "xx", "?", allow_create=True)

    def test_delete_translation(self, seeded_datastore):
        seeded_datastore.delete_translation("homepage", "goodbye", "fr")

        goodbye = find_string(seeded_datastore.get_full_domain("homepage"), "goodbye")
        assert {lang.code for lang in goodbye.translations} == {"de", "en"}

        with pytest.raises(NotFoundError):
            seeded_datastore.delete_translation("homepage", "goodbye", "fr")

    def test_delete_string_removes_translations(self, seeded_datastore):
        seeded_datastore.delete_string("homepage", "goodbye")

        domain = seeded_datastore.get_full_domain("homepage")
        assert [s.name for s in domain.strings] == ["welcome"]
        assert count_rows(seeded_datastore, "translation") == 2

    def test_string_can_be_recreated_after_delete(self, seeded_datastore):
        seeded_datastore.delete_string("homepage", "goodbye")
        with pytest.raises(NotFoundError):
            seeded_datastore.delete_string("homepage", "goodbye")

        seeded_datastore.create_or_update_translation("homepage", "goodbye", "en", "Bye", allow_create=True)
        goodbye = find_string(seeded_datastore.get_full_domain("homepage"), "goodbye")
        assert get_translation(goodbye, Language("en")).content == "Bye"


class TestImportDomain:
    def test_import_creates_and_updates(self, seeded_datastore):
        document = XliffDocument(name="homepage", source_language="en", target_language="de")
        document.add("welcome", "Welcome", "Hallo")
        document.add("contact", "Contact", "Kontakt")

        seeded_datastore.import_domain(document)

        domain = seeded_datastore.get_full_domain("homepage")
        assert get_translation(find_string(domain, "welcome"), Language("de")).content == "Hallo"
        assert get_translation(find_string(domain, "contact"), Language("de")).content == "Kontakt"

    def test_import_new_domain(self, datastore):
        document = XliffDocument(name="help", source_language="en", target_language="de-ch")
        document.add("faq", "FAQ", "Häufige Fragen")

        datastore.import_domain(document)

        faq = find_string(datastore.get_full_domain("help"), "faq")
        assert get_translation(faq, Language("de-ch")).content == "Häufige Fragen"

    def test_import_unregistered_language(self, datastore):
        document = XliffDocument(name="help", source_language="en", target_language="xx")
        document.add("faq", "FAQ", "?")

        with pytest.raises(NotFoundError):
            datastore.import_domain(document)


class TestSearch:
    def test_search_content(self, seeded_datastore):
        results = seeded_datastore.search("Wieder", field="content")
        assert results == [{
            "domain": "homepage",
            "string": "goodbye",
            "language": "de",
            "translation_id": results[0]["translation_id"],
            "content": "Auf Wiedersehen",
        }]

    def test_search_string_name(self, seeded_datastore):
        results = seeded_datastore.search("welc", field="string")
        assert {r["language"] for r in results} == {"de", "en"}
        assert all(r["string"] == "welcome" for r in results)

    def test_search_all_fields(self, seeded_datastore):
        results = seeded_datastore.search("come", field="all")
        assert [(r["string"], r["language"]) for r in results] == [("welcome", "de"), ("welcome", "en")]

    def test_wildcards_match_literally(self, seeded_datastore):
        seeded_datastore.create_or_update_translation("homepage", "sale", "en", "50% off", allow_create=True)
        seeded_datastore.create_or_update_translation("homepage", "sale", "de", "500 Euro", allow_create=True)
        seeded_datastore.create_or_update_translation("homepage", "sign_in", "en", "Sign in", allow_create=True)

        assert [r["content"] for r in seeded_datastore.search("50%", field="content")] == ["50% off"]
        assert seeded_datastore.search("Wel_ome", field="content") == []
        assert [r["string"] for r in seeded_datastore.search("n_i", field="string")] == ["sign_in"]

    def test_invalid_field(self, seeded_datastore):
        with pytest.raises(ValidationError):
            seeded_datastore.search("x", field="domain")


def test_stats_are_recorded(seeded_datastore):
    snapshot = seeded_datastore.stats.snapshot()
    assert snapshot[("translation", "insert")].count == 5
    assert "translation 'insert' actions took" in str(seeded_datastore.stats)
