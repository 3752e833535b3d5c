"""
Tests for the HTTP JSON API.

Runs against a Flask test client backed by a migrated SQLite database holding
the 'homepage' domain (see conftest.py).
"""

TRANSLATION_URL = "/domains/homepage/strings/{string}/translations/{lang}"


class TestLanguages:
    def test_list(self, client):
        response = client.get("/languages")
        assert response.status_code == 200
        codes = [language["code"] for language in response.get_json()]
        assert "en" in codes and "de-ch" in codes

    def test_create(self, client):
        response = client.post("/languages", json={"code": "PT_BR", "name": "Portuguese (Brazil)"})
        assert response.status_code == 201
        body = response.get_json()
        assert body["code"] == "pt-br"
        assert body["name"] == "Portuguese (Brazil)"

    def test_create_duplicate(self, client):
        response = client.post("/languages", json={"code": "de", "name": "German"})
        assert response.status_code == 409

    def test_create_invalid(self, client):
        assert client.post("/languages", json={"code": "d e", "name": "x"}).status_code == 400
        assert client.post("/languages", json={"code": "de-xx"}).status_code == 400
        assert client.post("/languages", data="not json", content_type="application/json").status_code == 400


class TestDomains:
    def test_list(self, client):
        response = client.get("/domains")
        assert response.get_json() == {"domains": ["homepage"]}

    def test_get(self, client):
        response = client.get("/domains/homepage")
        assert response.status_code == 200
        body = response.get_json()
        assert body["name"] == "homepage"
        assert body["strings"][0] == {
            "name": "goodbye",
            "translations": {
                "de": {"content": "Auf Wiedersehen"},
                "en": {"content": "Goodbye"},
                "fr": {"content": "Au revoir"},
            },
        }

    def test_get_missing(self, client):
        response = client.get("/domains/missing")
        assert response.status_code == 404
        assert response.get_json() == {"error": "not found"}

    def test_export(self, client, app_context, tmp_path):
        response = client.post("/domains/homepage/export")
        assert response.status_code == 200
        assert sorted(response.get_json()["files"]) == [
            "homepage.de.xliff", "homepage.en.xliff", "homepage.fr.xliff",
        ]
        assert (tmp_path / "xliff-out" / "homepage.de.xliff").exists()


class TestTranslations:
    def test_put_updates(self, client, app_context):
        response = client.put(TRANSLATION_URL.format(string="welcome", lang="de"), json={"content": "Hallo"})
        assert response.status_code == 200
        assert response.get_json() == {"result": "ok"}

        body = client.get("/domains/homepage").get_json()
        welcome = next(s for s in body["strings"] if s["name"] == "welcome")
        assert welcome["translations"]["de"]["content"] == "Hallo"

    def test_put_missing_translation(self, client):
        response = client.put(TRANSLATION_URL.format(string="welcome", lang="fr"), json={"content": "Bienvenue"})
        assert response.status_code == 404
        assert response.get_json() == {"error": "not found"}

    def test_post_creates(self, client):
        response = client.post(TRANSLATION_URL.format(string="news", lang="en"), json={"content": "News"})
        assert response.status_code == 200

        body = client.get("/domains/homepage").get_json()
        assert [s["name"] for s in body["strings"]] == ["goodbye", "news", "welcome"]

    def test_post_unknown_domain(self, client):
        response = client.post(
            "/domains/missing/strings/title/translations/en", json={"content": "Title"}
        )
        assert response.status_code == 404

    def test_content_must_be_string(self, client):
        response = client.put(TRANSLATION_URL.format(string="welcome", lang="de"), json={"content": 5})
        assert response.status_code == 400
        assert "content" in response.get_json()["error"]

    def test_delete_translation(self, client):
        url = TRANSLATION_URL.format(string="goodbye", lang="fr")
        assert client.delete(url).status_code == 200
        assert client.delete(url).status_code == 404

    def test_delete_string(self, client):
        assert client.delete("/domains/homepage/strings/goodbye").status_code == 200
        body = client.get("/domains/homepage").get_json()
        assert [s["name"] for s in body["strings"]] == ["welcome"]
        assert client.delete("/domains/homepage/strings/goodbye").status_code == 404

    def test_change_queues_export(self, client, app_context, tmp_path):
        app_context.start_export_worker()

        client.put(TRANSLATION_URL.format(string="welcome", lang="de"), json={"content": "Servus"})
        app_context.export_worker.join()

        exported = (tmp_path / "xliff-out" / "homepage.de.xliff").read_text(encoding="utf-8")
        assert "<target>Servus</target>" in exported
        assert app_context.export_worker.exported_count == 1

    def test_failed_change_does_not_queue_export(self, client, app_context):
        app_context.start_export_worker()

        client.put(TRANSLATION_URL.format(string="welcome", lang="fr"), json={"content": "x"})
        app_context.export_worker.join()

        assert app_context.export_worker.exported_count == 0


class TestSearch:
    def test_search(self, client):
        response = client.get("/search?q=Wieder&field=content")
        assert response.status_code == 200
        results = response.get_json()["results"]
        assert [(r["domain"], r["string"], r["language"]) for r in results] == [("homepage", "goodbye", "de")]

    def test_search_requires_term(self, client):
        assert client.get("/search").status_code == 400

    def test_search_bad_field(self, client):
        assert client.get("/search?q=x&field=domain").status_code == 400


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_unknown_route(client):
    response = client.get("/nowhere")
    assert response.status_code == 404
    assert response.get_json() == {"error": "not found"}
