from unittest.mock import patch

from fastapi.testclient import TestClient


def test_settings_defaults_are_public(client):
    resp = client.get("/api/settings")
    assert resp.status_code == 200
    body = resp.json()
    assert body["siteName"] == "Elexandria"
    assert body["siteDescription"] == "Sua biblioteca digital"
    assert body["primaryColor"] == "#A855F7"
    assert body["allowRegistration"] is True
    assert body["maintenanceMode"] is False


def test_partial_update(admin_client, client):
    resp = admin_client.put("/api/settings", json={"siteName": "Biblioteca", "primaryColor": "#112233"})
    assert resp.status_code == 200
    body = client.get("/api/settings").json()
    assert body["siteName"] == "Biblioteca"
    assert body["primaryColor"] == "#112233"
    assert body["contactEmail"] == "contato@elexandria.com"


def test_settings_validation(admin_client):
    resp = admin_client.put(
        "/api/settings", json={"primaryColor": "purple", "contactEmail": "nope", "siteUrl": "elexandria"}
    )
    assert resp.status_code == 400
    assert {e["field"] for e in resp.json()["errors"]} == {"primaryColor", "contactEmail", "siteUrl"}


def test_health_endpoint(client, app):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["lastCheck"]

    with patch.object(app.state.database, "ping", side_effect=RuntimeError("down")):
        resp = client.get("/api/health")
    assert resp.status_code == 503
    assert resp.json()["database"] == "disconnected"


def test_unexpected_errors_are_generic(app, client):
    anon = TestClient(app, raise_server_exceptions=False)
    with patch("api.routes.books.books_repo.list_books", side_effect=RuntimeError("secret internals")):
        resp = anon.get("/api/books")
    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal server error"}
    assert "secret" not in resp.text


def test_unknown_route_is_404(client):
    assert client.get("/api/nada").status_code == 404
