from fastapi.testclient import TestClient

from bistro.core.config import DEFAULT_TOKEN_SECRET, EnvironmentMode, Settings
from bistro.main import app


def test_root_reports_liveness(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "Bistro server is running"


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "operational"
    assert response.json()["payment_service"] == "healthy"


def test_issue_token_endpoint(client, tokens):
    response = client.post("/jwt", json={"email": "guest@bistro.com", "name": "Guest"})

    assert response.status_code == 200
    assert tokens.verify(response.json()["token"]) == {"email": "guest@bistro.com", "name": "Guest"}


def test_issue_token_requires_email(client):
    assert client.post("/jwt", json={"name": "Guest"}).status_code == 422


def test_production_config_reports_missing_secrets():
    settings = Settings(
        env_mode=EnvironmentMode.PRODUCTION,
        stripe_secret_key=None,
        access_token_secret=DEFAULT_TOKEN_SECRET,
    )

    assert settings.validate_production_config() == ["STRIPE_SECRET_KEY", "ACCESS_TOKEN_SECRET"]
    assert settings.use_real_services


def test_store_failure_on_public_route_is_upstream_error(client, store):
    store.menu.fail_on.add("find")

    response = client.get("/menu")

    assert response.status_code == 502
    assert response.json()["success"] is False
    assert response.json()["error"] == "upstream_error"


def test_store_failure_during_role_check_is_upstream_error(client, store, auth_headers, admin_email):
    store.users.fail_on.add("find_one")

    response = client.get("/users", headers=auth_headers(admin_email))

    assert response.status_code == 502
    assert response.json()["error"] == "upstream_error"


def test_unexpected_error_is_internal_server_error(client, store, monkeypatch):
    def broken_find(query=None, projection=None):
        raise RuntimeError("cursor exploded")

    monkeypatch.setattr(store.reviews, "find", broken_find)

    response = TestClient(app, raise_server_exceptions=False).get("/reviews")

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert response.json()["error"] == "Internal Server Error"
