import pytest
from fastapi.testclient import TestClient

from chatbuddy.settings import settings
from chatbuddy.main import app, limiter

USER = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "Ada@Example.com",
    "password": "secret123",
    "confirm_password": "secret123",
}


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    monkeypatch.setattr(settings, "MOCK_MODE", True)
    monkeypatch.setattr(settings, "SUPABASE_URL", None)
    monkeypatch.setattr(settings, "SUPABASE_SERVICE_ROLE_KEY", None)
    monkeypatch.setattr(settings, "JWT_SECRET", "test-secret")
    limiter.reset()
    yield settings


@pytest.fixture
def client():
    # entering the context runs the lifespan, so every test gets a fresh store
    with TestClient(app) as c:
        yield c


@pytest.fixture
def registered(client):
    r = client.post("/api/auth/register", json=USER)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def auth_headers(registered):
    return {"Authorization": f"Bearer {registered['token']}"}


@pytest.fixture
def user_payload():
    return dict(USER)
