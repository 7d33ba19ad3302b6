from datetime import datetime, timedelta, timezone

from chatbuddy.auth import (
    create_access_token, decode_access_token, hash_password, verify_password,
)
from chatbuddy.schemas import User


def _user(**kw):
    now = datetime.now(timezone.utc)
    base = dict(
        id="7", email="a@b.c", first_name="A", last_name="B", name="A B",
        password_hash="x", created_at=now, last_login=now,
    )
    return User(**{**base, **kw})


def test_password_hash_roundtrip():
    h = hash_password("secret123")
    assert h != "secret123"
    assert verify_password("secret123", h)
    assert not verify_password("wrong", h)
    assert not verify_password("secret123", "not-a-hash")


def test_token_claims():
    claims = decode_access_token(create_access_token(_user()))
    assert claims.sub == "7"
    assert claims.email == "a@b.c"
    assert claims.name == "A B"


def test_expired_token_rejected():
    old = datetime.now(timezone.utc) - timedelta(days=30)
    assert decode_access_token(create_access_token(_user(), now=old)) is None


def test_register_returns_token_and_public_user(client, user_payload):
    r = client.post("/api/auth/register", json=user_payload)
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Account created successfully"
    assert body["token"]
    assert body["user"]["email"] == "ada@example.com"
    assert body["user"]["name"] == "Ada Lovelace"
    assert "password_hash" not in body["user"]


def test_register_validation(client, user_payload):
    cases = [
        ({**user_payload, "first_name": " "}, "All fields are required"),
        ({**user_payload, "confirm_password": "other123"}, "Passwords do not match"),
        ({**user_payload, "password": "abc", "confirm_password": "abc"}, "Password must be at least 6 characters long"),
    ]
    for payload, detail in cases:
        r = client.post("/api/auth/register", json=payload)
        assert r.status_code == 400
        assert r.json()["detail"] == detail


def test_register_duplicate_email(client, registered, user_payload):
    r = client.post("/api/auth/register", json={**user_payload, "email": "ADA@example.com"})
    assert r.status_code == 400
    assert r.json()["detail"] == "An account with this email already exists"


def test_login(client, registered):
    r = client.post("/api/auth/login", json={"email": "ada@EXAMPLE.com", "password": "secret123"})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Login successful"
    assert body["user"]["id"] == registered["user"]["id"]

    r = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {body['token']}"})
    assert r.status_code == 200
    assert r.json()["user"]["first_name"] == "Ada"


def test_login_failures(client, registered, user_payload):
    r = client.post("/api/auth/login", json={"email": "", "password": ""})
    assert r.status_code == 400
    assert r.json()["detail"] == "Email and password required"

    r = client.post("/api/auth/login", json={"email": user_payload["email"], "password": "nope-nope"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid credentials"

    r = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"})
    assert r.status_code == 401


def test_token_required(client):
    r = client.get("/api/auth/profile")
    assert r.status_code == 401
    assert r.json()["detail"] == "Access token required"

    r = client.get("/api/auth/profile", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 403
    assert r.json()["detail"] == "Invalid or expired token"


def test_logout(client, auth_headers):
    r = client.post("/api/auth/logout", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"message": "Logout successful"}


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["status"] == "OK"
    assert r.json()["mock"] is True
