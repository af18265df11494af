"""Registration, login and profile."""

from __future__ import annotations

from storefront.model import User

from .conftest import auth_headers


def _register(client, email, password="secret123"):
    return client.post("/api/auth/register", json={
        "email": email, "password": password, "first_name": "Ada", "last_name": "Lovelace",
    })


def test_first_account_becomes_admin(client):
    first = _register(client, "first@example.com")
    second = _register(client, "second@example.com")

    assert first.status_code == 201
    assert first.get_json()["data"]["user"]["role"] == "admin"
    assert second.get_json()["data"]["user"]["role"] == "user"
    assert first.get_json()["data"]["token"]


def test_register_rejects_bad_input_and_duplicates(client):
    assert _register(client, "not-an-email").status_code == 400
    assert _register(client, "a@example.com", password="123").status_code == 400
    assert _register(client, "a@example.com").status_code == 201

    dup = _register(client, "A@Example.com")
    assert dup.status_code == 409
    assert dup.get_json()["data"]["field"] == "email"
    assert User.query.count() == 1


def test_login(client, make_user):
    make_user(email="me@example.com", password="hunter22")

    r = client.post("/api/auth/login", json={"email": "ME@example.com", "password": "hunter22"})
    assert r.status_code == 200
    token = r.get_json()["data"]["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.get_json()["data"]["user"]["email"] == "me@example.com"

    bad = client.post("/api/auth/login", json={"email": "me@example.com", "password": "wrong"})
    assert bad.status_code == 401
    assert bad.get_json()["status"] is False


def test_update_profile(client, user):
    r = client.put("/api/auth/me", json={"first_name": "Grace", "phone_number": " 555-0100 "},
                   headers=auth_headers(user))
    data = r.get_json()["data"]["user"]
    assert data["first_name"] == "Grace"
    assert data["phone_number"] == "555-0100"

    r = client.put("/api/auth/me", json={"last_name": "x"}, headers=auth_headers(user))
    assert r.status_code == 400


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.get_json()["status"] == "OK"
