"""Registration, login, logout and role management."""

from __future__ import annotations

from app.config import settings
from app.core.security import ensure_admin, hash_password, verify_password

from conftest import PASSWORD


def test_password_hash_roundtrip():
    hashed = hash_password("correct horse")
    assert hashed.startswith("pbkdf2_sha256$")
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)
    assert not verify_password("anything", "garbage")


async def test_register_then_me(client):
    response = await client.post(
        "/api/auth/local/register",
        json={"username": "reader", "email": "reader@example.com", "password": PASSWORD},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["role"] == "visitor"
    assert "password" not in str(body["user"]).lower()

    me = await client.get("/api/users/me", headers={"Authorization": f"Bearer {body['jwt']}"})
    assert me.json()["username"] == "reader"


async def test_register_rejects_duplicates(client, make_user):
    user, _ = await make_user(username="taken")

    response = await client.post(
        "/api/auth/local/register",
        json={"username": "taken", "email": "fresh@example.com", "password": PASSWORD},
    )

    assert response.status_code == 400


async def test_login_by_email_and_username(client, make_user):
    user, _ = await make_user()

    by_email = await client.post(
        "/api/auth/local", json={"identifier": user.email, "password": PASSWORD}
    )
    by_username = await client.post(
        "/api/auth/local", json={"identifier": user.username, "password": PASSWORD}
    )

    assert by_email.status_code == by_username.status_code == 200
    assert by_email.json()["user"]["id"] == user.id
    assert by_email.json()["jwt"] != by_username.json()["jwt"]


async def test_login_with_wrong_password(client, make_user):
    user, _ = await make_user()

    response = await client.post(
        "/api/auth/local", json={"identifier": user.email, "password": "nope-nope"}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid identifier or password"


async def test_logout_revokes_token(client, make_user):
    _, headers = await make_user()

    assert (await client.post("/api/auth/logout", headers=headers)).status_code == 200
    assert (await client.get("/api/users/me", headers=headers)).status_code == 401


async def test_only_admin_changes_roles(client, make_user):
    target, _ = await make_user()
    _, editor_headers = await make_user("editor")
    _, admin_headers = await make_user("admin")

    denied = await client.put(
        f"/api/users/{target.id}/role", json={"role": "author"}, headers=editor_headers
    )
    allowed = await client.put(
        f"/api/users/{target.id}/role", json={"role": "author"}, headers=admin_headers
    )

    assert denied.status_code == 403
    assert allowed.json()["role"] == "author"


async def test_ensure_admin_creates_then_promotes(session, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_EMAIL", "boss@example.com")
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "boss-pass")

    created = await ensure_admin(session)
    await session.commit()
    assert created.role == "admin"
    assert verify_password("boss-pass", created.password_hash)

    created.role = "visitor"
    await session.commit()
    again = await ensure_admin(session)
    assert again.id == created.id
    assert again.role == "admin"


async def test_ensure_admin_is_skipped_without_credentials(session, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_EMAIL", None)
    assert await ensure_admin(session) is None
