"""Tests for admin authentication endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.services.auth import create_access_token, hash_password, verify_password
from conftest import ADMIN_EMAIL, ADMIN_PASSWORD


def test_password_hashing():
    """Password hashing should be one-way and verifiable."""
    password = "supersecret123"
    hashed = hash_password(password)

    # Hashed password should be different from plain text
    assert hashed != password

    # Should verify correctly
    assert verify_password(password, hashed) is True

    # Wrong password should fail
    assert verify_password("wrongpassword", hashed) is False


@pytest.mark.asyncio
async def test_login_returns_token(client, admin):
    resp = await client.post("/api/v1/auth/login", json={
        "email": ADMIN_EMAIL.upper(),
        "password": ADMIN_PASSWORD,
    })

    assert resp.status_code == 200
    data = resp.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"
    assert data["admin"]["email"] == ADMIN_EMAIL
    assert data["admin"]["role"] == "admin"
    assert data["admin"]["last_login_at"] is not None


@pytest.mark.asyncio
async def test_login_with_invalid_credentials(client, admin):
    resp = await client.post("/api/v1/auth/login", json={
        "email": ADMIN_EMAIL,
        "password": "wrongpass",
    })

    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_with_inactive_admin_fails(client, db, admin):
    admin.is_active = False
    await db.commit()

    resp = await client.post("/api/v1/auth/login", json={
        "email": ADMIN_EMAIL,
        "password": ADMIN_PASSWORD,
    })

    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_failed_logins_are_rate_limited(client, admin):
    for _ in range(5):
        resp = await client.post("/api/v1/auth/login", json={
            "email": ADMIN_EMAIL,
            "password": "wrongpass",
        })
        assert resp.status_code == 401

    resp = await client.post("/api/v1/auth/login", json={
        "email": ADMIN_EMAIL,
        "password": ADMIN_PASSWORD,
    })
    assert resp.status_code == 429
    assert resp.json()["detail"] == "Too many login attempts, please try again later."

    transport = ASGITransport(app=app, client=("10.0.0.2", 40000))
    async with AsyncClient(transport=transport, base_url="http://test") as other:
        resp = await other.post("/api/v1/auth/login", json={
            "email": ADMIN_EMAIL,
            "password": ADMIN_PASSWORD,
        })
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_successful_logins_are_not_counted(client, admin):
    for _ in range(7):
        resp = await client.post("/api/v1/auth/login", json={
            "email": ADMIN_EMAIL,
            "password": ADMIN_PASSWORD,
        })
        assert resp.status_code == 200


@pytest.mark.asyncio
async def test_me_with_valid_token(client, auth_headers):
    resp = await client.get("/api/v1/auth/me", headers=auth_headers)

    assert resp.status_code == 200
    assert resp.json()["email"] == ADMIN_EMAIL


@pytest.mark.asyncio
async def test_non_admin_token_is_forbidden(client, admin):
    token = create_access_token({"sub": str(admin.id), "role": "viewer"})

    resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_register_admin(client, auth_headers):
    resp = await client.post("/api/v1/auth/register", headers=auth_headers, json={
        "email": "Second@Example.com",
        "password": "Another123",
        "name": "Second Admin",
    })

    assert resp.status_code == 201
    assert resp.json()["admin"]["email"] == "second@example.com"

    # New admin can log in
    resp = await client.post("/api/v1/auth/login", json={
        "email": "second@example.com",
        "password": "Another123",
    })
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_register_duplicate_admin_fails(client, auth_headers):
    resp = await client.post("/api/v1/auth/register", headers=auth_headers, json={
        "email": ADMIN_EMAIL,
        "password": "Another123",
    })

    assert resp.status_code == 409


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["short1A", "alllowercase1", "NoDigitsHere"])
async def test_register_rejects_weak_password(client, auth_headers, password):
    resp = await client.post("/api/v1/auth/register", headers=auth_headers, json={
        "email": "weak@example.com",
        "password": password,
    })

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_register_requires_auth(client):
    resp = await client.post("/api/v1/auth/register", json={
        "email": "intruder@example.com",
        "password": "Intruder123",
    })

    assert resp.status_code in [401, 403]
