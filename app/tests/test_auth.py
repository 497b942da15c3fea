"""
Tests for authentication endpoints
"""
import bcrypt
from fastapi import status
from sqlalchemy.orm import Session

from app.core.security import create_access_token, hash_password, verify_password
from app.models.activity_log import ActivityLog
from app.models.user import Role, User


def test_login_success(client, admin_user):
    """Valid credentials return a bearer token"""
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "admin@company.com", "password": "adminpass123"}
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"


def test_login_email_is_case_insensitive(client, admin_user):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "Admin@Company.com", "password": "adminpass123"}
    )
    assert response.status_code == status.HTTP_200_OK


def test_login_wrong_password(client, admin_user):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "admin@company.com", "password": "wrongpass"}
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "These credentials do not match our records."


def test_login_unknown_user(client, db):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "nobody@company.com", "password": "whatever123"}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_login_is_recorded_in_activity_log(client, db: Session, admin_user):
    client.post(
        "/api/v1/auth/login",
        json={"email": "admin@company.com", "password": "adminpass123"},
        headers={"User-Agent": "pytest-agent", "X-Forwarded-For": "10.1.2.3, 172.16.0.1"}
    )

    entry = db.query(ActivityLog).filter(ActivityLog.action == "user_login").one()
    assert entry.user_id == admin_user.id
    assert entry.model_type == "user"
    assert entry.model_id == str(admin_user.id)
    assert entry.ip_address == "10.1.2.3"
    assert entry.user_agent == "pytest-agent"


def test_me_returns_current_user(client, admin_user, admin_headers):
    response = client.get("/api/v1/auth/me", headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["email"] == "admin@company.com"
    assert data["role"] == "Admin"
    assert "password" not in data


def test_me_requires_token(client, db):
    response = client.get("/api/v1/auth/me")
    assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)


def test_me_rejects_invalid_token(client, db):
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_token_for_deleted_user_rejected(client, db: Session, hr_user):
    token = create_access_token({"sub": str(hr_user.id), "role": hr_user.role})
    db.delete(hr_user)
    db.commit()

    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_legacy_bcrypt_hash_still_verifies(client, db: Session):
    """Accounts carried over with $2y$ bcrypt hashes can still log in"""
    legacy = bcrypt.hashpw(b"legacypass1", bcrypt.gensalt()).decode("utf-8")
    legacy = "$2y$" + legacy[4:]
    db.add(User(name="Legacy HR", email="legacy@company.com", password=legacy, role=Role.HR.value))
    db.commit()

    response = client.post(
        "/api/v1/auth/login",
        json={"email": "legacy@company.com", "password": "legacypass1"}
    )
    assert response.status_code == status.HTTP_200_OK


def test_hash_and_verify_password():
    hashed = hash_password("s3cret-pass")
    assert hashed.startswith("$argon2")
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("other-pass", hashed)
    assert not verify_password("s3cret-pass", None)
    assert not verify_password("s3cret-pass", "plaintext")
