"""
Tests for user management endpoints
"""
from fastapi import status
from sqlalchemy.orm import Session

from app.core.security import verify_password
from app.models.activity_log import ActivityLog
from app.models.user import Role, User


def new_user(email="new.user@company.com", role="HR", **overrides):
    data = {
        "name": "New User",
        "email": email,
        "password": "password123",
        "password_confirmation": "password123",
        "role": role,
    }
    data.update(overrides)
    return data


def test_admin_creates_admin(client, db: Session, admin_headers):
    response = client.post("/api/v1/user-management", json=new_user(role="Admin"), headers=admin_headers)

    assert response.status_code == status.HTTP_201_CREATED, response.text
    data = response.json()
    assert data["role"] == "Admin"
    assert "password" not in data

    user = db.query(User).filter(User.email == "new.user@company.com").one()
    assert verify_password("password123", user.password)

    entry = db.query(ActivityLog).filter(ActivityLog.action == "user_created").one()
    assert entry.properties == {"name": "New User", "email": "new.user@company.com", "role": "Admin"}


def test_hr_cannot_assign_admin_role(client, hr_headers):
    """HR users always create HR accounts, whatever role they ask for"""
    response = client.post("/api/v1/user-management", json=new_user(role="Admin"), headers=hr_headers)

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["role"] == "HR"


def test_create_user_password_confirmation(client, admin_headers):
    response = client.post(
        "/api/v1/user-management",
        json=new_user(password_confirmation="different123"),
        headers=admin_headers
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_create_user_duplicate_email(client, admin_headers, hr_user):
    response = client.post("/api/v1/user-management", json=new_user(email="HR@company.com"), headers=admin_headers)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert "email" in response.json()["detail"]


def test_create_user_invalid_email(client, admin_headers):
    response = client.post("/api/v1/user-management", json=new_user(email="not-an-email"), headers=admin_headers)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_list_users(client, admin_headers, hr_user):
    response = client.get("/api/v1/user-management", params={"role": "HR"}, headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [u["email"] for u in data["users"]] == ["hr@company.com"]
    assert data["current_user_role"] == "Admin"


def test_update_user(client, db: Session, admin_headers, hr_user):
    response = client.put(
        f"/api/v1/user-management/{hr_user.id}",
        json={"name": "Harper Reyes", "email": "hr@company.com", "role": "HR", "password": ""},
        headers=admin_headers
    )

    assert response.status_code == status.HTTP_200_OK, response.text
    assert response.json()["name"] == "Harper Reyes"
    db.refresh(hr_user)
    assert verify_password("hrpass12345", hr_user.password)


def test_update_user_changes_password(client, db: Session, admin_headers, hr_user):
    response = client.put(
        f"/api/v1/user-management/{hr_user.id}",
        json={
            "name": hr_user.name,
            "email": hr_user.email,
            "role": "HR",
            "password": "brandnewpass",
            "password_confirmation": "brandnewpass",
        },
        headers=admin_headers
    )

    assert response.status_code == status.HTTP_200_OK
    db.refresh(hr_user)
    assert verify_password("brandnewpass", hr_user.password)


def test_update_own_account_rejected(client, admin_user, admin_headers):
    response = client.put(
        f"/api/v1/user-management/{admin_user.id}",
        json={"name": "Renamed", "email": admin_user.email, "role": "HR"},
        headers=admin_headers
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_hr_cannot_edit_admin(client, admin_user, hr_headers):
    response = client.put(
        f"/api/v1/user-management/{admin_user.id}",
        json={"name": "Demoted", "email": admin_user.email, "role": "HR"},
        headers=hr_headers
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_hr_update_forces_hr_role(client, db: Session, hr_headers):
    other = User(name="Other HR", email="other@company.com", password="x", role=Role.HR.value)
    db.add(other)
    db.commit()

    response = client.put(
        f"/api/v1/user-management/{other.id}",
        json={"name": "Other HR", "email": "other@company.com", "role": "Admin"},
        headers=hr_headers
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["role"] == "HR"


def test_self_delete_rejected(client, db: Session, admin_user, admin_headers):
    """Deleting your own account is refused and nothing is removed"""
    before = db.query(User).count()

    response = client.delete(f"/api/v1/user-management/{admin_user.id}", headers=admin_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "You cannot delete your own account."
    assert db.query(User).count() == before


def test_hr_cannot_delete_users(client, db: Session, admin_user, hr_headers):
    response = client.delete(f"/api/v1/user-management/{admin_user.id}", headers=hr_headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert db.query(User).filter(User.id == admin_user.id).count() == 1


def test_admin_deletes_user(client, db: Session, admin_user, admin_headers, hr_user):
    hr_id = hr_user.id

    response = client.delete(f"/api/v1/user-management/{hr_id}", headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    assert db.query(User).filter(User.id == hr_id).count() == 0

    entry = db.query(ActivityLog).filter(ActivityLog.action == "user_deleted").one()
    assert entry.properties == {"name": "Harper HR"}
    assert entry.model_id == str(hr_id)
    assert entry.user_id == admin_user.id
