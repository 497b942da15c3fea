"""
Tests for the network image path setting
"""
from fastapi import status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.activity_log import ActivityLog
from app.services.settings_service import get_network_images_path


def test_network_path_defaults_to_settings(client, admin_headers):
    response = client.get("/api/v1/settings/network-path", headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"network_path": settings.NETWORK_IMAGES_PATH, "is_default": True}


def test_update_network_path(client, db: Session, admin_headers, tmp_path):
    share = str(tmp_path / "share")

    response = client.put("/api/v1/settings/network-path", json={"network_path": share}, headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"network_path": share, "is_default": False}
    assert get_network_images_path(db) == share

    entry = db.query(ActivityLog).filter(ActivityLog.action == "network_path_updated").one()
    assert entry.properties["old"] is None
    assert entry.properties["new"] == share


def test_uploads_follow_network_path(client, db: Session, admin_headers, business_unit, tmp_path):
    share = tmp_path / "share"
    client.put("/api/v1/settings/network-path", json={"network_path": str(share)}, headers=admin_headers)

    response = client.post(
        "/api/v1/employees",
        data={
            "employee_firstname": "Rico",
            "employee_lastname": "Lim",
            "position": "Driver",
            "businessunit_id": business_unit.businessunit_id,
            "employment_status": "active",
        },
        files={"image_person": ("rico.png", b"\x89PNGrico", "image/png")},
        headers=admin_headers
    )
    assert response.status_code == status.HTTP_201_CREATED, response.text

    stored = list((share / "employee").iterdir())
    assert len(stored) == 1
    assert stored[0].name.endswith("_rico.png")


def test_network_path_admin_only(client, hr_headers):
    assert client.get("/api/v1/settings/network-path", headers=hr_headers).status_code == status.HTTP_403_FORBIDDEN
    response = client.put("/api/v1/settings/network-path", json={"network_path": "/tmp/x"}, headers=hr_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_network_path_cannot_be_blank(client, admin_headers):
    response = client.put("/api/v1/settings/network-path", json={"network_path": "   "}, headers=admin_headers)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
