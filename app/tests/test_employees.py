"""
Tests for employee endpoints
"""
import pytest
from fastapi import status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.activity_log import ActivityLog
from app.models.employee import Employee, IdStatus


def png_file(name="photo.png", content=b"\x89PNG\r\n\x1a\nemployee-image"):
    return (name, content, "image/png")


def employee_form(businessunit_id, **overrides):
    data = {
        "employee_firstname": "Maria",
        "employee_lastname": "Santos",
        "position": "Accountant",
        "businessunit_id": businessunit_id,
        "employment_status": "active",
    }
    data.update(overrides)
    return data


def create_employee(client, headers, businessunit_id, files=None, **overrides):
    response = client.post(
        "/api/v1/employees",
        data=employee_form(businessunit_id, **overrides),
        files=files,
        headers=headers
    )
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


def test_create_employee_assigns_sequential_id_numbers(client, hr_headers, business_unit):
    """ID numbers are zero-padded and increase by one"""
    first = create_employee(client, hr_headers, business_unit.businessunit_id)
    second = create_employee(client, hr_headers, business_unit.businessunit_id, employee_firstname="Jose")

    assert first["employee"] == "000001"
    assert second["employee"] == "000002"
    assert first["message"] == "Employee Maria Santos has been added successfully."


def test_deleted_id_numbers_are_not_reused(client, admin_headers, business_unit):
    create_employee(client, admin_headers, business_unit.businessunit_id)
    second = create_employee(client, admin_headers, business_unit.businessunit_id)

    response = client.delete(f"/api/v1/employees/{second['uuid']}", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK

    third = create_employee(client, admin_headers, business_unit.businessunit_id)
    assert third["employee"] == "000003"


def test_create_employee_defaults(client, db: Session, hr_headers, business_unit):
    created = create_employee(client, hr_headers, business_unit.businessunit_id, employment_status="Active")

    employee = db.query(Employee).filter(Employee.uuid == created["uuid"]).one()
    assert employee.id_status == IdStatus.PENDING.value
    assert employee.employment_status == "active"
    assert employee.employee_id_counter == 1
    assert employee.date_hired is not None
    assert employee.id_last_exported_at is None


def test_create_employee_rejects_unknown_status(client, hr_headers, business_unit):
    response = client.post(
        "/api/v1/employees",
        data=employee_form(business_unit.businessunit_id, employment_status="on-leave"),
        headers=hr_headers
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_create_employee_requires_fields(client, hr_headers, business_unit):
    form = employee_form(business_unit.businessunit_id)
    del form["position"]
    response = client.post("/api/v1/employees", data=form, headers=hr_headers)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    locs = [tuple(err["loc"]) for err in response.json()["errors"]]
    assert ("body", "position") in locs


def test_create_employee_unknown_business_unit(client, hr_headers, business_unit):
    response = client.post(
        "/api/v1/employees",
        data=employee_form("no-such-unit"),
        headers=hr_headers
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert "businessunit_id" in response.json()["detail"]


def test_create_employee_with_images(client, db: Session, hr_headers, business_unit, storage_dirs):
    created = create_employee(
        client,
        hr_headers,
        business_unit.businessunit_id,
        files={"image_person": png_file("portrait.png"), "image_signature": png_file("sig.png")},
    )

    employee = db.query(Employee).filter(Employee.uuid == created["uuid"]).one()
    assert employee.image_person.endswith("_portrait.png")
    assert employee.image_signature.endswith("_sig.png")
    assert employee.image_qrcode is None
    assert (storage_dirs["network"] / "employee" / employee.image_person).is_file()
    assert (storage_dirs["network"] / "signature" / employee.image_signature).is_file()


def test_create_employee_with_long_and_non_ascii_filenames(client, db: Session, hr_headers, business_unit, storage_dirs):
    created = create_employee(
        client,
        hr_headers,
        business_unit.businessunit_id,
        files={"image_person": png_file("a" * 246 + ".png"), "image_signature": png_file("署名.png")},
    )

    employee = db.query(Employee).filter(Employee.uuid == created["uuid"]).one()
    assert len(employee.image_person) < 255
    assert employee.image_person.endswith(".png")
    assert employee.image_signature.endswith("_upload.png")
    assert (storage_dirs["network"] / "employee" / employee.image_person).is_file()
    assert (storage_dirs["network"] / "signature" / employee.image_signature).is_file()


def test_create_employee_rejects_non_image(client, db: Session, hr_headers, business_unit):
    response = client.post(
        "/api/v1/employees",
        data=employee_form(business_unit.businessunit_id),
        files={"image_person": ("notes.txt", b"hello", "text/plain")},
        headers=hr_headers
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert "image_person" in response.json()["detail"]
    assert db.query(Employee).count() == 0


def test_create_employee_is_logged(client, db: Session, hr_user, hr_headers, business_unit):
    created = create_employee(client, hr_headers, business_unit.businessunit_id)

    entry = db.query(ActivityLog).filter(ActivityLog.action == "employee_created").one()
    assert entry.user_id == hr_user.id
    assert entry.model_type == "employee"
    assert entry.model_id == created["uuid"]
    assert entry.properties["id_no"] == "000001"


def test_list_employees_search_and_sort(client, hr_headers, business_unit):
    create_employee(client, hr_headers, business_unit.businessunit_id, employee_lastname="Zamora")
    create_employee(client, hr_headers, business_unit.businessunit_id, employee_lastname="Abad")

    response = client.get("/api/v1/employees", headers=hr_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [e["employee_lastname"] for e in data["employees"]] == ["Abad", "Zamora"]
    assert data["meta"] == {"current_page": 1, "last_page": 1, "total": 2, "per_page": 10}
    assert data["current_user_role"] == "HR"
    assert data["business_units"][0]["businessunit_name"] == "Head Office"

    response = client.get(
        "/api/v1/employees",
        params={"sort_by": "employee_lastname", "sort_direction": "desc"},
        headers=hr_headers
    )
    assert [e["employee_lastname"] for e in response.json()["employees"]] == ["Zamora", "Abad"]

    response = client.get("/api/v1/employees", params={"search": "zam"}, headers=hr_headers)
    assert [e["employee_lastname"] for e in response.json()["employees"]] == ["Zamora"]


def test_list_employees_search_matches_business_unit_name(client, hr_headers, business_unit):
    create_employee(client, hr_headers, business_unit.businessunit_id)

    response = client.get("/api/v1/employees", params={"search": "Head Off"}, headers=hr_headers)
    assert response.json()["meta"]["total"] == 1


def test_list_employees_business_unit_sort_key_echoed(client, hr_headers, business_unit):
    create_employee(client, hr_headers, business_unit.businessunit_id)

    response = client.get(
        "/api/v1/employees",
        params={"sort_by": "businessunit_name", "sort_direction": "desc"},
        headers=hr_headers
    )
    filters = response.json()["filters"]
    assert filters["sort_by"] == "businessunit_name"
    assert filters["sort_direction"] == "desc"


def test_list_employees_unknown_sort_key_falls_back(client, hr_headers, business_unit):
    response = client.get("/api/v1/employees", params={"sort_by": "password"}, headers=hr_headers)
    assert response.json()["filters"]["sort_by"] == "employee_lastname"


def test_update_employee_keeps_omitted_and_clears_blank(client, db: Session, hr_headers, business_unit):
    """Omitted optional fields stay, blank ones are cleared"""
    created = create_employee(
        client,
        hr_headers,
        business_unit.businessunit_id,
        address="12 Mabini St",
        tin_no="123-456-789",
    )

    response = client.put(
        f"/api/v1/employees/{created['uuid']}",
        data=employee_form(business_unit.businessunit_id, position="Senior Accountant", address=""),
        headers=hr_headers
    )

    assert response.status_code == status.HTTP_200_OK, response.text
    data = response.json()
    assert data["position"] == "Senior Accountant"
    assert data["address"] is None
    assert data["tin_no"] == "123-456-789"
    assert data["id_no"] == "000001"


def test_update_employee_accepts_free_form_status(client, hr_headers, business_unit):
    created = create_employee(client, hr_headers, business_unit.businessunit_id)

    response = client.put(
        f"/api/v1/employees/{created['uuid']}",
        data=employee_form(business_unit.businessunit_id, employment_status="On Leave"),
        headers=hr_headers
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["employment_status"] == "On Leave"


def test_update_employee_replaces_image_and_removes_old_file(client, db: Session, hr_headers, business_unit, storage_dirs):
    created = create_employee(
        client,
        hr_headers,
        business_unit.businessunit_id,
        files={"image_person": png_file("old.png")},
    )
    old_name = db.query(Employee).filter(Employee.uuid == created["uuid"]).one().image_person
    photos = storage_dirs["network"] / "employee"
    assert (photos / old_name).is_file()

    response = client.post(
        f"/api/v1/employees/{created['uuid']}",
        data=employee_form(business_unit.businessunit_id),
        files={"image_person": png_file("new.png")},
        headers=hr_headers
    )

    assert response.status_code == status.HTTP_200_OK, response.text
    new_name = response.json()["image_person"]
    assert new_name.endswith("_new.png")
    assert (photos / new_name).is_file()
    assert not (photos / old_name).exists()

    entry = db.query(ActivityLog).filter(ActivityLog.action == "employee_updated").one()
    assert entry.properties["old"]["image_person"] == old_name
    assert entry.properties["new"]["image_person"] == new_name


def test_delete_employee_admin_only(client, db: Session, hr_headers, admin_headers, business_unit):
    created = create_employee(client, hr_headers, business_unit.businessunit_id)

    response = client.delete(f"/api/v1/employees/{created['uuid']}", headers=hr_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Unauthorized action."
    assert db.query(Employee).count() == 1

    response = client.delete(f"/api/v1/employees/{created['uuid']}", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    assert db.query(Employee).count() == 0


def test_delete_employee_removes_images(client, db: Session, admin_headers, business_unit, storage_dirs):
    created = create_employee(
        client,
        admin_headers,
        business_unit.businessunit_id,
        files={"image_person": png_file("me.png"), "image_qrcode": png_file("qr.png")},
    )
    employee = db.query(Employee).filter(Employee.uuid == created["uuid"]).one()
    photo = storage_dirs["network"] / "employee" / employee.image_person
    qrcode = storage_dirs["network"] / "qrcode" / employee.image_qrcode
    assert photo.is_file() and qrcode.is_file()

    client.delete(f"/api/v1/employees/{created['uuid']}", headers=admin_headers)

    assert not photo.exists()
    assert not qrcode.exists()


def test_delete_missing_employee_returns_404(client, admin_headers, db):
    response = client.delete("/api/v1/employees/does-not-exist", headers=admin_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_bulk_delete_ignores_duplicates(client, db: Session, admin_headers, business_unit):
    """Each listed employee is deleted once, duplicates do not error"""
    a = create_employee(client, admin_headers, business_unit.businessunit_id)
    b = create_employee(client, admin_headers, business_unit.businessunit_id)
    keep = create_employee(client, admin_headers, business_unit.businessunit_id)

    response = client.post(
        "/api/v1/employees/bulk-destroy",
        json={"uuids": [a["uuid"], b["uuid"], a["uuid"], "unknown-uuid"]},
        headers=admin_headers
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["deleted"] == 2
    remaining = [e.uuid for e in db.query(Employee).all()]
    assert remaining == [keep["uuid"]]

    entry = db.query(ActivityLog).filter(ActivityLog.action == "employees_bulk_deleted").one()
    assert entry.properties["count"] == 2


def test_bulk_delete_hr_forbidden(client, hr_headers, business_unit):
    a = create_employee(client, hr_headers, business_unit.businessunit_id)
    response = client.post(
        "/api/v1/employees/bulk-destroy",
        json={"uuids": [a["uuid"]]},
        headers=hr_headers
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_export_id_marks_printed_and_bumps_counter(client, db: Session, hr_headers, business_unit):
    created = create_employee(client, hr_headers, business_unit.businessunit_id)

    response = client.post(f"/api/v1/employees/{created['uuid']}/export-id", headers=hr_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["id_status"] == "printed"
    assert data["employee_id_counter"] == 2
    assert data["id_expires_at"][:4] == str(int(data["id_last_exported_at"][:4]) + 2)

    response = client.post(f"/api/v1/employees/{created['uuid']}/export-id", headers=hr_headers)
    assert response.json()["employee_id_counter"] == 3


def test_pending_ids_lists_only_pending(client, hr_headers, admin_headers, business_unit):
    pending = create_employee(client, hr_headers, business_unit.businessunit_id, employee_lastname="Pending")
    printed = create_employee(client, hr_headers, business_unit.businessunit_id, employee_lastname="Printed")
    client.post(f"/api/v1/employees/{printed['uuid']}/export-id", headers=hr_headers)

    response = client.get("/api/v1/pending-id", headers=hr_headers)
    assert response.status_code == status.HTTP_200_OK
    assert [e["uuid"] for e in response.json()["employees"]] == [pending["uuid"]]

    response = client.delete(f"/api/v1/pending-id/{pending['uuid']}", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    assert client.get("/api/v1/pending-id", headers=hr_headers).json()["meta"]["total"] == 0


def test_id_preview_uses_default_layout_without_template(client, hr_headers, business_unit):
    created = create_employee(client, hr_headers, business_unit.businessunit_id)

    response = client.get(f"/api/v1/employees/{created['uuid']}/id-preview", headers=hr_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["template_id"] is None
    assert data["layout"]["emp_qrcode_width"] == 150
    assert data["employee"]["id_no"] == "000001"


def test_bulk_id_preview_groups_by_business_unit(client, db: Session, hr_headers, business_unit):
    from app.models.business_unit import BusinessUnit

    other = BusinessUnit(businessunit_name="Branch", businessunit_code="BR")
    db.add(other)
    db.commit()
    a = create_employee(client, hr_headers, business_unit.businessunit_id)
    b = create_employee(client, hr_headers, other.businessunit_id)

    response = client.post(
        "/api/v1/employees/bulk-id-preview",
        json={"uuids": [a["uuid"], b["uuid"]]},
        headers=hr_headers
    )
    assert response.status_code == status.HTTP_200_OK
    groups = response.json()
    assert sorted(g["businessunit_name"] for g in groups) == ["Branch", "Head Office"]
    assert all(len(g["previews"]) == 1 for g in groups)


def test_get_stored_employee_image(client, db: Session, hr_headers, business_unit):
    created = create_employee(
        client,
        hr_headers,
        business_unit.businessunit_id,
        files={"image_person": png_file("face.png", b"\x89PNGface")},
    )
    name = db.query(Employee).filter(Employee.uuid == created["uuid"]).one().image_person

    response = client.get(f"/api/v1/files/employee/{name}", headers=hr_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.content == b"\x89PNGface"

    response = client.get("/api/v1/files/employee/missing.png", headers=hr_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_employees_require_authentication(client, db):
    response = client.get("/api/v1/employees")
    assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)


def test_duplicate_id_number_rejected_by_database(db: Session, business_unit):
    for first_name in ("Ana", "Ben"):
        db.add(Employee(
            id_no="000007",
            employee_firstname=first_name,
            employee_lastname="Reyes",
            position="Clerk",
            businessunit_id=business_unit.businessunit_id,
        ))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_id_sequence_starts_after_existing_numbers(client, db: Session, hr_headers, business_unit):
    """Records imported before the sequence existed are not renumbered or reused"""
    db.add(Employee(
        id_no="000041",
        employee_firstname="Imported",
        employee_lastname="Record",
        position="Clerk",
        businessunit_id=business_unit.businessunit_id,
    ))
    db.commit()

    created = create_employee(client, hr_headers, business_unit.businessunit_id)
    assert created["employee"] == "000042"
