"""
Pytest configuration and fixtures
"""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-hr-id-admin-tests")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.core.config import settings
from app.core.deps import get_db
from app.core.security import hash_password

# Import all models to ensure they're registered with Base.metadata
from app.models import (  # noqa: F401
    ActivityLog,
    BusinessUnit,
    Employee,
    IdSequence,
    NetworkPath,
    Role,
    TemplateImage,
    User,
)


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Business unit deletion relies on ON DELETE CASCADE
@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_PASSWORD = "adminpass123"
HR_PASSWORD = "hrpass12345"


@pytest.fixture(autouse=True)
def storage_dirs(tmp_path, monkeypatch):
    """Point both image stores at a per-test temporary directory"""
    network = tmp_path / "network"
    public = tmp_path / "public"
    monkeypatch.setattr(settings, "NETWORK_IMAGES_PATH", str(network))
    monkeypatch.setattr(settings, "PUBLIC_STORAGE_PATH", str(public))
    return {"network": network, "public": public}


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _make_user(db: Session, name: str, email: str, password: str, role: Role) -> User:
    user = User(name=name, email=email, password=hash_password(password), role=role.value)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db: Session):
    """Create an Admin account"""
    return _make_user(db, "Alex Admin", "admin@company.com", ADMIN_PASSWORD, Role.ADMIN)


@pytest.fixture
def hr_user(db: Session):
    """Create an HR account"""
    return _make_user(db, "Harper HR", "hr@company.com", HR_PASSWORD, Role.HR)


def get_auth_token(client: TestClient, email: str, password: str) -> str:
    """Helper to get auth token"""
    response = client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


@pytest.fixture
def admin_headers(client, admin_user):
    token = get_auth_token(client, admin_user.email, ADMIN_PASSWORD)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def hr_headers(client, hr_user):
    token = get_auth_token(client, hr_user.email, HR_PASSWORD)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def business_unit(db: Session):
    """Create a business unit"""
    unit = BusinessUnit(businessunit_name="Head Office", businessunit_code="HO")
    db.add(unit)
    db.commit()
    db.refresh(unit)
    return unit
