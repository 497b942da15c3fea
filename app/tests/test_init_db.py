"""
Tests for database bootstrap
"""
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import verify_password
from app.db.init_db import init_db
from app.models.user import Role, User


def test_init_db_creates_admin(db: Session):
    assert init_db(db) is True

    admin = db.query(User).one()
    assert admin.email == settings.INITIAL_ADMIN_EMAIL
    assert admin.role == Role.ADMIN.value
    assert verify_password(settings.INITIAL_ADMIN_PASSWORD, admin.password)


def test_init_db_is_idempotent(db: Session, admin_user):
    assert init_db(db) is False
    assert db.query(User).count() == 1


def test_init_db_promotes_existing_account(db: Session):
    db.add(User(name="Existing", email=settings.INITIAL_ADMIN_EMAIL, password="x", role=Role.HR.value))
    db.commit()

    assert init_db(db) is False
    assert db.query(User).one().role == Role.ADMIN.value
