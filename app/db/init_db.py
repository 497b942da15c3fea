"""
Database initialization
Creates tables from the model metadata and seeds the first admin account
"""
import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import hash_password
from app.db.base import Base
from app.db.session import engine
from app.models.user import Role, User

logger = logging.getLogger(__name__)


def create_tables() -> None:
    """Create any missing tables (schema migrations are not managed here)"""
    import app.models  # noqa: F401  registers every model on Base.metadata

    Base.metadata.create_all(bind=engine)


def init_db(db: Session) -> bool:
    """
    Create the initial Admin user if no Admin exists

    Returns:
        True when an account was created
    """
    admin_exists = db.query(User).filter(User.role == Role.ADMIN.value).first()
    if admin_exists:
        logger.info("Admin user already exists, skipping initial bootstrap")
        return False

    existing = db.query(User).filter(User.email == settings.INITIAL_ADMIN_EMAIL).first()
    if existing:
        # Account exists under another role; promote it rather than clash on e-mail
        existing.role = Role.ADMIN.value
        db.commit()
        logger.info("Promoted %s to Admin", settings.INITIAL_ADMIN_EMAIL)
        return False

    db.add(User(
        name=settings.INITIAL_ADMIN_NAME,
        email=settings.INITIAL_ADMIN_EMAIL,
        password=hash_password(settings.INITIAL_ADMIN_PASSWORD),
        role=Role.ADMIN.value,
    ))
    db.commit()
    logger.info("Initial admin user created: %s", settings.INITIAL_ADMIN_EMAIL)
    logger.info("Password: [set via INITIAL_ADMIN_PASSWORD environment variable]")
    return True
