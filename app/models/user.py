"""
User account model
"""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
import enum
from app.db.base import Base
from app.constants import ROLE_ADMIN, ROLE_HR


class Role(str, enum.Enum):
    ADMIN = ROLE_ADMIN
    HR = ROLE_HR


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    role = Column(String(20), default=Role.HR.value, nullable=False)
    email_verified_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value
