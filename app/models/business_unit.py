"""
Business unit model
"""
import uuid
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


def _new_businessunit_id() -> str:
    return str(uuid.uuid4())


class BusinessUnit(Base):
    __tablename__ = "business_units"

    businessunit_id = Column(String(36), primary_key=True, default=_new_businessunit_id)
    businessunit_name = Column(String(255), nullable=False, index=True)
    businessunit_code = Column(String(50), unique=True, nullable=True)
    businessunit_image_path = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    # Rows are removed by ON DELETE CASCADE; files are cleaned up by the services
    employees = relationship(
        "Employee",
        back_populates="business_unit",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    templates = relationship(
        "TemplateImage",
        back_populates="business_unit",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TemplateImage.id",
    )
