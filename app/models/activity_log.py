"""
Activity log model (append-only audit trail)
"""
import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class AuditTarget(str, enum.Enum):
    """Entity kinds an activity log entry can point at"""
    EMPLOYEE = "employee"
    BUSINESS_UNIT = "business_unit"
    USER = "user"
    TEMPLATE_IMAGE = "template_image"
    NETWORK_PATH = "network_path"


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(100), nullable=False, index=True)  # e.g. "employee_created", "template_deleted"
    description = Column(Text, nullable=True)
    model_type = Column(String(50), nullable=True)  # AuditTarget value
    model_id = Column(String(64), nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    properties = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False, index=True)

    user = relationship("User")
