"""
Employee model
"""
import uuid
from sqlalchemy import Column, Integer, String, Text, DateTime, Date, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from app.db.base import Base
from app.constants import BUCKET_EMPLOYEE_PHOTO, BUCKET_SIGNATURE, BUCKET_QRCODE


class EmploymentStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    RESIGNED = "resigned"
    TERMINATED = "terminated"


class IdStatus(str, enum.Enum):
    PENDING = "pending"
    PRINTED = "printed"


def _new_uuid() -> str:
    return str(uuid.uuid4())


class Employee(Base):
    __tablename__ = "employees"

    # Image columns and the storage bucket each one points into
    FILE_FIELDS = {
        "image_person": BUCKET_EMPLOYEE_PHOTO,
        "image_signature": BUCKET_SIGNATURE,
        "image_qrcode": BUCKET_QRCODE,
    }

    uuid = Column(String(36), primary_key=True, default=_new_uuid)
    id_no = Column(String(20), unique=True, nullable=False, index=True)
    date_hired = Column(Date, nullable=True)

    employee_firstname = Column(String(255), nullable=False)
    employee_middlename = Column(String(255), nullable=True)
    employee_lastname = Column(String(255), nullable=False)
    employee_name_extension = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    birthday = Column(Date, nullable=True)
    position = Column(String(255), nullable=False)

    # Government ID numbers
    tin_no = Column(String(50), nullable=True)
    sss_no = Column(String(50), nullable=True)
    hdmf_no = Column(String(50), nullable=True)
    phic_no = Column(String(50), nullable=True)

    emergency_name = Column(String(255), nullable=True)
    emergency_contact_number = Column(String(50), nullable=True)
    emergency_address = Column(Text, nullable=True)

    businessunit_id = Column(
        String(36),
        ForeignKey("business_units.businessunit_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    id_status = Column(String(20), default=IdStatus.PENDING.value, nullable=False, index=True)
    reason = Column(Text, nullable=True)
    employment_status = Column(String(50), default=EmploymentStatus.ACTIVE.value, nullable=False)
    employee_id_counter = Column(Integer, default=1, nullable=False)
    id_last_exported_at = Column(DateTime(timezone=True), nullable=True)

    image_person = Column(String(255), nullable=True)
    image_signature = Column(String(255), nullable=True)
    image_qrcode = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    business_unit = relationship("BusinessUnit", back_populates="employees")

    @property
    def full_name(self) -> str:
        parts = [self.employee_firstname, self.employee_middlename, self.employee_lastname, self.employee_name_extension]
        return " ".join(p for p in parts if p)

    @property
    def businessunit_name(self):
        return self.business_unit.businessunit_name if self.business_unit else None

    def stored_files(self):
        """(bucket, filename) pairs for every image this employee references"""
        return [
            (bucket, getattr(self, field))
            for field, bucket in self.FILE_FIELDS.items()
            if getattr(self, field)
        ]


class IdSequence(Base):
    """Named counter used to hand out sequential ID numbers"""
    __tablename__ = "id_sequences"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, nullable=False, default=0)
