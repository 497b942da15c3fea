"""
ID card template model
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base
from app.constants import BUCKET_ID_TEMPLATES

# Overlay regions and the coordinate suffixes each one carries
LAYOUT_REGIONS = {
    "emp_img": ("x", "y", "width", "height"),
    "emp_name": ("x", "y"),
    "emp_pos": ("x", "y"),
    "emp_idno": ("x", "y"),
    "emp_sig": ("x", "y"),
    "emp_add": ("x", "y"),
    "emp_bday": ("x", "y"),
    "emp_sss": ("x", "y"),
    "emp_phic": ("x", "y"),
    "emp_hdmf": ("x", "y"),
    "emp_tin": ("x", "y"),
    "emp_emergency_name": ("x", "y"),
    "emp_emergency_num": ("x", "y"),
    "emp_emergency_add": ("x", "y"),
    "emp_qrcode": ("x", "y", "width", "height"),
    "emp_back_idno": ("x", "y"),
}

LAYOUT_FIELDS = tuple(
    f"{region}_{suffix}"
    for region, suffixes in LAYOUT_REGIONS.items()
    for suffix in suffixes
)


class TemplateImage(Base):
    __tablename__ = "template_images"

    FILE_FIELDS = {
        "image_path": BUCKET_ID_TEMPLATES,
        "image_path2": BUCKET_ID_TEMPLATES,
    }

    id = Column(Integer, primary_key=True, index=True)
    businessunit_id = Column(
        String(36),
        ForeignKey("business_units.businessunit_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    image_path = Column(String(255), nullable=False)  # front
    image_path2 = Column(String(255), nullable=False)  # back

    emp_img_x = Column(Integer, nullable=True)
    emp_img_y = Column(Integer, nullable=True)
    emp_img_width = Column(Integer, nullable=True)
    emp_img_height = Column(Integer, nullable=True)
    emp_name_x = Column(Integer, nullable=True)
    emp_name_y = Column(Integer, nullable=True)
    emp_pos_x = Column(Integer, nullable=True)
    emp_pos_y = Column(Integer, nullable=True)
    emp_idno_x = Column(Integer, nullable=True)
    emp_idno_y = Column(Integer, nullable=True)
    emp_sig_x = Column(Integer, nullable=True)
    emp_sig_y = Column(Integer, nullable=True)
    emp_add_x = Column(Integer, nullable=True)
    emp_add_y = Column(Integer, nullable=True)
    emp_bday_x = Column(Integer, nullable=True)
    emp_bday_y = Column(Integer, nullable=True)
    emp_sss_x = Column(Integer, nullable=True)
    emp_sss_y = Column(Integer, nullable=True)
    emp_phic_x = Column(Integer, nullable=True)
    emp_phic_y = Column(Integer, nullable=True)
    emp_hdmf_x = Column(Integer, nullable=True)
    emp_hdmf_y = Column(Integer, nullable=True)
    emp_tin_x = Column(Integer, nullable=True)
    emp_tin_y = Column(Integer, nullable=True)
    emp_emergency_name_x = Column(Integer, nullable=True)
    emp_emergency_name_y = Column(Integer, nullable=True)
    emp_emergency_num_x = Column(Integer, nullable=True)
    emp_emergency_num_y = Column(Integer, nullable=True)
    emp_emergency_add_x = Column(Integer, nullable=True)
    emp_emergency_add_y = Column(Integer, nullable=True)
    emp_qrcode_x = Column(Integer, nullable=True)
    emp_qrcode_y = Column(Integer, nullable=True)
    emp_qrcode_width = Column(Integer, nullable=True)
    emp_qrcode_height = Column(Integer, nullable=True)
    emp_back_idno_x = Column(Integer, nullable=True)
    emp_back_idno_y = Column(Integer, nullable=True)

    hidden_elements = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    business_unit = relationship("BusinessUnit", back_populates="templates")

    @property
    def businessunit_name(self):
        return self.business_unit.businessunit_name if self.business_unit else None

    def layout(self) -> dict:
        """Current coordinate values keyed by field name"""
        return {field: getattr(self, field) for field in LAYOUT_FIELDS}

    def stored_files(self):
        return [
            (bucket, getattr(self, field))
            for field, bucket in self.FILE_FIELDS.items()
            if getattr(self, field)
        ]
