from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, JSON, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..database import Base

class Kyc(Base):
    """Vendor business (KYC) record, reviewed by staff before approval"""
    __tablename__ = "kycs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Business details
    business_name = Column(String(255), nullable=False)
    gst_number = Column(String(20), nullable=True)

    # Address
    plot_no = Column(String(50))
    building_name = Column(String(255))
    street = Column(String(255))
    landmark = Column(String(255))
    area = Column(String(255))
    pincode = Column(String(6), nullable=False)
    state = Column(String(100), nullable=False)
    city = Column(String(100), nullable=False)

    # Contact person
    title = Column(String(10), nullable=False)  # Mr, Mrs, Miss, Dr, Prof
    contact_person = Column(String(255), nullable=False)
    mobile_number = Column(String(10), nullable=False)
    whatsapp_number = Column(String(10), nullable=True)
    email = Column(String(255), nullable=False)

    working_days = Column(JSON, nullable=False, default=list)
    business_hours_open = Column(String(10), nullable=False)
    business_hours_close = Column(String(10), nullable=False)

    # Documents
    aadhar_number = Column(String(12), nullable=False)
    aadhar_image = Column(String(500), nullable=False)
    video_kyc = Column(String(500), nullable=False)

    status = Column(String(20), nullable=False, default="pending")

    # Review
    rejected_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    approver = relationship("User", foreign_keys=[approved_by])
    rejecter = relationship("User", foreign_keys=[rejected_by])

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name='check_kyc_status'
        ),
    )
