from sqlalchemy import Column, DateTime, Index, Integer, String

from datasprint.database import Base


class RegistrationOtpEntry(Base):
    __tablename__ = "registration_otps"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    otp = Column(String(10), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("ix_registration_otps_expires_at", "expires_at"),)
