import uuid

from sqlalchemy import Boolean, Column, DateTime, String

from datasprint.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class UserEntry(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    username = Column(String(100), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    team_name = Column(String(100), nullable=False)

    name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)
    college = Column(String(255), nullable=True)
    dept = Column(String(100), nullable=True)
    year = Column(String(20), nullable=True)

    m1_name = Column(String(100), nullable=True)
    m1_email = Column(String(255), nullable=True)
    m1_phone = Column(String(20), nullable=True)
    m1_college = Column(String(255), nullable=True)
    m1_dept = Column(String(100), nullable=True)
    m1_year = Column(String(20), nullable=True)

    m2_name = Column(String(100), nullable=True)
    m2_email = Column(String(255), nullable=True)
    m2_phone = Column(String(20), nullable=True)
    m2_college = Column(String(255), nullable=True)
    m2_dept = Column(String(100), nullable=True)
    m2_year = Column(String(20), nullable=True)

    m3_name = Column(String(100), nullable=True)
    m3_email = Column(String(255), nullable=True)
    m3_phone = Column(String(20), nullable=True)
    m3_college = Column(String(255), nullable=True)
    m3_dept = Column(String(100), nullable=True)
    m3_year = Column(String(20), nullable=True)

    role = Column(String(20), nullable=False, default="user")
    is_verified = Column(Boolean, nullable=False, default=False)
    otp = Column(String(10), nullable=True)
    otp_expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
