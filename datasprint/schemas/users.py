import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6
# bcrypt rejects anything longer than 72 encoded bytes.
MAX_PASSWORD_BYTES = 72

MEMBER_PROFILE_FIELDS = tuple(
    f"m{slot}_{field}"
    for slot in (1, 2, 3)
    for field in ("name", "email", "phone", "college", "dept", "year")
)
LEAD_PROFILE_FIELDS = ("team_name", "name", "email", "phone", "college", "dept", "year")
# Fields a team may change on its own record; everything else is rejected.
MUTABLE_PROFILE_FIELDS = LEAD_PROFILE_FIELDS + MEMBER_PROFILE_FIELDS


def normalize_email_value(value: str) -> str:
    cleaned = value.strip().lower()
    if not EMAIL_PATTERN.match(cleaned):
        raise ValueError("A valid email address is required")
    return cleaned


def check_password_value(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MemberFields(CamelModel):
    phone: Optional[str] = Field(default=None, max_length=20)
    college: Optional[str] = Field(default=None, max_length=255)
    dept: Optional[str] = Field(default=None, max_length=100)
    year: Optional[str] = Field(default=None, max_length=20)

    m1_name: Optional[str] = Field(default=None, max_length=100)
    m1_email: Optional[str] = Field(default=None, max_length=255)
    m1_phone: Optional[str] = Field(default=None, max_length=20)
    m1_college: Optional[str] = Field(default=None, max_length=255)
    m1_dept: Optional[str] = Field(default=None, max_length=100)
    m1_year: Optional[str] = Field(default=None, max_length=20)

    m2_name: Optional[str] = Field(default=None, max_length=100)
    m2_email: Optional[str] = Field(default=None, max_length=255)
    m2_phone: Optional[str] = Field(default=None, max_length=20)
    m2_college: Optional[str] = Field(default=None, max_length=255)
    m2_dept: Optional[str] = Field(default=None, max_length=100)
    m2_year: Optional[str] = Field(default=None, max_length=20)

    m3_name: Optional[str] = Field(default=None, max_length=100)
    m3_email: Optional[str] = Field(default=None, max_length=255)
    m3_phone: Optional[str] = Field(default=None, max_length=20)
    m3_college: Optional[str] = Field(default=None, max_length=255)
    m3_dept: Optional[str] = Field(default=None, max_length=100)
    m3_year: Optional[str] = Field(default=None, max_length=20)

    @field_validator("phone", "college", "dept", "year", *MEMBER_PROFILE_FIELDS)
    @classmethod
    def normalize_optional_text(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    @field_validator("m1_email", "m2_email", "m3_email")
    @classmethod
    def normalize_member_email(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return normalize_email_value(value)


class RegisterRequest(MemberFields):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_BYTES)
    team_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    name: str = Field(min_length=1, max_length=100)

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        return check_password_value(value)

    @field_validator("username", "team_name", "name")
    @classmethod
    def normalize_required_text(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("This field is required")
        return cleaned

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return normalize_email_value(value)


class ProfileUpdate(MemberFields):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )

    team_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, max_length=255)

    @field_validator("team_name", "name")
    @classmethod
    def normalize_required_text(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("This field cannot be blank")
        return cleaned

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return normalize_email_value(value)


class UserResponse(MemberFields):
    id: str
    username: str
    email: str
    team_name: str
    name: str
    role: str
    is_verified: bool = False
    created_at: datetime


class UserSummary(CamelModel):
    id: str
    username: str
    name: str
    team_name: str
    created_at: datetime


class UserEnvelope(CamelModel):
    user: UserResponse


class UserUpdateResponse(CamelModel):
    message: str
    user: UserResponse


class UserListResponse(CamelModel):
    users: list[UserSummary]
    count: int


class FlushResponse(CamelModel):
    message: str
    deleted: int


class UserSummaryEnvelope(CamelModel):
    user: UserSummary
