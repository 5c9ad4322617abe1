from typing import Optional

from pydantic import Field, field_validator

from datasprint.schemas.users import (
    MAX_PASSWORD_BYTES,
    MIN_PASSWORD_LENGTH,
    CamelModel,
    check_password_value,
    normalize_email_value,
)

OTP_LENGTH = 6


class SendOtpRequest(CamelModel):
    email: str = Field(min_length=1, max_length=255)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return normalize_email_value(value)


class VerifyRegistrationOtpRequest(CamelModel):
    email: str = Field(min_length=1, max_length=255)
    otp: str = Field(min_length=1, max_length=OTP_LENGTH)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class ForgotPasswordRequest(CamelModel):
    username: str = Field(min_length=1, max_length=100)


class VerifyOtpRequest(CamelModel):
    username: str = Field(min_length=1, max_length=100)
    otp: str = Field(min_length=OTP_LENGTH, max_length=OTP_LENGTH)


class NewPasswordFields(CamelModel):
    new_password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_BYTES)

    @field_validator("new_password")
    @classmethod
    def check_new_password(cls, value: str) -> str:
        return check_password_value(value)


class ResetPasswordRequest(NewPasswordFields):
    username: str = Field(min_length=1, max_length=100)
    otp: str = Field(min_length=1, max_length=OTP_LENGTH)


class ChangePasswordRequest(NewPasswordFields):
    otp: str = Field(min_length=1, max_length=OTP_LENGTH)


class MessageResponse(CamelModel):
    message: str
    expires_in_seconds: Optional[int] = None
    otp: Optional[str] = None
