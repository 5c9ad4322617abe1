import logging

from fastapi import APIRouter, Depends, status

from datasprint.config import settings
from datasprint.errors import (
    AuthenticationError,
    InternalError,
    NotFoundError,
    ValidationFailed,
)
from datasprint.models.user import UserEntry
from datasprint.routers.deps import get_current_user, get_email_dispatcher, get_otp_store
from datasprint.schemas.otp import (
    ForgotPasswordRequest,
    MessageResponse,
    ResetPasswordRequest,
    SendOtpRequest,
    VerifyOtpRequest,
    VerifyRegistrationOtpRequest,
)
from datasprint.schemas.tokens import AuthResponse, LoginRequest
from datasprint.schemas.users import RegisterRequest, UserEnvelope
from datasprint.services.email import EmailDispatcher, EmailSendError
from datasprint.services.otp import OtpStore
from datasprint.services.passwords import (
    dummy_password_hash,
    hash_password,
    verify_password,
)
from datasprint.services.tokens import TokenError, create_access_token
from datasprint.services.users import user_store

LOGGER = logging.getLogger(__name__)

INVALID_OTP = "Invalid or expired OTP"
INVALID_CREDENTIALS = "Invalid credentials"

router = APIRouter(prefix="/auth", tags=["auth"])


def _issue_token(user: UserEntry, message: str) -> AuthResponse:
    try:
        token = create_access_token(user.id, user.username)
    except TokenError as exc:
        raise InternalError(str(exc)) from exc
    return AuthResponse(
        message=message,
        user=user_store.to_response(user),
        token=token,
        token_type="bearer",
        expires_in_seconds=settings.access_token_expire_minutes * 60,
    )


@router.post("/send-otp", response_model=MessageResponse, response_model_exclude_none=True)
def send_registration_otp(
    payload: SendOtpRequest,
    otps: OtpStore = Depends(get_otp_store),
    mailer: EmailDispatcher = Depends(get_email_dispatcher),
) -> MessageResponse:
    ttl = settings.registration_otp_ttl_seconds
    record = otps.issue_registration_otp(payload.email, ttl)
    try:
        mailer.send_registration_otp(payload.email, record.code, ttl)
    except EmailSendError as exc:
        raise InternalError("Failed to send OTP email") from exc
    return MessageResponse(
        message="OTP sent successfully",
        expires_in_seconds=ttl,
        otp=record.code if settings.otp_debug else None,
    )


@router.post("/verify-registration-otp", response_model=MessageResponse, response_model_exclude_none=True)
def verify_registration_otp(
    payload: VerifyRegistrationOtpRequest,
    otps: OtpStore = Depends(get_otp_store),
) -> MessageResponse:
    if not otps.verify_registration_otp(payload.email, payload.otp):
        raise ValidationFailed(INVALID_OTP)
    return MessageResponse(message="Email verified successfully")


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    otps: OtpStore = Depends(get_otp_store),
    mailer: EmailDispatcher = Depends(get_email_dispatcher),
) -> AuthResponse:
    user = user_store.create_user(payload, hash_password(payload.password))
    otps.discard_registration_otp(user.email)
    try:
        mailer.send_registration_confirmation(user.email, user.team_name)
    except EmailSendError:
        LOGGER.warning("Confirmation email for team %s was not delivered", user.team_name)
    return _issue_token(user, "Team registered successfully")


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest) -> AuthResponse:
    user = user_store.get_by_username(payload.username)
    password_hash = user.password_hash if user is not None else dummy_password_hash()
    password_ok = verify_password(payload.password, password_hash)
    if user is None or not password_ok:
        raise AuthenticationError(INVALID_CREDENTIALS)
    return _issue_token(user, "Login successful")


@router.get("/me", response_model=UserEnvelope)
def get_me(user: UserEntry = Depends(get_current_user)) -> UserEnvelope:
    return UserEnvelope(user=user_store.to_response(user))


@router.post("/forgot-password", response_model=MessageResponse, response_model_exclude_none=True)
def forgot_password(
    payload: ForgotPasswordRequest,
    otps: OtpStore = Depends(get_otp_store),
    mailer: EmailDispatcher = Depends(get_email_dispatcher),
) -> MessageResponse:
    user = user_store.get_by_username(payload.username)
    if user is None:
        raise NotFoundError("User not found")
    ttl = settings.reset_otp_ttl_seconds
    record = otps.issue_user_otp(user.id, ttl)
    try:
        mailer.send_password_reset_otp(user.email, record.code, ttl)
    except EmailSendError as exc:
        raise InternalError("Failed to send OTP email") from exc
    return MessageResponse(
        message="OTP sent to registered email",
        expires_in_seconds=ttl,
        otp=record.code if settings.otp_debug else None,
    )


@router.post("/verify-otp", response_model=MessageResponse, response_model_exclude_none=True)
def verify_reset_otp(
    payload: VerifyOtpRequest,
    otps: OtpStore = Depends(get_otp_store),
) -> MessageResponse:
    user = user_store.get_by_username(payload.username)
    if user is None or not otps.verify_user_otp(user.id, payload.otp):
        raise ValidationFailed(INVALID_OTP)
    return MessageResponse(message="OTP verified successfully")


@router.post("/reset-password", response_model=MessageResponse, response_model_exclude_none=True)
def reset_password(
    payload: ResetPasswordRequest,
    otps: OtpStore = Depends(get_otp_store),
) -> MessageResponse:
    user = user_store.get_by_username(payload.username)
    if user is None or not otps.verify_user_otp(user.id, payload.otp):
        raise ValidationFailed(INVALID_OTP)
    user_store.set_password(user.id, hash_password(payload.new_password), clear_otp=True)
    LOGGER.info("Password reset for user %s", user.id)
    return MessageResponse(message="Password reset successfully. You can now login.")
