import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from datasprint.config import settings
from datasprint.errors import InternalError, NotFoundError, ValidationFailed
from datasprint.models.user import UserEntry
from datasprint.routers.deps import (
    get_current_user,
    get_email_dispatcher,
    get_otp_store,
    require_admin,
)
from datasprint.schemas.otp import ChangePasswordRequest, MessageResponse
from datasprint.schemas.users import (
    FlushResponse,
    ProfileUpdate,
    UserEnvelope,
    UserListResponse,
    UserSummaryEnvelope,
    UserUpdateResponse,
)
from datasprint.services.email import EmailDispatcher, EmailSendError
from datasprint.services.export import EXPORT_FILENAME, render_registrations_csv
from datasprint.services.otp import OtpStore
from datasprint.services.passwords import hash_password
from datasprint.services.users import user_store

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserEnvelope)
def get_me(user: UserEntry = Depends(get_current_user)) -> UserEnvelope:
    return UserEnvelope(user=user_store.to_response(user))


@router.put("/me", response_model=UserUpdateResponse)
def update_me(
    payload: ProfileUpdate, user: UserEntry = Depends(get_current_user)
) -> UserUpdateResponse:
    updated = user_store.update_profile(user.id, payload)
    return UserUpdateResponse(
        message="Profile updated successfully",
        user=user_store.to_response(updated),
    )


@router.post("/me/request-password-otp", response_model=MessageResponse, response_model_exclude_none=True)
def request_password_otp(
    user: UserEntry = Depends(get_current_user),
    otps: OtpStore = Depends(get_otp_store),
    mailer: EmailDispatcher = Depends(get_email_dispatcher),
) -> MessageResponse:
    ttl = settings.change_password_otp_ttl_seconds
    record = otps.issue_user_otp(user.id, ttl)
    try:
        mailer.send_password_change_otp(user.email, record.code, ttl)
    except EmailSendError as exc:
        raise InternalError("Failed to send OTP email") from exc
    return MessageResponse(
        message="OTP sent to your verified email",
        expires_in_seconds=ttl,
        otp=record.code if settings.otp_debug else None,
    )


@router.post("/me/change-password", response_model=MessageResponse, response_model_exclude_none=True)
def change_password(
    payload: ChangePasswordRequest,
    user: UserEntry = Depends(get_current_user),
    otps: OtpStore = Depends(get_otp_store),
) -> MessageResponse:
    if not otps.verify_user_otp(user.id, payload.otp):
        raise ValidationFailed("Invalid or expired OTP")
    user_store.set_password(user.id, hash_password(payload.new_password), clear_otp=True)
    LOGGER.info("Password changed for user %s", user.id)
    return MessageResponse(message="Password updated successfully")


@router.get("", response_model=UserListResponse)
def list_users(_: UserEntry = Depends(get_current_user)) -> UserListResponse:
    users = user_store.list_users()
    return UserListResponse(users=users, count=len(users))


@router.get("/export")
def export_users(_: UserEntry = Depends(require_admin)) -> Response:
    body = render_registrations_csv(user_store.list_for_export())
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )


@router.delete("", response_model=FlushResponse)
def flush_users(admin: UserEntry = Depends(require_admin)) -> FlushResponse:
    deleted = user_store.flush_non_admin()
    LOGGER.warning("Bulk flush requested by admin %s", admin.username)
    return FlushResponse(message=f"Flushed {deleted} non-admin users", deleted=deleted)


@router.get("/{user_id}", response_model=UserSummaryEnvelope)
def get_user(
    user_id: str, _: UserEntry = Depends(get_current_user)
) -> UserSummaryEnvelope:
    user = user_store.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return UserSummaryEnvelope(user=user_store.to_summary(user))
