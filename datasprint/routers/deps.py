from fastapi import Depends, Header

from datasprint.errors import AuthenticationError, PermissionDenied
from datasprint.models.user import UserEntry
from datasprint.services.email import EmailDispatcher, email_dispatcher
from datasprint.services.otp import OtpStore, otp_store
from datasprint.services.tokens import TokenError, decode_access_token
from datasprint.services.users import ADMIN_ROLE, user_store


def get_otp_store() -> OtpStore:
    return otp_store


def get_email_dispatcher() -> EmailDispatcher:
    return email_dispatcher


def get_current_user(authorization: str | None = Header(default=None)) -> UserEntry:
    if not authorization:
        raise AuthenticationError("No token provided")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Invalid Authorization header")
    try:
        access_data = decode_access_token(token.strip())
    except TokenError as exc:
        raise AuthenticationError(str(exc)) from exc
    user = user_store.get_by_id(access_data.user_id)
    if user is None:
        raise AuthenticationError("User not found")
    return user


def require_admin(user: UserEntry = Depends(get_current_user)) -> UserEntry:
    if user.role != ADMIN_ROLE:
        raise PermissionDenied("Admin access required")
    return user
