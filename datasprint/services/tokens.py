from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from datasprint.clock import utcnow
from datasprint.config import settings


class TokenError(ValueError):
    pass


@dataclass(frozen=True)
class AccessTokenData:
    user_id: str
    username: str
    expires_at: datetime


def create_access_token(user_id: str, username: str, now: datetime | None = None) -> str:
    if not settings.jwt_secret:
        raise TokenError("JWT secret is not configured")
    now = now or utcnow()
    expires_at = now + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": str(user_id),
        "username": username,
        "type": "access",
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> AccessTokenData:
    payload = _decode_token(token, expected_type="access")
    subject = payload.get("sub")
    if not subject:
        raise TokenError("Token subject is missing")
    return AccessTokenData(
        user_id=str(subject),
        username=payload.get("username", ""),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


def _decode_token(token: str, expected_type: str) -> dict:
    if not token:
        raise TokenError("Token is missing")
    if not settings.jwt_secret:
        raise TokenError("JWT secret is not configured")
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenError("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenError("Invalid token") from exc
    if payload.get("type") != expected_type:
        raise TokenError("Invalid token type")
    return payload
