from datetime import timedelta

import jwt
import pytest

from datasprint.clock import utcnow
from datasprint.config import settings
from datasprint.services.passwords import hash_password, verify_password
from datasprint.services.tokens import TokenError, create_access_token, decode_access_token


def test_hash_and_verify_password():
    hashed = hash_password("Secret1")
    assert hashed.startswith("$2")
    assert hashed != "Secret1"
    assert verify_password("Secret1", hashed) is True
    assert verify_password("secret1", hashed) is False


def test_hash_uses_fresh_salt():
    assert hash_password("Secret1") != hash_password("Secret1")


def test_verify_password_rejects_garbage():
    assert verify_password("Secret1", "not-a-bcrypt-hash") is False
    assert verify_password("", hash_password("Secret1")) is False
    assert verify_password("Secret1", None) is False


def test_hash_password_requires_value():
    with pytest.raises(ValueError):
        hash_password("")


def test_token_round_trip():
    now = utcnow()
    token = create_access_token("user-1", "lead@datasprint", now=now)
    data = decode_access_token(token)

    assert data.user_id == "user-1"
    assert data.username == "lead@datasprint"
    lifetime = data.expires_at - now
    assert timedelta(days=7) - timedelta(seconds=2) <= lifetime <= timedelta(days=7)


def test_expired_token_is_rejected():
    token = create_access_token("user-1", "lead", now=utcnow() - timedelta(days=8))
    with pytest.raises(TokenError, match="expired"):
        decode_access_token(token)


def test_tampered_token_is_rejected():
    token = create_access_token("user-1", "lead")
    forged = jwt.encode(
        jwt.decode(token, options={"verify_signature": False}),
        "some-other-secret-of-sufficient-length-000000",
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(TokenError, match="Invalid token"):
        decode_access_token(forged)


def test_wrong_token_type_is_rejected():
    now = utcnow()
    token = jwt.encode(
        {
            "sub": "user-1",
            "type": "refresh",
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=5)).timestamp()),
        },
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(TokenError, match="type"):
        decode_access_token(token)


def test_empty_token_is_rejected():
    with pytest.raises(TokenError):
        decode_access_token("")
