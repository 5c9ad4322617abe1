from functools import lru_cache

import bcrypt

from datasprint.config import settings


def hash_password(password: str, rounds: int | None = None) -> str:
    if not password:
        raise ValueError("Password cannot be empty")
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Hash checked when no account matches, so lookups cost the same either way."""
    return hash_password("datasprint-no-such-user")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed or non-bcrypt hash.
        return False
