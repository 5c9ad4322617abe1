import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from datasprint.clock import as_utc, utcnow
from datasprint.database import session_scope
from datasprint.errors import NotFoundError, ValidationFailed
from datasprint.models.otp import RegistrationOtpEntry
from datasprint.models.user import UserEntry

LOGGER = logging.getLogger(__name__)

OTP_MIN = 100000
OTP_MAX = 999999


@dataclass(frozen=True)
class OtpRecord:
    code: str
    expires_at: datetime


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def generate_code() -> str:
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def is_code_valid(
    stored_code: str | None,
    expires_at: datetime | None,
    candidate: str | None,
    now: datetime,
) -> bool:
    """A single yes/no answer; callers never learn which check failed."""
    if not stored_code or expires_at is None or candidate is None:
        return False
    if stored_code != candidate:
        return False
    return now < as_utc(expires_at)


class OtpStore:
    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def issue_registration_otp(self, email: str, ttl_seconds: int) -> OtpRecord:
        normalized = normalize_email(email)
        if not normalized:
            raise ValidationFailed("Email is required")
        now = self.now()
        record = OtpRecord(
            code=generate_code(),
            expires_at=now + timedelta(seconds=ttl_seconds),
        )
        try:
            self._store_registration_otp(normalized, record, now)
        except IntegrityError:
            # A concurrent request inserted this email first; overwrite its row.
            self._store_registration_otp(normalized, record, now)
        LOGGER.info("Registration OTP issued for %s", normalized)
        return record

    def _find_registration_entry(
        self, session: Session, email: str
    ) -> RegistrationOtpEntry | None:
        return session.execute(
            select(RegistrationOtpEntry).where(RegistrationOtpEntry.email == email)
        ).scalar_one_or_none()

    def _store_registration_otp(
        self, email: str, record: OtpRecord, now: datetime
    ) -> None:
        with session_scope() as session:
            entry = self._find_registration_entry(session, email)
            if entry is None:
                session.add(
                    RegistrationOtpEntry(
                        email=email,
                        otp=record.code,
                        expires_at=record.expires_at,
                        created_at=now,
                    )
                )
            else:
                entry.otp = record.code
                entry.expires_at = record.expires_at
                entry.created_at = now

    def verify_registration_otp(self, email: str, code: str) -> bool:
        normalized = normalize_email(email)
        if not normalized:
            return False
        with session_scope() as session:
            entry = self._find_registration_entry(session, normalized)
            if entry is None:
                return False
            return is_code_valid(entry.otp, entry.expires_at, code, self.now())

    def discard_registration_otp(self, email: str) -> None:
        normalized = normalize_email(email)
        with session_scope() as session:
            session.execute(
                delete(RegistrationOtpEntry).where(
                    RegistrationOtpEntry.email == normalized
                )
            )

    def issue_user_otp(self, user_id: str, ttl_seconds: int) -> OtpRecord:
        if not user_id:
            raise ValidationFailed("User is required")
        now = self.now()
        record = OtpRecord(
            code=generate_code(),
            expires_at=now + timedelta(seconds=ttl_seconds),
        )
        with session_scope() as session:
            result = session.execute(
                update(UserEntry)
                .where(UserEntry.id == user_id)
                .values(otp=record.code, otp_expires_at=record.expires_at, updated_at=now)
            )
            if result.rowcount == 0:
                raise NotFoundError("User not found")
        LOGGER.info("Account OTP issued for user %s", user_id)
        return record

    def verify_user_otp(self, user_id: str | None, code: str) -> bool:
        if not user_id:
            return False
        with session_scope() as session:
            entry = session.get(UserEntry, user_id)
            if entry is None:
                return False
            return is_code_valid(entry.otp, entry.otp_expires_at, code, self.now())


otp_store = OtpStore()
