import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from datasprint.clock import utcnow
from datasprint.config import settings
from datasprint.database import session_scope
from datasprint.errors import ConflictError, NotFoundError
from datasprint.models.otp import RegistrationOtpEntry
from datasprint.models.user import UserEntry
from datasprint.schemas.users import (
    MEMBER_PROFILE_FIELDS,
    MUTABLE_PROFILE_FIELDS,
    ProfileUpdate,
    RegisterRequest,
    UserResponse,
    UserSummary,
)

LOGGER = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
DEFAULT_ROLE = "user"
DUPLICATE_MESSAGE = "Username or Lead Email already registered"
EMAIL_TAKEN_MESSAGE = "Lead Email already registered"


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class UserStore:
    def create_user(self, payload: RegisterRequest, password_hash: str) -> UserEntry:
        now = utcnow()
        email = _normalize_email(payload.email)
        profile = payload.model_dump(include=set(MEMBER_PROFILE_FIELDS))

        try:
            with session_scope() as session:
                existing = session.execute(
                    select(UserEntry.id).where(
                        or_(
                            UserEntry.username == payload.username,
                            UserEntry.email == email,
                        )
                    )
                ).first()
                if existing:
                    raise ConflictError(DUPLICATE_MESSAGE)

                entry = UserEntry(
                    username=payload.username,
                    email=email,
                    password_hash=password_hash,
                    team_name=payload.team_name,
                    name=payload.name,
                    phone=payload.phone,
                    college=payload.college,
                    dept=payload.dept,
                    year=payload.year,
                    role=ADMIN_ROLE if email == settings.seed_admin_email else DEFAULT_ROLE,
                    is_verified=True,
                    otp=None,
                    otp_expires_at=None,
                    created_at=now,
                    updated_at=now,
                    **profile,
                )
                session.add(entry)
                session.flush()
        except IntegrityError as exc:
            # A concurrent registration won the unique index.
            raise ConflictError(DUPLICATE_MESSAGE) from exc
        LOGGER.info("Registered team %s (user %s)", entry.team_name, entry.id)
        return entry

    def get_by_username(self, username: str) -> UserEntry | None:
        with session_scope() as session:
            return session.execute(
                select(UserEntry).where(UserEntry.username == username.strip())
            ).scalar_one_or_none()

    def get_by_id(self, user_id: str) -> UserEntry | None:
        with session_scope() as session:
            return session.get(UserEntry, user_id)

    def list_users(self) -> list[UserSummary]:
        with session_scope() as session:
            entries = session.execute(
                select(UserEntry).order_by(UserEntry.created_at.desc())
            ).scalars().all()
            return [self.to_summary(entry) for entry in entries]

    def list_for_export(self) -> list[UserEntry]:
        with session_scope() as session:
            return list(
                session.execute(
                    select(UserEntry).order_by(UserEntry.created_at.desc())
                ).scalars().all()
            )

    def update_profile(self, user_id: str, payload: ProfileUpdate) -> UserEntry:
        changes = payload.model_dump(exclude_unset=True, include=set(MUTABLE_PROFILE_FIELDS))
        for required in ("team_name", "name", "email"):
            if required in changes and changes[required] is None:
                changes.pop(required)

        try:
            with session_scope() as session:
                entry = session.get(UserEntry, user_id)
                if entry is None:
                    raise NotFoundError("User not found")

                email = changes.get("email")
                if email and email != entry.email:
                    if self._email_taken(session, email, user_id):
                        raise ConflictError(EMAIL_TAKEN_MESSAGE)

                for field, value in changes.items():
                    setattr(entry, field, value)
                entry.updated_at = utcnow()
                session.flush()
        except IntegrityError as exc:
            raise ConflictError(EMAIL_TAKEN_MESSAGE) from exc
        return entry

    def _email_taken(self, session: Session, email: str, user_id: str) -> bool:
        return session.execute(
            select(UserEntry.id).where(UserEntry.email == email, UserEntry.id != user_id)
        ).first() is not None

    def set_password(
        self, user_id: str, password_hash: str, clear_otp: bool = True
    ) -> None:
        with session_scope() as session:
            entry = session.get(UserEntry, user_id)
            if entry is None:
                raise NotFoundError("User not found")
            entry.password_hash = password_hash
            if clear_otp:
                entry.otp = None
                entry.otp_expires_at = None
            entry.updated_at = utcnow()

    def flush_non_admin(self) -> int:
        with session_scope() as session:
            result = session.execute(
                delete(UserEntry).where(
                    or_(UserEntry.role.is_(None), UserEntry.role != ADMIN_ROLE)
                )
            )
            session.execute(delete(RegistrationOtpEntry))
            deleted = result.rowcount
        LOGGER.warning("Flushed %s non-admin users and all registration OTPs", deleted)
        return deleted

    def promote_admin(self, email: str) -> UserEntry:
        key = _normalize_email(email)
        with session_scope() as session:
            entry = session.execute(
                select(UserEntry).where(UserEntry.email == key)
            ).scalar_one_or_none()
            if entry is None:
                raise NotFoundError("User not found")
            if entry.role != ADMIN_ROLE:
                entry.role = ADMIN_ROLE
                entry.updated_at = utcnow()
            session.flush()
        LOGGER.info("Promoted %s to admin", entry.username)
        return entry

    def ensure_roles(self) -> None:
        if not settings.seed_admin_email:
            return
        try:
            self.promote_admin(settings.seed_admin_email)
        except NotFoundError:
            LOGGER.info("Seed admin %s has not registered yet", settings.seed_admin_email)

    def to_response(self, entry: UserEntry) -> UserResponse:
        return UserResponse.model_validate(entry, from_attributes=True)

    def to_summary(self, entry: UserEntry) -> UserSummary:
        return UserSummary.model_validate(entry, from_attributes=True)


user_store = UserStore()
