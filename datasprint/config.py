import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv(override=True)

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5500",
    "http://127.0.0.1:5500",
    "http://localhost:5173",
    "https://data-sprint-3-0.vercel.app",
)


def _env_bool(name: str, default: bool = False) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw_value = os.getenv(name)
    if not raw_value:
        return default
    items = [item.strip() for item in raw_value.split(",")]
    return tuple(item for item in items if item)


@dataclass(frozen=True)
class Settings:
    app_env: str = os.getenv("APP_ENV", "production").strip().lower()
    log_level: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    jwt_secret: str = os.getenv("JWT_SECRET", "")
    jwt_algorithm: str = os.getenv("ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60))
    )
    registration_otp_ttl_seconds: int = int(
        os.getenv("REGISTRATION_OTP_TTL_SECONDS", "120")
    )
    reset_otp_ttl_seconds: int = int(os.getenv("RESET_OTP_TTL_SECONDS", "120"))
    change_password_otp_ttl_seconds: int = int(
        os.getenv("CHANGE_PASSWORD_OTP_TTL_SECONDS", "300")
    )
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "10"))
    otp_debug: bool = _env_bool("OTP_DEBUG", False)
    brevo_api_key: str = os.getenv("BREVO_API_KEY", "")
    email_sender: str = os.getenv("EMAIL_SENDER") or os.getenv("FROM_EMAIL", "")
    email_sender_name: str = os.getenv("EMAIL_SENDER_NAME", "DATASPRINT")
    event_name: str = os.getenv("EVENT_NAME", "DATASPRINT 3.0")
    seed_admin_email: str = os.getenv("SEED_ADMIN_EMAIL", "").strip().lower()
    cors_origins: tuple[str, ...] = field(
        default_factory=lambda: _env_list("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    )

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


settings = Settings()
