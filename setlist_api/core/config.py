"""
Settings for the Setlist Manager backend.

Everything configurable comes from environment variables and is read once
into a frozen ``Settings``. Tests call ``get_settings.cache_clear()`` after
changing the environment.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

# Signs sessions outside production only.
DEV_JWT_SECRET = "dev-only-secret-change-me-in-production-0000"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str) -> tuple[str, ...]:
    return tuple(item.strip().rstrip("/") for item in os.getenv(name, "").split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    app_env: str
    public_base_url: str
    cors_origins: tuple[str, ...]
    database_url: str

    # sessions and one-time tokens
    jwt_secret: str
    jwt_algorithm: str
    session_ttl_seconds: int
    email_verification_ttl_seconds: int
    password_reset_ttl_seconds: int

    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    smtp_from: str
    smtp_timeout_seconds: int

    log_level: str
    log_file: str

    @property
    def is_production(self) -> bool:
        return self.app_env == "prod"


@lru_cache
def get_settings() -> Settings:
    smtp_user = os.getenv("SMTP_USER", "")
    app_env = (os.getenv("APP_ENV") or "dev").lower()
    jwt_secret = os.getenv("JWT_SECRET", "").strip()
    if not jwt_secret:
        if app_env == "prod":
            raise RuntimeError("JWT_SECRET must be set when APP_ENV=prod.")
        jwt_secret = DEV_JWT_SECRET
    return Settings(
        app_env=app_env,
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:3000").rstrip("/"),
        cors_origins=_env_list("CORS_ORIGINS"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./setlists.db"),
        jwt_secret=jwt_secret,
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        session_ttl_seconds=_env_int("SESSION_TTL_SECONDS", 86400),
        email_verification_ttl_seconds=_env_int("EMAIL_VERIFICATION_TTL_SECONDS", 86400),
        password_reset_ttl_seconds=_env_int("PASSWORD_RESET_TTL_SECONDS", 3600),
        smtp_host=os.getenv("SMTP_HOST", ""),
        smtp_port=_env_int("SMTP_PORT", 465),
        smtp_user=smtp_user,
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        smtp_from=os.getenv("SMTP_FROM") or smtp_user,
        smtp_timeout_seconds=_env_int("SMTP_TIMEOUT_SECONDS", 15),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        log_file=os.getenv("LOG_FILE", ""),
    )
