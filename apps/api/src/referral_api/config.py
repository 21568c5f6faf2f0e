"""Service configuration.

Values are loaded from environment variables (after python-dotenv has read
``.env.local`` and ``.env``). Settings are built once at startup and handed
to the app factory; nothing reads the environment per request.
"""

import os
from dataclasses import dataclass, field

from referral_shared.email import EmailConfig
from referral_shared.schemas import ReferralMode

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./referrals.db"


class ConfigurationError(Exception):
    """Raised when configuration is present but invalid."""

    pass


def _env_bool(key: str, default: bool) -> bool:
    """Read a boolean flag such as ``true``/``false``/``1``/``0``."""
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def normalize_database_url(url: str) -> str:
    """Point plain SQLite/PostgreSQL URLs at their async drivers."""
    if url.startswith("sqlite://"):
        # SQLite async requires aiosqlite
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


def parse_referral_mode(value: str) -> ReferralMode:
    """Parse ``REFERRAL_MODE``, failing fast on unknown values."""
    try:
        return ReferralMode(value.strip().lower())
    except ValueError as e:
        allowed = ", ".join(mode.value for mode in ReferralMode)
        raise ConfigurationError(
            f"Invalid REFERRAL_MODE: {value!r}. Expected one of: {allowed}"
        ) from e


@dataclass
class Settings:
    """Runtime settings for the referral API."""

    database_url: str = DEFAULT_DATABASE_URL
    auto_create_tables: bool = True
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    referral_mode: ReferralMode = ReferralMode.TRACKED
    notification_failure_is_error: bool = False
    email: EmailConfig = field(
        default_factory=lambda: EmailConfig(api_key="", from_email="noreply@example.com")
    )

    def __post_init__(self):
        self.database_url = normalize_database_url(self.database_url)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        origins = os.getenv("CORS_ORIGINS", "*")
        try:
            port = int(os.getenv("PORT", "5000"))
        except ValueError as e:
            raise ConfigurationError(f"Invalid PORT: {os.getenv('PORT')!r}") from e

        return cls(
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            auto_create_tables=_env_bool("AUTO_CREATE_TABLES", True),
            host=os.getenv("HOST", "0.0.0.0"),
            port=port,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            referral_mode=parse_referral_mode(os.getenv("REFERRAL_MODE", "tracked")),
            notification_failure_is_error=_env_bool(
                "NOTIFICATION_FAILURE_IS_ERROR", False
            ),
            email=EmailConfig.from_env(),
        )
