"""Runtime configuration for the user service.

Values come from ``USERSERVICE_*`` environment variables or a local ``.env``
file and are validated once, when the settings object is built.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_SECRET = "change-me-in-production-use-openssl-rand-hex-32"

_SYNC_DRIVERS = {
    "sqlite+aiosqlite": "sqlite",
    "postgresql+asyncpg": "postgresql",
}


class Settings(BaseSettings):
    """User service settings.

    Example:
        USERSERVICE_DATABASE_URL=postgresql+asyncpg://svc:pw@db/users
        USERSERVICE_SECRET_KEY=$(openssl rand -hex 32)
        USERSERVICE_MAX_LOGIN_ATTEMPTS=10
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="USERSERVICE_",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "userservice"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False

    # Storage
    database_url: str = "sqlite+aiosqlite:///./data/userservice.db"
    db_pool_size: int = Field(default=5, ge=1)
    db_max_overflow: int = Field(default=10, ge=0)
    db_pool_timeout: int = Field(default=30, ge=1)
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Bearer tokens
    secret_key: str = Field(
        default=PLACEHOLDER_SECRET,
        description="HS256 signing secret shared by every instance",
    )
    token_issuer: str = "userservice"
    token_expire_seconds: int = Field(default=7 * 24 * 3600, ge=60)
    token_renewal_threshold_seconds: int = Field(
        default=3600,
        ge=0,
        description="Tokens with less lifetime left than this are renewed on verification",
    )

    # Argon2id cost; the hasher clamps out-of-range values
    password_hash_time_cost: int = 3
    password_hash_memory_cost: int = 65536  # KiB
    hash_workers: int = Field(default=4, description="Threads reserved for hashing")

    # Brute-force protection
    max_login_attempts: int = Field(
        default=5,
        description="Consecutive wrong passwords before the account is locked",
    )
    lockout_seconds: int = Field(default=900, ge=0)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Bootstrap account used by ``userservice create-superadmin``
    superadmin_email: str | None = None
    superadmin_password: str | None = None

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("secret_key must not be empty")
        return v

    @field_validator("hash_workers", "max_login_attempts")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @model_validator(mode="after")
    def validate_production_secret(self) -> "Settings":
        """Tokens signed with the published placeholder would be forgeable."""
        if self.is_production and self.secret_key == PLACEHOLDER_SECRET:
            raise ValueError("USERSERVICE_SECRET_KEY must be set in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing"

    @property
    def database_url_sync(self) -> str:
        """``database_url`` with the async driver swapped for its blocking twin."""
        scheme, sep, rest = self.database_url.partition("://")
        return f"{_SYNC_DRIVERS.get(scheme, scheme)}{sep}{rest}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
