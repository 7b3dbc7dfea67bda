# backend/swimdesk/core/config.py
import logging
import os
from pathlib import Path
from typing import List, Literal

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BRAND_NAME


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)

_DEFAULT_SECRET_KEY = SecretStr("local-development-secret-change-me")


class Settings(BaseSettings):
    app_name: str = BRAND_NAME
    environment: Literal["local", "test", "production"] = "local"
    log_level: str = "INFO"

    # Database
    database_url: str = Field(
        default="sqlite:///./swimdesk.db",
        description="SQLAlchemy URL; PostgreSQL in production, SQLite locally",
    )
    database_echo: bool = False
    create_tables_on_startup: bool = True

    # Browser origins allowed to call the API
    cors_allowed_origins: List[str] = ["http://localhost:3000"]

    # Bearer tokens issued by the user-management service
    jwt_secret_key: SecretStr = Field(
        default=_DEFAULT_SECRET_KEY,
        description="Shared secret used to verify bearer tokens",
    )
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 720  # 12 hours

    # Catch-up policy defaults for businesses without an explicit policy row
    catch_up_enabled_default: bool = True
    catch_up_auto_approve_default: bool = False
    catch_up_slot_lookahead_days: int = Field(
        default=28,
        ge=1,
        description="How far ahead open catch-up slots are offered to clients",
    )

    # Notification outbox delivery
    notification_max_attempts: int = Field(default=5, ge=1)
    notification_backoff_seconds: int = Field(default=30, ge=1)
    notification_batch_size: int = Field(default=100, ge=1)

    # Monitoring
    slow_operation_threshold_seconds: float = 1.0

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        env_prefix="SWIMDESK_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = (value or "INFO").strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"Unknown log level: {value}")
        return normalized

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()

if settings.is_production and settings.jwt_secret_key == _DEFAULT_SECRET_KEY:
    raise RuntimeError("SWIMDESK_JWT_SECRET_KEY must be set in production")
