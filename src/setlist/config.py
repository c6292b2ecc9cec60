"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./setlist.db",
        description="Async SQLAlchemy connection URL",
    )
    database_url_test: str = Field(
        default="sqlite+aiosqlite:///:memory:",
        description="Test database URL",
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements")
    database_busy_timeout: float = Field(
        default=15.0, description="Seconds a SQLite connection waits for the write lock"
    )

    # Redis
    redis_url: str = Field(
        default="redis://localhost:6379",
        description="Redis connection URL for task queue",
    )

    # Auth
    magic_link_expiration_minutes: int = Field(
        default=15, description="Magic link expiration in minutes"
    )
    session_expiration_days: int = Field(default=7, description="Session expiration in days")
    session_cookie_name: str = Field(default="session_token", description="Session cookie name")
    login_path: str = Field(default="/auth/login", description="Where browser flows send anonymous users")
    login_redirect_path: str = Field(default="/", description="Landing page after a successful login")
    magic_link_requests_per_email: int = Field(
        default=5, description="Magic links a single email may request per throttle window"
    )
    magic_link_throttle_minutes: int = Field(
        default=15, description="Per-email magic link throttle window in minutes"
    )
    trust_proxy_headers: bool = Field(
        default=False, description="Key the client throttle on X-Forwarded-For"
    )

    # App
    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    debug: bool | None = Field(default=None, description="Debug mode (defaults based on environment)")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    cors_origins: list[str] = Field(
        default=["http://localhost:8000"],
        description="Allowed CORS origins",
    )

    # Email
    email_backend: Literal["console"] = Field(
        default="console", description="Email backend (links are logged, never mailed)"
    )
    email_from: str = Field(
        default="Setlist Manager <noreply@setlist.local>", description="From address for emails"
    )
    app_url: str = Field(
        default="http://localhost:8000", description="Public app URL for magic links"
    )

    # Maintenance
    cleanup_cron: str = Field(
        default="*/15 * * * *", description="Cron schedule for the expired credential sweep"
    )

    # Sentry
    sentry_dsn: str = Field(default="", description="Sentry DSN for error tracking")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment == "development"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.environment == "test"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def debug_enabled(self) -> bool:
        """Get debug mode, defaulting based on environment if not explicitly set."""
        if self.debug is not None:
            return self.debug
        return self.is_development

    @computed_field  # type: ignore[prop-decorator]
    @property
    def session_max_age_seconds(self) -> int:
        """Cookie Max-Age matching the session lifetime."""
        return self.session_expiration_days * 24 * 60 * 60


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience alias
settings = get_settings()
